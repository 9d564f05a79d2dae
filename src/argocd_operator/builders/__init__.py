"""Converters between managed resource specs and ArgoCD API payloads."""
