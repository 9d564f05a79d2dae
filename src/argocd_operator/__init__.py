"""Kubernetes operator reconciling ArgoCD resources."""

__version__ = "0.1.0"
