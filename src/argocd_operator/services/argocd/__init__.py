"""ArgoCD REST API clients."""
