"""Generic reconciliation engine for managed ArgoCD resources."""
