"""Prometheus metrics for the ArgoCD Resource Operator."""

from prometheus_client import Counter, Histogram

# Reconciliation metrics
reconcile_total = Counter(
    "argocd_operator_reconcile_total",
    "Total number of reconciliations",
    ["kind", "result"],
)

reconcile_duration_seconds = Histogram(
    "argocd_operator_reconcile_duration_seconds",
    "Duration of reconciliations in seconds",
    ["kind"],
    buckets=[0.1, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0],
)

# External resource operations (observe, create, update, delete)
external_operations_total = Counter(
    "argocd_operator_external_operations_total",
    "Total number of operations issued against ArgoCD resources",
    ["kind", "operation", "result"],
)

# Drift and late initialization
drift_detected_total = Counter(
    "argocd_operator_drift_detected_total",
    "Total number of configuration drift detections",
    ["kind"],
)

late_initialized_total = Counter(
    "argocd_operator_late_initialized_total",
    "Total number of specs late-initialized from observed state",
    ["kind"],
)

# API call metrics
api_call_total = Counter(
    "argocd_operator_api_call_total",
    "Total number of API calls",
    ["api_type", "operation", "result"],
)

api_call_duration_seconds = Histogram(
    "argocd_operator_api_call_duration_seconds",
    "Duration of API calls in seconds",
    ["api_type", "operation"],
    buckets=[0.01, 0.05, 0.1, 0.5, 1.0, 2.5, 5.0],
)

rate_limit_hits_total = Counter(
    "argocd_operator_rate_limit_hits_total",
    "Total number of calls delayed by the client-side rate limiter",
    ["api_type"],
)

# Errors and resource status
error_total = Counter(
    "argocd_operator_error_total",
    "Total number of reconcile errors",
    ["kind", "error_type"],
)

resource_status_total = Counter(
    "argocd_operator_resource_status_total",
    "Resource readiness observations",
    ["kind", "status"],
)

# Provider connectivity metrics
provider_connectivity_total = Counter(
    "argocd_operator_provider_connectivity_total",
    "ProviderConfig connectivity status changes",
    ["provider", "status"],
)
