"""Utility functions for the ArgoCD Resource Operator."""

from .cache import (
    get_cached_object,
    invalidate_cache,
    make_cache_key,
    set_cached_object,
)
from .compare import equal_lists, equate_empty, prune_empty
from .conditions import update_condition
from .context import (
    check_deadline,
    get_context_dict,
    get_correlation_id,
    propagate_trace_context,
    reconcile_deadline,
    set_correlation_id,
    with_correlation_id,
)
from .events import emit_event
from .rate_limit import rate_limit_argocd, rate_limit_k8s
from .secrets import SecretResolver, get_secret_value

__all__ = [
    "update_condition",
    "emit_event",
    "get_secret_value",
    "SecretResolver",
    "get_cached_object",
    "set_cached_object",
    "invalidate_cache",
    "make_cache_key",
    "rate_limit_k8s",
    "rate_limit_argocd",
    "set_correlation_id",
    "get_correlation_id",
    "with_correlation_id",
    "get_context_dict",
    "propagate_trace_context",
    "reconcile_deadline",
    "check_deadline",
    "prune_empty",
    "equate_empty",
    "equal_lists",
]
