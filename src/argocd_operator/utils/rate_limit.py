"""Rate limiting utilities for API calls."""

from __future__ import annotations

import os
import threading
import time
from functools import wraps
from typing import Any, Callable, TypeVar

from .. import metrics
from .context import check_deadline, remaining_time

_F = TypeVar("_F", bound=Callable[..., Any])


class RateLimiter:
    """Minimum-interval limiter shared by all threads calling one API.

    Args:
        api_type: Label used for the rate limit metric
        per_second: Maximum sustained call rate
    """

    def __init__(self, api_type: str, per_second: float) -> None:
        self.api_type = api_type
        self.min_interval = 1.0 / per_second if per_second > 0 else 0.0
        self._next_slot = 0.0
        self._lock = threading.Lock()

    def acquire(self) -> float:
        """Block until the caller may issue its call.

        The wait never runs past the current reconcile deadline.

        Returns:
            Seconds the slot lay ahead of the call

        Raises:
            ReconcileTimeoutError: If the deadline passed while waiting
        """
        with self._lock:
            now = time.monotonic()
            slot = max(now, self._next_slot)
            self._next_slot = slot + self.min_interval
        delay = slot - now
        if delay > 0:
            metrics.rate_limit_hits_total.labels(api_type=self.api_type).inc()
            remaining = remaining_time()
            time.sleep(delay if remaining is None else max(0.0, min(delay, remaining)))
            check_deadline()
        return delay

    def __call__(self, func: _F) -> _F:
        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            self.acquire()
            return func(*args, **kwargs)

        return wrapper  # type: ignore


_k8s_limiter = RateLimiter("k8s", float(os.getenv("K8S_RATE_LIMIT_PER_SECOND", "10.0")))
_argocd_limiter = RateLimiter("argocd", float(os.getenv("ARGOCD_RATE_LIMIT_PER_SECOND", "10.0")))


def rate_limit_k8s(func: _F) -> _F:
    """Decorator to rate limit Kubernetes API calls."""
    return _k8s_limiter(func)


def rate_limit_argocd(func: _F) -> _F:
    """Decorator to rate limit ArgoCD API calls."""
    return _argocd_limiter(func)
