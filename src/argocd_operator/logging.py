"""Structured logging configuration for the ArgoCD Resource Operator."""

import json
import logging
import os
import sys
from typing import Any

from .utils.context import get_correlation_id, propagate_trace_context

SECRET_FIELDS = {"password", "token", "bearer_token", "ssh_private_key", "private_key", "key_data", "cert_data"}


def setup_structured_logging() -> None:
    """Configure structured JSON logging."""
    level_name = os.getenv("LOG_LEVEL", "INFO").upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format="%(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )


def log_resource_event(
    logger: logging.Logger,
    controller: str,
    resource_kind: str,
    resource_name: str,
    namespace: str,
    uid: str,
    event: str,
    reason: str,
    message: str,
    level: int = logging.INFO,
    **kwargs: Any,
) -> None:
    """Log a structured resource event as a single JSON line."""
    log_data = {
        "controller": controller,
        "resource": resource_kind,
        "name": resource_name,
        "namespace": namespace,
        "uid": uid,
        "event": event,
        "reason": reason,
        "message": message,
    }
    corr_id = get_correlation_id()
    if corr_id:
        log_data["correlation_id"] = corr_id
    trace_context = propagate_trace_context()
    if trace_context:
        log_data["trace_id"] = trace_context["trace_id"]
        log_data["span_id"] = trace_context["span_id"]
    log_data.update(sanitize_secrets(kwargs))
    logger.log(level, json.dumps(log_data, default=str))


def sanitize_secrets(log_data: dict[str, Any]) -> dict[str, Any]:
    """Remove secret fields from log data."""
    sanitized = log_data.copy()
    for field in SECRET_FIELDS:
        if field in sanitized:
            sanitized[field] = "***REDACTED***"
    return sanitized
