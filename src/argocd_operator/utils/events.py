"""Utilities for emitting Kubernetes events."""

from __future__ import annotations

from typing import Any

import kopf

from ..constants import (
    EVENT_REASON_CREATED_EXTERNAL,
    EVENT_REASON_DELETED_EXTERNAL,
    EVENT_REASON_LATE_INITIALIZED,
    EVENT_REASON_RECONCILE_FAILED,
    EVENT_REASON_RECONCILE_STARTED,
    EVENT_REASON_UPDATED_EXTERNAL,
    EVENT_REASON_VALIDATE_FAILED,
    EVENT_REASON_VALIDATE_SUCCEEDED,
)


def emit_event(
    meta: dict[str, Any],
    reason: str,
    message: str,
    type_: str = "Normal",
) -> None:
    """Emit a Kubernetes event.

    Args:
        meta: Resource body or metadata the event refers to
        reason: Event reason
        message: Event message
        type_: Event type (Normal or Warning)
    """
    kopf.event(
        meta,
        reason=reason,
        message=message,
        type=type_,
    )


def emit_reconcile_started(meta: dict[str, Any]) -> None:
    emit_event(meta, EVENT_REASON_RECONCILE_STARTED, "Reconciliation started")


def emit_reconcile_failed(meta: dict[str, Any], message: str) -> None:
    emit_event(meta, EVENT_REASON_RECONCILE_FAILED, message, type_="Warning")


def emit_validate_succeeded(meta: dict[str, Any]) -> None:
    emit_event(meta, EVENT_REASON_VALIDATE_SUCCEEDED, "Validation succeeded")


def emit_validate_failed(meta: dict[str, Any], message: str) -> None:
    emit_event(meta, EVENT_REASON_VALIDATE_FAILED, message, type_="Warning")


def emit_external_created(meta: dict[str, Any], kind: str, external_name: str) -> None:
    """Emit external resource created event."""
    emit_event(meta, EVENT_REASON_CREATED_EXTERNAL, f"ArgoCD {kind} {external_name} created")


def emit_external_updated(meta: dict[str, Any], kind: str, external_name: str) -> None:
    """Emit external resource updated event."""
    emit_event(meta, EVENT_REASON_UPDATED_EXTERNAL, f"ArgoCD {kind} {external_name} updated")


def emit_external_deleted(meta: dict[str, Any], kind: str, external_name: str) -> None:
    """Emit external resource deleted event."""
    emit_event(meta, EVENT_REASON_DELETED_EXTERNAL, f"ArgoCD {kind} {external_name} deleted")


def emit_late_initialized(meta: dict[str, Any]) -> None:
    emit_event(meta, EVENT_REASON_LATE_INITIALIZED, "Unset spec fields initialized from ArgoCD")
