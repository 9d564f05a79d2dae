"""Utilities for managing Kubernetes conditions."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from ..constants import (
    COND_AUTH_VALID,
    COND_ENDPOINT_REACHABLE,
    COND_READY,
    COND_SYNCED,
    REASON_AVAILABLE,
    REASON_CREATING,
    REASON_DELETING,
    REASON_RECONCILE_ERROR,
    REASON_RECONCILE_SUCCESS,
    REASON_UNAVAILABLE,
)


def update_condition(
    conditions: list[dict[str, Any]],
    condition_type: str,
    status: str,
    reason: str,
    message: str,
    observed_generation: int | None = None,
) -> list[dict[str, Any]]:
    """Update or add a condition to the conditions list.

    Args:
        conditions: List of existing conditions
        condition_type: Type of condition
        status: Status of condition ("True", "False", "Unknown")
        reason: Reason for the condition
        message: Human-readable message
        observed_generation: Generation when condition was observed

    Returns:
        Updated list of conditions
    """
    now = datetime.now(timezone.utc).isoformat()

    existing_idx = None
    for idx, cond in enumerate(conditions):
        if cond.get("type") == condition_type:
            existing_idx = idx
            break

    new_condition = {
        "type": condition_type,
        "status": status,
        "reason": reason,
        "message": message,
        "lastTransitionTime": now,
    }

    if observed_generation is not None:
        new_condition["observedGeneration"] = observed_generation

    if existing_idx is not None:
        existing = conditions[existing_idx]
        # Only update lastTransitionTime if status changed
        if existing.get("status") == status:
            new_condition["lastTransitionTime"] = existing.get("lastTransitionTime", now)
        conditions[existing_idx] = new_condition
    else:
        conditions.append(new_condition)

    return conditions


def get_condition(conditions: list[dict[str, Any]], condition_type: str) -> dict[str, Any] | None:
    for cond in conditions:
        if cond.get("type") == condition_type:
            return cond
    return None


def available() -> tuple[str, str, str]:
    """Ready condition for an external resource that is up and healthy."""
    return ("True", REASON_AVAILABLE, "")


def unavailable(message: str = "") -> tuple[str, str, str]:
    """Ready condition for an external resource that exists but is not usable."""
    return ("False", REASON_UNAVAILABLE, message)


def set_ready_from(
    conditions: list[dict[str, Any]],
    ready: tuple[str, str, str],
    observed_generation: int | None = None,
) -> list[dict[str, Any]]:
    """Apply a (status, reason, message) triple as the Ready condition."""
    status, reason, message = ready
    return update_condition(conditions, COND_READY, status, reason, message, observed_generation)


def set_creating_condition(
    conditions: list[dict[str, Any]],
    observed_generation: int | None = None,
) -> list[dict[str, Any]]:
    """Set Ready=False/Creating."""
    return update_condition(
        conditions, COND_READY, "False", REASON_CREATING, "External resource is being created", observed_generation
    )


def set_deleting_condition(
    conditions: list[dict[str, Any]],
    observed_generation: int | None = None,
) -> list[dict[str, Any]]:
    """Set Ready=False/Deleting."""
    return update_condition(
        conditions, COND_READY, "False", REASON_DELETING, "External resource is being deleted", observed_generation
    )


def set_synced_condition(
    conditions: list[dict[str, Any]],
    status: bool,
    message: str = "",
    observed_generation: int | None = None,
) -> list[dict[str, Any]]:
    """Set the Synced condition (ReconcileSuccess or ReconcileError)."""
    return update_condition(
        conditions,
        COND_SYNCED,
        "True" if status else "False",
        REASON_RECONCILE_SUCCESS if status else REASON_RECONCILE_ERROR,
        message,
        observed_generation,
    )


def set_ready_condition(
    conditions: list[dict[str, Any]],
    status: bool,
    message: str,
    observed_generation: int | None = None,
) -> list[dict[str, Any]]:
    """Set the Ready condition."""
    return update_condition(
        conditions,
        COND_READY,
        "True" if status else "False",
        "Ready" if status else "NotReady",
        message,
        observed_generation,
    )


def set_auth_valid_condition(
    conditions: list[dict[str, Any]],
    status: bool,
    message: str,
    observed_generation: int | None = None,
) -> list[dict[str, Any]]:
    """Set the AuthValid condition."""
    return update_condition(
        conditions,
        COND_AUTH_VALID,
        "True" if status else "False",
        "AuthValid" if status else "AuthInvalid",
        message,
        observed_generation,
    )


def set_endpoint_reachable_condition(
    conditions: list[dict[str, Any]],
    status: bool,
    message: str,
    observed_generation: int | None = None,
) -> list[dict[str, Any]]:
    """Set the EndpointReachable condition."""
    return update_condition(
        conditions,
        COND_ENDPOINT_REACHABLE,
        "True" if status else "False",
        "EndpointReachable" if status else "EndpointUnreachable",
        message,
        observed_generation,
    )
