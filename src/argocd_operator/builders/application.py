"""Converters between Application parameters and ArgoCD Application payloads.

Parameter keys use the ArgoCD JSON names, so the spec mapping is a field-wise
copy that omits unset (None) values at every depth. Fields that only exist on
the managed resource (appNamespace, deleteCascade, deletePropagationPolicy,
annotations, finalizers and the destination reference selectors) are not part
of the wire spec.
"""

from __future__ import annotations

import copy
from typing import Any

from ..utils.optional import set_if

SPEC_FIELDS = (
    "source",
    "destination",
    "project",
    "syncPolicy",
    "ignoreDifferences",
    "info",
    "revisionHistoryLimit",
    "sources",
    "sourceHydrator",
)

# Cross-resource references resolved on the managed side only
DESTINATION_REFERENCE_FIELDS = ("serverRef", "serverSelector", "nameRef", "nameSelector")

STATUS_FIELDS = (
    "resources",
    "sync",
    "health",
    "history",
    "conditions",
    "reconciledAt",
    "operationState",
    "observedAt",
    "sourceType",
    "sourceTypes",
    "summary",
    "sourceHydrator",
)


def drop_none(value: Any) -> Any:
    """Deep copy of value without None entries in mappings."""
    if isinstance(value, dict):
        return {k: drop_none(v) for k, v in value.items() if v is not None}
    if isinstance(value, list):
        return [drop_none(v) for v in value]
    return copy.deepcopy(value)


def to_argo_application_spec(params: dict[str, Any]) -> dict[str, Any]:
    """Build an ApplicationSpec payload from Application parameters."""
    spec: dict[str, Any] = {}
    for key in SPEC_FIELDS:
        set_if(spec, key, drop_none(params.get(key)))
    destination = spec.get("destination")
    if destination is not None:
        spec["destination"] = {k: v for k, v in destination.items() if k not in DESTINATION_REFERENCE_FIELDS}
    spec.setdefault("destination", {})
    spec.setdefault("project", "")
    return spec


def from_argo_application_spec(spec: dict[str, Any]) -> dict[str, Any]:
    """Map an observed ApplicationSpec back to Application parameters."""
    params: dict[str, Any] = {}
    for key in SPEC_FIELDS:
        set_if(params, key, drop_none(spec.get(key)))
    return params


def from_argo_application_status(status: dict[str, Any] | None) -> dict[str, Any]:
    """Map an observed ApplicationStatus to status.atProvider."""
    if not status:
        return {}
    observation: dict[str, Any] = {}
    for key in STATUS_FIELDS:
        set_if(observation, key, drop_none(status.get(key)))
    return observation


def generate_application(name: str, params: dict[str, Any]) -> dict[str, Any]:
    """Build the Application sent on create and update."""
    metadata: dict[str, Any] = {"name": name}
    set_if(metadata, "namespace", params.get("appNamespace") or None)
    set_if(metadata, "annotations", copy.deepcopy(params.get("annotations")))
    set_if(metadata, "finalizers", copy.deepcopy(params.get("finalizers")))
    return {"metadata": metadata, "spec": to_argo_application_spec(params)}
