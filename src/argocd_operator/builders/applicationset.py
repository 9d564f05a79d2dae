"""Converters between ApplicationSet parameters and ArgoCD ApplicationSet payloads."""

from __future__ import annotations

from typing import Any

from ..utils.optional import set_if
from .application import drop_none

SPEC_FIELDS = (
    "goTemplate",
    "generators",
    "template",
    "syncPolicy",
    "strategy",
    "preservedFields",
    "goTemplateOptions",
    "applyNestedSelectors",
    "ignoreApplicationDifferences",
    "templatePatch",
)

STATUS_FIELDS = ("conditions", "applicationStatus", "resources")


def to_argo_application_set_spec(params: dict[str, Any]) -> dict[str, Any]:
    """ApplicationSetSpec payload; appsetNamespace only addresses the object."""
    spec: dict[str, Any] = {}
    for key in SPEC_FIELDS:
        set_if(spec, key, drop_none(params.get(key)))
    spec.setdefault("generators", [])
    spec.setdefault("template", {})
    return spec


def from_argo_application_set_spec(spec: dict[str, Any]) -> dict[str, Any]:
    params: dict[str, Any] = {}
    for key in SPEC_FIELDS:
        set_if(params, key, drop_none(spec.get(key)))
    return params


def from_argo_application_set_status(status: dict[str, Any] | None) -> dict[str, Any]:
    observation: dict[str, Any] = {}
    for key in STATUS_FIELDS:
        set_if(observation, key, drop_none((status or {}).get(key)))
    return observation


def generate_application_set(name: str, params: dict[str, Any]) -> dict[str, Any]:
    metadata: dict[str, Any] = {"name": name}
    set_if(metadata, "namespace", params.get("appsetNamespace") or None)
    return {"metadata": metadata, "spec": to_argo_application_set_spec(params)}
