"""Converters between Project parameters and ArgoCD AppProject payloads.

Lossy fields: projectLabels travel in metadata and are only sent on create.
"""

from __future__ import annotations

import copy
from typing import Any

from ..utils.optional import set_if, to_int


def _copy_list(value: Any) -> Any:
    return copy.deepcopy(value) if value is not None else None


def destinations_to_wire(destinations: list[dict[str, Any]]) -> list[dict[str, Any]]:
    return [
        {
            "server": d.get("server") or "",
            "namespace": d.get("namespace") or "",
            "name": d.get("name") or "",
        }
        for d in destinations
    ]


def destinations_from_wire(destinations: list[dict[str, Any]]) -> list[dict[str, Any]]:
    return [
        {
            "server": d.get("server", ""),
            "namespace": d.get("namespace", ""),
            "name": d.get("name", ""),
        }
        for d in destinations
    ]


def jwt_tokens_to_wire(tokens: list[dict[str, Any]]) -> list[dict[str, Any]]:
    return [
        {"iat": to_int(t.get("iat")), "exp": to_int(t.get("exp")), "id": t.get("id") or ""}
        for t in tokens
    ]


def jwt_tokens_from_wire(tokens: list[dict[str, Any]]) -> list[dict[str, Any]]:
    return [
        {"iat": to_int(t.get("iat")), "exp": to_int(t.get("exp")), "id": t.get("id", "")}
        for t in tokens
    ]


def roles_to_wire(roles: list[dict[str, Any]]) -> list[dict[str, Any]]:
    wire = []
    for role in roles:
        item: dict[str, Any] = {
            "name": role.get("name", ""),
            "description": role.get("description") or "",
            "jwtTokens": jwt_tokens_to_wire(role.get("jwtTokens") or []),
        }
        set_if(item, "policies", _copy_list(role.get("policies")))
        set_if(item, "groups", _copy_list(role.get("groups")))
        wire.append(item)
    return wire


def roles_from_wire(roles: list[dict[str, Any]]) -> list[dict[str, Any]]:
    params = []
    for role in roles:
        item: dict[str, Any] = {
            "name": role.get("name", ""),
            "description": role.get("description", ""),
            "jwtTokens": jwt_tokens_from_wire(role.get("jwtTokens") or []),
        }
        set_if(item, "policies", _copy_list(role.get("policies")))
        set_if(item, "groups", _copy_list(role.get("groups")))
        params.append(item)
    return params


def orphaned_resources_to_wire(settings: dict[str, Any]) -> dict[str, Any]:
    wire: dict[str, Any] = {
        "ignore": [
            {"group": k.get("group") or "", "kind": k.get("kind") or "", "name": k.get("name") or ""}
            for k in settings.get("ignore") or []
        ]
    }
    set_if(wire, "warn", settings.get("warn"))
    return wire


def orphaned_resources_from_wire(settings: dict[str, Any]) -> dict[str, Any]:
    params: dict[str, Any] = {}
    set_if(params, "warn", settings.get("warn"))
    if settings.get("ignore") is not None:
        params["ignore"] = [
            {"group": k.get("group", ""), "kind": k.get("kind", ""), "name": k.get("name", "")}
            for k in settings["ignore"]
        ]
    return params


def sync_windows_to_wire(windows: list[dict[str, Any]]) -> list[dict[str, Any]]:
    wire = []
    for w in windows:
        item: dict[str, Any] = {
            "kind": w.get("kind") or "",
            "schedule": w.get("schedule") or "",
            "duration": w.get("duration") or "",
            "manualSync": bool(w.get("manualSync")),
        }
        for key in ("applications", "namespaces", "clusters"):
            set_if(item, key, _copy_list(w.get(key)))
        wire.append(item)
    return wire


def sync_windows_from_wire(windows: list[dict[str, Any]]) -> list[dict[str, Any]]:
    params = []
    for w in windows:
        item: dict[str, Any] = {
            "kind": w.get("kind", ""),
            "schedule": w.get("schedule", ""),
            "duration": w.get("duration", ""),
            "manualSync": bool(w.get("manualSync", False)),
        }
        for key in ("applications", "namespaces", "clusters"):
            set_if(item, key, _copy_list(w.get(key)))
        params.append(item)
    return params


def signature_keys_from_wire(keys: list[dict[str, Any]]) -> list[dict[str, Any]]:
    return [{"keyID": k.get("keyID", "")} for k in keys]


_PLAIN_LISTS = (
    "sourceRepos",
    "clusterResourceWhitelist",
    "namespaceResourceBlacklist",
    "namespaceResourceWhitelist",
    "clusterResourceBlacklist",
    "sourceNamespaces",
)


def generate_project_spec(params: dict[str, Any]) -> dict[str, Any]:
    """Build an AppProjectSpec payload from Project parameters.

    Args:
        params: spec.forProvider of the Project

    Returns:
        AppProjectSpec as sent to the API
    """
    spec: dict[str, Any] = {}
    for key in _PLAIN_LISTS:
        set_if(spec, key, _copy_list(params.get(key)))
    if params.get("destinations") is not None:
        spec["destinations"] = destinations_to_wire(params["destinations"])
    if params.get("description") is not None:
        spec["description"] = params["description"]
    if params.get("roles") is not None:
        spec["roles"] = roles_to_wire(params["roles"])
    if params.get("orphanedResources") is not None:
        spec["orphanedResources"] = orphaned_resources_to_wire(params["orphanedResources"])
    if params.get("syncWindows") is not None:
        spec["syncWindows"] = sync_windows_to_wire(params["syncWindows"])
    if params.get("signatureKeys") is not None:
        spec["signatureKeys"] = [{"keyID": k.get("keyID", "")} for k in params["signatureKeys"]]
    return spec


def project_parameters_from_spec(spec: dict[str, Any]) -> dict[str, Any]:
    """Map an AppProjectSpec back to Project parameters for every field the wire carries."""
    params: dict[str, Any] = {}
    for key in _PLAIN_LISTS:
        set_if(params, key, _copy_list(spec.get(key)))
    if spec.get("destinations") is not None:
        params["destinations"] = destinations_from_wire(spec["destinations"])
    set_if(params, "description", spec.get("description"))
    if spec.get("roles") is not None:
        params["roles"] = roles_from_wire(spec["roles"])
    if spec.get("orphanedResources") is not None:
        params["orphanedResources"] = orphaned_resources_from_wire(spec["orphanedResources"])
    if spec.get("syncWindows") is not None:
        params["syncWindows"] = sync_windows_from_wire(spec["syncWindows"])
    if spec.get("signatureKeys") is not None:
        params["signatureKeys"] = signature_keys_from_wire(spec["signatureKeys"])
    return params


def generate_create_project_request(name: str, params: dict[str, Any]) -> dict[str, Any]:
    """AppProject for a create call; projectLabels become metadata labels."""
    metadata: dict[str, Any] = {"name": name}
    set_if(metadata, "labels", copy.deepcopy(params.get("projectLabels")))
    return {"metadata": metadata, "spec": generate_project_spec(params)}


def generate_update_project_request(params: dict[str, Any], current: dict[str, Any]) -> dict[str, Any]:
    """AppProject for an update call, carrying the current resourceVersion."""
    current_meta = current.get("metadata") or {}
    metadata: dict[str, Any] = {"name": current_meta.get("name", "")}
    set_if(metadata, "resourceVersion", current_meta.get("resourceVersion"))
    return {"metadata": metadata, "spec": generate_project_spec(params)}


def generate_project_observation(project: dict[str, Any] | None) -> dict[str, Any]:
    if not project:
        return {}
    by_role = (project.get("status") or {}).get("jwtTokensByRole") or {}
    return {
        "jwtTokensByRole": {
            role: {"items": jwt_tokens_from_wire(tokens.get("items") or [])}
            for role, tokens in by_role.items()
        }
    }
