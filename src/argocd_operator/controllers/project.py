"""Project: cluster-scoped ArgoCD AppProject."""

from __future__ import annotations

from typing import Any

from ..builders.project import (
    destinations_from_wire,
    generate_create_project_request,
    generate_project_observation,
    generate_update_project_request,
    orphaned_resources_from_wire,
    roles_from_wire,
    signature_keys_from_wire,
    sync_windows_from_wire,
)
from ..constants import KIND_PROJECT
from ..managed.external import ExternalClient, ExternalCreation, ExternalUpdate
from ..managed.resource import ManagedResource
from ..services.argocd.base import ProjectServiceProtocol
from ..services.argocd.resources import ProjectService
from ..utils.compare import equal_lists, list_equal
from ..utils.optional import late_init, to_int


def late_initialize_project(params: dict[str, Any], spec: dict[str, Any]) -> None:
    """Fill unset Project parameters from an observed AppProjectSpec.

    projectLabels and sourceNamespaces are never late-initialized.
    """
    late_init(params, "sourceRepos", spec.get("sourceRepos"))
    if params.get("destinations") is None and spec.get("destinations") is not None:
        params["destinations"] = destinations_from_wire(spec["destinations"])
    if params.get("description") is None:
        params["description"] = spec.get("description") or ""
    if params.get("roles") is None and spec.get("roles") is not None:
        params["roles"] = roles_from_wire(spec["roles"])
    late_init(params, "clusterResourceWhitelist", spec.get("clusterResourceWhitelist"))
    late_init(params, "namespaceResourceBlacklist", spec.get("namespaceResourceBlacklist"))
    if params.get("orphanedResources") is None and spec.get("orphanedResources") is not None:
        params["orphanedResources"] = orphaned_resources_from_wire(spec["orphanedResources"])
    if params.get("syncWindows") is None and spec.get("syncWindows") is not None:
        params["syncWindows"] = sync_windows_from_wire(spec["syncWindows"])
    late_init(params, "namespaceResourceWhitelist", spec.get("namespaceResourceWhitelist"))
    if params.get("signatureKeys") is None and spec.get("signatureKeys") is not None:
        params["signatureKeys"] = signature_keys_from_wire(spec["signatureKeys"])
    late_init(params, "clusterResourceBlacklist", spec.get("clusterResourceBlacklist"))


def _unset_or_equal(desired: Any, observed: Any) -> bool:
    return desired is None or desired == observed


def is_equal_destinations(desired: list[dict[str, Any]] | None, observed: list[dict[str, Any]] | None) -> bool:
    return equal_lists(
        desired,
        observed,
        lambda d, o: all(_unset_or_equal(d.get(k), o.get(k, "")) for k in ("name", "namespace", "server")),
    )


def is_equal_jwt_tokens(desired: list[dict[str, Any]] | None, observed: list[dict[str, Any]] | None) -> bool:
    return equal_lists(
        desired,
        observed,
        lambda d, o: to_int(d.get("iat")) == to_int(o.get("iat"))
        and (d.get("exp") is None or to_int(d["exp"]) == to_int(o.get("exp")))
        and _unset_or_equal(d.get("id"), o.get("id", "")),
    )


def is_equal_roles(desired: list[dict[str, Any]] | None, observed: list[dict[str, Any]] | None) -> bool:
    def role_equal(d: dict[str, Any], o: dict[str, Any]) -> bool:
        return (
            d.get("name", "") == o.get("name", "")
            and _unset_or_equal(d.get("description"), o.get("description", ""))
            and list_equal(d.get("policies"), o.get("policies"))
            and list_equal(d.get("groups"), o.get("groups"))
            and is_equal_jwt_tokens(d.get("jwtTokens") or None, o.get("jwtTokens") or None)
        )

    return equal_lists(desired, observed, role_equal)


def is_equal_orphaned_resource_keys(
    desired: list[dict[str, Any]] | None, observed: list[dict[str, Any]] | None
) -> bool:
    return equal_lists(
        desired,
        observed,
        lambda d, o: all(_unset_or_equal(d.get(k), o.get(k, "")) for k in ("group", "kind", "name")),
    )


def is_equal_orphaned_resources(desired: dict[str, Any] | None, observed: dict[str, Any] | None) -> bool:
    if desired is None and observed is None:
        return True
    if desired is None or observed is None:
        return False
    if desired.get("warn") is not None and desired.get("warn") != observed.get("warn"):
        return False
    return is_equal_orphaned_resource_keys(desired.get("ignore") or None, observed.get("ignore") or None)


def is_equal_signature_keys(desired: list[dict[str, Any]] | None, observed: list[dict[str, Any]] | None) -> bool:
    return equal_lists(desired, observed, lambda d, o: d.get("keyID", "") == o.get("keyID", ""))


def is_equal_sync_windows(desired: list[dict[str, Any]] | None, observed: list[dict[str, Any]] | None) -> bool:
    if not desired and observed is None:
        return True

    def window_equal(d: dict[str, Any], o: dict[str, Any]) -> bool:
        for key in ("kind", "schedule", "duration"):
            if not _unset_or_equal(d.get(key), o.get(key, "")):
                return False
        for key in ("applications", "namespaces", "clusters"):
            if d.get(key) is not None and not list_equal(d[key], o.get(key)):
                return False
        return d.get("manualSync") is None or d["manualSync"] == bool(o.get("manualSync"))

    return equal_lists(desired, observed, window_equal)


def is_project_up_to_date(params: dict[str, Any], project: dict[str, Any]) -> bool:
    """Compare Project parameters with an observed AppProject."""
    spec = project.get("spec") or {}
    return (
        list_equal(params.get("sourceRepos"), spec.get("sourceRepos"))
        and is_equal_destinations(params.get("destinations"), spec.get("destinations"))
        and (params.get("description") or "") == spec.get("description", "")
        and is_equal_roles(params.get("roles"), spec.get("roles"))
        and list_equal(params.get("clusterResourceWhitelist"), spec.get("clusterResourceWhitelist"))
        and list_equal(params.get("namespaceResourceBlacklist"), spec.get("namespaceResourceBlacklist"))
        and is_equal_orphaned_resources(params.get("orphanedResources"), spec.get("orphanedResources"))
        and is_equal_sync_windows(params.get("syncWindows"), spec.get("syncWindows"))
        and list_equal(params.get("namespaceResourceWhitelist"), spec.get("namespaceResourceWhitelist"))
        and is_equal_signature_keys(params.get("signatureKeys"), spec.get("signatureKeys"))
        and list_equal(params.get("clusterResourceBlacklist"), spec.get("clusterResourceBlacklist"))
        and (params.get("sourceNamespaces") is None
             or list_equal(params["sourceNamespaces"], spec.get("sourceNamespaces")))
    )


class ProjectExternal(ExternalClient):
    kind = KIND_PROJECT
    service_class = ProjectService
    service: ProjectServiceProtocol

    get_failed = "cannot get Argocd project"
    create_failed = "cannot create Argocd project"
    update_failed = "cannot update Argocd project"
    delete_failed = "cannot delete Argocd project"

    def fetch(self, mr: ManagedResource) -> dict[str, Any] | None:
        return self.service.get(mr.external_name)

    def late_initialize(self, params: dict[str, Any], remote: dict[str, Any], mr: ManagedResource) -> None:
        late_initialize_project(params, remote.get("spec") or {})

    def generate_observation(self, remote: dict[str, Any], mr: ManagedResource) -> dict[str, Any]:
        return generate_project_observation(remote)

    def is_up_to_date(
        self, mr: ManagedResource, remote: dict[str, Any], previous_at_provider: dict[str, Any]
    ) -> bool:
        return is_project_up_to_date(mr.for_provider, remote)

    def create_external(self, mr: ManagedResource) -> ExternalCreation:
        created = self.service.create(generate_create_project_request(mr.name, mr.for_provider), upsert=False)
        name = (created.get("metadata") or {}).get("name")
        if name:
            mr.external_name = name
        return ExternalCreation()

    def update_external(self, mr: ManagedResource) -> ExternalUpdate:
        # The API rejects updates without the current resourceVersion
        current = self.service.get(mr.external_name)
        self.service.update(generate_update_project_request(mr.for_provider, current))
        return ExternalUpdate()

    def delete_external(self, mr: ManagedResource) -> None:
        self.service.delete(mr.external_name)
