"""ApplicationSet: cluster-scoped resource for an ArgoCD ApplicationSet."""

from __future__ import annotations

from typing import Any

from ..builders.applicationset import (
    from_argo_application_set_status,
    generate_application_set,
    to_argo_application_set_spec,
)
from ..constants import KIND_APPLICATION_SET
from ..managed.external import ExternalClient, ExternalCreation, ExternalUpdate
from ..managed.resource import ManagedResource
from ..services.argocd.base import ApplicationSetServiceProtocol
from ..services.argocd.resources import ApplicationSetService
from ..utils.compare import equate_empty


def is_application_set_up_to_date(params: dict[str, Any], remote: dict[str, Any]) -> bool:
    """Converted spec equals the remote spec with unset and empty values equated."""
    return equate_empty(to_argo_application_set_spec(params), remote.get("spec") or {})


class ApplicationSetExternal(ExternalClient):
    kind = KIND_APPLICATION_SET
    service_class = ApplicationSetService
    service: ApplicationSetServiceProtocol

    get_failed = "failed to GET ApplicationSet with ArgoCD instance"
    create_failed = "cannot create Argocd application set"
    update_failed = "cannot update Argocd application set"
    delete_failed = "cannot delete Argocd application set"

    def fetch(self, mr: ManagedResource) -> dict[str, Any] | None:
        return self.service.get(mr.external_name, appset_namespace=mr.for_provider.get("appsetNamespace"))

    def generate_observation(self, remote: dict[str, Any], mr: ManagedResource) -> dict[str, Any]:
        return from_argo_application_set_status(remote.get("status"))

    def is_up_to_date(
        self, mr: ManagedResource, remote: dict[str, Any], previous_at_provider: dict[str, Any]
    ) -> bool:
        return is_application_set_up_to_date(mr.for_provider, remote)

    def create_external(self, mr: ManagedResource) -> ExternalCreation:
        self.service.create(generate_application_set(mr.external_name, mr.for_provider), upsert=False)
        return ExternalCreation()

    def update_external(self, mr: ManagedResource) -> ExternalUpdate:
        self.service.create(generate_application_set(mr.external_name, mr.for_provider), upsert=True)
        return ExternalUpdate()

    def delete_external(self, mr: ManagedResource) -> None:
        self.service.delete(mr.external_name, appset_namespace=mr.for_provider.get("appsetNamespace"))
