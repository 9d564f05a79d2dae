"""Application: namespaced ArgoCD Application."""

from __future__ import annotations

from typing import Any

from ..builders.application import from_argo_application_status, generate_application, to_argo_application_spec
from ..constants import KIND_APPLICATION
from ..errors import ExternalOperationError
from ..managed.external import ExternalClient, ExternalCreation, ExternalUpdate
from ..managed.resource import ManagedResource
from ..services.argocd.base import ApplicationServiceProtocol
from ..services.argocd.resources import ApplicationService
from ..utils.compare import prune_empty
from ..utils.conditions import available, unavailable

OPERATION_SUCCEEDED = "Succeeded"
HEALTH_HEALTHY = "Healthy"


def is_application_up_to_date(params: dict[str, Any], remote: dict[str, Any]) -> bool:
    """Compare Application parameters with an observed Application.

    Unset and zero values are equivalent on both sides; annotations and the
    sorted finalizers must match exactly.
    """
    desired_spec = prune_empty(to_argo_application_spec(params))
    observed_spec = prune_empty(remote.get("spec") or {})
    if desired_spec != observed_spec:
        return False
    metadata = remote.get("metadata") or {}
    if (params.get("annotations") or {}) != (metadata.get("annotations") or {}):
        return False
    return sorted(params.get("finalizers") or []) == sorted(metadata.get("finalizers") or [])


def application_condition(status: dict[str, Any] | None) -> tuple[str, str, str]:
    """Available unless the last operation did not succeed or health is reported and not Healthy."""
    status = status or {}
    operation_state = status.get("operationState")
    if operation_state is not None and operation_state.get("phase") != OPERATION_SUCCEEDED:
        return unavailable()
    health = (status.get("health") or {}).get("status", "")
    if health and health != HEALTH_HEALTHY:
        return unavailable()
    return available()


class ApplicationExternal(ExternalClient):
    kind = KIND_APPLICATION
    service_class = ApplicationService
    service: ApplicationServiceProtocol

    get_failed = "cannot list Argocd application"
    create_failed = "cannot create Argocd application"
    update_failed = "cannot update Argocd application"
    delete_failed = "cannot delete Argocd application"

    def fetch(self, mr: ManagedResource) -> dict[str, Any] | None:
        params = mr.for_provider
        project = params.get("project")
        apps = self.service.list(
            mr.external_name,
            projects=[project] if project else None,
            app_namespace=params.get("appNamespace"),
        )
        if not apps:
            return None
        if len(apps) > 1:
            raise ExternalOperationError(self.kind, "observe", "multiple applications found")
        return apps[0]

    def generate_observation(self, remote: dict[str, Any], mr: ManagedResource) -> dict[str, Any]:
        return from_argo_application_status(remote.get("status"))

    def availability(self, at_provider: dict[str, Any]) -> tuple[str, str, str]:
        return application_condition(at_provider)

    def is_up_to_date(
        self, mr: ManagedResource, remote: dict[str, Any], previous_at_provider: dict[str, Any]
    ) -> bool:
        return is_application_up_to_date(mr.for_provider, remote)

    def create_external(self, mr: ManagedResource) -> ExternalCreation:
        self.service.create(generate_application(mr.external_name, mr.for_provider))
        return ExternalCreation()

    def update_external(self, mr: ManagedResource) -> ExternalUpdate:
        self.service.update(generate_application(mr.external_name, mr.for_provider))
        return ExternalUpdate()

    def delete_external(self, mr: ManagedResource) -> None:
        params = mr.for_provider
        self.service.delete(
            mr.external_name,
            cascade=params.get("deleteCascade"),
            propagation_policy=params.get("deletePropagationPolicy"),
            app_namespace=params.get("appNamespace"),
            project=params.get("project") or None,
        )
