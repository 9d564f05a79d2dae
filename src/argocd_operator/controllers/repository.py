"""Repository: cluster-scoped ArgoCD repository credentials."""

from __future__ import annotations

from typing import Any

from ..builders.repository import (
    BOOL_FIELDS,
    INT_FIELDS,
    SECRET_FIELDS,
    STRING_FIELDS,
    generate_repository,
    generate_repository_observation,
)
from ..constants import KIND_REPOSITORY
from ..managed.external import ExternalClient, ExternalCreation, ExternalUpdate
from ..managed.resource import ManagedResource
from ..services.argocd.base import RepositoryServiceProtocol
from ..services.argocd.resources import RepositoryService
from ..utils.optional import bool_matches, int_matches, late_init_bool, late_init_int, late_init_string, string_matches, to_int


def late_initialize_repository(params: dict[str, Any], repo: dict[str, Any]) -> None:
    for key in STRING_FIELDS:
        late_init_string(params, key, repo.get(key))
    late_init_string(params, "githubAppEnterpriseBaseUrl", repo.get("githubAppEnterpriseBaseUrl"))
    for key in BOOL_FIELDS:
        late_init_bool(params, key, repo.get(key))
    for key in INT_FIELDS:
        late_init_int(params, key, to_int(repo.get(key)))


def is_repository_up_to_date(
    params: dict[str, Any],
    repo: dict[str, Any],
    observation: dict[str, Any],
    previous_observation: dict[str, Any],
) -> bool:
    """Compare Repository parameters with the observed repository and secret versions.

    A changed resourceVersion of any referenced secret counts as drift so that
    rotated credentials are pushed with an update.
    """
    for key in STRING_FIELDS:
        if not string_matches(params.get(key), repo.get(key)):
            return False
    if not string_matches(params.get("githubAppEnterpriseBaseUrl"), repo.get("githubAppEnterpriseBaseUrl")):
        return False
    for key in BOOL_FIELDS:
        if not bool_matches(params.get(key), repo.get(key)):
            return False
    for key in INT_FIELDS:
        if not int_matches(params.get(key), to_int(repo.get(key))):
            return False
    for key in SECRET_FIELDS.values():
        if (previous_observation or {}).get(key) != observation.get(key):
            return False
    return True


class RepositoryExternal(ExternalClient):
    kind = KIND_REPOSITORY
    service_class = RepositoryService
    service: RepositoryServiceProtocol

    get_failed = "cannot get Argocd repository"
    create_failed = "cannot create Argocd repository"
    update_failed = "cannot update Argocd repository"
    delete_failed = "cannot delete Argocd repository"

    def fetch(self, mr: ManagedResource) -> dict[str, Any] | None:
        return self.service.get(mr.external_name, app_project=mr.for_provider.get("project"))

    def late_initialize(self, params: dict[str, Any], remote: dict[str, Any], mr: ManagedResource) -> None:
        late_initialize_repository(params, remote)

    def _secret_versions(self, params: dict[str, Any]) -> dict[str, str]:
        return {key: self.secrets.resource_version(params.get(ref)) for ref, key in SECRET_FIELDS.items()}

    def generate_observation(self, remote: dict[str, Any], mr: ManagedResource) -> dict[str, Any]:
        return generate_repository_observation(remote, self._secret_versions(mr.for_provider))

    def is_up_to_date(
        self, mr: ManagedResource, remote: dict[str, Any], previous_at_provider: dict[str, Any]
    ) -> bool:
        return is_repository_up_to_date(mr.for_provider, remote, mr.at_provider, previous_at_provider)

    def _credentials(self, params: dict[str, Any]) -> dict[str, str]:
        # Stops at the first unresolvable reference
        credentials = {}
        for ref, field in SECRET_FIELDS.items():
            value = self.secrets.resolve_string(params.get(ref))
            if value is not None:
                credentials[field] = value
        return credentials

    def create_external(self, mr: ManagedResource) -> ExternalCreation:
        payload = generate_repository(mr.for_provider, self._credentials(mr.for_provider))
        self.service.create(payload, upsert=False, creds_only=False)
        mr.external_name = mr.for_provider.get("repo", "")
        return ExternalCreation()

    def update_external(self, mr: ManagedResource) -> ExternalUpdate:
        payload = generate_repository(mr.for_provider, self._credentials(mr.for_provider))
        self.service.update(payload)
        return ExternalUpdate()

    def delete_external(self, mr: ManagedResource) -> None:
        self.service.delete(mr.external_name, app_project=mr.for_provider.get("project"))
