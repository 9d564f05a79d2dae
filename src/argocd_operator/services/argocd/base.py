"""Interfaces of the per-kind ArgoCD service clients."""

from __future__ import annotations

from typing import Any, Protocol


class ApplicationServiceProtocol(Protocol):
    def list(
        self, name: str, projects: list[str] | None = None, app_namespace: str | None = None
    ) -> list[dict[str, Any]]: ...

    def create(self, application: dict[str, Any], upsert: bool = False) -> dict[str, Any]: ...

    def update(self, application: dict[str, Any]) -> dict[str, Any]: ...

    def delete(
        self,
        name: str,
        cascade: bool | None = None,
        propagation_policy: str | None = None,
        app_namespace: str | None = None,
        project: str | None = None,
    ) -> None: ...


class ApplicationSetServiceProtocol(Protocol):
    def get(self, name: str, appset_namespace: str | None = None) -> dict[str, Any]: ...

    def create(self, application_set: dict[str, Any], upsert: bool = False) -> dict[str, Any]: ...

    def delete(self, name: str, appset_namespace: str | None = None) -> None: ...


class ProjectServiceProtocol(Protocol):
    def get(self, name: str) -> dict[str, Any]: ...

    def create(self, project: dict[str, Any], upsert: bool = False) -> dict[str, Any]: ...

    def update(self, project: dict[str, Any]) -> dict[str, Any]: ...

    def delete(self, name: str) -> None: ...

    def create_token(
        self,
        project: str,
        role: str,
        expires_in: int = 0,
        token_id: str | None = None,
        description: str | None = None,
    ) -> str: ...

    def delete_token(self, project: str, role: str, iat: int, token_id: str | None = None) -> None: ...


class RepositoryServiceProtocol(Protocol):
    def get(self, repo: str, app_project: str | None = None) -> dict[str, Any]: ...

    def create(self, repository: dict[str, Any], upsert: bool = False, creds_only: bool = False) -> dict[str, Any]: ...

    def update(self, repository: dict[str, Any]) -> dict[str, Any]: ...

    def delete(self, repo: str, app_project: str | None = None) -> None: ...


class ClusterServiceProtocol(Protocol):
    def get(self, name: str | None = None, server: str | None = None) -> dict[str, Any]: ...

    def create(self, cluster: dict[str, Any], upsert: bool = False) -> dict[str, Any]: ...

    def update(self, cluster: dict[str, Any]) -> dict[str, Any]: ...

    def delete(self, server: str | None = None, name: str | None = None) -> None: ...
