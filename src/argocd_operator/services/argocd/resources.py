"""Per-kind ArgoCD service clients mapped onto the REST gateway routes."""

from __future__ import annotations

from typing import Any
from urllib.parse import quote

from .client import ArgocdClient


def _segment(value: str) -> str:
    # Repository and cluster URLs are used as a single path segment
    return quote(value, safe="")


class ApplicationService:
    """Applications: /api/v1/applications."""

    def __init__(self, client: ArgocdClient) -> None:
        self.client = client

    def list(
        self, name: str, projects: list[str] | None = None, app_namespace: str | None = None
    ) -> list[dict[str, Any]]:
        result = self.client.request(
            "GET",
            "/api/v1/applications",
            params={"name": name, "projects": projects or None, "appNamespace": app_namespace},
            operation="list_applications",
        )
        return result.get("items") or []

    def create(self, application: dict[str, Any], upsert: bool = False) -> dict[str, Any]:
        return self.client.request(
            "POST",
            "/api/v1/applications",
            params={"upsert": upsert},
            json_data=application,
            operation="create_application",
        )

    def update(self, application: dict[str, Any]) -> dict[str, Any]:
        metadata = application.get("metadata", {})
        return self.client.request(
            "PUT",
            f"/api/v1/applications/{_segment(metadata['name'])}",
            params={"appNamespace": metadata.get("namespace") or None},
            json_data=application,
            operation="update_application",
        )

    def delete(
        self,
        name: str,
        cascade: bool | None = None,
        propagation_policy: str | None = None,
        app_namespace: str | None = None,
        project: str | None = None,
    ) -> None:
        self.client.request(
            "DELETE",
            f"/api/v1/applications/{_segment(name)}",
            params={
                "cascade": cascade,
                "propagationPolicy": propagation_policy,
                "appNamespace": app_namespace,
                "project": project,
            },
            operation="delete_application",
        )


class ApplicationSetService:
    """ApplicationSets: /api/v1/applicationsets."""

    def __init__(self, client: ArgocdClient) -> None:
        self.client = client

    def get(self, name: str, appset_namespace: str | None = None) -> dict[str, Any]:
        return self.client.request(
            "GET",
            f"/api/v1/applicationsets/{_segment(name)}",
            params={"appsetNamespace": appset_namespace},
            operation="get_applicationset",
        )

    def create(self, application_set: dict[str, Any], upsert: bool = False) -> dict[str, Any]:
        return self.client.request(
            "POST",
            "/api/v1/applicationsets",
            params={"upsert": upsert},
            json_data=application_set,
            operation="create_applicationset",
        )

    def delete(self, name: str, appset_namespace: str | None = None) -> None:
        self.client.request(
            "DELETE",
            f"/api/v1/applicationsets/{_segment(name)}",
            params={"appsetNamespace": appset_namespace},
            operation="delete_applicationset",
        )


class ProjectService:
    """Projects and project role tokens: /api/v1/projects."""

    def __init__(self, client: ArgocdClient) -> None:
        self.client = client

    def get(self, name: str) -> dict[str, Any]:
        return self.client.request("GET", f"/api/v1/projects/{_segment(name)}", operation="get_project")

    def create(self, project: dict[str, Any], upsert: bool = False) -> dict[str, Any]:
        return self.client.request(
            "POST",
            "/api/v1/projects",
            json_data={"project": project, "upsert": upsert},
            operation="create_project",
        )

    def update(self, project: dict[str, Any]) -> dict[str, Any]:
        name = project.get("metadata", {})["name"]
        return self.client.request(
            "PUT",
            f"/api/v1/projects/{_segment(name)}",
            json_data={"project": project},
            operation="update_project",
        )

    def delete(self, name: str) -> None:
        self.client.request("DELETE", f"/api/v1/projects/{_segment(name)}", operation="delete_project")

    def create_token(
        self,
        project: str,
        role: str,
        expires_in: int = 0,
        token_id: str | None = None,
        description: str | None = None,
    ) -> str:
        """Issue a role token and return the signed JWT."""
        body: dict[str, Any] = {"expiresIn": expires_in}
        if token_id:
            body["id"] = token_id
        if description:
            body["description"] = description
        result = self.client.request(
            "POST",
            f"/api/v1/projects/{_segment(project)}/roles/{_segment(role)}/token",
            json_data=body,
            operation="create_project_token",
        )
        return result.get("token", "")

    def delete_token(self, project: str, role: str, iat: int, token_id: str | None = None) -> None:
        self.client.request(
            "DELETE",
            f"/api/v1/projects/{_segment(project)}/roles/{_segment(role)}/token/{iat}",
            params={"id": token_id or None},
            operation="delete_project_token",
        )


class RepositoryService:
    """Repositories: /api/v1/repositories, keyed by repository URL."""

    def __init__(self, client: ArgocdClient) -> None:
        self.client = client

    def get(self, repo: str, app_project: str | None = None) -> dict[str, Any]:
        return self.client.request(
            "GET",
            f"/api/v1/repositories/{_segment(repo)}",
            params={"appProject": app_project},
            operation="get_repository",
        )

    def create(self, repository: dict[str, Any], upsert: bool = False, creds_only: bool = False) -> dict[str, Any]:
        return self.client.request(
            "POST",
            "/api/v1/repositories",
            params={"upsert": upsert, "credsOnly": creds_only},
            json_data=repository,
            operation="create_repository",
        )

    def update(self, repository: dict[str, Any]) -> dict[str, Any]:
        return self.client.request(
            "PUT",
            f"/api/v1/repositories/{_segment(repository['repo'])}",
            json_data=repository,
            operation="update_repository",
        )

    def delete(self, repo: str, app_project: str | None = None) -> None:
        self.client.request(
            "DELETE",
            f"/api/v1/repositories/{_segment(repo)}",
            params={"appProject": app_project},
            operation="delete_repository",
        )


class ClusterService:
    """Clusters: /api/v1/clusters, addressed by server URL or by name."""

    def __init__(self, client: ArgocdClient) -> None:
        self.client = client

    def get(self, name: str | None = None, server: str | None = None) -> dict[str, Any]:
        if server:
            path = f"/api/v1/clusters/{_segment(server)}"
            params = {"id.type": "url", "name": name or None}
        else:
            path = f"/api/v1/clusters/{_segment(name or '')}"
            params = {"id.type": "name"}
        return self.client.request("GET", path, params=params, operation="get_cluster")

    def create(self, cluster: dict[str, Any], upsert: bool = False) -> dict[str, Any]:
        return self.client.request(
            "POST",
            "/api/v1/clusters",
            params={"upsert": upsert},
            json_data=cluster,
            operation="create_cluster",
        )

    def update(self, cluster: dict[str, Any]) -> dict[str, Any]:
        return self.client.request(
            "PUT",
            f"/api/v1/clusters/{_segment(cluster.get('server', ''))}",
            json_data=cluster,
            operation="update_cluster",
        )

    def delete(self, server: str | None = None, name: str | None = None) -> None:
        if server:
            path = f"/api/v1/clusters/{_segment(server)}"
            params = {"id.type": "url", "name": name or None}
        else:
            path = f"/api/v1/clusters/{_segment(name or '')}"
            params = {"id.type": "name"}
        self.client.request("DELETE", path, params=params, operation="delete_cluster")
