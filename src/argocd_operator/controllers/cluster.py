"""Cluster: cluster-scoped ArgoCD destination cluster."""

from __future__ import annotations

from typing import Any

from ..builders.cluster import generate_cluster, generate_cluster_observation, parse_kubeconfig
from ..constants import KIND_CLUSTER
from ..managed.external import ExternalClient, ExternalCreation, ExternalUpdate
from ..managed.resource import ManagedResource
from ..services.argocd.base import ClusterServiceProtocol
from ..services.argocd.resources import ClusterService
from ..utils.compare import list_equal
from ..utils.optional import late_init, to_int


def late_initialize_cluster(params: dict[str, Any], cluster: dict[str, Any]) -> None:
    late_init(params, "namespaces", cluster.get("namespaces"))
    if params.get("shard") is None and cluster.get("shard") is not None:
        params["shard"] = to_int(cluster["shard"])
    if params.get("server") is None:
        params["server"] = cluster.get("server", "")
    if params.get("name") is None:
        params["name"] = cluster.get("name", "")


def _set_and_differs(desired: Any, observed: Any) -> bool:
    return desired is not None and desired != (observed or "")


def is_equal_tls_config(desired: dict[str, Any] | None, observed: dict[str, Any] | None) -> bool:
    if desired is None:
        return True
    if observed is None:
        return False
    return bool(desired.get("insecure", False)) == bool(observed.get("insecure", False)) and not _set_and_differs(
        desired.get("serverName"), observed.get("serverName")
    )


def is_equal_aws_auth_config(desired: dict[str, Any] | None, observed: dict[str, Any] | None) -> bool:
    if desired is None and observed is None:
        return True
    if desired is None or observed is None:
        return False
    return not (
        _set_and_differs(desired.get("clusterName"), observed.get("clusterName"))
        or _set_and_differs(desired.get("roleARN"), observed.get("roleARN"))
    )


def is_equal_exec_provider_config(desired: dict[str, Any] | None, observed: dict[str, Any] | None) -> bool:
    if desired is None and observed is None:
        return True
    if desired is None or observed is None:
        return False
    if not list_equal(desired.get("args"), observed.get("args")):
        return False
    if desired.get("env") is not None and desired["env"] != (observed.get("env") or {}):
        return False
    return not any(
        _set_and_differs(desired.get(key), observed.get(key)) for key in ("command", "apiVersion", "installHint")
    )


def is_equal_config(desired: dict[str, Any] | None, observed: dict[str, Any] | None) -> bool:
    desired = desired or {}
    observed = observed or {}
    return (
        not _set_and_differs(desired.get("username"), observed.get("username"))
        and is_equal_tls_config(desired.get("tlsClientConfig"), observed.get("tlsClientConfig"))
        and is_equal_aws_auth_config(desired.get("awsAuthConfig"), observed.get("awsAuthConfig"))
        and is_equal_exec_provider_config(desired.get("execProviderConfig"), observed.get("execProviderConfig"))
    )


def is_cluster_up_to_date(
    params: dict[str, Any],
    cluster: dict[str, Any],
    observation: dict[str, Any],
    previous_observation: dict[str, Any],
) -> bool:
    """Compare Cluster parameters with the observed cluster and kubeconfig secret version."""
    project = params.get("project")
    if (project is not None and project != cluster.get("project", "")) or (
        project is None and cluster.get("project")
    ):
        return False
    shard = params.get("shard")
    observed_shard = cluster.get("shard")
    if (shard is None) != (observed_shard is None) or (shard is not None and int(shard) != to_int(observed_shard)):
        return False
    return (
        is_equal_config(params.get("config"), cluster.get("config"))
        and list_equal(params.get("namespaces"), cluster.get("namespaces"))
        and (params.get("labels") or {}) == (cluster.get("labels") or {})
        and (params.get("annotations") or {}) == (cluster.get("annotations") or {})
        and (previous_observation or {}).get("kubeconfig") == observation.get("kubeconfig")
    )


class ClusterExternal(ExternalClient):
    kind = KIND_CLUSTER
    service_class = ClusterService
    service: ClusterServiceProtocol

    get_failed = "cannot get Argocd cluster"
    create_failed = "cannot create Argocd cluster"
    update_failed = "cannot update Argocd cluster"
    delete_failed = "cannot delete Argocd cluster"

    def fetch(self, mr: ManagedResource) -> dict[str, Any] | None:
        cluster = self.service.get(name=mr.external_name, server=mr.for_provider.get("server"))
        # A lookup by a stale name falls back to the in-cluster default
        if mr.deleting and cluster.get("name") != mr.external_name:
            return None
        return cluster

    def late_initialize(self, params: dict[str, Any], remote: dict[str, Any], mr: ManagedResource) -> None:
        late_initialize_cluster(params, remote)

    def generate_observation(self, remote: dict[str, Any], mr: ManagedResource) -> dict[str, Any]:
        ref = (mr.for_provider.get("config") or {}).get("kubeconfigSecretRef")
        return generate_cluster_observation(remote, self.secrets.resource_version(ref))

    def is_up_to_date(
        self, mr: ManagedResource, remote: dict[str, Any], previous_at_provider: dict[str, Any]
    ) -> bool:
        return is_cluster_up_to_date(mr.for_provider, remote, mr.at_provider, previous_at_provider)

    def _resolve(self, params: dict[str, Any]) -> dict[str, Any]:
        """Resolve every secret reference of the cluster config.

        Settings read from a kubeconfig are also written back into params
        (server, name when unset, username).
        """
        config = params.get("config") or {}
        tls = config.get("tlsClientConfig") or {}
        resolved: dict[str, Any] = {
            "password": self.secrets.resolve_string(config.get("passwordSecretRef")),
            "bearerToken": self.secrets.resolve_string(config.get("bearerTokenSecretRef")),
            "certData": self.secrets.resolve(tls.get("certDataSecretRef")),
            "keyData": self.secrets.resolve(tls.get("keyDataSecretRef")),
        }
        if not tls.get("caData"):
            resolved["caData"] = self.secrets.resolve(tls.get("caDataSecretRef"))

        kubeconfig_ref = config.get("kubeconfigSecretRef")
        if kubeconfig_ref:
            raw = self.secrets.resolve(kubeconfig_ref)
            if raw is not None:
                kubeconfig = parse_kubeconfig(raw)
                resolved["kubeconfig"] = kubeconfig
                if kubeconfig["server"]:
                    if params.get("name") is None:
                        params["name"] = kubeconfig["server"]
                    params["server"] = kubeconfig["server"]
                if kubeconfig["username"]:
                    params.setdefault("config", {})["username"] = kubeconfig["username"]
        return resolved

    def create_external(self, mr: ManagedResource) -> ExternalCreation:
        secrets = self._resolve(mr.for_provider)
        created = self.service.create(generate_cluster(mr.for_provider, secrets), upsert=False)
        if created.get("name"):
            mr.external_name = created["name"]
        return ExternalCreation()

    def update_external(self, mr: ManagedResource) -> ExternalUpdate:
        secrets = self._resolve(mr.for_provider)
        self.service.update(generate_cluster(mr.for_provider, secrets))
        return ExternalUpdate()

    def delete_external(self, mr: ManagedResource) -> None:
        self.service.delete(server=mr.for_provider.get("server"), name=mr.external_name)
