"""Opens an ArgoCD session for one reconcile pass and hands out the kind's external client."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Callable, Iterator

from kubernetes import client

from ..builders.provider import create_argocd_client_from_config
from ..services.argocd.client import ArgocdClient
from ..utils.secrets import SecretResolver
from .external import ExternalClient
from .resource import ManagedResource


class Connector:
    """Connects managed resources of one kind to ArgoCD.

    Args:
        external_class: ExternalClient subclass for the kind
        get_provider_config: Returns the ProviderConfig object for a name
        core_api: Kubernetes CoreV1Api used for secrets
        client_factory: Builds an ArgocdClient from a ProviderConfig spec and a resolver
    """

    def __init__(
        self,
        external_class: type[ExternalClient],
        get_provider_config: Callable[[str], dict[str, Any]],
        core_api: client.CoreV1Api,
        client_factory: Callable[[dict[str, Any], SecretResolver], ArgocdClient] = create_argocd_client_from_config,
    ) -> None:
        self.external_class = external_class
        self.get_provider_config = get_provider_config
        self.core_api = core_api
        self.client_factory = client_factory

    @contextmanager
    def connect(self, mr: ManagedResource) -> Iterator[ExternalClient]:
        """Yield the external client for mr; the session is closed on exit."""
        provider_config = self.get_provider_config(mr.provider_config_ref)
        secrets = SecretResolver(self.core_api)
        argocd = self.client_factory(provider_config.get("spec") or {}, secrets)
        argocd.connect()
        try:
            yield self.external_class(self.external_class.service_class(argocd), secrets)
        finally:
            argocd.close()
