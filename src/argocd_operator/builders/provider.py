"""Builder for ArgoCD API clients from ProviderConfig specs."""

from __future__ import annotations

import os
from typing import Any

from ..services.argocd.client import ArgocdClient
from ..utils.secrets import SecretResolver

CREDENTIALS_SOURCE_SECRET = "Secret"
CREDENTIALS_SOURCE_FILESYSTEM = "Filesystem"
CREDENTIALS_SOURCE_NONE = "None"


def resolve_auth_token(credentials: dict[str, Any], secrets: SecretResolver) -> str | None:
    """Resolve the bearer token a ProviderConfig points at.

    Args:
        credentials: spec.credentials of the ProviderConfig
        secrets: Secret resolver

    Returns:
        The token, or None when the source is None

    Raises:
        ValueError: If the credentials block is incomplete or the source unsupported
    """
    source = credentials.get("source", CREDENTIALS_SOURCE_NONE)
    if source == CREDENTIALS_SOURCE_SECRET:
        ref = credentials.get("secretRef")
        if not ref:
            raise ValueError("no credentials secret referenced")
        token = secrets.resolve_string(ref)
        return token.strip() if token else token
    if source == CREDENTIALS_SOURCE_FILESYSTEM:
        fs = credentials.get("fs") or {}
        if not fs.get("path"):
            raise ValueError("no credentials fs given")
        with open(fs["path"], encoding="utf-8") as f:
            return f.read().strip()
    if source == CREDENTIALS_SOURCE_NONE:
        return None
    raise ValueError(f"credentials source {source} is not currently supported")


def create_argocd_client_from_config(spec: dict[str, Any], secrets: SecretResolver) -> ArgocdClient:
    """Create an ArgoCD client from a ProviderConfig spec.

    Args:
        spec: ProviderConfig spec
        secrets: Secret resolver for the credentials

    Returns:
        Unconnected ArgocdClient

    Raises:
        ValueError: If configuration is invalid
    """
    server_addr = spec.get("serverAddr")
    if not server_addr:
        raise ValueError("serverAddr is required")

    auth_token = resolve_auth_token(spec.get("credentials") or {}, secrets)

    return ArgocdClient(
        server_addr=server_addr,
        auth_token=auth_token,
        insecure=bool(spec.get("insecure", False)),
        plain_text=bool(spec.get("plainText", False)),
        root_path=spec.get("rootPath") or spec.get("grpcWebRootPath") or "",
        timeout=float(os.getenv("ARGOCD_REQUEST_TIMEOUT_SECONDS", "30")),
    )
