"""Utilities for managing Kubernetes secrets."""

from __future__ import annotations

import base64
import time
from typing import Any

from kubernetes import client

from .. import metrics
from ..constants import FIELD_MANAGER, LABEL_MANAGED_BY
from ..errors import SecretKeyNotFoundError, SecretNotFoundError
from .context import check_deadline
from .rate_limit import rate_limit_k8s


def _decode(value: Any) -> bytes:
    # The client returns secret data base64 encoded; older releases hand back bytes
    if isinstance(value, bytes):
        return value
    return base64.b64decode(value)


def read_secret(api: client.CoreV1Api, namespace: str, secret_name: str) -> client.V1Secret:
    """Read a secret, mapping 404 to SecretNotFoundError.

    Args:
        api: Kubernetes API client
        namespace: Namespace of the secret
        secret_name: Name of the secret

    Returns:
        The secret object

    Raises:
        SecretNotFoundError: If the secret does not exist
        client.exceptions.ApiException: For any other API failure
    """
    check_deadline()
    start_time = time.time()
    try:
        secret = rate_limit_k8s(api.read_namespaced_secret)(name=secret_name, namespace=namespace)
        metrics.api_call_total.labels(api_type="k8s", operation="read_secret", result="success").inc()
        return secret
    except client.exceptions.ApiException as e:
        metrics.api_call_total.labels(api_type="k8s", operation="read_secret", result="error").inc()
        if e.status == 404:
            raise SecretNotFoundError(namespace, secret_name) from e
        raise
    finally:
        metrics.api_call_duration_seconds.labels(api_type="k8s", operation="read_secret").observe(
            time.time() - start_time
        )


def get_secret_value(
    api: client.CoreV1Api,
    namespace: str,
    secret_name: str,
    key: str,
) -> bytes:
    """Get a value from a Kubernetes secret.

    Args:
        api: Kubernetes API client
        namespace: Namespace of the secret
        secret_name: Name of the secret
        key: Key in the secret

    Returns:
        Raw secret value

    Raises:
        SecretNotFoundError: If the secret does not exist
        SecretKeyNotFoundError: If the secret exists but lacks the key
    """
    secret = read_secret(api, namespace, secret_name)
    data = secret.data or {}
    if key not in data:
        raise SecretKeyNotFoundError(namespace, secret_name, key)
    return _decode(data[key])


class SecretResolver:
    """Resolves secret references for one reconcile pass.

    Values are never cached; every call reads the secret again so that
    rotated credentials are picked up on the next pass.

    Args:
        api: Kubernetes CoreV1Api client
    """

    def __init__(self, api: client.CoreV1Api) -> None:
        self.api = api

    def resolve(self, ref: dict[str, Any] | None) -> bytes | None:
        """Return the bytes a {namespace, name, key} reference points at.

        A reference without a key resolves to None once the secret is found.
        """
        if not ref:
            return None
        namespace = ref.get("namespace", "")
        name = ref.get("name", "")
        key = ref.get("key")
        if not key:
            read_secret(self.api, namespace, name)
            return None
        return get_secret_value(self.api, namespace, name, key)

    def resolve_string(self, ref: dict[str, Any] | None) -> str | None:
        value = self.resolve(ref)
        return value.decode("utf-8") if value is not None else None

    def resource_version(self, ref: dict[str, Any] | None) -> str:
        """Return the resourceVersion of the referenced secret, or "" when there is no reference."""
        if not ref:
            return ""
        secret = read_secret(self.api, ref.get("namespace", ""), ref.get("name", ""))
        return secret.metadata.resource_version or ""


def upsert_connection_secret(
    api: client.CoreV1Api,
    namespace: str,
    secret_name: str,
    data: dict[str, bytes],
    owner_references: list[dict[str, Any]] | None = None,
) -> None:
    """Create or update the connection secret of a managed resource.

    Args:
        api: Kubernetes API client
        namespace: Namespace for the secret
        secret_name: Name of the secret
        data: Connection details (raw bytes, encoded here)
        owner_references: Owner references for the secret
    """
    encoded = {k: base64.b64encode(v).decode("utf-8") for k, v in data.items()}
    secret = client.V1Secret(
        metadata=client.V1ObjectMeta(
            name=secret_name,
            namespace=namespace,
            owner_references=owner_references or None,
            labels={LABEL_MANAGED_BY: FIELD_MANAGER},
        ),
        type="connection.argocd.cloud37.dev/v1alpha1",
        data=encoded,
    )
    try:
        rate_limit_k8s(api.create_namespaced_secret)(
            namespace=namespace,
            body=secret,
            field_manager=FIELD_MANAGER,
        )
        metrics.api_call_total.labels(api_type="k8s", operation="create_secret", result="success").inc()
    except client.exceptions.ApiException as e:
        if e.status != 409:
            metrics.api_call_total.labels(api_type="k8s", operation="create_secret", result="error").inc()
            raise
        rate_limit_k8s(api.patch_namespaced_secret)(
            name=secret_name,
            namespace=namespace,
            body={"data": encoded},
            field_manager=FIELD_MANAGER,
        )
        metrics.api_call_total.labels(api_type="k8s", operation="patch_secret", result="success").inc()
