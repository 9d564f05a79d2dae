"""Handler for ProviderConfig CRD."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

import kopf

from .. import metrics
from ..builders.provider import create_argocd_client_from_config
from ..constants import API_GROUP_VERSION, KIND_PROVIDER_CONFIG
from ..errors import ArgocdError, PermissionDeniedError
from ..tracing import trace_span
from ..utils.cache import invalidate_cache, make_cache_key
from ..utils.conditions import (
    set_auth_valid_condition,
    set_endpoint_reachable_condition,
    set_ready_condition,
)
from ..utils.errors import sanitize_exception
from ..utils.events import emit_validate_failed, emit_validate_succeeded
from ..utils.secrets import SecretResolver
from .base import BaseHandler
from .shared import get_core_client


class ProviderConfigHandler(BaseHandler):
    """Handler for ProviderConfig resources."""

    def __init__(self, core_api: Any = None):
        super().__init__(KIND_PROVIDER_CONFIG)
        self._core_api = core_api

    @property
    def core_api(self) -> Any:
        if self._core_api is None:
            self._core_api = get_core_client()
        return self._core_api

    def reconcile(
        self,
        spec: dict[str, Any],
        meta: dict[str, Any],
        status: dict[str, Any],
        patch: kopf.Patch,
    ) -> None:
        """Validate a ProviderConfig and probe the ArgoCD endpoint it points at."""
        name = meta.get("name", "unknown")
        generation = meta.get("generation", 0)
        # Connectors must see the new spec on their next pass
        invalidate_cache(make_cache_key(KIND_PROVIDER_CONFIG, "", name))

        with trace_span("reconcile_provider_config", kind=KIND_PROVIDER_CONFIG, attributes={"provider.name": name}):
            conditions = status.get("conditions", [])

            if not spec.get("serverAddr"):
                message = "serverAddr is required"
                self.log_error(meta, message, reason="ValidationFailed")
                emit_validate_failed(meta, message)
                conditions = set_ready_condition(conditions, False, message, generation)
                self.update_resource_status(patch, meta, False, {"conditions": conditions})
                raise kopf.PermanentError(message)

            try:
                argocd = create_argocd_client_from_config(spec, SecretResolver(self.core_api))
                auth_valid = True
                auth_message = "Credentials resolved"
            except Exception as e:
                auth_valid = False
                sanitized_error = sanitize_exception(e)
                auth_message = f"Cannot resolve credentials: {sanitized_error}"
                metrics.error_total.labels(kind=KIND_PROVIDER_CONFIG, error_type=type(e).__name__).inc()
                self.log_error(meta, auth_message, error=e, reason="AuthFailed")

            connected = False
            if auth_valid:
                emit_validate_succeeded(meta)
                with trace_span("test_connectivity", kind=KIND_PROVIDER_CONFIG):
                    try:
                        with argocd:
                            version = argocd.get_version()
                        connected = True
                        endpoint_message = f"ArgoCD {version.get('Version', 'unknown')} is reachable"
                        metrics.provider_connectivity_total.labels(provider=name, status="connected").inc()
                    except PermissionDeniedError as e:
                        auth_valid = False
                        auth_message = f"Authentication failed: {sanitize_exception(e)}"
                        endpoint_message = "Endpoint is reachable but rejected the credentials"
                        connected = True
                        metrics.provider_connectivity_total.labels(provider=name, status="connected").inc()
                    except ArgocdError as e:
                        endpoint_message = f"Connectivity test failed: {sanitize_exception(e)}"
                        metrics.error_total.labels(kind=KIND_PROVIDER_CONFIG, error_type=type(e).__name__).inc()
                        metrics.provider_connectivity_total.labels(provider=name, status="error").inc()
                        self.log_error(meta, endpoint_message, error=e, reason="ConnectivityFailed")
            else:
                endpoint_message = "Cannot test connectivity due to credentials failure"

            conditions = set_auth_valid_condition(conditions, auth_valid, auth_message, generation)
            conditions = set_endpoint_reachable_condition(conditions, connected, endpoint_message, generation)

            ready = auth_valid and connected
            ready_message = "ProviderConfig is ready" if ready else "ProviderConfig is not ready"
            conditions = set_ready_condition(conditions, ready, ready_message, generation)

            status_data = {
                "connected": connected,
                "lastConnectTime": datetime.now(timezone.utc).isoformat() if connected else None,
                "conditions": conditions,
            }
            self.update_resource_status(patch, meta, ready, status_data)

    def delete(
        self,
        meta: dict[str, Any],
        patch: kopf.Patch,
    ) -> None:
        """Handle ProviderConfig deletion."""
        self.log_info(meta, "ProviderConfig is being deleted", event="deletion", reason="Deletion")
        invalidate_cache(make_cache_key(KIND_PROVIDER_CONFIG, "", meta.get("name", "")))
        self.remove_finalizer(meta, patch)


# Global handler instance
_handler = ProviderConfigHandler()


@kopf.on.create(API_GROUP_VERSION, KIND_PROVIDER_CONFIG)
@kopf.on.update(API_GROUP_VERSION, KIND_PROVIDER_CONFIG)
@kopf.on.resume(API_GROUP_VERSION, KIND_PROVIDER_CONFIG)
def handle_provider_config(
    spec: dict[str, Any],
    meta: dict[str, Any],
    status: dict[str, Any],
    patch: kopf.Patch,
    **kwargs: Any,
) -> None:
    """Handle ProviderConfig reconciliation."""
    _handler.ensure_finalizer(meta, patch)
    _handler.reconcile_with_metrics(meta, lambda: _handler.reconcile(spec, meta, status, patch))


@kopf.on.delete(API_GROUP_VERSION, KIND_PROVIDER_CONFIG)
def handle_provider_config_delete(
    meta: dict[str, Any],
    patch: kopf.Patch,
    **kwargs: Any,
) -> None:
    """Handle ProviderConfig deletion."""
    _handler.delete(meta, patch)
