"""Base handler classes shared by all managed resource handlers."""

from __future__ import annotations

import copy
import logging
import os
import time
from typing import Any, Callable

import kopf

from .. import metrics
from ..constants import (
    ANNOTATION_EXTERNAL_NAME,
    API_GROUP_VERSION,
    CONTROLLER_NAME,
    DELETION_POLICY_ORPHAN,
    FINALIZER,
)
from ..logging import log_resource_event
from ..managed.connector import Connector
from ..managed.external import ExternalClient
from ..managed.resource import ManagedResource
from ..tracing import add_span_attribute, trace_span
from ..utils.conditions import set_creating_condition, set_deleting_condition, set_synced_condition
from ..utils.context import reconcile_deadline, with_correlation_id
from ..utils.errors import sanitize_exception
from ..utils.events import (
    emit_external_created,
    emit_external_deleted,
    emit_external_updated,
    emit_late_initialized,
    emit_reconcile_failed,
    emit_reconcile_started,
)
from ..utils.secrets import upsert_connection_secret
from .shared import get_core_client, get_k8s_client, get_provider_config_with_cache

RECONCILE_TIMEOUT_SECONDS = float(os.getenv("RECONCILE_TIMEOUT_SECONDS", "300"))
RETRY_DELAY_SECONDS = 60
TRANSIENT_RETRY_DELAY_SECONDS = 10


class BaseHandler:
    """Base class for all CRD handlers with common functionality."""

    def __init__(self, kind: str):
        """Initialize base handler.

        Args:
            kind: The Kubernetes resource kind (e.g., "ProviderConfig", "Application")
        """
        self.kind = kind
        self.logger = logging.getLogger(__name__)

    def _get_resource_context(self, meta: dict[str, Any]) -> dict[str, Any]:
        return {
            "name": meta.get("name", "unknown"),
            "namespace": meta.get("namespace") or "",
            "uid": meta.get("uid", "unknown"),
        }

    def _log(self, level: int, meta: dict[str, Any], message: str, event: str, reason: str, **kwargs: Any) -> None:
        ctx = self._get_resource_context(meta)
        log_resource_event(
            self.logger,
            controller=CONTROLLER_NAME,
            resource_kind=self.kind,
            resource_name=ctx["name"],
            namespace=ctx["namespace"],
            uid=ctx["uid"],
            event=event,
            reason=reason,
            message=message,
            level=level,
            **kwargs,
        )

    def log_info(
        self,
        meta: dict[str, Any],
        message: str,
        event: str = "info",
        reason: str = "Info",
        **kwargs: Any,
    ) -> None:
        self._log(logging.INFO, meta, message, event, reason, **kwargs)

    def log_warning(
        self,
        meta: dict[str, Any],
        message: str,
        event: str = "warning",
        reason: str = "Warning",
        **kwargs: Any,
    ) -> None:
        self._log(logging.WARNING, meta, message, event, reason, **kwargs)

    def log_error(
        self,
        meta: dict[str, Any],
        message: str,
        error: Exception | None = None,
        event: str = "error",
        reason: str = "Error",
        **kwargs: Any,
    ) -> None:
        """Log an error-level structured log message.

        Args:
            meta: Kubernetes resource metadata
            message: Log message
            error: Optional exception to include sanitized error details
            event: Event type (default: "error")
            reason: Reason for the event (default: "Error")
            **kwargs: Additional fields to include in the log
        """
        log_data = kwargs.copy()
        if error is not None:
            log_data["error"] = sanitize_exception(error)
            log_data["error_type"] = type(error).__name__
        self._log(logging.ERROR, meta, message, event, reason, **log_data)

    def ensure_finalizer(self, meta: dict[str, Any], patch: kopf.Patch) -> None:
        """Ensure finalizer is present in metadata."""
        finalizers = list(meta.get("finalizers") or [])
        if FINALIZER not in finalizers:
            finalizers.append(FINALIZER)
            patch.metadata["finalizers"] = finalizers

    def remove_finalizer(self, meta: dict[str, Any], patch: kopf.Patch) -> None:
        """Remove finalizer from metadata."""
        finalizers = list(meta.get("finalizers") or [])
        if FINALIZER in finalizers:
            finalizers.remove(FINALIZER)
            patch.metadata["finalizers"] = finalizers if finalizers else None

    def reconcile_with_metrics(
        self,
        meta: dict[str, Any],
        reconcile_fn: Callable[[], None],
    ) -> None:
        """Execute reconciliation with metrics and error handling.

        Args:
            meta: Kubernetes resource metadata
            reconcile_fn: Function to execute for reconciliation
        """
        emit_reconcile_started(meta)
        metrics.reconcile_total.labels(kind=self.kind, result="started").inc()

        start_time = time.time()
        try:
            reconcile_fn()
            metrics.reconcile_total.labels(kind=self.kind, result="success").inc()
        except Exception as e:
            cause = e.__cause__ if isinstance(e, kopf.TemporaryError) and e.__cause__ is not None else e
            sanitized_error = sanitize_exception(cause)
            metrics.error_total.labels(kind=self.kind, error_type=type(cause).__name__).inc()
            self.log_error(meta, "Reconciliation failed", error=cause, reason="ReconciliationFailed")
            emit_reconcile_failed(meta, f"Reconciliation failed: {sanitized_error}")
            metrics.reconcile_total.labels(kind=self.kind, result="error").inc()
            raise
        finally:
            duration = time.time() - start_time
            metrics.reconcile_duration_seconds.labels(kind=self.kind).observe(duration)

    def update_resource_status(
        self,
        patch: kopf.Patch,
        meta: dict[str, Any],
        ready: bool,
        status_data: dict[str, Any] | None = None,
    ) -> None:
        """Update resource status with common fields.

        Args:
            patch: Kopf patch object
            meta: Kubernetes resource metadata
            ready: Whether the resource is ready
            status_data: Additional status data to include
        """
        status_update = {
            "observedGeneration": meta.get("generation", 0),
            **(status_data or {}),
        }

        if ready:
            metrics.resource_status_total.labels(kind=self.kind, status="ready").inc()
        else:
            metrics.resource_status_total.labels(kind=self.kind, status="not_ready").inc()

        patch.status.update(status_update)


def _is_ready(conditions: list[dict[str, Any]]) -> bool:
    return any(c.get("type") == "Ready" and c.get("status") == "True" for c in conditions)


class ManagedResourceHandler(BaseHandler):
    """Drives the observe/create/update/delete cycle of one managed resource kind.

    Args:
        kind: Resource kind
        external_class: ExternalClient subclass implementing the kind
        connector: Connector to use; built from the in-cluster clients when omitted
    """

    def __init__(self, kind: str, external_class: type[ExternalClient], connector: Connector | None = None):
        super().__init__(kind)
        self.external_class = external_class
        self._connector = connector
        self._core_api: Any = None

    @property
    def core_api(self) -> Any:
        if self._core_api is None:
            self._core_api = get_core_client()
        return self._core_api

    @property
    def connector(self) -> Connector:
        if self._connector is None:
            custom_api = get_k8s_client()
            self._connector = Connector(
                self.external_class,
                lambda name: get_provider_config_with_cache(custom_api, name),
                self.core_api,
            )
        return self._connector

    # Persistence helpers

    def _persist_external_name(self, mr: ManagedResource, patch: kopf.Patch) -> None:
        patch.metadata["annotations"] = {ANNOTATION_EXTERNAL_NAME: mr.external_name}

    def _persist_spec(self, mr: ManagedResource, patch: kopf.Patch) -> None:
        patch.spec["forProvider"] = mr.for_provider

    def _publish_connection_details(self, mr: ManagedResource, details: dict[str, bytes]) -> None:
        ref = mr.write_connection_secret_to_ref
        if not details or not ref:
            return
        namespace = ref.get("namespace") or mr.namespace or "default"
        owner = {
            "apiVersion": API_GROUP_VERSION,
            "kind": self.kind,
            "name": mr.name,
            "uid": mr.uid,
            "controller": True,
            "blockOwnerDeletion": True,
        }
        # Cross-namespace owner references are rejected for namespaced owners
        owners = [owner] if mr.namespace in (None, namespace) else None
        upsert_connection_secret(self.core_api, namespace, ref["name"], details, owner_references=owners)

    def _fail(self, mr: ManagedResource, patch: kopf.Patch, error: Exception) -> None:
        """Record a failed pass on the status and hand backoff to kopf."""
        message = sanitize_exception(error)
        mr.conditions = set_synced_condition(mr.conditions, False, message, mr.generation)
        patch.status["conditions"] = mr.conditions
        delay = TRANSIENT_RETRY_DELAY_SECONDS if getattr(error, "retryable", False) else RETRY_DELAY_SECONDS
        raise kopf.TemporaryError(message, delay=delay) from error

    # Flows

    def _sync(self, mr: ManagedResource, patch: kopf.Patch) -> None:
        if not mr.external_name:
            mr.external_name = mr.name
            self._persist_external_name(mr, patch)

        with self.connector.connect(mr) as external:
            observation = external.observe(mr)
            add_span_attribute("resource.exists", observation.resource_exists)

            if not observation.resource_exists:
                mr.conditions = set_creating_condition(mr.conditions, mr.generation)
                before = copy.deepcopy(mr.for_provider)
                creation = external.create(mr)
                self._persist_external_name(mr, patch)
                if mr.for_provider != before:
                    self._persist_spec(mr, patch)
                self._publish_connection_details(mr, creation.connection_details)
                emit_external_created(mr.meta, self.kind, mr.external_name)
                self.log_info(mr.meta, f"Created {self.kind} {mr.external_name}", event="create", reason="Created")
            else:
                if observation.resource_late_initialized:
                    self._persist_spec(mr, patch)
                    metrics.late_initialized_total.labels(kind=self.kind).inc()
                    emit_late_initialized(mr.meta)
                if not observation.resource_up_to_date:
                    self.log_warning(
                        mr.meta, f"{self.kind} {mr.external_name} drifted", event="drift", reason="DriftDetected"
                    )
                    metrics.drift_detected_total.labels(kind=self.kind).inc()
                    update = external.update(mr)
                    self._persist_external_name(mr, patch)
                    self._publish_connection_details(mr, update.connection_details)
                    emit_external_updated(mr.meta, self.kind, mr.external_name)
                    self.log_info(mr.meta, f"Updated {self.kind} {mr.external_name}", event="update", reason="Updated")

        mr.conditions = set_synced_condition(mr.conditions, True, "", mr.generation)

    def reconcile(self, body: dict[str, Any], patch: kopf.Patch) -> None:
        """Converge one resource: observe it, then create, update or leave it."""
        mr = ManagedResource.from_body(self.kind, body)
        if mr.deleting:
            return
        self.ensure_finalizer(body.get("metadata") or {}, patch)

        def _reconcile() -> None:
            with with_correlation_id(mr.uid or mr.name), reconcile_deadline(RECONCILE_TIMEOUT_SECONDS):
                with trace_span(f"reconcile_{self.kind.lower()}", kind=self.kind, attributes={"resource.name": mr.name}):
                    try:
                        self._sync(mr, patch)
                    except Exception as e:
                        self._fail(mr, patch, e)
            self.update_resource_status(
                patch,
                body.get("metadata") or {},
                ready=_is_ready(mr.conditions),
                status_data={"atProvider": mr.at_provider, "conditions": mr.conditions},
            )

        self.reconcile_with_metrics(mr.meta, _reconcile)

    def delete(self, body: dict[str, Any], patch: kopf.Patch) -> None:
        """Remove the external resource unless the deletion policy orphans it."""
        mr = ManagedResource.from_body(self.kind, body)
        mr.deleting = True
        meta = body.get("metadata") or {}

        if mr.deletion_policy == DELETION_POLICY_ORPHAN:
            self.log_info(mr.meta, f"Orphaning {self.kind} {mr.external_name}", event="delete", reason="Orphaned")
            self.remove_finalizer(meta, patch)
            return

        with with_correlation_id(mr.uid or mr.name), reconcile_deadline(RECONCILE_TIMEOUT_SECONDS):
            with trace_span(f"delete_{self.kind.lower()}", kind=self.kind, attributes={"resource.name": mr.name}):
                try:
                    with self.connector.connect(mr) as external:
                        mr.conditions = set_deleting_condition(mr.conditions, mr.generation)
                        observation = external.observe(mr)
                        if observation.resource_exists:
                            external.delete(mr)
                            emit_external_deleted(mr.meta, self.kind, mr.external_name)
                except Exception as e:
                    self.log_error(mr.meta, "Deletion failed", error=e, reason="DeletionFailed")
                    self._fail(mr, patch, e)

        self.log_info(mr.meta, f"Deleted {self.kind} {mr.external_name}", event="delete", reason="Deleted")
        self.remove_finalizer(meta, patch)
