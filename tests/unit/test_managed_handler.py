"""Tests for the managed resource reconcile and delete flows."""

from __future__ import annotations

from typing import Any
from unittest.mock import MagicMock, Mock, patch

import kopf
import pytest

from argocd_operator.constants import ANNOTATION_EXTERNAL_NAME, FINALIZER
from argocd_operator.errors import ExternalOperationError, TransientError
from argocd_operator.handlers.base import (
    RETRY_DELAY_SECONDS,
    TRANSIENT_RETRY_DELAY_SECONDS,
    ManagedResourceHandler,
)
from argocd_operator.managed.external import (
    ExternalClient,
    ExternalCreation,
    ExternalObservation,
    ExternalUpdate,
)


def make_body(
    name: str = "guestbook",
    namespace: str | None = None,
    annotations: dict[str, str] | None = None,
    spec: dict[str, Any] | None = None,
    finalizers: list[str] | None = None,
    deleting: bool = False,
) -> dict[str, Any]:
    metadata: dict[str, Any] = {
        "name": name,
        "uid": "uid-1",
        "generation": 2,
        "annotations": annotations or {},
        "finalizers": finalizers if finalizers is not None else [FINALIZER],
    }
    if namespace:
        metadata["namespace"] = namespace
    if deleting:
        metadata["deletionTimestamp"] = "2024-01-01T00:00:00Z"
    return {
        "metadata": metadata,
        "spec": spec if spec is not None else {"forProvider": {"project": "default"}},
        "status": {},
    }


def make_handler(external: Any) -> ManagedResourceHandler:
    connector = MagicMock()
    connector.connect.return_value.__enter__.return_value = external
    connector.connect.return_value.__exit__.return_value = False
    handler = ManagedResourceHandler("Application", ExternalClient, connector=connector)
    handler._core_api = Mock()
    return handler


def condition(patch: kopf.Patch, condition_type: str) -> dict[str, Any]:
    return next(c for c in patch.status["conditions"] if c["type"] == condition_type)


@pytest.fixture(autouse=True)
def quiet_events():
    with patch("argocd_operator.utils.events.kopf") as mock_kopf:
        yield mock_kopf


class TestManagedResourceReconcile:
    """Test cases for ManagedResourceHandler.reconcile."""

    def test_creates_missing_resource(self):
        """Test that an absent external resource is created and the external name persisted."""
        external = Mock()
        external.observe.return_value = ExternalObservation(resource_exists=False)
        external.create.return_value = ExternalCreation()
        handler = make_handler(external)
        patch = kopf.Patch()

        handler.reconcile(make_body(finalizers=[]), patch)

        external.create.assert_called_once()
        external.update.assert_not_called()
        assert patch.metadata["annotations"] == {ANNOTATION_EXTERNAL_NAME: "guestbook"}
        assert patch.metadata["finalizers"] == [FINALIZER]
        assert condition(patch, "Synced")["status"] == "True"
        assert condition(patch, "Ready")["reason"] == "Creating"
        assert patch.status["observedGeneration"] == 2

    def test_create_persists_external_name_assigned_by_create(self):
        """Test that a name assigned during create replaces the default external name."""
        external = Mock()
        external.observe.return_value = ExternalObservation(resource_exists=False)

        def create(mr):
            mr.external_name = "https://github.com/org/repo.git"
            return ExternalCreation()

        external.create.side_effect = create
        handler = make_handler(external)
        patch = kopf.Patch()

        handler.reconcile(make_body(), patch)

        assert patch.metadata["annotations"] == {ANNOTATION_EXTERNAL_NAME: "https://github.com/org/repo.git"}

    def test_create_persists_spec_written_back(self):
        """Test that parameters filled in by create are written to spec.forProvider."""
        external = Mock()
        external.observe.return_value = ExternalObservation(resource_exists=False)

        def create(mr):
            mr.for_provider["server"] = "https://kubernetes.example:6443"
            return ExternalCreation()

        external.create.side_effect = create
        handler = make_handler(external)
        patch = kopf.Patch()

        handler.reconcile(make_body(), patch)

        assert patch.spec["forProvider"]["server"] == "https://kubernetes.example:6443"

    def test_create_does_not_touch_spec_when_unchanged(self):
        """Test that spec is not patched when create leaves the parameters alone."""
        external = Mock()
        external.observe.return_value = ExternalObservation(resource_exists=False)
        external.create.return_value = ExternalCreation()
        handler = make_handler(external)
        patch = kopf.Patch()

        handler.reconcile(make_body(), patch)

        assert "spec" not in patch

    def test_up_to_date_resource_is_left_alone(self):
        """Test that an existing, up to date resource is neither created nor updated."""
        external = Mock()
        external.observe.return_value = ExternalObservation(resource_exists=True, resource_up_to_date=True)
        handler = make_handler(external)
        patch = kopf.Patch()

        handler.reconcile(make_body(annotations={ANNOTATION_EXTERNAL_NAME: "guestbook"}), patch)

        external.create.assert_not_called()
        external.update.assert_not_called()
        assert condition(patch, "Synced")["status"] == "True"

    def test_drift_triggers_update(self):
        """Test that an out of date resource is updated."""
        external = Mock()
        external.observe.return_value = ExternalObservation(resource_exists=True, resource_up_to_date=False)
        external.update.return_value = ExternalUpdate()
        handler = make_handler(external)
        patch = kopf.Patch()

        handler.reconcile(make_body(annotations={ANNOTATION_EXTERNAL_NAME: "guestbook"}), patch)

        external.update.assert_called_once()
        external.create.assert_not_called()

    def test_late_initialized_spec_is_persisted(self):
        """Test that late-initialized parameters are written to spec.forProvider."""
        external = Mock()

        def observe(mr):
            mr.for_provider["description"] = "from argocd"
            return ExternalObservation(
                resource_exists=True, resource_up_to_date=True, resource_late_initialized=True
            )

        external.observe.side_effect = observe
        handler = make_handler(external)
        patch = kopf.Patch()

        handler.reconcile(make_body(annotations={ANNOTATION_EXTERNAL_NAME: "guestbook"}), patch)

        assert patch.spec["forProvider"] == {"project": "default", "description": "from argocd"}

    @patch("argocd_operator.handlers.base.upsert_connection_secret")
    def test_connection_details_are_published(self, mock_upsert):
        """Test that connection details returned by create land in the referenced secret."""
        external = Mock()
        external.observe.return_value = ExternalObservation(resource_exists=False)
        external.create.return_value = ExternalCreation(connection_details={"token": b"jwt"})
        handler = make_handler(external)
        spec = {
            "forProvider": {"project": "default", "role": "ci"},
            "writeConnectionSecretToRef": {"name": "ci-token", "namespace": "team-a"},
        }

        handler.reconcile(make_body(namespace="team-a", spec=spec), kopf.Patch())

        mock_upsert.assert_called_once()
        args, kwargs = mock_upsert.call_args
        assert args[1:] == ("team-a", "ci-token", {"token": b"jwt"})
        assert kwargs["owner_references"][0]["uid"] == "uid-1"

    @patch("argocd_operator.handlers.base.upsert_connection_secret")
    def test_cross_namespace_secret_has_no_owner(self, mock_upsert):
        """Test that a secret outside the resource namespace is written without owner references."""
        external = Mock()
        external.observe.return_value = ExternalObservation(resource_exists=False)
        external.create.return_value = ExternalCreation(connection_details={"token": b"jwt"})
        handler = make_handler(external)
        spec = {
            "forProvider": {"project": "default", "role": "ci"},
            "writeConnectionSecretToRef": {"name": "ci-token", "namespace": "other"},
        }

        handler.reconcile(make_body(namespace="team-a", spec=spec), kopf.Patch())

        assert mock_upsert.call_args.kwargs["owner_references"] is None

    def test_transient_failure_retries_quickly(self):
        """Test that a retryable error records Synced=False and asks kopf for a short delay."""
        external = Mock()
        external.observe.side_effect = ExternalOperationError(
            "Application", "observe", "cannot list Argocd application", TransientError(503, "unavailable")
        )
        handler = make_handler(external)
        patch = kopf.Patch()

        with pytest.raises(kopf.TemporaryError) as exc_info:
            handler.reconcile(make_body(annotations={ANNOTATION_EXTERNAL_NAME: "guestbook"}), patch)

        assert exc_info.value.delay == TRANSIENT_RETRY_DELAY_SECONDS
        synced = condition(patch, "Synced")
        assert synced["status"] == "False"
        assert synced["reason"] == "ReconcileError"
        assert "cannot list Argocd application" in synced["message"]

    def test_permanent_failure_retries_slowly(self):
        """Test that a non-retryable error uses the default retry delay."""
        external = Mock()
        external.observe.return_value = ExternalObservation(resource_exists=False)
        external.create.side_effect = ValueError("invalid duration: 'x'")
        handler = make_handler(external)
        patch = kopf.Patch()

        with pytest.raises(kopf.TemporaryError) as exc_info:
            handler.reconcile(make_body(), patch)

        assert exc_info.value.delay == RETRY_DELAY_SECONDS
        assert isinstance(exc_info.value.__cause__, ValueError)

    def test_deleting_resource_is_skipped(self):
        """Test that reconcile does nothing for a resource being deleted."""
        external = Mock()
        handler = make_handler(external)
        patch = kopf.Patch()

        handler.reconcile(make_body(deleting=True), patch)

        handler.connector.connect.assert_not_called()
        assert not patch


class TestManagedResourceDelete:
    """Test cases for ManagedResourceHandler.delete."""

    def test_orphan_policy_keeps_external_resource(self):
        """Test that the Orphan policy only removes the finalizer."""
        external = Mock()
        handler = make_handler(external)
        patch = kopf.Patch()
        body = make_body(
            spec={"forProvider": {}, "deletionPolicy": "Orphan"},
            annotations={ANNOTATION_EXTERNAL_NAME: "guestbook"},
            deleting=True,
        )

        handler.delete(body, patch)

        handler.connector.connect.assert_not_called()
        assert patch.metadata["finalizers"] is None

    def test_deletes_existing_resource(self):
        """Test that an existing external resource is deleted before the finalizer goes."""
        external = Mock()
        external.observe.return_value = ExternalObservation(resource_exists=True, resource_up_to_date=True)
        handler = make_handler(external)
        patch = kopf.Patch()

        handler.delete(make_body(annotations={ANNOTATION_EXTERNAL_NAME: "guestbook"}, deleting=True), patch)

        external.delete.assert_called_once()
        mr = external.delete.call_args[0][0]
        assert mr.deleting is True
        assert patch.metadata["finalizers"] is None

    def test_absent_resource_only_removes_finalizer(self):
        """Test that nothing is deleted when the external resource is already gone."""
        external = Mock()
        external.observe.return_value = ExternalObservation(resource_exists=False)
        handler = make_handler(external)
        patch = kopf.Patch()

        handler.delete(make_body(annotations={ANNOTATION_EXTERNAL_NAME: "guestbook"}, deleting=True), patch)

        external.delete.assert_not_called()
        assert patch.metadata["finalizers"] is None

    def test_failed_delete_keeps_finalizer(self):
        """Test that a failed delete keeps the finalizer and is retried."""
        external = Mock()
        external.observe.return_value = ExternalObservation(resource_exists=True)
        external.delete.side_effect = ExternalOperationError(
            "Application", "delete", "cannot delete Argocd application", TransientError(0, "timeout")
        )
        handler = make_handler(external)
        patch = kopf.Patch()

        with pytest.raises(kopf.TemporaryError):
            handler.delete(make_body(annotations={ANNOTATION_EXTERNAL_NAME: "guestbook"}, deleting=True), patch)

        assert "finalizers" not in patch.metadata
        assert condition(patch, "Synced")["status"] == "False"
