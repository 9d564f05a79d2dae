"""Tests for base handler functionality."""

from __future__ import annotations

from unittest.mock import Mock, patch

import kopf
import pytest

from argocd_operator.constants import FINALIZER
from argocd_operator.errors import NotFoundError
from argocd_operator.handlers.base import BaseHandler


class TestBaseHandler:
    """Test cases for BaseHandler class."""

    def test_init(self):
        """Test handler initialization."""
        handler = BaseHandler(kind="TestKind")
        assert handler.kind == "TestKind"
        assert handler.logger is not None

    def test_ensure_finalizer_adds_when_missing(self):
        """Test that finalizer is added when not present."""
        handler = BaseHandler(kind="TestKind")
        meta = {"finalizers": []}
        patch = kopf.Patch()

        handler.ensure_finalizer(meta, patch)

        assert FINALIZER in patch.metadata["finalizers"]

    def test_ensure_finalizer_keeps_other_finalizers(self):
        """Test that existing finalizers are preserved when ours is added."""
        handler = BaseHandler(kind="TestKind")
        meta = {"finalizers": ["other-finalizer"]}
        patch = kopf.Patch()

        handler.ensure_finalizer(meta, patch)

        assert patch.metadata["finalizers"] == ["other-finalizer", FINALIZER]

    def test_ensure_finalizer_no_patch_when_present(self):
        """Test that no patch is made if the finalizer is already present."""
        handler = BaseHandler(kind="TestKind")
        meta = {"finalizers": [FINALIZER, "other-finalizer"]}
        patch = kopf.Patch()

        handler.ensure_finalizer(meta, patch)

        assert "finalizers" not in patch.metadata

    def test_ensure_finalizer_creates_list_when_absent(self):
        """Test that finalizers list is created when absent."""
        handler = BaseHandler(kind="TestKind")
        patch = kopf.Patch()

        handler.ensure_finalizer({}, patch)

        assert patch.metadata["finalizers"] == [FINALIZER]

    def test_remove_finalizer(self):
        """Test that finalizer is removed."""
        handler = BaseHandler(kind="TestKind")
        meta = {"finalizers": [FINALIZER, "other-finalizer"]}
        patch = kopf.Patch()

        handler.remove_finalizer(meta, patch)

        assert patch.metadata["finalizers"] == ["other-finalizer"]

    def test_remove_finalizer_sets_none_when_empty(self):
        """Test that finalizers is set to None when last finalizer is removed."""
        handler = BaseHandler(kind="TestKind")
        meta = {"finalizers": [FINALIZER]}
        patch = kopf.Patch()

        handler.remove_finalizer(meta, patch)

        assert "finalizers" in patch.metadata
        assert patch.metadata["finalizers"] is None

    def test_remove_finalizer_no_error_when_absent(self):
        """Test that removing absent finalizer doesn't error."""
        handler = BaseHandler(kind="TestKind")
        meta = {"finalizers": ["other-finalizer"]}
        patch = kopf.Patch()

        handler.remove_finalizer(meta, patch)

        assert "finalizers" not in patch.metadata

    @patch("argocd_operator.handlers.base.emit_reconcile_started")
    @patch("argocd_operator.handlers.base.metrics")
    def test_reconcile_with_metrics_success(self, mock_metrics, mock_emit_started):
        """Test successful reconciliation with metrics."""
        handler = BaseHandler(kind="TestKind")
        meta = {"name": "test-resource", "namespace": "default"}
        reconcile_fn = Mock()

        handler.reconcile_with_metrics(meta, reconcile_fn)

        reconcile_fn.assert_called_once()
        mock_emit_started.assert_called_once_with(meta)
        mock_metrics.reconcile_total.labels.assert_any_call(kind="TestKind", result="started")
        mock_metrics.reconcile_total.labels.assert_any_call(kind="TestKind", result="success")
        assert mock_metrics.reconcile_duration_seconds.labels.called

    @patch("argocd_operator.handlers.base.emit_reconcile_failed")
    @patch("argocd_operator.handlers.base.emit_reconcile_started")
    @patch("argocd_operator.handlers.base.metrics")
    @patch("argocd_operator.handlers.base.sanitize_exception")
    def test_reconcile_with_metrics_failure(
        self, mock_sanitize, mock_metrics, mock_emit_started, mock_emit_failed
    ):
        """Test failed reconciliation with metrics and error handling."""
        handler = BaseHandler(kind="TestKind")
        meta = {"name": "test-resource", "namespace": "default"}
        test_error = ValueError("Test error")
        mock_sanitize.return_value = "Sanitized error"

        def failing_fn():
            raise test_error

        with pytest.raises(ValueError):
            handler.reconcile_with_metrics(meta, failing_fn)

        # Once for the event message, once for the structured log
        assert mock_sanitize.call_count == 2
        mock_sanitize.assert_any_call(test_error)

        mock_emit_started.assert_called_once_with(meta)
        mock_emit_failed.assert_called_once_with(meta, "Reconciliation failed: Sanitized error")

        mock_metrics.error_total.labels.assert_called_with(kind="TestKind", error_type="ValueError")
        mock_metrics.reconcile_total.labels.assert_any_call(kind="TestKind", result="error")

    @patch("argocd_operator.handlers.base.emit_reconcile_failed")
    @patch("argocd_operator.handlers.base.emit_reconcile_started")
    @patch("argocd_operator.handlers.base.metrics")
    def test_reconcile_with_metrics_reports_cause_of_temporary_error(
        self, mock_metrics, mock_emit_started, mock_emit_failed
    ):
        """Test that a TemporaryError is counted by the type of the error it wraps."""
        handler = BaseHandler(kind="TestKind")
        meta = {"name": "test-resource"}

        def failing_fn():
            try:
                raise NotFoundError(404, "gone")
            except NotFoundError as e:
                raise kopf.TemporaryError("retry later", delay=10) from e

        with pytest.raises(kopf.TemporaryError):
            handler.reconcile_with_metrics(meta, failing_fn)

        mock_metrics.error_total.labels.assert_called_with(kind="TestKind", error_type="NotFoundError")

    @patch("argocd_operator.handlers.base.metrics")
    def test_update_resource_status_ready(self, mock_metrics):
        """Test updating resource status to ready."""
        handler = BaseHandler(kind="TestKind")
        meta = {"name": "test-resource", "generation": 5}
        patch = kopf.Patch()
        status_data = {"atProvider": {"id": "abc"}, "conditions": []}

        handler.update_resource_status(patch, meta, ready=True, status_data=status_data)

        assert patch.status["observedGeneration"] == 5
        assert patch.status["atProvider"] == {"id": "abc"}
        assert patch.status["conditions"] == []
        mock_metrics.resource_status_total.labels.assert_called_with(kind="TestKind", status="ready")

    @patch("argocd_operator.handlers.base.metrics")
    def test_update_resource_status_not_ready(self, mock_metrics):
        """Test updating resource status to not ready."""
        handler = BaseHandler(kind="TestKind")
        meta = {"name": "test-resource", "generation": 3}
        patch = kopf.Patch()

        handler.update_resource_status(patch, meta, ready=False, status_data={"atProvider": {}})

        assert patch.status["observedGeneration"] == 3
        assert patch.status["atProvider"] == {}
        mock_metrics.resource_status_total.labels.assert_called_with(kind="TestKind", status="not_ready")

    @patch("argocd_operator.handlers.base.metrics")
    def test_update_resource_status_minimal(self, mock_metrics):
        """Test updating resource status with minimal data."""
        handler = BaseHandler(kind="TestKind")
        patch = kopf.Patch()

        handler.update_resource_status(patch, {"name": "test-resource"}, ready=True)

        assert patch.status["observedGeneration"] == 0
        mock_metrics.resource_status_total.labels.assert_called_with(kind="TestKind", status="ready")
