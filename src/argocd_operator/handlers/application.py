"""Handler for Application CRD."""

from __future__ import annotations

import os
from typing import Any

import kopf

from ..constants import API_GROUP_VERSION, KIND_APPLICATION
from ..controllers.application import ApplicationExternal
from .base import ManagedResourceHandler

# Global handler instance
_handler = ManagedResourceHandler(KIND_APPLICATION, ApplicationExternal)


@kopf.on.create(API_GROUP_VERSION, KIND_APPLICATION)
@kopf.on.update(API_GROUP_VERSION, KIND_APPLICATION)
@kopf.on.resume(API_GROUP_VERSION, KIND_APPLICATION)
@kopf.timer(API_GROUP_VERSION, KIND_APPLICATION, interval=int(os.getenv("DRIFT_CHECK_INTERVAL_SECONDS", "300")))
def handle_application(
    body: dict[str, Any],
    patch: kopf.Patch,
    **kwargs: Any,
) -> None:
    """Handle Application resource reconciliation."""
    _handler.reconcile(body, patch)


@kopf.on.delete(API_GROUP_VERSION, KIND_APPLICATION)
def handle_application_delete(
    body: dict[str, Any],
    patch: kopf.Patch,
    **kwargs: Any,
) -> None:
    """Handle Application resource deletion."""
    _handler.delete(body, patch)
