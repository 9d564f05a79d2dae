"""Handler for ApplicationSet CRD."""

from __future__ import annotations

import os
from typing import Any

import kopf

from ..constants import API_GROUP_VERSION, KIND_APPLICATION_SET
from ..controllers.applicationset import ApplicationSetExternal
from .base import ManagedResourceHandler

# Global handler instance
_handler = ManagedResourceHandler(KIND_APPLICATION_SET, ApplicationSetExternal)


@kopf.on.create(API_GROUP_VERSION, KIND_APPLICATION_SET)
@kopf.on.update(API_GROUP_VERSION, KIND_APPLICATION_SET)
@kopf.on.resume(API_GROUP_VERSION, KIND_APPLICATION_SET)
@kopf.timer(API_GROUP_VERSION, KIND_APPLICATION_SET, interval=int(os.getenv("DRIFT_CHECK_INTERVAL_SECONDS", "300")))
def handle_application_set(
    body: dict[str, Any],
    patch: kopf.Patch,
    **kwargs: Any,
) -> None:
    """Handle ApplicationSet resource reconciliation."""
    _handler.reconcile(body, patch)


@kopf.on.delete(API_GROUP_VERSION, KIND_APPLICATION_SET)
def handle_application_set_delete(
    body: dict[str, Any],
    patch: kopf.Patch,
    **kwargs: Any,
) -> None:
    """Handle ApplicationSet resource deletion."""
    _handler.delete(body, patch)
