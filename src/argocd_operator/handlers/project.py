"""Handler for Project CRD."""

from __future__ import annotations

import os
from typing import Any

import kopf

from ..constants import API_GROUP_VERSION, KIND_PROJECT
from ..controllers.project import ProjectExternal
from .base import ManagedResourceHandler

# Global handler instance
_handler = ManagedResourceHandler(KIND_PROJECT, ProjectExternal)


@kopf.on.create(API_GROUP_VERSION, KIND_PROJECT)
@kopf.on.update(API_GROUP_VERSION, KIND_PROJECT)
@kopf.on.resume(API_GROUP_VERSION, KIND_PROJECT)
@kopf.timer(API_GROUP_VERSION, KIND_PROJECT, interval=int(os.getenv("DRIFT_CHECK_INTERVAL_SECONDS", "300")))
def handle_project(
    body: dict[str, Any],
    patch: kopf.Patch,
    **kwargs: Any,
) -> None:
    """Handle Project resource reconciliation."""
    _handler.reconcile(body, patch)


@kopf.on.delete(API_GROUP_VERSION, KIND_PROJECT)
def handle_project_delete(
    body: dict[str, Any],
    patch: kopf.Patch,
    **kwargs: Any,
) -> None:
    """Handle Project resource deletion."""
    _handler.delete(body, patch)
