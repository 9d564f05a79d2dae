"""Handler for Repository CRD."""

from __future__ import annotations

import os
from typing import Any

import kopf

from ..constants import API_GROUP_VERSION, KIND_REPOSITORY
from ..controllers.repository import RepositoryExternal
from .base import ManagedResourceHandler

# Global handler instance
_handler = ManagedResourceHandler(KIND_REPOSITORY, RepositoryExternal)


@kopf.on.create(API_GROUP_VERSION, KIND_REPOSITORY)
@kopf.on.update(API_GROUP_VERSION, KIND_REPOSITORY)
@kopf.on.resume(API_GROUP_VERSION, KIND_REPOSITORY)
@kopf.timer(API_GROUP_VERSION, KIND_REPOSITORY, interval=int(os.getenv("DRIFT_CHECK_INTERVAL_SECONDS", "300")))
def handle_repository(
    body: dict[str, Any],
    patch: kopf.Patch,
    **kwargs: Any,
) -> None:
    """Handle Repository resource reconciliation."""
    _handler.reconcile(body, patch)


@kopf.on.delete(API_GROUP_VERSION, KIND_REPOSITORY)
def handle_repository_delete(
    body: dict[str, Any],
    patch: kopf.Patch,
    **kwargs: Any,
) -> None:
    """Handle Repository resource deletion."""
    _handler.delete(body, patch)
