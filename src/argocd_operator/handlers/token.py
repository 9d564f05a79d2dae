"""Handler for Token CRD."""

from __future__ import annotations

import os
from typing import Any

import kopf

from ..constants import API_GROUP_VERSION, KIND_TOKEN
from ..controllers.token import TokenExternal
from .base import ManagedResourceHandler

# Global handler instance
_handler = ManagedResourceHandler(KIND_TOKEN, TokenExternal)


@kopf.on.create(API_GROUP_VERSION, KIND_TOKEN)
@kopf.on.update(API_GROUP_VERSION, KIND_TOKEN)
@kopf.on.resume(API_GROUP_VERSION, KIND_TOKEN)
@kopf.timer(API_GROUP_VERSION, KIND_TOKEN, interval=int(os.getenv("DRIFT_CHECK_INTERVAL_SECONDS", "300")))
def handle_token(
    body: dict[str, Any],
    patch: kopf.Patch,
    **kwargs: Any,
) -> None:
    """Handle Token resource reconciliation."""
    _handler.reconcile(body, patch)


@kopf.on.delete(API_GROUP_VERSION, KIND_TOKEN)
def handle_token_delete(
    body: dict[str, Any],
    patch: kopf.Patch,
    **kwargs: Any,
) -> None:
    """Handle Token resource deletion."""
    _handler.delete(body, patch)
