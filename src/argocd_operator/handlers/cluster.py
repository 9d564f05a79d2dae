"""Handler for Cluster CRD."""

from __future__ import annotations

import os
from typing import Any

import kopf

from ..constants import API_GROUP_VERSION, KIND_CLUSTER
from ..controllers.cluster import ClusterExternal
from .base import ManagedResourceHandler

# Global handler instance
_handler = ManagedResourceHandler(KIND_CLUSTER, ClusterExternal)


@kopf.on.create(API_GROUP_VERSION, KIND_CLUSTER)
@kopf.on.update(API_GROUP_VERSION, KIND_CLUSTER)
@kopf.on.resume(API_GROUP_VERSION, KIND_CLUSTER)
@kopf.timer(API_GROUP_VERSION, KIND_CLUSTER, interval=int(os.getenv("DRIFT_CHECK_INTERVAL_SECONDS", "300")))
def handle_cluster(
    body: dict[str, Any],
    patch: kopf.Patch,
    **kwargs: Any,
) -> None:
    """Handle Cluster resource reconciliation."""
    _handler.reconcile(body, patch)


@kopf.on.delete(API_GROUP_VERSION, KIND_CLUSTER)
def handle_cluster_delete(
    body: dict[str, Any],
    patch: kopf.Patch,
    **kwargs: Any,
) -> None:
    """Handle Cluster resource deletion."""
    _handler.delete(body, patch)
