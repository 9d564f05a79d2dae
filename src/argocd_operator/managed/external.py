"""The reconciliation state machine shared by every resource kind.

An ExternalClient implements observe, create, update and delete once. Each
kind subclasses it and fills in a small set of hooks: how to fetch the
external resource, how to late-initialize the spec from it, how to map it to
the observed status, how to judge availability and drift, and how to issue
the create, update and delete calls.
"""

from __future__ import annotations

import copy
import logging
from dataclasses import dataclass, field
from typing import Any, ClassVar

from .. import metrics
from ..errors import ArgocdError, ExternalOperationError, NotFoundError, PermissionDeniedError
from ..tracing import trace_span
from ..utils.conditions import available, set_ready_from
from ..utils.context import check_deadline
from ..utils.secrets import SecretResolver
from .resource import ManagedResource

logger = logging.getLogger(__name__)


@dataclass
class ExternalObservation:
    """Result of observe: does the resource exist, is it in sync, was the spec late-initialized."""

    resource_exists: bool = False
    resource_up_to_date: bool = False
    resource_late_initialized: bool = False

    def __post_init__(self) -> None:
        if not self.resource_exists:
            self.resource_up_to_date = False
            self.resource_late_initialized = False


@dataclass
class ExternalCreation:
    connection_details: dict[str, bytes] = field(default_factory=dict)


@dataclass
class ExternalUpdate:
    connection_details: dict[str, bytes] = field(default_factory=dict)


class ExternalClient:
    """Generic observe/create/update/delete flow parameterized by per-kind hooks.

    Args:
        service: The kind's ArgoCD service client
        secrets: Resolver for secret references, None for kinds without any
    """

    kind: ClassVar[str] = ""
    service_class: ClassVar[type] = object

    get_failed: ClassVar[str] = "cannot get external resource"
    create_failed: ClassVar[str] = "cannot create external resource"
    update_failed: ClassVar[str] = "cannot update external resource"
    delete_failed: ClassVar[str] = "cannot delete external resource"

    def __init__(self, service: Any, secrets: SecretResolver | None = None) -> None:
        self.service = service
        self.secrets = secrets

    # Hooks

    def fetch(self, mr: ManagedResource) -> dict[str, Any] | None:
        """Get the external resource; None means it does not exist."""
        raise NotImplementedError

    def late_initialize(self, params: dict[str, Any], remote: dict[str, Any], mr: ManagedResource) -> None:
        """Fill unset fields of params from remote, in place."""

    def generate_observation(self, remote: dict[str, Any], mr: ManagedResource) -> dict[str, Any]:
        return {}

    def availability(self, at_provider: dict[str, Any]) -> tuple[str, str, str]:
        return available()

    def is_up_to_date(
        self, mr: ManagedResource, remote: dict[str, Any], previous_at_provider: dict[str, Any]
    ) -> bool:
        raise NotImplementedError

    def create_external(self, mr: ManagedResource) -> ExternalCreation:
        raise NotImplementedError

    def update_external(self, mr: ManagedResource) -> ExternalUpdate:
        raise NotImplementedError

    def delete_external(self, mr: ManagedResource) -> None:
        raise NotImplementedError

    # Operations

    def _count(self, operation: str, result: str) -> None:
        metrics.external_operations_total.labels(kind=self.kind, operation=operation, result=result).inc()

    def _wrap(self, operation: str, message: str, error: Exception) -> ExternalOperationError:
        self._count(operation, "error")
        return ExternalOperationError(self.kind, operation, message, error)

    def observe(self, mr: ManagedResource) -> ExternalObservation:
        """Fetch the external resource and compare it with the desired spec.

        Mutates mr.for_provider (late-init), mr.at_provider and mr.conditions.

        Raises:
            ExternalOperationError: If the fetch failed for a reason other than absence
        """
        if not mr.external_name:
            return ExternalObservation()

        check_deadline()
        with trace_span(f"observe_{self.kind.lower()}", kind=self.kind, attributes={"external.name": mr.external_name}):
            try:
                remote = self.fetch(mr)
            except NotFoundError:
                self._count("observe", "not_found")
                return ExternalObservation()
            except PermissionDeniedError as e:
                # Removed out of band while the resource itself is going away
                if mr.deleting:
                    self._count("observe", "not_found")
                    return ExternalObservation()
                raise self._wrap("observe", self.get_failed, e) from e
            except ArgocdError as e:
                raise self._wrap("observe", self.get_failed, e) from e

            if remote is None:
                self._count("observe", "not_found")
                return ExternalObservation()

            before = copy.deepcopy(mr.for_provider)
            self.late_initialize(mr.for_provider, remote, mr)

            previous_at_provider = mr.at_provider
            mr.at_provider = self.generate_observation(remote, mr)
            mr.conditions = set_ready_from(mr.conditions, self.availability(mr.at_provider), mr.generation)

            up_to_date = self.is_up_to_date(mr, remote, previous_at_provider)
            self._count("observe", "success")
            return ExternalObservation(
                resource_exists=True,
                resource_up_to_date=up_to_date,
                resource_late_initialized=before != mr.for_provider,
            )

    def create(self, mr: ManagedResource) -> ExternalCreation:
        check_deadline()
        with trace_span(f"create_{self.kind.lower()}", kind=self.kind):
            try:
                creation = self.create_external(mr)
            except ArgocdError as e:
                raise self._wrap("create", self.create_failed, e) from e
        self._count("create", "success")
        return creation

    def update(self, mr: ManagedResource) -> ExternalUpdate:
        check_deadline()
        with trace_span(f"update_{self.kind.lower()}", kind=self.kind, attributes={"external.name": mr.external_name}):
            try:
                result = self.update_external(mr)
            except ArgocdError as e:
                raise self._wrap("update", self.update_failed, e) from e
        self._count("update", "success")
        return result

    def delete(self, mr: ManagedResource) -> None:
        """Delete the external resource; an already missing resource is success."""
        check_deadline()
        with trace_span(f"delete_{self.kind.lower()}", kind=self.kind, attributes={"external.name": mr.external_name}):
            try:
                self.delete_external(mr)
            except NotFoundError:
                logger.debug(f"{self.kind} {mr.external_name} already gone")
            except ArgocdError as e:
                raise self._wrap("delete", self.delete_failed, e) from e
        self._count("delete", "success")
