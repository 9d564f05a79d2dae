"""Exception types raised by the reconciliation engine and its clients."""

from __future__ import annotations


class OperatorError(Exception):
    """Base class for all classified operator errors."""

    retryable = False


class ArgocdError(OperatorError):
    """Error response from the ArgoCD API.

    Args:
        status_code: HTTP status code of the response (0 when no response was received)
        message: Primary error message
        grpc_code: gRPC status code reported by the API gateway, if any
    """

    def __init__(self, status_code: int, message: str, grpc_code: int | None = None) -> None:
        self.status_code = status_code
        self.message = message
        self.grpc_code = grpc_code
        super().__init__(str(self))

    def __str__(self) -> str:
        return f"ArgoCD API error ({self.status_code}): {self.message}"


class NotFoundError(ArgocdError):
    """The external resource does not exist."""


class PermissionDeniedError(ArgocdError):
    """The API refused access to the external resource.

    ArgoCD answers with this for resources that were removed out of band when
    the caller's RBAC only covers named resources.
    """


class AlreadyExistsError(ArgocdError):
    """Create was called for a resource the API already has."""


class TransientError(ArgocdError):
    """Network, timeout, throttling or server-side failure."""

    retryable = True


class ReconcileTimeoutError(OperatorError):
    """The deadline of the current reconcile pass has passed."""

    retryable = True


class SecretNotFoundError(OperatorError):
    """A referenced Kubernetes secret does not exist."""

    def __init__(self, namespace: str, name: str) -> None:
        self.namespace = namespace
        self.name = name
        super().__init__(f"cannot get Kubernetes secret: secret '{name}' not found in namespace '{namespace}'")


class SecretKeyNotFoundError(OperatorError):
    """A referenced Kubernetes secret exists but lacks the requested key."""

    def __init__(self, namespace: str, name: str, key: str) -> None:
        self.namespace = namespace
        self.name = name
        self.key = key
        super().__init__(f"key {key} is not found in referenced Kubernetes secret")


class ExternalOperationError(OperatorError):
    """Failure of an external operation, wrapped with the kind and operation.

    Args:
        kind: Resource kind the operation was issued for
        operation: One of observe, create, update, delete
        message: Static, kind-specific message
        cause: Underlying error, if any
    """

    def __init__(
        self,
        kind: str,
        operation: str,
        message: str,
        cause: Exception | None = None,
    ) -> None:
        self.kind = kind
        self.operation = operation
        self.message = message
        self.cause = cause
        text = message if cause is None else f"{message}: {cause}"
        super().__init__(text)

    @property
    def retryable(self) -> bool:  # type: ignore[override]
        return bool(getattr(self.cause, "retryable", False))
