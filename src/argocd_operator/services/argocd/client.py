"""HTTP transport to the ArgoCD API server."""

from __future__ import annotations

import logging
import time
from typing import Any

import httpx

from ... import metrics
from ...errors import (
    AlreadyExistsError,
    ArgocdError,
    NotFoundError,
    PermissionDeniedError,
    TransientError,
)
from ...utils.context import check_deadline, remaining_time
from ...utils.rate_limit import rate_limit_argocd

logger = logging.getLogger(__name__)

# gRPC status codes the API gateway reports in error bodies
GRPC_ALREADY_EXISTS = 6
GRPC_NOT_FOUND = 5
GRPC_PERMISSION_DENIED = 7
GRPC_UNAVAILABLE = 14
GRPC_DEADLINE_EXCEEDED = 4


def classify_error(status_code: int, body: Any) -> ArgocdError:
    """Map an error response onto the operator's error taxonomy.

    Args:
        status_code: HTTP status code
        body: Decoded JSON body ({"error", "code", "message"}) or raw text

    Returns:
        The classified error (not raised)
    """
    message = f"HTTP {status_code}"
    grpc_code = None
    if isinstance(body, dict):
        message = body.get("message") or body.get("error") or message
        code = body.get("code")
        grpc_code = code if isinstance(code, int) else None
    elif body:
        message = str(body)[:200]

    if status_code == 404 or grpc_code == GRPC_NOT_FOUND:
        return NotFoundError(status_code, message, grpc_code)
    if status_code == 403 or grpc_code == GRPC_PERMISSION_DENIED:
        return PermissionDeniedError(status_code, message, grpc_code)
    if status_code == 409 or grpc_code == GRPC_ALREADY_EXISTS:
        return AlreadyExistsError(status_code, message, grpc_code)
    if status_code == 429 or status_code >= 500 or grpc_code in (GRPC_UNAVAILABLE, GRPC_DEADLINE_EXCEEDED):
        return TransientError(status_code, message, grpc_code)
    return ArgocdError(status_code, message, grpc_code)


class ArgocdClient:
    """Synchronous ArgoCD REST client holding one connection pool.

    Use as a context manager, or call connect() and close() explicitly:

        with ArgocdClient("argocd-server:443", token) as client:
            client.request("GET", "/api/version")

    Args:
        server_addr: host[:port] of the ArgoCD API server
        auth_token: Bearer token, or None for anonymous access
        insecure: Skip TLS certificate verification
        plain_text: Use http instead of https
        root_path: Path prefix the API server is served under
        timeout: Per-request timeout in seconds, further bounded by the reconcile deadline
        transport: Optional httpx transport (tests use httpx.MockTransport)
    """

    def __init__(
        self,
        server_addr: str,
        auth_token: str | None = None,
        insecure: bool = False,
        plain_text: bool = False,
        root_path: str = "",
        timeout: float = 30.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        scheme = "http" if plain_text else "https"
        root = "/" + root_path.strip("/") if root_path and root_path.strip("/") else ""
        self.base_url = f"{scheme}://{server_addr}{root}"
        self.insecure = insecure
        self.timeout = timeout
        self._auth_token = auth_token
        self._transport = transport
        self._client: httpx.Client | None = None

    def connect(self) -> ArgocdClient:
        if self._client is None:
            headers = {"Content-Type": "application/json"}
            if self._auth_token:
                headers["Authorization"] = f"Bearer {self._auth_token}"
            self._client = httpx.Client(
                base_url=self.base_url,
                headers=headers,
                timeout=self.timeout,
                verify=not self.insecure,
                transport=self._transport,
            )
        return self

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None

    @property
    def connected(self) -> bool:
        return self._client is not None

    def __enter__(self) -> ArgocdClient:
        return self.connect()

    def __exit__(self, *args: object) -> None:
        self.close()

    def _effective_timeout(self) -> float:
        remaining = remaining_time()
        if remaining is None:
            return self.timeout
        return max(0.001, min(self.timeout, remaining))

    def request(
        self,
        method: str,
        path: str,
        params: dict[str, Any] | None = None,
        json_data: Any = None,
        operation: str | None = None,
    ) -> dict[str, Any]:
        """Issue one API call and return its decoded JSON body.

        Args:
            method: HTTP method
            path: Path below the server root, e.g. "/api/v1/projects/default"
            params: Query parameters; None values are dropped
            json_data: JSON request body
            operation: Metric label for the call, defaults to the method

        Returns:
            Decoded response body, {} for empty bodies

        Raises:
            ArgocdError: Classified API or transport failure
            ReconcileTimeoutError: If the reconcile deadline has already passed
            RuntimeError: If the client is not connected
        """
        if self._client is None:
            raise RuntimeError("ArgoCD client is not connected")
        check_deadline()

        query = {k: v for k, v in (params or {}).items() if v is not None}
        op = operation or method.lower()
        start_time = time.time()
        try:
            response = rate_limit_argocd(self._client.request)(
                method,
                path,
                params=query,
                json=json_data,
                timeout=self._effective_timeout(),
            )
        except httpx.TimeoutException as e:
            metrics.api_call_total.labels(api_type="argocd", operation=op, result="timeout").inc()
            raise TransientError(0, f"request timed out: {e}") from e
        except httpx.TransportError as e:
            metrics.api_call_total.labels(api_type="argocd", operation=op, result="error").inc()
            raise TransientError(0, f"transport error: {e}") from e
        finally:
            metrics.api_call_duration_seconds.labels(api_type="argocd", operation=op).observe(
                time.time() - start_time
            )

        if response.status_code >= 400:
            try:
                body: Any = response.json()
            except ValueError:
                body = response.text
            error = classify_error(response.status_code, body)
            logger.debug(f"ArgoCD API {method} {path} failed: {error}")
            metrics.api_call_total.labels(api_type="argocd", operation=op, result="error").inc()
            raise error

        metrics.api_call_total.labels(api_type="argocd", operation=op, result="success").inc()
        if not response.content:
            return {}
        try:
            result = response.json()
        except ValueError as e:
            raise ArgocdError(response.status_code, f"invalid JSON response: {response.text[:200]}") from e
        return result if isinstance(result, dict) else {"items": result}

    def get_version(self) -> dict[str, Any]:
        """Return the server version document (GET /api/version)."""
        return self.request("GET", "/api/version", operation="get_version")
