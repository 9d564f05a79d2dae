"""Token: namespaced JWT issued for an ArgoCD project role."""

from __future__ import annotations

import time
from typing import Any

import jwt

from ..builders.token import find_role, find_token, generate_token_observation, parse_duration, token_claims
from ..constants import KIND_TOKEN
from ..errors import ArgocdError, ExternalOperationError, NotFoundError, PermissionDeniedError
from ..managed.external import ExternalClient, ExternalCreation, ExternalUpdate
from ..managed.resource import ManagedResource
from ..services.argocd.base import ProjectServiceProtocol
from ..services.argocd.resources import ProjectService
from ..utils.optional import to_int

ROLE_NOT_FOUND = "failed to get ArgoCD Project Role, verify role name and project configuration"
CLAIMS_PARSE_FAILED = "cannot parse token claims"
CLAIMS_ID_MISSING = "token claims ID is missing"


def is_token_up_to_date(params: dict[str, Any], token: dict[str, Any], now: int | None = None) -> bool:
    """Check identity, lifetime and the renewal windows of an issued token.

    Args:
        params: spec.forProvider of the Token
        token: Observed JWT entry of the project role
        now: Current Unix time, defaults to the wall clock
    """
    iat = to_int(token.get("iat"))
    exp = to_int(token.get("exp"))
    if iat == 0 or (params.get("id") or "") != token.get("id", ""):
        return False

    expires_in = params.get("expiresIn")
    if expires_in is None or expires_in == "0":
        return exp == 0

    now = int(time.time()) if now is None else now
    if exp < now:
        return False
    try:
        if parse_duration(expires_in) != exp - iat:
            return False
        if params.get("renewAfter") is not None and now - iat > parse_duration(params["renewAfter"]):
            return False
        if params.get("renewBefore") is not None and exp - now < parse_duration(params["renewBefore"]):
            return False
    except ValueError:
        return False
    return True


class TokenExternal(ExternalClient):
    kind = KIND_TOKEN
    service_class = ProjectService
    service: ProjectServiceProtocol

    get_failed = "failed to get ArgoCD Project, check if project exists and permissions are correct"
    create_failed = "failed to create ArgoCD Project Token, verify permissions and token configuration"
    update_failed = "failed to create ArgoCD Project Token, verify permissions and token configuration"
    delete_failed = "failed to delete ArgoCD Project Token, token may require manual cleanup"

    def fetch(self, mr: ManagedResource) -> dict[str, Any] | None:
        params = mr.for_provider
        try:
            project = self.service.get(params.get("project", ""))
        except (NotFoundError, PermissionDeniedError) as e:
            if mr.deleting:
                return None
            raise self._wrap("observe", self.get_failed, e) from e

        role = find_role(project, params.get("role", ""))
        if role is None:
            if mr.deleting:
                return None
            raise ExternalOperationError(self.kind, "observe", ROLE_NOT_FOUND)

        token = find_token(role, mr.external_name)
        # A token without iat has not been issued yet
        if to_int(token.get("iat")) == 0:
            return None
        return token

    def late_initialize(self, params: dict[str, Any], remote: dict[str, Any], mr: ManagedResource) -> None:
        if not params.get("id"):
            params["id"] = remote.get("id", "")

    def generate_observation(self, remote: dict[str, Any], mr: ManagedResource) -> dict[str, Any]:
        return generate_token_observation(remote)

    def is_up_to_date(
        self, mr: ManagedResource, remote: dict[str, Any], previous_at_provider: dict[str, Any]
    ) -> bool:
        return is_token_up_to_date(mr.for_provider, remote)

    def _issue(self, mr: ManagedResource, operation: str) -> bytes:
        """Request a token, adopt its jti as external name and return the signed JWT."""
        params = mr.for_provider
        try:
            expires_in = parse_duration(params.get("expiresIn"))
        except ValueError:
            expires_in = 0
        token = self.service.create_token(
            params.get("project", ""),
            params.get("role", ""),
            expires_in=expires_in,
            token_id=params.get("id") or None,
            description=params.get("description") or None,
        )
        try:
            claims = token_claims(token)
        except jwt.PyJWTError as e:
            raise ExternalOperationError(self.kind, operation, CLAIMS_PARSE_FAILED, e) from e
        if not claims.get("jti"):
            raise ExternalOperationError(self.kind, operation, CLAIMS_ID_MISSING)
        mr.external_name = claims["jti"]
        return token.encode("utf-8")

    def create_external(self, mr: ManagedResource) -> ExternalCreation:
        return ExternalCreation(connection_details={"token": self._issue(mr, "create")})

    def _delete_token(self, mr: ManagedResource) -> None:
        params = mr.for_provider
        self.service.delete_token(
            params.get("project", ""),
            params.get("role", ""),
            to_int(mr.at_provider.get("iat")),
            token_id=mr.at_provider.get("id") or mr.external_name,
        )

    def update_external(self, mr: ManagedResource) -> ExternalUpdate:
        # Tokens are immutable; rotation replaces the old one
        try:
            self._delete_token(mr)
        except NotFoundError:
            pass
        except ArgocdError as e:
            raise self._wrap("update", self.delete_failed, e) from e
        return ExternalUpdate(connection_details={"token": self._issue(mr, "update")})

    def delete_external(self, mr: ManagedResource) -> None:
        self._delete_token(mr)
