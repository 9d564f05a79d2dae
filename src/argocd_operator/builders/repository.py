"""Converters between Repository parameters and ArgoCD Repository payloads.

Lossy fields: the secret-backed credentials (password, SSH key, TLS client
certificate and key, GitHub App private key) are write-only on the wire and
never mapped back.
"""

from __future__ import annotations

from typing import Any

from ..utils.optional import set_if, string_to_optional, to_int

# forProvider reference key -> wire field and observation key
SECRET_FIELDS = {
    "passwordRef": "password",
    "sshPrivateKeyRef": "sshPrivateKey",
    "tlsClientCertDataRef": "tlsClientCertData",
    "tlsClientCertKeyRef": "tlsClientCertKey",
    "githubAppPrivateKeyRef": "githubAppPrivateKey",
}

STRING_FIELDS = ("username", "type", "name")
BOOL_FIELDS = ("insecure", "enableLfs", "enableOCI", "inheritedCreds")
INT_FIELDS = ("githubAppID", "githubAppInstallationID")


def generate_repository(params: dict[str, Any], credentials: dict[str, str] | None = None) -> dict[str, Any]:
    """Build the Repository payload for create and update.

    Args:
        params: spec.forProvider of the Repository
        credentials: Resolved secret values keyed by wire field name
    """
    repo: dict[str, Any] = {"repo": params.get("repo", "")}
    for key in STRING_FIELDS:
        set_if(repo, key, params.get(key))
    set_if(repo, "project", params.get("project"))
    for key in BOOL_FIELDS:
        if params.get(key) is not None:
            repo[key] = bool(params[key])
    for key in INT_FIELDS:
        if params.get(key) is not None:
            repo[key] = int(params[key])
    set_if(repo, "githubAppEnterpriseBaseUrl", params.get("githubAppEnterpriseBaseUrl"))
    for field, value in (credentials or {}).items():
        repo[field] = value
    return repo


def repository_parameters_from_wire(repo: dict[str, Any]) -> dict[str, Any]:
    """Map an observed Repository back to parameters; empty and zero values are unset."""
    params: dict[str, Any] = {"repo": repo.get("repo", "")}
    for key in STRING_FIELDS:
        set_if(params, key, string_to_optional(repo.get(key)))
    set_if(params, "project", string_to_optional(repo.get("project")))
    for key in BOOL_FIELDS:
        params[key] = bool(repo.get(key, False))
    for key in INT_FIELDS:
        value = to_int(repo.get(key))
        set_if(params, key, value or None)
    set_if(params, "githubAppEnterpriseBaseUrl", string_to_optional(repo.get("githubAppEnterpriseBaseUrl")))
    return params


def generate_repository_observation(repo: dict[str, Any], secret_versions: dict[str, str]) -> dict[str, Any]:
    """status.atProvider: connection state plus the resourceVersion of every referenced secret.

    Args:
        repo: Observed Repository
        secret_versions: resourceVersion keyed by observation key; empty versions are skipped
    """
    state = repo.get("connectionState") or {}
    connection_state: dict[str, Any] = {}
    set_if(connection_state, "status", string_to_optional(state.get("status")))
    set_if(connection_state, "message", string_to_optional(state.get("message")))
    set_if(connection_state, "attemptedAt", state.get("attemptedAt"))
    observation: dict[str, Any] = {"connectionState": connection_state}
    for key, version in secret_versions.items():
        if version:
            observation[key] = {"secret": {"resourceVersion": version}}
    return observation
