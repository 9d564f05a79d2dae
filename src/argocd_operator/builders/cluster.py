"""Converters between Cluster parameters and ArgoCD Cluster payloads.

Lossy fields: password, bearer token, TLS client certificate and key, and
anything taken from a kubeconfig secret are write-only on the wire and never
mapped back.
"""

from __future__ import annotations

import base64
import copy
from typing import Any

import yaml

from ..utils.optional import set_if, string_to_optional, to_int

KUBECONFIG_PARSE_FAILED = "unable to parse kubeconfig"


def _named(entries: list[dict[str, Any]] | None, name: str, field: str) -> dict[str, Any]:
    for entry in entries or []:
        if entry.get("name") == name:
            return entry.get(field) or {}
    raise ValueError(f"{KUBECONFIG_PARSE_FAILED}: {field} {name!r} not found")


def parse_kubeconfig(data: bytes | str) -> dict[str, Any]:
    """Extract the connection settings of the current context of a kubeconfig.

    Args:
        data: Raw kubeconfig document

    Returns:
        Dict with server, serverName, insecure, caData, certData, keyData,
        bearerToken and username; base64 fields stay encoded

    Raises:
        ValueError: If the document is not a usable kubeconfig
    """
    try:
        config = yaml.safe_load(data)
    except yaml.YAMLError as e:
        raise ValueError(f"{KUBECONFIG_PARSE_FAILED}: {e}") from e
    if not isinstance(config, dict):
        raise ValueError(f"{KUBECONFIG_PARSE_FAILED}: not a mapping")

    contexts = config.get("contexts") or []
    context_name = config.get("current-context") or (contexts[0].get("name") if contexts else None)
    if not context_name:
        raise ValueError(f"{KUBECONFIG_PARSE_FAILED}: no context")
    context = _named(contexts, context_name, "context")
    cluster = _named(config.get("clusters"), context.get("cluster", ""), "cluster")
    user = _named(config.get("users"), context["user"], "user") if context.get("user") else {}

    return {
        "server": cluster.get("server", ""),
        "serverName": cluster.get("tls-server-name", ""),
        "insecure": bool(cluster.get("insecure-skip-tls-verify", False)),
        "caData": cluster.get("certificate-authority-data", ""),
        "certData": user.get("client-certificate-data", ""),
        "keyData": user.get("client-key-data", ""),
        "bearerToken": user.get("token", ""),
        "username": user.get("username", ""),
    }


def _b64(value: bytes) -> str:
    return base64.b64encode(value).decode("ascii")


def generate_cluster(params: dict[str, Any], secrets: dict[str, Any] | None = None) -> dict[str, Any]:
    """Build the Cluster payload for create and update.

    Args:
        params: spec.forProvider of the Cluster
        secrets: Resolved secret material: password, bearerToken, certData,
            keyData, caData (raw bytes or str) and kubeconfig (parsed)
    """
    secrets = secrets or {}
    config_params = params.get("config") or {}
    cluster: dict[str, Any] = {}
    set_if(cluster, "server", params.get("server"))
    set_if(cluster, "name", params.get("name"))

    config: dict[str, Any] = {"tlsClientConfig": {"insecure": False}}
    set_if(config, "username", config_params.get("username"))
    set_if(config, "password", secrets.get("password"))
    set_if(config, "bearerToken", secrets.get("bearerToken"))

    tls_params = config_params.get("tlsClientConfig")
    tls = config["tlsClientConfig"]
    if tls_params is not None:
        tls["insecure"] = bool(tls_params.get("insecure", False))
        set_if(tls, "serverName", tls_params.get("serverName"))
        if secrets.get("certData") is not None:
            tls["certData"] = _b64(secrets["certData"])
        if secrets.get("keyData") is not None:
            tls["keyData"] = _b64(secrets["keyData"])
        # Inline caData wins over the secret reference
        if tls_params.get("caData"):
            tls["caData"] = tls_params["caData"]
        elif secrets.get("caData") is not None:
            tls["caData"] = _b64(secrets["caData"])

    aws = config_params.get("awsAuthConfig")
    if aws is not None:
        config["awsAuthConfig"] = {
            "clusterName": aws.get("clusterName") or "",
            "roleARN": aws.get("roleARN") or "",
        }

    exec_provider = config_params.get("execProviderConfig")
    if exec_provider is not None:
        wire_exec: dict[str, Any] = {
            "command": exec_provider.get("command") or "",
            "apiVersion": exec_provider.get("apiVersion") or "",
            "installHint": exec_provider.get("installHint") or "",
        }
        set_if(wire_exec, "args", copy.deepcopy(exec_provider.get("args")))
        set_if(wire_exec, "env", copy.deepcopy(exec_provider.get("env")))
        config["execProviderConfig"] = wire_exec

    kubeconfig = secrets.get("kubeconfig")
    if kubeconfig:
        if kubeconfig.get("server"):
            cluster["server"] = kubeconfig["server"]
            cluster.setdefault("name", kubeconfig["server"])
        if kubeconfig.get("bearerToken"):
            config["bearerToken"] = kubeconfig["bearerToken"]
        if kubeconfig.get("username"):
            config["username"] = kubeconfig["username"]
        tls = {"insecure": kubeconfig.get("insecure", False)}
        for key in ("caData", "certData", "keyData", "serverName"):
            if kubeconfig.get(key):
                tls[key] = kubeconfig[key]
        config["tlsClientConfig"] = tls

    cluster["config"] = config
    set_if(cluster, "namespaces", copy.deepcopy(params.get("namespaces")))
    if params.get("shard") is not None:
        cluster["shard"] = int(params["shard"])
    set_if(cluster, "project", params.get("project"))
    set_if(cluster, "labels", copy.deepcopy(params.get("labels")))
    set_if(cluster, "annotations", copy.deepcopy(params.get("annotations")))
    return cluster


def cluster_parameters_from_wire(cluster: dict[str, Any]) -> dict[str, Any]:
    """Map an observed Cluster back to parameters for the fields the wire can express."""
    params: dict[str, Any] = {}
    set_if(params, "server", string_to_optional(cluster.get("server")))
    set_if(params, "name", string_to_optional(cluster.get("name")))
    wire_config = cluster.get("config") or {}
    config: dict[str, Any] = {}
    set_if(config, "username", string_to_optional(wire_config.get("username")))
    wire_tls = wire_config.get("tlsClientConfig")
    if wire_tls is not None:
        tls: dict[str, Any] = {"insecure": bool(wire_tls.get("insecure", False))}
        set_if(tls, "serverName", string_to_optional(wire_tls.get("serverName")))
        set_if(tls, "caData", string_to_optional(wire_tls.get("caData")))
        config["tlsClientConfig"] = tls
    if wire_config.get("awsAuthConfig") is not None:
        aws = wire_config["awsAuthConfig"]
        config["awsAuthConfig"] = {}
        set_if(config["awsAuthConfig"], "clusterName", string_to_optional(aws.get("clusterName")))
        set_if(config["awsAuthConfig"], "roleARN", string_to_optional(aws.get("roleARN")))
    if wire_config.get("execProviderConfig") is not None:
        wire_exec = wire_config["execProviderConfig"]
        exec_params: dict[str, Any] = {}
        for key in ("command", "apiVersion", "installHint"):
            set_if(exec_params, key, string_to_optional(wire_exec.get(key)))
        set_if(exec_params, "args", copy.deepcopy(wire_exec.get("args")))
        set_if(exec_params, "env", copy.deepcopy(wire_exec.get("env")))
        config["execProviderConfig"] = exec_params
    params["config"] = config
    set_if(params, "namespaces", copy.deepcopy(cluster.get("namespaces")))
    if cluster.get("shard") is not None:
        params["shard"] = to_int(cluster["shard"])
    set_if(params, "project", string_to_optional(cluster.get("project")))
    set_if(params, "labels", copy.deepcopy(cluster.get("labels")))
    set_if(params, "annotations", copy.deepcopy(cluster.get("annotations")))
    return params


def generate_cluster_observation(cluster: dict[str, Any], kubeconfig_version: str = "") -> dict[str, Any]:
    info = cluster.get("info") or {}
    cache = info.get("cacheInfo") or {}
    state = info.get("connectionState") or {}
    observation: dict[str, Any] = {
        "clusterInfo": {
            "connectionState": {
                "status": state.get("status", ""),
                "message": state.get("message", ""),
                "attemptedAt": state.get("attemptedAt"),
            },
            "serverVersion": info.get("serverVersion", ""),
            "cacheInfo": {
                "resourcesCount": to_int(cache.get("resourcesCount")),
                "apisCount": to_int(cache.get("apisCount")),
                "lastCacheSyncTime": cache.get("lastCacheSyncTime"),
            },
            "applicationsCount": to_int(info.get("applicationsCount")),
        }
    }
    if kubeconfig_version:
        observation["kubeconfig"] = {"secret": {"resourceVersion": kubeconfig_version}}
    return observation
