"""Shared utilities for handlers."""

from __future__ import annotations

import time
from typing import Any

from kubernetes import client

from .. import metrics
from ..constants import API_GROUP, API_VERSION, KIND_PROVIDER_CONFIG, PLURAL_PROVIDER_CONFIGS
from ..utils.cache import get_cached_object, make_cache_key, set_cached_object
from ..utils.rate_limit import rate_limit_k8s

_config_loaded = False


def _load_config() -> None:
    global _config_loaded
    if _config_loaded:
        return
    from kubernetes import config

    try:
        config.load_incluster_config()
    except config.ConfigException:
        config.load_kube_config()
    _config_loaded = True


def get_provider_config_with_cache(api: Any, name: str) -> dict[str, Any]:
    """Get a cluster-scoped ProviderConfig with caching.

    Args:
        api: Kubernetes CustomObjectsApi instance
        name: Name of the ProviderConfig

    Returns:
        ProviderConfig object

    Raises:
        client.exceptions.ApiException: If the ProviderConfig is missing or the API failed
    """
    cache_key = make_cache_key(KIND_PROVIDER_CONFIG, "", name)
    cached = get_cached_object(cache_key)

    if cached is not None:
        metrics.api_call_total.labels(api_type="k8s", operation="get_provider_config", result="cache_hit").inc()
        return cached

    start_time = time.time()
    try:
        provider_config = rate_limit_k8s(api.get_cluster_custom_object)(
            group=API_GROUP,
            version=API_VERSION,
            plural=PLURAL_PROVIDER_CONFIGS,
            name=name,
        )
        metrics.api_call_total.labels(api_type="k8s", operation="get_provider_config", result="success").inc()
        set_cached_object(cache_key, provider_config)
        return provider_config
    except client.exceptions.ApiException:
        metrics.api_call_total.labels(api_type="k8s", operation="get_provider_config", result="error").inc()
        raise
    finally:
        duration = time.time() - start_time
        metrics.api_call_duration_seconds.labels(api_type="k8s", operation="get_provider_config").observe(duration)


def get_k8s_client() -> client.CustomObjectsApi:
    """Get Kubernetes CustomObjectsApi client."""
    _load_config()
    return client.CustomObjectsApi()


def get_core_client() -> client.CoreV1Api:
    """Get Kubernetes CoreV1Api client (secrets)."""
    _load_config()
    return client.CoreV1Api()
