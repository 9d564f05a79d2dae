"""In-memory view of a managed custom resource during one reconcile pass."""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Any

from ..constants import ANNOTATION_EXTERNAL_NAME, DEFAULT_PROVIDER_CONFIG, DELETION_POLICY_DELETE


@dataclass
class ManagedResource:
    """A custom resource as the engine sees it.

    ``for_provider`` is a private deep copy of ``spec.forProvider``; late
    initialization mutates it and the handler persists it when it changed.
    ``at_provider`` and ``conditions`` become the new status.
    """

    kind: str
    name: str
    namespace: str | None = None
    uid: str = ""
    generation: int = 0
    for_provider: dict[str, Any] = field(default_factory=dict)
    at_provider: dict[str, Any] = field(default_factory=dict)
    conditions: list[dict[str, Any]] = field(default_factory=list)
    annotations: dict[str, str] = field(default_factory=dict)
    deleting: bool = False
    provider_config_ref: str = DEFAULT_PROVIDER_CONFIG
    deletion_policy: str = DELETION_POLICY_DELETE
    write_connection_secret_to_ref: dict[str, str] | None = None

    @classmethod
    def from_body(cls, kind: str, body: dict[str, Any]) -> ManagedResource:
        """Build the view from a kopf body (or any mapping with metadata/spec/status)."""
        meta = body.get("metadata") or {}
        spec = body.get("spec") or {}
        status = body.get("status") or {}
        return cls(
            kind=kind,
            name=meta.get("name", ""),
            namespace=meta.get("namespace") or None,
            uid=meta.get("uid", ""),
            generation=meta.get("generation", 0) or 0,
            for_provider=copy.deepcopy(dict(spec.get("forProvider") or {})),
            at_provider=copy.deepcopy(dict(status.get("atProvider") or {})),
            conditions=copy.deepcopy(list(status.get("conditions") or [])),
            annotations=dict(meta.get("annotations") or {}),
            deleting=bool(meta.get("deletionTimestamp")),
            provider_config_ref=(spec.get("providerConfigRef") or {}).get("name") or DEFAULT_PROVIDER_CONFIG,
            deletion_policy=spec.get("deletionPolicy") or DELETION_POLICY_DELETE,
            write_connection_secret_to_ref=copy.deepcopy(spec.get("writeConnectionSecretToRef")) or None,
        )

    @property
    def external_name(self) -> str:
        return self.annotations.get(ANNOTATION_EXTERNAL_NAME, "")

    @external_name.setter
    def external_name(self, value: str) -> None:
        self.annotations[ANNOTATION_EXTERNAL_NAME] = value

    @property
    def meta(self) -> dict[str, Any]:
        """Metadata subset used for logging and events."""
        return {"name": self.name, "namespace": self.namespace or "", "uid": self.uid}
