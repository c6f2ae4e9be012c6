"""Resource kinds known to the cluster and a time-limited cache of them."""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Iterable

DEFAULT_CACHE_TIMEOUT = 5 * 60.0


class ResourceError(LookupError):
    """A resource is unknown, unsupported or could not be discovered."""


@dataclass(frozen=True)
class GroupVersionResource:
    group: str
    version: str
    resource: str

    def __str__(self) -> str:
        return f"{self.group}/{self.version}, Resource={self.resource}"


@dataclass(frozen=True)
class GroupVersionKind:
    group: str
    version: str
    kind: str

    def __str__(self) -> str:
        return f"{self.group}/{self.version}, Kind={self.kind}"


@dataclass(frozen=True)
class ResourceInfo:
    gvr: GroupVersionResource
    gvk: GroupVersionKind
    namespaced: bool
    is_custom: bool


_CORE = (
    ("", "v1", "pods", "Pod", True),
    ("", "v1", "services", "Service", True),
    ("", "v1", "configmaps", "ConfigMap", True),
    ("", "v1", "secrets", "Secret", True),
    ("", "v1", "namespaces", "Namespace", False),
    ("apps", "v1", "deployments", "Deployment", True),
    ("apps", "v1", "replicasets", "ReplicaSet", True),
    ("apps", "v1", "daemonsets", "DaemonSet", True),
    ("apps", "v1", "statefulsets", "StatefulSet", True),
)


def core_resources() -> list[ResourceInfo]:
    """The built-in resource kinds this tool knows about."""
    return [
        ResourceInfo(
            gvr=GroupVersionResource(group, version, plural),
            gvk=GroupVersionKind(group, version, kind),
            namespaced=namespaced,
            is_custom=False,
        )
        for group, version, plural, kind, namespaced in _CORE
    ]


def custom_resources_from_crds(crds: Iterable[dict[str, Any]]) -> list[ResourceInfo]:
    """Resource kinds described by CustomResourceDefinition objects.

    One entry is produced for every served version of every definition.
    """
    resources = []
    for crd in crds:
        spec = crd.get("spec", {})
        group = spec.get("group", "")
        names = spec.get("names", {})
        namespaced = spec.get("scope") == "Namespaced"
        for version in spec.get("versions", []):
            if not version.get("served", False):
                continue
            resources.append(
                ResourceInfo(
                    gvr=GroupVersionResource(group, version.get("name", ""), names.get("plural", "")),
                    gvk=GroupVersionKind(group, version.get("name", ""), names.get("kind", "")),
                    namespaced=namespaced,
                    is_custom=True,
                )
            )
    return resources


class ResourceCache:
    """Known resource kinds, rediscovered once they grow older than ``timeout``."""

    def __init__(
        self,
        discover_custom: Callable[[], Iterable[ResourceInfo]] | None = None,
        timeout: float = DEFAULT_CACHE_TIMEOUT,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._discover_custom = discover_custom
        self._timeout = timeout
        self._clock = clock
        self._lock = threading.RLock()
        self._entries: dict[GroupVersionResource, ResourceInfo] = {}
        self._last_discovery: float | None = None

    def refresh(self) -> None:
        """Rediscover all resource kinds, core and custom."""
        with self._lock:
            self._entries = {info.gvr: info for info in core_resources()}
            if self._discover_custom is not None:
                try:
                    custom = list(self._discover_custom())
                except Exception as exc:
                    raise ResourceError(f"failed to discover custom resources: {exc}") from exc
                self._entries.update((info.gvr, info) for info in custom)
            self._last_discovery = self._clock()

    def is_stale(self) -> bool:
        """Whether the cache is older than its timeout or never filled."""
        with self._lock:
            if self._last_discovery is None:
                return True
            return self._clock() - self._last_discovery > self._timeout

    def _ensure_fresh(self) -> None:
        if self.is_stale():
            self.refresh()

    def get(self, gvr: GroupVersionResource) -> ResourceInfo:
        """Information on ``gvr``; raises ResourceError if the cluster lacks it."""
        self._ensure_fresh()
        with self._lock:
            try:
                return self._entries[gvr]
            except KeyError:
                raise ResourceError(f"resource {gvr} not found in cluster") from None

    def all(self) -> list[ResourceInfo]:
        """Every known resource kind."""
        self._ensure_fresh()
        with self._lock:
            return list(self._entries.values())

    def custom(self) -> list[ResourceInfo]:
        """Only the kinds defined by custom resource definitions."""
        return [info for info in self.all() if info.is_custom]