"""Access to a Kubernetes API server for core and custom resources alike."""

from __future__ import annotations

import atexit
import base64
import contextlib
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import requests
import yaml

from kubeguide.resources import (
    GroupVersionKind,
    GroupVersionResource,
    ResourceCache,
    ResourceError,
    ResourceInfo,
    custom_resources_from_crds,
)

DEFAULT_KUBECONFIG = Path.home() / ".kube" / "config"
SERVICE_ACCOUNT_DIR = Path("/var/run/secrets/kubernetes.io/serviceaccount")
CRD_PATH = "/apis/apiextensions.k8s.io/v1/customresourcedefinitions"


def _remove_quietly(path: str) -> None:
    with contextlib.suppress(OSError):
        os.unlink(path)


def _write_temp(encoded: str) -> str:
    """Decode base64 ``encoded`` into a temporary file and return its path."""
    data = base64.b64decode(encoded)
    with tempfile.NamedTemporaryFile(delete=False, suffix=".pem") as handle:
        handle.write(data)
    atexit.register(_remove_quietly, handle.name)
    return handle.name


def _named(config: dict[str, Any], section: str, key: str, name: str) -> dict[str, Any]:
    for entry in config.get(section) or []:
        if isinstance(entry, dict) and entry.get("name") == name:
            return entry.get(key) or {}
    raise ValueError(f"invalid kubeconfig: no {key} named {name!r}")


def _file_or_data(entry: dict[str, Any], file_key: str, base_dir: Path) -> str | None:
    data = entry.get(f"{file_key}-data")
    if data:
        return _write_temp(data)
    location = entry.get(file_key)
    if location:
        return str(base_dir / location)
    return None


@dataclass(frozen=True)
class KubeConfig:
    """How to reach and authenticate against an API server."""

    server: str
    token: str | None = None
    ca_file: str | None = None
    cert_file: str | None = None
    key_file: str | None = None
    username: str | None = None
    password: str | None = None
    insecure: bool = False

    @classmethod
    def from_file(cls, path: str | os.PathLike[str]) -> KubeConfig:
        """Read the current context of a kubeconfig file."""
        path = Path(path)
        data = yaml.safe_load(path.read_text())
        if not isinstance(data, dict):
            raise ValueError(f"invalid kubeconfig: {path}")
        current = data.get("current-context")
        if not current:
            raise ValueError("invalid kubeconfig: no current context is set")
        context = _named(data, "contexts", "context", current)
        cluster_name = context.get("cluster")
        if not cluster_name:
            raise ValueError(f"invalid kubeconfig: context {current!r} has no cluster")
        cluster = _named(data, "clusters", "cluster", cluster_name)
        user_name = context.get("user")
        user = _named(data, "users", "user", user_name) if user_name else {}

        server = cluster.get("server")
        if not server:
            raise ValueError(f"invalid kubeconfig: cluster {cluster_name!r} has no server")

        base_dir = path.parent
        token = user.get("token")
        if not token and user.get("tokenFile"):
            token = (base_dir / user["tokenFile"]).read_text().strip()

        return cls(
            server=server,
            token=token or None,
            ca_file=_file_or_data(cluster, "certificate-authority", base_dir),
            cert_file=_file_or_data(user, "client-certificate", base_dir),
            key_file=_file_or_data(user, "client-key", base_dir),
            username=user.get("username"),
            password=user.get("password"),
            insecure=bool(cluster.get("insecure-skip-tls-verify", False)),
        )

    @classmethod
    def in_cluster(cls) -> KubeConfig:
        """Configuration from the service account of the pod we run in."""
        host = os.environ.get("KUBERNETES_SERVICE_HOST")
        port = os.environ.get("KUBERNETES_SERVICE_PORT")
        if not host or not port:
            raise ValueError(
                "unable to load in-cluster configuration, KUBERNETES_SERVICE_HOST "
                "and KUBERNETES_SERVICE_PORT must be defined"
            )
        if ":" in host:
            host = f"[{host}]"
        token = (SERVICE_ACCOUNT_DIR / "token").read_text().strip()
        ca_path = SERVICE_ACCOUNT_DIR / "ca.crt"
        return cls(
            server=f"https://{host}:{port}",
            token=token,
            ca_file=str(ca_path) if ca_path.exists() else None,
        )


def load_config(path: str | os.PathLike[str] | None = None) -> KubeConfig:
    """Load a kubeconfig file, falling back to in-cluster configuration."""
    try:
        return KubeConfig.from_file(path if path is not None else DEFAULT_KUBECONFIG)
    except (OSError, ValueError, yaml.YAMLError):
        return KubeConfig.in_cluster()


def resource_path(
    gvr: GroupVersionResource, namespace: str = "", name: str = ""
) -> str:
    """The API path of a collection of resources, or of one of them."""
    parts = ["/api", gvr.version] if not gvr.group else ["/apis", gvr.group, gvr.version]
    if namespace:
        parts += ["namespaces", namespace]
    parts.append(gvr.resource)
    if name:
        parts.append(name)
    return "/".join(parts)


class UnifiedClient:
    """One interface to core and custom resources, checked against discovery."""

    def __init__(self, config: KubeConfig, session: requests.Session | None = None) -> None:
        self._config = config
        self._session = session if session is not None else requests.Session()
        self._headers = {"Accept": "application/json"}
        if config.token:
            self._headers["Authorization"] = f"Bearer {config.token}"
        self._auth = (config.username, config.password) if config.username else None
        self._verify: bool | str = False if config.insecure else (config.ca_file or True)
        if config.cert_file and config.key_file:
            self._cert: str | tuple[str, str] | None = (config.cert_file, config.key_file)
        else:
            self._cert = config.cert_file
        self._cache = ResourceCache(discover_custom=self._discover_custom)
        try:
            self._cache.refresh()
        except ResourceError as exc:
            raise ResourceError(f"initial resource discovery failed: {exc}") from exc

    def _request(self, method: str, path: str, body: Any = None) -> Any:
        url = self._config.server.rstrip("/") + path
        try:
            response = self._session.request(
                method,
                url,
                headers=self._headers,
                json=body,
                verify=self._verify,
                cert=self._cert,
                auth=self._auth,
            )
        except requests.RequestException as exc:
            raise ResourceError(f"{method} {path}: {exc}") from exc
        if not response.ok:
            try:
                message = response.json().get("message") or response.text
            except ValueError:
                message = response.text
            raise ResourceError(f"{method} {path}: {response.status_code} {message}")
        return response.json()

    def _discover_custom(self) -> list[ResourceInfo]:
        payload = self._request("GET", CRD_PATH)
        return custom_resources_from_crds(payload.get("items") or [])

    def _check_scope(self, gvr: GroupVersionResource, namespace: str) -> None:
        info = self._cache.get(gvr)
        if namespace and not info.namespaced:
            raise ResourceError(f"resource {gvr} is cluster-scoped, cannot specify namespace")

    def get(self, gvr: GroupVersionResource, namespace: str, name: str) -> dict[str, Any]:
        """Fetch one object."""
        self._check_scope(gvr, namespace)
        return self._request("GET", resource_path(gvr, namespace, name))

    def list(self, gvr: GroupVersionResource, namespace: str = "") -> dict[str, Any]:
        """Fetch a list object; every item carries its kind and apiVersion."""
        self._check_scope(gvr, namespace)
        payload = self._request("GET", resource_path(gvr, namespace))
        items = payload.get("items") or []
        payload["items"] = items
        item_kind = (payload.get("kind") or "").removesuffix("List")
        api_version = payload.get("apiVersion") or ""
        for item in items:
            if not item.get("kind") and item_kind:
                item["kind"] = item_kind
            if not item.get("apiVersion") and api_version:
                item["apiVersion"] = api_version
        return payload

    def create(
        self, gvr: GroupVersionResource, namespace: str, obj: dict[str, Any]
    ) -> dict[str, Any]:
        """Create ``obj`` and return the object the server stored."""
        self._check_scope(gvr, namespace)
        return self._request("POST", resource_path(gvr, namespace), body=obj)

    def list_available_resources(self) -> list[ResourceInfo]:
        """Every resource kind the cluster offers, core and custom."""
        return self._cache.all()

    def list_custom_resources(self) -> list[ResourceInfo]:
        """Only the custom resource kinds."""
        return self._cache.custom()

    def resource_exists(self, gvr: GroupVersionResource) -> bool:
        """Whether the cluster knows ``gvr``."""
        try:
            self._cache.get(gvr)
        except ResourceError:
            return False
        return True

    def get_gvk(self, gvr: GroupVersionResource) -> GroupVersionKind:
        """The kind served under ``gvr``."""
        return self._cache.get(gvr).gvk

    def refresh_resource_cache(self) -> None:
        """Rediscover resource kinds now."""
        self._cache.refresh()


def connect(path: str | os.PathLike[str] | None = None) -> UnifiedClient:
    """Load configuration and return a client with resources discovered."""
    return UnifiedClient(load_config(path))