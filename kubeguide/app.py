"""The interactive explorer: screens, key handling and loading of cluster resources."""

from __future__ import annotations

import argparse
import sys
from dataclasses import dataclass
from typing import Any, Sequence

import urwid
import yaml

from kubeguide.client import UnifiedClient, connect
from kubeguide.formatter import clean_data
from kubeguide.resources import GroupVersionResource, ResourceError
from kubeguide.selector import FuzzySelector, Pages
from kubeguide.views import (
    NAMESPACE_SELECTOR_PAGE,
    PALETTE,
    RESOURCE_SELECTOR_PAGE,
    Explorer,
    ExplorerList,
    ResourceDetails,
    Welcome,
)

WELCOME_PAGE = "welcome"
EXPLORER_PAGE = "explorer"
DETAILS_PAGE = "resource-details"

LOADABLE_TYPES = ("pods", "services", "deployments", "configmaps", "secrets")

_PODS = GroupVersionResource("", "v1", "pods")
_SERVICES = GroupVersionResource("", "v1", "services")
_DEPLOYMENTS = GroupVersionResource("apps", "v1", "deployments")
_CONFIGMAPS = GroupVersionResource("", "v1", "configmaps")
_SECRETS = GroupVersionResource("", "v1", "secrets")
_NAMESPACES = GroupVersionResource("", "v1", "namespaces")

_SINGULAR_GVRS = {
    "pod": _PODS,
    "service": _SERVICES,
    "deployment": _DEPLOYMENTS,
    "configmap": _CONFIGMAPS,
    "secret": _SECRETS,
}
_PLURAL_GVRS = {f"{name}s": gvr for name, gvr in _SINGULAR_GVRS.items()}

_SELECTOR_PAGES = frozenset({NAMESPACE_SELECTOR_PAGE, RESOURCE_SELECTOR_PAGE})


@dataclass(frozen=True)
class Resource:
    """One row of the explorer: the object's kind, name and a short status."""

    type: str
    name: str
    status: str

    def display_text(self) -> str:
        return f"{self.type}: {self.name} ({self.status})"


def gvr_for_type(resource_type: str) -> GroupVersionResource:
    """The API resource behind a type name such as ``pods`` or ``Pod``."""
    key = resource_type.lower()
    gvr = _SINGULAR_GVRS.get(key) or _PLURAL_GVRS.get(key)
    if gvr is None:
        raise ResourceError(f"unsupported resource type: {resource_type}")
    return gvr


def _nested(obj: Any, *keys: str) -> Any:
    for key in keys:
        if not isinstance(obj, dict) or key not in obj:
            return None
        obj = obj[key]
    return obj


def _nested_int(obj: Any, *keys: str) -> int | None:
    value = _nested(obj, *keys)
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    return None


def _nested_str(obj: Any, *keys: str) -> str | None:
    value = _nested(obj, *keys)
    return value if isinstance(value, str) else None


def resource_status(resource_type: str, item: dict[str, Any]) -> str:
    """A short status for ``item``: pod phase, service type or ready replicas."""
    kind = resource_type.lower()
    if kind in ("pod", "pods"):
        phase = _nested_str(item, "status", "phase")
        if phase is not None:
            return phase
    elif kind in ("service", "services"):
        service_type = _nested_str(item, "spec", "type")
        if service_type is not None:
            return service_type
    elif kind in ("deployment", "deployments"):
        replicas = _nested_int(item, "status", "replicas")
        if replicas is not None:
            ready = _nested_int(item, "status", "readyReplicas")
            return f"{ready if ready is not None else 0}/{replicas}"
    return "Unknown"


class _Root(urwid.WidgetPlaceholder):
    """Shows the current page and routes keys through the application first."""

    def __init__(self, app: App) -> None:
        self._app = app
        super().__init__(app.pages.current_view or urwid.SolidFill(" "))

    def selectable(self) -> bool:
        return True

    def keypress(self, size, key):
        remaining = self._app.handle_key(key)
        if remaining is not None:
            remaining = self.original_widget.keypress(size, remaining)
        self.sync()
        return remaining

    def sync(self) -> None:
        view = self._app.pages.current_view
        if view is not None and view is not self.original_widget:
            self.original_widget = view


class App:
    """The whole interface and the state of what it is showing."""

    def __init__(self, client: UnifiedClient | None = None) -> None:
        self.client = client
        self.explorer = Explorer()
        self.welcome = Welcome("Welcome", "")
        self.current_mode = WELCOME_PAGE
        self.current_namespace = "default"
        self.current_resource_type = "all"
        self.namespaces: list[str] = []
        self.pages = Pages()
        self.active_selector: FuzzySelector | None = None
        self.stopped = False
        self._loop: urwid.MainLoop | None = None

        self.explorer_list: ExplorerList = self.explorer.create_explorer_view(
            self.current_namespace, self.current_resource_type, self.select_resource
        )
        self.pages.add_page(WELCOME_PAGE, self.welcome.create_view(), show=True)
        self.pages.add_page(EXPLORER_PAGE, self.explorer_list.widget)

    def initialize(self) -> None:
        """Connect to the cluster if not yet connected, then load namespaces."""
        if self.client is None:
            try:
                self.client = connect()
            except (ResourceError, ValueError, OSError) as exc:
                print(f"Warning: Unable to load kubeconfig: {exc}", file=sys.stderr)
        self.current_namespace = "default"
        if self.client is not None:
            try:
                self.namespaces = self.get_namespaces()
            except ResourceError:
                pass

    def handle_key(self, key: str) -> str | None:
        """Act on an application key; return the key if widgets should see it."""
        if self.pages.current in _SELECTOR_PAGES:
            return key

        if key == "esc":
            if self.pages.has_page(DETAILS_PAGE):
                self.pages.remove_page(DETAILS_PAGE)
                self.pages.switch_to(EXPLORER_PAGE)
                return None
            if self.current_mode != WELCOME_PAGE:
                self.current_mode = WELCOME_PAGE
                self.pages.switch_to(WELCOME_PAGE)
            return key

        if key == "q":
            self._stop()
            return None
        if key == "e":
            if self.current_mode == WELCOME_PAGE:
                self.current_mode = EXPLORER_PAGE
                self.pages.switch_to(EXPLORER_PAGE)
            return None
        if key == "n":
            if self.current_mode == EXPLORER_PAGE:
                self._show_namespace_selector()
            return None
        if key == "r":
            if self.current_mode == EXPLORER_PAGE:
                self._show_resource_selector()
            return None
        return key

    def _stop(self) -> None:
        self.stopped = True
        if self._loop is not None:
            raise urwid.ExitMainLoop()

    def _show_namespace_selector(self) -> None:
        if not self.namespaces:
            return

        def chosen(namespace: str) -> None:
            self.current_namespace = namespace
            self._after_selection()

        self.active_selector = self.explorer.create_namespace_selector(
            self.namespaces, self.pages, chosen
        )

    def _show_resource_selector(self) -> None:
        def chosen(resource_type: str) -> None:
            self.current_resource_type = resource_type
            self._after_selection()

        self.active_selector = self.explorer.create_resource_selector(self.pages, chosen)

    def _after_selection(self) -> None:
        self.explorer.update_explorer_title(
            self.explorer_list, self.current_namespace, self.current_resource_type
        )
        self.load_resources()

    def load_resources(self) -> None:
        """Fill the explorer list according to the namespace and type filter."""
        self.explorer_list.clear()
        if self.client is None:
            self.explorer_list.add_item("Error: Unable to connect to Kubernetes")
            return

        if self.current_resource_type == "all":
            for resource_type in LOADABLE_TYPES:
                self._load_type(resource_type)
        elif self.current_resource_type in LOADABLE_TYPES:
            self._load_type(self.current_resource_type)
        else:
            self.explorer_list.add_item(
                f"Resource type '{self.current_resource_type}' not yet implemented"
            )

    def _load_type(self, resource_type: str) -> None:
        try:
            resources = self.resources_in_namespace(resource_type, self.current_namespace)
        except ResourceError as exc:
            self.explorer_list.add_item(f"Error loading {resource_type}: {exc}")
            return
        if not resources and self.current_resource_type == resource_type:
            self.explorer_list.add_item(f"No {resource_type} found in this namespace")
            return
        for resource in resources:
            self.explorer_list.add_item(resource.display_text(), resource.name)

    def _require_client(self) -> UnifiedClient:
        if self.client is None:
            raise ResourceError("not connected to a cluster")
        return self.client

    def get_namespaces(self) -> list[str]:
        """Names of all namespaces in the cluster."""
        payload = self._require_client().list(_NAMESPACES, "")
        return [_nested_str(item, "metadata", "name") or "" for item in payload.get("items") or []]

    def resources_in_namespace(self, resource_type: str, namespace: str) -> list[Resource]:
        """The objects of one type in ``namespace``, with a short status each."""
        gvr = gvr_for_type(resource_type)
        payload = self._require_client().list(gvr, namespace)
        return [
            Resource(
                type=item.get("kind") or "",
                name=_nested_str(item, "metadata", "name") or "",
                status=resource_status(resource_type, item),
            )
            for item in payload.get("items") or []
        ]

    def resource_details(self, resource_type: str, resource_name: str, namespace: str) -> str:
        """The YAML of one object, without its managed fields.

        ``resource_type`` is a kind such as ``Pod``; plural names are refused.
        """
        gvr = _SINGULAR_GVRS.get(resource_type.lower())
        if gvr is None:
            raise ResourceError(f"unsupported resource type: {resource_type}")
        obj = self._require_client().get(gvr, namespace, resource_name)
        return yaml.safe_dump(clean_data(obj), default_flow_style=False, sort_keys=True)

    def select_resource(self, main_text: str, resource_name: str) -> ResourceDetails | None:
        """Open the details page for an explorer entry ``"Kind: name (status)"``."""
        if self.client is None or not resource_name:
            return None
        parts = main_text.split(":")
        if len(parts) < 2:
            return None
        resource_type = parts[0].strip()
        try:
            content = self.resource_details(resource_type, resource_name, self.current_namespace)
        except ResourceError as exc:
            content = f"Error fetching resource details: {exc}"
        details = ResourceDetails(resource_name, resource_type, content)
        self.pages.add_page(DETAILS_PAGE, details.create_view(), show=True)
        self.pages.switch_to(DETAILS_PAGE)
        return details

    def run(self) -> None:
        """Show the interface until the user quits."""
        root = _Root(self)
        self._loop = urwid.MainLoop(urwid.AttrMap(root, "body"), palette=PALETTE)
        if self.client is not None:
            self.load_resources()
        try:
            self._loop.run()
        finally:
            self._loop = None


def main(argv: Sequence[str] | None = None) -> int:
    """Start the explorer."""
    parser = argparse.ArgumentParser(
        prog="kubeguide", description="Browse the resources of a Kubernetes cluster."
    )
    parser.parse_args(argv)
    app = App()
    app.initialize()
    app.run()
    return 0


if __name__ == "__main__":
    sys.exit(main())