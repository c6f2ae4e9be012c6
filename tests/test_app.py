import pytest
import yaml

from kubeguide.app import App, Resource, gvr_for_type, resource_status
from kubeguide.resources import GroupVersionResource, ResourceError
from kubeguide.views import explorer_title


class FakeClient:
    def __init__(self, lists=None, objects=None, errors=()):
        self.lists = lists or {}
        self.objects = objects or {}
        self.errors = set(errors)
        self.list_calls = []

    def list(self, gvr, namespace=""):
        self.list_calls.append((gvr.resource, namespace))
        if gvr.resource in self.errors:
            raise ResourceError(f"cannot list {gvr.resource}")
        return {"items": [dict(item) for item in self.lists.get(gvr.resource, [])]}

    def get(self, gvr, namespace, name):
        key = (gvr.resource, name)
        if key not in self.objects:
            raise ResourceError(f"{name} not found")
        return self.objects[key]


def pod(name, phase):
    return {"kind": "Pod", "metadata": {"name": name}, "status": {"phase": phase}}


def ns(name):
    return {"kind": "Namespace", "metadata": {"name": name}}


def test_gvr_for_type_accepts_singular_and_plural():
    assert gvr_for_type("pods") == GroupVersionResource("", "v1", "pods")
    assert gvr_for_type("Pod") == GroupVersionResource("", "v1", "pods")
    assert gvr_for_type("deployments") == GroupVersionResource("apps", "v1", "deployments")


def test_gvr_for_type_rejects_unknown():
    with pytest.raises(ResourceError, match="unsupported resource type: ingresses"):
        gvr_for_type("ingresses")


def test_resource_status_variants():
    assert resource_status("pods", pod("a", "Running")) == "Running"
    assert resource_status("services", {"spec": {"type": "ClusterIP"}}) == "ClusterIP"
    assert resource_status("deployments", {"status": {"replicas": 3, "readyReplicas": 2}}) == "2/3"
    assert resource_status("deployments", {"status": {"replicas": 3}}) == "0/3"
    assert resource_status("configmaps", {"data": {}}) == "Unknown"
    assert resource_status("pods", {"status": {"phase": 7}}) == "Unknown"


def test_initialize_loads_namespaces():
    client = FakeClient(lists={"namespaces": [ns("default"), ns("kube-system")]})
    app = App(client)
    app.initialize()
    assert app.namespaces == ["default", "kube-system"]
    assert app.current_namespace == "default"


def test_initialize_ignores_namespace_errors():
    app = App(FakeClient(errors={"namespaces"}))
    app.initialize()
    assert app.namespaces == []


def test_resources_in_namespace():
    client = FakeClient(lists={"pods": [pod("web", "Running"), pod("db", "Pending")]})
    app = App(client)
    resources = app.resources_in_namespace("pods", "team")
    assert resources == [Resource("Pod", "web", "Running"), Resource("Pod", "db", "Pending")]
    assert client.list_calls == [("pods", "team")]


def test_load_resources_without_client():
    app = App()
    app.load_resources()
    assert app.explorer_list.entries == [("Error: Unable to connect to Kubernetes", "")]


def test_load_resources_all_types_lists_entries():
    client = FakeClient(lists={"pods": [pod("web", "Running")]})
    app = App(client)
    app.load_resources()
    assert app.explorer_list.entries == [("Pod: web (Running)", "web")]
    assert [call[0] for call in client.list_calls] == [
        "pods", "services", "deployments", "configmaps", "secrets"
    ]


def test_load_resources_empty_specific_type():
    app = App(FakeClient())
    app.current_resource_type = "pods"
    app.load_resources()
    assert app.explorer_list.entries == [("No pods found in this namespace", "")]


def test_load_resources_unknown_type():
    app = App(FakeClient())
    app.current_resource_type = "ingresses"
    app.load_resources()
    assert app.explorer_list.entries == [("Resource type 'ingresses' not yet implemented", "")]


def test_load_resources_reports_errors():
    app = App(FakeClient(errors={"secrets"}))
    app.current_resource_type = "secrets"
    app.load_resources()
    entries = app.explorer_list.entries
    assert len(entries) == 1
    assert entries[0][0].startswith("Error loading secrets: ")


def test_resource_details_strips_managed_fields():
    obj = {
        "kind": "Pod",
        "metadata": {"name": "web", "managedFields": [{"manager": "kubectl"}]},
        "status": {"phase": "Running"},
    }
    app = App(FakeClient(objects={("pods", "web"): obj}))
    text = app.resource_details("Pod", "web", "default")
    assert yaml.safe_load(text) == {
        "kind": "Pod",
        "metadata": {"name": "web"},
        "status": {"phase": "Running"},
    }


def test_resource_details_refuses_plural():
    app = App(FakeClient())
    with pytest.raises(ResourceError):
        app.resource_details("pods", "web", "default")


def test_select_resource_opens_details_page():
    obj = {"kind": "Pod", "metadata": {"name": "web"}}
    app = App(FakeClient(objects={("pods", "web"): obj}))
    details = app.select_resource("Pod: web (Running)", "web")
    assert details.resource_type == "Pod"
    assert yaml.safe_load(details.content) == obj
    assert app.pages.current == "resource-details"


def test_select_resource_shows_fetch_errors():
    app = App(FakeClient())
    details = app.select_resource("Pod: gone (Running)", "gone")
    assert details.content.startswith("Error fetching resource details: ")


def test_select_resource_ignores_entries_without_name():
    app = App(FakeClient())
    assert app.select_resource("No pods found in this namespace", "") is None
    assert not app.pages.has_page("resource-details")


def test_keys_switch_between_welcome_and_explorer():
    app = App(FakeClient())
    assert app.pages.current == "welcome"
    assert app.handle_key("e") is None
    assert app.pages.current == "explorer"
    assert app.current_mode == "explorer"
    assert app.handle_key("esc") == "esc"
    assert app.pages.current == "welcome"
    assert app.current_mode == "welcome"


def test_escape_closes_details_first():
    obj = {"kind": "Pod", "metadata": {"name": "web"}}
    app = App(FakeClient(objects={("pods", "web"): obj}))
    app.handle_key("e")
    app.select_resource("Pod: web (Running)", "web")
    assert app.handle_key("esc") is None
    assert app.pages.current == "explorer"
    assert not app.pages.has_page("resource-details")
    assert app.current_mode == "explorer"


def test_quit_key_stops():
    app = App()
    assert app.handle_key("q") is None
    assert app.stopped is True


def test_other_keys_pass_through():
    app = App()
    assert app.handle_key("j") == "j"


def test_namespace_selector_changes_namespace():
    client = FakeClient()
    app = App(client)
    app.namespaces = ["default", "kube-system"]
    app.handle_key("e")
    assert app.handle_key("n") is None
    assert app.pages.current == "namespace-selector"
    assert app.handle_key("q") == "q"
    app.active_selector.move_down()
    assert app.active_selector.select() == "kube-system"
    assert app.current_namespace == "kube-system"
    assert app.pages.current == "explorer"
    assert app.explorer_list.title == explorer_title("kube-system", "all")
    assert ("pods", "kube-system") in client.list_calls


def test_namespace_selector_needs_namespaces():
    app = App(FakeClient())
    app.handle_key("e")
    app.handle_key("n")
    assert app.pages.current == "explorer"


def test_resource_selector_changes_type():
    client = FakeClient()
    app = App(client)
    app.handle_key("e")
    app.handle_key("r")
    assert app.pages.current == "resource-selector"
    app.active_selector.update("secrets")
    assert app.active_selector.select() == "secrets"
    assert app.current_resource_type == "secrets"
    assert app.explorer_list.entries == [("No secrets found in this namespace", "")]


def test_selector_keys_ignored_on_welcome():
    app = App(FakeClient())
    app.namespaces = ["default"]
    assert app.handle_key("n") is None
    assert app.handle_key("r") is None
    assert app.pages.current == "welcome"