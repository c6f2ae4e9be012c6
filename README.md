# kubeguide

kubeguide is a small terminal tool for looking around a Kubernetes cluster from the
keyboard. It lists pods, services, deployments, config maps and secrets in a namespace,
lets you switch namespace or resource type through a fuzzy search prompt, and opens any
listed resource as YAML.

## Installation

```
pip install .
```

With what the test suite needs:

```
pip install ".[test]"
```

## Connecting to a cluster

kubeguide reads the current context of `~/.kube/config`. From the kubeconfig it uses the
cluster's `server`, `certificate-authority` / `certificate-authority-data` and
`insecure-skip-tls-verify`, and the user's `token`, `tokenFile`, `client-certificate`,
`client-key` (or their `-data` forms), `username` and `password`.

If that file is missing or cannot be used, kubeguide falls back to the in-cluster
service-account configuration (`KUBERNETES_SERVICE_HOST`, `KUBERNETES_SERVICE_PORT` and
the mounted token and CA certificate), so it also works from inside a pod.

On connecting, kubeguide finds out which resources the cluster offers: a fixed set of
built-in kinds (pods, services, config maps, secrets, namespaces, deployments, replica
sets, daemon sets, stateful sets) plus every served version of every
CustomResourceDefinition. If the custom resource definitions cannot be listed, the
connection is treated as failed. The list of kinds is rediscovered once it is older than
five minutes.

If no connection can be made, a warning is printed to standard error and the interface
still starts. The explorer is then empty until you pick a resource type, after which it
shows "Error: Unable to connect to Kubernetes".

## Running

```
kubeguide
```

The explorer starts in the `default` namespace with the resource type `all`.

### Keys

| Key               | Where           | Action                                     |
|-------------------|-----------------|--------------------------------------------|
| `e`               | welcome screen  | open the explorer                          |
| `n`               | explorer        | choose a namespace                         |
| `r`               | explorer        | choose a resource type                     |
| `j` / Tab         | explorer        | move down (wraps around)                   |
| `k` / Shift+Tab   | explorer        | move up (wraps around)                     |
| Enter             | explorer        | show the selected resource as YAML         |
| Esc               | details view    | go back to the explorer                    |
| Esc               | explorer        | go back to the welcome screen              |
| `q`               | outside the selectors | quit                                 |

Each explorer entry reads `Kind: name (status)`. The status is the phase for pods, the
service type for services, and `ready/replicas` for deployments; otherwise `Unknown`.
The YAML view leaves out `metadata.managedFields`. If the resource cannot be fetched,
the view shows the error instead.

In the namespace and resource-type selectors, typing filters the list with fuzzy
matching; every key other than the navigation keys goes to the search field, `q`
included. Ctrl+J or Tab moves down, Ctrl+K or Shift+Tab moves up, Enter picks the
highlighted entry and Esc cancels. Both return to the explorer, which reloads after a
pick.

The resource types that load are `all`, `pods`, `services`, `deployments`, `configmaps`
and `secrets`. The selector also offers `ingresses`, `daemonsets`, `statefulsets`,
`jobs` and `cronjobs`. For those the explorer reports that the type is not yet
implemented.

## Using it as a library

```python
from kubeguide.client import connect
from kubeguide.resources import GroupVersionResource

client = connect(None)  # ~/.kube/config, then in-cluster
pods = GroupVersionResource("", "v1", "pods")
listing = client.list(pods, "default")
for item in listing["items"]:
    print(item["kind"], item["metadata"]["name"])

for info in client.list_custom_resources():
    print(info.gvr.resource, info.gvk.kind)
```

`UnifiedClient` offers `get`, `list`, `create`, `list_available_resources`,
`list_custom_resources`, `resource_exists`, `get_gvk` and `refresh_resource_cache`.
Requests for a resource kind the cluster does not offer, or for a namespace on a
cluster-scoped kind, raise `kubeguide.resources.ResourceError`. API errors raise the same
exception. `kubeguide.client.resource_path` builds the API path for a resource.

Other pieces:

- `kubeguide.resources.ResourceCache`, `core_resources()` and
  `custom_resources_from_crds()` hold the discovered kinds.
- `kubeguide.formatter.clean_data(obj)` returns a copy of an object without
  `metadata.managedFields`.
- `kubeguide.fuzzy.find(pattern, items)` returns `Match` objects with `text`, `index`,
  `matched_indexes` and `score`, best first. Matching ignores case. An empty pattern
  matches nothing.

## What it does not do

- It only reads from the cluster in the interface. Nothing can be created, edited or
  deleted from the screens. `UnifiedClient.create` exists for library use only.
- Lists are not watched. They reload only when you pick a namespace or resource type.
- Kubeconfig `exec` and `auth-provider` credentials are not supported, and only the
  current context is used.
- Browsing custom resources, or built-in kinds beyond the five listed above, is not
  available in the explorer.