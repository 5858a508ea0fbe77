# eathar

eathar is a Python library that pulls security-relevant information from a
Kubernetes cluster and reports on it. It reads a kubeconfig file (honouring
`KUBECONFIG`, falling back to `~/.kube/config`, and using the in-cluster
service account when run inside a pod) and talks to the cluster's API server
directly over HTTPS.

## Installation

```
pip install .
```

## Connecting to a cluster

`eathar.kubeclient` holds the connection code:

- `load_client(path)` / `KubeClient.from_kubeconfig(path)` build a client from
  the given kubeconfig file, or from the default locations when `path` is
  `None`. Token, token file, basic auth and client certificate credentials are
  supported; credential plugins (`exec`, `auth-provider`) are not. Problems
  raise `KubeConfigError`.
- `KubeClient.list_pods()`, `list_cluster_roles()` and
  `list_cluster_role_bindings()` return the API objects as plain dictionaries.
- `KubeClient` is a context manager; `close()` ends the HTTP session.
- `connect_with_pods(client, exclude)` fetches all pods, dropping those whose
  namespace contains any entry of the comma separated `exclude` string
  (`filter_pods` does the filtering on its own).

## Checks

The checks work on plain pod, cluster role and binding dictionaries, so they
can be used without a live cluster.

Information (`eathar.info`):

- `image_list(pods)` – distinct container images in use
- `principal_list(bindings, kind)` – distinct `User`, `Group` or
  `ServiceAccount` subjects of cluster role bindings (service accounts as
  `namespace/name`)

Pod Security Standards, each returning a list of `Finding`:

- `eathar.pod_checks`: `hostnet`, `hostpid`, `hostipc`, `host_process`,
  `host_path`, `apparmor`, `sysctl`
- `eathar.capabilities`: `added_capabilities`, `dropped_capabilities`,
  `host_ports`
- `eathar.container_checks`: `allow_priv_esc`, `privileged`, `seccomp`,
  `procmount`

RBAC (`eathar.rbac`), each returning the matching cluster role bindings:
`get_cluster_admin_users(bindings)` and, taking `(roles, bindings)`,
`get_secrets_users`, `create_pv_users`, `escalate_users`,
`impersonate_users`, `bind_users`, `validating_webhook_users`,
`mutating_webhook_users`, `wildcard_access`,
`create_service_account_tokens`, `update_csr_approval`.

## Reports

`eathar.reporting` writes results as text, HTML or JSON:
`report_pss(findings, options, check)`, `report_principal`, `report_image`
and `report_rbac`. Output is controlled by `ReportOptions`:

| Field | Meaning |
| --- | --- |
| `jsonrep` | report as JSON |
| `htmlrep` | report as HTML |
| `file` | append the report to `<file>.txt`, `<file>.json` or `<file>.html` instead of printing it |
| `exclude` | comma separated namespaces to skip when fetching pods |

## Running groups of checks

`eathar.commands_info` and `eathar.commands_pss` each offer
`run(name, client, options)` for a single named check, `run_all(client,
options)` for the whole group, and `describe()` for the names with their
help text. Info checks are `imageList`, `clusterUserList`,
`clusterGroupList` and `clusterSaList`; pss checks are `allowprivesc`,
`apparmor`, `capadded`, `capdropped`, `hostipc`, `hostnet`, `hostpath`,
`hostpid`, `hostports`, `hostprocess`, `privileged`, `procmount`, `seccomp`
and `sysctl`.

```python
from eathar.commands_pss import run
from eathar.kubeclient import load_client
from eathar.reporting import ReportOptions

with load_client(None) as client:
    run("privileged", client, ReportOptions(exclude="kube-system"))
```

## What the package does not do

- It installs no command-line program; the checks are run from Python.
- RBAC checks have no group runner like the info and pss groups: call the
  functions in `eathar.rbac` with the lists from the client and pass the
  result to `report_rbac`:

```python
from eathar.kubeclient import load_client
from eathar.rbac import get_secrets_users
from eathar.reporting import ReportOptions, report_rbac

with load_client(None) as client:
    found = get_secrets_users(client.list_cluster_roles(),
                              client.list_cluster_role_bindings())
    report_rbac(found, ReportOptions(), "Users with access to secrets")
```

## Running the tests

```
pip install .[test]
pytest
```