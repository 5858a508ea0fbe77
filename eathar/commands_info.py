"""Commands of the ``info`` group: general information about a cluster."""

from __future__ import annotations

from typing import Callable

from eathar.info import image_list, principal_list
from eathar.kubeclient import KubeClient, connect_with_pods
from eathar.reporting import ReportOptions, report_image, report_principal

_HELP: dict[str, tuple[str, str]] = {
    "all": (
        "Runs all the info checks",
        "Runs all the checks in the info group.",
    ),
    "imageList": (
        "List images used in the cluster",
        "This will provide a list of images used in the cluster",
    ),
    "clusterGroupList": (
        "A list of Groups defined in cluster role bindings",
        "this command provides a list of any groups defined\nin cluster role bindings.",
    ),
    "clusterSaList": (
        "A list of Service Accounts defined in cluster role bindings",
        "this command provides a list of any service accounts defined\nin cluster role bindings.",
    ),
    "clusterUserList": (
        "A list of users defined in cluster role bindings",
        "this command provides a list of any users defined\nin cluster role bindings.",
    ),
}


def _images(client: KubeClient, options: ReportOptions) -> None:
    pods = connect_with_pods(client, options.exclude)
    report_image(image_list(pods), options, "Image List")


def _principals(kind: str, title: str) -> Callable[[KubeClient, ReportOptions], None]:
    def command(client: KubeClient, options: ReportOptions) -> None:
        bindings = client.list_cluster_role_bindings()
        report_principal(principal_list(bindings, kind), options, title)
    return command


_COMMANDS: dict[str, Callable[[KubeClient, ReportOptions], None]] = {
    "all": _images,
    "imageList": _images,
    "clusterGroupList": _principals("Group", "Cluster Group List"),
    "clusterSaList": _principals("ServiceAccount", "Cluster Service Account List"),
    "clusterUserList": _principals("User", "Cluster User List"),
}


def describe() -> dict[str, tuple[str, str]]:
    """Return the commands of the group, mapped to their short and long help."""
    return dict(_HELP)


def run(name: str, client: KubeClient, options: ReportOptions) -> None:
    """Run the info command ``name`` and write its report."""
    try:
        command = _COMMANDS[name]
    except KeyError:
        raise ValueError(f"unknown info command: {name!r}") from None
    command(client, options)


def run_all(client: KubeClient, options: ReportOptions) -> None:
    """Run every check in the info group."""
    run("all", client, options)