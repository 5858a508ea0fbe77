"""Commands of the ``pss`` group: Pod Security Standards checks."""

from __future__ import annotations

from typing import Callable, Iterable

from eathar.capabilities import added_capabilities, dropped_capabilities, host_ports
from eathar.container_checks import allow_priv_esc, privileged, procmount, seccomp
from eathar.kubeclient import KubeClient, connect_with_pods
from eathar.pod_checks import (
    apparmor,
    host_path,
    host_process,
    hostipc,
    hostnet,
    hostpid,
    sysctl,
)
from eathar.reporting import Finding, ReportOptions, report_pss

_Check = Callable[[Iterable[dict]], list[Finding]]

# Ordered as the "all" command runs them.
_CHECKS: dict[str, tuple[_Check, str]] = {
    "allowprivesc": (allow_priv_esc, "Allow Privilege Escalation"),
    "apparmor": (apparmor, "Apparmor Disabled"),
    "capadded": (added_capabilities, "Added Capabilities"),
    "capdropped": (dropped_capabilities, "Dropped Capabilities"),
    "hostipc": (hostipc, "Host IPC"),
    "hostnet": (hostnet, "Host Network"),
    "hostpath": (host_path, "Host Path"),
    "hostpid": (hostpid, "Host PID"),
    "hostports": (host_ports, "Host Ports"),
    "hostprocess": (host_process, "Host Process"),
    "privileged": (privileged, "Privileged Container"),
    "seccomp": (seccomp, "Seccomp Disabled"),
    "procmount": (procmount, "Unmasked Procmount"),
    "sysctl": (sysctl, "Unsafe Sysctl"),
}

_HELP: dict[str, tuple[str, str]] = {
    "all": (
        "Runs all the PSS commands",
        "Runs all the checks in the PSS group.",
    ),
    "allowprivesc": (
        "List Pods that allow privilege escalation",
        "This command lists posts that allow privilege escalation.\n"
        "This is a default in general for linux container runtimes and allows\n"
        "for things like sudo to be used in a container to escalate privileges",
    ),
    "apparmor": (
        "List pods without apparmor profiles",
        "This command will list pods that do not have apparmor profiles\n"
        "assigned to them. Apparmor is part of the layers of isolation which should be\n"
        "applied to all containers",
    ),
    "capadded": (
        "Check for containers with added capabilities",
        "Adding Capabilities to containers over the base set provided\n"
        "by the CRI can risk container breakout. This command lists all the\n"
        "containers with added capabilities",
    ),
    "capdropped": (
        "List pods and containers that drop capabilities",
        "This will list containers and pods which drop capabilities.\n"
        "this is a good hardening measure to ensure that containers run with\n"
        "least privilege",
    ),
    "hostipc": (
        "Show containers with hostIPC",
        "Shows containers set to use the host's\nIPC namespace",
    ),
    "hostnet": (
        "List pods with host networking",
        "This command returns a list of all the pods in the cluster\n"
        "which have host networking enabled.",
    ),
    "hostpath": (
        "List pods with hostPath volumes",
        "This will list any pods with hostPath volumes. This is a security\n"
        "risk as it allows the container to access the host filesystem",
    ),
    "hostpid": (
        "List pods with host PID access",
        "This command lists pods which have host PID access\n"
        "This access could be misused by an attacker to affect processes\n"
        "in other containers on running on the host.",
    ),
    "hostports": (
        "List pods with hostPorts",
        "This will list any pods with hostPorts. This is a security\n"
        "risk as hostPorts cannot be controlled by the network policy engine",
    ),
    "hostprocess": (
        "List hostProcess Windows pods",
        "Lists hostProcess Windows pods. This is a security risk as it allows\n"
        "full access to the underlying node. This is effectively the Windows equivalent\n"
        "of privileged containers",
    ),
    "privileged": (
        "List Privileged containers",
        "Lists privileged containers. Containers which run\n"
        "as privileged can easily break out to the underlying host\n"
        "so should be used only where expicitly required.",
    ),
    "procmount": (
        "List containers with unmasked proc mounts",
        "This command lists containers with unmasked proc mounts. This is a security risk as it allows\n"
        "access to the proc filesystem on the host which can contain sensitive information",
    ),
    "seccomp": (
        "Check for disabled seccomp",
        "Checks whether a seccomp profile has been set. By default\n"
        "Kubernete disables CRI seccomp profiles (e.g. Docker)",
    ),
    "sysctl": (
        "List dangerous sysctls",
        "List sysctls set on pods which are not in the\n'safe' list",
    ),
}


def describe() -> dict[str, tuple[str, str]]:
    """Return the commands of the group, mapped to their short and long help."""
    return dict(_HELP)


def run(name: str, client: KubeClient, options: ReportOptions) -> None:
    """Run the pss command ``name`` and write its report."""
    if name == "all":
        run_all(client, options)
        return
    try:
        check, title = _CHECKS[name]
    except KeyError:
        raise ValueError(f"unknown pss command: {name!r}") from None
    pods = connect_with_pods(client, options.exclude)
    report_pss(check(pods), options, title)


def run_all(client: KubeClient, options: ReportOptions) -> None:
    """Run every check in the pss group, one report after another."""
    pods = connect_with_pods(client, options.exclude)
    for check, title in _CHECKS.values():
        report_pss(check(pods), options, title)