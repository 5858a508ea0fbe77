"""Pod level Pod Security Standards checks."""

from __future__ import annotations

from typing import Iterable, Iterator

from eathar.reporting import Finding

_APPARMOR_PREFIX = "container.apparmor.security.beta.kubernetes.io"

_SAFE_SYSCTLS = frozenset({
    "kernel.shm_rmid_forced",
    "net.ipv4.ip_local_port_range",
    "net.ipv4.ip_unprivileged_port_start",
    "net.ipv4.tcp_syncookies",
    "net.ipv4.ping_group_range",
})


def _metadata(pod: dict) -> dict:
    return pod.get("metadata") or {}


def _namespace(pod: dict) -> str:
    return _metadata(pod).get("namespace") or ""


def _name(pod: dict) -> str:
    return _metadata(pod).get("name") or ""


def _spec(pod: dict) -> dict:
    return pod.get("spec") or {}


def _containers(pod: dict) -> Iterator[dict]:
    """Yield regular, init and ephemeral containers, in that order."""
    spec = _spec(pod)
    for key in ("containers", "initContainers", "ephemeralContainers"):
        yield from spec.get(key) or []


def _pod_flag(pods: Iterable[dict], flag: str, check: str) -> list[Finding]:
    return [
        Finding(check=check, namespace=_namespace(pod), pod=_name(pod))
        for pod in pods
        if _spec(pod).get(flag)
    ]


def hostnet(pods: Iterable[dict]) -> list[Finding]:
    """Pods that use the host's network namespace."""
    return _pod_flag(pods, "hostNetwork", "hostnet")


def hostpid(pods: Iterable[dict]) -> list[Finding]:
    """Pods that use the host's PID namespace."""
    return _pod_flag(pods, "hostPID", "hostpid")


def hostipc(pods: Iterable[dict]) -> list[Finding]:
    """Pods that use the host's IPC namespace."""
    return _pod_flag(pods, "hostIPC", "hostipc")


def _is_host_process(security_context: dict | None) -> bool:
    windows = (security_context or {}).get("windowsOptions")
    return bool(windows and windows.get("hostProcess"))


def host_process(pods: Iterable[dict]) -> list[Finding]:
    """Windows pods and containers that run as host processes."""
    findings: list[Finding] = []
    for pod in pods:
        namespace, name = _namespace(pod), _name(pod)
        if _is_host_process(_spec(pod).get("securityContext")):
            findings.append(Finding(check="HostProcess", namespace=namespace, pod=name))
        findings.extend(
            Finding(check="HostProcess", namespace=namespace, pod=name,
                    container=container.get("name") or "")
            for container in _containers(pod)
            if _is_host_process(container.get("securityContext"))
        )
    return findings


def host_path(pods: Iterable[dict]) -> list[Finding]:
    """Volumes that mount a path from the host."""
    findings: list[Finding] = []
    for pod in pods:
        for volume in _spec(pod).get("volumes") or []:
            source = volume.get("hostPath")
            if source is not None:
                findings.append(Finding(
                    check="Host Path",
                    namespace=_namespace(pod),
                    pod=_name(pod),
                    volume=volume.get("name") or "",
                    path=source.get("path") or "",
                ))
    return findings


def apparmor(pods: Iterable[dict]) -> list[Finding]:
    """Pods with an AppArmor annotation explicitly set to unconfined."""
    findings: list[Finding] = []
    for pod in pods:
        annotations = _metadata(pod).get("annotations") or {}
        for key, value in annotations.items():
            if value == "unconfined" and key.split("/")[0] == _APPARMOR_PREFIX:
                findings.append(Finding(check="Apparmor Disabled",
                                        namespace=_namespace(pod), pod=_name(pod)))
    return findings


def sysctl(pods: Iterable[dict]) -> list[Finding]:
    """Sysctls set on pods that are not in the safe set."""
    findings: list[Finding] = []
    for pod in pods:
        context = _spec(pod).get("securityContext") or {}
        for entry in context.get("sysctls") or []:
            name = entry.get("name") or ""
            if name not in _SAFE_SYSCTLS:
                findings.append(Finding(check="Unsafe Sysctl",
                                        namespace=_namespace(pod), sysctl=name))
    return findings