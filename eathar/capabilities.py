"""Container capability and host port checks."""

from __future__ import annotations

from typing import Iterable, Iterator

from eathar.reporting import Finding


def _pod_identity(pod: dict) -> tuple[str, str]:
    metadata = pod.get("metadata") or {}
    return metadata.get("namespace") or "", metadata.get("name") or ""


def _containers(pod: dict) -> Iterator[dict]:
    """Yield regular, init and ephemeral containers, in that order."""
    spec = pod.get("spec") or {}
    for key in ("containers", "initContainers", "ephemeralContainers"):
        yield from spec.get(key) or []


def _capability_findings(pods: Iterable[dict], key: str, check: str) -> list[Finding]:
    findings: list[Finding] = []
    for pod in pods:
        namespace, name = _pod_identity(pod)
        for container in _containers(pod):
            capabilities = (container.get("securityContext") or {}).get("capabilities") or {}
            listed = capabilities.get(key)
            if listed is not None:
                findings.append(Finding(
                    check=check,
                    namespace=namespace,
                    pod=name,
                    container=container.get("name") or "",
                    capabilities=[str(cap) for cap in listed],
                ))
    return findings


def added_capabilities(pods: Iterable[dict]) -> list[Finding]:
    """Containers that add capabilities to the runtime's default set."""
    return _capability_findings(pods, "add", "Added Capabilities")


def dropped_capabilities(pods: Iterable[dict]) -> list[Finding]:
    """Containers that drop capabilities."""
    return _capability_findings(pods, "drop", "Dropped Capabilities")


def host_ports(pods: Iterable[dict]) -> list[Finding]:
    """Container ports bound to a port on the host."""
    findings: list[Finding] = []
    for pod in pods:
        namespace, name = _pod_identity(pod)
        for container in _containers(pod):
            for port in container.get("ports") or []:
                number = int(port.get("hostPort") or 0)
                if number != 0:
                    findings.append(Finding(
                        check="Host Ports",
                        namespace=namespace,
                        pod=name,
                        container=container.get("name") or "",
                        hostport=number,
                    ))
    return findings