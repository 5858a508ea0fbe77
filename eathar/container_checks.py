"""Container level Pod Security Standards checks."""

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


def _container_findings(pods: Iterable[dict], check: str, matches) -> list[Finding]:
    findings: list[Finding] = []
    for pod in pods:
        namespace, name = _pod_identity(pod)
        findings.extend(
            Finding(check=check, namespace=namespace, pod=name,
                    container=container.get("name") or "")
            for container in _containers(pod)
            if matches(container.get("securityContext"))
        )
    return findings


def _allows_escalation(context: dict | None) -> bool:
    # Unset means the runtime default, which allows escalation.
    return context is None or context.get("allowPrivilegeEscalation") is None


def _is_privileged(context: dict | None) -> bool:
    return context is not None and context.get("privileged") is True


def _is_unconfined(context: dict | None) -> bool:
    if context is None:
        return True
    profile = context.get("seccompProfile")
    return profile is None or profile.get("type") == "Unconfined"


def _is_unmasked(context: dict | None) -> bool:
    return context is not None and context.get("procMount") == "Unmasked"


def allow_priv_esc(pods: Iterable[dict]) -> list[Finding]:
    """Containers that do not set allowPrivilegeEscalation and so allow it."""
    return _container_findings(pods, "allowprivesc", _allows_escalation)


def privileged(pods: Iterable[dict]) -> list[Finding]:
    """Containers that run privileged."""
    return _container_findings(pods, "privileged", _is_privileged)


def seccomp(pods: Iterable[dict]) -> list[Finding]:
    """Containers left unconfined by seccomp at both pod and container level."""
    unconfined_pods = [
        pod for pod in pods
        if _is_unconfined((pod.get("spec") or {}).get("securityContext"))
    ]
    return _container_findings(unconfined_pods, "Seccomp Disabled", _is_unconfined)


def procmount(pods: Iterable[dict]) -> list[Finding]:
    """Containers with an unmasked /proc mount."""
    return _container_findings(pods, "Unmasked procmount", _is_unmasked)