"""General information about a cluster: principals and images in use."""

from __future__ import annotations

from typing import Iterable


def principal_list(bindings: Iterable[dict], principal: str) -> list[str]:
    """Return the distinct subjects of ``principal`` kind named in cluster role bindings.

    Service accounts are reported as ``namespace/name``.
    """
    names: dict[str, None] = {}
    for binding in bindings:
        for subject in binding.get("subjects") or []:
            if subject.get("kind") != principal:
                continue
            name = subject.get("name", "")
            if principal == "ServiceAccount":
                name = f"{subject.get('namespace', '')}/{name}"
            names[name] = None
    return list(names)


def image_list(pods: Iterable[dict]) -> list[str]:
    """Return the distinct container images used by ``pods``."""
    images: dict[str, None] = {}
    for pod in pods:
        for container in (pod.get("spec") or {}).get("containers") or []:
            images[container.get("image", "")] = None
    return list(images)