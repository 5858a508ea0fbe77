"""Access to the Kubernetes API server described by a kubeconfig file.

Objects returned by the API are kept as the plain JSON dictionaries the
server sends, so pods, cluster roles and cluster role bindings are ``dict``
values with the usual ``metadata``/``spec``/``rules``/``subjects`` keys.
"""

from __future__ import annotations

import base64
import binascii
import contextlib
import os
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable

import requests
import yaml

_SERVICE_ACCOUNT_DIR = Path("/var/run/secrets/kubernetes.io/serviceaccount")
_TIMEOUT = 30.0
_RBAC_API = "/apis/rbac.authorization.k8s.io/v1"


class KubeConfigError(Exception):
    """Raised when no usable cluster configuration can be loaded."""


@dataclass
class _MergedConfig:
    current_context: str = ""
    clusters: dict[str, tuple[dict, Path]] = field(default_factory=dict)
    contexts: dict[str, tuple[dict, Path]] = field(default_factory=dict)
    users: dict[str, tuple[dict, Path]] = field(default_factory=dict)


def _default_paths() -> list[Path]:
    env = os.environ.get("KUBECONFIG")
    if env:
        return [Path(part).expanduser() for part in env.split(os.pathsep) if part]
    return [Path.home() / ".kube" / "config"]


def _load_document(path: Path) -> dict | None:
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return None
    except OSError as exc:
        raise KubeConfigError(f"cannot read kubeconfig {path}: {exc}") from exc
    try:
        document = yaml.safe_load(text) or {}
    except yaml.YAMLError as exc:
        raise KubeConfigError(f"cannot parse kubeconfig {path}: {exc}") from exc
    if not isinstance(document, dict):
        raise KubeConfigError(f"kubeconfig {path} is not a mapping")
    return document


def _merge(paths: Iterable[Path]) -> _MergedConfig | None:
    """Merge kubeconfig files; the first file to define a name wins."""
    merged = _MergedConfig()
    found = False
    for path in paths:
        document = _load_document(path)
        if document is None:
            continue
        found = True
        base = path.parent
        if not merged.current_context:
            merged.current_context = document.get("current-context") or ""
        sections = (
            ("clusters", "cluster", merged.clusters),
            ("contexts", "context", merged.contexts),
            ("users", "user", merged.users),
        )
        for section, key, target in sections:
            for entry in document.get(section) or []:
                name = entry.get("name")
                if name is not None and name not in target:
                    target[name] = (entry.get(key) or {}, base)
    return merged if found else None


def _resolve(base: Path, value: str) -> str:
    path = Path(value).expanduser()
    return str(path if path.is_absolute() else base / path)


def _write_data(encoded: str, temp_files: list[str]) -> str:
    try:
        data = base64.b64decode(encoded, validate=False)
    except (binascii.Error, ValueError) as exc:
        raise KubeConfigError(f"invalid base64 data in kubeconfig: {exc}") from exc
    with tempfile.NamedTemporaryFile(delete=False, suffix=".pem") as handle:
        handle.write(data)
    temp_files.append(handle.name)
    return handle.name


def _verify_setting(cluster: dict, base: Path, temp_files: list[str]) -> bool | str:
    if cluster.get("insecure-skip-tls-verify"):
        return False
    if cluster.get("certificate-authority-data"):
        return _write_data(cluster["certificate-authority-data"], temp_files)
    if cluster.get("certificate-authority"):
        return _resolve(base, cluster["certificate-authority"])
    return True


def _client_cert(user: dict, base: Path, temp_files: list[str]) -> tuple[str, str] | None:
    def pick(data_key: str, file_key: str) -> str | None:
        if user.get(data_key):
            return _write_data(user[data_key], temp_files)
        if user.get(file_key):
            return _resolve(base, user[file_key])
        return None

    cert = pick("client-certificate-data", "client-certificate")
    key = pick("client-key-data", "client-key")
    if cert is None and key is None:
        return None
    if cert is None or key is None:
        raise KubeConfigError("client certificate and client key must be given together")
    return cert, key


def _apply_auth(session: requests.Session, user: dict, base: Path, has_cert: bool) -> None:
    bearer = user.get("token")
    if not bearer and user.get("tokenFile"):
        token_path = Path(_resolve(base, user["tokenFile"]))
        try:
            bearer = token_path.read_text(encoding="utf-8").strip()
        except OSError as exc:
            raise KubeConfigError(f"cannot read token file {token_path}: {exc}") from exc
    if bearer:
        session.headers["Authorization"] = f"Bearer {bearer}"
    elif user.get("username"):
        session.auth = (user["username"], user.get("password") or "")
    elif not has_cert and (user.get("exec") or user.get("auth-provider")):
        raise KubeConfigError("credential plugins are not supported; use a token or client certificate")


class KubeClient:
    """A minimal read-only client for the Kubernetes API."""

    def __init__(self, server: str, session: Any = None, *, temp_files: Iterable[str] = ()):
        self.server = server.rstrip("/")
        self.session = session if session is not None else requests.Session()
        self._temp_files = list(temp_files)

    def __enter__(self) -> "KubeClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        """Close the HTTP session and remove credential files written for it."""
        for name in self._temp_files:
            with contextlib.suppress(FileNotFoundError):
                os.unlink(name)
        self._temp_files.clear()
        self.session.close()

    @classmethod
    def from_kubeconfig(cls, path: str | os.PathLike | None = None) -> "KubeClient":
        """Build a client from a kubeconfig file, the default locations or in-cluster settings."""
        if path is not None:
            explicit = Path(path).expanduser()
            if not explicit.is_file():
                raise KubeConfigError(f"kubeconfig file {explicit} does not exist")
            merged = _merge([explicit])
        else:
            merged = _merge(_default_paths())
            if merged is None:
                if os.environ.get("KUBERNETES_SERVICE_HOST"):
                    return cls._in_cluster()
                raise KubeConfigError("no configuration has been provided")
        return cls._from_merged(merged)

    @classmethod
    def _from_merged(cls, merged: _MergedConfig) -> "KubeClient":
        context_name = merged.current_context
        if not context_name:
            raise KubeConfigError("current-context is not set")
        if context_name not in merged.contexts:
            raise KubeConfigError(f"context {context_name!r} not found")
        context, _ = merged.contexts[context_name]
        cluster_name = context.get("cluster")
        if cluster_name not in merged.clusters:
            raise KubeConfigError(f"cluster {cluster_name!r} not found")
        cluster, cluster_base = merged.clusters[cluster_name]
        server = cluster.get("server")
        if not server:
            raise KubeConfigError(f"cluster {cluster_name!r} has no server")
        user, user_base = merged.users.get(context.get("user"), ({}, cluster_base))

        temp_files: list[str] = []
        session = requests.Session()
        try:
            session.verify = _verify_setting(cluster, cluster_base, temp_files)
            cert = _client_cert(user, user_base, temp_files)
            if cert is not None:
                session.cert = cert
            _apply_auth(session, user, user_base, cert is not None)
        except Exception:
            for name in temp_files:
                with contextlib.suppress(FileNotFoundError):
                    os.unlink(name)
            session.close()
            raise
        return cls(server, session, temp_files=temp_files)

    @classmethod
    def _in_cluster(cls) -> "KubeClient":
        host = os.environ["KUBERNETES_SERVICE_HOST"]
        port = os.environ.get("KUBERNETES_SERVICE_PORT", "443")
        token_path = _SERVICE_ACCOUNT_DIR / "token"
        try:
            bearer = token_path.read_text(encoding="utf-8").strip()
        except OSError as exc:
            raise KubeConfigError(f"cannot read service account token: {exc}") from exc
        if ":" in host:
            host = f"[{host}]"
        session = requests.Session()
        session.headers["Authorization"] = f"Bearer {bearer}"
        ca_path = _SERVICE_ACCOUNT_DIR / "ca.crt"
        session.verify = str(ca_path) if ca_path.is_file() else True
        return cls(f"https://{host}:{port}", session)

    def _list(self, api_path: str) -> list[dict]:
        items: list[dict] = []
        params: dict[str, str] = {}
        while True:
            response = self.session.get(self.server + api_path, params=params, timeout=_TIMEOUT)
            response.raise_for_status()
            body = response.json()
            items.extend(body.get("items") or [])
            next_page = (body.get("metadata") or {}).get("continue")
            if not next_page:
                return items
            params = {"continue": next_page}

    def list_pods(self) -> list[dict]:
        """Return the pods of every namespace."""
        return self._list("/api/v1/pods")

    def list_cluster_roles(self) -> list[dict]:
        """Return all cluster roles."""
        return self._list(f"{_RBAC_API}/clusterroles")

    def list_cluster_role_bindings(self) -> list[dict]:
        """Return all cluster role bindings."""
        return self._list(f"{_RBAC_API}/clusterrolebindings")


def load_client(path: str | os.PathLike | None = None) -> KubeClient:
    """Return a client configured from ``path`` or the default kubeconfig."""
    return KubeClient.from_kubeconfig(path)


def _namespace(pod: dict) -> str:
    return (pod.get("metadata") or {}).get("namespace") or ""


def filter_pods(pods: Iterable[dict], exclude: str | None) -> list[dict]:
    """Drop pods whose namespace contains any of the comma separated ``exclude`` entries."""
    patterns = exclude.split(",") if exclude else []
    return [pod for pod in pods if not any(pattern in _namespace(pod) for pattern in patterns)]


def connect_with_pods(client: KubeClient, exclude: str | None) -> list[dict]:
    """Fetch all pods from the cluster, leaving out excluded namespaces."""
    return filter_pods(client.list_pods(), exclude)