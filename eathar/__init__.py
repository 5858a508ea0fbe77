"""Kubernetes security checks: cluster access, pod security, RBAC and inventory reports."""

__version__ = "0.2.10"