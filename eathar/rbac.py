"""RBAC checks: cluster role bindings that grant sensitive rights.

Each check takes the cluster roles and cluster role bindings as returned by
the API server and returns the bindings whose role reference names a matching
cluster role. Bindings are reported in the order the server listed them. A
binding appears once for every time its role matches a rule, so a role that
grants a right in several rules yields the binding several times.
"""

from __future__ import annotations

from typing import Callable, Iterable

_Rule = dict
_RuleCounter = Callable[[_Rule], int]

_WEBHOOK_VERBS = frozenset({"create", "update", "patch", "delete", "*"})


def _name(obj: dict) -> str:
    return (obj.get("metadata") or {}).get("name") or ""


def _role_ref_name(binding: dict) -> str:
    return (binding.get("roleRef") or {}).get("name") or ""


def _resources(rule: _Rule) -> list[str]:
    return list(rule.get("resources") or [])


def _verbs(rule: _Rule) -> list[str]:
    return list(rule.get("verbs") or [])


def _resource_with_any_verb(resource: str, verbs: Iterable[str]) -> _RuleCounter:
    """Count each listing of ``resource`` once if the rule grants any of ``verbs``."""
    wanted = frozenset(verbs)

    def count(rule: _Rule) -> int:
        if not any(verb in wanted for verb in _verbs(rule)):
            return 0
        return _resources(rule).count(resource)

    return count


def _resource_with_each_verb(resource: str, verb: str) -> _RuleCounter:
    """Count every pairing of a listing of ``resource`` with a listing of ``verb``."""

    def count(rule: _Rule) -> int:
        return _resources(rule).count(resource) * _verbs(rule).count(verb)

    return count


def _verb_anywhere(verb: str) -> _RuleCounter:
    """Count each listing of ``verb``, whatever resources the rule names."""

    def count(rule: _Rule) -> int:
        return _verbs(rule).count(verb)

    return count


def _matching_roles(roles: Iterable[dict], counter: _RuleCounter) -> list[str]:
    """Return role names, repeated once for each match found in their rules."""
    names: list[str] = []
    for role in roles:
        matches = sum(counter(rule) for rule in role.get("rules") or [])
        names.extend([_name(role)] * matches)
    return names


def _bindings_for(role_names: list[str], bindings: Iterable[dict]) -> list[dict]:
    return [
        binding
        for binding in bindings
        for role_name in role_names
        if _role_ref_name(binding) == role_name
    ]


def _check(roles: Iterable[dict], bindings: Iterable[dict], counter: _RuleCounter) -> list[dict]:
    return _bindings_for(_matching_roles(roles, counter), bindings)


def get_cluster_admin_users(bindings: Iterable[dict]) -> list[dict]:
    """Bindings to the cluster-admin cluster role."""
    return [binding for binding in bindings if _role_ref_name(binding) == "cluster-admin"]


def get_secrets_users(roles: Iterable[dict], bindings: Iterable[dict]) -> list[dict]:
    """Bindings granting get or list on secrets, either of which reveals their contents."""
    return _check(roles, bindings, _resource_with_any_verb("secrets", ("get", "list", "*")))


def create_pv_users(roles: Iterable[dict], bindings: Iterable[dict]) -> list[dict]:
    """Bindings granting creation of persistent volumes."""
    return _check(roles, bindings, _resource_with_any_verb("persistentvolumes", ("create", "*")))


def escalate_users(roles: Iterable[dict], bindings: Iterable[dict]) -> list[dict]:
    """Bindings granting the escalate verb on any resource."""
    return _check(roles, bindings, _verb_anywhere("escalate"))


def impersonate_users(roles: Iterable[dict], bindings: Iterable[dict]) -> list[dict]:
    """Bindings granting the impersonate verb."""
    return _check(roles, bindings, _verb_anywhere("impersonate"))


def bind_users(roles: Iterable[dict], bindings: Iterable[dict]) -> list[dict]:
    """Bindings granting the bind verb."""
    return _check(roles, bindings, _verb_anywhere("bind"))


def validating_webhook_users(roles: Iterable[dict], bindings: Iterable[dict]) -> list[dict]:
    """Bindings allowing changes to validating admission webhook configurations."""
    return _check(roles, bindings, _resource_with_any_verb(
        "validatingadmissionwebhookconfigurations", _WEBHOOK_VERBS))


def mutating_webhook_users(roles: Iterable[dict], bindings: Iterable[dict]) -> list[dict]:
    """Bindings allowing changes to mutating admission webhook configurations."""
    return _check(roles, bindings, _resource_with_any_verb(
        "mutatingadmissionwebhookconfigurations", _WEBHOOK_VERBS))


def wildcard_access(roles: Iterable[dict], bindings: Iterable[dict]) -> list[dict]:
    """Bindings granting every verb on every resource through wildcards."""
    return _check(roles, bindings, _resource_with_each_verb("*", "*"))


def create_service_account_tokens(roles: Iterable[dict], bindings: Iterable[dict]) -> list[dict]:
    """Bindings granting create on the token sub-resource of service accounts."""
    return _check(roles, bindings, _resource_with_each_verb("serviceaccounts/token", "create"))


def update_csr_approval(roles: Iterable[dict], bindings: Iterable[dict]) -> list[dict]:
    """Bindings granting update on the approval sub-resource of certificate signing requests."""
    return _check(roles, bindings, _resource_with_any_verb(
        "certificatesigningrequests/approval", ("update", "*")))