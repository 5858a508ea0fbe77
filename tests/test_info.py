from eathar.info import image_list, principal_list


def _binding(*subjects):
    return {"metadata": {"name": "b"}, "subjects": list(subjects)}


BINDINGS = [
    _binding(
        {"kind": "User", "name": "alice"},
        {"kind": "Group", "name": "system:masters"},
        {"kind": "ServiceAccount", "name": "builder", "namespace": "ci"},
    ),
    _binding({"kind": "User", "name": "alice"}, {"kind": "User", "name": "bob"}),
    {"metadata": {"name": "empty"}},
]


def test_users_are_deduplicated_in_first_seen_order():
    assert principal_list(BINDINGS, "User") == ["alice", "bob"]


def test_groups():
    assert principal_list(BINDINGS, "Group") == ["system:masters"]


def test_service_accounts_carry_namespace():
    assert principal_list(BINDINGS, "ServiceAccount") == ["ci/builder"]


def test_no_match_gives_empty_list():
    assert principal_list(BINDINGS, "Robot") == []


def test_image_list_deduplicates():
    pods = [
        {"spec": {"containers": [{"name": "a", "image": "nginx:1.25"}, {"name": "b", "image": "redis"}]}},
        {"spec": {"containers": [{"name": "c", "image": "nginx:1.25"}]}},
        {"spec": {}},
    ]
    result = image_list(pods)
    assert result == ["nginx:1.25", "redis"]
    assert len(result) == len(set(result))


def test_image_list_ignores_init_containers():
    pods = [{"spec": {"containers": [{"image": "app"}], "initContainers": [{"image": "setup"}]}}]
    assert image_list(pods) == ["app"]