import pytest

from eathar.capabilities import added_capabilities, dropped_capabilities, host_ports


def make_pod(name="web", namespace="default", **spec):
    return {"metadata": {"name": name, "namespace": namespace}, "spec": spec}


def caps_container(name, add=None, drop=None):
    capabilities = {}
    if add is not None:
        capabilities["add"] = add
    if drop is not None:
        capabilities["drop"] = drop
    return {"name": name, "securityContext": {"capabilities": capabilities}}


@pytest.mark.parametrize(
    "func, key, check",
    [
        (added_capabilities, "add", "Added Capabilities"),
        (dropped_capabilities, "drop", "Dropped Capabilities"),
    ],
)
def test_capabilities_across_container_kinds(func, key, check):
    pod = make_pod(
        "p",
        "ns",
        containers=[caps_container("c1", **{key: ["NET_ADMIN", "SYS_TIME"]}), {"name": "c2"}],
        initContainers=[caps_container("i1", **{key: ["ALL"]})],
        ephemeralContainers=[caps_container("e1", **{key: ["CHOWN"]})],
    )
    result = func([pod])
    assert [(f.container, f.capabilities) for f in result] == [
        ("c1", ["NET_ADMIN", "SYS_TIME"]),
        ("i1", ["ALL"]),
        ("e1", ["CHOWN"]),
    ]
    assert {f.check for f in result} == {check}
    assert {(f.namespace, f.pod) for f in result} == {("ns", "p")}


def test_added_ignores_drop_only():
    pod = make_pod(containers=[caps_container("c", drop=["ALL"])])
    assert added_capabilities([pod]) == []
    assert [f.capabilities for f in dropped_capabilities([pod])] == [["ALL"]]


def test_empty_add_list_still_reported():
    pod = make_pod(containers=[caps_container("c", add=[])])
    result = added_capabilities([pod])
    assert len(result) == 1
    assert result[0].capabilities == []


def test_capabilities_json_form():
    pod = make_pod("p", "ns", containers=[caps_container("c", add=["NET_RAW"])])
    assert added_capabilities([pod])[0].to_dict() == {
        "Check": "Added Capabilities",
        "Namespace": "ns",
        "Pod": "p",
        "Container": "c",
        "Capabilities": ["NET_RAW"],
    }


def test_host_ports_only_nonzero():
    pod = make_pod(
        "p",
        "ns",
        containers=[
            {
                "name": "c1",
                "ports": [
                    {"containerPort": 80, "hostPort": 8080},
                    {"containerPort": 443},
                    {"containerPort": 53, "hostPort": 0},
                ],
            }
        ],
        initContainers=[{"name": "i1", "ports": [{"containerPort": 22, "hostPort": 2222}]}],
        ephemeralContainers=[{"name": "e1"}],
    )
    result = host_ports([pod])
    assert [(f.check, f.container, f.hostport) for f in result] == [
        ("Host Ports", "c1", 8080),
        ("Host Ports", "i1", 2222),
    ]


def test_no_pods_no_findings():
    assert host_ports([]) == []
    assert added_capabilities([make_pod()]) == []
    assert dropped_capabilities([make_pod(containers=[{"name": "c"}])]) == []