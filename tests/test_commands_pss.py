import copy
import json

import pytest

from eathar.commands_pss import describe, run, run_all
from eathar.reporting import ReportOptions


class FakeClient:
    def __init__(self, pods):
        self._pods = pods
        self.calls = 0

    def list_pods(self):
        self.calls += 1
        return copy.deepcopy(self._pods)


def _pod(namespace, name, spec=None):
    return {"metadata": {"namespace": namespace, "name": name}, "spec": spec or {}}


ALL_TITLES = [
    "Allow Privilege Escalation",
    "Apparmor Disabled",
    "Added Capabilities",
    "Dropped Capabilities",
    "Host IPC",
    "Host Network",
    "Host Path",
    "Host PID",
    "Host Ports",
    "Host Process",
    "Privileged Container",
    "Seccomp Disabled",
    "Unmasked Procmount",
    "Unsafe Sysctl",
]


def test_hostnet_text_report(capsys):
    client = FakeClient([_pod("ns", "p", {"hostNetwork": True}), _pod("ns", "q")])
    run("hostnet", client, ReportOptions())
    assert capsys.readouterr().out == "Findings for the Host Network check\nnamespace ns : pod p\n\n"


def test_no_findings_text(capsys):
    run("hostpid", FakeClient([_pod("ns", "p")]), ReportOptions())
    assert capsys.readouterr().out == "Findings for the Host PID check\nNo findings!\n\n"


def test_hostports_text_report(capsys):
    spec = {"containers": [{"name": "c", "ports": [{"hostPort": 8080}, {"containerPort": 80}]}]}
    run("hostports", FakeClient([_pod("ns", "p", spec)]), ReportOptions())
    out = capsys.readouterr().out
    assert out == "Findings for the Host Ports check\nnamespace ns : pod p : container c : port 8080\n\n"


def test_exclude_filters_namespaces(capsys):
    pods = [
        _pod("kube-system", "sys", {"hostNetwork": True}),
        _pod("default", "app", {"hostNetwork": True}),
    ]
    run("hostnet", FakeClient(pods), ReportOptions(exclude="kube"))
    out = capsys.readouterr().out
    assert "pod app" in out
    assert "pod sys" not in out


def test_privileged_json_report(capsys):
    spec = {"containers": [{"name": "c", "securityContext": {"privileged": True}}]}
    run("privileged", FakeClient([_pod("ns", "p", spec)]), ReportOptions(jsonrep=True))
    data = json.loads(capsys.readouterr().out)
    assert data == [{"Check": "privileged", "Namespace": "ns", "Pod": "p", "Container": "c"}]


def test_report_written_to_file(tmp_path, capsys):
    base = tmp_path / "report"
    client = FakeClient([_pod("ns", "p", {"hostIPC": True})])
    run("hostipc", client, ReportOptions(file=str(base)))
    assert capsys.readouterr().out == ""
    text = (tmp_path / "report.txt").read_text(encoding="utf-8")
    assert text == "Findings for the Host IPC check\nnamespace ns : pod p\n\n"


def test_run_all_reports_every_check_in_order(capsys):
    client = FakeClient([_pod("ns", "p", {"containers": [{"name": "c"}]})])
    run_all(client, ReportOptions())
    out = capsys.readouterr().out
    positions = [out.index(f"Findings for the {title} check\n") for title in ALL_TITLES]
    assert positions == sorted(positions)
    assert out.count("Findings for the ") == len(ALL_TITLES)
    assert client.calls == 1


def test_run_all_named_matches_run_all(capsys):
    pods = [_pod("ns", "p", {"hostPID": True, "containers": [{"name": "c"}]})]
    run("all", FakeClient(pods), ReportOptions())
    via_name = capsys.readouterr().out
    run_all(FakeClient(pods), ReportOptions())
    assert capsys.readouterr().out == via_name


def test_unknown_command_raises():
    with pytest.raises(ValueError):
        run("nosuchcheck", FakeClient([]), ReportOptions())


def test_describe_lists_all_commands():
    commands = describe()
    assert set(commands) == {
        "all", "allowprivesc", "apparmor", "capadded", "capdropped", "hostipc",
        "hostnet", "hostpath", "hostpid", "hostports", "hostprocess",
        "privileged", "procmount", "seccomp", "sysctl",
    }
    assert commands["hostnet"][0] == "List pods with host networking"
    assert all(short and long for short, long in commands.values())


@pytest.mark.parametrize("name", sorted(set(describe()) - {"all"}))
def test_every_described_command_runs(name, capsys):
    run(name, FakeClient([_pod("ns", "p")]), ReportOptions())
    assert capsys.readouterr().out.startswith("Findings for the ")