"""Text, HTML and JSON reports for check results."""

from __future__ import annotations

import json
import sys
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import IO, Iterator, Sequence

_STYLE = (
    " <style>\n"
    "body {\n"
    "\tfont: normal 14px;\n"
    '\tfont-family: "Helvetica Neue", Helvetica, Arial, sans-serif;\n'
    "\tcolor: #C41230;\n"
    "\tbackground: #FFFFFF;\n"
    "}\n"
    "#kubernetes-analyzer {\n"
    "\tfont-weight: bold;\n"
    "\tfont-size: 48px;\n"
    "\tcolor: #C41230;\n"
    "}\n"
    ".master-node, .worker-node, .vuln-node {\n"
    "\tbackground: #F5F5F5;\n"
    "\tborder: 1px solid black;\n"
    "\tpadding-left: 6px;\n"
    "}\n"
    "#api-server-results {\n"
    "\tfont-weight: italic;\n"
    "\tfont-size: 36px;\n"
    "\tcolor: #C41230;\n"
    "}\n"
    "table, th, td {\n"
    "\tborder-collapse: collapse;\n"
    "\tborder: 1px solid black;\n"
    "}\n"
    "th {\n"
    " font: bold 11px;\n"
    " color: #C41230;\n"
    " background: #999999;\n"
    " letter-spacing: 2px;\n"
    " text-transform: uppercase;\n"
    " text-align: left;\n"
    " padding: 6px 6px 6px 12px;\n"
    "}\n"
    "td {\n"
    "background: #FFFFFF;\n"
    "padding: 6px 6px 6px 12px;\n"
    "color: #333333;\n"
    "}\n"
    ".container{\n"
    "\tdisplay: flex;\n"
    "} \n"
    ".fixed{\n"
    "\twidth: 300px;\n"
    "}\n"
    ".flex-item{\n"
    "\tflex-grow: 1;\n"
    "}\n"
    "</style>"
)

_SIMPLE_CHECKS = frozenset({
    "hostpid", "hostnet", "hostipc", "privileged", "allowprivesc",
    "HostProcess", "Seccomp Disabled", "Unmasked Procmount", "Apparmor Disabled",
})


@dataclass(frozen=True)
class ReportOptions:
    """Output settings shared by all reports."""

    jsonrep: bool = False
    htmlrep: bool = False
    file: str = ""
    exclude: str = ""


@dataclass
class Finding:
    """One result of a pod security check."""

    check: str
    namespace: str
    pod: str = ""
    container: str = ""
    capabilities: list[str] = field(default_factory=list)
    hostport: int = 0
    volume: str = ""
    path: str = ""
    sysctl: str = ""
    image: str = ""

    def to_dict(self) -> dict:
        """Return the JSON form; optional fields are left out when empty."""
        result: dict = {"Check": self.check, "Namespace": self.namespace, "Pod": self.pod}
        optional = (
            ("Container", self.container),
            ("Capabilities", list(self.capabilities)),
            ("Hostport", self.hostport),
            ("Volume", self.volume),
            ("Path", self.path),
            ("Sysctl", self.sysctl),
            ("Image", self.image),
        )
        result.update((key, value) for key, value in optional if value)
        return result


def _to_json(value: object) -> str:
    text = json.dumps(value, indent=2, ensure_ascii=False)
    for char, escaped in (("&", "\\u0026"), ("<", "\\u003c"), (">", "\\u003e"),
                          ("\u2028", "\\u2028"), ("\u2029", "\\u2029")):
        text = text.replace(char, escaped)
    return text


@contextmanager
def _destination(options: ReportOptions, extension: str) -> Iterator[IO[str]]:
    if options.file:
        with open(options.file + extension, "a", encoding="utf-8") as handle:
            yield handle
    else:
        yield sys.stdout


def _pss_html_header(first: Finding) -> str:
    if first.check in _SIMPLE_CHECKS:
        if first.container:
            return "<tr><th>Namespace</th><th>Pod</th><th>Container</th></tr>"
        return "<tr><th>Namespace</th><th>Pod</th></tr>"
    return {
        "Added Capabilities": "<tr><th>namespace</th><th>pod</th><th>container</th><th>added capabilities</th></tr>",
        "Dropped Capabilities": "<tr><th>namespace</th><th>pod</th><th>container</th><th>dropped capabilities</th></tr>",
        "Host Ports": "<tr><th>namespace</th><th>pod</th><th>container</th><th>port</th</tr>",
        "Host Path": "<tr><th>namespace</th><th>pod</th><th>volume</th><th>path</th></tr>",
        "Unsafe Sysctl": "<tr><th>namespace</th><th>pod</th><th>unsafe sysctl</th></tr>",
    }.get(first.check, "")


def _cells(*values: object) -> str:
    return "<tr>" + "".join(f"<td>{value}</td>" for value in values) + "</tr>"


def _pss_html_row(item: Finding) -> str:
    check = item.check
    if check in _SIMPLE_CHECKS:
        if item.container:
            return _cells(item.namespace, item.pod, item.container)
        return _cells(item.namespace, item.pod)
    if check in ("Added Capabilities", "Dropped Capabilities"):
        return _cells(item.namespace, item.pod, item.container, ",".join(item.capabilities))
    if check == "Host Ports":
        return _cells(item.namespace, item.pod, item.container, item.hostport)
    if check == "Host Path":
        return _cells(item.namespace, item.pod, item.volume, item.path)
    if check == "Unsafe Sysctl":
        return _cells(item.namespace, item.pod, item.sysctl)
    return ""


def _pss_text_line(item: Finding) -> str:
    check = item.check
    prefix = f"namespace {item.namespace} : pod {item.pod}"
    if check in _SIMPLE_CHECKS:
        if item.container:
            return f"{prefix} : container {item.container}\n"
        return f"{prefix}\n"
    if check == "Added Capabilities":
        return f"{prefix} : container {item.container} added capabilities {','.join(item.capabilities)} \n"
    if check == "Dropped Capabilities":
        return f"{prefix} : container {item.container} dropped capabilities {','.join(item.capabilities)} \n"
    if check == "Host Ports":
        return f"{prefix} : container {item.container} : port {item.hostport}\n"
    if check == "Host Path":
        return f"{prefix} : volume {item.volume} : path {item.path}\n"
    if check == "Unsafe Sysctl":
        return f"{prefix} : unsafe sysctl {item.sysctl}"
    return ""


def report_pss(findings: Sequence[Finding], options: ReportOptions, check: str) -> None:
    """Write the findings of a pod security check."""
    if options.jsonrep:
        with _destination(options, ".json") as out:
            if findings:
                out.write(_to_json([item.to_dict() for item in findings]) + "\n")
    elif options.htmlrep:
        with _destination(options, ".html") as out:
            out.write(f"<html><head>{_STYLE}<title>Findings for the {check} check</title></head><body>")
            out.write(f"<h1>Findings for the {check} check</h1>")
            if findings:
                out.write("<table>\n")
                out.write(_pss_html_header(findings[0]))
                out.writelines(_pss_html_row(item) for item in findings)
                out.write("</table></body></html>\n")
            else:
                out.write("<p>No findings</p>\n")
    else:
        with _destination(options, ".txt") as out:
            out.write(f"Findings for the {check} check\n")
            if findings:
                out.writelines(_pss_text_line(item) for item in findings)
            else:
                out.write("No findings!\n")
            out.write("\n")


def _report_names(names: Sequence[str] | None, options: ReportOptions, check: str, html_head: str) -> None:
    if options.jsonrep:
        with _destination(options, ".json") as out:
            if names is not None:
                out.write(_to_json(list(names)) + "\n")
    elif options.htmlrep:
        with _destination(options, ".html") as out:
            out.write(html_head)
            if names is not None:
                out.writelines(f"<tr><td>{name}</td></tr>" for name in names)
            else:
                out.write("<tr><td>No findings</td></tr>\n")
            out.write("</table></body></html>\n")
    else:
        with _destination(options, ".txt") as out:
            out.write(f"Findings for the {check} check\n")
            if names is not None:
                out.writelines(f"{name}\n" for name in names)
            else:
                out.write("No findings!\n")
            out.write("\n")


def report_principal(principals: Sequence[str] | None, options: ReportOptions, check: str) -> None:
    """Write a list of principals; ``None`` means there were no findings."""
    head = f"<html><head>{_STYLE}<title>{check}</title></head><body><table><tr><th>Name</th></tr>"
    _report_names(principals, options, check, head)


def report_image(images: Sequence[str] | None, options: ReportOptions, check: str) -> None:
    """Write a list of images; ``None`` means there were no findings."""
    head = (f"<html><head>{_STYLE}<title>Image List</title></head><body>"
            "<h1>Image List</h1><br/><table><tr><th>Image</th></tr>")
    _report_names(images, options, check, head)


def _subject_text(subject: dict) -> str:
    kind, name = subject.get("kind", ""), subject.get("name", "")
    if kind == "ServiceAccount":
        return f"Kind: {kind}, Name: {name}, Namespace: {subject.get('namespace', '')}"
    return f"Kind: {kind}, Name: {name}"


def report_rbac(bindings: Sequence[dict], options: ReportOptions, check: str) -> None:
    """Write the cluster role bindings matched by an RBAC check."""
    if options.jsonrep:
        with _destination(options, ".json") as out:
            if bindings:
                out.write(_to_json({"metadata": {}, "items": list(bindings)}) + "\n")
    elif options.htmlrep:
        with _destination(options, ".html") as out:
            out.write(f"<html><head>{_STYLE}<title>RBAC Report</title></head><body>")
            if bindings:
                out.write("<table><tr><th>ClusterRoleBinding</th><th>Subjects</th><th>Role Ref</th></tr>")
                for binding in bindings:
                    out.write(f"<tr><td>{(binding.get('metadata') or {}).get('name', '')}</td>")
                    out.writelines(f"<td>{_subject_text(s)}</td>" for s in binding.get("subjects") or [])
                    role_ref = binding.get("roleRef") or {}
                    out.write(f"<td>Kind: {role_ref.get('kind', '')}, Name: {role_ref.get('name', '')}</td></tr>")
                out.write("</table></body></html>\n")
            else:
                out.write("No findings!\n")
    else:
        with _destination(options, ".txt") as out:
            out.write(f"Findings for the {check} check\n")
            for binding in bindings or []:
                out.write(f"ClusterRoleBinding {(binding.get('metadata') or {}).get('name', '')}\n")
                out.write("Subjects:\n")
                out.writelines(f"  {_subject_text(s)}\n" for s in binding.get("subjects") or [])
                role_ref = binding.get("roleRef") or {}
                out.write("RoleRef:\n")
                out.write(f"  Kind: {role_ref.get('kind', '')}, Name: {role_ref.get('name', '')}, "
                          f"APIGroup: {role_ref.get('apiGroup', '')}\n")
                out.write("------------------------\n")