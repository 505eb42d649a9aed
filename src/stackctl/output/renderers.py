"""Operation-specific Rich renderers for ServiceResult.

Each renderer writes to a Rich Console (backed by StringIO). The caller
extracts the rendered text via ``get_output(console)``.

Renderers are dispatched by ``result.op`` in :func:`render_result`.
Unknown ops fall through to a generic key-value renderer.
"""

from __future__ import annotations

import json as _json
from typing import TYPE_CHECKING, Any

from rich.table import Table
from rich.text import Text

from stackctl.output.console import create_console, get_output, style_for_env

if TYPE_CHECKING:
    from rich.console import Console

    from stackctl.services.result import ServiceResult


# ── Public API ────────────────────────────────────────────────────────


def render_result(result: ServiceResult, *, verbose: bool = False) -> str:
    """Render a ServiceResult to a styled string via Rich.

    Returns plain text (no ANSI) when Rich detects no terminal,
    which is the case inside Click's CliRunner and piped output.
    """
    console = create_console()

    if result.ok:
        renderer = _OP_RENDERERS.get(result.op, _render_generic)
        renderer(result, console, verbose=verbose)
    else:
        _render_error(result, console, verbose=verbose)

    return get_output(console).rstrip("\n")


def render_quiet(result: ServiceResult) -> str:
    """Render minimal output for ``--quiet`` mode."""
    if not result.ok:
        msg = result.error.message if result.error else "Unknown error"
        return f"ERROR: {result.op}: {msg}"

    files = result.data.get("files_created")
    if files:
        return "\n".join(files)
    return f"OK: {result.op}"


# ── Helpers ───────────────────────────────────────────────────────────


def _status_line(console: Console, result: ServiceResult) -> None:
    label = Text("OK", style="sc.ok")
    op = Text(f"  {result.op}", style="sc.op")
    console.print(label, op, end="")
    console.print()


def _field(console: Console, key: str, value: Any) -> None:
    """Print a single indented key-value field."""
    k = Text(f"  {key}: ", style="sc.key")
    if key in ("project", "app", "name"):
        v = Text(str(value), style="sc.name")
    elif key in ("path", "output_dir") or key.endswith("_file"):
        v = Text(str(value), style="sc.path")
    elif key in ("uri", "url"):
        v = Text(str(value), style="sc.url")
    else:
        v = Text(str(value))
    console.print(k, v, end="")
    console.print()


def _heading(console: Console, title: str) -> None:
    console.print()
    console.print(Text(title, style="sc.title"))


def _render_meta(console: Console, result: ServiceResult) -> None:
    """Print meta block including telemetry span tree (verbose only)."""
    if not result.meta:
        return

    console.print()
    console.print(Text("  meta:", style="dim"))

    for k, v in result.meta.items():
        if k == "telemetry":
            _render_telemetry_tree(console, v, indent=4)
        else:
            console.print(f"    {k}: {v}")


def _render_telemetry_tree(console: Console, span_data: dict[str, Any], indent: int = 4) -> None:
    prefix = " " * indent
    name = span_data.get("name", "?")
    duration = span_data.get("duration_ms", 0.0)

    line = Text(prefix)
    line.append(f"{duration:>8.2f}ms", style=_duration_style(duration))
    line.append(f"  {name}")
    if span_data.get("attributes"):
        extras = [f"{k}={v}" for k, v in span_data["attributes"].items()]
        line.append(f"  ({', '.join(extras)})", style="dim")
    console.print(line, soft_wrap=True)

    for call in span_data.get("aws_calls", []):
        call_line = Text(f"{prefix}    ")
        call_line.append("aws ", style="dim")
        call_line.append(f"{call.get('service')}:{call.get('operation')}")
        if call.get("region"):
            call_line.append(f" [{call['region']}]", style="dim")
        if "duration_ms" in call:
            call_line.append(f" {call['duration_ms']:.2f}ms", style=_duration_style(call["duration_ms"]))
        if call.get("error_code"):
            call_line.append(f" {call['error_code']}", style="sc.error")
        console.print(call_line, soft_wrap=True)

    for child in span_data.get("children", []):
        _render_telemetry_tree(console, child, indent=indent + 4)


def _duration_style(duration: float) -> str:
    if duration > 1000:
        return "bold red"
    if duration > 100:
        return "yellow"
    return "dim"


def _table(*columns: str) -> Table:
    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    for col in columns:
        table.add_column(col)
    return table


# ── Error renderer ────────────────────────────────────────────────────


def _render_error(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    err = result.error
    msg = err.message if err else "Unknown error"
    label = Text("ERROR", style="sc.error")
    op = Text(f"  {result.op}", style="sc.op")
    console.print(label, op, Text(": "), msg)

    if verbose and err and err.detail:
        console.print(Text("  detail:", style="dim"))
        for k, v in err.detail.items():
            console.print(f"    {k}: {v}")


# ── Project renderers ─────────────────────────────────────────────────


def _render_init_project(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    d = result.data
    _status_line(console, result)
    _field(console, "project", d.get("project", ""))
    _field(console, "account_id", d.get("account_id", ""))
    if d.get("domain"):
        _field(console, "domain", d["domain"])
    _field(console, "registration", d.get("registration", ""))

    console.print()
    console.print(
        f"The directory {d.get('workspace_dir', '')} will hold application manifests"
        f" for project {d.get('project', '')}.",
        soft_wrap=True,
    )
    _heading(console, "Recommended follow-up actions:")
    console.print(
        "  - Add an application manifest under the workspace directory, then run"
        " `stackctl app package` to build its stack."
    )
    if verbose:
        _render_meta(console, result)


def _render_show_project(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    d = result.data
    _heading(console, "About")
    _field(console, "name", d.get("name", ""))
    _field(console, "account_id", d.get("account_id", ""))
    _field(console, "uri", d.get("uri") or "N/A")

    _heading(console, "Environments")
    envs = d.get("environments", [])
    if envs:
        table = _table("Name", "AccountID", "Region")
        for env in envs:
            table.add_row(
                Text(env["name"], style=style_for_env(bool(env.get("prod")))),
                env.get("account_id", ""),
                env.get("region", ""),
            )
        console.print(table)
    else:
        console.print("  none")

    _heading(console, "Applications")
    apps = d.get("applications", [])
    if apps:
        table = _table("Name", "Type")
        for app in apps:
            table.add_row(Text(app["name"], style="sc.name"), app.get("type", ""))
        console.print(table)
    else:
        console.print("  none")
    if verbose:
        _render_meta(console, result)


# ── App renderers ─────────────────────────────────────────────────────


def _render_show_app(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    d = result.data
    _heading(console, "About")
    _field(console, "project", d.get("project", ""))
    _field(console, "name", d.get("app", ""))
    _field(console, "type", d.get("type", ""))

    _heading(console, "Configurations")
    configs = d.get("configurations", [])
    if configs:
        table = _table("Environment", "Tasks", "CPU (vCPU)", "Memory (MiB)", "Port")
        for c in configs:
            table.add_row(c["environment"], c["tasks"], _vcpu(c["cpu"]), c["memory"], c["port"])
        console.print(table)
    else:
        console.print("  not deployed to any environment")

    routes = d.get("routes", [])
    if routes:
        _heading(console, "Routes")
        table = _table("Environment", "URL")
        for r in routes:
            table.add_row(r["environment"], Text(r["url"], style="sc.url"))
        console.print(table)

    resources = d.get("resources", {})
    if resources:
        _heading(console, "Resources")
        for env_name, rows in resources.items():
            console.print(Text(f"  {env_name}", style="sc.key"))
            for row in rows:
                console.print(f"    {row['type']}  {row['physical_id']}")
    if verbose:
        _render_meta(console, result)


def _vcpu(units: str) -> str:
    try:
        return f"{int(units) / 1024:g}"
    except ValueError:
        return units


def _render_package_app(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    d = result.data
    _status_line(console, result)
    _field(console, "app", d.get("app", ""))
    _field(console, "env", d.get("env", ""))
    _field(console, "tag", d.get("tag", ""))
    for path in d.get("files_created", []):
        _field(console, "path", path)
    if verbose:
        _render_meta(console, result)


# ── Generic fallback ──────────────────────────────────────────────────


def _render_generic(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Fallback renderer: status line + all data as key-value pairs."""
    _status_line(console, result)
    for key, value in result.data.items():
        if isinstance(value, (dict, list)):
            _field(console, key, _json.dumps(value, separators=(",", ":")))
        else:
            _field(console, key, value)
    if verbose:
        _render_meta(console, result)


# ── Dispatch table ────────────────────────────────────────────────────

_OP_RENDERERS: dict[str, Any] = {
    "init_project": _render_init_project,
    "show_project": _render_show_project,
    "show_app": _render_show_app,
    "package_app": _render_package_app,
}
