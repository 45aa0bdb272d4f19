"""Operation-specific Rich renderers for ServiceResult.

Each renderer writes to a Rich Console (backed by StringIO).  The caller
extracts the rendered text via ``get_output(console)``.

Renderers are dispatched by ``result.op`` in :func:`render_result`.
Unknown ops fall through to a generic key-value renderer.
"""

from __future__ import annotations

import json
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from rich.table import Table
from rich.text import Text

from cmkctl.output.console import create_console, get_output

if TYPE_CHECKING:
    from rich.console import Console

    from cmkctl.services.result import ServiceResult


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
        return f"ERROR: {result.op} — {msg}"
    return f"OK: {result.op}"


# ── Helpers ───────────────────────────────────────────────────────────


def _status_line(console: Console, result: ServiceResult) -> None:
    """Print the OK status line."""
    label = Text("OK", style="cmk.ok")
    op = Text(f"  {result.op}", style="cmk.op")
    console.print(label, op, end="")
    console.print()


def _field(console: Console, key: str, value: Any) -> None:
    """Print a single indented key-value field."""
    k = Text(f"  {key}: ", style="cmk.key")
    if key == "version" or key.endswith("_version"):
        v = Text(str(value), style="cmk.version")
    elif isinstance(value, (dict, list)):
        v = Text(json.dumps(value, separators=(",", ":")))
    else:
        v = Text(str(value))
    console.print(k, v, end="")
    console.print()


def _flag(enabled: bool) -> Text:
    if enabled:
        return Text("yes", style="cmk.enabled")
    return Text("no", style="cmk.disabled")


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


def _render_telemetry_tree(
    console: Console,
    span_data: dict[str, Any],
    indent: int = 4,
) -> None:
    """Render a hierarchical span tree with color-coded timing."""
    prefix = " " * indent
    name = span_data.get("name", "?")
    duration = span_data.get("duration_ms", 0.0)

    if duration > 60_000:
        style = "bold red"
    elif duration > 10_000:
        style = "yellow"
    else:
        style = "dim"

    line = f"{prefix}[{style}]{duration:>10.2f}ms[/{style}]  {name}"
    annotations = span_data.get("annotations") or {}
    if annotations:
        line += "  (" + ", ".join(f"{k}={v}" for k, v in annotations.items()) + ")"

    console.print(line)

    for child in span_data.get("children", []):
        _render_telemetry_tree(console, child, indent=indent + 4)


def _capabilities_table(capabilities: dict[str, bool]) -> Table:
    table = Table(show_header=True, header_style="bold", box=None, padding=(0, 2))
    table.add_column("Capability")
    table.add_column("Supported")
    for name, enabled in capabilities.items():
        table.add_row(name, _flag(enabled))
    return table


def _paths_table(title: str, paths: dict[str, str]) -> Table:
    table = Table(show_header=True, header_style="bold", box=None, padding=(0, 2))
    table.add_column(title)
    table.add_column("Path", style="cmk.path")
    for name, path in paths.items():
        table.add_row(name, path)
    return table


# ── Error renderer ────────────────────────────────────────────────────


def _render_error(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    err = result.error
    msg = err.message if err else "Unknown error"
    label = Text("ERROR", style="cmk.error")
    op = Text(f"  {result.op}", style="cmk.op")
    sep = Text(" — ")
    console.print(label, op, sep, msg)

    if verbose and err:
        console.print(Text(f"  code: {err.code}", style="dim"))
        for k, v in err.detail.items():
            console.print(Text(f"  {k}: {v}", style="dim"))
        completed = result.data.get("completed")
        if completed is not None:
            console.print(Text(f"  completed: {', '.join(completed) or '-'}", style="dim"))
        _render_meta(console, result)


# ── Operation renderers ───────────────────────────────────────────────


def _render_build(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    data = result.data
    if "version" in data:
        _field(console, "cmake_version", data["version"])
    if "completed" in data:
        _field(console, "completed", ", ".join(data["completed"]))
    if "stages" in data:
        _field(console, "stages", data["stages"])
    outputs = data.get("outputs") or {}
    if outputs:
        console.print()
        console.print(_paths_table("Output", outputs))
    if verbose:
        capabilities = data.get("capabilities") or {}
        if capabilities:
            console.print()
            console.print(_capabilities_table(capabilities))
        _render_meta(console, result)


def _render_probe(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    _field(console, "version", result.data.get("version", "?"))
    _field(console, "minimum_version", result.data.get("minimum_version", "?"))
    capabilities = result.data.get("capabilities") or {}
    if capabilities:
        console.print()
        console.print(_capabilities_table(capabilities))
    if verbose:
        _render_meta(console, result)


def _render_dirs(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    data = result.data
    _field(console, "configurations", ", ".join(data.get("configurations", [])))
    _field(console, "multi_config", data.get("multi_config", False))
    console.print()
    console.print(_paths_table("Build", data.get("build_directories", {})))
    installs = data.get("install_directories") or {}
    if installs:
        console.print()
        console.print(_paths_table("Install", installs))
    outputs = data.get("outputs") or {}
    if outputs:
        console.print()
        console.print(_paths_table("Output", outputs))
    if verbose:
        _render_meta(console, result)


def _render_generic(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    for key, value in result.data.items():
        _field(console, key, value)
    if verbose:
        _render_meta(console, result)


_OP_RENDERERS: dict[str, Callable[..., None]] = {
    "build": _render_build,
    "probe": _render_probe,
    "dirs": _render_dirs,
}
