"""Rendering of results and diagnostics.

Results go to stdout and diagnostics go to stderr. In ``--json`` mode both are
indented JSON documents; otherwise strings print as-is, structured results are
rendered as YAML and diagnostics as a single ``Error:`` line.
"""
from __future__ import annotations

import json
from collections.abc import Iterable, Mapping

import typer
import yaml
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .errors import BegetError

console = Console()
err_console = Console(stderr=True, soft_wrap=True)


def to_json(payload: object) -> str:
    """Serialise *payload* the way every JSON document is printed."""
    return json.dumps(payload, indent=2, ensure_ascii=False, default=str)


def emit_result(payload: object, *, json_output: bool) -> None:
    """Print a successful result on stdout."""
    if json_output:
        typer.echo(to_json(payload))
        return
    typer.echo(render_plain(payload))


def render_plain(payload: object) -> str:
    """Return the human-readable rendering of *payload*."""
    if payload is None:
        return "OK"
    if isinstance(payload, str):
        return payload
    if isinstance(payload, bool):
        return "true" if payload else "false"
    if isinstance(payload, (int, float)):
        return str(payload)
    return yaml.safe_dump(
        _plain_data(payload),
        sort_keys=False,
        allow_unicode=True,
        default_flow_style=False,
    ).rstrip("\n")


def _plain_data(value: object) -> object:
    if isinstance(value, Mapping):
        return {str(key): _plain_data(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_plain_data(item) for item in value]
    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    return str(value)


def emit_error(error: BegetError, *, json_output: bool) -> None:
    """Print *error* once on stderr."""
    if json_output:
        typer.echo(to_json(error.to_dict()), err=True)
        return
    line = f"[bold red]Error:[/bold red] {escape(error.message)}"
    if error.provider_code:
        line += f" [dim]({escape(error.provider_code)})[/dim]"
    err_console.print(line)
    if error.details:
        err_console.print(escape(error.details))


def emit_profiles(
    rows: Iterable[Mapping[str, object]],
    *,
    active: str | None,
    json_output: bool,
) -> None:
    """Print the profile listing as JSON or a table."""
    entries = list(rows)
    if json_output:
        typer.echo(to_json({"profiles": entries, "activeProfile": active}))
        return
    if not entries:
        typer.echo("No profiles configured")
        return

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("", width=1)
    table.add_column("Profile", style="bold")
    table.add_column("Login")
    table.add_column("Endpoint")
    for entry in entries:
        table.add_row(
            "*" if entry.get("active") else "",
            escape(str(entry.get("name", ""))),
            escape(str(entry.get("login", ""))),
            escape(str(entry.get("baseUrl") or "")),
        )
    console.print(table)


__all__ = [
    "console",
    "emit_error",
    "emit_profiles",
    "emit_result",
    "err_console",
    "render_plain",
    "to_json",
]
