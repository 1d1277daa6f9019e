# SPDX-License-Identifier: BSD-2-Clause
# Copyright (c) deftio llc

"""Rich output formatters for the CLI."""

from __future__ import annotations

import dataclasses
import json
import sys
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from dockerenv.errors import DockerEnvError
    from dockerenv.types import ComposeCandidate, DoctorReport, TemplateSystem

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

_console = Console()
_err_console = Console(stderr=True)


def format_candidates(items: list[ComposeCandidate], *, json_output: bool = False) -> None:
    """Print the available compose files, marking the active one."""
    if json_output:
        click_echo_json([dataclasses.asdict(item) for item in items])
        return

    _console.print("Available docker-compose files:")
    if not items:
        _console.print("  [dim](no files found)[/dim]")
        return
    for item in items:
        marker = " [green](active)[/green]" if item.active else ""
        _console.print(f"  {item.name}{marker}", highlight=False)


def system_summary(system: TemplateSystem) -> dict[str, object]:
    """Return a JSON-friendly description of a template system."""
    return {
        "name": system.name,
        "origin": system.origin.value,
        "path": str(system.path) if system.path else "",
        "versions": list(system.versions),
        "default_version": system.default_version,
        "files": sorted(system.files),
    }


def format_systems(systems: list[TemplateSystem], *, json_output: bool = False) -> None:
    """Print template systems as a rich table or JSON."""
    if json_output:
        click_echo_json([system_summary(s) for s in systems])
        return

    if not systems:
        _console.print("[dim]No template systems found.[/dim]")
        return

    table = Table(title="Template Systems")
    table.add_column("Name", style="cyan")
    table.add_column("Origin")
    table.add_column("Versions")
    table.add_column("Default")
    table.add_column("Path", style="dim")

    for s in systems:
        origin_style = "yellow" if s.is_custom else "green"
        table.add_row(
            s.name,
            f"[{origin_style}]{s.origin.value}[/{origin_style}]",
            ", ".join(s.versions) or "-",
            s.default_version or "-",
            str(s.path or ""),
        )

    _console.print(table)


def format_doctor_report(report: DoctorReport, *, json_output: bool = False) -> None:
    """Print doctor report as a rich panel or JSON."""
    if json_output:
        data = {
            "healthy": report.healthy,
            "checks": [dataclasses.asdict(c) for c in report.checks],
        }
        click_echo_json(data)
        return

    lines: list[str] = []
    for check in report.checks:
        if check.ok:
            lines.append(f"[green]✓[/green] {check.name}: {check.detail}")
        else:
            lines.append(f"[red]✗[/red] {check.name}: {check.detail}")
            if check.hint:
                lines.append(f"  [dim]{check.hint}[/dim]")
    if not lines:
        lines.append("[dim]Nothing to report.[/dim]")

    panel = Panel("\n".join(lines), title="Docker Environment Check", expand=False)
    _console.print(panel)


def format_history(entries: list[dict[str, object]]) -> None:
    """Print command history entries as a rich table."""
    table = Table(title="Command History")
    table.add_column("Type", style="cyan")
    table.add_column("Command")
    table.add_column("Exit")
    table.add_column("Duration")
    table.add_column("Timestamp", style="dim")

    for entry in entries:
        exit_code = str(entry.get("exit_code", ""))
        exit_style = "green" if exit_code == "0" else "red" if exit_code else ""
        dur = entry.get("duration_ms")
        dur_str = f"{dur:.0f}ms" if isinstance(dur, (int, float)) else ""
        table.add_row(
            str(entry.get("type", "")),
            str(entry.get("command", ""))[:60],
            f"[{exit_style}]{exit_code}[/{exit_style}]" if exit_style else exit_code,
            dur_str,
            str(entry.get("timestamp", "")),
        )

    _console.print(table)


def format_error(err: DockerEnvError) -> None:
    """Print an error as a rich panel with suggestions."""
    title, suggestion = _error_info(err)
    lines = [str(err)]
    if suggestion:
        lines.append(f"\n[dim]{suggestion}[/dim]")

    panel = Panel(
        "\n".join(lines),
        title=f"[red]{title}[/red]",
        expand=False,
    )
    _err_console.print(panel)


def _error_info(err: DockerEnvError) -> tuple[str, str]:
    """Map an error to a title and suggestion string."""
    from dockerenv.errors import (  # noqa: PLC0415
        ComposeFileExists,
        ComposeFileNotFound,
        EnvironmentExists,
        InvalidComposeTarget,
        InvalidMirror,
        NoActiveEnvironment,
        SystemNotFound,
        TemplateExists,
        TemplateWriteError,
        VersionNotFound,
    )

    if isinstance(err, EnvironmentExists):
        return "Already Exists", "Choose another directory or remove the existing one."
    if isinstance(err, TemplateExists):
        return "Already Exists", "Pick another name or edit the existing template."
    if isinstance(err, ComposeFileExists):
        return "Already Exists", "Pass --yes to overwrite it."
    if isinstance(err, SystemNotFound):
        return "Template Not Found", "Run 'docker-env-init templates' to see available systems."
    if isinstance(err, VersionNotFound):
        return "Version Not Found", "Run 'docker-env-init list' to see available compose files."
    if isinstance(err, ComposeFileNotFound):
        return "File Not Found", "Run 'docker-env-init list' to see available compose files."
    if isinstance(err, InvalidComposeTarget):
        return "Invalid Target", "Pick a docker-compose.<version>.yml file instead."
    if isinstance(err, NoActiveEnvironment):
        return "No Active Version", "Run 'docker-env-init use <version>' first."
    if isinstance(err, TemplateWriteError):
        return "Write Failed", "Check permissions and free space of the target directory."
    if isinstance(err, InvalidMirror):
        return "Invalid Mirror", ""
    return "Error", ""


def print_success(msg: str) -> None:
    """Print a success message with a checkmark."""
    _console.print(f"[green]✓[/green] {msg}")


def confirm_destructive(msg: str) -> bool:
    """Prompt for confirmation. Returns True if confirmed."""
    return _console.input(f"[yellow]{msg} [y/N]:[/yellow] ").strip().lower() == "y"


def click_echo_json(data: object) -> None:
    """Serialize data to JSON and echo to stdout."""
    sys.stdout.write(json.dumps(data, indent=2, default=str) + "\n")
