# SPDX-License-Identifier: BSD-2-Clause
# Copyright (c) deftio llc

"""CLI command implementations."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import click

from dockerenv import compose, environment
from dockerenv.cli._output import (
    click_echo_json,
    confirm_destructive,
    format_candidates,
    format_doctor_report,
    format_error,
    format_history,
    format_systems,
    print_success,
)
from dockerenv.errors import ComposeFileExists, DockerEnvError

if TYPE_CHECKING:
    from collections.abc import Callable

    from dockerenv.cli.main import CliContext


def _get_ctx(ctx: click.Context) -> CliContext:
    """Extract the CliContext from Click's context object."""
    return ctx.obj  # type: ignore[no-any-return]


# ---------------------------------------------------------------------------
# Environment commands
# ---------------------------------------------------------------------------


@click.command("init")
@click.argument("directory", required=False, default=None)
@click.option("--system", "-s", default=None, help="Template system (default: ubuntu).")
@click.pass_context
def init_cmd(ctx: click.Context, directory: str | None, system: str | None) -> None:
    """Create a docker-env template in DIRECTORY (default: docker-env)."""
    cli_ctx = _get_ctx(ctx)
    target = cli_ctx.env_dir / (directory or cli_ctx.config.default_dir)
    name = system or cli_ctx.config.default_system

    try:
        template = cli_ctx.registry.require(name)
        environment.materialize(target, template)
    except DockerEnvError as exc:
        format_error(exc)
        raise SystemExit(1) from exc

    for filename in sorted(template.files):
        click.echo(f"Created {filename}")
    click.echo(f"Created {environment.SWITCH_SCRIPT}")
    print_success(f"docker-env template created in {target}/")

    click.echo("\nUsage:")
    click.echo(f"  cd {target}")
    if template.default_version and template.default_version != "default":
        click.echo(f"  docker-env-init use {template.default_version}")
    click.echo("  docker-env-init up")


@click.command("use")
@click.argument("version")
@click.pass_context
def use_cmd(ctx: click.Context, version: str) -> None:
    """Switch the active compose file to docker-compose.VERSION.yml."""
    cli_ctx = _get_ctx(ctx)
    try:
        environment.select_version(cli_ctx.env_dir, version)
    except DockerEnvError as exc:
        format_error(exc)
        raise SystemExit(1) from exc
    print_success(f"Switched to: {environment.compose_path(cli_ctx.env_dir, version).name}")


@click.command("switch")
@click.argument("file")
@click.pass_context
def switch_cmd(ctx: click.Context, file: str) -> None:
    """Switch the active compose file to FILE."""
    cli_ctx = _get_ctx(ctx)
    try:
        environment.switch_to(cli_ctx.env_dir, file)
    except DockerEnvError as exc:
        format_error(exc)
        raise SystemExit(1) from exc
    print_success(f"Switched to: {Path(file).name}")


@click.command("current")
@click.pass_context
def current_cmd(ctx: click.Context) -> None:
    """Show the currently active compose file."""
    cli_ctx = _get_ctx(ctx)
    label = environment.current_version(cli_ctx.env_dir)
    if label is None:
        click.echo(
            f"No {environment.COMPOSE_LINK} active. Run 'docker-env-init use <version>' first."
        )
        return
    click.echo(f"Current: {label}")


@click.command("list")
@click.option("--json", "json_output", is_flag=True, help="Output as JSON.")
@click.pass_context
def list_cmd(ctx: click.Context, *, json_output: bool) -> None:
    """List the available docker-compose files."""
    cli_ctx = _get_ctx(ctx)
    format_candidates(environment.list_candidates(cli_ctx.env_dir), json_output=json_output)


@click.command("create")
@click.argument("name")
@click.option("--yes", "-y", is_flag=True, help="Overwrite without asking.")
@click.pass_context
def create_cmd(ctx: click.Context, name: str, *, yes: bool) -> None:
    """Create a custom docker-compose.NAME.yml from the scaffold."""
    cli_ctx = _get_ctx(ctx)
    try:
        try:
            path = environment.create_custom(cli_ctx.env_dir, name, overwrite=yes)
        except ComposeFileExists as exc:
            if not confirm_destructive(f"File {exc.path.name} exists. Overwrite?"):
                click.echo("Aborted.")
                return
            path = environment.create_custom(cli_ctx.env_dir, name, overwrite=True)
    except DockerEnvError as exc:
        format_error(exc)
        raise SystemExit(1) from exc

    print_success(f"Created: {path.name}")
    click.echo(f"Edit the file as needed, then run: docker-env-init switch {path.name}")


# ---------------------------------------------------------------------------
# Delegated compose commands
# ---------------------------------------------------------------------------


def _run_action(
    ctx: click.Context,
    action: Callable[..., int],
    *,
    failure: str = "",
) -> None:
    """Run a compose action for the environment; exit with its code on failure."""
    cli_ctx = _get_ctx(ctx)
    command = compose.compose_command(cli_ctx.config.compose_command)
    try:
        code = action(cli_ctx.env_dir, command=command, history=cli_ctx.history)
    except DockerEnvError as exc:
        format_error(exc)
        raise SystemExit(1) from exc
    if code != 0:
        if failure:
            click.echo(failure, err=True)
        raise SystemExit(code)


@click.command("build")
@click.pass_context
def build_cmd(ctx: click.Context) -> None:
    """Build images (uses the current docker-compose.yml)."""
    _run_action(ctx, compose.build)


@click.command("up")
@click.pass_context
def up_cmd(ctx: click.Context) -> None:
    """Start the container in detached mode."""
    _run_action(ctx, compose.up)
    click.echo("Container started. Run 'docker-env-init exec' to enter.")


@click.command("down")
@click.pass_context
def down_cmd(ctx: click.Context) -> None:
    """Stop and remove containers."""
    _run_action(ctx, compose.down)


@click.command("run")
@click.pass_context
def run_cmd(ctx: click.Context) -> None:
    """Run the container in the foreground."""
    _run_action(ctx, compose.run_foreground)


@click.command("exec")
@click.pass_context
def exec_cmd(ctx: click.Context) -> None:
    """Open a shell in the running container."""
    _run_action(ctx, compose.exec_shell, failure="Failed to exec into container. Is it running?")


# ---------------------------------------------------------------------------
# Docker installation
# ---------------------------------------------------------------------------


@click.command("install")
@click.argument("mirror", required=False, default=None)
@click.pass_context
def install_cmd(ctx: click.Context, mirror: str | None) -> None:
    """Install Docker (optional MIRROR: cn|aliyun|azure|tencent|netease)."""
    cli_ctx = _get_ctx(ctx)
    url = cli_ctx.config.install_url
    try:
        argv = compose.install_command(mirror, url)
    except DockerEnvError as exc:
        format_error(exc)
        raise SystemExit(1) from exc

    click.echo("Installing Docker...")
    click.echo(f"Mirror: {mirror or 'default (auto-select)'}")
    click.echo(f"Executing: {argv[-1]}\n")

    code = compose.install_docker(mirror, url=url, history=cli_ctx.history)
    if code != 0:
        click.echo("Failed to install Docker", err=True)
        raise SystemExit(1)
    print_success("Docker installed successfully")


@click.command("doctor")
@click.option("--json", "json_output", is_flag=True, help="Output as JSON.")
@click.pass_context
def doctor_cmd(ctx: click.Context, *, json_output: bool) -> None:
    """Check the Docker installation status."""
    cli_ctx = _get_ctx(ctx)
    command = compose.compose_command(cli_ctx.config.compose_command)
    format_doctor_report(compose.doctor(command), json_output=json_output)


# ---------------------------------------------------------------------------
# Template systems
# ---------------------------------------------------------------------------


@click.command("templates")
@click.option("--json", "json_output", is_flag=True, help="Output as JSON.")
@click.pass_context
def templates_cmd(ctx: click.Context, *, json_output: bool) -> None:
    """List available template systems."""
    cli_ctx = _get_ctx(ctx)
    format_systems(cli_ctx.registry.list(), json_output=json_output)


@click.command("versions")
@click.argument("system", required=False, default=None)
@click.pass_context
def versions_cmd(ctx: click.Context, system: str | None) -> None:
    """List the versions a template system provides."""
    cli_ctx = _get_ctx(ctx)
    name = system or cli_ctx.config.default_system
    versions = cli_ctx.registry.versions_for(name)
    if not versions:
        click.echo(f"No versions available for '{name}'.")
        return
    template = cli_ctx.registry.require(name)
    for version in versions:
        marker = " (default)" if version == template.default_version else ""
        click.echo(f"  {version}{marker}")


@click.command("new-template")
@click.argument("name")
@click.option("--base", default=None, help="Copy files from this system (e.g. ubuntu).")
@click.pass_context
def new_template_cmd(ctx: click.Context, name: str, base: str | None) -> None:
    """Create a custom template system under the user template directory."""
    cli_ctx = _get_ctx(ctx)
    try:
        path = cli_ctx.registry.create_custom_system(
            name,
            base=base,
            custom_dir=cli_ctx.config.custom_templates_dir,
        )
    except DockerEnvError as exc:
        format_error(exc)
        raise SystemExit(1) from exc
    print_success(f"Template '{name}' created at {path}")
    click.echo(f"Use it with: docker-env-init init --system {name}")


# ---------------------------------------------------------------------------
# History
# ---------------------------------------------------------------------------


@click.command("logs")
@click.option("--last", "last_n", type=int, default=10, help="Number of entries to show.")
@click.option(
    "--type",
    "entry_type",
    default=None,
    help="Filter by entry type (e.g. 'up', 'build', 'install').",
)
@click.option("--json", "json_output", is_flag=True, help="Output as JSON.")
@click.pass_context
def logs_cmd(
    ctx: click.Context,
    *,
    last_n: int,
    entry_type: str | None,
    json_output: bool,
) -> None:
    """View the history of delegated docker commands."""
    cli_ctx = _get_ctx(ctx)
    entries = cli_ctx.history.read()
    if entry_type:
        entries = [e for e in entries if e.get("type") == entry_type]
    entries = entries[-last_n:] if last_n > 0 else []

    if json_output:
        click_echo_json(entries)
        return

    if not entries:
        click.echo("No log entries found.")
        return

    format_history(entries)
