# SPDX-License-Identifier: BSD-2-Clause
# Copyright (c) deftio llc

"""CLI entry point for docker-env-init."""

from __future__ import annotations

import dataclasses
import logging
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler

from dockerenv import __version__
from dockerenv._config import DockerEnvConfig, load_config
from dockerenv._logger import CommandHistory
from dockerenv.templates import TemplateRegistry, default_roots


@dataclasses.dataclass
class CliContext:
    """Shared state passed through Click's context object."""

    env_dir: Path = dataclasses.field(default_factory=Path.cwd)
    verbose: bool = False
    config: DockerEnvConfig = dataclasses.field(default_factory=DockerEnvConfig)
    registry: TemplateRegistry = dataclasses.field(default_factory=TemplateRegistry)

    @property
    def history(self) -> CommandHistory:
        """Command history sink configured from ``auto_log``."""
        return CommandHistory(self.config.history_path, enabled=self.config.auto_log)


def setup_logging(level: str, *, verbose: bool = False) -> None:
    """Route the ``dockerenv`` loggers to a rich handler on stderr."""
    pkg_logger = logging.getLogger("dockerenv")
    if not any(isinstance(h, RichHandler) for h in pkg_logger.handlers):
        handler = RichHandler(
            console=Console(stderr=True),
            show_time=False,
            show_path=False,
        )
        pkg_logger.addHandler(handler)
    resolved = logging.DEBUG if verbose else logging.getLevelName(str(level).upper())
    pkg_logger.setLevel(resolved if isinstance(resolved, int) else logging.WARNING)


@click.group()
@click.option(
    "--dir",
    "-C",
    "env_dir",
    envvar="DOCKER_ENV_INIT_DIR",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Environment directory (default: current directory).",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.version_option(version=__version__, prog_name="docker-env-init")
@click.pass_context
def cli(ctx: click.Context, env_dir: Path | None, *, verbose: bool) -> None:
    """Scaffold and manage Docker-based development environments."""
    resolved = (env_dir or Path.cwd()).absolute()
    config = load_config(resolved)
    setup_logging(config.log_level, verbose=verbose)
    registry = TemplateRegistry.load(default_roots(config.custom_templates_dir))
    ctx.obj = CliContext(env_dir=resolved, verbose=verbose, config=config, registry=registry)


# --- Register commands ---

from dockerenv.cli._commands import (  # noqa: E402
    build_cmd,
    create_cmd,
    current_cmd,
    doctor_cmd,
    down_cmd,
    exec_cmd,
    init_cmd,
    install_cmd,
    list_cmd,
    logs_cmd,
    new_template_cmd,
    run_cmd,
    switch_cmd,
    templates_cmd,
    up_cmd,
    use_cmd,
    versions_cmd,
)

cli.add_command(init_cmd)
cli.add_command(install_cmd)
cli.add_command(use_cmd)
cli.add_command(current_cmd)
cli.add_command(list_cmd)
cli.add_command(switch_cmd)
cli.add_command(create_cmd)
cli.add_command(build_cmd)
cli.add_command(up_cmd)
cli.add_command(down_cmd)
cli.add_command(run_cmd)
cli.add_command(exec_cmd)
cli.add_command(doctor_cmd)
cli.add_command(templates_cmd)
cli.add_command(versions_cmd)
cli.add_command(new_template_cmd)
cli.add_command(logs_cmd)
