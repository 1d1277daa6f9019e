# SPDX-License-Identifier: BSD-2-Clause
# Copyright (c) deftio llc

"""Thin wrappers around the docker / compose CLIs.

Nothing here parses docker output; commands run with inherited stdio and
their exit codes are handed back to the caller.
"""

from __future__ import annotations

import logging
import os
import shlex
import shutil
import subprocess  # nosec B404
import time
from datetime import datetime, timezone
from typing import TYPE_CHECKING

from dockerenv.environment import COMPOSE_LINK
from dockerenv.errors import InvalidMirror, NoActiveEnvironment
from dockerenv.types import DoctorCheck, DoctorReport

if TYPE_CHECKING:
    from collections.abc import Sequence
    from pathlib import Path

    from dockerenv._logger import CommandHistory

logger = logging.getLogger(__name__)

SERVICE_NAME = "compile-env"
INSTALL_URL = "https://linuxmirrors.cn/docker.sh"
MIRRORS = ("cn", "aliyun", "azure", "tencent", "netease")


def compose_command(preferred: str = "") -> list[str]:
    """Return the compose CLI to invoke.

    An explicitly configured command wins.  Otherwise the standalone
    ``docker-compose`` binary is used when on ``PATH``, falling back to the
    ``docker compose`` plugin.
    """
    if preferred.strip():
        return shlex.split(preferred)
    if shutil.which("docker-compose"):
        return ["docker-compose"]
    return ["docker", "compose"]


def run_compose(
    env_dir: Path,
    action: str,
    args: Sequence[str] = (),
    *,
    command: Sequence[str] = ("docker-compose",),
    history: CommandHistory | None = None,
) -> int:
    """Run ``<command> -f <env_dir>/docker-compose.yml <action> <args...>``.

    Returns the process exit code.

    Raises:
        NoActiveEnvironment: If no ``docker-compose.yml`` has been selected.

    """
    compose_file = env_dir / COMPOSE_LINK
    if not compose_file.exists():
        raise NoActiveEnvironment(env_dir)

    argv = [*command, "-f", str(compose_file), action, *args]
    return _run(argv, kind=action, env_dir=env_dir, history=history)


def build(env_dir: Path, *, command: Sequence[str], history: CommandHistory | None = None) -> int:
    """Build images of the active compose file."""
    return run_compose(env_dir, "build", command=command, history=history)


def up(env_dir: Path, *, command: Sequence[str], history: CommandHistory | None = None) -> int:
    """Start the environment detached."""
    return run_compose(env_dir, "up", ["-d"], command=command, history=history)


def down(env_dir: Path, *, command: Sequence[str], history: CommandHistory | None = None) -> int:
    """Stop and remove the environment's containers."""
    return run_compose(env_dir, "down", command=command, history=history)


def run_foreground(
    env_dir: Path,
    *,
    command: Sequence[str],
    history: CommandHistory | None = None,
) -> int:
    """Start the environment attached to the terminal."""
    return run_compose(env_dir, "up", command=command, history=history)


def exec_shell(
    env_dir: Path,
    shell: str = "bash",
    *,
    command: Sequence[str],
    history: CommandHistory | None = None,
) -> int:
    """Open an interactive shell in the running service container."""
    return run_compose(env_dir, "exec", [SERVICE_NAME, shell], command=command, history=history)


def install_command(mirror: str | None = None, url: str = INSTALL_URL) -> list[str]:
    """Build the command line that fetches and runs the Docker install script.

    Raises:
        InvalidMirror: If *mirror* is not one of :data:`MIRRORS`.

    """
    if mirror and mirror not in MIRRORS:
        raise InvalidMirror(mirror, MIRRORS)
    script = f"bash <(curl -sSL {shlex.quote(url)})"
    if mirror:
        script = f"{script} --mirror {mirror}"
    return ["bash", "-c", script]


def install_docker(
    mirror: str | None = None,
    *,
    url: str = INSTALL_URL,
    history: CommandHistory | None = None,
) -> int:
    """Run the remote Docker install script and return its exit code."""
    argv = install_command(mirror, url)
    env = {**os.environ, "DEBIAN_FRONTEND": "noninteractive"}
    return _run(argv, kind="install", history=history, env=env)


def doctor(compose: Sequence[str] | None = None) -> DoctorReport:
    """Check the local Docker installation.

    Missing binaries or a stopped daemon show up as failed checks; this
    function does not raise for them.
    """
    compose = list(compose) if compose else compose_command()
    checks = [
        _version_check("Docker", ["docker", "--version"], hint="Run: docker-env-init install"),
        _version_check(" ".join(compose), [*compose, "version"]),
        _daemon_check(),
        _group_check(),
    ]
    return DoctorReport(checks=tuple(checks))


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _run(
    argv: list[str],
    *,
    kind: str,
    env_dir: Path | None = None,
    history: CommandHistory | None = None,
    env: dict[str, str] | None = None,
) -> int:
    """Run *argv* with inherited stdio and record it in *history*."""
    logger.debug("Executing: %s", shlex.join(argv))
    started_at = datetime.now(tz=timezone.utc)
    start = time.monotonic()
    try:
        ret = subprocess.run(argv, check=False, env=env)  # noqa: S603  # nosec B603
        exit_code = ret.returncode
    except FileNotFoundError:
        logger.error("Command not found: %s", argv[0])
        exit_code = 127
    duration_ms = (time.monotonic() - start) * 1000.0

    if history is not None:
        history.log_command(kind, argv, exit_code, started_at, duration_ms, env_dir=env_dir)
    return exit_code


def _capture(argv: list[str]) -> subprocess.CompletedProcess[str] | None:
    """Run *argv* capturing output; ``None`` if the binary is missing."""
    try:
        return subprocess.run(  # noqa: S603  # nosec B603
            argv,
            check=False,
            capture_output=True,
            text=True,
        )
    except (FileNotFoundError, PermissionError):
        return None


def _version_check(name: str, argv: list[str], *, hint: str = "") -> DoctorCheck:
    ret = _capture(argv)
    if ret is None or ret.returncode != 0:
        return DoctorCheck(name=name, ok=False, detail="not installed", hint=hint)
    return DoctorCheck(name=name, ok=True, detail=ret.stdout.strip())


def _daemon_check() -> DoctorCheck:
    ret = _capture(["docker", "info"])
    if ret is None or ret.returncode != 0:
        return DoctorCheck(
            name="Docker daemon",
            ok=False,
            detail="not running",
            hint="Start the Docker service and try again.",
        )
    return DoctorCheck(name="Docker daemon", ok=True, detail="running")


def _group_check() -> DoctorCheck:
    ret = _capture(["groups"])
    if ret is None or ret.returncode != 0:
        return DoctorCheck(name="Docker group", ok=False, detail="check failed")
    if "docker" in ret.stdout.split():
        return DoctorCheck(name="Docker group", ok=True, detail="user is member")
    return DoctorCheck(
        name="Docker group",
        ok=False,
        detail="user not member (may need sudo)",
        hint="Run: sudo usermod -aG docker $USER",
    )
