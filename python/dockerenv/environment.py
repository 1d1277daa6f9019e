# SPDX-License-Identifier: BSD-2-Clause
# Copyright (c) deftio llc

"""Environment directories and the active compose file.

An environment directory holds ``Dockerfile[.<version>]`` files, one or more
``docker-compose.<version>.yml`` files and, once a version has been chosen,
a ``docker-compose.yml`` symlink pointing at one of them.  All changes to
that link go through :func:`set_active`.
"""

from __future__ import annotations

import contextlib
import logging
import os
from typing import TYPE_CHECKING

from dockerenv.errors import (
    ComposeFileExists,
    ComposeFileNotFound,
    EnvironmentExists,
    InvalidComposeTarget,
    TemplateWriteError,
    VersionNotFound,
)
from dockerenv.types import ComposeCandidate

if TYPE_CHECKING:
    from collections.abc import Iterable
    from pathlib import Path

    from dockerenv.types import TemplateSystem

logger = logging.getLogger(__name__)

COMPOSE_LINK = "docker-compose.yml"
SWITCH_SCRIPT = "switch.sh"

_COMPOSE_PREFIX = "docker-compose."
_COMPOSE_SUFFIX = ".yml"
_TMP_LINK = ".docker-compose.yml.tmp"
_MAX_LINK_HOPS = 40

_SWITCH_SH_TEMPLATE = """\
#!/bin/bash

VERSION=$1

if [ -z "$VERSION" ]; then
    echo "Usage: ./switch.sh <{choices}>"
    exit 1
fi

DOCKER_FILE="Dockerfile.$VERSION"
COMPOSE_FILE="docker-compose.$VERSION.yml"

if [ ! -f "$DOCKER_FILE" ]; then
    echo "Error: Dockerfile for version $VERSION not found"
    exit 1
fi

if [ ! -f "$COMPOSE_FILE" ]; then
    echo "Error: docker-compose file for version $VERSION not found"
    exit 1
fi

cp "$DOCKER_FILE" Dockerfile
cp "$COMPOSE_FILE" docker-compose.yml

echo "Switched to version $VERSION"
echo "Run 'docker compose up -d' to start the container"
"""

_CUSTOM_COMPOSE_TEMPLATE = """\
version: '3.8'

services:
  compile-env:
    build:
      context: .
      dockerfile: Dockerfile.22.04
    image: ubuntu-compile-env:{name}
    container_name: dev-container-{name}
    volumes:
      - ../workspace:/workspace
    working_dir: /workspace
    stdin_open: true
    tty: true
"""


def render_switch_script(versions: Iterable[str] = ()) -> str:
    """Return the ``switch.sh`` helper written into every new environment."""
    choices = "|".join(versions) or "version"
    return _SWITCH_SH_TEMPLATE.format(choices=choices)


def materialize(target_dir: Path, system: TemplateSystem) -> Path:
    """Create *target_dir* and write every file of *system* into it.

    A generated ``switch.sh`` is added and made executable.

    Raises:
        EnvironmentExists: If *target_dir* already exists.  Nothing is written.
        TemplateWriteError: If a file cannot be written.

    """
    if target_dir.exists() or target_dir.is_symlink():
        raise EnvironmentExists(target_dir)

    current = target_dir
    try:
        target_dir.mkdir(parents=True)
        for filename, content in system.files.items():
            current = target_dir / filename
            current.write_bytes(content)
            logger.debug("Created %s", current)

        current = target_dir / SWITCH_SCRIPT
        current.write_text(render_switch_script(system.versions))
        current.chmod(0o755)
    except OSError as exc:
        raise TemplateWriteError(current, str(exc)) from exc

    logger.info("Materialized '%s' into %s", system.name, target_dir)
    return target_dir


def compose_path(env_dir: Path, version: str) -> Path:
    """Return the path of ``docker-compose.<version>.yml`` in *env_dir*."""
    return env_dir / f"{_COMPOSE_PREFIX}{version}{_COMPOSE_SUFFIX}"


def select_version(env_dir: Path, version: str) -> Path:
    """Make ``docker-compose.<version>.yml`` the active compose file.

    Raises:
        VersionNotFound: If the compose file does not exist.  The current
            link is left untouched.

    """
    target = compose_path(env_dir, version)
    if not target.is_file():
        raise VersionNotFound(version, env_dir)
    return set_active(env_dir, target)


def switch_to(env_dir: Path, filename: str) -> Path:
    """Make an arbitrary compose file in *env_dir* the active one.

    Raises:
        ComposeFileNotFound: If ``env_dir / filename`` does not exist.

    """
    target = env_dir / filename
    if not target.exists():
        raise ComposeFileNotFound(filename)
    return set_active(env_dir, target)


def set_active(env_dir: Path, target: Path) -> Path:
    """Point ``env_dir/docker-compose.yml`` at *target*, replacing any old entry.

    The link is relative when *target* lives in *env_dir*, absolute otherwise.
    The new link is created under a temporary name and renamed into place.
    Returns the link path.

    Raises:
        InvalidComposeTarget: If *target* is ``docker-compose.yml`` itself or
            resolves to it.  Nothing is changed.

    """
    link = env_dir / COMPOSE_LINK
    tmp = env_dir / _TMP_LINK

    if _leads_to(target, env_dir.resolve() / COMPOSE_LINK):
        raise InvalidComposeTarget(target.name)

    if target.parent.resolve() == env_dir.resolve():
        link_target = target.name
    else:
        link_target = str(target.resolve())

    with contextlib.suppress(FileNotFoundError):
        tmp.unlink()
    tmp.symlink_to(link_target)
    try:
        os.replace(tmp, link)
    except OSError:
        with contextlib.suppress(FileNotFoundError):
            tmp.unlink()
        raise

    logger.info("Switched to %s", target.name)
    return link


def _leads_to(path: Path, pointer: Path) -> bool:
    """Return True if *path*, or any link it chains through, is *pointer*."""
    current = path
    for _ in range(_MAX_LINK_HOPS):
        if current.parent.resolve() / current.name == pointer:
            return True
        if not current.is_symlink():
            return False
        current = current.parent / os.readlink(current)
    # Too many hops: a loop, never a usable target
    return True


def current_version(env_dir: Path) -> str | None:
    """Return the label of the active compose file, or ``None``.

    For a symlink the label is the base filename of its target.  A regular
    ``docker-compose.yml`` file is reported as ``"docker-compose.yml"``.
    A link whose target is gone counts as no selection.
    """
    link = env_dir / COMPOSE_LINK
    if not link.exists():
        return None
    if link.is_symlink():
        return os.path.basename(os.readlink(link))
    return COMPOSE_LINK


def list_candidates(env_dir: Path) -> list[ComposeCandidate]:
    """List the selectable ``docker-compose.*.yml`` files in *env_dir*."""
    if not env_dir.is_dir():
        return []

    active = current_version(env_dir)
    names = sorted(
        p.name
        for p in env_dir.iterdir()
        if p.name.startswith(_COMPOSE_PREFIX)
        and p.name.endswith(_COMPOSE_SUFFIX)
        and p.name != COMPOSE_LINK
    )
    return [ComposeCandidate(name=name, active=name == active) for name in names]


def create_custom(env_dir: Path, name: str, *, overwrite: bool = False) -> Path:
    """Write a scaffold ``docker-compose.<name>.yml`` into *env_dir*.

    Raises:
        ComposeFileExists: If the file exists and *overwrite* is false.
        TemplateWriteError: If the file cannot be written.

    """
    path = compose_path(env_dir, name)
    if path.exists() and not overwrite:
        raise ComposeFileExists(path)

    try:
        path.write_text(_CUSTOM_COMPOSE_TEMPLATE.format(name=name))
    except OSError as exc:
        raise TemplateWriteError(path, str(exc)) from exc
    logger.info("Created %s", path.name)
    return path
