# SPDX-License-Identifier: BSD-2-Clause
# Copyright (c) deftio llc

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable
    from pathlib import Path


class DockerEnvError(Exception):
    """Base exception for all docker-env-init errors."""


class AlreadyExistsError(DockerEnvError):
    """Target of a create operation is already present."""


class EnvironmentExists(AlreadyExistsError):
    """Environment directory already exists; refusing to overwrite it."""

    def __init__(self, path: Path) -> None:
        self.path = path
        super().__init__(f"{path} already exists")


class TemplateExists(AlreadyExistsError):
    """A custom template system with this name already exists."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Template '{name}' already exists")


class ComposeFileExists(AlreadyExistsError):
    """Compose file exists and overwriting was not confirmed."""

    def __init__(self, path: Path) -> None:
        self.path = path
        super().__init__(f"File {path.name} already exists")


class NotFoundError(DockerEnvError):
    """A requested system, version or file does not exist."""


class SystemNotFound(NotFoundError):
    """No template system with this name is registered."""

    def __init__(self, name: str, known: Iterable[str] = ()) -> None:
        self.name = name
        self.known = tuple(known)
        msg = f"Template system '{name}' not found"
        if self.known:
            msg = f"{msg}. Known systems: {', '.join(sorted(self.known))}"
        super().__init__(msg)


class VersionNotFound(NotFoundError):
    """No ``docker-compose.<version>.yml`` in the environment directory."""

    def __init__(self, version: str, env_dir: Path) -> None:
        self.version = version
        self.env_dir = env_dir
        super().__init__(f"docker-compose.{version}.yml not found in {env_dir}")


class ComposeFileNotFound(NotFoundError):
    """Named compose file does not exist in the environment directory."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"{name} not found")


class NoActiveEnvironment(NotFoundError):
    """No ``docker-compose.yml`` has been selected yet."""

    def __init__(self, env_dir: Path) -> None:
        self.env_dir = env_dir
        super().__init__(f"docker-compose.yml not found in {env_dir}")


class TemplateWriteError(DockerEnvError):
    """Writing a materialized environment or template failed."""

    def __init__(self, path: Path, detail: str = "") -> None:
        self.path = path
        msg = f"Cannot write {path}"
        if detail:
            msg = f"{msg}: {detail}"
        super().__init__(msg)


class InvalidMirror(DockerEnvError):
    """Unknown Docker install mirror."""

    def __init__(self, mirror: str, known: Iterable[str] = ()) -> None:
        self.mirror = mirror
        self.known = tuple(known)
        msg = f"Invalid mirror '{mirror}'"
        if self.known:
            msg = f"{msg}. Available mirrors: {', '.join(self.known)}"
        super().__init__(msg)


class InvalidComposeTarget(DockerEnvError):
    """Target would make ``docker-compose.yml`` point at itself."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"{name} is the active-file pointer and cannot be selected")
