# SPDX-License-Identifier: BSD-2-Clause
# Copyright (c) deftio llc

from __future__ import annotations

from importlib.metadata import version

from dockerenv._config import DockerEnvConfig, load_config
from dockerenv.environment import (
    COMPOSE_LINK,
    SWITCH_SCRIPT,
    create_custom,
    current_version,
    list_candidates,
    materialize,
    select_version,
    set_active,
    switch_to,
)
from dockerenv.errors import (
    AlreadyExistsError,
    ComposeFileExists,
    ComposeFileNotFound,
    DockerEnvError,
    EnvironmentExists,
    InvalidComposeTarget,
    InvalidMirror,
    NoActiveEnvironment,
    NotFoundError,
    SystemNotFound,
    TemplateExists,
    TemplateWriteError,
    VersionNotFound,
)
from dockerenv.templates import TemplateRegistry, default_roots, parse_system
from dockerenv.types import (
    ComposeCandidate,
    DoctorCheck,
    DoctorReport,
    Origin,
    TemplateRoot,
    TemplateSystem,
)

__version__ = version("docker-env-init")


def get_version() -> str:
    """Return the docker-env-init package version string."""
    return __version__


def load_registry(config: DockerEnvConfig | None = None) -> TemplateRegistry:
    """Load the built-in and user template systems."""
    config = config or load_config()
    return TemplateRegistry.load(default_roots(config.custom_templates_dir))


__all__ = [
    "COMPOSE_LINK",
    "SWITCH_SCRIPT",
    "AlreadyExistsError",
    "ComposeCandidate",
    "ComposeFileExists",
    "ComposeFileNotFound",
    "DockerEnvConfig",
    "DockerEnvError",
    "DoctorCheck",
    "DoctorReport",
    "EnvironmentExists",
    "InvalidComposeTarget",
    "InvalidMirror",
    "NoActiveEnvironment",
    "NotFoundError",
    "Origin",
    "SystemNotFound",
    "TemplateExists",
    "TemplateRegistry",
    "TemplateRoot",
    "TemplateSystem",
    "TemplateWriteError",
    "VersionNotFound",
    "__version__",
    "create_custom",
    "current_version",
    "default_roots",
    "get_version",
    "list_candidates",
    "load_config",
    "load_registry",
    "materialize",
    "parse_system",
    "select_version",
    "set_active",
    "switch_to",
]
