# SPDX-License-Identifier: BSD-2-Clause
# Copyright (c) deftio llc

"""Configuration loading with install-level -> environment-level precedence."""

from __future__ import annotations

import dataclasses
import logging
from pathlib import Path
from typing import Any

import yaml

CONFIG_DIRNAME = ".docker-env-init"
_CONFIG_FILENAME = "config.yaml"
_ENV_CONFIG_FILENAME = ".docker-env-init.yaml"

logger = logging.getLogger(__name__)


@dataclasses.dataclass(frozen=True)
class DockerEnvConfig:
    """Resolved docker-env-init configuration."""

    templates_dir: str = ""
    default_system: str = "ubuntu"
    default_dir: str = "docker-env"
    compose_command: str = ""
    install_url: str = "https://linuxmirrors.cn/docker.sh"
    auto_log: bool = True
    log_level: str = "warning"

    @property
    def custom_templates_dir(self) -> Path:
        """The user template root, ``~/.docker-env-init/templates`` unless set."""
        if self.templates_dir:
            return Path(self.templates_dir).expanduser()
        return config_home() / "templates"

    @property
    def history_path(self) -> Path:
        """Where delegated commands are recorded."""
        return config_home() / "history.jsonl"


def config_home() -> Path:
    """Return the per-user directory, ``~/.docker-env-init``."""
    return Path.home() / CONFIG_DIRNAME


def load_config(env_dir: Path | None = None) -> DockerEnvConfig:
    """Load configuration with precedence: environment > install > defaults.

    1. Start with defaults
    2. Overlay install-level ``~/.docker-env-init/config.yaml`` (if exists)
    3. Overlay ``<env_dir>/.docker-env-init.yaml`` (if exists)
    """
    overrides: dict[str, Any] = {}

    sources = [config_home() / _CONFIG_FILENAME]
    if env_dir is not None:
        sources.append(env_dir / _ENV_CONFIG_FILENAME)
    for path in sources:
        if path.is_file():
            overrides.update(_read_yaml(path))

    return _build_config(overrides)


def _read_yaml(path: Path) -> dict[str, Any]:
    """Return the settings of one config file, with ``logging:`` flattened.

    Unparseable files and documents that are not a mapping contribute nothing.
    """
    try:
        data = yaml.safe_load(path.read_text())
    except yaml.YAMLError as exc:
        logger.warning("Ignoring invalid config %s: %s", path, exc)
        return {}
    if not isinstance(data, dict):
        return {}

    settings: dict[str, Any] = {}
    for key, value in data.items():
        if key == "logging" and isinstance(value, dict):
            settings.update(value)
        else:
            settings[key] = value
    return settings


def _build_config(overrides: dict[str, Any]) -> DockerEnvConfig:
    """Build a ``DockerEnvConfig``, coercing values to each field's type.

    Unknown keys and empty (``null``) values are dropped.
    """
    values: dict[str, Any] = {}
    for field in dataclasses.fields(DockerEnvConfig):
        value = overrides.get(field.name)
        if value is None:
            continue
        if isinstance(field.default, bool):
            values[field.name] = _as_bool(value)
        else:
            values[field.name] = str(value)
    return DockerEnvConfig(**values)


def _as_bool(value: object) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "on"}
    return bool(value)
