# SPDX-License-Identifier: BSD-2-Clause
# Copyright (c) deftio llc

from __future__ import annotations

import dataclasses
import enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Mapping
    from pathlib import Path


class Origin(str, enum.Enum):
    """Where a template system was loaded from."""

    BUILTIN = "builtin"
    CUSTOM = "custom"


@dataclasses.dataclass(frozen=True)
class TemplateSystem:
    """A named bundle of environment templates (Dockerfiles, compose files)."""

    name: str
    origin: Origin
    files: Mapping[str, bytes]
    versions: tuple[str, ...] = ()
    default_version: str | None = None
    path: Path | None = None

    @property
    def is_custom(self) -> bool:
        """Return True if the system came from the user template root."""
        return self.origin is Origin.CUSTOM


@dataclasses.dataclass(frozen=True)
class TemplateRoot:
    """A directory holding one subdirectory per template system."""

    path: Path
    origin: Origin


@dataclasses.dataclass(frozen=True)
class ComposeCandidate:
    """A ``docker-compose.<x>.yml`` file in an environment directory."""

    name: str
    active: bool = False


@dataclasses.dataclass(frozen=True)
class DoctorCheck:
    """Outcome of one Docker installation check."""

    name: str
    ok: bool
    detail: str = ""
    hint: str = ""


@dataclasses.dataclass(frozen=True)
class DoctorReport:
    """Result of diagnosing the local Docker installation."""

    checks: tuple[DoctorCheck, ...] = ()

    @property
    def healthy(self) -> bool:
        """Return True if every check passed."""
        return all(c.ok for c in self.checks)
