# SPDX-License-Identifier: BSD-2-Clause
# Copyright (c) deftio llc

"""Template system registry.

A *template system* (``"ubuntu"``, ...) is a directory of Dockerfiles and
compose files.  Systems are discovered under two roots, in order:

1. the built-in root shipped inside the package (``dockerenv/_templates/``)
2. the user root, ``~/.docker-env-init/templates/`` by default

A system found in a later root replaces the earlier one of the same name.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import TYPE_CHECKING

from dockerenv._config import config_home
from dockerenv.errors import SystemNotFound, TemplateExists, TemplateWriteError
from dockerenv.types import Origin, TemplateRoot, TemplateSystem

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator, Mapping

logger = logging.getLogger(__name__)

BUILTIN_TEMPLATES_DIR = Path(__file__).resolve().parent / "_templates"

_VERSION_RE = re.compile(r"\.(\d+\.\d+)(?=\.|$)")
_DEFAULT_MARKER = "default"

_FALLBACK_DOCKERFILE = """\
FROM ubuntu:22.04

ENV DEBIAN_FRONTEND=noninteractive
ENV TZ=Asia/Shanghai

RUN apt-get update && apt-get install -y \\
    build-essential \\
    cmake \\
    make \\
    git \\
    vim \\
    curl \\
    wget \\
    pkg-config \\
    libssl-dev \\
    gdb \\
    python3 \\
    python3-pip \\
    && rm -rf /var/lib/apt/lists/* \\
    && apt-get clean

ARG HOST_UID=1000
ARG HOST_GID=1000

RUN groupadd -g ${HOST_GID} dockeruser && \\
    useradd -m -u ${HOST_UID} -g ${HOST_GID} dockeruser

USER dockeruser
WORKDIR /workspace

CMD ["bash"]
"""

_FALLBACK_COMPOSE = """\
services:
  compile-env:
    build:
      context: .
      dockerfile: Dockerfile.22.04
    image: {name}-compile-env:22.04
    container_name: {name}-dev-container-22.04
    volumes:
      - ../workspace:/workspace
    working_dir: /workspace
    stdin_open: true
    tty: true
"""


def extract_version(filename: str) -> str | None:
    """Return the ``<digits>.<digits>`` version token of *filename*, if any.

    ``Dockerfile.22.04`` and ``docker-compose.22.04.yml`` both yield
    ``"22.04"``; ``Dockerfile`` and ``docker-compose.custom.yml`` yield ``None``.
    """
    match = _VERSION_RE.search(filename)
    return match.group(1) if match else None


def _version_key(version: str) -> tuple[int, ...]:
    return tuple(int(part) for part in version.split("."))


def parse_system(
    name: str,
    entries: Mapping[str, bytes],
    *,
    origin: Origin = Origin.BUILTIN,
    path: Path | None = None,
) -> TemplateSystem:
    """Build a :class:`TemplateSystem` from a flat ``filename -> content`` listing.

    ``versions`` is every version token found in the filenames, sorted
    numerically.  ``default_version`` is the newest version, or ``"default"``
    when there are no versions but a bare ``Dockerfile`` exists.
    """
    files = dict(entries)
    found = {v for v in (extract_version(f) for f in files) if v is not None}
    versions = tuple(sorted(found, key=_version_key))

    default: str | None = None
    if versions:
        default = versions[-1]
    elif "Dockerfile" in files:
        default = _DEFAULT_MARKER

    return TemplateSystem(
        name=name,
        origin=origin,
        files=files,
        versions=versions,
        default_version=default,
        path=path,
    )


def read_system(name: str, directory: Path, *, origin: Origin) -> TemplateSystem:
    """Read every regular file directly under *directory* into a system.

    Raises:
        OSError: If the directory or one of its files cannot be read.

    """
    entries = {
        entry.name: entry.read_bytes()
        for entry in sorted(directory.iterdir())
        if not entry.is_dir()
    }
    return parse_system(name, entries, origin=origin, path=directory)


def custom_templates_dir() -> Path:
    """Return ``~/.docker-env-init/templates``."""
    return config_home() / "templates"


def default_roots(custom_dir: Path | None = None) -> list[TemplateRoot]:
    """Return the built-in root followed by the user root."""
    return [
        TemplateRoot(BUILTIN_TEMPLATES_DIR, Origin.BUILTIN),
        TemplateRoot(custom_dir or custom_templates_dir(), Origin.CUSTOM),
    ]


class TemplateRegistry:
    """Read-only catalog of template systems, keyed by name."""

    def __init__(self, systems: Iterable[TemplateSystem] = ()) -> None:
        self._systems: dict[str, TemplateSystem] = {}
        for system in systems:
            self._systems[system.name] = system

    @classmethod
    def load(cls, roots: Iterable[TemplateRoot]) -> TemplateRegistry:
        """Scan *roots* in order and build a registry.

        Missing roots are skipped.  A system directory that cannot be read is
        skipped with a warning instead of failing the whole load.
        """
        systems: dict[str, TemplateSystem] = {}
        for root in roots:
            if not root.path.is_dir():
                logger.debug("Template root %s does not exist, skipping", root.path)
                continue
            for system in _scan_root(root):
                if system.name in systems:
                    logger.debug(
                        "Template system '%s' from %s overrides %s",
                        system.name,
                        system.path,
                        systems[system.name].path,
                    )
                systems[system.name] = system
        logger.debug("Loaded %d template system(s)", len(systems))
        return cls(systems.values())

    def __contains__(self, name: object) -> bool:
        return name in self._systems

    def __iter__(self) -> Iterator[TemplateSystem]:
        return iter(self._systems.values())

    def __len__(self) -> int:
        return len(self._systems)

    def get(self, name: str) -> TemplateSystem | None:
        """Look up a system by exact name."""
        return self._systems.get(name)

    def require(self, name: str) -> TemplateSystem:
        """Look up a system by exact name, raising :class:`SystemNotFound`."""
        system = self._systems.get(name)
        if system is None:
            raise SystemNotFound(name, self._systems)
        return system

    def list(self) -> list[TemplateSystem]:
        """Return all systems in load order."""
        return list(self._systems.values())

    def names(self) -> list[str]:
        """Return all system names in load order."""
        return list(self._systems)

    def versions_for(self, name: str) -> tuple[str, ...]:
        """Return the versions of *name*, or ``()`` if it is unknown."""
        system = self._systems.get(name)
        return system.versions if system is not None else ()

    def file_content(self, name: str, filename: str) -> bytes | None:
        """Return the raw content of one template file, or ``None``."""
        system = self._systems.get(name)
        if system is None:
            return None
        return system.files.get(filename)

    def compose_file(self, name: str, version: str) -> bytes | None:
        """Return ``docker-compose.<version>.yml`` of system *name*."""
        return self.file_content(name, f"docker-compose.{version}.yml")

    def dockerfile(self, name: str, version: str | None = None) -> bytes | None:
        """Return ``Dockerfile.<version>`` (or the bare ``Dockerfile``)."""
        filename = f"Dockerfile.{version}" if version else "Dockerfile"
        return self.file_content(name, filename)

    def create_custom_system(
        self,
        name: str,
        *,
        base: str | None = None,
        custom_dir: Path | None = None,
    ) -> Path:
        """Create a new user template system on disk and return its directory.

        The files of *base* are copied when it names a known system.  Otherwise
        a default Ubuntu 22.04 Dockerfile and compose file are written.  The
        registry itself is not modified; reload it to pick up the new system.

        Raises:
            TemplateExists: If the system directory already exists.
            TemplateWriteError: If the files cannot be written.

        """
        root = custom_dir or custom_templates_dir()
        target = root / name
        if target.exists():
            raise TemplateExists(name)

        base_system = self._systems.get(base) if base else None
        if base_system is not None:
            files = dict(base_system.files)
        else:
            if base:
                logger.warning("Base system '%s' not found, using the default Dockerfile", base)
            dockerfile = _FALLBACK_DOCKERFILE.encode()
            files = {
                "Dockerfile": dockerfile,
                "Dockerfile.22.04": dockerfile,
                "docker-compose.22.04.yml": _FALLBACK_COMPOSE.format(name=name).encode(),
            }

        try:
            target.mkdir(parents=True)
            for filename, content in files.items():
                (target / filename).write_bytes(content)
        except OSError as exc:
            raise TemplateWriteError(target, str(exc)) from exc
        logger.info("Created template system '%s' at %s", name, target)
        return target


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _scan_root(root: TemplateRoot) -> Iterator[TemplateSystem]:
    """Yield each readable system directory under *root*."""
    try:
        children = sorted(root.path.iterdir())
    except OSError as exc:
        logger.warning("Cannot read template root %s: %s", root.path, exc)
        return
    for child in children:
        try:
            if not child.is_dir():
                continue
            yield read_system(child.name, child, origin=root.origin)
        except OSError as exc:
            logger.warning("Skipping template system %s: %s", child, exc)
