"""Shared fixtures for docker-env-init tests."""

from __future__ import annotations

import shutil
from typing import TYPE_CHECKING
from unittest.mock import patch

import pytest

if TYPE_CHECKING:
    from collections.abc import Iterator, Mapping
    from pathlib import Path

HAS_DOCKER = shutil.which("docker") is not None

requires_docker = pytest.mark.skipif(
    not HAS_DOCKER,
    reason="No docker binary found on PATH",
)

UBUNTU_FILES: dict[str, bytes] = {
    "Dockerfile": b"FROM ubuntu:22.04\n",
    "Dockerfile.20.04": b"FROM ubuntu:20.04\n",
    "Dockerfile.22.04": b"FROM ubuntu:22.04\n",
    "docker-compose.20.04.yml": b"services:\n  compile-env:\n    image: a:20.04\n",
    "docker-compose.22.04.yml": b"services:\n  compile-env:\n    image: a:22.04\n",
}


def write_system(root: Path, name: str, files: Mapping[str, bytes]) -> Path:
    """Create ``root/name/`` holding *files*; return the system directory."""
    system_dir = root / name
    system_dir.mkdir(parents=True, exist_ok=True)
    for filename, content in files.items():
        (system_dir / filename).write_bytes(content)
    return system_dir


@pytest.fixture
def home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[Path]:
    """Point ``Path.home()`` and ``~`` expansion at a scratch directory."""
    fake_home = tmp_path / "home"
    fake_home.mkdir()
    monkeypatch.setenv("HOME", str(fake_home))
    with patch("dockerenv._config.Path.home", return_value=fake_home):
        yield fake_home


@pytest.fixture
def env_dir(tmp_path: Path) -> Path:
    """An environment directory with two versioned compose files."""
    env = tmp_path / "docker-env"
    env.mkdir()
    for version in ("20.04", "22.04"):
        (env / f"Dockerfile.{version}").write_text(f"FROM ubuntu:{version}\n")
        (env / f"docker-compose.{version}.yml").write_text(f"# {version}\n")
    return env
