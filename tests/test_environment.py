"""Unit tests for environment.py — materializing envs and the active compose link.

All tests use tmp_path for filesystem isolation.
"""

from __future__ import annotations

import os
import stat
from typing import TYPE_CHECKING
from unittest.mock import patch

import pytest
from dockerenv.environment import (
    COMPOSE_LINK,
    SWITCH_SCRIPT,
    compose_path,
    create_custom,
    current_version,
    list_candidates,
    materialize,
    render_switch_script,
    select_version,
    set_active,
    switch_to,
)
from dockerenv.errors import (
    ComposeFileExists,
    ComposeFileNotFound,
    EnvironmentExists,
    InvalidComposeTarget,
    TemplateWriteError,
    VersionNotFound,
)
from dockerenv.templates import parse_system
from dockerenv.types import ComposeCandidate

from .conftest import UBUNTU_FILES

if TYPE_CHECKING:
    from pathlib import Path

# --- materialize ---


def test_materialize_writes_every_file(tmp_path: Path) -> None:
    system = parse_system("ubuntu", UBUNTU_FILES)
    target = tmp_path / "a" / "b" / "env"

    assert materialize(target, system) == target

    for filename, content in UBUNTU_FILES.items():
        assert (target / filename).read_bytes() == content
    assert sorted(p.name for p in target.iterdir()) == sorted([*UBUNTU_FILES, SWITCH_SCRIPT])


def test_materialize_preserves_binary_content(tmp_path: Path) -> None:
    blob = bytes(range(256))
    system = parse_system("raw", {"Dockerfile": blob})
    materialize(tmp_path / "env", system)
    assert (tmp_path / "env" / "Dockerfile").read_bytes() == blob


def test_materialize_switch_script_is_executable(tmp_path: Path) -> None:
    materialize(tmp_path / "env", parse_system("ubuntu", UBUNTU_FILES))
    script = tmp_path / "env" / SWITCH_SCRIPT
    mode = script.stat().st_mode
    assert mode & stat.S_IXUSR
    assert script.read_text().startswith("#!/bin/bash")


def test_materialize_existing_dir_raises_without_writing(tmp_path: Path) -> None:
    target = tmp_path / "env"
    target.mkdir()
    (target / "mine.txt").write_text("keep me")

    with pytest.raises(EnvironmentExists) as exc_info:
        materialize(target, parse_system("ubuntu", UBUNTU_FILES))

    assert exc_info.value.path == target
    assert [p.name for p in target.iterdir()] == ["mine.txt"]
    assert (target / "mine.txt").read_text() == "keep me"


def test_materialize_existing_file_raises(tmp_path: Path) -> None:
    target = tmp_path / "env"
    target.write_text("a file")
    with pytest.raises(EnvironmentExists):
        materialize(target, parse_system("ubuntu", UBUNTU_FILES))


def test_materialize_write_failure(tmp_path: Path) -> None:
    system = parse_system("ubuntu", UBUNTU_FILES)
    with (
        patch("pathlib.Path.write_bytes", side_effect=OSError("disk full")),
        pytest.raises(TemplateWriteError, match="disk full"),
    ):
        materialize(tmp_path / "env", system)


# --- render_switch_script ---


def test_switch_script_lists_versions() -> None:
    script = render_switch_script(["20.04", "22.04"])
    assert "Usage: ./switch.sh <20.04|22.04>" in script
    assert 'cp "$DOCKER_FILE" Dockerfile' in script
    assert 'cp "$COMPOSE_FILE" docker-compose.yml' in script
    assert "docker compose up -d" in script


def test_switch_script_without_versions() -> None:
    script = render_switch_script()
    assert "Usage: ./switch.sh <version>" in script
    assert script.count("exit 1") == 3


# --- select_version / current_version ---


def test_current_version_none_without_link(env_dir: Path) -> None:
    assert current_version(env_dir) is None


def test_select_version_creates_link(env_dir: Path) -> None:
    link = select_version(env_dir, "22.04")

    assert link == env_dir / COMPOSE_LINK
    assert link.is_symlink()
    assert current_version(env_dir) == "docker-compose.22.04.yml"
    assert link.read_text() == "# 22.04\n"


def test_select_version_link_is_relative(env_dir: Path) -> None:
    select_version(env_dir, "20.04")
    assert os.readlink(env_dir / COMPOSE_LINK) == "docker-compose.20.04.yml"


def test_select_version_twice_replaces_link(env_dir: Path) -> None:
    select_version(env_dir, "20.04")
    select_version(env_dir, "22.04")

    links = [p for p in env_dir.iterdir() if p.is_symlink()]
    assert links == [env_dir / COMPOSE_LINK]
    assert current_version(env_dir) == "docker-compose.22.04.yml"
    assert not (env_dir / ".docker-compose.yml.tmp").exists()


def test_select_missing_version_raises_without_mutation(env_dir: Path) -> None:
    select_version(env_dir, "20.04")
    before = sorted(p.name for p in env_dir.iterdir())

    with pytest.raises(VersionNotFound) as exc_info:
        select_version(env_dir, "99.99")

    assert exc_info.value.version == "99.99"
    assert sorted(p.name for p in env_dir.iterdir()) == before
    assert current_version(env_dir) == "docker-compose.20.04.yml"


def test_select_missing_version_no_link_created(env_dir: Path) -> None:
    with pytest.raises(VersionNotFound):
        select_version(env_dir, "99.99")
    assert not (env_dir / COMPOSE_LINK).is_symlink()
    assert current_version(env_dir) is None


def test_current_version_regular_file(env_dir: Path) -> None:
    (env_dir / COMPOSE_LINK).write_text("services: {}\n")
    assert current_version(env_dir) == COMPOSE_LINK


def test_set_active_replaces_regular_file(env_dir: Path) -> None:
    (env_dir / COMPOSE_LINK).write_text("legacy copy\n")
    set_active(env_dir, compose_path(env_dir, "20.04"))
    assert (env_dir / COMPOSE_LINK).is_symlink()
    assert current_version(env_dir) == "docker-compose.20.04.yml"


def test_set_active_outside_env_uses_absolute_target(env_dir: Path, tmp_path: Path) -> None:
    outside = tmp_path / "shared" / "docker-compose.team.yml"
    outside.parent.mkdir()
    outside.write_text("# team\n")

    set_active(env_dir, outside)

    target = os.readlink(env_dir / COMPOSE_LINK)
    assert os.path.isabs(target)
    assert current_version(env_dir) == "docker-compose.team.yml"


# --- switch_to ---


def test_switch_to_existing_file(env_dir: Path) -> None:
    (env_dir / "docker-compose.custom.yml").write_text("# custom\n")
    switch_to(env_dir, "docker-compose.custom.yml")
    assert current_version(env_dir) == "docker-compose.custom.yml"


def test_switch_to_missing_file(env_dir: Path) -> None:
    with pytest.raises(ComposeFileNotFound):
        switch_to(env_dir, "docker-compose.nope.yml")
    assert current_version(env_dir) is None


# --- list_candidates ---


def test_list_candidates_without_active(env_dir: Path) -> None:
    assert list_candidates(env_dir) == [
        ComposeCandidate("docker-compose.20.04.yml", active=False),
        ComposeCandidate("docker-compose.22.04.yml", active=False),
    ]


def test_list_candidates_marks_active_and_hides_link(env_dir: Path) -> None:
    (env_dir / "Dockerfile").write_text("x")
    (env_dir / "docker-compose.yaml").write_text("wrong suffix")
    select_version(env_dir, "22.04")

    candidates = list_candidates(env_dir)

    assert [c.name for c in candidates] == [
        "docker-compose.20.04.yml",
        "docker-compose.22.04.yml",
    ]
    assert [c.active for c in candidates] == [False, True]


def test_list_candidates_regular_file_marks_nothing(env_dir: Path) -> None:
    (env_dir / COMPOSE_LINK).write_text("legacy")
    assert not any(c.active for c in list_candidates(env_dir))


def test_list_candidates_missing_dir(tmp_path: Path) -> None:
    assert list_candidates(tmp_path / "missing") == []


# --- create_custom ---


def test_create_custom_writes_scaffold(env_dir: Path) -> None:
    path = create_custom(env_dir, "mine")

    assert path == env_dir / "docker-compose.mine.yml"
    content = path.read_text()
    assert "compile-env:" in content
    assert "../workspace:/workspace" in content
    assert "stdin_open: true" in content
    assert "tty: true" in content
    assert "container_name: dev-container-mine" in content


def test_create_custom_existing_without_overwrite(env_dir: Path) -> None:
    path = env_dir / "docker-compose.mine.yml"
    path.write_text("hand edited\n")

    with pytest.raises(ComposeFileExists) as exc_info:
        create_custom(env_dir, "mine")

    assert exc_info.value.path == path
    assert path.read_text() == "hand edited\n"


def test_create_custom_overwrite(env_dir: Path) -> None:
    path = env_dir / "docker-compose.mine.yml"
    path.write_text("hand edited\n")
    create_custom(env_dir, "mine", overwrite=True)
    assert "compile-env:" in path.read_text()


def test_create_custom_is_selectable(env_dir: Path) -> None:
    create_custom(env_dir, "mine")
    select_version(env_dir, "mine")
    assert current_version(env_dir) == "docker-compose.mine.yml"


# --- pointer as its own target ---


def test_switch_to_pointer_keeps_regular_file(env_dir: Path) -> None:
    legacy = env_dir / COMPOSE_LINK
    legacy.write_text("services: {hand: edited}\n")

    with pytest.raises(InvalidComposeTarget):
        switch_to(env_dir, COMPOSE_LINK)

    assert not legacy.is_symlink()
    assert legacy.read_text() == "services: {hand: edited}\n"
    assert current_version(env_dir) == COMPOSE_LINK


def test_switch_to_pointer_keeps_existing_link(env_dir: Path) -> None:
    select_version(env_dir, "22.04")

    with pytest.raises(InvalidComposeTarget):
        switch_to(env_dir, COMPOSE_LINK)

    assert (env_dir / COMPOSE_LINK).exists()
    assert current_version(env_dir) == "docker-compose.22.04.yml"
    assert not (env_dir / ".docker-compose.yml.tmp").exists()


def test_set_active_rejects_link_chaining_through_pointer(env_dir: Path) -> None:
    select_version(env_dir, "20.04")
    (env_dir / "docker-compose.alias.yml").symlink_to(COMPOSE_LINK)

    with pytest.raises(InvalidComposeTarget):
        switch_to(env_dir, "docker-compose.alias.yml")

    assert current_version(env_dir) == "docker-compose.20.04.yml"


def test_select_active_version_again(env_dir: Path) -> None:
    select_version(env_dir, "22.04")
    select_version(env_dir, "22.04")
    assert current_version(env_dir) == "docker-compose.22.04.yml"


# --- dangling pointer ---


def test_current_version_dangling_link_is_none(env_dir: Path) -> None:
    (env_dir / COMPOSE_LINK).symlink_to("docker-compose.gone.yml")

    assert current_version(env_dir) is None
    assert not any(c.active for c in list_candidates(env_dir))


def test_select_version_repairs_dangling_link(env_dir: Path) -> None:
    (env_dir / COMPOSE_LINK).symlink_to("docker-compose.gone.yml")
    select_version(env_dir, "20.04")
    assert current_version(env_dir) == "docker-compose.20.04.yml"
