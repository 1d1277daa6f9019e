"""Smoke test: verify the package is importable and versioned."""

from __future__ import annotations


def test_import_dockerenv() -> None:
    import dockerenv

    assert hasattr(dockerenv, "__name__")


def test_version_attribute() -> None:
    import dockerenv

    assert isinstance(dockerenv.__version__, str)
    assert dockerenv.__version__ == "0.3.0"


def test_get_version_function() -> None:
    from dockerenv import get_version

    assert get_version() == "0.3.0"


def test_public_api_is_exported() -> None:
    import dockerenv

    for name in dockerenv.__all__:
        assert hasattr(dockerenv, name), name


def test_load_registry_includes_builtin(home) -> None:  # type: ignore[no-untyped-def]  # noqa: ARG001
    from dockerenv import load_registry

    registry = load_registry()
    assert "ubuntu" in registry


def test_import_cli_entry_point() -> None:
    from dockerenv.cli.main import cli

    assert cli.name == "cli"
    assert "init" in cli.commands
