"""
Shared pytest fixtures for layered-settings tests.

This file is automatically loaded by pytest. Fixtures defined here are
available to all test files without explicit imports.
"""

import dataclasses as _dataclasses
import json as _json
import os as _os
import pathlib as _pathlib
import typing as _typing

import pytest as _pytest

import layered_settings.constants as constants
import layered_settings.file_access as file_access
import layered_settings.merging as merging

# =============================================================================
# Environment isolation
# =============================================================================


@_pytest.fixture(autouse=True)
def isolated_env(
    tmp_path_factory: _pytest.TempPathFactory,
    monkeypatch: _pytest.MonkeyPatch,
) -> None:
    """Keep the developer's environment and user config out of every test."""
    for key in list(_os.environ):
        if key.startswith(constants.ENV_PREFIX):
            monkeypatch.delenv(key)
    monkeypatch.delenv("NO_COLOR", raising=False)
    missing = tmp_path_factory.mktemp("user-config") / "config.yaml"
    monkeypatch.setenv(constants.ENV_USER_CONFIG, str(missing))


# =============================================================================
# Merge fixtures
# =============================================================================


@_dataclasses.dataclass
class CallbackRecorder:
    """Records every MergerCallbacks notification."""

    circular: list[str] = _dataclasses.field(default_factory=list)
    parse_errors: list[tuple[str, Exception]] = _dataclasses.field(default_factory=list)
    not_found: list[str] = _dataclasses.field(default_factory=list)
    invalid: list[str] = _dataclasses.field(default_factory=list)

    @property
    def callbacks(self) -> merging.MergerCallbacks:
        return merging.MergerCallbacks(
            on_circular_dependency=self.circular.append,
            on_parse_error=lambda path, error: self.parse_errors.append((path, error)),
            on_extend_not_found=self.not_found.append,
            on_invalid_extend=self.invalid.append,
        )

    @property
    def total(self) -> int:
        return len(self.circular) + len(self.parse_errors) + len(self.not_found) + len(
            self.invalid
        )


@_pytest.fixture
def reader() -> file_access.InMemoryFileReader:
    """Empty in-memory file reader."""
    return file_access.InMemoryFileReader()


@_pytest.fixture
def recorder() -> CallbackRecorder:
    return CallbackRecorder()


@_pytest.fixture
def merger(
    reader: file_access.InMemoryFileReader,
    recorder: CallbackRecorder,
) -> merging.ConfigMergerCore:
    """Merger over the ``reader`` fixture, reporting into ``recorder``."""
    return merging.ConfigMergerCore(reader, recorder.callbacks)


@_pytest.fixture
def write_json(tmp_path: _pathlib.Path) -> _typing.Callable[[str, _typing.Any], _pathlib.Path]:
    """Write a JSON document under tmp_path, creating parent directories.

    Usage:
        def test_something(write_json):
            path = write_json("project/.vscode/layered-settings/config.json", {...})
    """

    def _write(relative: str, content: _typing.Any) -> _pathlib.Path:
        path = tmp_path / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        text = content if isinstance(content, str) else _json.dumps(content, indent=2)
        path.write_text(text, encoding="utf-8")
        return path

    return _write
