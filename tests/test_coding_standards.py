"""
Tests that enforce coding standards across layered_settings.

- ``import X as _x`` / ``import layered_settings.x as x``, never ``from X import Y``
  (``__init__.py`` re-exports and ``from __future__`` are allowed)
- No bare ``except:``
- Every module opens with a docstring
- Modules that log use a module-level ``_logger`` named after the module
"""

import pathlib as _pathlib
import re as _re

import pytest as _pytest

SRC_DIR = _pathlib.Path(__file__).parent.parent / "src" / "layered_settings"
TESTS_DIR = _pathlib.Path(__file__).parent.parent / "tests"

_FROM_IMPORT = _re.compile(r"^\s*from\s+(?!__future__\s)\S+\s+import\s")
_LOGGER_DEFINITION = "_logger = _logging.getLogger(__name__)"


def _python_files(directory: _pathlib.Path) -> list[_pathlib.Path]:
    return sorted(directory.rglob("*.py"))


def _from_imports(path: _pathlib.Path) -> list[str]:
    """Return ``path:line: text`` for each forbidden from-import."""
    if path.name == "__init__.py":
        return []
    return [
        f"{path}:{i}: {line.strip()}"
        for i, line in enumerate(path.read_text().split("\n"), start=1)
        if _FROM_IMPORT.match(line)
    ]


def _fail_on(violations: list[str], header: str) -> None:
    if violations:
        _pytest.fail(header + "\n" + "\n".join(f"  {v}" for v in violations))


class TestImportStyle:
    """Tests for import style compliance."""

    def test_src_no_from_imports(self) -> None:
        violations = [v for path in _python_files(SRC_DIR) for v in _from_imports(path)]
        _fail_on(violations, "Found forbidden 'from X import Y' imports:")

    def test_tests_no_from_imports(self) -> None:
        violations = [v for path in _python_files(TESTS_DIR) for v in _from_imports(path)]
        _fail_on(violations, "Found forbidden 'from X import Y' imports:")

    def test_pattern(self) -> None:
        assert _FROM_IMPORT.match("from pathlib import Path")
        assert _FROM_IMPORT.match("    from layered_settings import merging")
        assert not _FROM_IMPORT.match("from __future__ import annotations")
        assert not _FROM_IMPORT.match("import layered_settings.merging as merging")


class TestExceptionHandling:
    """Source files must name the exceptions they catch."""

    def test_src_no_bare_except(self) -> None:
        """Bare 'except:' swallows KeyboardInterrupt and SystemExit."""
        violations = [
            f"{path}:{i}: {line.strip()}"
            for path in _python_files(SRC_DIR)
            for i, line in enumerate(path.read_text().split("\n"), start=1)
            if line.strip().startswith("except:")
        ]
        _fail_on(violations, "Found bare 'except:' clauses:")


class TestModuleDocstrings:
    """Every source module opens with a docstring."""

    def test_src_modules_have_docstrings(self) -> None:
        missing = [
            str(path)
            for path in _python_files(SRC_DIR)
            if path.stat().st_size and not path.read_text().lstrip().startswith('"""')
        ]
        assert missing == [], f"Modules without a docstring: {missing}"


class TestModuleLoggers:
    """Modules that log do so through their own named logger."""

    def test_logging_modules_define_logger(self) -> None:
        missing = [
            str(path)
            for path in _python_files(SRC_DIR)
            if "_logger." in path.read_text() and _LOGGER_DEFINITION not in path.read_text()
        ]
        assert missing == [], f"Modules using _logger without defining it: {missing}"

    def test_merge_modules_log(self) -> None:
        for name in ["merging/merger.py", "chain.py", "remote.py", "file_access.py"]:
            assert _LOGGER_DEFINITION in (SRC_DIR / name).read_text(), name
