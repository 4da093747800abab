"""
File access capability used by the merge core.

The merger never touches the filesystem directly. It is handed a FileReader:

- LocalFileReader: the real filesystem, ``os.path`` semantics
- InMemoryFileReader: a path -> content mapping with forward-slash path
  arithmetic, for deterministic tests and embedding

``read_file`` and ``exists`` may be overridden with coroutines; the merger
awaits them when they return awaitables.
"""

from __future__ import annotations

import abc as _abc
import json as _json
import logging as _logging
import os as _os
import typing as _typing

_logger = _logging.getLogger(__name__)


class FileReader(_abc.ABC):
    """Abstract file access used while resolving an extends chain."""

    @_abc.abstractmethod
    def read_file(self, path: str) -> str | None | _typing.Awaitable[str | None]:
        """Return file content as text, or None if the file is missing."""

    @_abc.abstractmethod
    def exists(self, path: str) -> bool | _typing.Awaitable[bool]:
        """Return True if ``path`` names an existing file."""

    @_abc.abstractmethod
    def resolve_path(self, base: str, relative: str) -> str:
        """Resolve ``relative`` against directory ``base`` to an absolute path."""

    @_abc.abstractmethod
    def dirname(self, path: str) -> str:
        """Return the directory containing ``path``."""

    @_abc.abstractmethod
    def basename(self, path: str) -> str:
        """Return the final component of ``path``."""

    @_abc.abstractmethod
    def is_absolute(self, path: str) -> bool:
        """Return True if ``path`` is already absolute."""


class LocalFileReader(FileReader):
    """FileReader over the local filesystem."""

    def __init__(self, encoding: str = "utf-8") -> None:
        self._encoding = encoding

    def read_file(self, path: str) -> str | None:
        try:
            with open(path, encoding=self._encoding) as f:
                return f.read()
        except (FileNotFoundError, IsADirectoryError, NotADirectoryError):
            return None
        except (PermissionError, UnicodeDecodeError) as e:
            _logger.warning("Cannot read %s: %s", path, e)
            return None

    def exists(self, path: str) -> bool:
        return _os.path.isfile(path)

    def resolve_path(self, base: str, relative: str) -> str:
        return _os.path.abspath(_os.path.join(base, relative))

    def dirname(self, path: str) -> str:
        return _os.path.dirname(path)

    def basename(self, path: str) -> str:
        return _os.path.basename(path)

    def is_absolute(self, path: str) -> bool:
        return _os.path.isabs(path)


class InMemoryFileReader(FileReader):
    """
    FileReader over an in-memory ``path -> content`` mapping.

    Paths are POSIX-style and absolute paths start with ``/``. Repeated and
    trailing slashes are collapsed.

    Example:
        >>> reader = InMemoryFileReader()
        >>> reader.add_json_file("/base.json", {"settings": {"a": 1}})
        >>> reader.resolve_path("/project/dir", "../base.json")
        '/project/base.json'
    """

    def __init__(self, files: _typing.Mapping[str, str] | None = None) -> None:
        self._files: dict[str, str] = {}
        for path, content in (files or {}).items():
            self.add_file(path, content)

    def add_file(self, path: str, content: str) -> None:
        self._files[self._normalize(path)] = content

    def add_json_file(self, path: str, content: _typing.Any) -> None:
        self.add_file(path, _json.dumps(content))

    def remove_file(self, path: str) -> None:
        self._files.pop(self._normalize(path), None)

    def clear(self) -> None:
        self._files.clear()

    @property
    def paths(self) -> list[str]:
        return sorted(self._files)

    def read_file(self, path: str) -> str | None:
        return self._files.get(self._normalize(path))

    def exists(self, path: str) -> bool:
        return self._normalize(path) in self._files

    def resolve_path(self, base: str, relative: str) -> str:
        if self.is_absolute(relative):
            return self._normalize(relative)

        parts: list[str] = []
        for part in [*base.split("/"), *relative.split("/")]:
            if part == "..":
                if parts:
                    parts.pop()
            elif part and part != ".":
                parts.append(part)
        return "/" + "/".join(parts)

    def dirname(self, path: str) -> str:
        normalized = self._normalize(path)
        last_slash = normalized.rfind("/")
        if last_slash <= 0:
            return "/"
        return normalized[:last_slash]

    def basename(self, path: str) -> str:
        normalized = self._normalize(path)
        return normalized[normalized.rfind("/") + 1 :]

    def is_absolute(self, path: str) -> bool:
        return path.startswith("/")

    @staticmethod
    def _normalize(path: str) -> str:
        parts = [p for p in path.split("/") if p]
        prefix = "/" if path.startswith("/") else ""
        return (prefix + "/".join(parts)) or "/"
