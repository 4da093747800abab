"""
Exception types for layered-settings.

Merge code never raises these to its caller; they are delivered as the
``error`` payload of the parse-error callback.
"""

import typing as _typing


class LayeredSettingsError(Exception):
    """Base class for all layered-settings errors."""


class ConfigShapeError(LayeredSettingsError):
    """A file parsed as JSON but does not have the layered config shape."""

    def __init__(self, path: str, problems: _typing.Sequence[str]) -> None:
        self.path = path
        self.problems = list(problems)
        super().__init__(f"Invalid config {path}: {'; '.join(self.problems)}")


class ConfigFileError(LayeredSettingsError):
    """The tool's own YAML configuration file could not be loaded."""

    def __init__(self, path: str, message: str) -> None:
        self.path = path
        super().__init__(f"Error in config file {path}: {message}")
