"""
Shared constants for layered-settings.

This module provides a single source of truth for default values
that are used across multiple modules.
"""

import re as _re

# Merge defaults
LANGUAGE_KEY_PATTERN = _re.compile(r"^\[.+\]$")
"""Settings keys scoped to a language, e.g. ``[typescript]``."""

EXTENDS_SUFFIX = ".json"
"""Every ``extends`` target must end with this suffix."""

URL_PREFIXES = ("http://", "https://")
"""``extends`` targets with these prefixes are remote documents."""

# Diff limits
MAX_ARRAY_DIFF_SIZE = 1000
"""Arrays longer than this are classified as "complex" instead of diffed.

The LCS table is O(n*m) in both time and memory; above this size the
differ refuses to produce an add/remove description.
"""

# Config discovery defaults
DEFAULT_CONFIG_DIR = ".vscode/layered-settings"
"""Directory (relative to a workspace folder) holding layered config files."""

DEFAULT_CONFIG_FILENAME = "config.json"
"""Entry-point file name inside DEFAULT_CONFIG_DIR."""

# Remote extends
DEFAULT_URL_TIMEOUT = 5.0
"""Seconds before a remote ``extends`` fetch gives up."""

ENV_PREFIX = "LAYERED_SETTINGS_"
"""Environment variable prefix for tool settings."""

ENV_USER_CONFIG = "LAYERED_SETTINGS_USER_CONFIG"
"""Environment variable naming the user YAML config file."""

DEFAULT_USER_CONFIG = "~/.config/layered-settings/config.yaml"
"""User YAML config file consulted when ENV_USER_CONFIG is unset."""
