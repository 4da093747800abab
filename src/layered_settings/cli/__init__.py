"""
CLI module for layered-settings.

Provides the command-line interface using Click.
"""

from layered_settings.cli.main import cli

__all__ = ["cli"]
