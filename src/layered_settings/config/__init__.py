"""
Configuration module for layered-settings.

Uses pydantic-settings for environment variable loading.
"""

from layered_settings.config.settings import Settings
from layered_settings.config.sources import (
    YamlSettingsSource,
    get_user_config_path,
    load_yaml_config,
)

__all__ = ["Settings", "YamlSettingsSource", "get_user_config_path", "load_yaml_config"]
