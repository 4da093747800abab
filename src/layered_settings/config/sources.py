"""Custom pydantic-settings source for the user YAML config file.

The file lives at ``~/.config/layered-settings/config.yaml`` unless
LAYERED_SETTINGS_USER_CONFIG names another path. Keys are the Settings
field names:

    deep_merge_objects: false
    fetch_urls: true
    url_timeout: 2.5
"""

import os as _os
import pathlib as _pathlib
import typing as _typing

import pydantic.fields as _pydantic_fields
import pydantic_settings as _pydantic_settings
import yaml as _yaml

import layered_settings.constants as _constants
import layered_settings.errors as errors


def get_user_config_path() -> _pathlib.Path:
    """
    Get the path to the user config file.

    Respects LAYERED_SETTINGS_USER_CONFIG if set, otherwise uses the
    XDG-style default.
    """
    override = _os.environ.get(_constants.ENV_USER_CONFIG)
    if override:
        return _pathlib.Path(override).expanduser()
    return _pathlib.Path(_constants.DEFAULT_USER_CONFIG).expanduser()


def load_yaml_config(path: _pathlib.Path) -> dict[str, _typing.Any]:
    """
    Load a YAML config file.

    Returns:
        Parsed mapping, or an empty dict if the file is missing or empty.

    Raises:
        ConfigFileError: If the file cannot be read, is malformed YAML,
            or does not hold a mapping at the top level.
    """
    if not path.exists():
        return {}

    try:
        content = path.read_text(encoding="utf-8")
    except OSError as e:
        raise errors.ConfigFileError(str(path), f"cannot read file: {e}") from e

    try:
        parsed = _yaml.safe_load(content)
    except _yaml.YAMLError as e:
        raise errors.ConfigFileError(str(path), f"invalid YAML: {e}") from e

    if parsed is None:
        return {}
    if not isinstance(parsed, dict):
        raise errors.ConfigFileError(
            str(path),
            f"config must be a YAML mapping, got {type(parsed).__name__}",
        )
    return parsed


class YamlSettingsSource(_pydantic_settings.PydanticBaseSettingsSource):
    """Settings source backed by the user YAML config file."""

    def __init__(
        self,
        settings_cls: type[_pydantic_settings.BaseSettings],
        config_path: _pathlib.Path | None = None,
    ) -> None:
        super().__init__(settings_cls)
        self._config_path = config_path if config_path is not None else get_user_config_path()
        self._data = load_yaml_config(self._config_path)

    @property
    def config_path(self) -> _pathlib.Path:
        return self._config_path

    def get_field_value(
        self,
        field: _pydantic_fields.FieldInfo,  # noqa: ARG002 - required by pydantic-settings interface
        field_name: str,
    ) -> tuple[_typing.Any, str, bool]:
        value = self._data.get(field_name)
        return value, field_name, isinstance(value, (dict, list))

    def __call__(self) -> dict[str, _typing.Any]:
        # Only known fields; unknown keys in the user file are ignored
        return {
            name: self._data[name]
            for name in self.settings_cls.model_fields
            if name in self._data
        }
