"""
Tool settings using pydantic-settings.

Loads configuration from:
1. Constructor arguments (highest precedence)
2. Environment variables with LAYERED_SETTINGS_ prefix
3. User YAML config (~/.config/layered-settings/config.yaml)

These settings control how the CLI locates and merges layered config files.
They are not the merged settings themselves.
"""

import typing as _typing

import pydantic as _pydantic
import pydantic_settings as _pydantic_settings

import layered_settings.config.sources as sources
import layered_settings.constants as _constants


class Settings(_pydantic_settings.BaseSettings):
    """
    layered-settings tool configuration.

    All settings can be overridden via environment variables with the
    LAYERED_SETTINGS_ prefix, e.g. LAYERED_SETTINGS_FETCH_URLS=true.
    """

    model_config = _pydantic_settings.SettingsConfigDict(
        env_prefix=_constants.ENV_PREFIX,
        extra="ignore",
    )

    config_dir: str = _pydantic.Field(
        default=_constants.DEFAULT_CONFIG_DIR,
        description="Directory, relative to each ancestor, holding the config file",
    )
    config_filename: str = _pydantic.Field(
        default=_constants.DEFAULT_CONFIG_FILENAME,
        description="Entry-point file name inside config_dir",
    )
    deep_merge_objects: bool = _pydantic.Field(
        default=True,
        description="Recursively merge object values instead of replacing them",
    )
    fetch_urls: bool = _pydantic.Field(
        default=False,
        description="Fetch http(s) extends targets instead of skipping them",
    )
    url_timeout: float = _pydantic.Field(
        default=_constants.DEFAULT_URL_TIMEOUT,
        gt=0,
        description="Seconds before a remote extends fetch gives up",
    )
    verbose: bool = _pydantic.Field(
        default=False,
        description="Enable debug logging",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[_pydantic_settings.BaseSettings],
        init_settings: _pydantic_settings.PydanticBaseSettingsSource,
        env_settings: _pydantic_settings.PydanticBaseSettingsSource,
        dotenv_settings: _pydantic_settings.PydanticBaseSettingsSource,  # noqa: ARG003
        file_secret_settings: _pydantic_settings.PydanticBaseSettingsSource,  # noqa: ARG003
    ) -> tuple[_pydantic_settings.PydanticBaseSettingsSource, ...]:
        return (
            init_settings,
            env_settings,
            sources.YamlSettingsSource(settings_cls),
        )

    @_pydantic.field_validator("config_dir", "config_filename")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be blank")
        return value

    def to_display_dict(self) -> dict[str, _typing.Any]:
        """Settings as a plain dict, for ``config`` display."""
        return self.model_dump()
