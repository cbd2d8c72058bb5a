"""Forge configuration."""
from pathlib import Path
from typing import ClassVar, Optional

import appdirs
from pydantic import Field
from pydantic_settings import (
    BaseSettings,
    JsonConfigSettingsSource,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from cython_forge.errors import ForgeError
from cython_forge.logging import get_logger

logger = get_logger(__name__)

APP_NAME = "cython-forge"
ENV_PREFIX = "CYTHON_FORGE_"
DEFAULT_BUILD_ARGS = "build_ext --inplace"


class ForgeConfig(BaseSettings):
    """Read-only settings shared by discovery and builds.

    Values come from keyword arguments, then ``CYTHON_FORGE_*`` environment
    variables, then the JSON config file when loaded through ``load_config``.
    """

    _json_file_override: ClassVar[Optional[Path]] = None

    default_build_args: str = Field(default=DEFAULT_BUILD_ARGS, min_length=1)
    conda_command: str = Field(default="conda", min_length=1)
    conda_timeout: float = Field(default=10.0, gt=0)
    find_command: str = Field(default="find", min_length=1)
    find_timeout: float = Field(default=5.0, gt=0)
    search_depth: int = Field(default=3, ge=1)
    max_output_bytes: int = Field(default=1024 * 1024, gt=0)
    extra_search_roots: tuple[str, ...] = ()
    build_sink_name: str = "Cython Build"

    model_config = SettingsConfigDict(
        env_prefix=ENV_PREFIX,
        extra="ignore",
        frozen=True,
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Environment variables override the JSON file."""
        sources = [init_settings, env_settings]
        if cls._json_file_override is not None:
            sources.append(JsonConfigSettingsSource(settings_cls, json_file=cls._json_file_override))
        return tuple(sources)


def default_config_path() -> Path:
    return Path(appdirs.user_config_dir(APP_NAME)) / "config.json"


def load_config(path: Optional[Path] = None) -> ForgeConfig:
    """Load configuration from an optional JSON file plus environment overrides.

    Any invalid value is reported as a ``ForgeError`` so the server fails at
    startup instead of during discovery.
    """
    path = path or default_config_path()

    ForgeConfig._json_file_override = path
    try:
        config = ForgeConfig()
    except (ValueError, TypeError) as e:
        # pydantic.ValidationError and json.JSONDecodeError are ValueErrors;
        # a top-level JSON value that is not an object surfaces as TypeError.
        raise ForgeError(f"Invalid configuration from {path}: {e}", details={"path": str(path)}) from e
    finally:
        ForgeConfig._json_file_override = None

    logger.debug({"event": "config_loaded", "path": str(path), "file_exists": path.exists()})
    return config
