"""
Config Loader - Build Settings from a YAML file, the environment and overrides.

Later sources win: defaults, then the config file, then ``WEB_REPLAY__*``
environment variables, then explicit overrides (CLI flags).
"""

import os
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml
from dotenv import load_dotenv
from pydantic import ValidationError

from web_replay.config.settings import Settings
from web_replay.exceptions.base import ConfigurationError

# Names a config file when no explicit path is given
CONFIG_ENV_VAR = "WEB_REPLAY_CONFIG"

SEARCH_PATHS = (
    Path("web-replay.yaml"),
    Path(".web-replay.yaml"),
    Path.home() / ".config" / "web-replay" / "config.yaml",
)

ENV_FILES = (Path(".env"), Path(".env.local"))


def read_config_file(path: Path) -> Dict[str, Any]:
    """Parse a YAML config file; an empty file yields no values."""
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in {path}", {"error": str(e)}) from e
    except OSError as e:
        raise ConfigurationError(f"Cannot read config file {path}", {"error": str(e)}) from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"Config file {path} must contain a mapping, not {type(data).__name__}")
    return data


class ConfigLoader:
    """
    Locates and applies configuration sources.

    An explicit path must exist. Without one, ``WEB_REPLAY_CONFIG`` is
    consulted, then the first existing entry of SEARCH_PATHS.
    """

    def __init__(self, config_path: Optional[Union[str, Path]] = None):
        self.config_path = Path(config_path) if config_path else None

    def find_config_file(self) -> Optional[Path]:
        explicit = self.config_path
        if explicit is None and os.environ.get(CONFIG_ENV_VAR):
            explicit = Path(os.environ[CONFIG_ENV_VAR])

        if explicit is not None:
            if not explicit.is_file():
                raise ConfigurationError(f"Config file not found: {explicit}")
            return explicit

        return next((path for path in SEARCH_PATHS if path.is_file()), None)

    def load(
        self,
        env_file: Optional[Union[str, Path]] = None,
        overrides: Optional[Dict[str, Any]] = None,
    ) -> Settings:
        """
        Load settings from all sources.

        Args:
            env_file: .env file to read; defaults to the first of ENV_FILES found
            overrides: Nested values applied last

        Raises:
            ConfigurationError: Unreadable file or values that fail validation
        """
        dotenv_path = Path(env_file) if env_file else next((p for p in ENV_FILES if p.is_file()), None)
        if dotenv_path:
            load_dotenv(dotenv_path)

        config_file = self.find_config_file()
        file_values = read_config_file(config_file) if config_file else {}

        try:
            # Environment values sit above the file
            environment = Settings().model_dump(exclude_unset=True)
            settings = Settings(**file_values).merge_with(environment)
            return settings.merge_with(overrides) if overrides else settings
        except ValidationError as e:
            source = str(config_file) if config_file else "environment"
            raise ConfigurationError(
                f"Invalid configuration ({source})",
                {"errors": e.errors(include_url=False)},
            ) from e


def load_config(
    config_path: Optional[Union[str, Path]] = None,
    env_file: Optional[Union[str, Path]] = None,
    **overrides: Any,
) -> Settings:
    """
    Load settings in one call.

    Example:
        >>> settings = load_config("web-replay.yaml", replay={"navigation_settle_ms": 500})
    """
    return ConfigLoader(config_path).load(env_file=env_file, overrides=overrides or None)
