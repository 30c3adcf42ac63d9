"""Configuration loader with precedence handling.

Configuration is loaded with the following precedence (highest to lowest):
1. CLI arguments (applied by the CLI on top of the loaded config)
2. Environment variables (REENCODE_*)
3. Config file (first of ~/.reencode.yaml, ./.reencode.yaml)
4. Default values

Environment variables:
- REENCODE_CONFIG_PATH: Path to config file (overrides the search)
- REENCODE_FFMPEG_DIR: Directory containing ffmpeg and ffprobe
- REENCODE_FFMPEG_PATH: Path to ffmpeg executable
- REENCODE_FFPROBE_PATH: Path to ffprobe executable
- REENCODE_OUTPUT_PATH: Default output directory
- REENCODE_LOG_LEVEL: Log level
- REENCODE_TIMEOUT: Seconds before an encoder pass is killed
"""

from __future__ import annotations

import logging
from dataclasses import fields
from pathlib import Path
from typing import Any

import yaml

from reencode.config.env import EnvReader
from reencode.config.models import (
    ExecutionConfig,
    LoggingConfig,
    ReencodeConfig,
    ToolPathsConfig,
)

logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = ".reencode.yaml"

_SECTIONS = frozenset({"encode", "tools", "logging", "execution"})
_PATH_FIELDS = frozenset({"ffmpeg_dir", "ffmpeg", "ffprobe", "file"})

_config: ReencodeConfig | None = None


class ConfigError(Exception):
    """Error loading or validating the configuration file."""

    pass


def get_config_search_paths() -> list[Path]:
    """Locations checked for a config file, in order."""
    return [Path.home() / CONFIG_FILE_NAME, Path.cwd() / CONFIG_FILE_NAME]


def find_config_file(env_reader: EnvReader | None = None) -> Path | None:
    """Return the config file to load, or None if there is none.

    REENCODE_CONFIG_PATH wins over the search paths.
    """
    reader = env_reader or EnvReader()
    env_path = reader.get_path("REENCODE_CONFIG_PATH", must_exist=False)
    if env_path is not None:
        return env_path
    for candidate in get_config_search_paths():
        if candidate.is_file():
            return candidate
    return None


def load_config_file(path: Path) -> dict[str, Any]:
    """Read a YAML config file.

    Args:
        path: File to read.

    Returns:
        Parsed mapping. An empty file yields an empty dict.

    Raises:
        ConfigError: If the file cannot be read, is not valid YAML or is not
            a mapping.
    """
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except FileNotFoundError as e:
        raise ConfigError(f"Config file not found: {path}") from e
    except OSError as e:
        raise ConfigError(f"Cannot read config file {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a mapping")
    return data


def _construct_section(section: str, dataclass_type: type, data: Any) -> Any:
    """Build a section dataclass, rejecting unknown keys."""
    if data is None:
        return dataclass_type()
    if not isinstance(data, dict):
        raise ConfigError(f"Section '{section}' must be a mapping")

    expected = {f.name for f in fields(dataclass_type)}
    unknown = set(data) - expected
    if unknown:
        raise ConfigError(
            f"Unknown key(s) in '{section}': {', '.join(sorted(unknown))}"
        )

    values = {
        key: Path(value).expanduser()
        if key in _PATH_FIELDS and value is not None
        else value
        for key, value in data.items()
    }
    try:
        return dataclass_type(**values)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Invalid '{section}' settings: {e}") from e


def build_config(
    data: dict[str, Any],
    env_reader: EnvReader | None = None,
    source_path: Path | None = None,
) -> ReencodeConfig:
    """Build the configuration from file data and environment.

    Args:
        data: Parsed config file (may be empty).
        env_reader: Environment source; os.environ when None.
        source_path: File the data came from.

    Raises:
        ConfigError: If the file data is invalid.
    """
    reader = env_reader or EnvReader()

    unknown = set(data) - _SECTIONS
    if unknown:
        raise ConfigError(f"Unknown config section(s): {', '.join(sorted(unknown))}")

    tools = _construct_section("tools", ToolPathsConfig, data.get("tools"))
    logging_config = _construct_section("logging", LoggingConfig, data.get("logging"))
    execution = _construct_section("execution", ExecutionConfig, data.get("execution"))

    encode = data.get("encode") or {}
    if not isinstance(encode, dict):
        raise ConfigError("Section 'encode' must be a mapping")
    encode = dict(encode)

    # Environment overrides
    tools.ffmpeg_dir = reader.get_path("REENCODE_FFMPEG_DIR", default=tools.ffmpeg_dir)
    tools.ffmpeg = reader.get_path("REENCODE_FFMPEG_PATH", default=tools.ffmpeg)
    tools.ffprobe = reader.get_path("REENCODE_FFPROBE_PATH", default=tools.ffprobe)

    env_level = reader.get_str("REENCODE_LOG_LEVEL")
    if env_level:
        try:
            logging_config = LoggingConfig(
                level=env_level,
                file=logging_config.file,
                format=logging_config.format,
                include_stderr=logging_config.include_stderr,
                max_bytes=logging_config.max_bytes,
                backup_count=logging_config.backup_count,
            )
        except ValueError as e:
            raise ConfigError(f"Invalid REENCODE_LOG_LEVEL: {e}") from e

    env_timeout = reader.get_int("REENCODE_TIMEOUT")
    if env_timeout is not None:
        if env_timeout <= 0:
            raise ConfigError(f"REENCODE_TIMEOUT must be positive, got {env_timeout}")
        execution.timeout_seconds = env_timeout

    env_output = reader.get_str("REENCODE_OUTPUT_PATH")
    if env_output:
        encode["output_path"] = env_output

    return ReencodeConfig(
        tools=tools,
        logging=logging_config,
        execution=execution,
        encode=encode,
        source_path=source_path,
    )


def get_config(
    config_path: Path | None = None,
    env_reader: EnvReader | None = None,
    *,
    reload: bool = False,
) -> ReencodeConfig:
    """Get the application configuration.

    The result is cached for the life of the process unless a path or
    reader is passed explicitly or ``reload`` is set.

    Args:
        config_path: Explicit config file (overrides the search).
        env_reader: Optional EnvReader for testing (uses os.environ if None).
        reload: Ignore the cached configuration.

    Raises:
        ConfigError: If the config file is invalid.
    """
    global _config
    use_cache = config_path is None and env_reader is None
    if use_cache and _config is not None and not reload:
        return _config

    path = config_path or find_config_file(env_reader)
    data: dict[str, Any] = {}
    if path is not None:
        logger.debug("Loading config file: %s", path)
        data = load_config_file(path)

    config = build_config(data, env_reader, source_path=path)
    if use_cache:
        _config = config
    return config


def clear_config_cache() -> None:
    """Forget the cached configuration. Primarily useful for testing."""
    global _config
    _config = None
