"""Configuration management for reencode.

Precedence (highest to lowest): CLI flags, environment variables
(REENCODE_*), the YAML config file, defaults.
"""

from reencode.config.env import EnvReader
from reencode.config.loader import (
    CONFIG_FILE_NAME,
    ConfigError,
    build_config,
    clear_config_cache,
    find_config_file,
    get_config,
    load_config_file,
)
from reencode.config.logging_factory import (
    build_logging_config,
    configure_logging_from_cli,
)
from reencode.config.models import (
    ExecutionConfig,
    LoggingConfig,
    ReencodeConfig,
    ToolPathsConfig,
)

__all__ = [
    "CONFIG_FILE_NAME",
    "ConfigError",
    "EnvReader",
    "ExecutionConfig",
    "LoggingConfig",
    "ReencodeConfig",
    "ToolPathsConfig",
    "build_config",
    "build_logging_config",
    "clear_config_cache",
    "configure_logging_from_cli",
    "find_config_file",
    "get_config",
    "load_config_file",
]
