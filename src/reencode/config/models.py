"""Configuration data models."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any


@dataclass
class ToolPathsConfig:
    """Configuration for external tool paths.

    All paths are optional. An explicit tool path wins, then a binary in
    ``ffmpeg_dir``, then the system PATH.
    """

    ffmpeg_dir: Path | None = None
    ffmpeg: Path | None = None
    ffprobe: Path | None = None


@dataclass
class LoggingConfig:
    """Configuration for logging output."""

    # Log level: debug, info, warning, error
    level: str = "info"

    # Log file path (None = stderr only)
    file: Path | None = None

    # Log format: text or json
    format: str = "text"

    # Also log to stderr when file is set
    include_stderr: bool = False

    # Rotation threshold in bytes (default 10MB)
    max_bytes: int = 10_485_760

    # Number of rotated files to keep
    backup_count: int = 5

    def __post_init__(self) -> None:
        """Validate configuration."""
        valid_levels = {"debug", "info", "warning", "error"}
        if self.level.lower() not in valid_levels:
            raise ValueError(f"level must be one of {valid_levels}, got {self.level}")
        valid_formats = {"text", "json"}
        if self.format.lower() not in valid_formats:
            raise ValueError(
                f"format must be one of {valid_formats}, got {self.format}"
            )


@dataclass
class ExecutionConfig:
    """Subprocess limits."""

    # Seconds before a single encoder pass is killed (None = no limit)
    timeout_seconds: int | None = None

    # Seconds before a probe is abandoned
    probe_timeout_seconds: int = 60

    def __post_init__(self) -> None:
        if self.timeout_seconds is not None and self.timeout_seconds <= 0:
            raise ValueError(
                f"timeout_seconds must be positive, got {self.timeout_seconds}"
            )
        if self.probe_timeout_seconds <= 0:
            raise ValueError(
                "probe_timeout_seconds must be positive, "
                f"got {self.probe_timeout_seconds}"
            )


@dataclass
class ReencodeConfig:
    """Complete application configuration."""

    tools: ToolPathsConfig = field(default_factory=ToolPathsConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    execution: ExecutionConfig = field(default_factory=ExecutionConfig)

    # Encode profile defaults; validated when the profile is built.
    encode: dict[str, Any] = field(default_factory=dict)

    # File the configuration was read from, if any
    source_path: Path | None = None
