"""External tool resolution.

Tools are looked up in this order:
1. An explicit path (config ``tools.ffmpeg`` / REENCODE_FFMPEG_PATH, ...)
2. The configured ffmpeg directory (``tools.ffmpeg_dir`` / REENCODE_FFMPEG_DIR)
3. The system PATH
"""

from __future__ import annotations

import platform
import shutil
from pathlib import Path

from reencode.config.models import ToolPathsConfig

SUPPORTED_TOOLS = ("ffmpeg", "ffprobe")


class ToolNotFoundError(RuntimeError):
    """A required external tool is not available."""

    def __init__(self, tool_name: str) -> None:
        self.tool_name = tool_name
        super().__init__(
            f"Required tool not available: {tool_name}. Install ffmpeg or set "
            f"REENCODE_{tool_name.upper()}_PATH / REENCODE_FFMPEG_DIR."
        )


def executable_name(tool_name: str) -> str:
    """Platform-specific executable file name."""
    if platform.system() == "Windows":
        return f"{tool_name}.exe"
    return tool_name


def get_null_device() -> str:
    """Output path that discards everything written to it."""
    return "NUL" if platform.system() == "Windows" else "/dev/null"


def resolve_tool_path(tool_name: str, tools: ToolPathsConfig) -> Path | None:
    """Resolve a tool against a tools configuration.

    Args:
        tool_name: "ffmpeg" or "ffprobe".
        tools: Configured tool paths.

    Returns:
        Path to the tool or None if it cannot be found.
    """
    if tool_name not in SUPPORTED_TOOLS:
        raise ValueError(f"Unsupported tool: {tool_name}")

    explicit: Path | None = getattr(tools, tool_name)
    if explicit is not None:
        return explicit

    if tools.ffmpeg_dir is not None:
        candidate = tools.ffmpeg_dir / executable_name(tool_name)
        if candidate.exists():
            return candidate

    found = shutil.which(tool_name)
    return Path(found) if found else None


def get_tool_path(tool_name: str) -> Path | None:
    """Get path to a tool from the active configuration, or None."""
    from reencode.config import get_config

    return resolve_tool_path(tool_name, get_config().tools)


def require_tool(tool_name: str, tools: ToolPathsConfig) -> Path:
    """Resolve a tool that must be present.

    Raises:
        ToolNotFoundError: If the tool is not available.
    """
    path = resolve_tool_path(tool_name, tools)
    if path is None:
        raise ToolNotFoundError(tool_name)
    return path
