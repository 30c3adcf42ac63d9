"""Encoder command construction and execution."""

from reencode.executor.command import (
    build_encode_command,
    build_encode_commands,
    build_pass1_command,
)
from reencode.executor.encoder import EncodeError, EncodeExecutor
from reencode.executor.filters import FilterGraph, FilterStage, build_filter_graph
from reencode.executor.interface import (
    ToolNotFoundError,
    get_tool_path,
    require_tool,
    resolve_tool_path,
)
from reencode.executor.paths import build_output_path, get_safe_path
from reencode.executor.types import EncodeCommand, EncodeResult, TwoPassContext

__all__ = [
    "EncodeCommand",
    "EncodeError",
    "EncodeExecutor",
    "EncodeResult",
    "FilterGraph",
    "FilterStage",
    "ToolNotFoundError",
    "TwoPassContext",
    "build_encode_command",
    "build_encode_commands",
    "build_filter_graph",
    "build_output_path",
    "build_pass1_command",
    "get_safe_path",
    "get_tool_path",
    "require_tool",
    "resolve_tool_path",
]
