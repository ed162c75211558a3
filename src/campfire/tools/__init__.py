"""Tool dispatch layer."""

from .toolbox import (
    InvalidArgumentsError,
    ProtocolError,
    Tool,
    Toolbox,
    ToolResult,
    UnknownToolError,
)

__all__ = [
    "Toolbox",
    "Tool",
    "ToolResult",
    "ProtocolError",
    "UnknownToolError",
    "InvalidArgumentsError",
]
