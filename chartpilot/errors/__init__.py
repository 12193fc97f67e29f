"""
Error classification for chart control and orchestration.

This module provides the exception hierarchy for the two kinds of failures the
engine distinguishes: bad input coming from an agent's tool calls, and runtime
failures of the chart bridge or the reasoning collaborator.
"""

from .tool_calls import (
    ToolCallError,
    UnknownToolError,
    MalformedToolArgumentsError,
)
from .runtime import (
    ChartControlError,
    ChartActionError,
    ReasoningFunctionError,
)

__all__ = [
    # Tool call errors
    "ToolCallError",
    "UnknownToolError",
    "MalformedToolArgumentsError",
    # Runtime failures
    "ChartControlError",
    "ChartActionError",
    "ReasoningFunctionError",
]
