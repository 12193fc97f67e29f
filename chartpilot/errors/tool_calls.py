"""
Tool call error classifications for agent-issued chart commands.

These exceptions describe tool calls that cannot be mapped onto the action
vocabulary. They are always recoverable: the offending call becomes a no-op.
"""

from typing import Optional, Dict, Any


class ToolCallError(Exception):
    """Base class for tool calls that cannot be turned into chart actions."""

    def __init__(self, message: str, tool_name: Optional[str] = None,
                 context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.tool_name = tool_name
        self.context = context or {}
        self.recoverable = True


class UnknownToolError(ToolCallError):
    """The tool name is not part of the published tool schema."""


class MalformedToolArgumentsError(ToolCallError):
    """Tool arguments are not valid JSON or fail schema validation."""

    def __init__(self, message: str, raw_arguments: Optional[Any] = None,
                 issues: Optional[list] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.raw_arguments = raw_arguments
        self.issues = issues or []
