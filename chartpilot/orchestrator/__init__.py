"""
Strategy orchestration: closed chart vocabulary, tool-call validation and the
chat-turn orchestrator.
"""
from .context_config import build_tool_schema, build_vocabulary, generate_chart_context_config
from .orchestrator import (
    DECLINE_REPLY,
    AnalysisRequest,
    ChatRequest,
    ChatResult,
    ReasoningRequest,
    ReasoningResponse,
    StrategyOrchestrator,
    is_decline,
)
from .tool_calls import ToolCall, parse_tool_call, tool_call_to_action

__all__ = [
    "DECLINE_REPLY",
    "AnalysisRequest",
    "ChatRequest",
    "ChatResult",
    "ReasoningRequest",
    "ReasoningResponse",
    "StrategyOrchestrator",
    "ToolCall",
    "build_tool_schema",
    "build_vocabulary",
    "generate_chart_context_config",
    "is_decline",
    "parse_tool_call",
    "tool_call_to_action",
]
