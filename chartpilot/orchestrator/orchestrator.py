"""
Strategy orchestrator: one chat turn from user message to chart actions,
optional trade-plan analysis and a reply.
"""

import json
import re
from collections.abc import Awaitable, Mapping
from dataclasses import dataclass, field
from typing import Any, Callable, Optional, Union

import structlog

from ..chart.actions import Action, NoOp, RunAnalysis, describe_action, summarize_actions
from ..chart.session import BatchResult, ChartSession
from ..chart.state import ChartStateSnapshot
from ..config.defaults import DefaultConfig, get_default_config
from ..errors import ReasoningFunctionError
from ..indicators.registry import IndicatorRegistry, get_default_registry
from ..plans.complexity import apply_complexity_constraints
from ..plans.models import StrategyComplexity, TradePlan
from ..sequence.engine import run_chart_sequence
from ..sequence.models import ActionStep, RunSequenceOptions, SequenceResult
from .context_config import build_tool_schema, build_vocabulary, generate_chart_context_config
from .tool_calls import ToolCall, tool_call_to_action

logger = structlog.get_logger(__name__)

DECLINE_REPLY = "No problem. Let me know if you want to look at anything else on the chart."
EMPTY_REPLY = "I didn't find anything to change on the chart."


@dataclass
class ChatRequest:
    symbol: str
    message: str
    history: list[dict[str, str]] = field(default_factory=list)   # [{"role", "content"}]
    strategy: Optional[str] = None
    complexity: StrategyComplexity = StrategyComplexity.SIMPLE

    def __post_init__(self):
        self.complexity = StrategyComplexity(self.complexity)


@dataclass
class ReasoningRequest:
    system_prompt: str
    messages: list[dict[str, str]]
    tools: list[dict[str, Any]]


@dataclass
class ReasoningResponse:
    text: Optional[str] = None
    tool_calls: list[ToolCall] = field(default_factory=list)


@dataclass
class AnalysisRequest:
    symbol: str
    strategy: Optional[str]
    complexity: StrategyComplexity
    chart_state: ChartStateSnapshot
    screenshots: list[str] = field(default_factory=list)


@dataclass
class ChatResult:
    """Outcome of one chat turn."""
    reply: str
    analysis: Any = None                        # Raw proposal from the analysis function
    trade_plan: Optional[TradePlan] = None      # Proposal projected onto the requested tier
    screenshots: list[str] = field(default_factory=list)
    actions: list[Action] = field(default_factory=list)
    batch: Optional[BatchResult] = None
    sequence: Optional[SequenceResult] = None


ReasoningFn = Callable[[ReasoningRequest], Awaitable[ReasoningResponse]]
AnalysisFn = Callable[[AnalysisRequest], Awaitable[Union[TradePlan, Mapping, None]]]

_PUNCTUATION = re.compile(r"[^\w\s]")
_WHITESPACE = re.compile(r"\s+")


def is_decline(message: str, phrases: Optional[tuple[str, ...]] = None) -> bool:
    """True when the whole message is a decline such as "no thanks" or "cancel"."""
    phrases = phrases if phrases is not None else get_default_config().orchestrator.decline_phrases
    normalized = _WHITESPACE.sub(" ", _PUNCTUATION.sub(" ", message.lower())).strip()
    return normalized in phrases


def _coerce_tool_call(call: Any) -> ToolCall:
    """Accept ToolCall objects and plain {name, arguments} mappings."""
    if isinstance(call, ToolCall):
        return call
    if isinstance(call, Mapping):
        function = call.get("function")
        source = function if isinstance(function, Mapping) else call
        name = source.get("name")
        if isinstance(name, str):
            return ToolCall(name=name, arguments=source.get("arguments"), id=call.get("id"))
    raise ReasoningFunctionError(
        f"Unusable tool call of type {type(call).__name__}", stage="response"
    )


class StrategyOrchestrator:
    """
    Routes a chat turn through the reasoning function and onto the chart.

    Tool calls are validated and mapped to actions. Small action sets run as a
    concurrent batch; larger ones run through the sequence engine so the user
    sees narrated progress. Analysis runs only when a run_analysis call is
    present.
    """

    def __init__(
        self,
        session: ChartSession,
        reasoning_fn: ReasoningFn,
        analysis_fn: Optional[AnalysisFn] = None,
        config: Optional[DefaultConfig] = None,
        registry: Optional[IndicatorRegistry] = None,
    ):
        self.session = session
        self.reasoning_fn = reasoning_fn
        self.analysis_fn = analysis_fn
        self.config = config or get_default_config()
        self.registry = registry or get_default_registry()
        self.vocabulary = build_vocabulary(self.registry)
        self.logger = logger

    def build_system_prompt(self, request: ChatRequest) -> str:
        snapshot = self.session.get_chart_state_snapshot()
        chart_state = {
            "timeframe": snapshot.timeframe,
            "chartType": snapshot.chart_type,
            "indicators": [item.indicator for item in snapshot.indicators],
        }
        return "\n\n".join([
            f"You control a stock chart for {request.symbol}. "
            "Use the provided tools to change the chart; only call run_analysis "
            "when the user asks for a trade plan or analysis.",
            f"Strategy: {request.strategy or 'unspecified'}. Complexity: {request.complexity.value}.",
            "Current chart state:\n" + json.dumps(chart_state),
            "Available options:\n" + json.dumps(generate_chart_context_config(self.registry)),
        ])

    async def _call_reasoning(self, reasoning_request: ReasoningRequest) -> ReasoningResponse:
        try:
            response = await self.reasoning_fn(reasoning_request)
        except ReasoningFunctionError:
            raise
        except Exception as e:
            raise ReasoningFunctionError(f"Reasoning call failed: {e}", stage="call") from e

        if not isinstance(response, ReasoningResponse):
            raise ReasoningFunctionError(
                f"Reasoning function returned {type(response).__name__}", stage="response"
            )
        return ReasoningResponse(
            text=response.text,
            tool_calls=[_coerce_tool_call(call) for call in response.tool_calls or ()],
        )

    async def _call_analysis(self, request: ChatRequest, run: RunAnalysis,
                             screenshots: list[str]) -> Any:
        try:
            screenshots.append(await self.session.screenshot_chart())
        except Exception as e:
            raise ReasoningFunctionError(f"Chart screenshot failed: {e}", stage="screenshot") from e

        analysis_request = AnalysisRequest(
            symbol=request.symbol,
            strategy=run.strategy or request.strategy,
            complexity=request.complexity,
            chart_state=self.session.get_chart_state_snapshot(),
            screenshots=list(screenshots),
        )
        try:
            return await self.analysis_fn(analysis_request)
        except Exception as e:
            raise ReasoningFunctionError(f"Analysis call failed: {e}", stage="analysis") from e

    async def _execute(self, chart_actions: list[Action]) -> tuple[Optional[BatchResult], Optional[SequenceResult]]:
        params = self.config.orchestrator
        if not chart_actions:
            return None, None

        if len(chart_actions) > params.sequence_threshold:
            steps = [ActionStep(action=a, message=describe_action(a)) for a in chart_actions]
            options = RunSequenceOptions(
                narrate=True,
                cancellable=self.config.sequence.cancellable,
                per_step_delay_ms=params.sequence_step_delay_ms,
                wait_for_bridge=self.config.sequence.wait_for_bridge,
            )
            result = await run_chart_sequence(self.session, steps, options, self.registry)
            return None, result

        return await self.session.execute_chart_actions(chart_actions), None

    async def _run_analysis(self, request: ChatRequest, run: RunAnalysis,
                            screenshots: list[str]) -> tuple[Any, Optional[TradePlan]]:
        if self.analysis_fn is None:
            self.logger.info("Analysis requested but no analysis function configured",
                             symbol=request.symbol)
            return None, None

        try:
            raw = await self._call_analysis(request, run, screenshots)
        except ReasoningFunctionError as e:
            self.logger.warning("Analysis failed", symbol=request.symbol, stage=e.stage, error=str(e))
            return None, None
        if raw is None:
            return None, None

        try:
            plan = apply_complexity_constraints(raw, request.complexity, self.config.complexity)
        except ValueError as e:
            self.logger.warning("Discarding unusable trade plan", symbol=request.symbol, error=str(e))
            return raw, None
        return raw, plan

    async def send_message(self, request: ChatRequest) -> ChatResult:
        """
        Handle one chat turn.

        Args:
            request: Symbol, user message, history and strategy preferences

        Returns:
            ChatResult with the reply, executed actions and any trade plan
        """
        if is_decline(request.message, self.config.orchestrator.decline_phrases):
            self.logger.info("Decline short-circuit", symbol=request.symbol)
            return ChatResult(reply=DECLINE_REPLY)

        reasoning_request = ReasoningRequest(
            system_prompt=self.build_system_prompt(request),
            messages=[*request.history, {"role": "user", "content": request.message}],
            tools=build_tool_schema(self.registry),
        )
        try:
            response = await self._call_reasoning(reasoning_request)
        except ReasoningFunctionError as e:
            self.logger.warning("Reasoning function failed", symbol=request.symbol,
                                stage=e.stage, error=str(e))
            response = ReasoningResponse()

        actions = [
            tool_call_to_action(call, request.strategy, self.registry, self.vocabulary)
            for call in response.tool_calls
        ]
        chart_actions = [a for a in actions if not isinstance(a, (NoOp, RunAnalysis))]
        batch, sequence = await self._execute(chart_actions)

        screenshots = list(sequence.screenshots) if sequence else []
        analysis, trade_plan = None, None
        run = next((a for a in actions if isinstance(a, RunAnalysis)), None)
        if run is not None:
            analysis, trade_plan = await self._run_analysis(request, run, screenshots)

        # Analysis is only reported when it produced a plan
        performed = [a for a in actions if not isinstance(a, RunAnalysis) or trade_plan is not None]
        text = (response.text or "").strip()
        reply = text or summarize_actions(performed) or EMPTY_REPLY

        self.logger.info("Chat turn handled", symbol=request.symbol, tool_calls=len(response.tool_calls),
                         chart_actions=len(chart_actions), sequenced=sequence is not None,
                         analysis=trade_plan is not None)
        return ChatResult(
            reply=reply,
            analysis=analysis,
            trade_plan=trade_plan,
            screenshots=screenshots,
            actions=actions,
            batch=batch,
            sequence=sequence,
        )
