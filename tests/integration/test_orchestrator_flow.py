"""
End-to-end chat turns through the strategy orchestrator.

Uses a recording bridge, a scripted reasoning function and an optional
analysis function to exercise decline handling, batch and sequence dispatch,
analysis gating and fallback replies.
"""

import dataclasses

import pytest

from chartpilot.chart.actions import AddIndicator, NoOp, SetTimeframe
from chartpilot.chart.session import ChartSession
from chartpilot.config.defaults import get_default_config
from chartpilot.orchestrator import (
    DECLINE_REPLY,
    ChatRequest,
    ReasoningResponse,
    StrategyOrchestrator,
    ToolCall,
    is_decline,
)
from chartpilot.orchestrator.orchestrator import EMPTY_REPLY
from chartpilot.plans import StrategyComplexity


class ScriptedReasoning:
    """Reasoning function fake that returns a fixed response."""

    def __init__(self, response=None, error=None):
        self.response = response or ReasoningResponse()
        self.error = error
        self.requests = []

    async def __call__(self, request):
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return self.response


class RecordingAnalysis:
    """Analysis function fake that returns a raw plan proposal."""

    def __init__(self, proposal, error=None):
        self.proposal = proposal
        self.error = error
        self.requests = []

    async def __call__(self, request):
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return self.proposal


@pytest.fixture
def fast_config():
    config = get_default_config()
    return dataclasses.replace(
        config, orchestrator=dataclasses.replace(config.orchestrator, sequence_step_delay_ms=0)
    )


class TestDecline:
    """Test the decline short-circuit."""

    @pytest.mark.parametrize("message", ["no thanks", "No, thanks!", "  NOPE ", "never mind."])
    def test_decline_phrases(self, message):
        assert is_decline(message)

    @pytest.mark.parametrize("message", ["no RSI please", "show me the daily chart", ""])
    def test_not_declines(self, message):
        assert not is_decline(message)

    @pytest.mark.asyncio
    async def test_decline_skips_reasoning(self, session, bridge):
        reasoning = ScriptedReasoning(ReasoningResponse(
            tool_calls=[ToolCall("set_timeframe", {"timeframe": "1D"})]))
        orchestrator = StrategyOrchestrator(session, reasoning)

        result = await orchestrator.send_message(ChatRequest(symbol="AAPL", message="no thanks"))

        assert reasoning.requests == []
        assert result.reply == DECLINE_REPLY
        assert result.analysis is None
        assert result.trade_plan is None
        assert bridge.performed == []


class TestChartActions:
    """Test batch and sequence dispatch of tool calls."""

    @pytest.mark.asyncio
    async def test_single_call_runs_as_batch(self, session, bridge):
        reasoning = ScriptedReasoning(ReasoningResponse(
            text="Switched to the daily chart.",
            tool_calls=[ToolCall("set_timeframe", {"timeframe": "1D"})],
        ))
        orchestrator = StrategyOrchestrator(session, reasoning)

        result = await orchestrator.send_message(ChatRequest(symbol="AAPL", message="daily please"))

        assert result.reply == "Switched to the daily chart."
        assert bridge.performed == [SetTimeframe("1D")]
        assert result.batch.ok
        assert result.sequence is None

    @pytest.mark.asyncio
    async def test_multiple_calls_run_as_sequence(self, session, bridge, fast_config):
        reasoning = ScriptedReasoning(ReasoningResponse(tool_calls=[
            ToolCall("set_timeframe", {"timeframe": "1D"}),
            ToolCall("add_indicator", {"indicator": "EMA", "options": {"calcParams": [9, 21, 50]}}),
        ]))
        orchestrator = StrategyOrchestrator(session, reasoning, config=fast_config)
        seen = []
        session.overlay.on_overlay_message(lambda state: seen.append(state.message))

        result = await orchestrator.send_message(
            ChatRequest(symbol="AAPL", message="daily with EMAs", strategy="day_trade"))

        assert result.reply == "Timeframe set to 1D. Added EMA(9,21,50)."
        assert result.batch is None
        assert result.sequence.ok
        assert [a.type for a in bridge.performed] == ["setTimeframe", "addIndicator"]
        assert seen == ["Timeframe set to 1D.", "Added EMA(9,21,50).", None]

    @pytest.mark.asyncio
    async def test_request_context_reaches_reasoning(self, session):
        session.update_chart_state(timeframe="5m")
        reasoning = ScriptedReasoning()
        orchestrator = StrategyOrchestrator(session, reasoning)
        history = [{"role": "assistant", "content": "Hi"}]

        await orchestrator.send_message(
            ChatRequest(symbol="TSLA", message="add RSI", history=history, strategy="swing_trade"))

        request = reasoning.requests[0]
        assert request.messages == history + [{"role": "user", "content": "add RSI"}]
        assert "TSLA" in request.system_prompt
        assert '"timeframe": "5m"' in request.system_prompt
        assert {t["function"]["name"] for t in request.tools} >= {"set_timeframe", "run_analysis"}

    @pytest.mark.asyncio
    async def test_unknown_tool_becomes_noop(self, session, bridge):
        reasoning = ScriptedReasoning(ReasoningResponse(tool_calls=[ToolCall("draw_trendline", {})]))
        orchestrator = StrategyOrchestrator(session, reasoning)

        result = await orchestrator.send_message(ChatRequest(symbol="AAPL", message="draw a line"))

        assert isinstance(result.actions[0], NoOp)
        assert bridge.performed == []
        assert result.reply == EMPTY_REPLY

    @pytest.mark.asyncio
    async def test_profile_follows_strategy(self, session, bridge):
        reasoning = ScriptedReasoning(ReasoningResponse(
            tool_calls=[ToolCall("add_indicator", {"indicator": "EMA"})]))
        orchestrator = StrategyOrchestrator(session, reasoning)

        await orchestrator.send_message(ChatRequest(symbol="AAPL", message="EMAs", strategy="swing_trade"))

        action = bridge.performed[0]
        assert isinstance(action, AddIndicator)
        assert action.options["calcParams"] == [20, 50, 200]


class TestAnalysis:
    """Test that analysis runs only on request and is tier-shaped."""

    @pytest.mark.asyncio
    async def test_analysis_gated_by_tool_call(self, session, sample_raw_plan):
        analysis = RecordingAnalysis(sample_raw_plan)
        orchestrator = StrategyOrchestrator(session, ScriptedReasoning(ReasoningResponse(text="Done.")),
                                            analysis_fn=analysis)

        result = await orchestrator.send_message(ChatRequest(symbol="AAPL", message="hello"))

        assert analysis.requests == []
        assert result.trade_plan is None

    @pytest.mark.asyncio
    async def test_analysis_projects_onto_requested_tier(self, session, sample_raw_plan):
        analysis = RecordingAnalysis(sample_raw_plan)
        reasoning = ScriptedReasoning(ReasoningResponse(
            tool_calls=[ToolCall("run_analysis", {"strategy": "day_trade"})]))
        orchestrator = StrategyOrchestrator(session, reasoning, analysis_fn=analysis)

        result = await orchestrator.send_message(ChatRequest(
            symbol="AAPL", message="give me a plan", complexity="partial"))

        request = analysis.requests[0]
        assert request.strategy == "day_trade"
        assert request.complexity == StrategyComplexity.PARTIAL
        assert request.screenshots == ["screenshot-1"]
        assert result.analysis == sample_raw_plan
        assert result.trade_plan.complexity == StrategyComplexity.PARTIAL
        assert result.trade_plan.targets == pytest.approx((107.5, 112.5))
        assert result.screenshots == ["screenshot-1"]
        assert result.reply == "Ran day_trade analysis."

    @pytest.mark.asyncio
    async def test_unusable_proposal_is_discarded(self, session):
        analysis = RecordingAnalysis({"side": "diagonal"})
        reasoning = ScriptedReasoning(ReasoningResponse(tool_calls=[ToolCall("run_analysis", {})]))
        orchestrator = StrategyOrchestrator(session, reasoning, analysis_fn=analysis)

        result = await orchestrator.send_message(ChatRequest(symbol="AAPL", message="plan"))

        assert result.analysis == {"side": "diagonal"}
        assert result.trade_plan is None
        assert result.reply == EMPTY_REPLY

    @pytest.mark.asyncio
    async def test_analysis_failure_keeps_chart_reply(self, session, bridge):
        analysis = RecordingAnalysis(None, error=RuntimeError("model timeout"))
        reasoning = ScriptedReasoning(ReasoningResponse(tool_calls=[
            ToolCall("set_timeframe", {"timeframe": "1D"}),
            ToolCall("run_analysis", {}),
        ]))
        orchestrator = StrategyOrchestrator(session, reasoning, analysis_fn=analysis)

        result = await orchestrator.send_message(ChatRequest(symbol="AAPL", message="daily plan"))

        assert len(analysis.requests) == 1
        assert result.analysis is None
        assert result.trade_plan is None
        assert bridge.performed == [SetTimeframe("1D")]
        assert result.reply == "Timeframe set to 1D."

    @pytest.mark.asyncio
    async def test_screenshot_failure_skips_analysis(self, bridge, fast_bridge_params, sample_raw_plan):
        class BrokenScreenshots:
            async def capture_chart_screenshot(self):
                raise OSError("canvas unavailable")

        session = ChartSession(screenshot_service=BrokenScreenshots(), bridge_params=fast_bridge_params)
        session.register_chart_bridge(bridge)
        analysis = RecordingAnalysis(sample_raw_plan)
        reasoning = ScriptedReasoning(ReasoningResponse(tool_calls=[ToolCall("run_analysis", {})]))

        result = await StrategyOrchestrator(session, reasoning, analysis_fn=analysis).send_message(
            ChatRequest(symbol="AAPL", message="plan"))

        assert analysis.requests == []
        assert result.trade_plan is None
        assert result.screenshots == []
        assert result.reply == EMPTY_REPLY

    @pytest.mark.asyncio
    async def test_no_analysis_function(self, session):
        reasoning = ScriptedReasoning(ReasoningResponse(tool_calls=[ToolCall("run_analysis", {})]))
        result = await StrategyOrchestrator(session, reasoning).send_message(
            ChatRequest(symbol="AAPL", message="plan"))
        assert result.trade_plan is None
        assert result.screenshots == []
        assert result.reply == EMPTY_REPLY


class TestReasoningFailures:

    @pytest.mark.asyncio
    async def test_exception_falls_back_to_empty_reply(self, session, bridge):
        reasoning = ScriptedReasoning(error=TimeoutError("model timed out"))
        result = await StrategyOrchestrator(session, reasoning).send_message(
            ChatRequest(symbol="AAPL", message="daily chart"))

        assert result.reply == EMPTY_REPLY
        assert result.actions == []
        assert bridge.performed == []

    @pytest.mark.asyncio
    async def test_wrong_response_type(self, session):
        async def reasoning(request):
            return {"text": "hi"}

        result = await StrategyOrchestrator(session, reasoning).send_message(
            ChatRequest(symbol="AAPL", message="hello"))
        assert result.reply == EMPTY_REPLY

    @pytest.mark.asyncio
    async def test_plain_mapping_tool_calls_are_accepted(self, session, bridge):
        reasoning = ScriptedReasoning(ReasoningResponse(tool_calls=[
            {"name": "set_timeframe", "arguments": '{"timeframe": "1D"}'},
        ]))
        result = await StrategyOrchestrator(session, reasoning).send_message(
            ChatRequest(symbol="AAPL", message="daily"))

        assert bridge.performed == [SetTimeframe("1D")]
        assert result.reply == "Timeframe set to 1D."

    @pytest.mark.asyncio
    async def test_function_wrapped_tool_calls_are_accepted(self, session, bridge):
        reasoning = ScriptedReasoning(ReasoningResponse(tool_calls=[
            {"id": "call_1", "type": "function",
             "function": {"name": "set_chart_type", "arguments": {"chartType": "line"}}},
        ]))
        await StrategyOrchestrator(session, reasoning).send_message(
            ChatRequest(symbol="AAPL", message="line chart"))

        assert [a.type for a in bridge.performed] == ["setChartType"]

    @pytest.mark.asyncio
    async def test_unusable_tool_call_entry_falls_back(self, session, bridge):
        reasoning = ScriptedReasoning(ReasoningResponse(tool_calls=["set_timeframe"]))
        result = await StrategyOrchestrator(session, reasoning).send_message(
            ChatRequest(symbol="AAPL", message="daily"))

        assert result.reply == EMPTY_REPLY
        assert result.actions == []
        assert bridge.performed == []
