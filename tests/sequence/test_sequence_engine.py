"""Tests for the chart sequence engine."""

import asyncio

import pytest

from chartpilot.chart.actions import AddIndicator, Navigate, SetChartType, SetTimeframe
from chartpilot.sequence import (
    ActionStep,
    ChartTypeStep,
    DelayStep,
    IndicatorStep,
    LabelStep,
    LayoutStep,
    LineStep,
    NavigateStep,
    RunSequenceOptions,
    ScreenshotStep,
    TimeframeStep,
    ToggleOptionStep,
    expand_layout_steps,
    parse_step,
    run_chart_sequence,
)

from conftest import FailingBridge


async def _wait_until(predicate, timeout: float = 1.0) -> None:
    deadline = asyncio.get_running_loop().time() + timeout
    while not predicate():
        if asyncio.get_running_loop().time() > deadline:
            raise AssertionError("condition not reached")
        await asyncio.sleep(0.001)


class TestSequenceExecution:
    """Test step translation and ordered execution."""

    @pytest.mark.asyncio
    async def test_runs_all_steps_in_order(self, session, bridge):
        steps = [
            TimeframeStep("1D"),
            ChartTypeStep("line"),
            NavigateStep("left"),
            ToggleOptionStep("showGrid", False),
        ]

        result = await run_chart_sequence(session, steps, RunSequenceOptions(narrate=False))

        assert result.ok is True
        assert result.cancelled is False
        assert result.steps_completed == 4
        assert [a.type for a in bridge.performed] == [
            "setTimeframe", "setChartType", "navigate", "toggleDisplayOption",
        ]

    @pytest.mark.asyncio
    async def test_indicator_step_uses_run_profile(self, session, bridge):
        await run_chart_sequence(session, [IndicatorStep("rsi")], RunSequenceOptions(profile="day_trade"))

        action = bridge.performed[0]
        assert isinstance(action, AddIndicator)
        assert action.indicator == "RSI"
        assert action.options["calcParams"] == [14]
        assert len(action.options["styles"]["lines"]) == 1

    @pytest.mark.asyncio
    async def test_step_profile_overrides_run_profile(self, session, bridge):
        await run_chart_sequence(
            session,
            [IndicatorStep("EMA", profile="swing_trade")],
            RunSequenceOptions(profile="day_trade"),
        )
        assert bridge.performed[0].options["calcParams"] == [20, 50, 200]

    @pytest.mark.asyncio
    async def test_screenshot_steps_collect_images(self, session, bridge):
        result = await run_chart_sequence(
            session, [ScreenshotStep(), TimeframeStep("5m"), ScreenshotStep()]
        )
        assert result.screenshots == ["screenshot-1", "screenshot-2"]
        assert bridge.performed == [SetTimeframe("5m")]

    @pytest.mark.asyncio
    async def test_placeholder_steps_are_skipped(self, session, bridge):
        steps = [LineStep(), LabelStep(), LayoutStep("day_ema_rsi_macd"), DelayStep(ms=1)]
        result = await run_chart_sequence(session, steps)
        assert result.ok is True
        assert result.steps_completed == 4
        assert bridge.performed == []

    @pytest.mark.asyncio
    async def test_action_step_dispatches_prebuilt_action(self, session, bridge):
        await run_chart_sequence(session, [ActionStep(SetChartType("area"), message="Area chart")])
        assert bridge.performed == [SetChartType("area")]

    @pytest.mark.asyncio
    async def test_failing_action_does_not_abort_run(self, empty_session):
        failing = FailingBridge(failing_types=("setChartType",))
        empty_session.register_chart_bridge(failing)

        result = await run_chart_sequence(empty_session, [ChartTypeStep("line"), TimeframeStep("1h")])

        assert result.ok is True
        assert failing.performed == [SetTimeframe("1h")]

    @pytest.mark.asyncio
    async def test_empty_sequence(self, session):
        result = await run_chart_sequence(session, [])
        assert result.ok is True
        assert result.screenshots == []


class TestNarrationAndPacing:

    @pytest.mark.asyncio
    async def test_messages_shown_then_hidden(self, session):
        seen = []
        session.overlay.on_overlay_message(lambda state: seen.append(state.message))

        await run_chart_sequence(session, [TimeframeStep("1D", message="Daily view"), NavigateStep("left")])

        assert seen == ["Daily view", None]
        assert session.overlay.state.message is None

    @pytest.mark.asyncio
    async def test_no_narration(self, session):
        seen = []
        session.overlay.on_overlay_message(lambda state: seen.append(state.message))
        await run_chart_sequence(session, [TimeframeStep("1D", message="Daily view")],
                                 RunSequenceOptions(narrate=False))
        assert seen == []

    @pytest.mark.asyncio
    async def test_step_dependent_delay(self, session):
        calls = []

        def delay(index, step):
            calls.append((index, step.kind))
            return 0

        await run_chart_sequence(session, [TimeframeStep("1D"), NavigateStep("right")],
                                 RunSequenceOptions(per_step_delay_ms=delay))
        assert calls == [(0, "timeframe"), (1, "navigate")]

    @pytest.mark.asyncio
    async def test_observer_exception_does_not_alter_flow(self, session, bridge):
        def observer(index, step):
            raise ValueError("observer bug")

        result = await run_chart_sequence(session, [TimeframeStep("1D")], RunSequenceOptions(on_step=observer))
        assert result.ok is True
        assert bridge.performed == [SetTimeframe("1D")]


class TestCancellation:

    @pytest.mark.asyncio
    async def test_cancel_during_second_step(self, session, bridge):
        def observer(index, step):
            if index == 1:
                session.overlay.request_cancel_overlay_flow()

        steps = [TimeframeStep("1D"), IndicatorStep("RSI"), NavigateStep("left")]
        result = await run_chart_sequence(session, steps, RunSequenceOptions(on_step=observer))

        assert result.cancelled is True
        assert result.ok is False
        assert result.steps_completed == 1
        assert bridge.performed == [SetTimeframe("1D")]

    @pytest.mark.asyncio
    async def test_cancel_during_pacing_delay(self, session, bridge):
        task = asyncio.create_task(run_chart_sequence(
            session, [TimeframeStep("1D"), NavigateStep("left")],
            RunSequenceOptions(per_step_delay_ms=50),
        ))
        await asyncio.sleep(0.01)
        session.overlay.request_cancel_overlay_flow()
        result = await task

        assert result.cancelled is True
        assert bridge.performed == []

    @pytest.mark.asyncio
    async def test_not_cancellable_ignores_requests(self, session, bridge):
        def observer(index, step):
            session.overlay.request_cancel_overlay_flow()

        result = await run_chart_sequence(
            session, [TimeframeStep("1D"), NavigateStep("left")],
            RunSequenceOptions(on_step=observer, cancellable=False),
        )
        assert result.ok is True
        assert len(bridge.performed) == 2

    @pytest.mark.asyncio
    async def test_listeners_removed_after_run(self, session):
        def observer(index, step):
            session.overlay.request_cancel_overlay_flow()

        await run_chart_sequence(session, [TimeframeStep("1D")], RunSequenceOptions(on_step=observer))
        await run_chart_sequence(session, [TimeframeStep("1D")])

        counts = session.overlay.listener_counts()
        assert counts["cancel"] == 0
        assert counts["continue"] == 0


class TestContinueGate:

    @pytest.mark.asyncio
    async def test_waits_for_each_continue(self, session, bridge):
        overlay = session.overlay
        task = asyncio.create_task(run_chart_sequence(
            session,
            [TimeframeStep("1D", message="Step one"), NavigateStep("left", message="Step two")],
            RunSequenceOptions(require_continue=True),
        ))

        await _wait_until(lambda: overlay.state.waiting)
        assert overlay.state.message == "Step one"
        assert bridge.performed == []

        overlay.request_continue_overlay_flow()
        await _wait_until(lambda: overlay.state.waiting and overlay.state.message == "Step two")
        assert bridge.performed == [SetTimeframe("1D")]

        overlay.request_continue_overlay_flow()
        result = await task

        assert result.ok is True
        assert bridge.performed == [SetTimeframe("1D"), Navigate("left")]
        assert overlay.state.message is None

    @pytest.mark.asyncio
    async def test_gate_as_function_of_step(self, session, bridge):
        overlay = session.overlay
        task = asyncio.create_task(run_chart_sequence(
            session,
            [TimeframeStep("1D"), NavigateStep("left")],
            RunSequenceOptions(require_continue=lambda index, step: index == 1, narrate=False),
        ))

        await _wait_until(lambda: bridge.performed == [SetTimeframe("1D")])
        await asyncio.sleep(0.01)
        assert len(bridge.performed) == 1

        overlay.request_continue_overlay_flow()
        result = await task
        assert result.ok is True
        assert len(bridge.performed) == 2

    @pytest.mark.asyncio
    async def test_cancel_releases_waiter(self, session, bridge):
        overlay = session.overlay
        task = asyncio.create_task(run_chart_sequence(
            session, [TimeframeStep("1D", message="Ready?")], RunSequenceOptions(require_continue=True),
        ))

        await _wait_until(lambda: overlay.state.waiting)
        overlay.request_cancel_overlay_flow()
        result = await asyncio.wait_for(task, timeout=1.0)

        assert result.cancelled is True
        assert bridge.performed == []
        assert overlay.listener_counts()["continue"] == 0


class TestBridgeReadiness:

    @pytest.mark.asyncio
    async def test_waits_for_late_bridge(self, empty_session, bridge):
        asyncio.get_running_loop().call_later(0.01, empty_session.register_chart_bridge, bridge)

        result = await run_chart_sequence(empty_session, [TimeframeStep("1D")])

        assert result.ok is True
        assert bridge.performed == [SetTimeframe("1D")]

    @pytest.mark.asyncio
    async def test_proceeds_after_timeout(self, empty_session):
        result = await run_chart_sequence(empty_session, [TimeframeStep("1D")])
        assert result.ok is True
        assert result.steps_completed == 1


class TestLayoutExpansion:

    def test_layout_expands_to_normalized_steps(self):
        steps = expand_layout_steps([
            LayoutStep("day_ema_rsi_macd", screenshot_after=True, message="Momentum layout"),
            NavigateStep("left"),
        ])

        assert [s.kind for s in steps] == [
            "timeframe", "indicator", "indicator", "indicator", "screenshot", "navigate",
        ]
        assert steps[0] == TimeframeStep("1m", message="Momentum layout")
        assert [s.indicator for s in steps[1:4]] == ["EMA", "RSI", "MACD"]
        assert steps[1].options["calcParams"] == [9, 21, 50]
        assert len(steps[3].options["styles"]["lines"]) == 3

    def test_layout_timeframe_override(self):
        steps = expand_layout_steps([LayoutStep("swing_sma_rsi_macd", timeframe="1W")])
        assert steps[0].timeframe == "1W"
        assert steps[0].message == "Applying SMA(50,200) + RSI(14) + MACD"

    def test_unknown_layout_dropped(self):
        assert expand_layout_steps([LayoutStep("nope"), TimeframeStep("1D")]) == [TimeframeStep("1D")]


class TestParseStep:

    def test_wire_keys(self):
        assert parse_step({"kind": "chartType", "chartType": "line"}) == ChartTypeStep("line")
        assert parse_step({"kind": "timeframe", "timeframe": "1D", "message": "Daily"}) == \
            TimeframeStep("1D", message="Daily")
        step = parse_step({"kind": "layout", "layoutId": "day_boll_rsi_macd", "screenshotAfter": True})
        assert step == LayoutStep("day_boll_rsi_macd", screenshot_after=True)

    def test_unknown_kind(self):
        with pytest.raises(ValueError, match="Unknown sequence step kind"):
            parse_step({"kind": "teleport"})

    def test_missing_fields(self):
        with pytest.raises(ValueError, match="Invalid timeframe step"):
            parse_step({"kind": "timeframe"})
