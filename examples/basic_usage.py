#!/usr/bin/env python3
"""
Basic Usage Example - chartpilot

This script drives an in-memory chart through chartpilot. It shows how to:
- Register a chart bridge on a session
- Run a narrated chart sequence built from a layout preset
- Handle a chat turn with a scripted reasoning function
- Project a rule-based trade plan onto a complexity tier

Run: python examples/basic_usage.py
"""

import asyncio
import json

from chartpilot.chart.session import ChartSession
from chartpilot.logging.config import configure_logging
from chartpilot.orchestrator import ChatRequest, ReasoningResponse, StrategyOrchestrator, ToolCall
from chartpilot.plans import make_rule_based_analysis
from chartpilot.sequence import LayoutStep, RunSequenceOptions, expand_layout_steps, run_chart_sequence


class PrintingBridge:
    """Chart bridge that prints each action instead of drawing it."""

    async def perform(self, action) -> None:
        print(f"  chart <- {action.type}: {action}")


async def scripted_reasoning(request):
    """Stand-in for a language model: always asks for a daily chart, EMAs and a plan."""
    return ReasoningResponse(tool_calls=[
        ToolCall("set_timeframe", json.dumps({"timeframe": "1D"})),
        ToolCall("add_indicator", {"indicator": "EMA"}),
        ToolCall("run_analysis", {"strategy": "swing_trade"}),
    ])


async def sample_closes(symbol: str) -> list[float]:
    """Gently rising closes for any symbol."""
    return [100 + i * 0.4 + (i % 3) * 0.2 for i in range(60)]


async def main() -> None:
    configure_logging(level="WARNING")

    session = ChartSession()
    session.register_chart_bridge(PrintingBridge())
    session.overlay.on_overlay_message(
        lambda state: state.message and print(f"  overlay: {state.message}")
    )

    print("📈 Running a layout sequence")
    steps = expand_layout_steps([LayoutStep("day_ema_rsi_macd", screenshot_after=True)])
    result = await run_chart_sequence(session, steps, RunSequenceOptions(profile="day_trade"))
    print(f"  completed {result.steps_completed} steps, ok={result.ok}")

    print("\n💬 Handling a chat turn")
    orchestrator = StrategyOrchestrator(
        session,
        scripted_reasoning,
        analysis_fn=make_rule_based_analysis(sample_closes),
    )
    chat = await orchestrator.send_message(ChatRequest(
        symbol="AAPL",
        message="Show me the daily chart with EMAs and a swing plan",
        strategy="swing_trade",
        complexity="advanced",
    ))
    print(f"  reply: {chat.reply}")
    if chat.trade_plan is not None:
        print("  trade plan:")
        print(json.dumps(chat.trade_plan.to_dict(), indent=2))


if __name__ == "__main__":
    asyncio.run(main())
