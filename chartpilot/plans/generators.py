"""
Rule-based trade plan generators.

Pure functions that turn recent closes into a raw plan proposal: day-trade
plans use tight distances off the average bar move, swing plans use wider
stops scaled by risk tolerance. Bias follows the sign of momentum. The output
is a proposal; callers project it onto a tier with apply_complexity_constraints.
"""

import math
from typing import Awaitable, Callable, Optional, Sequence

import structlog

from ..config.defaults import GeneratorParams
from .models import RiskTolerance, StrategyComplexity, StrategyContext, TradePlan, TradeSide

logger = structlog.get_logger(__name__)

DAY_TRADE = "day_trade"
SWING_TRADE = "swing_trade"


def average_abs_move(closes: Sequence[float], window: int) -> Optional[float]:
    """Mean absolute close-to-close move over the last ``window`` bars."""
    finite = [c for c in closes if math.isfinite(c)]
    if len(finite) < 2:
        return None
    n = max(1, min(window, len(finite) - 1))
    recent = finite[-(n + 1):]
    moves = [abs(cur - prev) for prev, cur in zip(recent, recent[1:])]
    return sum(moves) / len(moves)


def build_day_trade_plan(ctx: StrategyContext, params: Optional[GeneratorParams] = None) -> TradePlan:
    """
    Day-trade proposal: pullback entry and late entry, two take-profits, one stop.

    Distances are multiples of ``delta``, the larger of 1.1x the average bar
    move over the last 20 bars and the minimum separation.
    """
    params = params or GeneratorParams()
    price = ctx.current_price
    avg_move = average_abs_move(ctx.recent_closes, 20)
    if avg_move is None:
        avg_move = price * 0.004
    delta = max(avg_move * 1.1, price * params.day_min_separation_pct)

    if ctx.momentum_pct >= 0:
        return TradePlan(
            side=TradeSide.LONG,
            complexity=StrategyComplexity.ADVANCED,
            entries=(max(0.0, price - delta), max(0.0, price - delta * 1.6)),
            exits=(max(0.0, price - delta * 2.4),),
            targets=(price + delta * 1.8, price + delta * 2.2),
            strategy=DAY_TRADE,
        )
    return TradePlan(
        side=TradeSide.SHORT,
        complexity=StrategyComplexity.ADVANCED,
        entries=(price + delta, price + delta * 1.6),
        exits=(price + delta * 2.4,),
        targets=(max(0.0, price - delta * 1.8), max(0.0, price - delta * 2.2)),
        strategy=DAY_TRADE,
    )


def build_swing_trade_plan(ctx: StrategyContext, params: Optional[GeneratorParams] = None) -> TradePlan:
    """
    Swing proposal: wider stop scaled by risk tolerance and an extended stop
    beyond it; targets at 1R and the preferred risk/reward (default 2R).
    """
    params = params or GeneratorParams()
    price = ctx.current_price
    avg_move = average_abs_move(ctx.recent_closes, 50)
    if avg_move is None:
        avg_move = price * 0.006
    delta = max(avg_move * 1.6, price * params.swing_min_separation_pct)

    tolerance = RiskTolerance(ctx.risk_tolerance or RiskTolerance.MODERATE).value
    stop_mult = params.swing_stop_multipliers.get(tolerance, 2.8)
    rr = ctx.preferred_risk_reward if ctx.preferred_risk_reward and ctx.preferred_risk_reward > 0 else 2.0
    stop_distance = delta * stop_mult

    if ctx.momentum_pct >= 0:
        primary = max(0.0, price - delta)
        stop = max(0.0, primary - stop_distance)
        return TradePlan(
            side=TradeSide.LONG,
            complexity=StrategyComplexity.ADVANCED,
            entries=(primary, max(0.0, price - delta * 1.8)),
            exits=(stop, max(0.0, stop - stop_distance * 0.3)),
            targets=(primary + stop_distance, primary + stop_distance * rr),
            risk_reward=rr,
            strategy=SWING_TRADE,
        )
    primary = price + delta
    stop = primary + stop_distance
    return TradePlan(
        side=TradeSide.SHORT,
        complexity=StrategyComplexity.ADVANCED,
        entries=(primary, price + delta * 1.8),
        exits=(stop, stop + stop_distance * 0.3),
        targets=(max(0.0, primary - stop_distance), max(0.0, primary - stop_distance * rr)),
        risk_reward=rr,
        strategy=SWING_TRADE,
    )


ClosesProvider = Callable[[str], Awaitable[Sequence[float]]]


def make_rule_based_analysis(closes_provider: ClosesProvider,
                             params: Optional[GeneratorParams] = None):
    """
    Build an analysis function backed by the rule-based generators.

    The returned coroutine function takes an AnalysisRequest, fetches closes
    for its symbol and dispatches on the request's strategy (swing_trade, else
    day_trade). Momentum is the percentage change across the fetched closes.
    """
    async def analyze(request) -> Optional[TradePlan]:
        closes = tuple(await closes_provider(request.symbol))
        if not closes:
            logger.warning("No closes available for analysis", symbol=request.symbol)
            return None
        first, last = closes[0], closes[-1]
        momentum = (last - first) / first * 100 if first else 0.0
        ctx = StrategyContext(current_price=last, recent_closes=closes, momentum_pct=momentum)
        if request.strategy == SWING_TRADE:
            return build_swing_trade_plan(ctx, params)
        return build_day_trade_plan(ctx, params)

    return analyze
