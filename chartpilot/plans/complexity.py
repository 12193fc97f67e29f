"""
Trade-plan complexity engine.

Projects a trade plan onto a complexity tier: level counts are bounded by the
tier, missing levels are derived from the primary entry and stop, and position
sizing is rebuilt from the tier's default allocation split. Applying the same
tier twice returns an equal plan.
"""

import math
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Optional, Union

import structlog

from ..config.defaults import ComplexityParams, GeneratorParams
from .models import (
    PositionSizing,
    RiskTolerance,
    StrategyComplexity,
    StrategyContext,
    TradePlan,
    TradeSide,
)
from .normalizer import PlanNormalizer

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class ComplexityFeatures:
    multiple_entries: bool
    multiple_exits: bool                # Primary plus extended stop
    multiple_targets: bool
    max_targets: int


@dataclass(frozen=True)
class ComplexityConfig:
    """Level limits and default allocation split for one tier."""
    level: StrategyComplexity
    description: str
    features: ComplexityFeatures
    max_entries: int
    max_exits: int
    entry_allocations: tuple[float, ...]
    exit_allocations: tuple[float, ...]
    target_allocations: tuple[float, ...]


COMPLEXITY_CONFIGS: dict[StrategyComplexity, ComplexityConfig] = {
    StrategyComplexity.SIMPLE: ComplexityConfig(
        level=StrategyComplexity.SIMPLE,
        description="Single entry, single exit, single take profit",
        features=ComplexityFeatures(False, False, False, 1),
        max_entries=1,
        max_exits=1,
        entry_allocations=(100,),
        exit_allocations=(100,),
        target_allocations=(100,),
    ),
    StrategyComplexity.PARTIAL: ComplexityConfig(
        level=StrategyComplexity.PARTIAL,
        description="Entry + stop loss with 2 take profit targets",
        features=ComplexityFeatures(False, False, True, 2),
        max_entries=1,
        max_exits=1,
        entry_allocations=(100,),
        exit_allocations=(100,),
        target_allocations=(50, 50),
    ),
    StrategyComplexity.ADVANCED: ComplexityConfig(
        level=StrategyComplexity.ADVANCED,
        description="Multiple entries, stop losses, and up to 3 take profit targets",
        features=ComplexityFeatures(True, True, True, 3),
        max_entries=2,
        max_exits=2,
        entry_allocations=(70, 30),
        exit_allocations=(70, 30),
        target_allocations=(40, 35, 25),
    ),
}

PlanLike = Union[TradePlan, Mapping[str, Any]]


def _resolve_tier(tier: Union[StrategyComplexity, str]) -> StrategyComplexity:
    if isinstance(tier, StrategyComplexity):
        return tier
    return StrategyComplexity(str(tier).strip().lower())


def get_complexity_description(tier: Union[StrategyComplexity, str]) -> str:
    return COMPLEXITY_CONFIGS[_resolve_tier(tier)].description


def get_complexity_features(tier: Union[StrategyComplexity, str]) -> ComplexityFeatures:
    return COMPLEXITY_CONFIGS[_resolve_tier(tier)].features


def _allocations(defaults: tuple[float, ...], count: int) -> tuple[float, ...]:
    """Tier defaults truncated to ``count`` and rescaled to sum to 100."""
    if count <= 0:
        return ()
    truncated = defaults[:count]
    scale = 100.0 / sum(truncated)
    head = [round(v * scale, 2) for v in truncated[:-1]]
    return tuple(head + [round(100.0 - sum(head), 2)])


def _fix_stop_sides(entry: float, stops: list[float], is_long: bool) -> list[float]:
    fixed = []
    for stop in stops:
        if stop == entry:
            logger.debug("Dropping stop equal to entry", entry=entry)
            continue
        wrong_side = stop > entry if is_long else stop < entry
        if wrong_side:
            mirrored = 2 * entry - stop
            logger.debug("Mirroring stop onto the protective side", stop=stop, mirrored=mirrored)
            stop = mirrored
        fixed.append(stop)
    return fixed


def _coerce_plan(plan: PlanLike) -> TradePlan:
    if isinstance(plan, TradePlan):
        return plan
    result = PlanNormalizer().normalize_plan(plan)
    if not result.success:
        raise ValueError(result.error_msg)
    return result.normalized_plan


def apply_complexity_constraints(
    plan: PlanLike,
    tier: Union[StrategyComplexity, str],
    params: Optional[ComplexityParams] = None,
) -> TradePlan:
    """
    Project a plan onto a complexity tier.

    Args:
        plan: TradePlan or raw plan mapping
        tier: Target complexity tier
        params: Derivation multipliers (defaults to ComplexityParams())

    Returns:
        New TradePlan satisfying the tier's level limits and allocation sums

    Raises:
        ValueError: If a raw mapping cannot be normalized into a plan
            (invalid side or complexity). Incoherent levels never raise.
    """
    params = params or ComplexityParams()
    base = _coerce_plan(plan)
    tier = _resolve_tier(tier)
    config = COMPLEXITY_CONFIGS[tier]
    is_long = base.is_long
    sign = 1.0 if is_long else -1.0

    entries = [e for e in base.entries if math.isfinite(e)]
    stops = [s for s in base.exits if math.isfinite(s)]
    targets = [t for t in base.targets if math.isfinite(t)]

    entry = entries[0] if entries else None
    risk = None
    if entry is not None:
        stops = _fix_stop_sides(entry, stops, is_long)
        if not stops and entry > 0:
            stops = [entry - sign * entry * params.fallback_risk_pct]
        if stops:
            risk = abs(entry - stops[0])

    if tier == StrategyComplexity.ADVANCED and entry is not None and risk:
        if len(entries) == 1:
            secondary = entry + sign * risk * params.secondary_entry_risk_fraction
            if secondary == entry:
                # Offset below float resolution at this price
                secondary = math.nextafter(entry, sign * math.inf)
            # Secondary entry sits beyond the primary, away from the stop
            assert (secondary > entry) if is_long else (secondary < entry), "inverted secondary entry"
            entries.append(secondary)
        if len(stops) == 1:
            stops.append(entry - sign * risk * params.extended_stop_multiplier)

    entries = entries[:config.max_entries]
    stops = stops[:config.max_exits]

    if not targets and entry is not None and risk:
        r_multiples = {
            StrategyComplexity.SIMPLE: params.simple_target_r,
            StrategyComplexity.PARTIAL: params.partial_target_r,
            StrategyComplexity.ADVANCED: params.advanced_target_r,
        }[tier]
        targets = [entry + sign * risk * r for r in r_multiples]
    targets = targets[:config.features.max_targets]

    risk_reward = base.risk_reward
    if risk_reward is None and risk and targets:
        risk_reward = round(abs(targets[-1] - entry) / risk, 2)

    sizing = PositionSizing(
        total_size=100,
        entry_allocations=_allocations(config.entry_allocations, len(entries)),
        exit_allocations=_allocations(config.exit_allocations, len(stops)),
        target_allocations=_allocations(config.target_allocations, len(targets)),
    )

    return TradePlan(
        side=base.side,
        complexity=tier,
        entries=tuple(entries),
        exits=tuple(stops),
        targets=tuple(targets),
        risk_reward=risk_reward,
        position_sizing=sizing,
        strategy=base.strategy,
        notes=base.notes,
    )


def validate_trade_plan(plan: TradePlan) -> list[str]:
    """
    Check a plan against its tier's limits and level geometry.

    Returns:
        List of human-readable problems; empty when the plan is coherent
    """
    config = COMPLEXITY_CONFIGS[plan.complexity]
    errors: list[str] = []

    if not plan.entries:
        errors.append("Plan has no entry")
    if len(plan.entries) > config.max_entries:
        errors.append(f"{plan.complexity.value} plans allow at most {config.max_entries} entries")
    if len(plan.exits) > config.max_exits:
        errors.append(f"{plan.complexity.value} plans allow at most {config.max_exits} stops")
    if len(plan.targets) > config.features.max_targets:
        errors.append(f"{plan.complexity.value} plans allow at most {config.features.max_targets} targets")

    entry = plan.primary_entry
    if entry is not None:
        for stop in plan.exits:
            if (stop >= entry) if plan.is_long else (stop <= entry):
                errors.append(f"Stop {stop} is not on the protective side of entry {entry}")
        for target in plan.targets:
            if (target <= entry) if plan.is_long else (target >= entry):
                errors.append(f"Target {target} is not on the profit side of entry {entry}")

    sizing = plan.position_sizing
    if sizing is not None:
        for name, allocations, levels in (
            ("entry", sizing.entry_allocations, plan.entries),
            ("exit", sizing.exit_allocations, plan.exits),
            ("target", sizing.target_allocations, plan.targets),
        ):
            if len(allocations) != len(levels):
                errors.append(f"{name} allocations do not match {name} levels")
            elif allocations and not math.isclose(sum(allocations), 100.0, abs_tol=1e-6):
                errors.append(f"{name} allocations sum to {sum(allocations)}, expected 100")

    return errors


def estimate_atr(closes: tuple[float, ...], base_price: float,
                 params: Optional[GeneratorParams] = None) -> float:
    """Mean absolute close-to-close move, or a percentage of price on short history."""
    params = params or GeneratorParams()
    if len(closes) < max(2, params.atr_period):
        reference = closes[-1] if closes else base_price
        return reference * params.atr_fallback_pct
    window = closes[-params.atr_period:]
    moves = [abs(cur - prev) for prev, cur in zip(window, window[1:])]
    return sum(moves) / len(moves)


def generate_trade_plan_by_complexity(
    base_price: float,
    side: Union[TradeSide, str],
    tier: Union[StrategyComplexity, str],
    context: StrategyContext,
    params: Optional[GeneratorParams] = None,
    complexity_params: Optional[ComplexityParams] = None,
) -> TradePlan:
    """
    Build a tier-shaped plan around ``base_price`` from an ATR proxy.

    The stop sits one ATR times the risk-tolerance multiplier away; advanced
    plans add a secondary entry a fraction of an ATR beyond the base price.
    """
    params = params or GeneratorParams()
    side = TradeSide(side)
    tier = _resolve_tier(tier)
    sign = 1.0 if side == TradeSide.LONG else -1.0

    atr = estimate_atr(tuple(context.recent_closes), base_price, params)
    tolerance = context.risk_tolerance or RiskTolerance.MODERATE
    multiplier = params.risk_multipliers.get(RiskTolerance(tolerance).value, 1.5)
    stop_distance = atr * multiplier

    entries = [base_price]
    if tier == StrategyComplexity.ADVANCED:
        entries.append(base_price + sign * atr * params.entry_spacing_atr)

    plan = TradePlan(
        side=side,
        complexity=tier,
        entries=tuple(entries),
        exits=(base_price - sign * stop_distance,),
    )
    logger.debug("Generated plan by complexity", tier=tier.value, side=side.value,
                 atr=atr, stop_distance=stop_distance)
    return apply_complexity_constraints(plan, tier, complexity_params)
