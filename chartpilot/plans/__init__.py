"""
Trade plan models, normalization, complexity tiers and rule-based generators.
"""
from .complexity import (
    COMPLEXITY_CONFIGS,
    apply_complexity_constraints,
    estimate_atr,
    generate_trade_plan_by_complexity,
    get_complexity_description,
    get_complexity_features,
    validate_trade_plan,
)
from .generators import build_day_trade_plan, build_swing_trade_plan, make_rule_based_analysis
from .models import (
    PositionSizing,
    RiskTolerance,
    StrategyComplexity,
    StrategyContext,
    TradePlan,
    TradeSide,
)
from .normalizer import PlanNormalizationResult, PlanNormalizer

__all__ = [
    "COMPLEXITY_CONFIGS",
    "PlanNormalizationResult",
    "PlanNormalizer",
    "PositionSizing",
    "RiskTolerance",
    "StrategyComplexity",
    "StrategyContext",
    "TradePlan",
    "TradeSide",
    "apply_complexity_constraints",
    "build_day_trade_plan",
    "build_swing_trade_plan",
    "estimate_atr",
    "generate_trade_plan_by_complexity",
    "get_complexity_description",
    "get_complexity_features",
    "make_rule_based_analysis",
    "validate_trade_plan",
]
