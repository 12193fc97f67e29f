"""
Plan data normalization for converting raw plan proposals to TradePlan.

Model output and rule-based generators describe plans in two shapes: the array
form (``entries``/``exits``/``targets`` or ``tps``) and the scalar form
(``entry``, ``lateEntry``, ``stop``, ``exit``, ``lateExit``). This module
accepts either, coerces numeric strings and reports invalid plans as error
results rather than exceptions.
"""

import math
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Optional

import structlog

from .models import StrategyComplexity, TradePlan, TradeSide

logger = structlog.get_logger(__name__)


@dataclass
class PlanNormalizationResult:
    """Result of plan normalization process."""
    # Normalized plan (None if invalid)
    normalized_plan: Optional[TradePlan] = None
    # Processing metadata
    success: bool = True
    error_msg: Optional[str] = None

    @classmethod
    def success_with_plan(cls, normalized_plan: TradePlan):
        """Create successful result with normalized plan."""
        return cls(
            normalized_plan=normalized_plan,
            success=True
        )

    @classmethod
    def error(cls, error_msg: str):
        """Create error result."""
        return cls(
            success=False,
            error_msg=error_msg
        )


def _to_level(value: Any, field_name: str) -> float:
    if isinstance(value, bool):
        raise ValueError(f"Invalid {field_name}: {value!r}")
    level = float(value)
    if not math.isfinite(level):
        raise ValueError(f"Invalid {field_name}: {value!r}")
    return level


def _optional_level(value: Any, field_name: str) -> Optional[float]:
    if value is None:
        return None
    try:
        return _to_level(value, field_name)
    except (TypeError, ValueError):
        logger.debug("Dropping unusable price level", field=field_name, value=repr(value))
        return None


def _levels(values: Any, field_name: str) -> tuple[float, ...]:
    if values is None:
        return ()
    if not isinstance(values, (list, tuple)):
        values = [values]
    levels = (_optional_level(v, field_name) for v in values)
    return tuple(level for level in levels if level is not None)


def _first_present(data: Mapping, *keys: str) -> Any:
    for key in keys:
        if data.get(key) is not None:
            return data[key]
    return None


class PlanNormalizer:
    """
    Plan proposal normalization pipeline.

    Handles field-name aliases, scalar-to-array conversion and numeric coercion
    for trade plans proposed by model output or the rule-based generators.
    """

    def __init__(self, default_complexity: StrategyComplexity = StrategyComplexity.SIMPLE):
        """
        Initialize plan normalizer.

        Args:
            default_complexity: Tier assigned when the proposal names none
        """
        self.default_complexity = default_complexity

    def normalize_plan(self, plan_data: Mapping[str, Any]) -> PlanNormalizationResult:
        """
        Normalize a raw trade plan proposal.

        Args:
            plan_data: Raw plan mapping in array or scalar form

        Returns:
            PlanNormalizationResult with a TradePlan or error information
        """
        if not isinstance(plan_data, Mapping):
            return PlanNormalizationResult.error(f"Plan must be a mapping, got {type(plan_data).__name__}")

        # Validate side
        raw_side = _first_present(plan_data, "side", "direction")
        try:
            side = TradeSide(str(raw_side).strip().lower())
        except ValueError:
            return PlanNormalizationResult.error(f"Invalid side: {raw_side}")

        # Validate complexity
        raw_complexity = plan_data.get("complexity")
        if raw_complexity is None:
            complexity = self.default_complexity
        else:
            try:
                complexity = StrategyComplexity(str(raw_complexity).strip().lower())
            except ValueError:
                return PlanNormalizationResult.error(f"Invalid complexity: {raw_complexity}")

        # Unusable levels are dropped; later stages derive what is missing
        if plan_data.get("entries") is not None:
            entries = _levels(plan_data["entries"], "entries")
        else:
            entries = _levels([plan_data.get("entry"), plan_data.get("lateEntry")], "entry")

        if plan_data.get("exits") is not None:
            exits = _levels(plan_data["exits"], "exits")
        else:
            exits = _levels(plan_data.get("stop"), "stop")

        raw_targets = _first_present(plan_data, "targets", "tps")
        if raw_targets is not None:
            targets = _levels(raw_targets, "targets")
        else:
            # Scalar form: exit/lateExit are take-profit levels
            targets = _levels([plan_data.get("exit"), plan_data.get("lateExit")], "exit")

        risk_reward = _optional_level(_first_present(plan_data, "riskReward", "risk_reward"), "riskReward")

        notes = plan_data.get("notes") or ()
        if isinstance(notes, str):
            notes = (notes,)

        plan = TradePlan(
            side=side,
            complexity=complexity,
            entries=entries,
            exits=exits,
            targets=targets,
            risk_reward=risk_reward,
            strategy=plan_data.get("strategy"),
            notes=tuple(str(n) for n in notes),
        )
        logger.debug("Plan normalized", side=side.value, complexity=complexity.value,
                     entries=len(entries), exits=len(exits), targets=len(targets))
        return PlanNormalizationResult.success_with_plan(plan)
