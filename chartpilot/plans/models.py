"""
Trade plan data models.

Plans are immutable: level arrays are tuples, and every transformation by the
complexity engine returns a new plan.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional


class TradeSide(str, Enum):
    LONG = "long"
    SHORT = "short"


class StrategyComplexity(str, Enum):
    """Strategy complexity tiers, from fewest to most price levels."""
    SIMPLE = "simple"
    PARTIAL = "partial"
    ADVANCED = "advanced"


class RiskTolerance(str, Enum):
    CONSERVATIVE = "conservative"
    MODERATE = "moderate"
    AGGRESSIVE = "aggressive"


@dataclass(frozen=True)
class PositionSizing:
    """Percent allocation per level; each allocation tuple sums to 100."""
    total_size: float = 100
    entry_allocations: tuple[float, ...] = ()
    exit_allocations: tuple[float, ...] = ()
    target_allocations: tuple[float, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "totalSize": self.total_size,
            "entryAllocations": list(self.entry_allocations),
            "exitAllocations": list(self.exit_allocations),
            "targetAllocations": list(self.target_allocations),
        }


@dataclass(frozen=True)
class TradePlan:
    """Entry, stop and take-profit levels for one trade idea."""
    side: TradeSide
    complexity: StrategyComplexity = StrategyComplexity.SIMPLE
    entries: tuple[float, ...] = ()       # Primary first, then secondary
    exits: tuple[float, ...] = ()         # Stops: primary first, then extended
    targets: tuple[float, ...] = ()       # Take-profit levels, nearest first
    risk_reward: Optional[float] = None
    position_sizing: Optional[PositionSizing] = None
    strategy: Optional[str] = None
    notes: tuple[str, ...] = ()

    @property
    def is_long(self) -> bool:
        return self.side == TradeSide.LONG

    @property
    def primary_entry(self) -> Optional[float]:
        return self.entries[0] if self.entries else None

    @property
    def primary_stop(self) -> Optional[float]:
        return self.exits[0] if self.exits else None

    def to_dict(self) -> dict[str, Any]:
        """Wire form consumed by chart overlays."""
        data: dict[str, Any] = {
            "side": self.side.value,
            "complexity": self.complexity.value,
            "entries": list(self.entries),
            "exits": list(self.exits),
            "targets": list(self.targets),
        }
        if self.risk_reward is not None:
            data["riskReward"] = self.risk_reward
        if self.position_sizing is not None:
            data["positionSizing"] = self.position_sizing.to_dict()
        if self.strategy:
            data["strategy"] = self.strategy
        if self.notes:
            data["notes"] = list(self.notes)
        return data


@dataclass(frozen=True)
class StrategyContext:
    """Market context the rule-based plan generators work from."""
    current_price: float
    recent_closes: tuple[float, ...] = field(default_factory=tuple)
    momentum_pct: float = 0.0
    preferred_risk_reward: Optional[float] = None
    risk_tolerance: Optional[RiskTolerance] = None
