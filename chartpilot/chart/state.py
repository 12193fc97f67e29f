"""
Chart state snapshot readable without owning the chart view.
"""

import copy
from dataclasses import dataclass, field
from typing import Any, Optional


@dataclass
class IndicatorStackItem:
    """One indicator on the chart with its options."""
    indicator: str
    options: Optional[dict[str, Any]] = None


@dataclass
class ChartStateSnapshot:
    """Current timeframe, chart type and indicator stack of the chart view."""

    timeframe: Optional[str] = None
    chart_type: Optional[str] = None
    indicators: list[IndicatorStackItem] = field(default_factory=list)

    def merge(
        self,
        timeframe: Optional[str] = None,
        chart_type: Optional[str] = None,
        indicators: Optional[list[IndicatorStackItem]] = None,
    ) -> None:
        """
        Merge a partial update into the snapshot.

        Scalars are replaced when supplied. The indicator list is replaced
        wholesale when supplied and left untouched otherwise.
        """
        if timeframe is not None:
            self.timeframe = timeframe
        if chart_type is not None:
            self.chart_type = chart_type
        if indicators is not None:
            self.indicators = [
                item if isinstance(item, IndicatorStackItem) else IndicatorStackItem(**item)
                for item in copy.deepcopy(indicators)
            ]

    def copy(self) -> "ChartStateSnapshot":
        """Deep copy so callers cannot mutate the shared snapshot."""
        return copy.deepcopy(self)
