"""
Chart action vocabulary shared by user-driven and agent-driven control.

Every instruction the chart view understands is one of the frozen dataclasses
below. Actions are plain values: they carry no behaviour and are executed by
whichever ChartBridge is registered on the active ChartSession.
"""

from dataclasses import dataclass
from typing import Any, ClassVar, Optional, Protocol, Union, runtime_checkable


@dataclass(frozen=True)
class SetTimeframe:
    """Switch the chart to another bar interval."""
    type: ClassVar[str] = "setTimeframe"
    timeframe: str


@dataclass(frozen=True)
class SetChartType:
    """Switch the series renderer (candles, line, area, ...)."""
    type: ClassVar[str] = "setChartType"
    chart_type: str


@dataclass(frozen=True)
class AddIndicator:
    """Add a technical indicator with (normalized) options."""
    type: ClassVar[str] = "addIndicator"
    indicator: str
    options: Optional[dict[str, Any]] = None


@dataclass(frozen=True)
class RemoveIndicator:
    type: ClassVar[str] = "removeIndicator"
    indicator: str


@dataclass(frozen=True)
class Navigate:
    """Pan the visible range."""
    type: ClassVar[str] = "navigate"
    direction: str


@dataclass(frozen=True)
class ToggleDisplayOption:
    type: ClassVar[str] = "toggleDisplayOption"
    option: str
    enabled: bool


@dataclass(frozen=True)
class CheckNews:
    type: ClassVar[str] = "checkNews"


@dataclass(frozen=True)
class RunAnalysis:
    """Request a trade-plan analysis, optionally for a named strategy."""
    type: ClassVar[str] = "runAnalysis"
    strategy: Optional[str] = None


@dataclass(frozen=True)
class SetIndicatorStack:
    """Replace the chart's whole indicator stack in one step."""
    type: ClassVar[str] = "setIndicatorStack"
    stack: tuple[dict[str, Any], ...] = ()


@dataclass(frozen=True)
class NoOp:
    """Placeholder for tool calls that map to nothing executable."""
    type: ClassVar[str] = "noop"
    reason: Optional[str] = None


Action = Union[
    SetTimeframe,
    SetChartType,
    AddIndicator,
    RemoveIndicator,
    Navigate,
    ToggleDisplayOption,
    CheckNews,
    RunAnalysis,
    SetIndicatorStack,
    NoOp,
]


@runtime_checkable
class ChartBridge(Protocol):
    """Executor that performs actions against the live chart surface."""

    async def perform(self, action: Action) -> None:
        ...


def _format_params(options: Optional[dict[str, Any]]) -> str:
    params = (options or {}).get("calcParams") or []
    if not params:
        return ""
    return "(" + ",".join(_format_number(p) for p in params) + ")"


def _format_number(value: Any) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def describe_action(action: Action) -> str:
    """Render one action as a short human-readable sentence."""
    if isinstance(action, SetTimeframe):
        return f"Timeframe set to {action.timeframe}."
    if isinstance(action, SetChartType):
        return f"Chart type set to {action.chart_type}."
    if isinstance(action, AddIndicator):
        return f"Added {action.indicator}{_format_params(action.options)}."
    if isinstance(action, RemoveIndicator):
        return f"Removed {action.indicator}."
    if isinstance(action, Navigate):
        return f"Panned chart {action.direction}."
    if isinstance(action, ToggleDisplayOption):
        state = "on" if action.enabled else "off"
        return f"Turned {action.option} {state}."
    if isinstance(action, CheckNews):
        return "Checked latest news."
    if isinstance(action, RunAnalysis):
        if action.strategy:
            return f"Ran {action.strategy} analysis."
        return "Ran analysis."
    if isinstance(action, SetIndicatorStack):
        names = ", ".join(item.get("indicator", "?") for item in action.stack)
        return f"Indicator stack set to {names or 'none'}."
    return ""


def summarize_actions(actions: list[Action]) -> str:
    """Join the descriptions of several actions into one reply string."""
    parts = [describe_action(a) for a in actions]
    return " ".join(p for p in parts if p)
