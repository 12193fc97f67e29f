"""
Sequence step and run models.

A sequence is an ordered list of higher-level intents. Each step translates
into zero or more chart actions and may carry a narration message.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, ClassVar, Optional, Union

from ..indicators.normalizer import ProfileLike


@dataclass(frozen=True)
class TimeframeStep:
    kind: ClassVar[str] = "timeframe"
    timeframe: str
    message: Optional[str] = None


@dataclass(frozen=True)
class ChartTypeStep:
    kind: ClassVar[str] = "chartType"
    chart_type: str
    message: Optional[str] = None


@dataclass(frozen=True)
class IndicatorStep:
    """Add an indicator; options are normalized before dispatch."""
    kind: ClassVar[str] = "indicator"
    indicator: str
    options: Optional[dict[str, Any]] = None
    profile: ProfileLike = None
    message: Optional[str] = None


@dataclass(frozen=True)
class NavigateStep:
    kind: ClassVar[str] = "navigate"
    direction: str
    message: Optional[str] = None


@dataclass(frozen=True)
class ToggleOptionStep:
    kind: ClassVar[str] = "toggleOption"
    option: str
    enabled: bool
    message: Optional[str] = None


@dataclass(frozen=True)
class LineStep:
    """Drawing-tool placeholder; skipped by the engine."""
    kind: ClassVar[str] = "line"
    message: Optional[str] = None


@dataclass(frozen=True)
class LabelStep:
    """Label placeholder; skipped by the engine."""
    kind: ClassVar[str] = "label"
    message: Optional[str] = None


@dataclass(frozen=True)
class ScreenshotStep:
    kind: ClassVar[str] = "screenshot"
    message: Optional[str] = None


@dataclass(frozen=True)
class DelayStep:
    kind: ClassVar[str] = "delay"
    ms: float
    message: Optional[str] = None


@dataclass(frozen=True)
class LayoutStep:
    """Named layout preset; callers expand it with expand_layout_steps."""
    kind: ClassVar[str] = "layout"
    layout_id: str
    timeframe: Optional[str] = None
    profile: ProfileLike = None
    screenshot_after: bool = False
    message: Optional[str] = None


@dataclass(frozen=True)
class ActionStep:
    """Dispatch an already-built chart action as its own step."""
    kind: ClassVar[str] = "action"
    action: Any
    message: Optional[str] = None


SequenceStep = Union[
    TimeframeStep,
    ChartTypeStep,
    IndicatorStep,
    NavigateStep,
    ToggleOptionStep,
    LineStep,
    LabelStep,
    ScreenshotStep,
    DelayStep,
    LayoutStep,
    ActionStep,
]

_STEP_TYPES: dict[str, type] = {
    cls.kind: cls
    for cls in (TimeframeStep, ChartTypeStep, IndicatorStep, NavigateStep, ToggleOptionStep,
                LineStep, LabelStep, ScreenshotStep, DelayStep, LayoutStep)
}

# Wire-format keys that differ from attribute names
_WIRE_KEYS = {
    "chartType": "chart_type",
    "layoutId": "layout_id",
    "screenshotAfter": "screenshot_after",
}


def parse_step(data: dict[str, Any]) -> SequenceStep:
    """
    Build a step from its wire form, e.g. ``{"kind": "timeframe", "timeframe": "1D"}``.

    Raises:
        ValueError: If the kind is unknown or required fields are missing
    """
    kind = data.get("kind")
    step_type = _STEP_TYPES.get(kind)
    if step_type is None:
        raise ValueError(f"Unknown sequence step kind: {kind}")
    kwargs = {_WIRE_KEYS.get(k, k): v for k, v in data.items() if k != "kind"}
    try:
        return step_type(**kwargs)
    except TypeError as e:
        raise ValueError(f"Invalid {kind} step: {e}") from e


class SequenceState(str, Enum):
    """Lifecycle of a single sequence run."""
    RUNNING = "running"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


StepCallback = Callable[[int, SequenceStep], None]


@dataclass
class RunSequenceOptions:
    """Pacing, narration and gating options for one run."""
    profile: ProfileLike = None
    on_step: Optional[StepCallback] = None
    narrate: bool = True
    cancellable: bool = True
    per_step_delay_ms: Union[float, Callable[[int, SequenceStep], float], None] = None
    require_continue: Union[bool, Callable[[int, SequenceStep], bool], None] = None
    wait_for_bridge: bool = True


@dataclass
class SequenceResult:
    ok: bool
    screenshots: list[str] = field(default_factory=list)
    cancelled: bool = False
    steps_completed: int = 0
