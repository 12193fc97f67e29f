"""
Chart sequence engine: paced, narrated, cancellable chart-control runs.
"""
from .engine import expand_layout_steps, run_chart_sequence
from .models import (
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
    SequenceResult,
    SequenceState,
    SequenceStep,
    TimeframeStep,
    ToggleOptionStep,
    parse_step,
)

__all__ = [
    "ActionStep",
    "ChartTypeStep",
    "DelayStep",
    "IndicatorStep",
    "LabelStep",
    "LayoutStep",
    "LineStep",
    "NavigateStep",
    "RunSequenceOptions",
    "ScreenshotStep",
    "SequenceResult",
    "SequenceState",
    "SequenceStep",
    "TimeframeStep",
    "ToggleOptionStep",
    "expand_layout_steps",
    "parse_step",
    "run_chart_sequence",
]
