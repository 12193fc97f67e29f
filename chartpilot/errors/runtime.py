"""
Runtime failure classifications for chart control.

These exceptions describe failures of collaborators the engine does not own:
the chart view behind the bridge and the external reasoning and analysis functions.
"""

from typing import TYPE_CHECKING, Optional, Dict, Any

if TYPE_CHECKING:
    from ..chart.actions import Action


class ChartControlError(Exception):
    """Base class for collaborator failures during chart control."""

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.context = context or {}
        self.recoverable = False


class ChartActionError(ChartControlError):
    """A single chart action failed inside the bridge."""

    def __init__(self, message: str, action: Optional["Action"] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.action = action


class ReasoningFunctionError(ChartControlError):
    """A reasoning or analysis collaborator failed or returned an unusable response."""

    def __init__(self, message: str, stage: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.stage = stage
