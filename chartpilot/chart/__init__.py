"""
Chart action protocol, bridge session and state snapshot.
"""
from .actions import Action, ChartBridge, describe_action
from .session import BatchResult, ChartSession
from .state import ChartStateSnapshot, IndicatorStackItem

__all__ = [
    "Action",
    "BatchResult",
    "ChartBridge",
    "ChartSession",
    "ChartStateSnapshot",
    "IndicatorStackItem",
    "describe_action",
]
