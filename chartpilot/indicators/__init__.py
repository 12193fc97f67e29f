"""
Indicator registry, options normalization and layout presets.
"""
from .normalizer import IndicatorProfile, get_default_indicator_stack, normalize_indicator_options
from .registry import IndicatorRegistry, get_default_registry

__all__ = [
    "IndicatorProfile",
    "IndicatorRegistry",
    "get_default_indicator_stack",
    "get_default_registry",
    "normalize_indicator_options",
]
