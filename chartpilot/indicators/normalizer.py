"""
Indicator options normalization.

Turns a partial indicator configuration (name, optional calcParams, optional
per-line styles) into a fully populated one: default parameters from the
trading profile or the registry, one concrete style entry per line, and no two
lines sharing a color.
"""

import copy
import math
from enum import Enum
from itertools import count
from typing import Any, Optional, Union

import structlog

from ..chart.state import IndicatorStackItem
from .colors import COLOR_PALETTE
from .registry import (
    DEFAULT_LINE_SIZE,
    DEFAULT_LINE_STYLE,
    LINE_PALETTE,
    IndicatorRegistry,
    build_default_lines,
    get_default_registry,
)

logger = structlog.get_logger(__name__)


class IndicatorProfile(str, Enum):
    """Trading-mode profiles with their own indicator defaults."""
    DAY_TRADE = "day_trade"
    SWING_TRADE = "swing_trade"


# Most-used indicator defaults per profile
PROFILE_DEFAULTS: dict[IndicatorProfile, tuple[tuple[str, tuple[float, ...]], ...]] = {
    IndicatorProfile.DAY_TRADE: (
        ("EMA", (9, 21, 50)),
        ("VWAP", ()),
        ("VOL", ()),
        ("RSI", (14,)),
        ("MACD", (12, 26, 9)),
        ("BOLL", (20, 2)),
    ),
    IndicatorProfile.SWING_TRADE: (
        ("EMA", (20, 50, 200)),
        ("SMA", (50, 200)),
        ("VOL", ()),
        ("RSI", (14,)),
        ("MACD", (12, 26, 9)),
        ("BOLL", (20, 2)),
    ),
}

ProfileLike = Union[IndicatorProfile, str, None]


def resolve_profile(profile: ProfileLike) -> Optional[IndicatorProfile]:
    """Accept an enum member or its string value; unknown values resolve to None."""
    if profile is None or isinstance(profile, IndicatorProfile):
        return profile
    try:
        return IndicatorProfile(str(profile).strip().lower())
    except ValueError:
        logger.debug("Unknown indicator profile ignored", profile=profile)
        return None


def _profile_params(name: str, profile: Optional[IndicatorProfile],
                    registry: IndicatorRegistry) -> tuple[float, ...]:
    if profile is None:
        return ()
    canonical = registry.canonical_name(name).lower()
    for indicator, params in PROFILE_DEFAULTS[profile]:
        if indicator.lower() == canonical:
            return params
    return ()


def _line_size(value: Any, default: int) -> Union[int, float]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return default
    if not math.isfinite(value) or value <= 0:
        return default
    return value


def _free_color(index: int, defaults: list[dict], seen: set[str]) -> str:
    """Positional default first, then the palettes, then generated colors."""
    candidates = [defaults[index]["color"], *LINE_PALETTE, *(c.value for c in COLOR_PALETTE)]
    for candidate in candidates:
        if candidate.upper() not in seen:
            return candidate
    for k in count(1):
        candidate = "#%06X" % ((0x10B981 + k * 0x0F1F2F) & 0xFFFFFF)
        if candidate not in seen:
            return candidate
    raise AssertionError("unreachable")


def _dedupe_colors(lines: list[dict], defaults: list[dict]) -> list[dict]:
    seen: set[str] = set()
    result = []
    for i, line in enumerate(lines):
        color = line["color"]
        if color.upper() in seen:
            color = _free_color(i, defaults, seen)
            line = {**line, "color": color}
        seen.add(color.upper())
        result.append(line)
    return result


def normalize_indicator_options(
    name: str,
    options: Optional[dict[str, Any]] = None,
    profile: ProfileLike = None,
    registry: Optional[IndicatorRegistry] = None,
) -> dict[str, Any]:
    """
    Fully populate an indicator's options.

    Args:
        name: Indicator name or alias
        options: Partial options with optional ``calcParams`` and ``styles.lines``
        profile: Trading profile whose defaults take precedence over the registry
        registry: Indicator registry (defaults to the built-in one)

    Returns:
        New options dict where ``styles.lines`` has ``max(1, len(calcParams))``
        entries, each with concrete color/size/style, and all colors distinct
    """
    registry = registry or get_default_registry()
    definition = registry.get(name)
    normalized: dict[str, Any] = copy.deepcopy(dict(options)) if options else {}

    calc_params = normalized.get("calcParams")
    if isinstance(calc_params, (list, tuple)) and len(calc_params) > 0:
        normalized["calcParams"] = list(calc_params)
    else:
        params = _profile_params(name, resolve_profile(profile), registry)
        if not params and definition is not None:
            params = definition.default_params
        if params:
            normalized["calcParams"] = list(params)

    line_count = max(1, len(normalized.get("calcParams") or []))
    defaults = build_default_lines(line_count, definition.default_color if definition else None)

    styles = normalized.get("styles")
    styles = dict(styles) if isinstance(styles, dict) else {}
    existing = styles.get("lines")
    if not isinstance(existing, (list, tuple)):
        existing = []

    # Overrides apply by index; a length mismatch keeps only indices that exist
    lines = []
    for i, default in enumerate(defaults):
        override = existing[i] if i < len(existing) and isinstance(existing[i], dict) else {}
        color = override.get("color")
        style = override.get("style")
        lines.append({
            "color": color if isinstance(color, str) and color else default["color"],
            "size": _line_size(override.get("size"), DEFAULT_LINE_SIZE),
            "style": style if isinstance(style, str) and style else DEFAULT_LINE_STYLE,
        })

    styles["lines"] = _dedupe_colors(lines, defaults)
    normalized["styles"] = styles
    return normalized


def get_default_indicator_stack(profile: ProfileLike,
                                registry: Optional[IndicatorRegistry] = None) -> list[IndicatorStackItem]:
    """Normalized indicator stack a profile starts with."""
    resolved = resolve_profile(profile) or IndicatorProfile.DAY_TRADE
    stack = []
    for indicator, params in PROFILE_DEFAULTS[resolved]:
        options = {"calcParams": list(params)} if params else {}
        stack.append(IndicatorStackItem(
            indicator=indicator,
            options=normalize_indicator_options(indicator, options, resolved, registry),
        ))
    return stack
