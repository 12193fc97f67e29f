"""
Indicator registry: default parameters, colors and overlay compatibility.

The registry is an immutable lookup table built once at startup and injected
into the normalizer, the layout presets and the orchestrator's vocabulary.
"""

from dataclasses import dataclass
from functools import lru_cache
from types import MappingProxyType
from typing import Mapping, Optional

# Fallback palette for lines past the first
LINE_PALETTE: tuple[str, ...] = (
    "#10B981",
    "#3B82F6",
    "#F59E0B",
    "#EF4444",
    "#A78BFA",
    "#22D3EE",
    "#F472B6",
    "#FDE047",
)

DEFAULT_LINE_SIZE = 1
DEFAULT_LINE_STYLE = "solid"


@dataclass(frozen=True)
class IndicatorDefinition:
    """Static metadata for one built-in indicator."""
    name: str
    default_params: tuple[float, ...] = ()
    overlay: bool = False               # Drawn on the price pane
    default_color: Optional[str] = None
    aliases: tuple[str, ...] = ()

    @property
    def separate_pane(self) -> bool:
        return not self.overlay


_BUILTIN_INDICATORS: tuple[IndicatorDefinition, ...] = (
    IndicatorDefinition("MA", (5, 10, 30, 60), True, "#3B82F6", ("moving average",)),
    IndicatorDefinition("EMA", (6, 12, 20), True, "#22D3EE", ("exp ma", "exponential moving average")),
    IndicatorDefinition("SMA", (12, 2), True, "#EAB308", ("simple moving average",)),
    IndicatorDefinition("BBI", (3, 6, 12, 24), True, "#A78BFA"),
    IndicatorDefinition("BOLL", (20, 2), True, "#F59E0B", ("bollinger", "bb", "bollinger bands")),
    IndicatorDefinition("VWAP", (), True, "#F97316", ("volume weighted average price",)),
    IndicatorDefinition("VOL", (5, 10, 20), False, "#6EE7B7", ("volume",)),
    IndicatorDefinition("MACD", (12, 26, 9), False, "#60A5FA"),
    IndicatorDefinition("KDJ", (9, 3, 3), False, "#34D399", ("stochastic", "stoch")),
    IndicatorDefinition("RSI", (6, 12, 24), False, "#F472B6", ("relative strength index",)),
    IndicatorDefinition("SAR", (2, 2, 20), True, "#FB7185", ("parabolic sar",)),
    IndicatorDefinition("OBV", (30,), False, "#93C5FD", ("on balance volume",)),
    IndicatorDefinition("DMA", (10, 50, 10), False, "#67E8F9"),
    IndicatorDefinition("TRIX", (12, 20), False, "#FDE047"),
    IndicatorDefinition("BRAR", (26,), False, "#FCA5A5"),
    IndicatorDefinition("VR", (24, 30), False, "#A7F3D0"),
    IndicatorDefinition("WR", (6, 10, 14), False, "#F9A8D4", ("williams r",)),
    IndicatorDefinition("MTM", (6, 10), False, "#C4B5FD", ("momentum",)),
    IndicatorDefinition("EMV", (14, 9), False, "#FDBA74"),
    IndicatorDefinition("DMI", (14, 6), False, "#86EFAC"),
    IndicatorDefinition("CR", (26, 10, 20, 40, 60), False, "#FDA4AF"),
    IndicatorDefinition("PSY", (12, 6), False, "#FDE68A"),
    IndicatorDefinition("AO", (5, 34), False, "#A5B4FC", ("awesome oscillator",)),
    IndicatorDefinition("ROC", (12, 6), False, "#FCA5A5"),
    IndicatorDefinition("PVT", (), False, "#93C5FD"),
    IndicatorDefinition("AVP", (), False, "#FDE68A"),
)

MAX_PARAM_VALUE = 10000


class IndicatorRegistry:
    """Read-only indicator lookup by name or alias (case-insensitive)."""

    def __init__(self, definitions: tuple[IndicatorDefinition, ...]):
        by_name = {}
        by_alias = {}
        for definition in definitions:
            by_name[definition.name] = definition
            by_alias[definition.name.lower()] = definition
            for alias in definition.aliases:
                by_alias.setdefault(alias.lower(), definition)
        self._by_name: Mapping[str, IndicatorDefinition] = MappingProxyType(by_name)
        self._by_alias: Mapping[str, IndicatorDefinition] = MappingProxyType(by_alias)

    def get(self, name: str) -> Optional[IndicatorDefinition]:
        """Find an indicator by canonical name or alias."""
        if not name:
            return None
        return self._by_alias.get(name.strip().lower())

    def canonical_name(self, name: str) -> str:
        """Canonical name for a known indicator, otherwise the input unchanged."""
        definition = self.get(name)
        return definition.name if definition else name

    def names(self) -> list[str]:
        return list(self._by_name)

    def definitions(self) -> list[IndicatorDefinition]:
        return list(self._by_name.values())

    def __contains__(self, name: str) -> bool:
        return self.get(name) is not None

    def __len__(self) -> int:
        return len(self._by_name)

    def validate_params(self, name: str, calc_params: Optional[list[float]]) -> list[str]:
        """
        Check calculation parameters against the registry.

        Returns:
            List of error messages, empty when the parameters are acceptable
        """
        if not calc_params:
            return []
        errors = []
        for i, value in enumerate(calc_params):
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                errors.append(f"param{i + 1} must be a number")
            elif value <= 0 or value > MAX_PARAM_VALUE:
                errors.append(f"param{i + 1} out of range")
        return errors


def build_default_lines(count: int, base_color: Optional[str] = None) -> list[dict]:
    """Default line styles: base color first, then the fallback palette."""
    lines = []
    for i in range(max(1, count)):
        color = base_color if i == 0 and base_color else LINE_PALETTE[i % len(LINE_PALETTE)]
        lines.append({"color": color, "size": DEFAULT_LINE_SIZE, "style": DEFAULT_LINE_STYLE})
    return lines


@lru_cache(maxsize=1)
def get_default_registry() -> IndicatorRegistry:
    """The built-in registry, constructed once."""
    return IndicatorRegistry(_BUILTIN_INDICATORS)
