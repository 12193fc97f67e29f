"""
Chart layout presets: one price-pane indicator plus two sub-pane indicators,
with the timeframes each layout works best on.
"""

from dataclasses import dataclass
from typing import Optional

from ..chart.state import IndicatorStackItem
from .normalizer import IndicatorProfile, ProfileLike, normalize_indicator_options, resolve_profile
from .registry import IndicatorRegistry


@dataclass(frozen=True)
class LayoutIndicator:
    pane: str                           # "main" or "sub"
    indicator: str
    calc_params: tuple[float, ...] = ()


@dataclass(frozen=True)
class LayoutPreset:
    """Named indicator layout for a trading profile."""
    id: str
    profile: IndicatorProfile
    name: str
    description: str
    preferred_timeframes: tuple[str, ...]
    indicators: tuple[LayoutIndicator, LayoutIndicator, LayoutIndicator]
    strengths: tuple[str, ...] = ()
    weaknesses: tuple[str, ...] = ()
    scenarios: tuple[str, ...] = ()


_DAY = IndicatorProfile.DAY_TRADE
_SWING = IndicatorProfile.SWING_TRADE

LAYOUT_PRESETS: tuple[LayoutPreset, ...] = (
    LayoutPreset(
        id="day_ema_rsi_macd",
        profile=_DAY,
        name="EMA(9,21,50) + RSI(14) + MACD",
        description="Momentum trend on price with RSI and MACD for momentum/turn confirmation.",
        preferred_timeframes=("1m", "5m"),
        indicators=(
            LayoutIndicator("main", "EMA", (9, 21, 50)),
            LayoutIndicator("sub", "RSI", (14,)),
            LayoutIndicator("sub", "MACD", (12, 26, 9)),
        ),
        strengths=("Fast response to intraday momentum", "Clear pullback alignment"),
        weaknesses=("Chop in range-bound markets", "Late on news whipsaws"),
        scenarios=("Trend day", "Opening drive pullback", "VWAP reclaim with momentum"),
    ),
    LayoutPreset(
        id="day_boll_rsi_macd",
        profile=_DAY,
        name="BOLL(20,2) + RSI(14) + MACD",
        description="Volatility bands for squeeze/breakouts with RSI/MACD confirmation.",
        preferred_timeframes=("1m", "5m"),
        indicators=(
            LayoutIndicator("main", "BOLL", (20, 2)),
            LayoutIndicator("sub", "RSI", (14,)),
            LayoutIndicator("sub", "MACD", (12, 26, 9)),
        ),
        strengths=("Identifies squeezes and expansions", "Good for breakout timing"),
        weaknesses=("False breaks in illiquid names", "Band riding confuses exits"),
        scenarios=("Squeeze breakout", "Post-news volatility expansion"),
    ),
    LayoutPreset(
        id="day_ema_kdj_vol",
        profile=_DAY,
        name="EMA(9,21,50) + KDJ(9,3,3) + VOL(5,10,20)",
        description="Trend with stochastic turns and volume confirmation.",
        preferred_timeframes=("1m", "5m"),
        indicators=(
            LayoutIndicator("main", "EMA", (9, 21, 50)),
            LayoutIndicator("sub", "KDJ", (9, 3, 3)),
            LayoutIndicator("sub", "VOL", (5, 10, 20)),
        ),
        strengths=("Good for timing pullback resumes", "Volume trend context"),
        weaknesses=("Oscillator churn during strong trends", "Volume lags intra-bar"),
        scenarios=("Pullback entries on trend days", "Range-to-trend transitions"),
    ),
    LayoutPreset(
        id="swing_ema_rsi_macd",
        profile=_SWING,
        name="EMA(20,50,200) + RSI(14) + MACD",
        description="Multi-horizon trend structure with momentum confirmation.",
        preferred_timeframes=("1D", "4h"),
        indicators=(
            LayoutIndicator("main", "EMA", (20, 50, 200)),
            LayoutIndicator("sub", "RSI", (14,)),
            LayoutIndicator("sub", "MACD", (12, 26, 9)),
        ),
        strengths=("Follows swing trends", "Clear multi-EMA structure"),
        weaknesses=("Sideways chop", "EMA whips in late stage"),
        scenarios=("Breakout pullbacks", "Trend continuation on higher TF"),
    ),
    LayoutPreset(
        id="swing_boll_rsi_obv",
        profile=_SWING,
        name="BOLL(20,2) + RSI(14) + OBV(30)",
        description="Volatility and mean reversion with accumulation insight via OBV.",
        preferred_timeframes=("1D", "4h"),
        indicators=(
            LayoutIndicator("main", "BOLL", (20, 2)),
            LayoutIndicator("sub", "RSI", (14,)),
            LayoutIndicator("sub", "OBV", (30,)),
        ),
        strengths=("Mean reversion bands for entries", "Accumulation/Distribution visibility"),
        weaknesses=("Trending names ride bands", "OBV noisy around events"),
        scenarios=("Pullback to mid-band", "Failed breakdown reversals"),
    ),
    LayoutPreset(
        id="swing_sma_rsi_macd",
        profile=_SWING,
        name="SMA(50,200) + RSI(14) + MACD",
        description="Classic SMA structure with momentum confirmation.",
        preferred_timeframes=("1D", "1W"),
        indicators=(
            LayoutIndicator("main", "SMA", (50, 200)),
            LayoutIndicator("sub", "RSI", (14,)),
            LayoutIndicator("sub", "MACD", (12, 26, 9)),
        ),
        strengths=("Widely followed MAs", "Crossovers for trend shifts"),
        weaknesses=("Lag during rapid changes", "Whipsaws near 200"),
        scenarios=("Golden/death cross context", "Higher timeframe pullbacks"),
    ),
)


def get_layout_presets(profile: ProfileLike = None) -> list[LayoutPreset]:
    resolved = resolve_profile(profile)
    if resolved is None:
        return list(LAYOUT_PRESETS)
    return [p for p in LAYOUT_PRESETS if p.profile == resolved]


def get_layout_preset_by_id(layout_id: str) -> Optional[LayoutPreset]:
    for preset in LAYOUT_PRESETS:
        if preset.id == layout_id:
            return preset
    return None


def build_layout_indicator_stack(
    preset: LayoutPreset,
    profile: ProfileLike = None,
    registry: Optional[IndicatorRegistry] = None,
) -> list[IndicatorStackItem]:
    """Normalized indicator stack for a layout preset."""
    resolved = resolve_profile(profile) or preset.profile
    return [
        IndicatorStackItem(
            indicator=li.indicator,
            options=normalize_indicator_options(
                li.indicator,
                {"calcParams": list(li.calc_params)} if li.calc_params else None,
                resolved,
                registry,
            ),
        )
        for li in preset.indicators
    ]
