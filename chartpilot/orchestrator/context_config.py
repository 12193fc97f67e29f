"""
Closed vocabulary for agent-driven chart control.

Everything an agent may choose (timeframes, chart types, indicators, colors,
line styles, display options, strategies, complexity tiers) is enumerated
here, both for prompting and for validating tool-call arguments.
"""

from dataclasses import asdict, dataclass
from typing import Any, Optional

from ..indicators.colors import COLOR_PALETTE
from ..indicators.registry import IndicatorRegistry, get_default_registry
from ..plans.complexity import COMPLEXITY_CONFIGS


@dataclass(frozen=True)
class VocabularyOption:
    value: Any
    label: str
    description: str


TIMEFRAMES: tuple[VocabularyOption, ...] = (
    VocabularyOption("1m", "1 Minute", "1-minute intervals"),
    VocabularyOption("5m", "5 Minutes", "5-minute intervals"),
    VocabularyOption("15m", "15 Minutes", "15-minute intervals"),
    VocabularyOption("30m", "30 Minutes", "30-minute intervals"),
    VocabularyOption("1h", "1 Hour", "1-hour intervals"),
    VocabularyOption("4h", "4 Hours", "4-hour intervals"),
    VocabularyOption("1D", "1 Day", "Daily intervals"),
    VocabularyOption("1W", "1 Week", "Weekly intervals"),
    VocabularyOption("1M", "1 Month", "Monthly intervals"),
)

CHART_TYPES: tuple[VocabularyOption, ...] = (
    VocabularyOption("candle", "Candlestick", "Traditional OHLC candlestick chart"),
    VocabularyOption("line", "Line", "Simple line chart showing closing prices"),
    VocabularyOption("area", "Area", "Filled area chart"),
    VocabularyOption("bar", "Bar", "OHLC bar chart"),
    VocabularyOption("candle_solid", "Solid candle", "Filled body candles"),
    VocabularyOption("candle_stroke", "Hollow candle", "Hollow body candles"),
    VocabularyOption("candle_up_stroke", "Up candle", "Up candles stroked"),
    VocabularyOption("candle_down_stroke", "Down candle", "Down candles stroked"),
    VocabularyOption("ohlc", "OHLC", "Open-High-Low-Close bars"),
)

LINE_STYLES: tuple[VocabularyOption, ...] = (
    VocabularyOption("solid", "Solid", "Continuous line"),
    VocabularyOption("dashed", "Dashed", "Dashed line pattern"),
    VocabularyOption("dotted", "Dotted", "Dotted line pattern"),
)

LINE_THICKNESS_OPTIONS: tuple[VocabularyOption, ...] = (
    VocabularyOption(1, "Thin", "1px line thickness"),
    VocabularyOption(2, "Medium", "2px line thickness"),
    VocabularyOption(3, "Thick", "3px line thickness"),
    VocabularyOption(4, "Extra Thick", "4px line thickness"),
)

CHART_DISPLAY_OPTIONS: tuple[VocabularyOption, ...] = (
    VocabularyOption("showVolume", "Show Volume", "Display volume bars"),
    VocabularyOption("showGrid", "Show Grid", "Display price and time grid lines"),
    VocabularyOption("showPriceAxisLine", "Show Price Axis Line", "Display price axis line"),
    VocabularyOption("showTimeAxisLine", "Show Time Axis Line", "Display time axis line"),
    VocabularyOption("showPriceAxisText", "Show Price Axis Text", "Display price axis labels"),
    VocabularyOption("showTimeAxisText", "Show Time Axis Text", "Display time axis labels"),
    VocabularyOption("showLastPriceLabel", "Show Last Price Label", "Display current price label"),
    VocabularyOption("showSessions", "Show Trading Sessions", "Display market session indicators"),
)

NAVIGATION_OPTIONS: tuple[VocabularyOption, ...] = (
    VocabularyOption("left", "Pan Left", "Move chart view to the left"),
    VocabularyOption("right", "Pan Right", "Move chart view to the right"),
)

TRADING_STRATEGIES: tuple[VocabularyOption, ...] = (
    VocabularyOption("day_trade", "Day Trading", "Short-term intraday trading"),
    VocabularyOption("swing_trade", "Swing Trading", "Multi-day position trades"),
    VocabularyOption("trend_follow", "Trend Following", "Riding established trends"),
    VocabularyOption("mean_reversion", "Mean Reversion", "Trading back to average prices"),
    VocabularyOption("breakout", "Breakout", "Momentum breakout patterns"),
)

RISK_TOLERANCE_LEVELS: tuple[VocabularyOption, ...] = (
    VocabularyOption("conservative", "Conservative", "Lower risk, smaller position sizes"),
    VocabularyOption("moderate", "Moderate", "Balanced risk approach"),
    VocabularyOption("aggressive", "Aggressive", "Higher risk, larger position sizes"),
)


def _values(options: tuple[VocabularyOption, ...]) -> list:
    return [o.value for o in options]


@dataclass(frozen=True)
class ChartVocabulary:
    """Allowed values for each tool-call argument."""
    timeframes: frozenset
    chart_types: frozenset
    indicators: frozenset
    line_styles: frozenset
    line_sizes: frozenset
    display_options: frozenset
    directions: frozenset
    strategies: frozenset


def build_vocabulary(registry: Optional[IndicatorRegistry] = None) -> ChartVocabulary:
    registry = registry or get_default_registry()
    return ChartVocabulary(
        timeframes=frozenset(_values(TIMEFRAMES)),
        chart_types=frozenset(_values(CHART_TYPES)),
        indicators=frozenset(registry.names()),
        line_styles=frozenset(_values(LINE_STYLES)),
        line_sizes=frozenset(_values(LINE_THICKNESS_OPTIONS)),
        display_options=frozenset(_values(CHART_DISPLAY_OPTIONS)),
        directions=frozenset(_values(NAVIGATION_OPTIONS)),
        strategies=frozenset(_values(TRADING_STRATEGIES)),
    )


def generate_chart_context_config(registry: Optional[IndicatorRegistry] = None) -> dict[str, Any]:
    """
    Configuration payload describing every option the agent may choose from.

    Returns:
        JSON-serializable dict, embedded in the reasoning system prompt
    """
    registry = registry or get_default_registry()
    return {
        "chartTypes": [asdict(o) for o in CHART_TYPES],
        "timeframes": [asdict(o) for o in TIMEFRAMES],
        "lineStyles": [asdict(o) for o in LINE_STYLES],
        "lineThicknessOptions": [asdict(o) for o in LINE_THICKNESS_OPTIONS],
        "colorPalette": [asdict(c) for c in COLOR_PALETTE],
        "chartDisplayOptions": [asdict(o) for o in CHART_DISPLAY_OPTIONS],
        "navigationOptions": [asdict(o) for o in NAVIGATION_OPTIONS],
        "tradingStrategies": [asdict(o) for o in TRADING_STRATEGIES],
        "strategyComplexityLevels": [
            {
                "value": tier.value,
                "label": config.description,
                "description": f"Complexity level: {tier.value}",
                "features": asdict(config.features),
            }
            for tier, config in COMPLEXITY_CONFIGS.items()
        ],
        "riskToleranceLevels": [asdict(o) for o in RISK_TOLERANCE_LEVELS],
        "availableIndicators": [
            {
                "name": d.name,
                "defaultParams": list(d.default_params),
                "overlay": d.overlay,
                "defaultColor": d.default_color,
            }
            for d in registry.definitions()
        ],
    }


def _function_tool(name: str, description: str, properties: dict, required: list[str]) -> dict:
    return {
        "type": "function",
        "function": {
            "name": name,
            "description": description,
            "parameters": {
                "type": "object",
                "properties": properties,
                "required": required,
            },
        },
    }


def build_tool_schema(registry: Optional[IndicatorRegistry] = None) -> list[dict[str, Any]]:
    """Function-tool definitions offered to the reasoning function."""
    registry = registry or get_default_registry()
    indicator_options = {
        "type": "object",
        "description": "Indicator configuration options",
        "properties": {
            "calcParams": {
                "type": "array",
                "items": {"type": "number"},
                "description": "Indicator calculation parameters",
            },
            "styles": {
                "type": "object",
                "properties": {
                    "lines": {
                        "type": "array",
                        "items": {
                            "type": "object",
                            "properties": {
                                "color": {
                                    "type": "string",
                                    "description": "Palette hex value or plain color name",
                                },
                                "size": {"type": "number", "enum": _values(LINE_THICKNESS_OPTIONS)},
                                "style": {"type": "string", "enum": _values(LINE_STYLES)},
                            },
                        },
                    },
                },
            },
        },
    }
    indicator_names = registry.names()

    return [
        _function_tool(
            "set_timeframe", "Change chart timeframe",
            {"timeframe": {"type": "string", "enum": _values(TIMEFRAMES)}},
            ["timeframe"],
        ),
        _function_tool(
            "set_chart_type", "Change how the price series is drawn",
            {"chartType": {"type": "string", "enum": _values(CHART_TYPES)}},
            ["chartType"],
        ),
        _function_tool(
            "add_indicator", "Add technical indicator to chart",
            {
                "indicator": {"type": "string", "enum": indicator_names},
                "options": indicator_options,
            },
            ["indicator"],
        ),
        _function_tool(
            "remove_indicator", "Remove a technical indicator from the chart",
            {"indicator": {"type": "string", "enum": indicator_names}},
            ["indicator"],
        ),
        _function_tool(
            "set_indicator_stack", "Replace every indicator on the chart",
            {
                "indicators": {
                    "type": "array",
                    "items": {
                        "type": "object",
                        "properties": {
                            "indicator": {"type": "string", "enum": indicator_names},
                            "options": indicator_options,
                        },
                        "required": ["indicator"],
                    },
                },
            },
            ["indicators"],
        ),
        _function_tool(
            "navigate_chart", "Pan the visible range",
            {"direction": {"type": "string", "enum": _values(NAVIGATION_OPTIONS)}},
            ["direction"],
        ),
        _function_tool(
            "toggle_display_option", "Turn a chart display option on or off",
            {
                "option": {"type": "string", "enum": _values(CHART_DISPLAY_OPTIONS)},
                "enabled": {"type": "boolean"},
            },
            ["option", "enabled"],
        ),
        _function_tool("check_news", "Check the latest news for the symbol", {}, []),
        _function_tool(
            "run_analysis", "Analyze the chart and propose a trade plan",
            {"strategy": {"type": "string", "enum": _values(TRADING_STRATEGIES)}},
            [],
        ),
    ]
