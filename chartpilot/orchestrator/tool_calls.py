"""
Tool call validation and mapping onto chart actions.

Each tool the reasoning function may call has a pydantic argument model.
Membership in the closed vocabulary is checked through the validation context,
so the same models validate against whatever registry the session uses.
"""

from dataclasses import dataclass
from typing import Any, Optional, Union

import orjson
import structlog
from pydantic import BaseModel, ConfigDict, Field, ValidationError, ValidationInfo, field_validator

from ..chart.actions import (
    Action,
    AddIndicator,
    CheckNews,
    Navigate,
    NoOp,
    RemoveIndicator,
    RunAnalysis,
    SetChartType,
    SetIndicatorStack,
    SetTimeframe,
    ToggleDisplayOption,
)
from ..errors import MalformedToolArgumentsError, ToolCallError, UnknownToolError
from ..indicators.colors import normalize_color
from ..indicators.normalizer import ProfileLike, normalize_indicator_options
from ..indicators.registry import IndicatorRegistry, get_default_registry
from .context_config import ChartVocabulary, build_vocabulary

logger = structlog.get_logger(__name__)


def _check_member(value: Any, info: ValidationInfo, attr: str) -> Any:
    vocabulary: Optional[ChartVocabulary] = (info.context or {}).get("vocabulary")
    if vocabulary is not None and value not in getattr(vocabulary, attr):
        raise ValueError(f"{value!r} is not one of the allowed {attr.replace('_', ' ')}")
    return value


class LineStyleArgs(BaseModel):
    model_config = ConfigDict(extra="allow")

    color: Optional[str] = None
    size: Optional[float] = None
    style: Optional[str] = None

    @field_validator("color")
    @classmethod
    def map_color_name(cls, v: Optional[str]) -> Optional[str]:
        return normalize_color(v)

    @field_validator("style")
    @classmethod
    def check_style(cls, v: Optional[str], info: ValidationInfo) -> Optional[str]:
        return v if v is None else _check_member(v, info, "line_styles")


class StylesArgs(BaseModel):
    model_config = ConfigDict(extra="allow")

    lines: Optional[list[LineStyleArgs]] = None


class IndicatorOptionsArgs(BaseModel):
    model_config = ConfigDict(extra="allow")

    calcParams: Optional[list[float]] = None
    styles: Optional[StylesArgs] = None


def _canonical_indicator(value: str, info: ValidationInfo) -> str:
    registry: Optional[IndicatorRegistry] = (info.context or {}).get("registry")
    if registry is None:
        return value
    definition = registry.get(value)
    if definition is None:
        raise ValueError(f"Unknown indicator {value!r}")
    return definition.name


class SetTimeframeArgs(BaseModel):
    timeframe: str

    @field_validator("timeframe")
    @classmethod
    def check_timeframe(cls, v: str, info: ValidationInfo) -> str:
        return _check_member(v, info, "timeframes")


class SetChartTypeArgs(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    chart_type: str = Field(alias="chartType")

    @field_validator("chart_type")
    @classmethod
    def check_chart_type(cls, v: str, info: ValidationInfo) -> str:
        return _check_member(v, info, "chart_types")


class AddIndicatorArgs(BaseModel):
    indicator: str
    options: Optional[IndicatorOptionsArgs] = None

    @field_validator("indicator")
    @classmethod
    def check_indicator(cls, v: str, info: ValidationInfo) -> str:
        return _canonical_indicator(v, info)


class RemoveIndicatorArgs(BaseModel):
    indicator: str

    @field_validator("indicator")
    @classmethod
    def check_indicator(cls, v: str, info: ValidationInfo) -> str:
        return _canonical_indicator(v, info)


class SetIndicatorStackArgs(BaseModel):
    indicators: list[AddIndicatorArgs]


class NavigateArgs(BaseModel):
    direction: str

    @field_validator("direction")
    @classmethod
    def check_direction(cls, v: str, info: ValidationInfo) -> str:
        return _check_member(v, info, "directions")


class ToggleDisplayOptionArgs(BaseModel):
    option: str
    enabled: bool

    @field_validator("option")
    @classmethod
    def check_option(cls, v: str, info: ValidationInfo) -> str:
        return _check_member(v, info, "display_options")


class CheckNewsArgs(BaseModel):
    pass


class RunAnalysisArgs(BaseModel):
    strategy: Optional[str] = None

    @field_validator("strategy")
    @classmethod
    def check_strategy(cls, v: Optional[str], info: ValidationInfo) -> Optional[str]:
        return v if v is None else _check_member(v, info, "strategies")


TOOL_ARGUMENT_MODELS: dict[str, type[BaseModel]] = {
    "set_timeframe": SetTimeframeArgs,
    "set_chart_type": SetChartTypeArgs,
    "add_indicator": AddIndicatorArgs,
    "remove_indicator": RemoveIndicatorArgs,
    "set_indicator_stack": SetIndicatorStackArgs,
    "navigate_chart": NavigateArgs,
    "toggle_display_option": ToggleDisplayOptionArgs,
    "check_news": CheckNewsArgs,
    "run_analysis": RunAnalysisArgs,
}


@dataclass(frozen=True)
class ToolCall:
    """One structured tool call returned by the reasoning function."""
    name: str
    arguments: Union[str, dict[str, Any], None] = None
    id: Optional[str] = None


def _decode_arguments(call: ToolCall) -> dict[str, Any]:
    raw = call.arguments
    if raw is None or raw == "":
        return {}
    if isinstance(raw, dict):
        return raw
    try:
        decoded = orjson.loads(raw)
    except (orjson.JSONDecodeError, TypeError) as e:
        raise MalformedToolArgumentsError(
            f"Tool arguments are not valid JSON: {e}", raw_arguments=raw, tool_name=call.name
        ) from e
    if not isinstance(decoded, dict):
        raise MalformedToolArgumentsError(
            "Tool arguments must be a JSON object", raw_arguments=raw, tool_name=call.name
        )
    return decoded


def _indicator_options(args: AddIndicatorArgs, profile: ProfileLike,
                       registry: IndicatorRegistry) -> dict[str, Any]:
    options = args.options.model_dump(exclude_none=True) if args.options else None
    return normalize_indicator_options(args.indicator, options, profile, registry)


def parse_tool_call(
    call: ToolCall,
    profile: ProfileLike = None,
    registry: Optional[IndicatorRegistry] = None,
    vocabulary: Optional[ChartVocabulary] = None,
) -> Action:
    """
    Validate a tool call and build its chart action.

    Raises:
        UnknownToolError: If the tool name is not in the schema
        MalformedToolArgumentsError: If the arguments fail validation
    """
    registry = registry or get_default_registry()
    vocabulary = vocabulary or build_vocabulary(registry)

    model = TOOL_ARGUMENT_MODELS.get(call.name)
    if model is None:
        raise UnknownToolError(f"Unknown tool: {call.name}", tool_name=call.name)

    raw = _decode_arguments(call)
    try:
        args = model.model_validate(raw, context={"vocabulary": vocabulary, "registry": registry})
    except ValidationError as e:
        raise MalformedToolArgumentsError(
            f"Invalid arguments for {call.name}", raw_arguments=raw,
            issues=e.errors(include_url=False), tool_name=call.name,
        ) from e

    if isinstance(args, SetTimeframeArgs):
        return SetTimeframe(timeframe=args.timeframe)
    if isinstance(args, SetChartTypeArgs):
        return SetChartType(chart_type=args.chart_type)
    if isinstance(args, AddIndicatorArgs):
        return AddIndicator(indicator=args.indicator,
                            options=_indicator_options(args, profile, registry))
    if isinstance(args, RemoveIndicatorArgs):
        return RemoveIndicator(indicator=args.indicator)
    if isinstance(args, SetIndicatorStackArgs):
        return SetIndicatorStack(stack=tuple(
            {"indicator": item.indicator, "options": _indicator_options(item, profile, registry)}
            for item in args.indicators
        ))
    if isinstance(args, NavigateArgs):
        return Navigate(direction=args.direction)
    if isinstance(args, ToggleDisplayOptionArgs):
        return ToggleDisplayOption(option=args.option, enabled=args.enabled)
    if isinstance(args, CheckNewsArgs):
        return CheckNews()
    return RunAnalysis(strategy=args.strategy)


def tool_call_to_action(
    call: ToolCall,
    profile: ProfileLike = None,
    registry: Optional[IndicatorRegistry] = None,
    vocabulary: Optional[ChartVocabulary] = None,
) -> Action:
    """Map a tool call to an action; unusable calls become NoOp."""
    try:
        return parse_tool_call(call, profile, registry, vocabulary)
    except ToolCallError as e:
        logger.warning("Ignoring invalid tool call", tool_name=call.name,
                       error=str(e), error_type=type(e).__name__)
        return NoOp(reason=str(e))
