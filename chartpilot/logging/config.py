"""
Centralized logging configuration for chartpilot.

This module provides standardized logging configuration using structlog
for all components. Bridge dispatch, sequence runs and orchestrator turns
all log through this configuration so events share one structure.
"""
import logging
import sys
from typing import Any, Optional

import structlog
from structlog.types import FilteringBoundLogger


def configure_logging(
    level: str = "INFO",
    format_json: bool = False,
    include_timestamp: bool = True,
    include_caller: bool = False,
    extra_processors: Optional[list] = None
) -> None:
    """
    Configure structlog for the entire application.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format_json: If True, output JSON format; otherwise human-readable
        include_timestamp: Include timestamp in log output
        include_caller: Include caller information (filename, line number)
        extra_processors: Additional structlog processors to include
    """
    log_level = getattr(logging, level.upper())

    logging.basicConfig(
        level=log_level,
        stream=sys.stdout,
        format="%(message)s"  # structlog will handle formatting
    )

    processors = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if include_timestamp:
        processors.append(structlog.processors.TimeStamper(fmt="iso"))

    if include_caller:
        processors.append(structlog.processors.CallsiteParameterAdder(
            parameters=[structlog.processors.CallsiteParameter.FILENAME,
                        structlog.processors.CallsiteParameter.LINENO]
        ))

    if extra_processors:
        processors.extend(extra_processors)

    if format_json:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> FilteringBoundLogger:
    """
    Get a configured structlog logger instance.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured structlog logger instance
    """
    return structlog.get_logger(name)


def get_bridge_logger(name: str) -> FilteringBoundLogger:
    """
    Get a logger for chart bridge dispatch.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Logger bound with the bridge subsystem context
    """
    return get_logger(name).bind(subsystem="chart_bridge")


def get_sequence_logger(name: str) -> FilteringBoundLogger:
    """
    Get a logger for chart sequence runs.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Logger bound with the sequence subsystem context
    """
    return get_logger(name).bind(subsystem="sequence_engine")


def log_action_dispatch(
    logger: FilteringBoundLogger,
    action_type: str,
    outcome: str,
    context: Optional[dict[str, Any]] = None
) -> None:
    """
    Log the outcome of dispatching one chart action with standardized format.

    Args:
        logger: Structlog logger instance
        action_type: Tag of the dispatched action (e.g. "setTimeframe")
        outcome: One of "performed", "skipped" or "failed"
        context: Additional context data
    """
    bound_logger = logger.bind(
        action_type=action_type,
        outcome=outcome,
        event_kind="action_dispatch"
    )

    if context:
        bound_logger = bound_logger.bind(context=context)

    if outcome == "performed":
        bound_logger.debug("Chart action performed")
    elif outcome == "skipped":
        bound_logger.warning("Chart bridge not registered; skipping action")
    else:
        bound_logger.warning("Chart action failed")


def log_sequence_step(
    logger: FilteringBoundLogger,
    run_id: str,
    index: int,
    kind: str,
    action_count: int,
    context: Optional[dict[str, Any]] = None
) -> None:
    """
    Log one processed sequence step.

    Args:
        logger: Structlog logger instance
        run_id: Identifier of the sequence run
        index: Position of the step in the sequence
        kind: Step kind tag
        action_count: Number of chart actions the step translated into
        context: Additional context data
    """
    bound_logger = logger.bind(
        run_id=run_id,
        step_index=index,
        step_kind=kind,
        action_count=action_count,
        event_kind="sequence_step"
    )

    if context:
        bound_logger = bound_logger.bind(context=context)

    bound_logger.info("Sequence step processed")
