"""
Chart sequence engine.

Runs an ordered list of sequence steps on a single cooperative task: each step
is optionally narrated, paced, gated behind a continue signal, translated into
chart actions and executed sequentially before the next step starts. A cancel
request stops the run at the next checkpoint between steps.
"""

import asyncio
import uuid
from collections import deque
from typing import Callable, Optional, Union

from ..chart.actions import (
    Action,
    AddIndicator,
    Navigate,
    SetChartType,
    SetTimeframe,
    ToggleDisplayOption,
)
from ..chart.session import ChartSession
from ..indicators.layouts import build_layout_indicator_stack, get_layout_preset_by_id
from ..indicators.normalizer import normalize_indicator_options
from ..indicators.registry import IndicatorRegistry, get_default_registry
from ..logging.config import get_sequence_logger, log_sequence_step
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
)

logger = get_sequence_logger(__name__)


def _resolve(
    value: Union[float, bool, Callable[[int, SequenceStep], Union[float, bool]], None],
    index: int,
    step: SequenceStep,
):
    if callable(value):
        return value(index, step)
    return value


class _SequenceRun:
    """State of one run: cancellation flag and FIFO continue waiters."""

    def __init__(self, session: ChartSession, options: RunSequenceOptions,
                 registry: IndicatorRegistry) -> None:
        self.session = session
        self.options = options
        self.registry = registry
        self.run_id = uuid.uuid4().hex[:8]
        self.state = SequenceState.RUNNING
        self.screenshots: list[str] = []
        self.steps_completed = 0
        self._waiters: deque[asyncio.Future] = deque()

    @property
    def cancelled(self) -> bool:
        return self.state == SequenceState.CANCELLED

    def on_cancel(self) -> None:
        if self.state != SequenceState.RUNNING:
            return
        self.state = SequenceState.CANCELLED
        logger.info("Sequence cancellation requested", run_id=self.run_id)
        # Nothing left to wait for once cancelled
        while self._waiters:
            waiter = self._waiters.popleft()
            if not waiter.done():
                waiter.set_result(None)

    def on_continue(self) -> None:
        while self._waiters:
            waiter = self._waiters.popleft()
            if not waiter.done():
                waiter.set_result(None)
                return

    async def wait_for_continue(self, step: SequenceStep) -> None:
        waiter = asyncio.get_running_loop().create_future()
        self._waiters.append(waiter)
        if self.options.narrate and step.message:
            self.session.overlay.show_overlay_message(step.message, True)
        await waiter

    def release_waiters(self) -> None:
        while self._waiters:
            waiter = self._waiters.popleft()
            if not waiter.done():
                waiter.cancel()

    async def translate(self, step: SequenceStep) -> list[Action]:
        """Turn a step into chart actions; screenshot and delay run in place."""
        if isinstance(step, TimeframeStep):
            return [SetTimeframe(timeframe=step.timeframe)]
        if isinstance(step, ChartTypeStep):
            return [SetChartType(chart_type=step.chart_type)]
        if isinstance(step, IndicatorStep):
            profile = step.profile if step.profile is not None else self.options.profile
            options = normalize_indicator_options(step.indicator, step.options, profile, self.registry)
            return [AddIndicator(indicator=self.registry.canonical_name(step.indicator), options=options)]
        if isinstance(step, NavigateStep):
            return [Navigate(direction=step.direction)]
        if isinstance(step, ToggleOptionStep):
            return [ToggleDisplayOption(option=step.option, enabled=step.enabled)]
        if isinstance(step, ActionStep):
            return [step.action]
        if isinstance(step, ScreenshotStep):
            self.screenshots.append(await self.session.screenshot_chart())
            return []
        if isinstance(step, DelayStep):
            if step.ms and step.ms > 0:
                await asyncio.sleep(step.ms / 1000.0)
            return []
        if isinstance(step, (LineStep, LabelStep, LayoutStep)):
            logger.debug("Sequence step kind not executable; skipping",
                         run_id=self.run_id, step_kind=step.kind)
            return []
        logger.warning("Unknown sequence step; skipping", run_id=self.run_id, step=repr(step))
        return []

    def notify_observer(self, index: int, step: SequenceStep) -> None:
        if self.options.on_step is None:
            return
        try:
            self.options.on_step(index, step)
        except Exception as e:
            logger.warning("Sequence step observer raised", run_id=self.run_id,
                           step_index=index, error=str(e))

    async def run(self, steps: list[SequenceStep]) -> SequenceResult:
        opts = self.options
        overlay = self.session.overlay

        if opts.cancellable:
            overlay.on_overlay_cancel(self.on_cancel)
        overlay.on_overlay_continue(self.on_continue)

        try:
            if opts.wait_for_bridge and steps and self.session.get_chart_bridge() is None:
                if not await self.session.wait_for_bridge():
                    logger.warning("Starting sequence without a chart bridge", run_id=self.run_id)

            for index, step in enumerate(steps):
                if self.cancelled:
                    break

                if opts.narrate and step.message:
                    overlay.show_overlay_message(step.message)

                self.notify_observer(index, step)
                if self.cancelled:
                    break

                delay = _resolve(opts.per_step_delay_ms, index, step)
                if delay and delay > 0:
                    await asyncio.sleep(delay / 1000.0)
                    if self.cancelled:
                        break

                if _resolve(opts.require_continue, index, step):
                    await self.wait_for_continue(step)
                    if self.cancelled:
                        break

                actions = await self.translate(step)
                if actions:
                    batch = await self.session.execute_chart_actions_sequentially(actions)
                    if batch.failed:
                        logger.warning("Sequence step had failing actions", run_id=self.run_id,
                                       step_index=index, failed=len(batch.failed))

                self.steps_completed += 1
                log_sequence_step(logger, self.run_id, index, step.kind, len(actions))
        finally:
            if opts.cancellable:
                overlay.off_overlay_cancel(self.on_cancel)
            overlay.off_overlay_continue(self.on_continue)
            self.release_waiters()
            if opts.narrate:
                overlay.hide_overlay_message()

        if self.state == SequenceState.RUNNING:
            self.state = SequenceState.COMPLETED

        logger.info("Sequence finished", run_id=self.run_id, state=self.state.value,
                    steps_completed=self.steps_completed, total_steps=len(steps))

        return SequenceResult(
            ok=not self.cancelled,
            screenshots=self.screenshots,
            cancelled=self.cancelled,
            steps_completed=self.steps_completed,
        )


async def run_chart_sequence(
    session: ChartSession,
    steps: list[SequenceStep],
    options: Optional[RunSequenceOptions] = None,
    registry: Optional[IndicatorRegistry] = None,
) -> SequenceResult:
    """
    Execute a chart sequence on the given session.

    Args:
        session: Chart session holding the bridge, overlay and screenshot service
        steps: Ordered sequence steps
        options: Narration, pacing, continue-gate and cancellation options
        registry: Indicator registry used for normalization

    Returns:
        SequenceResult; a cancelled run resolves with ok=False, cancelled=True
    """
    run = _SequenceRun(session, options or RunSequenceOptions(), registry or get_default_registry())
    return await run.run(list(steps))


def expand_layout_steps(
    steps: list[SequenceStep],
    registry: Optional[IndicatorRegistry] = None,
) -> list[SequenceStep]:
    """
    Replace layout steps with the timeframe, indicator and screenshot steps
    their preset stands for. Unknown layout ids are dropped.
    """
    expanded: list[SequenceStep] = []
    for step in steps:
        if not isinstance(step, LayoutStep):
            expanded.append(step)
            continue

        preset = get_layout_preset_by_id(step.layout_id)
        if preset is None:
            logger.warning("Unknown layout preset; dropping step", layout_id=step.layout_id)
            continue

        timeframe = step.timeframe or preset.preferred_timeframes[0]
        profile = step.profile or preset.profile
        expanded.append(TimeframeStep(timeframe=timeframe,
                                      message=step.message or f"Applying {preset.name}"))
        for item in build_layout_indicator_stack(preset, profile, registry):
            expanded.append(IndicatorStep(indicator=item.indicator, options=item.options,
                                          profile=profile))
        if step.screenshot_after:
            expanded.append(ScreenshotStep())
    return expanded
