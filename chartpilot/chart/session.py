"""
Chart session: the handle that owns the active bridge and chart state.

A ChartSession is created by the call site that owns the chart view and is
passed explicitly to the sequence engine and the orchestrator. It holds the
one registered ChartBridge, the ChartStateSnapshot, the overlay bus and the
screenshot service.
"""

import asyncio
import time
from dataclasses import dataclass, field
from typing import Optional, Protocol

from ..config.defaults import BridgeParams
from ..errors import ChartActionError
from ..logging.config import get_bridge_logger, log_action_dispatch
from .actions import Action, ChartBridge
from .overlay import OverlayBus
from .state import ChartStateSnapshot, IndicatorStackItem

logger = get_bridge_logger(__name__)


class ScreenshotService(Protocol):
    """Captures the chart surface as an opaque image reference."""

    async def capture_chart_screenshot(self) -> str:
        ...


class PlaceholderScreenshotService:
    """Screenshot service used until the chart view provides a real one."""

    async def capture_chart_screenshot(self) -> str:
        logger.info("captureChartScreenshot called - returning empty image")
        return ""


@dataclass
class BatchResult:
    """Outcome of executing a batch of chart actions."""
    succeeded: list[Action] = field(default_factory=list)
    failed: list[ChartActionError] = field(default_factory=list)
    skipped: list[Action] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed and not self.skipped

    def extend(self, other: "BatchResult") -> None:
        self.succeeded.extend(other.succeeded)
        self.failed.extend(other.failed)
        self.skipped.extend(other.skipped)


_PERFORMED = "performed"
_SKIPPED = "skipped"


class ChartSession:
    """Bridge registration, action dispatch and state for one chart view."""

    def __init__(
        self,
        screenshot_service: Optional[ScreenshotService] = None,
        overlay: Optional[OverlayBus] = None,
        bridge_params: Optional[BridgeParams] = None,
    ) -> None:
        self.logger = logger
        self.overlay = overlay or OverlayBus()
        self.screenshot_service = screenshot_service or PlaceholderScreenshotService()
        self.bridge_params = bridge_params or BridgeParams()
        self._bridge: Optional[ChartBridge] = None
        self._state = ChartStateSnapshot()

    # -- bridge registration -------------------------------------------------

    def register_chart_bridge(self, bridge: ChartBridge) -> None:
        """Register the chart view's executor; the last registration wins."""
        if self._bridge is not None and self._bridge is not bridge:
            self.logger.info("Replacing registered chart bridge")
        self._bridge = bridge

    def unregister_chart_bridge(self) -> None:
        self._bridge = None

    def get_chart_bridge(self) -> Optional[ChartBridge]:
        return self._bridge

    async def wait_for_bridge(
        self,
        timeout_ms: Optional[int] = None,
        poll_interval_ms: Optional[int] = None,
    ) -> bool:
        """
        Poll until a bridge is registered or the timeout elapses.

        Returns:
            True if a bridge is registered, False on timeout
        """
        timeout_ms = self.bridge_params.wait_timeout_ms if timeout_ms is None else timeout_ms
        poll_interval_ms = (self.bridge_params.poll_interval_ms
                            if poll_interval_ms is None else poll_interval_ms)

        deadline = time.monotonic() + timeout_ms / 1000.0
        while self._bridge is None:
            if time.monotonic() >= deadline:
                self.logger.warning("Timed out waiting for chart bridge", timeout_ms=timeout_ms)
                return False
            await asyncio.sleep(poll_interval_ms / 1000.0)
        return True

    # -- action dispatch -----------------------------------------------------

    async def execute_chart_action(self, action: Action) -> None:
        """
        Execute a single action via the registered bridge.

        With no bridge registered the action is dropped and a warning logged.
        Exceptions raised by the bridge propagate to the caller.
        """
        await self._dispatch(action)

    async def _dispatch(self, action: Action) -> str:
        bridge = self._bridge
        if bridge is None:
            log_action_dispatch(self.logger, action.type, _SKIPPED, {"action": repr(action)})
            return _SKIPPED
        await bridge.perform(action)
        log_action_dispatch(self.logger, action.type, _PERFORMED)
        return _PERFORMED

    async def _dispatch_isolated(self, action: Action, result: BatchResult) -> None:
        try:
            outcome = await self._dispatch(action)
        except Exception as e:
            error = ChartActionError(f"Chart action {action.type} failed: {e}", action=action)
            error.__cause__ = e
            log_action_dispatch(self.logger, action.type, "failed", {"error": str(e)})
            result.failed.append(error)
            return
        if outcome == _SKIPPED:
            result.skipped.append(action)
        else:
            result.succeeded.append(action)

    async def execute_chart_actions(self, actions: list[Action]) -> BatchResult:
        """
        Execute actions concurrently; completion order is unspecified.

        A failing action is logged and recorded in the result. It never
        affects its siblings and never propagates to the caller.
        """
        result = BatchResult()
        await asyncio.gather(*(self._dispatch_isolated(a, result) for a in actions))
        return result

    async def execute_chart_actions_sequentially(self, actions: list[Action]) -> BatchResult:
        """Execute actions one at a time, each awaited before the next starts."""
        result = BatchResult()
        for action in actions:
            await self._dispatch_isolated(action, result)
        return result

    async def screenshot_chart(self) -> str:
        """Capture a screenshot of the current chart."""
        return await self.screenshot_service.capture_chart_screenshot()

    # -- state snapshot ------------------------------------------------------

    def update_chart_state(
        self,
        timeframe: Optional[str] = None,
        chart_type: Optional[str] = None,
        indicators: Optional[list[IndicatorStackItem]] = None,
    ) -> None:
        """Merge a partial update reported by the chart view."""
        self._state.merge(timeframe=timeframe, chart_type=chart_type, indicators=indicators)

    def get_chart_state_snapshot(self) -> ChartStateSnapshot:
        return self._state.copy()
