"""Pytest configuration and shared fixtures."""

import asyncio
from typing import Any, Dict, Optional

import pytest

from chartpilot.chart.session import ChartSession
from chartpilot.config.defaults import BridgeParams


class RecordingBridge:
    """Chart bridge fake that records every performed action in order."""

    def __init__(self, delays: Optional[Dict[str, float]] = None):
        self.performed: list = []
        self.started: list = []
        self.delays = delays or {}

    async def perform(self, action) -> None:
        self.started.append(action)
        delay = self.delays.get(action.type)
        if delay:
            await asyncio.sleep(delay)
        self.performed.append(action)


class FailingBridge(RecordingBridge):
    """Bridge fake that raises for the configured action types."""

    def __init__(self, failing_types: tuple = ("setChartType",), **kwargs):
        super().__init__(**kwargs)
        self.failing_types = failing_types

    async def perform(self, action) -> None:
        if action.type in self.failing_types:
            raise RuntimeError(f"bridge rejected {action.type}")
        await super().perform(action)


class FakeScreenshotService:
    """Screenshot service returning numbered image references."""

    def __init__(self):
        self.calls = 0

    async def capture_chart_screenshot(self) -> str:
        self.calls += 1
        return f"screenshot-{self.calls}"


@pytest.fixture
def bridge() -> RecordingBridge:
    return RecordingBridge()


@pytest.fixture
def screenshot_service() -> FakeScreenshotService:
    return FakeScreenshotService()


@pytest.fixture
def fast_bridge_params() -> BridgeParams:
    """Short readiness poll so missing-bridge tests finish quickly."""
    return BridgeParams(wait_timeout_ms=100, poll_interval_ms=5)


@pytest.fixture
def session(bridge, screenshot_service, fast_bridge_params) -> ChartSession:
    """Chart session with a recording bridge already registered."""
    chart_session = ChartSession(
        screenshot_service=screenshot_service,
        bridge_params=fast_bridge_params,
    )
    chart_session.register_chart_bridge(bridge)
    return chart_session


@pytest.fixture
def empty_session(screenshot_service, fast_bridge_params) -> ChartSession:
    """Chart session with no bridge registered."""
    return ChartSession(screenshot_service=screenshot_service, bridge_params=fast_bridge_params)


@pytest.fixture
def sample_raw_plan() -> Dict[str, Any]:
    """Raw long plan in array form, as returned by an analysis model."""
    return {
        "side": "long",
        "entries": [100],
        "exits": [95],
    }


@pytest.fixture
def sample_scalar_plan() -> Dict[str, Any]:
    """Raw short plan in scalar form with string numbers."""
    return {
        "side": "short",
        "complexity": "advanced",
        "entry": "50.5",
        "lateEntry": 51.2,
        "stop": "53",
        "exit": 47.0,
        "lateExit": 45.5,
    }
