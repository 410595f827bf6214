"""
Test fixtures and utilities for probe annotation tests.

Provides fake timing, mock collaborators and ready-made surfaces.
"""

import pytest
import numpy as np
from unittest.mock import AsyncMock, Mock


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, now: float = 100.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


class FakeTimer:
    def __init__(self, interval, function):
        self.interval = interval
        self.function = function
        self.cancelled = False
        self.fired = False

    def cancel(self) -> None:
        self.cancelled = True

    def fire(self) -> None:
        assert not self.cancelled, "cancelled timers must not fire"
        self.fired = True
        self.function()


class FakeTimerFactory:
    def __init__(self):
        self.timers = []

    def __call__(self, interval, function):
        timer = FakeTimer(interval, function)
        self.timers.append(timer)
        return timer

    @property
    def active(self):
        return [t for t in self.timers if not t.cancelled and not t.fired]


class IdentityTransform:
    """Canvas transform where canvas and image space coincide."""

    def pixel_to_canvas(self, surface, point):
        return point

    def canvas_to_pixel(self, surface, point):
        return point


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def fake_timers():
    return FakeTimerFactory()


@pytest.fixture
def transform():
    return IdentityTransform()


@pytest.fixture
def mock_pixel_access():
    """Pixel access returning recognizable values."""
    pixel_access = Mock()
    pixel_access.get_stored_pixels = Mock(return_value=[42])
    pixel_access.get_rgb_pixels = Mock(return_value=[1, 2, 3, 255])
    return pixel_access


@pytest.fixture
def estimator_factory():
    """Build estimators resolving immediately with a given description."""
    return make_estimator


@pytest.fixture
def mock_estimator():
    """Estimator resolving immediately with a fixed description."""
    return make_estimator()


@pytest.fixture
def grayscale_image():
    """A 512x512 image of stored values."""
    pixels = np.zeros((512, 512), dtype=np.uint16)
    pixels[10, 10] = 1234
    return pixels


@pytest.fixture
def color_image():
    """A small BGR image."""
    pixels = np.zeros((20, 30, 3), dtype=np.uint8)
    pixels[5, 7] = (10, 20, 30)
    return pixels


def make_estimator(description: str = "0.42 probability"):
    from probe_annotation.core.risk import RiskResult

    estimator = Mock()
    estimator.estimate = AsyncMock(
        return_value=RiskResult(description=description, raw={"description": description})
    )
    return estimator


@pytest.fixture
def store():
    from probe_annotation.core.annotation import ToolStateStore

    return ToolStateStore()


@pytest.fixture
def events():
    from probe_annotation.core.annotation import EventEmitter

    return EventEmitter()
