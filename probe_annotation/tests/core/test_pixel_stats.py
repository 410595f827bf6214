"""
Tests for PixelStatsCache.
"""

import threading

import pytest
from unittest.mock import Mock

from probe_annotation.core.annotation import (
    EventEmitter,
    EventType,
    ImageInfo,
    Marker,
    PixelStats,
    PixelStatsCache,
    Point,
)


@pytest.fixture
def image():
    return ImageInfo(image_id="img", rows=512, columns=512)


@pytest.fixture
def stats_cache(mock_pixel_access, fake_clock, fake_timers):
    return PixelStatsCache(
        mock_pixel_access,
        throttle_seconds=0.11,
        clock=fake_clock,
        timer_factory=fake_timers,
    )


class TestComputeStats:
    @pytest.mark.parametrize(
        "anchor,expected",
        [
            (Point(10.0, 10.0), (10, 10)),
            (Point(10.4, 20.6), (10, 21)),
            (Point(0.0, 0.0), (0, 0)),
            (Point(511.4, 511.4), (511, 511)),
        ],
    )
    def test_inside_bounds(self, stats_cache, image, anchor, expected):
        marker = Marker(anchor=anchor)

        stats = stats_cache.compute_stats(image, "surface", marker)

        assert (stats.x, stats.y) == expected
        assert stats.stored_pixels == [42]
        assert marker.stats is stats
        assert marker.invalidated is False

    @pytest.mark.parametrize(
        "anchor",
        [Point(-5.0, -5.0), Point(512.0, 10.0), Point(10.0, 511.6), Point(-0.6, 3.0)],
    )
    def test_outside_bounds(self, stats_cache, image, mock_pixel_access, anchor):
        marker = Marker(anchor=anchor)

        stats = stats_cache.compute_stats(image, "surface", marker)

        assert stats.is_empty
        assert stats.to_dict() == {}
        assert stats.stored_pixels is None
        assert marker.invalidated is False
        mock_pixel_access.get_stored_pixels.assert_not_called()
        mock_pixel_access.get_rgb_pixels.assert_not_called()

    def test_grayscale_reads_stored_pixels(self, stats_cache, image, mock_pixel_access):
        stats_cache.compute_stats(image, "surface", Marker(anchor=Point(3.0, 4.0)))

        mock_pixel_access.get_stored_pixels.assert_called_once_with("surface", 3, 4, 1, 1)
        mock_pixel_access.get_rgb_pixels.assert_not_called()

    def test_color_reads_rgb_pixels(self, stats_cache, mock_pixel_access):
        image = ImageInfo(image_id="rgb", rows=20, columns=30, color=True)

        stats = stats_cache.compute_stats(image, "surface", Marker(anchor=Point(7.0, 5.0)))

        mock_pixel_access.get_rgb_pixels.assert_called_once_with("surface", 7, 5, 1, 1)
        mock_pixel_access.get_stored_pixels.assert_not_called()
        assert stats.stored_pixels == [1, 2, 3, 255]

    def test_emits_stats_updated(self, mock_pixel_access, image):
        events = EventEmitter()
        received = []
        events.on(EventType.STATS_UPDATED, received.append)
        cache = PixelStatsCache(mock_pixel_access, events=events)

        marker = Marker(anchor=Point(1.0, 1.0))
        cache.compute_stats(image, "surface", marker)

        assert len(received) == 1
        assert received[0].data["marker"] is marker


class TestRefresh:
    def test_first_refresh_is_direct(self, stats_cache, image, fake_timers):
        marker = Marker(anchor=Point(10.0, 10.0))

        assert stats_cache.refresh(image, "surface", marker)

        assert marker.stats.x == 10
        assert not marker.invalidated
        assert fake_timers.timers == []

    def test_refresh_skips_valid_marker(self, stats_cache, image, mock_pixel_access):
        marker = Marker(anchor=Point(10.0, 10.0), invalidated=False)

        assert not stats_cache.refresh(image, "surface", marker)
        mock_pixel_access.get_stored_pixels.assert_not_called()

    def test_repeated_invalidation_is_throttled(
        self, stats_cache, image, mock_pixel_access, fake_clock, fake_timers
    ):
        marker = Marker(anchor=Point(10.0, 10.0))
        stats_cache.refresh(image, "surface", marker)
        assert mock_pixel_access.get_stored_pixels.call_count == 1

        # Cached stats exist: the throttled path runs on the leading edge
        marker.invalidated = True
        fake_clock.advance(0.5)
        assert stats_cache.refresh(image, "surface", marker)
        assert mock_pixel_access.get_stored_pixels.call_count == 2

        # Frames inside the window are coalesced into one trailing run
        for _ in range(5):
            marker.invalidated = True
            fake_clock.advance(0.01)
            assert not stats_cache.refresh(image, "surface", marker)
        assert mock_pixel_access.get_stored_pixels.call_count == 2
        assert len(fake_timers.active) == 1
        assert marker.invalidated

        fake_clock.advance(0.07)
        fake_timers.active[0].fire()

        assert mock_pixel_access.get_stored_pixels.call_count == 3
        assert not marker.invalidated

    def test_throttles_are_per_marker(self, stats_cache, image, mock_pixel_access):
        first = Marker(anchor=Point(1.0, 1.0), stats=PixelStats(1, 1, [0]))
        second = Marker(anchor=Point(2.0, 2.0), stats=PixelStats(2, 2, [0]))

        stats_cache.refresh(image, "surface", first)
        stats_cache.refresh(image, "surface", second)

        assert not first.invalidated
        assert not second.invalidated
        assert mock_pixel_access.get_stored_pixels.call_count == 2

    def test_flush_runs_pending(self, stats_cache, image, mock_pixel_access, fake_clock):
        marker = Marker(anchor=Point(10.0, 10.0), stats=PixelStats(10, 10, [0]))
        stats_cache.refresh(image, "surface", marker)
        marker.invalidated = True
        fake_clock.advance(0.01)
        stats_cache.refresh(image, "surface", marker)
        assert marker.invalidated

        stats_cache.flush()

        assert not marker.invalidated
        assert mock_pixel_access.get_stored_pixels.call_count == 2

    def test_trailing_run_requests_redraw(
        self, mock_pixel_access, image, fake_clock, fake_timers
    ):
        events = EventEmitter()
        redraws = []
        events.on(EventType.REDRAW_REQUESTED, redraws.append)
        cache = PixelStatsCache(
            mock_pixel_access,
            throttle_seconds=0.11,
            events=events,
            clock=fake_clock,
            timer_factory=fake_timers,
        )
        marker = Marker(anchor=Point(10.0, 10.0), stats=PixelStats(10, 10, [0]))

        # Leading run happens inside the frame being drawn
        cache.refresh(image, "surface", marker)
        assert redraws == []

        marker.invalidated = True
        fake_clock.advance(0.01)
        cache.refresh(image, "surface", marker)
        fake_clock.advance(0.1)
        fake_timers.active[0].fire()

        assert not marker.invalidated
        assert len(redraws) == 1
        assert redraws[0].data["surface"] == "surface"

    def test_without_event_loop_stays_on_caller_thread(
        self, image, fake_clock
    ):
        threads = []
        pixel_access = Mock()
        pixel_access.get_stored_pixels.side_effect = lambda *args: threads.append(
            threading.current_thread()
        ) or [7]
        cache = PixelStatsCache(pixel_access, throttle_seconds=0.11, clock=fake_clock)
        marker = Marker(anchor=Point(10.0, 10.0))

        # Direct, then leading, then a coalesced call inside the window
        cache.refresh(image, "surface", marker)
        marker.invalidated = True
        cache.refresh(image, "surface", marker)
        marker.invalidated = True
        fake_clock.advance(0.05)
        assert not cache.refresh(image, "surface", marker)
        assert marker.invalidated
        assert len(threads) == 2

        # The next frame after the window runs the pending recompute
        fake_clock.advance(0.1)
        assert cache.refresh(image, "surface", marker)

        assert len(threads) == 3
        assert all(thread is threading.main_thread() for thread in threads)


def test_pixel_access_errors_propagate(image):
    pixel_access = Mock()
    pixel_access.get_stored_pixels.side_effect = IndexError("out of range")
    cache = PixelStatsCache(pixel_access)

    with pytest.raises(IndexError):
        cache.compute_stats(image, "surface", Marker(anchor=Point(1.0, 1.0)))
