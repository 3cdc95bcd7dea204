"""Tests for swing point detection and price equality."""

import pytest

from taengine.services.base import InvalidPeriodError
from taengine.services.patterns.swing_points import (
    SwingPointDetector,
    prices_equal,
    swing_highs,
    swing_lows,
)

from factories import candles_from_ranges, flat_candles, make_candles, zigzag


class TestPricesEqual:
    """Tests for relative price equality."""

    def test_within_tolerance(self):
        assert prices_equal(100.0, 101.9, 0.02)
        assert prices_equal(100.0, 102.0, 0.02)

    def test_outside_tolerance(self):
        assert not prices_equal(100.0, 102.5, 0.02)

    def test_zero_reference(self):
        assert prices_equal(0.0, 0.0, 0.02)
        assert not prices_equal(0.0, 0.01, 0.02)


class TestSwingPointDetector:
    """Tests for SwingPointDetector."""

    def test_default_strength_from_settings(self):
        assert SwingPointDetector().strength == 3

    def test_invalid_strength(self):
        with pytest.raises(InvalidPeriodError):
            SwingPointDetector(0)

    def test_single_peak(self):
        candles = make_candles([1.0, 2.0, 3.0, 4.0, 3.0, 2.0, 1.0])
        swings = SwingPointDetector(3).find(candles)

        assert len(swings) == 1
        assert swings[0].index == 3
        assert swings[0].price == 4.5
        assert swings[0].is_high is True
        assert swings[0].strength == 3

    def test_equal_neighbour_disqualifies(self):
        """A plateau has no strict extreme."""
        candles = make_candles([1.0, 2.0, 3.0, 4.0, 4.0, 3.0, 2.0, 1.0])
        assert SwingPointDetector(3).find(candles) == []

    def test_flat_series_has_no_swings(self):
        assert SwingPointDetector(2).find(flat_candles(30)) == []

    def test_short_series(self):
        assert SwingPointDetector(3).find(make_candles([1.0, 5.0, 1.0])) == []

    def test_outside_bar_reports_high_before_low(self):
        candles = candles_from_ranges(
            [10.0, 10.0, 10.0, 20.0, 10.0, 10.0, 10.0],
            [5.0, 5.0, 5.0, 1.0, 5.0, 5.0, 5.0],
        )
        swings = SwingPointDetector(3).find(candles)

        assert [(s.index, s.is_high) for s in swings] == [(3, True), (3, False)]
        assert swings[0].price == 20.0
        assert swings[1].price == 1.0

    def test_zigzag_alternates(self):
        candles = make_candles(zigzag([100, 120, 105, 120, 100]))
        swings = SwingPointDetector(3).find(candles)

        assert [(s.index, s.is_high) for s in swings] == [(6, True), (12, False), (18, True)]
        assert [s.index for s in swing_highs(swings)] == [6, 18]
        assert [s.index for s in swing_lows(swings)] == [12]

    def test_indices_ascending(self, random_candles):
        swings = SwingPointDetector(2).find(random_candles)
        indices = [s.index for s in swings]
        assert indices == sorted(indices)
        assert all(2 <= i < len(random_candles) - 2 for i in indices)
