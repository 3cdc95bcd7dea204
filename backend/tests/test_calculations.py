"""Tests for shared indicator math helpers."""

import numpy as np
import pytest

from taengine.services.indicators.calculations import (
    ema,
    last_value,
    mean,
    money_flow_volume,
    rolling_highest,
    rolling_lowest,
    sma,
    std_dev,
    to_arrays,
    true_range,
    wilder_smooth,
)

from factories import make_candles


class TestStatistics:
    """Tests for mean / std_dev."""

    def test_mean_empty_is_zero(self):
        assert mean(np.array([])) == 0.0

    def test_std_dev_is_population(self):
        """Population std-dev divides by N."""
        assert std_dev(np.array([2.0, 4.0, 4.0, 4.0, 5.0, 5.0, 7.0, 9.0])) == pytest.approx(2.0)


class TestMovingAverages:
    """Tests for sma / ema / wilder_smooth."""

    def test_sma_zero_before_warmup(self):
        result = sma(np.array([1.0, 2.0, 3.0, 4.0, 5.0]), 3)
        assert result.tolist() == pytest.approx([0.0, 0.0, 2.0, 3.0, 4.0])

    def test_sma_short_input_all_zero(self):
        assert sma(np.array([1.0, 2.0]), 3).tolist() == [0.0, 0.0]

    def test_ema_seeded_with_sma(self):
        """EMA starts at the SMA of the first window then uses 2/(p+1)."""
        result = ema(np.array([1.0, 2.0, 3.0, 4.0]), 3)
        assert result[2] == pytest.approx(2.0)
        assert result[3] == pytest.approx(2.0 + (4.0 - 2.0) * 0.5)

    def test_wilder_smooth(self):
        result = wilder_smooth(np.array([2.0, 4.0, 6.0, 8.0]), 2)
        assert result[0] == 0.0
        assert result[1] == pytest.approx(3.0)
        assert result[2] == pytest.approx(3.0 + (6.0 - 3.0) / 2)
        assert result[3] == pytest.approx(4.5 + (8.0 - 4.5) / 2)


class TestPriceTransforms:
    """Tests for true_range and rolling extremes."""

    def test_true_range_uses_previous_close(self):
        highs = np.array([11.0, 15.0])
        lows = np.array([9.0, 13.0])
        closes = np.array([10.0, 14.0])
        tr = true_range(highs, lows, closes)
        assert tr[0] == pytest.approx(2.0)
        assert tr[1] == pytest.approx(5.0)  # gap up: high - previous close

    def test_rolling_extremes(self):
        data = np.array([3.0, 1.0, 4.0, 1.0, 5.0])
        assert rolling_highest(data, 2).tolist() == [0.0, 3.0, 4.0, 4.0, 5.0]
        assert rolling_lowest(data, 2).tolist() == [0.0, 1.0, 1.0, 1.0, 1.0]

    def test_money_flow_volume_zero_range(self):
        """Zero-range bars contribute nothing."""
        result = money_flow_volume(
            np.array([10.0]), np.array([10.0]), np.array([10.0]), np.array([500.0])
        )
        assert result[0] == 0.0


class TestConversion:
    """Tests for candle to array conversion."""

    def test_to_arrays(self):
        candles = make_candles([10.0, 11.0, 12.0], volumes=[1, 2, 3])
        data = to_arrays(candles)
        assert len(data) == 3
        assert data.closes.tolist() == [10.0, 11.0, 12.0]
        assert data.highs.tolist() == [10.5, 11.5, 12.5]
        assert data.volumes.tolist() == [1.0, 2.0, 3.0]

    def test_last_value(self):
        assert last_value(np.array([1.0, 2.0])) == 2.0
        assert last_value(np.array([])) is None
