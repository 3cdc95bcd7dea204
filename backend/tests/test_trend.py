"""Tests for trend indicators."""

import numpy as np
import pytest

from taengine.services.base import InsufficientDataError, InvalidPeriodError
from taengine.services.indicators.trend import (
    ADX,
    EMA,
    MACD,
    SMA,
    IchimokuCloud,
    ParabolicSAR,
    SuperTrend,
)
from taengine.services.indicators.volatility import DonchianChannels

from factories import flat_candles, make_candles, random_walk


class TestMovingAverageIndicators:
    """Tests for SMA / EMA wrappers."""

    def test_sma(self):
        candles = make_candles([1.0, 2.0, 3.0, 4.0, 5.0])
        assert SMA(3).calculate(candles).tolist() == pytest.approx([0.0, 0.0, 2.0, 3.0, 4.0])

    def test_names(self):
        assert SMA(20).name == "SMA_20"
        assert EMA(50).name == "EMA_50"

    def test_ema_insufficient_data(self):
        with pytest.raises(InsufficientDataError):
            EMA(20).calculate(flat_candles(19))


class TestMACD:
    """Tests for MACD."""

    def test_period(self):
        assert MACD(12, 26, 9).period == 34

    def test_flat_series_is_zero(self):
        result = MACD().calculate(flat_candles(50))
        assert set(result) == {"macd", "signal", "histogram"}
        for series in result.values():
            assert np.all(np.abs(series) < 1e-9)

    def test_rising_series_positive(self):
        candles = make_candles([100 + i for i in range(60)])
        result = MACD().calculate(candles)
        assert result["macd"][-1] > 0
        assert result["macd"][:25].tolist() == [0.0] * 25

    def test_histogram_is_macd_minus_signal(self, random_candles):
        result = MACD().calculate(random_candles)
        assert result["histogram"][-1] == pytest.approx(
            result["macd"][-1] - result["signal"][-1]
        )

    def test_insufficient_data(self):
        with pytest.raises(InsufficientDataError):
            MACD().calculate(flat_candles(33))


class TestADX:
    """Tests for the Average Directional Index."""

    def test_steady_uptrend(self, rising_candles):
        """Only upward directional movement drives ADX to 100."""
        result = ADX(14).calculate(rising_candles)
        assert result["plus_di"][-1] > 0
        assert result["minus_di"][-1] == 0.0
        assert result["adx"][-1] == pytest.approx(100.0)

    def test_requires_twice_period(self):
        with pytest.raises(InsufficientDataError):
            ADX(14).calculate(flat_candles(27))

    def test_flat_series_is_zero(self):
        result = ADX(14).calculate(flat_candles(40))
        assert np.all(result["adx"] == 0.0)


class TestSuperTrend:
    """Tests for SuperTrend."""

    def test_uptrend_turns_bullish(self, rising_candles):
        result = SuperTrend(10, 3.0).calculate(rising_candles)
        direction = result["direction"]

        assert np.all(direction[:9] == 0.0)
        assert direction[9] == -1
        assert set(direction[9:]) <= {-1.0, 1.0}
        assert direction[-1] == 1
        assert result["supertrend"][-1] == result["lower_band"][-1]

    def test_requires_atr_period_plus_one(self):
        with pytest.raises(InsufficientDataError):
            SuperTrend(10, 3.0).calculate(flat_candles(10))

    def test_invalid_multiplier(self):
        with pytest.raises(InvalidPeriodError):
            SuperTrend(10, -1.0).calculate(flat_candles(20))


class TestParabolicSAR:
    """Tests for Parabolic SAR."""

    def test_uptrend_stays_below_lows(self, rising_candles):
        result = ParabolicSAR().calculate(rising_candles)
        lows = np.array([c.low for c in rising_candles])

        assert np.all(result["direction"] == 1)
        assert np.all(result["sar"][1:] < lows[1:])

    def test_downtrend_direction(self):
        candles = make_candles([140 - i for i in range(30)])
        result = ParabolicSAR().calculate(candles)
        assert np.all(result["direction"] == -1)

    def test_insufficient_data(self):
        with pytest.raises(InsufficientDataError):
            ParabolicSAR().calculate(flat_candles(1))


class TestIchimokuCloud:
    """Tests for the Ichimoku Cloud."""

    def test_flat_series(self):
        result = IchimokuCloud().calculate(flat_candles(80))

        assert np.all(result["tenkan_sen"][:8] == 0.0)
        assert np.all(result["tenkan_sen"][8:] == 100.0)
        assert np.all(result["senkou_span_a"][:51] == 0.0)
        assert np.all(result["senkou_span_a"][51:] == 100.0)
        assert np.all(result["senkou_span_b"][:77] == 0.0)
        assert np.all(result["senkou_span_b"][77:] == 100.0)

    def test_chikou_span_is_shifted_close(self):
        candles = random_walk(80)
        closes = np.array([c.close for c in candles])
        result = IchimokuCloud().calculate(candles)

        assert result["chikou_span"][:54].tolist() == closes[26:].tolist()
        assert np.all(result["chikou_span"][54:] == 0.0)

    def test_output_lengths(self):
        result = IchimokuCloud().calculate(flat_candles(60))
        assert all(len(series) == 60 for series in result.values())

    def test_tenkan_matches_donchian_middle(self):
        """Tenkan-sen is the midpoint of the 9-bar high/low window."""
        candles = random_walk(60)
        tenkan = IchimokuCloud().calculate(candles)["tenkan_sen"]
        middle = DonchianChannels(9).calculate(candles)["middle"]
        assert np.allclose(tenkan, middle)

    def test_insufficient_data(self):
        with pytest.raises(InsufficientDataError):
            IchimokuCloud().calculate(flat_candles(51))
