"""
Momentum Indicators

RSI, Stochastic, CCI, Williams %R, ROC, Momentum, Ultimate Oscillator.
"""

from typing import Sequence

import numpy as np

from taengine.schemas.market import Candle
from taengine.services.indicators.calculations import (
    mean,
    rolling_highest,
    rolling_lowest,
    to_arrays,
    typical_price,
)
from taengine.services.indicators.interface import Indicator, MultiValueIndicator


# =============================================================================
# RSI
# =============================================================================


class RSI(Indicator):
    """Relative Strength Index with Wilder smoothing."""

    def __init__(self, period: int = 14):
        self._period = period

    @property
    def name(self) -> str:
        return f"RSI_{self._period}"

    @property
    def period(self) -> int:
        return self._period

    def calculate(self, candles: Sequence[Candle]) -> np.ndarray:
        self._check_positive(self._period)
        self._check_length(candles, self._period + 1)

        closes = to_arrays(candles).closes
        n = len(closes)
        p = self._period
        result = np.zeros(n)

        deltas = np.zeros(n)
        deltas[1:] = np.diff(closes)
        gains = np.where(deltas > 0, deltas, 0.0)
        losses = np.where(deltas < 0, -deltas, 0.0)

        # Seed with the simple mean of the first p changes
        avg_gain = mean(gains[1 : p + 1])
        avg_loss = mean(losses[1 : p + 1])
        result[p] = _rsi_value(avg_gain, avg_loss)

        for i in range(p + 1, n):
            avg_gain = (avg_gain * (p - 1) + gains[i]) / p
            avg_loss = (avg_loss * (p - 1) + losses[i]) / p
            result[i] = _rsi_value(avg_gain, avg_loss)

        return result


def _rsi_value(avg_gain: float, avg_loss: float) -> float:
    if avg_loss == 0:
        return 100.0
    rs = avg_gain / avg_loss
    return 100 - (100 / (1 + rs))


# =============================================================================
# STOCHASTIC
# =============================================================================


class Stochastic(MultiValueIndicator):
    """
    Stochastic Oscillator.

    Returns: {"percent_k", "percent_d"}

    Raw %K is smoothed by a `smooth`-period SMA when smooth > 1; %D is the
    `d_period` SMA of %K.
    """

    def __init__(self, k_period: int = 14, d_period: int = 3, smooth: int = 3):
        self.k_period = k_period
        self.d_period = d_period
        self.smooth = smooth

    @property
    def name(self) -> str:
        return f"Stochastic_{self.k_period}_{self.d_period}_{self.smooth}"

    @property
    def period(self) -> int:
        return self.k_period + self.d_period

    def calculate(self, candles: Sequence[Candle]) -> dict[str, np.ndarray]:
        self._check_positive(self.k_period, self.d_period)
        self._check_length(candles, self.period)

        data = to_arrays(candles)
        n = len(data)
        k = self.k_period

        highest_high = rolling_highest(data.highs, k)
        lowest_low = rolling_lowest(data.lows, k)

        raw_k = np.zeros(n)
        for i in range(k - 1, n):
            spread = highest_high[i] - lowest_low[i]
            if spread == 0:
                raw_k[i] = 50
            else:
                raw_k[i] = 100 * (data.closes[i] - lowest_low[i]) / spread

        if self.smooth > 1:
            percent_k = np.zeros(n)
            start = k + self.smooth - 2
            for i in range(start, n):
                percent_k[i] = mean(raw_k[i - self.smooth + 1 : i + 1])
        else:
            percent_k = raw_k.copy()
            start = k - 1

        percent_d = np.zeros(n)
        for i in range(start + self.d_period - 1, n):
            percent_d[i] = mean(percent_k[i - self.d_period + 1 : i + 1])

        return {"percent_k": percent_k, "percent_d": percent_d}


# =============================================================================
# CCI
# =============================================================================


class CCI(Indicator):
    """Commodity Channel Index."""

    def __init__(self, period: int = 20):
        self._period = period

    @property
    def name(self) -> str:
        return f"CCI_{self._period}"

    @property
    def period(self) -> int:
        return self._period

    def calculate(self, candles: Sequence[Candle]) -> np.ndarray:
        self._check_positive(self._period)
        self._check_length(candles, self._period)

        data = to_arrays(candles)
        tp = typical_price(data.highs, data.lows, data.closes)
        p = self._period
        result = np.zeros(len(tp))

        for i in range(p - 1, len(tp)):
            window = tp[i - p + 1 : i + 1]
            tp_sma = mean(window)
            mean_dev = mean(np.abs(window - tp_sma))
            if mean_dev != 0:
                result[i] = (tp[i] - tp_sma) / (0.015 * mean_dev)

        return result


# =============================================================================
# WILLIAMS %R
# =============================================================================


class WilliamsR(Indicator):
    """Williams %R, clamped to [-100, 0]."""

    def __init__(self, period: int = 14):
        self._period = period

    @property
    def name(self) -> str:
        return f"WilliamsR_{self._period}"

    @property
    def period(self) -> int:
        return self._period

    def calculate(self, candles: Sequence[Candle]) -> np.ndarray:
        self._check_positive(self._period)
        self._check_length(candles, self._period)

        data = to_arrays(candles)
        p = self._period
        highest_high = rolling_highest(data.highs, p)
        lowest_low = rolling_lowest(data.lows, p)
        result = np.zeros(len(data))

        for i in range(p - 1, len(data)):
            spread = highest_high[i] - lowest_low[i]
            if spread == 0:
                result[i] = -50
            else:
                value = -100 * (highest_high[i] - data.closes[i]) / spread
                result[i] = min(0.0, max(-100.0, value))

        return result


# =============================================================================
# ROC / MOMENTUM
# =============================================================================


class ROC(Indicator):
    """Rate of Change in percent."""

    def __init__(self, period: int = 12):
        self._period = period

    @property
    def name(self) -> str:
        return f"ROC_{self._period}"

    @property
    def period(self) -> int:
        return self._period

    def calculate(self, candles: Sequence[Candle]) -> np.ndarray:
        self._check_positive(self._period)
        self._check_length(candles, self._period + 1)

        closes = to_arrays(candles).closes
        p = self._period
        result = np.zeros(len(closes))

        for i in range(p, len(closes)):
            reference = closes[i - p]
            if reference != 0:
                result[i] = (closes[i] - reference) / reference * 100

        return result


class Momentum(Indicator):
    """Absolute price change over `period` bars."""

    def __init__(self, period: int = 10):
        self._period = period

    @property
    def name(self) -> str:
        return f"Momentum_{self._period}"

    @property
    def period(self) -> int:
        return self._period

    def calculate(self, candles: Sequence[Candle]) -> np.ndarray:
        self._check_positive(self._period)
        self._check_length(candles, self._period + 1)

        closes = to_arrays(candles).closes
        p = self._period
        result = np.zeros(len(closes))
        result[p:] = closes[p:] - closes[:-p]
        return result


# =============================================================================
# ULTIMATE OSCILLATOR
# =============================================================================


class UltimateOscillator(Indicator):
    """
    Ultimate Oscillator.

    Weighted blend (4:2:1) of buying-pressure / true-range ratios over three
    windows. Warm-up follows the longest of the three periods.
    """

    def __init__(self, period1: int = 7, period2: int = 14, period3: int = 28):
        self.period1 = period1
        self.period2 = period2
        self.period3 = period3

    @property
    def name(self) -> str:
        return f"UltimateOscillator_{self.period1}_{self.period2}_{self.period3}"

    @property
    def period(self) -> int:
        return max(self.period1, self.period2, self.period3)

    def calculate(self, candles: Sequence[Candle]) -> np.ndarray:
        self._check_positive(self.period1, self.period2, self.period3)
        longest = self.period
        self._check_length(candles, longest + 1)

        data = to_arrays(candles)
        n = len(data)
        bp = np.zeros(n)
        tr = np.zeros(n)

        for i in range(1, n):
            true_low = min(data.lows[i], data.closes[i - 1])
            true_high = max(data.highs[i], data.closes[i - 1])
            bp[i] = data.closes[i] - true_low
            tr[i] = true_high - true_low

        result = np.zeros(n)
        for i in range(longest, n):
            avg1 = _pressure_ratio(bp, tr, i, self.period1)
            avg2 = _pressure_ratio(bp, tr, i, self.period2)
            avg3 = _pressure_ratio(bp, tr, i, self.period3)
            result[i] = 100 * (4 * avg1 + 2 * avg2 + avg3) / 7

        return result


def _pressure_ratio(bp: np.ndarray, tr: np.ndarray, end: int, period: int) -> float:
    tr_sum = np.sum(tr[end - period + 1 : end + 1])
    if tr_sum == 0:
        return 0.0
    return float(np.sum(bp[end - period + 1 : end + 1]) / tr_sum)
