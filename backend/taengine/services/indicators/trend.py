"""
Trend Indicators

SMA, EMA, MACD, ADX, SuperTrend, Parabolic SAR, Ichimoku Cloud.
"""

from typing import Sequence

import numpy as np

from taengine.schemas.market import Candle
from taengine.services.indicators.calculations import (
    ema,
    rolling_highest,
    rolling_lowest,
    sma,
    to_arrays,
    true_range,
    wilder_smooth,
)
from taengine.services.indicators.interface import Indicator, MultiValueIndicator
from taengine.services.indicators.volatility import ATR


# =============================================================================
# MOVING AVERAGES
# =============================================================================


class SMA(Indicator):
    """Simple Moving Average of closes."""

    def __init__(self, period: int = 20):
        self._period = period

    @property
    def name(self) -> str:
        return f"SMA_{self._period}"

    @property
    def period(self) -> int:
        return self._period

    def calculate(self, candles: Sequence[Candle]) -> np.ndarray:
        self._check_positive(self._period)
        self._check_length(candles, self._period)
        return sma(to_arrays(candles).closes, self._period)


class EMA(Indicator):
    """Exponential Moving Average of closes."""

    def __init__(self, period: int = 20):
        self._period = period

    @property
    def name(self) -> str:
        return f"EMA_{self._period}"

    @property
    def period(self) -> int:
        return self._period

    def calculate(self, candles: Sequence[Candle]) -> np.ndarray:
        self._check_positive(self._period)
        self._check_length(candles, self._period)
        return ema(to_arrays(candles).closes, self._period)


# =============================================================================
# MACD
# =============================================================================


class MACD(MultiValueIndicator):
    """
    MACD (Moving Average Convergence Divergence).

    Returns: {"macd", "signal", "histogram"}
    """

    def __init__(self, fast_period: int = 12, slow_period: int = 26, signal_period: int = 9):
        self.fast_period = fast_period
        self.slow_period = slow_period
        self.signal_period = signal_period

    @property
    def name(self) -> str:
        return f"MACD_{self.fast_period}_{self.slow_period}_{self.signal_period}"

    @property
    def period(self) -> int:
        return self.slow_period + self.signal_period - 1

    def calculate(self, candles: Sequence[Candle]) -> dict[str, np.ndarray]:
        self._check_positive(self.fast_period, self.slow_period, self.signal_period)
        self._check_length(candles, self.period)

        closes = to_arrays(candles).closes
        n = len(closes)
        fast_ema = ema(closes, self.fast_period)
        slow_ema = ema(closes, self.slow_period)

        start = self.slow_period - 1
        macd_line = np.zeros(n)
        macd_line[start:] = fast_ema[start:] - slow_ema[start:]

        # Signal line is EMA of the valid part of the MACD line
        signal_line = np.zeros(n)
        signal_line[start:] = ema(macd_line[start:], self.signal_period)

        histogram = np.zeros(n)
        hist_start = self.period - 1
        histogram[hist_start:] = macd_line[hist_start:] - signal_line[hist_start:]

        return {"macd": macd_line, "signal": signal_line, "histogram": histogram}


# =============================================================================
# ADX
# =============================================================================


class ADX(MultiValueIndicator):
    """
    Average Directional Index.

    Returns: {"adx", "plus_di", "minus_di"}
    """

    def __init__(self, period: int = 14):
        self._period = period

    @property
    def name(self) -> str:
        return f"ADX_{self._period}"

    @property
    def period(self) -> int:
        return self._period * 2

    def calculate(self, candles: Sequence[Candle]) -> dict[str, np.ndarray]:
        self._check_positive(self._period)
        self._check_length(candles, self.period)

        data = to_arrays(candles)
        n = len(data)
        p = self._period

        plus_dm = np.zeros(n)
        minus_dm = np.zeros(n)
        for i in range(1, n):
            up_move = data.highs[i] - data.highs[i - 1]
            down_move = data.lows[i - 1] - data.lows[i]

            if up_move > down_move and up_move > 0:
                plus_dm[i] = up_move
            if down_move > up_move and down_move > 0:
                minus_dm[i] = down_move

        tr = true_range(data.highs, data.lows, data.closes)
        tr[0] = 0.0

        smoothed_plus_dm = wilder_smooth(plus_dm, p)
        smoothed_minus_dm = wilder_smooth(minus_dm, p)
        smoothed_tr = wilder_smooth(tr, p)

        plus_di = np.zeros(n)
        minus_di = np.zeros(n)
        dx = np.zeros(n)

        for i in range(p, n):
            if smoothed_tr[i] != 0:
                plus_di[i] = 100 * smoothed_plus_dm[i] / smoothed_tr[i]
                minus_di[i] = 100 * smoothed_minus_dm[i] / smoothed_tr[i]
            di_sum = plus_di[i] + minus_di[i]
            if di_sum != 0:
                dx[i] = 100 * abs(plus_di[i] - minus_di[i]) / di_sum

        # ADX is smoothed DX
        adx_result = np.zeros(n)
        adx_result[p:] = wilder_smooth(dx[p:], p)

        return {"adx": adx_result, "plus_di": plus_di, "minus_di": minus_di}


# =============================================================================
# SUPERTREND
# =============================================================================


class SuperTrend(MultiValueIndicator):
    """
    SuperTrend.

    Returns: {"supertrend", "direction", "upper_band", "lower_band"}
    direction is +1 (bullish) or -1 (bearish).
    """

    def __init__(self, atr_period: int = 10, multiplier: float = 3.0):
        self.atr_period = atr_period
        self.multiplier = multiplier

    @property
    def name(self) -> str:
        return f"SuperTrend_{self.atr_period}_{self.multiplier:.1f}"

    @property
    def period(self) -> int:
        return self.atr_period

    def calculate(self, candles: Sequence[Candle]) -> dict[str, np.ndarray]:
        self._check_positive(self.atr_period, self.multiplier)
        self._check_length(candles, self.atr_period + 1)

        data = to_arrays(candles)
        n = len(data)
        atr_values = ATR(self.atr_period).calculate(candles)

        supertrend = np.zeros(n)
        direction = np.zeros(n)
        upper_band = np.zeros(n)
        lower_band = np.zeros(n)

        start = self.atr_period - 1
        for i in range(start, n):
            hl2 = (data.highs[i] + data.lows[i]) / 2
            upper_band[i] = hl2 + self.multiplier * atr_values[i]
            lower_band[i] = hl2 - self.multiplier * atr_values[i]

            if i == start:
                supertrend[i] = upper_band[i]
                direction[i] = -1
                continue

            # Bands only tighten while price stays inside them
            if lower_band[i] < lower_band[i - 1] and data.closes[i - 1] > lower_band[i - 1]:
                lower_band[i] = lower_band[i - 1]
            if upper_band[i] > upper_band[i - 1] and data.closes[i - 1] < upper_band[i - 1]:
                upper_band[i] = upper_band[i - 1]

            if direction[i - 1] < 0:
                bullish = data.closes[i] > upper_band[i]
            else:
                bullish = data.closes[i] >= lower_band[i]

            direction[i] = 1 if bullish else -1
            supertrend[i] = lower_band[i] if bullish else upper_band[i]

        return {
            "supertrend": supertrend,
            "direction": direction,
            "upper_band": upper_band,
            "lower_band": lower_band,
        }


# =============================================================================
# PARABOLIC SAR
# =============================================================================


class ParabolicSAR(MultiValueIndicator):
    """
    Parabolic Stop and Reverse.

    Returns: {"sar", "direction"}
    """

    def __init__(self, af_start: float = 0.02, af_step: float = 0.02, af_max: float = 0.2):
        self.af_start = af_start
        self.af_step = af_step
        self.af_max = af_max

    @property
    def name(self) -> str:
        return "ParabolicSAR"

    @property
    def period(self) -> int:
        return 2

    def calculate(self, candles: Sequence[Candle]) -> dict[str, np.ndarray]:
        self._check_positive(self.af_start, self.af_step, self.af_max)
        self._check_length(candles, 2)

        data = to_arrays(candles)
        highs, lows = data.highs, data.lows
        n = len(data)
        sar = np.zeros(n)
        direction = np.zeros(n)

        is_uptrend = data.closes[1] > data.closes[0]
        af = self.af_start

        if is_uptrend:
            sar[0] = lows[0]
            extreme = highs[0]
            direction[0] = 1
        else:
            sar[0] = highs[0]
            extreme = lows[0]
            direction[0] = -1

        for i in range(1, n):
            sar[i] = sar[i - 1] + af * (extreme - sar[i - 1])

            if is_uptrend:
                sar[i] = min(sar[i], lows[i - 1])
                if i >= 2:
                    sar[i] = min(sar[i], lows[i - 2])

                if lows[i] < sar[i]:
                    is_uptrend = False
                    sar[i] = extreme
                    extreme = lows[i]
                    af = self.af_start
                elif highs[i] > extreme:
                    extreme = highs[i]
                    af = min(af + self.af_step, self.af_max)
            else:
                sar[i] = max(sar[i], highs[i - 1])
                if i >= 2:
                    sar[i] = max(sar[i], highs[i - 2])

                if highs[i] > sar[i]:
                    is_uptrend = True
                    sar[i] = extreme
                    extreme = highs[i]
                    af = self.af_start
                elif lows[i] < extreme:
                    extreme = lows[i]
                    af = min(af + self.af_step, self.af_max)

            direction[i] = 1 if is_uptrend else -1

        return {"sar": sar, "direction": direction}


# =============================================================================
# ICHIMOKU
# =============================================================================


class IchimokuCloud(MultiValueIndicator):
    """
    Ichimoku Cloud.

    Returns: {"tenkan_sen", "kijun_sen", "senkou_span_a", "senkou_span_b",
    "chikou_span"}

    Leading spans are shifted forward by `displacement` and trimmed to the
    input length. The lagging span holds close[i + displacement] at i, so it
    is the one output that reads later bars.
    """

    def __init__(
        self,
        tenkan_period: int = 9,
        kijun_period: int = 26,
        senkou_b_period: int = 52,
        displacement: int = 26,
    ):
        self.tenkan_period = tenkan_period
        self.kijun_period = kijun_period
        self.senkou_b_period = senkou_b_period
        self.displacement = displacement

    @property
    def name(self) -> str:
        return "IchimokuCloud"

    @property
    def period(self) -> int:
        return self.senkou_b_period + self.displacement

    def calculate(self, candles: Sequence[Candle]) -> dict[str, np.ndarray]:
        self._check_positive(
            self.tenkan_period, self.kijun_period, self.senkou_b_period, self.displacement
        )
        self._check_length(candles, self.senkou_b_period)

        data = to_arrays(candles)
        n = len(data)
        shift = self.displacement

        tenkan_sen = self._midpoint(data.highs, data.lows, self.tenkan_period)
        kijun_sen = self._midpoint(data.highs, data.lows, self.kijun_period)
        span_b_raw = self._midpoint(data.highs, data.lows, self.senkou_b_period)

        senkou_span_a = np.zeros(n + shift)
        senkou_span_b = np.zeros(n + shift)
        for j in range(self.kijun_period - 1, n):
            senkou_span_a[j + shift] = (tenkan_sen[j] + kijun_sen[j]) / 2
        for j in range(self.senkou_b_period - 1, n):
            senkou_span_b[j + shift] = span_b_raw[j]

        chikou_span = np.zeros(n)
        if shift < n:
            chikou_span[: n - shift] = data.closes[shift:]

        return {
            "tenkan_sen": tenkan_sen,
            "kijun_sen": kijun_sen,
            "senkou_span_a": senkou_span_a[:n],
            "senkou_span_b": senkou_span_b[:n],
            "chikou_span": chikou_span,
        }

    @staticmethod
    def _midpoint(highs: np.ndarray, lows: np.ndarray, period: int) -> np.ndarray:
        return (rolling_highest(highs, period) + rolling_lowest(lows, period)) / 2
