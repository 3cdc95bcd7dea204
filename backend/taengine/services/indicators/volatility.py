"""
Volatility Indicators

ATR, Bollinger Bands, Keltner Channels, Donchian Channels, Historical Volatility.
"""

import math
from typing import Sequence

import numpy as np

from taengine.core.config import settings
from taengine.schemas.market import Candle
from taengine.services.indicators.calculations import (
    ema,
    mean,
    rolling_highest,
    rolling_lowest,
    std_dev,
    to_arrays,
    true_range,
    typical_price,
    wilder_smooth,
)
from taengine.services.indicators.interface import Indicator, MultiValueIndicator


class ATR(Indicator):
    """Average True Range (SMA seed at period - 1, then Wilder)."""

    def __init__(self, period: int = 14):
        self._period = period

    @property
    def name(self) -> str:
        return f"ATR_{self._period}"

    @property
    def period(self) -> int:
        return self._period

    def calculate(self, candles: Sequence[Candle]) -> np.ndarray:
        self._check_positive(self._period)
        self._check_length(candles, self._period + 1)

        data = to_arrays(candles)
        tr = true_range(data.highs, data.lows, data.closes)
        return wilder_smooth(tr, self._period)


class BollingerBands(MultiValueIndicator):
    """
    Bollinger Bands.

    Returns: {"middle", "upper", "lower", "bandwidth", "percent_b"}
    """

    def __init__(self, period: int = 20, std_dev_multiplier: float = 2.0):
        self._period = period
        self.std_dev_multiplier = std_dev_multiplier

    @property
    def name(self) -> str:
        return f"BollingerBands_{self._period}_{self.std_dev_multiplier:.1f}"

    @property
    def period(self) -> int:
        return self._period

    def calculate(self, candles: Sequence[Candle]) -> dict[str, np.ndarray]:
        self._check_positive(self._period, self.std_dev_multiplier)
        self._check_length(candles, self._period)

        closes = to_arrays(candles).closes
        n = len(closes)
        p = self._period

        middle = np.zeros(n)
        upper = np.zeros(n)
        lower = np.zeros(n)
        bandwidth = np.zeros(n)
        percent_b = np.zeros(n)

        for i in range(p - 1, n):
            window = closes[i - p + 1 : i + 1]
            basis = mean(window)
            sd = std_dev(window)

            middle[i] = basis
            upper[i] = basis + self.std_dev_multiplier * sd
            lower[i] = basis - self.std_dev_multiplier * sd

            if middle[i] != 0:
                bandwidth[i] = (upper[i] - lower[i]) / middle[i]

            width = upper[i] - lower[i]
            if width != 0:
                percent_b[i] = (closes[i] - lower[i]) / width

        return {
            "middle": middle,
            "upper": upper,
            "lower": lower,
            "bandwidth": bandwidth,
            "percent_b": percent_b,
        }


class KeltnerChannels(MultiValueIndicator):
    """
    Keltner Channels: EMA of typical price +/- multiplier * ATR.

    Returns: {"middle", "upper", "lower"}
    """

    def __init__(self, ema_period: int = 20, atr_period: int = 10, multiplier: float = 2.0):
        self.ema_period = ema_period
        self.atr_period = atr_period
        self.multiplier = multiplier

    @property
    def name(self) -> str:
        return f"KeltnerChannels_{self.ema_period}_{self.atr_period}_{self.multiplier:.1f}"

    @property
    def period(self) -> int:
        return max(self.ema_period, self.atr_period)

    def calculate(self, candles: Sequence[Candle]) -> dict[str, np.ndarray]:
        self._check_positive(self.ema_period, self.atr_period, self.multiplier)
        self._check_length(candles, self.period + 1)

        data = to_arrays(candles)
        n = len(data)
        basis = ema(typical_price(data.highs, data.lows, data.closes), self.ema_period)
        atr_values = ATR(self.atr_period).calculate(candles)

        middle = np.zeros(n)
        upper = np.zeros(n)
        lower = np.zeros(n)

        start = self.period - 1
        middle[start:] = basis[start:]
        upper[start:] = basis[start:] + self.multiplier * atr_values[start:]
        lower[start:] = basis[start:] - self.multiplier * atr_values[start:]

        return {"middle": middle, "upper": upper, "lower": lower}


class DonchianChannels(MultiValueIndicator):
    """
    Donchian Channels.

    Returns: {"upper", "lower", "middle"}
    """

    def __init__(self, period: int = 20):
        self._period = period

    @property
    def name(self) -> str:
        return f"DonchianChannels_{self._period}"

    @property
    def period(self) -> int:
        return self._period

    def calculate(self, candles: Sequence[Candle]) -> dict[str, np.ndarray]:
        self._check_positive(self._period)
        self._check_length(candles, self._period)

        data = to_arrays(candles)
        p = self._period

        upper = rolling_highest(data.highs, p)
        lower = rolling_lowest(data.lows, p)
        middle = (upper + lower) / 2

        return {"upper": upper, "lower": lower, "middle": middle}


class HistoricalVolatility(Indicator):
    """Annualized standard deviation of log returns, in percent."""

    def __init__(self, period: int = 20, trading_days: int = None):
        self._period = period
        self.trading_days = (
            trading_days if trading_days is not None else settings.trading_days_per_year
        )

    @property
    def name(self) -> str:
        return f"HistoricalVolatility_{self._period}"

    @property
    def period(self) -> int:
        return self._period

    def calculate(self, candles: Sequence[Candle]) -> np.ndarray:
        self._check_positive(self._period, self.trading_days)
        self._check_length(candles, self._period + 1)

        closes = to_arrays(candles).closes
        n = len(closes)
        p = self._period

        log_returns = np.zeros(n)
        for i in range(1, n):
            if closes[i - 1] > 0:
                log_returns[i] = math.log(closes[i] / closes[i - 1])

        annualization = math.sqrt(self.trading_days)
        result = np.zeros(n)
        for i in range(p, n):
            result[i] = std_dev(log_returns[i - p + 1 : i + 1]) * annualization * 100

        return result
