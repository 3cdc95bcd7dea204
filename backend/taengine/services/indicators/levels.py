"""
Price Level Calculators

Fibonacci retracement over a trailing window, and pivot points computed
from a prior period's OHLC.
"""

from abc import ABC, abstractmethod
from typing import Sequence

import numpy as np

from taengine.schemas.indicators import FibonacciLevels, PivotPoints, PivotType
from taengine.schemas.market import Candle
from taengine.services.base import InsufficientDataError, InvalidPeriodError
from taengine.services.indicators.calculations import to_arrays

FIBONACCI_RATIOS = (0.236, 0.382, 0.5, 0.618, 0.786)
FIBONACCI_EXTENSIONS = (0.272, 0.618)


# =============================================================================
# FIBONACCI RETRACEMENT
# =============================================================================


class FibonacciRetracement:
    """
    Fibonacci retracement levels for the most recent swing.

    The swing is the raw high/low extreme of the last `lookback` candles; the
    move counts as an uptrend when the low printed before the high.
    """

    name = "FibonacciRetracement"

    def __init__(self, lookback: int = 50):
        self.lookback = lookback

    @property
    def period(self) -> int:
        return self.lookback

    def calculate(self, candles: Sequence[Candle]) -> FibonacciLevels:
        if self.lookback <= 0:
            raise InvalidPeriodError(self.name, f"invalid lookback: {self.lookback}")
        if len(candles) < self.lookback:
            raise InsufficientDataError(self.name, self.lookback, len(candles))

        data = to_arrays(candles[len(candles) - self.lookback :])

        # argmax/argmin return the first occurrence of the extreme
        high_idx = int(np.argmax(data.highs))
        low_idx = int(np.argmin(data.lows))

        return self.calculate_levels(
            float(data.highs[high_idx]),
            float(data.lows[low_idx]),
            is_uptrend=low_idx < high_idx,
        )

    @staticmethod
    def calculate_levels(swing_high: float, swing_low: float, is_uptrend: bool) -> FibonacciLevels:
        """
        Levels for an explicit swing.

        Uptrend levels run from the swing high down to the swing low and beyond;
        downtrend levels run from the swing low up.
        """
        diff = swing_high - swing_low
        if is_uptrend:
            origin, end, sign = swing_high, swing_low, -1
        else:
            origin, end, sign = swing_low, swing_high, 1

        r236, r382, r500, r618, r786 = (origin + sign * diff * r for r in FIBONACCI_RATIOS)
        e1272, e1618 = (end + sign * diff * e for e in FIBONACCI_EXTENSIONS)

        return FibonacciLevels(
            swing_high=swing_high,
            swing_low=swing_low,
            is_uptrend=is_uptrend,
            level_0=origin,
            level_236=r236,
            level_382=r382,
            level_500=r500,
            level_618=r618,
            level_786=r786,
            level_1000=end,
            level_1272=e1272,
            level_1618=e1618,
        )


# =============================================================================
# PIVOT POINTS
# =============================================================================


class _PivotCalculator(ABC):
    """Pivot levels from one prior-period candle."""

    name = "PivotPoints"

    @abstractmethod
    def calculate_from_candle(self, candle: Candle) -> PivotPoints:
        pass

    def calculate_from_candles(self, candles: Sequence[Candle]) -> PivotPoints:
        """Pivots from the last candle of the series (the prior period)."""
        if len(candles) == 0:
            raise InsufficientDataError(self.name, 1, 0)
        return self.calculate_from_candle(candles[-1])


class _HLCPivotCalculator(_PivotCalculator):
    """Pivots that only read the prior high, low and close."""

    @abstractmethod
    def calculate(self, high: float, low: float, close: float) -> PivotPoints:
        pass

    def calculate_from_candle(self, candle: Candle) -> PivotPoints:
        return self.calculate(candle.high, candle.low, candle.close)


class StandardPivotPoints(_HLCPivotCalculator):
    """Classic floor pivots."""

    name = "StandardPivotPoints"

    def calculate(self, high: float, low: float, close: float) -> PivotPoints:
        pivot = (high + low + close) / 3
        return _floor_levels(pivot, high, low, PivotType.STANDARD)


class WoodiePivotPoints(_HLCPivotCalculator):
    """Woodie pivots: close weighted twice."""

    name = "WoodiePivotPoints"

    def calculate(self, high: float, low: float, close: float) -> PivotPoints:
        pivot = (high + low + 2 * close) / 4
        return _floor_levels(pivot, high, low, PivotType.WOODIE)


class CamarillaPivotPoints(_HLCPivotCalculator):
    name = "CamarillaPivotPoints"

    def calculate(self, high: float, low: float, close: float) -> PivotPoints:
        diff = high - low
        return PivotPoints(
            pivot=(high + low + close) / 3,
            r1=close + diff * 1.1 / 12,
            r2=close + diff * 1.1 / 6,
            r3=close + diff * 1.1 / 4,
            s1=close - diff * 1.1 / 12,
            s2=close - diff * 1.1 / 6,
            s3=close - diff * 1.1 / 4,
            type=PivotType.CAMARILLA,
        )


class FibonacciPivotPoints(_HLCPivotCalculator):
    name = "FibonacciPivotPoints"

    def calculate(self, high: float, low: float, close: float) -> PivotPoints:
        pivot = (high + low + close) / 3
        diff = high - low
        return PivotPoints(
            pivot=pivot,
            r1=pivot + 0.382 * diff,
            r2=pivot + 0.618 * diff,
            r3=pivot + diff,
            s1=pivot - 0.382 * diff,
            s2=pivot - 0.618 * diff,
            s3=pivot - diff,
            type=PivotType.FIBONACCI,
        )


class DeMarkPivotPoints(_PivotCalculator):
    """DeMark pivots. Only pivot, r1 and s1 are defined; the prior open picks the weighting."""

    name = "DeMarkPivotPoints"

    def calculate(self, open: float, high: float, low: float, close: float) -> PivotPoints:
        if close < open:
            x = high + 2 * low + close
        elif close > open:
            x = 2 * high + low + close
        else:
            x = high + low + 2 * close

        return PivotPoints(
            pivot=x / 4,
            r1=x / 2 - low,
            s1=x / 2 - high,
            type=PivotType.DEMARK,
        )

    def calculate_from_candle(self, candle: Candle) -> PivotPoints:
        return self.calculate(candle.open, candle.high, candle.low, candle.close)


def _floor_levels(pivot: float, high: float, low: float, pivot_type: PivotType) -> PivotPoints:
    return PivotPoints(
        pivot=pivot,
        r1=2 * pivot - low,
        r2=pivot + (high - low),
        r3=high + 2 * (pivot - low),
        s1=2 * pivot - high,
        s2=pivot - (high - low),
        s3=low - 2 * (high - pivot),
        type=pivot_type,
    )


PIVOT_CALCULATORS = {
    PivotType.STANDARD: StandardPivotPoints,
    PivotType.WOODIE: WoodiePivotPoints,
    PivotType.CAMARILLA: CamarillaPivotPoints,
    PivotType.FIBONACCI: FibonacciPivotPoints,
    PivotType.DEMARK: DeMarkPivotPoints,
}


def find_pivot_points(candle: Candle, pivot_type: str = "standard") -> PivotPoints:
    """
    Calculate pivot points of the given type from one prior-period candle.

    Types: standard, woodie, camarilla, fibonacci, demark
    """
    try:
        calculator = PIVOT_CALCULATORS[PivotType(pivot_type)]()
    except ValueError:
        raise ValueError(f"Unknown pivot type: {pivot_type}") from None
    return calculator.calculate_from_candle(candle)
