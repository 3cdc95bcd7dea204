"""
Technical Indicator Calculations

Shared NumPy building blocks for the indicator classes.
All math is deterministic.

Conventions:
    - Every series helper returns an array the same length as its input.
    - Indices before the warm-up window hold 0.0 (never NaN).
"""

from dataclasses import dataclass
from typing import Optional, Sequence

import numpy as np

from taengine.schemas.market import Candle


@dataclass
class OHLCVData:
    """OHLCV data arrays for calculations."""

    timestamps: np.ndarray
    opens: np.ndarray
    highs: np.ndarray
    lows: np.ndarray
    closes: np.ndarray
    volumes: np.ndarray

    def __len__(self) -> int:
        return len(self.closes)


def to_arrays(candles: Sequence[Candle]) -> OHLCVData:
    """Convert a candle series to NumPy arrays."""
    return OHLCVData(
        timestamps=np.array([c.timestamp for c in candles], dtype=object),
        opens=np.array([c.open for c in candles], dtype=float),
        highs=np.array([c.high for c in candles], dtype=float),
        lows=np.array([c.low for c in candles], dtype=float),
        closes=np.array([c.close for c in candles], dtype=float),
        volumes=np.array([c.volume for c in candles], dtype=float),
    )


# =============================================================================
# STATISTICS
# =============================================================================


def mean(values: np.ndarray) -> float:
    """Arithmetic mean; 0.0 for an empty window."""
    if len(values) == 0:
        return 0.0
    return float(np.sum(values) / len(values))


def std_dev(values: np.ndarray) -> float:
    """Population standard deviation; 0.0 for an empty window."""
    if len(values) == 0:
        return 0.0
    return float(np.std(values))


def highest(values: np.ndarray) -> float:
    return float(np.max(values)) if len(values) > 0 else 0.0


def lowest(values: np.ndarray) -> float:
    return float(np.min(values)) if len(values) > 0 else 0.0


def rolling_highest(data: np.ndarray, period: int) -> np.ndarray:
    """Highest value over the trailing `period` window."""
    result = np.zeros(len(data))
    for i in range(period - 1, len(data)):
        result[i] = np.max(data[i - period + 1 : i + 1])
    return result


def rolling_lowest(data: np.ndarray, period: int) -> np.ndarray:
    """Lowest value over the trailing `period` window."""
    result = np.zeros(len(data))
    for i in range(period - 1, len(data)):
        result[i] = np.min(data[i - period + 1 : i + 1])
    return result


# =============================================================================
# MOVING AVERAGES
# =============================================================================


def sma(data: np.ndarray, period: int) -> np.ndarray:
    """Simple Moving Average."""
    result = np.zeros(len(data))
    if period <= 0 or len(data) < period:
        return result

    for i in range(period - 1, len(data)):
        result[i] = mean(data[i - period + 1 : i + 1])
    return result


def ema(data: np.ndarray, period: int) -> np.ndarray:
    """Exponential Moving Average seeded with the SMA of the first window."""
    result = np.zeros(len(data))
    if period <= 0 or len(data) < period:
        return result

    multiplier = 2 / (period + 1)

    # Start with SMA
    result[period - 1] = mean(data[:period])

    for i in range(period, len(data)):
        result[i] = (data[i] - result[i - 1]) * multiplier + result[i - 1]

    return result


def wilder_smooth(data: np.ndarray, period: int) -> np.ndarray:
    """Wilder smoothing: SMA seed, then prev + (value - prev) / period."""
    result = np.zeros(len(data))
    if period <= 0 or len(data) < period:
        return result

    result[period - 1] = mean(data[:period])
    for i in range(period, len(data)):
        result[i] = result[i - 1] + (data[i] - result[i - 1]) / period

    return result


# =============================================================================
# PRICE TRANSFORMS
# =============================================================================


def typical_price(highs: np.ndarray, lows: np.ndarray, closes: np.ndarray) -> np.ndarray:
    """(high + low + close) / 3 per bar."""
    return (highs + lows + closes) / 3


def true_range(highs: np.ndarray, lows: np.ndarray, closes: np.ndarray) -> np.ndarray:
    """True Range; the first bar uses high - low."""
    tr = np.zeros(len(closes))
    if len(closes) == 0:
        return tr

    tr[0] = highs[0] - lows[0]
    for i in range(1, len(closes)):
        tr[i] = max(
            highs[i] - lows[i],
            abs(highs[i] - closes[i - 1]),
            abs(lows[i] - closes[i - 1]),
        )
    return tr


def money_flow_volume(
    highs: np.ndarray, lows: np.ndarray, closes: np.ndarray, volumes: np.ndarray
) -> np.ndarray:
    """Chaikin money flow multiplier times volume; 0 on zero-range bars."""
    result = np.zeros(len(closes))
    for i in range(len(closes)):
        hl = highs[i] - lows[i]
        if hl != 0:
            multiplier = ((closes[i] - lows[i]) - (highs[i] - closes[i])) / hl
            result[i] = multiplier * volumes[i]
    return result


# =============================================================================
# UTILITY FUNCTIONS
# =============================================================================


def last_value(arr: np.ndarray) -> Optional[float]:
    """Get the final value of a series, or None when empty."""
    return float(arr[-1]) if len(arr) > 0 else None
