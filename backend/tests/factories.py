"""Candle factories shared by the test modules."""

from datetime import datetime, timedelta, timezone
from typing import Optional, Sequence

import numpy as np

from taengine.schemas.market import Candle

START = datetime(2024, 1, 1, 9, 15, tzinfo=timezone.utc)


def make_candle(
    i: int,
    close: float,
    high: Optional[float] = None,
    low: Optional[float] = None,
    open_: Optional[float] = None,
    volume: int = 1000,
) -> Candle:
    """Create a test candle; high/low default to close +/- 0.5."""
    if open_ is None:
        open_ = close
    if high is None:
        high = max(open_, close) + 0.5
    if low is None:
        low = min(open_, close) - 0.5
    return Candle(
        timestamp=START + timedelta(minutes=15 * i),
        open=open_,
        high=high,
        low=low,
        close=close,
        volume=volume,
    )


def make_candles(closes: Sequence[float], volumes: Optional[Sequence[int]] = None) -> list[Candle]:
    """Candles around a close series."""
    volumes = volumes or [1000] * len(closes)
    return [make_candle(i, float(c), volume=v) for i, (c, v) in enumerate(zip(closes, volumes))]


def flat_candles(n: int, price: float = 100.0, volume: int = 1000) -> list[Candle]:
    """Candles with open == high == low == close."""
    return [
        make_candle(i, price, high=price, low=price, open_=price, volume=volume)
        for i in range(n)
    ]


def candles_from_ranges(highs: Sequence[float], lows: Sequence[float]) -> list[Candle]:
    """Candles with explicit highs/lows; open and close sit mid-range."""
    candles = []
    for i, (h, lo) in enumerate(zip(highs, lows)):
        mid = (h + lo) / 2
        candles.append(make_candle(i, mid, high=h, low=lo, open_=mid))
    return candles


def zigzag(points: Sequence[float], step: int = 6) -> list[float]:
    """Linear path through `points`, `step` bars per leg."""
    closes = []
    for a, b in zip(points, points[1:]):
        closes.extend(a + (b - a) * k / step for k in range(step))
    closes.append(points[-1])
    return closes


def random_walk(n: int, seed: int = 42, start: float = 100.0) -> list[Candle]:
    """Reproducible random-walk candles."""
    rng = np.random.default_rng(seed)
    closes = start + np.cumsum(rng.normal(0, 1, n))
    opens = np.concatenate([[start], closes[:-1]])
    wicks = np.abs(rng.normal(0, 0.5, (n, 2)))
    volumes = rng.integers(500, 5000, n)

    candles = []
    for i in range(n):
        o, c = float(opens[i]), float(closes[i])
        candles.append(
            make_candle(
                i,
                c,
                high=max(o, c) + float(wicks[i, 0]),
                low=min(o, c) - float(wicks[i, 1]),
                open_=o,
                volume=int(volumes[i]),
            )
        )
    return candles
