"""
Swing Point Detection

A swing high is a bar whose high is strictly above the highs of the
`strength` bars on each side; a swing low mirrors it on lows. Equal
neighbours disqualify the bar.
"""

from typing import Sequence

from taengine.core.config import settings
from taengine.schemas.market import Candle
from taengine.schemas.patterns import SwingPoint
from taengine.services.base import InvalidPeriodError


def prices_equal(p1: float, p2: float, tolerance: float) -> bool:
    """
    Relative price equality used by every level-matching recognizer.

    |p1 - p2| / p1 <= tolerance; when p1 is 0 the prices match only if p2 is 0.
    """
    if p1 == 0:
        return p2 == 0
    return abs(p1 - p2) / p1 <= tolerance


class SwingPointDetector:
    """Finds confirmed swing highs and lows."""

    name = "SwingPointDetector"

    def __init__(self, min_swing_strength: int = None):
        if min_swing_strength is None:
            min_swing_strength = settings.min_swing_strength
        if min_swing_strength <= 0:
            raise InvalidPeriodError(
                self.name, f"invalid swing strength: {min_swing_strength}"
            )
        self.strength = min_swing_strength

    def find(self, candles: Sequence[Candle]) -> list[SwingPoint]:
        """
        Swing points in index order.

        When one bar is both a swing high and a swing low the high comes first.
        """
        swings: list[SwingPoint] = []
        s = self.strength

        for i in range(s, len(candles) - s):
            high = candles[i].high
            low = candles[i].low
            neighbours = [candles[i - j] for j in range(1, s + 1)] + [
                candles[i + j] for j in range(1, s + 1)
            ]

            if all(high > c.high for c in neighbours):
                swings.append(SwingPoint(index=i, price=high, is_high=True, strength=s))

            if all(low < c.low for c in neighbours):
                swings.append(SwingPoint(index=i, price=low, is_high=False, strength=s))

        return swings


def swing_highs(swings: Sequence[SwingPoint]) -> list[SwingPoint]:
    return [s for s in swings if s.is_high]


def swing_lows(swings: Sequence[SwingPoint]) -> list[SwingPoint]:
    return [s for s in swings if not s.is_high]
