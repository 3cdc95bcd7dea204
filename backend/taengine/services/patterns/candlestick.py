"""
Candlestick Pattern Detection

Recognizes one-, two- and three-bar candlestick formations directly from
OHLC bars. Unlike the chart recognizers, every matching bar is reported,
so a pass may return several patterns of the same name.

A pattern is volume confirmed when its final bar trades at least
`volume_confirm_ratio` times the series average; confirmation lifts the
strength by 20%, capped at 1.0.
"""

import logging
from typing import Optional, Sequence

from taengine.schemas.market import Candle
from taengine.schemas.patterns import Pattern, PatternDirection, PatternType

logger = logging.getLogger(__name__)

DOJI_THRESHOLD = 0.1
LONG_BODY_THRESHOLD = 0.6
SHADOW_THRESHOLD = 2.0
VOLUME_CONFIRM_RATIO = 1.5

SMALL_SHADOW_RATIO = 0.5
SPINNING_TOP_MAX_BODY = 0.3
MARUBOZU_MIN_BODY = 0.9
STAR_MAX_BODY = 0.3
SOLDIER_MIN_BODY = 0.5
TWEEZER_TOLERANCE = 0.05

MIN_CANDLES = 3


def _body_ratio(candle: Candle) -> float:
    """Body as a fraction of the bar range; 0 for a zero-range bar."""
    if candle.range == 0:
        return 0.0
    return candle.body / candle.range


def _midpoint(candle: Candle) -> float:
    return (candle.open + candle.close) / 2


def is_downtrend(candles: Sequence[Candle], idx: int) -> bool:
    """Two consecutive lower closes on the three bars before `idx`."""
    if idx < 3:
        return False
    return candles[idx - 1].close < candles[idx - 2].close < candles[idx - 3].close


def is_uptrend(candles: Sequence[Candle], idx: int) -> bool:
    """Two consecutive higher closes on the three bars before `idx`."""
    if idx < 3:
        return False
    return candles[idx - 1].close > candles[idx - 2].close > candles[idx - 3].close


class CandlestickPatternDetector:
    """
    Candlestick pattern detector.

    Single bar: Doji, Hammer, Inverted Hammer, Hanging Man, Shooting Star,
    Marubozu, Spinning Top.
    Two bars: Bullish/Bearish Engulfing, Piercing Line, Dark Cloud Cover,
    Tweezer Top/Bottom, Bullish/Bearish Harami.
    Three bars: Morning Star, Evening Star, Three White Soldiers, Three
    Black Crows.
    """

    name = "CandlestickPatternDetector"

    def __init__(
        self,
        doji_threshold: float = DOJI_THRESHOLD,
        long_body_threshold: float = LONG_BODY_THRESHOLD,
        shadow_threshold: float = SHADOW_THRESHOLD,
        volume_confirm_ratio: float = VOLUME_CONFIRM_RATIO,
    ):
        self.doji_threshold = doji_threshold
        self.long_body_threshold = long_body_threshold
        self.shadow_threshold = shadow_threshold
        self.volume_confirm_ratio = volume_confirm_ratio

    def detect(self, candles: Sequence[Candle]) -> list[Pattern]:
        """
        Run every recognizer over every bar.

        Returns:
            Single-bar patterns first, then two-bar, then three-bar, each
            group in bar order. Empty for fewer than 3 candles.
        """
        if len(candles) < MIN_CANDLES:
            return []

        avg_volume = sum(c.volume for c in candles) / len(candles)

        single = (
            self.detect_doji,
            self.detect_hammer,
            self.detect_inverted_hammer,
            self.detect_hanging_man,
            self.detect_shooting_star,
            self.detect_marubozu,
            self.detect_spinning_top,
        )
        double = (
            self.detect_engulfing,
            self.detect_piercing_line,
            self.detect_dark_cloud_cover,
            self.detect_tweezer,
            self.detect_harami,
        )
        triple = (
            self.detect_morning_star,
            self.detect_evening_star,
            self.detect_three_white_soldiers,
            self.detect_three_black_crows,
        )

        patterns = []
        for first_idx, recognizers in ((0, single), (1, double), (2, triple)):
            for idx in range(first_idx, len(candles)):
                for recognizer in recognizers:
                    pattern = recognizer(candles, idx, avg_volume)
                    if pattern is not None:
                        patterns.append(pattern)

        logger.debug(f"Detected {len(patterns)} candlestick patterns over {len(candles)} candles")
        return patterns

    def _pattern(
        self,
        name: str,
        direction: PatternDirection,
        candles: Sequence[Candle],
        start: int,
        end: int,
        base_strength: float,
        avg_volume: float,
    ) -> Pattern:
        confirmed = avg_volume > 0 and candles[end].volume >= avg_volume * self.volume_confirm_ratio
        strength = min(1.0, base_strength * 1.2) if confirmed else base_strength
        return Pattern(
            name=name,
            type=PatternType.CANDLESTICK,
            direction=direction,
            start_index=start,
            end_index=end,
            strength=strength,
            completion=1.0,
            volume_confirmed=confirmed,
        )

    def _long_body(self, candle: Candle) -> bool:
        return candle.range > 0 and _body_ratio(candle) >= self.long_body_threshold

    def _hammer_shape(self, candle: Candle) -> bool:
        """Long lower shadow under a small body near the high."""
        return (
            candle.body > 0
            and candle.lower_shadow >= candle.body * self.shadow_threshold
            and candle.upper_shadow <= candle.body * SMALL_SHADOW_RATIO
        )

    def _inverted_shape(self, candle: Candle) -> bool:
        """Long upper shadow over a small body near the low."""
        return (
            candle.body > 0
            and candle.upper_shadow >= candle.body * self.shadow_threshold
            and candle.lower_shadow <= candle.body * SMALL_SHADOW_RATIO
        )

    # =========================================================================
    # SINGLE BAR
    # =========================================================================

    def detect_doji(
        self, candles: Sequence[Candle], idx: int, avg_volume: float
    ) -> Optional[Pattern]:
        candle = candles[idx]
        if candle.range == 0 or _body_ratio(candle) > self.doji_threshold:
            return None
        return self._pattern("Doji", PatternDirection.NEUTRAL, candles, idx, idx, 0.5, avg_volume)

    def detect_hammer(
        self, candles: Sequence[Candle], idx: int, avg_volume: float
    ) -> Optional[Pattern]:
        if not self._hammer_shape(candles[idx]) or not is_downtrend(candles, idx):
            return None
        return self._pattern("Hammer", PatternDirection.BULLISH, candles, idx, idx, 0.7, avg_volume)

    def detect_inverted_hammer(
        self, candles: Sequence[Candle], idx: int, avg_volume: float
    ) -> Optional[Pattern]:
        if not self._inverted_shape(candles[idx]) or not is_downtrend(candles, idx):
            return None
        return self._pattern(
            "Inverted Hammer", PatternDirection.BULLISH, candles, idx, idx, 0.6, avg_volume
        )

    def detect_hanging_man(
        self, candles: Sequence[Candle], idx: int, avg_volume: float
    ) -> Optional[Pattern]:
        if not self._hammer_shape(candles[idx]) or not is_uptrend(candles, idx):
            return None
        return self._pattern(
            "Hanging Man", PatternDirection.BEARISH, candles, idx, idx, 0.7, avg_volume
        )

    def detect_shooting_star(
        self, candles: Sequence[Candle], idx: int, avg_volume: float
    ) -> Optional[Pattern]:
        if not self._inverted_shape(candles[idx]) or not is_uptrend(candles, idx):
            return None
        return self._pattern(
            "Shooting Star", PatternDirection.BEARISH, candles, idx, idx, 0.7, avg_volume
        )

    def detect_marubozu(
        self, candles: Sequence[Candle], idx: int, avg_volume: float
    ) -> Optional[Pattern]:
        """Body covers at least 90% of the range; direction follows the body."""
        candle = candles[idx]
        if candle.range == 0 or _body_ratio(candle) < MARUBOZU_MIN_BODY:
            return None
        direction = PatternDirection.BEARISH if candle.is_bearish else PatternDirection.BULLISH
        return self._pattern("Marubozu", direction, candles, idx, idx, 0.8, avg_volume)

    def detect_spinning_top(
        self, candles: Sequence[Candle], idx: int, avg_volume: float
    ) -> Optional[Pattern]:
        """Small body (larger than a doji) with both shadows at least the body size."""
        candle = candles[idx]
        if candle.range == 0:
            return None
        ratio = _body_ratio(candle)
        if ratio > SPINNING_TOP_MAX_BODY or ratio < self.doji_threshold:
            return None
        if candle.upper_shadow < candle.body or candle.lower_shadow < candle.body:
            return None
        return self._pattern(
            "Spinning Top", PatternDirection.NEUTRAL, candles, idx, idx, 0.4, avg_volume
        )

    # =========================================================================
    # TWO BARS
    # =========================================================================

    def detect_engulfing(
        self, candles: Sequence[Candle], idx: int, avg_volume: float
    ) -> Optional[Pattern]:
        prev, curr = candles[idx - 1], candles[idx]
        if curr.body <= prev.body:
            return None

        if prev.is_bearish and curr.is_bullish:
            if curr.open <= prev.close and curr.close >= prev.open:
                return self._pattern(
                    "Bullish Engulfing",
                    PatternDirection.BULLISH,
                    candles,
                    idx - 1,
                    idx,
                    0.8,
                    avg_volume,
                )

        if prev.is_bullish and curr.is_bearish:
            if curr.open >= prev.close and curr.close <= prev.open:
                return self._pattern(
                    "Bearish Engulfing",
                    PatternDirection.BEARISH,
                    candles,
                    idx - 1,
                    idx,
                    0.8,
                    avg_volume,
                )

        return None

    def detect_piercing_line(
        self, candles: Sequence[Candle], idx: int, avg_volume: float
    ) -> Optional[Pattern]:
        """Opens below the prior low, closes between the prior body midpoint and open."""
        prev, curr = candles[idx - 1], candles[idx]
        if not prev.is_bearish or not curr.is_bullish:
            return None
        if curr.open >= prev.low:
            return None
        if not _midpoint(prev) <= curr.close < prev.open:
            return None
        return self._pattern(
            "Piercing Line", PatternDirection.BULLISH, candles, idx - 1, idx, 0.7, avg_volume
        )

    def detect_dark_cloud_cover(
        self, candles: Sequence[Candle], idx: int, avg_volume: float
    ) -> Optional[Pattern]:
        """Opens above the prior high, closes between the prior open and body midpoint."""
        prev, curr = candles[idx - 1], candles[idx]
        if not prev.is_bullish or not curr.is_bearish:
            return None
        if curr.open <= prev.high:
            return None
        if not prev.open < curr.close <= _midpoint(prev):
            return None
        return self._pattern(
            "Dark Cloud Cover", PatternDirection.BEARISH, candles, idx - 1, idx, 0.7, avg_volume
        )

    def detect_tweezer(
        self, candles: Sequence[Candle], idx: int, avg_volume: float
    ) -> Optional[Pattern]:
        """Matching lows after a decline, or matching highs after a rally."""
        prev, curr = candles[idx - 1], candles[idx]
        tolerance = prev.range * TWEEZER_TOLERANCE

        if abs(prev.low - curr.low) <= tolerance:
            if prev.is_bearish and curr.is_bullish and is_downtrend(candles, idx - 1):
                return self._pattern(
                    "Tweezer Bottom",
                    PatternDirection.BULLISH,
                    candles,
                    idx - 1,
                    idx,
                    0.65,
                    avg_volume,
                )

        if abs(prev.high - curr.high) <= tolerance:
            if prev.is_bullish and curr.is_bearish and is_uptrend(candles, idx - 1):
                return self._pattern(
                    "Tweezer Top",
                    PatternDirection.BEARISH,
                    candles,
                    idx - 1,
                    idx,
                    0.65,
                    avg_volume,
                )

        return None

    def detect_harami(
        self, candles: Sequence[Candle], idx: int, avg_volume: float
    ) -> Optional[Pattern]:
        prev, curr = candles[idx - 1], candles[idx]
        if curr.body >= prev.body:
            return None

        if prev.is_bearish and curr.is_bullish:
            if curr.open >= prev.close and curr.close <= prev.open:
                return self._pattern(
                    "Bullish Harami",
                    PatternDirection.BULLISH,
                    candles,
                    idx - 1,
                    idx,
                    0.6,
                    avg_volume,
                )

        if prev.is_bullish and curr.is_bearish:
            if curr.open <= prev.close and curr.close >= prev.open:
                return self._pattern(
                    "Bearish Harami",
                    PatternDirection.BEARISH,
                    candles,
                    idx - 1,
                    idx,
                    0.6,
                    avg_volume,
                )

        return None

    # =========================================================================
    # THREE BARS
    # =========================================================================

    def detect_morning_star(
        self, candles: Sequence[Candle], idx: int, avg_volume: float
    ) -> Optional[Pattern]:
        """Long bearish bar, small star gapping below it, long bullish recovery."""
        first, star, third = candles[idx - 2], candles[idx - 1], candles[idx]
        if not first.is_bearish or not self._long_body(first):
            return None
        if star.range > 0 and _body_ratio(star) > STAR_MAX_BODY:
            return None
        if max(star.open, star.close) >= first.close:
            return None
        if not third.is_bullish or not self._long_body(third):
            return None
        if third.close < _midpoint(first):
            return None
        return self._pattern(
            "Morning Star", PatternDirection.BULLISH, candles, idx - 2, idx, 0.85, avg_volume
        )

    def detect_evening_star(
        self, candles: Sequence[Candle], idx: int, avg_volume: float
    ) -> Optional[Pattern]:
        """Long bullish bar, small star gapping above it, long bearish reversal."""
        first, star, third = candles[idx - 2], candles[idx - 1], candles[idx]
        if not first.is_bullish or not self._long_body(first):
            return None
        if star.range > 0 and _body_ratio(star) > STAR_MAX_BODY:
            return None
        if min(star.open, star.close) <= first.close:
            return None
        if not third.is_bearish or not self._long_body(third):
            return None
        if third.close > _midpoint(first):
            return None
        return self._pattern(
            "Evening Star", PatternDirection.BEARISH, candles, idx - 2, idx, 0.85, avg_volume
        )

    def detect_three_white_soldiers(
        self, candles: Sequence[Candle], idx: int, avg_volume: float
    ) -> Optional[Pattern]:
        bars = candles[idx - 2 : idx + 1]
        if not all(c.is_bullish and c.range > 0 for c in bars):
            return None
        if any(_body_ratio(c) < SOLDIER_MIN_BODY for c in bars):
            return None
        for prev, curr in zip(bars, bars[1:]):
            # Opens inside the previous body and closes higher
            if not prev.open <= curr.open <= prev.close or curr.close <= prev.close:
                return None
        return self._pattern(
            "Three White Soldiers", PatternDirection.BULLISH, candles, idx - 2, idx, 0.9, avg_volume
        )

    def detect_three_black_crows(
        self, candles: Sequence[Candle], idx: int, avg_volume: float
    ) -> Optional[Pattern]:
        bars = candles[idx - 2 : idx + 1]
        if not all(c.is_bearish and c.range > 0 for c in bars):
            return None
        if any(_body_ratio(c) < SOLDIER_MIN_BODY for c in bars):
            return None
        for prev, curr in zip(bars, bars[1:]):
            # Opens inside the previous body and closes lower
            if not prev.close <= curr.open <= prev.open or curr.close >= prev.close:
                return None
        return self._pattern(
            "Three Black Crows", PatternDirection.BEARISH, candles, idx - 2, idx, 0.9, avg_volume
        )
