"""
Chart Pattern Detection

Detects geometric chart formations from swing points.

Each recognizer scans from the most recent swing backward and reports the
first qualifying formation only, so a pass yields at most one pattern per
recognizer. Recognizers never raise for "no match".
"""

import logging
from typing import Callable, Optional, Sequence

from taengine.core.config import settings
from taengine.schemas.market import Candle
from taengine.schemas.patterns import Pattern, PatternDirection, SwingPoint
from taengine.services.patterns.swing_points import (
    SwingPointDetector,
    prices_equal,
    swing_highs,
    swing_lows,
)

logger = logging.getLogger(__name__)

PriceEquality = Callable[[float, float, float], bool]

POLE_BARS = 10
MIN_POLE_MOVE = 0.05
FLAG_SLOPE_TOLERANCE = 0.01
PRIOR_TREND_BARS = 10


def _slope(first: SwingPoint, last: SwingPoint) -> float:
    return (last.price - first.price) / (last.index - first.index)


def _strictly_rising(points: Sequence[SwingPoint]) -> bool:
    return all(b.price > a.price for a, b in zip(points, points[1:]))


def _strictly_falling(points: Sequence[SwingPoint]) -> bool:
    return all(b.price < a.price for a, b in zip(points, points[1:]))


def _between(points: Sequence[SwingPoint], start: int, end: int) -> list[SwingPoint]:
    """Points with start < index < end."""
    return [p for p in points if start < p.index < end]


def _within(points: Sequence[SwingPoint], start: int, end: int) -> list[SwingPoint]:
    """Points with start <= index <= end."""
    return [p for p in points if start <= p.index <= end]


def calculate_target_price(breakout_price: float, height: float, is_bullish: bool) -> float:
    """Measured move from the breakout level."""
    return breakout_price + height if is_bullish else breakout_price - height


def calculate_completion(candles: Sequence[Candle], neckline: float, is_bullish: bool) -> float:
    """1.0 once the latest close has broken the neckline in the pattern direction, else 0.8."""
    if len(candles) == 0:
        return 0.0
    last_close = candles[-1].close
    if is_bullish:
        return 1.0 if last_close > neckline else 0.8
    return 1.0 if last_close < neckline else 0.8


class ChartPatternDetector:
    """
    Chart pattern detector.

    Recognizes: Head and Shoulders (and inverse), Double/Triple Top and
    Bottom, Ascending/Descending/Symmetrical Triangle, Rising/Falling Wedge,
    Flag, Pennant, Cup and Handle, Rounding Bottom, Rectangle.

    `equality` decides whether two prices count as the same level; it
    receives (p1, p2, tolerance_percent).
    """

    name = "ChartPatternDetector"

    def __init__(
        self,
        min_pattern_bars: int = None,
        tolerance_percent: float = None,
        min_swing_strength: int = None,
        equality: PriceEquality = prices_equal,
    ):
        self.min_pattern_bars = (
            min_pattern_bars if min_pattern_bars is not None else settings.min_pattern_bars
        )
        self.tolerance_percent = (
            tolerance_percent
            if tolerance_percent is not None
            else settings.pattern_tolerance_percent
        )
        self.swing_detector = SwingPointDetector(min_swing_strength)
        self._equality = equality

    def _equal(self, p1: float, p2: float) -> bool:
        return self._equality(p1, p2, self.tolerance_percent)

    def find_swing_points(self, candles: Sequence[Candle]) -> list[SwingPoint]:
        return self.swing_detector.find(candles)

    def detect(
        self,
        candles: Sequence[Candle],
        swings: Optional[Sequence[SwingPoint]] = None,
    ) -> list[Pattern]:
        """
        Run every recognizer over the series.

        Args:
            candles: time-ascending candle series
            swings: precomputed swing points (detected here when omitted)

        Returns:
            Detected patterns in recognizer order; empty when the series is
            shorter than min_pattern_bars or has fewer than 3 swing points.
        """
        if len(candles) < self.min_pattern_bars:
            return []

        if swings is None:
            swings = self.find_swing_points(candles)
        if len(swings) < 3:
            return []

        highs = swing_highs(swings)
        lows = swing_lows(swings)

        recognizers = (
            self.detect_head_and_shoulders,
            self.detect_inverse_head_and_shoulders,
            self.detect_double_top,
            self.detect_double_bottom,
            self.detect_triple_top,
            self.detect_triple_bottom,
            self.detect_ascending_triangle,
            self.detect_descending_triangle,
            self.detect_symmetrical_triangle,
            self.detect_rising_wedge,
            self.detect_falling_wedge,
            self.detect_flag,
            self.detect_pennant,
            self.detect_cup_and_handle,
            self.detect_rounding_bottom,
            self.detect_rectangle,
        )

        patterns = []
        for recognizer in recognizers:
            pattern = recognizer(candles, highs, lows)
            if pattern is not None:
                patterns.append(pattern)

        logger.debug(f"Detected {len(patterns)} chart patterns over {len(candles)} candles")
        return patterns

    # =========================================================================
    # HEAD AND SHOULDERS
    # =========================================================================

    def detect_head_and_shoulders(
        self, candles: Sequence[Candle], highs: list[SwingPoint], lows: list[SwingPoint]
    ) -> Optional[Pattern]:
        """Bearish reversal: higher head between two roughly equal shoulders."""
        if len(highs) < 3 or len(lows) < 2:
            return None

        for i in range(len(highs) - 1, 1, -1):
            left, head, right = highs[i - 2], highs[i - 1], highs[i]

            if head.price <= left.price or head.price <= right.price:
                continue
            if not self._equal(left.price, right.price):
                continue

            neckline_lows = _between(lows, left.index, right.index)
            if len(neckline_lows) < 2:
                continue

            neckline = (neckline_lows[0].price + neckline_lows[-1].price) / 2
            return Pattern(
                name="Head and Shoulders",
                direction=PatternDirection.BEARISH,
                start_index=left.index,
                end_index=right.index,
                strength=0.85,
                target_price=calculate_target_price(neckline, head.price - neckline, False),
                completion=calculate_completion(candles, neckline, False),
            )

        return None

    def detect_inverse_head_and_shoulders(
        self, candles: Sequence[Candle], highs: list[SwingPoint], lows: list[SwingPoint]
    ) -> Optional[Pattern]:
        """Bullish reversal: lower head between two roughly equal shoulders."""
        if len(lows) < 3 or len(highs) < 2:
            return None

        for i in range(len(lows) - 1, 1, -1):
            left, head, right = lows[i - 2], lows[i - 1], lows[i]

            if head.price >= left.price or head.price >= right.price:
                continue
            if not self._equal(left.price, right.price):
                continue

            neckline_highs = _between(highs, left.index, right.index)
            if len(neckline_highs) < 2:
                continue

            neckline = (neckline_highs[0].price + neckline_highs[-1].price) / 2
            return Pattern(
                name="Inverse Head and Shoulders",
                direction=PatternDirection.BULLISH,
                start_index=left.index,
                end_index=right.index,
                strength=0.85,
                target_price=calculate_target_price(neckline, neckline - head.price, True),
                completion=calculate_completion(candles, neckline, True),
            )

        return None

    # =========================================================================
    # DOUBLE / TRIPLE TOPS AND BOTTOMS
    # =========================================================================

    def detect_double_top(
        self, candles: Sequence[Candle], highs: list[SwingPoint], lows: list[SwingPoint]
    ) -> Optional[Pattern]:
        if len(highs) < 2 or len(lows) < 1:
            return None

        for i in range(len(highs) - 1, 0, -1):
            first, second = highs[i - 1], highs[i]
            if not self._equal(first.price, second.price):
                continue

            middle = _between(lows, first.index, second.index)
            if not middle:
                continue

            neckline = min(p.price for p in middle)
            return Pattern(
                name="Double Top",
                direction=PatternDirection.BEARISH,
                start_index=first.index,
                end_index=second.index,
                strength=0.75,
                target_price=calculate_target_price(neckline, first.price - neckline, False),
                completion=calculate_completion(candles, neckline, False),
            )

        return None

    def detect_double_bottom(
        self, candles: Sequence[Candle], highs: list[SwingPoint], lows: list[SwingPoint]
    ) -> Optional[Pattern]:
        if len(lows) < 2 or len(highs) < 1:
            return None

        for i in range(len(lows) - 1, 0, -1):
            first, second = lows[i - 1], lows[i]
            if not self._equal(first.price, second.price):
                continue

            middle = _between(highs, first.index, second.index)
            if not middle:
                continue

            neckline = max(p.price for p in middle)
            return Pattern(
                name="Double Bottom",
                direction=PatternDirection.BULLISH,
                start_index=first.index,
                end_index=second.index,
                strength=0.75,
                target_price=calculate_target_price(neckline, neckline - first.price, True),
                completion=calculate_completion(candles, neckline, True),
            )

        return None

    def detect_triple_top(
        self, candles: Sequence[Candle], highs: list[SwingPoint], lows: list[SwingPoint]
    ) -> Optional[Pattern]:
        if len(highs) < 3 or len(lows) < 2:
            return None

        for i in range(len(highs) - 1, 1, -1):
            first, second, third = highs[i - 2], highs[i - 1], highs[i]
            if not self._equal(first.price, second.price) or not self._equal(
                second.price, third.price
            ):
                continue

            middle = _between(lows, first.index, third.index)
            if not middle:
                continue

            neckline = min(p.price for p in middle)
            return Pattern(
                name="Triple Top",
                direction=PatternDirection.BEARISH,
                start_index=first.index,
                end_index=third.index,
                strength=0.8,
                target_price=calculate_target_price(neckline, first.price - neckline, False),
                completion=calculate_completion(candles, neckline, False),
            )

        return None

    def detect_triple_bottom(
        self, candles: Sequence[Candle], highs: list[SwingPoint], lows: list[SwingPoint]
    ) -> Optional[Pattern]:
        if len(lows) < 3 or len(highs) < 2:
            return None

        for i in range(len(lows) - 1, 1, -1):
            first, second, third = lows[i - 2], lows[i - 1], lows[i]
            if not self._equal(first.price, second.price) or not self._equal(
                second.price, third.price
            ):
                continue

            middle = _between(highs, first.index, third.index)
            if not middle:
                continue

            neckline = max(p.price for p in middle)
            return Pattern(
                name="Triple Bottom",
                direction=PatternDirection.BULLISH,
                start_index=first.index,
                end_index=third.index,
                strength=0.8,
                target_price=calculate_target_price(neckline, neckline - first.price, True),
                completion=calculate_completion(candles, neckline, True),
            )

        return None

    # =========================================================================
    # TRIANGLES
    # =========================================================================

    def detect_ascending_triangle(
        self, candles: Sequence[Candle], highs: list[SwingPoint], lows: list[SwingPoint]
    ) -> Optional[Pattern]:
        """Flat resistance with rising lows."""
        if len(highs) < 2 or len(lows) < 2:
            return None

        for i in range(len(highs) - 1, 0, -1):
            if not self._equal(highs[i].price, highs[i - 1].price):
                continue

            resistance = highs[i].price
            start, end = highs[i - 1].index, highs[i].index

            pattern_lows = _within(lows, start, end)
            if len(pattern_lows) < 2 or not _strictly_rising(pattern_lows):
                continue

            height = resistance - pattern_lows[0].price
            return Pattern(
                name="Ascending Triangle",
                direction=PatternDirection.BULLISH,
                start_index=start,
                end_index=end,
                strength=0.7,
                target_price=calculate_target_price(resistance, height, True),
                completion=calculate_completion(candles, resistance, True),
            )

        return None

    def detect_descending_triangle(
        self, candles: Sequence[Candle], highs: list[SwingPoint], lows: list[SwingPoint]
    ) -> Optional[Pattern]:
        """Flat support with falling highs."""
        if len(highs) < 2 or len(lows) < 2:
            return None

        for i in range(len(lows) - 1, 0, -1):
            if not self._equal(lows[i].price, lows[i - 1].price):
                continue

            support = lows[i].price
            start, end = lows[i - 1].index, lows[i].index

            pattern_highs = _within(highs, start, end)
            if len(pattern_highs) < 2 or not _strictly_falling(pattern_highs):
                continue

            height = pattern_highs[0].price - support
            return Pattern(
                name="Descending Triangle",
                direction=PatternDirection.BEARISH,
                start_index=start,
                end_index=end,
                strength=0.7,
                target_price=calculate_target_price(support, height, False),
                completion=calculate_completion(candles, support, False),
            )

        return None

    def detect_symmetrical_triangle(
        self, candles: Sequence[Candle], highs: list[SwingPoint], lows: list[SwingPoint]
    ) -> Optional[Pattern]:
        """Lower highs with rising lows; direction follows the prior trend."""
        if len(highs) < 2 or len(lows) < 2:
            return None

        for i in range(len(highs) - 1, 0, -1):
            if highs[i].price >= highs[i - 1].price:
                continue

            start, end = highs[i - 1].index, highs[i].index
            pattern_lows = _within(lows, start, end)
            if len(pattern_lows) < 2 or not _strictly_rising(pattern_lows):
                continue

            direction = self._prior_trend(candles, start)
            height = highs[i - 1].price - pattern_lows[0].price
            mid_price = (highs[i].price + pattern_lows[-1].price) / 2

            return Pattern(
                name="Symmetrical Triangle",
                direction=direction,
                start_index=start,
                end_index=end,
                strength=0.65,
                target_price=calculate_target_price(
                    mid_price, height, direction == PatternDirection.BULLISH
                ),
                completion=0.8,
            )

        return None

    # =========================================================================
    # WEDGES
    # =========================================================================

    def detect_rising_wedge(
        self, candles: Sequence[Candle], highs: list[SwingPoint], lows: list[SwingPoint]
    ) -> Optional[Pattern]:
        """Higher highs and higher lows, with the lows rising faster."""
        if len(highs) < 2 or len(lows) < 2:
            return None

        for i in range(len(highs) - 1, 0, -1):
            if highs[i].price <= highs[i - 1].price:
                continue

            start, end = highs[i - 1].index, highs[i].index
            pattern_lows = _within(lows, start, end)
            if len(pattern_lows) < 2 or not _strictly_rising(pattern_lows):
                continue

            # Converging: upper line flatter than the lower one
            if _slope(highs[i - 1], highs[i]) >= _slope(pattern_lows[0], pattern_lows[-1]):
                continue

            last_low = pattern_lows[-1].price
            return Pattern(
                name="Rising Wedge",
                direction=PatternDirection.BEARISH,
                start_index=start,
                end_index=end,
                strength=0.7,
                target_price=calculate_target_price(last_low, highs[i].price - last_low, False),
                completion=0.8,
            )

        return None

    def detect_falling_wedge(
        self, candles: Sequence[Candle], highs: list[SwingPoint], lows: list[SwingPoint]
    ) -> Optional[Pattern]:
        """Lower lows and lower highs, with the highs falling faster."""
        if len(highs) < 2 or len(lows) < 2:
            return None

        for i in range(len(lows) - 1, 0, -1):
            if lows[i].price >= lows[i - 1].price:
                continue

            start, end = lows[i - 1].index, lows[i].index
            pattern_highs = _within(highs, start, end)
            if len(pattern_highs) < 2 or not _strictly_falling(pattern_highs):
                continue

            if _slope(lows[i - 1], lows[i]) <= _slope(pattern_highs[0], pattern_highs[-1]):
                continue

            last_high = pattern_highs[-1].price
            return Pattern(
                name="Falling Wedge",
                direction=PatternDirection.BULLISH,
                start_index=start,
                end_index=end,
                strength=0.7,
                target_price=calculate_target_price(last_high, last_high - lows[i].price, True),
                completion=0.8,
            )

        return None

    # =========================================================================
    # FLAGS AND PENNANTS
    # =========================================================================

    def detect_flag(
        self, candles: Sequence[Candle], highs: list[SwingPoint], lows: list[SwingPoint]
    ) -> Optional[Pattern]:
        """Strong pole followed by a parallel counter-trend channel."""
        return self._detect_pole_continuation(candles, highs, lows, "Flag", self._is_flag)

    def detect_pennant(
        self, candles: Sequence[Candle], highs: list[SwingPoint], lows: list[SwingPoint]
    ) -> Optional[Pattern]:
        """Strong pole followed by converging highs and lows."""
        return self._detect_pole_continuation(candles, highs, lows, "Pennant", self._is_pennant)

    @staticmethod
    def _is_flag(high_slope: float, low_slope: float, bullish_pole: bool) -> bool:
        if abs(high_slope - low_slope) > FLAG_SLOPE_TOLERANCE:
            return False
        # Channel must drift against the pole
        if bullish_pole:
            return high_slope <= 0
        return high_slope >= 0

    @staticmethod
    def _is_pennant(high_slope: float, low_slope: float, bullish_pole: bool) -> bool:
        return high_slope < 0 and low_slope > 0

    def _detect_pole_continuation(
        self,
        candles: Sequence[Candle],
        highs: list[SwingPoint],
        lows: list[SwingPoint],
        name: str,
        consolidation_matches: Callable[[float, float, bool], bool],
    ) -> Optional[Pattern]:
        n = len(candles)
        if n < 20 or len(highs) < 2 or len(lows) < 2:
            return None

        for pole_end in range(n - POLE_BARS, 19, -1):
            pole_start = pole_end - POLE_BARS

            pole_move = candles[pole_end].close - candles[pole_start].close
            pole_range = candles[pole_end].high - candles[pole_start].low
            if abs(pole_move) / candles[pole_start].close < MIN_POLE_MOVE:
                continue

            bullish_pole = pole_move > 0
            body_end = n - 1
            if body_end - pole_end < 5:
                continue

            body_highs = _within(highs, pole_end, body_end)
            body_lows = _within(lows, pole_end, body_end)
            if len(body_highs) < 2 or len(body_lows) < 2:
                continue

            high_slope = _slope(body_highs[0], body_highs[-1])
            low_slope = _slope(body_lows[0], body_lows[-1])
            if not consolidation_matches(high_slope, low_slope, bullish_pole):
                continue

            return Pattern(
                name=name,
                direction=PatternDirection.BULLISH if bullish_pole else PatternDirection.BEARISH,
                start_index=pole_start,
                end_index=body_end,
                strength=0.7,
                target_price=calculate_target_price(
                    candles[body_end].close, abs(pole_range), bullish_pole
                ),
                completion=0.8,
            )

        return None

    # =========================================================================
    # OTHER FORMATIONS
    # =========================================================================

    def detect_cup_and_handle(
        self, candles: Sequence[Candle], highs: list[SwingPoint], lows: list[SwingPoint]
    ) -> Optional[Pattern]:
        """U-shaped cup between equal rims, then a shallow handle."""
        if len(lows) < 3 or len(highs) < 2:
            return None

        for i in range(len(lows) - 1, 1, -1):
            cup_low = lows[i - 1]

            left_rims = [h for h in highs if h.index < cup_low.index]
            right_rims = [h for h in highs if h.index > cup_low.index]
            if not left_rims or not right_rims:
                continue

            left_rim = left_rims[-1]
            right_rim = right_rims[0]
            if not self._equal(left_rim.price, right_rim.price):
                continue

            depth = left_rim.price - cup_low.price
            width = right_rim.index - left_rim.index
            if width < 10 or depth / left_rim.price < 0.1:
                continue

            handle_lows = [low for low in lows if low.index > right_rim.index]
            if not handle_lows:
                continue

            handle_low = handle_lows[0]
            if right_rim.price - handle_low.price > depth * 0.5:
                continue

            return Pattern(
                name="Cup and Handle",
                direction=PatternDirection.BULLISH,
                start_index=left_rim.index,
                end_index=handle_low.index,
                strength=0.8,
                target_price=calculate_target_price(right_rim.price, depth, True),
                completion=0.85,
            )

        return None

    def detect_rounding_bottom(
        self, candles: Sequence[Candle], highs: list[SwingPoint], lows: list[SwingPoint]
    ) -> Optional[Pattern]:
        """Gradual, roughly symmetric U across the whole series."""
        n = len(candles)
        if n < 30 or len(lows) < 5:
            return None

        # Lowest low within the middle third
        lowest_idx = min(range(n // 3, 2 * n // 3), key=lambda k: candles[k].low)
        lowest_price = candles[lowest_idx].low

        left_slope = (candles[lowest_idx].close - candles[0].close) / lowest_idx
        if left_slope >= 0:
            return None

        right_slope = (candles[n - 1].close - candles[lowest_idx].close) / (n - 1 - lowest_idx)
        if right_slope <= 0:
            return None

        if abs(left_slope + right_slope) > abs(left_slope) * 0.5:
            return None

        height = max(candles[0].high, candles[n - 1].high) - lowest_price
        return Pattern(
            name="Rounding Bottom",
            direction=PatternDirection.BULLISH,
            start_index=0,
            end_index=n - 1,
            strength=0.7,
            target_price=calculate_target_price(candles[n - 1].close, height, True),
            completion=0.75,
        )

    def detect_rectangle(
        self, candles: Sequence[Candle], highs: list[SwingPoint], lows: list[SwingPoint]
    ) -> Optional[Pattern]:
        """Flat resistance and flat support; direction follows the prior trend."""
        if len(highs) < 2 or len(lows) < 2:
            return None

        for i in range(len(highs) - 1, 0, -1):
            if not self._equal(highs[i].price, highs[i - 1].price):
                continue

            resistance = highs[i].price
            start, end = highs[i - 1].index, highs[i].index

            pattern_lows = _within(lows, start, end)
            if len(pattern_lows) < 2:
                continue
            support = pattern_lows[0].price
            if not all(self._equal(low.price, support) for low in pattern_lows[1:]):
                continue

            direction = self._prior_trend(candles, start)
            height = resistance - support
            if direction == PatternDirection.BULLISH:
                target = calculate_target_price(resistance, height, True)
            else:
                target = calculate_target_price(support, height, False)

            return Pattern(
                name="Rectangle",
                direction=direction,
                start_index=start,
                end_index=end,
                strength=0.65,
                target_price=target,
                completion=0.8,
            )

        return None

    @staticmethod
    def _prior_trend(candles: Sequence[Candle], start: int) -> PatternDirection:
        """Close change over the bars before the formation; flat is neutral."""
        if start <= PRIOR_TREND_BARS:
            return PatternDirection.NEUTRAL

        change = candles[start].close - candles[start - PRIOR_TREND_BARS].close
        if change > 0:
            return PatternDirection.BULLISH
        if change < 0:
            return PatternDirection.BEARISH
        return PatternDirection.NEUTRAL
