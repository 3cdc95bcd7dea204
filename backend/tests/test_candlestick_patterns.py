"""Tests for candlestick pattern recognition."""

import pytest

from taengine.schemas.patterns import PatternDirection, PatternType
from taengine.services.patterns import CandlestickPatternDetector
from taengine.services.patterns.candlestick import is_downtrend, is_uptrend

from factories import flat_candles, make_candle, make_candles

AVG_VOLUME = 1000.0


@pytest.fixture
def detector() -> CandlestickPatternDetector:
    return CandlestickPatternDetector()


def soldiers() -> list:
    return [
        make_candle(0, 104.0, open_=100.0),
        make_candle(1, 107.0, open_=102.0),
        make_candle(2, 110.0, open_=105.0),
    ]


def crows() -> list:
    return [
        make_candle(0, 106.0, open_=110.0),
        make_candle(1, 103.0, open_=108.0),
        make_candle(2, 100.0, open_=105.0),
    ]


class TestCandleShape:
    """Tests for the Candle body and shadow helpers."""

    def test_bullish_bar(self):
        candle = make_candle(0, 104.0, high=106.0, low=99.0, open_=100.0)

        assert candle.range == 7.0
        assert candle.body == 4.0
        assert candle.upper_shadow == 2.0
        assert candle.lower_shadow == 1.0
        assert candle.is_bullish and not candle.is_bearish

    def test_flat_bar_has_no_colour(self):
        candle = flat_candles(1)[0]
        assert not candle.is_bullish and not candle.is_bearish
        assert candle.range == 0.0


class TestTrendContext:
    """Tests for the prior-trend checks."""

    def test_needs_three_prior_bars(self):
        candles = make_candles([110.0, 105.0, 100.0, 95.0])
        assert is_downtrend(candles, 2) is False
        assert is_downtrend(candles, 3) is True
        assert is_uptrend(candles, 3) is False

    def test_uptrend(self):
        assert is_uptrend(make_candles([100.0, 105.0, 110.0, 90.0]), 3) is True


class TestSingleBar:
    """Tests for one-bar recognizers."""

    def test_doji(self, detector):
        candles = [make_candle(0, 100.0, high=102.0, low=98.0, open_=100.1)]
        pattern = detector.detect_doji(candles, 0, AVG_VOLUME)

        assert pattern.name == "Doji"
        assert pattern.type == PatternType.CANDLESTICK
        assert pattern.direction == PatternDirection.NEUTRAL
        assert pattern.strength == 0.5
        assert pattern.target_price is None
        assert pattern.completion == 1.0

    def test_zero_range_is_not_doji(self, detector):
        assert detector.detect_doji(flat_candles(1), 0, AVG_VOLUME) is None

    def test_doji_threshold_override(self):
        candles = [make_candle(0, 101.0, high=103.0, low=98.0, open_=100.0)]
        assert CandlestickPatternDetector().detect_doji(candles, 0, AVG_VOLUME) is None
        assert (
            CandlestickPatternDetector(doji_threshold=0.3).detect_doji(candles, 0, AVG_VOLUME)
            is not None
        )

    def test_hammer_after_decline(self, detector):
        candles = make_candles([110.0, 105.0, 100.0]) + [
            make_candle(3, 100.0, high=100.2, low=96.0, open_=99.0)
        ]
        pattern = detector.detect_hammer(candles, 3, AVG_VOLUME)

        assert pattern.name == "Hammer"
        assert pattern.direction == PatternDirection.BULLISH
        assert pattern.strength == 0.7
        assert detector.detect_hanging_man(candles, 3, AVG_VOLUME) is None

    def test_hanging_man_after_rally(self, detector):
        candles = make_candles([100.0, 105.0, 110.0]) + [
            make_candle(3, 112.0, high=112.2, low=108.0, open_=111.0)
        ]
        pattern = detector.detect_hanging_man(candles, 3, AVG_VOLUME)

        assert pattern.name == "Hanging Man"
        assert pattern.direction == PatternDirection.BEARISH
        assert detector.detect_hammer(candles, 3, AVG_VOLUME) is None

    def test_inverted_hammer_after_decline(self, detector):
        candles = make_candles([110.0, 105.0, 100.0]) + [
            make_candle(3, 100.0, high=103.0, low=98.8, open_=99.0)
        ]
        pattern = detector.detect_inverted_hammer(candles, 3, AVG_VOLUME)

        assert pattern.name == "Inverted Hammer"
        assert pattern.strength == 0.6

    def test_shooting_star_after_rally(self, detector):
        candles = make_candles([100.0, 105.0, 110.0]) + [
            make_candle(3, 110.0, high=114.0, low=109.8, open_=111.0)
        ]
        pattern = detector.detect_shooting_star(candles, 3, AVG_VOLUME)

        assert pattern.name == "Shooting Star"
        assert pattern.direction == PatternDirection.BEARISH

    def test_shape_without_trend_is_ignored(self, detector):
        candles = [make_candle(0, 100.0, high=100.2, low=96.0, open_=99.0)]
        assert detector.detect_hammer(candles, 0, AVG_VOLUME) is None

    @pytest.mark.parametrize(
        "open_, close, high, low, direction",
        [
            (100.0, 110.0, 110.2, 99.9, PatternDirection.BULLISH),
            (110.0, 100.0, 110.1, 99.8, PatternDirection.BEARISH),
        ],
    )
    def test_marubozu(self, detector, open_, close, high, low, direction):
        candles = [make_candle(0, close, high=high, low=low, open_=open_)]
        pattern = detector.detect_marubozu(candles, 0, AVG_VOLUME)

        assert pattern.name == "Marubozu"
        assert pattern.direction == direction
        assert pattern.strength == 0.8

    def test_spinning_top(self, detector):
        candles = [make_candle(0, 101.0, high=103.0, low=98.0, open_=100.0)]
        pattern = detector.detect_spinning_top(candles, 0, AVG_VOLUME)

        assert pattern.name == "Spinning Top"
        assert pattern.direction == PatternDirection.NEUTRAL
        assert detector.detect_doji(candles, 0, AVG_VOLUME) is None


class TestTwoBar:
    """Tests for two-bar recognizers."""

    def test_bullish_engulfing(self, detector):
        candles = [make_candle(0, 100.0, open_=102.0), make_candle(1, 103.0, open_=99.5)]
        pattern = detector.detect_engulfing(candles, 1, AVG_VOLUME)

        assert pattern.name == "Bullish Engulfing"
        assert (pattern.start_index, pattern.end_index) == (0, 1)
        assert pattern.strength == 0.8

    def test_bearish_engulfing(self, detector):
        candles = [make_candle(0, 102.0, open_=100.0), make_candle(1, 99.5, open_=102.5)]
        assert detector.detect_engulfing(candles, 1, AVG_VOLUME).name == "Bearish Engulfing"

    def test_smaller_body_does_not_engulf(self, detector):
        candles = [make_candle(0, 100.0, open_=104.0), make_candle(1, 103.0, open_=100.0)]
        assert detector.detect_engulfing(candles, 1, AVG_VOLUME) is None

    def test_piercing_line(self, detector):
        candles = [make_candle(0, 100.0, open_=110.0), make_candle(1, 106.0, open_=99.0)]
        pattern = detector.detect_piercing_line(candles, 1, AVG_VOLUME)

        assert pattern.name == "Piercing Line"
        assert pattern.direction == PatternDirection.BULLISH

    def test_piercing_line_rejects_full_recovery(self, detector):
        candles = [make_candle(0, 100.0, open_=110.0), make_candle(1, 111.0, open_=99.0)]
        assert detector.detect_piercing_line(candles, 1, AVG_VOLUME) is None

    def test_dark_cloud_cover(self, detector):
        candles = [make_candle(0, 110.0, open_=100.0), make_candle(1, 104.0, open_=111.0)]
        pattern = detector.detect_dark_cloud_cover(candles, 1, AVG_VOLUME)

        assert pattern.name == "Dark Cloud Cover"
        assert pattern.direction == PatternDirection.BEARISH

    def test_tweezer_bottom(self, detector):
        candles = make_candles([115.0, 110.0, 105.0]) + [
            make_candle(3, 101.0, high=104.5, low=100.0, open_=104.0),
            make_candle(4, 103.0, high=103.5, low=100.1, open_=101.2),
        ]
        pattern = detector.detect_tweezer(candles, 4, AVG_VOLUME)

        assert pattern.name == "Tweezer Bottom"
        assert (pattern.start_index, pattern.end_index) == (3, 4)
        assert pattern.strength == 0.65

    def test_bullish_harami(self, detector):
        candles = [make_candle(0, 100.0, open_=110.0), make_candle(1, 106.0, open_=103.0)]
        pattern = detector.detect_harami(candles, 1, AVG_VOLUME)

        assert pattern.name == "Bullish Harami"
        assert pattern.strength == 0.6


class TestThreeBar:
    """Tests for three-bar recognizers."""

    def test_morning_star(self, detector):
        candles = [
            make_candle(0, 100.0, high=110.5, low=99.5, open_=110.0),
            make_candle(1, 98.3, high=99.0, low=97.5, open_=98.0),
            make_candle(2, 107.0, high=107.5, low=98.5, open_=99.0),
        ]
        pattern = detector.detect_morning_star(candles, 2, AVG_VOLUME)

        assert pattern.name == "Morning Star"
        assert (pattern.start_index, pattern.end_index) == (0, 2)
        assert pattern.strength == 0.85

    def test_evening_star(self, detector):
        candles = [
            make_candle(0, 110.0, high=110.5, low=99.5, open_=100.0),
            make_candle(1, 111.7, high=112.5, low=111.0, open_=112.0),
            make_candle(2, 103.0, high=111.5, low=102.5, open_=111.0),
        ]
        pattern = detector.detect_evening_star(candles, 2, AVG_VOLUME)

        assert pattern.name == "Evening Star"
        assert pattern.direction == PatternDirection.BEARISH

    def test_three_white_soldiers(self, detector):
        pattern = detector.detect_three_white_soldiers(soldiers(), 2, AVG_VOLUME)

        assert pattern.name == "Three White Soldiers"
        assert pattern.strength == 0.9
        assert detector.detect_three_black_crows(soldiers(), 2, AVG_VOLUME) is None

    def test_three_black_crows(self, detector):
        pattern = detector.detect_three_black_crows(crows(), 2, AVG_VOLUME)

        assert pattern.name == "Three Black Crows"
        assert pattern.direction == PatternDirection.BEARISH


class TestDetect:
    """Tests for the full detection pass."""

    def test_short_series_is_empty(self, detector):
        assert detector.detect(make_candles([100.0, 101.0])) == []

    def test_three_soldiers_series(self, detector):
        patterns = detector.detect(soldiers())

        assert [p.name for p in patterns] == ["Three White Soldiers"]
        assert all(p.type == PatternType.CANDLESTICK for p in patterns)
        assert patterns[0].volume_confirmed is False

    def test_volume_confirmation_lifts_strength(self, detector):
        candles = soldiers()
        pattern = detector.detect_three_white_soldiers(candles, 2, avg_volume=500.0)

        # 1000 >= 1.5 * 500; 0.9 * 1.2 is capped at 1.0
        assert pattern.volume_confirmed is True
        assert pattern.strength == 1.0

    def test_zero_average_volume_never_confirms(self, detector):
        pattern = detector.detect_three_white_soldiers(soldiers(), 2, avg_volume=0.0)
        assert pattern.volume_confirmed is False
        assert pattern.strength == 0.9
