"""
Pattern Detection

Swing point detection, geometric chart pattern recognizers and candlestick
pattern recognizers.
"""

from taengine.services.patterns.swing_points import SwingPointDetector, prices_equal
from taengine.services.patterns.chart import ChartPatternDetector
from taengine.services.patterns.candlestick import CandlestickPatternDetector

__all__ = [
    "SwingPointDetector",
    "prices_equal",
    "ChartPatternDetector",
    "CandlestickPatternDetector",
]
