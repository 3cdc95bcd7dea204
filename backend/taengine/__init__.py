"""
Technical Analysis Engine

Deterministic indicator, price-level and chart-pattern calculations over
OHLCV candle series.
"""

__version__ = "0.1.0"
