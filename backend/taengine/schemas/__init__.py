"""
Technical Analysis Schema Contracts

Data models shared by the indicator engine, level calculators, pattern
detectors and the analysis service.
"""

from taengine.schemas.market import Candle
from taengine.schemas.indicators import (
    FibonacciLevels,
    PivotPoints,
    PivotType,
    VolumeProfileResult,
)
from taengine.schemas.patterns import (
    Pattern,
    PatternDirection,
    PatternType,
    SwingPoint,
)
from taengine.schemas.analysis import AnalysisRequest, TechnicalSnapshot

__all__ = [
    # Market
    "Candle",
    # Levels
    "FibonacciLevels",
    "PivotPoints",
    "PivotType",
    "VolumeProfileResult",
    # Patterns
    "Pattern",
    "PatternDirection",
    "PatternType",
    "SwingPoint",
    # Analysis
    "AnalysisRequest",
    "TechnicalSnapshot",
]
