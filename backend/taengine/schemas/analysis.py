"""
CONTRACT 4: Technical Analysis

Input: AnalysisRequest
Output: TechnicalSnapshot

Aggregates the engine batch, chart patterns and price levels for the most
recent bar of a candle series.
"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field

from taengine.schemas.market import Candle
from taengine.schemas.indicators import FibonacciLevels, PivotPoints
from taengine.schemas.patterns import Pattern


# =============================================================================
# INPUT: AnalysisRequest
# =============================================================================


class AnalysisRequest(BaseModel):
    """
    Request for a technical snapshot.

    `indicators` restricts the single-value batch to the named indicators;
    None runs every registered indicator (single and multi-value).
    """

    symbol: str = Field(default="", description="Label carried to the output")
    candles: list[Candle]
    indicators: Optional[list[str]] = None
    detect_patterns: bool = True


# =============================================================================
# OUTPUT: TechnicalSnapshot
# =============================================================================


class TechnicalSnapshot(BaseModel):
    """Latest indicator values, patterns and levels for one series."""

    symbol: str
    timestamp: datetime
    last_close: float
    indicators: dict[str, float] = Field(default_factory=dict)
    multi_indicators: dict[str, dict[str, float]] = Field(default_factory=dict)
    patterns: list[Pattern] = Field(default_factory=list)
    candlestick_patterns: list[Pattern] = Field(default_factory=list)
    fibonacci: Optional[FibonacciLevels] = None
    pivot_points: Optional[PivotPoints] = None
