"""
CONTRACT 3: Pattern Detection

Swing points feed the chart pattern recognizers; each recognizer emits at
most one Pattern per detection pass. Candlestick recognizers read raw bars
and report every bar (or bar group) that matches.
"""

from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field


class PatternType(str, Enum):
    CHART = "chart"
    CANDLESTICK = "candlestick"


class PatternDirection(str, Enum):
    BULLISH = "bullish"
    BEARISH = "bearish"
    NEUTRAL = "neutral"


class SwingPoint(BaseModel):
    """Local extreme confirmed by `strength` bars on each side."""

    index: int = Field(..., ge=0)
    price: float
    is_high: bool
    strength: int = Field(..., ge=1)


class Pattern(BaseModel):
    """
    Detected chart formation or candlestick pattern.

    Candlestick patterns carry no measured-move target and are complete on
    the bar that forms them.
    """

    name: str
    type: PatternType = PatternType.CHART
    direction: PatternDirection
    start_index: int = Field(..., ge=0)
    end_index: int = Field(..., ge=0)
    strength: float = Field(..., ge=0, le=1)
    target_price: Optional[float] = None
    completion: float = Field(..., ge=0, le=1)
    volume_confirmed: bool = False
