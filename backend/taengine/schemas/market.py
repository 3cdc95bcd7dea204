"""
CONTRACT 1: Market Data

Input: Sequence[Candle] (time-ascending)

Every indicator, level calculator and pattern recognizer consumes an ordered
series of these candles. The series is read-only for all consumers.
"""

from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field, model_validator


# =============================================================================
# CANDLE
# =============================================================================


class Candle(BaseModel):
    """Single OHLCV bar."""

    model_config = ConfigDict(frozen=True)

    timestamp: datetime
    open: float = Field(..., gt=0)
    high: float = Field(..., gt=0)
    low: float = Field(..., gt=0)
    close: float = Field(..., gt=0)
    volume: int = Field(..., ge=0)

    @model_validator(mode="after")
    def check_price_bounds(self) -> "Candle":
        if self.high < self.low:
            raise ValueError(f"high ({self.high}) must be >= low ({self.low})")
        if self.high < max(self.open, self.close):
            raise ValueError("high must be >= max(open, close)")
        if self.low > min(self.open, self.close):
            raise ValueError("low must be <= min(open, close)")
        return self

    @property
    def range(self) -> float:
        return self.high - self.low

    @property
    def body(self) -> float:
        return abs(self.close - self.open)

    @property
    def upper_shadow(self) -> float:
        return self.high - max(self.open, self.close)

    @property
    def lower_shadow(self) -> float:
        return min(self.open, self.close) - self.low

    @property
    def is_bullish(self) -> bool:
        return self.close > self.open

    @property
    def is_bearish(self) -> bool:
        return self.close < self.open
