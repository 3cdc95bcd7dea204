"""
CONTRACT 2: Level Calculators

Output models for the price-level tools (Fibonacci retracement, pivot points,
volume profile). Series indicators return NumPy arrays, not models.
"""

from enum import Enum
from pydantic import BaseModel, Field


# =============================================================================
# ENUMS
# =============================================================================


class PivotType(str, Enum):
    STANDARD = "standard"
    WOODIE = "woodie"
    CAMARILLA = "camarilla"
    DEMARK = "demark"
    FIBONACCI = "fibonacci"


# =============================================================================
# FIBONACCI
# =============================================================================


class FibonacciLevels(BaseModel):
    """Retracement and extension levels for one swing."""

    swing_high: float
    swing_low: float
    is_uptrend: bool
    level_0: float
    level_236: float
    level_382: float
    level_500: float
    level_618: float
    level_786: float
    level_1000: float
    level_1272: float = Field(..., description="127.2% extension")
    level_1618: float = Field(..., description="161.8% extension")

    def retracements(self) -> list[float]:
        """Core levels 0%..100% in calculation order."""
        return [
            self.level_0,
            self.level_236,
            self.level_382,
            self.level_500,
            self.level_618,
            self.level_786,
            self.level_1000,
        ]


# =============================================================================
# PIVOTS
# =============================================================================


class PivotPoints(BaseModel):
    """Pivot point levels. DeMark fills only pivot, r1 and s1."""

    pivot: float
    r1: float
    r2: float = 0.0
    r3: float = 0.0
    s1: float
    s2: float = 0.0
    s3: float = 0.0
    type: PivotType = PivotType.STANDARD


# =============================================================================
# VOLUME PROFILE
# =============================================================================


class VolumeProfileResult(BaseModel):
    """Volume distributed over equal-width price bins."""

    price_levels: list[float] = Field(..., description="Bin centre prices")
    volumes: list[int]
    poc: float = Field(..., description="Point of Control")
    vah: float = Field(..., description="Value Area High")
    val: float = Field(..., description="Value Area Low")
