"""
Indicator Engine

RESPONSIBILITIES:
    - Momentum indicators (RSI, Stochastic, CCI, Williams %R, ROC, ...)
    - Volatility indicators (ATR, Bollinger, Keltner, Donchian, HV)
    - Trend and volume indicators (MACD, ADX, SuperTrend, VWAP, MFI, ...)
    - Price levels (Fibonacci retracement, pivot points)
    - Concurrent batch evaluation through the Engine registry

Uses NumPy for calculations.
All math is deterministic and reproducible.
"""

from taengine.services.indicators.interface import (
    BaseIndicator,
    Indicator,
    MultiValueIndicator,
)
from taengine.services.indicators.engine import Engine, create_default_engine
from taengine.services.indicators.momentum import (
    CCI,
    ROC,
    RSI,
    Momentum,
    Stochastic,
    UltimateOscillator,
    WilliamsR,
)
from taengine.services.indicators.volatility import (
    ATR,
    BollingerBands,
    DonchianChannels,
    HistoricalVolatility,
    KeltnerChannels,
)
from taengine.services.indicators.trend import (
    ADX,
    EMA,
    MACD,
    SMA,
    IchimokuCloud,
    ParabolicSAR,
    SuperTrend,
)
from taengine.services.indicators.volume import (
    CMF,
    MFI,
    OBV,
    VWAP,
    ADLine,
    ForceIndex,
    VolumeProfile,
)
from taengine.services.indicators.levels import (
    CamarillaPivotPoints,
    DeMarkPivotPoints,
    FibonacciPivotPoints,
    FibonacciRetracement,
    StandardPivotPoints,
    WoodiePivotPoints,
    find_pivot_points,
)

__all__ = [
    "BaseIndicator",
    "Indicator",
    "MultiValueIndicator",
    "Engine",
    "create_default_engine",
    # Momentum
    "RSI",
    "Stochastic",
    "CCI",
    "WilliamsR",
    "ROC",
    "Momentum",
    "UltimateOscillator",
    # Volatility
    "ATR",
    "BollingerBands",
    "KeltnerChannels",
    "DonchianChannels",
    "HistoricalVolatility",
    # Trend
    "SMA",
    "EMA",
    "MACD",
    "ADX",
    "SuperTrend",
    "ParabolicSAR",
    "IchimokuCloud",
    # Volume
    "VWAP",
    "OBV",
    "MFI",
    "CMF",
    "ADLine",
    "ForceIndex",
    "VolumeProfile",
    # Levels
    "FibonacciRetracement",
    "StandardPivotPoints",
    "WoodiePivotPoints",
    "CamarillaPivotPoints",
    "FibonacciPivotPoints",
    "DeMarkPivotPoints",
    "find_pivot_points",
]
