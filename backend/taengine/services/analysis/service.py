"""
Technical Analysis Service

CONTRACT:
    Input:  AnalysisRequest (candle series)
    Output: TechnicalSnapshot

Runs the indicator engine batch off the event loop, then adds chart and
candlestick patterns, Fibonacci levels and pivot points for the latest bar.
"""

import asyncio
import logging
from typing import Optional

import numpy as np

from taengine.core.config import settings
from taengine.schemas.analysis import AnalysisRequest, TechnicalSnapshot
from taengine.services.base import BaseService, InsufficientDataError
from taengine.services.indicators.calculations import last_value
from taengine.services.indicators.engine import Engine, create_default_engine
from taengine.services.indicators.levels import FibonacciRetracement, StandardPivotPoints
from taengine.services.patterns.candlestick import CandlestickPatternDetector
from taengine.services.patterns.chart import ChartPatternDetector

logger = logging.getLogger(__name__)

MIN_CANDLES = 2


class TechnicalAnalysisService(BaseService[AnalysisRequest, TechnicalSnapshot]):
    """
    Technical Analysis Service.

    Each instance owns its engine and detector; nothing is shared between
    services.
    """

    def __init__(
        self,
        engine: Optional[Engine] = None,
        pattern_detector: Optional[ChartPatternDetector] = None,
        candlestick_detector: Optional[CandlestickPatternDetector] = None,
        fibonacci_lookback: Optional[int] = None,
    ):
        self.engine = engine or create_default_engine()
        self.pattern_detector = pattern_detector or ChartPatternDetector()
        self.candlestick_detector = candlestick_detector or CandlestickPatternDetector()
        self.fibonacci = FibonacciRetracement(fibonacci_lookback or settings.fibonacci_lookback)
        self.pivots = StandardPivotPoints()

    @property
    def name(self) -> str:
        return "TechnicalAnalysisService"

    async def execute(self, input_data: AnalysisRequest) -> TechnicalSnapshot:
        """Build a technical snapshot for the request's candle series."""
        request = await self.validate_input(input_data)
        candles = request.candles

        if request.indicators is None:
            single, multi = await asyncio.to_thread(self.engine.calculate_all, candles)
        else:
            single = await asyncio.to_thread(
                self.engine.calculate_selected, candles, request.indicators
            )
            multi = {}

        patterns = []
        candlestick_patterns = []
        if request.detect_patterns:
            patterns = await asyncio.to_thread(self.pattern_detector.detect, candles)
            candlestick_patterns = self.candlestick_detector.detect(candles)

        fibonacci = None
        if len(candles) >= self.fibonacci.lookback:
            fibonacci = self.fibonacci.calculate(candles)

        # Pivots come from the completed bar before the latest one
        pivot_points = self.pivots.calculate_from_candle(candles[-2])

        logger.debug(
            f"{request.symbol or 'series'}: {len(single)} indicators, "
            f"{len(multi)} multi-value, {len(patterns)} chart patterns, "
            f"{len(candlestick_patterns)} candlestick patterns"
        )

        return TechnicalSnapshot(
            symbol=request.symbol,
            timestamp=candles[-1].timestamp,
            last_close=candles[-1].close,
            indicators={name: _latest(values) for name, values in single.items()},
            multi_indicators={
                name: {key: _latest(values) for key, values in series.items()}
                for name, series in multi.items()
            },
            patterns=patterns,
            candlestick_patterns=candlestick_patterns,
            fibonacci=fibonacci,
            pivot_points=pivot_points,
        )

    async def validate_input(self, input_data: AnalysisRequest) -> AnalysisRequest:
        if len(input_data.candles) < MIN_CANDLES:
            raise InsufficientDataError(self.name, MIN_CANDLES, len(input_data.candles))
        return input_data

    async def health_check(self) -> bool:
        """Pure computation; always healthy."""
        return True


def _latest(values: np.ndarray) -> float:
    value = last_value(values)
    return value if value is not None else 0.0
