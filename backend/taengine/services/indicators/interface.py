"""
Indicator Interfaces

Defines the two calculation contracts the engine dispatches on.

    Indicator            candles -> np.ndarray
    MultiValueIndicator  candles -> dict[str, np.ndarray]

Every output series has the same length as the input; indices before the
warm-up window hold 0.0.
"""

from abc import ABC, abstractmethod
from typing import Sequence

import numpy as np

from taengine.schemas.market import Candle
from taengine.services.base import InsufficientDataError, InvalidPeriodError


class BaseIndicator(ABC):
    """Shared naming and validation for both indicator kinds."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Registry key, e.g. RSI_14."""
        pass

    @property
    @abstractmethod
    def period(self) -> int:
        """Nominal look-back window."""
        pass

    def _check_positive(self, *values: float) -> None:
        for value in values:
            if value <= 0:
                raise InvalidPeriodError(
                    self.name, f"invalid period: {value}", {"value": value}
                )

    def _check_length(self, candles: Sequence[Candle], required: int) -> None:
        if len(candles) < required:
            raise InsufficientDataError(self.name, required, len(candles))

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name}>"


class Indicator(BaseIndicator):
    """Single-value indicator contract."""

    @abstractmethod
    def calculate(self, candles: Sequence[Candle]) -> np.ndarray:
        """
        Calculate the indicator series.

        Raises:
            InvalidPeriodError: configured period is not positive
            InsufficientDataError: series shorter than the minimum window
        """
        pass


class MultiValueIndicator(BaseIndicator):
    """Multi-value indicator contract (named sub-series)."""

    @abstractmethod
    def calculate(self, candles: Sequence[Candle]) -> dict[str, np.ndarray]:
        """
        Calculate every named sub-series.

        Raises:
            InvalidPeriodError: configured period is not positive
            InsufficientDataError: series shorter than the minimum window
        """
        pass
