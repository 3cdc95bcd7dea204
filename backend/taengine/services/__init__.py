"""
Technical Analysis Services

Indicator engine, pattern detection and the analysis facade.
Each service has a defined interface (contract) and implementation.
"""

from taengine.services.base import (
    BaseService,
    CalculationCancelledError,
    IndicatorNotFoundError,
    InsufficientDataError,
    InvalidPeriodError,
    ServiceError,
)

__all__ = [
    "BaseService",
    "ServiceError",
    "InsufficientDataError",
    "InvalidPeriodError",
    "IndicatorNotFoundError",
    "CalculationCancelledError",
]
