"""
Technical Analysis Service

Async facade that combines the indicator engine, chart patterns and price
levels into one snapshot per candle series.
"""

from taengine.services.analysis.service import TechnicalAnalysisService

__all__ = ["TechnicalAnalysisService"]
