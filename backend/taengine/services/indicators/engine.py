"""
Indicator Calculation Engine

Registry of named indicators plus a bounded worker pool that evaluates
them over one candle series.

Batch calls (calculate_all / calculate_selected) isolate failures: an
indicator that raises is logged and left out of the result. Single calls
(calculate / calculate_multi) propagate errors to the caller.

Cancellation is cooperative: callers pass a threading.Event, which is
checked before each unit starts. Units already running finish normally.
"""

import logging
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Iterable, Optional, Sequence, Union

import numpy as np

from taengine.core.config import settings
from taengine.schemas.market import Candle
from taengine.services.base import CalculationCancelledError, IndicatorNotFoundError
from taengine.services.indicators.interface import Indicator, MultiValueIndicator
from taengine.services.indicators.momentum import (
    CCI,
    ROC,
    RSI,
    Momentum,
    Stochastic,
    WilliamsR,
)
from taengine.services.indicators.volatility import (
    ATR,
    BollingerBands,
    DonchianChannels,
    KeltnerChannels,
)

logger = logging.getLogger(__name__)

DEFAULT_WORKERS = 4

SingleResults = dict[str, np.ndarray]
MultiResults = dict[str, dict[str, np.ndarray]]


class Engine:
    """Concurrent indicator calculation engine."""

    name = "IndicatorEngine"

    def __init__(self, workers: Optional[int] = None):
        if workers is None:
            workers = settings.engine_workers
        self.workers = workers if workers > 0 else DEFAULT_WORKERS

        self._indicators: dict[str, Indicator] = {}
        self._multi_indicators: dict[str, MultiValueIndicator] = {}
        self._registry_lock = threading.RLock()

    # =========================================================================
    # REGISTRY
    # =========================================================================

    def register_indicator(self, indicator: Indicator) -> None:
        """Register a single-value indicator; replaces any with the same name."""
        with self._registry_lock:
            self._indicators[indicator.name] = indicator
        logger.debug(f"Registered indicator {indicator.name}")

    def register_multi_indicator(self, indicator: MultiValueIndicator) -> None:
        """Register a multi-value indicator; replaces any with the same name."""
        with self._registry_lock:
            self._multi_indicators[indicator.name] = indicator
        logger.debug(f"Registered multi-value indicator {indicator.name}")

    def list_indicators(self) -> list[str]:
        with self._registry_lock:
            return list(self._indicators)

    def list_multi_indicators(self) -> list[str]:
        with self._registry_lock:
            return list(self._multi_indicators)

    # =========================================================================
    # SINGLE CALLS
    # =========================================================================

    def calculate(
        self,
        name: str,
        candles: Sequence[Candle],
        cancel: Optional[threading.Event] = None,
    ) -> np.ndarray:
        """
        Calculate one single-value indicator synchronously.

        Raises:
            IndicatorNotFoundError: name not registered
            CalculationCancelledError: cancel already set
            ServiceError: whatever the indicator raises
        """
        with self._registry_lock:
            indicator = self._indicators.get(name)
        if indicator is None:
            raise IndicatorNotFoundError(self.name, f"indicator {name} not found", {"name": name})
        self._raise_if_cancelled(cancel)
        return indicator.calculate(candles)

    def calculate_multi(
        self,
        name: str,
        candles: Sequence[Candle],
        cancel: Optional[threading.Event] = None,
    ) -> dict[str, np.ndarray]:
        """Calculate one multi-value indicator synchronously."""
        with self._registry_lock:
            indicator = self._multi_indicators.get(name)
        if indicator is None:
            raise IndicatorNotFoundError(
                self.name, f"multi-value indicator {name} not found", {"name": name}
            )
        self._raise_if_cancelled(cancel)
        return indicator.calculate(candles)

    # =========================================================================
    # BATCH CALLS
    # =========================================================================

    def calculate_all(
        self,
        candles: Sequence[Candle],
        cancel: Optional[threading.Event] = None,
    ) -> tuple[SingleResults, MultiResults]:
        """
        Run every registered indicator of both kinds on one shared pool.

        Returns: (single_results, multi_results); failed or cancelled
        indicators are absent.
        """
        with self._registry_lock:
            units = list(self._indicators.values()) + list(self._multi_indicators.values())
        return self._run_batch(units, candles, cancel)

    def calculate_selected(
        self,
        candles: Sequence[Candle],
        names: Iterable[str],
        cancel: Optional[threading.Event] = None,
    ) -> SingleResults:
        """Run the named single-value indicators; unknown names are skipped."""
        with self._registry_lock:
            units = [self._indicators[n] for n in dict.fromkeys(names) if n in self._indicators]
        single_results, _ = self._run_batch(units, candles, cancel)
        return single_results

    def _run_batch(
        self,
        units: list[Union[Indicator, MultiValueIndicator]],
        candles: Sequence[Candle],
        cancel: Optional[threading.Event],
    ) -> tuple[SingleResults, MultiResults]:
        single_results: SingleResults = {}
        multi_results: MultiResults = {}
        if not units:
            return single_results, multi_results

        # Leaving the executor context waits for every submitted unit
        with ThreadPoolExecutor(max_workers=self.workers) as executor:
            future_to_unit = {
                executor.submit(self._run_unit, unit, candles, cancel): unit for unit in units
            }

            for future in as_completed(future_to_unit):
                unit = future_to_unit[future]
                try:
                    output = future.result()
                except Exception as e:
                    logger.debug(f"Indicator {unit.name} failed: {e}")
                    continue

                if output is None:
                    continue
                if isinstance(unit, MultiValueIndicator):
                    multi_results[unit.name] = output
                else:
                    single_results[unit.name] = output

        logger.debug(
            f"Batch finished: {len(single_results) + len(multi_results)}/{len(units)} indicators"
        )
        return single_results, multi_results

    @staticmethod
    def _run_unit(
        unit: Union[Indicator, MultiValueIndicator],
        candles: Sequence[Candle],
        cancel: Optional[threading.Event],
    ):
        if cancel is not None and cancel.is_set():
            return None
        return unit.calculate(candles)

    def _raise_if_cancelled(self, cancel: Optional[threading.Event]) -> None:
        if cancel is not None and cancel.is_set():
            raise CalculationCancelledError(self.name, "calculation cancelled")


def create_default_engine(workers: Optional[int] = None) -> Engine:
    """Engine pre-loaded with the standard momentum and volatility catalog."""
    engine = Engine(workers)

    for indicator in (
        RSI(14),
        RSI(7),
        CCI(20),
        WilliamsR(14),
        ROC(12),
        Momentum(10),
        ATR(14),
    ):
        engine.register_indicator(indicator)

    for multi in (
        BollingerBands(20, 2.0),
        Stochastic(14, 3, 3),
        KeltnerChannels(20, 10, 2.0),
        DonchianChannels(20),
    ):
        engine.register_multi_indicator(multi)

    return engine
