"""
Volume Indicators

VWAP, OBV, MFI, CMF, A/D Line, Force Index, Volume Profile.
"""

from typing import Sequence

import numpy as np

from taengine.schemas.indicators import VolumeProfileResult
from taengine.schemas.market import Candle
from taengine.services.indicators.calculations import (
    ema,
    highest,
    lowest,
    money_flow_volume,
    to_arrays,
    typical_price,
)
from taengine.services.indicators.interface import BaseIndicator, Indicator

VALUE_AREA_SHARE = 0.7


class VWAP(Indicator):
    """Cumulative Volume Weighted Average Price."""

    @property
    def name(self) -> str:
        return "VWAP"

    @property
    def period(self) -> int:
        return 1

    def calculate(self, candles: Sequence[Candle]) -> np.ndarray:
        self._check_length(candles, 1)

        data = to_arrays(candles)
        tp = typical_price(data.highs, data.lows, data.closes)
        cumulative_tpv = np.cumsum(tp * data.volumes)
        cumulative_volume = np.cumsum(data.volumes)

        # Zero until the first traded bar
        result = np.zeros(len(data))
        traded = cumulative_volume != 0
        result[traded] = cumulative_tpv[traded] / cumulative_volume[traded]
        return result


class OBV(Indicator):
    """On-Balance Volume."""

    @property
    def name(self) -> str:
        return "OBV"

    @property
    def period(self) -> int:
        return 1

    def calculate(self, candles: Sequence[Candle]) -> np.ndarray:
        self._check_length(candles, 1)

        data = to_arrays(candles)
        closes, volumes = data.closes, data.volumes
        result = np.zeros(len(closes))
        result[0] = volumes[0]

        for i in range(1, len(closes)):
            if closes[i] > closes[i - 1]:
                result[i] = result[i - 1] + volumes[i]
            elif closes[i] < closes[i - 1]:
                result[i] = result[i - 1] - volumes[i]
            else:
                result[i] = result[i - 1]

        return result


class MFI(Indicator):
    """Money Flow Index."""

    def __init__(self, period: int = 14):
        self._period = period

    @property
    def name(self) -> str:
        return f"MFI_{self._period}"

    @property
    def period(self) -> int:
        return self._period

    def calculate(self, candles: Sequence[Candle]) -> np.ndarray:
        self._check_positive(self._period)
        self._check_length(candles, self._period + 1)

        data = to_arrays(candles)
        tp = typical_price(data.highs, data.lows, data.closes)
        raw_money_flow = tp * data.volumes
        n = len(tp)

        pos_flow = np.zeros(n)
        neg_flow = np.zeros(n)
        for i in range(1, n):
            if tp[i] > tp[i - 1]:
                pos_flow[i] = raw_money_flow[i]
            elif tp[i] < tp[i - 1]:
                neg_flow[i] = raw_money_flow[i]

        p = self._period
        result = np.zeros(n)
        for i in range(p, n):
            pos_sum = np.sum(pos_flow[i - p + 1 : i + 1])
            neg_sum = np.sum(neg_flow[i - p + 1 : i + 1])

            if neg_sum == 0:
                result[i] = 100
            else:
                money_ratio = pos_sum / neg_sum
                result[i] = 100 - (100 / (1 + money_ratio))

        return result


class CMF(Indicator):
    """Chaikin Money Flow."""

    def __init__(self, period: int = 20):
        self._period = period

    @property
    def name(self) -> str:
        return f"CMF_{self._period}"

    @property
    def period(self) -> int:
        return self._period

    def calculate(self, candles: Sequence[Candle]) -> np.ndarray:
        self._check_positive(self._period)
        self._check_length(candles, self._period)

        data = to_arrays(candles)
        mfv = money_flow_volume(data.highs, data.lows, data.closes, data.volumes)
        p = self._period
        result = np.zeros(len(data))

        for i in range(p - 1, len(data)):
            volume_sum = np.sum(data.volumes[i - p + 1 : i + 1])
            if volume_sum != 0:
                result[i] = np.sum(mfv[i - p + 1 : i + 1]) / volume_sum

        return result


class ADLine(Indicator):
    """Accumulation/Distribution Line."""

    @property
    def name(self) -> str:
        return "ADLine"

    @property
    def period(self) -> int:
        return 1

    def calculate(self, candles: Sequence[Candle]) -> np.ndarray:
        self._check_length(candles, 1)

        data = to_arrays(candles)
        return np.cumsum(money_flow_volume(data.highs, data.lows, data.closes, data.volumes))


class ForceIndex(Indicator):
    """EMA of close change times volume."""

    def __init__(self, period: int = 13):
        self._period = period

    @property
    def name(self) -> str:
        return f"ForceIndex_{self._period}"

    @property
    def period(self) -> int:
        return self._period

    def calculate(self, candles: Sequence[Candle]) -> np.ndarray:
        self._check_positive(self._period)
        self._check_length(candles, self._period + 1)

        data = to_arrays(candles)
        raw_force = np.zeros(len(data))
        raw_force[1:] = np.diff(data.closes) * data.volumes[1:]
        return ema(raw_force, self._period)


class VolumeProfile(BaseIndicator):
    """
    Volume distribution over equal-width price bins.

    Each candle's whole volume lands in the bin holding its typical price.
    The value area grows from the Point of Control toward the heavier
    neighbour until it holds 70% of total volume.
    """

    def __init__(self, num_bins: int = 24):
        self.num_bins = num_bins

    @property
    def name(self) -> str:
        return f"VolumeProfile_{self.num_bins}"

    @property
    def period(self) -> int:
        return 1

    def calculate_profile(self, candles: Sequence[Candle]) -> VolumeProfileResult:
        self._check_length(candles, 1)
        self._check_positive(self.num_bins)

        data = to_arrays(candles)
        max_price = highest(data.highs)
        min_price = lowest(data.lows)

        if max_price == min_price:
            return VolumeProfileResult(
                price_levels=[max_price],
                volumes=[int(candles[0].volume)],
                poc=max_price,
                vah=max_price,
                val=min_price,
            )

        bins = self.num_bins
        bin_size = (max_price - min_price) / bins
        price_levels = [min_price + i * bin_size + bin_size / 2 for i in range(bins)]
        volumes = [0] * bins

        tp = typical_price(data.highs, data.lows, data.closes)
        for price, candle in zip(tp, candles):
            idx = min(max(int((price - min_price) / bin_size), 0), bins - 1)
            volumes[idx] += candle.volume

        poc_idx = 0
        max_volume = 0
        for i, vol in enumerate(volumes):
            if vol > max_volume:
                max_volume = vol
                poc_idx = i

        target = int(sum(volumes) * VALUE_AREA_SHARE)
        high_idx = low_idx = poc_idx
        area_volume = volumes[poc_idx]

        while area_volume < target and (high_idx < bins - 1 or low_idx > 0):
            upper_vol = volumes[high_idx + 1] if high_idx < bins - 1 else 0
            lower_vol = volumes[low_idx - 1] if low_idx > 0 else 0

            if upper_vol >= lower_vol and high_idx < bins - 1:
                high_idx += 1
                area_volume += volumes[high_idx]
            elif low_idx > 0:
                low_idx -= 1
                area_volume += volumes[low_idx]
            else:
                break

        return VolumeProfileResult(
            price_levels=price_levels,
            volumes=volumes,
            poc=price_levels[poc_idx],
            vah=price_levels[high_idx],
            val=price_levels[low_idx],
        )
