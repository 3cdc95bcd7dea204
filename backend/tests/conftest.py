"""Shared fixtures for the test suite."""

import pytest

from taengine.schemas.market import Candle

from factories import make_candles, random_walk


@pytest.fixture
def random_candles() -> list[Candle]:
    return random_walk(120)


@pytest.fixture
def rising_candles() -> list[Candle]:
    return make_candles([100 + i for i in range(40)])
