"""
Pytest fixtures for the Technical Calculators tests.
"""

import sys
from pathlib import Path

import numpy as np
import pytest

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from technical_calculators.calculators.transforms import RetCode, TransformResult  # noqa: E402
from technical_calculators.config import get_settings  # noqa: E402


def make_ohlcv(rows: int, seed: int = 42, start: int = 1_700_000_000, step: int = 60) -> np.ndarray:
    """Random-walk OHLCV matrix with consistent high/low and positive volume."""
    np.random.seed(seed)
    close = 100 + np.cumsum(np.random.randn(rows) * 0.5)
    open_ = close + np.random.randn(rows) * 0.2
    high = np.maximum(open_, close) + np.abs(np.random.randn(rows)) * 0.3
    low = np.minimum(open_, close) - np.abs(np.random.randn(rows)) * 0.3
    volume = np.random.randint(1000, 10000, rows).astype(np.float64)
    timestamps = start + np.arange(rows) * step
    return np.column_stack([timestamps, open_, high, low, close, volume]).astype(np.float64)


class ScaledCloseTransforms:
    """Transform backend doubling its first input, valid from index ``begin``."""

    def __init__(self, begin: int = 1) -> None:
        self.begin = begin
        self.calls = []

    def run(self, function_name, inputs, **params):
        self.calls.append((function_name, params))
        values = np.asarray(inputs[0], dtype=np.float64) * 2
        begin = min(self.begin, len(values))
        return TransformResult(function_name, RetCode.SUCCESS, begin, len(values) - begin, (values,))


class FailingTransforms:
    """Transform backend that always reports a bad parameter."""

    def run(self, function_name, inputs, **params):
        return TransformResult(function_name, RetCode.BAD_PARAM, 0, 0, (), error="Bad Parameter (TA_BAD_PARAM)")


@pytest.fixture(autouse=True)
def fresh_settings():
    """Make every test start from freshly loaded settings."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def scenario_prices():
    """Three-bar matrix used throughout the decomposition tests."""
    return np.array(
        [
            [1000, 100, 105, 99, 102, 50000],
            [2000, 102, 108, 101, 107, 60000],
            [3000, 107, 110, 106, 109, 55000],
        ],
        dtype=np.float64,
    )


@pytest.fixture
def linear_closes():
    """Five bars with closes 10..50 and timestamps 1000..1004."""
    closes = np.array([10.0, 20.0, 30.0, 40.0, 50.0])
    timestamps = np.arange(1000, 1005, dtype=np.float64)
    volume = np.full(5, 1000.0)
    return np.column_stack([timestamps, closes, closes, closes, closes, volume])


@pytest.fixture
def ohlcv_factory():
    """Factory building deterministic random-walk price matrices."""
    return make_ohlcv


@pytest.fixture
def prices_100():
    """100 bars of deterministic random-walk prices."""
    return make_ohlcv(100)


@pytest.fixture
def scaled_transforms():
    return ScaledCloseTransforms()


@pytest.fixture
def failing_transforms():
    return FailingTransforms()
