"""
Pydantic models and type definitions for the calculator framework.

Defines the contracts for data flowing through the framework: price bars and
matrices, decomposed price columns, parameter constraints and calculator
results.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable, NamedTuple, Sequence

import numpy as np
import polars as pl
from pydantic import BaseModel, ConfigDict, Field, field_validator

from .exceptions import ShapeError


# Fixed column order of a price matrix.
PRICE_COLUMNS: tuple[str, ...] = ("timestamp", "open", "high", "low", "close", "volume")
PRICE_COLUMN_COUNT = len(PRICE_COLUMNS)


class CalculatorName(str, Enum):
    """Closed set of calculators the factory can build."""

    ADX = "ADX"
    ADXR = "ADXR"
    APO = "APO"
    AROON = "AROON"
    ATR = "ATR"
    AVGPRICE = "AVGPRICE"
    BBANDS = "BBANDS"
    CHAIKINADLINE = "CHAIKINADLINE"
    CHAIKINADOSCILLATOR = "CHAIKINADOSCILLATOR"
    DEMA = "DEMA"
    DM = "DM"
    DMI = "DMI"
    DX = "DX"
    EMA = "EMA"
    KAMA = "KAMA"
    MA = "MA"
    MACD = "MACD"
    MAMA = "MAMA"
    MFI = "MFI"
    MOM = "MOM"
    NATR = "NATR"
    OBV = "OBV"
    PPO = "PPO"
    PSAR = "PSAR"
    ROC = "ROC"
    RSI = "RSI"
    SMA = "SMA"
    STOCH = "STOCH"
    TEMA = "TEMA"
    TMA = "TMA"
    TRANGE = "TRANGE"
    ULTOSC = "ULTOSC"
    WCLPRICE = "WCLPRICE"
    WMA = "WMA"


class IndicatorName(str, Enum):
    """Names of the output series emitted by calculators."""

    ADX = "ADX"
    ADXR = "ADXR"
    APO = "APO"
    AROONDOWN = "AROONDOWN"
    AROONUP = "AROONUP"
    ATR = "ATR"
    AVGPRICE = "AVGPRICE"
    CHAIKINADLINE = "CHAIKINADLINE"
    CHAIKINADOSCILLATOR = "CHAIKINADOSCILLATOR"
    DEMA = "DEMA"
    DX = "DX"
    FAMA = "FAMA"
    ISREVERSAL = "ISREVERSAL"
    KAMA = "KAMA"
    LOWERBAND = "LOWERBAND"
    MACD = "MACD"
    MACDHIST = "MACDHIST"
    MACDSIGNAL = "MACDSIGNAL"
    MAMA = "MAMA"
    MFI = "MFI"
    MIDDLEBAND = "MIDDLEBAND"
    MINUSDI = "MINUSDI"
    MINUSDM = "MINUSDM"
    MOM = "MOM"
    MOVINGAVERAGE = "MOVINGAVERAGE"
    NATR = "NATR"
    OBV = "OBV"
    PLUSDI = "PLUSDI"
    PLUSDM = "PLUSDM"
    PPO = "PPO"
    PPOHIST = "PPOHIST"
    PPOSIGNAL = "PPOSIGNAL"
    ROC = "ROC"
    RSI = "RSI"
    SAR = "SAR"
    STOCHD = "STOCHD"
    STOCHK = "STOCHK"
    TRANGE = "TRANGE"
    ULTOSC = "ULTOSC"
    UPPERBAND = "UPPERBAND"
    WCLPRICE = "WCLPRICE"


class ParameterName(str, Enum):
    """Keys accepted in a calculator parameter map."""

    ACCELERATION = "Acceleration"
    FAST_K_PERIOD = "FastKPeriod"
    FAST_LIMIT = "FastLimit"
    FAST_PERIOD = "FastPeriod"
    LONG_PERIOD = "LongPeriod"
    MAXIMUM = "Maximum"
    MEDIUM_PERIOD = "MediumPeriod"
    MULTIPLIER = "Multiplier"
    NA = "NA"  # sentinel: no parameters required
    PERIOD = "Period"
    SHORT_PERIOD = "ShortPeriod"
    SIGNAL_PERIOD = "SignalPeriod"
    SLOW_D_PERIOD = "SlowDPeriod"
    SLOW_K_PERIOD = "SlowKPeriod"
    SLOW_LIMIT = "SlowLimit"
    SLOW_PERIOD = "SlowPeriod"


class ParameterValueType(str, Enum):
    """Numeric type of a parameter value."""

    INT = "INT"
    DOUBLE = "DOUBLE"


class SortOrder(str, Enum):
    """Timestamp ordering of a calculator's result map."""

    ASCENDING = "ascending"
    DESCENDING = "descending"


class PriceBar(BaseModel):
    """One OHLCV row with finiteness and volume checks."""

    model_config = ConfigDict(frozen=True)

    timestamp: int = Field(..., description="Bar timestamp (epoch based, integral)")
    open: float = Field(..., description="Open price")
    high: float = Field(..., description="High price")
    low: float = Field(..., description="Low price")
    close: float = Field(..., description="Close price")
    volume: float = Field(..., ge=0, description="Trading volume")

    @field_validator("open", "high", "low", "close", "volume")
    @classmethod
    def validate_finite(cls, v: float) -> float:
        """Reject NaN and infinite values."""
        if not math.isfinite(v):
            raise ValueError("value must be finite")
        return v

    def to_row(self) -> list[float]:
        """Convert to a price-matrix row."""
        return [float(self.timestamp), self.open, self.high, self.low, self.close, self.volume]


class ParameterConstraint(BaseModel):
    """Accepted range and numeric type of one calculator parameter."""

    model_config = ConfigDict(frozen=True)

    parameter_name: str
    min: float
    max: float
    value_type: ParameterValueType

    def contains(self, value: float) -> bool:
        """Check whether a value lies inside the inclusive bounds."""
        return self.min <= value <= self.max

    def range_message(self) -> str:
        """Message used for both out-of-range and unparsable values."""
        return f"{self.parameter_name} must be between {self.min:g} and {self.max:g}."


class IndicatorValue(NamedTuple):
    """One named output value for a single bar."""

    name: str
    value: float


@dataclass(frozen=True)
class PriceColumns:
    """Price matrix split into column vectors.

    Every vector is a fresh copy of length ``row_count``; the source matrix is
    never referenced after construction.
    """

    timestamp: np.ndarray
    open: np.ndarray
    high: np.ndarray
    low: np.ndarray
    close: np.ndarray
    volume: np.ndarray

    @classmethod
    def from_matrix(cls, matrix: np.ndarray) -> "PriceColumns":
        """Decompose a validated (R, 6) matrix, preserving row order."""
        return cls(
            timestamp=matrix[:, 0].astype(np.int64),
            open=matrix[:, 1].astype(np.float64, copy=True),
            high=matrix[:, 2].astype(np.float64, copy=True),
            low=matrix[:, 3].astype(np.float64, copy=True),
            close=matrix[:, 4].astype(np.float64, copy=True),
            volume=matrix[:, 5].astype(np.float64, copy=True),
        )

    @property
    def row_count(self) -> int:
        return len(self.timestamp)

    def __len__(self) -> int:
        return self.row_count


@dataclass
class CalculatorResults:
    """Timestamp-keyed output of a calculator.

    ``results`` preserves the calculator's declared ordering direction, which
    is not the same for every calculator.
    """

    name: str
    results: dict[int, list[IndicatorValue]] = field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.results)

    def timestamps(self) -> list[int]:
        """Timestamps in result order."""
        return list(self.results.keys())

    def series(self, indicator_name: str) -> dict[int, float]:
        """Extract one output series as a timestamp -> value mapping."""
        series: dict[int, float] = {}
        for timestamp, values in self.results.items():
            for value in values:
                if value.name == indicator_name:
                    series[timestamp] = value.value
        return series

    def indicator_names(self) -> list[str]:
        """Output names in emission order, taken from the first entry."""
        for values in self.results.values():
            return [value.name for value in values]
        return []

    def to_frame(self) -> pl.DataFrame:
        """Convert to a polars DataFrame with one column per output series."""
        names = self.indicator_names()
        schema: dict[str, Any] = {"timestamp": pl.Int64}
        schema.update({name: pl.Float64 for name in names})
        data: dict[str, list[Any]] = {column: [] for column in schema}
        for timestamp, values in self.results.items():
            data["timestamp"].append(timestamp)
            for value in values:
                data[value.name].append(value.value)
        return pl.DataFrame(data, schema=schema)


def price_matrix_from_bars(bars: Iterable[PriceBar]) -> np.ndarray:
    """Build a (R, 6) float64 price matrix from validated bars."""
    rows = [bar.to_row() for bar in bars]
    if not rows:
        return np.empty((0, PRICE_COLUMN_COUNT), dtype=np.float64)
    return np.asarray(rows, dtype=np.float64)


def price_matrix_from_frame(
    df: pl.DataFrame,
    columns: Sequence[str] = PRICE_COLUMNS,
) -> np.ndarray:
    """Build a price matrix from a polars DataFrame.

    Args:
        df: Frame holding the price columns.
        columns: Column names to read, in matrix order.

    Returns:
        (R, 6) float64 matrix.

    Raises:
        ShapeError: If columns are missing or the wrong number is requested.
    """
    if len(columns) != PRICE_COLUMN_COUNT:
        raise ShapeError(
            f"Expected {PRICE_COLUMN_COUNT} column names, got {len(columns)}",
            details={"columns": list(columns)},
        )
    missing = [col for col in columns if col not in df.columns]
    if missing:
        raise ShapeError(
            f"Missing required columns: {missing}",
            details={"missing": missing},
        )
    return df.select(list(columns)).to_numpy().astype(np.float64)
