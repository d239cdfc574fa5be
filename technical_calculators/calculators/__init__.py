"""
Indicator calculators.

Importing this package registers every calculator with the global registry.
"""

from .base import BaseCalculator, IndicatorCalculator
from .momentum import (
    AbsolutePriceOscillator,
    AverageDirectionalIndex,
    AverageDirectionalIndexRating,
    Aroon,
    DirectionalMovement,
    DirectionalMovementIndex,
    DirectionalMovementSystem,
    Momentum,
    MoneyFlowIndex,
    MovingAverageConvergenceDivergence,
    PercentagePriceOscillator,
    RateOfChange,
    RelativeStrengthIndex,
    StochasticOscillator,
    UltimateOscillator,
)
from .overlap import (
    BollingerBands,
    DoubleExponentialMovingAverage,
    ExponentialMovingAverage,
    KaufmanAdaptiveMovingAverage,
    MesaAdaptiveMovingAverage,
    MovingAverage,
    ParabolicSar,
    SimpleMovingAverage,
    TriangularMovingAverage,
    TripleExponentialMovingAverage,
    WeightedMovingAverage,
)
from .parameters import ParameterSpec
from .price import AveragePrice, WeightedClosePrice
from .transforms import RetCode, TaLibTransforms, TransformResult
from .volatility import AverageTrueRange, NormalizedAverageTrueRange, TrueRange
from .volume import ChaikinAdLine, ChaikinAdOscillator, OnBalanceVolume

__all__ = [
    "AbsolutePriceOscillator",
    "AverageDirectionalIndex",
    "AverageDirectionalIndexRating",
    "AveragePrice",
    "AverageTrueRange",
    "Aroon",
    "BaseCalculator",
    "BollingerBands",
    "ChaikinAdLine",
    "ChaikinAdOscillator",
    "DirectionalMovement",
    "DirectionalMovementIndex",
    "DirectionalMovementSystem",
    "DoubleExponentialMovingAverage",
    "ExponentialMovingAverage",
    "IndicatorCalculator",
    "KaufmanAdaptiveMovingAverage",
    "MesaAdaptiveMovingAverage",
    "Momentum",
    "MoneyFlowIndex",
    "MovingAverage",
    "MovingAverageConvergenceDivergence",
    "NormalizedAverageTrueRange",
    "OnBalanceVolume",
    "ParabolicSar",
    "ParameterSpec",
    "PercentagePriceOscillator",
    "RateOfChange",
    "RelativeStrengthIndex",
    "RetCode",
    "SimpleMovingAverage",
    "StochasticOscillator",
    "TaLibTransforms",
    "TransformResult",
    "TriangularMovingAverage",
    "TripleExponentialMovingAverage",
    "TrueRange",
    "UltimateOscillator",
    "WeightedClosePrice",
    "WeightedMovingAverage",
]
