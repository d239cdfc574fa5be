"""
Technical Calculators - indicator calculation framework for OHLCV price data.

Validates price matrices and string-keyed parameter sets, runs TA-Lib
transforms and returns timestamp-keyed results.
"""

__version__ = "1.0.0"

from .core.data_types import CalculatorName, CalculatorResults, IndicatorName, ParameterName
from .factory import CalculatorFactory, create_calculator, get_indicator_names, get_parameter_constraints

__all__ = [
    "CalculatorFactory",
    "CalculatorName",
    "CalculatorResults",
    "IndicatorName",
    "ParameterName",
    "create_calculator",
    "get_indicator_names",
    "get_parameter_constraints",
]
