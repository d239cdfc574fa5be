"""
Core layer for the calculator framework.

Contains type definitions, exceptions, the calculator registry and input
validation shared by every calculator.
"""

from .data_types import (
    PRICE_COLUMNS,
    CalculatorName,
    CalculatorResults,
    IndicatorName,
    IndicatorValue,
    ParameterConstraint,
    ParameterName,
    ParameterValueType,
    PriceBar,
    PriceColumns,
    SortOrder,
    price_matrix_from_bars,
    price_matrix_from_frame,
)
from .exceptions import (
    ArraySizeExceededError,
    ComputationError,
    ConfigurationError,
    DataError,
    ExternalComputationError,
    InsufficientDataError,
    InvalidArgumentError,
    InvalidConfigurationError,
    InvalidPriceDataError,
    NotSupportedError,
    NullInputError,
    ShapeError,
    TechnicalCalculatorError,
    ValidationError,
)
from .registry import CalculatorRegistry, register_calculator, registry
from .validation import InputValidationService, PriceMatrixValidator

__all__ = [
    "PRICE_COLUMNS",
    "ArraySizeExceededError",
    "CalculatorName",
    "CalculatorRegistry",
    "CalculatorResults",
    "ComputationError",
    "ConfigurationError",
    "DataError",
    "ExternalComputationError",
    "IndicatorName",
    "IndicatorValue",
    "InputValidationService",
    "InsufficientDataError",
    "InvalidArgumentError",
    "InvalidConfigurationError",
    "InvalidPriceDataError",
    "NotSupportedError",
    "NullInputError",
    "ParameterConstraint",
    "ParameterName",
    "ParameterValueType",
    "PriceBar",
    "PriceColumns",
    "PriceMatrixValidator",
    "ShapeError",
    "SortOrder",
    "TechnicalCalculatorError",
    "ValidationError",
    "price_matrix_from_bars",
    "price_matrix_from_frame",
    "register_calculator",
    "registry",
]
