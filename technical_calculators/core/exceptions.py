"""
Custom exception hierarchy for the calculator framework.

Errors fall into four families, each with its own base class:
- Validation errors (arguments, parameter maps)
- Data errors (matrix shape, price data, size, row counts)
- Configuration errors (indicator parameters, unsupported calculators)
- Computation errors (external numeric transform failures)

Every error keeps the bare contractual message in ``message`` so callers can
match on it, while ``str()`` adds the error code and details.
"""

from __future__ import annotations

from typing import Any


class TechnicalCalculatorError(Exception):
    """Base exception for all calculator framework errors.

    Carries a machine-readable ``error_code`` (the class name unless given)
    and a ``details`` dict with the values that caused the failure.
    """

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"[{self.error_code}] {self.message} - Details: {self.details}"
        return f"[{self.error_code}] {self.message}"

    def to_dict(self) -> dict[str, Any]:
        """Serializable form used in structured log records."""
        return {
            "error_type": self.__class__.__name__,
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details,
        }


# =============================================================================
# Validation Errors
# =============================================================================


class ValidationError(TechnicalCalculatorError):
    """Raised when argument or input validation fails.

    Examples:
        - Blank calculator name
        - Parameter key or value longer than the configured limit
    """

    def __init__(
        self,
        message: str,
        field_name: str | None = None,
        invalid_value: Any = None,
        **kwargs: Any,
    ) -> None:
        details = kwargs.pop("details", {})
        if field_name:
            details["field_name"] = field_name
        if invalid_value is not None:
            details["invalid_value"] = str(invalid_value)
        super().__init__(message, details=details, **kwargs)
        self.field_name = field_name
        self.invalid_value = invalid_value


class InvalidArgumentError(ValidationError):
    """Raised when an argument passed to a constructor or factory is invalid."""

    def __init__(
        self,
        message: str,
        argument_name: str | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, field_name=argument_name, **kwargs)
        self.argument_name = argument_name


class NullInputError(InvalidArgumentError):
    """Raised when a required input (price matrix, parameter map) is missing."""

    pass


# =============================================================================
# Data Errors
# =============================================================================


class DataError(TechnicalCalculatorError):
    """Base exception for price-matrix errors."""

    pass


class ShapeError(DataError):
    """Raised when the price matrix does not have the six expected columns.

    This check runs on every call, including the fast path.
    """

    def __init__(
        self,
        message: str,
        shape: tuple[int, ...] | None = None,
        **kwargs: Any,
    ) -> None:
        details = kwargs.pop("details", {})
        if shape is not None:
            details["shape"] = list(shape)
        super().__init__(message, details=details, **kwargs)
        self.shape = shape


class InvalidPriceDataError(DataError):
    """Raised when the price matrix breaks a business rule.

    Examples:
        - NaN or infinite prices
        - Negative volume
        - Zero rows
    """

    pass


class ArraySizeExceededError(DataError):
    """Raised when the matrix holds more elements than the configured ceiling."""

    def __init__(
        self,
        message: str,
        size: int,
        max_size: int,
        **kwargs: Any,
    ) -> None:
        details = kwargs.pop("details", {})
        details["size"] = size
        details["max_size"] = max_size
        super().__init__(message, details=details, **kwargs)
        self.size = size
        self.max_size = max_size


class InsufficientDataError(DataError):
    """Raised when there are fewer rows than an indicator's lookback needs."""

    def __init__(
        self,
        message: str,
        required: int,
        available: int,
        indicator: str | None = None,
        **kwargs: Any,
    ) -> None:
        details = kwargs.pop("details", {})
        details["required"] = required
        details["available"] = available
        if indicator:
            details["indicator"] = indicator
        super().__init__(message, details=details, **kwargs)
        self.required = required
        self.available = available
        self.indicator = indicator


# =============================================================================
# Computation Errors
# =============================================================================


class ComputationError(TechnicalCalculatorError):
    """Base exception for indicator computation errors."""

    pass


class ExternalComputationError(ComputationError):
    """Raised when the numeric transform library reports a failure.

    Never retried; the status code is kept for the caller.
    """

    def __init__(
        self,
        message: str,
        function_name: str,
        status_code: int,
        **kwargs: Any,
    ) -> None:
        details = kwargs.pop("details", {})
        details["function_name"] = function_name
        details["status_code"] = status_code
        super().__init__(message, details=details, **kwargs)
        self.function_name = function_name
        self.status_code = status_code


# =============================================================================
# Configuration Errors
# =============================================================================


class ConfigurationError(TechnicalCalculatorError):
    """Base exception for calculator configuration errors."""

    pass


class InvalidConfigurationError(ConfigurationError):
    """Raised when an indicator parameter is missing, malformed or out of range.

    Covers cross-parameter ordering rules too. Raised at construction, so a
    calculator is never left partially configured.
    """

    def __init__(
        self,
        message: str,
        parameter_name: str | None = None,
        value: Any = None,
        expected: str | None = None,
        **kwargs: Any,
    ) -> None:
        details = kwargs.pop("details", {})
        if parameter_name:
            details["parameter_name"] = parameter_name
        if value is not None:
            details["value"] = str(value)
        if expected:
            details["expected"] = expected
        super().__init__(message, details=details, **kwargs)
        self.parameter_name = parameter_name
        self.value = value
        self.expected = expected


class NotSupportedError(ConfigurationError):
    """Raised when the factory is asked for an unknown calculator."""

    def __init__(
        self,
        message: str,
        calculator_type: str | None = None,
        **kwargs: Any,
    ) -> None:
        details = kwargs.pop("details", {})
        if calculator_type:
            details["calculator_type"] = calculator_type
        super().__init__(message, details=details, **kwargs)
        self.calculator_type = calculator_type
