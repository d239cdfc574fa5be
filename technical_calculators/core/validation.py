"""
Input validation for calculator arguments and price matrices.

``InputValidationService`` holds the primitive checks (string lengths, price
data sanity, array size, ticker symbols). ``PriceMatrixValidator`` composes
them into the gate every calculation passes through:

- structural checks (null, six columns) always run;
- business-rule, size and minimum-row checks run unless the caller takes the
  fast path.
"""

from __future__ import annotations

import re
from typing import Any

import numpy as np

from technical_calculators.config import ValidationSettings, get_settings
from technical_calculators.monitoring.logger import LogCategory, get_logger

from .data_types import PRICE_COLUMN_COUNT
from .exceptions import (
    ArraySizeExceededError,
    InsufficientDataError,
    InvalidArgumentError,
    InvalidPriceDataError,
    NullInputError,
    ShapeError,
)

logger = get_logger(__name__, LogCategory.VALIDATION)

SHAPE_MESSAGE = "Prices array must have 6 columns: timestamp, open, high, low, close, volume."


class InputValidationService:
    """Primitive validation checks with logging of every rejection."""

    SYMBOL_PATTERN = re.compile(r"^[A-Z]{1,10}$")

    def __init__(self, settings: ValidationSettings | None = None) -> None:
        """Initialize the service.

        Args:
            settings: Validation limits. Defaults to the package settings.
        """
        self.settings = settings or get_settings().validation

    def validate_string_length(self, value: str | None, max_length: int, role: str) -> None:
        """Raise if ``value`` is longer than ``max_length``.

        ``None`` is accepted; emptiness is checked by the caller.

        Raises:
            InvalidArgumentError: If the value is too long.
        """
        if value is None:
            return
        if len(value) > max_length:
            message = f"Parameter '{role}' exceeds maximum length of {max_length} characters"
            logger.error(message, extra={"extra_data": {"length": len(value)}})
            raise InvalidArgumentError(
                message,
                argument_name=role,
                details={"length": len(value), "max_length": max_length},
            )

    def is_valid_price_data(self, prices: Any) -> bool:
        """Check row count, finite timestamps and prices, and volume sign of a price matrix."""
        if prices is None:
            logger.warning("Price data is null")
            return False

        try:
            matrix = np.asarray(prices, dtype=np.float64)
        except (TypeError, ValueError):
            logger.warning("Price data is not a numeric matrix")
            return False

        if matrix.ndim != 2 or matrix.shape[1] != PRICE_COLUMN_COUNT:
            logger.warning(
                f"Price data must have {PRICE_COLUMN_COUNT} columns",
                extra={"extra_data": {"shape": list(matrix.shape)}},
            )
            return False

        if matrix.shape[0] == 0:
            logger.warning("Price data has no rows")
            return False

        timestamps = matrix[:, 0]
        if not np.isfinite(timestamps).all():
            logger.warning(
                "Price data contains NaN or infinite timestamps",
                extra={"extra_data": {"first_row": int(np.argmax(~np.isfinite(timestamps)))}},
            )
            return False

        values = matrix[:, 1:]
        if not np.isfinite(values).all():
            bad_rows = np.flatnonzero(~np.isfinite(values).all(axis=1))
            logger.warning(
                "Price data contains NaN or infinite values",
                extra={"extra_data": {"first_row": int(bad_rows[0])}},
            )
            return False

        if (matrix[:, 5] < 0).any():
            logger.warning(
                "Price data contains negative volume",
                extra={"extra_data": {"first_row": int(np.argmax(matrix[:, 5] < 0))}},
            )
            return False

        return True

    def validate_array_size(self, prices: Any, max_elements: int | None = None) -> None:
        """Raise if the matrix holds more than ``max_elements`` values.

        Raises:
            ArraySizeExceededError: If the ceiling is exceeded.
        """
        limit = max_elements if max_elements is not None else self.settings.max_array_size
        size = int(np.size(prices))
        if size > limit:
            message = f"Array size {size} exceeds maximum allowed size {limit}"
            logger.error(message)
            raise ArraySizeExceededError(message, size=size, max_size=limit)

    def is_valid_symbol(self, symbol: str | None) -> bool:
        """Check a ticker symbol: 1 to 10 upper-case letters."""
        if not symbol:
            return False
        return bool(self.SYMBOL_PATTERN.match(symbol))


class PriceMatrixValidator:
    """Validation gate applied to every price matrix before calculation."""

    def __init__(self, service: InputValidationService | None = None) -> None:
        self.service = service or InputValidationService()

    def coerce(self, prices: Any) -> np.ndarray:
        """Run the structural checks and return a float64 (R, 6) matrix.

        These checks do not depend on the fast-path flag.

        Raises:
            NullInputError: If ``prices`` is None.
            ShapeError: If the input is not a six-column numeric matrix.
        """
        if prices is None:
            raise NullInputError("Prices array cannot be null.", argument_name="prices")

        try:
            matrix = np.asarray(prices, dtype=np.float64)
        except (TypeError, ValueError) as e:
            raise ShapeError(SHAPE_MESSAGE, details={"reason": str(e)}) from e

        if matrix.ndim == 1 and matrix.size == 0:
            matrix = matrix.reshape(0, PRICE_COLUMN_COUNT)

        if matrix.ndim != 2 or matrix.shape[1] != PRICE_COLUMN_COUNT:
            raise ShapeError(SHAPE_MESSAGE, shape=matrix.shape)

        return matrix

    def validate(self, prices: Any, enforce_business_rules: bool = True) -> np.ndarray:
        """Validate a price matrix.

        Args:
            prices: Price matrix (array-like, six columns).
            enforce_business_rules: Run the data and size checks when True.

        Returns:
            The coerced float64 matrix.

        Raises:
            NullInputError, ShapeError: Always checked.
            InvalidPriceDataError, ArraySizeExceededError: Business rules.
        """
        matrix = self.coerce(prices)
        if enforce_business_rules:
            if not self.service.is_valid_price_data(matrix):
                raise InvalidPriceDataError("Invalid price data provided.")
            self.service.validate_array_size(matrix, self.service.settings.max_array_size)
        return matrix

    def require_rows(self, matrix: np.ndarray, minimum: int, indicator: str) -> None:
        """Raise if the matrix has fewer than ``minimum`` rows.

        Raises:
            InsufficientDataError: If the indicator's lookback is not covered.
        """
        rows = int(matrix.shape[0])
        if rows < minimum:
            message = (
                f"Insufficient data for {indicator}: at least {minimum} rows are required, got {rows}."
            )
            logger.error(message)
            raise InsufficientDataError(message, required=minimum, available=rows, indicator=indicator)
