"""
Base calculator: construction checks, validation gate and column decomposition.

A calculator is built once per (name, parameters) pair and then applied to
any number of price matrices. ``calculate`` never stores the decomposed
columns on the instance; they are passed to the concrete ``_calculate`` hook,
so one calculator can serve concurrent callers.

Lifecycle of a call::

    calculate(prices, skip_validation)
        -> null and shape checks           (always)
        -> price data, size and row checks (unless skip_validation)
        -> PriceColumns.from_matrix        (copies, row order kept)
        -> _calculate(columns)             (concrete calculator)
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from types import MappingProxyType
from typing import Any, ClassVar, Mapping, Sequence

import numpy as np

from technical_calculators.core.data_types import (
    CalculatorName,
    CalculatorResults,
    IndicatorName,
    IndicatorValue,
    ParameterConstraint,
    ParameterName,
    PriceColumns,
    SortOrder,
)
from technical_calculators.core.exceptions import (
    ExternalComputationError,
    InvalidArgumentError,
    NullInputError,
)
from technical_calculators.core.validation import InputValidationService, PriceMatrixValidator
from technical_calculators.monitoring.logger import LogCategory, get_logger

from .parameters import (
    NO_PARAMETERS_CONSTRAINT,
    IndicatorConfig,
    NoParameters,
    ParameterSpec,
    parse_parameters,
)
from .transforms import TransformBackend, TransformResult, default_transforms

logger = get_logger(__name__, LogCategory.CALCULATION)

# (output name, transform result, output position in that result)
SeriesSource = tuple[IndicatorName, TransformResult, int]


class BaseCalculator(ABC):
    """Abstract base class for indicator calculators.

    Subclasses declare their metadata as class attributes and implement
    ``_calculate``:

    - ``calculator_name``: registry key
    - ``parameter_specs``: accepted parameters, bounds and defaults
    - ``config_type``: frozen dataclass built from the parsed parameters
    - ``indicator_names``: output series, in emission order
    - ``sort_order``: timestamp order of the result map
    """

    calculator_name: ClassVar[CalculatorName | None] = None
    parameter_specs: ClassVar[tuple[ParameterSpec, ...]] = ()
    config_type: ClassVar[type] = NoParameters
    indicator_names: ClassVar[tuple[IndicatorName, ...]] = ()
    sort_order: ClassVar[SortOrder] = SortOrder.DESCENDING
    required_message: ClassVar[str | None] = None

    def __init__(
        self,
        name: str,
        parameters: Mapping[str, str] | None,
        validation_service: InputValidationService | None = None,
        transforms: TransformBackend | None = None,
    ) -> None:
        """Validate the name and parameter map, then build the typed config.

        Args:
            name: Calculator name, reported as ``CalculatorResults.name``.
            parameters: Raw parameter map. Copied, never mutated.
            validation_service: Validation service; a default one is created
                when omitted.
            transforms: Numeric transform backend; TA-Lib when omitted.

        Raises:
            InvalidArgumentError: Blank name, empty key or value, or a key,
                value or name longer than the configured limit.
            NullInputError: If ``parameters`` is None.
            InvalidConfigurationError: If a parameter is missing or invalid.
        """
        self._validation_service = validation_service or InputValidationService()
        self._validator = PriceMatrixValidator(self._validation_service)
        self._transforms = transforms or default_transforms()

        if name is None or not str(name).strip():
            raise InvalidArgumentError("Calculator name cannot be null or empty.", argument_name="name")
        max_length = self._validation_service.settings.max_parameter_length
        self._validation_service.validate_string_length(name, max_length, "calculator name")

        if parameters is None:
            raise NullInputError("Parameters dictionary cannot be null.", argument_name="parameters")
        self._check_parameter_entries(parameters, max_length)

        self.name = name
        self._parameters = MappingProxyType(dict(parameters))
        self.config: IndicatorConfig = parse_parameters(
            self.parameter_specs,
            self._parameters,
            self.config_type,
            self.required_message,
        )
        self._validate_config(self.config)
        self._logger = logger.with_context(calculator=name)
        self._logger.debug(f"Configured {type(self).__name__}: {self.config}")

    def _check_parameter_entries(self, parameters: Mapping[str, str], max_length: int) -> None:
        for key, value in parameters.items():
            if key == ParameterName.NA.value:
                continue
            if key is None or not str(key).strip():
                raise InvalidArgumentError("Parameter key cannot be null or empty.", argument_name="parameters")
            if value is None or not str(value).strip():
                raise InvalidArgumentError(
                    f"Parameter '{key}' cannot be null or empty.",
                    argument_name="parameters",
                )
            self._validation_service.validate_string_length(key, max_length, "parameter key")
            self._validation_service.validate_string_length(value, max_length, "parameter value")

    def _validate_config(self, config: Any) -> None:
        """Cross-parameter rules. Overridden by calculators that have them."""

    @property
    def parameters(self) -> Mapping[str, str]:
        """Read-only copy of the parameter map given at construction."""
        return self._parameters

    # -------------------------------------------------------------------------
    # Metadata
    # -------------------------------------------------------------------------

    @classmethod
    def get_indicator_names(cls) -> list[str]:
        """Output series names, in emission order."""
        return [name.value for name in cls.indicator_names]

    @classmethod
    def get_parameter_constraints(cls) -> list[ParameterConstraint]:
        """Accepted parameters; parameter-free calculators report ``NA``."""
        if not cls.parameter_specs:
            return [NO_PARAMETERS_CONSTRAINT]
        return [spec.constraint for spec in cls.parameter_specs]

    def minimum_rows(self) -> int:
        """Rows needed before validation lets a matrix through.

        Defaults to the largest period-style parameter.
        """
        periods = [
            getattr(self.config, spec.field_name)
            for spec in self.parameter_specs
            if spec.name.value.endswith("Period")
        ]
        return max(periods, default=1)

    # -------------------------------------------------------------------------
    # Calculation
    # -------------------------------------------------------------------------

    def decompose(self, prices: Any) -> PriceColumns:
        """Split a six-column matrix into column vectors after the shape check."""
        return PriceColumns.from_matrix(self._validator.coerce(prices))

    def calculate(self, prices: Any, skip_validation: bool = False) -> CalculatorResults:
        """Validate the matrix, decompose it and run the calculator.

        Args:
            prices: (R, 6) matrix ``[timestamp, open, high, low, close, volume]``.
            skip_validation: Fast path. Skips the price data, size and row
                count checks; null and shape checks still run.

        Returns:
            CalculatorResults keyed by timestamp.
        """
        matrix = self._validator.validate(prices, enforce_business_rules=not skip_validation)
        if not skip_validation:
            self._validator.require_rows(matrix, self.minimum_rows(), self.name)

        columns = PriceColumns.from_matrix(matrix)
        self._logger.debug(f"Calculating over {columns.row_count} rows")
        return self._calculate(columns)

    @abstractmethod
    def _calculate(self, columns: PriceColumns) -> CalculatorResults:
        """Compute the indicator over decomposed columns."""
        pass

    # -------------------------------------------------------------------------
    # Helpers for concrete calculators
    # -------------------------------------------------------------------------

    def _run(self, function_name: str, *inputs: np.ndarray, **params: Any) -> TransformResult:
        """Run a transform and fail on a non-success status.

        Raises:
            ExternalComputationError: If the transform reports a failure.
        """
        result = self._transforms.run(function_name, inputs, **params)
        if not result.succeeded:
            message = (
                f"TALib {function_name} calculation failed with return code: {int(result.status)}. "
                "This may indicate insufficient data, invalid parameters, or internal calculation error."
            )
            self._logger.error(message)
            details = {"error": result.error} if result.error else {}
            raise ExternalComputationError(
                message,
                function_name=function_name,
                status_code=int(result.status),
                details=details,
            )
        return result

    def _from_transform(self, columns: PriceColumns, result: TransformResult) -> CalculatorResults:
        """Map a transform whose outputs match ``indicator_names`` one to one."""
        return self._from_series(
            columns,
            [(name, result, index) for index, name in enumerate(self.indicator_names)],
        )

    def _from_series(self, columns: PriceColumns, series: Sequence[SeriesSource]) -> CalculatorResults:
        """Map several transform outputs over the range where all are valid."""
        begin = max(result.begin_index for _, result, _ in series)
        end = min(result.end_index for _, result, _ in series)
        outputs = [(name, result.outputs[index]) for name, result, index in series]
        return self._build_results(columns, outputs, begin, end)

    def _build_results(
        self,
        columns: PriceColumns,
        outputs: Sequence[tuple[IndicatorName, np.ndarray]],
        begin: int,
        end: int,
    ) -> CalculatorResults:
        """Map valid indices ``[begin, end)`` back to timestamps and order them."""
        results: dict[int, list[IndicatorValue]] = {}
        for index in range(begin, end):
            results[int(columns.timestamp[index])] = [
                IndicatorValue(name.value, float(values[index])) for name, values in outputs
            ]

        ordered = sorted(results.items(), reverse=self.sort_order == SortOrder.DESCENDING)
        return CalculatorResults(name=self.name, results=dict(ordered))

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r}, config={self.config!r})"


class IndicatorCalculator(BaseCalculator):
    """Base for registered calculators, constructed as ``(parameters, name)``."""

    def __init__(
        self,
        parameters: Mapping[str, str] | None,
        name: str,
        validation_service: InputValidationService | None = None,
        transforms: TransformBackend | None = None,
    ) -> None:
        super().__init__(name, parameters, validation_service, transforms)
