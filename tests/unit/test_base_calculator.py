"""
Unit tests for calculators/base.py
"""

import numpy as np
import pytest

from technical_calculators.calculators.base import BaseCalculator, IndicatorCalculator
from technical_calculators.config import ValidationSettings
from technical_calculators.core.data_types import (
    CalculatorResults,
    IndicatorName,
    IndicatorValue,
    PriceColumns,
    SortOrder,
)
from technical_calculators.core.exceptions import (
    ArraySizeExceededError,
    ExternalComputationError,
    InvalidArgumentError,
    InvalidPriceDataError,
    NullInputError,
    ShapeError,
)
from technical_calculators.core.validation import InputValidationService


class ProbeCalculator(BaseCalculator):
    """Records the columns handed to the calculation hook."""

    indicator_names = (IndicatorName.ATR,)

    def __init__(self, parameters, name="PROBE", **kwargs):
        super().__init__(name, parameters, **kwargs)
        self.received = []

    def _calculate(self, columns):
        self.received.append(columns)
        return CalculatorResults(name="TEST", results={})


class DoublingCalculator(IndicatorCalculator):
    """Maps the first transform output back to timestamps."""

    indicator_names = (IndicatorName.MOVINGAVERAGE,)

    def _calculate(self, columns):
        return self._from_transform(columns, self._run("SMA", columns.close, timeperiod=2))


class AscendingDoublingCalculator(DoublingCalculator):
    sort_order = SortOrder.ASCENDING


class SpyValidationService(InputValidationService):
    """Counts every validation call by kind."""

    def __init__(self, settings=None):
        super().__init__(settings)
        self.price_checks = 0
        self.size_checks = 0
        self.length_roles = []

    def validate_string_length(self, value, max_length, role):
        self.length_roles.append(role)
        super().validate_string_length(value, max_length, role)

    def is_valid_price_data(self, prices):
        self.price_checks += 1
        return super().is_valid_price_data(prices)

    def validate_array_size(self, prices, max_elements=None):
        self.size_checks += 1
        super().validate_array_size(prices, max_elements)


class TestConstruction:
    """Tests for construction-time validation."""

    @pytest.mark.parametrize("name", [None, "", "   "])
    def test_blank_name_rejected(self, name):
        """Test that a blank name raises with the argument name."""
        with pytest.raises(InvalidArgumentError) as exc_info:
            ProbeCalculator({}, name=name)
        assert exc_info.value.argument_name == "name"
        assert exc_info.value.message == "Calculator name cannot be null or empty."

    def test_null_parameters_rejected(self):
        """Test that missing parameters raise NullInputError."""
        with pytest.raises(NullInputError) as exc_info:
            ProbeCalculator(None)
        assert exc_info.value.argument_name == "parameters"
        assert "Parameters dictionary cannot be null" in exc_info.value.message

    def test_empty_key_rejected(self):
        """Test that an empty key is rejected."""
        with pytest.raises(InvalidArgumentError, match="Parameter key cannot be null or empty"):
            ProbeCalculator({"": "5"})

    def test_empty_value_rejected(self):
        """Test that an empty value is rejected with the key in the message."""
        with pytest.raises(InvalidArgumentError) as exc_info:
            ProbeCalculator({"Period": " "})
        assert exc_info.value.message == "Parameter 'Period' cannot be null or empty."

    def test_long_key_rejected(self):
        """Test the 100 character limit on keys."""
        with pytest.raises(InvalidArgumentError) as exc_info:
            ProbeCalculator({"k" * 101: "5"})
        assert exc_info.value.message == "Parameter 'parameter key' exceeds maximum length of 100 characters"

    def test_long_value_rejected(self):
        """Test the 100 character limit on values."""
        with pytest.raises(InvalidArgumentError, match="parameter value"):
            ProbeCalculator({"Period": "9" * 101})

    def test_na_parameter_skips_length_validation(self):
        """Test that the NA sentinel is never length-checked."""
        service = SpyValidationService()
        calculator = ProbeCalculator({"NA": "x" * 500}, validation_service=service)

        assert calculator is not None
        assert "parameter key" not in service.length_roles
        assert "parameter value" not in service.length_roles

    def test_regular_parameters_are_length_checked(self):
        """Test that every non-sentinel entry goes through the service."""
        service = SpyValidationService()
        ProbeCalculator({"ShortPeriod": "5", "LongPeriod": "10"}, validation_service=service)

        assert service.length_roles.count("parameter key") == 2
        assert service.length_roles.count("parameter value") == 2

    def test_parameters_are_copied(self):
        """Test that later changes to the caller's map do not leak in."""
        parameters = {"ShortPeriod": "5"}
        calculator = ProbeCalculator(parameters)
        parameters["ShortPeriod"] = "7"

        assert calculator.parameters["ShortPeriod"] == "5"
        with pytest.raises(TypeError):
            calculator.parameters["ShortPeriod"] = "9"


class TestDecomposition:
    """Tests for column decomposition."""

    def test_scenario_matrix_columns(self, scenario_prices):
        """Test that calculate hands the decomposed columns to the hook."""
        calculator = ProbeCalculator({})
        calculator.calculate(scenario_prices)

        columns = calculator.received[0]
        np.testing.assert_array_equal(columns.timestamp, [1000, 2000, 3000])
        np.testing.assert_array_equal(columns.open, [100, 102, 107])
        np.testing.assert_array_equal(columns.high, [105, 108, 110])
        np.testing.assert_array_equal(columns.low, [99, 101, 106])
        np.testing.assert_array_equal(columns.close, [102, 107, 109])
        np.testing.assert_array_equal(columns.volume, [50000, 60000, 55000])

    def test_column_lengths_match_rows(self, ohlcv_factory):
        """Test that every column has one entry per row."""
        prices = ohlcv_factory(37)
        columns = ProbeCalculator({}).decompose(prices)

        assert isinstance(columns, PriceColumns)
        for vector in (columns.timestamp, columns.open, columns.high, columns.low, columns.close, columns.volume):
            assert len(vector) == 37

    def test_timestamps_truncated(self, scenario_prices):
        """Test that fractional timestamps are truncated to integers."""
        scenario_prices[:, 0] = [1000.9, 2000.5, 3000.1]
        columns = ProbeCalculator({}).decompose(scenario_prices)

        assert columns.timestamp.dtype == np.int64
        assert columns.timestamp.tolist() == [1000, 2000, 3000]

    def test_columns_are_not_stored_on_instance(self, scenario_prices):
        """Test that a calculation leaves no column state behind."""
        calculator = ProbeCalculator({})
        calculator.calculate(scenario_prices)

        assert not hasattr(calculator, "close")
        assert not hasattr(calculator, "timestamp")


class TestValidationGate:
    """Tests for the per-call validation gate."""

    def test_null_prices_on_fast_path(self):
        """Test that the null check runs even when skipping validation."""
        with pytest.raises(NullInputError) as exc_info:
            ProbeCalculator({}).calculate(None, skip_validation=True)
        assert exc_info.value.argument_name == "prices"

    @pytest.mark.parametrize("skip_validation", [False, True])
    def test_wrong_column_count(self, skip_validation):
        """Test that the six column check is unconditional."""
        prices = np.ones((3, 5))
        with pytest.raises(ShapeError) as exc_info:
            ProbeCalculator({}).calculate(prices, skip_validation=skip_validation)
        assert "6 columns" in exc_info.value.message

    def test_invalid_price_data(self, scenario_prices):
        """Test that NaN prices are rejected."""
        scenario_prices[1, 4] = np.nan
        with pytest.raises(InvalidPriceDataError, match="Invalid price data provided"):
            ProbeCalculator({}).calculate(scenario_prices)

    def test_negative_volume(self, scenario_prices):
        """Test that negative volume is rejected."""
        scenario_prices[0, 5] = -1
        with pytest.raises(InvalidPriceDataError):
            ProbeCalculator({}).calculate(scenario_prices)

    def test_empty_matrix_fails_business_rules(self):
        """Test that a matrix without rows fails validation."""
        with pytest.raises(InvalidPriceDataError):
            ProbeCalculator({}).calculate(np.empty((0, 6)))

    def test_array_size_ceiling(self, scenario_prices):
        """Test the element ceiling and the data carried by the error."""
        service = InputValidationService(ValidationSettings(max_array_size=12))
        calculator = ProbeCalculator({}, validation_service=service)

        with pytest.raises(ArraySizeExceededError) as exc_info:
            calculator.calculate(scenario_prices)
        assert exc_info.value.size == 18
        assert exc_info.value.max_size == 12
        assert exc_info.value.message == "Array size 18 exceeds maximum allowed size 12"

    def test_fast_path_skips_business_and_size_checks(self, scenario_prices):
        """Test that the fast path bypasses data and size validation."""
        service = SpyValidationService(ValidationSettings(max_array_size=12))
        calculator = ProbeCalculator({}, validation_service=service)
        scenario_prices[1, 4] = np.nan

        result = calculator.calculate(scenario_prices, skip_validation=True)

        assert result.name == "TEST"
        assert service.price_checks == 0
        assert service.size_checks == 0

    def test_full_path_runs_business_and_size_checks(self, scenario_prices):
        """Test that both checks run once per validated call."""
        service = SpyValidationService()
        ProbeCalculator({}, validation_service=service).calculate(scenario_prices)

        assert service.price_checks == 1
        assert service.size_checks == 1

    def test_input_not_mutated(self, ohlcv_factory):
        """Test that the input matrix is bit-identical after a calculation."""
        prices = ohlcv_factory(50)
        before = prices.tobytes()

        ProbeCalculator({}).calculate(prices)
        DoublingCalculator({}, "DOUBLE", transforms=None).calculate(prices)

        assert prices.tobytes() == before

    def test_accepts_nested_lists(self, scenario_prices):
        """Test that a plain list-of-lists matrix is accepted."""
        calculator = ProbeCalculator({})
        calculator.calculate(scenario_prices.tolist())

        assert calculator.received[0].close.tolist() == [102.0, 107.0, 109.0]


class TestResultMapping:
    """Tests for mapping transform output back to timestamps."""

    def test_valid_range_mapped_descending(self, scenario_prices, scaled_transforms):
        """Test that only [begin, begin + count) is emitted, newest first."""
        calculator = DoublingCalculator({}, "DOUBLE", transforms=scaled_transforms)
        result = calculator.calculate(scenario_prices)

        assert result.name == "DOUBLE"
        assert list(result.results.keys()) == [3000, 2000]
        assert result.results[2000] == [IndicatorValue("MOVINGAVERAGE", 214.0)]
        assert result.results[3000] == [IndicatorValue("MOVINGAVERAGE", 218.0)]

    def test_ascending_order(self, scenario_prices, scaled_transforms):
        """Test that the declared sort order is honoured."""
        result = AscendingDoublingCalculator({}, "DOUBLE", transforms=scaled_transforms).calculate(scenario_prices)

        assert list(result.results.keys()) == [2000, 3000]

    def test_transform_parameters_forwarded(self, scenario_prices, scaled_transforms):
        """Test that the transform receives the calculator's parameters."""
        DoublingCalculator({}, "DOUBLE", transforms=scaled_transforms).calculate(scenario_prices)

        assert scaled_transforms.calls == [("SMA", {"timeperiod": 2})]

    def test_transform_failure_raises(self, scenario_prices, failing_transforms):
        """Test that a non-success status is surfaced, not swallowed."""
        calculator = DoublingCalculator({}, "DOUBLE", transforms=failing_transforms)

        with pytest.raises(ExternalComputationError) as exc_info:
            calculator.calculate(scenario_prices)

        error = exc_info.value
        assert error.function_name == "SMA"
        assert error.status_code == 2
        assert error.message.startswith("TALib SMA calculation failed with return code: 2.")
        assert error.details["error"] == "Bad Parameter (TA_BAD_PARAM)"

    def test_deterministic(self, ohlcv_factory, scaled_transforms):
        """Test that repeated calls produce identical results."""
        prices = ohlcv_factory(40)
        calculator = DoublingCalculator({}, "DOUBLE", transforms=scaled_transforms)

        assert calculator.calculate(prices) == calculator.calculate(prices)

    def test_duplicate_timestamps_keep_last_row(self, scenario_prices, scaled_transforms):
        """Test that a repeated timestamp keeps the later bar's values."""
        scenario_prices[2, 0] = 2000
        result = DoublingCalculator({}, "DOUBLE", transforms=scaled_transforms).calculate(scenario_prices)

        assert list(result.results.keys()) == [2000]
        assert result.results[2000][0].value == 218.0


class TestMetadata:
    """Tests for class-level metadata."""

    def test_parameter_free_constraints(self):
        """Test that a calculator without parameters reports the NA sentinel."""
        constraints = ProbeCalculator.get_parameter_constraints()

        assert len(constraints) == 1
        assert constraints[0].parameter_name == "NA"
        assert constraints[0].min == 0
        assert constraints[0].max == 0

    def test_indicator_names(self):
        assert ProbeCalculator.get_indicator_names() == ["ATR"]

    def test_minimum_rows_without_periods(self):
        assert ProbeCalculator({}).minimum_rows() == 1
