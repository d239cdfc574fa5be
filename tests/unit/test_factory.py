"""
Unit tests for factory.py
"""

import pytest

from technical_calculators import factory as factory_module
from technical_calculators.calculators import (
    AverageDirectionalIndex,
    BaseCalculator,
    SimpleMovingAverage,
)
from technical_calculators.core.data_types import CalculatorName, ParameterValueType
from technical_calculators.core.exceptions import (
    InvalidArgumentError,
    InvalidConfigurationError,
    NotSupportedError,
    NullInputError,
)
from technical_calculators.factory import (
    CalculatorFactory,
    create_calculator,
    get_indicator_names,
    get_parameter_constraints,
)

# Smallest parameter maps satisfying every required parameter.
REQUIRED_PARAMETERS = {
    CalculatorName.ADX: {"Period": "14"},
    CalculatorName.BBANDS: {"Period": "20", "Multiplier": "2"},
    CalculatorName.MA: {"Period": "10"},
    CalculatorName.MACD: {"FastPeriod": "12", "SlowPeriod": "26", "SignalPeriod": "9"},
    CalculatorName.PSAR: {"Acceleration": "0.02", "Maximum": "0.2"},
    CalculatorName.DEMA: {"Period": "10"},
    CalculatorName.KAMA: {"Period": "10"},
    CalculatorName.TEMA: {"Period": "10"},
    CalculatorName.TMA: {"Period": "10"},
    CalculatorName.WMA: {"Period": "10"},
}


@pytest.fixture
def factory():
    return CalculatorFactory()


class TestCreateCalculator:
    """Tests for CalculatorFactory.create_calculator."""

    def test_adx_out_of_range(self, factory):
        """Test that construction errors propagate from the calculator."""
        with pytest.raises(InvalidConfigurationError) as exc_info:
            factory.create_calculator(CalculatorName.ADX, {"Period": "1"}, "ADX")
        assert exc_info.value.message == "Period must be between 2 and 100."

    def test_unsupported_calculator(self, factory):
        with pytest.raises(NotSupportedError) as exc_info:
            factory.create_calculator("VWAP", {}, "VWAP")
        assert exc_info.value.message == "Calculator 'VWAP' is not supported."

    def test_accepts_string_names(self, factory):
        calculator = factory.create_calculator("SMA", {"Period": "3"}, "fast")

        assert isinstance(calculator, SimpleMovingAverage)
        assert calculator.name == "fast"

    def test_null_parameters(self, factory):
        with pytest.raises(NullInputError):
            factory.create_calculator(CalculatorName.SMA, None, "SMA")

    @pytest.mark.parametrize("name", [None, "", "  "])
    def test_blank_name(self, factory, name):
        with pytest.raises(InvalidArgumentError) as exc_info:
            factory.create_calculator(CalculatorName.SMA, {}, name)
        assert exc_info.value.argument_name == "name"

    def test_key_length_limit(self, factory):
        """Test the factory's 50 character key limit."""
        with pytest.raises(InvalidArgumentError) as exc_info:
            factory.create_calculator(CalculatorName.SMA, {"k" * 51: "3"}, "SMA")
        assert exc_info.value.message == "Parameter 'parameter key' exceeds maximum length of 50 characters"

    def test_value_length_limit(self, factory):
        """Test the factory's 100 character value limit."""
        with pytest.raises(InvalidArgumentError) as exc_info:
            factory.create_calculator(CalculatorName.SMA, {"Period": "1" * 101}, "SMA")
        assert exc_info.value.message == "Parameter 'parameter value' exceeds maximum length of 100 characters"

    def test_key_at_limit_passes_factory(self, factory):
        """Test that a 50 character unknown key is accepted and ignored."""
        calculator = factory.create_calculator(CalculatorName.SMA, {"k" * 50: "3"}, "SMA")

        assert calculator.config.period == 20

    @pytest.mark.parametrize("kind", list(CalculatorName))
    def test_every_kind_builds_and_runs(self, factory, kind, prices_100):
        """Test every calculator kind is registered and runs on 100 bars."""
        calculator = factory.create_calculator(kind, REQUIRED_PARAMETERS.get(kind, {}), kind.value)

        assert isinstance(calculator, BaseCalculator)
        assert calculator.calculator_name == kind
        result = calculator.calculate(prices_100)
        assert result.name == kind.value
        assert len(result) > 0
        assert result.indicator_names() == factory.get_indicator_names(kind)

    def test_transforms_propagate(self, scenario_prices, scaled_transforms):
        """Test the factory hands its transform backend to every calculator."""
        factory = CalculatorFactory(transforms=scaled_transforms)
        calculator = factory.create_calculator(CalculatorName.SMA, {"Period": "2"}, "SMA")
        calculator.calculate(scenario_prices)

        assert scaled_transforms.calls == [("SMA", {"timeperiod": 2})]


class TestMetadata:
    """Tests for the factory's metadata queries."""

    def test_indicator_names_are_deterministic(self, factory):
        assert factory.get_indicator_names(CalculatorName.BBANDS) == ["MIDDLEBAND", "UPPERBAND", "LOWERBAND"]
        assert factory.get_indicator_names(CalculatorName.BBANDS) == factory.get_indicator_names("BBANDS")
        assert factory.get_indicator_names(CalculatorName.PPO) == ["PPO", "PPOHIST", "PPOSIGNAL"]

    def test_parameter_constraints(self, factory):
        constraints = factory.get_parameter_constraints(CalculatorName.BBANDS)

        assert [c.parameter_name for c in constraints] == ["Period", "Multiplier"]
        assert constraints[0].value_type == ParameterValueType.INT
        assert (constraints[1].min, constraints[1].max) == (0.1, 5.0)
        assert constraints[1].value_type == ParameterValueType.DOUBLE

    def test_parameter_free_constraints(self, factory):
        constraints = factory.get_parameter_constraints(CalculatorName.OBV)

        assert [(c.parameter_name, c.min, c.max) for c in constraints] == [("NA", 0, 0)]

    def test_supported_calculators(self, factory):
        assert factory.supported_calculators() == list(CalculatorName)

    def test_unknown_metadata_query(self, factory):
        with pytest.raises(NotSupportedError):
            factory.get_indicator_names("NOPE")


class TestModuleFunctions:
    """Tests for the shared-factory helpers."""

    def test_create_calculator(self):
        calculator = create_calculator(CalculatorName.ADX, {"Period": "14"}, "ADX")

        assert isinstance(calculator, AverageDirectionalIndex)

    def test_shared_factory_is_reused(self):
        assert factory_module.get_factory() is factory_module.get_factory()

    def test_metadata_helpers(self):
        assert get_indicator_names(CalculatorName.DMI) == ["PLUSDI", "MINUSDI", "ADX"]
        assert get_parameter_constraints(CalculatorName.RSI)[0].max == 100
