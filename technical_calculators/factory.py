"""
Calculator factory.

Turns a calculator name and a raw parameter map into a configured
calculator. Dispatch goes through the calculator registry, which is filled
when ``technical_calculators.calculators`` is imported.
"""

from __future__ import annotations

from typing import Mapping

from technical_calculators import calculators as _calculators  # noqa: F401  (registers calculators)
from technical_calculators.calculators.base import BaseCalculator
from technical_calculators.calculators.transforms import TransformBackend
from technical_calculators.core.data_types import CalculatorName, ParameterConstraint
from technical_calculators.core.exceptions import InvalidArgumentError, NullInputError
from technical_calculators.core.registry import CalculatorRegistry, registry as default_registry
from technical_calculators.core.validation import InputValidationService
from technical_calculators.monitoring.logger import LogCategory, get_logger

logger = get_logger(__name__, LogCategory.FACTORY)


class CalculatorFactory:
    """Builds calculators by name.

    Example:
        factory = CalculatorFactory()
        sma = factory.create_calculator(CalculatorName.SMA, {"Period": "3"}, "SMA")
        results = sma.calculate(prices)
    """

    def __init__(
        self,
        registry: CalculatorRegistry | None = None,
        validation_service: InputValidationService | None = None,
        transforms: TransformBackend | None = None,
    ) -> None:
        """Initialize the factory.

        Args:
            registry: Calculator registry. Defaults to the global one.
            validation_service: Service used for key/value checks and handed
                to every calculator built.
            transforms: Transform backend handed to every calculator built.
        """
        self._registry = registry or default_registry
        self._validation_service = validation_service or InputValidationService()
        self._transforms = transforms

    def create_calculator(
        self,
        calculator_type: CalculatorName | str,
        parameters: Mapping[str, str] | None,
        name: str,
    ) -> BaseCalculator:
        """Create a configured calculator.

        Args:
            calculator_type: Calculator to build.
            parameters: Raw parameter map.
            name: Name reported in the calculator's results.

        Returns:
            Calculator ready to run.

        Raises:
            NullInputError: If ``parameters`` is None.
            InvalidArgumentError: Blank name, or a key/value over the factory limits.
            NotSupportedError: Unknown calculator.
            InvalidConfigurationError: Invalid parameters for the calculator.
        """
        if parameters is None:
            raise NullInputError("Parameters dictionary cannot be null.", argument_name="parameters")
        if name is None or not str(name).strip():
            raise InvalidArgumentError("Calculator name cannot be null or empty", argument_name="name")

        limits = self._validation_service.settings
        for key, value in parameters.items():
            self._validation_service.validate_string_length(key, limits.factory_max_key_length, "parameter key")
            self._validation_service.validate_string_length(
                value, limits.factory_max_value_length, "parameter value"
            )

        info = self._registry.get_info(calculator_type)
        calculator = info.create(
            parameters=parameters,
            name=name,
            validation_service=self._validation_service,
            transforms=self._transforms,
        )
        logger.debug(
            f"Created {info.name.value} calculator '{name}'",
            extra={"calculator": name, "extra_data": {"parameters": dict(parameters)}},
        )
        return calculator

    def get_indicator_names(self, calculator_type: CalculatorName | str) -> list[str]:
        """Output series names produced by a calculator."""
        return list(self._registry.get_factory(calculator_type).get_indicator_names())

    def get_parameter_constraints(self, calculator_type: CalculatorName | str) -> list[ParameterConstraint]:
        """Parameters accepted by a calculator, with bounds and types."""
        return list(self._registry.get_factory(calculator_type).get_parameter_constraints())

    def supported_calculators(self) -> list[CalculatorName]:
        """Registered calculators in enumeration order."""
        return self._registry.list_calculators()


_default_factory: CalculatorFactory | None = None


def get_factory() -> CalculatorFactory:
    """Shared factory using the global registry and default settings."""
    global _default_factory
    if _default_factory is None:
        _default_factory = CalculatorFactory()
    return _default_factory


def create_calculator(
    calculator_type: CalculatorName | str,
    parameters: Mapping[str, str] | None,
    name: str,
) -> BaseCalculator:
    """Create a calculator with the shared factory."""
    return get_factory().create_calculator(calculator_type, parameters, name)


def get_indicator_names(calculator_type: CalculatorName | str) -> list[str]:
    """Output series names of a calculator, from the shared factory."""
    return get_factory().get_indicator_names(calculator_type)


def get_parameter_constraints(calculator_type: CalculatorName | str) -> list[ParameterConstraint]:
    """Parameter constraints of a calculator, from the shared factory."""
    return get_factory().get_parameter_constraints(calculator_type)
