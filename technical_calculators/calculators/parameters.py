"""
Parameter declarations and typed calculator configurations.

A calculator declares one ``ParameterSpec`` per accepted parameter. The raw
string map handed to the calculator is parsed once, at construction, into a
frozen config dataclass; calculation code only ever sees typed values.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, fields
from typing import Mapping, Sequence, Union

from technical_calculators.core.data_types import (
    ParameterConstraint,
    ParameterName,
    ParameterValueType,
)
from technical_calculators.core.exceptions import InvalidConfigurationError


@dataclass(frozen=True)
class ParameterSpec:
    """Declared parameter: bounds, numeric type and optional default.

    A spec without a default is required.
    """

    name: ParameterName
    min: float
    max: float
    value_type: ParameterValueType = ParameterValueType.INT
    default: int | float | None = None

    @property
    def required(self) -> bool:
        return self.default is None

    @property
    def field_name(self) -> str:
        """Attribute name on the typed config, e.g. ``fast_k_period``."""
        return self.name.name.lower()

    @property
    def constraint(self) -> ParameterConstraint:
        return ParameterConstraint(
            parameter_name=self.name.value,
            min=self.min,
            max=self.max,
            value_type=self.value_type,
        )

    def parse(self, raw: str) -> int | float:
        """Parse and range-check a raw value.

        Unparsable and out-of-range values raise the same message.

        Raises:
            InvalidConfigurationError: If the value is invalid.
        """
        constraint = self.constraint
        caster = int if self.value_type == ParameterValueType.INT else float
        try:
            value: int | float | None = caster(raw)
        except (TypeError, ValueError):
            value = None

        if value is None or not math.isfinite(value) or not constraint.contains(value):
            raise InvalidConfigurationError(
                constraint.range_message(),
                parameter_name=self.name.value,
                value=raw,
                expected=f"{self.value_type.value} in [{self.min:g}, {self.max:g}]",
            )
        return value


def period_spec(min_value: int, max_value: int, default: int | None = None) -> ParameterSpec:
    """Shorthand for the ubiquitous integer ``Period`` parameter."""
    return ParameterSpec(ParameterName.PERIOD, min_value, max_value, default=default)


# Constraint reported by calculators that take no parameters.
NO_PARAMETERS_CONSTRAINT = ParameterConstraint(
    parameter_name=ParameterName.NA.value,
    min=0,
    max=0,
    value_type=ParameterValueType.INT,
)


# =============================================================================
# Typed configurations
# =============================================================================


@dataclass(frozen=True)
class NoParameters:
    """Configuration of calculators without parameters."""


@dataclass(frozen=True)
class PeriodConfig:
    period: int


@dataclass(frozen=True)
class FastSlowConfig:
    fast_period: int
    slow_period: int


@dataclass(frozen=True)
class FastSlowSignalConfig:
    fast_period: int
    slow_period: int
    signal_period: int


@dataclass(frozen=True)
class StochasticConfig:
    fast_k_period: int
    slow_k_period: int
    slow_d_period: int


@dataclass(frozen=True)
class UltimateOscillatorConfig:
    short_period: int
    medium_period: int
    long_period: int


@dataclass(frozen=True)
class BandsConfig:
    period: int
    multiplier: float


@dataclass(frozen=True)
class ParabolicSarConfig:
    acceleration: float
    maximum: float


@dataclass(frozen=True)
class AdaptiveLimitsConfig:
    fast_limit: float
    slow_limit: float


IndicatorConfig = Union[
    NoParameters,
    PeriodConfig,
    FastSlowConfig,
    FastSlowSignalConfig,
    StochasticConfig,
    UltimateOscillatorConfig,
    BandsConfig,
    ParabolicSarConfig,
    AdaptiveLimitsConfig,
]


def parse_parameters(
    specs: Sequence[ParameterSpec],
    parameters: Mapping[str, str],
    config_type: type,
    required_message: str | None = None,
) -> IndicatorConfig:
    """Build a typed config from a raw parameter map.

    Defaults fill missing optional parameters, required ones must be present,
    and every value is range-checked. Keys not declared by ``specs`` are
    ignored.

    Args:
        specs: Declared parameters, in check order.
        parameters: Raw string map.
        config_type: Frozen dataclass receiving the parsed values.
        required_message: Message used instead of the per-parameter one when
            any required parameter is missing.

    Returns:
        Instance of ``config_type``.

    Raises:
        InvalidConfigurationError: On a missing, malformed or out-of-range value.
    """
    missing = [spec for spec in specs if spec.required and spec.name.value not in parameters]
    if missing:
        first = missing[0]
        raise InvalidConfigurationError(
            required_message or f"Parameter {first.name.value} is required.",
            parameter_name=first.name.value,
            details={"missing": [spec.name.value for spec in missing]},
        )

    values: dict[str, int | float] = {}
    for spec in specs:
        if spec.name.value in parameters:
            values[spec.field_name] = spec.parse(parameters[spec.name.value])
        else:
            values[spec.field_name] = spec.default  # type: ignore[assignment]

    expected = {f.name for f in fields(config_type)}
    if expected != set(values):
        raise TypeError(
            f"{config_type.__name__} fields {sorted(expected)} do not match parameters {sorted(values)}"
        )
    return config_type(**values)


def require_less_than(
    lower_name: ParameterName,
    lower: float,
    upper_name: ParameterName,
    upper: float,
) -> None:
    """Enforce ``lower < upper`` between two parameters."""
    if lower >= upper:
        raise InvalidConfigurationError(
            f"{lower_name.value} must be less than {upper_name.value}.",
            parameter_name=lower_name.value,
            value=lower,
            expected=f"< {upper_name.value} ({upper:g})",
        )
