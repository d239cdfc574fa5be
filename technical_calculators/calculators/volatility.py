"""
Volatility indicators built on the true range.
"""

from __future__ import annotations

from technical_calculators.core.data_types import (
    CalculatorName,
    CalculatorResults,
    IndicatorName,
    PriceColumns,
)
from technical_calculators.core.registry import register_calculator

from .base import IndicatorCalculator
from .parameters import PeriodConfig, period_spec


@register_calculator(CalculatorName.ATR)
class AverageTrueRange(IndicatorCalculator):
    """Average True Range.

    Algorithm:
        TR  = max(high - low, |high - prev_close|, |low - prev_close|)
        ATR = Wilder average of TR over Period bars

    The first valid value appears on bar ``Period``.
    """

    parameter_specs = (period_spec(1, 100, default=14),)
    config_type = PeriodConfig
    indicator_names = (IndicatorName.ATR,)

    def _calculate(self, columns: PriceColumns) -> CalculatorResults:
        result = self._run(
            "ATR",
            columns.high,
            columns.low,
            columns.close,
            timeperiod=self.config.period,
        )
        return self._from_transform(columns, result)


@register_calculator(CalculatorName.NATR)
class NormalizedAverageTrueRange(IndicatorCalculator):
    """ATR as a percentage of the close."""

    parameter_specs = (period_spec(1, 100, default=14),)
    config_type = PeriodConfig
    indicator_names = (IndicatorName.NATR,)

    def _calculate(self, columns: PriceColumns) -> CalculatorResults:
        result = self._run(
            "NATR",
            columns.high,
            columns.low,
            columns.close,
            timeperiod=self.config.period,
        )
        return self._from_transform(columns, result)


@register_calculator(CalculatorName.TRANGE)
class TrueRange(IndicatorCalculator):
    """True range of each bar; the first bar has no previous close and is skipped."""

    indicator_names = (IndicatorName.TRANGE,)

    def _calculate(self, columns: PriceColumns) -> CalculatorResults:
        result = self._run("TRANGE", columns.high, columns.low, columns.close)
        return self._from_transform(columns, result)
