"""
Volume-flow indicators: on-balance volume and the Chaikin family.
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

# Chaikin oscillator windows
ADOSC_FAST_PERIOD = 3
ADOSC_SLOW_PERIOD = 10


@register_calculator(CalculatorName.OBV)
class OnBalanceVolume(IndicatorCalculator):
    """On-Balance Volume: cumulative volume signed by the close-to-close move."""

    indicator_names = (IndicatorName.OBV,)

    def _calculate(self, columns: PriceColumns) -> CalculatorResults:
        result = self._run("OBV", columns.close, columns.volume)
        return self._from_transform(columns, result)


@register_calculator(CalculatorName.CHAIKINADLINE)
class ChaikinAdLine(IndicatorCalculator):
    """Chaikin Accumulation/Distribution line.

    Each bar adds ``((close - low) - (high - close)) / (high - low) * volume``;
    bars with high == low add nothing.
    """

    indicator_names = (IndicatorName.CHAIKINADLINE,)

    def _calculate(self, columns: PriceColumns) -> CalculatorResults:
        result = self._run("AD", columns.high, columns.low, columns.close, columns.volume)
        return self._from_transform(columns, result)


@register_calculator(CalculatorName.CHAIKINADOSCILLATOR)
class ChaikinAdOscillator(IndicatorCalculator):
    """Chaikin A/D Oscillator: EMA(3) minus EMA(10) of the A/D line."""

    indicator_names = (IndicatorName.CHAIKINADOSCILLATOR,)

    def minimum_rows(self) -> int:
        return ADOSC_SLOW_PERIOD

    def _calculate(self, columns: PriceColumns) -> CalculatorResults:
        result = self._run(
            "ADOSC",
            columns.high,
            columns.low,
            columns.close,
            columns.volume,
            fastperiod=ADOSC_FAST_PERIOD,
            slowperiod=ADOSC_SLOW_PERIOD,
        )
        return self._from_transform(columns, result)
