"""
Price transforms.
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


@register_calculator(CalculatorName.AVGPRICE)
class AveragePrice(IndicatorCalculator):
    """(open + high + low + close) / 4."""

    indicator_names = (IndicatorName.AVGPRICE,)

    def _calculate(self, columns: PriceColumns) -> CalculatorResults:
        result = self._run("AVGPRICE", columns.open, columns.high, columns.low, columns.close)
        return self._from_transform(columns, result)


@register_calculator(CalculatorName.WCLPRICE)
class WeightedClosePrice(IndicatorCalculator):
    """(high + low + 2 * close) / 4."""

    indicator_names = (IndicatorName.WCLPRICE,)

    def _calculate(self, columns: PriceColumns) -> CalculatorResults:
        result = self._run("WCLPRICE", columns.high, columns.low, columns.close)
        return self._from_transform(columns, result)
