"""
Overlap studies: moving averages, bands and the parabolic SAR.

Every calculator here works on the close column except PSAR, which reads
high and low.
"""

from __future__ import annotations

import numpy as np

from technical_calculators.core.data_types import (
    CalculatorName,
    CalculatorResults,
    IndicatorName,
    ParameterName,
    ParameterValueType,
    PriceColumns,
    SortOrder,
)
from technical_calculators.core.exceptions import InvalidConfigurationError
from technical_calculators.core.registry import register_calculator

from .base import IndicatorCalculator
from .parameters import (
    AdaptiveLimitsConfig,
    BandsConfig,
    ParabolicSarConfig,
    ParameterSpec,
    PeriodConfig,
    period_spec,
    require_less_than,
)

# TA-Lib moving average type for a simple average
MA_TYPE_SMA = 0


class _CloseAverage(IndicatorCalculator):
    """Single moving-average line over the close column."""

    config_type = PeriodConfig
    indicator_names = (IndicatorName.MOVINGAVERAGE,)
    talib_function = "SMA"

    def _calculate(self, columns: PriceColumns) -> CalculatorResults:
        result = self._run(self.talib_function, columns.close, timeperiod=self.config.period)
        return self._from_transform(columns, result)


@register_calculator(CalculatorName.SMA)
class SimpleMovingAverage(_CloseAverage):
    """Simple Moving Average."""

    parameter_specs = (period_spec(2, 200, default=20),)
    talib_function = "SMA"


@register_calculator(CalculatorName.EMA)
class ExponentialMovingAverage(_CloseAverage):
    """Exponential Moving Average, seeded with the simple average of the first period.

    Results are ordered oldest first.
    """

    parameter_specs = (period_spec(2, 200, default=20),)
    sort_order = SortOrder.ASCENDING
    talib_function = "EMA"


@register_calculator(CalculatorName.WMA)
class WeightedMovingAverage(_CloseAverage):
    """Linearly weighted moving average. Results are ordered oldest first."""

    parameter_specs = (period_spec(2, 200),)
    sort_order = SortOrder.ASCENDING
    talib_function = "WMA"


@register_calculator(CalculatorName.MA)
class MovingAverage(_CloseAverage):
    """Generic moving average, computed as a simple average."""

    parameter_specs = (period_spec(2, 200),)

    def _calculate(self, columns: PriceColumns) -> CalculatorResults:
        result = self._run("MA", columns.close, timeperiod=self.config.period, matype=MA_TYPE_SMA)
        return self._from_transform(columns, result)


@register_calculator(CalculatorName.TMA)
class TriangularMovingAverage(_CloseAverage):
    """Triangular moving average (a simple average of a simple average)."""

    parameter_specs = (period_spec(2, 200),)
    talib_function = "TRIMA"


@register_calculator(CalculatorName.TEMA)
class TripleExponentialMovingAverage(_CloseAverage):
    """Triple Exponential Moving Average.

    TEMA = 3*EMA1 - 3*EMA2 + EMA3, where each EMA smooths the previous one.
    The lookback is three times the period minus three bars.
    """

    parameter_specs = (period_spec(2, 200),)
    talib_function = "TEMA"


@register_calculator(CalculatorName.DEMA)
class DoubleExponentialMovingAverage(_CloseAverage):
    """Double Exponential Moving Average: 2*EMA(close) - EMA(EMA(close))."""

    parameter_specs = (period_spec(2, 200),)
    indicator_names = (IndicatorName.DEMA,)
    talib_function = "DEMA"


@register_calculator(CalculatorName.KAMA)
class KaufmanAdaptiveMovingAverage(_CloseAverage):
    """Kaufman Adaptive Moving Average.

    The smoothing constant follows the efficiency ratio (net change over
    summed absolute changes), so the average tracks closely in trends and
    flattens in noise.
    """

    parameter_specs = (period_spec(2, 100),)
    indicator_names = (IndicatorName.KAMA,)
    talib_function = "KAMA"


@register_calculator(CalculatorName.MAMA)
class MesaAdaptiveMovingAverage(IndicatorCalculator):
    """MESA Adaptive Moving Average and its following average (FAMA).

    Both limits are smoothing factors; the fast limit must exceed the slow
    one.
    """

    parameter_specs = (
        ParameterSpec(ParameterName.FAST_LIMIT, 0.01, 0.99, ParameterValueType.DOUBLE, default=0.5),
        ParameterSpec(ParameterName.SLOW_LIMIT, 0.01, 0.99, ParameterValueType.DOUBLE, default=0.05),
    )
    config_type = AdaptiveLimitsConfig
    indicator_names = (IndicatorName.MAMA, IndicatorName.FAMA)

    def _validate_config(self, config: AdaptiveLimitsConfig) -> None:
        if config.fast_limit <= config.slow_limit:
            raise InvalidConfigurationError(
                "FastLimit must be greater than SlowLimit.",
                parameter_name=ParameterName.FAST_LIMIT.value,
                value=config.fast_limit,
                expected=f"> SlowLimit ({config.slow_limit:g})",
            )

    def _calculate(self, columns: PriceColumns) -> CalculatorResults:
        result = self._run(
            "MAMA",
            columns.close,
            fastlimit=self.config.fast_limit,
            slowlimit=self.config.slow_limit,
        )
        return self._from_transform(columns, result)


@register_calculator(CalculatorName.BBANDS)
class BollingerBands(IndicatorCalculator):
    """Bollinger Bands.

    Algorithm:
        MIDDLEBAND = SMA(close, Period)
        UPPERBAND  = MIDDLEBAND + Multiplier * stddev(close, Period)
        LOWERBAND  = MIDDLEBAND - Multiplier * stddev(close, Period)

    Both parameters are required.
    """

    parameter_specs = (
        period_spec(2, 200),
        ParameterSpec(ParameterName.MULTIPLIER, 0.1, 5.0, ParameterValueType.DOUBLE),
    )
    config_type = BandsConfig
    indicator_names = (IndicatorName.MIDDLEBAND, IndicatorName.UPPERBAND, IndicatorName.LOWERBAND)
    required_message = "Parameters Period and Multiplier are required."

    def _calculate(self, columns: PriceColumns) -> CalculatorResults:
        result = self._run(
            "BBANDS",
            columns.close,
            timeperiod=self.config.period,
            nbdevup=self.config.multiplier,
            nbdevdn=self.config.multiplier,
            matype=MA_TYPE_SMA,
        )
        # TA-Lib returns (upper, middle, lower)
        return self._from_series(
            columns,
            [
                (IndicatorName.MIDDLEBAND, result, 1),
                (IndicatorName.UPPERBAND, result, 0),
                (IndicatorName.LOWERBAND, result, 2),
            ],
        )


@register_calculator(CalculatorName.PSAR)
class ParabolicSar(IndicatorCalculator):
    """Parabolic SAR with a reversal flag.

    ISREVERSAL is 1.0 on the bar where the trend flips. The trend starts up;
    it turns down when the low drops below the SAR and back up when the low
    rises above it.
    """

    parameter_specs = (
        ParameterSpec(ParameterName.ACCELERATION, 0.001, 0.5, ParameterValueType.DOUBLE),
        ParameterSpec(ParameterName.MAXIMUM, 0.01, 1.0, ParameterValueType.DOUBLE),
    )
    config_type = ParabolicSarConfig
    indicator_names = (IndicatorName.SAR, IndicatorName.ISREVERSAL)
    required_message = "Parameters Acceleration and Maximum are required."

    def _validate_config(self, config: ParabolicSarConfig) -> None:
        require_less_than(
            ParameterName.ACCELERATION,
            config.acceleration,
            ParameterName.MAXIMUM,
            config.maximum,
        )

    def minimum_rows(self) -> int:
        return 2

    def _calculate(self, columns: PriceColumns) -> CalculatorResults:
        result = self._run(
            "SAR",
            columns.high,
            columns.low,
            acceleration=self.config.acceleration,
            maximum=self.config.maximum,
        )
        sar = result.outputs[0]
        reversal = np.zeros(len(sar), dtype=np.float64)
        uptrend = True
        for index in range(result.begin_index, result.end_index):
            low = columns.low[index]
            if uptrend and low < sar[index]:
                uptrend = False
                reversal[index] = 1.0
            elif not uptrend and low > sar[index]:
                uptrend = True
                reversal[index] = 1.0

        return self._build_results(
            columns,
            [(IndicatorName.SAR, sar), (IndicatorName.ISREVERSAL, reversal)],
            result.begin_index,
            result.end_index,
        )
