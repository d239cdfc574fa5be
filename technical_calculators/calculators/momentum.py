"""
Momentum indicators: oscillators, directional movement and price spreads.
"""

from __future__ import annotations

import numpy as np

from technical_calculators.core.data_types import (
    CalculatorName,
    CalculatorResults,
    IndicatorName,
    ParameterName,
    PriceColumns,
)
from technical_calculators.core.exceptions import InvalidConfigurationError
from technical_calculators.core.registry import register_calculator

from .base import IndicatorCalculator
from .parameters import (
    FastSlowConfig,
    FastSlowSignalConfig,
    ParameterSpec,
    PeriodConfig,
    StochasticConfig,
    UltimateOscillatorConfig,
    period_spec,
    require_less_than,
)

MA_TYPE_SMA = 0


# =============================================================================
# Single-period oscillators
# =============================================================================


class _ClosePeriodIndicator(IndicatorCalculator):
    config_type = PeriodConfig
    talib_function = ""

    def _calculate(self, columns: PriceColumns) -> CalculatorResults:
        result = self._run(self.talib_function, columns.close, timeperiod=self.config.period)
        return self._from_transform(columns, result)


class _HighLowClosePeriodIndicator(IndicatorCalculator):
    config_type = PeriodConfig
    talib_function = ""

    def _calculate(self, columns: PriceColumns) -> CalculatorResults:
        result = self._run(
            self.talib_function,
            columns.high,
            columns.low,
            columns.close,
            timeperiod=self.config.period,
        )
        return self._from_transform(columns, result)


@register_calculator(CalculatorName.RSI)
class RelativeStrengthIndex(_ClosePeriodIndicator):
    """Relative Strength Index (Wilder smoothing), bounded to [0, 100]."""

    parameter_specs = (period_spec(2, 100, default=14),)
    indicator_names = (IndicatorName.RSI,)
    talib_function = "RSI"


@register_calculator(CalculatorName.MOM)
class Momentum(_ClosePeriodIndicator):
    """Momentum: close minus the close ``Period`` bars earlier."""

    parameter_specs = (period_spec(1, 100, default=10),)
    indicator_names = (IndicatorName.MOM,)
    talib_function = "MOM"


@register_calculator(CalculatorName.ROC)
class RateOfChange(_ClosePeriodIndicator):
    """Rate of change in percent: ((close / close[-Period]) - 1) * 100."""

    parameter_specs = (period_spec(1, 100, default=10),)
    indicator_names = (IndicatorName.ROC,)
    talib_function = "ROC"


@register_calculator(CalculatorName.ADX)
class AverageDirectionalIndex(_HighLowClosePeriodIndicator):
    """Average Directional Index.

    Algorithm:
        1. +DM / -DM from consecutive highs and lows
        2. Wilder-smoothed true range, +DI and -DI
        3. DX = 100 * |+DI - -DI| / (+DI + -DI)
        4. ADX = Wilder average of DX

    Trading Interpretation:
        - ADX above 25 marks a trending market
        - ADX below 20 marks a ranging market

    The period is required.
    """

    parameter_specs = (period_spec(2, 100),)
    indicator_names = (IndicatorName.ADX,)
    talib_function = "ADX"


@register_calculator(CalculatorName.ADXR)
class AverageDirectionalIndexRating(_HighLowClosePeriodIndicator):
    """ADX Rating: average of today's ADX and the ADX ``Period`` bars ago."""

    parameter_specs = (period_spec(2, 100, default=14),)
    indicator_names = (IndicatorName.ADXR,)
    talib_function = "ADXR"


@register_calculator(CalculatorName.DX)
class DirectionalMovementIndex(_HighLowClosePeriodIndicator):
    """Directional Movement Index (DX)."""

    parameter_specs = (period_spec(2, 100, default=14),)
    indicator_names = (IndicatorName.DX,)
    talib_function = "DX"


@register_calculator(CalculatorName.MFI)
class MoneyFlowIndex(IndicatorCalculator):
    """Money Flow Index: a volume-weighted RSI over the typical price."""

    parameter_specs = (period_spec(2, 100, default=14),)
    config_type = PeriodConfig
    indicator_names = (IndicatorName.MFI,)

    def _calculate(self, columns: PriceColumns) -> CalculatorResults:
        result = self._run(
            "MFI",
            columns.high,
            columns.low,
            columns.close,
            columns.volume,
            timeperiod=self.config.period,
        )
        return self._from_transform(columns, result)


# =============================================================================
# Multi-line directional movement
# =============================================================================


@register_calculator(CalculatorName.DM)
class DirectionalMovement(IndicatorCalculator):
    """Plus and minus directional movement, emitted together."""

    parameter_specs = (period_spec(2, 100, default=14),)
    config_type = PeriodConfig
    indicator_names = (IndicatorName.PLUSDM, IndicatorName.MINUSDM)

    def _calculate(self, columns: PriceColumns) -> CalculatorResults:
        period = self.config.period
        plus_dm = self._run("PLUS_DM", columns.high, columns.low, timeperiod=period)
        minus_dm = self._run("MINUS_DM", columns.high, columns.low, timeperiod=period)
        return self._from_series(
            columns,
            [
                (IndicatorName.PLUSDM, plus_dm, 0),
                (IndicatorName.MINUSDM, minus_dm, 0),
            ],
        )


@register_calculator(CalculatorName.DMI)
class DirectionalMovementSystem(IndicatorCalculator):
    """Directional Movement System: +DI, -DI and ADX on the same bars.

    Bars are emitted from the first bar where ADX is valid, which is the
    longest of the three lookbacks.
    """

    parameter_specs = (period_spec(2, 100, default=14),)
    config_type = PeriodConfig
    indicator_names = (IndicatorName.PLUSDI, IndicatorName.MINUSDI, IndicatorName.ADX)

    def _calculate(self, columns: PriceColumns) -> CalculatorResults:
        period = self.config.period
        plus_di = self._run("PLUS_DI", columns.high, columns.low, columns.close, timeperiod=period)
        minus_di = self._run("MINUS_DI", columns.high, columns.low, columns.close, timeperiod=period)
        adx = self._run("ADX", columns.high, columns.low, columns.close, timeperiod=period)
        return self._from_series(
            columns,
            [
                (IndicatorName.PLUSDI, plus_di, 0),
                (IndicatorName.MINUSDI, minus_di, 0),
                (IndicatorName.ADX, adx, 0),
            ],
        )


@register_calculator(CalculatorName.AROON)
class Aroon(IndicatorCalculator):
    """Aroon up/down: bars since the highest high and lowest low, scaled to 0-100."""

    parameter_specs = (period_spec(2, 100, default=14),)
    config_type = PeriodConfig
    indicator_names = (IndicatorName.AROONUP, IndicatorName.AROONDOWN)

    def _calculate(self, columns: PriceColumns) -> CalculatorResults:
        result = self._run("AROON", columns.high, columns.low, timeperiod=self.config.period)
        # TA-Lib returns (aroondown, aroonup)
        return self._from_series(
            columns,
            [
                (IndicatorName.AROONUP, result, 1),
                (IndicatorName.AROONDOWN, result, 0),
            ],
        )


# =============================================================================
# Moving-average spreads
# =============================================================================


def _fast_period(min_value: int, max_value: int, default: int | None) -> ParameterSpec:
    return ParameterSpec(ParameterName.FAST_PERIOD, min_value, max_value, default=default)


def _slow_period(min_value: int, max_value: int, default: int | None) -> ParameterSpec:
    return ParameterSpec(ParameterName.SLOW_PERIOD, min_value, max_value, default=default)


def _signal_period(min_value: int, max_value: int, default: int | None) -> ParameterSpec:
    return ParameterSpec(ParameterName.SIGNAL_PERIOD, min_value, max_value, default=default)


class _FastSlowIndicator(IndicatorCalculator):
    def _validate_config(self, config: FastSlowConfig | FastSlowSignalConfig) -> None:
        require_less_than(
            ParameterName.FAST_PERIOD,
            config.fast_period,
            ParameterName.SLOW_PERIOD,
            config.slow_period,
        )


@register_calculator(CalculatorName.APO)
class AbsolutePriceOscillator(_FastSlowIndicator):
    """Absolute Price Oscillator: fast SMA minus slow SMA of the close."""

    parameter_specs = (_fast_period(2, 50, 12), _slow_period(3, 100, 26))
    config_type = FastSlowConfig
    indicator_names = (IndicatorName.APO,)

    def _calculate(self, columns: PriceColumns) -> CalculatorResults:
        result = self._run(
            "APO",
            columns.close,
            fastperiod=self.config.fast_period,
            slowperiod=self.config.slow_period,
            matype=MA_TYPE_SMA,
        )
        return self._from_transform(columns, result)


@register_calculator(CalculatorName.PPO)
class PercentagePriceOscillator(_FastSlowIndicator):
    """Percentage Price Oscillator with signal line and histogram.

    Algorithm:
        PPO       = 100 * (SMA_fast - SMA_slow) / SMA_slow
        PPOSIGNAL = EMA(PPO, SignalPeriod)
        PPOHIST   = PPO - PPOSIGNAL

    Bars are emitted once the signal line is valid.
    """

    parameter_specs = (_fast_period(2, 50, 12), _slow_period(2, 100, 26), _signal_period(2, 50, 9))
    config_type = FastSlowSignalConfig
    indicator_names = (IndicatorName.PPO, IndicatorName.PPOHIST, IndicatorName.PPOSIGNAL)

    def _calculate(self, columns: PriceColumns) -> CalculatorResults:
        ppo = self._run(
            "PPO",
            columns.close,
            fastperiod=self.config.fast_period,
            slowperiod=self.config.slow_period,
            matype=MA_TYPE_SMA,
        )
        signal = self._run("EMA", ppo.valid(), timeperiod=self.config.signal_period)

        # signal was computed on the valid PPO slice; shift it back to bar indices
        offset = ppo.begin_index
        signal_line = np.full(len(columns), np.nan)
        signal_line[offset:ppo.end_index] = signal.outputs[0]
        histogram = ppo.outputs[0] - signal_line

        return self._build_results(
            columns,
            [
                (IndicatorName.PPO, ppo.outputs[0]),
                (IndicatorName.PPOHIST, histogram),
                (IndicatorName.PPOSIGNAL, signal_line),
            ],
            offset + signal.begin_index,
            offset + signal.end_index,
        )


@register_calculator(CalculatorName.MACD)
class MovingAverageConvergenceDivergence(_FastSlowIndicator):
    """MACD line, signal line and histogram. All three periods are required."""

    parameter_specs = (_fast_period(2, 50, None), _slow_period(2, 100, None), _signal_period(2, 50, None))
    config_type = FastSlowSignalConfig
    indicator_names = (IndicatorName.MACD, IndicatorName.MACDSIGNAL, IndicatorName.MACDHIST)
    required_message = "Parameters FastPeriod, SlowPeriod, and SignalPeriod are required."

    def _calculate(self, columns: PriceColumns) -> CalculatorResults:
        result = self._run(
            "MACD",
            columns.close,
            fastperiod=self.config.fast_period,
            slowperiod=self.config.slow_period,
            signalperiod=self.config.signal_period,
        )
        return self._from_transform(columns, result)


# =============================================================================
# Stochastic and ultimate oscillators
# =============================================================================


@register_calculator(CalculatorName.STOCH)
class StochasticOscillator(IndicatorCalculator):
    """Slow stochastic %K and %D, both smoothed with simple averages."""

    parameter_specs = (
        ParameterSpec(ParameterName.FAST_K_PERIOD, 1, 100, default=14),
        ParameterSpec(ParameterName.SLOW_K_PERIOD, 1, 100, default=14),
        ParameterSpec(ParameterName.SLOW_D_PERIOD, 1, 100, default=3),
    )
    config_type = StochasticConfig
    indicator_names = (IndicatorName.STOCHK, IndicatorName.STOCHD)

    def _calculate(self, columns: PriceColumns) -> CalculatorResults:
        result = self._run(
            "STOCH",
            columns.high,
            columns.low,
            columns.close,
            fastk_period=self.config.fast_k_period,
            slowk_period=self.config.slow_k_period,
            slowk_matype=MA_TYPE_SMA,
            slowd_period=self.config.slow_d_period,
            slowd_matype=MA_TYPE_SMA,
        )
        return self._from_transform(columns, result)


@register_calculator(CalculatorName.ULTOSC)
class UltimateOscillator(IndicatorCalculator):
    """Ultimate Oscillator over three ascending windows."""

    parameter_specs = (
        ParameterSpec(ParameterName.SHORT_PERIOD, 1, 100, default=7),
        ParameterSpec(ParameterName.MEDIUM_PERIOD, 1, 100, default=14),
        ParameterSpec(ParameterName.LONG_PERIOD, 1, 100, default=28),
    )
    config_type = UltimateOscillatorConfig
    indicator_names = (IndicatorName.ULTOSC,)

    def _validate_config(self, config: UltimateOscillatorConfig) -> None:
        if not config.short_period < config.medium_period < config.long_period:
            raise InvalidConfigurationError(
                "Periods must be in ascending order: ShortPeriod < MediumPeriod < LongPeriod.",
                parameter_name=ParameterName.SHORT_PERIOD.value,
                details={
                    "short_period": config.short_period,
                    "medium_period": config.medium_period,
                    "long_period": config.long_period,
                },
            )

    def _calculate(self, columns: PriceColumns) -> CalculatorResults:
        result = self._run(
            "ULTOSC",
            columns.high,
            columns.low,
            columns.close,
            timeperiod1=self.config.short_period,
            timeperiod2=self.config.medium_period,
            timeperiod3=self.config.long_period,
        )
        return self._from_transform(columns, result)
