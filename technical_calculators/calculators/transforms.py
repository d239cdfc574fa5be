"""
Adapter between calculators and the TA-Lib numeric library.

Every TA-Lib function is exposed through one call shape:

    run(function_name, inputs, **params) -> TransformResult

The result carries the TA-Lib status code, the first valid index (the
function's lookback for the given parameters) and the number of valid
elements, next to output arrays aligned index-for-index with the inputs.
Callers only read ``outputs[k][begin_index:end_index]``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import IntEnum
from functools import lru_cache
from typing import Any, Protocol, Sequence

import numpy as np
import talib
from talib import abstract

from technical_calculators.monitoring.logger import LogCategory, get_logger

logger = get_logger(__name__, LogCategory.CALCULATION)

_ERROR_CODE = re.compile(r"error code (\d+)")


class RetCode(IntEnum):
    """TA-Lib return codes."""

    SUCCESS = 0
    LIB_NOT_INITIALIZE = 1
    BAD_PARAM = 2
    ALLOC_ERR = 3
    GROUP_NOT_FOUND = 4
    FUNC_NOT_FOUND = 5
    INVALID_HANDLE = 6
    INVALID_PARAM_HOLDER = 7
    INVALID_PARAM_HOLDER_TYPE = 8
    INVALID_PARAM_FUNCTION = 9
    INPUT_NOT_ALL_INITIALIZE = 10
    OUTPUT_NOT_ALL_INITIALIZE = 11
    OUT_OF_RANGE_START_INDEX = 12
    OUT_OF_RANGE_END_INDEX = 13
    INVALID_LIST_TYPE = 14
    BAD_OBJECT = 15
    NOT_SUPPORTED = 16
    INTERNAL_ERROR = 5000
    UNKNOWN_ERR = 0xFFFF


@dataclass(frozen=True)
class TransformResult:
    """Outcome of one numeric transform call."""

    function_name: str
    status: int
    begin_index: int
    element_count: int
    outputs: tuple[np.ndarray, ...]
    error: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.status == RetCode.SUCCESS

    @property
    def end_index(self) -> int:
        """Index one past the last valid output."""
        return self.begin_index + self.element_count

    def valid(self, output: int = 0) -> np.ndarray:
        """Valid slice of one output array."""
        return self.outputs[output][self.begin_index:self.end_index]


class TransformBackend(Protocol):
    """Anything able to run a named transform over float64 arrays."""

    def run(self, function_name: str, inputs: Sequence[np.ndarray], **params: Any) -> TransformResult:
        ...


def status_from_exception(error: Exception) -> int:
    """Recover the TA-Lib return code from the exception it raised."""
    match = _ERROR_CODE.search(str(error))
    if match:
        return int(match.group(1))
    return RetCode.UNKNOWN_ERR


@lru_cache(maxsize=256)
def _lookback(function_name: str, params: tuple[tuple[str, Any], ...]) -> int:
    function = abstract.Function(function_name)
    function.set_parameters(**dict(params))
    return int(function.lookback)


@lru_cache(maxsize=64)
def _output_count(function_name: str) -> int:
    return len(abstract.Function(function_name).output_names)


class TaLibTransforms:
    """TA-Lib backed transform backend."""

    def lookback(self, function_name: str, **params: Any) -> int:
        """Number of leading bars consumed before the first valid output."""
        return _lookback(function_name, tuple(sorted(params.items())))

    def run(self, function_name: str, inputs: Sequence[np.ndarray], **params: Any) -> TransformResult:
        """Run a TA-Lib function.

        Empty inputs produce a successful empty result without calling
        TA-Lib. Any exception raised by TA-Lib is reported as a non-success
        status, never raised from here.

        Args:
            function_name: TA-Lib function name, e.g. ``"SMA"``.
            inputs: Input series, all of the same length.
            **params: TA-Lib optional inputs, e.g. ``timeperiod=14``.

        Returns:
            TransformResult.
        """
        arrays = [np.ascontiguousarray(values, dtype=np.float64) for values in inputs]
        length = len(arrays[0]) if arrays else 0

        if length == 0:
            outputs = tuple(np.empty(0, dtype=np.float64) for _ in range(_output_count(function_name)))
            return TransformResult(function_name, RetCode.SUCCESS, 0, 0, outputs)

        function = getattr(talib, function_name)
        try:
            raw = function(*arrays, **params)
        except Exception as e:
            status = status_from_exception(e)
            logger.error(
                f"TA-Lib {function_name} failed with status {status}: {e}",
                extra={"extra_data": {"params": params, "length": length}},
            )
            return TransformResult(function_name, status, 0, 0, (), error=str(e))

        outputs = raw if isinstance(raw, tuple) else (raw,)
        begin = min(self.lookback(function_name, **params), length)
        return TransformResult(
            function_name,
            RetCode.SUCCESS,
            begin,
            length - begin,
            tuple(np.asarray(output, dtype=np.float64) for output in outputs),
        )


_default_transforms = TaLibTransforms()


def default_transforms() -> TaLibTransforms:
    """Shared TA-Lib backend instance."""
    return _default_transforms
