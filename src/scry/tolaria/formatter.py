"""Tolaria Formatter - Bounds-checked text rendering of tensor slices.

Every value is written as ``:<value>``. The element type picks the
renderer from a closed table; types outside the table produce the
``unsupported type`` marker instead of values.

Rendering rules:
    FP32 / FP64    -> %g (six significant digits, like a default C++ stream)
    INT32 / INT16  -> signed decimal
    INT64          -> unsigned decimal (two's complement reinterpretation)
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable

from scry.leyline import (
    ACCESS_VIOLATION_MARKER,
    UNSUPPORTED_TYPE_MARKER,
    VALUE_SEPARATOR,
    ElementType,
    LoDTensor,
)

_logger = logging.getLogger(__name__)

_UINT64_MASK = (1 << 64) - 1


def _format_float(values: Iterable[float]) -> str:
    return "".join(VALUE_SEPARATOR + format(v, "g") for v in values)


def _format_signed(values: Iterable[int]) -> str:
    return "".join(VALUE_SEPARATOR + str(v) for v in values)


def _format_unsigned64(values: Iterable[int]) -> str:
    return "".join(VALUE_SEPARATOR + str(v & _UINT64_MASK) for v in values)


_FORMATTERS: dict[ElementType, Callable[[Iterable], str]] = {
    ElementType.FP32: _format_float,
    ElementType.INT64: _format_unsigned64,
    ElementType.FP64: _format_float,
    ElementType.INT32: _format_signed,
    ElementType.INT16: _format_signed,
}


def format_values(tensor: LoDTensor, start: int, end: int) -> str:
    """Render the flattened elements ``[start, end)`` of ``tensor``.

    Args:
        tensor: Host-resident tensor to read.
        start: First flat element index.
        end: One past the last flat element index.

    Returns:
        The values, each prefixed by ``:``; ``"access violation"`` when the
        range leaves the tensor; ``"unsupported type"`` for other dtypes.
    """
    formatter = _FORMATTERS.get(tensor.element_type)
    if formatter is None:
        return UNSUPPORTED_TYPE_MARKER

    if start < 0 or end > tensor.numel:
        _logger.debug("access violation: [%d, %d) outside %d elements", start, end, tensor.numel)
        return ACCESS_VIOLATION_MARKER

    if end <= start:
        return ""

    values = tensor.data.detach().reshape(-1)[start:end].tolist()
    return formatter(values)


__all__ = ["format_values"]
