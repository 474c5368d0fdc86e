"""Leyline Types - Element types and dump modes.

ElementType is the closed set of numeric element types the dump formatter
knows how to render. Anything else maps to UNSUPPORTED, which the formatter
turns into an in-band marker rather than an error.

DumpMode selects how samples are picked for field dumping:

    OFF     -> no field records at all
    FULL    -> every sample in the batch
    HASH    -> xxh64(line_id) % interval == 0   (stable across runs)
    RANDOM  -> seeded draw % interval == 0      (stable per call, see sampling)
"""

from __future__ import annotations

from enum import Enum, IntEnum

import torch


class ElementType(Enum):
    """Numeric element types supported by the dump formatter."""

    FP32 = "fp32"
    INT64 = "int64"
    FP64 = "fp64"
    INT32 = "int32"
    INT16 = "int16"
    UNSUPPORTED = "unsupported"

    @classmethod
    def from_dtype(cls, dtype: torch.dtype) -> ElementType:
        """Map a torch dtype onto the supported element types."""
        return _DTYPE_TO_ELEMENT_TYPE.get(dtype, cls.UNSUPPORTED)


_DTYPE_TO_ELEMENT_TYPE: dict[torch.dtype, ElementType] = {
    torch.float32: ElementType.FP32,
    torch.int64: ElementType.INT64,
    torch.float64: ElementType.FP64,
    torch.int32: ElementType.INT32,
    torch.int16: ElementType.INT16,
}


class DumpMode(IntEnum):
    """Per-sample selection policy for field dumps.

    Values 0-2 line up with the trainer descriptor's legacy integer modes
    (0: no random, 1: random with line id hash, 2: random with random number).
    """

    FULL = 0
    HASH = 1
    RANDOM = 2
    OFF = 3

    @classmethod
    def parse(cls, value: DumpMode | int | str) -> DumpMode:
        """Accept an enum member, its integer value, or its name (any case)."""
        if isinstance(value, DumpMode):
            return value
        if isinstance(value, str):
            try:
                return cls[value.strip().upper()]
            except KeyError:
                available = [m.name.lower() for m in cls]
                raise ValueError(f"Unknown dump mode: {value!r}. Available: {available}") from None
        return cls(value)


__all__ = ["ElementType", "DumpMode"]
