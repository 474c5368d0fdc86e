"""Leyline Tensor - LoD-aware tensor contract for dumping.

A LoDTensor pairs a torch tensor with an optional single-level LoD
(level-of-detail) offset array. With LoD, sample ``i`` owns rows
``lod[i]:lod[i+1]``; without it, every sample owns exactly one row.

The dump pipeline only reads these tensors. The scope that owns them is
responsible for their lifetime.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field

import torch

from scry.leyline.types import ElementType


def _ensure_lod(lod: Sequence[int] | None) -> tuple[int, ...] | None:
    """Normalize LoD offsets to a tuple and check they never decrease."""
    if lod is None:
        return None
    offsets = tuple(int(x) for x in lod)
    for prev, cur in zip(offsets, offsets[1:]):
        if cur < prev:
            raise ValueError(f"LoD offsets must be non-decreasing, got {list(offsets)}")
    return offsets


@dataclass
class LoDTensor:
    """Tensor plus optional LoD offsets.

    Attributes:
        data: Backing tensor, or None when the variable was never written.
        lod: Sample boundaries into the rows of ``data`` (None = fixed-size samples).
    """

    data: torch.Tensor | None = None
    lod: tuple[int, ...] | None = field(default=None)

    def __setattr__(self, name: str, value: object) -> None:
        # Every route to ``lod`` (constructor, set(), plain assignment) is checked
        if name == "lod":
            value = _ensure_lod(value)  # type: ignore[arg-type]
        super().__setattr__(name, value)

    def set(self, data: torch.Tensor, lod: Sequence[int] | None = None) -> None:
        """Replace the backing tensor and LoD in place."""
        self.data = data
        self.lod = lod  # type: ignore[assignment]

    def set_lod(self, lod: Sequence[int] | None) -> None:
        self.lod = lod  # type: ignore[assignment]

    @property
    def is_initialized(self) -> bool:
        return self.data is not None

    @property
    def has_lod(self) -> bool:
        # An empty offset list carries no boundaries, same as no LoD
        return bool(self.lod)

    @property
    def dims(self) -> tuple[int, ...]:
        if self.data is None:
            return ()
        return tuple(self.data.shape)

    @property
    def numel(self) -> int:
        if self.data is None:
            return 0
        return self.data.numel()

    @property
    def element_type(self) -> ElementType:
        if self.data is None:
            return ElementType.UNSUPPORTED
        return ElementType.from_dtype(self.data.dtype)

    @property
    def is_host(self) -> bool:
        """True when the data lives in host (CPU) memory."""
        if self.data is None:
            return True
        return self.data.device.type == "cpu"


__all__ = ["LoDTensor"]
