"""Leyline Data Feed - Contract for the per-batch reader.

The dump pipeline asks the feed two things about the batch currently being
processed: how many samples it holds, and the line identifier of each one.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol, runtime_checkable


@runtime_checkable
class DataFeed(Protocol):
    """Reader view of the current minibatch."""

    def get_cur_batch_size(self) -> int:
        ...

    def get_line_id(self, index: int) -> str:
        ...


class InMemoryDataFeed:
    """List-backed feed that walks a fixed set of line ids batch by batch.

    Args:
        line_ids: Line identifiers for the whole dataset, in order.
        batch_size: Samples per batch. The final batch may be shorter.
    """

    def __init__(self, line_ids: Sequence[str], batch_size: int):
        if batch_size <= 0:
            raise ValueError(f"batch_size must be positive, got {batch_size}")
        self._line_ids = list(line_ids)
        self._batch_size = batch_size
        self._offset = 0
        self._cur_batch: list[str] = []

    def next(self) -> int:
        """Advance to the next batch; returns its size (0 when exhausted)."""
        self._cur_batch = self._line_ids[self._offset:self._offset + self._batch_size]
        self._offset += len(self._cur_batch)
        return len(self._cur_batch)

    def set_batch(self, line_ids: Sequence[str]) -> None:
        """Make ``line_ids`` the current batch directly."""
        self._cur_batch = list(line_ids)

    def get_cur_batch_size(self) -> int:
        return len(self._cur_batch)

    def get_line_id(self, index: int) -> str:
        return self._cur_batch[index]


__all__ = ["DataFeed", "InMemoryDataFeed"]
