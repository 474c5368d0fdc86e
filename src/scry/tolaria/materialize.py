"""Tolaria Materialize - Host copies of accelerator tensors.

Dumping reads tensors element by element, which only makes sense in host
memory. Accelerator-resident tensors get one synchronous copy to CPU; host
tensors are used as they are.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

from scry.leyline import LoDTensor


def to_host(tensor: LoDTensor) -> LoDTensor:
    """Return ``tensor`` itself when host-resident, else a CPU copy with the same LoD."""
    if tensor.is_host:
        return tensor
    # Blocking copy: the dump reads the values right after this returns
    return LoDTensor(data=tensor.data.to("cpu", non_blocking=False), lod=tensor.lod)


@contextmanager
def materialize(tensor: LoDTensor) -> Iterator[LoDTensor]:
    """Yield a host-resident view of ``tensor``.

    A copy made here belongs to the ``with`` block and is dropped on exit.
    """
    host = to_host(tensor)
    try:
        yield host
    finally:
        if host is not tensor:
            host.data = None


__all__ = ["to_host", "materialize"]
