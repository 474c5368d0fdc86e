"""Tolaria Layout - Per-sample row intervals and field shape checks.

Fields are rank-2 (rows x columns). Without LoD, sample ``i`` owns row
``i``; with LoD it owns rows ``lod[i]:lod[i+1]``. Bounds are returned in
flat element units so they can be fed straight to the formatter.
"""

from __future__ import annotations

from scry.leyline import LoDTensor


def get_tensor_bound(tensor: LoDTensor, index: int) -> tuple[int, int]:
    """Half-open flat element interval owned by sample ``index``."""
    columns = tensor.dims[1]
    if tensor.has_lod:
        lod = tensor.lod
        return lod[index] * columns, lod[index + 1] * columns
    return index * columns, (index + 1) * columns


def check_valid_output(tensor: LoDTensor, batch_size: int) -> bool:
    """True when ``tensor`` can be sliced into ``batch_size`` samples.

    Requires rank 2, plus either ``batch_size + 1`` LoD offsets or, for
    fixed-size fields, exactly ``batch_size`` rows.
    """
    dims = tensor.dims
    if len(dims) != 2:
        return False
    if tensor.has_lod:
        return len(tensor.lod) == batch_size + 1
    return dims[0] == batch_size


__all__ = ["get_tensor_bound", "check_valid_output"]
