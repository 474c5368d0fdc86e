"""Tolaria Sampling - Per-sample selection for field dumps.

A sample is selected when ``r % interval == 0`` where ``r`` depends on the
mode:

    FULL    r = 0                           (every sample)
    HASH    r = xxh64(line_id, seed=0)      (same answer in every process)
    RANDOM  r = uniform draw in [0, INT_MAX]

RANDOM builds a fresh generator seeded with RANDOM_DUMP_SEED on every call,
so two batches of the same size get the same selection pattern. Downstream
consumers may rely on that repeatability.
"""

from __future__ import annotations

import random
from collections.abc import Callable

import xxhash

from scry.leyline import INT_MAX, LINE_ID_HASH_SEED, RANDOM_DUMP_SEED, DumpMode


def line_id_hash(line_id: str) -> int:
    """64-bit xxHash of the UTF-8 line id."""
    return xxhash.xxh64_intdigest(line_id.encode("utf-8"), seed=LINE_ID_HASH_SEED)


def select_samples(
    batch_size: int,
    mode: DumpMode,
    interval: int,
    line_id_of: Callable[[int], str],
) -> list[bool]:
    """Decide, once per batch, which samples get field records.

    Args:
        batch_size: Number of samples in the batch.
        mode: Selection policy.
        interval: Keep one sample in ``interval``; must be positive.
        line_id_of: Accessor for the line id of sample ``i`` (HASH mode only).

    Raises:
        ValueError: If ``interval`` is not positive.
    """
    if interval <= 0:
        raise ValueError(f"dump interval must be positive, got {interval}")

    if mode == DumpMode.OFF:
        return [False] * batch_size
    if mode == DumpMode.FULL:
        return [True] * batch_size
    if mode == DumpMode.HASH:
        return [line_id_hash(line_id_of(i)) % interval == 0 for i in range(batch_size)]
    if mode == DumpMode.RANDOM:
        rng = random.Random(RANDOM_DUMP_SEED)
        return [rng.randint(0, INT_MAX) % interval == 0 for _ in range(batch_size)]
    raise ValueError(f"Unknown dump mode: {mode!r}")


__all__ = ["line_id_hash", "select_samples"]
