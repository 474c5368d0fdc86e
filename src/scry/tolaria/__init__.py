"""Tolaria - Per-batch dump pipeline

This package provides:
- device_worker: DeviceWorker, the per-worker field/parameter dump driver
- sampling: Per-sample selection (full, xxhash, seeded random)
- layout: Field shape checks and per-sample element intervals
- materialize: Host copies of accelerator tensors
- formatter: Bounds-checked text rendering of tensor slices
"""

from scry.tolaria.device_worker import DeviceWorker, DumpStats
from scry.tolaria.formatter import format_values
from scry.tolaria.layout import check_valid_output, get_tensor_bound
from scry.tolaria.materialize import materialize, to_host
from scry.tolaria.sampling import line_id_hash, select_samples

__all__ = [
    "DeviceWorker",
    "DumpStats",
    "format_values",
    "check_valid_output",
    "get_tensor_bound",
    "materialize",
    "to_host",
    "line_id_hash",
    "select_samples",
]
