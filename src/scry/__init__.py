"""Scry - Selective per-batch tensor dumps for training workers.

Scry samples rows of named tensors after each minibatch and writes them
as tab-separated text records for offline inspection.

Subpackages:
- leyline: Data contracts (LoDTensor, Scope, DataFeed, DumpSink, constants)
- nissa: Dump configuration and output sinks
- tolaria: The dump pipeline and DeviceWorker
"""

__version__ = "0.1.0"

# Re-export key types for convenience
from scry.leyline import DumpMode, LoDTensor, Scope
from scry.nissa import DumpConfig
from scry.tolaria import DeviceWorker

__all__ = [
    "DumpMode",
    "LoDTensor",
    "Scope",
    "DumpConfig",
    "DeviceWorker",
]
