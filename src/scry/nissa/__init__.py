"""Nissa - Dump configuration and output sinks for Scry.

Components:
    - config: DumpConfig and TrainerDesc Pydantic models
    - output: Sinks (memory, console, file, directory) and the DumpHub router

Usage:
    from scry.nissa import DumpConfig, DumpHub, DirectorySink

    config = DumpConfig.from_yaml("dump.yaml")

    hub = DumpHub()
    hub.add_sink(DirectorySink("dumps", thread_id=0))
"""

from scry.nissa.config import (
    DumpConfig,
    TrainerDesc,
    deep_merge,
    dump_mode_from_desc,
)
from scry.nissa.output import (
    SinkBase,
    MemorySink,
    ConsoleSink,
    FileSink,
    DirectorySink,
    SinkWorker,
    DumpHub,
)

__all__ = [
    # Config
    "DumpConfig",
    "TrainerDesc",
    "deep_merge",
    "dump_mode_from_desc",
    # Output
    "SinkBase",
    "MemorySink",
    "ConsoleSink",
    "FileSink",
    "DirectorySink",
    "SinkWorker",
    "DumpHub",
]
