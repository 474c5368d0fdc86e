"""Leyline Sink Protocol - Contract for dump output destinations.

DumpSink defines the interface dump sinks must implement. This decouples
the dump pipeline (tolaria) from sink implementations (nissa).

Used by:
- tolaria: DeviceWorker appends finished records through this protocol
- nissa: Implements sinks (memory, file, directory, async hub)
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class DumpSink(Protocol):
    """Protocol for append-only line sinks.

    Implementations must tolerate concurrent ``write`` calls from several
    workers. Lines are passed without a trailing newline.

    Methods:
        write: Append one finished record (required)
        flush: Push buffered lines to the destination
        close: Release resources
    """

    def write(self, line: str) -> None:
        """Append a single record line."""
        ...

    def flush(self) -> None:
        ...

    def close(self) -> None:
        ...


__all__ = ["DumpSink"]
