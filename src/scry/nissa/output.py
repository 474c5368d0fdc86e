"""Nissa Output - Dump record sinks.

Sinks receive finished dump records from every worker and append them to
their destination (memory, console, files). Every sink here tolerates
concurrent writers; nothing orders records across workers.

Usage:
    from scry.nissa.output import DumpHub, FileSink, DirectorySink

    hub = DumpHub()
    hub.add_sink(FileSink("dump/part-000"))

    # Append records
    hub.write("a\tlabel:1:1")
"""

from __future__ import annotations

import logging
import queue
import threading
import time
from datetime import datetime
from pathlib import Path

from scry.leyline import DumpSink

_logger = logging.getLogger(__name__)

_PUT_RETRY_SECONDS = 1.0


def _put_blocking(q: queue.Queue[str | None], line: str, owner: str) -> None:
    """Put ``line`` on ``q``, waiting as long as it takes. Records are never dropped."""
    waited = False
    while True:
        try:
            q.put(line, timeout=_PUT_RETRY_SECONDS)
            return
        except queue.Full:
            if not waited:
                _logger.warning("%s queue full, waiting for the consumer", owner)
                waited = True


class SinkBase:
    """Base class for dump sinks with no-op lifecycle hooks."""

    def start(self) -> None:
        """Start the sink (e.g., open files)."""
        pass

    def write(self, line: str) -> None:
        raise NotImplementedError

    def flush(self) -> None:
        pass

    def close(self) -> None:
        """Close the sink and release resources."""
        pass


class MemorySink(SinkBase):
    """Keep records in memory. Mostly useful for tests and inspection."""

    def __init__(self) -> None:
        self._lines: list[str] = []
        self._lock = threading.Lock()

    def write(self, line: str) -> None:
        with self._lock:
            self._lines.append(line)

    @property
    def lines(self) -> list[str]:
        """Snapshot of the records written so far."""
        with self._lock:
            return list(self._lines)

    def clear(self) -> None:
        with self._lock:
            self._lines.clear()


class ConsoleSink(SinkBase):
    """Print records to stdout unchanged, one per line."""

    def __init__(self) -> None:
        self._lock = threading.Lock()

    def write(self, line: str) -> None:
        with self._lock:
            print(line)


class FileSink(SinkBase):
    """Append records to a text file, one per line.

    Args:
        path: Path to output file. Records are appended.
        buffer_size: Number of records to buffer before flushing to disk.
    """

    def __init__(self, path: str | Path, buffer_size: int = 64):
        self.path = Path(path)
        self.buffer_size = buffer_size
        self._buffer: list[str] = []
        self._lock = threading.Lock()

        # Ensure parent directory exists
        self.path.parent.mkdir(parents=True, exist_ok=True)

        self._file = open(self.path, 'a', encoding='utf-8')

    def write(self, line: str) -> None:
        with self._lock:
            if self._file.closed:
                _logger.warning("write() called on closed FileSink %s (record dropped)", self.path)
                return
            self._buffer.append(line)
            if len(self._buffer) >= self.buffer_size:
                self._flush_locked()

    def flush(self) -> None:
        """Flush buffered records to disk."""
        with self._lock:
            if not self._file.closed:
                self._flush_locked()

    def _flush_locked(self) -> None:
        for line in self._buffer:
            self._file.write(line + '\n')
        self._file.flush()
        self._buffer.clear()

    def close(self) -> None:
        with self._lock:
            if not self._file.closed:
                self._flush_locked()
                self._file.close()

    def __del__(self) -> None:
        """Ensure file is closed on deletion."""
        if "_file" in self.__dict__ and not self._file.closed:
            self.close()


class DirectorySink(SinkBase):
    """Write records into a timestamped dump directory.

    Creates a subdirectory with format `dump_YYYY-MM-DD_HHMMSS/` and writes
    records to `part-<thread_id>` inside it, so workers sharing a base path
    each get their own part file.

    Args:
        base_path: Base directory where the timestamped subdirectory will be created.
        thread_id: Worker index used for the part file name.
        buffer_size: Number of records to buffer before flushing to disk.
        output_dir: Reuse an existing dump directory instead of creating one.
    """

    def __init__(
        self,
        base_path: str | Path,
        thread_id: int = 0,
        buffer_size: int = 64,
        output_dir: str | Path | None = None,
    ):
        self.base_path = Path(base_path)
        self.base_path.mkdir(parents=True, exist_ok=True)

        if output_dir is None:
            timestamp = datetime.now().strftime("%Y-%m-%d_%H%M%S")
            self._output_dir = self.base_path / f"dump_{timestamp}"
        else:
            self._output_dir = Path(output_dir)
        self._output_dir.mkdir(parents=True, exist_ok=True)

        self._file_sink = FileSink(self._output_dir / f"part-{thread_id:03d}", buffer_size)

    @property
    def output_dir(self) -> Path:
        """Return the full path to the timestamped output directory."""
        return self._output_dir

    @property
    def part_path(self) -> Path:
        return self._file_sink.path

    def write(self, line: str) -> None:
        self._file_sink.write(line)

    def flush(self) -> None:
        self._file_sink.flush()

    def close(self) -> None:
        self._file_sink.close()


class SinkWorker:
    """Worker thread that drains records into a single sink.

    Isolates slow sinks from fast ones by giving each sink its own queue
    and thread, so a sink doing disk I/O never stalls an in-memory one.

    Thread-safe: enqueue() can be called from the hub thread while
    _worker_loop() runs in the background.
    """

    def __init__(self, sink: DumpSink, max_queue_size: int = 10000, name: str | None = None):
        self._sink = sink
        self._queue: queue.Queue[str | None] = queue.Queue(maxsize=max_queue_size)
        self._name = name or sink.__class__.__name__
        self._thread = threading.Thread(
            target=self._worker_loop,
            name=f"SinkWorker-{self._name}",
            daemon=True,
        )
        self._stopped = False
        self._processed_lines = 0
        self._total_processing_time = 0.0
        self._thread.start()

    @property
    def sink(self) -> DumpSink:
        return self._sink

    @property
    def name(self) -> str:
        return self._name

    def enqueue(self, line: str) -> None:
        """Enqueue a record, waiting for room while the queue is full."""
        if self._stopped:
            return
        _put_blocking(self._queue, line, f"Sink {self._name}")

    def join(self) -> None:
        """Block until every queued record has been handed to the sink."""
        self._queue.join()

    def get_stats(self) -> dict[str, int | float]:
        avg_time = (
            self._total_processing_time / self._processed_lines
            if self._processed_lines > 0
            else 0.0
        )
        return {
            "processed_lines": self._processed_lines,
            "avg_processing_time_ms": avg_time * 1000,
        }

    def stop(self, timeout: float = 5.0) -> None:
        """Drain pending records, then stop the thread.

        _stopped is only set after the sentinel is queued so records enqueued
        while draining are not lost.
        """
        if self._stopped:
            return

        self._queue.join()
        self._queue.put(None)
        self._stopped = True

        self._thread.join(timeout=timeout)
        if self._thread.is_alive():
            _logger.warning("Sink worker %s did not stop within %ss", self._name, timeout)

    def _worker_loop(self) -> None:
        while True:
            try:
                line = self._queue.get(timeout=1.0)
            except queue.Empty:
                continue
            if line is None:  # Shutdown signal
                self._queue.task_done()
                break
            start_time = time.time()
            try:
                self._sink.write(line)
                self._processed_lines += 1
            except Exception as e:
                _logger.error("Error in sink %s: %s", self._name, e)
            finally:
                self._total_processing_time += time.time() - start_time
                self._queue.task_done()


class DumpHub(SinkBase):
    """Asynchronous sink that fans records out to several sinks.

    Records go into a bounded queue, a router thread copies them to a
    per-sink SinkWorker, and each worker appends to its sink. Delivery is
    lossless: when a queue is full, write() waits for room instead of
    dropping, so a slow sink throttles the writers.

    Lifecycle Contract:
        - add_sink(): Starts the sink immediately; raises RuntimeError if the hub is closed
        - write(): Queues the record, blocking while the queue is full; records
          written while no sink is registered are discarded; drops (with one
          warning) if the hub is closed
        - flush(): Blocks until queued records reached every sink, then flushes them
        - close(): Idempotent; drains queues, stops workers and closes every sink
    """

    def __init__(self, max_queue_size: int = 10000, sink_queue_size: int = 10000):
        self._workers: list[SinkWorker] = []
        self._sink_queue_size = sink_queue_size
        self._closed = False
        self._write_after_close_warned = False
        self._queue: queue.Queue[str | None] = queue.Queue(maxsize=max_queue_size)
        self._router: threading.Thread | None = None
        self._lock = threading.Lock()
        # The router drains from the start so a blocked write() always progresses
        self._start_router()

    @property
    def sinks(self) -> list[DumpSink]:
        with self._lock:
            return [worker.sink for worker in self._workers]

    def _start_router(self) -> None:
        if self._router is None or not self._router.is_alive():
            self._router = threading.Thread(
                target=self._router_loop, name="DumpHubRouter", daemon=True
            )
            self._router.start()

    def _router_loop(self) -> None:
        while True:
            try:
                line = self._queue.get(timeout=1.0)
            except queue.Empty:
                continue
            if line is None:  # Shutdown signal
                self._queue.task_done()
                break
            try:
                with self._lock:
                    workers = list(self._workers)
                for worker in workers:
                    worker.enqueue(line)
            except Exception as e:
                _logger.error("Unexpected error in DumpHub router: %s", e)
            finally:
                self._queue.task_done()

    def add_sink(self, sink: DumpSink) -> None:
        """Register a sink and start its worker.

        Raises:
            RuntimeError: If the hub has been closed.
        """
        if self._closed:
            raise RuntimeError("Cannot add sink to closed DumpHub")
        start = getattr(sink, "start", None)
        if start is not None:
            start()
        worker = SinkWorker(sink, max_queue_size=self._sink_queue_size)
        with self._lock:
            self._workers.append(worker)

    def remove_sink(self, sink: DumpSink) -> None:
        """Stop the sink's worker and close the sink."""
        with self._lock:
            match = next((w for w in self._workers if w.sink is sink), None)
            if match is None:
                return
            self._workers.remove(match)
        match.stop()
        try:
            sink.close()
        except Exception as e:
            _logger.error("Error closing sink %s: %s", sink.__class__.__name__, e)

    def write(self, line: str) -> None:
        if self._closed:
            if not self._write_after_close_warned:
                _logger.warning("write() called on closed DumpHub (record dropped)")
                self._write_after_close_warned = True
            return
        _put_blocking(self._queue, line, "DumpHub")

    def flush(self) -> None:
        """Block until queued records were delivered to every sink, then flush them."""
        if self._closed or self._router is None or not self._router.is_alive():
            return
        self._queue.join()
        with self._lock:
            workers = list(self._workers)
        for worker in workers:
            worker.join()
            try:
                worker.sink.flush()
            except Exception as e:
                _logger.error("Error flushing sink %s: %s", worker.name, e)

    def get_stats(self) -> dict[str, dict[str, int | float]]:
        """Per-sink worker statistics keyed by sink class name."""
        with self._lock:
            return {worker.name: worker.get_stats() for worker in self._workers}

    def close(self) -> None:
        """Drain, stop and close everything (idempotent)."""
        if self._closed:
            return
        # Stop accepting records before the sentinel goes in
        self._closed = True

        if self._router is not None and self._router.is_alive():
            self._queue.join()
            self._queue.put(None)
            self._router.join(timeout=5.0)

        with self._lock:
            workers = list(self._workers)
        for worker in workers:
            try:
                worker.stop(timeout=5.0)
            except Exception as e:
                _logger.error("Error stopping sink worker %s: %s", worker.name, e)
            try:
                worker.sink.close()
            except Exception as e:
                _logger.error("Error closing sink %s: %s", worker.name, e)


__all__ = [
    "SinkBase",
    "MemorySink",
    "ConsoleSink",
    "FileSink",
    "DirectorySink",
    "SinkWorker",
    "DumpHub",
]
