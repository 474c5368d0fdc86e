"""Tolaria Device Worker - Per-batch field and parameter dumps.

A DeviceWorker is owned by one training thread. After each batch the
training loop calls dump_batch() (or dump_field()/dump_param() directly),
and the worker turns the configured scope variables into text records:

    field record:  <line_id>\t<field>:<n>:v1...:vn\t<field2>:<m>:...[\t<suffix>]
    param record:  (<batch_id>,<param>):v1:...:vN

Missing, uninitialized, or mis-shaped variables are logged and skipped;
a dump call never fails the batch because of the data it was asked to dump.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from scry.leyline import (
    AIBOX_FIELD_SEPARATOR,
    FIELD_SEPARATOR,
    LINE_ID_EXTEND_SEPARATOR,
    DataFeed,
    DumpMode,
    DumpSink,
    LoDTensor,
    ScopeLike,
)
from scry.nissa.config import DumpConfig, TrainerDesc, dump_mode_from_desc
from scry.tolaria.formatter import format_values
from scry.tolaria.layout import check_valid_output, get_tensor_bound
from scry.tolaria.materialize import materialize
from scry.tolaria.sampling import select_samples

_logger = logging.getLogger(__name__)


@dataclass
class DumpStats:
    """Running counters for one worker."""
    batches: int = 0
    field_lines: int = 0
    param_lines: int = 0
    fields_skipped: int = 0
    params_skipped: int = 0


def _split_line_id(line_id: str) -> tuple[str, str | None]:
    """Split at the first separator into (prefix, suffix); suffix is None without one."""
    prefix, sep, suffix = line_id.partition(LINE_ID_EXTEND_SEPARATOR)
    if not sep:
        return line_id, None
    return prefix, suffix


class DeviceWorker:
    """Dumps scope variables for the batches processed by one worker.

    Args:
        config: What to dump and how to sample it.
        sink: Destination for finished records; may be shared with other workers.
        thread_id: Index of the owning worker. Only worker 0 dumps parameters
            from dump_batch(), since parameters are shared across workers.
    """

    def __init__(
        self,
        config: DumpConfig | None = None,
        sink: DumpSink | None = None,
        thread_id: int = 0,
    ):
        self.config = config if config is not None else DumpConfig()
        self.sink = sink
        self.thread_id = thread_id
        self.root_scope: ScopeLike | None = None
        self.data_feed: DataFeed | None = None
        self.stats = DumpStats()

    def set_root_scope(self, scope: ScopeLike) -> None:
        self.root_scope = scope

    def set_data_feed(self, data_feed: DataFeed) -> None:
        self.data_feed = data_feed

    def set_sink(self, sink: DumpSink) -> None:
        self.sink = sink

    def init_random_dump_config(self, desc: TrainerDesc) -> None:
        """Take dump mode and interval from a trainer descriptor."""
        self.config = self.config.model_copy(
            update={
                "dump_mode": dump_mode_from_desc(desc),
                "dump_interval": desc.dump_interval,
            }
        )

    @property
    def need_dump_field(self) -> bool:
        return self.config.dump_mode != DumpMode.OFF and bool(self.config.dump_fields)

    @property
    def need_dump_param(self) -> bool:
        return bool(self.config.dump_param)

    def _require_sink(self) -> DumpSink:
        if self.sink is None:
            raise RuntimeError("DeviceWorker has no sink; call set_sink() first")
        return self.sink

    def dump_batch(self, batch_id: int, scope: ScopeLike | None = None) -> int:
        """Per-batch hook for the training loop.

        Dumps fields when any are configured, and parameters on worker 0.

        Returns:
            Number of records written.
        """
        scope = scope if scope is not None else self.root_scope
        if scope is None:
            raise RuntimeError("DeviceWorker has no scope; pass one or call set_root_scope()")

        written = 0
        if self.need_dump_field:
            written += self.dump_field(scope)
        if self.need_dump_param and self.thread_id == 0:
            written += self.dump_param(scope, batch_id)
        self.stats.batches += 1
        return written

    def dump_field(
        self,
        scope: ScopeLike,
        dump_mode: DumpMode | None = None,
        dump_interval: int | None = None,
    ) -> int:
        """Write one record per selected sample of the current batch.

        Args:
            scope: Where field variables are looked up.
            dump_mode: Overrides the configured mode for this call.
            dump_interval: Overrides the configured interval for this call.

        Returns:
            Number of records written.

        Raises:
            RuntimeError: If no data feed or sink is attached.
            ValueError: If the interval is not positive.
        """
        if self.data_feed is None:
            raise RuntimeError("DeviceWorker has no data feed; call set_data_feed() first")
        sink = self._require_sink()

        mode = self.config.dump_mode if dump_mode is None else DumpMode.parse(dump_mode)
        interval = self.config.dump_interval if dump_interval is None else dump_interval
        extend_info = self.config.lineid_have_extend_info
        aibox_header = self.config.dump_filed_same_as_aibox

        feed = self.data_feed
        batch_size = feed.get_cur_batch_size()
        hit = select_samples(batch_size, mode, interval, feed.get_line_id)

        records: list[list[str]] = [[] for _ in range(batch_size)]
        for i in range(batch_size):
            if not hit[i]:
                continue
            line_id = feed.get_line_id(i)
            records[i].append(_split_line_id(line_id)[0] if extend_info else line_id)

        has_field = [False] * batch_size
        for field in self.config.dump_fields:
            tensor = self._lookup(scope, field, "field")
            if tensor is None:
                self.stats.fields_skipped += 1
                continue
            with materialize(tensor) as host:
                if not check_valid_output(host, batch_size):
                    _logger.warning(
                        "field[%s] cannot pass check (dims=%s, lod=%s, batch_size=%d), skipped",
                        field, list(host.dims), host.lod, batch_size,
                    )
                    self.stats.fields_skipped += 1
                    continue
                aibox_name = field.split(AIBOX_FIELD_SEPARATOR, 1)[0]
                for i in range(batch_size):
                    if not hit[i]:
                        continue
                    start, end = get_tensor_bound(host, i)
                    header = aibox_name if aibox_header else f"{field}:{end - start}"
                    records[i].append(FIELD_SEPARATOR + header)
                    records[i].append(format_values(host, start, end))
                    has_field[i] = True

        written = 0
        for i in range(batch_size):
            # A selected sample with no field contribution produces no line
            if not has_field[i]:
                continue
            if extend_info:
                suffix = _split_line_id(feed.get_line_id(i))[1]
                if suffix is not None:
                    records[i].append(FIELD_SEPARATOR + suffix)
            sink.write("".join(records[i]))
            written += 1

        self.stats.field_lines += written
        _logger.debug(
            "dump_field: batch_size=%d selected=%d written=%d", batch_size, sum(hit), written
        )
        return written

    def dump_param(self, scope: ScopeLike, batch_id: int) -> int:
        """Write one record per configured parameter found in ``scope``.

        Parameters are dumped whole; no sampling or per-sample slicing.

        Returns:
            Number of records written.
        """
        sink = self._require_sink()
        written = 0
        for param in self.config.dump_param:
            tensor = self._lookup(scope, param, "param")
            if tensor is None:
                self.stats.params_skipped += 1
                continue
            with materialize(tensor) as host:
                line = f"({batch_id},{param})" + format_values(host, 0, host.numel)
            sink.write(line)
            written += 1
        self.stats.param_lines += written
        return written

    def _lookup(self, scope: ScopeLike, name: str, kind: str) -> LoDTensor | None:
        """Resolve ``name`` to an initialized tensor, logging why when it cannot."""
        var = scope.find_var(name)
        if var is None:
            _logger.warning("%s[%s] cannot be found in scope, skipped", kind, name)
            return None
        tensor = var.get_tensor()
        if not tensor.is_initialized:
            _logger.warning("%s[%s] is not initialized, skipped", kind, name)
            return None
        return tensor


__all__ = ["DeviceWorker", "DumpStats"]
