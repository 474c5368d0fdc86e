#!/usr/bin/env python3
"""Replay CLI - Run captured batches through the dump pipeline.

Batches are read from a ``torch.save`` file holding a list of dicts:

    {
        "line_ids": ["a", "b", ...],
        "vars": {
            "label": tensor,                         # fixed-size field
            "click": {"data": tensor, "lod": [...]}, # variable-length field
        },
    }

Usage:
    python -m scry.scripts.replay --config dump.yaml --batches batches.pt --dump-dir dumps
    python -m scry.scripts.replay --config dump.yaml --batches batches.pt --console
"""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Any

import torch

from scry.leyline import InMemoryDataFeed, LoDTensor, Scope
from scry.nissa import ConsoleSink, DirectorySink, DumpConfig, DumpHub, FileSink
from scry.tolaria import DeviceWorker

_logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Replay captured batches through the dump pipeline")
    parser.add_argument("--config", type=str, required=True, help="DumpConfig YAML file")
    parser.add_argument("--batches", type=str, required=True, help="torch.save'd list of batches")
    parser.add_argument(
        "--mode",
        type=str,
        choices=["off", "full", "hash", "random"],
        default=None,
        help="Override the configured dump mode",
    )
    parser.add_argument("--interval", type=int, default=None, help="Override the dump interval")
    parser.add_argument("--dump-file", type=str, default=None, help="Append records to this file")
    parser.add_argument(
        "--dump-dir",
        type=str,
        default=None,
        help="Write records to a timestamped folder in this directory",
    )
    parser.add_argument("--console", action="store_true", help="Print records to stdout")
    parser.add_argument(
        "--log-level",
        type=str,
        choices=["debug", "info", "warning", "error"],
        default="warning",
    )
    return parser


def load_batch(scope: Scope, batch: dict[str, Any]) -> list[str]:
    """Write a captured batch's variables into ``scope``; return its line ids."""
    for name, value in batch.get("vars", {}).items():
        tensor: LoDTensor = scope.var(name).get_tensor()
        if isinstance(value, dict):
            tensor.set(value["data"], value.get("lod"))
        else:
            tensor.set(value)
    return [str(x) for x in batch["line_ids"]]


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(level=args.log_level.upper(), format="%(levelname)s %(name)s: %(message)s")

    overrides: dict[str, Any] = {}
    if args.mode is not None:
        overrides["dump_mode"] = args.mode
    if args.interval is not None:
        overrides["dump_interval"] = args.interval
    config = DumpConfig.from_yaml(args.config, overrides or None)
    _logger.info("%s", config.summary())

    hub = DumpHub()
    if args.console:
        hub.add_sink(ConsoleSink())
    if args.dump_file:
        hub.add_sink(FileSink(args.dump_file))
    if args.dump_dir:
        dir_sink = DirectorySink(args.dump_dir)
        hub.add_sink(dir_sink)
        print(f"Dump records will be saved to: {dir_sink.output_dir}")
    if not hub.sinks:
        parser.error("no output selected; use --console, --dump-file or --dump-dir")

    batches = torch.load(Path(args.batches), weights_only=False)

    worker = DeviceWorker(config, sink=hub)
    feed = InMemoryDataFeed([], batch_size=1)
    worker.set_data_feed(feed)

    written = 0
    try:
        for batch_id, batch in enumerate(batches):
            scope = Scope()
            feed.set_batch(load_batch(scope, batch))
            written += worker.dump_batch(batch_id, scope)
    finally:
        hub.close()

    print(f"Replayed {len(batches)} batches, wrote {written} records")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
