"""Dump Configuration.

Pydantic models describing what a worker dumps and how samples are picked.
Feature flags such as the line id split and the aibox header format are
plain fields so a worker can be built and tested without global state.

Usage:
    # Load from YAML
    config = DumpConfig.from_yaml("dump.yaml")

    # Load with overrides
    config = DumpConfig.from_yaml("dump.yaml", {"dump_interval": 100})

    # Derive from a trainer descriptor
    config = DumpConfig.from_trainer_desc(desc, lineid_have_extend_info=True)
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml  # type: ignore[import-untyped]
from pydantic import BaseModel, Field, field_validator

from scry.leyline import DEFAULT_DUMP_INTERVAL, DumpMode


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Deep merge override into base dict."""
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _check_names(kind: str, names: list[str]) -> list[str]:
    seen: set[str] = set()
    for name in names:
        if not name:
            raise ValueError(f"{kind} names must be non-empty")
        if name in seen:
            raise ValueError(f"Duplicate {kind} name: {name!r}")
        seen.add(name)
    return names


class TrainerDesc(BaseModel):
    """Dump-related subset of the trainer descriptor.

    Attributes:
        enable_random_dump: Sample records instead of dumping every one.
        random_with_lineid: When sampling, hash the line id instead of drawing.
        dump_interval: Keep one sample in ``dump_interval``.
        dump_fields: Variables dumped per sample.
        dump_param: Variables dumped whole, once per batch.
    """

    enable_random_dump: bool = False
    random_with_lineid: bool = False
    dump_interval: int = Field(default=DEFAULT_DUMP_INTERVAL, gt=0)
    dump_fields: list[str] = Field(default_factory=list)
    dump_param: list[str] = Field(default_factory=list)


def dump_mode_from_desc(desc: TrainerDesc) -> DumpMode:
    """Random dump disabled -> FULL; random with line id -> HASH; otherwise RANDOM."""
    if not desc.enable_random_dump:
        return DumpMode.FULL
    if desc.random_with_lineid:
        return DumpMode.HASH
    return DumpMode.RANDOM


class DumpConfig(BaseModel):
    """Worker dump configuration - validated at load time.

    Attributes:
        dump_mode: Sample selection policy for field dumps.
        dump_interval: Sampling interval, strictly positive.
        dump_fields: Ordered field names dumped per selected sample.
        dump_param: Ordered parameter names dumped whole per batch.
        lineid_have_extend_info: Line ids carry metadata after the first space;
            the prefix starts the record and the suffix ends it.
        dump_filed_same_as_aibox: Use the dotted-prefix of the field name as its
            header, without the per-sample element count.
    """

    dump_mode: DumpMode = DumpMode.FULL
    dump_interval: int = Field(default=DEFAULT_DUMP_INTERVAL, gt=0)
    dump_fields: list[str] = Field(default_factory=list)
    dump_param: list[str] = Field(default_factory=list)

    lineid_have_extend_info: bool = False
    dump_filed_same_as_aibox: bool = False

    @field_validator("dump_mode", mode="before")
    @classmethod
    def parse_dump_mode(cls, v: Any) -> DumpMode:
        return DumpMode.parse(v)

    @field_validator("dump_fields")
    @classmethod
    def validate_fields(cls, v: list[str]) -> list[str]:
        return _check_names("field", v)

    @field_validator("dump_param")
    @classmethod
    def validate_params(cls, v: list[str]) -> list[str]:
        return _check_names("param", v)

    @classmethod
    def from_yaml(cls, path: Path | str, overrides: dict[str, Any] | None = None) -> DumpConfig:
        """Load configuration from a YAML file.

        Args:
            path: Path to YAML configuration file.
            overrides: Optional dict of values to override.

        Returns:
            Validated DumpConfig instance.

        Raises:
            ValueError: If the YAML file is empty, malformed, or not a mapping.
        """
        path = Path(path)
        with open(path) as f:
            data = yaml.safe_load(f)

        if not isinstance(data, dict):
            raise ValueError(
                f"Dump config YAML must be a mapping, got {type(data).__name__}: {path}"
            )

        if overrides:
            data = deep_merge(data, overrides)

        return cls(**data)

    @classmethod
    def from_trainer_desc(cls, desc: TrainerDesc, **flags: bool) -> DumpConfig:
        """Build a config from a trainer descriptor plus feature flags.

        See dump_mode_from_desc() for the mode mapping.
        """
        return cls(
            dump_mode=dump_mode_from_desc(desc),
            dump_interval=desc.dump_interval,
            dump_fields=list(desc.dump_fields),
            dump_param=list(desc.dump_param),
            **flags,
        )

    def to_yaml(self, path: Path | str) -> None:
        """Save configuration to YAML file."""
        path = Path(path)
        data = self.model_dump()
        data["dump_mode"] = self.dump_mode.name.lower()
        with open(path, 'w') as f:
            yaml.dump(data, f, default_flow_style=False, sort_keys=False)

    def summary(self) -> str:
        """Human-readable summary of the configuration."""
        lines = [
            f"DumpConfig (mode: {self.dump_mode.name.lower()}, interval: {self.dump_interval})",
            f"  Fields: {', '.join(self.dump_fields) if self.dump_fields else 'none'}",
            f"  Params: {', '.join(self.dump_param) if self.dump_param else 'none'}",
        ]
        if self.lineid_have_extend_info:
            lines.append("  Line ids carry extension info")
        if self.dump_filed_same_as_aibox:
            lines.append("  Field headers: aibox-compatible")
        return "\n".join(lines)


__all__ = [
    "DumpConfig",
    "TrainerDesc",
    "deep_merge",
    "dump_mode_from_desc",
]
