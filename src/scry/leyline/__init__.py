"""Leyline - The invisible substrate of Scry.

Leyline defines the data contracts that flow between all Scry components.
Import from here for the public API.

Example:
    from scry.leyline import LoDTensor, Scope, DumpMode
"""

# Version
LEYLINE_VERSION = "0.1.0"

# =============================================================================
# Dump Format Constants
# =============================================================================

# Separator between record segments (line id, field blocks, line id suffix)
FIELD_SEPARATOR = "\t"

# Prefix in front of every formatted value
VALUE_SEPARATOR = ":"

# Line ids may carry extension metadata after the first occurrence of this
LINE_ID_EXTEND_SEPARATOR = " "

# Under the aibox-compatible header, field names are cut at this character
AIBOX_FIELD_SEPARATOR = "."

# In-band markers written in place of values
ACCESS_VIOLATION_MARKER = "access violation"
UNSUPPORTED_TYPE_MARKER = "unsupported type"

# =============================================================================
# Sampling Constants
# =============================================================================

# Random-mode draws are uniform over [0, INT_MAX]
INT_MAX = 2**31 - 1

# Random-mode generator seed, applied at the start of every dump call
RANDOM_DUMP_SEED = 0

# xxh64 seed for hash-mode sampling; downstream tooling recomputes with the same seed
LINE_ID_HASH_SEED = 0

DEFAULT_DUMP_INTERVAL = 1

from scry.leyline.types import ElementType, DumpMode
from scry.leyline.tensor import LoDTensor
from scry.leyline.scope import Variable, ScopeLike, Scope
from scry.leyline.data_feed import DataFeed, InMemoryDataFeed
from scry.leyline.sink_protocol import DumpSink

__all__ = [
    "LEYLINE_VERSION",
    # Format constants
    "FIELD_SEPARATOR",
    "VALUE_SEPARATOR",
    "LINE_ID_EXTEND_SEPARATOR",
    "AIBOX_FIELD_SEPARATOR",
    "ACCESS_VIOLATION_MARKER",
    "UNSUPPORTED_TYPE_MARKER",
    # Sampling constants
    "INT_MAX",
    "RANDOM_DUMP_SEED",
    "LINE_ID_HASH_SEED",
    "DEFAULT_DUMP_INTERVAL",
    # Types
    "ElementType",
    "DumpMode",
    "LoDTensor",
    "Variable",
    "ScopeLike",
    "Scope",
    "DataFeed",
    "InMemoryDataFeed",
    "DumpSink",
]
