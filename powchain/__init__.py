"""powchain: an append-only ledger with a proof-of-work admission cost.

Every block commits to the one before it. Change a byte anywhere and the chain says so.

Genesis constants live here so every layer agrees on what block 0 looks like.
"""

from __future__ import annotations

__all__ = [
    "__version__",
    "DEFAULT_DIFFICULTY",
    "GENESIS_DATA",
    "GENESIS_PREVIOUS_HASH",
]

__version__ = "1.0.0"

# Leading "0" characters required in a mined hash.
DEFAULT_DIFFICULTY = 2

# Block 0 points at this sentinel instead of a real digest.
GENESIS_PREVIOUS_HASH = "0"
GENESIS_DATA = "Genesis Block"
