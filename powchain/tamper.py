"""powchain.tamper

Test and demo harness. Not part of the chain's contract.

Overwrites a block's payload in place and leaves its hash stale, which is exactly what
an attacker editing history would do. ``Chain.validate`` must catch it.
"""

from __future__ import annotations

import logging
from typing import Any

from powchain.core.block import Block
from powchain.core.chain import Chain
from powchain.core.exceptions import InvalidIndexError
from powchain.core.payloads import parse_payload

logger = logging.getLogger(__name__)


def parse_index(value: int | str, length: int) -> int:
    """Coerce ``value`` into a valid block index for a chain of ``length`` blocks.

    Raises:
        InvalidIndexError: for non-numeric, negative, or out-of-range values.
    """

    if isinstance(value, bool):
        raise InvalidIndexError(f"Invalid block index: {value!r}")
    if isinstance(value, str):
        v = value.strip()
        # ASCII decimal digits only; isdigit() also admits "²", which int() rejects.
        if not (v.isascii() and v.isdecimal()):
            raise InvalidIndexError(f"Invalid block index: {value!r}")
        value = int(v)
    if not isinstance(value, int) or not 0 <= value < length:
        raise InvalidIndexError(f"Invalid block index: {value!r} (chain length {length})")
    return value


def tamper_block(chain: Chain, index: int | str, data: Any) -> Block:
    """Replace ``chain.blocks[index]`` with a copy carrying ``data`` and the old hash.

    Index and data are both checked before anything is touched.
    """

    i = parse_index(index, len(chain.blocks))
    payload = parse_payload(data)

    original = chain.blocks[i]
    tampered = original.model_copy(update={"payload": payload})
    chain.blocks[i] = tampered

    logger.warning("block_tampered", extra={"index": i, "hash": original.hash})
    return tampered
