"""powchain.core.block

Blocks are values. Mining does not mutate a block; it finds a nonce and returns a new one.

Hash = sha256(previous_hash | timestamp | canonical_payload | nonce)
"""

from __future__ import annotations

import hashlib
from typing import Any

from pydantic import BaseModel, Field, ValidationError

from powchain.core.exceptions import ChainError, MiningExhaustedError
from powchain.core.payloads import MessageBatch, Payload, RawText, StructuredRecord, parse_payload

ZERO = "0"


def _digest(previous_hash: str, timestamp: int, canonical_payload: str, nonce: int) -> str:
    data = "|".join([previous_hash, str(timestamp), canonical_payload, str(nonce)])
    return hashlib.sha256(data.encode("utf-8")).hexdigest()


def compute_block_hash(
    *,
    previous_hash: str,
    timestamp: int,
    payload: RawText | StructuredRecord | MessageBatch,
    nonce: int,
) -> str:
    """Compute the canonical SHA-256 block hash.

    Pure: identical fields always produce the identical digest.
    """

    return _digest(previous_hash, timestamp, payload.canonical(), nonce)


def meets_difficulty(block_hash: str, difficulty: int) -> bool:
    return block_hash.startswith(ZERO * difficulty)


def find_nonce(
    *,
    previous_hash: str,
    timestamp: int,
    payload: RawText | StructuredRecord | MessageBatch,
    difficulty: int,
    start: int = 0,
    max_nonce: int | None = None,
) -> tuple[int, str]:
    """Search for the first nonce >= ``start`` whose hash meets ``difficulty``.

    Args:
        difficulty: Required leading zero characters. 0 accepts the first hash.
        start: First nonce to try. Lets callers split the search into ranges.
        max_nonce: Attempt ceiling. ``None`` searches until a nonce is found.

    Returns:
        Tuple of (nonce, hash).

    Raises:
        ValueError: if difficulty or start is negative.
        MiningExhaustedError: if ``max_nonce`` attempts fail.
    """

    if difficulty < 0:
        raise ValueError(f"difficulty must be >= 0, got {difficulty}")
    if start < 0:
        raise ValueError(f"start must be >= 0, got {start}")

    # The payload is fixed for the whole search; serialize it once.
    canonical_payload = payload.canonical()
    target = ZERO * difficulty
    nonce = start
    attempts = 0
    while True:
        block_hash = _digest(previous_hash, timestamp, canonical_payload, nonce)
        if block_hash.startswith(target):
            return nonce, block_hash
        attempts += 1
        if max_nonce is not None and attempts >= max_nonce:
            raise MiningExhaustedError(
                f"No nonce meets difficulty {difficulty} after {attempts} attempts"
            )
        nonce += 1


class Block(BaseModel):
    """Immutable block record.

    ``hash`` is stored, not derived. A block whose fields were swapped out from under
    its hash still constructs fine; validation is what notices.
    """

    timestamp: int = Field(ge=0)
    payload: Payload
    previous_hash: str
    nonce: int = Field(default=0, ge=0)
    hash: str

    model_config = {"frozen": True}

    @classmethod
    def create(cls, timestamp: int, payload: Any, previous_hash: str) -> Block:
        """Build an unmined block (nonce 0) with its hash already computed."""

        p = parse_payload(payload)
        return cls(
            timestamp=timestamp,
            payload=p,
            previous_hash=previous_hash,
            nonce=0,
            hash=compute_block_hash(previous_hash=previous_hash, timestamp=timestamp, payload=p, nonce=0),
        )

    def compute_hash(self) -> str:
        return compute_block_hash(
            previous_hash=self.previous_hash,
            timestamp=self.timestamp,
            payload=self.payload,
            nonce=self.nonce,
        )

    def mine(self, difficulty: int, *, max_nonce: int | None = None) -> Block:
        """Return a copy of this block carrying a nonce that satisfies ``difficulty``."""

        nonce, block_hash = find_nonce(
            previous_hash=self.previous_hash,
            timestamp=self.timestamp,
            payload=self.payload,
            difficulty=difficulty,
            start=self.nonce,
            max_nonce=max_nonce,
        )
        return self.model_copy(update={"nonce": nonce, "hash": block_hash})

    def to_wire(self) -> dict[str, Any]:
        """JSON-serializable form used by the API, the CLI and exports."""

        return {
            "timestamp": self.timestamp,
            "data": self.payload.to_wire(),
            "previousHash": self.previous_hash,
            "hash": self.hash,
            "nonce": self.nonce,
        }

    @classmethod
    def from_wire(cls, obj: Any) -> Block:
        """Rebuild a block from its wire form.

        The stored hash is kept verbatim, so a tampered export stays tampered.
        """

        if not isinstance(obj, dict):
            raise ChainError(f"Block must be an object, got {type(obj).__name__}")
        missing = [k for k in ("timestamp", "data", "previousHash", "hash", "nonce") if k not in obj]
        if missing:
            raise ChainError(f"Block is missing fields: {', '.join(missing)}")

        payload = parse_payload(obj["data"])
        try:
            return cls(
                timestamp=obj["timestamp"],
                payload=payload,
                previous_hash=obj["previousHash"],
                nonce=obj["nonce"],
                hash=obj["hash"],
            )
        except ValidationError as e:
            raise ChainError(f"Malformed block: {e.error_count()} error(s)") from e
