"""powchain.core.chain

The chain is the journal: append-only blocks, each committing to the last.
If the past was edited, ``validate`` finds where.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from enum import StrEnum
from typing import Any

from pydantic import BaseModel

from powchain import DEFAULT_DIFFICULTY, GENESIS_DATA, GENESIS_PREVIOUS_HASH
from powchain.core.block import Block
from powchain.core.exceptions import ChainError, ConfigError, EmptyChainError
from powchain.core.metrics import REGISTRY, MetricsRegistry
from powchain.core.payloads import RawText, parse_payload
from powchain.core.time import now_ms

logger = logging.getLogger(__name__)

# A SHA-256 hex digest has 64 characters; more leading zeros can never be met.
MAX_DIFFICULTY = 64


class FailureReason(StrEnum):
    HASH_MISMATCH = "hash-mismatch"
    BROKEN_LINK = "broken-link"


_FAILURE_MESSAGES = {
    FailureReason.HASH_MISMATCH: "Data tampering detected. The hash of a block is invalid.",
    FailureReason.BROKEN_LINK: (
        "Chain is broken. A block's previousHash does not match the hash of the preceding block."
    ),
}


class ValidationReport(BaseModel):
    """Outcome of :meth:`Chain.validate`. Only the first failure is reported."""

    valid: bool
    reason: FailureReason | None = None
    index: int | None = None
    message: str | None = None
    block: Block | None = None

    model_config = {"frozen": True}

    @classmethod
    def ok(cls) -> ValidationReport:
        return cls(valid=True)

    @classmethod
    def failure(cls, reason: FailureReason, index: int, block: Block) -> ValidationReport:
        return cls(
            valid=False,
            reason=reason,
            index=index,
            message=_FAILURE_MESSAGES[reason],
            block=block,
        )

    def to_wire(self) -> dict[str, Any]:
        if self.valid:
            return {"valid": True}
        return {
            "valid": False,
            "reason": str(self.reason),
            "index": self.index,
            "message": self.message,
            "block": self.block.to_wire() if self.block is not None else None,
        }


def _check_difficulty(difficulty: int) -> int:
    if isinstance(difficulty, bool) or not isinstance(difficulty, int):
        raise ConfigError(f"difficulty must be an integer, got {difficulty!r}")
    if not 0 <= difficulty <= MAX_DIFFICULTY:
        raise ConfigError(f"difficulty must be between 0 and {MAX_DIFFICULTY}, got {difficulty}")
    return difficulty


class Chain:
    """In-memory proof-of-work chain.

    Single writer. No internal locking: whoever shares a chain across threads
    serializes access (see :class:`powchain.service.ChainService`).

    ``blocks`` is a plain list. Harness code may replace entries to
    simulate tampering; the chain itself only ever appends.
    """

    def __init__(
        self,
        difficulty: int = DEFAULT_DIFFICULTY,
        *,
        genesis_data: str = GENESIS_DATA,
        max_nonce: int | None = None,
        clock: Callable[[], int] = now_ms,
        metrics: MetricsRegistry | None = None,
    ) -> None:
        self._setup(difficulty, max_nonce=max_nonce, clock=clock, metrics=metrics)
        self.blocks: list[Block] = [self._create_genesis_block(genesis_data)]
        logger.info("chain_created", extra={"difficulty": self.difficulty, "genesis_hash": self.blocks[0].hash})

    def _setup(
        self,
        difficulty: int,
        *,
        max_nonce: int | None,
        clock: Callable[[], int],
        metrics: MetricsRegistry | None,
    ) -> None:
        self.difficulty = _check_difficulty(difficulty)
        self.max_nonce = max_nonce
        self._clock = clock
        self.metrics = metrics or REGISTRY

    @classmethod
    def _restore(cls, blocks: list[Block], difficulty: int) -> Chain:
        """Wrap existing blocks without creating a genesis block."""

        chain = cls.__new__(cls)
        chain._setup(difficulty, max_nonce=None, clock=now_ms, metrics=None)
        chain.blocks = blocks
        return chain

    def _create_genesis_block(self, genesis_data: str) -> Block:
        # Genesis is accepted as-is: never mined, never checked against difficulty.
        return Block.create(self._clock(), RawText(text=genesis_data), GENESIS_PREVIOUS_HASH)

    def __len__(self) -> int:
        return len(self.blocks)

    def latest(self) -> Block:
        if not self.blocks:
            raise EmptyChainError("Chain has no blocks")
        return self.blocks[-1]

    def append(self, payload: Any) -> Block:
        """Mine a block carrying ``payload`` onto the tail and return it.

        Raises:
            MissingPayloadError: before any block is built, for empty payloads.
            InvalidPayloadError: for payloads outside the supported variants.
            MiningExhaustedError: only when ``max_nonce`` is set.
        """

        p = parse_payload(payload)
        candidate = Block.create(self._clock(), p, self.latest().hash)
        block = candidate.mine(self.difficulty, max_nonce=self.max_nonce)
        self.blocks.append(block)

        self.metrics.counter("blocks_mined").inc()
        self.metrics.counter("hash_attempts").inc(block.nonce - candidate.nonce + 1)
        logger.info(
            "block_mined",
            extra={"index": len(self.blocks) - 1, "nonce": block.nonce, "hash": block.hash},
        )
        return block

    def validate(self) -> ValidationReport:
        """Walk the chain from block 1 and report the first inconsistency.

        Per block, the hash check runs before the link check: an edited payload is a
        hash mismatch even if the link is broken too.
        """

        self.metrics.counter("validations").inc()
        for i in range(1, len(self.blocks)):
            current = self.blocks[i]
            previous = self.blocks[i - 1]

            if current.hash != current.compute_hash():
                report = ValidationReport.failure(FailureReason.HASH_MISMATCH, i, current)
            elif current.previous_hash != previous.hash:
                report = ValidationReport.failure(FailureReason.BROKEN_LINK, i, current)
            else:
                continue

            logger.warning("chain_invalid", extra={"reason": str(report.reason), "index": i})
            return report
        return ValidationReport.ok()

    def to_wire(self) -> dict[str, Any]:
        return {
            "chain": [b.to_wire() for b in self.blocks],
            "difficulty": self.difficulty,
        }

    @classmethod
    def from_wire(cls, obj: Any) -> Chain:
        """Rebuild a chain from an export, for auditing.

        Nothing is recomputed or repaired; run :meth:`validate` on the result.
        """

        if not isinstance(obj, dict):
            raise ChainError(f"Chain export must be an object, got {type(obj).__name__}")
        raw_blocks = obj.get("chain")
        if not isinstance(raw_blocks, list):
            raise ChainError("Chain export has no 'chain' list")
        if not raw_blocks:
            raise EmptyChainError("Chain export has no blocks")

        difficulty = _check_difficulty(obj.get("difficulty", DEFAULT_DIFFICULTY))
        return cls._restore([Block.from_wire(b) for b in raw_blocks], difficulty)
