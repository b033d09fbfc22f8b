"""powchain.service

One chain, one owner.

The chain itself never locks. Anything that shares it between request handlers goes
through this handle, which serializes every operation behind a single lock.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Any

from powchain.core.block import Block
from powchain.core.chain import Chain, ValidationReport
from powchain.core.config import Config
from powchain.core.metrics import MetricsRegistry
from powchain.tamper import parse_index, tamper_block


@dataclass
class ChainService:
    chain: Chain

    def __post_init__(self) -> None:
        self._lock = threading.RLock()

    @classmethod
    def from_config(cls, config: Config) -> ChainService:
        metrics = MetricsRegistry()
        chain = Chain(
            config.chain.difficulty,
            genesis_data=config.chain.genesis_data,
            max_nonce=config.chain.max_nonce,
            metrics=metrics,
        )
        return cls(chain=chain)

    def mine(self, data: Any) -> Block:
        with self._lock:
            return self.chain.append(data)

    def latest(self) -> Block:
        with self._lock:
            return self.chain.latest()

    def validate(self) -> ValidationReport:
        with self._lock:
            return self.chain.validate()

    def tamper(self, index: int | str, data: Any) -> tuple[int, Block]:
        """Tamper with one block. Returns the parsed index and the tampered block."""

        with self._lock:
            i = parse_index(index, len(self.chain))
            return i, tamper_block(self.chain, i, data)

    def snapshot(self) -> dict[str, Any]:
        with self._lock:
            return self.chain.to_wire()

    def stats(self) -> dict[str, Any]:
        with self._lock:
            return {
                "length": len(self.chain),
                "difficulty": self.chain.difficulty,
                **self.chain.metrics.snapshot(),
            }
