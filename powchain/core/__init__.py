"""powchain.core

Core primitives: payloads, blocks, the chain, and the ambient config/logging/errors.

If a module needs to exist, it should probably depend only on this package.
"""

from .block import Block, compute_block_hash, find_nonce, meets_difficulty
from .chain import Chain, FailureReason, ValidationReport
from .config import Config
from .exceptions import PowchainError
from .payloads import MessageBatch, MessageRecord, RawText, StructuredRecord, canonical_json, parse_payload
from .time import now_ms, utc_now

__all__ = [
    "Block",
    "Chain",
    "Config",
    "FailureReason",
    "MessageBatch",
    "MessageRecord",
    "PowchainError",
    "RawText",
    "StructuredRecord",
    "ValidationReport",
    "canonical_json",
    "compute_block_hash",
    "find_nonce",
    "meets_difficulty",
    "now_ms",
    "parse_payload",
    "utc_now",
]
