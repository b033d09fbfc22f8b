"""powchain.core.exceptions

Errors are part of the interface.

Callers misuse the chain in a handful of ways. Each one has a name.
"""

from __future__ import annotations


class PowchainError(Exception):
    """Base exception for powchain."""


class ConfigError(PowchainError):
    """Configuration is missing, invalid, or inconsistent."""


class PayloadError(PowchainError):
    """Payload cannot be admitted to a block."""


class MissingPayloadError(PayloadError):
    """Payload is absent or empty."""


class InvalidPayloadError(PayloadError):
    """Payload is not one of the supported variants."""


class ChainError(PowchainError):
    """Chain structure or export is unusable."""


class InvalidIndexError(ChainError):
    """Block index is not numeric or falls outside the chain."""


class EmptyChainError(ChainError):
    """A chain without a genesis block. Should never happen."""


class MiningExhaustedError(ChainError):
    """No qualifying nonce found within the configured ceiling."""
