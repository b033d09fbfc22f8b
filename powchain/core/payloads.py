"""powchain.core.payloads

The payload contract is closed.

A block carries free text, one structured record, or a batch of chat messages. Each
variant owns its canonical serialization; that string is what the block hash commits to.
"""

from __future__ import annotations

import json
from typing import Annotated, Any, Literal

from pydantic import BaseModel, Field, JsonValue, ValidationError

from powchain.core.exceptions import InvalidPayloadError, MissingPayloadError


def canonical_json(data: Any) -> str:
    """Canonical JSON serialization used for hashing."""

    return json.dumps(data, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


class RawText(BaseModel):
    """Free-form text record."""

    kind: Literal["text"] = "text"
    text: str

    model_config = {"frozen": True}

    def canonical(self) -> str:
        return canonical_json(self.text)

    def to_wire(self) -> str:
        return self.text


class MessageRecord(BaseModel):
    sender: str
    message: str

    model_config = {"frozen": True, "extra": "forbid"}


class MessageBatch(BaseModel):
    """Ordered chat transcript saved as one block.

    Order is part of the record; key order inside a message is not.
    """

    kind: Literal["messages"] = "messages"
    messages: tuple[MessageRecord, ...] = Field(min_length=1)

    model_config = {"frozen": True}

    def canonical(self) -> str:
        return canonical_json([m.model_dump() for m in self.messages])

    def to_wire(self) -> list[dict[str, str]]:
        return [{"sender": m.sender, "message": m.message} for m in self.messages]


class StructuredRecord(BaseModel):
    """One JSON object, e.g. a transfer ``{"from", "to", "amount"}``.

    Key order never changes the hash; nested values must be plain JSON.
    """

    kind: Literal["record"] = "record"
    record: dict[str, JsonValue] = Field(min_length=1)

    model_config = {"frozen": True}

    def canonical(self) -> str:
        return canonical_json(self.record)

    def to_wire(self) -> dict[str, Any]:
        return dict(self.record)


Payload = Annotated[RawText | StructuredRecord | MessageBatch, Field(discriminator="kind")]


def parse_payload(raw: Any) -> RawText | StructuredRecord | MessageBatch:
    """Map wire input onto a payload variant.

    Accepts:
    - an existing variant (returned unchanged)
    - a non-blank string
    - a non-empty object with string keys and JSON values
    - a non-empty list of ``{"sender", "message"}`` objects

    Raises:
        MissingPayloadError: for ``None``, blank strings, empty objects and empty lists.
        InvalidPayloadError: for anything outside the variant set.
    """

    if isinstance(raw, (RawText, StructuredRecord, MessageBatch)):
        return raw
    if raw is None:
        raise MissingPayloadError("Block data is required")
    if isinstance(raw, str):
        if not raw.strip():
            raise MissingPayloadError("Block data is required")
        return RawText(text=raw)
    if isinstance(raw, dict):
        if not raw:
            raise MissingPayloadError("Record is empty")
        try:
            return StructuredRecord(record=raw)
        except ValidationError as e:
            raise InvalidPayloadError(f"Malformed record: {e.error_count()} error(s)") from e
    if isinstance(raw, (list, tuple)):
        if not raw:
            raise MissingPayloadError("Message batch is empty")
        try:
            return MessageBatch(messages=tuple(raw))
        except ValidationError as e:
            raise InvalidPayloadError(f"Malformed message batch: {e.error_count()} error(s)") from e
    raise InvalidPayloadError(f"Unsupported payload type: {type(raw).__name__}")
