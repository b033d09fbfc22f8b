from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field


class DataRequest(BaseModel):
    data: Any = Field(None, description="Text, a JSON object, or a list of {sender, message} objects")


class MessageOut(BaseModel):
    sender: str
    message: str


class BlockOut(BaseModel):
    timestamp: int = Field(..., description="Epoch milliseconds, UTC")
    data: str | list[MessageOut] | dict[str, Any]
    previousHash: str
    hash: str
    nonce: int


class ChainOut(BaseModel):
    chain: list[BlockOut]
    difficulty: int


class MineResponse(BaseModel):
    message: str
    newBlock: BlockOut


class TamperResponse(BaseModel):
    message: str
    block: BlockOut


class ValidationOut(BaseModel):
    valid: bool
    reason: Literal["hash-mismatch", "broken-link"] | None = None
    index: int | None = None
    message: str | None = None
    block: BlockOut | None = None
