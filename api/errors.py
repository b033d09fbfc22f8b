from __future__ import annotations

from fastapi import Request
from fastapi.responses import JSONResponse

from powchain.core.exceptions import (
    ChainError,
    EmptyChainError,
    InvalidIndexError,
    InvalidPayloadError,
    MiningExhaustedError,
    MissingPayloadError,
    PowchainError,
)


class ApiError(Exception):
    def __init__(self, code: str, message: str, status: int = 400, **extra: object) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.status = status
        self.extra = extra


# Most specific first; the first isinstance match wins.
_CORE_ERRORS: list[tuple[type[PowchainError], str, int]] = [
    (MissingPayloadError, "chain.missing_payload", 400),
    (InvalidPayloadError, "chain.invalid_payload", 400),
    (InvalidIndexError, "chain.invalid_index", 400),
    (MiningExhaustedError, "chain.mining_exhausted", 503),
    (EmptyChainError, "chain.empty", 500),
    (ChainError, "chain.error", 400),
]


def _error_body(code: str, message: str, **extra: object) -> dict:
    return {"error": {"code": code, "message": message, **extra}}


async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    return JSONResponse(status_code=exc.status, content=_error_body(exc.code, exc.message, **exc.extra))


async def powchain_error_handler(request: Request, exc: PowchainError) -> JSONResponse:
    code, status = "powchain.error", 400
    for cls, c, s in _CORE_ERRORS:
        if isinstance(exc, cls):
            code, status = c, s
            break
    return JSONResponse(status_code=status, content=_error_body(code, str(exc)))
