from __future__ import annotations

import time

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel, Field

from api.deps import get_chain_service
from powchain import __version__
from powchain.service import ChainService

router = APIRouter()


class HealthResponse(BaseModel):
    version: str
    uptime_seconds: float
    chain_length: int
    difficulty: int
    counters: dict[str, int] = Field(default_factory=dict)


@router.get("/health", response_model=HealthResponse)
def health(request: Request, service: ChainService = Depends(get_chain_service)) -> HealthResponse:
    started_at = float(getattr(request.app.state, "started_at", time.monotonic()))
    stats = service.stats()
    length = int(stats.pop("length"))
    difficulty = int(stats.pop("difficulty"))

    return HealthResponse(
        version=__version__,
        uptime_seconds=time.monotonic() - started_at,
        chain_length=length,
        difficulty=difficulty,
        counters=stats,
    )
