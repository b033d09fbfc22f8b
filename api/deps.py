from __future__ import annotations

import threading
from functools import lru_cache
from pathlib import Path

from fastapi import Request

from powchain.core.config import Config
from powchain.service import ChainService

_service_lock = threading.Lock()


@lru_cache
def _load_config() -> Config:
    return Config.load(Path.cwd())


def get_config(request: Request) -> Config:
    cfg = getattr(request.app.state, "config", None)
    return cfg or _load_config()


def get_chain_service(request: Request) -> ChainService:
    """The app's single chain. Created on first use if the lifespan did not run."""

    service = getattr(request.app.state, "chain_service", None)
    if service is not None:
        return service
    with _service_lock:
        service = getattr(request.app.state, "chain_service", None)
        if service is None:
            service = ChainService.from_config(get_config(request))
            request.app.state.chain_service = service
    return service
