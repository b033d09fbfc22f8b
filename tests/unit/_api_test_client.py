from __future__ import annotations

from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient


def make_client(app: FastAPI, *, token: str | None = None) -> AsyncClient:
    """In-process client. No lifespan: deps create the chain on first request."""

    headers = {"Authorization": f"Bearer {token}"} if token else None
    return AsyncClient(transport=ASGITransport(app=app), base_url="http://test", headers=headers)
