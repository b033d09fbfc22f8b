"""powchain.client

Async HTTP client for the powchain API.

Only connection failures are retried: the request never reached the server, so
retrying cannot mine the same block twice.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any

import httpx

from powchain.core.exceptions import PowchainError


@dataclass(frozen=True, slots=True)
class ClientConfig:
    max_retries: int = 2
    # Mining blocks the request until a nonce is found.
    timeout_s: float = 60.0


class ApiClientError(PowchainError):
    """The API answered with an error body."""

    def __init__(self, status: int, code: str, message: str) -> None:
        super().__init__(f"{status} {code}: {message}")
        self.status = status
        self.code = code
        self.message = message


def _error_from_response(resp: httpx.Response) -> ApiClientError:
    try:
        body = resp.json()
    except ValueError:
        body = None
    err = body.get("error") if isinstance(body, dict) else None
    if isinstance(err, dict):
        return ApiClientError(resp.status_code, str(err.get("code", "unknown")), str(err.get("message", "")))
    return ApiClientError(resp.status_code, "http.error", resp.text[:200])


class ChainClient:
    def __init__(
        self,
        base_url: str,
        *,
        config: ClientConfig | None = None,
        auth_token: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.config = config or ClientConfig()
        headers = {"Authorization": f"Bearer {auth_token}"} if auth_token else {}
        self._client = httpx.AsyncClient(
            base_url=base_url,
            timeout=self.config.timeout_s,
            headers=headers,
            transport=transport,
        )

    async def __aenter__(self) -> ChainClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def request(self, method: str, path: str, **kwargs: Any) -> Any:
        last_exc: Exception | None = None
        for attempt in range(self.config.max_retries + 1):
            try:
                resp = await self._client.request(method, path, **kwargs)
            except (httpx.ConnectError, httpx.ConnectTimeout) as e:
                last_exc = e
                if attempt >= self.config.max_retries:
                    break
                await asyncio.sleep(min(2**attempt, 8))
                continue

            if resp.is_error:
                raise _error_from_response(resp)
            return resp.json()

        assert last_exc is not None
        raise last_exc

    async def health(self) -> dict[str, Any]:
        return await self.request("GET", "/health")

    async def get_chain(self) -> dict[str, Any]:
        return await self.request("GET", "/blockchain")

    async def mine(self, data: Any) -> dict[str, Any]:
        return await self.request("POST", "/mine", json={"data": data})

    async def validate(self) -> dict[str, Any]:
        return await self.request("GET", "/validate")

    async def tamper(self, index: int | str, data: Any) -> dict[str, Any]:
        return await self.request("POST", f"/tamper/{index}", json={"data": data})
