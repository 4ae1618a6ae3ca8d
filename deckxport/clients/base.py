"""Shared transport handling for upstream API clients."""

from types import TracebackType
from typing import Self

import httpx

from deckxport.clients.rate_limiter import RateLimiter
from deckxport.config import settings


class ApiClient:
    """
    Base for upstream clients.

    Owns an ``httpx.AsyncClient`` unless one is injected, and a RateLimiter
    that every request made through ``_request`` waits on.
    """

    def __init__(
        self,
        base_url: str,
        *,
        request_delay: float,
        http_client: httpx.AsyncClient | None = None,
        rate_limiter: RateLimiter | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.rate_limiter = rate_limiter or RateLimiter(request_delay)
        self._owns_client = http_client is None
        self._http = http_client or httpx.AsyncClient(
            headers={"User-Agent": settings.user_agent, "Accept": "application/json"},
            timeout=settings.http_timeout,
            follow_redirects=True,
        )

    async def _request(self, method: str, url: str, **kwargs: object) -> httpx.Response:
        await self.rate_limiter.wait()
        return await self._http.request(method, url, **kwargs)  # type: ignore[arg-type]

    async def aclose(self) -> None:
        if self._owns_client:
            await self._http.aclose()

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()
