"""Async HTTP client that fetches raw image bytes."""

from __future__ import annotations

import logging

import httpx

from pixcache.config.defaults import DEFAULT_TIMEOUT, DEFAULT_USER_AGENT
from pixcache.errors.exceptions import NetworkError

logger = logging.getLogger(__name__)


class AsyncImageFetcher:
    """Fetches bytes for an address over HTTP. Single attempt, no retry."""

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT,
        user_agent: str = DEFAULT_USER_AGENT,
        max_connections: int = 10,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._client = httpx.AsyncClient(
            timeout=timeout,
            headers={"User-Agent": user_agent},
            limits=httpx.Limits(max_connections=max_connections),
            follow_redirects=True,
            transport=transport,
        )

    async def fetch(self, address: str) -> bytes:
        """GET the address and return the body.

        Raises NetworkError on transport failure or a non-2xx status.
        """
        try:
            response = await self._client.get(address)
        except httpx.HTTPError as e:
            raise NetworkError(
                f"Request to {address} failed: {e}", address=address, original=e
            ) from e
        except (httpx.InvalidURL, ValueError) as e:
            # Malformed addresses are rejected by httpx before any I/O
            raise NetworkError(f"Invalid address {address!r}: {e}", address=address, original=e) from e

        if not response.is_success:
            raise NetworkError(
                f"{address} returned HTTP {response.status_code}",
                address=address,
                http_status=response.status_code,
            )

        logger.debug("Fetched %d bytes from %s", len(response.content), address)
        return response.content

    async def close(self) -> None:
        await self._client.aclose()
