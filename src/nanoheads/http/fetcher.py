"""HTTP client for reading source articles by URL."""

from __future__ import annotations

import logging
from dataclasses import dataclass

import httpx

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 12.0
DEFAULT_MAX_BYTES = 2 * 1024 * 1024
DEFAULT_USER_AGENT = "Mozilla/5.0 (compatible; NanoheadsBot/1.0)"


@dataclass(slots=True)
class FetchResult:
    """Result of an HTTP fetch operation."""

    url: str
    status_code: int
    content: str
    content_type: str
    is_success: bool
    truncated: bool = False
    error: str | None = None


class HttpFetcher:
    """HTTP client wrapper with timeout, body-size cap, and user-agent configuration."""

    def __init__(
        self,
        *,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        max_bytes: int = DEFAULT_MAX_BYTES,
        user_agent: str = DEFAULT_USER_AGENT,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._max_bytes = max_bytes
        self._client = httpx.Client(
            timeout=httpx.Timeout(timeout_seconds),
            headers={"User-Agent": user_agent},
            transport=transport,
            follow_redirects=True,
        )

    def fetch(self, url: str) -> FetchResult:
        """Fetch URL content; bodies above ``max_bytes`` are cut, not rejected."""

        try:
            with self._client.stream("GET", url) as response:
                content_type = response.headers.get("content-type", "")
                if response.status_code >= 400:
                    return FetchResult(
                        url=url,
                        status_code=response.status_code,
                        content="",
                        content_type=content_type,
                        is_success=False,
                        error=f"url returned status {response.status_code}",
                    )
                body, truncated = self._read_capped(response)
                encoding = response.encoding or "utf-8"
                return FetchResult(
                    url=url,
                    status_code=response.status_code,
                    content=body.decode(encoding, errors="replace"),
                    content_type=content_type,
                    is_success=True,
                    truncated=truncated,
                )
        except httpx.TimeoutException:
            logger.warning("Timeout fetching %s", url)
            return FetchResult(
                url=url,
                status_code=0,
                content="",
                content_type="",
                is_success=False,
                error="timeout",
            )
        except httpx.HTTPError as exc:
            logger.warning("HTTP error fetching %s: %s", url, exc)
            return FetchResult(
                url=url,
                status_code=0,
                content="",
                content_type="",
                is_success=False,
                error=str(exc),
            )

    def _read_capped(self, response: httpx.Response) -> tuple[bytes, bool]:
        chunks: list[bytes] = []
        size = 0
        for chunk in response.iter_bytes():
            remaining = self._max_bytes - size
            if len(chunk) > remaining:
                chunks.append(chunk[:remaining])
                logger.info("Response body capped at %d bytes for %s", self._max_bytes, response.url)
                return b"".join(chunks), True
            chunks.append(chunk)
            size += len(chunk)
        return b"".join(chunks), False

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> HttpFetcher:
        return self

    def __exit__(self, *_: object) -> None:
        self.close()
