"""
HTTP client for fetching job posting pages.

One request per scrape, bounded by a configurable timeout. There is no retry
policy: any transport error or non-2xx status is a single terminal FetchError
and the user resubmits if they want another attempt.
"""
import os
import time
import logging
from typing import Dict, Optional
from urllib.parse import urlparse

import httpx

from pipeline.errors import FetchError

logger = logging.getLogger(__name__)

DEFAULT_UA = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/124.0.0.0 Safari/537.36"
)
DEFAULT_TIMEOUT = 15.0
DEFAULT_MAX_SIZE_KB = 2048


def _env_float(name: str, default: float) -> float:
    try:
        return float(os.getenv(name, default))
    except ValueError:
        logger.warning(f"[net] Invalid {name}={os.getenv(name)!r}, using {default}")
        return default


class HTTPClient:
    """Fetches static HTML pages for the scrape endpoint."""

    def __init__(
        self,
        user_agent: Optional[str] = None,
        timeout: Optional[float] = None,
        max_size_kb: Optional[int] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.user_agent = user_agent or os.getenv("TRACKER_FETCH_UA", DEFAULT_UA)
        self.timeout = httpx.Timeout(
            timeout if timeout is not None else _env_float("TRACKER_FETCH_TIMEOUT", DEFAULT_TIMEOUT)
        )
        self.max_size_kb = int(
            max_size_kb if max_size_kb is not None else _env_float("TRACKER_FETCH_MAX_KB", DEFAULT_MAX_SIZE_KB)
        )
        # Injected in tests; None means a real network transport
        self._transport = transport

    def _get_headers(self) -> Dict[str, str]:
        return {
            "User-Agent": self.user_agent,
            "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
            "Accept-Language": "en-US,en;q=0.5",
        }

    @staticmethod
    def validate_url(url: str) -> str:
        """Return the stripped URL or raise FetchError if it cannot be fetched."""
        url = (url or "").strip()
        try:
            parsed = urlparse(url)
        except ValueError as e:
            raise FetchError(f"Malformed URL: {url!r}", url=url) from e
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise FetchError(f"Unsupported URL: {url!r}", url=url)
        return url

    def _decode(self, response: httpx.Response) -> str:
        limit = self.max_size_kb * 1024
        if len(response.content) <= limit:
            return response.text
        logger.warning(
            f"[net] Content too large: {len(response.content)} bytes (limit: {self.max_size_kb}KB) - {response.url}"
        )
        encoding = response.encoding or "utf-8"
        return response.content[:limit].decode(encoding, errors="replace")

    async def fetch_page(self, url: str) -> str:
        """
        GET a page and return its decoded body.

        Args:
            url: Absolute http(s) URL

        Returns:
            Response body as text (truncated to max_size_kb)

        Raises:
            FetchError: on invalid URL, transport error, timeout or non-2xx status
        """
        url = self.validate_url(url)

        async with httpx.AsyncClient(
            timeout=self.timeout,
            follow_redirects=True,
            headers=self._get_headers(),
            transport=self._transport,
        ) as client:
            start_time = time.time()
            try:
                response = await client.get(url)
            except httpx.TimeoutException as e:
                logger.error(f"[net] Timeout fetching {url}: {e}")
                raise FetchError(f"Timeout fetching {url}", url=url) from e
            except (httpx.HTTPError, httpx.InvalidURL) as e:
                logger.error(f"[net] Error fetching {url}: {e}")
                raise FetchError(f"Could not fetch {url}: {e}", url=url) from e

            elapsed_ms = int((time.time() - start_time) * 1000)
            logger.info(f"[net] GET {response.status_code} {url} ({len(response.content)} bytes, {elapsed_ms}ms)")

            if not response.is_success:
                raise FetchError(
                    f"Unexpected status {response.status_code} for {url}",
                    url=url,
                    status_code=response.status_code,
                )

            return self._decode(response)


http_client = HTTPClient()


def get_page_fetcher() -> HTTPClient:
    """FastAPI dependency returning the shared page fetcher."""
    return http_client
