"""
Scrape orchestration: URL -> page fetch -> field extraction.
"""

import logging
from typing import Any, Awaitable, Optional, Protocol

from .errors import ValidationError
from .field_extractor import ExtractionResult, extract_fields

logger = logging.getLogger(__name__)


class PageFetcher(Protocol):
    def fetch_page(self, url: str) -> Awaitable[str]:
        ...


def require_url(payload: Any) -> str:
    """Pull a non-blank URL out of a request payload or raise ValidationError."""
    url: Optional[Any] = payload.get("url") if isinstance(payload, dict) else None
    if not isinstance(url, str) or not url.strip():
        raise ValidationError("Missing URL")
    return url.strip()


async def scrape_job_posting(url: str, fetcher: PageFetcher) -> ExtractionResult:
    """
    Fetch a job posting and extract its metadata.

    Raises:
        ValidationError: if url is blank (before any network activity)
        FetchError: if the page cannot be retrieved
        ParseError: if the markup cannot be parsed
    """
    if not url or not url.strip():
        raise ValidationError("Missing URL")

    html = await fetcher.fetch_page(url.strip())
    result = extract_fields(html)
    logger.info(f"[scrape] Extracted posting from {url}: title={'yes' if result.title else 'no'}, "
                f"company={'yes' if result.company else 'no'}, location={result.location!r}")
    return result
