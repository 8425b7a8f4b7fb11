"""
Field extractor for job posting pages.

Turns raw page markup into a best-effort {title, company, location} triple.
Each field is resolved by an ordered tuple of predicates; every predicate
takes the parsed document and returns a string or None. The resolver keeps
the first non-empty answer and otherwise falls back to the field default.

Location is the odd one out: a remote keyword anywhere in the visible body
wins over any location-styled element.
"""

import re
import logging
from dataclasses import dataclass, asdict
from typing import Callable, Dict, Optional, Sequence

from bs4 import BeautifulSoup, Comment, Tag
from bs4.builder import ParserRejectedMarkup

from .errors import ParseError

logger = logging.getLogger(__name__)

Predicate = Callable[[BeautifulSoup], Optional[str]]

TITLE_DEFAULT = ""
COMPANY_DEFAULT = ""
LOCATION_DEFAULT = "N/A"
REMOTE_LOCATION = "Remote"

REMOTE_PATTERN = re.compile(r"(remote|work from home)", re.IGNORECASE)

# Text inside these never renders, so it cannot advertise remote work.
_INVISIBLE_TAGS = {"script", "style", "noscript", "template"}

# Without a <body> tag, head content still has to be left out of the scan.
_HEAD_TAGS = {"head", "title"}


@dataclass(frozen=True)
class ExtractionResult:
    """Structured metadata scraped from one job posting page."""

    title: str = TITLE_DEFAULT
    company: str = COMPANY_DEFAULT
    location: str = LOCATION_DEFAULT

    def to_dict(self) -> Dict[str, str]:
        return asdict(self)


def _meta_content(soup: BeautifulSoup, selector: str) -> Optional[str]:
    tag = soup.select_one(selector)
    if tag is None:
        return None
    content = tag.get("content")
    if isinstance(content, list):
        content = " ".join(content)
    return content or None


def _first_text(soup: BeautifulSoup, selector: str) -> Optional[str]:
    tag = soup.select_one(selector)
    if tag is None:
        return None
    return tag.get_text().strip() or None


def _visible_body_text(soup: BeautifulSoup) -> str:
    """Concatenated text of the body, skipping comments and script-like tags."""
    has_body = isinstance(soup.body, Tag)
    root = soup.body if has_body else soup
    skipped = _INVISIBLE_TAGS if has_body else _INVISIBLE_TAGS | _HEAD_TAGS
    parts = []
    for string in root.find_all(string=True):
        if isinstance(string, Comment):
            continue
        if any(parent.name in skipped for parent in string.parents):
            continue
        parts.append(str(string))
    return "".join(parts)


# Title predicates

def og_title(soup: BeautifulSoup) -> Optional[str]:
    return _meta_content(soup, 'meta[property="og:title"]')


def meta_title(soup: BeautifulSoup) -> Optional[str]:
    return _meta_content(soup, 'meta[name="title"]')


def first_h1_text(soup: BeautifulSoup) -> Optional[str]:
    return _first_text(soup, "h1")


def document_title_text(soup: BeautifulSoup) -> Optional[str]:
    """Text of every <title> element joined together, inline SVG titles included."""
    return "".join(tag.get_text() for tag in soup.find_all("title")).strip() or None


# Company predicates

def meta_company(soup: BeautifulSoup) -> Optional[str]:
    return _meta_content(soup, 'meta[name="company"]')


def company_marker_text(soup: BeautifulSoup) -> Optional[str]:
    """First element whose class mentions company/employer, or with data-company."""
    return _first_text(soup, '[class*="company"], [class*="employer"], [data-company]')


def company_aria_label_text(soup: BeautifulSoup) -> Optional[str]:
    return _first_text(soup, '[aria-label*="Company"]')


# Location predicates

def remote_keyword(soup: BeautifulSoup) -> Optional[str]:
    if REMOTE_PATTERN.search(_visible_body_text(soup)):
        return REMOTE_LOCATION
    return None


def location_marker_text(soup: BeautifulSoup) -> Optional[str]:
    return _first_text(soup, '[class*="location"], [data-location]')


TITLE_PREDICATES: Sequence[Predicate] = (
    og_title,
    meta_title,
    first_h1_text,
    document_title_text,
)

COMPANY_PREDICATES: Sequence[Predicate] = (
    meta_company,
    company_marker_text,
    company_aria_label_text,
)

LOCATION_PREDICATES: Sequence[Predicate] = (
    remote_keyword,
    location_marker_text,
)


def resolve_field(soup: BeautifulSoup, predicates: Sequence[Predicate], default: str) -> str:
    """Apply predicates in order and return the first non-empty value."""
    for predicate in predicates:
        value = predicate(soup)
        if value and value.strip():
            return value
    return default


def parse_html(html: str) -> BeautifulSoup:
    """Parse markup leniently; raise ParseError only if the parser gives up."""
    if not isinstance(html, str):
        raise ParseError(f"Expected HTML text, got {type(html).__name__}")
    try:
        return BeautifulSoup(html, "html.parser")
    except (ParserRejectedMarkup, AssertionError, ValueError) as e:
        raise ParseError(f"Could not parse markup: {e}") from e


def extract_from_soup(soup: BeautifulSoup) -> ExtractionResult:
    return ExtractionResult(
        title=resolve_field(soup, TITLE_PREDICATES, TITLE_DEFAULT),
        company=resolve_field(soup, COMPANY_PREDICATES, COMPANY_DEFAULT),
        location=resolve_field(soup, LOCATION_PREDICATES, LOCATION_DEFAULT),
    )


def extract_fields(html: str) -> ExtractionResult:
    """
    Extract title, company and location from a job posting page.

    Args:
        html: Raw page markup (may be partial or malformed)

    Returns:
        ExtractionResult with per-field defaults where nothing matched

    Raises:
        ParseError: if the markup cannot be parsed at all
    """
    soup = parse_html(html)
    try:
        result = extract_from_soup(soup)
    except (AttributeError, TypeError, ValueError) as e:
        raise ParseError(f"Heuristic evaluation failed: {e}") from e

    logger.debug(
        f"[extractor] title={result.title!r} company={result.company!r} location={result.location!r}"
    )
    return result
