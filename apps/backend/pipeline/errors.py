"""
Error taxonomy for the scrape pipeline.

Only ValidationError is ever shown to the client verbatim. FetchError and
ParseError are logged and collapsed into a single generic failure at the
HTTP boundary.
"""


class ScrapeError(Exception):
    """Base class for scrape pipeline failures."""
    pass


class ValidationError(ScrapeError):
    """Raised when required input is missing (no URL, blank posting fields)."""
    pass


class FetchError(ScrapeError):
    """Raised when the target page is unreachable or returns a non-2xx status."""

    def __init__(self, message: str, url: str = "", status_code: int | None = None):
        super().__init__(message)
        self.url = url
        self.status_code = status_code


class ParseError(ScrapeError):
    """Raised when markup cannot be parsed at all."""
    pass
