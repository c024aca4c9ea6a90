from typing import Optional


class ScrapeError(Exception):
    """Base class for everything the scrape pipeline raises."""


class FetchError(ScrapeError):
    """The page could not be retrieved (transport error, timeout, non-2xx)."""

    def __init__(self, message: str, url: Optional[str] = None, status: Optional[int] = None):
        super().__init__(message)
        self.url = url
        self.status = status


class ValidationError(ScrapeError):
    """Caller input rejected before any fetch happens."""


class ExtractionError(ScrapeError):
    """Recoverable failure inside the DOM heuristics."""


class ParseError(ScrapeError):
    """A single structured-data block could not be decoded."""
