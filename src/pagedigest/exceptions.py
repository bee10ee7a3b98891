"""pagedigest exception hierarchy."""

from __future__ import annotations


class PageDigestError(Exception):
    """Base exception for all pagedigest errors."""


class NoArticleFound(PageDigestError):
    """Raised when readability extraction yields no article body."""

    def __init__(self, message: str = "Failed to parse the article content.") -> None:
        super().__init__(message)


class NavigationError(PageDigestError):
    """Raised when a page cannot be loaded (DNS failure, refused connection, SSL error).

    Attributes:
        url: The URL that failed to load.
        reason: Human-readable description of the failure.
    """

    def __init__(self, url: str, reason: str) -> None:
        self.url = url
        self.reason = reason
        super().__init__(f"Failed to load {url}: {reason}")


class ScrapeSessionError(PageDigestError):
    """Raised when the browser session cannot be started or crashes mid-scrape."""
