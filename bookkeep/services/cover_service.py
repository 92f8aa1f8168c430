"""
Cover-image lookup by ISBN.

The book service only depends on ``CoverImageLookup``; lookups are best
effort and never raise. ``OpenLibraryCoverClient`` asks the Open Library
covers API, which answers 404 for unknown ISBNs when ``default=false``.
"""
from __future__ import annotations

import logging
from typing import Protocol

import httpx

from bookkeep.core.config import settings

logger = logging.getLogger(__name__)


class CoverImageLookup(Protocol):
    def fetch_cover_url(self, isbn: str) -> str | None: ...


class NullCoverLookup:
    """Lookup used when enrichment is switched off."""

    def fetch_cover_url(self, isbn: str) -> str | None:
        return None


class OpenLibraryCoverClient:
    def __init__(
        self,
        base_url: str = "https://covers.openlibrary.org",
        timeout: float = 5.0,
        client: httpx.Client | None = None,
    ):
        self.base_url: str = base_url.rstrip("/")
        self.timeout: float = timeout
        self._client: httpx.Client | None = client

    def cover_url(self, isbn: str) -> str:
        digits = isbn.replace("-", "").strip()
        return f"{self.base_url}/b/isbn/{digits}-L.jpg"

    def fetch_cover_url(self, isbn: str) -> str | None:
        """Return the cover URL if Open Library serves an image for the ISBN."""
        if not isbn or not isbn.strip():
            return None

        url = self.cover_url(isbn)
        try:
            response = self._get(url)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            logger.warning("Cover lookup failed for ISBN %s: %s", isbn, exc)
            return None

        if response.status_code != httpx.codes.OK:
            logger.info("No cover for ISBN %s (status %s)", isbn, response.status_code)
            return None

        content_type = response.headers.get("content-type", "")
        if not content_type.lower().startswith("image/"):
            logger.info("Cover for ISBN %s is not an image (%s)", isbn, content_type or "-")
            return None

        return url

    def _get(self, url: str) -> httpx.Response:
        params = {"default": "false"}
        if self._client is not None:
            return self._client.get(url, params=params, timeout=self.timeout)
        with httpx.Client(timeout=self.timeout, follow_redirects=True) as client:
            return client.get(url, params=params)


def get_cover_lookup() -> CoverImageLookup:
    """Dependency: the configured cover lookup."""
    if not settings.COVER_LOOKUP_ENABLED:
        return NullCoverLookup()
    return OpenLibraryCoverClient(
        base_url=settings.COVER_LOOKUP_BASE_URL,
        timeout=settings.COVER_LOOKUP_TIMEOUT,
    )
