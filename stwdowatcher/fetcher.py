"""Conditional retrieval of the listing page."""

from __future__ import annotations

import logging

import requests

from .config import Settings
from .models import FetchFailed, FetchOutcome, NotModified, PageContent, RetrievalMeta

logger = logging.getLogger(__name__)


class PageFetcher:
    """Fetch the monitored page, replaying cached ETag/Last-Modified validators."""

    def __init__(self,
                 settings: Settings,
                 session: requests.Session | None = None):
        self.settings = settings
        self.session = session or requests.Session()
        self.session.headers.update({
            "User-Agent": settings.user_agent,
        })

    def fetch(self, meta: RetrievalMeta) -> FetchOutcome:
        url = self.settings.monitor_url
        headers = {}
        if meta.etag:
            headers["If-None-Match"] = meta.etag
        if meta.last_modified:
            headers["If-Modified-Since"] = meta.last_modified

        logger.debug("Fetching %s (conditional headers: %s)", url,
                     sorted(headers) or "none")
        try:
            response = self.session.get(
                url,
                headers=headers,
                timeout=self.settings.request_timeout,
            )
        except requests.Timeout:
            return FetchFailed(
                f"timed out after {self.settings.request_timeout}s")
        except requests.RequestException as exc:
            return FetchFailed(f"request failed: {exc}")

        if response.status_code == 304:
            return NotModified()
        if not 200 <= response.status_code < 300:
            return FetchFailed(f"unexpected status {response.status_code}")

        if not response.encoding or response.encoding.lower() == "iso-8859-1":
            response.encoding = response.apparent_encoding or "utf-8"

        updated = RetrievalMeta(
            etag=response.headers.get("ETag") or meta.etag,
            last_modified=response.headers.get("Last-Modified")
            or meta.last_modified,
        )
        return PageContent(html=response.text or "", meta=updated)
