import logging
import threading

import requests

from . import config

logger = logging.getLogger(__name__)


def is_bad_url(url, bad_urls=config.BAD_URLS):
    """Return True for hosts that are never useful as a source (self-referential or walled)."""
    return any(bad in url for bad in bad_urls)


def clean_url(url):
    """Undo HTML escaping left over in extracted links and encode spaces."""
    return url.replace("&amp;", "&").strip().replace(" ", "%20")


class DocumentFetcher:
    """
    Plain GET of candidate pages.
    Every failure is reported as an empty string; callers treat that as "no candidate".
    """

    def __init__(self, headers=None, timeout=config.FETCH_TIMEOUT, bad_urls=config.BAD_URLS, http_get=None):
        self.headers = dict(headers or config.PAGE_HEADERS)
        self.timeout = timeout
        self.bad_urls = tuple(bad_urls)
        self._http_get = http_get or requests.get
        self._lock = threading.Lock()
        self.stats = {
            "requests": 0,
            "rejected": 0,
            "errors": 0,
            "empty": 0,
        }

    def _count(self, key):
        with self._lock:
            self.stats[key] += 1

    def fetch(self, url):
        if not url or is_bad_url(url, self.bad_urls):
            self._count("rejected")
            return ""
        target = clean_url(url)
        self._count("requests")
        try:
            response = self._http_get(target, headers=self.headers, timeout=self.timeout)
        except requests.RequestException as exc:
            self._count("errors")
            logger.debug("    [!] Fetch failed for %s: %s", target, exc)
            return ""
        if not 200 <= response.status_code < 300:
            self._count("empty")
            logger.debug("    [!] HTTP %s for %s", response.status_code, target)
            return ""
        if not response.headers.get("Content-Type"):
            self._count("empty")
            return ""
        try:
            return response.text or ""
        except (requests.RequestException, UnicodeDecodeError) as exc:
            self._count("errors")
            logger.debug("    [!] Could not decode %s: %s", target, exc)
            return ""
