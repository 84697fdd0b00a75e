"""Target page fetch and fetch-error classification."""

from __future__ import annotations

import logging
import socket

import httpx

from app.core.config import settings
from app.core.exceptions import PageFetchError

logger = logging.getLogger(__name__)

DOMAIN_NOT_FOUND = "Domain not found. Please check the URL."
ACCESS_DENIED = "Access denied by the website. The site may be blocking automated requests."
PAGE_NOT_FOUND = "Page not found (404). Please check the URL."
TIMED_OUT = "Request timed out. The website may be slow or unavailable."

# Resolver messages across platforms when the exception chain has no gaierror
_DNS_FAILURE_MARKERS = (
    "name or service not known",
    "nodename nor servname",
    "getaddrinfo failed",
    "no address associated with hostname",
    "temporary failure in name resolution",
    "name resolution",
)


def normalize_url(raw: str) -> str:
    """Trim and default the scheme to https."""
    url = raw.strip()
    lowered = url.lower()
    if not (lowered.startswith("http://") or lowered.startswith("https://")):
        url = f"https://{url}"
    return url


def build_client(**kwargs) -> httpx.AsyncClient:
    """HTTP client configured for fetching audit targets."""
    return httpx.AsyncClient(
        headers={
            "User-Agent": settings.fetch_user_agent,
            "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
        },
        timeout=settings.fetch_timeout,
        follow_redirects=True,
        max_redirects=settings.fetch_max_redirects,
        **kwargs,
    )


async def fetch_page(client: httpx.AsyncClient, url: str) -> str:
    """GET the page HTML. HTTP error statuses raise ``httpx.HTTPStatusError``."""
    resp = await client.get(url)
    resp.raise_for_status()
    logger.debug("Fetched %s: status=%d bytes=%d", url, resp.status_code, len(resp.content))
    return resp.text


def _is_dns_failure(exc: BaseException) -> bool:
    seen: set[int] = set()
    current: BaseException | None = exc
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        if isinstance(current, socket.gaierror):
            return True
        current = current.__cause__ or current.__context__

    message = str(exc).lower()
    return any(marker in message for marker in _DNS_FAILURE_MARKERS)


def classify_fetch_error(exc: Exception) -> PageFetchError | None:
    """Map a fetch failure to a user-facing 400, or None when it is unexpected."""
    if isinstance(exc, httpx.HTTPStatusError):
        status = exc.response.status_code
        if status == 403:
            return PageFetchError(ACCESS_DENIED)
        if status == 404:
            return PageFetchError(PAGE_NOT_FOUND)
        return None
    if isinstance(exc, httpx.TimeoutException):
        return PageFetchError(TIMED_OUT)
    if isinstance(exc, httpx.ConnectError) and _is_dns_failure(exc):
        return PageFetchError(DOMAIN_NOT_FOUND)
    return None
