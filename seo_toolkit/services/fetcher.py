"""
Page fetcher
Retrieves raw HTML for analysis
"""

import logging
from typing import Optional

import requests

from seo_toolkit.config import Config
from seo_toolkit.exceptions import FetchError

# Configure logging
logger = logging.getLogger(__name__)


def normalize_url(url: str) -> str:
    """Strip whitespace and add https:// when the scheme is missing"""
    url = (url or '').strip()
    if url and not url.startswith(('http://', 'https://')):
        url = 'https://' + url
    return url


def _headers(user_agent: Optional[str] = None):
    return {
        'User-Agent': user_agent or Config.USER_AGENT,
        'Accept': 'text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8',
    }


def fetch_html(url: str, timeout: Optional[float] = None,
               session: Optional[requests.Session] = None,
               user_agent: Optional[str] = None) -> str:
    """
    Fetch a page and return its HTML text.

    Raises:
        FetchError: on connection errors, timeouts and non-2xx responses
    """
    url = normalize_url(url)
    timeout = timeout or Config.REQUEST_TIMEOUT
    getter = session or requests
    try:
        response = getter.get(url, headers=_headers(user_agent), timeout=timeout)
    except requests.Timeout as e:
        raise FetchError(url, f"Timed out after {timeout}s fetching {url}") from e
    except requests.RequestException as e:
        raise FetchError(url, f"Failed to fetch {url}: {e}") from e

    if not 200 <= response.status_code < 300:
        raise FetchError(url, f"Unexpected response fetching {url}", status_code=response.status_code)

    logger.debug(f"Fetched {url} ({len(response.text or '')} chars)")
    return response.text or ''


def fetch_text(url: str, timeout: Optional[float] = None, user_agent: Optional[str] = None) -> str:
    """Fetch text content from URL, returning an empty string on any failure"""
    try:
        return fetch_html(url, timeout=timeout, user_agent=user_agent)
    except FetchError as e:
        logger.debug(f"Ignoring fetch failure for {url}: {e}")
        return ''
