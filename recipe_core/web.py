"""
Web Access Module
=================

HTTP helpers shared by both recipes: a retrying session, plain GETs,
and download-if-absent caching to local files.
"""

from pathlib import Path
from typing import Optional, Union

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from . import config


def create_session(
    retries: int = None,
    backoff: float = None,
    user_agent: str = None
) -> requests.Session:
    """
    Create session with retry logic and an identifying User-Agent.

    Parameters:
        retries: Total transport retries. Defaults to config.HTTP_RETRIES
        backoff: Backoff factor between retries. Defaults to config.HTTP_BACKOFF
        user_agent: User-Agent header. Defaults to config.USER_AGENT

    Returns:
        Configured requests.Session
    """
    if retries is None:
        retries = config.HTTP_RETRIES
    if backoff is None:
        backoff = config.HTTP_BACKOFF
    if user_agent is None:
        user_agent = config.USER_AGENT

    session = requests.Session()
    retry = Retry(
        total=retries,
        backoff_factor=backoff,
        status_forcelist=[429, 500, 502, 503, 504],
    )
    adapter = HTTPAdapter(max_retries=retry)
    session.mount('https://', adapter)
    session.mount('http://', adapter)
    session.headers.update({'User-Agent': user_agent})
    return session


def _get(url: str, session: Optional[requests.Session], timeout: float) -> requests.Response:
    """GET a URL and raise on non-2xx responses."""
    if timeout is None:
        timeout = config.HTTP_TIMEOUT

    if session is None:
        with create_session() as own_session:
            response = own_session.get(url, timeout=timeout)
    else:
        response = session.get(url, timeout=timeout)

    response.raise_for_status()
    return response


def fetch_text(
    url: str,
    session: requests.Session = None,
    timeout: float = None
) -> str:
    """
    Fetch a page and return its decoded text.

    Parameters:
        url: Address to fetch
        session: Optional session. A temporary one is created when omitted
        timeout: Request timeout in seconds. Defaults to config.HTTP_TIMEOUT

    Returns:
        Response body as text
    """
    response = _get(url, session, timeout)
    print(f"Fetched {url} ({len(response.content):,} bytes)")
    return response.text


def download_if_absent(
    url: str,
    filepath: Union[str, Path],
    session: requests.Session = None,
    timeout: float = None
) -> Path:
    """
    Download url to filepath unless the file already exists.

    Parameters:
        url: Address to download
        filepath: Local destination. Parent directories are created
        session: Optional session
        timeout: Request timeout in seconds

    Returns:
        Path to the local file
    """
    path = Path(filepath)
    if path.exists():
        print(f"Using cached file: {path}")
        return path

    response = _get(url, session, timeout)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(response.content)
    print(f"Downloaded {url} -> {path} ({len(response.content):,} bytes)")
    return path


def fetch_cached_text(
    url: str,
    cache_path: Union[str, Path] = None,
    session: requests.Session = None,
    timeout: float = None
) -> str:
    """
    Return page text, reading from cache_path when it exists.

    The page is decoded once (using the response charset) and cached as
    UTF-8, so cached and uncached runs return the same text. Without
    cache_path the page is fetched on every call.
    """
    if cache_path is None:
        return fetch_text(url, session, timeout)

    path = Path(cache_path)
    if path.exists():
        print(f"Using cached page: {path}")
        return path.read_text(encoding='utf-8')

    text = fetch_text(url, session, timeout)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding='utf-8')
    print(f"Cached page as UTF-8: {path}")
    return text
