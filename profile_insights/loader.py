"""
loader.py

Acquire raw profile text from a file, stdin ("-") or an http(s) URL and
hand the complete buffer to the parser. A failed read raises
SourceReadError; parsing never starts on partial input.
"""
import asyncio
import logging
import sys
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

import httpx

from .errors import SourceReadError
from .parser import parse_profile

log = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10


def is_url(location: str) -> bool:
    return location.startswith(("http://", "https://"))


def _read_file(location: str) -> str:
    try:
        return Path(location).expanduser().read_text(encoding="utf-8")
    except OSError as exc:
        raise SourceReadError(location, exc.strerror or str(exc)) from exc
    except UnicodeDecodeError as exc:
        raise SourceReadError(location, "file is not UTF-8 text") from exc


def _response_text(location: str, response: httpx.Response) -> str:
    try:
        response.raise_for_status()
    except httpx.HTTPStatusError as exc:
        raise SourceReadError(location, f"HTTP {exc.response.status_code}") from exc
    return response.text


def read_profile_text(location: str, timeout: float = DEFAULT_TIMEOUT, client: httpx.Client = None) -> str:
    """Return the full profile text found at location."""
    if location == "-":
        return sys.stdin.read()
    if not is_url(location):
        return _read_file(location)

    log.debug("Fetching profile from %s", location)
    try:
        if client is None:
            with httpx.Client(timeout=timeout, follow_redirects=True) as client:
                response = client.get(location)
        else:
            response = client.get(location)
    except httpx.HTTPError as exc:
        raise SourceReadError(location, str(exc) or type(exc).__name__) from exc
    return _response_text(location, response)


async def aread_profile_text(location: str, timeout: float = DEFAULT_TIMEOUT, client: httpx.AsyncClient = None) -> str:
    """Async counterpart of read_profile_text."""
    if location == "-":
        return await asyncio.to_thread(sys.stdin.read)
    if not is_url(location):
        return await asyncio.to_thread(_read_file, location)

    log.debug("Fetching profile from %s", location)
    try:
        if client is None:
            async with httpx.AsyncClient(timeout=timeout, follow_redirects=True) as client:
                response = await client.get(location)
        else:
            response = await client.get(location)
    except httpx.HTTPError as exc:
        raise SourceReadError(location, str(exc) or type(exc).__name__) from exc
    return _response_text(location, response)


def load_profile(location: str, timeout: float = DEFAULT_TIMEOUT, group_by: str = "name"):
    """Read and parse the profile at location."""
    return parse_profile(read_profile_text(location, timeout=timeout), group_by=group_by)


def load_pair(baseline: str, comparison: str, timeout: float = DEFAULT_TIMEOUT, group_by: str = "name"):
    """
    Load a baseline and a comparison profile side by side.
    Each parse builds its own node table, so the two share no state.
    """
    with ThreadPoolExecutor(max_workers=2) as pool:
        futures = [
            pool.submit(load_profile, location, timeout, group_by)
            for location in (baseline, comparison)
        ]
        return tuple(future.result() for future in futures)
