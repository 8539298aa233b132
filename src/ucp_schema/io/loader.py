# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

"""
Document loading from local files, strings and HTTP(S) URLs.

Remote fetches are blocking, bounded by a fixed timeout and never retried;
any failure surfaces as NetworkError naming the URL.
"""

import json
from pathlib import Path
from typing import Any

import httpx

from ..core.log import get_logger
from ..core.types import HTTP_TIMEOUT_SEC, StrPath
from ..errors import FileNotFound, InvalidJson, NetworkError, ReadError

__all__ = [
    "is_url",
    "load_schema",
    "load_schema_auto",
    "load_schema_str",
    "load_schema_url",
]

log = get_logger("loader")


def is_url(s: str) -> bool:
    """True for strings starting with http:// or https://."""
    return s.startswith("http://") or s.startswith("https://")


def load_schema_str(content: str) -> Any:
    """Parse a JSON document from a string."""
    try:
        return json.loads(content)
    except json.JSONDecodeError as e:
        raise InvalidJson(e.msg, line=e.lineno, column=e.colno) from e


def load_schema(path: StrPath) -> Any:
    """
    Load a JSON document from a file.

    Raises:
        FileNotFound if the path does not exist,
        ReadError on any other OS-level failure,
        InvalidJson if the content is not JSON.
    """
    p = Path(path)
    if not p.exists():
        raise FileNotFound(p)
    try:
        content = p.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ReadError(p, e) from e
    doc = load_schema_str(content)
    log.debug("loader.loaded", event="loader.loaded", source=str(p))
    return doc


def load_schema_url(url: str, *, timeout: float = HTTP_TIMEOUT_SEC, client: httpx.Client | None = None) -> Any:
    """
    Fetch a JSON document over HTTP(S).

    A caller-supplied client is used as-is (its own timeout applies);
    otherwise a short-lived client with ``timeout`` is created.
    """
    try:
        if client is not None:
            response = client.get(url)
        else:
            with httpx.Client(timeout=timeout, follow_redirects=True) as own:
                response = own.get(url)
        response.raise_for_status()
        doc = response.json()
    except httpx.HTTPError as e:
        raise NetworkError(url, e) from e
    except ValueError as e:
        # body is not JSON
        raise NetworkError(url, e) from e
    log.debug("loader.fetched", event="loader.fetched", source=url, status=response.status_code)
    return doc


def load_schema_auto(source: str, *, timeout: float = HTTP_TIMEOUT_SEC) -> Any:
    """Load from a URL when ``source`` looks like one, else from a local path."""
    if is_url(source):
        return load_schema_url(source, timeout=timeout)
    return load_schema(Path(source))
