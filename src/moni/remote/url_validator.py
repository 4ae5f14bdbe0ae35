"""URL composition and validation for outgoing API requests."""

import re
from typing import Any, Iterable, List, Mapping, Optional, Tuple, Union
from urllib.parse import parse_qsl, quote, urlencode, urlparse, urlunparse

import httpx

from ..exceptions import UrlParseError

QueryParams = Union[Mapping[str, Any], Iterable[Tuple[str, Any]]]

_WHITESPACE = re.compile(r"\s")


def _render_query_value(value: Any) -> str:
    # Google APIs expect lowercase booleans.
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _query_pairs(query_params: Optional[QueryParams]) -> List[Tuple[str, str]]:
    if not query_params:
        return []
    items = (
        query_params.items() if isinstance(query_params, Mapping) else query_params
    )
    return [
        (str(key), _render_query_value(value))
        for key, value in items
        if value is not None
    ]


def path_segment(value: Any) -> str:
    """Percent-encode one path segment; reserved characters such as ``/`` are escaped."""
    return quote(str(value), safe="")


def resource_name_path(name: str) -> str:
    """Percent-encode a full resource name, keeping its slashes as separators."""
    return quote(name.strip("/"), safe="/")


def build_request_url(url: str, query_params: Optional[QueryParams] = None) -> str:
    """Validate ``url`` and append ``query_params`` to any query it already has.

    ``None`` values are skipped.

    Args:
        url: Absolute http(s) URL
        query_params: Mapping or sequence of pairs

    Returns:
        str: The composed URL

    Raises:
        UrlParseError: If the URL is not an absolute http(s) URL
    """
    if not url:
        raise UrlParseError(url or "", "URL cannot be empty")

    if _WHITESPACE.search(url):
        raise UrlParseError(url, "URL contains whitespace")

    try:
        parsed = urlparse(url)
    except ValueError as e:
        raise UrlParseError(url, str(e)) from e

    if parsed.scheme not in ("http", "https"):
        raise UrlParseError(
            url, f"unsupported scheme {parsed.scheme!r}; only http and https"
        )

    if not parsed.netloc or not parsed.hostname:
        raise UrlParseError(url, "URL has no host")

    pairs = parse_qsl(parsed.query, keep_blank_values=True) + _query_pairs(
        query_params
    )
    composed = urlunparse(
        (
            parsed.scheme,
            parsed.netloc,
            parsed.path,
            parsed.params,
            urlencode(pairs),
            parsed.fragment,
        )
    )

    try:
        httpx.URL(composed)
    except httpx.InvalidURL as e:
        raise UrlParseError(url, str(e)) from e

    return composed
