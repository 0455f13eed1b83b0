"""
OData request building helpers

URL and query-string composition for the Dataverse Web API and the Flow API.
"""

from typing import Any, Iterable, Optional, Tuple
from urllib.parse import quote, urlsplit, urlunsplit

from ..errors import ArgumentValidationError

DATAVERSE_API_PATH = "/api/data/v9.2"

QueryParam = Tuple[str, Any]


def encode_value(value: str) -> str:
    """Percent-encode everything except RFC 3986 unreserved characters"""
    return quote(value, safe="")


def build_query(params: Iterable[QueryParam]) -> str:
    """
    Build a query string from ordered (name, value) pairs.

    None, blank strings and False are skipped. True renders as ``true``,
    ints as decimal, strings are percent-encoded.

    Returns:
        "" when nothing remains, otherwise a string starting with "?"
    """
    parts = []
    for name, value in params:
        if value is None or value is False:
            continue
        if value is True:
            rendered = "true"
        elif isinstance(value, int):
            rendered = str(value)
        else:
            text = str(value)
            if not text.strip():
                continue
            rendered = encode_value(text)
        parts.append(f"{name}={rendered}")

    return "?" + "&".join(parts) if parts else ""


def quote_segment(value: str, safe: str = "") -> str:
    """Percent-encode a single URL path segment"""
    return quote(value, safe=safe)


def odata_string_literal(value: str) -> str:
    """Quote a string for use in an OData key predicate"""
    return "'" + value.replace("'", "''") + "'"


def combine_url(base_url: str, path: str) -> str:
    return base_url.rstrip("/") + "/" + path.lstrip("/")


def require_absolute_url(value: Optional[str], argument: str, example: str) -> str:
    """Validate an http(s) base URL and return it stripped"""
    if value is None or not value.strip():
        raise ArgumentValidationError(f"{argument} must be provided, e.g. {example}", argument)

    value = value.strip()
    parts = urlsplit(value)
    if parts.scheme not in ("http", "https") or not parts.netloc:
        raise ArgumentValidationError(
            f"{argument} must be an absolute http(s) URL, e.g. {example}", argument
        )
    return value


def require_text(value: Optional[str], argument: str, hint: str) -> str:
    if value is None or not value.strip():
        raise ArgumentValidationError(f"{argument} must be provided, {hint}", argument)
    return value.strip()


def dataverse_url(org_url: str, path: str, query: str = "") -> str:
    """
    Resolve a Web API path against the org root.

    Any path already present on org_url is replaced, so
    ``https://contoso.crm.dynamics.com/main.aspx`` still targets
    ``https://contoso.crm.dynamics.com/api/data/v9.2/...``.
    """
    parts = urlsplit(org_url)
    root = urlunsplit((parts.scheme, parts.netloc, "", "", ""))
    return f"{root}{DATAVERSE_API_PATH}/{path.lstrip('/')}{query}"
