"""Query string request adapter.

`QueryRequest` turns a URL query into the nested mapping forms import from, and
`build_query` does the reverse for wire parameters. Bracket suffixes select the
container: `a[]=x` appends to a list, `a[k]=x` sets a mapping entry.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from typing import Any
from urllib.parse import quote_plus, unquote_to_bytes

from forminput.logging import get_logger
from forminput.sanitize import TEXT_ENCODING

logger = get_logger(__name__)


def _unescape(text: str) -> str | bytes:
    """Decode one query component, keeping undecodable input as raw bytes.

    Args:
        text (str): Escaped component.

    Returns:
        str | bytes: Decoded text, or bytes if they are not valid text.
    """
    raw = unquote_to_bytes(text.replace("+", " "))
    try:
        return raw.decode(TEXT_ENCODING)
    except UnicodeDecodeError:
        return raw


def _escape(value: Any) -> str:
    return quote_plus(value if isinstance(value, (str, bytes)) else str(value), safe="*")


def _assign(params: dict[str, Any], name: str, value: Any) -> None:
    """Store a value under a possibly bracketed name.

    Args:
        params (dict[str, Any]): Target container.
        name (str): Decoded parameter name.
        value (Any): Decoded value.
    """
    start = name.find("[", 1)
    end = name.find("]", start) if start > 0 else -1
    if end < 0:
        params[name] = value
        return

    base, key, rest = name[:start], name[start + 1 : end], name[end + 1 :]
    if not key and not rest:
        items = params.get(base)
        if not isinstance(items, list):
            items = params[base] = []
        items.append(value)
        return

    child = params.get(base)
    if not isinstance(child, dict):
        child = params[base] = {}
    _assign(child, key + rest, value)


class QueryRequest(Mapping[str, Any]):
    """Read-only request mapping built from a URL query string."""

    def __init__(self, params: Mapping[str, Any] | None = None) -> None:
        self._params = dict(params or {})

    @classmethod
    def parse(cls, query: str | bytes) -> QueryRequest:
        """Parse a URL query string.

        A leading `?` is ignored. Names which are not valid text are skipped.

        Args:
            query (str | bytes): Query string.

        Returns:
            QueryRequest: Parsed request.
        """
        if isinstance(query, bytes):
            query = query.decode("latin-1")
        params: dict[str, Any] = {}
        for pair in query.lstrip("?").split("&"):
            if not pair:
                continue
            raw_name, _, raw_value = pair.partition("=")
            name = _unescape(raw_name)
            if not isinstance(name, str) or not name:
                continue
            _assign(params, name, _unescape(raw_value))
        logger.debug("Query parsed", extra={"parameters": len(params)})
        return cls(params)

    def __getitem__(self, code: str) -> Any:
        return self._params[code]

    def __iter__(self) -> Iterator[str]:
        return iter(self._params)

    def __len__(self) -> int:
        return len(self._params)

    def __repr__(self) -> str:
        return f"QueryRequest(codes={list(self._params)!r})"


def build_query(params: Mapping[str, Any], prefix: str | None = None) -> str:
    """Encode nested wire parameters as a URL query string.

    Args:
        params (Mapping[str, Any]): Parameters keyed by field code.
        prefix (str | None): Escaped name of the enclosing parameter.

    Returns:
        str: Query string, without the leading `?`.
    """
    parts = []
    for key, value in params.items():
        name = f"{prefix}[{_escape(key)}]" if prefix else _escape(key)
        part = _build_value(value, name)
        if part:
            parts.append(part)
    return "&".join(parts)


def _build_value(value: Any, name: str) -> str:
    if isinstance(value, Mapping):
        return build_query(value, name)
    if isinstance(value, (list, tuple)):
        return "&".join(part for part in (_build_value(item, f"{name}[]") for item in value) if part)
    if value is None:
        return name
    return f"{name}={_escape(value)}"
