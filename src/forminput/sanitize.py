"""Normalization of raw request values before they are stored on a form."""

from __future__ import annotations

import re
from collections.abc import Callable, Mapping
from typing import Any

from forminput.exceptions import SanitizeError

ASCII_WHITESPACE = " \t\n\v\f\r"
TEXT_ENCODING = "utf-8"

_WHITESPACE_RUN = re.compile(r"[ \t\n\v\f\r]+")
_INTEGER_KEY = re.compile(r"[-+]?[0-9]+(?:_[0-9]+)*")

Filter = Callable[[Any], Any]


def squeeze_whitespace(value: str) -> str:
    """Collapse ASCII whitespace runs into one space and strip the ends.

    This is the filter fields get unless they declare their own. NUL characters at
    either end are stripped as well.

    Args:
        value (str): Decoded text.

    Returns:
        str: Normalized text.
    """
    return _WHITESPACE_RUN.sub(" ", value).strip(ASCII_WHITESPACE + "\0")


DEFAULT_FILTER: Filter = squeeze_whitespace


def parse_integer(text: str) -> int | None:
    """Parse ASCII decimal integer text, allowing a sign, underscores and surrounding whitespace.

    Args:
        text (str): Text to parse.

    Returns:
        int | None: The integer, or None if the text is not one.
    """
    stripped = text.strip(ASCII_WHITESPACE)
    if not _INTEGER_KEY.fullmatch(stripped):
        return None
    return int(stripped.replace("_", ""), 10)


def coerce_hash_key(key: Any) -> Any:
    """Convert decimal integer keys to `int`, leaving anything else untouched.

    Non-numeric keys are kept so that key validation can report them.

    Args:
        key (Any): Raw mapping key.

    Returns:
        Any: Integer key or the original key.
    """
    if isinstance(key, str):
        number = parse_integer(key)
        if number is not None:
            return number
    return key


def _sanitize_text(value: str | bytes | bytearray, filter: Filter | None) -> Any:  # noqa: A002
    """Decode text, applying the filter only to valid text.

    Invalid input is preserved as raw bytes so validation can flag it later.

    Args:
        value (str | bytes | bytearray): Raw text.
        filter (Filter | None): Per-value filter.

    Returns:
        Any: Filtered text, or the raw bytes if decoding failed.
    """
    if isinstance(value, str):
        try:
            value.encode(TEXT_ENCODING)
        except UnicodeEncodeError:
            return value.encode(TEXT_ENCODING, "surrogatepass")
        text = value
    else:
        try:
            text = bytes(value).decode(TEXT_ENCODING)
        except UnicodeDecodeError:
            return bytes(value)
    return filter(text) if filter else text


def sanitize_value(value: Any, filter: Filter | None = None) -> Any:  # noqa: A002
    """Normalize one raw request value.

    Lists are sanitized element-wise and mappings get their keys coerced. Nested
    containers are passed through for validation to reject.

    Args:
        value (Any): Raw request value.
        filter (Filter | None): Per-value filter applied to valid text.

    Raises:
        SanitizeError: If the value is of a type no request should contain.

    Returns:
        Any: Sanitized value.
    """
    if isinstance(value, (str, bytes, bytearray)):
        return _sanitize_text(value, filter)
    if isinstance(value, (list, tuple)):
        return [sanitize_value(item, filter) for item in value]
    if isinstance(value, Mapping):
        return {coerce_hash_key(key): sanitize_value(item, filter) for key, item in value.items()}
    raise SanitizeError(value_type=type(value).__name__)


def import_value(value: Any, filter: Filter | None = None, transform: Filter | None = None) -> Any:  # noqa: A002
    """Sanitize a raw request value, then run the whole-value transform.

    Args:
        value (Any): Raw request value.
        filter (Filter | None): Per-value filter.
        transform (Filter | None): Transform applied once to the sanitized value.

    Returns:
        Any: Value ready to be stored on a form.
    """
    value = sanitize_value(value, filter)
    if transform:
        value = transform(value)
    return value
