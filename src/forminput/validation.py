"""Ordered validation pipeline for bound fields.

Each field is validated independently and the pipeline stops at the first error
reported for it. Errors are reported through the field, never raised.
"""

from __future__ import annotations

import re
import unicodedata
from collections.abc import Mapping
from datetime import date, datetime
from typing import TYPE_CHECKING, Any

from forminput.sanitize import TEXT_ENCODING
from forminput.typing.enums import ErrorKind

if TYPE_CHECKING:
    from forminput.fields import BoundField

ALLOWED_WHITESPACE = frozenset(" \t\r\n")

# Unicode categories outside the printable graph: controls, surrogates, unassigned, separators.
_NON_GRAPHIC_CATEGORIES = frozenset({"Cc", "Cs", "Cn", "Zs", "Zl", "Zp"})

_FLOAT_PREFIX = re.compile(
    r"[ \t\n\v\f\r]*"
    r"([-+]?(?:[0-9]+(?:_[0-9]+)*(?:\.[0-9]+(?:_[0-9]+)*)?|\.[0-9]+(?:_[0-9]+)*)(?:[eE][-+]?[0-9]+)?)",
)

ARRAY_TYPES = (list, tuple)


def instance_of(value: Any, types: tuple[type, ...]) -> bool:
    """Return whether the value is an instance of one of the accepted types.

    Booleans do not count as integers unless `bool` (or a non-numeric base) is accepted.

    Args:
        value (Any): Value to test.
        types (tuple[type, ...]): Accepted types.

    Returns:
        bool: True if the value is accepted.
    """
    if isinstance(value, bool):
        return any(issubclass(bool, kind) and kind is not int for kind in types)
    return isinstance(value, types)


def as_types(value: Any) -> tuple[type, ...] | None:
    """Normalize a resolved `types` option."""
    if value is None:
        return None
    if isinstance(value, type):
        return (value,)
    return tuple(value)


def as_patterns(value: Any) -> tuple[re.Pattern[str], ...]:
    """Normalize a resolved pattern option into compiled patterns."""
    if value is None:
        return ()
    items = value if isinstance(value, (list, tuple)) else (value,)
    return tuple(re.compile(item) if isinstance(item, str) else item for item in items)


def is_allowed_text(text: str) -> bool:
    """Return whether text holds only printable characters, spaces, tabs and line breaks.

    Args:
        text (str): Decoded text.

    Returns:
        bool: True if every character is allowed.
    """
    for char in text:
        if char in ALLOWED_WHITESPACE:
            continue
        if unicodedata.category(char) in _NON_GRAPHIC_CATEGORIES:
            return False
    return True


def to_float(value: Any) -> float:
    """Convert a value to float for numeric bound checks.

    Text is read up to the first character which can't be part of a number, and
    text without a leading number counts as zero.

    Args:
        value (Any): Value to convert.

    Returns:
        float: Numeric value.
    """
    if isinstance(value, str):
        match = _FLOAT_PREFIX.match(value)
        return float(match.group(1).replace("_", "")) if match else 0.0
    if isinstance(value, datetime):
        return value.timestamp()
    if isinstance(value, date):
        return float(value.toordinal())
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


class FieldValidator:
    """Run the validation pipeline for one bound field."""

    def __init__(self, field: BoundField) -> None:
        self.field = field

    def run(self) -> None:
        """Validate the field, unless errors were reported for it already."""
        field = self.field
        if field.is_invalid:
            return

        if field.is_required and field.is_empty:
            kind = ErrorKind.REQUIRED_SCALAR if field.is_scalar else ErrorKind.REQUIRED_ARRAY
            field.report(field.option("required_msg") or kind, kind=kind)
            return

        if field.is_empty and field.is_correct:
            return

        value = field.value
        if field.is_array:
            passed = self._validate_array(value)
        elif field.is_hash:
            passed = self._validate_hash(value)
        else:
            passed = self._validate_value(value)
        if not passed:
            return

        check = field.options.get("check")
        if check:
            check(field)

    def _validate_array(self, value: Any) -> bool:
        if not isinstance(value, ARRAY_TYPES):
            self.field.report(ErrorKind.NOT_ARRAY)
            return False
        if not self._validate_count(value):
            return False
        return all(self._validate_value(item) for item in value)

    def _validate_hash(self, value: Any) -> bool:
        if not isinstance(value, Mapping):
            self.field.report(ErrorKind.NOT_HASH)
            return False
        if not self._validate_count(value):
            return False
        return all(self._validate_key(key) and self._validate_value(item) for key, item in value.items())

    def _validate_key(self, key: Any) -> bool:
        field = self.field

        patterns = field.option("match_key")
        if patterns is not None:
            if not all(pattern.search(str(key)) for pattern in as_patterns(patterns)):
                field.report(ErrorKind.MATCH_KEY)
                return False
            return True

        if not isinstance(key, int) or isinstance(key, bool):
            field.report(ErrorKind.INVALID_KEY)
            return False

        limit = field.option("min_key")
        if limit is not None and key < limit:
            field.report(ErrorKind.MIN_KEY)
            return False

        limit = field.option("max_key")
        if limit is not None and key > limit:
            field.report(ErrorKind.MAX_KEY)
            return False

        return True

    def _validate_count(self, value: Any) -> bool:
        field = self.field

        limit = field.option("min_count")
        if limit is not None and len(value) < limit:
            field.report(ErrorKind.MIN_COUNT, limit, "element")
            return False

        limit = field.option("max_count")
        if limit is not None and len(value) > limit:
            field.report(ErrorKind.MAX_COUNT, limit, "element")
            return False

        return True

    def _validate_value(self, value: Any) -> bool:
        field = self.field

        types = as_types(field.option("types"))
        if types and types != (str,):
            if not instance_of(value, types):
                field.report(ErrorKind.VALUE_TYPE if field.is_scalar else ErrorKind.ELEMENT_TYPE)
                return False
        elif not self._validate_string(value):
            return False

        if not self._validate_limits(value):
            return False

        test = field.options.get("test")
        if test:
            test(field, value)
            if field.is_invalid:
                return False

        return True

    def _validate_limits(self, value: Any) -> bool:
        field = self.field
        number = to_float(value)

        limit = field.option("min")
        if limit is not None and number < to_float(limit):
            field.report(ErrorKind.MIN_LIMIT, limit)
            return False

        limit = field.option("max")
        if limit is not None and number > to_float(limit):
            field.report(ErrorKind.MAX_LIMIT, limit)
            return False

        limit = field.option("inf")
        if limit is not None and number <= to_float(limit):
            field.report(ErrorKind.INF_LIMIT, limit)
            return False

        limit = field.option("sup")
        if limit is not None and number >= to_float(limit):
            field.report(ErrorKind.SUP_LIMIT, limit)
            return False

        return True

    def _validate_string(self, value: Any) -> bool:
        """Validate text encoding, characters, sizes and patterns.

        Args:
            value (Any): Scalar value or container element.

        Returns:
            bool: True if the value passed.
        """
        field = self.field

        if isinstance(value, (bytes, bytearray)):
            if not value.isascii():
                field.report(ErrorKind.INVALID_ENCODING)
                return False
            value = value.decode("ascii")
        elif not isinstance(value, str):
            field.report(ErrorKind.NOT_STRING if field.is_scalar else ErrorKind.ELEMENT_TYPE)
            return False

        try:
            bytesize = len(value.encode(TEXT_ENCODING))
        except UnicodeEncodeError:
            field.report(ErrorKind.INVALID_ENCODING)
            return False

        if not is_allowed_text(value):
            field.report(ErrorKind.INVALID_CHARACTERS)
            return False

        limit = field.option("min_size")
        if limit is not None and len(value) < limit:
            field.report(ErrorKind.MIN_SIZE, limit, "character")
            return False

        limit = field.option("min_bytesize")
        if limit is not None and bytesize < limit:
            field.report(ErrorKind.MIN_BYTESIZE, limit, "byte")
            return False

        limit = field.option("max_size")
        if limit is not None and len(value) > limit:
            field.report(ErrorKind.MAX_SIZE, limit, "character")
            return False

        limit = field.option("max_bytesize")
        if limit is not None and bytesize > limit:
            field.report(ErrorKind.MAX_BYTESIZE, limit, "byte")
            return False

        patterns = as_patterns(field.option("reject"))
        if any(pattern.search(value) for pattern in patterns):
            message = field.option("reject_msg") or field.option("msg")
            field.report(message or ErrorKind.REJECT_MSG, kind=ErrorKind.REJECT_MSG)
            return False

        patterns = as_patterns(field.option("match"))
        if not all(pattern.search(value) for pattern in patterns):
            message = field.option("match_msg") or field.option("msg")
            field.report(message or ErrorKind.MATCH_MSG, kind=ErrorKind.MATCH_MSG)
            return False

        return True
