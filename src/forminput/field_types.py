"""Option presets for commonly used field types.

Presets are plain option mappings meant to be unpacked into field definitions::

    schema = Schema().param("age", **INTEGER, min=18).param("since", **EU_DATE)

Filters keep the original text when it can't be converted, so validation reports
a type error for it instead of silently dropping the input.
"""

from __future__ import annotations

import re
from datetime import UTC, datetime
from typing import Any

from forminput.sanitize import ASCII_WHITESPACE, parse_integer
from forminput.typing.enums import FieldType

SIMPLE_EMAIL_RE = re.compile(r"\A[-_.=+%a-z0-9]+@(?:[-_a-z0-9]+\.)+[a-z]{2,4}\Z", re.IGNORECASE)
ZIP_CODE_RE = re.compile(r"\A[A-Z\d]++(?:[- ]?[A-Z\d]+)*+\Z", re.IGNORECASE)
PHONE_NUMBER_RE = re.compile(r"\A\+?\d++(?:[- ]?(?:\d+|\(\d+\)))*+(?:[- ]?[A-Z\d]+)*+\Z", re.IGNORECASE)

_FLOAT_RE = re.compile(r"[-+]?[0-9]+(?:_[0-9]+)*(?:\.[0-9]+(?:_[0-9]+)*)?(?:[eE][-+]?[0-9]+)?")
_PHONE_SEPARATOR = re.compile(r"[ \t\n\v\f\r]*[-/.][ \t\n\v\f\r]*")
_WHITESPACE_RUN = re.compile(r"[ \t\n\v\f\r]+")
_FORMAT_MODIFIER = re.compile(r"%[-_^]?(.)")

TIME_FORMAT = "%Y-%m-%d %H:%M:%S"
TIME_FORMAT_EXAMPLE = "YYYY-MM-DD HH:MM:SS"
US_DATE_FORMAT = "%m/%d/%Y"
US_DATE_FORMAT_EXAMPLE = "MM/DD/YYYY"
UK_DATE_FORMAT = "%d/%m/%Y"
UK_DATE_FORMAT_EXAMPLE = "DD/MM/YYYY"
EU_DATE_FORMAT = "%-d.%-m.%Y"
EU_DATE_FORMAT_EXAMPLE = "D.M.YYYY"
HOURS_FORMAT = "%H:%M"
HOURS_FORMAT_EXAMPLE = "HH:MM"

SECONDS_PER_DAY = 86400


def _filter_integer(value: str) -> Any:
    if not value:
        return None
    number = parse_integer(value)
    return value if number is None else number


def _filter_float(value: str) -> Any:
    if not value:
        return None
    stripped = value.strip(ASCII_WHITESPACE)
    if not _FLOAT_RE.fullmatch(stripped):
        return value
    return float(stripped.replace("_", ""))


def _filter_bool(value: str) -> bool | None:
    return value == "true" if value else None


def _filter_checkbox(value: str) -> bool:
    return bool(value)


def _format_checkbox(value: Any) -> Any:
    return value if value else None


def normalize_phone(value: str) -> str:
    """Unify phone number separators to dashes and squeeze whitespace.

    Args:
        value (str): Raw phone number.

    Returns:
        str: Normalized phone number.
    """
    dashed = _PHONE_SEPARATOR.sub("-", value)
    return _WHITESPACE_RUN.sub(" ", dashed).strip(ASCII_WHITESPACE)


def parse_time(value: str, time_format: str) -> datetime:
    """Parse UTC time in the given format, rejecting trailing garbage.

    Padding modifiers like `%-d` are accepted so one format serves both parsing and formatting.

    Args:
        value (str): Text to parse.
        time_format (str): `strftime` style format.

    Raises:
        ValueError: If the text does not match the format.

    Returns:
        datetime: Timezone aware UTC time.
    """
    plain_format = _FORMAT_MODIFIER.sub(r"%\1", time_format)
    return datetime.strptime(value, plain_format).replace(tzinfo=UTC)  # noqa: DTZ007


def format_time(value: datetime, time_format: str) -> str:
    """Format time as UTC in the given format.

    Args:
        value (datetime): Time, naive values being taken as UTC.
        time_format (str): `strftime` style format, with `%-d` and `%-m` for unpadded day and month.

    Returns:
        str: Formatted time.
    """
    value = value.replace(tzinfo=UTC) if value.tzinfo is None else value.astimezone(UTC)
    time_format = time_format.replace("%-d", str(value.day)).replace("%-m", str(value.month))
    return value.strftime(time_format)


def _time_filter(time_format: str) -> Any:
    def _filter(value: str) -> Any:
        if not value:
            return None
        try:
            return parse_time(value, time_format)
        except ValueError:
            pass
        try:
            parsed = datetime.fromisoformat(value)
        except ValueError:
            return value
        return parsed.replace(tzinfo=UTC) if parsed.tzinfo is None else parsed

    return _filter


def _time_format(time_format: str) -> Any:
    def _format(value: Any) -> Any:
        return format_time(value, time_format) if isinstance(value, datetime) else value

    return _format


def _filter_hours(value: str) -> Any:
    if not value:
        return None
    try:
        parsed = parse_time(value, HOURS_FORMAT)
    except ValueError:
        return value
    return (parsed.hour * 3600 + parsed.minute * 60) % SECONDS_PER_DAY


def _format_hours(value: Any) -> Any:
    if not isinstance(value, int) or isinstance(value, bool):
        return value
    hours, seconds = divmod(value % SECONDS_PER_DAY, 3600)
    return f"{hours:02d}:{seconds // 60:02d}"


def prune(value: Any) -> Any:
    """Drop empty entries from lists and mappings, and turn empty text into None.

    Args:
        value (Any): Sanitized value.

    Returns:
        Any: Pruned value.
    """

    def _is_empty(item: Any) -> bool:
        return item is None or (isinstance(item, (str, bytes, list, tuple, dict)) and not item)

    if isinstance(value, list):
        return [item for item in value if not _is_empty(item)]
    if isinstance(value, dict):
        return {key: item for key, item in value.items() if not _is_empty(item)}
    if isinstance(value, (str, bytes)):
        return value or None
    return value


INTEGER: dict[str, Any] = {"filter": _filter_integer, "types": int}
FLOAT: dict[str, Any] = {"filter": _filter_float, "types": float}
BOOL: dict[str, Any] = {
    "type": FieldType.SELECT,
    "data": [(True, "Yes"), (False, "No")],
    "filter": _filter_bool,
    "types": bool,
}
CHECKBOX: dict[str, Any] = {
    "type": FieldType.CHECKBOX,
    "filter": _filter_checkbox,
    "format": _format_checkbox,
    "types": bool,
}

EMAIL: dict[str, Any] = {"type": FieldType.EMAIL, "match": SIMPLE_EMAIL_RE}
ZIP: dict[str, Any] = {"match": ZIP_CODE_RE}
PHONE: dict[str, Any] = {"filter": normalize_phone, "match": PHONE_NUMBER_RE}

TIME: dict[str, Any] = {
    "placeholder": TIME_FORMAT_EXAMPLE,
    "filter": _time_filter(TIME_FORMAT),
    "format": _time_format(TIME_FORMAT),
    "types": datetime,
}
US_DATE: dict[str, Any] = {
    "placeholder": US_DATE_FORMAT_EXAMPLE,
    "filter": _time_filter(US_DATE_FORMAT),
    "format": _time_format(US_DATE_FORMAT),
    "types": datetime,
}
UK_DATE: dict[str, Any] = {
    "placeholder": UK_DATE_FORMAT_EXAMPLE,
    "filter": _time_filter(UK_DATE_FORMAT),
    "format": _time_format(UK_DATE_FORMAT),
    "types": datetime,
}
EU_DATE: dict[str, Any] = {
    "placeholder": EU_DATE_FORMAT_EXAMPLE,
    "filter": _time_filter(EU_DATE_FORMAT),
    "format": _time_format(EU_DATE_FORMAT),
    "types": datetime,
}
HOURS: dict[str, Any] = {
    "placeholder": HOURS_FORMAT_EXAMPLE,
    "filter": _filter_hours,
    "format": _format_hours,
    "types": int,
}

PRUNED: dict[str, Any] = {"transform": prune}
