"""Project enums."""

from __future__ import annotations

from enum import StrEnum


class _EnumMixin(StrEnum):
    """Shared conversion helpers for user-facing enums."""

    @classmethod
    def from_str(cls, value: str) -> _EnumMixin:
        """Parse enum from string.

        Args:
            value: Raw string value.

        Raises:
            ValueError: If the value is not supported.

        Returns:
            _EnumMixin: Parsed enum value.
        """
        try:
            return cls(value)
        except ValueError as exc:
            supported = ", ".join(member.value for member in cls)
            message = f"Unsupported {cls.__name__} value '{value}'. Expected one of: {supported}"
            raise ValueError(message) from exc

    def to_str(self) -> str:
        """Return string representation.

        Returns:
            str: Enum string value.
        """
        return self.value


class FieldKind(_EnumMixin):
    """Container kind of a field value."""

    SCALAR = "scalar"
    ARRAY = "array"
    HASH = "hash"


class FieldType(_EnumMixin):
    """Presentation type of a field.

    Only `hidden` and `ignore` change engine behavior; the rest are hints for renderers.
    """

    TEXT = "text"
    HIDDEN = "hidden"
    IGNORE = "ignore"
    PASSWORD = "password"  # noqa: S105
    EMAIL = "email"
    SELECT = "select"
    CHECKBOX = "checkbox"
    TEXTAREA = "textarea"


class ErrorCategory(_EnumMixin):
    """Coarse error taxonomy shared by several error kinds."""

    REQUIRED = "required"
    WRONG_CONTAINER_SHAPE = "wrong-container-shape"
    INVALID_KEY = "invalid-key"
    KEY_OUT_OF_RANGE = "key-out-of-range"
    COUNT_OUT_OF_RANGE = "count-out-of-range"
    WRONG_VALUE_TYPE = "wrong-value-type"
    INVALID_ENCODING = "invalid-encoding"
    INVALID_CHARACTERS = "invalid-characters"
    SIZE_OUT_OF_RANGE = "size-out-of-range"
    PATTERN_REJECTED = "pattern-rejected"
    PATTERN_NOT_MATCHED = "pattern-not-matched"
    NUMERIC_OUT_OF_RANGE = "numeric-out-of-range"
    CUSTOM_CHECK_FAILED = "custom-check-failed"


class ErrorKind(_EnumMixin):
    """Symbolic kind of a single validation error."""

    REQUIRED_SCALAR = "required_scalar"
    REQUIRED_ARRAY = "required_array"
    NOT_ARRAY = "not_array"
    NOT_HASH = "not_hash"
    NOT_STRING = "not_string"
    MATCH_KEY = "match_key"
    INVALID_KEY = "invalid_key"
    MIN_KEY = "min_key"
    MAX_KEY = "max_key"
    MIN_COUNT = "min_count"
    MAX_COUNT = "max_count"
    VALUE_TYPE = "value_type"
    ELEMENT_TYPE = "element_type"
    MIN_LIMIT = "min_limit"
    MAX_LIMIT = "max_limit"
    INF_LIMIT = "inf_limit"
    SUP_LIMIT = "sup_limit"
    INVALID_ENCODING = "invalid_encoding"
    INVALID_CHARACTERS = "invalid_characters"
    MIN_SIZE = "min_size"
    MAX_SIZE = "max_size"
    MIN_BYTESIZE = "min_bytesize"
    MAX_BYTESIZE = "max_bytesize"
    REJECT_MSG = "reject_msg"
    MATCH_MSG = "match_msg"
    CUSTOM = "custom"

    @property
    def category(self) -> ErrorCategory:
        """Return the coarse category of this kind.

        Returns:
            ErrorCategory: Category shared with related kinds.
        """
        return _CATEGORIES[self]

    @property
    def default_message(self) -> str:
        """Return the built-in message template, with `%p` standing for the field title.

        Returns:
            str: Message template.
        """
        return DEFAULT_ERROR_MESSAGES[self]


_CATEGORIES: dict[ErrorKind, ErrorCategory] = {
    ErrorKind.REQUIRED_SCALAR: ErrorCategory.REQUIRED,
    ErrorKind.REQUIRED_ARRAY: ErrorCategory.REQUIRED,
    ErrorKind.NOT_ARRAY: ErrorCategory.WRONG_CONTAINER_SHAPE,
    ErrorKind.NOT_HASH: ErrorCategory.WRONG_CONTAINER_SHAPE,
    ErrorKind.NOT_STRING: ErrorCategory.WRONG_VALUE_TYPE,
    ErrorKind.MATCH_KEY: ErrorCategory.INVALID_KEY,
    ErrorKind.INVALID_KEY: ErrorCategory.INVALID_KEY,
    ErrorKind.MIN_KEY: ErrorCategory.KEY_OUT_OF_RANGE,
    ErrorKind.MAX_KEY: ErrorCategory.KEY_OUT_OF_RANGE,
    ErrorKind.MIN_COUNT: ErrorCategory.COUNT_OUT_OF_RANGE,
    ErrorKind.MAX_COUNT: ErrorCategory.COUNT_OUT_OF_RANGE,
    ErrorKind.VALUE_TYPE: ErrorCategory.WRONG_VALUE_TYPE,
    ErrorKind.ELEMENT_TYPE: ErrorCategory.WRONG_VALUE_TYPE,
    ErrorKind.MIN_LIMIT: ErrorCategory.NUMERIC_OUT_OF_RANGE,
    ErrorKind.MAX_LIMIT: ErrorCategory.NUMERIC_OUT_OF_RANGE,
    ErrorKind.INF_LIMIT: ErrorCategory.NUMERIC_OUT_OF_RANGE,
    ErrorKind.SUP_LIMIT: ErrorCategory.NUMERIC_OUT_OF_RANGE,
    ErrorKind.INVALID_ENCODING: ErrorCategory.INVALID_ENCODING,
    ErrorKind.INVALID_CHARACTERS: ErrorCategory.INVALID_CHARACTERS,
    ErrorKind.MIN_SIZE: ErrorCategory.SIZE_OUT_OF_RANGE,
    ErrorKind.MAX_SIZE: ErrorCategory.SIZE_OUT_OF_RANGE,
    ErrorKind.MIN_BYTESIZE: ErrorCategory.SIZE_OUT_OF_RANGE,
    ErrorKind.MAX_BYTESIZE: ErrorCategory.SIZE_OUT_OF_RANGE,
    ErrorKind.REJECT_MSG: ErrorCategory.PATTERN_REJECTED,
    ErrorKind.MATCH_MSG: ErrorCategory.PATTERN_NOT_MATCHED,
    ErrorKind.CUSTOM: ErrorCategory.CUSTOM_CHECK_FAILED,
}

DEFAULT_ERROR_MESSAGES: dict[ErrorKind, str] = {
    ErrorKind.REQUIRED_SCALAR: "%p is required",
    ErrorKind.REQUIRED_ARRAY: "%p are required",
    ErrorKind.NOT_ARRAY: "%p are not an array",
    ErrorKind.NOT_HASH: "%p are not a hash",
    ErrorKind.NOT_STRING: "%p is not a string",
    ErrorKind.MATCH_KEY: "%p contain invalid key",
    ErrorKind.INVALID_KEY: "%p contain invalid key",
    ErrorKind.MIN_KEY: "%p contain too small key",
    ErrorKind.MAX_KEY: "%p contain too large key",
    ErrorKind.MIN_COUNT: "%p must have at least",
    ErrorKind.MAX_COUNT: "%p may have at most",
    ErrorKind.VALUE_TYPE: "%p like this is not valid",
    ErrorKind.ELEMENT_TYPE: "%p contain invalid value",
    ErrorKind.MIN_LIMIT: "%p must be at least",
    ErrorKind.MAX_LIMIT: "%p may be at most",
    ErrorKind.INF_LIMIT: "%p must be greater than",
    ErrorKind.SUP_LIMIT: "%p must be less than",
    ErrorKind.INVALID_ENCODING: "%p must use valid encoding",
    ErrorKind.INVALID_CHARACTERS: "%p may not contain invalid characters",
    ErrorKind.MIN_SIZE: "%p must have at least",
    ErrorKind.MAX_SIZE: "%p may have at most",
    ErrorKind.MIN_BYTESIZE: "%p must have at least",
    ErrorKind.MAX_BYTESIZE: "%p may have at most",
    ErrorKind.REJECT_MSG: "%p like this is not allowed",
    ErrorKind.MATCH_MSG: "%p like this is not valid",
    ErrorKind.CUSTOM: "%p is not valid",
}
