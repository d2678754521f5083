"""Typing-centric domain modules."""

from forminput.typing.enums import ErrorCategory, ErrorKind, FieldKind, FieldType
from forminput.typing.models import CALLBACK_OPTIONS, FieldError, FieldSpec
from forminput.typing.protocol import MessageLocalizer, Request

__all__ = [
    "CALLBACK_OPTIONS",
    "ErrorCategory",
    "ErrorKind",
    "FieldError",
    "FieldKind",
    "FieldSpec",
    "FieldType",
    "MessageLocalizer",
    "Request",
]
