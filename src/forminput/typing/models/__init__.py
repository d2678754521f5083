"""Core domain model exports."""

from forminput.typing.models.errors import FieldError
from forminput.typing.models.field import CALLBACK_OPTIONS, FieldSpec

__all__ = [
    "CALLBACK_OPTIONS",
    "FieldError",
    "FieldSpec",
]
