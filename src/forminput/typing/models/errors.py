"""Validation error models."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from forminput.typing.enums import ErrorCategory, ErrorKind


class FieldError(BaseModel):
    """One error reported for a field."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    field: str
    kind: ErrorKind
    message: str

    @property
    def category(self) -> ErrorCategory:
        """Return the coarse category of the error."""
        return self.kind.category

    def __str__(self) -> str:
        """Return the message text."""
        return self.message
