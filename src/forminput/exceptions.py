"""Package exceptions.

User input problems are never raised: they are accumulated as field errors.
The exceptions below signal bugs in the calling code.
"""

from __future__ import annotations

from dataclasses import dataclass


class PackageError(Exception):
    """Root exception for the package."""


@dataclass(frozen=True)
class SettingsError(PackageError):
    """Raised when settings cannot be loaded or validated."""

    message: str = "Failed to load settings"
    exc: BaseException | None = None

    def __str__(self) -> str:
        """Return error message payload."""
        return f"{self.message}: {self.exc}" if self.exc else self.message


@dataclass(frozen=True)
class SchemaError(PackageError, ValueError):
    """Raised when a schema definition is malformed."""

    message: str

    def __str__(self) -> str:
        """Return error message payload."""
        return self.message


@dataclass(frozen=True)
class UnknownFieldError(PackageError, KeyError):
    """Raised when a field name is not part of the form schema."""

    name: object

    def __str__(self) -> str:
        """Return error message payload."""
        return f"unknown field {self.name!r}"


@dataclass(frozen=True)
class FieldBindingError(PackageError):
    """Raised when a field is bound to a form more than once."""

    name: str

    def __str__(self) -> str:
        """Return error message payload."""
        return f"field {self.name!r} is already bound"


@dataclass(frozen=True)
class FrozenFormError(PackageError, RuntimeError):
    """Raised when a frozen form is mutated."""

    operation: str

    def __str__(self) -> str:
        """Return error message payload."""
        return f"cannot {self.operation} a frozen form"


@dataclass(frozen=True)
class SanitizeError(PackageError, TypeError):
    """Raised when request input has a type no transport should produce."""

    value_type: str

    def __str__(self) -> str:
        """Return error message payload."""
        return f"unexpected parameter type {self.value_type}"


@dataclass(frozen=True)
class InvalidStepError(PackageError, ValueError):
    """Raised when a step name is not one of the declared steps."""

    step: object

    def __str__(self) -> str:
        """Return error message payload."""
        return f"invalid step name {self.step!r}"
