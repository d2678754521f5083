"""Field definition model."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from types import MappingProxyType
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from forminput.typing.enums import FieldKind

CALLBACK_OPTIONS = frozenset({"filter", "transform", "format", "check", "test"})


class FieldSpec(BaseModel):
    """Immutable description of one form field.

    `name` is the key used in code, `code` the key used on the wire. Constraints,
    presentation hints and callbacks all live in `options`; read them through a
    bound field to get dynamic options resolved.
    """

    model_config = ConfigDict(extra="forbid", frozen=True, arbitrary_types_allowed=True)

    name: str
    code: str
    kind: FieldKind = FieldKind.SCALAR
    options: Mapping[str, Any] = Field(default_factory=dict, validate_default=True)

    @field_validator("name", "code")
    @classmethod
    def _validate_identifier(cls, value: str) -> str:
        """Ensure names and codes are usable keys.

        Args:
            value (str): Field name or code.

        Raises:
            ValueError: If the value is empty.

        Returns:
            str: Validated value.
        """
        if not value:
            raise ValueError("field name and code must not be empty")  # noqa: TRY003
        return value

    @field_validator("options")
    @classmethod
    def _freeze_options(cls, value: Mapping[str, Any]) -> Mapping[str, Any]:
        """Wrap options in a read-only view, as specs are shared by all forms of a schema."""
        return MappingProxyType(dict(value))

    @property
    def is_array(self) -> bool:
        """Return whether the field holds a list."""
        return self.kind is FieldKind.ARRAY

    @property
    def is_hash(self) -> bool:
        """Return whether the field holds a mapping."""
        return self.kind is FieldKind.HASH

    @property
    def is_scalar(self) -> bool:
        """Return whether the field holds a single value."""
        return self.kind is FieldKind.SCALAR

    @property
    def filter(self) -> Callable[[Any], Any] | None:
        """Return the per-value input filter."""
        return self.options.get("filter")

    @property
    def transform(self) -> Callable[[Any], Any] | None:
        """Return the whole-value input transform."""
        return self.options.get("transform")

    @property
    def format(self) -> Callable[[Any], Any] | None:
        """Return the output formatter."""
        return self.options.get("format")

    def derive(self, *, name: str | None = None, code: str | None = None, **overrides: Any) -> FieldSpec:
        """Create a copy of this spec with a new identity and overridden options.

        The code follows a new name unless given explicitly. Passing `kind` changes the container kind.

        Args:
            name (str | None): New field name.
            code (str | None): New field code.
            **overrides (Any): Options replacing the source options.

        Returns:
            FieldSpec: The derived spec.
        """
        kind = overrides.pop("kind", self.kind)
        return FieldSpec(
            name=name or self.name,
            code=code or name or self.code,
            kind=kind,
            options={**self.options, **overrides},
        )
