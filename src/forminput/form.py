"""Form instances: values, errors, views and copies."""

from __future__ import annotations

import copy as copy_module
from collections.abc import Callable, Iterable, Mapping
from itertools import groupby
from types import MappingProxyType
from typing import Any, ClassVar, Self

from forminput.exceptions import FrozenFormError, SchemaError, UnknownFieldError
from forminput.fields import BoundField
from forminput.logging import get_logger
from forminput.request import build_query
from forminput.sanitize import import_value
from forminput.schema import Schema
from forminput.typing.enums import ErrorKind
from forminput.typing.models import FieldError
from forminput.typing.protocol import MessageLocalizer, Request

logger = get_logger(__name__)


class Form:
    """Form holding the values of one input transaction.

    Subclasses declare their fields with a schema::

        class SearchForm(Form):
            schema = Schema().required_param("query", "q").param("page", types=int)

    Field values are available both as `form["query"]` and `form.query`. Any write
    invalidates the validation results, which are recomputed lazily on the next
    error query.
    """

    __slots__ = ("_errors", "_fields", "_frozen", "_rewritten", "_values")

    schema: ClassVar[Schema] = Schema()
    localizer: ClassVar[MessageLocalizer | None] = None

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        for name in cls.schema.names:
            if hasattr(cls, name):
                raise SchemaError(message=f"invalid field name {name}")

    def __init__(self, *sources: Mapping[str, Any] | Request) -> None:
        """Create a form, loading each source in turn.

        Plain `dict` sources hold trusted internal values and are set directly; any
        other source is an external request and goes through import.

        Args:
            *sources (Mapping[str, Any] | Request): Values or requests.
        """
        self._values: dict[str, Any] = {}
        self._errors: dict[str, list[FieldError]] | None = None
        self._frozen = False
        self._rewritten: set[str] | None = None
        self._bind_fields()
        for source in sources:
            if type(source) is dict:
                self.set(source)
            else:
                self.import_request(source)
        self._after_load()

    def _bind_fields(self) -> None:
        fields = {spec.name: BoundField(spec).bind(self) for spec in self.schema}
        object.__setattr__(self, "_fields", MappingProxyType(fields))

    def _after_load(self) -> None:
        """Hook run once the constructor sources are loaded."""

    @classmethod
    def from_request(cls, request: Request) -> Self:
        """Create a form from external values."""
        return cls(MappingProxyType(request) if type(request) is dict else request)

    @classmethod
    def from_params(cls, params: Mapping[str, Any]) -> Self:
        """Create a form from external values keyed by field code."""
        return cls(MappingProxyType(dict(params)))

    @classmethod
    def from_dict(cls, values: Mapping[str, Any]) -> Self:
        """Create a form from trusted values keyed by field name."""
        return cls(dict(values))

    # Value access.

    def __getattr__(self, name: str) -> Any:
        if name in type(self).schema:
            return self._values.get(name)
        raise AttributeError(f"{type(self).__name__!r} object has no attribute {name!r}")  # noqa: TRY003

    def __setattr__(self, name: str, value: Any) -> None:
        if name in type(self).schema:
            self[name] = value
        else:
            super().__setattr__(name, value)

    def __getitem__(self, name: str) -> Any:
        self._check_name(name)
        return self._values.get(name)

    def __setitem__(self, name: str, value: Any) -> None:
        """Set a trusted value, invalidating validation results.

        Args:
            name (str): Field name.
            value (Any): Internal value.

        Raises:
            FrozenFormError: If the form is frozen.
        """
        self._check_name(name)
        self._check_mutable("modify")
        if self._rewritten is None:
            self._errors = None
        else:
            # written from a callback during validation
            self._errors.pop(name, None)
            self._rewritten.add(name)
        self._values[name] = value

    def _check_name(self, name: Any) -> str:
        if isinstance(name, BoundField):
            name = name.name
        if name not in self._fields:
            raise UnknownFieldError(name=name)
        return name

    def _check_mutable(self, operation: str) -> None:
        if self._frozen:
            raise FrozenFormError(operation=operation)

    def _resolve_names(self, names: Iterable[Any]) -> list[str]:
        resolved = []
        for name in names:
            if isinstance(name, (list, tuple)):
                resolved.extend(self._resolve_names(name))
            else:
                resolved.append(self._check_name(name))
        return resolved

    def values(self, *names: str) -> list[Any]:
        """Return values of the given fields."""
        return [self[name] for name in self._resolve_names(names)]

    def import_request(self, request: Request) -> Self:
        """Import external values, applying each field's filter and transform.

        Only fields whose code is present in the request are touched.

        Args:
            request (Request): External values keyed by field code.

        Returns:
            Self: The form itself.
        """
        self._check_mutable("import into")
        imported = 0
        for name, field in self._fields.items():
            try:
                raw = request[field.code]
            except KeyError:
                continue
            if raw is None:
                continue
            self[name] = import_value(raw, field.filter, field.transform)
            imported += 1
        logger.debug("Request imported", extra={"form": type(self).__name__, "fields": imported})
        return self

    def set(self, values: Mapping[str, Any] | None = None, **kwargs: Any) -> Self:
        """Set trusted values keyed by field name.

        Args:
            values (Mapping[str, Any] | None): Values to set.
            **kwargs (Any): More values to set.

        Returns:
            Self: The form itself.
        """
        for name, value in {**(values or {}), **kwargs}.items():
            self[name] = value
        return self

    def clear(self, *names: str | BoundField) -> Self:
        """Clear given fields, or all fields."""
        self._check_mutable("clear")
        for name in self._resolve_names(names) if names else list(self._fields):
            self[name] = None
        return self

    def to_dict(self) -> dict[str, Any]:
        """Return values of filled fields keyed by field name."""
        return {field.name: field.value for field in self.filled_fields}

    @property
    def is_empty(self) -> bool:
        """Return whether no field is filled."""
        return not self.filled_fields

    # Wire output.

    def to_wire_params(self) -> dict[str, Any]:
        """Return formatted values of filled fields keyed by field code."""
        return {field.code: field.form_value for field in self.filled_fields}

    def to_query_string(self) -> str:
        """Return the URL query built from filled fields."""
        return build_query(self.to_wire_params())

    def extend_url(self, url: str) -> str:
        """Append the query built from filled fields to a URL.

        Args:
            url (str): Base URL, possibly with a query already.

        Returns:
            str: Extended URL.
        """
        url = str(url)
        query = self.to_query_string()
        if query:
            url += ("&" if "?" in url else "?") + query
        return url

    def build_url(self, url: str, **values: Any) -> str:
        """Return a URL with the current values overridden by the given ones."""
        return self.copy().set(values).extend_url(url)

    # Fields.

    @property
    def fields(self) -> list[BoundField]:
        """Return bound fields in declaration order."""
        return list(self._fields.values())

    @property
    def field_names(self) -> list[str]:
        return list(self._fields)

    def field(self, name: str) -> BoundField:
        """Return the bound field with the given name.

        Raises:
            UnknownFieldError: If there is no such field.
        """
        return self._fields[self._check_name(name)]

    def named_fields(self, *names: str) -> list[BoundField | None]:
        """Return given bound fields, with None for unknown names."""
        return [self._fields.get(name) for name in names]

    def _select(self, predicate: Callable[[BoundField], bool]) -> list[BoundField]:
        return [field for field in self._fields.values() if predicate(field)]

    @property
    def correct_fields(self) -> list[BoundField]:
        return self._select(lambda field: field.is_correct)

    @property
    def incorrect_fields(self) -> list[BoundField]:
        return self._select(lambda field: field.is_incorrect)

    @property
    def blank_fields(self) -> list[BoundField]:
        return self._select(lambda field: field.is_blank)

    @property
    def empty_fields(self) -> list[BoundField]:
        return self._select(lambda field: field.is_empty)

    @property
    def filled_fields(self) -> list[BoundField]:
        return self._select(lambda field: field.is_filled)

    @property
    def required_fields(self) -> list[BoundField]:
        return self._select(lambda field: field.is_required)

    @property
    def optional_fields(self) -> list[BoundField]:
        return self._select(lambda field: field.is_optional)

    @property
    def disabled_fields(self) -> list[BoundField]:
        return self._select(lambda field: field.is_disabled)

    @property
    def enabled_fields(self) -> list[BoundField]:
        return self._select(lambda field: field.is_enabled)

    @property
    def hidden_fields(self) -> list[BoundField]:
        return self._select(lambda field: field.is_hidden)

    @property
    def ignored_fields(self) -> list[BoundField]:
        return self._select(lambda field: field.is_ignored)

    @property
    def visible_fields(self) -> list[BoundField]:
        return self._select(lambda field: field.is_visible)

    @property
    def array_fields(self) -> list[BoundField]:
        return self._select(lambda field: field.is_array)

    @property
    def hash_fields(self) -> list[BoundField]:
        return self._select(lambda field: field.is_hash)

    @property
    def scalar_fields(self) -> list[BoundField]:
        return self._select(lambda field: field.is_scalar)

    @property
    def valid_fields(self) -> list[BoundField]:
        return self._select(lambda field: field.is_valid)

    @property
    def invalid_fields(self) -> list[BoundField]:
        return self._select(lambda field: field.is_invalid)

    def tagged_fields(self, *tags: Any) -> list[BoundField]:
        """Return fields tagged with any of the given tags, or with any tag at all."""
        return self._select(lambda field: field.is_tagged(*tags))

    def untagged_fields(self, *tags: Any) -> list[BoundField]:
        """Return fields tagged with none of the given tags, or with no tag at all."""
        return self._select(lambda field: field.is_untagged(*tags))

    def chunked_fields(self, fields: Iterable[BoundField] | None = None) -> list[BoundField | list[BoundField]]:
        """Group consecutive fields sharing the same `row` option, for display.

        Args:
            fields (Iterable[BoundField] | None): Fields to group, all fields by default.

        Returns:
            list[BoundField | list[BoundField]]: Single fields, and lists of fields sharing a row.
        """
        chunks: list[BoundField | list[BoundField]] = []
        for row, group in groupby(self.fields if fields is None else fields, key=lambda field: field.option("row")):
            items = list(group)
            if row is None:
                chunks.extend(items)
            else:
                chunks.append(items if len(items) > 1 else items[0])
        return chunks

    # Views and copies.

    def _duplicate(self) -> Self:
        """Create an instance sharing nothing mutable with this one, bypassing the constructor."""
        result = object.__new__(type(self))
        object.__setattr__(result, "_values", dict(self._values))
        object.__setattr__(result, "_errors", None)
        object.__setattr__(result, "_frozen", False)
        object.__setattr__(result, "_rewritten", None)
        result._bind_fields()
        return result

    def clone(self) -> Self:
        """Return a copy keeping the validation results and the frozen state."""
        result = self._duplicate()
        if self._errors is not None:
            object.__setattr__(result, "_errors", {name: list(errors) for name, errors in self._errors.items()})
        object.__setattr__(result, "_frozen", self._frozen)
        return result

    def copy(self) -> Self:
        """Return an unfrozen copy which will be validated afresh."""
        return self._duplicate()

    def snapshot(self) -> Self:
        """Return a frozen deep copy of the current values and validation results."""
        self.ensure_validated()
        result = self.clone()
        object.__setattr__(result, "_values", copy_module.deepcopy(self._values))
        object.__setattr__(result, "_frozen", False)
        return result.freeze()

    def without(self, *names: str | BoundField) -> Self:
        """Return a copy with the given fields cleared."""
        result = self.copy()
        for name in self._resolve_names(names):
            result[name] = None
        return result

    def only(self, *names: str | BoundField) -> Self:
        """Return a copy with all fields but the given ones cleared."""
        keep = set(self._resolve_names(names))
        result = self.copy()
        for name in self._fields:
            if name not in keep:
                result[name] = None
        return result

    def freeze(self) -> Self:
        """Validate one last time and make the form immutable."""
        if not self._frozen:
            self.ensure_validated()
            self._frozen = True
            logger.debug("Form frozen", extra={"form": type(self).__name__})
        return self

    @property
    def is_frozen(self) -> bool:
        return self._frozen

    # Errors.

    def _stored_errors(self) -> dict[str, list[FieldError]]:
        if self._errors is None:
            self._errors = {}
            self.validate()
        return self._errors

    def error_details(self) -> dict[str, list[FieldError]]:
        """Return error records per field name, in declaration order."""
        errors = self._stored_errors()
        return {name: list(errors[name]) for name in self._fields if errors.get(name)}

    def errors(self) -> dict[str, list[str]]:
        """Return error messages per field name, in declaration order."""
        return {name: [error.message for error in errors] for name, errors in self.error_details().items()}

    def error_messages(self) -> list[str]:
        """Return the first error message of each invalid field."""
        return [messages[0] for messages in self.errors().values()]

    def errors_for(self, name: str | BoundField) -> list[str]:
        """Return error messages of one field, empty if it is valid."""
        name = self._check_name(name)
        return [error.message for error in self._stored_errors().get(name, [])]

    def error_for(self, name: str | BoundField) -> str | None:
        """Return the first error message of one field, or None."""
        errors = self.errors_for(name)
        return errors[0] if errors else None

    def error_kinds(self, name: str | BoundField) -> list[ErrorKind]:
        """Return error kinds of one field, empty if it is valid."""
        name = self._check_name(name)
        return [error.kind for error in self._stored_errors().get(name, [])]

    def _add_error(self, name: str, message: FieldError | str, *, first: bool) -> None:
        name = self._check_name(name)
        errors = self._stored_errors()
        self._check_mutable("report errors on")
        if not isinstance(message, FieldError):
            message = FieldError(field=name, kind=ErrorKind.CUSTOM, message=str(message))
        entries = errors.setdefault(name, [])
        if first:
            entries.insert(0, message)
        else:
            entries.append(message)

    def report(self, name: str | BoundField, message: FieldError | str) -> Self:
        """Record an error after the ones already reported for the field.

        Args:
            name (str | BoundField): Field name.
            message (FieldError | str): Error record, or final message text.

        Returns:
            Self: The form itself.
        """
        self._add_error(name, message, first=False)
        return self

    def report_first(self, name: str | BoundField, message: FieldError | str) -> Self:
        """Record an error before the ones already reported for the field. See `report`."""
        self._add_error(name, message, first=True)
        return self

    def is_valid(self, *names: str | BoundField) -> bool:
        """Return whether the form, or all given fields, have no errors."""
        if not names:
            return not self.error_details()
        return all(not self.errors_for(name) for name in self._resolve_names(names))

    def is_invalid(self, *names: str | BoundField) -> bool:
        return not self.is_valid(*names)

    def valid_values(self, *names: str | BoundField) -> list[Any] | None:
        """Return values of the given fields if they are all valid, None otherwise."""
        resolved = self._resolve_names(names)
        return [self[name] for name in resolved] if self.is_valid(*resolved) else None

    def validate(self) -> Self:
        """Validate fields not found invalid yet, keeping errors already reported.

        Override to add form level checks, calling the parent method first.

        Returns:
            Self: The form itself.
        """
        if self._frozen or self._rewritten is not None:
            return self
        errors = self._errors if self._errors is not None else {}
        self._errors = errors
        self._rewritten = set()
        try:
            for field in self._fields.values():
                field.validate()
            rewritten, self._rewritten = self._rewritten, set()
            for name in rewritten:
                self._fields[name].validate()
        finally:
            self._rewritten = None
        logger.debug(
            "Form validated",
            extra={"form": type(self).__name__, "invalid": sum(1 for entries in errors.values() if entries)},
        )
        return self

    def revalidate(self) -> Self:
        """Drop all errors and validate again."""
        self._check_mutable("revalidate")
        self._errors = {}
        return self.validate()

    def ensure_validated(self) -> Self:
        """Validate unless validation results are up to date."""
        if self._errors is None:
            self.validate()
        return self
