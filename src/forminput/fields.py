"""Fields bound to form instances."""

from __future__ import annotations

import re
from collections.abc import Callable, Mapping
from typing import TYPE_CHECKING, Any

from forminput.exceptions import FieldBindingError
from forminput.sanitize import ASCII_WHITESPACE
from forminput.typing.enums import ErrorKind, FieldKind, FieldType
from forminput.typing.models import CALLBACK_OPTIONS, FieldError, FieldSpec
from forminput.validation import ARRAY_TYPES, FieldValidator, as_types, instance_of

if TYPE_CHECKING:
    from forminput.form import Form


def is_dynamic_option(value: Any) -> bool:
    """Return whether an option value must be resolved by calling it with the field.

    Args:
        value (Any): Raw option value.

    Returns:
        bool: True for plain callables.
    """
    return callable(value) and not isinstance(value, (type, re.Pattern))


def to_text(value: Any) -> Any:
    """Convert a value to its wire text.

    Raw bytes are passed through so invalid input can be echoed back.

    Args:
        value (Any): Value to convert.

    Returns:
        Any: Text, or the original bytes.
    """
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (str, bytes)):
        return value
    return str(value)


def _as_list(value: Any) -> list[Any]:
    if value is None:
        return []
    if isinstance(value, ARRAY_TYPES):
        return list(value)
    if isinstance(value, Mapping):
        return list(value.items())
    return [value]


def _as_pairs(value: Any) -> list[tuple[Any, Any]]:
    pairs = []
    for item in _as_list(value):
        if isinstance(item, ARRAY_TYPES) and item:
            pairs.append((item[0], item[1] if len(item) > 1 else None))
        else:
            pairs.append((item, None))
    return pairs


class BoundField:
    """A field spec bound to one form instance.

    The value lives on the form; the bound field is a view answering questions about
    it and a handle for reporting errors against it. Unbound fields have no value and
    no errors.
    """

    __slots__ = ("_form", "spec")

    def __init__(self, spec: FieldSpec) -> None:
        self.spec = spec
        self._form: Form | None = None

    def __repr__(self) -> str:
        return f"BoundField(name={self.name!r}, code={self.code!r}, kind={self.kind.value!r})"

    def bind(self, form: Form) -> BoundField:
        """Bind the field to a form. This can be done only once.

        Args:
            form (Form): Owning form.

        Raises:
            FieldBindingError: If the field is already bound.

        Returns:
            BoundField: The field itself.
        """
        if self._form is not None:
            raise FieldBindingError(name=self.name)
        self._form = form
        return self

    @property
    def form(self) -> Form | None:
        """Return the owning form, if bound."""
        return self._form

    # Identity.

    @property
    def name(self) -> str:
        """Return the name used in code."""
        return self.spec.name

    @property
    def code(self) -> str:
        """Return the name used on the wire."""
        return self.spec.code

    @property
    def kind(self) -> FieldKind:
        """Return the container kind."""
        return self.spec.kind

    @property
    def options(self) -> Mapping[str, Any]:
        """Return the raw, unresolved options."""
        return self.spec.options

    def option(self, name: str, default: Any = None) -> Any:
        """Return an option value, resolving dynamic options.

        Callables other than the callback options are called with the field.

        Args:
            name (str): Option name.
            default (Any): Value returned when the option is unset or resolves to None.

        Returns:
            Any: Option value.
        """
        value = self.spec.options.get(name)
        if name not in CALLBACK_OPTIONS and is_dynamic_option(value):
            value = value(self)
        return default if value is None else value

    def __getitem__(self, name: str) -> Any:
        return self.option(name)

    # Value.

    @property
    def value(self) -> Any:
        """Return the current value, None for unbound fields."""
        return self._form[self.name] if self._form is not None else None

    @property
    def filter(self) -> Callable[[Any], Any] | None:
        """Return the per-value input filter."""
        return self.spec.filter

    @property
    def transform(self) -> Callable[[Any], Any] | None:
        """Return the whole-value input transform."""
        return self.spec.transform

    @property
    def format(self) -> Callable[[Any], Any] | None:
        """Return the output formatter."""
        return self.spec.format

    @property
    def types(self) -> tuple[type, ...] | None:
        """Return the accepted native types, if restricted."""
        return as_types(self.option("types"))

    def format_value(self, value: Any) -> Any:
        """Format a value for wire output, applying the formatter when appropriate.

        Text is never formatted for fields restricted to non-text types, as such text
        is input which failed to convert.

        Args:
            value (Any): Value to format.

        Returns:
            Any: Wire text.
        """
        types = self.types
        if self.format is None or value is None or (isinstance(value, str) and types and types != (str,)):
            return to_text(value)
        return to_text(self.format(value))

    @property
    def form_value(self) -> Any:
        """Return the wire representation: text, list of texts, or text keyed mapping of texts."""
        value = self.value
        if self.is_array:
            return [self.format_value(item) for item in _as_list(value)]
        if self.is_hash:
            return {str(key): self.format_value(item) for key, item in _as_pairs(value)}
        return self.format_value(value)

    def form_name(self, key: Any = None) -> str:
        """Return the name used in HTML forms.

        Args:
            key (Any): Key of the hash entry, required for hash fields.

        Raises:
            ValueError: If the key is missing for a hash field.

        Returns:
            str: `code`, `code[]` or `code[key]`.
        """
        if self.is_array:
            return f"{self.code}[]"
        if self.is_hash:
            if key is None:
                raise ValueError("missing hash key")  # noqa: TRY003
            return f"{self.code}[{key}]"
        return self.code

    def is_selected(self, value: Any) -> bool:
        """Return whether the value is the selected one, for select menus.

        Args:
            value (Any): Candidate value.

        Returns:
            bool: True if selected.
        """
        if self.is_empty or self.is_hash:
            return False
        if self.is_array:
            return value in self.value
        return self.value == value

    # Classification.

    @property
    def is_correct(self) -> bool:
        """Return whether the value has a container shape (or native type) the field accepts."""
        value = self.value
        if value is None:
            return True
        if isinstance(value, (str, bytes, bytearray)):
            return self.is_scalar
        if isinstance(value, ARRAY_TYPES):
            return self.is_array
        if isinstance(value, Mapping):
            return self.is_hash
        types = self.types
        return self.is_scalar and bool(types) and instance_of(value, types)

    @property
    def is_incorrect(self) -> bool:
        return not self.is_correct

    @property
    def is_blank(self) -> bool:
        """Return whether the value is empty or whitespace-only valid text."""
        value = self.value
        if value is None:
            return True
        if isinstance(value, str):
            return not value.strip(ASCII_WHITESPACE)
        if isinstance(value, (bytes, bytearray, list, tuple, Mapping)):
            return not value
        return False

    @property
    def is_empty(self) -> bool:
        """Return whether the value is None or an empty text or container."""
        value = self.value
        if value is None:
            return True
        if isinstance(value, (str, bytes, bytearray, list, tuple, Mapping)):
            return not value
        return False

    @property
    def is_filled(self) -> bool:
        return not self.is_empty

    @property
    def is_required(self) -> bool:
        return bool(self.option("required"))

    @property
    def is_optional(self) -> bool:
        return not self.is_required

    @property
    def is_disabled(self) -> bool:
        return bool(self.option("disabled"))

    @property
    def is_enabled(self) -> bool:
        return not self.is_disabled

    @property
    def type(self) -> FieldType | str:
        """Return the presentation type, `text` by default."""
        return self.option("type", FieldType.TEXT)

    @property
    def is_hidden(self) -> bool:
        return self.type == FieldType.HIDDEN

    @property
    def is_ignored(self) -> bool:
        return self.type == FieldType.IGNORE

    @property
    def is_visible(self) -> bool:
        return not (self.is_hidden or self.is_ignored)

    @property
    def is_array(self) -> bool:
        return self.spec.is_array

    @property
    def is_hash(self) -> bool:
        return self.spec.is_hash

    @property
    def is_scalar(self) -> bool:
        return self.spec.is_scalar

    @property
    def tags(self) -> list[Any]:
        """Return tags from the `tag` and `tags` options."""
        tags: list[Any] = []
        for name in ("tag", "tags"):
            value = self.option(name)
            if value is None:
                continue
            if isinstance(value, (list, tuple, set, frozenset)):
                tags.extend(value)
            else:
                tags.append(value)
        return tags

    def is_tagged(self, *tags: Any) -> bool:
        """Return whether the field has any of the given tags, or any tag at all.

        Args:
            *tags (Any): Tags, or lists of tags.

        Returns:
            bool: True if tagged.
        """
        own = self.tags
        if not tags:
            return bool(own)
        wanted = [item for tag in tags for item in (tag if isinstance(tag, (list, tuple)) else [tag])]
        return any(tag in own for tag in wanted)

    def is_untagged(self, *tags: Any) -> bool:
        return not self.is_tagged(*tags)

    @property
    def data(self) -> list[Any]:
        """Return select options data, empty if there are none."""
        return self.option("data") or []

    # Titles.

    @property
    def title(self) -> str | None:
        """Return the display name, or None."""
        return self.option("title")

    @property
    def is_titled(self) -> bool:
        return self.title is not None

    @property
    def is_untitled(self) -> bool:
        return not self.is_titled

    @property
    def form_title(self) -> str:
        """Return the title used in forms, falling back to the title and the code."""
        return self.option("form_title") or self.title or self.code

    @property
    def error_title(self) -> str:
        """Return the title used in error messages, falling back to the title and the code."""
        return self.option("error_title") or self.title or self.code

    # Errors.

    @property
    def errors(self) -> list[str]:
        """Return messages reported for the field."""
        return self._form.errors_for(self.name) if self._form is not None else []

    @property
    def error(self) -> str | None:
        """Return the first message reported for the field, or None."""
        errors = self.errors
        return errors[0] if errors else None

    @property
    def is_valid(self) -> bool:
        return not self.errors

    @property
    def is_invalid(self) -> bool:
        return not self.is_valid

    def format_error_message(self, message: ErrorKind | str, count: Any = None, unit: str | None = None) -> str:
        """Build the final error message.

        The form localizer gets the first say; otherwise the built-in message for an
        error kind, or the given text, is completed with the count and a pluralized
        unit, and `%p` is replaced with the error title.

        Args:
            message (ErrorKind | str): Error kind or message template.
            count (Any): Limit to include in the message.
            unit (str | None): Singular unit of the limit.

        Returns:
            str: Message text.
        """
        localizer = getattr(self._form, "localizer", None)
        if localizer is not None:
            localized = localizer.localize(message, self, count, unit)
            if localized is not None:
                return localized

        text = message.default_message if isinstance(message, ErrorKind) else str(message)
        if count is not None:
            text += f" {count}"
        if unit is not None:
            text += f" {unit if count == 1 else unit + 's'}"
        return text.replace("%p", self.error_title)

    def _error(self, message: ErrorKind | str, count: Any, unit: str | None, kind: ErrorKind | None) -> FieldError:
        if kind is None:
            kind = message if isinstance(message, ErrorKind) else ErrorKind.CUSTOM
        return FieldError(field=self.name, kind=kind, message=self.format_error_message(message, count, unit))

    def report(
        self,
        message: ErrorKind | str,
        count: Any = None,
        unit: str | None = None,
        *,
        kind: ErrorKind | None = None,
    ) -> BoundField:
        """Report an error after the ones already reported.

        Args:
            message (ErrorKind | str): Error kind, or custom message text with `%p` standing for the title.
            count (Any): Limit to include in the message.
            unit (str | None): Singular unit of the limit.
            kind (ErrorKind | None): Kind recorded for custom text, `custom` by default.

        Returns:
            BoundField: The field itself.
        """
        if self._form is not None:
            self._form.report(self.name, self._error(message, count, unit, kind))
        return self

    def report_first(
        self,
        message: ErrorKind | str,
        count: Any = None,
        unit: str | None = None,
        *,
        kind: ErrorKind | None = None,
    ) -> BoundField:
        """Report an error before the ones already reported. See `report`."""
        if self._form is not None:
            self._form.report_first(self.name, self._error(message, count, unit, kind))
        return self

    def validate(self) -> None:
        """Run the validation pipeline. Does nothing if errors were reported already."""
        FieldValidator(self).run()
