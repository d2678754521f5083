"""Immutable, ordered form schemas.

A schema is built once, at form class definition time, by chaining calls that each
return a new schema::

    schema = (
        Schema()
        .required_param("query", "q")
        .param("email", title="Email", match=r"@")
        .array("opts", max_count=3)
    )

Extending a schema is plain composition: `child = parent.param("extra")` leaves
`parent` untouched.
"""

from __future__ import annotations

import keyword
import re
from collections.abc import Callable, Iterable, Iterator, Mapping
from dataclasses import dataclass, field, replace
from typing import Any

from forminput.exceptions import SchemaError, UnknownFieldError
from forminput.logging import get_logger
from forminput.sanitize import DEFAULT_FILTER
from forminput.settings import Settings, get_settings
from forminput.typing.enums import FieldKind, FieldType
from forminput.typing.models import FieldSpec

logger = get_logger(__name__)

STEP_FIELDS = ("step", "next", "last", "seen")

_PATTERN_OPTIONS = ("match", "reject", "match_key")
_UNSET: Any = object()


def _compile_patterns(option: str, value: Any) -> Any:
    """Compile pattern options given as strings.

    Args:
        option (str): Option name, for error reporting.
        value (Any): Pattern, list of patterns, or a dynamic option callable.

    Raises:
        SchemaError: If a pattern is neither a string nor a compiled pattern.

    Returns:
        Any: Tuple of compiled patterns, or the callable untouched.
    """
    if value is None or callable(value):
        return value
    items = value if isinstance(value, (list, tuple)) else [value]
    patterns: list[re.Pattern[str]] = []
    for item in items:
        if isinstance(item, str):
            patterns.append(re.compile(item))
        elif isinstance(item, re.Pattern):
            patterns.append(item)
        else:
            raise SchemaError(message=f"invalid {option} pattern {item!r}")
    return tuple(patterns)


def _normalize_types(value: Any) -> Any:
    """Turn the `types` option into a tuple of classes.

    Args:
        value (Any): A class, a sequence of classes, or a dynamic option callable.

    Raises:
        SchemaError: If some entry is not a class.

    Returns:
        Any: Tuple of classes, or the callable untouched.
    """
    if value is None:
        return None
    if isinstance(value, type):
        return (value,)
    if callable(value):
        return value
    types = tuple(value)
    for item in types:
        if not isinstance(item, type):
            raise SchemaError(message=f"invalid accepted type {item!r}")
    return types


def _check_field_name(name: str) -> None:
    if not isinstance(name, str) or not name.isidentifier() or keyword.iskeyword(name) or name.startswith("_"):
        raise SchemaError(message=f"invalid field name {name!r}")

def _normalize_options(options: dict[str, Any]) -> dict[str, Any]:
    """Normalize option values that have several accepted spellings.

    Args:
        options (dict[str, Any]): Raw options.

    Returns:
        dict[str, Any]: Options with patterns compiled, types tupled and presentation type parsed.
    """
    normalized = dict(options)
    for option in _PATTERN_OPTIONS:
        if option in normalized:
            normalized[option] = _compile_patterns(option, normalized[option])
    if "types" in normalized:
        normalized["types"] = _normalize_types(normalized["types"])
    field_type = normalized.get("type")
    if isinstance(field_type, str) and not isinstance(field_type, FieldType):
        try:
            normalized["type"] = FieldType(field_type)
        except ValueError:
            normalized["type"] = field_type
    return normalized


def _step_transform(name: str, steps: tuple[str, ...]) -> Callable[[Any], str | None]:
    """Build the transform that discards step names which were not declared.

    Args:
        name (str): Step control field name, for logging.
        steps (tuple[str, ...]): Declared step keys.

    Returns:
        Callable[[Any], str | None]: The transform.
    """

    def _transform(value: Any) -> str | None:
        if isinstance(value, str) and value in steps:
            return value
        logger.debug("Step value discarded", extra={"field": name})
        return None

    return _transform


@dataclass(frozen=True)
class Schema:
    """Ordered collection of field definitions for one form type."""

    fields: tuple[FieldSpec, ...] = ()
    steps: tuple[tuple[str, str | None], ...] | None = None
    settings: Settings | None = field(default=None, compare=False, repr=False)

    # Lookup.

    def __len__(self) -> int:
        return len(self.fields)

    def __iter__(self) -> Iterator[FieldSpec]:
        return iter(self.fields)

    def __contains__(self, name: object) -> bool:
        return any(spec.name == name for spec in self.fields)

    def __getitem__(self, name: str) -> FieldSpec:
        spec = self.get(name)
        if spec is None:
            raise UnknownFieldError(name=name)
        return spec

    def get(self, name: str) -> FieldSpec | None:
        """Return the field spec with the given name, or None."""
        return next((spec for spec in self.fields if spec.name == name), None)

    def select(self, *names: str) -> list[FieldSpec]:
        """Return the given field specs, in the given order.

        Args:
            *names (str): Field names.

        Returns:
            list[FieldSpec]: The specs.
        """
        return [self[name] for name in names]

    @property
    def names(self) -> list[str]:
        """Return field names in declaration order."""
        return [spec.name for spec in self.fields]

    @property
    def step_keys(self) -> list[str]:
        """Return declared step keys in order, empty if the schema has no steps."""
        return [key for key, _ in self.steps or ()]

    @property
    def step_titles(self) -> dict[str, str | None]:
        """Return declared steps mapped to their display names."""
        return dict(self.steps or ())

    # Definition.

    def add(self, spec: FieldSpec) -> Schema:
        """Return a new schema with the given spec appended.

        Args:
            spec (FieldSpec): Field spec.

        Raises:
            SchemaError: If the name is not a public identifier or is already defined.

        Returns:
            Schema: Extended schema.
        """
        _check_field_name(spec.name)
        if spec.name in self:
            raise SchemaError(message=f"duplicate field {spec.name}")
        logger.debug("Field defined", extra={"field": spec.name, "code": spec.code, "kind": spec.kind.value})
        return replace(self, fields=(*self.fields, spec))

    def param(
        self,
        name: str,
        code: str | None = None,
        title: str | None = None,
        *,
        size: int | Callable[..., int] | None = None,
        filter: Callable[[Any], Any] | None = _UNSET,  # noqa: A002
        kind: FieldKind = FieldKind.SCALAR,
        **options: Any,
    ) -> Schema:
        """Define a field.

        Unless given, `max_size` defaults to `size` or the configured size limit, and
        `max_bytesize` to that limit as long as `max_size` does not exceed it. Without
        an explicit `filter`, whitespace is squeezed; pass `filter=None` to keep input
        verbatim. Hash fields get default key bounds.

        Args:
            name (str): Name used in code.
            code (str | None): Name used on the wire, defaults to `name`.
            title (str | None): Display name.
            size (int | Callable[..., int] | None): Maximum size shortcut.
            filter (Callable[[Any], Any] | None): Per-value input filter.
            kind (FieldKind): Container kind.
            **options (Any): Constraints, presentation hints and callbacks.

        Raises:
            SchemaError: If the name is not a public identifier or is already defined.

        Returns:
            Schema: Extended schema.
        """
        _check_field_name(name)
        config = self.settings or get_settings()
        limit = config.default_size_limit

        if title is not None:
            options["title"] = title
        options["filter"] = DEFAULT_FILTER if filter is _UNSET else filter

        if options.get("max_size") is None:
            options["max_size"] = size if size is not None else limit
        max_size = options["max_size"]
        if options.get("max_bytesize") is None and (callable(max_size) or max_size <= limit):
            options["max_bytesize"] = limit

        if kind is FieldKind.HASH:
            if options.get("min_key") is None:
                options["min_key"] = config.default_min_key
            if options.get("max_key") is None:
                options["max_key"] = config.default_max_key

        spec = FieldSpec(name=name, code=code or name, kind=kind, options=_normalize_options(options))
        return self.add(spec)

    def required_param(self, name: str, code: str | None = None, title: str | None = None, **options: Any) -> Schema:
        """Define a required scalar field. See `param`."""
        return self.param(name, code, title, required=True, **options)

    def array(self, name: str, code: str | None = None, title: str | None = None, **options: Any) -> Schema:
        """Define a list field. See `param`."""
        return self.param(name, code, title, kind=FieldKind.ARRAY, **options)

    def required_array(self, name: str, code: str | None = None, title: str | None = None, **options: Any) -> Schema:
        """Define a required list field. See `param`."""
        return self.param(name, code, title, kind=FieldKind.ARRAY, required=True, **options)

    def hash(self, name: str, code: str | None = None, title: str | None = None, **options: Any) -> Schema:
        """Define a mapping field. See `param`."""
        return self.param(name, code, title, kind=FieldKind.HASH, **options)

    def required_hash(self, name: str, code: str | None = None, title: str | None = None, **options: Any) -> Schema:
        """Define a required mapping field. See `param`."""
        return self.param(name, code, title, kind=FieldKind.HASH, required=True, **options)

    def include(
        self,
        source: FieldSpec | Schema | Iterable[FieldSpec],
        *,
        name: str | None = None,
        code: str | None = None,
        **overrides: Any,
    ) -> Schema:
        """Copy fields from this or another schema, merging option overrides.

        No defaults are reapplied: the copies keep the source options except where overridden.

        Args:
            source (FieldSpec | Schema | Iterable[FieldSpec]): Spec(s) to copy.
            name (str | None): New name, for single spec copies.
            code (str | None): New code, for single spec copies.
            **overrides (Any): Options replacing the source options.

        Raises:
            SchemaError: If the source is not a spec, a schema or a collection of specs.

        Returns:
            Schema: Extended schema.
        """
        overrides = _normalize_options(overrides)
        if isinstance(source, FieldSpec):
            return self.add(source.derive(name=name, code=code, **overrides))
        if isinstance(source, (str, bytes, Mapping)) or not isinstance(source, Iterable):
            raise SchemaError(message=f"invalid source field {source!r}")
        result = self
        for item in source:
            if not isinstance(item, FieldSpec):
                raise SchemaError(message=f"invalid source field {item!r}")
            result = result.add(item.derive(name=name, code=code, **overrides))
        return result

    def with_steps(self, steps: Mapping[str, str | None]) -> Schema:
        """Turn the schema into a multi-step schema.

        Steps map keys to display names; steps named None are left out of step listings
        meant for display. Four hidden fields keeping track of the step state are added.

        Args:
            steps (Mapping[str, str | None]): Ordered step keys and names.

        Raises:
            SchemaError: If steps were declared already or the mapping is empty or malformed.

        Returns:
            Schema: Multi-step schema.
        """
        if self.steps is not None:
            raise SchemaError(message="steps are already defined")
        if not steps:
            raise SchemaError(message="at least one step is required")
        for key, title in steps.items():
            if not isinstance(key, str) or not key:
                raise SchemaError(message=f"invalid step name {key!r}")
            if title is not None and not isinstance(title, str):
                raise SchemaError(message=f"invalid title for step {key}")

        keys = tuple(steps)
        result = replace(self, steps=tuple(steps.items()))
        for name in STEP_FIELDS:
            field_type = FieldType.IGNORE if name == "next" else FieldType.HIDDEN
            result = result.param(name, transform=_step_transform(name, keys), types=str, type=field_type)
        return result
