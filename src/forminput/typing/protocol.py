"""Interfaces of external collaborators."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from forminput.fields import BoundField
    from forminput.typing.enums import ErrorKind


class Request(Protocol):
    """Source of external field values, keyed by field code.

    Any mapping works, as do multi-dicts of web frameworks. Missing codes may either
    raise `KeyError` or return None; both mean the field was not submitted.
    """

    def __getitem__(self, code: str) -> Any:
        """Return the raw value submitted for a field code.

        Args:
            code: External field code.

        Returns:
            Any: Text, bytes, list of those, or a flat mapping of those.
        """


class MessageLocalizer(Protocol):
    """Translation service for validation messages."""

    def localize(
        self,
        kind: ErrorKind | str,
        field: BoundField,
        count: Any | None = None,
        unit: str | None = None,
    ) -> str | None:
        """Return localized message text.

        Args:
            kind: Error kind, or a custom message template reported by a callback.
            field: Field the message is about.
            count: Limit included in the message, if any.
            unit: Singular unit of the limit, e.g. `character`.

        Returns:
            str | None: Final message, or None to fall back to the built-in message.
        """
