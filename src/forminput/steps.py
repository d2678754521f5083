"""Multi-step forms.

A step form tracks four step control fields declared by `Schema.with_steps`:

- `step`: the step being displayed,
- `next`: the step the client asked to move to,
- `seen`: the furthest step whose fields were shown and validated,
- `last`: the furthest step ever made accessible.

On construction the form only moves to `next` when all fields of the current step
are valid, so clients can't skip over steps they did not complete. Fields belong to
a step by being tagged with the step name.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, Self

from forminput.exceptions import InvalidStepError, SchemaError
from forminput.fields import BoundField
from forminput.form import Form
from forminput.logging import get_logger
from forminput.schema import STEP_FIELDS

logger = get_logger(__name__)

CURRENT_STEP: Any = object()


class StepForm(Form):
    """Form split into ordered steps."""

    __slots__ = ()

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        if "schema" in cls.__dict__ and cls.schema.steps is None:
            raise SchemaError(message=f"{cls.__name__} declares no steps")

    def __setitem__(self, name: str, value: Any) -> None:
        if name in STEP_FIELDS and value is not None and value not in self.steps:
            raise InvalidStepError(step=value)
        super().__setitem__(name, value)

    def _after_load(self) -> None:
        """Derive the step state from the loaded control fields."""
        self.seen = self.last_step(self.seen, self.step)
        if self.step is None:
            self.step = self.first_step()
        if self.next is None:
            self.next = self.step
        if self.last is None:
            self.last = self.step

        current = self.step
        if self.is_correct_step():
            self.step = self.next
            self.seen = self.last_step(self.seen, self.previous_step(self.step))
            if self.step != current:
                logger.debug("Step advanced", extra={"form": type(self).__name__, "from": current, "to": self.step})
        elif self.next != current:
            logger.debug("Step held", extra={"form": type(self).__name__, "step": current, "requested": self.next})

        self.last = self.last_step(self.step, self.last)

    def _resolve(self, step: Any) -> Any:
        return self.step if step is CURRENT_STEP else step

    def unlock_steps(self) -> Self:
        """Make all steps finished and accessible at once, e.g. when editing existing data."""
        self.last = self.seen = self.last_step()
        logger.debug("Steps unlocked", extra={"form": type(self).__name__})
        return self

    # Step lists and names.

    @property
    def form_steps(self) -> dict[str, str | None]:
        """Return declared steps mapped to their names."""
        return self.schema.step_titles

    @property
    def steps(self) -> list[str]:
        """Return declared step keys in order."""
        return self.schema.step_keys

    def step_name(self, step: Any = CURRENT_STEP) -> str | None:
        """Return the name of the current or given step, None for unnamed or unknown steps."""
        return self.form_steps.get(self._resolve(step))

    @property
    def step_names(self) -> dict[str, str]:
        """Return named steps mapped to their names, for display in a sidebar."""
        return {key: title for key, title in self.form_steps.items() if title is not None}

    def step_index(self, step: Any = CURRENT_STEP) -> int:
        """Return the position of the current or given step.

        Args:
            step (Any): Step key, the current step by default.

        Raises:
            InvalidStepError: If the step is not declared.

        Returns:
            int: Zero based index.
        """
        step = self._resolve(step)
        try:
            return self.steps.index(step)
        except ValueError:
            raise InvalidStepError(step=step) from None

    def is_step_before(self, step: str) -> bool:
        """Return whether the current step comes before the given one."""
        return self.step_index() < self.step_index(step)

    def is_step_after(self, step: str) -> bool:
        """Return whether the current step comes after the given one."""
        return self.step_index() > self.step_index(step)

    def _flatten_steps(self, steps: tuple[Any, ...]) -> list[str]:
        flat = []
        for step in steps:
            if isinstance(step, (list, tuple)):
                flat.extend(self._flatten_steps(tuple(step)))
            elif step is not None:
                flat.append(step)
        return flat

    def first_step(self, *steps: Any) -> str | None:
        """Return the first declared step, or the earliest of the given steps.

        None entries are ignored; None is returned if nothing remains.

        Raises:
            InvalidStepError: If some given step is not declared.
        """
        if not steps:
            return self.steps[0]
        flat = self._flatten_steps(steps)
        return min(flat, key=self.step_index) if flat else None

    def last_step(self, *steps: Any) -> str | None:
        """Return the last declared step, or the latest of the given steps. See `first_step`."""
        if not steps:
            return self.steps[-1]
        flat = self._flatten_steps(steps)
        return max(flat, key=self.step_index) if flat else None

    def is_first_step(self, step: Any = CURRENT_STEP) -> bool:
        return self._resolve(step) == self.first_step()

    def is_last_step(self, step: Any = CURRENT_STEP) -> bool:
        return self._resolve(step) == self.last_step()

    def previous_steps(self, step: Any = CURRENT_STEP) -> list[str]:
        """Return steps before the current or given step, none for unknown steps."""
        step = self._resolve(step)
        steps = self.steps
        index = steps.index(step) if step in steps else 0
        return steps[:index]

    def next_steps(self, step: Any = CURRENT_STEP) -> list[str]:
        """Return steps after the current or given step, all of them for unknown steps."""
        step = self._resolve(step)
        steps = self.steps
        index = steps.index(step) if step in steps else -1
        return steps[index + 1 :]

    def previous_step(self, step: Any = CURRENT_STEP) -> str | None:
        """Return the step before the current or given step, or None."""
        steps = self.previous_steps(step)
        return steps[-1] if steps else None

    def next_step(self, step: Any = CURRENT_STEP) -> str | None:
        """Return the step after the current or given step, or None."""
        steps = self.next_steps(step)
        return steps[0] if steps else None

    def previous_step_name(self) -> str | None:
        return self.step_name(self.previous_step())

    def next_step_name(self) -> str | None:
        return self.step_name(self.next_step())

    # Step fields.

    def step_fields(self, step: Any = CURRENT_STEP) -> list[BoundField]:
        """Return fields tagged with the current or given step.

        Raises:
            InvalidStepError: If the step is not declared.
        """
        step = self._resolve(step)
        if step not in self.form_steps:
            raise InvalidStepError(step=step)
        return self.tagged_fields(step)

    @property
    def current_fields(self) -> list[BoundField]:
        """Return fields of the current step."""
        return self.tagged_fields(self.step)

    @property
    def other_fields(self) -> list[BoundField]:
        """Return fields not belonging to the current step."""
        return self.untagged_fields(self.step)

    def _filter_steps(self, predicate: Callable[[list[BoundField]], bool]) -> list[str]:
        """Return steps whose fields satisfy the predicate, skipping steps without fields."""
        result = []
        for step in self.steps:
            fields = self.step_fields(step)
            if fields and predicate(fields):
                result.append(step)
        return result

    # Per step classification. Steps without fields are extra steps.

    def is_extra_step(self, step: Any = CURRENT_STEP) -> bool:
        return not self.step_fields(step)

    def is_regular_step(self, step: Any = CURRENT_STEP) -> bool:
        return not self.is_extra_step(step)

    @property
    def extra_steps(self) -> list[str]:
        return [step for step in self.steps if self.is_extra_step(step)]

    @property
    def regular_steps(self) -> list[str]:
        return [step for step in self.steps if self.is_regular_step(step)]

    def is_required_step(self, step: Any = CURRENT_STEP) -> bool:
        """Return whether the step has some required field. False for extra steps."""
        return any(field.is_required for field in self.step_fields(step))

    def is_optional_step(self, step: Any = CURRENT_STEP) -> bool:
        return not self.is_required_step(step)

    @property
    def required_steps(self) -> list[str]:
        return self._filter_steps(lambda fields: any(field.is_required for field in fields))

    @property
    def optional_steps(self) -> list[str]:
        return self._filter_steps(lambda fields: not any(field.is_required for field in fields))

    def is_filled_step(self, step: Any = CURRENT_STEP) -> bool:
        """Return whether the step has some data filled in. True for extra steps."""
        fields = self.step_fields(step)
        return not fields or any(field.is_filled for field in fields)

    def is_unfilled_step(self, step: Any = CURRENT_STEP) -> bool:
        return not self.is_filled_step(step)

    @property
    def filled_steps(self) -> list[str]:
        return self._filter_steps(lambda fields: any(field.is_filled for field in fields))

    @property
    def unfilled_steps(self) -> list[str]:
        return self._filter_steps(lambda fields: not any(field.is_filled for field in fields))

    def is_correct_step(self, step: Any = CURRENT_STEP) -> bool:
        """Return whether all fields of the step are valid. True for extra steps."""
        return self.is_valid(self.step_fields(step))

    def is_incorrect_step(self, step: Any = CURRENT_STEP) -> bool:
        return not self.is_correct_step(step)

    @property
    def correct_steps(self) -> list[str]:
        return self._filter_steps(lambda fields: self.is_valid(fields))

    @property
    def incorrect_steps(self) -> list[str]:
        return self._filter_steps(lambda fields: self.is_invalid(fields))

    @property
    def incorrect_step(self) -> str | None:
        """Return the first step with invalid data, or None."""
        steps = self.incorrect_steps
        return steps[0] if steps else None

    def is_enabled_step(self, step: Any = CURRENT_STEP) -> bool:
        """Return whether the step has some enabled field. True for extra steps."""
        fields = self.step_fields(step)
        return not fields or any(field.is_enabled for field in fields)

    def is_disabled_step(self, step: Any = CURRENT_STEP) -> bool:
        return not self.is_enabled_step(step)

    @property
    def enabled_steps(self) -> list[str]:
        return self._filter_steps(lambda fields: any(field.is_enabled for field in fields))

    @property
    def disabled_steps(self) -> list[str]:
        return self._filter_steps(lambda fields: all(field.is_disabled for field in fields))

    # Progress.

    @property
    def unfinished_steps(self) -> list[str]:
        """Return steps not visited yet, or visited for the first time."""
        return self.next_steps(self.seen)

    @property
    def finished_steps(self) -> list[str]:
        """Return steps visited or skipped over before."""
        unfinished = self.unfinished_steps
        return [step for step in self.steps if step not in unfinished]

    @property
    def inaccessible_steps(self) -> list[str]:
        """Return steps after the last accessible one."""
        return self.next_steps(self.last)

    @property
    def accessible_steps(self) -> list[str]:
        """Return steps up to and including the last accessible one."""
        inaccessible = self.inaccessible_steps
        return [step for step in self.steps if step not in inaccessible]

    @property
    def complete_steps(self) -> list[str]:
        """Return finished steps with all data valid, skipping steps without fields."""
        correct = self.correct_steps
        return [step for step in self.finished_steps if step in correct]

    @property
    def incomplete_steps(self) -> list[str]:
        """Return finished steps with some invalid data."""
        return [step for step in self.finished_steps if self.is_incorrect_step(step)]

    @property
    def good_steps(self) -> list[str]:
        """Return steps to be checked off as done in a sidebar."""
        filled = self.filled_steps
        return [step for step in self.complete_steps if step in filled]

    @property
    def bad_steps(self) -> list[str]:
        """Return steps to be marked as having errors in a sidebar."""
        return self.incomplete_steps

    def _checked_step(self, step: Any) -> str:
        step = self._resolve(step)
        if step not in self.form_steps:
            raise InvalidStepError(step=step)
        return step

    def is_finished_step(self, step: Any = CURRENT_STEP) -> bool:
        return self._checked_step(step) in self.finished_steps

    def is_unfinished_step(self, step: Any = CURRENT_STEP) -> bool:
        return self._checked_step(step) in self.unfinished_steps

    def is_accessible_step(self, step: Any = CURRENT_STEP) -> bool:
        return self._checked_step(step) in self.accessible_steps

    def is_inaccessible_step(self, step: Any = CURRENT_STEP) -> bool:
        return self._checked_step(step) in self.inaccessible_steps

    def is_complete_step(self, step: Any = CURRENT_STEP) -> bool:
        return self._checked_step(step) in self.complete_steps

    def is_incomplete_step(self, step: Any = CURRENT_STEP) -> bool:
        return self._checked_step(step) in self.incomplete_steps

    def is_good_step(self, step: Any = CURRENT_STEP) -> bool:
        return self._checked_step(step) in self.good_steps

    def is_bad_step(self, step: Any = CURRENT_STEP) -> bool:
        return self._checked_step(step) in self.bad_steps
