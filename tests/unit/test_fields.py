from __future__ import annotations

from datetime import date

import pytest

from forminput.exceptions import FieldBindingError
from forminput.fields import BoundField, is_dynamic_option, to_text
from forminput.form import Form
from forminput.schema import Schema
from forminput.typing.enums import ErrorKind, FieldType
from forminput.typing.models import FieldSpec


class _ContactForm(Form):
    schema = (
        Schema()
        .required_param("email", "e", "Email", error_title="E-mail address", tag="contact")
        .param("name", form_title="Your name", tags=["contact", "names"])
        .param("born", types=date, format=lambda value: value.strftime("%d.%m.%Y"), type="hidden")
        .array("colors", "c", data=[("red", "Red"), ("blue", "Blue")])
        .hash("notes", "n", disabled=lambda field: field.form.name is None)
        .param("token", type=FieldType.IGNORE)
    )


def test_is_dynamic_option() -> None:
    assert is_dynamic_option(lambda field: 1)
    assert not is_dynamic_option(int)
    assert not is_dynamic_option("text")


def test_to_text() -> None:
    assert to_text(None) == ""
    assert to_text(True) == "true"
    assert to_text(False) == "false"
    assert to_text(12) == "12"
    assert to_text(b"\xff") == b"\xff"


def test_unbound_field_has_no_value_or_errors() -> None:
    field = BoundField(FieldSpec(name="entry", code="e"))

    assert field.form is None
    assert field.value is None
    assert field.errors == []
    assert field.is_valid
    assert field.report("ignored") is field


def test_field_can_be_bound_once() -> None:
    form = _ContactForm()
    field = form.field("email")

    assert field.form is form
    with pytest.raises(FieldBindingError):
        field.bind(_ContactForm())


def test_identity_and_titles() -> None:
    form = _ContactForm()
    email = form.field("email")
    name = form.field("name")
    colors = form.field("colors")

    assert (email.name, email.code) == ("email", "e")
    assert email.title == "Email"
    assert email.form_title == "Email"
    assert email.error_title == "E-mail address"
    assert email.is_titled
    assert name.is_untitled
    assert name.form_title == "Your name"
    assert name.error_title == "name"
    assert colors.form_title == "c"


def test_presentation_types() -> None:
    form = _ContactForm()

    assert form.field("email").type is FieldType.TEXT
    assert form.field("born").is_hidden
    assert form.field("token").is_ignored
    assert form.field("email").is_visible
    assert not form.field("born").is_visible
    assert [field.name for field in form.visible_fields] == ["email", "name", "colors", "notes"]


def test_tags() -> None:
    form = _ContactForm()

    assert form.field("email").tags == ["contact"]
    assert form.field("name").tags == ["contact", "names"]
    assert form.field("name").is_tagged("names")
    assert form.field("name").is_tagged(["other", "names"])
    assert form.field("email").is_untagged("names")
    assert form.field("born").is_untagged()
    assert [field.name for field in form.tagged_fields("contact")] == ["email", "name"]


def test_dynamic_options_are_evaluated_on_access() -> None:
    form = _ContactForm()
    notes = form.field("notes")

    assert notes.is_disabled
    form.name = "Ann"
    assert notes.is_enabled
    assert callable(notes.options["disabled"])


def test_option_lookup_and_defaults() -> None:
    field = _ContactForm().field("colors")

    assert field["data"] == [("red", "Red"), ("blue", "Blue")]
    assert field.data == [("red", "Red"), ("blue", "Blue")]
    assert field.option("missing", 5) == 5
    assert _ContactForm().field("email").data == []


def test_value_classification() -> None:
    form = _ContactForm.from_dict({"email": "  ", "colors": [], "notes": {1: "x"}})

    email = form.field("email")
    assert email.is_blank
    assert email.is_filled
    assert email.is_correct
    assert email.is_required
    assert form.field("name").is_optional
    assert form.field("colors").is_empty
    assert form.field("notes").is_filled


def test_correctness_follows_container_kind() -> None:
    form = _ContactForm.from_dict({"email": ["a"], "colors": "red", "notes": ["x"], "born": date(2000, 1, 2)})

    assert form.field("email").is_incorrect
    assert form.field("colors").is_incorrect
    assert form.field("notes").is_incorrect
    assert form.field("born").is_correct
    assert [field.name for field in form.incorrect_fields] == ["email", "colors", "notes"]


def test_native_value_without_accepted_types_is_incorrect() -> None:
    assert _ContactForm.from_dict({"email": 5}).field("email").is_incorrect


def test_form_values() -> None:
    form = _ContactForm.from_dict(
        {"email": "a@b.c", "born": date(2000, 1, 2), "colors": ["red", 3], "notes": {2: "x", 5: None}},
    )

    assert form.field("email").form_value == "a@b.c"
    assert form.field("born").form_value == "02.01.2000"
    assert form.field("colors").form_value == ["red", "3"]
    assert form.field("notes").form_value == {"2": "x", "5": ""}
    assert form.field("name").form_value == ""


def test_failed_conversion_text_is_not_formatted() -> None:
    form = _ContactForm.from_dict({"born": "not a date"})

    assert form.field("born").form_value == "not a date"


def test_form_names() -> None:
    form = _ContactForm()

    assert form.field("email").form_name() == "e"
    assert form.field("colors").form_name() == "c[]"
    assert form.field("notes").form_name(3) == "n[3]"
    with pytest.raises(ValueError, match="missing hash key"):
        form.field("notes").form_name()


def test_is_selected() -> None:
    form = _ContactForm.from_dict({"email": "a", "colors": ["red"], "notes": {1: "x"}})

    assert form.field("email").is_selected("a")
    assert not form.field("email").is_selected("b")
    assert form.field("colors").is_selected("red")
    assert not form.field("colors").is_selected("blue")
    assert not form.field("notes").is_selected("x")
    assert not form.field("name").is_selected(None)


def test_error_message_formatting() -> None:
    field = _ContactForm().field("email")

    assert field.format_error_message(ErrorKind.REQUIRED_SCALAR) == "E-mail address is required"
    assert field.format_error_message(ErrorKind.MAX_COUNT, 1, "element") == "E-mail address may have at most 1 element"
    assert field.format_error_message("%p looks odd") == "E-mail address looks odd"


def test_field_errors_follow_the_form() -> None:
    form = _ContactForm.from_params({})
    email = form.field("email")

    assert email.is_invalid
    assert email.error == "E-mail address is required"
    email.report("%p is taken", kind=ErrorKind.CUSTOM)
    assert email.errors == ["E-mail address is required", "E-mail address is taken"]
    assert form.field("name").error is None
