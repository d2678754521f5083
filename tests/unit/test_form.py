from __future__ import annotations

import pytest

from forminput.exceptions import FrozenFormError, SchemaError, UnknownFieldError
from forminput.field_types import INTEGER
from forminput.form import Form
from forminput.request import QueryRequest
from forminput.schema import Schema
from forminput.typing.enums import ErrorKind
from forminput.typing.models import FieldError


class _ProfileForm(Form):
    schema = (
        Schema()
        .required_param("email", "e", "Email", match="@")
        .param("name", row="names")
        .param("surname", row="names")
        .param("age", **INTEGER)
        .array("tags", "t")
        .hash("prices", "p")
        .param("url", type="hidden")
    )


class _ExternalParams(dict):
    """Dict subclass standing for an external request."""


def test_field_names_must_not_shadow_form_attributes() -> None:
    with pytest.raises(SchemaError, match="invalid field name errors"):
        type("BrokenForm", (Form,), {"schema": Schema().param("errors")})


def test_import_uses_codes_filters_and_transforms() -> None:
    form = _ProfileForm.from_params(
        {"e": "  a@b.c ", "name": " Ann ", "age": " 42 ", "t": ["x", " y "], "p": {"1": "9"}},
    )

    assert form.email == "a@b.c"
    assert form["name"] == "Ann"
    assert form.age == 42
    assert form.tags == ["x", "y"]
    assert form.prices == {1: "9"}
    assert form.surname is None
    assert form.is_valid()


def test_import_skips_missing_and_none_values() -> None:
    form = _ProfileForm.from_dict({"name": "Ann"})

    form.import_request(_ExternalParams({"name": None, "e": "x@y"}))

    assert form.name == "Ann"
    assert form.email == "x@y"


def test_plain_dict_sources_are_trusted_values() -> None:
    form = _ProfileForm({"name": "  Ann  ", "age": "12"})

    assert form.name == "  Ann  "
    assert form.age == "12"


def test_non_dict_sources_are_imported_in_order() -> None:
    form = _ProfileForm(QueryRequest.parse("name=Ann&age=3"), {"age": 5})

    assert form.name == "Ann"
    assert form.age == 5


def test_from_request_treats_dict_as_external() -> None:
    form = _ProfileForm.from_request({"e": " a@b "})

    assert form.email == "a@b"


def test_unknown_names_raise() -> None:
    form = _ProfileForm()

    with pytest.raises(UnknownFieldError):
        form["missing"]
    with pytest.raises(UnknownFieldError):
        form["missing"] = 1
    with pytest.raises(AttributeError):
        form.missing  # noqa: B018
    with pytest.raises(UnknownFieldError):
        form.set(missing=1)


def test_set_clear_and_values() -> None:
    form = _ProfileForm().set({"name": "Ann"}, surname="Smith", age=3)

    assert form.values("name", "surname") == ["Ann", "Smith"]
    assert form.values(["age"], form.field("name")) == [3, "Ann"]
    form.clear("name")
    assert form.name is None
    form.clear()
    assert form.is_empty
    assert form.to_dict() == {}


def test_to_dict_and_wire_params_skip_empty_fields() -> None:
    form = _ProfileForm.from_dict({"email": "a@b", "name": "", "age": 7, "tags": [], "prices": {2: 3}})

    assert form.to_dict() == {"email": "a@b", "age": 7, "prices": {2: 3}}
    assert form.to_wire_params() == {"e": "a@b", "age": "7", "p": {"2": "3"}}


def test_query_string_and_urls() -> None:
    form = _ProfileForm.from_dict({"email": "a b@c", "tags": ["x", "y"], "prices": {1: "2"}})

    assert form.to_query_string() == "e=a+b%40c&t[]=x&t[]=y&p[1]=2"
    assert form.extend_url("/x") == "/x?" + form.to_query_string()
    assert form.extend_url("/x?a=1") == "/x?a=1&" + form.to_query_string()
    assert _ProfileForm().extend_url("/x") == "/x"
    assert form.build_url("/x", tags=None, prices=None, name="Ann") == "/x?e=a+b%40c&name=Ann"
    assert form.name is None


def test_errors_are_lazy_and_ordered_by_declaration() -> None:
    form = _ProfileForm.from_params({"age": "x", "e": "nope"})

    assert form.errors() == {
        "email": ["Email like this is not valid"],
        "age": ["age like this is not valid"],
    }
    assert form.error_messages() == ["Email like this is not valid", "age like this is not valid"]
    assert form.error_kinds("age") == [ErrorKind.VALUE_TYPE]
    assert form.errors_for("name") == []
    assert form.error_for("name") is None
    assert [field.name for field in form.invalid_fields] == ["email", "age"]
    assert form.is_invalid("age")
    assert form.is_valid("name", "surname")


def test_writes_invalidate_errors() -> None:
    form = _ProfileForm.from_params({})
    assert form.is_invalid()

    form.email = "a@b"

    assert form.is_valid()


def test_check_callback_may_write_earlier_fields() -> None:
    def _normalize_code(field) -> None:
        field.form["code"] = field.value.upper()

    form_class = type(
        "NormalizingForm",
        (Form,),
        {"schema": Schema().param("code", match=r"\A[A-Z]+\Z").param("name", check=_normalize_code)},
    )

    form = form_class.from_params({"code": "abc", "name": "abc"})

    assert form.errors() == {}
    assert form.code == "ABC"
    assert form.is_valid()

    form.name = "ab1"

    assert form.errors() == {"code": ["code like this is not valid"]}


def test_check_callback_may_write_later_fields() -> None:
    def _fill_slug(field) -> None:
        field.form["slug"] = field.value.lower()

    form_class = type(
        "SluggingForm",
        (Form,),
        {"schema": Schema().param("title", check=_fill_slug).required_param("slug", max_size=3)},
    )

    form = form_class.from_params({"title": "Long"})

    assert form.error_kinds("slug") == [ErrorKind.MAX_SIZE]
    assert form.slug == "long"


def test_report_adds_custom_errors() -> None:
    form = _ProfileForm.from_dict({"email": "a@b"})

    form.report("name", "Name is taken").report_first("name", "Name is rude")
    form.report(form.field("age"), FieldError(field="age", kind=ErrorKind.MIN_LIMIT, message="Too young"))

    assert form.errors_for("name") == ["Name is rude", "Name is taken"]
    assert form.error_kinds("name") == [ErrorKind.CUSTOM, ErrorKind.CUSTOM]
    assert form.error_kinds("age") == [ErrorKind.MIN_LIMIT]
    assert form.valid_values("email") == ["a@b"]
    assert form.valid_values("email", "name") is None


def test_validate_override_can_add_form_level_errors() -> None:
    class _PasswordForm(Form):
        schema = Schema().param("password").param("confirmation")

        def validate(self):
            super().validate()
            if self.password != self.confirmation:
                self.report("confirmation", "Passwords do not match")
            return self

    assert _PasswordForm.from_dict({"password": "a", "confirmation": "a"}).is_valid()
    assert _PasswordForm.from_dict({"password": "a", "confirmation": "b"}).errors() == {
        "confirmation": ["Passwords do not match"],
    }


def test_freeze_blocks_mutation() -> None:
    form = _ProfileForm.from_params({}).freeze()

    assert form.is_frozen
    assert form.is_invalid()
    with pytest.raises(FrozenFormError, match="cannot modify a frozen form"):
        form.name = "Ann"
    with pytest.raises(FrozenFormError):
        form.import_request(QueryRequest.parse("name=Ann"))
    with pytest.raises(FrozenFormError):
        form.clear()
    with pytest.raises(FrozenFormError):
        form.report("name", "x")
    with pytest.raises(FrozenFormError):
        form.revalidate()
    assert form.freeze() is form


def test_clone_keeps_errors_and_frozen_state() -> None:
    form = _ProfileForm.from_params({})
    form.report("name", "custom")
    frozen = form.clone().freeze()

    clone = frozen.clone()

    assert clone.is_frozen
    assert clone.errors_for("name") == ["custom"]
    assert clone is not frozen


def test_copy_is_unfrozen_and_revalidated() -> None:
    form = _ProfileForm.from_dict({"email": "a@b"})
    form.report("name", "custom")
    form.freeze()

    result = form.copy()

    assert not result.is_frozen
    assert result.is_valid()
    result.name = "Ann"
    assert form.name is None


def test_snapshot_is_deep_and_frozen() -> None:
    form = _ProfileForm.from_dict({"email": "a@b", "tags": ["x"]})

    snapshot = form.snapshot()
    form.tags.append("y")

    assert snapshot.is_frozen
    assert snapshot.tags == ["x"]
    assert not form.is_frozen


def test_without_and_only() -> None:
    form = _ProfileForm.from_dict({"email": "a@b", "name": "Ann", "age": 3})

    assert form.without("name", "age").to_dict() == {"email": "a@b"}
    assert form.only("name", ["age"]).to_dict() == {"name": "Ann", "age": 3}
    assert form.to_dict() == {"email": "a@b", "name": "Ann", "age": 3}


def test_field_views() -> None:
    form = _ProfileForm.from_dict({"email": "a@b", "tags": ["x"]})

    assert form.field_names == ["email", "name", "surname", "age", "tags", "prices", "url"]
    assert [field.name for field in form.filled_fields] == ["email", "tags"]
    assert [field.name for field in form.required_fields] == ["email"]
    assert [field.name for field in form.array_fields] == ["tags"]
    assert [field.name for field in form.hash_fields] == ["prices"]
    assert [field.name for field in form.hidden_fields] == ["url"]
    assert len(form.scalar_fields) == 5
    assert [field and field.name for field in form.named_fields("age", "missing")] == ["age", None]
    with pytest.raises(UnknownFieldError):
        form.field("missing")


def test_chunked_fields_group_rows() -> None:
    form = _ProfileForm()
    fields = form.fields

    chunks = form.chunked_fields()

    assert chunks[0] is fields[0]
    assert chunks[1] == [fields[1], fields[2]]
    assert chunks[2:] == fields[3:]
    assert form.chunked_fields([fields[1], fields[3]]) == [fields[1], fields[3]]


def test_subclass_schema_extends_parent() -> None:
    class _AdminForm(_ProfileForm):
        schema = _ProfileForm.schema.param("role")

    form = _AdminForm.from_dict({"role": "root"})

    assert form.role == "root"
    assert "role" not in _ProfileForm.schema
