from __future__ import annotations

import re

from forminput import Form, QueryRequest, Schema
from forminput.field_types import EMAIL, INTEGER

PASSWORD_SCHEMA = Schema().required_param(
    "password",
    title="Password",
    type="password",
    min_size=6,
    reject=re.compile(r"[^\x20-\x7e]"),
    reject_msg="%p may contain only ASCII characters and spaces",
    match=[re.compile("[a-z]", re.IGNORECASE), r"\d"],
    msg="%p must contain at least one digit and one letter",
    filter=lambda value: value.rstrip("\r\n"),
)


class _SignupForm(Form):
    schema = (
        Schema()
        .required_param("first_name", "first", "First name")
        .required_param("last_name", "last", "Last name")
        .required_param("login", "email", "Email", **EMAIL)
        .param("age", "age", "Age", **INTEGER, min=13)
        .include(PASSWORD_SCHEMA)
    )


def test_signup_flow_reports_errors_and_echoes_input_back() -> None:
    request = QueryRequest.parse("first=+John+&last=&email=john%40foo&age=ten&password=abc%0A&extra=1")

    form = _SignupForm.from_request(request)

    assert form.to_dict() == {"first_name": "John", "login": "john@foo", "age": "ten", "password": "abc"}
    assert form.errors() == {
        "last_name": ["Last name is required"],
        "login": ["Email like this is not valid"],
        "age": ["Age like this is not valid"],
        "password": ["Password must have at least 6 characters"],
    }
    assert form.field("password").type == "password"
    assert form.to_query_string() == "first=John&email=john%40foo&age=ten&password=abc"


def test_signup_flow_accepts_corrected_input_and_freezes() -> None:
    request = QueryRequest.parse("first=John&last=Doe&email=john%40foo.com&age=42&password=secret1")

    form = _SignupForm.from_request(request)

    assert form.is_valid()
    assert form.valid_values("login", "age") == ["john@foo.com", 42]

    snapshot = form.snapshot()
    form.age = 12

    assert snapshot.age == 42
    assert snapshot.is_valid()
    assert form.error_for("age") == "Age must be at least 13"
    assert form.only("login").build_url("/welcome", age=30) == "/welcome?email=john%40foo.com&age=30"


def test_password_pattern_messages() -> None:
    weak = _SignupForm.from_request(QueryRequest.parse("password=abcdefg"))
    exotic = _SignupForm.from_request(QueryRequest.parse("password=abc%C3%A9123"))

    assert weak.error_for("password") == "Password must contain at least one digit and one letter"
    assert exotic.error_for("password") == "Password may contain only ASCII characters and spaces"
