from __future__ import annotations

from forminput import QueryRequest, Schema, StepForm

STEP_PARAMS = {
    "email": "email=john@foo.com",
    "message": "message=blah",
}


class _InquiryForm(StepForm):
    schema = (
        Schema()
        .with_steps(
            {
                "intro": "Intro",
                "email": "Email",
                "name": "Name",
                "address": "Address",
                "message": "Message",
                "post": None,
            },
        )
        .required_param("email", tag="email")
        .param("first_name", tag="name")
        .param("last_name", tag="name")
        .param("street", tag="address")
        .param("city", tag="address")
        .param("zip", tag="address")
        .required_param("message", tag="message")
        .param("comment", tag="message")
        .param("url", type="hidden")
    )


def _submit(form: _InquiryForm, params: str | None) -> _InquiryForm:
    """Round trip the form through a URL, the way a browser posting it back would."""
    return _InquiryForm(QueryRequest.parse(form.extend_url(f"?{params or ''}")))


def test_progressing_through_all_steps() -> None:
    expected = [
        "step=intro&next=intro&last=intro",
        "step=email&next=email&last=email&seen=intro",
        "step=name&next=name&last=name&seen=email&email=john%40foo.com",
        "step=address&next=address&last=address&seen=name&email=john%40foo.com",
        "step=message&next=message&last=message&seen=address&email=john%40foo.com",
        "step=post&next=post&last=post&seen=message&email=john%40foo.com&message=blah",
        "step=post&next=post&last=post&seen=post&email=john%40foo.com&message=blah",
    ]
    seen: list[str] = []

    form = _InquiryForm()
    while form.seen != "post":
        assert form.to_query_string() == expected.pop(0)
        assert form.step == form.next_step(seen[-1] if seen else None)
        assert form.next == form.step
        assert form.seen == (seen[-1] if seen else None)
        assert form.last == form.step

        seen.append(form.step)
        params = STEP_PARAMS.get(form.step)
        form.next = form.next_step()
        form = _submit(form, params)

    assert form.to_query_string() == expected.pop(0)
    assert expected == []
    assert seen == form.steps


def test_refusing_to_progress_until_step_is_valid() -> None:
    expected = [
        "step=intro&next=intro&last=intro",
        "step=email&next=email&last=email&seen=intro",
        "step=email&next=name&last=email&seen=email",
        "step=name&next=name&last=name&seen=email&email=john%40foo.com",
        "step=address&next=address&last=address&seen=name&email=john%40foo.com",
        "step=message&next=message&last=message&seen=address&email=john%40foo.com",
        "step=message&next=post&last=message&seen=message&email=john%40foo.com",
        "step=post&next=post&last=post&seen=message&email=john%40foo.com&message=blah",
        "step=post&next=post&last=post&seen=post&email=john%40foo.com&message=blah",
        "step=post&next=post&last=post&seen=post&email=john%40foo.com&message=blah",
    ]

    form = _InquiryForm()
    while expected:
        assert form.to_query_string() == expected.pop(0)
        params = STEP_PARAMS.get(form.seen)
        form.next = form.next_step()
        form = _submit(form, params)


def test_stepping_back_through_all_steps() -> None:
    expected = [
        "step=post&next=post&last=post&seen=post&email=john%40foo.com&message=blah",
        "step=message&next=message&last=post&seen=post&email=john%40foo.com&message=blah",
        "step=address&next=address&last=post&seen=post&email=john%40foo.com&message=blah",
        "step=name&next=name&last=post&seen=post&email=john%40foo.com&message=blah",
        "step=email&next=email&last=post&seen=post&email=john%40foo.com&message=blah",
        "step=intro&next=intro&last=post&seen=post&email=john%40foo.com&message=blah",
        "step=intro&next=intro&last=post&seen=post&email=john%40foo.com&message=blah",
    ]
    seen: list[str] = []

    form = _InquiryForm(QueryRequest.parse(f"?{expected[0]}"))
    while len(expected) > 1:
        assert form.to_query_string() == expected.pop(0)
        seen.append(form.step)
        form.next = form.previous_step()
        form = _submit(form, None)

    assert form.to_query_string() == expected.pop(0)
    assert seen == list(reversed(form.steps))


def test_refusing_to_step_back_across_invalid_steps() -> None:
    expected = [
        "step=post&next=intro&last=post&seen=post",
        "step=message&next=message&last=post&seen=post",
        "step=message&next=address&last=post&seen=post",
        "step=address&next=address&last=post&seen=post&message=blah",
        "step=name&next=name&last=post&seen=post&message=blah",
        "step=email&next=email&last=post&seen=post&message=blah",
        "step=email&next=intro&last=post&seen=post&message=blah",
        "step=intro&next=intro&last=post&seen=post&email=john%40foo.com&message=blah",
        "step=intro&next=intro&last=post&seen=post&email=john%40foo.com&message=blah",
    ]
    params = None

    form = _InquiryForm().unlock_steps()
    form.step = form.last_step()
    while expected:
        assert form.to_query_string() == expected.pop(0)
        if form.step != form.next:
            params = STEP_PARAMS.get(form.step)
        form.next = form.previous_step()
        form = _submit(form, params)
