import pytest
from pydantic import ValidationError

from todo_printer.web import schemas as s


def test_schema_trims_and_blanks_optional_fields():
    req = s.TicketRequest.model_validate({"title": "  Buy milk ", "assignee": "   ", "description": " 2 liters "})
    assert req.title == "Buy milk"
    assert req.assignee is None
    assert req.description == "2 liters"


def test_schema_coerces_non_string_optionals():
    req = s.TicketRequest.model_validate({"title": "Call", "assignee": 42})
    assert req.assignee == "42"


@pytest.mark.parametrize("title", [None, "", "  ", 7, ["x"]])
def test_schema_title_required(title):
    with pytest.raises(ValidationError):
        s.TicketRequest.model_validate({"title": title})


def test_schema_rejects_control_chars_in_title():
    with pytest.raises(ValidationError):
        s.TicketRequest.model_validate({"title": "bad\x1bE"})


def test_schema_length_limits():
    with pytest.raises(ValidationError):
        s.TicketRequest.model_validate({"title": "x" * (s.MAX_TITLE_LEN + 1)})
    with pytest.raises(ValidationError):
        s.TicketRequest.model_validate({"title": "ok", "description": "x" * (s.MAX_DESCRIPTION_LEN + 1)})


@pytest.mark.parametrize("field", ["assignee", "description"])
def test_schema_rejects_control_chars_in_optional_fields(field):
    with pytest.raises(ValidationError) as exc:
        s.TicketRequest.model_validate({"title": "ok", field: "A\x1bi"})
    assert "control characters" in str(exc.value)


def test_schema_allows_newlines_and_tabs_in_description():
    req = s.TicketRequest.model_validate({"title": "ok", "description": "line one\n\tline two"})
    assert req.description == "line one\n\tline two"
