"""Tests for import error message rendering."""

from connimport.importer.errors import (
    EmptyBatchError,
    FormatParseError,
    UnknownGroupPathError,
    UnknownParentIdentifierError,
)
from connimport.importer.messages import format_error, format_issue, format_message
from connimport.importer.models import ParseIssue


def test_format_message_substitutes_variables():
    message = format_message(
        "No group found named: Sales",
        "IMPORT.ERROR_INVALID_GROUP",
        {"GROUP": "Sales"},
    )

    assert message == 'No connection group named "Sales" exists.'


def test_format_message_without_key_uses_plain_message():
    assert format_message("Expecting value") == "Expecting value"


def test_format_message_with_unknown_key_uses_plain_message():
    assert format_message("Fallback", "IMPORT.ERROR_SOMETHING_ELSE") == "Fallback"


def test_format_message_keeps_missing_placeholders():
    message = format_message("unused", "IMPORT.ERROR_INVALID_GROUP")

    assert message == 'No connection group named "{GROUP}" exists.'


def test_format_message_with_custom_catalog():
    catalog = {"IMPORT.ERROR_INVALID_GROUP": "Gruppe {GROUP} existiert nicht"}

    message = format_message("unused", "IMPORT.ERROR_INVALID_GROUP", {"GROUP": "EU"}, catalog)

    assert message == "Gruppe EU existiert nicht"


def test_format_issue():
    issue = UnknownParentIdentifierError("g-9").to_issue()

    assert format_issue(issue) == 'No connection group with identifier "g-9" exists.'


def test_format_issue_without_key():
    assert format_issue(ParseIssue(message="Row has 3 values")) == "Row has 3 values"


def test_format_error():
    assert format_error(EmptyBatchError()) == (
        "The provided file does not contain any connections."
    )
    assert format_error(FormatParseError("bad input")) == "bad input"


def test_format_error_for_group_path():
    assert "EU/Web" in format_error(UnknownGroupPathError("EU/Web"))
