"""English message catalog for import errors.

Issues carry a stable translation key plus substitution variables. The
catalog below renders them for console output; variables are written as
``{NAME}`` placeholders. Issues without a key (such as raw parser errors)
fall back to their own message.
"""

import re
from typing import Mapping, Optional

from .errors import (
    ERROR_AMBIGUOUS_PARENT_GROUP,
    ERROR_ARRAY_REQUIRED,
    ERROR_EMPTY_FILE,
    ERROR_INVALID_GROUP,
    ERROR_INVALID_GROUP_IDENTIFIER,
    ParseError,
)
from .models import ParseIssue

DEFAULT_MESSAGES = {
    ERROR_ARRAY_REQUIRED: "The provided file must contain a list of connections.",
    ERROR_EMPTY_FILE: "The provided file does not contain any connections.",
    ERROR_INVALID_GROUP_IDENTIFIER: "No connection group with identifier \"{IDENTIFIER}\" exists.",
    ERROR_AMBIGUOUS_PARENT_GROUP: "Only one of \"group\" or \"parentIdentifier\" may be set.",
    ERROR_INVALID_GROUP: "No connection group named \"{GROUP}\" exists.",
}

_PLACEHOLDER = re.compile(r"\{([A-Z_]+)\}")


def format_message(
    message: str,
    key: Optional[str] = None,
    variables: Optional[Mapping[str, str]] = None,
    catalog: Optional[Mapping[str, str]] = None,
) -> str:
    """Render a message from the catalog, falling back to the plain message."""
    template = (catalog or DEFAULT_MESSAGES).get(key) if key else None
    if template is None:
        return message

    values = variables or {}
    return _PLACEHOLDER.sub(
        lambda match: str(values.get(match.group(1), match.group(0))), template
    )


def format_issue(issue: ParseIssue, catalog: Optional[Mapping[str, str]] = None) -> str:
    """Render a per-record issue for display."""
    return format_message(issue.message, issue.key, issue.variables, catalog)


def format_error(error: ParseError, catalog: Optional[Mapping[str, str]] = None) -> str:
    """Render a batch-fatal error for display."""
    return format_message(error.message, error.key, error.variables, catalog)
