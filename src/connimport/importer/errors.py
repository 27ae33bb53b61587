"""Exception classes for connection import parsing.

Two tiers of failure exist. Batch-fatal errors (``FormatParseError``,
``NotAListError``, ``EmptyBatchError``) abort the whole import before any
record is processed. Record-local errors are recorded against a single
record index and never stop the batch.
"""

from typing import Dict, Optional

from .models import ParseIssue

ERROR_ARRAY_REQUIRED = "IMPORT.ERROR_ARRAY_REQUIRED"
ERROR_EMPTY_FILE = "IMPORT.ERROR_EMPTY_FILE"
ERROR_INVALID_GROUP_IDENTIFIER = "IMPORT.ERROR_INVALID_GROUP_IDENTIFIER"
ERROR_AMBIGUOUS_PARENT_GROUP = "IMPORT.ERROR_AMBIGUOUS_PARENT_GROUP"
ERROR_INVALID_GROUP = "IMPORT.ERROR_INVALID_GROUP"


class ParseError(Exception):
    """Base exception for import parsing failures."""

    def __init__(
        self,
        message: str,
        key: Optional[str] = None,
        variables: Optional[Dict[str, str]] = None,
    ):
        """Initialize parse error.

        Args:
            message: Human-readable error message
            key: Stable translation key, if one exists
            variables: Substitution variables for the translated message
        """
        super().__init__(message)
        self.message = message
        self.key = key
        self.variables = variables

    def to_issue(self) -> ParseIssue:
        """Convert this error into a ParseIssue for per-record reporting."""
        return ParseIssue(
            message=self.message,
            key=self.key,
            variables=dict(self.variables) if self.variables else None,
        )


class FormatParseError(ParseError):
    """Raised when the raw input cannot be parsed in its declared format."""

    def __init__(self, message: str):
        super().__init__(message)


class NotAListError(ParseError):
    """Raised when parsed import data is not a list of connections."""

    def __init__(self):
        super().__init__("Import data must be a list of connections", key=ERROR_ARRAY_REQUIRED)


class EmptyBatchError(ParseError):
    """Raised when parsed import data contains no connections."""

    def __init__(self):
        super().__init__("The provided file is empty", key=ERROR_EMPTY_FILE)


class UnknownParentIdentifierError(ParseError):
    """Raised when a record names a parentIdentifier absent from the group tree."""

    def __init__(self, identifier: str):
        super().__init__(
            f"No group with identifier: {identifier}",
            key=ERROR_INVALID_GROUP_IDENTIFIER,
            variables={"IDENTIFIER": identifier},
        )
        self.identifier = identifier


class AmbiguousParentError(ParseError):
    """Raised when a record sets both a group path and a parentIdentifier."""

    def __init__(self):
        super().__init__(
            "Only one of group or parentIdentifier can be set",
            key=ERROR_AMBIGUOUS_PARENT_GROUP,
        )


class UnknownGroupPathError(ParseError):
    """Raised when a record's group path matches no group in the tree."""

    def __init__(self, group: str):
        super().__init__(
            f"No group found named: {group}",
            key=ERROR_INVALID_GROUP,
            variables={"GROUP": group},
        )
        self.group = group


class RecordShapeError(ParseError):
    """Raised when a single record cannot be coerced into an import record."""

    def __init__(self, message: str):
        super().__init__(message)


class HierarchyFetchError(Exception):
    """Raised when the connection group tree cannot be retrieved."""

    def __init__(self, message: str, data_source: Optional[str] = None):
        """Initialize hierarchy fetch error.

        Args:
            message: Error message
            data_source: Data source whose tree was requested
        """
        super().__init__(message)
        self.data_source = data_source
