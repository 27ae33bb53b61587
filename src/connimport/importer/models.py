"""Data models for connection import parsing.

This module defines the immutable structures that flow through the import
pipeline, from the fetched connection group tree through individual import
records to the final batch result.
"""

from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Tuple

ROOT_GROUP_IDENTIFIER = "ROOT"

GROUP_FIELD = "group"
PARENT_IDENTIFIER_FIELD = "parentIdentifier"
USERS_FIELD = "users"
GROUPS_FIELD = "groups"

RECORD_FIELDS = frozenset({GROUP_FIELD, PARENT_IDENTIFIER_FIELD, USERS_FIELD, GROUPS_FIELD})


@dataclass(frozen=True)
class GroupNode:
    """A connection group in the hierarchy fetched from the server."""

    identifier: str
    name: str
    children: Tuple["GroupNode", ...] = ()

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "GroupNode":
        """Build a group tree from its serialized form.

        Accepts the REST tree shape, where child groups are listed under
        ``childConnectionGroups``, as well as a plain ``children`` key.
        Child connections are ignored.

        Raises:
            KeyError: If a node lacks an identifier or name
        """
        children = data.get("childConnectionGroups")
        if children is None:
            children = data.get("children") or []

        return cls(
            identifier=str(data["identifier"]),
            name=str(data["name"]),
            children=tuple(cls.from_dict(child) for child in children),
        )


@dataclass(frozen=True)
class ParseIssue:
    """A single failure, localizable through its translation key."""

    message: str
    key: Optional[str] = None
    variables: Optional[Dict[str, str]] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"message": self.message}
        if self.key:
            data["key"] = self.key
        if self.variables:
            data["variables"] = dict(self.variables)
        return data


def _coerce_identifier(value: Any, field_name: str) -> Optional[str]:
    """Coerce a scalar field to a string, treating empty values as absent."""
    if value is None or value == "":
        return None
    if isinstance(value, (dict, list, tuple, set)):
        raise TypeError(f"'{field_name}' must be a single value")
    return str(value)


def _coerce_identifier_list(value: Any, field_name: str) -> Tuple[str, ...]:
    """Coerce a users/groups field into a tuple of identifiers.

    Null and empty entries are skipped, as an empty field is.
    """
    if value is None:
        return ()
    if isinstance(value, str):
        return (value,) if value else ()
    if isinstance(value, (list, tuple)):
        identifiers = []
        for item in value:
            if item is None or item == "":
                continue
            if isinstance(item, (dict, list, tuple, set)):
                raise TypeError(f"'{field_name}' must contain only identifiers")
            identifiers.append(str(item))
        return tuple(identifiers)
    raise TypeError(f"'{field_name}' must be a list of identifiers")


@dataclass(frozen=True)
class ImportRecord:
    """One connection entry from an import file.

    Only the fields that drive placement and grants are named. Every other
    key is kept verbatim in ``payload`` and passed through to the created
    connection.
    """

    group: Optional[str] = None
    parent_identifier: Optional[str] = None
    users: Tuple[str, ...] = ()
    groups: Tuple[str, ...] = ()
    payload: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def coerce(cls, raw: Mapping[str, Any]) -> Tuple["ImportRecord", Tuple[str, ...]]:
        """Build a record field by field, collecting shape errors.

        A named field with the wrong shape is left unset and reported; the
        remaining fields and the payload are still filled in.

        Args:
            raw: Raw mapping produced by the format adapters

        Returns:
            Tuple of (record, field error messages)
        """
        errors: List[str] = []

        def field_value(coerce_value, field_name, empty):
            try:
                return coerce_value(raw.get(field_name), field_name)
            except TypeError as e:
                errors.append(str(e))
                return empty

        record = cls(
            group=field_value(_coerce_identifier, GROUP_FIELD, None),
            parent_identifier=field_value(_coerce_identifier, PARENT_IDENTIFIER_FIELD, None),
            users=field_value(_coerce_identifier_list, USERS_FIELD, ()),
            groups=field_value(_coerce_identifier_list, GROUPS_FIELD, ()),
            payload={key: value for key, value in raw.items() if key not in RECORD_FIELDS},
        )
        return record, tuple(errors)

    @classmethod
    def from_mapping(cls, raw: Any) -> "ImportRecord":
        """Build a record from a raw mapping produced by a format adapter.

        Raises:
            TypeError: If the raw value or one of its named fields has the
                wrong shape
        """
        if isinstance(raw, ImportRecord):
            return raw
        if not isinstance(raw, Mapping):
            raise TypeError("Connection entry must be an object")

        record, errors = cls.coerce(raw)
        if errors:
            raise TypeError(errors[0])
        return record

    def with_parent(self, parent_identifier: str) -> "ImportRecord":
        """Return a copy placed under the given group, with the group path removed."""
        return replace(self, group=None, parent_identifier=parent_identifier)


@dataclass(frozen=True)
class Connection:
    """The attributes of a connection to be created."""

    parent_identifier: Optional[str] = None
    fields: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def from_record(cls, record: ImportRecord) -> "Connection":
        return cls(parent_identifier=record.parent_identifier, fields=dict(record.payload))

    @property
    def name(self) -> Optional[str]:
        return self.fields.get("name")

    @property
    def protocol(self) -> Optional[str]:
        return self.fields.get("protocol")

    def to_dict(self) -> Dict[str, Any]:
        data = dict(self.fields)
        if self.parent_identifier is not None:
            data[PARENT_IDENTIFIER_FIELD] = self.parent_identifier
        return data


@dataclass(frozen=True)
class CreationOp:
    """A JSON-patch style instruction to add one connection."""

    value: Connection
    op: str = "add"
    path: str = "/"

    @property
    def parent_identifier(self) -> Optional[str]:
        return self.value.parent_identifier

    def to_dict(self) -> Dict[str, Any]:
        return {"op": self.op, "path": self.path, "value": self.value.to_dict()}


@dataclass(frozen=True)
class RecordOutcome:
    """Everything one record contributes to a batch result."""

    index: int
    op: CreationOp
    issues: Tuple[ParseIssue, ...] = ()
    users: Tuple[str, ...] = ()
    groups: Tuple[str, ...] = ()

    @property
    def has_issues(self) -> bool:
        return bool(self.issues)


@dataclass(frozen=True)
class BatchResult:
    """The outcome of parsing one import batch.

    ``creation_ops`` and ``issues_by_record`` are index-aligned with the
    input records. Grant maps associate each user or user group identifier
    with the ascending indices of the records that name it.
    """

    creation_ops: Tuple[CreationOp, ...] = ()
    grantee_users: Mapping[str, Tuple[int, ...]] = field(
        default_factory=lambda: MappingProxyType({})
    )
    grantee_groups: Mapping[str, Tuple[int, ...]] = field(
        default_factory=lambda: MappingProxyType({})
    )
    issues_by_record: Tuple[Tuple[ParseIssue, ...], ...] = ()
    has_errors: bool = False

    @property
    def total(self) -> int:
        return len(self.creation_ops)

    @property
    def failed_indices(self) -> List[int]:
        return [index for index, issues in enumerate(self.issues_by_record) if issues]

    @property
    def error_count(self) -> int:
        return sum(len(issues) for issues in self.issues_by_record)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "patches": [op.to_dict() for op in self.creation_ops],
            "users": {
                identifier: list(indices) for identifier, indices in self.grantee_users.items()
            },
            "groups": {
                identifier: list(indices) for identifier, indices in self.grantee_groups.items()
            },
            "errors": [[issue.to_dict() for issue in issues] for issues in self.issues_by_record],
            "hasErrors": self.has_errors,
        }
