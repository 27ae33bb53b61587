"""Tests for import data models."""

import pytest

from connimport.importer.models import (
    BatchResult,
    Connection,
    CreationOp,
    ImportRecord,
    ParseIssue,
)


class TestImportRecord:
    """Test ImportRecord construction from raw mappings."""

    def test_from_mapping_named_fields(self):
        """Test named fields are extracted and the rest kept as payload."""
        record = ImportRecord.from_mapping(
            {
                "name": "web-1",
                "protocol": "ssh",
                "group": "East",
                "users": ["alice", "bob"],
                "groups": ["admins"],
                "parameters": {"hostname": "10.0.0.5"},
            }
        )

        assert record.group == "East"
        assert record.parent_identifier is None
        assert record.users == ("alice", "bob")
        assert record.groups == ("admins",)
        assert record.payload == {
            "name": "web-1",
            "protocol": "ssh",
            "parameters": {"hostname": "10.0.0.5"},
        }

    def test_empty_placement_fields_are_absent(self):
        """Test empty group and parentIdentifier values count as missing."""
        record = ImportRecord.from_mapping({"group": "", "parentIdentifier": None})

        assert record.group is None
        assert record.parent_identifier is None

    def test_numeric_identifiers_become_strings(self):
        """Test numeric identifiers from YAML/JSON are stringified."""
        record = ImportRecord.from_mapping({"parentIdentifier": 12, "users": [1001]})

        assert record.parent_identifier == "12"
        assert record.users == ("1001",)

    def test_single_string_grantee(self):
        """Test a single string is accepted for users and groups."""
        record = ImportRecord.from_mapping({"users": "alice", "groups": ""})

        assert record.users == ("alice",)
        assert record.groups == ()

    def test_null_and_empty_grantees_are_skipped(self):
        """Test null and empty list entries are dropped rather than stringified."""
        record = ImportRecord.from_mapping({"users": ["alice", None, ""], "groups": [None]})

        assert record.users == ("alice",)
        assert record.groups == ()

    def test_coerce_collects_field_errors(self):
        """Test coerce keeps the valid fields and reports the malformed ones."""
        record, errors = ImportRecord.coerce(
            {"name": "a", "group": ["East"], "parentIdentifier": {}, "users": ["alice"]}
        )

        assert errors == (
            "'group' must be a single value",
            "'parentIdentifier' must be a single value",
        )
        assert record.group is None
        assert record.parent_identifier is None
        assert record.users == ("alice",)
        assert record.payload == {"name": "a"}

    @pytest.mark.parametrize(
        "raw",
        [
            "not-an-object",
            ["a", "list"],
            42,
            None,
            {"users": {"alice": True}},
            {"groups": [["nested"]]},
            {"group": ["East"]},
        ],
    )
    def test_invalid_shapes(self, raw):
        """Test malformed records raise TypeError."""
        with pytest.raises(TypeError):
            ImportRecord.from_mapping(raw)

    def test_with_parent(self):
        """Test with_parent replaces the group path."""
        record = ImportRecord(group="East", users=("alice",), payload={"name": "c"})
        placed = record.with_parent("g-east")

        assert placed.group is None
        assert placed.parent_identifier == "g-east"
        assert placed.users == ("alice",)
        assert placed.payload == {"name": "c"}
        assert record.group == "East"


class TestConnection:
    """Test Connection and CreationOp serialization."""

    def test_to_dict_with_parent(self):
        """Test the parent identifier is emitted with the payload."""
        record = ImportRecord(parent_identifier="g-1", payload={"name": "c", "protocol": "rdp"})
        connection = Connection.from_record(record)

        assert connection.name == "c"
        assert connection.protocol == "rdp"
        assert connection.to_dict() == {"name": "c", "protocol": "rdp", "parentIdentifier": "g-1"}

    def test_to_dict_without_parent(self):
        """Test no parentIdentifier key is emitted when placement is unknown."""
        connection = Connection.from_record(ImportRecord(group="Nowhere", payload={"name": "c"}))
        assert connection.to_dict() == {"name": "c"}

    def test_creation_op(self):
        """Test creation ops are JSON-patch add operations at the root."""
        op = CreationOp(value=Connection(parent_identifier="g-1", fields={"name": "c"}))

        assert op.parent_identifier == "g-1"
        assert op.to_dict() == {
            "op": "add",
            "path": "/",
            "value": {"name": "c", "parentIdentifier": "g-1"},
        }


class TestBatchResult:
    """Test BatchResult helpers."""

    def test_empty_result(self):
        result = BatchResult()

        assert result.total == 0
        assert result.failed_indices == []
        assert result.error_count == 0
        assert result.has_errors is False

    def test_to_dict(self):
        """Test the serialized result shape."""
        issue = ParseIssue(message="bad", key="K", variables={"GROUP": "x"})
        result = BatchResult(
            creation_ops=(CreationOp(value=Connection(fields={"name": "a"})),),
            grantee_users={"alice": (0,)},
            grantee_groups={},
            issues_by_record=((issue,),),
            has_errors=True,
        )

        assert result.failed_indices == [0]
        assert result.error_count == 1
        assert result.to_dict() == {
            "patches": [{"op": "add", "path": "/", "value": {"name": "a"}}],
            "users": {"alice": [0]},
            "groups": {},
            "errors": [[{"message": "bad", "key": "K", "variables": {"GROUP": "x"}}]],
            "hasErrors": True,
        }

    def test_issue_without_key(self):
        """Test keyless issues serialize only their message."""
        assert ParseIssue(message="oops").to_dict() == {"message": "oops"}
