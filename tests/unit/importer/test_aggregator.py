"""Tests for batch aggregation."""

import pytest

from connimport.importer.aggregator import BatchAggregator, check_batch, merge_outcomes
from connimport.importer.errors import EmptyBatchError, NotAListError
from connimport.importer.models import Connection, CreationOp, ParseIssue, RecordOutcome


@pytest.fixture
def aggregator(group_index):
    """Create a sequential BatchAggregator for the sample tree."""
    return BatchAggregator(group_index)


def _sample_records():
    return [
        {"name": "a", "group": "East", "users": ["alice", "bob"], "groups": ["ops"]},
        {"name": "b", "group": "Nowhere", "users": ["alice"]},
        {"name": "c", "parentIdentifier": "g-west", "groups": ["ops", "dev"]},
        "not an object",
        {"name": "e", "group": "/East/Web/", "users": ["carol"]},
    ]


class TestBatchChecks:
    """Test batch-level preconditions."""

    def test_empty_batch(self, aggregator):
        """Test an empty list fails as an empty file."""
        with pytest.raises(EmptyBatchError) as exc_info:
            aggregator.aggregate([])

        assert exc_info.value.key == "IMPORT.ERROR_EMPTY_FILE"
        assert exc_info.value.message == "The provided file is empty"

    @pytest.mark.parametrize("data", [{}, {"name": "a"}, "text", 5, None])
    def test_not_a_list(self, aggregator, data):
        """Test non-list input fails as not-an-array."""
        with pytest.raises(NotAListError) as exc_info:
            aggregator.aggregate(data)

        assert exc_info.value.key == "IMPORT.ERROR_ARRAY_REQUIRED"
        assert exc_info.value.message == "Import data must be a list of connections"

    def test_check_batch_accepts_tuple(self):
        check_batch(({"name": "a"},))


class TestBatchAggregator:
    """Test BatchAggregator.aggregate."""

    def test_two_record_scenario(self, aggregator):
        """Test a group path and a direct identifier both resolve cleanly."""
        result = aggregator.aggregate(
            [{"group": "ROOT/East", "users": ["alice"]}, {"parentIdentifier": "g-42"}]
        )

        assert result.creation_ops[0].parent_identifier == "g-east"
        assert result.creation_ops[1].parent_identifier == "g-42"
        assert result.issues_by_record == ((), ())
        assert dict(result.grantee_users) == {"alice": (0,)}
        assert dict(result.grantee_groups) == {}
        assert result.has_errors is False

    def test_ambiguous_record_still_produces_op(self, aggregator):
        """Test an ambiguous record fails alone while keeping its op."""
        result = aggregator.aggregate([{"group": "Nonexistent", "parentIdentifier": "g-42"}])

        assert len(result.creation_ops) == 1
        assert result.issues_by_record[0][0].key == "IMPORT.ERROR_AMBIGUOUS_PARENT_GROUP"
        assert result.has_errors is True

    def test_unknown_group_path_variables(self, aggregator):
        """Test an unknown path reports the path as a variable."""
        result = aggregator.aggregate([{"group": "Missing/Path"}])

        issue = result.issues_by_record[0][0]
        assert issue.key == "IMPORT.ERROR_INVALID_GROUP"
        assert issue.variables["GROUP"] == "Missing/Path"

    def test_index_alignment(self, aggregator):
        """Test ops and issues stay aligned with input order."""
        records = _sample_records()
        result = aggregator.aggregate(records)

        assert len(result.creation_ops) == len(records)
        assert len(result.issues_by_record) == len(records)
        assert [op.value.name for op in result.creation_ops] == ["a", "b", "c", None, "e"]
        assert [op.parent_identifier for op in result.creation_ops] == [
            "g-east",
            None,
            "g-west",
            None,
            "g-east-web",
        ]
        assert result.failed_indices == [1, 3]
        assert result.has_errors is True

    def test_grant_indices(self, aggregator):
        """Test every grantee maps to each naming record exactly once, in order."""
        result = aggregator.aggregate(_sample_records())

        assert dict(result.grantee_users) == {
            "alice": (0, 1),
            "bob": (0,),
            "carol": (4,),
        }
        assert dict(result.grantee_groups) == {"ops": (0, 2), "dev": (2,)}

    def test_malformed_group_still_grants_access(self, aggregator):
        """Test grantees of a record with a badly shaped group are still indexed."""
        result = aggregator.aggregate(
            [{"name": "a", "group": ["East"], "users": ["alice"], "groups": ["ops"]}]
        )

        assert result.issues_by_record[0][0].message == "'group' must be a single value"
        assert dict(result.grantee_users) == {"alice": (0,)}
        assert dict(result.grantee_groups) == {"ops": (0,)}
        assert result.creation_ops[0].value.to_dict() == {"name": "a"}
        assert result.has_errors is True

    def test_null_grantee_is_not_granted(self, aggregator):
        """Test a null entry in a users list grants nothing."""
        result = aggregator.aggregate([{"name": "a", "users": ["alice", None]}])

        assert dict(result.grantee_users) == {"alice": (0,)}
        assert result.has_errors is False

    def test_has_errors_matches_issues(self, aggregator):
        """Test has_errors is set exactly when some record has issues."""
        clean = aggregator.aggregate([{"name": "a"}, {"group": "West"}])
        dirty = aggregator.aggregate([{"name": "a"}, {"group": "Nowhere"}])

        assert clean.has_errors is any(clean.issues_by_record)
        assert dirty.has_errors is any(dirty.issues_by_record)
        assert clean.has_errors is False
        assert dirty.has_errors is True

    def test_adapters_are_applied(self, aggregator):
        """Test adapters given to aggregate run on every record."""
        result = aggregator.aggregate(
            [["a", "East"], ["b", "West"]],
            adapters=[lambda row: {"name": row[0], "group": row[1]}],
        )

        assert [op.parent_identifier for op in result.creation_ops] == ["g-east", "g-west"]

    def test_threaded_matches_sequential(self, group_index):
        """Test parallel transformation gives the same result as sequential."""
        records = _sample_records() * 20

        sequential = BatchAggregator(group_index).aggregate(records)
        threaded = BatchAggregator(group_index, max_workers=4).aggregate(records)

        assert threaded.to_dict() == sequential.to_dict()
        assert threaded.creation_ops == sequential.creation_ops

    def test_max_workers_floor(self, group_index):
        assert BatchAggregator(group_index, max_workers=0).max_workers == 1


class TestMergeOutcomes:
    """Test merge_outcomes."""

    def test_merge_orders_by_index(self):
        """Test outcomes given out of order are merged by index."""
        outcomes = [
            RecordOutcome(
                index=1,
                op=CreationOp(value=Connection(fields={"name": "second"})),
                users=("alice",),
            ),
            RecordOutcome(
                index=0,
                op=CreationOp(value=Connection(fields={"name": "first"})),
                issues=(ParseIssue(message="bad"),),
                users=("alice",),
            ),
        ]

        result = merge_outcomes(outcomes)

        assert [op.value.name for op in result.creation_ops] == ["first", "second"]
        assert result.issues_by_record == ((ParseIssue(message="bad"),), ())
        assert dict(result.grantee_users) == {"alice": (0, 1)}
        assert result.has_errors is True

    def test_result_maps_are_read_only(self):
        """Test grant maps cannot be modified after aggregation."""
        result = merge_outcomes(
            [RecordOutcome(index=0, op=CreationOp(value=Connection()), users=("alice",))]
        )

        with pytest.raises(TypeError):
            result.grantee_users["bob"] = (0,)
