"""Per-record transformation for connection imports.

Classes:
    RecordTransformPipeline: Turns one raw record into a creation op and its issues
"""

import logging
from typing import Any, Callable, List, Mapping, Optional, Sequence

from .errors import ParseError, RecordShapeError
from .models import Connection, CreationOp, ImportRecord, ParseIssue, RecordOutcome
from .resolver import GroupFieldResolver

logger = logging.getLogger(__name__)

RecordAdapter = Callable[[Any], Any]


def issue_from_exception(error: Exception) -> ParseIssue:
    """Convert any exception raised while handling a record into a ParseIssue."""
    if isinstance(error, ParseError):
        return error.to_issue()
    return RecordShapeError(str(error) or error.__class__.__name__).to_issue()


def _unique(identifiers: Sequence[str]) -> tuple:
    return tuple(dict.fromkeys(identifiers))


class RecordTransformPipeline:
    """Applies format adapters and group resolution to individual records.

    Failures never escape a single record: each one becomes a ParseIssue
    on that record's outcome, and a placeholder creation op is still
    produced so that every input index has exactly one op.
    """

    def __init__(
        self,
        resolver: GroupFieldResolver,
        adapters: Optional[Sequence[RecordAdapter]] = None,
    ):
        """Initialize the pipeline.

        Args:
            resolver: Group resolver for the batch's group tree
            adapters: Format-specific functions applied in order to each raw record
        """
        self.resolver = resolver
        self.adapters = list(adapters or [])

    def transform(self, raw_record: Any, index: int) -> RecordOutcome:
        """Transform a single raw record.

        Args:
            raw_record: Record as produced by the format parser
            index: Position of the record in the batch

        Returns:
            RecordOutcome holding the creation op, issues and grantees
        """
        issues: List[ParseIssue] = []

        # Run the raw data through each adapter, keeping the last good value
        value = raw_record
        adapter_failed = False
        for adapter in self.adapters:
            try:
                value = adapter(value)
            except Exception as e:
                logger.info(f"Record {index}: adapter failed: {e}")
                issues.append(issue_from_exception(e))
                adapter_failed = True
                break

        if isinstance(value, ImportRecord):
            record = value
        elif isinstance(value, Mapping):
            record, field_errors = ImportRecord.coerce(value)
            for message in field_errors:
                logger.info(f"Record {index}: {message}")
                issues.append(RecordShapeError(message).to_issue())
        else:
            # Already reported by the failing adapter
            if not adapter_failed:
                logger.info(f"Record {index}: connection entry is not an object")
                issues.append(RecordShapeError("Connection entry must be an object").to_issue())
            record = ImportRecord()

        # Placement is only resolved for records that arrived intact
        if not issues:
            resolution = self.resolver.resolve(record)
            if resolution.success:
                record = resolution.record
            else:
                logger.info(f"Record {index}: {resolution.error.message}")
                issues.append(resolution.error.to_issue())

        return RecordOutcome(
            index=index,
            op=CreationOp(value=Connection.from_record(record)),
            issues=tuple(issues),
            users=_unique(record.users),
            groups=_unique(record.groups),
        )
