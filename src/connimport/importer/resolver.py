"""Group placement resolution for import records.

This module rewrites the human-readable ``group`` path of an import record
into the ``parentIdentifier`` of the group it names, using a GroupPathIndex
built from the server's connection group tree.

A group path may be written in three equivalent ways, all naming the same
group::

    ROOT/Sales/EU
    /Sales/EU
    Sales/EU

and may end with a single trailing slash.

Classes:
    ResolutionResult: Outcome of resolving one record
    GroupFieldResolver: Resolves group paths against a GroupPathIndex
"""

import logging
from dataclasses import dataclass
from typing import Optional

from .errors import (
    AmbiguousParentError,
    ParseError,
    UnknownGroupPathError,
    UnknownParentIdentifierError,
)
from .group_index import GroupPathIndex
from .models import ImportRecord

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolutionResult:
    """Result of a group resolution operation."""

    success: bool
    record: ImportRecord
    error: Optional[ParseError] = None

    @classmethod
    def resolved(cls, record: ImportRecord) -> "ResolutionResult":
        return cls(success=True, record=record)

    @classmethod
    def failed(cls, record: ImportRecord, error: ParseError) -> "ResolutionResult":
        return cls(success=False, record=record, error=error)


class GroupFieldResolver:
    """Resolves the placement of import records within the group tree."""

    def __init__(self, index: GroupPathIndex):
        """Initialize the resolver.

        Args:
            index: Path index of the target data source's group tree
        """
        self.index = index

    def normalize_path(self, group: str) -> str:
        """Convert any accepted spelling of a group path to its canonical form."""
        root_name = self.index.root_name

        if group.startswith("/"):
            group = root_name + group
        elif not group.startswith(root_name):
            group = f"{root_name}/{group}"

        if group.endswith("/"):
            group = group[:-1]

        return group

    def resolve(self, record: ImportRecord) -> ResolutionResult:
        """Resolve the placement of a single record.

        A record without a group path is returned unchanged, provided any
        parentIdentifier it carries is known. A record with a group path
        must not also carry a parentIdentifier; its path is looked up and
        replaced by the identifier of the matching group.

        On failure the returned result carries the original record and the
        error describing why it could not be placed.

        Args:
            record: Import record to resolve

        Returns:
            ResolutionResult with the resolved record or the failure
        """
        parent_identifier = record.parent_identifier

        if record.group is None:
            if parent_identifier is None or self.index.contains(parent_identifier):
                return ResolutionResult.resolved(record)

            return ResolutionResult.failed(record, UnknownParentIdentifierError(parent_identifier))

        # Ambiguity takes precedence over path validity
        if parent_identifier is not None:
            return ResolutionResult.failed(record, AmbiguousParentError())

        path = self.normalize_path(record.group)
        identifier = self.index.lookup(path)

        if identifier is None:
            return ResolutionResult.failed(record, UnknownGroupPathError(record.group))

        logger.debug(f"Resolved group '{record.group}' to identifier '{identifier}'")
        return ResolutionResult.resolved(record.with_parent(identifier))
