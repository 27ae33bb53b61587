"""Batch aggregation for connection imports.

Classes:
    BatchAggregator: Folds per-record outcomes into a single BatchResult
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from types import MappingProxyType
from typing import Any, Dict, List, Optional, Sequence

from .errors import EmptyBatchError, NotAListError
from .group_index import GroupPathIndex
from .models import BatchResult, RecordOutcome
from .pipeline import RecordAdapter, RecordTransformPipeline
from .resolver import GroupFieldResolver

logger = logging.getLogger(__name__)


def check_batch(records: Any) -> None:
    """Perform the checks common to all input formats.

    Raises:
        NotAListError: If the parsed data is not a list of connections
        EmptyBatchError: If the list contains no connections
    """
    if not isinstance(records, (list, tuple)):
        raise NotAListError()

    if not records:
        raise EmptyBatchError()


def merge_outcomes(outcomes: Sequence[RecordOutcome]) -> BatchResult:
    """Combine record outcomes into a BatchResult.

    Outcomes are merged in ascending index order regardless of the order
    they are given in, so grant index lists are always sorted.
    """
    ordered = sorted(outcomes, key=lambda outcome: outcome.index)

    users: Dict[str, List[int]] = {}
    groups: Dict[str, List[int]] = {}

    for outcome in ordered:
        for identifier in outcome.users:
            users.setdefault(identifier, []).append(outcome.index)
        for identifier in outcome.groups:
            groups.setdefault(identifier, []).append(outcome.index)

    return BatchResult(
        creation_ops=tuple(outcome.op for outcome in ordered),
        grantee_users=MappingProxyType({key: tuple(value) for key, value in users.items()}),
        grantee_groups=MappingProxyType({key: tuple(value) for key, value in groups.items()}),
        issues_by_record=tuple(outcome.issues for outcome in ordered),
        has_errors=any(outcome.has_issues for outcome in ordered),
    )


class BatchAggregator:
    """Runs the transform pipeline over a batch and collects the results."""

    def __init__(self, index: GroupPathIndex, max_workers: int = 1):
        """Initialize the aggregator.

        Args:
            index: Path index of the target data source's group tree
            max_workers: Number of threads used to transform records (1 = sequential)
        """
        self.index = index
        self.max_workers = max(1, max_workers)
        self.resolver = GroupFieldResolver(index)

    def aggregate(
        self, records: Any, adapters: Optional[Sequence[RecordAdapter]] = None
    ) -> BatchResult:
        """Transform every record of a batch into a single BatchResult.

        Args:
            records: Raw records parsed from the import file
            adapters: Format-specific functions applied to each raw record

        Returns:
            BatchResult for the whole batch

        Raises:
            NotAListError: If ``records`` is not a list
            EmptyBatchError: If ``records`` is empty
        """
        check_batch(records)

        pipeline = RecordTransformPipeline(self.resolver, adapters)
        logger.info(f"Processing {len(records)} connection records")

        slots: List[Optional[RecordOutcome]] = [None] * len(records)
        if self.max_workers == 1:
            for index, record in enumerate(records):
                slots[index] = pipeline.transform(record, index)
        else:
            with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
                futures = [
                    executor.submit(pipeline.transform, record, index)
                    for index, record in enumerate(records)
                ]
                for future in futures:
                    outcome = future.result()
                    slots[outcome.index] = outcome

        result = merge_outcomes([outcome for outcome in slots if outcome is not None])

        if result.has_errors:
            logger.info(
                f"{len(result.failed_indices)} of {result.total} connection records have errors"
            )
        else:
            logger.info(f"All {result.total} connection records parsed successfully")

        return result
