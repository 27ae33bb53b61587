"""Batch entry points for connection imports.

Each entry point takes the raw text of an import file and returns a
BatchResult describing the connections to create, the users and user
groups to grant access to them, and any per-record problems found.

Batch-fatal problems (unparseable input, a top-level value that is not a
list, an empty list) are raised as ParseError before any record is
processed.

Classes:
    ConnectionParseService: Parses CSV, YAML and JSON connection lists
"""

import logging
from typing import Any, List

from .aggregator import BatchAggregator, check_batch
from .group_index import GroupPathIndex
from .interfaces import GroupHierarchyProvider
from .models import BatchResult
from .pipeline import RecordAdapter
from .processors import CSVProcessor, FileFormatDetector, JSONProcessor, YAMLProcessor

logger = logging.getLogger(__name__)


class ConnectionParseService:
    """Converts connection import files into request-ready batch results."""

    def __init__(
        self,
        provider: GroupHierarchyProvider,
        data_source: str,
        max_workers: int = 1,
    ):
        """Initialize the parse service.

        Args:
            provider: Source of the connection group tree
            data_source: Data source the connections will be imported into
            max_workers: Number of threads used to transform records
        """
        self.provider = provider
        self.data_source = data_source
        self.max_workers = max_workers

    async def parse_csv(self, csv_data: str) -> BatchResult:
        """Parse a CSV connection list, whose first row is the header."""
        records, adapters = CSVProcessor().prepare(csv_data)
        return await self._parse_connection_data(records, adapters)

    async def parse_yaml(self, yaml_data: str) -> BatchResult:
        """Parse a YAML connection list."""
        records, adapters = YAMLProcessor().prepare(yaml_data)
        return await self._parse_connection_data(records, adapters)

    async def parse_json(self, json_data: str) -> BatchResult:
        """Parse a JSON connection list."""
        records, adapters = JSONProcessor().prepare(json_data)
        return await self._parse_connection_data(records, adapters)

    async def parse(self, data: str, format_type: str) -> BatchResult:
        """Parse a connection list in the named format ('csv', 'yaml' or 'json').

        Raises:
            ValueError: If the format is not supported
        """
        records, adapters = FileFormatDetector.get_processor(format_type).prepare(data)
        return await self._parse_connection_data(records, adapters)

    async def _parse_connection_data(
        self, records: Any, adapters: List[RecordAdapter]
    ) -> BatchResult:
        # Fail fast before fetching anything from the server
        check_batch(records)

        logger.debug(f"Fetching connection group tree for data source '{self.data_source}'")
        root = await self.provider.fetch_tree(self.data_source)
        index = GroupPathIndex.build(root)

        aggregator = BatchAggregator(index, max_workers=self.max_workers)
        return aggregator.aggregate(records, adapters)
