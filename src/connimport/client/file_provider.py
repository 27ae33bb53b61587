"""File-backed group hierarchy provider.

Loads a connection group tree previously exported from the REST API (the
JSON body of ``connectionGroups/ROOT/tree``) or written by hand in YAML.
Useful for validating import files offline.
"""

import json
import logging
from pathlib import Path
from typing import Union

import yaml

from ..importer.errors import HierarchyFetchError
from ..importer.interfaces import GroupHierarchyProvider
from ..importer.models import GroupNode

logger = logging.getLogger(__name__)


class FileGroupHierarchyProvider(GroupHierarchyProvider):
    """Serves the same group tree from a local file for every data source."""

    def __init__(self, file_path: Union[str, Path]):
        self.file_path = Path(file_path)

    async def fetch_tree(self, data_source: str) -> GroupNode:
        """Load the tree from the file; ``data_source`` is ignored.

        Raises:
            HierarchyFetchError: If the file cannot be read or parsed
        """
        try:
            content = self.file_path.read_text(encoding="utf-8")
        except OSError as e:
            raise HierarchyFetchError(
                f"Could not read group tree file {self.file_path}: {e}", data_source=data_source
            ) from e

        try:
            if self.file_path.suffix.lower() == ".json":
                data = json.loads(content)
            else:
                data = yaml.safe_load(content)
            root = GroupNode.from_dict(data)
        except (json.JSONDecodeError, yaml.YAMLError, KeyError, TypeError, AttributeError) as e:
            raise HierarchyFetchError(
                f"Invalid group tree file {self.file_path}: {e}", data_source=data_source
            ) from e

        logger.debug(f"Loaded connection group tree from {self.file_path}")
        return root
