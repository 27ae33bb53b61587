"""
Interfaces for the external collaborators of the import pipeline.

Implementations live in ``connimport.client``; the import pipeline only
depends on the abstract interface so that tests and offline runs can supply
their own group trees.
"""

from abc import ABC, abstractmethod

from .models import GroupNode


class GroupHierarchyProvider(ABC):
    """Interface for retrieving the connection group tree of a data source."""

    @abstractmethod
    async def fetch_tree(self, data_source: str) -> GroupNode:
        """
        Fetch the full connection group tree of a data source.

        Args:
            data_source: Identifier of the data source

        Returns:
            Root GroupNode of the tree

        Raises:
            HierarchyFetchError: If the tree cannot be retrieved
        """
        pass
