"""Shared fixtures for connimport tests."""

import pytest

from connimport.importer.group_index import GroupPathIndex
from connimport.importer.interfaces import GroupHierarchyProvider
from connimport.importer.models import GroupNode


class StaticGroupHierarchyProvider(GroupHierarchyProvider):
    """Provider returning a fixed tree and recording the data sources requested."""

    def __init__(self, root: GroupNode):
        self.root = root
        self.requested = []

    async def fetch_tree(self, data_source: str) -> GroupNode:
        self.requested.append(data_source)
        return self.root


@pytest.fixture
def sample_tree_data():
    """Connection group tree as returned by the REST API."""
    return {
        "identifier": "ROOT",
        "name": "ROOT",
        "type": "ORGANIZATIONAL",
        "childConnections": [{"identifier": "1", "name": "top-level-connection"}],
        "childConnectionGroups": [
            {
                "identifier": "g-east",
                "name": "East",
                "type": "ORGANIZATIONAL",
                "childConnectionGroups": [
                    {"identifier": "g-east-web", "name": "Web", "type": "ORGANIZATIONAL"},
                    {"identifier": "g-east-db", "name": "Databases", "type": "BALANCING"},
                ],
            },
            {"identifier": "g-west", "name": "West", "type": "ORGANIZATIONAL"},
            {"identifier": "g-42", "name": "Operations", "type": "ORGANIZATIONAL"},
        ],
    }


@pytest.fixture
def sample_tree(sample_tree_data):
    """Sample connection group tree."""
    return GroupNode.from_dict(sample_tree_data)


@pytest.fixture
def group_index(sample_tree):
    """Path index built from the sample tree."""
    return GroupPathIndex.build(sample_tree)


@pytest.fixture
def static_provider(sample_tree):
    """Group hierarchy provider serving the sample tree."""
    return StaticGroupHierarchyProvider(sample_tree)
