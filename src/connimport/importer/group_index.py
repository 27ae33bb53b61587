"""Path lookup over a fetched connection group tree.

Classes:
    GroupPathIndex: Maps slash-delimited group paths to group identifiers
"""

import logging
from dataclasses import dataclass
from typing import FrozenSet, Iterator, List, Mapping, Optional, Tuple

from .models import ROOT_GROUP_IDENTIFIER, GroupNode

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GroupPathIndex:
    """Lookup tables derived from one connection group tree.

    ``path_to_identifier`` maps a canonical path, root name first with no
    leading or trailing slash (e.g. ``ROOT/Sales/EU``), to the identifier of
    the group at that path. ``known_identifiers`` holds every identifier in
    the tree. Both are produced by the same traversal in ``build``.
    """

    path_to_identifier: Mapping[str, str]
    known_identifiers: FrozenSet[str]
    root_name: str = ROOT_GROUP_IDENTIFIER

    @classmethod
    def build(cls, root: GroupNode) -> "GroupPathIndex":
        """Build the index with a single pre-order walk of the tree.

        Args:
            root: Root of the connection group tree

        Returns:
            GroupPathIndex for the tree
        """
        path_to_identifier = {}
        known_identifiers = set()

        for path, node in cls._walk(root):
            path_to_identifier[path] = node.identifier
            known_identifiers.add(node.identifier)

        logger.debug(
            f"Indexed {len(path_to_identifier)} connection group paths under '{root.name}'"
        )
        return cls(
            path_to_identifier=path_to_identifier,
            known_identifiers=frozenset(known_identifiers),
            root_name=root.name,
        )

    @staticmethod
    def _walk(root: GroupNode) -> Iterator[Tuple[str, GroupNode]]:
        """Yield (path, node) for every node, parents before children."""
        stack: List[Tuple[str, GroupNode]] = [(root.name, root)]
        while stack:
            path, node = stack.pop()
            yield path, node

            # Reversed so children come off the stack in their listed order
            for child in reversed(node.children):
                stack.append((f"{path}/{child.name}", child))

    def lookup(self, path: str) -> Optional[str]:
        """Return the identifier of the group at exactly ``path``, if any."""
        return self.path_to_identifier.get(path)

    def contains(self, identifier: str) -> bool:
        """Check whether a group with the given identifier exists in the tree."""
        return identifier in self.known_identifiers

    def __len__(self) -> int:
        return len(self.path_to_identifier)
