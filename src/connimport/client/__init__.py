"""Group hierarchy providers for connimport."""

from .file_provider import FileGroupHierarchyProvider
from .guacamole import GuacamoleClient

__all__ = ["GuacamoleClient", "FileGroupHierarchyProvider"]
