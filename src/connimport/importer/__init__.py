"""Connection import parsing for connimport.

This package converts bulk connection definitions (CSV, YAML or JSON) into
an ordered list of connection creation operations, resolving human-readable
group paths against the server's connection group tree and indexing which
users and user groups should be granted access to each connection.

Modules:
    models: Immutable data structures for records, operations and results
    errors: Batch-fatal and record-local error types
    interfaces: Abstract group hierarchy provider
    group_index: Path lookup over the connection group tree
    resolver: Group path to parentIdentifier resolution
    pipeline: Per-record transformation
    aggregator: Batch aggregation into a single result
    processors: CSV, YAML and JSON input processing
    service: Batch entry points
    messages: English message catalog
    reporting: Rich console reports
"""

from .aggregator import BatchAggregator
from .errors import (
    AmbiguousParentError,
    EmptyBatchError,
    FormatParseError,
    HierarchyFetchError,
    NotAListError,
    ParseError,
    RecordShapeError,
    UnknownGroupPathError,
    UnknownParentIdentifierError,
)
from .group_index import GroupPathIndex
from .interfaces import GroupHierarchyProvider
from .models import (
    BatchResult,
    Connection,
    CreationOp,
    GroupNode,
    ImportRecord,
    ParseIssue,
    RecordOutcome,
)
from .pipeline import RecordTransformPipeline
from .processors import CSVProcessor, FileFormatDetector, JSONProcessor, YAMLProcessor
from .reporting import ReportGenerator
from .resolver import GroupFieldResolver, ResolutionResult
from .service import ConnectionParseService

__all__ = [
    "GroupNode",
    "ImportRecord",
    "Connection",
    "CreationOp",
    "ParseIssue",
    "RecordOutcome",
    "BatchResult",
    "ParseError",
    "FormatParseError",
    "NotAListError",
    "EmptyBatchError",
    "UnknownParentIdentifierError",
    "AmbiguousParentError",
    "UnknownGroupPathError",
    "RecordShapeError",
    "HierarchyFetchError",
    "GroupHierarchyProvider",
    "GroupPathIndex",
    "GroupFieldResolver",
    "ResolutionResult",
    "RecordTransformPipeline",
    "BatchAggregator",
    "CSVProcessor",
    "YAMLProcessor",
    "JSONProcessor",
    "FileFormatDetector",
    "ConnectionParseService",
    "ReportGenerator",
]
