"""Input format processing for connection imports.

This module turns the raw text of an import file into a list of raw records
plus the format-specific adapters that must be applied to each record
before group resolution.

Classes:
    CSVProcessor: Parses CSV text and maps rows to records using the header
    YAMLProcessor: Parses YAML text, keeping dates as strings
    JSONProcessor: Parses JSON text
    FileFormatDetector: Detects the input format from a file extension
"""

import csv
import io
import json
import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, List, Sequence, Tuple, Union

import yaml

from .errors import FormatParseError, RecordShapeError
from .models import GROUP_FIELD, GROUPS_FIELD, PARENT_IDENTIFIER_FIELD, USERS_FIELD
from .pipeline import RecordAdapter

logger = logging.getLogger(__name__)

# Header suffixes that route a column into a nested connection section
_SECTION_HEADER = re.compile(r"^(?P<name>.*?)\s*\((?P<section>attribute|parameter)\)$")

_LIST_SEPARATOR = ";"

_YAML_TIMESTAMP_TAG = "tag:yaml.org,2002:timestamp"

_SCALAR_FIELDS = {"name", "protocol", "identifier", GROUP_FIELD, PARENT_IDENTIFIER_FIELD}
_LIST_FIELDS = {USERS_FIELD, GROUPS_FIELD}

ParsedInput = Tuple[Any, List[RecordAdapter]]


@dataclass(frozen=True)
class ColumnSpec:
    """Where the values of one CSV column are stored on a record."""

    kind: str  # "field", "list", "attribute" or "parameter"
    name: str


class CSVProcessor:
    """Handles CSV parsing for connection imports.

    The first non-empty row is the header. Columns named ``name``,
    ``protocol``, ``identifier``, ``group`` or ``parentIdentifier`` set the
    like-named field. ``users`` and ``groups`` hold semicolon-separated
    identifier lists. A column named ``<x> (attribute)`` sets connection
    attribute ``x``; ``<x> (parameter)`` or any other header sets
    connection parameter ``x``.
    """

    def parse_rows(self, csv_data: str) -> List[List[str]]:
        """Parse CSV text into rows, skipping empty lines.

        Raises:
            FormatParseError: If the text is not valid CSV
        """
        try:
            reader = csv.reader(io.StringIO(csv_data), strict=True)
            return [row for row in reader if any(cell.strip() for cell in row)]
        except csv.Error as e:
            raise FormatParseError(f"CSV parsing error: {e}") from e

    def _column_spec(self, header: str) -> ColumnSpec:
        match = _SECTION_HEADER.match(header)
        if match:
            return ColumnSpec(kind=match.group("section"), name=match.group("name").strip())
        if header in _SCALAR_FIELDS:
            return ColumnSpec(kind="field", name=header)
        if header in _LIST_FIELDS:
            return ColumnSpec(kind="list", name=header)
        return ColumnSpec(kind="parameter", name=header)

    def build_row_transformer(self, header: Sequence[str]) -> Callable[[Sequence[str]], Dict]:
        """Build a function mapping positional CSV rows to named record fields.

        Args:
            header: The header row

        Returns:
            Function converting one data row into a raw record dictionary

        Raises:
            FormatParseError: If the header contains blank or duplicate columns
        """
        columns: List[ColumnSpec] = []
        seen = set()

        for position, raw_header in enumerate(header, start=1):
            spec = self._column_spec(raw_header.strip())
            if not spec.name:
                raise FormatParseError(f"CSV header column {position} is empty")
            if spec in seen:
                raise FormatParseError(f"Duplicate CSV header column: '{raw_header.strip()}'")
            seen.add(spec)
            columns.append(spec)

        has_attributes = any(column.kind == "attribute" for column in columns)
        has_parameters = any(column.kind == "parameter" for column in columns)

        def transform_row(row: Sequence[str]) -> Dict[str, Any]:
            if len(row) > len(columns):
                raise RecordShapeError(
                    f"Row has {len(row)} values but the header defines {len(columns)} columns"
                )

            record: Dict[str, Any] = {}
            if has_parameters:
                record["parameters"] = {}
            if has_attributes:
                record["attributes"] = {}

            for column, cell in zip(columns, row):
                value = cell.strip()
                if not value:
                    continue

                if column.kind == "field":
                    record[column.name] = value
                elif column.kind == "list":
                    record[column.name] = [
                        item.strip() for item in value.split(_LIST_SEPARATOR) if item.strip()
                    ]
                elif column.kind == "attribute":
                    record["attributes"][column.name] = value
                else:
                    record["parameters"][column.name] = value

            return record

        return transform_row

    def prepare(self, csv_data: str) -> ParsedInput:
        """Split CSV text into data rows and the header-aware row adapter."""
        rows = self.parse_rows(csv_data)
        header = rows[0] if rows else []
        logger.debug(f"CSV input has {len(header)} columns and {max(len(rows) - 1, 0)} rows")
        return rows[1:], [self.build_row_transformer(header)]


class TextTimestampLoader(yaml.SafeLoader):
    """SafeLoader that keeps dates and timestamps as the text written in the file."""


TextTimestampLoader.yaml_implicit_resolvers = {
    first_char: [(tag, regexp) for tag, regexp in resolvers if tag != _YAML_TIMESTAMP_TAG]
    for first_char, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}


class YAMLProcessor:
    """Handles YAML parsing for connection imports."""

    def prepare(self, yaml_data: str) -> ParsedInput:
        """Parse YAML text into raw records.

        Raises:
            FormatParseError: If the text is not valid YAML
        """
        try:
            return yaml.load(yaml_data, Loader=TextTimestampLoader), []
        except yaml.YAMLError as e:
            raise FormatParseError(str(e)) from e


class JSONProcessor:
    """Handles JSON parsing for connection imports."""

    def prepare(self, json_data: str) -> ParsedInput:
        """Parse JSON text into raw records.

        Raises:
            FormatParseError: If the text is not valid JSON
        """
        try:
            return json.loads(json_data), []
        except json.JSONDecodeError as e:
            raise FormatParseError(str(e)) from e


class FileFormatDetector:
    """Detects file format based on extension and provides the matching processor."""

    SUPPORTED_EXTENSIONS = {".csv": "csv", ".yaml": "yaml", ".yml": "yaml", ".json": "json"}
    PROCESSORS = {"csv": CSVProcessor, "yaml": YAMLProcessor, "json": JSONProcessor}

    @classmethod
    def detect_format(cls, file_path: Union[str, Path]) -> str:
        """Detect file format based on extension.

        Raises:
            ValueError: If the file format is not supported
        """
        extension = Path(file_path).suffix.lower()

        if extension not in cls.SUPPORTED_EXTENSIONS:
            supported_formats = ", ".join(sorted(cls.SUPPORTED_EXTENSIONS))
            raise ValueError(
                f"Unsupported file format '{extension}'. "
                f"Supported formats are: {supported_formats}"
            )

        return cls.SUPPORTED_EXTENSIONS[extension]

    @classmethod
    def get_processor(cls, format_type: str):
        """Get the processor for a format name ('csv', 'yaml' or 'json').

        Raises:
            ValueError: If the format is not supported
        """
        processor_class = cls.PROCESSORS.get(format_type.lower())
        if processor_class is None:
            raise ValueError(
                f"No processor available for format: {format_type}. "
                f"Supported formats are: {', '.join(sorted(cls.PROCESSORS))}"
            )
        return processor_class()

    @classmethod
    def get_supported_formats(cls) -> List[str]:
        return sorted(cls.PROCESSORS)
