"""Tests for the import report generator."""

from io import StringIO

import pytest
from rich.console import Console

from connimport.importer.aggregator import BatchAggregator
from connimport.importer.errors import NotAListError
from connimport.importer.reporting import ReportGenerator


@pytest.fixture
def output():
    return StringIO()


@pytest.fixture
def reporter(output):
    console = Console(file=output, width=200, force_terminal=False)
    return ReportGenerator(console)


@pytest.fixture
def mixed_result(group_index):
    records = [
        {"name": "web-1", "group": "East/Web", "users": ["alice"]},
        {"name": "db-1", "group": "Nowhere", "groups": ["dba"]},
    ]
    return BatchAggregator(group_index).aggregate(records)


@pytest.fixture
def clean_result(group_index):
    return BatchAggregator(group_index).aggregate([{"name": "web-1", "group": "West"}])


class TestReportGenerator:
    """Test cases for ReportGenerator."""

    def test_summary_report(self, reporter, output, mixed_result):
        reporter.generate_summary_report(mixed_result, "connections.yaml")

        text = output.getvalue()
        assert "Connection Import Summary: connections.yaml" in text
        assert "Connections" in text
        assert "With Errors" in text

    def test_issue_report(self, reporter, output, mixed_result):
        reporter.generate_issue_report(mixed_result)

        text = output.getvalue()
        assert "Connection Errors" in text
        assert "db-1" in text
        assert 'No connection group named "Nowhere" exists.' in text
        assert "web-1" not in text

    def test_issue_report_without_errors(self, reporter, output, clean_result):
        reporter.generate_issue_report(clean_result)

        assert "No errors found" in output.getvalue()

    def test_grant_report(self, reporter, output, mixed_result):
        reporter.generate_grant_report(mixed_result)

        text = output.getvalue()
        assert "Access Grants" in text
        assert "alice" in text
        assert "dba" in text

    def test_grant_report_without_grants(self, reporter, output, clean_result):
        reporter.generate_grant_report(clean_result)

        assert output.getvalue() == ""

    def test_report_fatal_error(self, reporter, output):
        reporter.report_fatal_error(NotAListError())

        assert "Error: The provided file must contain a list of connections." in output.getvalue()
