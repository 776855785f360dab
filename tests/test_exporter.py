"""Tests for CSV and PDF report export."""

import csv
import io
import tempfile
from datetime import datetime
from pathlib import Path

import pytest
from agency_reports.core.filters import FilterState
from agency_reports.reporting import accumulate
from agency_reports.reports.exporter import (
    ExportFormat,
    ReportExporter,
    export_csv,
    export_pdf,
    format_currency,
)
from agency_reports.storage.models import (
    ActivityRecord,
    ActivityType,
    DoorKnockTarget,
    MarketingPlanRecord,
    PropertyRecord,
    ReportInput,
)

NOW = datetime(2024, 6, 30, 12, 0)


@pytest.fixture
def temp_data_dir():
    """Create temporary data directory."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def report_input():
    """Twenty-five agencies plus some prospecting activity."""
    properties = [
        PropertyRecord(
            id=f"p{i}", agency_name=f"Agency {i:02d}", agent_name=f"Agent {i:02d}",
            suburb="Springfield" if i % 2 else "Riverside",
            street_name="Main St", price=i * 100000, commission=1.0
        )
        for i in range(1, 26)
    ]
    return ReportInput(
        properties=properties,
        activities=[ActivityRecord(
            id="k1", agent_id="a1", activity_type=ActivityType.DOOR_KNOCK,
            street_name="Main St", suburb="Springfield", knocks_made=40
        )],
        marketing_plans=[MarketingPlanRecord(
            agent_id="a1", suburb="Springfield",
            door_knock_streets=[DoorKnockTarget(name="Main St", target_knocks=100)]
        )],
    )


def read_sections(text):
    """Split exported CSV into {section title: rows}."""
    sections = {}
    current = None
    for row in csv.reader(io.StringIO(text)):
        if not row:
            current = None
        elif current is None:
            current = row[0]
            sections[current] = []
        else:
            sections[current].append(row)
    return sections


class TestFormatCurrency:
    """Tests for the default currency formatter."""

    def test_format(self):
        assert format_currency(1234.5) == "$1,234.50"
        assert format_currency(0) == "$0.00"
        assert format_currency(-10) == "-$10.00"
        assert format_currency(25000, "A$") == "A$25,000.00"


class TestExportCsv:
    """Tests for CSV export."""

    def test_sections_present(self, report_input):
        sections = read_sections(export_csv(accumulate(report_input, now=NOW)))
        assert list(sections) == ["Summary", "Agency Totals", "Agent Totals", "Suburb Totals", "Street Progress"]

    def test_export_is_unpaginated_and_ranked(self, report_input):
        """Every matching agency is exported, highest commission first."""
        sections = read_sections(export_csv(accumulate(report_input, now=NOW)))
        agency_rows = sections["Agency Totals"][1:]

        assert len(agency_rows) == 25
        assert agency_rows[0][0] == "Agency 25"
        assert agency_rows[0][2] == "$25,000.00"
        assert agency_rows[-1][0] == "Agency 01"

    def test_export_respects_filters(self, report_input):
        result = accumulate(report_input, FilterState(suburb="river"), now=NOW)
        sections = read_sections(export_csv(result))
        assert len(sections["Agency Totals"]) - 1 == 12
        assert [row[0] for row in sections["Suburb Totals"][1:]] == ["Riverside"]

    def test_summary_and_street_rows(self, report_input):
        sections = read_sections(export_csv(accumulate(report_input, now=NOW)))
        summary = dict(sections["Summary"][1:])
        street = sections["Street Progress"][1]

        assert summary["Total Properties"] == "25"
        assert summary["Door Knocks"] == "40 / 100 (40.0%)"
        assert summary["Top Agency"].startswith("Agency 25")
        assert street[:2] == ["Main St", "Springfield"]

    def test_custom_formatter(self, report_input):
        text = export_csv(accumulate(report_input, now=NOW), lambda v: f"{v:.0f} AUD")
        assert "25000 AUD" in text

    def test_empty_report(self):
        sections = read_sections(export_csv(accumulate(ReportInput(), now=NOW)))
        assert sections["Agency Totals"] == [sections["Agency Totals"][0]]
        assert dict(sections["Summary"][1:])["Top Agency"] == "None"


class TestExportPdf:
    """Tests for PDF export."""

    def test_pdf_bytes(self, report_input):
        data = export_pdf(accumulate(report_input, now=NOW), title="Quarterly Report")
        assert data.startswith(b"%PDF")
        assert len(data) > 1000

    def test_empty_pdf(self):
        assert export_pdf(accumulate(ReportInput(), now=NOW)).startswith(b"%PDF")


class TestReportExporter:
    """Tests for writing exports to disk."""

    def test_save_csv(self, report_input, temp_data_dir):
        exporter = ReportExporter(temp_data_dir / "exports")
        report = exporter.export(accumulate(report_input, now=NOW), ExportFormat.CSV)

        path = Path(report.file_path)
        assert path.exists()
        assert path.suffix == ".csv"
        assert report.file_size == path.stat().st_size
        assert report.metadata["agencies"] == 25
        assert "Agency Totals" in path.read_text()
        assert exporter.generated_reports == [report]

    def test_save_pdf_with_filename(self, report_input, temp_data_dir):
        exporter = ReportExporter(temp_data_dir)
        report = exporter.export(accumulate(report_input, now=NOW), ExportFormat.PDF, filename="report.pdf")

        assert report.filename == "report.pdf"
        assert Path(report.file_path).read_bytes().startswith(b"%PDF")
