"""CSV and PDF export of commission reports."""

import csv
import io
import logging
import os
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Tuple
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4, landscape
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.lib.units import cm
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from ..reporting.ranking import rank
from ..reporting.totals import ProgressMetrics, ReportResult

logger = logging.getLogger(__name__)

CurrencyFormatter = Callable[[float], str]

# (title, header row, body rows)
Section = Tuple[str, List[str], List[List[str]]]


class ExportFormat(Enum):
    """Supported export formats."""
    CSV = "csv"
    PDF = "pdf"


@dataclass
class GeneratedReport:
    """An export written to disk."""
    id: str
    export_format: ExportFormat
    title: str
    filename: str
    file_path: str
    generated_at: datetime
    metadata: Dict[str, Any] = field(default_factory=dict)
    file_size: int = 0


def format_currency(value: float, symbol: str = "$") -> str:
    """Default currency formatter: 1234.5 -> "$1,234.50"."""
    sign = "-" if value < 0 else ""
    return f"{sign}{symbol}{abs(value):,.2f}"


def _pct(value: float) -> str:
    return f"{value:.2f}%"


def _join(values: List[str]) -> str:
    return ", ".join(values) or "None"


def _summary_rows(summary: ProgressMetrics, fmt: CurrencyFormatter) -> List[List[str]]:
    if summary.top_agency:
        top_agency = (
            f"{summary.top_agency} ({fmt(summary.top_agency_commission)}, "
            f"{_pct(summary.top_agency_commission_rate)}, "
            f"{summary.top_agency_property_count} properties)"
        )
    else:
        top_agency = "None"
    top_agent = f"{summary.top_agent} ({fmt(summary.top_agent_commission)})" if summary.top_agent else "None"
    if summary.top_street:
        top_street = (
            f"{summary.top_street} ({summary.top_street_listed_count} listed, "
            f"{fmt(summary.top_street_commission)})"
        )
    else:
        top_street = "None"

    return [
        ['Total Commission', fmt(summary.total_commission)],
        ['Listed Commission', fmt(summary.listed_commission)],
        ['Sold Commission', fmt(summary.sold_commission)],
        ['Total Properties', str(summary.total_properties)],
        ['Properties Listed', str(summary.total_listed)],
        ['Properties Sold', str(summary.total_sold)],
        ['Top Agency', top_agency],
        ['Top Agent', top_agent],
        ['Most Active Street', top_street],
        ['Door Knocks', f"{summary.total_knocks} / {summary.target_knocks} ({summary.knock_progress:.1f}%)"],
        ['Phone Calls', f"{summary.total_calls} / {summary.target_calls} ({summary.call_progress:.1f}%)"],
        ['Connects', f"{summary.total_connects} / {summary.target_connects} ({summary.connect_progress:.1f}%)"],
        ['Appraisals', f"{summary.total_appraisals} / {summary.target_appraisals} ({summary.appraisal_progress:.1f}%)"],
        ['Conversion Rate', f"{summary.conversion_rate:.1f}%"],
    ]


def build_sections(result: ReportResult, fmt: CurrencyFormatter = format_currency) -> List[Section]:
    """Tabular sections of a report, using the full ranked (unpaginated) lists."""
    agencies = rank(result.agency_totals)
    agents = rank(result.agent_totals)
    suburbs = rank(result.suburb_totals)
    streets = rank(result.street_totals)

    return [
        ('Summary', ['Metric', 'Value'], _summary_rows(result.summary, fmt)),
        (
            'Agency Totals',
            ['Agency', 'Commission Rate', 'Total Commission', 'Listed Commission', 'Sold Commission',
             'Total Properties', 'Listed', 'Sold', 'Suburbs'],
            [
                [a.agency, _pct(a.avg_commission_rate), fmt(a.total_commission), fmt(a.listed_commission),
                 fmt(a.sold_commission), str(a.property_count), str(a.listed_count), str(a.sold_count),
                 _join(a.suburbs)]
                for a in agencies
            ]
        ),
        (
            'Agent Totals',
            ['Agent', 'Agency', 'Commission Rate', 'Total Commission', 'Properties Listed',
             'Properties Sold', 'Suburbs', 'Property Types'],
            [
                [a.name, a.agency, _pct(a.avg_commission_rate), fmt(a.total_commission),
                 str(a.listed_count), str(a.sold_count), _join(a.suburbs), _join(a.property_types)]
                for a in agents
            ]
        ),
        (
            'Suburb Totals',
            ['Suburb', 'Avg Listed Commission Rate', 'Listed Commission', 'Listed Properties',
             'Avg Sold Commission Rate', 'Sold Commission', 'Sold Properties'],
            [
                [s.suburb, _pct(s.avg_listed_commission_rate), fmt(s.listed_commission), str(s.listed_count),
                 _pct(s.avg_sold_commission_rate), fmt(s.sold_commission), str(s.sold_count)]
                for s in suburbs
            ]
        ),
        (
            'Street Progress',
            ['Street', 'Suburb', 'Knocks', 'Target Knocks', 'Knock Progress', 'Calls', 'Target Calls',
             'Call Progress', 'Appraisals', 'Target Appraisals'],
            [
                [s.street, s.suburb, str(s.knocks_made), str(s.target_knocks), f"{s.knock_progress:.1f}%",
                 str(s.calls_made), str(s.target_calls), f"{s.call_progress:.1f}%",
                 str(s.appraisals), str(s.target_appraisals)]
                for s in streets
            ]
        ),
    ]


def export_csv(result: ReportResult, format_currency: CurrencyFormatter = format_currency) -> str:
    """Render a report as CSV text, one titled section per dimension."""
    buffer = io.StringIO()
    writer = csv.writer(buffer)

    for index, (title, header, rows) in enumerate(build_sections(result, format_currency)):
        if index:
            writer.writerow([])
        writer.writerow([title])
        writer.writerow(header)
        writer.writerows(rows)

    return buffer.getvalue()


def export_pdf(
    result: ReportResult,
    format_currency: CurrencyFormatter = format_currency,
    title: str = "Commission Performance Report",
    subtitle: Optional[str] = None
) -> bytes:
    """Render a report as a paginated PDF with one table per dimension."""
    buf = io.BytesIO()
    doc = SimpleDocTemplate(buf, pagesize=landscape(A4),
                            leftMargin=1.0*cm, rightMargin=1.0*cm,
                            topMargin=1.0*cm, bottomMargin=1.5*cm,
                            title=title)
    styles = getSampleStyleSheet()
    cell_style = styles["BodyText"].clone("ReportCell", fontSize=8, leading=10)
    head_style = cell_style.clone("ReportHead", fontName="Helvetica-Bold", textColor=colors.white)

    story = [
        Paragraph(escape(title), styles["Title"]),
        Paragraph(f"Generated on: {result.generated_at.strftime('%d/%m/%Y %H:%M')}", styles["Normal"]),
    ]
    if subtitle:
        story.append(Paragraph(escape(subtitle), styles["Normal"]))
    story.append(Spacer(1, 0.5*cm))

    for section_title, header, rows in build_sections(result, format_currency):
        story.append(Paragraph(escape(section_title), styles["Heading2"]))
        if not rows:
            story.append(Paragraph("No matching records.", styles["Italic"]))
            story.append(Spacer(1, 0.4*cm))
            continue

        data = [[Paragraph(escape(h), head_style) for h in header]]
        data += [[Paragraph(escape(cell), cell_style) for cell in row] for row in rows]

        table = Table(data, repeatRows=1, hAlign="LEFT")
        table.setStyle(TableStyle([
            ("BACKGROUND", (0, 0), (-1, 0), colors.HexColor("#4f46e5")),
            ("GRID", (0, 0), (-1, -1), 0.5, colors.grey),
            ("ROWBACKGROUNDS", (0, 1), (-1, -1), [colors.whitesmoke, colors.white]),
            ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
        ]))
        story.append(table)
        story.append(Spacer(1, 0.4*cm))

    def _footer(canvas, document):
        canvas.saveState()
        canvas.setFont("Helvetica", 8)
        canvas.setFillColor(colors.grey)
        canvas.drawString(1.0*cm, 0.75*cm, title)
        canvas.drawRightString(document.pagesize[0] - 1.0*cm, 0.75*cm, f"Page {document.page}")
        canvas.restoreState()

    doc.build(story, onFirstPage=_footer, onLaterPages=_footer)

    pdf_bytes = buf.getvalue()
    buf.close()
    return pdf_bytes


class ReportExporter:
    """Writes report exports to an output directory."""

    def __init__(
        self,
        output_dir: str = "data/exports",
        format_currency: CurrencyFormatter = format_currency,
        title: str = "Commission Performance Report"
    ):
        self.output_dir = str(output_dir)
        self.format_currency = format_currency
        self.title = title
        self.generated_reports: List[GeneratedReport] = []

    def export(self, result: ReportResult, export_format: ExportFormat, filename: str = None) -> GeneratedReport:
        """Render and save a report in the given format."""
        if export_format == ExportFormat.CSV:
            content = export_csv(result, self.format_currency).encode("utf-8")
        elif export_format == ExportFormat.PDF:
            content = export_pdf(result, self.format_currency, title=self.title)
        else:
            raise ValueError(f"Unsupported export format: {export_format}")

        return self._save_report(export_format, content, filename, metadata={
            'agencies': len(result.agency_totals),
            'agents': len(result.agent_totals),
            'suburbs': len(result.suburb_totals),
            'streets': len(result.street_totals),
        })

    def _save_report(
        self,
        export_format: ExportFormat,
        content: bytes,
        filename: str = None,
        metadata: Dict = None
    ) -> GeneratedReport:
        """Save report bytes to file."""
        os.makedirs(self.output_dir, exist_ok=True)
        report_id = str(uuid.uuid4())
        generated_at = datetime.now()
        filename = filename or f"commission_report_{generated_at.strftime('%Y-%m-%d')}_{report_id[:8]}.{export_format.value}"
        file_path = os.path.join(self.output_dir, filename)

        with open(file_path, 'wb') as f:
            f.write(content)

        report = GeneratedReport(
            id=report_id,
            export_format=export_format,
            title=self.title,
            filename=filename,
            file_path=file_path,
            generated_at=generated_at,
            metadata=metadata or {},
            file_size=os.path.getsize(file_path)
        )
        logger.info(f"Exported {export_format.value} report to {file_path}")

        self.generated_reports.append(report)
        return report
