"""Report export (CSV and PDF)."""

from .exporter import (
    ExportFormat,
    GeneratedReport,
    ReportExporter,
    build_sections,
    export_csv,
    export_pdf,
    format_currency,
)

__all__ = [
    "ExportFormat",
    "GeneratedReport",
    "ReportExporter",
    "build_sections",
    "export_csv",
    "export_pdf",
    "format_currency",
]
