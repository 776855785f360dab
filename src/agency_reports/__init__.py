"""Commission and prospecting performance reports for real estate agencies."""

__version__ = "1.0.0"

from .core.filters import DateRange, FilterState, StatusFilter
from .reporting import Dimension, Paginator, ReportResult, accumulate, compute_report, rank, top_n
from .reports import ReportExporter, export_csv, export_pdf, format_currency
from .storage import ReportInput, load_report_input, parse_report_input

__all__ = [
    "__version__",
    "DateRange",
    "FilterState",
    "StatusFilter",
    "Dimension",
    "Paginator",
    "ReportResult",
    "accumulate",
    "compute_report",
    "rank",
    "top_n",
    "ReportExporter",
    "export_csv",
    "export_pdf",
    "format_currency",
    "ReportInput",
    "load_report_input",
    "parse_report_input",
]
