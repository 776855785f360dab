"""Commission and progress aggregation for agent and admin reports."""

from .totals import (
    AgencyTotal,
    AgentTotal,
    AggregatedTotal,
    Dimension,
    ProgressMetrics,
    ReportResult,
    StreetProgress,
    SuburbCommission,
    progress,
)
from .accumulator import MetricAccumulator, accumulate, compute_report
from .ranking import (
    DEFAULT_TOP_N,
    PAGE_SIZE_OPTIONS,
    InvalidPageError,
    Page,
    Paginator,
    page_window,
    rank,
    top_n,
)

__all__ = [
    'AgencyTotal',
    'AgentTotal',
    'AggregatedTotal',
    'Dimension',
    'ProgressMetrics',
    'ReportResult',
    'StreetProgress',
    'SuburbCommission',
    'progress',
    'MetricAccumulator',
    'accumulate',
    'compute_report',
    'DEFAULT_TOP_N',
    'PAGE_SIZE_OPTIONS',
    'InvalidPageError',
    'Page',
    'Paginator',
    'page_window',
    'rank',
    'top_n',
]
