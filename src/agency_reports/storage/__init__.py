"""Record types and loading for report input."""

from .models import (
    ActivityRecord,
    ActivityStatus,
    ActivityType,
    AgentCommission,
    AgentProfile,
    DoorKnockTarget,
    MarketingPlanRecord,
    PhoneCallTarget,
    PropertyCategory,
    PropertyRecord,
    ReportInput,
)
from .loader import load_report_input, parse_report_input

__all__ = [
    "ActivityRecord",
    "ActivityStatus",
    "ActivityType",
    "AgentCommission",
    "AgentProfile",
    "DoorKnockTarget",
    "MarketingPlanRecord",
    "PhoneCallTarget",
    "PropertyCategory",
    "PropertyRecord",
    "ReportInput",
    "load_report_input",
    "parse_report_input",
]
