"""Normalization, commission and filtering primitives."""

from .normalize import UNKNOWN, normalize_name, normalize_suburb, normalize_street, street_key
from .commission import (
    CommissionOverrides,
    CommissionResult,
    base_price,
    calculate_commission,
    is_sold,
)
from .filters import DateRange, FilterPredicate, FilterState, StatusFilter

__all__ = [
    "UNKNOWN",
    "normalize_name",
    "normalize_suburb",
    "normalize_street",
    "street_key",
    "CommissionOverrides",
    "CommissionResult",
    "base_price",
    "calculate_commission",
    "is_sold",
    "DateRange",
    "FilterPredicate",
    "FilterState",
    "StatusFilter",
]
