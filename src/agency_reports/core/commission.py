"""Per-property commission calculation."""

import math
from dataclasses import dataclass
from typing import Dict, Iterable, Optional, Tuple

from ..storage.models import AgentCommission, PropertyCategory, PropertyRecord
from .normalize import normalize_name


@dataclass(frozen=True)
class CommissionResult:
    """Commission earned on a single property."""
    commission_earned: float = 0.0
    commission_rate: float = 0.0


def _clean(value) -> float:
    if value is None:
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    return 0.0 if math.isnan(number) else number


def is_sold(record: PropertyRecord) -> bool:
    """A property counts as sold once contracted, categorised Sold, or dated sold."""
    if record.contract_status and record.contract_status.strip().lower() == "sold":
        return True
    return record.category == PropertyCategory.SOLD or record.sold_date is not None


def base_price(record: PropertyRecord) -> float:
    """Sold price for sold properties, otherwise the listing price."""
    sold_price = _clean(record.sold_price)
    if is_sold(record) and sold_price > 0:
        return sold_price
    price = _clean(record.price)
    return price if price > 0 else 0.0


def calculate_commission(
    record: PropertyRecord,
    override_rate: Optional[float] = None
) -> CommissionResult:
    """Calculate commission earned and the effective rate for a property.

    An agent-specific override rate takes precedence over the rate stored on
    the property. Never raises; unusable numbers resolve to 0.
    """
    rate = _clean(override_rate)
    if rate <= 0:
        rate = _clean(record.commission)

    price = base_price(record)
    earned = price * (rate / 100) if rate > 0 and price > 0 else 0.0

    return CommissionResult(
        commission_earned=_clean(earned),
        commission_rate=rate
    )


class CommissionOverrides:
    """Lookup of agent commission overrides by property and agent."""

    def __init__(self, overrides: Iterable[AgentCommission] = ()):
        self._rates: Dict[Tuple[str, str], float] = {}
        for o in overrides:
            self._rates[(str(o.property_id), normalize_name(o.agent_name))] = o.commission_rate

    def __len__(self) -> int:
        return len(self._rates)

    def rate_for(self, record: PropertyRecord) -> Optional[float]:
        return self._rates.get((str(record.id), normalize_name(record.agent_name)))

    def calculate(self, record: PropertyRecord) -> CommissionResult:
        return calculate_commission(record, self.rate_for(record))
