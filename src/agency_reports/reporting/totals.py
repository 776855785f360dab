"""Aggregated totals produced by a report computation."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from ..core.commission import CommissionResult
from ..core.normalize import UNKNOWN
from ..storage.models import ActivityRecord, ActivityStatus, ActivityType


class Dimension(Enum):
    """Grouping dimensions of a report."""
    AGENCY = "agency"
    AGENT = "agent"
    SUBURB = "suburb"
    STREET = "street"


def progress(actual: float, target: float) -> float:
    """Actual vs target as a percentage, capped at 100 and 0 without a target."""
    if not target or target <= 0:
        return 0.0
    return round(min(actual / target * 100, 100.0), 1)


def _mean(values: List[float]) -> float:
    return sum(values) / len(values) if values else 0.0


def add_unique(values: List[str], value: str):
    if value and value != UNKNOWN and value not in values:
        values.append(value)


@dataclass
class AggregatedTotal:
    """Commission, activity and target totals for one bucket."""
    key: str

    # Commission
    total_commission: float = 0.0
    listed_commission: float = 0.0
    sold_commission: float = 0.0
    property_count: int = 0
    listed_count: int = 0
    sold_count: int = 0
    listed_rates: List[float] = field(default_factory=list, repr=False)
    sold_rates: List[float] = field(default_factory=list, repr=False)

    # Activity actuals
    activity_count: int = 0
    completed_count: int = 0
    knocks_made: int = 0
    knocks_answered: int = 0
    calls_made: int = 0
    calls_connected: int = 0
    desktop_appraisals: int = 0
    face_to_face_appraisals: int = 0

    # Marketing plan targets
    target_knocks: int = 0
    target_answers: int = 0
    target_calls: int = 0
    target_connects: int = 0
    target_desktop_appraisals: int = 0
    target_face_to_face_appraisals: int = 0

    # Filled in by finalize()
    knock_progress: float = 0.0
    call_progress: float = 0.0
    connect_progress: float = 0.0
    appraisal_progress: float = 0.0
    overall_progress: float = 0.0

    @property
    def avg_commission_rate(self) -> float:
        """Arithmetic mean of the contributing records' rates (not value-weighted)."""
        return _mean(self.listed_rates + self.sold_rates)

    @property
    def avg_listed_commission_rate(self) -> float:
        return _mean(self.listed_rates)

    @property
    def avg_sold_commission_rate(self) -> float:
        return _mean(self.sold_rates)

    @property
    def appraisals(self) -> int:
        return self.desktop_appraisals + self.face_to_face_appraisals

    @property
    def target_appraisals(self) -> int:
        return self.target_desktop_appraisals + self.target_face_to_face_appraisals

    def add_property(self, commission: CommissionResult, sold: bool):
        """Fold one property's commission into the bucket."""
        self.total_commission += commission.commission_earned
        self.property_count += 1
        if sold:
            self.sold_commission += commission.commission_earned
            self.sold_count += 1
            self.sold_rates.append(commission.commission_rate)
        else:
            self.listed_commission += commission.commission_earned
            self.listed_count += 1
            self.listed_rates.append(commission.commission_rate)

    def add_activity(self, activity: ActivityRecord):
        """Fold one activity's counters into the bucket."""
        self.activity_count += 1
        if activity.status == ActivityStatus.COMPLETED:
            self.completed_count += 1

        if activity.activity_type == ActivityType.DOOR_KNOCK:
            self.knocks_made += activity.knocks_made
            self.knocks_answered += activity.knocks_answered
        elif activity.activity_type == ActivityType.PHONE_CALL:
            self.calls_made += activity.calls_made
            self.calls_connected += activity.calls_connected

        self.desktop_appraisals += activity.desktop_appraisals
        self.face_to_face_appraisals += activity.face_to_face_appraisals

    def add_targets(
        self,
        knocks: int = 0,
        answers: int = 0,
        calls: int = 0,
        connects: int = 0,
        desktop_appraisals: int = 0,
        face_to_face_appraisals: int = 0
    ):
        """Add marketing plan targets to the bucket."""
        self.target_knocks += knocks
        self.target_answers += answers
        self.target_calls += calls
        self.target_connects += connects
        self.target_desktop_appraisals += desktop_appraisals
        self.target_face_to_face_appraisals += face_to_face_appraisals

    def finalize(self):
        """Compute progress percentages once all folds are done."""
        self.knock_progress = progress(self.knocks_made, self.target_knocks)
        self.call_progress = progress(self.calls_made, self.target_calls)
        self.connect_progress = progress(self.calls_connected, self.target_connects)
        self.appraisal_progress = progress(self.appraisals, self.target_appraisals)
        self.overall_progress = progress(
            self.knocks_made + self.calls_made,
            self.target_knocks + self.target_calls
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'key': self.key,
            'total_commission': self.total_commission,
            'listed_commission': self.listed_commission,
            'sold_commission': self.sold_commission,
            'property_count': self.property_count,
            'listed_count': self.listed_count,
            'sold_count': self.sold_count,
            'avg_commission_rate': self.avg_commission_rate,
            'avg_listed_commission_rate': self.avg_listed_commission_rate,
            'avg_sold_commission_rate': self.avg_sold_commission_rate,
            'activity_count': self.activity_count,
            'completed_count': self.completed_count,
            'knocks_made': self.knocks_made,
            'knocks_answered': self.knocks_answered,
            'calls_made': self.calls_made,
            'calls_connected': self.calls_connected,
            'desktop_appraisals': self.desktop_appraisals,
            'face_to_face_appraisals': self.face_to_face_appraisals,
            'target_knocks': self.target_knocks,
            'target_answers': self.target_answers,
            'target_calls': self.target_calls,
            'target_connects': self.target_connects,
            'target_desktop_appraisals': self.target_desktop_appraisals,
            'target_face_to_face_appraisals': self.target_face_to_face_appraisals,
            'knock_progress': self.knock_progress,
            'call_progress': self.call_progress,
            'connect_progress': self.connect_progress,
            'appraisal_progress': self.appraisal_progress,
            'overall_progress': self.overall_progress,
        }


@dataclass
class AgencyTotal(AggregatedTotal):
    """Totals for one agency."""
    suburbs: List[str] = field(default_factory=list)
    agents: List[str] = field(default_factory=list)

    @property
    def agency(self) -> str:
        return self.key

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data.update({'agency': self.key, 'suburbs': list(self.suburbs), 'agents': list(self.agents)})
        return data


@dataclass
class AgentTotal(AggregatedTotal):
    """Totals for one agent."""
    agency: str = UNKNOWN
    suburbs: List[str] = field(default_factory=list)
    property_types: List[str] = field(default_factory=list)

    @property
    def name(self) -> str:
        return self.key

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data.update({
            'agent': self.key,
            'agency': self.agency,
            'suburbs': list(self.suburbs),
            'property_types': list(self.property_types),
        })
        return data


@dataclass
class SuburbCommission(AggregatedTotal):
    """Totals for one suburb."""

    @property
    def suburb(self) -> str:
        return self.key

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data['suburb'] = self.key
        return data


@dataclass
class StreetProgress(AggregatedTotal):
    """Totals for one street within a suburb."""
    street: str = UNKNOWN
    suburb: str = UNKNOWN

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data.update({'street': self.street, 'suburb': self.suburb})
        return data


@dataclass
class ProgressMetrics:
    """Scalar summary of a report."""
    total_commission: float = 0.0
    listed_commission: float = 0.0
    sold_commission: float = 0.0
    total_properties: int = 0
    total_listed: int = 0
    total_sold: int = 0

    total_activities: int = 0
    completed_activities: int = 0
    total_knocks: int = 0
    total_calls: int = 0
    total_connects: int = 0
    total_appraisals: int = 0

    target_knocks: int = 0
    target_calls: int = 0
    target_connects: int = 0
    target_appraisals: int = 0
    knock_progress: float = 0.0
    call_progress: float = 0.0
    connect_progress: float = 0.0
    appraisal_progress: float = 0.0

    conversion_rate: float = 0.0  # Listings per appraisal, uncapped
    sale_rate: float = 0.0

    top_agency: Optional[str] = None
    top_agency_commission: float = 0.0
    top_agency_commission_rate: float = 0.0
    top_agency_property_count: int = 0
    top_agent: Optional[str] = None
    top_agent_commission: float = 0.0
    top_agent_property_count: int = 0
    top_street: Optional[str] = None
    top_street_listed_count: int = 0
    top_street_commission: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return dict(self.__dict__)


@dataclass
class ReportResult:
    """Everything a report view or export needs."""
    summary: ProgressMetrics
    agency_totals: List[AgencyTotal] = field(default_factory=list)
    agent_totals: List[AgentTotal] = field(default_factory=list)
    suburb_totals: List[SuburbCommission] = field(default_factory=list)
    street_totals: List[StreetProgress] = field(default_factory=list)
    generated_at: datetime = field(default_factory=datetime.now)

    def totals(self, dimension: Dimension) -> List[AggregatedTotal]:
        """Bucket list for a dimension, in accumulation order."""
        return {
            Dimension.AGENCY: self.agency_totals,
            Dimension.AGENT: self.agent_totals,
            Dimension.SUBURB: self.suburb_totals,
            Dimension.STREET: self.street_totals,
        }[dimension]

    def to_dict(self) -> Dict[str, Any]:
        return {
            'generated_at': self.generated_at.isoformat(),
            'summary': self.summary.to_dict(),
            'agency_totals': [t.to_dict() for t in self.agency_totals],
            'agent_totals': [t.to_dict() for t in self.agent_totals],
            'suburb_totals': [t.to_dict() for t in self.suburb_totals],
            'street_totals': [t.to_dict() for t in self.street_totals],
        }
