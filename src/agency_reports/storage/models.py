"""Record types consumed by the reporting engine."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional


class PropertyCategory(Enum):
    """Listing category of a property."""

    LISTING = "Listing"
    SOLD = "Sold"
    UNDER_OFFER = "Under Offer"


class ActivityType(Enum):
    """Prospecting activity types."""

    DOOR_KNOCK = "door_knock"
    PHONE_CALL = "phone_call"


class ActivityStatus(Enum):
    """Status of a logged activity."""

    COMPLETED = "Completed"
    PENDING = "pending"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class PropertyRecord:
    """A property listing as fetched for a report."""

    id: str
    agency_name: Optional[str] = None
    agent_name: Optional[str] = None
    suburb: Optional[str] = None
    price: float = 0.0
    sold_price: Optional[float] = None
    commission: float = 0.0  # Percent, e.g. 2.5
    category: PropertyCategory = PropertyCategory.LISTING
    listed_date: Optional[datetime] = None
    sold_date: Optional[datetime] = None

    street_name: Optional[str] = None
    property_type: Optional[str] = None
    contract_status: Optional[str] = None


@dataclass(frozen=True)
class ActivityRecord:
    """A door knock or phone call session logged by an agent."""

    id: str
    agent_id: str
    activity_type: ActivityType
    activity_date: Optional[datetime] = None
    street_name: Optional[str] = None
    suburb: Optional[str] = None
    status: ActivityStatus = ActivityStatus.COMPLETED

    calls_made: int = 0
    calls_connected: int = 0
    knocks_made: int = 0
    knocks_answered: int = 0
    desktop_appraisals: int = 0
    face_to_face_appraisals: int = 0


@dataclass(frozen=True)
class DoorKnockTarget:
    """Door knock targets for one street of a marketing plan."""

    name: str
    target_knocks: int = 0
    target_answers: int = 0
    desktop_appraisals: int = 0
    face_to_face_appraisals: int = 0


@dataclass(frozen=True)
class PhoneCallTarget:
    """Phone call targets for one street of a marketing plan."""

    name: str
    target_calls: int = 0
    target_connects: int = 0
    desktop_appraisals: int = 0
    face_to_face_appraisals: int = 0


@dataclass(frozen=True)
class MarketingPlanRecord:
    """An agent's prospecting plan for a suburb over a date range."""

    agent_id: str
    suburb: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    door_knock_streets: List[DoorKnockTarget] = field(default_factory=list)
    phone_call_streets: List[PhoneCallTarget] = field(default_factory=list)

    # Plan-wide targets not tied to a single street
    target_connects: int = 0
    target_desktop_appraisals: int = 0
    target_face_to_face_appraisals: int = 0

    id: Optional[str] = None


@dataclass(frozen=True)
class AgentProfile:
    """Directory entry resolving an agent id to names."""

    id: str
    agent_name: Optional[str] = None
    agency_name: Optional[str] = None


@dataclass(frozen=True)
class AgentCommission:
    """Per-agent commission rate override for a property."""

    property_id: str
    agent_name: str
    commission_rate: float = 0.0


@dataclass
class ReportInput:
    """Everything a report computation reads."""

    properties: List[PropertyRecord] = field(default_factory=list)
    activities: List[ActivityRecord] = field(default_factory=list)
    marketing_plans: List[MarketingPlanRecord] = field(default_factory=list)
    agents: List[AgentProfile] = field(default_factory=list)
    agent_commissions: List[AgentCommission] = field(default_factory=list)
