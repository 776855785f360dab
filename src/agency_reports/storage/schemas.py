"""Pydantic models for raw backend rows.

Rows arrive as loosely typed JSON: numbers may be strings, blanks, nulls or
NaN. Every coercion happens here, once, so the reporting code only ever sees
concrete numbers.
"""

import math
from datetime import date, datetime
from typing import Any, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

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
)


def to_float(value: Any) -> float:
    """Coerce a loose numeric value to float, 0.0 when unusable."""
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        number = float(str(value).strip()) if isinstance(value, str) else float(value)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(number) or math.isinf(number):
        return 0.0
    return number


def to_optional_float(value: Any) -> Optional[float]:
    """Like to_float, but absence stays None."""
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    number = to_float(value)
    return number if number else None


def to_int(value: Any) -> int:
    """Coerce a loose count to int, 0 when unusable."""
    return int(to_float(value))


def to_datetime(value: Any) -> Optional[datetime]:
    """Parse ISO dates/timestamps into naive local datetimes."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    elif isinstance(value, str):
        try:
            parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError:
            return None
    else:
        return None

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone().replace(tzinfo=None)
    return parsed


def _to_id(value: Any) -> Optional[str]:
    if value is None:
        return None
    return str(value)


def _match_enum(enum_cls, value: Any, default):
    if isinstance(value, enum_cls):
        return value
    if isinstance(value, str):
        wanted = value.strip().lower().replace(" ", "_")
        for member in enum_cls:
            if member.value.lower().replace(" ", "_") == wanted:
                return member
    return default


class PropertyPayload(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    agency_name: Optional[str] = None
    agent_name: Optional[str] = None
    suburb: Optional[str] = None
    street_name: Optional[str] = None
    property_type: Optional[str] = None
    price: float = 0.0
    sold_price: Optional[float] = None
    commission: float = 0.0
    category: PropertyCategory = PropertyCategory.LISTING
    contract_status: Optional[str] = None
    listed_date: Optional[datetime] = None
    sold_date: Optional[datetime] = None

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, value):
        return _to_id(value)

    @field_validator("price", "commission", mode="before")
    @classmethod
    def coerce_number(cls, value):
        return to_float(value)

    @field_validator("sold_price", mode="before")
    @classmethod
    def coerce_optional_number(cls, value):
        return to_optional_float(value)

    @field_validator("category", mode="before")
    @classmethod
    def coerce_category(cls, value):
        return _match_enum(PropertyCategory, value, PropertyCategory.LISTING)

    @field_validator("listed_date", "sold_date", mode="before")
    @classmethod
    def coerce_date(cls, value):
        return to_datetime(value)

    def to_record(self) -> PropertyRecord:
        return PropertyRecord(**self.model_dump())


class ActivityPayload(BaseModel):
    model_config = ConfigDict(extra="ignore")

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

    @field_validator("id", "agent_id", mode="before")
    @classmethod
    def coerce_ids(cls, value):
        return _to_id(value)

    @field_validator(
        "calls_made", "calls_connected", "knocks_made", "knocks_answered",
        "desktop_appraisals", "face_to_face_appraisals",
        mode="before",
    )
    @classmethod
    def coerce_count(cls, value):
        return to_int(value)

    @field_validator("activity_type", mode="before")
    @classmethod
    def coerce_type(cls, value):
        # Unknown types are left as-is so validation rejects the row
        return _match_enum(ActivityType, value, value)

    @field_validator("status", mode="before")
    @classmethod
    def coerce_status(cls, value):
        return _match_enum(ActivityStatus, value, ActivityStatus.PENDING)

    @field_validator("activity_date", mode="before")
    @classmethod
    def coerce_date(cls, value):
        return to_datetime(value)

    def to_record(self) -> ActivityRecord:
        return ActivityRecord(**self.model_dump())


class DoorKnockStreetPayload(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: str = Field("", validation_alias=AliasChoices("name", "street_name"))
    target_knocks: int = 0
    target_answers: int = 0
    desktop_appraisals: int = 0
    face_to_face_appraisals: int = 0

    @field_validator(
        "target_knocks", "target_answers", "desktop_appraisals", "face_to_face_appraisals",
        mode="before",
    )
    @classmethod
    def coerce_count(cls, value):
        return to_int(value)

    @field_validator("name", mode="before")
    @classmethod
    def coerce_name(cls, value):
        return value or ""

    def to_target(self) -> DoorKnockTarget:
        return DoorKnockTarget(**self.model_dump())


class PhoneCallStreetPayload(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: str = Field("", validation_alias=AliasChoices("name", "street_name"))
    target_calls: int = 0
    target_connects: int = 0
    desktop_appraisals: int = 0
    face_to_face_appraisals: int = 0

    @field_validator(
        "target_calls", "target_connects", "desktop_appraisals", "face_to_face_appraisals",
        mode="before",
    )
    @classmethod
    def coerce_count(cls, value):
        return to_int(value)

    @field_validator("name", mode="before")
    @classmethod
    def coerce_name(cls, value):
        return value or ""

    def to_target(self) -> PhoneCallTarget:
        return PhoneCallTarget(**self.model_dump())


class MarketingPlanPayload(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: Optional[str] = None
    agent_id: str
    suburb: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    door_knock_streets: List[DoorKnockStreetPayload] = Field(default_factory=list)
    phone_call_streets: List[PhoneCallStreetPayload] = Field(default_factory=list)
    target_connects: int = 0
    target_desktop_appraisals: int = 0
    target_face_to_face_appraisals: int = 0

    @field_validator("id", "agent_id", mode="before")
    @classmethod
    def coerce_ids(cls, value):
        return _to_id(value)

    @field_validator(
        "target_connects", "target_desktop_appraisals", "target_face_to_face_appraisals",
        mode="before",
    )
    @classmethod
    def coerce_count(cls, value):
        return to_int(value)

    @field_validator("door_knock_streets", "phone_call_streets", mode="before")
    @classmethod
    def coerce_streets(cls, value):
        return value or []

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def coerce_date(cls, value):
        return to_datetime(value)

    def to_record(self) -> MarketingPlanRecord:
        return MarketingPlanRecord(
            id=self.id,
            agent_id=self.agent_id,
            suburb=self.suburb,
            start_date=self.start_date,
            end_date=self.end_date,
            door_knock_streets=[s.to_target() for s in self.door_knock_streets],
            phone_call_streets=[s.to_target() for s in self.phone_call_streets],
            target_connects=self.target_connects,
            target_desktop_appraisals=self.target_desktop_appraisals,
            target_face_to_face_appraisals=self.target_face_to_face_appraisals,
        )


class AgentProfilePayload(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    agent_name: Optional[str] = None
    agency_name: Optional[str] = None

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, value):
        return _to_id(value)

    def to_record(self) -> AgentProfile:
        return AgentProfile(**self.model_dump())


class AgentCommissionPayload(BaseModel):
    model_config = ConfigDict(extra="ignore")

    property_id: str
    agent_name: str
    commission_rate: float = 0.0

    @field_validator("property_id", mode="before")
    @classmethod
    def coerce_id(cls, value):
        return _to_id(value)

    @field_validator("commission_rate", mode="before")
    @classmethod
    def coerce_rate(cls, value):
        return to_float(value)

    def to_record(self) -> AgentCommission:
        return AgentCommission(**self.model_dump())
