"""Fold filtered records into grouped commission and progress totals."""

import logging
from datetime import datetime
from typing import Callable, Dict, Optional, TypeVar

from ..core.commission import CommissionOverrides, is_sold
from ..core.filters import FilterPredicate, FilterState
from ..core.normalize import UNKNOWN, normalize_name, normalize_street, normalize_suburb, street_key
from ..storage.models import (
    ActivityRecord,
    ActivityStatus,
    AgentProfile,
    MarketingPlanRecord,
    PropertyRecord,
    ReportInput,
)
from .totals import (
    AgencyTotal,
    AgentTotal,
    AggregatedTotal,
    ProgressMetrics,
    ReportResult,
    StreetProgress,
    SuburbCommission,
    add_unique,
    progress,
)

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=AggregatedTotal)


def _upsert(table: Dict[str, T], key: str, factory: Callable[[], T]) -> T:
    bucket = table.get(key)
    if bucket is None:
        bucket = factory()
        table[key] = bucket
    return bucket


class MetricAccumulator:
    """Single-use accumulator for one report computation.

    Bucket maps live on the instance and are never shared, so separate
    computations (even concurrent ones) cannot see each other's state.
    """

    def __init__(
        self,
        predicate: FilterPredicate,
        overrides: CommissionOverrides = None,
        agents: Dict[str, AgentProfile] = None
    ):
        self.predicate = predicate
        self.overrides = overrides or CommissionOverrides()
        self.agents = agents or {}

        self.agencies: Dict[str, AgencyTotal] = {}
        self.agent_totals: Dict[str, AgentTotal] = {}
        self.suburbs: Dict[str, SuburbCommission] = {}
        self.streets: Dict[str, StreetProgress] = {}
        self.summary = ProgressMetrics()

    # Bucket access

    def _agency(self, agency: str) -> AgencyTotal:
        return _upsert(self.agencies, agency, lambda: AgencyTotal(key=agency))

    def _agent(self, agent: str, agency: str) -> AgentTotal:
        bucket = _upsert(self.agent_totals, agent, lambda: AgentTotal(key=agent, agency=agency))
        if bucket.agency == UNKNOWN and agency != UNKNOWN:
            bucket.agency = agency
        return bucket

    def _suburb(self, suburb: str) -> SuburbCommission:
        return _upsert(self.suburbs, suburb, lambda: SuburbCommission(key=suburb))

    def _street(self, street: Optional[str], suburb: Optional[str]) -> StreetProgress:
        key = street_key(street, suburb)
        return _upsert(self.streets, key, lambda: StreetProgress(
            key=key,
            street=normalize_street(street),
            suburb=normalize_suburb(suburb)
        ))

    def _resolve_agent(self, agent_id: str):
        profile = self.agents.get(str(agent_id))
        if profile is None:
            return UNKNOWN, UNKNOWN
        return normalize_name(profile.agent_name), normalize_name(profile.agency_name)

    # Folds

    def add_property(self, record: PropertyRecord) -> bool:
        """Fold a property if it passes the filters."""
        agency = normalize_name(record.agency_name)
        agent = normalize_name(record.agent_name)
        suburb = normalize_suburb(record.suburb)
        has_street = bool(record.street_name and record.street_name.strip())
        sold = is_sold(record)

        if not self.predicate.matches(
            agency=agency,
            agent=agent,
            suburb=suburb,
            street=normalize_street(record.street_name) if has_street else "",
            sold=sold,
            on=record.listed_date
        ):
            return False

        commission = self.overrides.calculate(record)

        agency_bucket = self._agency(agency)
        agent_bucket = self._agent(agent, agency)
        suburb_bucket = self._suburb(suburb)
        buckets = [agency_bucket, agent_bucket, suburb_bucket]
        if has_street:
            buckets.append(self._street(record.street_name, record.suburb))
        for bucket in buckets:
            bucket.add_property(commission, sold)

        add_unique(agency_bucket.suburbs, suburb)
        add_unique(agency_bucket.agents, agent)
        add_unique(agent_bucket.suburbs, suburb)
        add_unique(agent_bucket.property_types, (record.property_type or "").strip() or UNKNOWN)

        s = self.summary
        s.total_commission += commission.commission_earned
        s.total_properties += 1
        if sold:
            s.sold_commission += commission.commission_earned
            s.total_sold += 1
        else:
            s.listed_commission += commission.commission_earned
            s.total_listed += 1
        return True

    def add_activity(self, record: ActivityRecord) -> bool:
        """Fold an activity into its street, suburb and agent buckets."""
        agent, agency = self._resolve_agent(record.agent_id)
        suburb = normalize_suburb(record.suburb)

        if not self.predicate.matches(
            agency=agency,
            agent=agent,
            suburb=suburb,
            street=normalize_street(record.street_name),
            on=record.activity_date
        ):
            return False

        for bucket in (
            self._street(record.street_name, record.suburb),
            self._suburb(suburb),
            self._agent(agent, agency),
        ):
            bucket.add_activity(record)

        s = self.summary
        s.total_activities += 1
        if record.status == ActivityStatus.COMPLETED:
            s.completed_activities += 1
        return True

    def add_plan(self, plan: MarketingPlanRecord) -> bool:
        """Add a marketing plan's targets to street, suburb and agent buckets.

        Buckets are created for targeted streets even when no activity has
        been logged on them yet.
        """
        if not self.predicate.overlaps(plan.start_date, plan.end_date):
            return False

        agent, agency = self._resolve_agent(plan.agent_id)
        suburb = normalize_suburb(plan.suburb)
        added = False

        def matches_street(name: str) -> bool:
            return self.predicate.matches(
                agency=agency, agent=agent, suburb=suburb, street=normalize_street(name), dated=False
            )

        for target in plan.door_knock_streets:
            if not matches_street(target.name):
                continue
            targets = dict(
                knocks=target.target_knocks,
                answers=target.target_answers,
                desktop_appraisals=target.desktop_appraisals,
                face_to_face_appraisals=target.face_to_face_appraisals,
            )
            for bucket in (self._street(target.name, plan.suburb), self._suburb(suburb), self._agent(agent, agency)):
                bucket.add_targets(**targets)
            added = True

        for target in plan.phone_call_streets:
            if not matches_street(target.name):
                continue
            targets = dict(
                calls=target.target_calls,
                connects=target.target_connects,
                desktop_appraisals=target.desktop_appraisals,
                face_to_face_appraisals=target.face_to_face_appraisals,
            )
            for bucket in (self._street(target.name, plan.suburb), self._suburb(suburb), self._agent(agent, agency)):
                bucket.add_targets(**targets)
            added = True

        if self.predicate.matches(agency=agency, agent=agent, suburb=suburb, dated=False):
            plan_targets = dict(
                connects=plan.target_connects,
                desktop_appraisals=plan.target_desktop_appraisals,
                face_to_face_appraisals=plan.target_face_to_face_appraisals,
            )
            if any(plan_targets.values()):
                for bucket in (self._suburb(suburb), self._agent(agent, agency)):
                    bucket.add_targets(**plan_targets)
                added = True

        return added

    # Results

    def _finish_summary(self):
        s = self.summary

        for bucket in self.suburbs.values():
            s.total_knocks += bucket.knocks_made
            s.total_calls += bucket.calls_made
            s.total_connects += bucket.calls_connected
            s.total_appraisals += bucket.appraisals
            s.target_knocks += bucket.target_knocks
            s.target_calls += bucket.target_calls
            s.target_connects += bucket.target_connects
            s.target_appraisals += bucket.target_appraisals

        s.knock_progress = progress(s.total_knocks, s.target_knocks)
        s.call_progress = progress(s.total_calls, s.target_calls)
        s.connect_progress = progress(s.total_connects, s.target_connects)
        s.appraisal_progress = progress(s.total_appraisals, s.target_appraisals)

        s.conversion_rate = s.total_properties / s.total_appraisals * 100 if s.total_appraisals else 0.0
        s.sale_rate = s.total_sold / s.total_properties * 100 if s.total_properties else 0.0

        # Ties keep the first bucket encountered
        for agency in self.agencies.values():
            if agency.total_commission > s.top_agency_commission:
                s.top_agency = agency.key
                s.top_agency_commission = agency.total_commission
                s.top_agency_commission_rate = agency.avg_commission_rate
                s.top_agency_property_count = agency.property_count

        for agent in self.agent_totals.values():
            if agent.total_commission > s.top_agent_commission:
                s.top_agent = agent.key
                s.top_agent_commission = agent.total_commission
                s.top_agent_property_count = agent.property_count

        for street in self.streets.values():
            if street.property_count == 0:
                continue
            if (street.property_count > s.top_street_listed_count or
                    (street.property_count == s.top_street_listed_count
                     and street.total_commission > s.top_street_commission)):
                s.top_street = street.key
                s.top_street_listed_count = street.property_count
                s.top_street_commission = street.total_commission

    def result(self) -> ReportResult:
        """Finalize every bucket and build the report result."""
        for table in (self.agencies, self.agent_totals, self.suburbs, self.streets):
            for bucket in table.values():
                bucket.finalize()
        self._finish_summary()

        return ReportResult(
            summary=self.summary,
            agency_totals=list(self.agencies.values()),
            agent_totals=list(self.agent_totals.values()),
            suburb_totals=list(self.suburbs.values()),
            street_totals=list(self.streets.values()),
            generated_at=self.predicate.now
        )


def accumulate(
    report_input: ReportInput,
    filters: FilterState = None,
    now: datetime = None
) -> ReportResult:
    """Run the full filter -> commission -> grouping pass over a record set.

    Pure: the same input, filters and `now` always give the same result.
    Never raises on well-typed input; an empty input gives an all-zero
    summary and empty bucket lists.
    """
    predicate = FilterPredicate(filters, now)
    accumulator = MetricAccumulator(
        predicate,
        overrides=CommissionOverrides(report_input.agent_commissions),
        agents={str(a.id): a for a in report_input.agents}
    )

    kept_properties = sum(1 for p in report_input.properties if accumulator.add_property(p))
    kept_activities = sum(1 for a in report_input.activities if accumulator.add_activity(a))
    kept_plans = sum(1 for p in report_input.marketing_plans if accumulator.add_plan(p))

    logger.debug(
        f"Accumulated {kept_properties}/{len(report_input.properties)} properties, "
        f"{kept_activities}/{len(report_input.activities)} activities, "
        f"{kept_plans}/{len(report_input.marketing_plans)} plans"
    )
    return accumulator.result()


compute_report = accumulate
