"""Tests for report accumulation."""

from datetime import datetime

import pytest
from agency_reports.core.filters import DateRange, FilterState, StatusFilter
from agency_reports.reporting import Dimension, accumulate, compute_report
from agency_reports.storage.models import (
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

NOW = datetime(2024, 6, 30, 12, 0)


def make_property(id, agency="ABC Realty", agent="Jane Smith", suburb="Springfield",
                  price=400000, commission=2.5, **kwargs):
    return PropertyRecord(
        id=id, agency_name=agency, agent_name=agent, suburb=suburb,
        price=price, commission=commission, **kwargs
    )


def make_knock(id, knocks, street="Main St", suburb="Springfield", agent_id="a1", **kwargs):
    return ActivityRecord(
        id=id, agent_id=agent_id, activity_type=ActivityType.DOOR_KNOCK,
        street_name=street, suburb=suburb, knocks_made=knocks, **kwargs
    )


@pytest.fixture
def report_input():
    """A small mixed bundle across two agencies and suburbs."""
    return ReportInput(
        properties=[
            make_property("p1", listed_date=datetime(2024, 6, 20), street_name="Main St"),
            make_property("p2", agency="abc   realty", price=600000, listed_date=datetime(2024, 3, 1)),
            make_property("p3", agency="Xyz Homes", agent="John Doe", suburb="Spring Hill",
                          price=500000, sold_price=520000, commission=2.0,
                          category=PropertyCategory.SOLD, sold_date=datetime(2024, 6, 1),
                          listed_date=datetime(2024, 5, 1)),
            make_property("p4", agency="Xyz Homes", agent="John Doe", suburb="Riverside",
                          price=300000, commission=3.0, property_type="Unit"),
        ],
        activities=[
            make_knock("k1", 40, activity_date=datetime(2024, 6, 25), desktop_appraisals=2),
            ActivityRecord(
                id="c1", agent_id="a2", activity_type=ActivityType.PHONE_CALL,
                activity_date=datetime(2024, 6, 26), street_name="River Rd", suburb="Riverside",
                calls_made=30, calls_connected=12, face_to_face_appraisals=1,
                status=ActivityStatus.PENDING
            ),
        ],
        marketing_plans=[
            MarketingPlanRecord(
                agent_id="a1", suburb="Springfield",
                start_date=datetime(2024, 6, 1), end_date=datetime(2024, 8, 31),
                door_knock_streets=[
                    DoorKnockTarget(name="Main St", target_knocks=100, target_answers=30, desktop_appraisals=4),
                    DoorKnockTarget(name="Elm St", target_knocks=50),
                ],
                target_connects=5,
            ),
        ],
        agents=[
            AgentProfile(id="a1", agent_name="jane smith", agency_name="abc realty"),
            AgentProfile(id="a2", agent_name="john doe", agency_name="xyz homes"),
        ],
    )


class TestPropertyTotals:
    """Tests for commission grouping."""

    def test_agency_spellings_merge(self):
        """Two spellings of one agency land in one bucket."""
        report_input = ReportInput(properties=[
            make_property("p1", agency="ABC Realty", price=400000),
            make_property("p2", agency="abc   realty", price=600000),
        ])
        result = accumulate(report_input, now=NOW)

        assert len(result.agency_totals) == 1
        agency = result.agency_totals[0]
        assert agency.agency == "Abc Realty"
        assert agency.total_commission == pytest.approx(25000)
        assert agency.property_count == 2
        assert agency.listed_count == 2
        assert agency.sold_count == 0

    def test_listed_and_sold_split(self, report_input):
        """Sold properties go to the sold side of each bucket."""
        result = accumulate(report_input, now=NOW)
        xyz = next(a for a in result.agency_totals if a.agency == "Xyz Homes")

        assert xyz.sold_count == 1
        assert xyz.sold_commission == pytest.approx(10400)
        assert xyz.listed_count == 1
        assert xyz.listed_commission == pytest.approx(9000)
        assert xyz.suburbs == ["Spring Hill", "Riverside"]

    def test_summary_totals(self, report_input):
        result = accumulate(report_input, now=NOW)
        s = result.summary

        assert s.total_properties == 4
        assert s.total_listed == 3
        assert s.total_sold == 1
        assert s.total_commission == pytest.approx(10000 + 15000 + 10400 + 9000)
        assert s.sale_rate == pytest.approx(25.0)

    def test_average_rate_is_arithmetic_mean(self):
        """Agency average rate is the plain mean of property rates."""
        report_input = ReportInput(properties=[
            make_property("p1", price=100000, commission=2.0),
            make_property("p2", price=900000, commission=4.0),
        ])
        result = accumulate(report_input, now=NOW)
        assert result.agency_totals[0].avg_commission_rate == pytest.approx(3.0)

    def test_agent_override_applied(self):
        """Agent commission overrides change earned commission."""
        report_input = ReportInput(
            properties=[make_property("p1", price=100000, commission=2.0)],
            agent_commissions=[AgentCommission(property_id="p1", agent_name="jane smith", commission_rate=3.0)],
        )
        result = accumulate(report_input, now=NOW)
        assert result.summary.total_commission == pytest.approx(3000)

    def test_agent_bucket_details(self, report_input):
        """Agent buckets carry their agency, suburbs and property types."""
        result = accumulate(report_input, now=NOW)
        john = next(a for a in result.agent_totals if a.name == "John Doe")

        assert john.agency == "Xyz Homes"
        assert john.suburbs == ["Spring Hill", "Riverside"]
        assert john.property_types == ["Unit"]
        assert john.calls_made == 30

    def test_top_agency_and_agent(self, report_input):
        """Top agency and agent are the highest commission buckets."""
        s = accumulate(report_input, now=NOW).summary

        assert s.top_agency == "Abc Realty"
        assert s.top_agency_commission == pytest.approx(25000)
        assert s.top_agency_property_count == 2
        assert s.top_agent == "Jane Smith"

    def test_top_agency_tie_keeps_first(self):
        """Ties keep the first agency encountered."""
        report_input = ReportInput(properties=[
            make_property("p1", agency="First Realty"),
            make_property("p2", agency="Second Realty"),
        ])
        assert accumulate(report_input, now=NOW).summary.top_agency == "First Realty"

    def test_top_street(self, report_input):
        """Most active street counts properties on the street."""
        s = accumulate(report_input, now=NOW).summary
        assert s.top_street == "Main St, Springfield"
        assert s.top_street_listed_count == 1


class TestActivityAndTargets:
    """Tests for activity actuals and plan targets."""

    def test_street_progress(self, report_input):
        """40 of 100 knocks is 40 percent."""
        result = accumulate(report_input, now=NOW)
        main = next(s for s in result.street_totals if s.key == "Main St, Springfield")

        assert main.knocks_made == 40
        assert main.target_knocks == 100
        assert main.knock_progress == 40.0

    def test_progress_capped(self):
        """Exceeding a target caps progress at 100."""
        report_input = ReportInput(
            activities=[make_knock("k1", 140)],
            marketing_plans=[MarketingPlanRecord(
                agent_id="a1", suburb="Springfield",
                door_knock_streets=[DoorKnockTarget(name="Main St", target_knocks=100)],
            )],
        )
        result = accumulate(report_input, now=NOW)
        street = result.street_totals[0]

        assert street.knock_progress == 100.0
        for bucket in result.street_totals + result.suburb_totals + result.agent_totals:
            assert 0 <= bucket.knock_progress <= 100
            assert 0 <= bucket.overall_progress <= 100

    def test_plan_creates_street_without_activity(self, report_input):
        """A targeted street with no activity still gets a bucket."""
        result = accumulate(report_input, now=NOW)
        elm = next(s for s in result.street_totals if s.key == "Elm St, Springfield")

        assert elm.knocks_made == 0
        assert elm.target_knocks == 50
        assert elm.knock_progress == 0.0

    def test_activity_feeds_suburb_and_agent(self, report_input):
        """Activities resolve their agent through the directory."""
        result = accumulate(report_input, now=NOW)
        springfield = next(s for s in result.suburb_totals if s.suburb == "Springfield")
        jane = next(a for a in result.agent_totals if a.name == "Jane Smith")

        assert springfield.knocks_made == 40
        assert springfield.target_knocks == 150
        assert springfield.target_connects == 5
        assert jane.knocks_made == 40
        assert jane.agency == "Abc Realty"

    def test_unknown_agent_activity(self):
        """Activities from agents missing in the directory go to Unknown."""
        result = accumulate(ReportInput(activities=[make_knock("k1", 5, agent_id="zz")]), now=NOW)
        assert [a.name for a in result.agent_totals] == ["Unknown"]

    def test_summary_activity_totals(self, report_input):
        s = accumulate(report_input, now=NOW).summary

        assert s.total_activities == 2
        assert s.completed_activities == 1
        assert s.total_knocks == 40
        assert s.total_calls == 30
        assert s.total_connects == 12
        assert s.total_appraisals == 3
        assert s.target_knocks == 150
        assert s.knock_progress == pytest.approx(26.7)

    def test_conversion_rate_uncapped(self, report_input):
        """Conversion rate can exceed 100."""
        s = accumulate(report_input, now=NOW).summary
        assert s.conversion_rate == pytest.approx(4 / 3 * 100)

    def test_phone_call_targets(self):
        report_input = ReportInput(marketing_plans=[MarketingPlanRecord(
            agent_id="a1", suburb="Riverside",
            phone_call_streets=[PhoneCallTarget(name="River Rd", target_calls=80, target_connects=20)],
        )])
        street = accumulate(report_input, now=NOW).street_totals[0]
        assert street.target_calls == 80
        assert street.target_connects == 20


class TestFiltering:
    """Tests for filters applied during accumulation."""

    def test_empty_input(self):
        """An empty bundle gives an all-zero summary and no buckets."""
        result = accumulate(ReportInput(), now=NOW)

        for value in result.summary.to_dict().values():
            assert value in (0, None)
        for dimension in Dimension:
            assert result.totals(dimension) == []

    def test_suburb_filter(self, report_input):
        """Suburb filter keeps only matching suburbs in every view."""
        result = accumulate(report_input, FilterState(suburb="spring"), now=NOW)

        assert {s.suburb for s in result.suburb_totals} == {"Springfield", "Spring Hill"}
        assert result.summary.total_properties == 3

    def test_status_filter(self, report_input):
        result = accumulate(report_input, FilterState(status=StatusFilter.SOLD), now=NOW)
        assert result.summary.total_properties == 1
        assert result.summary.total_sold == 1

    def test_date_range_filter(self, report_input):
        """Only recent listings and plans overlapping the window count."""
        result = accumulate(report_input, FilterState(date_range=DateRange.LAST_30_DAYS), now=NOW)

        assert result.summary.total_properties == 1
        assert result.summary.target_knocks == 150

    def test_filter_monotonicity(self, report_input):
        """Tightening a filter never increases any bucket."""
        full = accumulate(report_input, now=NOW)
        for filters in (FilterState(suburb="spring"), FilterState(agent="jane"),
                        FilterState(agency="xyz"), FilterState(search="main"),
                        FilterState(status=StatusFilter.LISTED)):
            narrowed = accumulate(report_input, filters, now=NOW)
            for dimension in Dimension:
                full_buckets = {b.key: b for b in full.totals(dimension)}
                for bucket in narrowed.totals(dimension):
                    base = full_buckets[bucket.key]
                    assert bucket.total_commission <= base.total_commission + 1e-9
                    assert bucket.property_count <= base.property_count
                    assert bucket.knocks_made <= base.knocks_made
                    assert bucket.target_knocks <= base.target_knocks

    def test_deterministic(self, report_input):
        """Same input, filters and time give identical output."""
        filters = FilterState(suburb="spring")
        assert accumulate(report_input, filters, now=NOW).to_dict() == \
            compute_report(report_input, filters, now=NOW).to_dict()
