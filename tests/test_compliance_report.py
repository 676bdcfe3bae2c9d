"""Tests for the admin compliance report."""

from __future__ import annotations

from datetime import date, datetime, timezone

import pytest

from glowtrack.services.compliance_report import format_missed_date, get_compliance_report

UTC = timezone.utc
DONE = datetime(2025, 1, 6, 9, 0, tzinfo=UTC)


@pytest.fixture
def report_data(subscriber, product_factory, completion_factory):
    profile, routine, cleanser = subscriber
    retinoid = product_factory(
        routine,
        routine_step="Treat",
        product_name="Retinal 0.1%",
        frequency="specific_days",
        days=["Monday"],
        time_of_day="evening",
    )
    completion_factory(cleanser, date(2025, 1, 6), status="on-time", completed_at=DONE)
    completion_factory(retinoid, date(2025, 1, 6), "evening", status="missed")
    completion_factory(cleanser, date(2025, 1, 7), status="late", completed_at=DONE)
    completion_factory(cleanser, date(2025, 1, 8), status="missed")
    completion_factory(cleanser, date(2025, 1, 9))
    completion_factory(cleanser, date(2025, 1, 20), status="missed")
    return profile, cleanser, retinoid


class TestComplianceReport:
    """Tests for adherence totals and per-product rows."""

    def test_totals_skip_pending(self, ctx, report_data):
        profile, _, _ = report_data

        report = get_compliance_report(ctx, profile.id, date(2025, 1, 6), date(2025, 1, 12)).to_dict()

        assert report["overall"] == {"prescribed": 4, "onTime": 1, "late": 1, "missed": 2}
        assert report["am"] == {"prescribed": 3, "completed": 2, "onTime": 1, "late": 1, "missed": 1}
        assert report["pm"] == {"prescribed": 1, "completed": 0, "onTime": 0, "late": 0, "missed": 1}

    def test_product_rows(self, ctx, report_data):
        profile, cleanser, retinoid = report_data

        steps = get_compliance_report(ctx, profile.id, date(2025, 1, 6), date(2025, 1, 12)).to_dict()["steps"]

        assert [row["routineProductId"] for row in steps] == [cleanser.id, retinoid.id]
        assert steps[0]["productName"] == "Gentle Foaming Cleanser"
        assert steps[0]["missedDates"] == ["Wednesday, Jan 8, 2025"]
        assert steps[0]["prescribed"] == 3
        assert steps[1]["frequency"] == "specific_days"
        assert steps[1]["frequencyLabel"] == "Specific days"
        assert steps[1]["missedDates"] == ["Monday, Jan 6, 2025"]

    def test_range_is_inclusive(self, ctx, report_data):
        profile, _, _ = report_data

        report = get_compliance_report(ctx, profile.id, date(2025, 1, 8), date(2025, 1, 8))

        assert report.overall.prescribed == 1
        assert report.overall.missed == 1

    def test_other_subscribers_are_excluded(self, ctx, report_data, profile_factory):
        stranger = profile_factory()

        report = get_compliance_report(ctx, stranger.id, date(2025, 1, 1), date(2025, 1, 31))

        assert report.overall.prescribed == 0
        assert report.steps == []

    def test_end_before_start(self, ctx, report_data):
        profile, _, _ = report_data

        with pytest.raises(ValueError):
            get_compliance_report(ctx, profile.id, date(2025, 1, 12), date(2025, 1, 6))


def test_format_missed_date():
    assert format_missed_date(date(2025, 1, 6)) == "Monday, Jan 6, 2025"
    assert format_missed_date(date(2024, 12, 25)) == "Wednesday, Dec 25, 2024"


def test_unknown_status_fails_loudly():
    from glowtrack.errors import InvalidScheduleValue
    from glowtrack.services.compliance_report import Tally

    with pytest.raises(InvalidScheduleValue):
        Tally().add("skipped")
