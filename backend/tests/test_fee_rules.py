"""
Tests for the fee and penalty rules.
"""
import pytest
from datetime import date, datetime, time, timedelta, timezone
from decimal import Decimal
from zoneinfo import ZoneInfo

from clubdesk.core.exceptions import DomainValidationError
from clubdesk.models.attendance_record import AttendanceStatus
from clubdesk.services import fee_rules

SEOUL = ZoneInfo("Asia/Seoul")
SUNDAY = date(2026, 3, 15)


def local(*args) -> datetime:
    return datetime(*args, tzinfo=SEOUL)


class TestRoomFee:

    @pytest.mark.parametrize("status", [AttendanceStatus.PRESENT, AttendanceStatus.LATE])
    def test_charged_when_attending(self, status):
        assert fee_rules.room_fee(status) == Decimal("5000")

    @pytest.mark.parametrize("status", [AttendanceStatus.ABSENT, AttendanceStatus.NO_SHOW])
    def test_free_when_not_attending(self, status):
        assert fee_rules.room_fee(status) == 0


class TestLateFee:
    """Meeting starts at 10:00."""

    @pytest.mark.parametrize("arrival, expected", [
        ("09:55", "0"),
        ("10:00", "0"),
        ("10:05", "0"),
        ("10:10", "0"),
        ("10:10:01", "5000"),
        ("10:15", "5000"),
        ("10:20", "5000"),
        ("10:21", "6000"),
        ("10:30", "6000"),
        ("10:35", "7000"),
        ("10:55", "9000"),
        ("11:00", "9000"),
        ("11:01", "10000"),
        ("11:15", "10000"),
        ("13:00", "10000"),
    ])
    def test_tiers(self, arrival, expected):
        assert fee_rules.late_fee(arrival, time(10, 0)) == Decimal(expected)

    def test_uses_location_start_time(self):
        assert fee_rules.late_fee("19:15", time(19, 0)) == Decimal("5000")
        assert fee_rules.late_fee("10:15", time(19, 0)) == 0

    def test_default_start_comes_from_settings(self):
        assert fee_rules.late_fee("10:15") == Decimal("5000")

    @pytest.mark.parametrize("arrival", ["", "late", "10h15", "10:xx", None])
    def test_invalid_arrival_time(self, arrival):
        with pytest.raises(DomainValidationError):
            fee_rules.late_fee(arrival, time(10, 0))

    def test_invalid_location_start(self):
        with pytest.raises(DomainValidationError):
            fee_rules.meeting_start_time("ten o'clock")


class TestFlipPenalty:
    """Meeting on Sunday 15 March; Friday of that week is 13 March."""

    def test_free_until_thursday_midnight(self):
        penalty = fee_rules.flip_penalty(local(2026, 3, 12, 23, 59, 59), SUNDAY, SEOUL)
        assert penalty.amount == 0
        assert not penalty.charged
        assert not penalty.issues_warning

    def test_friday_costs_ten_thousand_without_warning(self):
        penalty = fee_rules.flip_penalty(local(2026, 3, 13, 0, 0, 1), SUNDAY, SEOUL)
        assert penalty.amount == Decimal("10000")
        assert not penalty.issues_warning

    def test_saturday_costs_ten_thousand(self):
        penalty = fee_rules.flip_penalty(local(2026, 3, 14, 22, 0), SUNDAY, SEOUL)
        assert penalty.amount == Decimal("10000")

    def test_meeting_day_costs_more_and_warns(self):
        penalty = fee_rules.flip_penalty(local(2026, 3, 15, 8, 0), SUNDAY, SEOUL)
        assert penalty.amount == Decimal("25000")
        assert penalty.issues_warning

    def test_earlier_week_is_free(self):
        penalty = fee_rules.flip_penalty(local(2026, 3, 8, 9, 0), SUNDAY, SEOUL)
        assert penalty.amount == 0

    def test_tier_follows_local_date_not_utc(self):
        # 15:30 UTC on Thursday is already 00:30 Friday in Seoul
        flipped = datetime(2026, 3, 12, 15, 30, tzinfo=timezone.utc)
        assert fee_rules.flip_penalty(flipped, SUNDAY, SEOUL).amount == Decimal("10000")

    def test_naive_times_are_treated_as_utc(self):
        flipped = datetime(2026, 3, 12, 14, 0)
        assert fee_rules.flip_penalty(flipped, SUNDAY, SEOUL).amount == 0


class TestAbsencePenalty:

    def test_absent_after_yes(self):
        penalty = fee_rules.absence_penalty(AttendanceStatus.ABSENT, voted_yes=True)
        assert penalty.amount == Decimal("10000")
        assert penalty.issues_warning

    def test_absent_without_yes(self):
        assert not fee_rules.absence_penalty(AttendanceStatus.ABSENT, voted_yes=False).charged

    def test_no_show_is_not_charged(self):
        assert not fee_rules.absence_penalty(AttendanceStatus.NO_SHOW, voted_yes=True).charged


class TestPresenterPenalty:

    def test_on_time(self):
        deadline = local(2026, 3, 12, 23, 59)
        assert fee_rules.presenter_penalty(deadline - timedelta(hours=1), deadline, deadline) == 0

    def test_late_submission(self):
        deadline = local(2026, 3, 12, 23, 59)
        submitted = deadline + timedelta(minutes=1)
        assert fee_rules.presenter_penalty(submitted, deadline, submitted) == Decimal("5000")

    def test_nothing_submitted_after_deadline(self):
        deadline = local(2026, 3, 12, 23, 59)
        assert fee_rules.presenter_penalty(None, deadline, deadline + timedelta(hours=2)) == Decimal("5000")

    def test_nothing_submitted_before_deadline(self):
        deadline = local(2026, 3, 12, 23, 59)
        assert fee_rules.presenter_penalty(None, deadline, deadline - timedelta(hours=2)) == 0
