"""Tests for next-due computation and frequency validation."""

from datetime import datetime, time, timedelta

import pytest
import pytz

from carecalendar.errors import InvalidFrequencyConfigError
from carecalendar.models.task import TaskFrequency
from carecalendar.services.recurrence import (
    frequency_offset,
    initial_due,
    next_due,
    validate_frequency_config,
)
from carecalendar.services.time_buckets import TimeBucket, classify
from tests.conftest import NOW, utc

NEW_YORK = pytz.timezone("America/New_York")
BERLIN = pytz.timezone("Europe/Berlin")


# =============================================================================
# Fixed-day frequencies
# =============================================================================


class TestFixedOffsets:
    """Day-based frequencies step from the completion instant."""

    @pytest.mark.parametrize("frequency,days", [
        ("daily", 1),
        ("every-other-day", 2),
        ("twice-weekly", 3),
        ("weekly", 7),
        ("bi-weekly", 14),
    ])
    def test_offset_without_scheduled_time_keeps_time_of_basis(self, frequency, days):
        assert next_due(frequency, None, None, NOW) == NOW + timedelta(days=days)

    def test_accepts_enum_members(self):
        assert next_due(TaskFrequency.WEEKLY, None, None, NOW) == utc(2024, 3, 22, 10, 0)

    def test_custom_interval(self):
        assert next_due("custom", 10, None, NOW) == utc(2024, 3, 25, 10, 0)

    def test_weekly_task_completed_late_counts_from_completion(self):
        """A weekly task that was due a week ago is next due a week from now."""
        completed_at = NOW
        assert next_due("weekly", None, None, completed_at) == utc(2024, 3, 22, 10, 0)

    def test_weekly_completed_seven_days_ago_is_exactly_due(self):
        now = utc(2024, 3, 15, 9, 0)
        due = next_due("weekly", None, time(9, 0), now - timedelta(days=7))

        assert due == now
        assert classify(due, now) != TimeBucket.OVERDUE

    def test_year_boundary(self):
        assert next_due("daily", None, None, utc(2023, 12, 31, 18, 0)) == utc(2024, 1, 1, 18, 0)


# =============================================================================
# Monthly clamping
# =============================================================================


class TestMonthly:

    def test_jan31_clamps_to_feb29_in_leap_year(self):
        assert next_due("monthly", None, None, utc(2024, 1, 31, 12, 0)) == utc(2024, 2, 29, 12, 0)

    def test_jan31_clamps_to_feb28(self):
        assert next_due("monthly", None, None, utc(2023, 1, 31, 12, 0)) == utc(2023, 2, 28, 12, 0)

    def test_mid_month(self):
        assert next_due("monthly", None, None, NOW) == utc(2024, 4, 15, 10, 0)

    def test_offset_is_calendar_month(self):
        assert frequency_offset("monthly").months == 1


# =============================================================================
# Scheduled time of day and time zones
# =============================================================================


class TestScheduledTime:

    def test_pins_time_of_day_and_zeroes_seconds(self):
        basis = utc(2024, 3, 15, 22, 30, 45)
        assert next_due("daily", None, time(8, 0), basis) == utc(2024, 3, 16, 8, 0)

    def test_uses_owner_calendar_day(self):
        # 2024-03-15 23:00 in New York (EDT, UTC-4)
        basis = utc(2024, 3, 16, 3, 0)
        assert next_due("daily", None, time(8, 0), basis, NEW_YORK) == utc(2024, 3, 16, 12, 0)

    def test_keeps_wall_clock_time_across_dst_change(self):
        # Berlin switches to CEST on 2024-03-31
        basis = BERLIN.localize(datetime(2024, 3, 30, 8, 0)).astimezone(pytz.utc)
        due = next_due("daily", None, time(8, 0), basis, BERLIN)
        assert due == utc(2024, 3, 31, 6, 0)
        assert due.astimezone(BERLIN).hour == 8


class TestMonotonicity:

    @pytest.mark.parametrize("frequency,custom_days", [
        ("daily", None),
        ("every-other-day", None),
        ("twice-weekly", None),
        ("weekly", None),
        ("bi-weekly", None),
        ("monthly", None),
        ("custom", 1),
    ])
    @pytest.mark.parametrize("scheduled", [None, time(0, 0), time(23, 59)])
    def test_next_due_is_after_basis(self, frequency, custom_days, scheduled):
        for basis in (utc(2024, 3, 15, 23, 59, 59), utc(2024, 1, 31, 0, 0), NOW):
            assert next_due(frequency, custom_days, scheduled, basis, NEW_YORK) > basis


# =============================================================================
# Validation
# =============================================================================


class TestValidation:

    def test_custom_without_interval_is_rejected(self):
        with pytest.raises(InvalidFrequencyConfigError) as exc_info:
            next_due("custom", None, None, NOW)
        assert exc_info.value.code == "INVALID_FREQUENCY_CONFIG"

    @pytest.mark.parametrize("days", [0, -3, True, 2.5])
    def test_custom_interval_must_be_positive_integer(self, days):
        with pytest.raises(InvalidFrequencyConfigError):
            validate_frequency_config("custom", days)

    def test_unknown_frequency(self):
        with pytest.raises(InvalidFrequencyConfigError) as exc_info:
            validate_frequency_config("hourly", None)
        assert exc_info.value.details["frequency"] == "hourly"

    @pytest.mark.parametrize("days", [0, -5, 1.5])
    def test_interval_is_checked_for_fixed_frequencies(self, days):
        with pytest.raises(InvalidFrequencyConfigError) as exc_info:
            validate_frequency_config("weekly", days)
        assert exc_info.value.details["custom_frequency_days"] == days

    def test_valid_interval_on_fixed_frequency_is_unused(self):
        assert validate_frequency_config("weekly", 3) == TaskFrequency.WEEKLY
        assert next_due("weekly", 3, None, NOW) == NOW + timedelta(days=7)


# =============================================================================
# First due date of new tasks
# =============================================================================


class TestInitialDue:

    def test_later_today(self):
        assert initial_due(time(14, 0), NOW) == utc(2024, 3, 15, 14, 0)

    def test_already_passed_moves_to_tomorrow(self):
        assert initial_due(time(9, 0), NOW) == utc(2024, 3, 16, 9, 0)

    def test_exactly_now_moves_to_tomorrow(self):
        assert initial_due(time(10, 0), NOW) == utc(2024, 3, 16, 10, 0)

    def test_without_time_defaults_to_tomorrow_morning(self):
        assert initial_due(None, NOW) == utc(2024, 3, 16, 9, 0)

    def test_owner_zone(self):
        # 06:00 EDT on 2024-03-15
        assert initial_due(time(7, 30), NOW, NEW_YORK) == utc(2024, 3, 15, 11, 30)
