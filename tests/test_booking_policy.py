"""Tests for booking rule predicates.

Every predicate must be total: malformed or wrongly typed input returns
False rather than raising.
"""

from datetime import date, datetime, timedelta

import pytest

from app.booking.policy import (
    is_allowed_email,
    is_bookable_date,
    is_designated_weekday,
    is_past_date,
    is_valid_chair,
    is_valid_slot_index,
    is_valid_time_slot,
    parse_time_slot,
)
from app.booking.schedule import ScheduleConfig

CONFIG = ScheduleConfig()
TODAY = date(2030, 1, 2)  # Wednesday


class TestBookableDate:
    """Clinic weekday and not in the past."""

    def test_next_friday_is_bookable(self) -> None:
        assert is_bookable_date(date(2030, 1, 4), TODAY, CONFIG) is True

    def test_today_friday_is_bookable(self) -> None:
        friday = date(2030, 1, 4)
        assert is_bookable_date(friday, friday, CONFIG) is True

    def test_past_friday_is_not_bookable(self) -> None:
        assert is_bookable_date(date(2029, 12, 28), TODAY, CONFIG) is False

    def test_other_weekdays_are_not_bookable(self) -> None:
        monday = date(2030, 1, 7)
        for offset in range(7):
            day = monday + timedelta(days=offset)
            assert is_bookable_date(day, TODAY, CONFIG) is (day.weekday() == 4)

    def test_every_date_in_a_year(self) -> None:
        """Bookable iff the weekday matches and the date is not before today."""
        start = date(2029, 10, 1)
        for offset in range(365):
            day = start + timedelta(days=offset)
            expected = day.weekday() == CONFIG.weekday and day >= TODAY
            assert is_bookable_date(day, TODAY, CONFIG) is expected

    def test_configured_weekday_is_honoured(self) -> None:
        tuesday_clinic = ScheduleConfig(weekday=1)
        assert is_bookable_date(date(2030, 1, 8), TODAY, tuesday_clinic) is True
        assert is_bookable_date(date(2030, 1, 4), TODAY, tuesday_clinic) is False

    @pytest.mark.parametrize("value", [None, "2030-01-04", 20300104, datetime(2030, 1, 4, 16, 0)])
    def test_non_dates_are_not_bookable(self, value) -> None:
        assert is_bookable_date(value, TODAY, CONFIG) is False

    def test_helpers(self) -> None:
        assert is_designated_weekday(date(2030, 1, 4), CONFIG) is True
        assert is_designated_weekday(date(2030, 1, 3), CONFIG) is False
        assert is_past_date(date(2030, 1, 1), TODAY) is True
        assert is_past_date(TODAY, TODAY) is False


class TestSlotIndex:
    """Index must be an integer in [0, N)."""

    @pytest.mark.parametrize("index", [0, 3, 6])
    def test_in_range(self, index: int) -> None:
        assert is_valid_slot_index(index, CONFIG) is True

    @pytest.mark.parametrize("index", [-1, 7, 8, True, False, "0", 0.0, None])
    def test_out_of_range_or_wrong_type(self, index) -> None:
        assert is_valid_slot_index(index, CONFIG) is False


class TestChair:
    """Chair must be one of the configured identifiers."""

    @pytest.mark.parametrize("chair", ["rojo", "azul", "amarillo"])
    def test_known_chairs(self, chair: str) -> None:
        assert is_valid_chair(chair, CONFIG) is True

    @pytest.mark.parametrize("chair", ["verde", "ROJO", "", None, 1])
    def test_unknown_chairs(self, chair) -> None:
        assert is_valid_chair(chair, CONFIG) is False


class TestAllowedEmail:
    """Email shape plus domain allow-list."""

    @pytest.mark.parametrize(
        "email",
        ["a@alu.medac.es", "profe@medac.es", "Ana.Lopez@ALU.MEDAC.ES", "x+y@Medac.Es"],
    )
    def test_allowed(self, email: str) -> None:
        assert is_allowed_email(email, CONFIG) is True

    @pytest.mark.parametrize(
        "email",
        [
            "a@gmail.com",
            "not-an-email",
            "a@medac.es.evil.com",
            "a@sub.medac.es",
            "a b@medac.es",
            "@medac.es",
            "a@medac",
            "<script>@medac.es",
            "a..b@medac.es",
            ".a@medac.es",
            "a(b)@medac.es",
            "x\"y@medac.es",
            "",
            None,
            42,
        ],
    )
    def test_rejected(self, email) -> None:
        assert is_allowed_email(email, CONFIG) is False


class TestTimeSlot:
    """Displayed start time must agree with the slot index."""

    def test_matching_label(self) -> None:
        assert is_valid_time_slot(1, "15:55", CONFIG) is True

    def test_mismatched_label(self) -> None:
        assert is_valid_time_slot(1, "15:15", CONFIG) is False

    @pytest.mark.parametrize("label", ["3pm", "25:00", "", None, "15-55"])
    def test_malformed_label(self, label) -> None:
        assert is_valid_time_slot(1, label, CONFIG) is False

    def test_invalid_index(self) -> None:
        assert is_valid_time_slot(9, "15:15", CONFIG) is False

    def test_parse_time_slot(self) -> None:
        assert parse_time_slot(" 17:15 ").hour == 17
        assert parse_time_slot("nonsense") is None
