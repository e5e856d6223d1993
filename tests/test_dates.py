"""
Tests for MRZ date century disambiguation.
"""
from datetime import date

import pytest

from mrzscan.dates import DateContext, disambiguate_date, normalize_date


class TestBirthDates:
    """Birth dates always lie in the past."""

    def test_year_above_current_goes_to_previous_century(self, today):
        assert disambiguate_date("970101", DateContext.BIRTH, today=today) == "01.01.1997"

    def test_year_at_or_below_current_stays_in_century(self, today):
        assert disambiguate_date("240315", DateContext.BIRTH, today=today) == "15.03.2024"
        assert disambiguate_date("050709", DateContext.BIRTH, today=today) == "09.07.2005"

    def test_birth_before_1940_is_dropped(self, today):
        assert disambiguate_date("300101", DateContext.BIRTH, today=today) == ""

    def test_min_birth_year_is_configurable(self, today):
        result = disambiguate_date("300101", DateContext.BIRTH, today=today, min_birth_year=1900)
        assert result == "01.01.1930"


class TestExpiryDates:
    """Expiry dates fall in a window starting ten years back."""

    def test_future_expiry(self, today):
        assert disambiguate_date("300101", DateContext.EXPIRY, today=today) == "01.01.2030"

    def test_recent_past_expiry_stays_in_century(self, today):
        assert disambiguate_date("150101", DateContext.EXPIRY, today=today) == "01.01.2015"

    def test_expiry_more_than_ten_years_back_rolls_forward(self, today):
        assert disambiguate_date("100101", DateContext.EXPIRY, today=today) == "01.01.2110"

    def test_window_is_configurable(self, today):
        result = disambiguate_date("100101", DateContext.EXPIRY, today=today, expiry_past_years=20)
        assert result == "01.01.2010"


class TestInvalidInput:
    """Invalid dates degrade to an empty string, never an exception."""

    @pytest.mark.parametrize("value", ["991301", "990001", "990132", "990100"])
    def test_out_of_range_month_or_day(self, value, today):
        assert disambiguate_date(value, DateContext.BIRTH, today=today) == ""

    @pytest.mark.parametrize("value", ["", "<<<<<<", "9901", "99O101", None])
    def test_not_six_digits(self, value, today):
        assert disambiguate_date(value, DateContext.EXPIRY, today=today) == ""

    def test_output_is_zero_padded(self):
        assert disambiguate_date("850203", DateContext.BIRTH, today=date(2024, 1, 1)) == "03.02.1985"


class TestNormalizeDate:
    """Dates from text-generation responses come in several shapes."""

    def test_dotted_date_passes_through(self, today):
        assert normalize_date("25.08.1985", DateContext.BIRTH, today=today) == "25.08.1985"

    def test_slashes_and_dashes(self, today):
        assert normalize_date("25/08/2030", DateContext.EXPIRY, today=today) == "25.08.2030"
        assert normalize_date("25-08-2030", DateContext.EXPIRY, today=today) == "25.08.2030"

    def test_iso_date(self, today):
        assert normalize_date("1985-08-25", DateContext.BIRTH, today=today) == "25.08.1985"

    def test_raw_mrz_date(self, today):
        assert normalize_date("850825", DateContext.BIRTH, today=today) == "25.08.1985"

    def test_issue_date_from_mrz_shape_is_in_the_past(self, today):
        assert normalize_date("200416", DateContext.ISSUE, today=today) == "16.04.2020"

    def test_unrecognised_shapes_are_empty(self, today):
        assert normalize_date("", DateContext.BIRTH, today=today) == ""
        assert normalize_date("unknown", DateContext.BIRTH, today=today) == ""
        assert normalize_date("25.08.85", DateContext.BIRTH, today=today) == ""

    def test_month_names(self, today):
        assert normalize_date("16 APR 2020", DateContext.ISSUE, today=today) == "16.04.2020"
        assert normalize_date("Aug 25, 1985", DateContext.BIRTH, today=today) == "25.08.1985"

    def test_impossible_calendar_date(self, today):
        assert normalize_date("31.02.1990", DateContext.BIRTH, today=today) == ""
        assert normalize_date("29.02.2023", DateContext.ISSUE, today=today) == ""

    def test_leap_day(self, today):
        assert normalize_date("29.02.2000", DateContext.BIRTH, today=today) == "29.02.2000"

    def test_invalid_month_in_full_date(self, today):
        assert normalize_date("25.13.1985", DateContext.BIRTH, today=today) == ""

    def test_old_birth_year_in_full_date(self, today):
        assert normalize_date("01.01.1920", DateContext.BIRTH, today=today) == ""
