"""
Unit Tests for the Recurrence Resolver.

Tests:
1. amount_for_period: one-off, irregular, periodic and daily windows
2. expand_occurrences: per-occurrence amounts, horizon and end dates
3. Agreement between the two read contracts
4. Provision installment schedules
"""

import pytest
from datetime import date
from decimal import Decimal

from dateutil.relativedelta import relativedelta

from cashplan.models.entities import BudgetEntry, Direction, Frequency
from cashplan.services.recurrence import (
    Occurrence,
    amount_for_month,
    amount_for_period,
    expand_occurrences,
    generate_provision_schedule,
    horizon_cap,
)

TODAY = date(2025, 6, 15)


def month_window(year, month):
    start = date(year, month, 1)
    return start, start + relativedelta(months=1)


# =============================================================================
# TEST: AMOUNT FOR PERIOD
# =============================================================================

class TestAmountForPeriod:
    """Tests for display-time period totals."""

    def test_monthly_march_amount(self, rent_entry):
        """Monthly 1200 from 2025-01-05 contributes 1200 to March 2025."""
        start, end = month_window(2025, 3)
        assert amount_for_period(rent_entry, start, end, today=TODAY) == Decimal("1200")

    def test_monthly_every_full_month_within_horizon(self, rent_entry):
        """Every calendar month inside the horizon holds exactly one rent."""
        month = date(2025, 1, 1)
        while month < date(2030, 6, 1):
            assert amount_for_period(rent_entry, month, month + relativedelta(months=1), today=TODAY) == Decimal("1200")
            month += relativedelta(months=1)

    def test_before_start_date_is_zero(self, rent_entry):
        start, end = month_window(2024, 12)
        assert amount_for_period(rent_entry, start, end, today=TODAY) == Decimal("0")

    def test_after_end_date_is_zero(self, rent_entry):
        entry = rent_entry.model_copy(update={"end_date": date(2025, 3, 31)})
        start, end = month_window(2025, 4)
        assert amount_for_period(entry, start, end, today=TODAY) == Decimal("0")

    def test_window_is_half_open(self, rent_entry):
        """The start of a window is included, its end is not."""
        assert amount_for_period(rent_entry, date(2025, 3, 5), date(2025, 3, 6), today=TODAY) == Decimal("1200")
        assert amount_for_period(rent_entry, date(2025, 2, 6), date(2025, 3, 5), today=TODAY) == Decimal("0")

    def test_one_off_inside_and_outside_window(self, project):
        entry = BudgetEntry(
            project_id=project.id,
            direction=Direction.OUTFLOW,
            category="Equipment",
            frequency=Frequency.ONE_OFF,
            amount=Decimal("800"),
            one_off_date=date(2025, 4, 10),
        )
        assert amount_for_month(entry, 2025, 4) == Decimal("800")
        assert amount_for_month(entry, 2025, 5) == Decimal("0")

    def test_one_off_falls_back_to_start_date(self, project):
        entry = BudgetEntry(
            project_id=project.id,
            direction=Direction.INFLOW,
            category="Grant",
            frequency=Frequency.ONE_OFF,
            amount=Decimal("300"),
            start_date=date(2025, 2, 2),
        )
        assert entry.one_off_date == date(2025, 2, 2)

    def test_irregular_sums_payments_in_window(self, project):
        entry = BudgetEntry(
            project_id=project.id,
            direction=Direction.OUTFLOW,
            category="Consulting",
            frequency=Frequency.IRREGULAR,
            payments=[
                {"date": "2025-02-10", "amount": "300"},
                {"date": "2025-02-20", "amount": "200"},
                {"date": "2025-05-01", "amount": "1000"},
            ],
        )
        assert entry.amount == Decimal("1500")
        assert amount_for_month(entry, 2025, 2) == Decimal("500")
        assert amount_for_month(entry, 2025, 3) == Decimal("0")

    def test_irregular_drops_lines_without_positive_amount(self, project):
        entry = BudgetEntry(
            project_id=project.id,
            direction=Direction.OUTFLOW,
            category="Consulting",
            frequency=Frequency.IRREGULAR,
            payments=[
                {"date": "2025-02-10", "amount": "300"},
                {"date": "2025-02-11", "amount": "0"},
                {"date": None, "amount": "50"},
            ],
        )
        assert len(entry.payments) == 1
        assert entry.amount == Decimal("300")

    def test_weekly_counts_weekdays_in_month(self, weekly_entry):
        """Mondays: four in February 2025, five in March 2025."""
        assert amount_for_month(weekly_entry, 2025, 2, today=TODAY) == Decimal("400")
        assert amount_for_month(weekly_entry, 2025, 3, today=TODAY) == Decimal("500")

    def test_daily_only_counts_allowed_weekdays(self, project):
        """March 2025 has 21 weekdays."""
        entry = BudgetEntry(
            project_id=project.id,
            direction=Direction.INFLOW,
            category="Shop sales",
            frequency=Frequency.DAILY,
            amount=Decimal("10"),
            start_date=date(2025, 1, 1),
            days_of_week=[0, 1, 2, 3, 4],
        )
        assert amount_for_month(entry, 2025, 3, today=TODAY) == Decimal("210")

    def test_daily_without_filter_counts_every_day(self, project):
        entry = BudgetEntry(
            project_id=project.id,
            direction=Direction.INFLOW,
            category="Shop sales",
            frequency=Frequency.DAILY,
            amount=Decimal("10"),
            start_date=date(2025, 1, 1),
        )
        assert amount_for_month(entry, 2025, 3, today=TODAY) == Decimal("310")

    def test_inactive_or_missing_entry_is_zero(self, rent_entry):
        inactive = rent_entry.model_copy(update={"amount": Decimal("0")})
        start, end = month_window(2025, 3)
        assert amount_for_period(inactive, start, end, today=TODAY) == Decimal("0")
        assert amount_for_period(None, start, end, today=TODAY) == Decimal("0")

    def test_empty_window_is_zero(self, rent_entry):
        assert amount_for_period(rent_entry, date(2025, 3, 5), date(2025, 3, 5), today=TODAY) == Decimal("0")


# =============================================================================
# TEST: EXPAND OCCURRENCES
# =============================================================================

class TestExpandOccurrences:
    """Tests for per-occurrence expansion."""

    def test_monthly_includes_march_fifth(self, rent_entry):
        occurrences = expand_occurrences(rent_entry, today=TODAY)
        assert Occurrence(due_date=date(2025, 3, 5), amount=Decimal("1200")) in occurrences
        assert occurrences[0].due_date == date(2025, 1, 5)

    def test_open_ended_stops_at_horizon_cap(self, rent_entry):
        """From 2025-01-05 to 2030-06-15 there are 66 monthly occurrences."""
        occurrences = expand_occurrences(rent_entry, today=TODAY)
        assert horizon_cap(TODAY) == date(2030, 6, 15)
        assert len(occurrences) == 66
        assert occurrences[-1].due_date == date(2030, 6, 5)

    def test_end_date_before_horizon(self, rent_entry):
        entry = rent_entry.model_copy(update={"end_date": date(2025, 4, 5)})
        dates = [o.due_date for o in expand_occurrences(entry, today=TODAY)]
        assert dates == [date(2025, 1, 5), date(2025, 2, 5), date(2025, 3, 5), date(2025, 4, 5)]

    def test_explicit_horizon_end(self, rent_entry):
        occurrences = expand_occurrences(rent_entry, horizon_end=date(2025, 3, 4), today=TODAY)
        assert len(occurrences) == 2

    def test_weekly_occurrences_carry_unit_amount(self, weekly_entry):
        occurrences = expand_occurrences(weekly_entry, horizon_end=date(2025, 3, 31), today=TODAY)
        assert all(o.amount == Decimal("100") for o in occurrences)
        assert all(o.due_date.weekday() == 0 for o in occurrences)

    def test_weekly_occurrences_match_period_amounts(self, weekly_entry):
        """Summing occurrences per month gives amount_for_period for that month."""
        occurrences = expand_occurrences(weekly_entry, today=TODAY)
        for month in range(1, 13):
            start, end = month_window(2025, month)
            in_month = sum((o.amount for o in occurrences if start <= o.due_date < end), Decimal("0"))
            assert in_month == amount_for_period(weekly_entry, start, end, today=TODAY)

    def test_month_end_anchor_does_not_drift(self, project):
        entry = BudgetEntry(
            project_id=project.id,
            direction=Direction.OUTFLOW,
            category="Payroll",
            frequency=Frequency.MONTHLY,
            amount=Decimal("3000"),
            start_date=date(2025, 1, 31),
        )
        dates = [o.due_date for o in expand_occurrences(entry, horizon_end=date(2025, 5, 1))]
        assert dates == [date(2025, 1, 31), date(2025, 2, 28), date(2025, 3, 31), date(2025, 4, 30)]

    def test_annual_leap_day_anchor(self, project):
        entry = BudgetEntry(
            project_id=project.id,
            direction=Direction.OUTFLOW,
            category="Insurance",
            frequency=Frequency.ANNUAL,
            amount=Decimal("900"),
            start_date=date(2024, 2, 29),
        )
        dates = [o.due_date for o in expand_occurrences(entry, horizon_end=date(2028, 12, 31))]
        assert date(2025, 2, 28) in dates
        assert date(2028, 2, 29) in dates

    def test_quarterly_stride(self, project):
        entry = BudgetEntry(
            project_id=project.id,
            direction=Direction.OUTFLOW,
            category="VAT",
            frequency=Frequency.QUARTERLY,
            amount=Decimal("2500"),
            start_date=date(2025, 1, 20),
        )
        dates = [o.due_date for o in expand_occurrences(entry, horizon_end=date(2025, 12, 31))]
        assert dates == [date(2025, 1, 20), date(2025, 4, 20), date(2025, 7, 20), date(2025, 10, 20)]

    def test_one_off_single_occurrence(self, project):
        entry = BudgetEntry(
            project_id=project.id,
            direction=Direction.OUTFLOW,
            category="Equipment",
            frequency=Frequency.ONE_OFF,
            amount=Decimal("800"),
            one_off_date=date(2025, 4, 10),
        )
        assert expand_occurrences(entry) == [Occurrence(due_date=date(2025, 4, 10), amount=Decimal("800"))]

    def test_inactive_entry_has_no_occurrences(self, rent_entry):
        assert expand_occurrences(rent_entry.model_copy(update={"amount": Decimal("0")}), today=TODAY) == []


# =============================================================================
# TEST: PROVISION SCHEDULE
# =============================================================================

class TestProvisionSchedule:
    """Tests for provision installment generation."""

    def test_even_split(self):
        schedule = generate_provision_schedule(Decimal("100000"), 10, date(2025, 1, 31))
        assert len(schedule) == 10
        assert all(line.amount == Decimal("10000") for line in schedule)
        assert schedule[1].date == date(2025, 2, 28)
        assert schedule[-1].date == date(2025, 10, 31)

    def test_remainder_on_last_installment(self):
        schedule = generate_provision_schedule(Decimal("1000"), 3, date(2025, 1, 1))
        assert [line.amount for line in schedule] == [Decimal("333.33"), Decimal("333.33"), Decimal("333.34")]
        assert sum(line.amount for line in schedule) == Decimal("1000")

    def test_invalid_arguments(self):
        with pytest.raises(ValueError):
            generate_provision_schedule(Decimal("1000"), 0, date(2025, 1, 1))
        with pytest.raises(ValueError):
            generate_provision_schedule(Decimal("0"), 3, date(2025, 1, 1))
