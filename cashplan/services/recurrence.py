"""
Recurrence Resolver - turns a budget entry into dated amounts.

Two read contracts share one date iterator so they always agree:

- amount_for_period(): display-time total attributable to a half-open window
- expand_occurrences(): one Occurrence per calendar event, used to size
  obligations (never size an obligation from amount_for_period)

Periodic dates are anchored on the entry's start_date: occurrence k is
start + k * stride. Month strides use relativedelta, so a 31st anchor lands on
the last day of shorter months without drifting afterwards.
"""
from dataclasses import dataclass
from datetime import date, timedelta
from decimal import Decimal, ROUND_DOWN
from typing import Iterator, List, Optional

from dateutil.relativedelta import relativedelta

from cashplan.config import settings
from cashplan.models.entities import (
    BudgetEntry,
    ExplicitPayment,
    Frequency,
    PERIODIC_FREQUENCIES,
    SCHEDULED_FREQUENCIES,
)

ZERO = Decimal("0")
ALL_DAYS = frozenset(range(7))

MONTH_STRIDES = {
    Frequency.MONTHLY: 1,
    Frequency.BIMONTHLY: 2,
    Frequency.QUARTERLY: 3,
    Frequency.SEMIANNUAL: 6,
    Frequency.ANNUAL: 12,
}

DAY_STRIDES = {
    Frequency.DAILY: 1,
    Frequency.WEEKLY: 7,
}


@dataclass(frozen=True)
class Occurrence:
    """A single dated, fully-amounted calendar event of an entry."""
    due_date: date
    amount: Decimal


def horizon_cap(today: Optional[date] = None) -> date:
    """Last date an open-ended definition is expanded to."""
    today = today or date.today()
    return today + relativedelta(years=settings.HORIZON_YEARS)


def _occurrence_date(start: date, frequency: Frequency, index: int) -> date:
    if frequency in DAY_STRIDES:
        return start + timedelta(days=DAY_STRIDES[frequency] * index)
    return start + relativedelta(months=MONTH_STRIDES[frequency] * index)


def _first_index(start: date, frequency: Frequency, window_start: date) -> int:
    """Lower bound on the index of the first occurrence on/after window_start."""
    if window_start <= start:
        return 0
    if frequency in DAY_STRIDES:
        stride = DAY_STRIDES[frequency]
        return -(-(window_start - start).days // stride)
    months = (window_start.year - start.year) * 12 + window_start.month - start.month
    return max(0, months // MONTH_STRIDES[frequency] - 1)


def iter_occurrence_dates(
    entry: BudgetEntry,
    window_start: date,
    window_end: date,
    last_date: date,
) -> Iterator[date]:
    """
    Yield the periodic dates of an entry inside [window_start, window_end).

    Dates before the entry's start_date or after last_date are never yielded.
    Daily entries only yield weekdays from days_of_week (every day if empty).
    """
    if entry.frequency not in PERIODIC_FREQUENCIES or entry.start_date is None:
        return

    start = entry.start_date
    allowed_days = frozenset(entry.days_of_week) or ALL_DAYS
    index = _first_index(start, entry.frequency, window_start)

    while True:
        current = _occurrence_date(start, entry.frequency, index)
        if current >= window_end or current > last_date:
            return
        if current >= window_start:
            if entry.frequency != Frequency.DAILY or current.weekday() in allowed_days:
                yield current
        index += 1


def amount_for_period(
    entry: Optional[BudgetEntry],
    period_start: date,
    period_end: date,
    today: Optional[date] = None,
) -> Decimal:
    """
    Total of an entry attributable to the half-open window [period_start, period_end).

    This is a reporting aggregate. For weekly or daily entries it sums several
    occurrences, so it must not be used to create or size an obligation.
    """
    if entry is None or not entry.is_active or period_end <= period_start:
        return ZERO

    if entry.frequency == Frequency.ONE_OFF:
        if entry.one_off_date and period_start <= entry.one_off_date < period_end:
            return entry.amount
        return ZERO

    if entry.frequency in SCHEDULED_FREQUENCIES:
        return sum(
            (p.amount for p in entry.payments if period_start <= p.date < period_end),
            ZERO,
        )

    last_date = entry.end_date or horizon_cap(today)
    count = sum(1 for _ in iter_occurrence_dates(entry, period_start, period_end, last_date))
    return entry.amount * count


def amount_for_month(entry: BudgetEntry, year: int, month: int, today: Optional[date] = None) -> Decimal:
    """Calendar-month shortcut for amount_for_period."""
    month_start = date(year, month, 1)
    return amount_for_period(entry, month_start, month_start + relativedelta(months=1), today)


def expand_occurrences(
    entry: BudgetEntry,
    horizon_end: Optional[date] = None,
    today: Optional[date] = None,
) -> List[Occurrence]:
    """
    Expand an entry into one Occurrence per calendar event.

    Periodic entries stop at the earlier of end_date and the horizon
    (horizon_end, or the horizon cap from today). Weekly and daily occurrences
    carry the per-occurrence amount.
    """
    if not entry.is_active:
        return []

    if entry.frequency == Frequency.ONE_OFF:
        return [Occurrence(due_date=entry.one_off_date, amount=entry.amount)]

    if entry.frequency in SCHEDULED_FREQUENCIES:
        return [
            Occurrence(due_date=p.date, amount=p.amount)
            for p in sorted(entry.payments, key=lambda p: p.date)
        ]

    cap = horizon_end or horizon_cap(today)
    last_date = min(entry.end_date, cap) if entry.end_date else cap

    return [
        Occurrence(due_date=d, amount=entry.amount)
        for d in iter_occurrence_dates(entry, entry.start_date, last_date + timedelta(days=1), last_date)
    ]


def generate_provision_schedule(total: Decimal, count: int, first_date: date) -> List[ExplicitPayment]:
    """
    Split a provision total into `count` monthly installments.

    Installments are rounded down to the cent; the last one absorbs the
    remainder so the schedule always sums to the total.
    """
    total = Decimal(str(total))
    if count < 1:
        raise ValueError("A provision needs at least one installment")
    if total <= 0:
        raise ValueError("A provision total must be positive")

    installment = (total / count).quantize(Decimal("0.01"), rounding=ROUND_DOWN)
    schedule = [
        ExplicitPayment(date=first_date + relativedelta(months=i), amount=installment)
        for i in range(count - 1)
    ]
    schedule.append(ExplicitPayment(
        date=first_date + relativedelta(months=count - 1),
        amount=total - installment * (count - 1),
    ))
    return schedule
