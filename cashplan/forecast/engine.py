"""
Position Projector - running cash balance over calendar-aligned buckets.

Each bucket [start, end) splits its flows into:
- realized: payments recorded in the bucket
- remaining: what is still owed or expected on unsettled obligations due in it

Past buckets (end <= today) only move the balance by realized flows. Present
and future buckets add the remaining amounts as well. Scenario series share the
base realized history and swap in the scenario's obligations for the remaining
component.
"""
from bisect import bisect_right
from dataclasses import dataclass
from datetime import date, timedelta
from decimal import Decimal
from typing import Iterable, List, Optional

from dateutil.relativedelta import relativedelta
from pydantic import BaseModel

from cashplan.exceptions import NotFoundError
from cashplan.models.entities import ActualObligation, CashAccount, Direction, TimeUnit
from cashplan.models.state import PlannerState
from cashplan.scenarios.overlay import build_scenario_obligations

ZERO = Decimal("0")

MONTHS_PER_UNIT = {
    TimeUnit.MONTH: 1,
    TimeUnit.BIMONTH: 2,
    TimeUnit.QUARTER: 3,
    TimeUnit.SEMESTER: 6,
    TimeUnit.YEAR: 12,
}


@dataclass(frozen=True)
class Bucket:
    start: date
    end: date  # exclusive
    label: str


class PositionBucket(BaseModel):
    label: str
    start: date
    end: date
    is_past: bool
    realized_inflow: Decimal = ZERO
    realized_outflow: Decimal = ZERO
    remaining_inflow: Decimal = ZERO
    remaining_outflow: Decimal = ZERO
    net_flow: Decimal = ZERO
    opening_balance: Decimal = ZERO
    closing_balance: Decimal = ZERO


class PositionSeries(BaseModel):
    name: str
    scenario_id: Optional[str] = None
    starting_balance: Decimal
    buckets: List[PositionBucket]


class PositionProjection(BaseModel):
    project_id: Optional[str] = None
    time_unit: TimeUnit
    today: date
    base: PositionSeries
    scenarios: List[PositionSeries] = []


# =============================================================================
# BUCKETS
# =============================================================================

def bucket_start(day: date, time_unit: TimeUnit) -> date:
    """Start of the bucket containing `day`. Weeks start on Monday."""
    if time_unit == TimeUnit.DAY:
        return day
    if time_unit == TimeUnit.WEEK:
        return day - timedelta(days=day.weekday())

    months = MONTHS_PER_UNIT[time_unit]
    month_index = day.month - 1
    return date(day.year, month_index - month_index % months + 1, 1)


def shift_bucket(start: date, time_unit: TimeUnit, count: int = 1) -> date:
    """Move a bucket start by `count` buckets (negative moves back)."""
    if time_unit == TimeUnit.DAY:
        return start + timedelta(days=count)
    if time_unit == TimeUnit.WEEK:
        return start + timedelta(weeks=count)
    return start + relativedelta(months=MONTHS_PER_UNIT[time_unit] * count)


def bucket_label(start: date, time_unit: TimeUnit) -> str:
    short_year = start.strftime("%y")
    if time_unit == TimeUnit.DAY:
        return start.isoformat()
    if time_unit == TimeUnit.WEEK:
        return f"Week of {start.strftime('%d/%m')}"
    if time_unit == TimeUnit.MONTH:
        return start.strftime("%B %Y")
    if time_unit == TimeUnit.BIMONTH:
        end_month = start + relativedelta(months=1)
        return f"Bim. {start.strftime('%b')}-{end_month.strftime('%b')} '{short_year}"
    if time_unit == TimeUnit.QUARTER:
        return f"Q{(start.month - 1) // 3 + 1} '{short_year}"
    if time_unit == TimeUnit.SEMESTER:
        return f"S{(start.month - 1) // 6 + 1} '{short_year}"
    return str(start.year)


def build_buckets(
    time_unit: TimeUnit,
    horizon_length: int,
    today: date,
    past_buckets: int = 2,
) -> List[Bucket]:
    """`horizon_length` consecutive buckets, starting `past_buckets` before the current one."""
    first = shift_bucket(bucket_start(today, time_unit), time_unit, -past_buckets)
    buckets = []
    for i in range(horizon_length):
        start = shift_bucket(first, time_unit, i)
        end = shift_bucket(start, time_unit)
        buckets.append(Bucket(start=start, end=end, label=bucket_label(start, time_unit)))
    return buckets


# =============================================================================
# SERIES
# =============================================================================

def starting_balance(
    accounts: Iterable[CashAccount],
    obligations: Iterable[ActualObligation],
    first_bucket_start: date,
) -> Decimal:
    """Initial balances plus the net of every payment dated before the first bucket."""
    balance = sum((a.initial_balance for a in accounts), ZERO)
    for obligation in obligations:
        sign = 1 if obligation.direction == Direction.INFLOW else -1
        for payment in obligation.payments:
            if payment.payment_date < first_bucket_start:
                balance += sign * payment.paid_amount
    return balance


def build_series(
    name: str,
    buckets: List[Bucket],
    opening: Decimal,
    realized_obligations: Iterable[ActualObligation],
    remaining_obligations: Iterable[ActualObligation],
    today: date,
    scenario_id: Optional[str] = None,
) -> PositionSeries:
    """
    Fold obligations into buckets and propagate the balance.

    Payments are read from realized_obligations, unsettled remainders from
    remaining_obligations; for the base series both are the same set.
    """
    if not buckets:
        return PositionSeries(name=name, scenario_id=scenario_id, starting_balance=opening, buckets=[])

    starts = [b.start for b in buckets]
    last_end = buckets[-1].end
    flows = [
        {"realized_inflow": ZERO, "realized_outflow": ZERO, "remaining_inflow": ZERO, "remaining_outflow": ZERO}
        for _ in buckets
    ]

    def index_of(day: date) -> Optional[int]:
        if day < starts[0] or day >= last_end:
            return None
        return bisect_right(starts, day) - 1

    for obligation in realized_obligations:
        key = "realized_inflow" if obligation.direction == Direction.INFLOW else "realized_outflow"
        for payment in obligation.payments:
            i = index_of(payment.payment_date)
            if i is not None:
                flows[i][key] += payment.paid_amount

    for obligation in remaining_obligations:
        if obligation.is_settled or obligation.remaining_amount <= 0:
            continue
        i = index_of(obligation.due_date)
        if i is not None:
            key = "remaining_inflow" if obligation.direction == Direction.INFLOW else "remaining_outflow"
            flows[i][key] += obligation.remaining_amount

    balance = opening
    rows = []
    for bucket, flow in zip(buckets, flows):
        is_past = bucket.end <= today
        net_flow = flow["realized_inflow"] - flow["realized_outflow"]
        if not is_past:
            net_flow += flow["remaining_inflow"] - flow["remaining_outflow"]

        rows.append(PositionBucket(
            label=bucket.label,
            start=bucket.start,
            end=bucket.end,
            is_past=is_past,
            net_flow=net_flow,
            opening_balance=balance,
            closing_balance=balance + net_flow,
            **flow,
        ))
        balance += net_flow

    return PositionSeries(name=name, scenario_id=scenario_id, starting_balance=opening, buckets=rows)


def project_positions(
    state: PlannerState,
    project_id: Optional[str] = None,
    time_unit: Optional[TimeUnit] = None,
    horizon_length: Optional[int] = None,
    today: Optional[date] = None,
    past_buckets: Optional[int] = None,
    scenario_ids: Optional[List[str]] = None,
) -> PositionProjection:
    """
    Base position series plus one series per scenario.

    With project_id=None every non-archived project is consolidated and no
    scenario series are produced. Without explicit scenario_ids the project's
    visible scenarios are projected. Unset bucketing arguments fall back to the
    planner settings.
    """
    today = today or date.today()
    time_unit = time_unit or state.settings.time_unit
    horizon_length = horizon_length or state.settings.horizon_length
    past_buckets = state.settings.past_buckets if past_buckets is None else past_buckets

    if project_id is None:
        project_ids = {p.id for p in state.projects if not p.is_archived}
        scenarios = []
    else:
        if state.find_project(project_id) is None:
            raise NotFoundError(f"Project {project_id} not found", entity_type="project", entity_id=project_id)
        project_ids = {project_id}
        if scenario_ids is None:
            scenarios = [s for s in state.scenarios_for(project_id) if s.is_visible]
        else:
            scenarios = []
            for scenario_id in scenario_ids:
                scenario = state.find_scenario(scenario_id)
                if scenario is None or scenario.project_id != project_id:
                    raise NotFoundError(
                        f"Scenario {scenario_id} not found in project {project_id}",
                        entity_type="scenario",
                        entity_id=scenario_id,
                    )
                scenarios.append(scenario)

    accounts = [a for a in state.accounts if a.project_id in project_ids]
    obligations = [o for o in state.obligations if o.project_id in project_ids]

    buckets = build_buckets(time_unit, horizon_length, today, past_buckets)
    opening = starting_balance(accounts, obligations, buckets[0].start)

    base = build_series("Base", buckets, opening, obligations, obligations, today)
    scenario_series = [
        build_series(
            scenario.name,
            buckets,
            opening,
            obligations,
            build_scenario_obligations(state, scenario.id, today),
            today,
            scenario_id=scenario.id,
        )
        for scenario in scenarios
    ]

    return PositionProjection(
        project_id=project_id,
        time_unit=time_unit,
        today=today,
        base=base,
        scenarios=scenario_series,
    )
