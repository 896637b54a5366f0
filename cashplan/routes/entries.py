"""Budget entry read routes."""
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from cashplan.routes.schemas import OccurrenceListResponse, OccurrenceResponse, PeriodAmountResponse
from cashplan.services.planner import PlannerService, get_planner_service
from cashplan.services.recurrence import amount_for_period, expand_occurrences, horizon_cap

router = APIRouter()


@router.get("/entries/{entry_id}/amount", response_model=PeriodAmountResponse)
async def get_entry_amount(
    entry_id: str,
    start: date = Query(..., description="Period start (inclusive)"),
    end: date = Query(..., description="Period end (exclusive)"),
    today: Optional[date] = Query(None),
    planner: PlannerService = Depends(get_planner_service),
):
    """Total of an entry attributable to [start, end)."""
    if end <= start:
        raise HTTPException(status_code=400, detail="end must be after start")

    state = await planner.get_state(today)
    entry = state.find_entry(entry_id)
    if not entry:
        raise HTTPException(status_code=404, detail="Budget entry not found")

    return PeriodAmountResponse(
        entry_id=entry_id,
        period_start=start,
        period_end=end,
        amount=amount_for_period(entry, start, end, today=today),
    )


@router.get("/entries/{entry_id}/occurrences", response_model=OccurrenceListResponse)
async def get_entry_occurrences(
    entry_id: str,
    horizon_end: Optional[date] = Query(None, description="Defaults to the horizon cap"),
    today: Optional[date] = Query(None),
    planner: PlannerService = Depends(get_planner_service),
):
    """One dated amount per calendar event of an entry."""
    state = await planner.get_state(today)
    entry = state.find_entry(entry_id)
    if not entry:
        raise HTTPException(status_code=404, detail="Budget entry not found")

    horizon_end = horizon_end or horizon_cap(today)
    return OccurrenceListResponse(
        entry_id=entry_id,
        horizon_end=horizon_end,
        occurrences=[
            OccurrenceResponse(due_date=o.due_date, amount=o.amount)
            for o in expand_occurrences(entry, horizon_end=horizon_end, today=today)
        ],
    )
