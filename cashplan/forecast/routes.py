"""Forecast API routes."""
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from cashplan.exceptions import NotFoundError
from cashplan.forecast.engine import PositionProjection, project_positions
from cashplan.models.entities import TimeUnit
from cashplan.services.planner import PlannerService, get_planner_service

router = APIRouter()


@router.get("", response_model=PositionProjection)
async def get_forecast(
    project_id: Optional[str] = Query(None, description="Omit for the consolidated view"),
    time_unit: Optional[TimeUnit] = Query(None),
    horizon_length: Optional[int] = Query(None, ge=1, le=120),
    past_buckets: Optional[int] = Query(None, ge=0, le=24),
    scenario_ids: Optional[List[str]] = Query(None, description="Defaults to visible scenarios"),
    today: Optional[date] = Query(None),
    planner: PlannerService = Depends(get_planner_service),
):
    """
    Get projected cash positions.

    Returns the base series and one series per scenario, bucketed by time_unit.
    """
    state = await planner.get_state(today)
    try:
        return project_positions(
            state,
            project_id=project_id,
            time_unit=time_unit,
            horizon_length=horizon_length,
            today=today,
            past_buckets=past_buckets,
            scenario_ids=scenario_ids,
        )
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message)
