"""Scenario API routes."""
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from cashplan.models.entities import BudgetEntry
from cashplan.scenarios.overlay import resolve_effective_entries
from cashplan.services.planner import PlannerService, get_planner_service

router = APIRouter()


@router.get("/{scenario_id}/entries", response_model=List[BudgetEntry])
async def get_scenario_entries(
    scenario_id: str,
    today: Optional[date] = Query(None),
    planner: PlannerService = Depends(get_planner_service),
):
    """Entries as seen by a scenario: base entries with the scenario's deltas applied."""
    state = await planner.get_state(today)
    scenario = state.find_scenario(scenario_id)
    if not scenario:
        raise HTTPException(status_code=404, detail="Scenario not found")

    return resolve_effective_entries(
        state.entries_for(scenario.project_id),
        state.deltas_for(scenario_id),
        scenario.project_id,
    )
