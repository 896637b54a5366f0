"""Obligation read routes."""
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from cashplan.services.planner import PlannerService, get_planner_service
from cashplan.services.settlement import OverdueObligation, overdue_obligations

router = APIRouter()


@router.get("/obligations/overdue", response_model=List[OverdueObligation])
async def get_overdue_obligations(
    project_id: Optional[str] = Query(None, description="Limit to one project"),
    today: Optional[date] = Query(None),
    planner: PlannerService = Depends(get_planner_service),
):
    """Unsettled obligations due before today, oldest first."""
    state = await planner.get_state(today)
    obligations = state.obligations_for(project_id) if project_id else state.obligations
    return overdue_obligations(obligations, today)
