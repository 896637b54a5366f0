"""Planner state and command routes."""
import json
from datetime import date
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Query
from pydantic import ValidationError

from cashplan.commands.types import CommandResult, parse_command
from cashplan.models.state import PlannerState
from cashplan.services.planner import PlannerService, get_planner_service

router = APIRouter()


@router.get("/state", response_model=PlannerState)
async def get_state(
    today: Optional[date] = Query(None, description="Override today's date"),
    planner: PlannerService = Depends(get_planner_service),
):
    """Return the full planner snapshot."""
    return await planner.get_state(today)


@router.post("/commands", response_model=CommandResult)
async def post_command(
    payload: Dict[str, Any] = Body(..., description="A command object tagged by its `type` field"),
    today: Optional[date] = Query(None, description="Override today's date"),
    planner: PlannerService = Depends(get_planner_service),
):
    """
    Apply one command.

    Accepted commands return the new state and any notices. Commands refused
    by a guard are answered with 409 and the blocking reason; nothing is saved.
    """
    try:
        command = parse_command(payload)
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=json.loads(e.json(include_url=False)))

    result = await planner.dispatch(command, today)
    if not result.accepted:
        raise HTTPException(status_code=409, detail=result.blocked.model_dump())
    return result
