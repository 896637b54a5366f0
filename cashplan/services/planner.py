"""
Planner service - async shell around the pure command core.

Each dispatch loads the snapshot, applies one command and, when the command
is accepted, writes the whole new snapshot back.
"""
import logging
from datetime import date
from typing import Optional

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from cashplan.commands.dispatcher import apply
from cashplan.commands.types import Command, CommandResult
from cashplan.database import get_db
from cashplan.models.state import PlannerState
from cashplan.persistence.store import SnapshotStore, SqlSnapshotStore, load_state, save_state

logger = logging.getLogger(__name__)


class PlannerService:

    def __init__(self, store: SnapshotStore):
        self.store = store

    async def get_state(self, today: Optional[date] = None) -> PlannerState:
        return await load_state(self.store, today=today, save_default=True)

    async def dispatch(self, command: Command, today: Optional[date] = None) -> CommandResult:
        state = await self.get_state(today)
        result = apply(state, command, today)
        if result.accepted:
            await save_state(self.store, result.state)
        return result


async def get_planner_service(db: AsyncSession = Depends(get_db)) -> PlannerService:
    """Dependency that yields a planner bound to the SQL snapshot store."""
    return PlannerService(SqlSnapshotStore(db))
