"""
Snapshot stores.

The planner state is persisted as one opaque JSON document under a single
key, rewritten wholesale after every accepted command. Two stores implement
the same protocol: a SQL table through an AsyncSession, and an in-memory dict.
"""
import json
import logging
from datetime import date
from typing import Dict, Optional, Protocol

from pydantic import ValidationError
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from cashplan.config import settings
from cashplan.models.snapshot import PlannerSnapshot
from cashplan.models.state import PlannerState
from cashplan.persistence.backfill import backfill_snapshot
from cashplan.seed.defaults import default_state

logger = logging.getLogger(__name__)


class SnapshotStore(Protocol):
    async def load_raw(self) -> Optional[str]:
        ...

    async def save_raw(self, payload: str) -> None:
        ...


class MemorySnapshotStore:
    """Dict-backed store, one payload per key."""

    def __init__(self, key: str = None, payloads: Optional[Dict[str, str]] = None):
        self.key = key or settings.SNAPSHOT_KEY
        self.payloads = payloads if payloads is not None else {}

    async def load_raw(self) -> Optional[str]:
        return self.payloads.get(self.key)

    async def save_raw(self, payload: str) -> None:
        self.payloads[self.key] = payload


class SqlSnapshotStore:
    """Store backed by the planner_snapshots table."""

    def __init__(self, db: AsyncSession, key: str = None):
        self.db = db
        self.key = key or settings.SNAPSHOT_KEY

    async def _get_row(self) -> Optional[PlannerSnapshot]:
        result = await self.db.execute(
            select(PlannerSnapshot).where(PlannerSnapshot.key == self.key)
        )
        return result.scalar_one_or_none()

    async def load_raw(self) -> Optional[str]:
        row = await self._get_row()
        return row.payload if row else None

    async def save_raw(self, payload: str) -> None:
        row = await self._get_row()
        if row is None:
            self.db.add(PlannerSnapshot(key=self.key, payload=payload))
        else:
            row.payload = payload
        await self.db.commit()


def decode_state(payload: str, today: Optional[date] = None) -> PlannerState:
    """Parse, backfill and validate a stored payload."""
    return PlannerState.model_validate(backfill_snapshot(json.loads(payload), today=today))


async def load_state(
    store: SnapshotStore,
    today: Optional[date] = None,
    save_default: bool = False,
) -> PlannerState:
    """
    Load the stored state, falling back to the seed state.

    A missing snapshot is a first start. An unreadable one is logged and
    replaced by the seed state. With save_default=True the seed state is
    written back at once, so its generated ids stay stable across loads.
    """
    payload = await store.load_raw()
    if payload is None:
        logger.info("No stored planner state, using default state")
    else:
        try:
            return decode_state(payload, today=today)
        except (ValidationError, ValueError, TypeError) as e:
            logger.error(f"Stored planner state is unreadable, using default state: {e}")

    state = default_state(today)
    if save_default:
        await save_state(store, state)
    return state


async def save_state(store: SnapshotStore, state: PlannerState) -> None:
    await store.save_raw(state.model_dump_json())
