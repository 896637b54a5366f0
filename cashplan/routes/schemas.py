"""Pydantic schemas for planner read APIs."""
from datetime import date
from decimal import Decimal
from typing import List

from pydantic import BaseModel


class PeriodAmountResponse(BaseModel):
    entry_id: str
    period_start: date
    period_end: date
    amount: Decimal


class OccurrenceResponse(BaseModel):
    due_date: date
    amount: Decimal


class OccurrenceListResponse(BaseModel):
    entry_id: str
    horizon_end: date
    occurrences: List[OccurrenceResponse]
