"""
Consolidated models package.

IMPORTANT: Explicit imports only - no wildcards to prevent circular imports.
"""

# Base utilities
from cashplan.models.base import generate_id

# Planner records
from cashplan.models.entities import (
    AccountCategory,
    ActualDraft,
    ActualObligation,
    BudgetEntry,
    CashAccount,
    Direction,
    ExplicitPayment,
    Frequency,
    ObligationStatus,
    PaymentRecord,
    Project,
    ProvisionDetails,
    Scenario,
    ScenarioDelta,
    SETTLED_STATUSES,
    Tier,
    TierKind,
    TimeUnit,
)

# State snapshot
from cashplan.models.state import PlannerSettings, PlannerState

# Storage
from cashplan.models.snapshot import PlannerSnapshot

__all__ = [
    "generate_id",
    "AccountCategory",
    "ActualDraft",
    "ActualObligation",
    "BudgetEntry",
    "CashAccount",
    "Direction",
    "ExplicitPayment",
    "Frequency",
    "ObligationStatus",
    "PaymentRecord",
    "Project",
    "ProvisionDetails",
    "Scenario",
    "ScenarioDelta",
    "SETTLED_STATUSES",
    "Tier",
    "TierKind",
    "TimeUnit",
    "PlannerSettings",
    "PlannerState",
    "PlannerSnapshot",
]
