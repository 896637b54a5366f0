"""
Command types for the planner.

Every state change is one command. Commands form a tagged union discriminated
on `type`; the dispatcher routes each tag to exactly one handler.
"""
from datetime import date
from decimal import Decimal
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, Field, TypeAdapter

from cashplan.models.entities import (
    AccountCategory,
    ActualDraft,
    BudgetEntry,
    PaymentRecord,
    TierKind,
    TimeUnit,
)
from cashplan.models.state import PlannerState
from cashplan.services.settlement import ProvisionCompleted


# =============================================================================
# DEFINITIONS, ACTUALS, PAYMENTS
# =============================================================================

class InstallmentPlan(BaseModel):
    """Equal monthly split of a provision total, replacing the entry's schedule."""
    total: Decimal = Field(..., gt=0)
    count: int = Field(..., ge=1, le=120)
    first_date: date


class SaveDefinition(BaseModel):
    type: Literal["save_definition"] = "save_definition"
    entry: BudgetEntry
    previous_id: Optional[str] = None
    installment_plan: Optional[InstallmentPlan] = None


class DeleteDefinition(BaseModel):
    type: Literal["delete_definition"] = "delete_definition"
    entry_id: str


class RecordActual(BaseModel):
    type: Literal["record_actual"] = "record_actual"
    actual: ActualDraft
    previous_id: Optional[str] = None


class DeleteActual(BaseModel):
    type: Literal["delete_actual"] = "delete_actual"
    actual_id: str


class RecordPayment(BaseModel):
    type: Literal["record_payment"] = "record_payment"
    obligation_id: str
    payment: PaymentRecord


class DeletePayment(BaseModel):
    type: Literal["delete_payment"] = "delete_payment"
    obligation_id: str
    payment_id: str


# =============================================================================
# SCENARIOS
# =============================================================================

class SaveScenarioDelta(BaseModel):
    """Upsert a what-if change. `delta` is a field map of a budget entry."""
    type: Literal["save_scenario_delta"] = "save_scenario_delta"
    scenario_id: str
    delta: Dict[str, Any]
    previous_id: Optional[str] = None


class DeleteScenarioDelta(BaseModel):
    type: Literal["delete_scenario_delta"] = "delete_scenario_delta"
    scenario_id: str
    entry_id: str


class AddScenario(BaseModel):
    type: Literal["add_scenario"] = "add_scenario"
    project_id: str
    name: str = Field(..., min_length=1)
    description: Optional[str] = None


class UpdateScenario(BaseModel):
    type: Literal["update_scenario"] = "update_scenario"
    scenario_id: str
    name: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None


class ToggleScenarioVisibility(BaseModel):
    type: Literal["toggle_scenario_visibility"] = "toggle_scenario_visibility"
    scenario_id: str


class DeleteScenario(BaseModel):
    type: Literal["delete_scenario"] = "delete_scenario"
    scenario_id: str


# =============================================================================
# CASH ACCOUNTS
# =============================================================================

class AddCashAccount(BaseModel):
    type: Literal["add_cash_account"] = "add_cash_account"
    project_id: str
    name: str = Field(..., min_length=1)
    category: AccountCategory = AccountCategory.BANK
    initial_balance: Decimal = Decimal("0")
    initial_balance_date: Optional[date] = None


class UpdateCashAccount(BaseModel):
    type: Literal["update_cash_account"] = "update_cash_account"
    account_id: str
    name: Optional[str] = Field(None, min_length=1)
    category: Optional[AccountCategory] = None
    initial_balance: Optional[Decimal] = None
    initial_balance_date: Optional[date] = None


class DeleteCashAccount(BaseModel):
    type: Literal["delete_cash_account"] = "delete_cash_account"
    account_id: str


# =============================================================================
# TIERS
# =============================================================================

class AddTier(BaseModel):
    type: Literal["add_tier"] = "add_tier"
    name: str = Field(..., min_length=1)
    kind: TierKind


class RenameTier(BaseModel):
    type: Literal["rename_tier"] = "rename_tier"
    tier_id: str
    name: str = Field(..., min_length=1)


class DeleteTier(BaseModel):
    type: Literal["delete_tier"] = "delete_tier"
    tier_id: str


# =============================================================================
# PROJECTS AND SETTINGS
# =============================================================================

class AddProject(BaseModel):
    type: Literal["add_project"] = "add_project"
    name: str = Field(..., min_length=1)


class RenameProject(BaseModel):
    type: Literal["rename_project"] = "rename_project"
    project_id: str
    name: str = Field(..., min_length=1)


class ArchiveProject(BaseModel):
    type: Literal["archive_project"] = "archive_project"
    project_id: str


class RestoreProject(BaseModel):
    type: Literal["restore_project"] = "restore_project"
    project_id: str


class DeleteProject(BaseModel):
    type: Literal["delete_project"] = "delete_project"
    project_id: str


class UpdateSettings(BaseModel):
    type: Literal["update_settings"] = "update_settings"
    time_unit: Optional[TimeUnit] = None
    horizon_length: Optional[int] = Field(None, ge=1, le=120)
    past_buckets: Optional[int] = Field(None, ge=0, le=24)


Command = Annotated[
    Union[
        SaveDefinition,
        DeleteDefinition,
        RecordActual,
        DeleteActual,
        RecordPayment,
        DeletePayment,
        SaveScenarioDelta,
        DeleteScenarioDelta,
        AddScenario,
        UpdateScenario,
        ToggleScenarioVisibility,
        DeleteScenario,
        AddCashAccount,
        UpdateCashAccount,
        DeleteCashAccount,
        AddTier,
        RenameTier,
        DeleteTier,
        AddProject,
        RenameProject,
        ArchiveProject,
        RestoreProject,
        DeleteProject,
        UpdateSettings,
    ],
    Field(discriminator="type"),
]

command_adapter = TypeAdapter(Command)


def parse_command(data: Dict[str, Any]) -> Command:
    """Validate a raw payload into a command model."""
    return command_adapter.validate_python(data)


# =============================================================================
# RESULTS
# =============================================================================

class BlockedReason(BaseModel):
    """Why a command was refused. The state is left untouched."""
    code: str  # still_referenced | scenario_limit | not_found | guard_failed
    message: str
    entity_type: Optional[str] = None
    entity_id: Optional[str] = None


class CommandResult(BaseModel):
    accepted: bool
    state: PlannerState
    blocked: Optional[BlockedReason] = None
    notices: List[ProvisionCompleted] = Field(default_factory=list)
