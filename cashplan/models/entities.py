"""
Planner records.

The planner works on three layers, the same way an obligation service would:
- BudgetEntry (WHY): the declared recurring or one-off income/expense
- ActualObligation (WHEN): one dated amount due, derived from an entry
- PaymentRecord (REALITY): a real settlement applied to an obligation

Every record is an immutable pydantic model. Changes build a new record with
model_copy(update=...) so a state snapshot can be shared freely.
"""
from datetime import date
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import Field, model_validator

from cashplan.models.base import FrozenModel, generate_id


# =============================================================================
# ENUMS
# =============================================================================

class Direction(str, Enum):
    """Which way money moves for an entry or obligation."""
    INFLOW = "inflow"
    OUTFLOW = "outflow"


class Frequency(str, Enum):
    """Recurrence rule of a budget entry."""
    ONE_OFF = "one_off"
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    BIMONTHLY = "bimonthly"
    QUARTERLY = "quarterly"
    SEMIANNUAL = "semiannual"
    ANNUAL = "annual"
    IRREGULAR = "irregular"
    PROVISION = "provision"


PERIODIC_FREQUENCIES = frozenset({
    Frequency.DAILY,
    Frequency.WEEKLY,
    Frequency.MONTHLY,
    Frequency.BIMONTHLY,
    Frequency.QUARTERLY,
    Frequency.SEMIANNUAL,
    Frequency.ANNUAL,
})

SCHEDULED_FREQUENCIES = frozenset({Frequency.IRREGULAR, Frequency.PROVISION})


class ObligationStatus(str, Enum):
    """Settlement status of an obligation."""
    PENDING = "pending"
    PARTIALLY_PAID = "partially_paid"
    PARTIALLY_RECEIVED = "partially_received"
    PAID = "paid"
    RECEIVED = "received"


SETTLED_STATUSES = frozenset({ObligationStatus.PAID, ObligationStatus.RECEIVED})


class AccountCategory(str, Enum):
    """Main categories of cash accounts."""
    BANK = "bank"
    CASH = "cash"
    MOBILE_MONEY = "mobile_money"
    SAVINGS = "savings"
    PROVISIONS = "provisions"


class TierKind(str, Enum):
    """Counterpart kinds kept in the tier directory."""
    CLIENT = "client"
    SUPPLIER = "supplier"


class TimeUnit(str, Enum):
    """Bucket sizes for position projections."""
    DAY = "day"
    WEEK = "week"
    MONTH = "month"
    BIMONTH = "bimonth"
    QUARTER = "quarter"
    SEMESTER = "semester"
    YEAR = "year"


def tier_kind_for(direction: Direction) -> TierKind:
    """Inflows come from clients, outflows go to suppliers."""
    return TierKind.CLIENT if direction == Direction.INFLOW else TierKind.SUPPLIER


# =============================================================================
# PROJECTS, ACCOUNTS, TIERS
# =============================================================================

class Project(FrozenModel):
    id: str = Field(default_factory=lambda: generate_id("proj"))
    name: str
    is_archived: bool = False


class CashAccount(FrozenModel):
    id: str = Field(default_factory=lambda: generate_id("acc"))
    project_id: str
    name: str
    category: AccountCategory = AccountCategory.BANK
    initial_balance: Decimal = Decimal("0")
    initial_balance_date: Optional[date] = None


class Tier(FrozenModel):
    """A counterpart (client or supplier) in the tier directory."""
    id: str = Field(default_factory=lambda: generate_id("tier"))
    name: str
    kind: TierKind


# =============================================================================
# BUDGET ENTRY (Layer 1: WHY)
# =============================================================================

class ExplicitPayment(FrozenModel):
    """One dated line of an irregular or provision schedule."""
    date: date
    amount: Decimal


class ProvisionDetails(FrozenModel):
    final_payment_date: date
    destination_account_id: str


def _to_decimal(value: Any) -> Decimal:
    try:
        return Decimal(str(value))
    except InvalidOperation:
        raise ValueError(f"Invalid amount: {value!r}")


class BudgetEntry(FrozenModel):
    """
    A declared income or expense definition.

    Irregular and provision entries carry their own payment schedule and their
    amount is always the sum of that schedule. Provision entries are always
    outflows.
    """
    id: str = Field(default_factory=lambda: generate_id("bud"))
    project_id: str
    direction: Direction
    category: str
    frequency: Frequency
    amount: Decimal = Decimal("0")

    # Timing
    one_off_date: Optional[date] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None  # None = open-ended
    days_of_week: List[int] = Field(default_factory=list)  # daily filter, Monday = 0

    # Counterpart
    counterpart: Optional[str] = None
    description: Optional[str] = None

    # Explicit schedule (irregular / provision)
    payments: List[ExplicitPayment] = Field(default_factory=list)
    provision_details: Optional[ProvisionDetails] = None

    is_off_budget: bool = False

    @model_validator(mode="before")
    @classmethod
    def _normalize_schedule(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data

        data = dict(data)
        try:
            frequency = Frequency(data.get("frequency"))
        except ValueError:
            return data  # field validation reports the bad frequency

        if frequency in SCHEDULED_FREQUENCIES:
            lines = []
            for line in data.get("payments") or []:
                if isinstance(line, ExplicitPayment):
                    lines.append(line)
                    continue
                if not line.get("date") or line.get("amount") in (None, ""):
                    continue
                if _to_decimal(line["amount"]) <= 0:
                    continue
                lines.append(line)
            data["payments"] = lines
            data["amount"] = sum(
                (_to_decimal(line.amount if isinstance(line, ExplicitPayment) else line["amount"]) for line in lines),
                Decimal("0"),
            )
        else:
            data["payments"] = []

        if frequency == Frequency.PROVISION:
            data["direction"] = Direction.OUTFLOW

        if frequency == Frequency.ONE_OFF and not data.get("one_off_date"):
            data["one_off_date"] = data.get("start_date")

        return data

    @model_validator(mode="after")
    def _check_required(self) -> "BudgetEntry":
        if self.frequency == Frequency.PROVISION and self.provision_details is None:
            raise ValueError("Provision entries require provision_details")
        if self.frequency in PERIODIC_FREQUENCIES and self.start_date is None:
            raise ValueError(f"{self.frequency.value} entries require a start_date")
        if self.frequency == Frequency.ONE_OFF and self.one_off_date is None:
            raise ValueError("One-off entries require a one_off_date")
        if any(day < 0 or day > 6 for day in self.days_of_week):
            raise ValueError("days_of_week values must be between 0 (Monday) and 6 (Sunday)")
        return self

    @property
    def is_active(self) -> bool:
        return self.amount > 0


# =============================================================================
# ACTUAL OBLIGATION (Layer 2: WHEN) and PAYMENT RECORD (Layer 3: REALITY)
# =============================================================================

class PaymentRecord(FrozenModel):
    """A real settlement applied against an obligation."""
    id: str = Field(default_factory=lambda: generate_id("pay"))
    paid_amount: Decimal
    payment_date: date
    # Source account for outflows, destination account for inflows
    cash_account_id: Optional[str] = None
    # Force-close the obligation even when underpaid (explicit write-off)
    is_final_payment: bool = False


class ActualObligation(FrozenModel):
    """A concrete, dated amount owed or expected."""
    id: str = Field(default_factory=lambda: generate_id("act"))
    project_id: str
    budget_id: str
    direction: Direction
    category: str
    due_date: date
    amount: Decimal
    counterpart: Optional[str] = None
    description: Optional[str] = None
    status: ObligationStatus = ObligationStatus.PENDING
    payments: List[PaymentRecord] = Field(default_factory=list)

    # Provision / off-budget flags
    is_provision: bool = False
    is_final_provision_payment: bool = False
    is_off_budget: bool = False
    destination_account_id: Optional[str] = None

    @property
    def total_paid(self) -> Decimal:
        return sum((p.paid_amount for p in self.payments), Decimal("0"))

    @property
    def remaining_amount(self) -> Decimal:
        return self.amount - self.total_paid

    @property
    def is_settled(self) -> bool:
        return self.status in SETTLED_STATUSES


# =============================================================================
# SCENARIOS
# =============================================================================

class Scenario(FrozenModel):
    id: str = Field(default_factory=lambda: generate_id("scn"))
    project_id: str
    name: str
    description: Optional[str] = None
    is_visible: bool = True


class ScenarioDelta(FrozenModel):
    """
    One what-if change on top of the base entries.

    - id matches a base entry: overrides are merged into that entry
    - id matches nothing: the overrides describe a new entry
    - is_deleted: the base entry is hidden in the scenario
    """
    id: str = Field(default_factory=lambda: generate_id("bud"))
    overrides: Dict[str, Any] = Field(default_factory=dict)
    is_deleted: bool = False


class ActualDraft(FrozenModel):
    """User input for a standalone or edited actual obligation."""
    project_id: str
    budget_id: Optional[str] = None
    direction: Direction
    category: str
    due_date: date
    amount: Decimal = Field(gt=0)
    counterpart: Optional[str] = None
    description: Optional[str] = None
