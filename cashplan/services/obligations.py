"""
Obligation Ledger - turns budget entries into dated obligations.

Data Flow:
    BudgetEntry (User Input)
            ↓
    expand_occurrences()  (one Occurrence per calendar event)
            ↓
    ActualObligation (what is owed or expected, and when)
            ↓
    PaymentRecord (settlement tracker)

All functions are pure: they take a PlannerState and return a new one.
Settled obligations are history and are never deleted or regenerated by an
edit of their definition.
"""
import logging
from datetime import date
from typing import Iterable, List, Optional

from cashplan.exceptions import NotFoundError
from cashplan.models.entities import (
    ActualDraft,
    ActualObligation,
    BudgetEntry,
    CashAccount,
    Direction,
    Frequency,
    Tier,
    tier_kind_for,
)
from cashplan.models.state import PlannerState
from cashplan.services.recurrence import expand_occurrences
from cashplan.services.settlement import compute_status

logger = logging.getLogger(__name__)

PROVISION_CATEGORY = "Savings & Provisions"
DEFAULT_PROVISION_ACCOUNT = "Provision account"


# =============================================================================
# DERIVATION
# =============================================================================

def derive_obligations(
    entry: BudgetEntry,
    accounts: Iterable[CashAccount],
    horizon_end: Optional[date] = None,
    today: Optional[date] = None,
) -> List[ActualObligation]:
    """
    Build the obligations of a single entry.

    Pure derivation: no state is read or written. Inactive entries (amount 0)
    yield nothing.
    """
    if not entry.is_active:
        return []

    if entry.frequency == Frequency.PROVISION:
        return _derive_provision(entry, accounts)

    label = "Budget (irregular)" if entry.frequency == Frequency.IRREGULAR else "Budget"
    description = f"{label}: {entry.description or entry.category}"

    return [
        ActualObligation(
            project_id=entry.project_id,
            budget_id=entry.id,
            direction=entry.direction,
            category=entry.category,
            due_date=occurrence.due_date,
            amount=occurrence.amount,
            counterpart=entry.counterpart,
            description=description,
        )
        for occurrence in expand_occurrences(entry, horizon_end=horizon_end, today=today)
    ]


def _derive_provision(entry: BudgetEntry, accounts: Iterable[CashAccount]) -> List[ActualObligation]:
    """
    A provision is N transfers into a provision account plus the final payment.

    Transfers carry the explicit schedule verbatim. The final obligation is
    owed to the entry's counterpart for the full amount.
    """
    details = entry.provision_details
    destination = next((a for a in accounts if a.id == details.destination_account_id), None)
    destination_name = destination.name if destination else DEFAULT_PROVISION_ACCOUNT
    label = entry.description or entry.category

    transfers = [
        ActualObligation(
            project_id=entry.project_id,
            budget_id=entry.id,
            direction=Direction.OUTFLOW,
            category=PROVISION_CATEGORY,
            due_date=line.date,
            amount=line.amount,
            counterpart=f"Provision to {destination_name}",
            description=f"Provision for: {label}",
            is_provision=True,
            destination_account_id=details.destination_account_id,
        )
        for line in entry.payments
    ]

    final = ActualObligation(
        project_id=entry.project_id,
        budget_id=entry.id,
        direction=Direction.OUTFLOW,
        category=entry.category,
        due_date=details.final_payment_date,
        amount=entry.amount,
        counterpart=entry.counterpart,
        description=f"Final payment for: {label}",
        is_final_provision_payment=True,
    )

    return transfers + [final]


# =============================================================================
# TIER DIRECTORY
# =============================================================================

def register_tier(tiers: List[Tier], name: Optional[str], direction: Direction) -> List[Tier]:
    """Add a counterpart to the directory unless it is already known (case-insensitive)."""
    name = (name or "").strip()
    if not name:
        return tiers

    kind = tier_kind_for(direction)
    if any(t.name.lower() == name.lower() and t.kind == kind for t in tiers):
        return tiers

    logger.debug(f"Registering {kind.value} '{name}'")
    return [*tiers, Tier(name=name, kind=kind)]


# =============================================================================
# SETTLED HISTORY
# =============================================================================

def _occurrence_key(obligation: ActualObligation):
    return (
        obligation.budget_id,
        obligation.due_date,
        obligation.is_provision,
        obligation.is_final_provision_payment,
    )


def _take_match(candidates: List[ActualObligation], obligation: ActualObligation, same_amount: bool) -> bool:
    key = _occurrence_key(obligation)
    for i, candidate in enumerate(candidates):
        if _occurrence_key(candidate) == key and (not same_amount or candidate.amount == obligation.amount):
            del candidates[i]
            return True
    return False


def drop_settled_occurrences(
    fresh: Iterable[ActualObligation],
    settled: Iterable[ActualObligation],
) -> List[ActualObligation]:
    """
    Remove fresh obligations whose occurrence is already settled.

    Each settled obligation covers at most one fresh obligation of the same
    entry, date and kind (transfer, final payment or plain). Same-amount
    matches are taken first so same-date schedule lines pair up with their own
    history; an edited amount still matches by date.
    """
    candidates = list(settled)
    unmatched = [o for o in fresh if not _take_match(candidates, o, same_amount=True)]
    return [o for o in unmatched if not _take_match(candidates, o, same_amount=False)]


# =============================================================================
# DEFINITION LIFECYCLE
# =============================================================================

def save_definition(
    state: PlannerState,
    entry: BudgetEntry,
    previous_id: Optional[str] = None,
    today: Optional[date] = None,
) -> PlannerState:
    """
    Create or edit a budget entry and rebuild its unsettled obligations.

    The entry keeps previous_id when editing. Settled obligations of the entry
    are kept as they are, and no replacement is generated for the occurrence
    they settle.
    """
    if previous_id and previous_id != entry.id:
        entry = entry.model_copy(update={"id": previous_id})

    if state.find_entry(entry.id):
        entries = [entry if e.id == entry.id else e for e in state.entries]
    else:
        entries = [*state.entries, entry]

    kept = [o for o in state.obligations if o.budget_id != entry.id or o.is_settled]
    history = [o for o in kept if o.budget_id == entry.id]
    fresh = drop_settled_occurrences(derive_obligations(entry, state.accounts, today=today), history)

    logger.info(
        f"Saved definition {entry.id} ({entry.frequency.value}): "
        f"{len(fresh)} obligations generated, {len(history)} settled kept"
    )

    return state.model_copy(update={
        "entries": entries,
        "obligations": kept + fresh,
        "tiers": register_tier(state.tiers, entry.counterpart, entry.direction),
    })


def delete_definition(state: PlannerState, entry_id: str) -> PlannerState:
    """Remove an entry and its unsettled obligations. Settled history stays."""
    if state.find_entry(entry_id) is None:
        raise NotFoundError(f"Budget entry {entry_id} not found", entity_type="entry", entity_id=entry_id)

    return state.model_copy(update={
        "entries": [e for e in state.entries if e.id != entry_id],
        "obligations": [o for o in state.obligations if o.budget_id != entry_id or o.is_settled],
    })


# =============================================================================
# STANDALONE ACTUALS
# =============================================================================

def _off_budget_entry(draft: ActualDraft) -> BudgetEntry:
    """One-off entry that owns an actual recorded without a definition."""
    return BudgetEntry(
        project_id=draft.project_id,
        direction=draft.direction,
        category=draft.category,
        frequency=Frequency.ONE_OFF,
        amount=draft.amount,
        one_off_date=draft.due_date,
        start_date=draft.due_date,
        counterpart=draft.counterpart,
        description="Off-budget outflow" if draft.direction == Direction.OUTFLOW else "Off-budget inflow",
        is_off_budget=True,
    )


def record_standalone_actual(
    state: PlannerState,
    draft: ActualDraft,
    previous_id: Optional[str] = None,
) -> PlannerState:
    """
    Create or edit an actual obligation directly.

    A new actual without a budget_id gets a synthesized off-budget entry so
    every obligation keeps exactly one owner. Editing keeps the existing
    payments and recomputes the status against the new amount.
    """
    tiers = register_tier(state.tiers, draft.counterpart, draft.direction)
    fields = draft.model_dump()

    if previous_id:
        existing = state.find_obligation(previous_id)
        if existing is None:
            raise NotFoundError(f"Obligation {previous_id} not found", entity_type="obligation", entity_id=previous_id)

        fields["budget_id"] = draft.budget_id or existing.budget_id
        updated = existing.model_copy(update=fields)
        updated = updated.model_copy(update={
            "status": compute_status(updated.direction, updated.amount, updated.payments),
        })
        return state.model_copy(update={
            "obligations": [updated if o.id == previous_id else o for o in state.obligations],
            "tiers": tiers,
        })

    entries = state.entries
    is_off_budget = False
    if not draft.budget_id:
        synthesized = _off_budget_entry(draft)
        entries = [*entries, synthesized]
        fields["budget_id"] = synthesized.id
        is_off_budget = True
        logger.info(f"Synthesized off-budget entry {synthesized.id} for standalone actual")

    obligation = ActualObligation(**fields, is_off_budget=is_off_budget)
    return state.model_copy(update={
        "entries": entries,
        "obligations": [*state.obligations, obligation],
        "tiers": tiers,
    })


def delete_actual(state: PlannerState, actual_id: str) -> PlannerState:
    if state.find_obligation(actual_id) is None:
        raise NotFoundError(f"Obligation {actual_id} not found", entity_type="obligation", entity_id=actual_id)
    return state.model_copy(update={
        "obligations": [o for o in state.obligations if o.id != actual_id],
    })
