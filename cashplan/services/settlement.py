"""
Settlement Tracker - applies real payments to obligations.

Status is always recomputed from the payment list, never stepped:

    pending  ->  partially_paid / partially_received  ->  paid / received

An obligation is settled when any payment is flagged final or the payments
cover the amount. Settled labels follow the obligation's direction.
"""
import logging
from datetime import date
from decimal import Decimal
from typing import Iterable, List, Optional, Tuple

from cashplan.exceptions import NotFoundError
from cashplan.models.base import FrozenModel
from cashplan.models.entities import (
    ActualObligation,
    Direction,
    ObligationStatus,
    PaymentRecord,
)
from cashplan.models.state import PlannerState

logger = logging.getLogger(__name__)


class ProvisionCompleted(FrozenModel):
    """Advisory notice: every transfer of a provision has been settled."""
    budget_id: str
    project_id: str
    final_obligation_id: Optional[str] = None
    message: str


class OverdueObligation(FrozenModel):
    obligation: ActualObligation
    remaining_amount: Decimal
    days_overdue: int


# =============================================================================
# STATUS
# =============================================================================

def compute_status(direction: Direction, amount: Decimal, payments: Iterable[PaymentRecord]) -> ObligationStatus:
    """Derive the settlement status from an obligation's payments."""
    payments = list(payments)
    total_paid = sum((p.paid_amount for p in payments), Decimal("0"))
    is_inflow = direction == Direction.INFLOW

    if any(p.is_final_payment for p in payments) or (payments and total_paid >= amount):
        return ObligationStatus.RECEIVED if is_inflow else ObligationStatus.PAID
    if total_paid > 0:
        return ObligationStatus.PARTIALLY_RECEIVED if is_inflow else ObligationStatus.PARTIALLY_PAID
    return ObligationStatus.PENDING


def refresh_status(obligation: ActualObligation) -> ActualObligation:
    status = compute_status(obligation.direction, obligation.amount, obligation.payments)
    if status == obligation.status:
        return obligation
    return obligation.model_copy(update={"status": status})


def _replace_obligation(state: PlannerState, updated: ActualObligation) -> PlannerState:
    obligations = [updated if o.id == updated.id else o for o in state.obligations]
    return state.model_copy(update={"obligations": obligations})


def _get_obligation(state: PlannerState, obligation_id: str) -> ActualObligation:
    obligation = state.find_obligation(obligation_id)
    if obligation is None:
        raise NotFoundError(
            f"Obligation {obligation_id} not found",
            entity_type="obligation",
            entity_id=obligation_id,
        )
    return obligation


# =============================================================================
# PAYMENTS
# =============================================================================

def record_payment(
    state: PlannerState,
    obligation_id: str,
    payment: PaymentRecord,
) -> Tuple[PlannerState, List[ProvisionCompleted]]:
    """
    Append a payment to an obligation and recompute its status.

    Returns the new state and any provision completion notices raised by the
    payment.
    """
    obligation = _get_obligation(state, obligation_id)
    updated = refresh_status(
        obligation.model_copy(update={"payments": [*obligation.payments, payment]})
    )
    new_state = _replace_obligation(state, updated)

    notices = []
    if updated.is_provision and updated.is_settled and not obligation.is_settled:
        notice = check_provision_completion(new_state, updated.budget_id)
        if notice:
            notices.append(notice)

    logger.info(
        f"Recorded payment {payment.id} of {payment.paid_amount} on {obligation_id} "
        f"({obligation.status.value} -> {updated.status.value})"
    )
    return new_state, notices


def delete_payment(state: PlannerState, obligation_id: str, payment_id: str) -> PlannerState:
    """
    Remove one payment and recompute the obligation's status.

    The obligation stays settled only while a remaining payment is flagged
    final or the remaining payments still cover the amount.
    """
    obligation = _get_obligation(state, obligation_id)
    remaining = [p for p in obligation.payments if p.id != payment_id]
    if len(remaining) == len(obligation.payments):
        raise NotFoundError(
            f"Payment {payment_id} not found on obligation {obligation_id}",
            entity_type="payment",
            entity_id=payment_id,
        )

    updated = refresh_status(obligation.model_copy(update={"payments": remaining}))
    return _replace_obligation(state, updated)


def check_provision_completion(state: PlannerState, budget_id: str) -> Optional[ProvisionCompleted]:
    """Return a notice when every transfer obligation of a provision is settled."""
    transfers = [o for o in state.obligations if o.budget_id == budget_id and o.is_provision]
    if not transfers or not all(o.is_settled for o in transfers):
        return None

    final = next(
        (o for o in state.obligations if o.budget_id == budget_id and o.is_final_provision_payment),
        None,
    )
    entry = state.find_entry(budget_id)
    label = (entry.description or entry.category) if entry else budget_id
    return ProvisionCompleted(
        budget_id=budget_id,
        project_id=transfers[0].project_id,
        final_obligation_id=final.id if final else None,
        message=f"Provision '{label}' is complete. The final payment can now be made.",
    )


# =============================================================================
# READ API
# =============================================================================

def overdue_obligations(obligations: Iterable[ActualObligation], today: Optional[date] = None) -> List[OverdueObligation]:
    """Unsettled obligations due before today, oldest first."""
    today = today or date.today()
    overdue = [
        OverdueObligation(
            obligation=o,
            remaining_amount=o.remaining_amount,
            days_overdue=(today - o.due_date).days,
        )
        for o in obligations
        if not o.is_settled and o.due_date < today
    ]
    overdue.sort(key=lambda item: item.obligation.due_date)
    return overdue
