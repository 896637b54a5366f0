"""Payment handlers."""
from datetime import date

from cashplan.commands.handlers.base import BaseCommandHandler, HandlerOutcome
from cashplan.commands.types import DeletePayment, RecordPayment
from cashplan.models.state import PlannerState
from cashplan.services.settlement import delete_payment, record_payment


class RecordPaymentHandler(BaseCommandHandler):

    def apply(self, state: PlannerState, command: RecordPayment, today: date) -> HandlerOutcome:
        if command.payment.cash_account_id:
            self.require_account(state, command.payment.cash_account_id)
        new_state, notices = record_payment(state, command.obligation_id, command.payment)
        return HandlerOutcome(new_state, notices)


class DeletePaymentHandler(BaseCommandHandler):

    def apply(self, state: PlannerState, command: DeletePayment, today: date) -> HandlerOutcome:
        return HandlerOutcome(delete_payment(state, command.obligation_id, command.payment_id))
