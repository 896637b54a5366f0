"""Cash account handlers."""
from datetime import date

from cashplan.commands.handlers.base import BaseCommandHandler, HandlerOutcome
from cashplan.commands.types import AddCashAccount, DeleteCashAccount, UpdateCashAccount
from cashplan.exceptions import ReferenceBlockedError
from cashplan.models.entities import CashAccount
from cashplan.models.state import PlannerState


def account_is_referenced(state: PlannerState, account_id: str) -> bool:
    """True if a payment or a provision still points at the account."""
    for obligation in state.obligations:
        if obligation.destination_account_id == account_id:
            return True
        if any(p.cash_account_id == account_id for p in obligation.payments):
            return True
    return any(
        e.provision_details and e.provision_details.destination_account_id == account_id
        for e in state.entries
    )


class AddCashAccountHandler(BaseCommandHandler):

    def apply(self, state: PlannerState, command: AddCashAccount, today: date) -> HandlerOutcome:
        self.require_project(state, command.project_id)
        account = CashAccount(
            project_id=command.project_id,
            name=command.name,
            category=command.category,
            initial_balance=command.initial_balance,
            initial_balance_date=command.initial_balance_date or today,
        )
        return HandlerOutcome(state.model_copy(update={"accounts": [*state.accounts, account]}))


class UpdateCashAccountHandler(BaseCommandHandler):

    def apply(self, state: PlannerState, command: UpdateCashAccount, today: date) -> HandlerOutcome:
        account = self.require_account(state, command.account_id)
        updates = command.model_dump(
            include={"name", "category", "initial_balance", "initial_balance_date"},
            exclude_none=True,
        )
        updated = account.model_copy(update=updates)
        return HandlerOutcome(state.model_copy(update={
            "accounts": [updated if a.id == account.id else a for a in state.accounts],
        }))


class DeleteCashAccountHandler(BaseCommandHandler):

    def apply(self, state: PlannerState, command: DeleteCashAccount, today: date) -> HandlerOutcome:
        account = self.require_account(state, command.account_id)
        if account_is_referenced(state, account.id):
            raise ReferenceBlockedError(
                f"Cash account '{account.name}' is used by payments or provisions",
                entity_type="account",
                entity_id=account.id,
            )
        return HandlerOutcome(state.model_copy(update={
            "accounts": [a for a in state.accounts if a.id != account.id],
        }))
