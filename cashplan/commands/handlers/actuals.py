"""Standalone actual handlers."""
from datetime import date

from cashplan.commands.handlers.base import BaseCommandHandler, HandlerOutcome
from cashplan.commands.types import DeleteActual, RecordActual
from cashplan.exceptions import NotFoundError
from cashplan.models.state import PlannerState
from cashplan.services.obligations import delete_actual, record_standalone_actual


class RecordActualHandler(BaseCommandHandler):
    """
    Record an actual obligation by hand.

    Without a budget_id the ledger attaches it to a synthesized off-budget
    entry; a given budget_id must name an existing entry.
    """

    def apply(self, state: PlannerState, command: RecordActual, today: date) -> HandlerOutcome:
        actual = command.actual
        self.require_project(state, actual.project_id)
        if actual.budget_id and state.find_entry(actual.budget_id) is None:
            raise NotFoundError(
                f"Budget entry {actual.budget_id} not found",
                entity_type="entry",
                entity_id=actual.budget_id,
            )
        return HandlerOutcome(record_standalone_actual(state, actual, command.previous_id))


class DeleteActualHandler(BaseCommandHandler):

    def apply(self, state: PlannerState, command: DeleteActual, today: date) -> HandlerOutcome:
        return HandlerOutcome(delete_actual(state, command.actual_id))
