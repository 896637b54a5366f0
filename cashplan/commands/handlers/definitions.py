"""Budget entry handlers."""
from datetime import date

from cashplan.commands.handlers.base import BaseCommandHandler, HandlerOutcome
from cashplan.commands.types import DeleteDefinition, SaveDefinition
from cashplan.exceptions import GuardError
from cashplan.models.entities import BudgetEntry, Frequency
from cashplan.models.state import PlannerState
from cashplan.services.obligations import delete_definition, save_definition
from cashplan.services.recurrence import generate_provision_schedule


class SaveDefinitionHandler(BaseCommandHandler):
    """
    Create or edit a budget entry and rebuild its unsettled obligations.

    A provision may be sent with an installment plan instead of explicit
    lines; the plan is expanded into the entry's schedule before saving.
    """

    def apply(self, state: PlannerState, command: SaveDefinition, today: date) -> HandlerOutcome:
        self.require_project(state, command.entry.project_id)

        entry = command.entry
        plan = command.installment_plan
        if plan is not None:
            if entry.frequency != Frequency.PROVISION:
                raise GuardError(
                    f"Installment plans only apply to provisions, not {entry.frequency.value} entries",
                    entity_type="entry",
                    entity_id=command.previous_id or entry.id,
                )
            schedule = generate_provision_schedule(plan.total, plan.count, plan.first_date)
            entry = BudgetEntry.model_validate({**entry.model_dump(), "payments": schedule})

        return HandlerOutcome(save_definition(state, entry, command.previous_id, today=today))


class DeleteDefinitionHandler(BaseCommandHandler):

    def apply(self, state: PlannerState, command: DeleteDefinition, today: date) -> HandlerOutcome:
        return HandlerOutcome(delete_definition(state, command.entry_id))
