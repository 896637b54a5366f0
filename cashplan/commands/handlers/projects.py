"""Project lifecycle and planner settings handlers."""
import logging
from datetime import date

from cashplan.commands.handlers.base import BaseCommandHandler, HandlerOutcome
from cashplan.commands.types import (
    AddProject,
    ArchiveProject,
    DeleteProject,
    RenameProject,
    RestoreProject,
    UpdateSettings,
)
from cashplan.models.entities import AccountCategory, CashAccount, Project
from cashplan.models.state import PlannerState

logger = logging.getLogger(__name__)

DEFAULT_CASH_ACCOUNT_NAME = "Cash on hand"


def _replace_project(state: PlannerState, updated: Project) -> PlannerState:
    return state.model_copy(update={
        "projects": [updated if p.id == updated.id else p for p in state.projects],
    })


class AddProjectHandler(BaseCommandHandler):
    """New projects start with an empty cash account."""

    def apply(self, state: PlannerState, command: AddProject, today: date) -> HandlerOutcome:
        project = Project(name=command.name)
        account = CashAccount(
            project_id=project.id,
            name=DEFAULT_CASH_ACCOUNT_NAME,
            category=AccountCategory.CASH,
            initial_balance_date=today,
        )
        return HandlerOutcome(state.model_copy(update={
            "projects": [*state.projects, project],
            "accounts": [*state.accounts, account],
        }))


class RenameProjectHandler(BaseCommandHandler):

    def apply(self, state: PlannerState, command: RenameProject, today: date) -> HandlerOutcome:
        project = self.require_project(state, command.project_id)
        return HandlerOutcome(_replace_project(state, project.model_copy(update={"name": command.name})))


class ArchiveProjectHandler(BaseCommandHandler):

    def apply(self, state: PlannerState, command: ArchiveProject, today: date) -> HandlerOutcome:
        project = self.require_project(state, command.project_id)
        return HandlerOutcome(_replace_project(state, project.model_copy(update={"is_archived": True})))


class RestoreProjectHandler(BaseCommandHandler):

    def apply(self, state: PlannerState, command: RestoreProject, today: date) -> HandlerOutcome:
        project = self.require_project(state, command.project_id)
        return HandlerOutcome(_replace_project(state, project.model_copy(update={"is_archived": False})))


class DeleteProjectHandler(BaseCommandHandler):
    """Delete a project with its entries, obligations, accounts and scenarios."""

    def apply(self, state: PlannerState, command: DeleteProject, today: date) -> HandlerOutcome:
        project = self.require_project(state, command.project_id)
        scenario_ids = {s.id for s in state.scenarios_for(project.id)}

        logger.info(f"Deleting project {project.id} and {len(scenario_ids)} scenarios")
        return HandlerOutcome(state.model_copy(update={
            "projects": [p for p in state.projects if p.id != project.id],
            "accounts": [a for a in state.accounts if a.project_id != project.id],
            "entries": [e for e in state.entries if e.project_id != project.id],
            "obligations": [o for o in state.obligations if o.project_id != project.id],
            "scenarios": [s for s in state.scenarios if s.id not in scenario_ids],
            "scenario_deltas": {k: v for k, v in state.scenario_deltas.items() if k not in scenario_ids},
        }))


class UpdateSettingsHandler(BaseCommandHandler):

    def apply(self, state: PlannerState, command: UpdateSettings, today: date) -> HandlerOutcome:
        updates = command.model_dump(include={"time_unit", "horizon_length", "past_buckets"}, exclude_none=True)
        return HandlerOutcome(state.model_copy(update={
            "settings": state.settings.model_copy(update=updates),
        }))
