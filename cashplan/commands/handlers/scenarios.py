"""
Scenario handlers.

A scenario owns a list of deltas over its project's base entries. Saving a
delta upserts it by id; deleting a delta tombstones a base entry or drops an
addition outright.
"""
import logging
from datetime import date

from cashplan.commands.handlers.base import BaseCommandHandler, HandlerOutcome
from cashplan.commands.types import (
    AddScenario,
    DeleteScenario,
    DeleteScenarioDelta,
    SaveScenarioDelta,
    ToggleScenarioVisibility,
    UpdateScenario,
)
from cashplan.config import settings
from cashplan.exceptions import ScenarioLimitError
from cashplan.models.base import generate_id
from cashplan.models.entities import Scenario, ScenarioDelta
from cashplan.models.state import PlannerState

logger = logging.getLogger(__name__)


def _with_deltas(state: PlannerState, scenario_id: str, deltas) -> PlannerState:
    return state.model_copy(update={"scenario_deltas": {**state.scenario_deltas, scenario_id: deltas}})


class SaveScenarioDeltaHandler(BaseCommandHandler):

    def apply(self, state: PlannerState, command: SaveScenarioDelta, today: date) -> HandlerOutcome:
        self.require_scenario(state, command.scenario_id)

        overrides = dict(command.delta)
        delta_id = command.previous_id or overrides.pop("id", None) or generate_id("bud")
        overrides.pop("id", None)
        delta = ScenarioDelta(id=delta_id, overrides=overrides)

        deltas = state.deltas_for(command.scenario_id)
        if any(d.id == delta_id for d in deltas):
            deltas = [delta if d.id == delta_id else d for d in deltas]
        else:
            deltas.append(delta)

        return HandlerOutcome(_with_deltas(state, command.scenario_id, deltas))


class DeleteScenarioDeltaHandler(BaseCommandHandler):

    def apply(self, state: PlannerState, command: DeleteScenarioDelta, today: date) -> HandlerOutcome:
        scenario = self.require_scenario(state, command.scenario_id)
        others = [d for d in state.deltas_for(scenario.id) if d.id != command.entry_id]

        in_base = any(e.id == command.entry_id for e in state.entries_for(scenario.project_id))
        if in_base:
            others.append(ScenarioDelta(id=command.entry_id, is_deleted=True))

        return HandlerOutcome(_with_deltas(state, scenario.id, others))


class AddScenarioHandler(BaseCommandHandler):

    def apply(self, state: PlannerState, command: AddScenario, today: date) -> HandlerOutcome:
        self.require_project(state, command.project_id)

        limit = settings.MAX_SCENARIOS_PER_PROJECT
        if len(state.scenarios_for(command.project_id)) >= limit:
            raise ScenarioLimitError(
                f"A project cannot hold more than {limit} scenarios",
                entity_type="project",
                entity_id=command.project_id,
            )

        scenario = Scenario(project_id=command.project_id, name=command.name, description=command.description)
        new_state = state.model_copy(update={
            "scenarios": [*state.scenarios, scenario],
            "scenario_deltas": {**state.scenario_deltas, scenario.id: []},
        })
        return HandlerOutcome(new_state)


class UpdateScenarioHandler(BaseCommandHandler):

    def apply(self, state: PlannerState, command: UpdateScenario, today: date) -> HandlerOutcome:
        scenario = self.require_scenario(state, command.scenario_id)
        updates = command.model_dump(include={"name", "description"}, exclude_unset=True)
        if updates.get("name") is None:
            updates.pop("name", None)
        updated = scenario.model_copy(update=updates)
        return HandlerOutcome(state.model_copy(update={
            "scenarios": [updated if s.id == scenario.id else s for s in state.scenarios],
        }))


class ToggleScenarioVisibilityHandler(BaseCommandHandler):

    def apply(self, state: PlannerState, command: ToggleScenarioVisibility, today: date) -> HandlerOutcome:
        scenario = self.require_scenario(state, command.scenario_id)
        updated = scenario.model_copy(update={"is_visible": not scenario.is_visible})
        return HandlerOutcome(state.model_copy(update={
            "scenarios": [updated if s.id == scenario.id else s for s in state.scenarios],
        }))


class DeleteScenarioHandler(BaseCommandHandler):

    def apply(self, state: PlannerState, command: DeleteScenario, today: date) -> HandlerOutcome:
        scenario = self.require_scenario(state, command.scenario_id)
        deltas = {k: v for k, v in state.scenario_deltas.items() if k != scenario.id}
        logger.info(f"Deleting scenario {scenario.id} with {len(state.deltas_for(scenario.id))} deltas")
        return HandlerOutcome(state.model_copy(update={
            "scenarios": [s for s in state.scenarios if s.id != scenario.id],
            "scenario_deltas": deltas,
        }))
