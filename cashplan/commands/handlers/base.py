"""
Base Command Handler - Abstract base class for command handlers.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import date
from typing import Any, List

from cashplan.exceptions import NotFoundError
from cashplan.models.state import PlannerState
from cashplan.services.settlement import ProvisionCompleted


@dataclass
class HandlerOutcome:
    """New state produced by a handler, plus advisory notices."""
    state: PlannerState
    notices: List[ProvisionCompleted] = field(default_factory=list)


class BaseCommandHandler(ABC):
    """
    Abstract base class for command handlers.

    Each command tag has one handler that knows how to:
    1. Check the guards of the command (raise GuardError / NotFoundError)
    2. Build the next state from the current one

    Handlers never mutate the state they receive.
    """

    @abstractmethod
    def apply(self, state: PlannerState, command: Any, today: date) -> HandlerOutcome:
        """Return the state after the command."""
        pass

    def require_project(self, state: PlannerState, project_id: str):
        project = state.find_project(project_id)
        if project is None:
            raise NotFoundError(f"Project {project_id} not found", entity_type="project", entity_id=project_id)
        return project

    def require_scenario(self, state: PlannerState, scenario_id: str):
        scenario = state.find_scenario(scenario_id)
        if scenario is None:
            raise NotFoundError(f"Scenario {scenario_id} not found", entity_type="scenario", entity_id=scenario_id)
        return scenario

    def require_account(self, state: PlannerState, account_id: str):
        account = state.find_account(account_id)
        if account is None:
            raise NotFoundError(f"Cash account {account_id} not found", entity_type="account", entity_id=account_id)
        return account

    def require_tier(self, state: PlannerState, tier_id: str):
        tier = state.find_tier(tier_id)
        if tier is None:
            raise NotFoundError(f"Tier {tier_id} not found", entity_type="tier", entity_id=tier_id)
        return tier
