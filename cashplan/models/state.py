"""
Planner state snapshot.

The whole planner lives in one immutable PlannerState. Commands never edit it
in place; they return a new snapshot built with model_copy(update=...).
"""
from typing import Dict, List, Optional

from pydantic import Field

from cashplan.models.base import FrozenModel
from cashplan.models.entities import (
    ActualObligation,
    BudgetEntry,
    CashAccount,
    Project,
    Scenario,
    ScenarioDelta,
    Tier,
    TimeUnit,
)


class PlannerSettings(FrozenModel):
    """Default projection settings shown to the user."""
    time_unit: TimeUnit = TimeUnit.MONTH
    horizon_length: int = Field(12, ge=1, le=120)
    past_buckets: int = Field(2, ge=0, le=24)


class PlannerState(FrozenModel):
    projects: List[Project] = Field(default_factory=list)
    accounts: List[CashAccount] = Field(default_factory=list)
    entries: List[BudgetEntry] = Field(default_factory=list)
    obligations: List[ActualObligation] = Field(default_factory=list)
    tiers: List[Tier] = Field(default_factory=list)
    scenarios: List[Scenario] = Field(default_factory=list)
    scenario_deltas: Dict[str, List[ScenarioDelta]] = Field(default_factory=dict)
    settings: PlannerSettings = Field(default_factory=PlannerSettings)

    # ==========================================================================
    # Lookups
    # ==========================================================================

    def find_project(self, project_id: str) -> Optional[Project]:
        return next((p for p in self.projects if p.id == project_id), None)

    def find_entry(self, entry_id: str) -> Optional[BudgetEntry]:
        return next((e for e in self.entries if e.id == entry_id), None)

    def find_obligation(self, obligation_id: str) -> Optional[ActualObligation]:
        return next((o for o in self.obligations if o.id == obligation_id), None)

    def find_account(self, account_id: str) -> Optional[CashAccount]:
        return next((a for a in self.accounts if a.id == account_id), None)

    def find_scenario(self, scenario_id: str) -> Optional[Scenario]:
        return next((s for s in self.scenarios if s.id == scenario_id), None)

    def find_tier(self, tier_id: str) -> Optional[Tier]:
        return next((t for t in self.tiers if t.id == tier_id), None)

    def entries_for(self, project_id: str) -> List[BudgetEntry]:
        return [e for e in self.entries if e.project_id == project_id]

    def obligations_for(self, project_id: str) -> List[ActualObligation]:
        return [o for o in self.obligations if o.project_id == project_id]

    def accounts_for(self, project_id: str) -> List[CashAccount]:
        return [a for a in self.accounts if a.project_id == project_id]

    def scenarios_for(self, project_id: str) -> List[Scenario]:
        return [s for s in self.scenarios if s.project_id == project_id]

    def deltas_for(self, scenario_id: str) -> List[ScenarioDelta]:
        return list(self.scenario_deltas.get(scenario_id, []))
