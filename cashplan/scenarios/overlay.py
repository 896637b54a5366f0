"""
Scenario Overlay - what-if edits applied on top of the base entries.

Key principle: NEVER modify canonical data. A scenario is a list of deltas
(override maps and tombstones) resolved at read time:

1. Drop base entries tombstoned by the scenario
2. Merge override maps into the base entries they match
3. Append deltas that match no base entry as additions
4. Re-derive obligations for the touched entries only

Resolution never raises; a delta that cannot become a valid entry is skipped.
"""
import logging
from datetime import date
from typing import Iterable, List, Optional

from pydantic import ValidationError

from cashplan.exceptions import NotFoundError
from cashplan.models.entities import ActualObligation, BudgetEntry, CashAccount, ScenarioDelta
from cashplan.models.state import PlannerState
from cashplan.services.obligations import derive_obligations, drop_settled_occurrences

logger = logging.getLogger(__name__)


def _merge(entry: BudgetEntry, delta: ScenarioDelta) -> Optional[BudgetEntry]:
    data = {**entry.model_dump(), **delta.overrides, "id": entry.id}
    try:
        return BudgetEntry.model_validate(data)
    except (ValidationError, TypeError) as e:
        logger.warning(f"Skipping scenario override for entry {entry.id}: {e}")
        return None


def _build_addition(delta: ScenarioDelta, project_id: Optional[str]) -> Optional[BudgetEntry]:
    data = {**delta.overrides, "id": delta.id}
    if project_id and not data.get("project_id"):
        data["project_id"] = project_id
    try:
        return BudgetEntry.model_validate(data)
    except (ValidationError, TypeError) as e:
        logger.warning(f"Skipping scenario addition {delta.id}: {e}")
        return None


def resolve_effective_entries(
    base_entries: Iterable[BudgetEntry],
    deltas: Iterable[ScenarioDelta],
    project_id: Optional[str] = None,
) -> List[BudgetEntry]:
    """
    Compute the entries a scenario sees.

    Base entries keep their order; additions follow in delta order. The inputs
    are never modified. Tombstones that match no base entry are ignored.
    """
    base_entries = list(base_entries)
    deltas = list(deltas)

    base_ids = {e.id for e in base_entries}
    tombstones = {d.id for d in deltas if d.is_deleted}
    overrides = {d.id: d for d in deltas if not d.is_deleted}

    effective = []
    for entry in base_entries:
        if entry.id in tombstones:
            continue
        delta = overrides.get(entry.id)
        merged = _merge(entry, delta) if delta else None
        effective.append(merged or entry)

    for delta in deltas:
        if delta.is_deleted or delta.id in base_ids:
            continue
        addition = _build_addition(delta, project_id)
        if addition:
            effective.append(addition)

    return effective


def derive_scenario_obligations(
    effective_entries: Iterable[BudgetEntry],
    project_id: str,
    accounts: Iterable[CashAccount],
    today: Optional[date] = None,
) -> List[ActualObligation]:
    """Re-run the pure obligation derivation over scenario entries. Nothing is stored."""
    accounts = list(accounts)
    return [
        obligation
        for entry in effective_entries
        if entry.project_id == project_id
        for obligation in derive_obligations(entry, accounts, today=today)
    ]


def build_scenario_obligations(
    state: PlannerState,
    scenario_id: str,
    today: Optional[date] = None,
) -> List[ActualObligation]:
    """
    Full obligation set of a scenario.

    - entries the scenario does not touch keep their base obligations
    - touched entries keep their settled history
    - touched, non-tombstoned entries get freshly derived unsettled obligations
    """
    scenario = state.find_scenario(scenario_id)
    if scenario is None:
        raise NotFoundError(f"Scenario {scenario_id} not found", entity_type="scenario", entity_id=scenario_id)

    project_id = scenario.project_id
    deltas = state.deltas_for(scenario_id)
    touched = {d.id for d in deltas}

    effective = resolve_effective_entries(state.entries_for(project_id), deltas, project_id)
    base_obligations = state.obligations_for(project_id)

    untouched = [o for o in base_obligations if o.budget_id not in touched]
    history = [o for o in base_obligations if o.budget_id in touched and o.is_settled]

    fresh = drop_settled_occurrences(
        derive_scenario_obligations(
            [e for e in effective if e.id in touched], project_id, state.accounts, today
        ),
        history,
    )

    logger.debug(
        f"Scenario {scenario_id}: {len(untouched)} base, {len(history)} settled, {len(fresh)} derived obligations"
    )
    return untouched + history + fresh
