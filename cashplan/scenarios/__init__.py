"""Scenario overlay."""
from cashplan.scenarios.overlay import (
    build_scenario_obligations,
    derive_scenario_obligations,
    resolve_effective_entries,
)

__all__ = [
    "build_scenario_obligations",
    "derive_scenario_obligations",
    "resolve_effective_entries",
]
