"""
Planner exceptions.

Command handlers raise these; the dispatcher turns them into a rejected
CommandResult carrying the unchanged state, so callers never see a partial
mutation.
"""
from typing import Optional


class CashplanError(Exception):
    """Base class for planner errors."""

    code = "error"

    def __init__(self, message: str, entity_type: Optional[str] = None, entity_id: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.entity_type = entity_type
        self.entity_id = entity_id


class GuardError(CashplanError):
    """A command was refused by a business guard."""

    code = "guard_failed"


class ReferenceBlockedError(GuardError):
    """Deletion refused because the record is still referenced elsewhere."""

    code = "still_referenced"


class ScenarioLimitError(GuardError):
    """Project already holds the maximum number of scenarios."""

    code = "scenario_limit"


class NotFoundError(CashplanError):
    """The command targets a record that does not exist."""

    code = "not_found"
