"""
Command dispatcher - the only mutation path of the planner.

apply() routes a command to its handler and always answers with a
CommandResult: either the complete new state, or the unchanged state with a
typed BlockedReason. Unexpected exceptions propagate.
"""
import logging
from datetime import date
from typing import Optional

from cashplan.commands.handlers import get_handler
from cashplan.commands.types import BlockedReason, Command, CommandResult
from cashplan.exceptions import CashplanError
from cashplan.models.state import PlannerState

logger = logging.getLogger(__name__)


def apply(state: PlannerState, command: Command, today: Optional[date] = None) -> CommandResult:
    """Apply one command to a state snapshot."""
    handler = get_handler(command.type)

    try:
        outcome = handler.apply(state, command, today or date.today())
    except CashplanError as e:
        logger.warning(f"Command {command.type} blocked ({e.code}): {e.message}")
        return CommandResult(
            accepted=False,
            state=state,
            blocked=BlockedReason(
                code=e.code,
                message=e.message,
                entity_type=e.entity_type,
                entity_id=e.entity_id,
            ),
        )

    logger.info(f"Applied command {command.type}")
    return CommandResult(accepted=True, state=outcome.state, notices=outcome.notices)
