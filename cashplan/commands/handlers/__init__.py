"""
Command Handlers - Tag-specific state transitions.

Each handler implements:
- apply(): build the next PlannerState for one command tag, raising
  GuardError / NotFoundError when the command must be refused
"""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from cashplan.commands.handlers.base import BaseCommandHandler


def get_handler(command_type: str) -> "BaseCommandHandler":
    """Get the handler for a command tag."""
    from cashplan.commands.handlers.definitions import DeleteDefinitionHandler, SaveDefinitionHandler
    from cashplan.commands.handlers.actuals import DeleteActualHandler, RecordActualHandler
    from cashplan.commands.handlers.payments import DeletePaymentHandler, RecordPaymentHandler
    from cashplan.commands.handlers.scenarios import (
        AddScenarioHandler,
        DeleteScenarioDeltaHandler,
        DeleteScenarioHandler,
        SaveScenarioDeltaHandler,
        ToggleScenarioVisibilityHandler,
        UpdateScenarioHandler,
    )
    from cashplan.commands.handlers.accounts import (
        AddCashAccountHandler,
        DeleteCashAccountHandler,
        UpdateCashAccountHandler,
    )
    from cashplan.commands.handlers.tiers import AddTierHandler, DeleteTierHandler, RenameTierHandler
    from cashplan.commands.handlers.projects import (
        AddProjectHandler,
        ArchiveProjectHandler,
        DeleteProjectHandler,
        RenameProjectHandler,
        RestoreProjectHandler,
        UpdateSettingsHandler,
    )

    handlers = {
        "save_definition": SaveDefinitionHandler(),
        "delete_definition": DeleteDefinitionHandler(),
        "record_actual": RecordActualHandler(),
        "delete_actual": DeleteActualHandler(),
        "record_payment": RecordPaymentHandler(),
        "delete_payment": DeletePaymentHandler(),
        "save_scenario_delta": SaveScenarioDeltaHandler(),
        "delete_scenario_delta": DeleteScenarioDeltaHandler(),
        "add_scenario": AddScenarioHandler(),
        "update_scenario": UpdateScenarioHandler(),
        "toggle_scenario_visibility": ToggleScenarioVisibilityHandler(),
        "delete_scenario": DeleteScenarioHandler(),
        "add_cash_account": AddCashAccountHandler(),
        "update_cash_account": UpdateCashAccountHandler(),
        "delete_cash_account": DeleteCashAccountHandler(),
        "add_tier": AddTierHandler(),
        "rename_tier": RenameTierHandler(),
        "delete_tier": DeleteTierHandler(),
        "add_project": AddProjectHandler(),
        "rename_project": RenameProjectHandler(),
        "archive_project": ArchiveProjectHandler(),
        "restore_project": RestoreProjectHandler(),
        "delete_project": DeleteProjectHandler(),
        "update_settings": UpdateSettingsHandler(),
    }

    handler = handlers.get(command_type)
    if not handler:
        raise ValueError(f"No handler for command type: {command_type}")

    return handler
