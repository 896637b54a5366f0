"""
Planner commands.

Usage:
    from cashplan.commands import apply, parse_command

    result = apply(state, parse_command({"type": "add_project", "name": "Shop"}))
"""
from cashplan.commands.dispatcher import apply
from cashplan.commands.types import BlockedReason, Command, CommandResult, parse_command

__all__ = ["apply", "parse_command", "BlockedReason", "Command", "CommandResult"]
