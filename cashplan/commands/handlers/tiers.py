"""Tier directory handlers."""
from datetime import date

from cashplan.commands.handlers.base import BaseCommandHandler, HandlerOutcome
from cashplan.commands.types import AddTier, DeleteTier, RenameTier
from cashplan.exceptions import ReferenceBlockedError
from cashplan.models.entities import Tier
from cashplan.models.state import PlannerState


class AddTierHandler(BaseCommandHandler):

    def apply(self, state: PlannerState, command: AddTier, today: date) -> HandlerOutcome:
        tier = Tier(name=command.name.strip(), kind=command.kind)
        return HandlerOutcome(state.model_copy(update={"tiers": [*state.tiers, tier]}))


class RenameTierHandler(BaseCommandHandler):
    """Rename a tier and every entry or obligation naming it as counterpart."""

    def apply(self, state: PlannerState, command: RenameTier, today: date) -> HandlerOutcome:
        tier = self.require_tier(state, command.tier_id)
        old_name, new_name = tier.name, command.name.strip()

        def rename(item):
            if item.counterpart == old_name:
                return item.model_copy(update={"counterpart": new_name})
            return item

        return HandlerOutcome(state.model_copy(update={
            "tiers": [t.model_copy(update={"name": new_name}) if t.id == tier.id else t for t in state.tiers],
            "entries": [rename(e) for e in state.entries],
            "obligations": [rename(o) for o in state.obligations],
        }))


class DeleteTierHandler(BaseCommandHandler):

    def apply(self, state: PlannerState, command: DeleteTier, today: date) -> HandlerOutcome:
        tier = self.require_tier(state, command.tier_id)
        in_use = (
            any(e.counterpart == tier.name for e in state.entries)
            or any(o.counterpart == tier.name for o in state.obligations)
        )
        if in_use:
            raise ReferenceBlockedError(
                f"Tier '{tier.name}' is used by budget entries or obligations",
                entity_type="tier",
                entity_id=tier.id,
            )
        return HandlerOutcome(state.model_copy(update={
            "tiers": [t for t in state.tiers if t.id != tier.id],
        }))
