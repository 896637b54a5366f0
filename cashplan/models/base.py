"""Base model and id helpers shared by planner records."""
import secrets

from pydantic import BaseModel, ConfigDict


def generate_id(prefix: str) -> str:
    """Generate a unique ID with a prefix, e.g. bud_3f9a1c2b7d4e."""
    return f"{prefix}_{secrets.token_hex(6)}"


class FrozenModel(BaseModel):
    """Base for immutable planner records. Derive changes with model_copy(update=...)."""
    model_config = ConfigDict(frozen=True)
