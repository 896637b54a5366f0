"""Seed data."""
from cashplan.seed.defaults import default_state

__all__ = ["default_state"]
