"""Cash-flow planner backend."""
