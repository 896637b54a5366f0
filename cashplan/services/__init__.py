"""
Planner services.

- recurrence: budget entry -> dated amounts
- obligations: entry lifecycle and obligation derivation
- settlement: payments and obligation status
- planner: async load/apply/save shell
"""
