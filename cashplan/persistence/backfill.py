"""
Load-time repair of stored snapshots.

Older or hand-edited snapshots may lack collections, carry legacy account
categories, or have projects without any cash account. backfill_snapshot()
fixes the raw document before it is validated into a PlannerState.
"""
import logging
from datetime import date
from typing import Any, Dict, Optional

from cashplan.models.base import generate_id
from cashplan.models.entities import AccountCategory

logger = logging.getLogger(__name__)

COLLECTIONS = ("projects", "accounts", "entries", "obligations", "tiers", "scenarios")

LEGACY_ACCOUNT_CATEGORIES = {
    "proCurrent": AccountCategory.BANK.value,
    "persoCurrent": AccountCategory.BANK.value,
    "blocked": AccountCategory.PROVISIONS.value,
    "investment": AccountCategory.SAVINGS.value,
    "other": AccountCategory.SAVINGS.value,
    "mobileMoney": AccountCategory.MOBILE_MONEY.value,
}

VALID_ACCOUNT_CATEGORIES = {c.value for c in AccountCategory}


def _account_category(value: Any) -> str:
    if value in VALID_ACCOUNT_CATEGORIES:
        return value
    return LEGACY_ACCOUNT_CATEGORIES.get(value, AccountCategory.SAVINGS.value)


def backfill_snapshot(data: Dict[str, Any], today: Optional[date] = None) -> Dict[str, Any]:
    """Return a repaired copy of a raw snapshot document."""
    if not isinstance(data, dict):
        raise ValueError(f"Snapshot must be a JSON object, got {type(data).__name__}")

    today = today or date.today()
    data = dict(data)

    for name in COLLECTIONS:
        if not isinstance(data.get(name), list):
            data[name] = []
    data["scenario_deltas"] = dict(data["scenario_deltas"]) if isinstance(data.get("scenario_deltas"), dict) else {}
    if not isinstance(data.get("settings"), dict):
        data["settings"] = {}

    data["scenarios"] = [
        {**s, "is_visible": True} if isinstance(s, dict) and s.get("is_visible") is None else s
        for s in data["scenarios"]
    ]
    for scenario in data["scenarios"]:
        if isinstance(scenario, dict) and scenario.get("id") not in data["scenario_deltas"]:
            data["scenario_deltas"][scenario.get("id")] = []

    default_project_id = next(
        (p.get("id") for p in data["projects"] if isinstance(p, dict)),
        None,
    )
    accounts = []
    for account in data["accounts"]:
        if not isinstance(account, dict):
            accounts.append(account)
            continue
        account = dict(account)
        account["category"] = _account_category(account.get("category"))
        if not account.get("project_id") and default_project_id:
            account["project_id"] = default_project_id
        accounts.append(account)

    for project in data["projects"]:
        if not isinstance(project, dict):
            continue
        has_account = any(isinstance(a, dict) and a.get("project_id") == project.get("id") for a in accounts)
        if not has_account:
            logger.info(f"Backfilling cash account for project {project.get('id')}")
            accounts.append({
                "id": generate_id("acc"),
                "project_id": project.get("id"),
                "name": "Cash on hand",
                "category": AccountCategory.CASH.value,
                "initial_balance": "0",
                "initial_balance_date": today.isoformat(),
            })
    data["accounts"] = accounts

    return data
