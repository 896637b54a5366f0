"""
Default planner state.

Used on first start and whenever the stored snapshot cannot be read:
- "My Business 2025": five cash accounts (12,700 opening cash), a monthly
  office rent of 1,200 and a monthly maintenance contract of 5,000
- "Personal Budget": one bank account of 1,500 and no entries
"""
import logging
from datetime import date
from decimal import Decimal
from typing import Optional

from cashplan.models.entities import (
    AccountCategory,
    BudgetEntry,
    CashAccount,
    Direction,
    Frequency,
    Project,
)
from cashplan.models.state import PlannerState
from cashplan.services.obligations import save_definition

logger = logging.getLogger(__name__)

BUSINESS_PROJECT_ID = "proj_business"
PERSONAL_PROJECT_ID = "proj_personal"
OPENING_DATE = date(2025, 1, 1)


def _account(account_id: str, project_id: str, name: str, category: AccountCategory, balance: str) -> CashAccount:
    return CashAccount(
        id=account_id,
        project_id=project_id,
        name=name,
        category=category,
        initial_balance=Decimal(balance),
        initial_balance_date=OPENING_DATE,
    )


def default_state(today: Optional[date] = None) -> PlannerState:
    """Build the seed state with obligations derived from its entries."""
    state = PlannerState(
        projects=[
            Project(id=BUSINESS_PROJECT_ID, name="My Business 2025"),
            Project(id=PERSONAL_PROJECT_ID, name="Personal Budget"),
        ],
        accounts=[
            _account("acc_business_bank", BUSINESS_PROJECT_ID, "Main business account", AccountCategory.BANK, "10000"),
            _account("acc_business_cash", BUSINESS_PROJECT_ID, "Office cash box", AccountCategory.CASH, "500"),
            _account("acc_business_mobile", BUSINESS_PROJECT_ID, "Mobile wallet", AccountCategory.MOBILE_MONEY, "200"),
            _account("acc_business_savings", BUSINESS_PROJECT_ID, "Savings account", AccountCategory.SAVINGS, "2000"),
            _account("acc_business_tax", BUSINESS_PROJECT_ID, "Tax provision", AccountCategory.PROVISIONS, "0"),
            _account("acc_personal_bank", PERSONAL_PROJECT_ID, "Personal account", AccountCategory.BANK, "1500"),
        ],
    )

    entries = [
        BudgetEntry(
            id="bud_office_rent",
            project_id=BUSINESS_PROJECT_ID,
            direction=Direction.OUTFLOW,
            category="Rent and charges",
            frequency=Frequency.MONTHLY,
            amount=Decimal("1200"),
            start_date=date(2025, 1, 5),
            counterpart="City Realty",
            description="Office rent",
        ),
        BudgetEntry(
            id="bud_maintenance",
            project_id=BUSINESS_PROJECT_ID,
            direction=Direction.INFLOW,
            category="Service sales",
            frequency=Frequency.MONTHLY,
            amount=Decimal("5000"),
            start_date=date(2025, 1, 15),
            counterpart="Main client",
            description="Maintenance contract",
        ),
    ]
    for entry in entries:
        state = save_definition(state, entry, today=today)

    logger.info(f"Built default state with {len(state.obligations)} obligations")
    return state
