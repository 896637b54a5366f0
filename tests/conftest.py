"""Shared test fixtures and configuration for cashplan tests."""
import pytest
from datetime import date
from decimal import Decimal

from cashplan.models.entities import (
    AccountCategory,
    BudgetEntry,
    CashAccount,
    Direction,
    ExplicitPayment,
    Frequency,
    Project,
    ProvisionDetails,
)
from cashplan.models.state import PlannerState
from cashplan.services.recurrence import generate_provision_schedule

# Fixed "today" so horizons and past/future buckets are deterministic
TODAY = date(2025, 6, 15)


@pytest.fixture
def today():
    return TODAY


@pytest.fixture
def project():
    return Project(id="proj_test", name="Test Project")


@pytest.fixture
def bank_account(project):
    return CashAccount(
        id="acc_bank",
        project_id=project.id,
        name="Main bank",
        category=AccountCategory.BANK,
        initial_balance=Decimal("10000"),
        initial_balance_date=date(2025, 1, 1),
    )


@pytest.fixture
def provision_account(project):
    return CashAccount(
        id="acc_provision",
        project_id=project.id,
        name="Tax provision",
        category=AccountCategory.PROVISIONS,
        initial_balance=Decimal("0"),
        initial_balance_date=date(2025, 1, 1),
    )


@pytest.fixture
def empty_state(project, bank_account, provision_account):
    """A project with two accounts and nothing planned."""
    return PlannerState(projects=[project], accounts=[bank_account, provision_account])


@pytest.fixture
def rent_entry(project):
    """Monthly rent of 1200 from 2025-01-05, open-ended."""
    return BudgetEntry(
        id="bud_rent",
        project_id=project.id,
        direction=Direction.OUTFLOW,
        category="Rent",
        frequency=Frequency.MONTHLY,
        amount=Decimal("1200"),
        start_date=date(2025, 1, 5),
        counterpart="City Realty",
        description="Office rent",
    )


@pytest.fixture
def revenue_entry(project):
    """Monthly maintenance contract of 5000 from 2025-01-15."""
    return BudgetEntry(
        id="bud_revenue",
        project_id=project.id,
        direction=Direction.INFLOW,
        category="Service sales",
        frequency=Frequency.MONTHLY,
        amount=Decimal("5000"),
        start_date=date(2025, 1, 15),
        counterpart="Main client",
        description="Maintenance contract",
    )


@pytest.fixture
def weekly_entry(project):
    """Weekly cleaning of 100, every Monday from 2025-01-06."""
    return BudgetEntry(
        id="bud_cleaning",
        project_id=project.id,
        direction=Direction.OUTFLOW,
        category="Cleaning",
        frequency=Frequency.WEEKLY,
        amount=Decimal("100"),
        start_date=date(2025, 1, 6),
        counterpart="Sparkle Services",
    )


@pytest.fixture
def provision_entry(project, provision_account):
    """Provision of 100000 over ten monthly transfers, paid out on 2025-12-31."""
    schedule = generate_provision_schedule(Decimal("100000"), 10, date(2025, 1, 31))
    return BudgetEntry(
        id="bud_tax",
        project_id=project.id,
        direction=Direction.OUTFLOW,
        category="Taxes",
        frequency=Frequency.PROVISION,
        payments=schedule,
        counterpart="Tax office",
        description="Corporate tax",
        provision_details=ProvisionDetails(
            final_payment_date=date(2025, 12, 31),
            destination_account_id=provision_account.id,
        ),
    )


@pytest.fixture
def vat_entry(project, provision_account):
    """Provision of 1000 in two transfers, the last one due on the final payment date."""
    return BudgetEntry(
        id="bud_vat",
        project_id=project.id,
        direction=Direction.OUTFLOW,
        category="Taxes",
        frequency=Frequency.PROVISION,
        payments=[
            ExplicitPayment(date=date(2025, 11, 30), amount=Decimal("500")),
            ExplicitPayment(date=date(2025, 12, 31), amount=Decimal("500")),
        ],
        counterpart="Tax office",
        description="VAT",
        provision_details=ProvisionDetails(
            final_payment_date=date(2025, 12, 31),
            destination_account_id=provision_account.id,
        ),
    )


@pytest.fixture
def fees_entry(project):
    """Irregular entry with two lines (300 and 700) on the same day."""
    return BudgetEntry(
        id="bud_fees",
        project_id=project.id,
        direction=Direction.OUTFLOW,
        category="Fees",
        frequency=Frequency.IRREGULAR,
        payments=[
            ExplicitPayment(date=date(2025, 7, 1), amount=Decimal("300")),
            ExplicitPayment(date=date(2025, 7, 1), amount=Decimal("700")),
        ],
    )
