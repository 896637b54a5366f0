"""
API tests for the planner routes.

The SQL-backed planner dependency is replaced by one sharing a memory store,
so every test starts from the seed state.
"""

import pytest
import pytest_asyncio
from decimal import Decimal

from httpx import ASGITransport, AsyncClient

from cashplan.main import app
from cashplan.persistence import MemorySnapshotStore
from cashplan.services.planner import PlannerService, get_planner_service

TODAY = "2025-06-15"


@pytest_asyncio.fixture
async def client():
    store = MemorySnapshotStore(key="test")
    app.dependency_overrides[get_planner_service] = lambda: PlannerService(store)

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


# =============================================================================
# TEST: STATE AND COMMANDS
# =============================================================================

class TestPlannerRoutes:
    """Tests for /api/state and /api/commands."""

    @pytest.mark.asyncio
    async def test_health(self, client):
        response = await client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "healthy"}

    @pytest.mark.asyncio
    async def test_seed_state(self, client):
        response = await client.get("/api/state", params={"today": TODAY})

        assert response.status_code == 200
        names = [p["name"] for p in response.json()["projects"]]
        assert names == ["My Business 2025", "Personal Budget"]

    @pytest.mark.asyncio
    async def test_accepted_command_is_persisted(self, client):
        response = await client.post(
            "/api/commands",
            params={"today": TODAY},
            json={"type": "add_project", "name": "Side business"},
        )
        assert response.status_code == 200
        assert response.json()["accepted"] is True

        state = (await client.get("/api/state", params={"today": TODAY})).json()
        assert "Side business" in [p["name"] for p in state["projects"]]

    @pytest.mark.asyncio
    async def test_blocked_command(self, client):
        response = await client.post(
            "/api/commands",
            params={"today": TODAY},
            json={"type": "add_scenario", "project_id": "proj_missing", "name": "What if"},
        )

        assert response.status_code == 409
        assert response.json()["detail"]["code"] == "not_found"
        assert response.json()["detail"]["entity_id"] == "proj_missing"

    @pytest.mark.asyncio
    async def test_pay_obligation_from_seed_state(self, client):
        state = (await client.get("/api/state", params={"today": TODAY})).json()
        rent = next(o for o in state["obligations"] if o["budget_id"] == "bud_office_rent")

        response = await client.post(
            "/api/commands",
            params={"today": TODAY},
            json={
                "type": "record_payment",
                "obligation_id": rent["id"],
                "payment": {"paid_amount": "1200", "payment_date": rent["due_date"]},
            },
        )

        assert response.status_code == 200
        paid = next(o for o in response.json()["state"]["obligations"] if o["id"] == rent["id"])
        assert paid["status"] == "paid"

    @pytest.mark.asyncio
    async def test_invalid_command(self, client):
        response = await client.post("/api/commands", json={"type": "launch_rocket"})
        assert response.status_code == 422


# =============================================================================
# TEST: READ ROUTES
# =============================================================================

class TestReadRoutes:
    """Tests for entry, obligation, forecast and scenario reads."""

    @pytest.mark.asyncio
    async def test_entry_amount(self, client):
        response = await client.get(
            "/api/entries/bud_office_rent/amount",
            params={"start": "2025-03-01", "end": "2025-04-01", "today": TODAY},
        )

        assert response.status_code == 200
        assert Decimal(response.json()["amount"]) == Decimal("1200")

    @pytest.mark.asyncio
    async def test_entry_amount_rejects_empty_window(self, client):
        response = await client.get(
            "/api/entries/bud_office_rent/amount",
            params={"start": "2025-03-01", "end": "2025-03-01"},
        )
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_unknown_entry(self, client):
        response = await client.get(
            "/api/entries/bud_missing/amount",
            params={"start": "2025-03-01", "end": "2025-04-01", "today": TODAY},
        )
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_entry_occurrences(self, client):
        response = await client.get(
            "/api/entries/bud_office_rent/occurrences",
            params={"horizon_end": "2025-12-31", "today": TODAY},
        )

        occurrences = response.json()["occurrences"]
        assert len(occurrences) == 12
        assert occurrences[0]["due_date"] == "2025-01-05"

    @pytest.mark.asyncio
    async def test_overdue(self, client):
        response = await client.get("/api/obligations/overdue", params={"today": TODAY})

        overdue = response.json()
        assert len(overdue) == 11
        assert overdue[0]["obligation"]["due_date"] == "2025-01-05"
        assert overdue[0]["days_overdue"] == 161

    @pytest.mark.asyncio
    async def test_forecast(self, client):
        response = await client.get(
            "/api/forecast",
            params={"project_id": "proj_business", "today": TODAY},
        )

        assert response.status_code == 200
        base = response.json()["base"]
        buckets = base["buckets"]
        assert Decimal(base["starting_balance"]) == Decimal("12700")
        assert len(buckets) == 12
        assert buckets[0]["label"] == "April 2025"
        assert [b["is_past"] for b in buckets[:3]] == [True, True, False]
        assert Decimal(buckets[1]["closing_balance"]) == Decimal("12700")
        assert Decimal(buckets[2]["closing_balance"]) == Decimal("16500")

    @pytest.mark.asyncio
    async def test_forecast_unknown_project(self, client):
        response = await client.get("/api/forecast", params={"project_id": "proj_missing", "today": TODAY})
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_scenario_entries(self, client):
        result = (await client.post(
            "/api/commands",
            params={"today": TODAY},
            json={"type": "add_scenario", "project_id": "proj_business", "name": "Higher rent"},
        )).json()
        scenario_id = result["state"]["scenarios"][-1]["id"]

        await client.post(
            "/api/commands",
            params={"today": TODAY},
            json={
                "type": "save_scenario_delta",
                "scenario_id": scenario_id,
                "previous_id": "bud_office_rent",
                "delta": {"amount": "1500"},
            },
        )
        response = await client.get(f"/api/scenarios/{scenario_id}/entries", params={"today": TODAY})

        entries = {e["id"]: e for e in response.json()}
        assert len(entries) == 2
        assert Decimal(entries["bud_office_rent"]["amount"]) == Decimal("1500")

    @pytest.mark.asyncio
    async def test_unknown_scenario_entries(self, client):
        response = await client.get("/api/scenarios/scn_missing/entries")
        assert response.status_code == 404
