"""
E2E tests against the mock transaction store.

The mock store app is mounted in-process through httpx.ASGITransport, so the
real StoreClient parses the on-disk fixture (mocks/store_stub) end to end.

Fixture user_card:
- sa-visa: billing cycle from the 27th, due 15 days after the statement closes
- 1000.00 spent Jan 30, 450.50 spent Mar 1, 1000.00 transferred in Mar 5
- the Mar 1 fuel spend uses 90.1% of the 500.00 Transport budget
- one row with an unparseable date (20.00 expense)
"""

import asyncio
import httpx
import pytest
from fastapi.testclient import TestClient
from cycle_ledger.api.dependencies import get_store_client
from cycle_ledger.domain.exceptions import StoreAPIError
from cycle_ledger.infrastructure.clients.store import StoreClient
from mocks.store_server.main import app as store_app

pytestmark = pytest.mark.integration

TODAY = "2024-03-10"


def mock_store_client() -> StoreClient:
    return StoreClient(base_url="http://mock-store", transport=httpx.ASGITransport(app=store_app))


@pytest.fixture
def e2e_client(client: TestClient) -> TestClient:
    client.app.dependency_overrides[get_store_client] = mock_store_client
    return client


def test_snapshot_fixture_parses():
    snapshot = asyncio.run(mock_store_client().get_snapshot("user_card"))

    assert [a.id for a in snapshot.accounts] == ["acc-savings", "acc-cards"]
    undated = [t for t in snapshot.transactions if t.date is None]
    assert [t.transaction_id for t in undated] == ["tx-5"]


def test_unknown_user_is_store_error():
    with pytest.raises(StoreAPIError):
        asyncio.run(mock_store_client().get_snapshot("user_nobody"))


def test_user_card_ledger(e2e_client: TestClient):
    """
    The Mar 5 transfer first clears March's own 450.50; the remaining 549.50
    flows back to the January statement, leaving 450.50 owed there.
    """
    response = e2e_client.get("/v1/ledger", params={"user_id": "user_card", "today": TODAY})

    assert response.status_code == 200
    vaults = response.json()["vaults"]
    assert [v["sub_account_id"] for v in vaults] == ["sa-visa"]

    vault = vaults[0]
    assert vault["total_credit_cents"] == 100000
    assert vault["total_debit_cents"] == 147050  # includes the undated row
    assert vault["unassigned_payments"] == []

    current, statement = vault["cycles"]
    assert current["paid_local_cents"] == 45050
    assert current["is_settled"] is True
    assert statement["external_settlements"][0]["transaction_id"] == "tx-2"
    assert statement["external_settlements"][0]["transaction_title"] == "Card payment"
    assert statement["external_settlements"][0]["amount_applied_cents"] == 54950
    assert statement["outstanding_debt_cents"] == 45050
    assert statement["cumulative_at_end_cents"] == -45050
    assert current["cumulative_at_end_cents"] == -45050


def test_user_card_alerts(e2e_client: TestClient):
    """
    Transport nearly over budget, rent due in two days and the trip goal
    deadline. The statement itself was paid by its due date.
    """
    response = e2e_client.get("/v1/alerts", params={"user_id": "user_card", "today": TODAY})

    assert response.status_code == 200
    alerts = response.json()["alerts"]
    assert [(a["source"], a["alert_id"]) for a in alerts] == [
        ("CATEGORY_BUDGET", "budget-cat-cat-transport"),
        ("BILL", "rem-rent"),
        ("GOAL_DEADLINE", "goal-near-goal-trip"),
    ]
    transport = alerts[0]
    assert transport["severity"] == "WARNING"
    assert (transport["spent_cents"], transport["limit_cents"], transport["usage_percent"]) == (45050, 50000, 90.1)
    assert alerts[2]["severity"] == "CRITICAL"
    assert (alerts[2]["target_cents"], alerts[2]["current_cents"]) == (200000, 50000)


def test_user_card_proposal_for_closed_cycle(e2e_client: TestClient):
    response = e2e_client.post(
        "/v1/settlements/proposal",
        json={"user_id": "user_card", "sub_account_id": "sa-visa", "cycle_id": "sa-visa-1706313600000", "today": TODAY},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["amount_cents"] == 45050
    assert data["proposal_id"] == "settle-sa-visa-1706313600000"
    assert data["title"] == "Visa Platinum Settlement (Jan 27)"
    assert (data["from_account_id"], data["from_sub_account_id"]) == ("acc-savings", "sa-savings-primary")


def test_unknown_user_maps_to_503(e2e_client: TestClient):
    response = e2e_client.get("/v1/ledger", params={"user_id": "user_nobody"})
    assert response.status_code == 503


def test_user_card_current_cycle_is_not_proposed(e2e_client: TestClient):
    response = e2e_client.post(
        "/v1/settlements/proposal",
        json={"user_id": "user_card", "sub_account_id": "sa-visa", "cycle_id": "sa-visa-1708992000000", "today": TODAY},
    )
    assert response.status_code == 422


@pytest.mark.parametrize("user_id", ["../secret", "..%2Fsecret", "user card", "user.card"])
def test_mock_store_rejects_path_like_user_ids(user_id):
    response = TestClient(store_app).get("/store/snapshot", params={"user_id": user_id})
    assert response.status_code == 400


def test_mock_store_has_no_user_listing():
    assert TestClient(store_app).get("/store/users").status_code == 404
