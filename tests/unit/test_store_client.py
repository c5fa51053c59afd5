"""Unit tests for the transaction store client"""

import asyncio
import httpx
import pytest
from datetime import date, time
from cycle_ledger.domain.exceptions import StoreAPIError
from cycle_ledger.domain.models import TransactionType
from cycle_ledger.infrastructure.clients.store import StoreClient, parse_snapshot, parse_transaction, to_cents


@pytest.fixture
def store_payload() -> dict:
    return {
        "accounts": [
            {
                "id": "acc-cards",
                "name": "Cards",
                "subAccounts": [
                    {
                        "id": "sa-card",
                        "name": "Visa",
                        "billingCycle": {"enabled": True, "startDay": 27, "dueDaysAfterEnd": 15},
                    },
                    {"id": "sa-debit", "name": "Debit"},
                ],
            }
        ],
        "transactions": [
            {
                "id": "tx-1",
                "date": "2024-03-01",
                "time": "07:45",
                "amount": 450.5,
                "type": "EXPENSE",
                "accountId": "acc-cards",
                "subAccountId": "sa-card",
                "title": "Fuel",
                "categoryId": "cat-transport",
                "subCategoryId": "sub-fuel",
            },
            {
                "id": "tx-2",
                "date": "2024-03-05",
                "amount": "-100.005",
                "type": "TRANSFER",
                "accountId": "acc-bank",
                "toAccountId": "acc-cards",
                "toSubAccountId": "sa-card",
            },
        ],
        "categories": [
            {
                "id": "cat-transport",
                "name": "Transport",
                "type": "EXPENSE",
                "budgetLimit": 500,
                "subCategories": [{"id": "sub-fuel", "name": "Fuel", "budget": 99.99}, {"id": "sub-taxi", "name": "Taxi"}],
            },
            {"id": "cat-salary", "name": "Salary", "type": "INCOME"},
        ],
        "billReminders": [{"id": "rem-rent", "title": "Rent", "dueDay": 12, "alertDaysBefore": 3, "amount": 1200}],
        "goals": [{"id": "trip", "name": "Trip", "targetAmount": 2000, "currentAmount": 500, "deadline": "2024-03-12"}],
        "settings": {"budgetAlertEnabled": False, "budgetAlertThreshold": 90},
    }


def test_to_cents_rounds_half_up():
    assert to_cents(450.5) == 45050
    assert to_cents("10.005") == 1001
    assert to_cents(3) == 300


def test_parse_snapshot(store_payload):
    snapshot = parse_snapshot(store_payload)

    card, debit = snapshot.accounts[0].sub_accounts
    assert card.billing_cycle.start_day == 27
    assert card.billing_cycle.due_days_after_end == 15
    assert card.billing_cycle.alert_days_before == 0
    assert debit.billing_cycle is None

    expense, transfer = snapshot.transactions
    assert expense.amount_cents == 45050
    assert expense.time == time(7, 45)
    assert expense.account_ref == "sa-card"
    assert transfer.type == TransactionType.TRANSFER
    assert transfer.amount_cents == 10001  # absolute value
    assert transfer.account_ref == "acc-bank"  # no sub-account on the debit side
    assert transfer.counter_account_ref == "sa-card"
    assert (expense.title, expense.category_id, expense.sub_category_id) == ("Fuel", "cat-transport", "sub-fuel")
    assert (transfer.title, transfer.category_id, transfer.sub_category_id) == ("", None, None)

    transport, salary = snapshot.categories
    assert transport.type == TransactionType.EXPENSE
    assert transport.budget_limit_cents == 50000
    assert [(s.id, s.budget_cents) for s in transport.sub_categories] == [("sub-fuel", 9999), ("sub-taxi", None)]
    assert salary.type == TransactionType.INCOME
    assert salary.budget_limit_cents == 0
    assert salary.sub_categories == []

    assert snapshot.bill_reminders[0].amount_cents == 120000
    assert snapshot.goals[0].deadline == date(2024, 3, 12)
    assert snapshot.goals[0].alert_days_before == 3
    assert snapshot.settings.budget_alert_enabled is False
    assert snapshot.settings.budget_alert_threshold == 90.0


def test_unparseable_date_becomes_none():
    txn = parse_transaction(
        {"id": "tx-bad", "date": "not-a-date", "amount": 20, "type": "EXPENSE", "accountId": "acc", "subAccountId": "sa"}
    )
    assert txn.date is None
    assert txn.amount_cents == 2000


def test_missing_fields_raise():
    with pytest.raises(KeyError):
        parse_transaction({"id": "tx-1", "date": "2024-03-01", "type": "EXPENSE", "accountId": "acc"})


def test_get_snapshot_success(store_payload):
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/store/snapshot"
        assert request.url.params["user_id"] == "user_card"
        return httpx.Response(200, json=store_payload)

    client = StoreClient(base_url="http://store.test", transport=httpx.MockTransport(handler))
    snapshot = asyncio.run(client.get_snapshot("user_card"))

    assert [t.transaction_id for t in snapshot.transactions] == ["tx-1", "tx-2"]


@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(500, json={"detail": "boom"}),
        httpx.Response(200, json={"transactions": [{"id": "tx-1"}]}),
        httpx.Response(200, json={"transactions": [{"id": "t", "amount": "abc", "type": "EXPENSE", "accountId": "a"}]}),
    ],
)
def test_get_snapshot_failures_raise_store_error(response):
    client = StoreClient(base_url="http://store.test", transport=httpx.MockTransport(lambda request: response))

    with pytest.raises(StoreAPIError):
        asyncio.run(client.get_snapshot("user_card"))


def test_get_snapshot_unreachable():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    client = StoreClient(base_url="http://store.test", transport=httpx.MockTransport(handler))

    with pytest.raises(StoreAPIError, match="unreachable"):
        asyncio.run(client.get_snapshot("user_card"))
