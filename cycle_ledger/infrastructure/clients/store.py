"""Transaction store HTTP client for fetching a user's ledger snapshot"""

import logging
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Dict, List

import httpx

from cycle_ledger.config import settings
from cycle_ledger.domain.exceptions import StoreAPIError
from cycle_ledger.domain.models import (
    Account,
    AlertSettings,
    BillingCycleConfig,
    BillReminder,
    Category,
    FinancialGoal,
    LedgerSnapshot,
    SubAccount,
    SubCategory,
    Transaction,
    TransactionType,
)
from cycle_ledger.utils.date_utils import parse_clock_time, parse_iso_date

logger = logging.getLogger(__name__)


def to_cents(amount: Any) -> int:
    """Store amounts are decimal currency units; round half-up to minor units"""
    return int((Decimal(str(amount)) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def parse_transaction(raw: Dict[str, Any]) -> Transaction:
    """
    Map a store transaction record onto the domain model.

    Unparseable date/time values become None (logged) instead of failing the
    snapshot; missing keys and bad amounts or types propagate as errors.
    """
    txn_date = parse_iso_date(raw.get("date"))
    if txn_date is None:
        logger.warning(
            "Unparseable transaction date",
            extra={"transaction_id": raw.get("id"), "raw_date": raw.get("date")},
        )

    return Transaction(
        transaction_id=str(raw["id"]),
        date=txn_date,
        time=parse_clock_time(raw.get("time")),
        amount_cents=abs(to_cents(raw["amount"])),
        type=TransactionType(raw["type"]),
        account_ref=raw.get("subAccountId") or raw["accountId"],
        counter_account_ref=raw.get("toSubAccountId") or raw.get("toAccountId"),
        title=raw.get("title", ""),
        category_id=raw.get("categoryId") or None,
        sub_category_id=raw.get("subCategoryId") or None,
    )


def parse_account(raw: Dict[str, Any]) -> Account:
    sub_accounts: List[SubAccount] = []
    for sub in raw.get("subAccounts", []):
        cycle = sub.get("billingCycle")
        sub_accounts.append(
            SubAccount(
                id=str(sub["id"]),
                name=sub.get("name", ""),
                billing_cycle=BillingCycleConfig(
                    enabled=bool(cycle.get("enabled", False)),
                    start_day=int(cycle.get("startDay") or 0),
                    due_days_after_end=int(cycle.get("dueDaysAfterEnd") or 0),
                    alert_days_before=int(cycle.get("alertDaysBefore") or 0),
                )
                if cycle
                else None,
            )
        )
    return Account(id=str(raw["id"]), name=raw.get("name", ""), sub_accounts=sub_accounts)


def parse_category(raw: Dict[str, Any]) -> Category:
    return Category(
        id=str(raw["id"]),
        name=raw.get("name", ""),
        type=TransactionType(raw.get("type", TransactionType.EXPENSE)),
        budget_limit_cents=to_cents(raw.get("budgetLimit") or 0),
        sub_categories=[
            SubCategory(
                id=str(sub["id"]),
                name=sub.get("name", ""),
                budget_cents=to_cents(sub["budget"]) if sub.get("budget") is not None else None,
            )
            for sub in raw.get("subCategories", [])
        ],
    )


def parse_snapshot(data: Dict[str, Any]) -> LedgerSnapshot:
    """Build a LedgerSnapshot from the store's backup-shaped payload"""
    prefs = data.get("settings") or {}
    return LedgerSnapshot(
        accounts=[parse_account(a) for a in data.get("accounts", [])],
        transactions=[parse_transaction(t) for t in data.get("transactions", [])],
        categories=[parse_category(c) for c in data.get("categories", [])],
        bill_reminders=[
            BillReminder(
                id=str(r["id"]),
                title=r.get("title", ""),
                due_day=int(r["dueDay"]),
                alert_days_before=int(r.get("alertDaysBefore", 0)),
                amount_cents=to_cents(r["amount"]) if r.get("amount") is not None else None,
            )
            for r in data.get("billReminders", [])
        ],
        goals=[
            FinancialGoal(
                id=str(g["id"]),
                name=g.get("name", ""),
                target_cents=to_cents(g.get("targetAmount", 0)),
                current_cents=to_cents(g.get("currentAmount", 0)),
                deadline=parse_iso_date(g.get("deadline")),
                alert_days_before=int(g.get("alertDaysBefore", 3)),
            )
            for g in data.get("goals", [])
        ],
        settings=AlertSettings(
            budget_alert_enabled=bool(prefs.get("budgetAlertEnabled", True)),
            budget_alert_threshold=float(prefs.get("budgetAlertThreshold", 75)),
        ),
    )


class StoreClient:
    """Client for the transaction store snapshot API"""

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url or settings.store_api_base
        self.timeout = timeout or settings.http_timeout_seconds
        self.transport = transport

    async def get_snapshot(self, user_id: str) -> LedgerSnapshot:
        """
        Fetch accounts, transactions, reminders, goals and settings for a user.

        Raises:
            StoreAPIError: On timeout, HTTP errors, or invalid response
        """
        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            try:
                response = await client.get(
                    f"{self.base_url}/store/snapshot",
                    params={"user_id": user_id},
                )
                response.raise_for_status()
                return parse_snapshot(response.json())

            except httpx.TimeoutException as e:
                raise StoreAPIError(f"Store API timeout after {self.timeout}s") from e
            except httpx.HTTPStatusError as e:
                raise StoreAPIError(f"Store API error: {e.response.status_code}") from e
            except httpx.RequestError as e:
                raise StoreAPIError(f"Store API unreachable: {e}") from e
            except (KeyError, ValueError, TypeError, AttributeError, InvalidOperation) as e:
                raise StoreAPIError(f"Invalid snapshot data from store: {e}") from e
