"""GET /v1/ledger - Waterfall-settled billing cycles per vault"""

import time
import logging
from datetime import date
from fastapi import APIRouter, Depends, HTTPException, Query, Request

from cycle_ledger.api.v1.schemas import (
    CycleSchema,
    MasterLedgerResponse,
    UnassignedPaymentSchema,
    VaultLedgerResponse,
)
from cycle_ledger.api.dependencies import get_request_id, get_store_client, get_today, load_snapshot
from cycle_ledger.config import settings
from cycle_ledger.domain.exceptions import CycleTrackingDisabledError, SubAccountNotFoundError
from cycle_ledger.domain.ledger import build_master_ledger, build_vault_ledger, find_sub_account, most_recent_first
from cycle_ledger.domain.models import VaultLedger
from cycle_ledger.infrastructure.clients.store import StoreClient
from cycle_ledger.infrastructure.observability.logging import log_ledger_computed
from cycle_ledger.infrastructure.observability.metrics import record_ledgers

router = APIRouter()


def to_vault_response(ledger: VaultLedger) -> VaultLedgerResponse:
    """Serialize a vault ledger with its cycles most recent first"""
    return VaultLedgerResponse(
        account_id=ledger.account_id,
        account_name=ledger.account_name,
        sub_account_id=ledger.sub_account_id,
        sub_account_name=ledger.sub_account_name,
        total_credit_cents=ledger.total_credit_cents,
        total_debit_cents=ledger.total_debit_cents,
        total_balance_cents=ledger.total_balance_cents,
        cycles=[CycleSchema.from_domain(c) for c in most_recent_first(ledger.cycles)],
        unassigned_payments=[
            UnassignedPaymentSchema(
                transaction_id=p.transaction.transaction_id,
                transaction_title=p.transaction.title,
                transaction_date=p.transaction.date,
                available_cents=p.available_cents,
            )
            for p in ledger.unassigned_payments
        ],
    )


@router.get("/ledger", response_model=MasterLedgerResponse)
async def get_master_ledger(
    request: Request,
    user_id: str = Query(..., min_length=1, description="User identifier"),
    today: date = Depends(get_today),
    store_client: StoreClient = Depends(get_store_client),
):
    """
    Compute cycle history for every sub-account with billing cycles enabled.

    Flow:
    1. Fetch the user's snapshot from the transaction store
    2. Build, settle and fold cycles per vault
    3. Record metrics and logs
    """
    start_time = time.time()
    request_id = get_request_id(request)

    snapshot = await load_snapshot(store_client, user_id, request_id)

    try:
        ledgers = build_master_ledger(snapshot, today, max_periods=settings.max_cycle_periods)
    except Exception as e:
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    duration_ms = (time.time() - start_time) * 1000
    record_ledgers(ledgers, scope="master")
    log_ledger_computed(
        request_id,
        user_id,
        vault_count=len(ledgers),
        cycle_count=sum(len(vault.cycles) for vault in ledgers),
        unsettled_count=sum(1 for vault in ledgers for c in vault.cycles if not c.is_settled),
        duration_ms=duration_ms,
    )

    return MasterLedgerResponse(
        user_id=user_id,
        as_of=today,
        vaults=[to_vault_response(vault) for vault in ledgers],
    )


@router.get("/ledger/{sub_account_id}", response_model=VaultLedgerResponse)
async def get_vault_ledger(
    sub_account_id: str,
    request: Request,
    user_id: str = Query(..., min_length=1, description="User identifier"),
    today: date = Depends(get_today),
    store_client: StoreClient = Depends(get_store_client),
):
    """
    Compute cycle history for a single sub-account.

    Returns:
        404 if the sub-account is unknown, 409 if it has no enabled billing cycle
    """
    start_time = time.time()
    request_id = get_request_id(request)

    snapshot = await load_snapshot(store_client, user_id, request_id)

    try:
        account, sub = find_sub_account(snapshot.accounts, sub_account_id)
        ledger = build_vault_ledger(
            account, sub, snapshot.transactions, today, max_periods=settings.max_cycle_periods
        )

    except SubAccountNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    except CycleTrackingDisabledError as e:
        logging.warning(f"Cycle tracking disabled: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=409, detail=str(e))

    except Exception as e:
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    duration_ms = (time.time() - start_time) * 1000
    record_ledgers([ledger], scope="vault")
    log_ledger_computed(
        request_id,
        user_id,
        vault_count=1,
        cycle_count=len(ledger.cycles),
        unsettled_count=sum(1 for c in ledger.cycles if not c.is_settled),
        duration_ms=duration_ms,
    )

    return to_vault_response(ledger)
