"""POST /v1/settlements/proposal - Prefilled transfer to settle a cycle"""

import logging
from dataclasses import asdict
from datetime import date
from fastapi import APIRouter, Depends, HTTPException, Request

from cycle_ledger.api.v1.schemas import ProposalRequest, ProposalResponse
from cycle_ledger.api.dependencies import get_request_id, get_store_client, load_snapshot
from cycle_ledger.config import settings
from cycle_ledger.domain.exceptions import (
    CycleNotFoundError,
    CycleTrackingDisabledError,
    NothingToSettleError,
    SubAccountNotFoundError,
)
from cycle_ledger.domain.proposals import build_settlement_proposal
from cycle_ledger.infrastructure.clients.store import StoreClient
from cycle_ledger.infrastructure.observability.logging import log_settlement_proposed

router = APIRouter()


@router.post("/settlements/proposal", response_model=ProposalResponse)
async def propose_settlement(
    request_body: ProposalRequest,
    request: Request,
    store_client: StoreClient = Depends(get_store_client),
):
    """
    Build the TRANSFER that would clear a sub-account's outstanding debt.

    The proposal is returned for confirmation only; nothing is written to the
    transaction store.
    """
    request_id = get_request_id(request)
    snapshot = await load_snapshot(store_client, request_body.user_id, request_id)

    try:
        proposal = build_settlement_proposal(
            snapshot,
            request_body.sub_account_id,
            today=request_body.today or date.today(),
            cycle_id=request_body.cycle_id,
            from_sub_account_id=request_body.from_sub_account_id,
            max_periods=settings.max_cycle_periods,
        )

    except (SubAccountNotFoundError, CycleNotFoundError) as e:
        raise HTTPException(status_code=404, detail=str(e))

    except CycleTrackingDisabledError as e:
        raise HTTPException(status_code=409, detail=str(e))

    except NothingToSettleError as e:
        logging.info(f"Nothing to settle: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=422, detail=str(e))

    except Exception as e:
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    log_settlement_proposed(request_id, request_body.user_id, proposal)
    return ProposalResponse(**asdict(proposal))
