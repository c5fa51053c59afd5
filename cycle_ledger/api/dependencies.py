"""Dependency injection for FastAPI endpoints"""

import logging
from datetime import date
from typing import Optional

from fastapi import HTTPException, Query, Request
from cycle_ledger.domain.exceptions import StoreAPIError
from cycle_ledger.domain.models import LedgerSnapshot
from cycle_ledger.infrastructure.clients.store import StoreClient
from cycle_ledger.infrastructure.observability.metrics import store_fetch_failures_counter


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_store_client() -> StoreClient:
    """Provide transaction store client instance"""
    return StoreClient()


def get_today(today: Optional[date] = Query(None, description="Reference date, defaults to the server date")) -> date:
    """Reference "today" for cycle computations, injectable for replay and testing"""
    return today or date.today()


async def load_snapshot(store_client: StoreClient, user_id: str, request_id: str) -> LedgerSnapshot:
    """Fetch the user's snapshot, mapping store failures to 503"""
    try:
        return await store_client.get_snapshot(user_id)
    except StoreAPIError as e:
        store_fetch_failures_counter.inc()
        logging.error(f"Store API error: {e}", extra={"request_id": request_id, "user_id": user_id})
        raise HTTPException(status_code=503, detail="Transaction store unavailable")
