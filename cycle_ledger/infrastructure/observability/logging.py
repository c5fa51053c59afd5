"""Structured JSON logging for ledger, alert and proposal events"""

import logging
import sys
from collections import Counter
from datetime import datetime, timezone
from typing import Any, Dict, Iterable

from pythonjsonlogger import jsonlogger

from cycle_ledger.config import settings
from cycle_ledger.domain.models import Alert, SettlementProposal

# Third-party loggers that are too chatty at INFO
QUIET_LOGGERS = ("httpx", "httpcore", "uvicorn.access")


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """JSON formatter stamping every record with UTC time, level and service name"""

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = settings.service_name


def setup_logging(level: str = "INFO") -> None:
    """Send every record to stdout as one JSON object per line"""
    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(CustomJsonFormatter("%(timestamp)s %(level)s %(name)s %(message)s"))
    root.addHandler(handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def log_ledger_computed(
    request_id: str,
    user_id: str,
    vault_count: int,
    cycle_count: int,
    unsettled_count: int,
    duration_ms: float,
) -> None:
    """Log the outcome of a ledger computation"""
    logging.info(
        "Ledger computed",
        extra={
            "request_id": request_id,
            "user_id": user_id,
            "step": "ledger_complete",
            "vault_count": vault_count,
            "cycle_count": cycle_count,
            "unsettled_count": unsettled_count,
            "duration_ms": duration_ms,
        },
    )


def log_alerts_evaluated(request_id: str, user_id: str, alerts: Iterable[Alert], handled_count: int) -> None:
    by_source = Counter(alert.source for alert in alerts)
    logging.info(
        "Alerts evaluated",
        extra={
            "request_id": request_id,
            "user_id": user_id,
            "step": "alerts_complete",
            "alert_count": sum(by_source.values()),
            "alerts_by_source": dict(by_source),
            "handled_count": handled_count,
        },
    )


def log_settlement_proposed(request_id: str, user_id: str, proposal: SettlementProposal) -> None:
    logging.info(
        "Settlement proposed",
        extra={
            "request_id": request_id,
            "user_id": user_id,
            "step": "proposal_complete",
            "sub_account_id": proposal.to_sub_account_id,
            "cycle_id": proposal.cycle_id,
            "amount_cents": proposal.amount_cents,
        },
    )
