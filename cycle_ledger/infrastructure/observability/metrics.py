"""Prometheus metrics for ledger computations, alerts and store access"""

from typing import Iterable

from prometheus_client import Counter, Histogram

from cycle_ledger.domain.models import Alert, VaultLedger

# Ledger metrics
ledger_computation_counter = Counter(
    "cycle_ledger_computations_total",
    "Total vault ledger computations",
    ["scope"],  # master | vault
)

cycles_built_histogram = Histogram(
    "cycle_ledger_cycles_per_vault",
    "Billing cycles built per vault ledger",
    buckets=[1, 3, 6, 12, 24, 60, 120, 240],
)

unsettled_cycle_counter = Counter(
    "cycle_ledger_unsettled_cycles_total",
    "Cycles left with outstanding debt after settlement",
)

# Alert metrics
alert_counter = Counter(
    "cycle_ledger_alerts_total",
    "Alerts raised by source",
    ["source"],  # BUDGET | CATEGORY_BUDGET | BILL | GOAL_DEADLINE | CYCLE_SETTLEMENT
)

# Store API metrics
store_fetch_failures_counter = Counter(
    "store_fetch_failures_total",
    "Failed transaction store calls",
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_ledgers(ledgers: Iterable[VaultLedger], scope: str) -> None:
    """Record cycle counts and unsettled cycles for computed vault ledgers"""
    ledger_computation_counter.labels(scope=scope).inc()
    for ledger in ledgers:
        cycles_built_histogram.observe(len(ledger.cycles))
        unsettled = sum(1 for c in ledger.cycles if not c.is_settled)
        if unsettled:
            unsettled_cycle_counter.inc(unsettled)


def record_alerts(alerts: Iterable[Alert]) -> None:
    """Count raised alerts per source"""
    for alert in alerts:
        alert_counter.labels(source=alert.source).inc()
