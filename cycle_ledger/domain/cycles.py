"""Cycle builder - partitions sub-account history into monthly statement periods"""

from datetime import date, time, timedelta
from typing import Iterable, List

from cycle_ledger.domain.models import BillingCycleConfig, CyclePeriod, Transaction, TransactionType
from cycle_ledger.utils.date_utils import anchored_date, epoch_millis, shift_month

DEFAULT_START_DAY = 27
MAX_CYCLE_PERIODS = 240  # 20 years of monthly statements


def resolve_start_day(config: BillingCycleConfig) -> int:
    """Configured start day, or the default when unset or zero"""
    return config.start_day or DEFAULT_START_DAY


def is_outflow(txn: Transaction, sub_account_id: str) -> bool:
    """Spend against the sub-account: expenses on it, or transfers debiting it"""
    if txn.account_ref != sub_account_id:
        return False
    return txn.type in (TransactionType.EXPENSE, TransactionType.TRANSFER)


def is_inflow(txn: Transaction, sub_account_id: str) -> bool:
    """Credit to the sub-account: income on it, or transfers crediting it"""
    if txn.type == TransactionType.INCOME:
        return txn.account_ref == sub_account_id
    if txn.type == TransactionType.TRANSFER:
        return txn.counter_account_ref == sub_account_id
    return False


def sub_account_transactions(sub_account_id: str, transactions: Iterable[Transaction]) -> List[Transaction]:
    """
    Transactions touching the sub-account on either side, ordered by date and time.

    Undated transactions sort last; the sort is stable so store order breaks ties.
    """
    touching = [
        t for t in transactions
        if t.account_ref == sub_account_id or t.counter_account_ref == sub_account_id
    ]
    return sorted(
        touching,
        key=lambda t: (t.date is None, t.date or date.min, t.time or time.min),
    )


def cycle_start_for(day: date, start_day: int) -> date:
    """
    Start of the cycle containing day: the latest start_day on or before it.

    start_day is clamped to the length of each month, so a 31st start day
    opens April's cycle on the 30th and February's on the 28th/29th.
    """
    candidate = anchored_date(day.year, day.month, start_day)
    if day < candidate:
        year, month = shift_month(day.year, day.month, -1)
        candidate = anchored_date(year, month, start_day)
    return candidate


def next_cycle_start(start: date, start_day: int) -> date:
    """Start of the period following the one opening on start"""
    year, month = shift_month(start.year, start.month, 1)
    return anchored_date(year, month, start_day)


def build_cycles(
    sub_account_id: str,
    transactions: Iterable[Transaction],
    config: BillingCycleConfig,
    today: date,
    max_periods: int = MAX_CYCLE_PERIODS,
) -> List[CyclePeriod]:
    """
    Build the chronological cycle skeletons for a sub-account.

    Requirements:
    - Periods are contiguous monthly windows from the earliest dated
      transaction's cycle through today's cycle (or the latest transaction's,
      if it is later)
    - At most max_periods are built; the oldest are dropped beyond the cap
    - Each dated transaction lands in exactly one window; undated ones in none
    - spent/paid are raw in-window sums, not yet waterfall-adjusted

    Returns:
        Ordered list of CyclePeriod, empty when there is no dated history
    """
    start_day = resolve_start_day(config)
    dated = [t for t in sub_account_transactions(sub_account_id, transactions) if t.date is not None]
    if not dated:
        return []

    first_start = cycle_start_for(dated[0].date, start_day)
    last_start = max(cycle_start_for(today, start_day), cycle_start_for(dated[-1].date, start_day))

    # Drop the oldest periods when history exceeds the cap
    year, month = shift_month(last_start.year, last_start.month, -(max_periods - 1))
    current = max(first_start, anchored_date(year, month, start_day))

    cycles: List[CyclePeriod] = []
    while current <= last_start and len(cycles) < max_periods:
        following = next_cycle_start(current, start_day)
        end = following - timedelta(days=1)
        local = [t for t in dated if current <= t.date <= end]

        cycles.append(
            CyclePeriod(
                cycle_id=f"{sub_account_id}-{epoch_millis(current)}",
                start=current,
                end=end,
                due_date=end + timedelta(days=config.due_days_after_end),
                spent_local_cents=sum(t.amount_cents for t in local if is_outflow(t, sub_account_id)),
                paid_local_cents=sum(t.amount_cents for t in local if is_inflow(t, sub_account_id)),
                is_current=current <= today <= end,
                local_transactions=local,
            )
        )
        current = following

    return cycles
