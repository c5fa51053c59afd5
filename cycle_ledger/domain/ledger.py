"""Vault ledger - combines cycles, waterfall settlement and totals per sub-account"""

from datetime import date, timedelta
from typing import Iterable, List, Optional

from cycle_ledger.domain.cycles import (
    MAX_CYCLE_PERIODS,
    build_cycles,
    cycle_start_for,
    is_inflow,
    is_outflow,
    resolve_start_day,
    sub_account_transactions,
)
from cycle_ledger.domain.exceptions import CycleTrackingDisabledError, SubAccountNotFoundError
from cycle_ledger.domain.models import (
    Account,
    BillingCycleConfig,
    CyclePeriod,
    LedgerSnapshot,
    StatementDue,
    SubAccount,
    Transaction,
    VaultLedger,
)
from cycle_ledger.domain.settlement import allocate_payments, collect_payments
from cycle_ledger.utils.date_utils import anchored_date, shift_month


def find_sub_account(accounts: Iterable[Account], sub_account_id: str) -> tuple[Account, SubAccount]:
    """Locate a sub-account and its parent account"""
    for account in accounts:
        for sub in account.sub_accounts:
            if sub.id == sub_account_id:
                return account, sub
    raise SubAccountNotFoundError(f"Sub-account {sub_account_id} not found")


def require_cycle_tracking(sub_account: SubAccount) -> BillingCycleConfig:
    """Enabled billing cycle of the sub-account, or CycleTrackingDisabledError"""
    config = sub_account.billing_cycle
    if config is None or not config.enabled:
        raise CycleTrackingDisabledError(f"Billing cycle is not enabled for {sub_account.id}")
    return config


def compute_totals(sub_account_id: str, transactions: Iterable[Transaction]) -> tuple[int, int, int]:
    """
    Lifetime credit, debit and balance for a sub-account.

    Independent of cycle membership: undated transactions are counted too.

    Returns: (total_credit_cents, total_debit_cents, total_balance_cents)
    """
    credit = 0
    debit = 0
    for txn in transactions:
        if is_inflow(txn, sub_account_id):
            credit += txn.amount_cents
        if is_outflow(txn, sub_account_id):
            debit += txn.amount_cents
    return credit, debit, credit - debit


def apply_cumulative(cycles: Iterable[CyclePeriod]) -> None:
    """Running net (paid - spent + external credit) folded oldest-first into each cycle"""
    running = 0
    for cycle in sorted(cycles, key=lambda c: c.start):
        running += cycle.paid_local_cents - cycle.spent_local_cents + cycle.external_credit_cents
        cycle.cumulative_at_end_cents = running


def most_recent_first(cycles: Iterable[CyclePeriod]) -> List[CyclePeriod]:
    """Display ordering only; the cumulative fold is always computed oldest-first"""
    return sorted(cycles, key=lambda c: c.start, reverse=True)


def build_vault_ledger(
    account: Account,
    sub_account: SubAccount,
    transactions: Iterable[Transaction],
    today: date,
    max_periods: int = MAX_CYCLE_PERIODS,
) -> VaultLedger:
    """
    Main entry point: settled cycle history and totals for one sub-account.

    Pure with respect to its inputs; every call builds fresh cycle objects,
    so identical inputs and the same today give identical results.

    Raises:
        CycleTrackingDisabledError: sub-account has no enabled billing cycle
    """
    config = require_cycle_tracking(sub_account)
    sub_txns = sub_account_transactions(sub_account.id, transactions)
    total_credit, total_debit, total_balance = compute_totals(sub_account.id, sub_txns)

    cycles = build_cycles(sub_account.id, sub_txns, config, today, max_periods=max_periods)
    payments = collect_payments(sub_account.id, sub_txns)
    unassigned = allocate_payments(cycles, payments)
    apply_cumulative(cycles)

    return VaultLedger(
        account_id=account.id,
        account_name=account.name,
        sub_account_id=sub_account.id,
        sub_account_name=sub_account.name,
        cycles=cycles,
        total_credit_cents=total_credit,
        total_debit_cents=total_debit,
        total_balance_cents=total_balance,
        unassigned_payments=unassigned,
    )


def build_master_ledger(
    snapshot: LedgerSnapshot,
    today: date,
    max_periods: int = MAX_CYCLE_PERIODS,
) -> List[VaultLedger]:
    """Vault ledgers for every sub-account with cycle tracking enabled"""
    ledgers = []
    for account in snapshot.accounts:
        for sub in account.sub_accounts:
            if sub.billing_cycle is None or not sub.billing_cycle.enabled:
                continue
            ledgers.append(build_vault_ledger(account, sub, snapshot.transactions, today, max_periods))
    return ledgers


def find_unsettled_statement(
    account: Account,
    sub_account: SubAccount,
    transactions: Iterable[Transaction],
    today: date,
) -> Optional[StatementDue]:
    """
    Outstanding amount of the statement window that closed before today's cycle.

    Single-lookback special case of the waterfall: spend dated inside the
    previous window is netted against payments dated from the window's start
    through its due date. No history iteration, no cross-cycle allocation.

    Returns:
        StatementDue when a positive amount is outstanding, else None
    """
    config = sub_account.billing_cycle
    if config is None or not config.enabled:
        return None

    start_day = resolve_start_day(config)
    active_start = cycle_start_for(today, start_day)
    year, month = shift_month(active_start.year, active_start.month, -1)
    window_start = anchored_date(year, month, start_day)
    window_end = active_start - timedelta(days=1)
    due_date = window_end + timedelta(days=config.due_days_after_end)

    spent = 0
    paid = 0
    for txn in sub_account_transactions(sub_account.id, transactions):
        if txn.date is None:
            continue
        if is_outflow(txn, sub_account.id) and window_start <= txn.date <= window_end:
            spent += txn.amount_cents
        if is_inflow(txn, sub_account.id) and window_start <= txn.date <= due_date:
            paid += txn.amount_cents

    amount_due = max(0, spent - paid)
    if amount_due <= 0:
        return None

    return StatementDue(
        account_id=account.id,
        sub_account_id=sub_account.id,
        sub_account_name=sub_account.name,
        cycle_start=window_start,
        cycle_end=window_end,
        due_date=due_date,
        spent_cents=spent,
        paid_cents=paid,
        amount_due_cents=amount_due,
    )
