"""Settlement proposals - prefilled transfers that clear a cycle's debt"""

from datetime import date
from typing import Optional

from cycle_ledger.domain.alerts import cycle_alert_id
from cycle_ledger.domain.cycles import MAX_CYCLE_PERIODS
from cycle_ledger.domain.exceptions import CycleNotFoundError, NothingToSettleError
from cycle_ledger.domain.ledger import (
    build_vault_ledger,
    find_sub_account,
    find_unsettled_statement,
    require_cycle_tracking,
)
from cycle_ledger.domain.models import LedgerSnapshot, SettlementProposal, TransactionType
from cycle_ledger.utils.date_utils import month_year_key, short_date_label


def _default_funding_source(snapshot: LedgerSnapshot, target_account_id: str) -> tuple[Optional[str], Optional[str]]:
    """First sub-account of the first other account; falls back to the first account"""
    if not snapshot.accounts:
        return None, None
    source = next((a for a in snapshot.accounts if a.id != target_account_id), snapshot.accounts[0])
    source_sub = source.sub_accounts[0].id if source.sub_accounts else None
    return source.id, source_sub


def build_settlement_proposal(
    snapshot: LedgerSnapshot,
    sub_account_id: str,
    today: date,
    cycle_id: str | None = None,
    from_sub_account_id: str | None = None,
    max_periods: int = MAX_CYCLE_PERIODS,
) -> SettlementProposal:
    """
    Propose a TRANSFER into the sub-account for the amount it still owes.

    With cycle_id the amount is that closed cycle's waterfall outstanding
    debt, proposed as "settle-{cycle_id}". Without it, the last closed
    statement's amount due, proposed under the statement alert's id so
    confirming it acknowledges that alert. Nothing is created or persisted -
    the proposal is for the user to confirm.

    Raises:
        SubAccountNotFoundError: unknown target or funding sub-account
        CycleTrackingDisabledError: target has no enabled billing cycle
        CycleNotFoundError: cycle_id is not one of the target's cycles
        NothingToSettleError: nothing is owed, or cycle_id is the open cycle
    """
    account, sub = find_sub_account(snapshot.accounts, sub_account_id)

    if cycle_id is not None:
        ledger = build_vault_ledger(account, sub, snapshot.transactions, today, max_periods)
        cycle = next((c for c in ledger.cycles if c.cycle_id == cycle_id), None)
        if cycle is None:
            raise CycleNotFoundError(f"Cycle {cycle_id} not found for {sub_account_id}")
        if cycle.end >= today:  # current or future-dated period
            raise NothingToSettleError(f"Cycle {cycle_id} is still open")
        amount = cycle.outstanding_debt_cents
        proposal_id = f"settle-{cycle.cycle_id}"
        title = f"{sub.name} Settlement ({short_date_label(cycle.start)})"
    else:
        require_cycle_tracking(sub)
        statement = find_unsettled_statement(account, sub, snapshot.transactions, today)
        amount = statement.amount_due_cents if statement else 0
        proposal_id = cycle_alert_id(sub.id)
        title = f"{sub.name} Cycle Settlement"

    if amount <= 0:
        raise NothingToSettleError(f"Nothing outstanding for {sub_account_id}")

    if from_sub_account_id is not None:
        source_account, source_sub = find_sub_account(snapshot.accounts, from_sub_account_id)
        from_account_id, from_sub_id = source_account.id, source_sub.id
    else:
        from_account_id, from_sub_id = _default_funding_source(snapshot, account.id)

    return SettlementProposal(
        proposal_id=proposal_id,
        title=title,
        type=TransactionType.TRANSFER,
        amount_cents=amount,
        date=today,
        to_account_id=account.id,
        to_sub_account_id=sub.id,
        from_account_id=from_account_id,
        from_sub_account_id=from_sub_id,
        month_year=month_year_key(today),
        cycle_id=cycle_id,
    )
