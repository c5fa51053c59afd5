"""Waterfall settlement - assigns payments to the cycles whose debt they settle"""

from typing import Iterable, List

from cycle_ledger.domain.cycles import is_inflow, sub_account_transactions
from cycle_ledger.domain.models import CyclePeriod, ExternalSettlement, PaymentAllocation, Transaction


def collect_payments(sub_account_id: str, transactions: Iterable[Transaction]) -> List[PaymentAllocation]:
    """Inflows of the sub-account in date+time order, each fully available"""
    return [
        PaymentAllocation(transaction=t, available_cents=t.amount_cents)
        for t in sub_account_transactions(sub_account_id, transactions)
        if is_inflow(t, sub_account_id)
    ]


def _dated_within(payment: PaymentAllocation, cycle: CyclePeriod) -> bool:
    return cycle.start <= payment.transaction.date <= cycle.end


def allocate_payments(cycles: List[CyclePeriod], payments: List[PaymentAllocation]) -> List[PaymentAllocation]:
    """
    Settle cycle debt from the payment pool, filling in each cycle in place.

    Waterfall order:
    1. Local pass - every cycle first claims payments dated inside its own
       window. Own-cycle claims win over any cross-cycle claim.
    2. External pass - cycles with debt left, oldest first, claim the
       remaining value of payments dated outside their window (earlier or
       later), taking payments in date+time order until the debt is cleared.

    A payment may be split over several cycles; its available_cents is shared
    across the whole loop. Surplus value stays in available_cents.

    Args:
        cycles: Chronological skeletons from build_cycles
        payments: Chronological pool from collect_payments (mutated)

    Returns:
        Payments no cycle can claim: undated, or dated before the first cycle
    """
    if not cycles:
        return list(payments)

    first_start = cycles[0].start
    pool = [p for p in payments if p.transaction.date is not None and p.transaction.date >= first_start]
    unassignable = [p for p in payments if p.transaction.date is None or p.transaction.date < first_start]

    # 1. Local pass
    remaining_debt: List[int] = []
    for cycle in cycles:
        debt = cycle.spent_local_cents
        cycle.paid_local_cents = 0
        cycle.external_settlements = []

        for payment in pool:
            if debt <= 0:
                break
            if payment.available_cents <= 0 or not _dated_within(payment, cycle):
                continue
            applied = min(debt, payment.available_cents)
            payment.available_cents -= applied
            debt -= applied
            cycle.paid_local_cents += applied

        remaining_debt.append(debt)

    # 2. External pass, earliest cycle first
    for cycle, debt in zip(cycles, remaining_debt):
        for payment in pool:
            if debt <= 0:
                break
            if payment.available_cents <= 0 or _dated_within(payment, cycle):
                continue
            applied = min(debt, payment.available_cents)
            payment.available_cents -= applied
            debt -= applied
            cycle.external_settlements.append(
                ExternalSettlement(transaction=payment.transaction, amount_applied_cents=applied)
            )

        cycle.outstanding_debt_cents = max(0, debt)
        cycle.is_settled = cycle.outstanding_debt_cents <= 0

    return unassignable
