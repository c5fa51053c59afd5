"""Domain models - pure Python dataclasses representing business entities"""

from dataclasses import dataclass, field
from datetime import date, time
from enum import Enum
from typing import List, Literal, Optional, Union


class TransactionType(str, Enum):
    INCOME = "INCOME"
    EXPENSE = "EXPENSE"
    TRANSFER = "TRANSFER"


class Severity(str, Enum):
    CRITICAL = "CRITICAL"
    WARNING = "WARNING"


@dataclass
class Transaction:
    """Ledger entry read from the transaction store"""

    transaction_id: str
    date: Optional[date]  # None when the store value could not be parsed
    time: Optional[time]
    amount_cents: int
    type: TransactionType
    account_ref: str  # sub-account recorded against (debited for transfers)
    counter_account_ref: Optional[str] = None  # sub-account credited by a transfer
    title: str = ""
    category_id: Optional[str] = None
    sub_category_id: Optional[str] = None


@dataclass
class BillingCycleConfig:
    """Statement cycle settings for a revolving sub-account"""

    enabled: bool
    start_day: int = 27
    due_days_after_end: int = 0
    alert_days_before: int = 0


@dataclass
class SubAccount:
    id: str
    name: str
    billing_cycle: Optional[BillingCycleConfig] = None


@dataclass
class Account:
    id: str
    name: str
    sub_accounts: List[SubAccount] = field(default_factory=list)


@dataclass
class SubCategory:
    id: str
    name: str
    budget_cents: Optional[int] = None


@dataclass
class Category:
    """Spending category with an optional monthly budget (0 means no budget)"""

    id: str
    name: str
    type: TransactionType
    budget_limit_cents: int = 0
    sub_categories: List[SubCategory] = field(default_factory=list)


@dataclass
class BillReminder:
    id: str
    title: str
    due_day: int
    alert_days_before: int
    amount_cents: Optional[int] = None


@dataclass
class FinancialGoal:
    id: str
    name: str
    target_cents: int
    current_cents: int
    deadline: Optional[date]
    alert_days_before: int = 3


@dataclass
class AlertSettings:
    budget_alert_enabled: bool = True
    budget_alert_threshold: float = 75.0  # percent of monthly income


@dataclass
class HandledReminder:
    """User acknowledgement of an alert for a given month ("M-YYYY")"""

    reminder_id: str
    month_year: str
    action: Literal["COMPLETED", "DISMISSED"]


@dataclass
class LedgerSnapshot:
    """Everything the transaction store holds for one user"""

    accounts: List[Account] = field(default_factory=list)
    transactions: List[Transaction] = field(default_factory=list)
    categories: List[Category] = field(default_factory=list)
    bill_reminders: List[BillReminder] = field(default_factory=list)
    goals: List[FinancialGoal] = field(default_factory=list)
    settings: AlertSettings = field(default_factory=AlertSettings)


@dataclass
class ExternalSettlement:
    """Payment dated outside a cycle's window that was applied to its debt"""

    transaction: Transaction
    amount_applied_cents: int


@dataclass
class CyclePeriod:
    """One monthly billing period; bounds are inclusive calendar dates"""

    cycle_id: str
    start: date
    end: date
    due_date: date
    spent_local_cents: int
    paid_local_cents: int
    is_current: bool
    local_transactions: List[Transaction] = field(default_factory=list)
    external_settlements: List[ExternalSettlement] = field(default_factory=list)
    outstanding_debt_cents: int = 0
    is_settled: bool = False
    cumulative_at_end_cents: int = 0

    @property
    def external_credit_cents(self) -> int:
        return sum(s.amount_applied_cents for s in self.external_settlements)


@dataclass
class PaymentAllocation:
    """Inflow transaction with the part of its value not yet assigned"""

    transaction: Transaction
    available_cents: int


@dataclass
class VaultLedger:
    """Cycle history and lifetime totals for one sub-account"""

    account_id: str
    account_name: str
    sub_account_id: str
    sub_account_name: str
    cycles: List[CyclePeriod]  # chronological
    total_credit_cents: int
    total_debit_cents: int
    total_balance_cents: int
    unassigned_payments: List[PaymentAllocation] = field(default_factory=list)


@dataclass
class StatementDue:
    """Outstanding amount of the last closed statement window"""

    account_id: str
    sub_account_id: str
    sub_account_name: str
    cycle_start: date
    cycle_end: date
    due_date: date
    spent_cents: int
    paid_cents: int
    amount_due_cents: int


@dataclass
class SettlementProposal:
    """Prefilled TRANSFER offered to the user to settle a cycle"""

    proposal_id: str
    title: str
    type: TransactionType
    amount_cents: int
    date: date
    to_account_id: str
    to_sub_account_id: str
    from_account_id: Optional[str]
    from_sub_account_id: Optional[str]
    month_year: str
    cycle_id: Optional[str] = None


# Alerts: one variant per source, each carrying only its own fields


@dataclass
class BudgetOverflowAlert:
    alert_id: str
    severity: Severity
    month_year: str
    threshold_percent: float
    month_inflow_cents: int
    month_outflow_cents: int
    source: Literal["BUDGET"] = "BUDGET"


@dataclass
class CategoryBudgetAlert:
    """Monthly spend in a category or sub-category at or above the alert threshold"""

    alert_id: str
    severity: Severity
    month_year: str
    category_id: str
    name: str
    spent_cents: int
    limit_cents: int
    usage_percent: float
    parent_name: Optional[str] = None  # set for sub-categories
    source: Literal["CATEGORY_BUDGET"] = "CATEGORY_BUDGET"


@dataclass
class BillDueAlert:
    alert_id: str
    severity: Severity
    month_year: str
    title: str
    due_day: int
    status: Literal["DUE_TODAY", "OVERDUE", "UPCOMING"]
    amount_cents: Optional[int] = None
    source: Literal["BILL"] = "BILL"


@dataclass
class GoalDeadlineAlert:
    alert_id: str
    severity: Severity
    month_year: str
    goal_id: str
    name: str
    deadline: date
    days_remaining: int
    target_cents: int
    current_cents: int
    source: Literal["GOAL_DEADLINE"] = "GOAL_DEADLINE"


@dataclass
class CycleSettlementAlert:
    alert_id: str
    severity: Severity
    month_year: str
    statement: StatementDue
    days_until_due: int
    source: Literal["CYCLE_SETTLEMENT"] = "CYCLE_SETTLEMENT"


Alert = Union[BudgetOverflowAlert, CategoryBudgetAlert, BillDueAlert, GoalDeadlineAlert, CycleSettlementAlert]
