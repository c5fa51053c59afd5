"""Pydantic schemas for API request/response validation"""

from pydantic import BaseModel, Field
from datetime import date
from typing import Annotated, List, Literal, Optional, Union

from cycle_ledger.domain import models


class SettlementSchema(BaseModel):
    """Payment from outside a cycle's window applied to its debt"""

    transaction_id: str
    transaction_title: str
    transaction_date: Optional[date]
    amount_applied_cents: int


class CycleSchema(BaseModel):
    """Single billing cycle after waterfall settlement"""

    cycle_id: str
    start: date
    end: date
    due_date: date
    spent_local_cents: int
    paid_local_cents: int
    external_settlements: List[SettlementSchema]
    outstanding_debt_cents: int
    is_settled: bool
    is_current: bool
    cumulative_at_end_cents: int
    transaction_ids: List[str]

    @classmethod
    def from_domain(cls, cycle: models.CyclePeriod) -> "CycleSchema":
        return cls(
            cycle_id=cycle.cycle_id,
            start=cycle.start,
            end=cycle.end,
            due_date=cycle.due_date,
            spent_local_cents=cycle.spent_local_cents,
            paid_local_cents=cycle.paid_local_cents,
            external_settlements=[
                SettlementSchema(
                    transaction_id=s.transaction.transaction_id,
                    transaction_title=s.transaction.title,
                    transaction_date=s.transaction.date,
                    amount_applied_cents=s.amount_applied_cents,
                )
                for s in cycle.external_settlements
            ],
            outstanding_debt_cents=cycle.outstanding_debt_cents,
            is_settled=cycle.is_settled,
            is_current=cycle.is_current,
            cumulative_at_end_cents=cycle.cumulative_at_end_cents,
            transaction_ids=[t.transaction_id for t in cycle.local_transactions],
        )


class UnassignedPaymentSchema(BaseModel):
    transaction_id: str
    transaction_title: str
    transaction_date: Optional[date]
    available_cents: int


class VaultLedgerResponse(BaseModel):
    """Cycle history and totals for one sub-account, most recent cycle first"""

    account_id: str
    account_name: str
    sub_account_id: str
    sub_account_name: str
    total_credit_cents: int
    total_debit_cents: int
    total_balance_cents: int
    cycles: List[CycleSchema]
    unassigned_payments: List[UnassignedPaymentSchema]


class MasterLedgerResponse(BaseModel):
    """Response for GET /v1/ledger"""

    user_id: str
    as_of: date
    vaults: List[VaultLedgerResponse]


class StatementSchema(BaseModel):
    account_id: str
    sub_account_id: str
    sub_account_name: str
    cycle_start: date
    cycle_end: date
    due_date: date
    spent_cents: int
    paid_cents: int
    amount_due_cents: int


class BudgetOverflowAlertSchema(BaseModel):
    source: Literal["BUDGET"] = "BUDGET"
    alert_id: str
    severity: models.Severity
    month_year: str
    threshold_percent: float
    month_inflow_cents: int
    month_outflow_cents: int


class CategoryBudgetAlertSchema(BaseModel):
    source: Literal["CATEGORY_BUDGET"] = "CATEGORY_BUDGET"
    alert_id: str
    severity: models.Severity
    month_year: str
    category_id: str
    name: str
    parent_name: Optional[str] = None
    spent_cents: int
    limit_cents: int
    usage_percent: float


class BillDueAlertSchema(BaseModel):
    source: Literal["BILL"] = "BILL"
    alert_id: str
    severity: models.Severity
    month_year: str
    title: str
    due_day: int
    status: Literal["DUE_TODAY", "OVERDUE", "UPCOMING"]
    amount_cents: Optional[int] = None


class GoalDeadlineAlertSchema(BaseModel):
    source: Literal["GOAL_DEADLINE"] = "GOAL_DEADLINE"
    alert_id: str
    severity: models.Severity
    month_year: str
    goal_id: str
    name: str
    deadline: date
    days_remaining: int
    target_cents: int
    current_cents: int


class CycleSettlementAlertSchema(BaseModel):
    source: Literal["CYCLE_SETTLEMENT"] = "CYCLE_SETTLEMENT"
    alert_id: str
    severity: models.Severity
    month_year: str
    statement: StatementSchema
    days_until_due: int


AlertSchema = Annotated[
    Union[
        BudgetOverflowAlertSchema,
        CategoryBudgetAlertSchema,
        BillDueAlertSchema,
        GoalDeadlineAlertSchema,
        CycleSettlementAlertSchema,
    ],
    Field(discriminator="source"),
]


class AlertsResponse(BaseModel):
    """Response for GET /v1/alerts"""

    user_id: str
    as_of: date
    alerts: List[AlertSchema]


class ReminderActionRequest(BaseModel):
    """Request body for POST /v1/alerts/actions"""

    user_id: str = Field(..., min_length=1, description="User identifier")
    reminder_id: str = Field(..., min_length=1, description="Alert id being acknowledged")
    action: Literal["COMPLETED", "DISMISSED"]
    month_year: Optional[str] = Field(None, pattern=r"^(1[0-2]|[1-9])-\d{4}$", description="M-YYYY, defaults to today")


class HandledReminderSchema(BaseModel):
    reminder_id: str
    month_year: str
    action: Literal["COMPLETED", "DISMISSED"]


class HandledRemindersResponse(BaseModel):
    """Response for GET /v1/alerts/handled"""

    user_id: str
    handled: List[HandledReminderSchema]


class ProposalRequest(BaseModel):
    """Request body for POST /v1/settlements/proposal"""

    user_id: str = Field(..., min_length=1, description="User identifier")
    sub_account_id: str = Field(..., min_length=1, description="Sub-account carrying the debt")
    cycle_id: Optional[str] = Field(None, description="Cycle to settle; defaults to the last closed statement")
    from_sub_account_id: Optional[str] = Field(None, description="Funding sub-account")
    today: Optional[date] = None


class ProposalResponse(BaseModel):
    """Proposed TRANSFER awaiting user confirmation"""

    proposal_id: str
    title: str
    type: models.TransactionType
    amount_cents: int
    date: date
    to_account_id: str
    to_sub_account_id: str
    from_account_id: Optional[str] = None
    from_sub_account_id: Optional[str] = None
    month_year: str
    cycle_id: Optional[str] = None
