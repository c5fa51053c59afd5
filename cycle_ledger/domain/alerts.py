"""Alert generation - budget overflow, category budgets, bill reminders, goal deadlines, cycle dues"""

from collections import defaultdict
from datetime import date
from typing import Dict, Iterable, List

from cycle_ledger.domain.ledger import find_unsettled_statement
from cycle_ledger.domain.models import (
    Alert,
    BillDueAlert,
    BudgetOverflowAlert,
    CategoryBudgetAlert,
    CycleSettlementAlert,
    GoalDeadlineAlert,
    HandledReminder,
    LedgerSnapshot,
    Severity,
    TransactionType,
)
from cycle_ledger.utils.date_utils import month_year_key

BUDGET_OVERFLOW_ID = "budget-overflow"
GOAL_PAST_DEADLINE_WINDOW_DAYS = 30


def category_alert_id(category_id: str) -> str:
    return f"budget-cat-{category_id}"


def sub_category_alert_id(sub_category_id: str) -> str:
    return f"budget-sub-{sub_category_id}"


def cycle_alert_id(sub_account_id: str) -> str:
    return f"vault-cycle-{sub_account_id}"


def goal_alert_id(goal_id: str) -> str:
    return f"goal-near-{goal_id}"


def budget_overflow_alerts(snapshot: LedgerSnapshot, today: date, handled: set) -> List[Alert]:
    """Spending this calendar month above the configured share of income"""
    month_year = month_year_key(today)
    prefs = snapshot.settings
    if not prefs.budget_alert_enabled or (BUDGET_OVERFLOW_ID, month_year) in handled:
        return []

    inflow = 0
    outflow = 0
    for txn in snapshot.transactions:
        if txn.date is None or (txn.date.year, txn.date.month) != (today.year, today.month):
            continue
        if txn.type == TransactionType.INCOME:
            inflow += txn.amount_cents
        elif txn.type == TransactionType.EXPENSE:
            outflow += txn.amount_cents

    # outflow > inflow * threshold%
    if inflow <= 0 or outflow * 100 <= inflow * prefs.budget_alert_threshold:
        return []

    return [
        BudgetOverflowAlert(
            alert_id=BUDGET_OVERFLOW_ID,
            severity=Severity.CRITICAL,
            month_year=month_year,
            threshold_percent=prefs.budget_alert_threshold,
            month_inflow_cents=inflow,
            month_outflow_cents=outflow,
        )
    ]


def category_budget_alerts(snapshot: LedgerSnapshot, today: date, handled: set) -> List[Alert]:
    """
    Categories and sub-categories whose spend this calendar month reached the
    alert threshold share of their budget.

    Only EXPENSE categories with a positive budget_limit_cents are checked;
    sub-categories are checked whenever they carry a positive budget.
    """
    month_year = month_year_key(today)
    threshold = snapshot.settings.budget_alert_threshold

    by_category: Dict[str, int] = defaultdict(int)
    by_sub_category: Dict[str, int] = defaultdict(int)
    for txn in snapshot.transactions:
        if txn.date is None or (txn.date.year, txn.date.month) != (today.year, today.month):
            continue
        if txn.category_id:
            by_category[txn.category_id] += txn.amount_cents
        if txn.sub_category_id:
            by_sub_category[txn.sub_category_id] += txn.amount_cents

    def breach(alert_id, category_id, name, spent, limit, parent_name=None):
        # spent / limit >= threshold%
        if (alert_id, month_year) in handled or spent * 100 < limit * threshold:
            return None
        return CategoryBudgetAlert(
            alert_id=alert_id,
            severity=Severity.CRITICAL if spent >= limit else Severity.WARNING,
            month_year=month_year,
            category_id=category_id,
            name=name,
            spent_cents=spent,
            limit_cents=limit,
            usage_percent=round(spent * 100 / limit, 2),
            parent_name=parent_name,
        )

    alerts: List[Alert] = []
    for category in snapshot.categories:
        if category.type == TransactionType.EXPENSE and category.budget_limit_cents > 0:
            alert = breach(
                category_alert_id(category.id),
                category.id,
                category.name,
                by_category[category.id],
                category.budget_limit_cents,
            )
            if alert:
                alerts.append(alert)

        for sub in category.sub_categories:
            if not sub.budget_cents or sub.budget_cents <= 0:
                continue
            alert = breach(
                sub_category_alert_id(sub.id),
                sub.id,
                sub.name,
                by_sub_category[sub.id],
                sub.budget_cents,
                parent_name=category.name,
            )
            if alert:
                alerts.append(alert)
    return alerts


def bill_due_alerts(snapshot: LedgerSnapshot, today: date, handled: set) -> List[Alert]:
    """Reminders due today, overdue this month, or inside their alert lead time"""
    month_year = month_year_key(today)
    alerts: List[Alert] = []
    for reminder in snapshot.bill_reminders:
        if (reminder.id, month_year) in handled:
            continue

        days_until = reminder.due_day - today.day
        if days_until == 0:
            status = "DUE_TODAY"
        elif days_until < 0:
            status = "OVERDUE"
        elif days_until <= reminder.alert_days_before:
            status = "UPCOMING"
        else:
            continue

        alerts.append(
            BillDueAlert(
                alert_id=reminder.id,
                severity=Severity.WARNING if status == "UPCOMING" else Severity.CRITICAL,
                month_year=month_year,
                title=reminder.title,
                due_day=reminder.due_day,
                status=status,
                amount_cents=reminder.amount_cents,
            )
        )
    return alerts


def goal_deadline_alerts(snapshot: LedgerSnapshot, today: date, handled_ids: set) -> List[Alert]:
    """
    Goals whose deadline is within their lead time, or passed up to 30 days ago.

    A goal acknowledgement suppresses the alert for every month.
    """
    alerts: List[Alert] = []
    for goal in snapshot.goals:
        if goal.deadline is None or goal_alert_id(goal.id) in handled_ids:
            continue
        days_remaining = (goal.deadline - today).days
        if days_remaining > goal.alert_days_before or days_remaining < -GOAL_PAST_DEADLINE_WINDOW_DAYS:
            continue
        alerts.append(
            GoalDeadlineAlert(
                alert_id=goal_alert_id(goal.id),
                severity=Severity.CRITICAL if days_remaining <= 2 else Severity.WARNING,
                month_year=month_year_key(today),
                goal_id=goal.id,
                name=goal.name,
                deadline=goal.deadline,
                days_remaining=days_remaining,
                target_cents=goal.target_cents,
                current_cents=goal.current_cents,
            )
        )
    return alerts


def cycle_settlement_alerts(snapshot: LedgerSnapshot, today: date, handled: set) -> List[Alert]:
    """
    Positive balance left on each sub-account's last closed statement.

    CRITICAL once the due date is within the billing cycle's alert_days_before
    lead time, WARNING before that. A negative lead time is used as-is.
    """
    month_year = month_year_key(today)
    alerts: List[Alert] = []
    for account in snapshot.accounts:
        for sub in account.sub_accounts:
            alert_id = cycle_alert_id(sub.id)
            if (alert_id, month_year) in handled:
                continue
            statement = find_unsettled_statement(account, sub, snapshot.transactions, today)
            if statement is None:
                continue
            days_until_due = (statement.due_date - today).days
            lead_days = sub.billing_cycle.alert_days_before
            alerts.append(
                CycleSettlementAlert(
                    alert_id=alert_id,
                    severity=Severity.CRITICAL if days_until_due <= lead_days else Severity.WARNING,
                    month_year=month_year,
                    statement=statement,
                    days_until_due=days_until_due,
                )
            )
    return alerts


def generate_alerts(
    snapshot: LedgerSnapshot,
    today: date,
    handled_reminders: Iterable[HandledReminder] = (),
) -> List[Alert]:
    """
    Evaluate every alert source for today.

    Acknowledged reminders are matched on (reminder_id, month_year), except
    goal alerts which match on reminder_id alone.
    """
    handled_list = list(handled_reminders)
    handled = {(h.reminder_id, h.month_year) for h in handled_list}
    handled_ids = {h.reminder_id for h in handled_list}

    return (
        budget_overflow_alerts(snapshot, today, handled)
        + category_budget_alerts(snapshot, today, handled)
        + bill_due_alerts(snapshot, today, handled)
        + goal_deadline_alerts(snapshot, today, handled_ids)
        + cycle_settlement_alerts(snapshot, today, handled)
    )
