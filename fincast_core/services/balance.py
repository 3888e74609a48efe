from __future__ import annotations

import datetime as dt
from typing import Iterable

from fincast_core.domain.models import (
    BalanceBreakdown,
    Income,
    IncomeTotals,
    RecordSnapshot,
    RecurringIncome,
    SingleIncome,
    UnifiedBalance,
    round_money,
)
from fincast_core.services.frequency import monthly_equivalent

# Fixed month length the income summary uses for daily incomes.
SUMMARY_MONTH_DAYS = 30


def compute_unified_balance(snapshot: RecordSnapshot, evaluation_date: dt.date) -> UnifiedBalance:
    """
    Current balance across every source:
    - every transaction's signed amount,
    - single incomes dated on or before ``evaluation_date``,
    - minus every recorded daily expense.
    Recurring incomes only feed projections. Each figure is rounded on its own,
    so the breakdown may not add up to the total to the cent.
    """
    from_transactions = sum(t.amount for t in snapshot.transactions)
    from_incomes = sum(i.amount for i in snapshot.single_incomes if i.date <= evaluation_date)
    from_daily_expenses = -sum(e.amount for e in snapshot.daily_expenses)

    total = from_transactions + from_incomes + from_daily_expenses
    return UnifiedBalance(
        balance=round_money(total),
        breakdown=BalanceBreakdown(
            from_transactions=round_money(from_transactions),
            from_incomes=round_money(from_incomes),
            from_daily_expenses=round_money(from_daily_expenses),
        ),
    )


def total_incomes(incomes: Iterable[Income]) -> IncomeTotals:
    single = 0.0
    recurring = 0.0
    monthly_projection = 0.0
    for income in incomes:
        if isinstance(income, SingleIncome):
            single += income.amount
        elif isinstance(income, RecurringIncome):
            recurring += income.amount
            monthly_projection += monthly_equivalent(income.amount, income.frequency, SUMMARY_MONTH_DAYS)

    return IncomeTotals(
        total=round_money(single + recurring),
        single=round_money(single),
        recurring=round_money(recurring),
        monthly_projection=round_money(monthly_projection),
    )


def current_month_expenses(snapshot: RecordSnapshot, evaluation_date: dt.date) -> float:
    """Daily expenses plus outgoing transactions of the evaluation month."""
    total = 0.0
    for expense in snapshot.daily_expenses:
        if _same_month(expense.date, evaluation_date):
            total += expense.amount
    for transaction in snapshot.transactions:
        if transaction.amount < 0 and _same_month(transaction.date, evaluation_date):
            total += abs(transaction.amount)
    return round_money(total)


def _same_month(day: dt.date, reference: dt.date) -> bool:
    return (day.year, day.month) == (reference.year, reference.month)
