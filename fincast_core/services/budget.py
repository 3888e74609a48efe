from __future__ import annotations

import datetime as dt
from typing import Iterable, List, Optional, Tuple

from fincast_core.domain.models import (
    BudgetComparison,
    DailyBudget,
    DailyBudgetSummary,
    DailyExpense,
    RecordSnapshot,
    round_money,
)
from fincast_core.services.frequency import days_in_month


def active_budget_for_date(budgets: Iterable[DailyBudget], day: dt.date) -> Optional[DailyBudget]:
    """First budget in scan order whose range covers ``day``; overlaps are not resolved further."""
    for budget in budgets:
        if budget.covers(day):
            return budget
    return None


def expenses_by_date(expenses: Iterable[DailyExpense], day: dt.date) -> Tuple[List[DailyExpense], float]:
    matched = [e for e in expenses if e.date == day]
    return matched, round_money(sum(e.amount for e in matched))


def compare_budget_vs_spent(snapshot: RecordSnapshot, day: dt.date) -> BudgetComparison:
    budget = active_budget_for_date(snapshot.daily_budgets, day)
    _, spent = expenses_by_date(snapshot.daily_expenses, day)
    allowance = budget.amount if budget is not None else 0.0
    return BudgetComparison(
        budget=budget.amount if budget is not None else None,
        spent=spent,
        remaining=round_money(allowance - spent),
    )


def monthly_daily_budget_summary(snapshot: RecordSnapshot, year: int, month: int) -> List[DailyBudgetSummary]:
    summary = []
    for day_number in range(1, days_in_month(year, month) + 1):
        day = dt.date(year, month, day_number)
        budget = active_budget_for_date(snapshot.daily_budgets, day)
        _, spent = expenses_by_date(snapshot.daily_expenses, day)
        allowance = budget.amount if budget is not None else 0.0
        summary.append(
            DailyBudgetSummary(
                date=day,
                budget=round_money(allowance),
                spent=spent,
                remaining=round_money(allowance - spent),
            )
        )
    return summary
