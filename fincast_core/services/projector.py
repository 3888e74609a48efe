from __future__ import annotations

import datetime as dt
from typing import Dict, List

import pandas as pd
from dateutil.relativedelta import relativedelta

from fincast_core.domain.models import EXPENSE, DailyExpense, DailyProjectionPoint, RecordSnapshot, round_money
from fincast_core.services.budget import active_budget_for_date
from fincast_core.services.frequency import daily_contribution


def projection_end(evaluation_date: dt.date, months: int) -> dt.date:
    """``months`` calendar months after ``evaluation_date``, clamped to the month's last day."""
    return evaluation_date + relativedelta(months=months)


def project_daily_cash_flow(
    snapshot: RecordSnapshot,
    months: int,
    evaluation_date: dt.date,
    opening_balance: float,
) -> List[DailyProjectionPoint]:
    """
    Walk day by day from ``evaluation_date`` through ``evaluation_date + months``
    (both inclusive) carrying a running balance seeded with ``opening_balance``,
    the unified balance of the same snapshot.

    Each day books:
    - income: single incomes still to come dated that day, plus recurring incomes
      firing that day;
    - expense: active expense-type recurring transactions whose day of month is
      that day, plus the day's recorded daily expense or, when none was recorded,
      the active budget.

    Recorded daily expenses are already part of the opening balance: they are
    reported in ``expense`` and replace the budget, but do not move the balance
    a second time.
    """
    if months < 0:
        raise ValueError("months must be >= 0")

    incomes_by_day: Dict[dt.date, float] = {}
    for income in snapshot.single_incomes:
        # incomes up to the evaluation date are in the opening balance
        if income.date > evaluation_date:
            incomes_by_day[income.date] = incomes_by_day.get(income.date, 0.0) + income.amount

    recorded_by_day: Dict[dt.date, DailyExpense] = {}
    for expense in snapshot.daily_expenses:
        # first record in scan order wins
        recorded_by_day.setdefault(expense.date, expense)

    recurring_incomes = snapshot.recurring_incomes
    recurring_expenses = [r for r in snapshot.recurring_transactions if r.type == EXPENSE]

    balance = opening_balance
    points: List[DailyProjectionPoint] = []
    for ts in pd.date_range(evaluation_date, projection_end(evaluation_date, months), freq="D"):
        day = ts.date()

        income = incomes_by_day.get(day, 0.0)
        income += sum(daily_contribution(r, day) for r in recurring_incomes)

        # every frequency fires on its day of month here
        booked = sum(abs(r.amount) for r in recurring_expenses if r.day_of_month == day.day and r.is_active(day))
        expense = booked
        recorded = recorded_by_day.get(day)
        if recorded is not None:
            expense += recorded.amount
        else:
            budget = active_budget_for_date(snapshot.daily_budgets, day)
            if budget is not None:
                booked += budget.amount
                expense += budget.amount

        balance = round_money(balance + income - booked)
        points.append(
            DailyProjectionPoint(
                date=day,
                balance=balance,
                income=round_money(income),
                expense=round_money(expense),
            )
        )
    return points
