from __future__ import annotations

import datetime as dt
from typing import Iterable

from fincast_core.domain.models import (
    EXPENSE,
    Income,
    MonthlyForecast,
    RecordSnapshot,
    RecurringIncome,
    SingleIncome,
    round_money,
)
from fincast_core.services.frequency import days_in_month, monthly_equivalent


def month_bounds(year: int, month: int) -> tuple[dt.date, dt.date]:
    return dt.date(year, month, 1), dt.date(year, month, days_in_month(year, month))


def get_monthly_forecast(snapshot: RecordSnapshot, year: int, month: int) -> MonthlyForecast:
    """
    Expected income and expenses of one calendar month (``month`` is 1-12).

    Income: single incomes dated in the month plus the monthly equivalent of
    every recurring income, which is always treated as active.
    Expenses: monthly equivalent of expense-type recurring transactions active
    at some point of the month plus one-off expense transactions of the month.
    """
    if not 1 <= month <= 12:
        raise ValueError("month must be between 1 and 12")
    first_day, last_day = month_bounds(year, month)
    n_days = last_day.day

    total_income = 0.0
    for income in snapshot.incomes:
        if isinstance(income, SingleIncome):
            if first_day <= income.date <= last_day:
                total_income += income.amount
        else:
            total_income += monthly_equivalent(income.amount, income.frequency, n_days)

    total_expenses = 0.0
    for recurring in snapshot.recurring_transactions:
        if recurring.type == EXPENSE and recurring.overlaps(first_day, last_day):
            total_expenses += monthly_equivalent(abs(recurring.amount), recurring.frequency, n_days)

    for transaction in snapshot.transactions:
        if transaction.type == EXPENSE and first_day <= transaction.date <= last_day:
            total_expenses += abs(transaction.amount)

    return MonthlyForecast(
        year=year,
        month=month,
        total_income=round_money(total_income),
        total_expenses=round_money(total_expenses),
    )


def calculate_total_income(incomes: Iterable[Income], start: dt.date, end: dt.date) -> float:
    """Single incomes inside ``[start, end]`` plus one nominal occurrence of each recurring income."""
    total = 0.0
    for income in incomes:
        if isinstance(income, SingleIncome):
            if start <= income.date <= end:
                total += income.amount
        elif isinstance(income, RecurringIncome):
            total += income.amount
    return round_money(total)
