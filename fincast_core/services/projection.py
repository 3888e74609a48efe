from __future__ import annotations

import datetime as dt
from typing import List, Sequence

from dateutil.relativedelta import relativedelta

from fincast_core.domain.models import BreakEven, MonthlyProjectionPoint, RecordSnapshot, round_money
from fincast_core.services.forecaster import month_bounds
from fincast_core.services.frequency import monthly_equivalent

MONTH_LABELS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")

STILL_NEGATIVE_MESSAGE = "Balance stays negative for more than {months} months"


def month_label(day: dt.date) -> str:
    """Short label such as ``Nov/25``."""
    return f"{MONTH_LABELS[day.month - 1]}/{day.year % 100:02d}"


def _month_net(snapshot: RecordSnapshot, anchor: dt.date, evaluation_date: dt.date) -> float:
    first_day, last_day = month_bounds(anchor.year, anchor.month)
    n_days = last_day.day

    net = 0.0
    for recurring in snapshot.recurring_transactions:
        if recurring.is_active(anchor):
            net += monthly_equivalent(recurring.amount, recurring.frequency, n_days)
    for income in snapshot.recurring_incomes:
        net += monthly_equivalent(income.amount, income.frequency, n_days)
    for income in snapshot.single_incomes:
        # incomes up to the evaluation date are already part of the opening balance
        if evaluation_date < income.date and first_day <= income.date <= last_day:
            net += income.amount
    return net


def generate_projection(
    snapshot: RecordSnapshot,
    months: int,
    evaluation_date: dt.date,
    opening_balance: float,
) -> List[MonthlyProjectionPoint]:
    """
    Month-by-month balance for the evaluation month and the ``months`` that follow.

    Entry 0 is the opening balance. Every later month, anchored on its first day,
    adds the signed monthly equivalent of the recurring transactions active on the
    anchor, the monthly equivalent of recurring incomes and the single incomes
    still to come that fall inside it.
    """
    if months < 0:
        raise ValueError("months must be >= 0")
    start = evaluation_date.replace(day=1)
    balance = round_money(opening_balance)
    points = [MonthlyProjectionPoint(month=month_label(start), date=start, balance=balance)]
    for i in range(1, months + 1):
        anchor = start + relativedelta(months=i)
        balance = round_money(balance + _month_net(snapshot, anchor, evaluation_date))
        points.append(MonthlyProjectionPoint(month=month_label(anchor), date=anchor, balance=balance))
    return points


def get_break_even_month(projection: Sequence[MonthlyProjectionPoint]) -> BreakEven:
    """
    First month whose balance is non-negative.
    A projection that starts non-negative is already positive; one that never
    reaches zero yields the still-negative result with no month.
    """
    if not projection:
        raise ValueError("projection must hold at least the current month")
    if projection[0].balance >= 0:
        return BreakEven(already_positive=True)

    for months_until, point in enumerate(projection[1:], start=1):
        if point.balance >= 0:
            return BreakEven(already_positive=False, month=point.month, months_until=months_until)

    return BreakEven(
        already_positive=False,
        month=None,
        months_until=None,
        message=STILL_NEGATIVE_MESSAGE.format(months=len(projection) - 1),
    )
