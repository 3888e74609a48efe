from __future__ import annotations

import calendar
import datetime as dt
from typing import Optional, Union

from fincast_core.domain.models import (
    BIWEEKLY,
    DAILY,
    MONTHLY,
    WEEKLY,
    YEARLY,
    RecurringIncome,
    RecurringTransaction,
)

Recurring = Union[RecurringIncome, RecurringTransaction]


def days_in_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def monthly_equivalent(amount: float, frequency: Optional[str], days_in_target_month: int) -> float:
    """
    Approximate value of a recurring amount over one calendar month.
    Weeks are folded as exactly 4 per month and fortnights as 2; only daily
    amounts follow the real month length. A missing frequency counts as monthly.
    """
    frequency = frequency or MONTHLY
    if frequency == MONTHLY:
        return amount
    if frequency == WEEKLY:
        return amount * 4
    if frequency == BIWEEKLY:
        return amount * 2
    if frequency == DAILY:
        return amount * days_in_target_month
    if frequency == YEARLY:
        return amount / 12
    return 0.0


def daily_contribution(record: Recurring, day: dt.date) -> float:
    """
    Amount a recurring record books on ``day``.

    Monthly records fire on their ``day_of_month`` and daily records fire every
    day. Weekly, biweekly and yearly records book nothing at day granularity,
    unlike ``monthly_equivalent`` which folds them into month totals.
    """
    frequency = record.frequency or MONTHLY
    if frequency == DAILY:
        return record.amount
    if frequency == MONTHLY and record.day_of_month == day.day:
        return record.amount
    return 0.0
