from __future__ import annotations

import datetime as dt

from fincast_core.domain.models import DashboardStats, RecordSnapshot, round_money
from fincast_core.services.balance import compute_unified_balance
from fincast_core.services.forecaster import get_monthly_forecast


def get_dashboard_stats(snapshot: RecordSnapshot, evaluation_date: dt.date) -> DashboardStats:
    month_start = evaluation_date.replace(day=1)
    spent_this_month = sum(e.amount for e in snapshot.daily_expenses if e.date >= month_start)
    return DashboardStats(
        current_balance=compute_unified_balance(snapshot, evaluation_date).balance,
        total_incomes=len(snapshot.incomes),
        total_recurring=len(snapshot.recurring_transactions),
        total_transactions=len(snapshot.transactions),
        monthly_daily_expenses=round_money(spent_this_month),
        monthly_forecast=get_monthly_forecast(snapshot, evaluation_date.year, evaluation_date.month),
    )
