from __future__ import annotations

import datetime as dt
import logging
from typing import Callable, Dict, List, Optional, TypeVar

from fincast_core.domain.models import (
    BreakEven,
    BudgetComparison,
    DailyBudgetSummary,
    DailyProjectionPoint,
    DashboardStats,
    EngineConfig,
    IncomeTotals,
    MonthlyForecast,
    MonthlyProjectionPoint,
    RecordSnapshot,
    ServiceResult,
    UnifiedBalance,
)
from fincast_core.io.dedup import find_duplicates
from fincast_core.io.repository import RecordRepository, fetch_snapshot
from fincast_core.services import balance as balance_service
from fincast_core.services import budget as budget_service
from fincast_core.services import dashboard as dashboard_service
from fincast_core.services import forecaster, projection, projector

logger = logging.getLogger(__name__)

T = TypeVar("T")


class CashflowEngine:
    """
    Entry point for one user's balance, forecast and projection figures.

    Every public call fetches one snapshot of the user's records and
    computes from it. A failed read is returned as an unsuccessful
    ``ServiceResult`` carrying a zero-valued default, never raised.
    """

    def __init__(
        self,
        repository: RecordRepository,
        user_id: str,
        evaluation_date: Optional[dt.date] = None,
        config: Optional[EngineConfig] = None,
    ):
        self.repository = repository
        self.user_id = user_id
        if isinstance(evaluation_date, dt.datetime):
            evaluation_date = evaluation_date.date()
        self.evaluation_date = evaluation_date or dt.date.today()
        self.config = config or EngineConfig()

    def _run(self, operation: str, default: T, compute: Callable[[RecordSnapshot], T]) -> ServiceResult[T]:
        fetched = fetch_snapshot(self.repository, self.user_id)
        if not fetched.success:
            logger.warning("%s failed for user %s: %s", operation, self.user_id, fetched.error)
            return ServiceResult.failed(fetched.error or "repository read failed", default)
        return ServiceResult.ok(compute(fetched.records[0]))

    def _opening_balance(self, snapshot: RecordSnapshot) -> float:
        return balance_service.compute_unified_balance(snapshot, self.evaluation_date).balance

    def compute_unified_balance(self) -> ServiceResult[UnifiedBalance]:
        return self._run(
            "unified balance",
            UnifiedBalance(),
            lambda s: balance_service.compute_unified_balance(s, self.evaluation_date),
        )

    def total_incomes(self) -> ServiceResult[IncomeTotals]:
        return self._run("income totals", IncomeTotals(), lambda s: balance_service.total_incomes(s.incomes))

    def current_month_expenses(self) -> ServiceResult[float]:
        return self._run(
            "current month expenses",
            0.0,
            lambda s: balance_service.current_month_expenses(s, self.evaluation_date),
        )

    def calculate_total_income(
        self, start: Optional[dt.date] = None, end: Optional[dt.date] = None
    ) -> ServiceResult[float]:
        """Income of ``[start, end]``, defaulting to the evaluation month."""
        first, last = forecaster.month_bounds(self.evaluation_date.year, self.evaluation_date.month)
        start = start or first
        end = end or last
        if start > end:
            raise ValueError("start must not be after end")
        return self._run(
            "total income",
            0.0,
            lambda s: forecaster.calculate_total_income(s.incomes, start, end),
        )

    def get_monthly_forecast(self, year: int, month: int) -> ServiceResult[MonthlyForecast]:
        return self._run(
            "monthly forecast",
            MonthlyForecast(year=year, month=month),
            lambda s: forecaster.get_monthly_forecast(s, year, month),
        )

    def project_daily_cash_flow(self, months: Optional[int] = None) -> ServiceResult[List[DailyProjectionPoint]]:
        months = self.config.projection_months if months is None else months
        return self._run(
            "daily cash-flow projection",
            [],
            lambda s: projector.project_daily_cash_flow(s, months, self.evaluation_date, self._opening_balance(s)),
        )

    def generate_projection(self, months: Optional[int] = None) -> ServiceResult[List[MonthlyProjectionPoint]]:
        months = self.config.projection_months if months is None else months
        return self._run(
            "monthly projection",
            [],
            lambda s: projection.generate_projection(s, months, self.evaluation_date, self._opening_balance(s)),
        )

    def get_break_even_month(self) -> ServiceResult[Optional[BreakEven]]:
        result = self.generate_projection(self.config.break_even_horizon)
        if not result.success:
            return ServiceResult.failed(result.error or "projection failed", None)
        return ServiceResult.ok(projection.get_break_even_month(result.data))

    def compare_budget_vs_spent(self, day: Optional[dt.date] = None) -> ServiceResult[BudgetComparison]:
        day = day or self.evaluation_date
        return self._run(
            "budget comparison",
            BudgetComparison(budget=None, spent=0.0, remaining=0.0),
            lambda s: budget_service.compare_budget_vs_spent(s, day),
        )

    def monthly_daily_budget_summary(
        self, year: Optional[int] = None, month: Optional[int] = None
    ) -> ServiceResult[List[DailyBudgetSummary]]:
        year = year or self.evaluation_date.year
        month = month or self.evaluation_date.month
        return self._run(
            "daily budget summary",
            [],
            lambda s: budget_service.monthly_daily_budget_summary(s, year, month),
        )

    def get_dashboard_stats(self) -> ServiceResult[Optional[DashboardStats]]:
        return self._run(
            "dashboard stats",
            None,
            lambda s: dashboard_service.get_dashboard_stats(s, self.evaluation_date),
        )

    def find_duplicate_imports(self) -> ServiceResult[Dict[str, List[str]]]:
        """Ids of stored transactions and daily expenses repeating an earlier import hash."""
        return self._run(
            "duplicate imports",
            {"transactions": [], "daily_expenses": []},
            lambda s: {
                "transactions": [t.id for t in find_duplicates(s.transactions)],
                "daily_expenses": [e.id for e in find_duplicates(s.daily_expenses)],
            },
        )
