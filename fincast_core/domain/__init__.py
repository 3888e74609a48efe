from fincast_core.domain.models import (  # noqa: F401
    BalanceBreakdown,
    BreakEven,
    BudgetComparison,
    DailyBudget,
    DailyBudgetSummary,
    DailyExpense,
    DailyProjectionPoint,
    DashboardStats,
    EngineConfig,
    Income,
    IncomeTotals,
    MonthlyForecast,
    MonthlyProjectionPoint,
    RecordSnapshot,
    RecurringIncome,
    RecurringTransaction,
    ServiceResult,
    SingleIncome,
    Transaction,
    UnifiedBalance,
    make_income,
    round_money,
)

__all__ = [
    "BalanceBreakdown",
    "BreakEven",
    "BudgetComparison",
    "DailyBudget",
    "DailyBudgetSummary",
    "DailyExpense",
    "DailyProjectionPoint",
    "DashboardStats",
    "EngineConfig",
    "Income",
    "IncomeTotals",
    "MonthlyForecast",
    "MonthlyProjectionPoint",
    "RecordSnapshot",
    "RecurringIncome",
    "RecurringTransaction",
    "ServiceResult",
    "SingleIncome",
    "Transaction",
    "UnifiedBalance",
    "make_income",
    "round_money",
]
