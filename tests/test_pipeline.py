import datetime as dt
import logging

import pytest

from fincast_core.domain.models import (
    DailyBudget,
    DailyExpense,
    EngineConfig,
    MonthlyForecast,
    RecordSnapshot,
    RecurringIncome,
    RecurringTransaction,
    SingleIncome,
    Transaction,
    UnifiedBalance,
)
from fincast_core.io.repository import InMemoryRepository, RepositoryResult
from fincast_core.services.pipeline import CashflowEngine

TODAY = dt.date(2025, 1, 10)


def _engine(snapshot: RecordSnapshot, **kwargs) -> CashflowEngine:
    return CashflowEngine(InMemoryRepository({snapshot.user_id: snapshot}), snapshot.user_id, evaluation_date=TODAY, **kwargs)


class FailingBudgets(InMemoryRepository):
    def list_daily_budgets(self, user_id):
        return RepositoryResult(success=False, error="permission denied")


def test_daily_projection_starts_from_unified_balance():
    snapshot = RecordSnapshot(
        user_id="u1",
        transactions=[Transaction(id="t1", date=dt.date(2025, 1, 2), description="Pay", amount=900.0, type="income")],
        incomes=[SingleIncome(id="i1", description="Gift", amount=100.0, date=dt.date(2025, 1, 9))],
        daily_expenses=[DailyExpense(id="d1", date=dt.date(2025, 1, 9), amount=40.0)],
    )
    engine = _engine(snapshot)

    balance = engine.compute_unified_balance()
    projection = engine.project_daily_cash_flow(2)

    assert balance.success and projection.success
    assert balance.data.balance == 960.0
    assert projection.data[0].balance == balance.data.balance
    assert projection.data[-1].date == dt.date(2025, 3, 10)


def test_monthly_forecast_scenario_recurring_expense():
    snapshot = RecordSnapshot(
        user_id="u1",
        transactions=[Transaction(id="t1", date=TODAY, description="Savings", amount=1000.0, type="income")],
        recurring_transactions=[
            RecurringTransaction(
                id="r1", description="Phone", amount=-50.0, day_of_month=5, type="expense", start_date=TODAY
            )
        ],
    )
    engine = _engine(snapshot)
    for month in (2, 3):
        result = engine.get_monthly_forecast(2025, month)
        assert result.success
        assert result.data.total_expenses == 50.00


def test_break_even_already_positive_without_expenses():
    snapshot = RecordSnapshot(
        user_id="u1",
        transactions=[Transaction(id="t1", date=TODAY, description="Savings", amount=500.0, type="income")],
    )
    result = _engine(snapshot).get_break_even_month()
    assert result.success
    assert result.data.to_dict() == {"already_positive": True}


def test_break_even_sentinel_when_balance_stays_negative():
    snapshot = RecordSnapshot(
        user_id="u1",
        transactions=[Transaction(id="t1", date=TODAY, description="Overdraft", amount=-800.0, type="expense")],
        recurring_transactions=[
            RecurringTransaction(
                id="r1", description="Loan", amount=-100.0, day_of_month=1, type="expense", start_date=TODAY
            )
        ],
    )
    result = _engine(snapshot).get_break_even_month()

    assert result.success
    assert result.data.already_positive is False
    assert result.data.month is None
    assert result.data.months_until is None
    assert result.data.message


def test_config_sets_default_horizons():
    snapshot = RecordSnapshot(user_id="u1")
    engine = _engine(snapshot, config=EngineConfig(projection_months=2, break_even_horizon=3))

    assert len(engine.generate_projection().data) == 3
    assert engine.project_daily_cash_flow().data[-1].date == dt.date(2025, 3, 10)


def test_unknown_user_returns_zero_defaults(caplog):
    engine = CashflowEngine(InMemoryRepository(), "ghost", evaluation_date=TODAY)

    with caplog.at_level(logging.WARNING, logger="fincast_core.services.pipeline"):
        balance = engine.compute_unified_balance()

    assert balance.success is False
    assert balance.data == UnifiedBalance()
    assert "ghost" in balance.error
    assert "unified balance failed" in caplog.text

    projection = engine.project_daily_cash_flow(1)
    assert projection.success is False
    assert projection.data == []

    forecast = engine.get_monthly_forecast(2025, 1)
    assert forecast.data == MonthlyForecast(year=2025, month=1)
    assert forecast.data.balance == 0.0

    break_even = engine.get_break_even_month()
    assert break_even.success is False
    assert break_even.data is None


def test_single_failing_collection_fails_the_call():
    snapshot = RecordSnapshot(
        user_id="u1",
        daily_budgets=[DailyBudget(id="b1", amount=10.0, start_date=TODAY)],
    )
    engine = CashflowEngine(FailingBudgets({"u1": snapshot}), "u1", evaluation_date=TODAY)

    result = engine.monthly_daily_budget_summary()
    assert result.success is False
    assert result.error == "daily_budgets: permission denied"
    assert result.data == []


def test_dashboard_and_budget_views():
    snapshot = RecordSnapshot(
        user_id="u1",
        transactions=[Transaction(id="t1", date=TODAY, description="Pay", amount=300.0, type="income")],
        daily_budgets=[DailyBudget(id="b1", amount=10.0, start_date=dt.date(2025, 1, 1))],
        daily_expenses=[
            DailyExpense(id="d1", date=dt.date(2024, 12, 30), amount=5.0),
            DailyExpense(id="d2", date=dt.date(2025, 1, 4), amount=12.0),
        ],
    )
    engine = _engine(snapshot)

    stats = engine.get_dashboard_stats().data
    assert stats.current_balance == 283.0
    assert stats.total_transactions == 1
    assert stats.monthly_daily_expenses == 12.0
    assert stats.monthly_forecast.month == 1

    comparison = engine.compare_budget_vs_spent(dt.date(2025, 1, 4)).data
    assert comparison.remaining == -2.0

    summary = engine.monthly_daily_budget_summary().data
    assert len(summary) == 31

    assert engine.current_month_expenses().data == 12.0
    assert engine.total_incomes().data.total == 0.0


def test_evaluation_timestamp_is_reduced_to_its_day():
    snapshot = RecordSnapshot(
        user_id="u1",
        incomes=[SingleIncome(id="i1", description="Gift", amount=25.0, date=TODAY)],
    )
    engine = CashflowEngine(
        InMemoryRepository({"u1": snapshot}), "u1", evaluation_date=dt.datetime(2025, 1, 10, 8, 30)
    )
    assert engine.evaluation_date == TODAY
    assert engine.compute_unified_balance().data.balance == 25.0


def test_total_income_of_a_range_defaults_to_the_evaluation_month():
    snapshot = RecordSnapshot(
        user_id="u1",
        incomes=[
            SingleIncome(id="i1", description="Invoice", amount=300.0, date=dt.date(2025, 1, 20)),
            SingleIncome(id="i2", description="Refund", amount=40.0, date=dt.date(2025, 2, 3)),
            RecurringIncome(id="i3", description="Salary", amount=1000.0, frequency="monthly", day_of_month=1),
        ],
    )
    engine = _engine(snapshot)

    assert engine.calculate_total_income().data == 1300.0
    assert engine.calculate_total_income(dt.date(2025, 2, 1), dt.date(2025, 2, 28)).data == 1040.0
    with pytest.raises(ValueError):
        engine.calculate_total_income(dt.date(2025, 2, 1), dt.date(2025, 1, 1))

    failed = CashflowEngine(InMemoryRepository(), "ghost", evaluation_date=TODAY).calculate_total_income()
    assert failed.success is False
    assert failed.data == 0.0


def test_duplicate_imports_are_reported_not_removed():
    coffee = dict(date=dt.date(2025, 1, 9), amount=4.5, description="Coffee")
    snapshot = RecordSnapshot(
        user_id="u1",
        daily_expenses=[DailyExpense(id="a", **coffee), DailyExpense(id="b", **coffee)],
    )
    engine = _engine(snapshot)

    assert engine.find_duplicate_imports().data == {"transactions": [], "daily_expenses": ["b"]}
    assert engine.compute_unified_balance().data.balance == -9.0
