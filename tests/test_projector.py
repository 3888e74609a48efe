import datetime as dt

import pytest

from fincast_core.domain.models import (
    DailyBudget,
    DailyExpense,
    RecordSnapshot,
    RecurringIncome,
    RecurringTransaction,
    SingleIncome,
    Transaction,
)
from fincast_core.services.balance import compute_unified_balance
from fincast_core.services.projector import project_daily_cash_flow, projection_end

TODAY = dt.date(2025, 1, 10)


def _project(snapshot: RecordSnapshot, months: int):
    opening = compute_unified_balance(snapshot, TODAY).balance
    return project_daily_cash_flow(snapshot, months, TODAY, opening)


def _opening(amount: float) -> Transaction:
    return Transaction(id="t0", date=TODAY, description="Opening", amount=amount, type="income" if amount >= 0 else "expense")


def test_walk_covers_every_day_through_the_end_month_inclusive():
    points = _project(RecordSnapshot(user_id="u1"), 1)

    assert points[0].date == TODAY
    assert points[-1].date == dt.date(2025, 2, 10)
    assert len(points) == 32
    for prev, nxt in zip(points, points[1:]):
        assert nxt.date - prev.date == dt.timedelta(days=1)


def test_zero_months_projects_only_today():
    points = _project(RecordSnapshot(user_id="u1", transactions=[_opening(250.0)]), 0)
    assert [p.date for p in points] == [TODAY]
    assert points[0].balance == 250.0


def test_end_date_clamps_to_month_end():
    assert projection_end(dt.date(2025, 1, 31), 1) == dt.date(2025, 2, 28)


def test_first_day_matches_unified_balance_when_nothing_is_booked_today():
    snapshot = RecordSnapshot(
        user_id="u1",
        transactions=[_opening(320.5)],
        incomes=[SingleIncome(id="i1", description="Past", amount=20.0, date=TODAY - dt.timedelta(days=3))],
        daily_expenses=[DailyExpense(id="d1", date=TODAY - dt.timedelta(days=1), amount=12.25)],
    )
    for months in (0, 1, 6):
        points = _project(snapshot, months)
        assert points[0].balance == compute_unified_balance(snapshot, TODAY).balance == 328.25


def test_single_future_income_crosses_zero_on_its_day():
    snapshot = RecordSnapshot(
        user_id="u1",
        transactions=[_opening(-200.0)],
        incomes=[SingleIncome(id="i1", description="Invoice", amount=300.0, date=TODAY + dt.timedelta(days=10))],
    )
    points = _project(snapshot, 1)

    for point in points[:10]:
        assert point.balance == -200.0
        assert point.is_positive is False
    for point in points[10:]:
        assert point.balance >= 100.0
        assert point.is_positive is True
    assert points[10].income == 300.0


def test_daily_budget_is_the_default_spend():
    snapshot = RecordSnapshot(
        user_id="u1",
        transactions=[_opening(5000.0)],
        daily_budgets=[DailyBudget(id="b1", amount=30.0, start_date=TODAY)],
    )
    points = _project(snapshot, 1)

    assert all(p.expense == 30.00 for p in points)
    assert points[0].balance == 4970.0
    assert points[-1].balance == 5000.0 - 30.0 * len(points)


def test_recorded_expense_replaces_the_budget_for_its_day():
    snapshot = RecordSnapshot(
        user_id="u1",
        daily_budgets=[DailyBudget(id="b1", amount=30.0, start_date=TODAY)],
        daily_expenses=[
            DailyExpense(id="d1", date=TODAY + dt.timedelta(days=2), amount=12.0),
            DailyExpense(id="d2", date=TODAY + dt.timedelta(days=2), amount=3.5),
        ],
    )
    points = _project(snapshot, 1)

    assert points[1].expense == 30.0
    # first record of the day, never added to the budget
    assert points[2].expense == 12.0
    assert points[3].expense == 30.0
    # recorded spend already left the opening balance (-15.5)
    assert [p.balance for p in points[:4]] == [-45.5, -75.5, -75.5, -105.5]


def test_records_dated_today_are_not_booked_twice():
    snapshot = RecordSnapshot(
        user_id="u1",
        incomes=[SingleIncome(id="i1", description="Gift", amount=100.0, date=TODAY)],
        daily_budgets=[DailyBudget(id="b1", amount=30.0, start_date=TODAY)],
        daily_expenses=[DailyExpense(id="d1", date=TODAY, amount=20.0)],
    )
    unified = compute_unified_balance(snapshot, TODAY).balance
    points = _project(snapshot, 0)

    assert unified == 80.0
    assert points[0].balance == unified
    assert points[0].income == 0.0
    assert points[0].expense == 20.0


def test_budget_stops_after_its_end_date_and_first_match_wins():
    snapshot = RecordSnapshot(
        user_id="u1",
        daily_budgets=[
            DailyBudget(id="b1", amount=20.0, start_date=TODAY, end_date=TODAY + dt.timedelta(days=1)),
            DailyBudget(id="b2", amount=45.0, start_date=TODAY),
        ],
    )
    points = project_daily_cash_flow(snapshot, 0, TODAY, 0.0) + project_daily_cash_flow(
        snapshot, 0, TODAY + dt.timedelta(days=2), 0.0
    )
    assert [p.expense for p in points] == [20.0, 45.0]


def test_recurring_events_follow_day_of_month_and_frequency():
    snapshot = RecordSnapshot(
        user_id="u1",
        incomes=[
            RecurringIncome(id="i1", description="Salary", amount=1000.0, frequency="monthly", day_of_month=15),
            RecurringIncome(id="i2", description="Tips", amount=2.0, frequency="daily"),
            # weekly incomes are not booked day by day
            RecurringIncome(id="i3", description="Allowance", amount=100.0, frequency="weekly", day_of_month=15),
        ],
        recurring_transactions=[
            RecurringTransaction(
                id="r1", description="Rent", amount=-700.0, day_of_month=20, type="expense", start_date=TODAY
            ),
            RecurringTransaction(
                id="r2",
                description="Old plan",
                amount=-40.0,
                day_of_month=20,
                type="expense",
                start_date=dt.date(2024, 1, 1),
                end_date=dt.date(2024, 12, 31),
            ),
            # expenses fire on their day of month whatever the frequency
            RecurringTransaction(
                id="r3",
                description="Cleaner",
                amount=-25.0,
                day_of_month=15,
                type="expense",
                start_date=TODAY,
                frequency="weekly",
            ),
            RecurringTransaction(
                id="r4",
                description="Parking",
                amount=-5.0,
                day_of_month=15,
                type="expense",
                start_date=TODAY,
                frequency="daily",
            ),
        ],
    )
    points = {p.date: p for p in project_daily_cash_flow(snapshot, 1, TODAY, 0.0)}

    assert points[dt.date(2025, 1, 15)].income == 1002.0
    assert points[dt.date(2025, 1, 15)].expense == 30.0
    assert points[dt.date(2025, 1, 11)].expense == 0.0
    assert points[dt.date(2025, 1, 16)].income == 2.0
    assert points[dt.date(2025, 1, 20)].expense == 700.0
    assert points[dt.date(2025, 2, 10)].balance == pytest.approx(2.0 * 32 + 1000.0 - 700.0 - 30.0)


def test_projection_is_deterministic():
    snapshot = RecordSnapshot(
        user_id="u1",
        transactions=[_opening(100.0)],
        daily_budgets=[DailyBudget(id="b1", amount=3.33, start_date=TODAY)],
    )
    assert _project(snapshot, 2) == _project(snapshot, 2)


def test_negative_months_are_rejected():
    with pytest.raises(ValueError):
        project_daily_cash_flow(RecordSnapshot(user_id="u1"), -1, TODAY, 0.0)
