from __future__ import annotations

import dataclasses
import datetime as dt
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, Generic, List, Optional, TypeVar, Union

INCOME = "income"
EXPENSE = "expense"
TRANSACTION_TYPES = (INCOME, EXPENSE)

SINGLE = "single"
RECURRING = "recurring"
INCOME_TYPES = (SINGLE, RECURRING)

DAILY = "daily"
WEEKLY = "weekly"
BIWEEKLY = "biweekly"
MONTHLY = "monthly"
YEARLY = "yearly"
FREQUENCIES = (DAILY, WEEKLY, BIWEEKLY, MONTHLY, YEARLY)

# Open-ended budgets run until this date.
OPEN_END = dt.date(2099, 12, 31)

T = TypeVar("T")


def round_money(value: float) -> float:
    """Round half-up to cents on the exact binary value."""
    # + 0.0 folds negative zero into zero
    return float(Decimal(value).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)) + 0.0


def _check_type(kind: str) -> None:
    if kind not in TRANSACTION_TYPES:
        raise ValueError(f"Invalid transaction type {kind!r}. Use: {' or '.join(TRANSACTION_TYPES)}")


def _check_frequency(frequency: str) -> None:
    if frequency not in FREQUENCIES:
        raise ValueError(f"Invalid frequency {frequency!r}. Use: {', '.join(FREQUENCIES)}")


@dataclasses.dataclass(frozen=True)
class Transaction:
    id: str
    date: dt.date
    description: str
    amount: float  # positive = income, negative = expense
    type: str
    category: Optional[str] = None
    import_hash: Optional[str] = None

    def __post_init__(self) -> None:
        _check_type(self.type)


@dataclasses.dataclass(frozen=True)
class RecurringTransaction:
    id: str
    description: str
    amount: float
    day_of_month: int
    type: str
    start_date: dt.date
    frequency: Optional[str] = MONTHLY
    end_date: Optional[dt.date] = None

    def __post_init__(self) -> None:
        _check_type(self.type)
        if not 1 <= self.day_of_month <= 31:
            raise ValueError("day_of_month must be between 1 and 31")
        if self.frequency is None:
            object.__setattr__(self, "frequency", MONTHLY)
        _check_frequency(self.frequency)

    def is_active(self, day: dt.date) -> bool:
        return self.start_date <= day and (self.end_date is None or day <= self.end_date)

    def overlaps(self, first: dt.date, last: dt.date) -> bool:
        return self.start_date <= last and (self.end_date is None or self.end_date >= first)


@dataclasses.dataclass(frozen=True)
class SingleIncome:
    id: str
    description: str
    amount: float
    date: dt.date
    income_type: str = dataclasses.field(default=SINGLE, init=False)

    def __post_init__(self) -> None:
        if self.amount <= 0:
            raise ValueError("Income amount must be positive")


@dataclasses.dataclass(frozen=True)
class RecurringIncome:
    id: str
    description: str
    amount: float
    frequency: str
    day_of_month: Optional[int] = None
    income_type: str = dataclasses.field(default=RECURRING, init=False)

    def __post_init__(self) -> None:
        if self.amount <= 0:
            raise ValueError("Income amount must be positive")
        _check_frequency(self.frequency)


Income = Union[SingleIncome, RecurringIncome]


def make_income(
    *,
    id: str,
    description: str,
    amount: float,
    income_type: str,
    date: Optional[dt.date] = None,
    frequency: Optional[str] = None,
    day_of_month: Optional[int] = None,
) -> Income:
    """Build the income variant matching ``income_type``."""
    if income_type not in INCOME_TYPES:
        raise ValueError(f"Invalid income type {income_type!r}. Use: {' or '.join(INCOME_TYPES)}")
    if income_type == SINGLE:
        if date is None:
            raise ValueError("Single incomes require a date")
        return SingleIncome(id=id, description=description, amount=amount, date=date)
    if not frequency:
        raise ValueError("Recurring incomes require a frequency")
    return RecurringIncome(
        id=id,
        description=description,
        amount=amount,
        frequency=frequency,
        day_of_month=day_of_month,
    )


@dataclasses.dataclass(frozen=True)
class DailyBudget:
    id: str
    amount: float
    start_date: dt.date
    end_date: Optional[dt.date] = None

    def __post_init__(self) -> None:
        if self.amount <= 0:
            raise ValueError("Daily budget amount must be positive")

    def covers(self, day: dt.date) -> bool:
        return self.start_date <= day <= (self.end_date or OPEN_END)


@dataclasses.dataclass(frozen=True)
class DailyExpense:
    id: str
    date: dt.date
    amount: float  # realized spend, unsigned
    description: Optional[str] = None
    import_hash: Optional[str] = None

    def __post_init__(self) -> None:
        if self.amount <= 0:
            raise ValueError("Daily expense amount must be positive")


@dataclasses.dataclass(frozen=True)
class RecordSnapshot:
    user_id: str
    transactions: List[Transaction] = dataclasses.field(default_factory=list)
    incomes: List[Income] = dataclasses.field(default_factory=list)
    recurring_transactions: List[RecurringTransaction] = dataclasses.field(default_factory=list)
    daily_budgets: List[DailyBudget] = dataclasses.field(default_factory=list)
    daily_expenses: List[DailyExpense] = dataclasses.field(default_factory=list)

    @property
    def single_incomes(self) -> List[SingleIncome]:
        return [i for i in self.incomes if isinstance(i, SingleIncome)]

    @property
    def recurring_incomes(self) -> List[RecurringIncome]:
        return [i for i in self.incomes if isinstance(i, RecurringIncome)]


@dataclasses.dataclass
class BalanceBreakdown:
    from_transactions: float = 0.0
    from_incomes: float = 0.0
    from_daily_expenses: float = 0.0


@dataclasses.dataclass
class UnifiedBalance:
    balance: float = 0.0
    breakdown: BalanceBreakdown = dataclasses.field(default_factory=BalanceBreakdown)

    def to_dict(self) -> Dict[str, Any]:
        return dataclasses.asdict(self)


@dataclasses.dataclass
class IncomeTotals:
    total: float = 0.0
    single: float = 0.0
    recurring: float = 0.0
    monthly_projection: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return dataclasses.asdict(self)


@dataclasses.dataclass
class MonthlyForecast:
    year: int
    month: int  # 1-12
    total_income: float = 0.0
    total_expenses: float = 0.0

    @property
    def balance(self) -> float:
        return round_money(self.total_income - self.total_expenses)

    @property
    def is_positive(self) -> bool:
        return self.balance >= 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "year": self.year,
            "month": self.month,
            "total_income": self.total_income,
            "total_expenses": self.total_expenses,
            "balance": self.balance,
            "is_positive": self.is_positive,
        }


@dataclasses.dataclass
class DailyProjectionPoint:
    date: dt.date
    balance: float
    income: float
    expense: float

    @property
    def is_positive(self) -> bool:
        return self.balance >= 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "date": self.date.isoformat(),
            "balance": self.balance,
            "income": self.income,
            "expense": self.expense,
            "is_positive": self.is_positive,
        }


@dataclasses.dataclass
class MonthlyProjectionPoint:
    month: str  # label such as "Nov/25"
    date: dt.date
    balance: float

    def to_dict(self) -> Dict[str, Any]:
        return {"month": self.month, "date": self.date.isoformat(), "balance": self.balance}


@dataclasses.dataclass
class BreakEven:
    already_positive: bool
    month: Optional[str] = None
    months_until: Optional[int] = None
    message: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        if self.already_positive:
            return {"already_positive": True}
        payload: Dict[str, Any] = {
            "already_positive": False,
            "month": self.month,
            "months_until": self.months_until,
        }
        if self.message:
            payload["message"] = self.message
        return payload


@dataclasses.dataclass
class BudgetComparison:
    budget: Optional[float]
    spent: float
    remaining: float

    @property
    def has_exceeded(self) -> bool:
        return self.remaining < 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "budget": self.budget,
            "spent": self.spent,
            "remaining": self.remaining,
            "has_exceeded": self.has_exceeded,
        }


@dataclasses.dataclass
class DailyBudgetSummary:
    date: dt.date
    budget: float
    spent: float
    remaining: float

    @property
    def day(self) -> int:
        return self.date.day

    @property
    def has_exceeded(self) -> bool:
        return self.remaining < 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "date": self.date.isoformat(),
            "day": self.day,
            "budget": self.budget,
            "spent": self.spent,
            "remaining": self.remaining,
            "has_exceeded": self.has_exceeded,
        }


@dataclasses.dataclass
class DashboardStats:
    current_balance: float
    total_incomes: int
    total_recurring: int
    total_transactions: int
    monthly_daily_expenses: float
    monthly_forecast: Optional[MonthlyForecast] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "current_balance": self.current_balance,
            "total_incomes": self.total_incomes,
            "total_recurring": self.total_recurring,
            "total_transactions": self.total_transactions,
            "monthly_daily_expenses": self.monthly_daily_expenses,
            "monthly_forecast": self.monthly_forecast.to_dict() if self.monthly_forecast else None,
        }


@dataclasses.dataclass
class EngineConfig:
    projection_months: int = 6
    break_even_horizon: int = 12
    store_path: Optional[str] = None
    user_id: Optional[str] = None


@dataclasses.dataclass
class ServiceResult(Generic[T]):
    success: bool
    data: T
    error: Optional[str] = None

    @classmethod
    def ok(cls, data: T) -> "ServiceResult[T]":
        return cls(success=True, data=data)

    @classmethod
    def failed(cls, error: str, default: T) -> "ServiceResult[T]":
        return cls(success=False, data=default, error=error)
