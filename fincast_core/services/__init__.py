from fincast_core.services.balance import compute_unified_balance  # noqa: F401
from fincast_core.services.forecaster import get_monthly_forecast  # noqa: F401
from fincast_core.services.frequency import daily_contribution, monthly_equivalent  # noqa: F401
from fincast_core.services.pipeline import CashflowEngine  # noqa: F401
from fincast_core.services.projection import generate_projection, get_break_even_month  # noqa: F401
from fincast_core.services.projector import project_daily_cash_flow  # noqa: F401

__all__ = [
    "compute_unified_balance",
    "get_monthly_forecast",
    "daily_contribution",
    "monthly_equivalent",
    "CashflowEngine",
    "generate_projection",
    "get_break_even_month",
    "project_daily_cash_flow",
]
