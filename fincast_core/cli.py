from __future__ import annotations

import json
import logging
from datetime import date
from pathlib import Path
from typing import Any, Iterable, List, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from fincast_core.domain.models import EngineConfig, ServiceResult
from fincast_core.io import config as config_io
from fincast_core.io.repository import FileRecordRepository
from fincast_core.services.pipeline import CashflowEngine

app = typer.Typer(help="Balance, forecast and cash-flow projection CLI.")
console = Console()

STORE_OPTION = typer.Option(None, envvar="FINCAST_STORE", help="Record store: JSON file or per-user CSV directory")
USER_OPTION = typer.Option(None, envvar="FINCAST_USER", help="User whose records are projected")
CONFIG_OPTION = typer.Option(None, help="Engine config JSON")
TODAY_OPTION = typer.Option(None, help="Evaluation date (YYYY-MM-DD), defaults to today")
OUT_OPTION = typer.Option(None, help="Write the JSON result to this path")
TABLE_OPTION = typer.Option(False, "--table", help="Render a table instead of JSON")


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Log at INFO level")):
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _save_json(path: Path, payload):
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        json.dump(payload, f, indent=2)


def _parse_day(raw: Optional[str]) -> Optional[date]:
    if raw is None:
        return None
    try:
        return date.fromisoformat(raw)
    except ValueError as exc:
        raise typer.BadParameter(f"Invalid date {raw!r}, expected YYYY-MM-DD") from exc


def _engine(store: Optional[Path], user: Optional[str], config: Optional[Path], today: Optional[str]) -> CashflowEngine:
    conf = config_io.load_engine_config(config) if config else EngineConfig()
    store_path = store or (Path(conf.store_path) if conf.store_path else None)
    user_id = user or conf.user_id
    if store_path is None:
        raise typer.BadParameter("Provide --store, FINCAST_STORE or store_path in the config")
    if not user_id:
        raise typer.BadParameter("Provide --user, FINCAST_USER or user_id in the config")
    return CashflowEngine(
        FileRecordRepository(store_path),
        user_id,
        evaluation_date=_parse_day(today),
        config=conf,
    )


def _to_json(data: Any) -> Any:
    if isinstance(data, list):
        return [_to_json(item) for item in data]
    if hasattr(data, "to_dict"):
        return data.to_dict()
    return data


def _table(title: str, columns: List[str], rows: Iterable[Iterable[Any]]) -> Table:
    table = Table(title=title)
    for column in columns:
        table.add_column(column, justify="right" if column != columns[0] else "left")
    for row in rows:
        table.add_row(*[f"{v:,.2f}" if isinstance(v, float) else str(v) for v in row])
    return table


def _emit(result: ServiceResult, out: Optional[Path], table: Optional[Table] = None) -> None:
    if not result.success:
        console.print(f"[red]Error:[/red] {result.error}")
        raise typer.Exit(code=1)
    payload = _to_json(result.data)
    if out:
        _save_json(out, payload)
        typer.echo(f"Result written to {out}")
    elif table is not None:
        console.print(table)
    else:
        typer.echo(json.dumps(payload, indent=2))


@app.command()
def balance(
    store: Optional[Path] = STORE_OPTION,
    user: Optional[str] = USER_OPTION,
    config: Optional[Path] = CONFIG_OPTION,
    today: Optional[str] = TODAY_OPTION,
    out: Optional[Path] = OUT_OPTION,
):
    """Current balance across transactions, incomes and daily expenses."""
    engine = _engine(store, user, config, today)
    _emit(engine.compute_unified_balance(), out)


@app.command()
def incomes(
    start: Optional[str] = typer.Option(None, help="Total income from this date (YYYY-MM-DD)"),
    end: Optional[str] = typer.Option(None, help="Total income up to this date (YYYY-MM-DD)"),
    store: Optional[Path] = STORE_OPTION,
    user: Optional[str] = USER_OPTION,
    config: Optional[Path] = CONFIG_OPTION,
    today: Optional[str] = TODAY_OPTION,
    out: Optional[Path] = OUT_OPTION,
):
    """Income totals, or the income of a date range when --start or --end is given."""
    engine = _engine(store, user, config, today)
    if start is None and end is None:
        _emit(engine.total_incomes(), out)
        return
    try:
        result = engine.calculate_total_income(_parse_day(start), _parse_day(end))
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc
    _emit(result, out)


@app.command()
def forecast(
    year: Optional[int] = typer.Option(None, help="Year, defaults to the evaluation year"),
    month: Optional[int] = typer.Option(None, min=1, max=12, help="Month 1-12, defaults to the evaluation month"),
    store: Optional[Path] = STORE_OPTION,
    user: Optional[str] = USER_OPTION,
    config: Optional[Path] = CONFIG_OPTION,
    today: Optional[str] = TODAY_OPTION,
    out: Optional[Path] = OUT_OPTION,
):
    """Expected income and expenses for one calendar month."""
    engine = _engine(store, user, config, today)
    _emit(
        engine.get_monthly_forecast(year or engine.evaluation_date.year, month or engine.evaluation_date.month),
        out,
    )


@app.command()
def project(
    months: Optional[int] = typer.Option(None, min=0, help="Months to project day by day"),
    store: Optional[Path] = STORE_OPTION,
    user: Optional[str] = USER_OPTION,
    config: Optional[Path] = CONFIG_OPTION,
    today: Optional[str] = TODAY_OPTION,
    out: Optional[Path] = OUT_OPTION,
    as_table: bool = TABLE_OPTION,
):
    """Daily cash-flow projection starting today."""
    engine = _engine(store, user, config, today)
    result = engine.project_daily_cash_flow(months)
    table = None
    if as_table and result.success:
        table = _table(
            "Daily cash flow",
            ["Date", "Income", "Expense", "Balance"],
            ([p.date.isoformat(), p.income, p.expense, p.balance] for p in result.data),
        )
    _emit(result, out, table)


@app.command()
def projection(
    months: Optional[int] = typer.Option(None, min=0, help="Months to project"),
    store: Optional[Path] = STORE_OPTION,
    user: Optional[str] = USER_OPTION,
    config: Optional[Path] = CONFIG_OPTION,
    today: Optional[str] = TODAY_OPTION,
    out: Optional[Path] = OUT_OPTION,
    as_table: bool = TABLE_OPTION,
):
    """Month-by-month balance projection."""
    engine = _engine(store, user, config, today)
    result = engine.generate_projection(months)
    table = None
    if as_table and result.success:
        table = _table("Monthly projection", ["Month", "Balance"], ([p.month, p.balance] for p in result.data))
    _emit(result, out, table)


@app.command("break-even")
def break_even(
    store: Optional[Path] = STORE_OPTION,
    user: Optional[str] = USER_OPTION,
    config: Optional[Path] = CONFIG_OPTION,
    today: Optional[str] = TODAY_OPTION,
    out: Optional[Path] = OUT_OPTION,
):
    """First month in which the projected balance is no longer negative."""
    engine = _engine(store, user, config, today)
    _emit(engine.get_break_even_month(), out)


@app.command()
def budget(
    year: Optional[int] = typer.Option(None, help="Year, defaults to the evaluation year"),
    month: Optional[int] = typer.Option(None, min=1, max=12, help="Month 1-12, defaults to the evaluation month"),
    day: Optional[str] = typer.Option(None, help="Compare budget vs spent for a single day (YYYY-MM-DD)"),
    store: Optional[Path] = STORE_OPTION,
    user: Optional[str] = USER_OPTION,
    config: Optional[Path] = CONFIG_OPTION,
    today: Optional[str] = TODAY_OPTION,
    out: Optional[Path] = OUT_OPTION,
    as_table: bool = TABLE_OPTION,
):
    """Daily budget against recorded spend, for one day or a whole month."""
    engine = _engine(store, user, config, today)
    if day:
        _emit(engine.compare_budget_vs_spent(_parse_day(day)), out)
        return
    result = engine.monthly_daily_budget_summary(year, month)
    table = None
    if as_table and result.success:
        table = _table(
            "Daily budget",
            ["Date", "Budget", "Spent", "Remaining"],
            ([s.date.isoformat(), s.budget, s.spent, s.remaining] for s in result.data),
        )
    _emit(result, out, table)


@app.command()
def dashboard(
    store: Optional[Path] = STORE_OPTION,
    user: Optional[str] = USER_OPTION,
    config: Optional[Path] = CONFIG_OPTION,
    today: Optional[str] = TODAY_OPTION,
    out: Optional[Path] = OUT_OPTION,
):
    """Headline figures: balance, record counts, month spend and forecast."""
    engine = _engine(store, user, config, today)
    _emit(engine.get_dashboard_stats(), out)


@app.command()
def duplicates(
    store: Optional[Path] = STORE_OPTION,
    user: Optional[str] = USER_OPTION,
    config: Optional[Path] = CONFIG_OPTION,
    out: Optional[Path] = OUT_OPTION,
):
    """Stored records whose import hash repeats an earlier one. Nothing is removed."""
    engine = _engine(store, user, config, None)
    _emit(engine.find_duplicate_imports(), out)


if __name__ == "__main__":
    app()
