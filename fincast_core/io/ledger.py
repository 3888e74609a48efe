from __future__ import annotations

import datetime as dt
import json
import logging
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

import pandas as pd

from fincast_core.domain.models import (
    DailyBudget,
    DailyExpense,
    Income,
    RecordSnapshot,
    RecurringTransaction,
    Transaction,
    make_income,
)
from fincast_core.io.dedup import with_import_hash

logger = logging.getLogger(__name__)

COLLECTIONS = (
    "transactions",
    "incomes",
    "recurring_transactions",
    "daily_budgets",
    "daily_expenses",
)

REQUIRED_COLUMNS = {
    "transactions": {"id", "date", "description", "amount", "type"},
    "incomes": {"id", "description", "amount", "income_type"},
    "recurring_transactions": {"id", "description", "amount", "day_of_month", "type", "start_date"},
    "daily_budgets": {"id", "amount", "start_date"},
    "daily_expenses": {"id", "date", "amount"},
}


class RecordStoreError(Exception):
    """Raised when a record store cannot be read or holds malformed documents."""


def load_record_store(path: str | Path) -> Dict[str, RecordSnapshot]:
    """
    Load every user's records from a local store.

    Two layouts are understood:
    - a JSON document ``{"<user_id>": {"transactions": [...], "incomes": [...], ...}}``
    - a directory holding one sub-directory per user with one CSV per collection
      (``transactions.csv``, ``incomes.csv``, ...); missing files are empty collections.
    """
    store = Path(path)
    if not store.exists():
        raise FileNotFoundError(store)

    if store.is_dir():
        documents = _read_csv_store(store)
    else:
        with open(store, "r", encoding="utf-8") as f:
            documents = json.load(f)
        if not isinstance(documents, dict):
            raise RecordStoreError(f"Expected an object keyed by user id in {store}")

    snapshots = {}
    for user_id, collections in documents.items():
        try:
            snapshots[user_id] = build_snapshot(user_id, collections or {})
        except (KeyError, TypeError, ValueError) as exc:
            raise RecordStoreError(f"Malformed records for user {user_id!r}: {exc}") from exc
    logger.info("Loaded record store %s with %d user(s)", store, len(snapshots))
    return snapshots


def build_snapshot(user_id: str, collections: Dict[str, List[Dict[str, Any]]]) -> RecordSnapshot:
    return RecordSnapshot(
        user_id=user_id,
        transactions=[with_import_hash(t) for t in _parse_all(collections, "transactions", _parse_transaction)],
        incomes=_parse_all(collections, "incomes", _parse_income),
        recurring_transactions=_parse_all(collections, "recurring_transactions", _parse_recurring),
        daily_budgets=_parse_all(collections, "daily_budgets", _parse_budget),
        daily_expenses=[with_import_hash(e) for e in _parse_all(collections, "daily_expenses", _parse_daily_expense)],
    )


def _read_csv_store(root: Path) -> Dict[str, Dict[str, List[Dict[str, Any]]]]:
    documents: Dict[str, Dict[str, List[Dict[str, Any]]]] = {}
    for user_dir in sorted(p for p in root.iterdir() if p.is_dir()):
        collections = {}
        for name in COLLECTIONS:
            csv_path = user_dir / f"{name}.csv"
            if not csv_path.exists():
                continue
            df = pd.read_csv(csv_path, dtype={"id": str})
            missing = REQUIRED_COLUMNS[name] - set(df.columns)
            if missing:
                raise RecordStoreError(f"Missing columns in {csv_path}: {missing}")
            df = df.astype(object).where(pd.notna(df), None)
            collections[name] = df.to_dict(orient="records")
        documents[user_dir.name] = collections
    return documents


def _parse_all(collections: Dict[str, List[Dict[str, Any]]], name: str, parse: Callable[[Dict[str, Any]], Any]) -> list:
    return [parse(doc) for doc in collections.get(name, []) or []]


def _to_date(value: Any) -> dt.date:
    return pd.to_datetime(value).date()


def _opt_date(value: Any) -> Optional[dt.date]:
    return _to_date(value) if value not in (None, "") else None


def _opt_str(value: Any) -> Optional[str]:
    return str(value) if value not in (None, "") else None


def _opt_lower(value: Any) -> Optional[str]:
    text = _opt_str(value)
    return text.lower() if text is not None else None


def _opt_int(value: Any) -> Optional[int]:
    return int(value) if value not in (None, "") else None


def _parse_transaction(doc: Dict[str, Any]) -> Transaction:
    return Transaction(
        id=str(doc["id"]),
        date=_to_date(doc["date"]),
        description=str(doc["description"]),
        amount=float(doc["amount"]),
        type=str(doc["type"]).lower(),
        category=_opt_str(doc.get("category")),
        import_hash=_opt_str(doc.get("import_hash")),
    )


def _parse_income(doc: Dict[str, Any]) -> Income:
    return make_income(
        id=str(doc["id"]),
        description=str(doc["description"]),
        amount=float(doc["amount"]),
        income_type=str(doc["income_type"]).lower(),
        date=_opt_date(doc.get("date")),
        frequency=_opt_lower(doc.get("frequency")),
        day_of_month=_opt_int(doc.get("day_of_month")),
    )


def _parse_recurring(doc: Dict[str, Any]) -> RecurringTransaction:
    return RecurringTransaction(
        id=str(doc["id"]),
        description=str(doc["description"]),
        amount=float(doc["amount"]),
        day_of_month=int(doc["day_of_month"]),
        type=str(doc["type"]).lower(),
        start_date=_to_date(doc["start_date"]),
        frequency=_opt_lower(doc.get("frequency")),
        end_date=_opt_date(doc.get("end_date")),
    )


def _parse_budget(doc: Dict[str, Any]) -> DailyBudget:
    return DailyBudget(
        id=str(doc["id"]),
        amount=float(doc["amount"]),
        start_date=_to_date(doc["start_date"]),
        end_date=_opt_date(doc.get("end_date")),
    )


def _parse_daily_expense(doc: Dict[str, Any]) -> DailyExpense:
    return DailyExpense(
        id=str(doc["id"]),
        date=_to_date(doc["date"]),
        amount=float(doc["amount"]),
        description=_opt_str(doc.get("description")),
        import_hash=_opt_str(doc.get("import_hash")),
    )
