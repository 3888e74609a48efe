from __future__ import annotations

import dataclasses
import logging
from pathlib import Path
from typing import Dict, Generic, List, Optional, Protocol, TypeVar

from fincast_core.domain.models import (
    DailyBudget,
    DailyExpense,
    Income,
    RecordSnapshot,
    RecurringTransaction,
    Transaction,
)
from fincast_core.io.ledger import RecordStoreError, load_record_store

logger = logging.getLogger(__name__)

R = TypeVar("R")


@dataclasses.dataclass
class RepositoryResult(Generic[R]):
    success: bool
    records: List[R] = dataclasses.field(default_factory=list)
    error: Optional[str] = None


class RecordRepository(Protocol):
    """Read side of the per-user document store."""

    def list_transactions(self, user_id: str) -> RepositoryResult[Transaction]: ...

    def list_incomes(self, user_id: str) -> RepositoryResult[Income]: ...

    def list_recurring_transactions(self, user_id: str) -> RepositoryResult[RecurringTransaction]: ...

    def list_daily_budgets(self, user_id: str) -> RepositoryResult[DailyBudget]: ...

    def list_daily_expenses(self, user_id: str) -> RepositoryResult[DailyExpense]: ...


class InMemoryRepository:
    """Repository over snapshots already held in memory, keyed by user id."""

    def __init__(self, snapshots: Optional[Dict[str, RecordSnapshot]] = None):
        self._snapshots = dict(snapshots or {})

    def _collection(self, user_id: str, name: str) -> RepositoryResult:
        snapshot = self._snapshots.get(user_id)
        if snapshot is None:
            return RepositoryResult(success=False, error=f"Unknown user {user_id!r}")
        return RepositoryResult(success=True, records=list(getattr(snapshot, name)))

    def list_transactions(self, user_id: str) -> RepositoryResult[Transaction]:
        return self._collection(user_id, "transactions")

    def list_incomes(self, user_id: str) -> RepositoryResult[Income]:
        return self._collection(user_id, "incomes")

    def list_recurring_transactions(self, user_id: str) -> RepositoryResult[RecurringTransaction]:
        return self._collection(user_id, "recurring_transactions")

    def list_daily_budgets(self, user_id: str) -> RepositoryResult[DailyBudget]:
        return self._collection(user_id, "daily_budgets")

    def list_daily_expenses(self, user_id: str) -> RepositoryResult[DailyExpense]:
        return self._collection(user_id, "daily_expenses")


class FileRecordRepository(InMemoryRepository):
    """
    Repository backed by a local record store (see ``load_record_store``).
    The store is read on first use and kept until ``reload``; a store that
    cannot be read is reported as a failed result rather than raised.
    """

    def __init__(self, path: str | Path):
        super().__init__()
        self.path = Path(path)
        self._loaded = False
        self._load_error: Optional[str] = None

    def reload(self) -> None:
        self._loaded = False
        self._load_error = None
        self._snapshots = {}

    def _load(self) -> None:
        if self._loaded:
            return
        self._loaded = True
        try:
            self._snapshots = load_record_store(self.path)
        except (OSError, ValueError, RecordStoreError) as exc:
            logger.warning("Could not read record store %s: %s", self.path, exc)
            self._load_error = str(exc)

    def _collection(self, user_id: str, name: str) -> RepositoryResult:
        self._load()
        if self._load_error is not None:
            return RepositoryResult(success=False, error=self._load_error)
        return super()._collection(user_id, name)


def fetch_snapshot(repository: RecordRepository, user_id: str) -> RepositoryResult[RecordSnapshot]:
    """
    Read all five collections once. The first failing read aborts the fetch
    and its error is returned; ``records`` then holds nothing.
    """
    collections = {}
    for name, reader in (
        ("transactions", repository.list_transactions),
        ("incomes", repository.list_incomes),
        ("recurring_transactions", repository.list_recurring_transactions),
        ("daily_budgets", repository.list_daily_budgets),
        ("daily_expenses", repository.list_daily_expenses),
    ):
        result = reader(user_id)
        if not result.success:
            return RepositoryResult(success=False, error=f"{name}: {result.error}")
        collections[name] = result.records
    return RepositoryResult(success=True, records=[RecordSnapshot(user_id=user_id, **collections)])
