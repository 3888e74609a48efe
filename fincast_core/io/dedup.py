from __future__ import annotations

import dataclasses
import datetime as dt
import hashlib
import re
from typing import Iterable, List, Tuple, TypeVar, Union

from fincast_core.domain.models import DailyExpense, Transaction

R = TypeVar("R", Transaction, DailyExpense)

_HASH_RE = re.compile(r"^[a-f0-9]{64}$", re.IGNORECASE)


def generate_transaction_hash(date: Union[dt.date, str], description: str, amount: float) -> str:
    """
    Stable SHA-256 key of an imported movement.
    The key is ``YYYY-MM-DD_<trimmed lowercase description>_<amount to 2dp>``.
    """
    date_str = date.isoformat() if isinstance(date, dt.date) else str(date)
    key = f"{date_str}_{str(description or '').strip().lower()}_{float(amount):.2f}"
    return hashlib.sha256(key.encode("utf-8")).hexdigest()


def is_valid_hash(value: str | None) -> bool:
    if not value:
        return False
    return bool(_HASH_RE.match(value))


def with_import_hash(record: R) -> R:
    """Return ``record`` with its import hash, computing it when missing."""
    if record.import_hash:
        return record
    return dataclasses.replace(
        record,
        import_hash=generate_transaction_hash(record.date, record.description or "", record.amount),
    )


def _split(records: Iterable[R]) -> Tuple[List[R], List[R]]:
    seen = set()
    unique: List[R] = []
    repeated: List[R] = []
    for record in map(with_import_hash, records):
        if record.import_hash in seen:
            repeated.append(record)
            continue
        seen.add(record.import_hash)
        unique.append(record)
    return unique, repeated


def remove_duplicates(records: Iterable[R]) -> List[R]:
    """Keep the first record for every import hash; used when merging an import batch."""
    return _split(records)[0]


def find_duplicates(records: Iterable[R]) -> List[R]:
    """Records whose import hash already appeared earlier in ``records``."""
    return _split(records)[1]
