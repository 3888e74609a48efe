from fincast_core.io.config import load_engine_config  # noqa: F401
from fincast_core.io.ledger import RecordStoreError, load_record_store  # noqa: F401
from fincast_core.io.repository import (  # noqa: F401
    FileRecordRepository,
    InMemoryRepository,
    RecordRepository,
    RepositoryResult,
    fetch_snapshot,
)

__all__ = [
    "load_engine_config",
    "load_record_store",
    "RecordStoreError",
    "FileRecordRepository",
    "InMemoryRepository",
    "RecordRepository",
    "RepositoryResult",
    "fetch_snapshot",
]
