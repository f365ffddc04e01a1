"""
Storage adapters. `build_store` picks one from settings.
"""
import logging

from .base import NAMESPACES, RecordStore, StorageError

logger = logging.getLogger(__name__)


def build_store(settings) -> RecordStore:
    """Instantiate the adapter named by settings.storage_backend."""
    backend = (settings.storage_backend or "json").lower()

    if backend == "memory":
        from .memory import MemoryAdapter
        store = MemoryAdapter()
    elif backend == "json":
        from .json import JsonAdapter
        store = JsonAdapter(data_dir=settings.data_dir)
    elif backend == "sqlite":
        from .sqlite import SqliteAdapter
        store = SqliteAdapter(db_url=settings.db_url)
    elif backend == "sheets":
        from .sheets import SheetsAdapter
        store = SheetsAdapter(
            google_sa_json=settings.resolved_google_sa_json(),
            spreadsheet_id=settings.sheets_spreadsheet_id,
            tab_name=settings.sheets_tab_name,
        )
    else:
        raise ValueError(f"Unknown STORAGE_BACKEND '{settings.storage_backend}'")

    logger.info(f"✓ Storage backend: {backend.upper()}")
    return store


__all__ = ["NAMESPACES", "RecordStore", "StorageError", "build_store"]
