# powerup_api/adapters/sqlite/__init__.py
from __future__ import annotations

import json
import os
import sqlite3
from datetime import datetime, timezone
from typing import Any, List, Optional

from sqlalchemy import (
    Column,
    DateTime,
    MetaData,
    PrimaryKeyConstraint,
    String,
    Table,
    Text,
    and_,
    create_engine,
    delete,
    event,
    insert,
    select,
    update,
)
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.pool import StaticPool

from ..base import StorageError

# ---- Engine (SQLite) with WAL & pragmas -------------------------------------

def _ensure_dir(path: str):
    d = os.path.dirname(path)
    if d and not os.path.isdir(d):
        os.makedirs(d, exist_ok=True)

def make_engine(db_url: str) -> Engine:
    # In-memory databases need a single shared connection
    if db_url in ("sqlite://", "sqlite:///:memory:"):
        return create_engine(
            db_url,
            future=True,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )

    # Create data dir if sqlite file
    if db_url.startswith("sqlite:///"):
        file_path = db_url.replace("sqlite:///", "", 1)
        _ensure_dir(file_path)

    engine = create_engine(db_url, future=True, pool_pre_ping=True)

    # Apply pragmas per-connection
    @event.listens_for(engine, "connect")
    def _set_sqlite_pragma(dbapi_connection, connection_record):  # type: ignore
        if isinstance(dbapi_connection, sqlite3.Connection):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA journal_mode=WAL;")
            cursor.execute("PRAGMA synchronous=NORMAL;")
            cursor.execute("PRAGMA temp_store=MEMORY;")
            cursor.close()

    return engine

# ---- Schema via SQLAlchemy Core ---------------------------------------------

metadata = MetaData()

records = Table(
    "records",
    metadata,
    Column("namespace", String, nullable=False),
    Column("key", String, nullable=False),
    Column("value", Text, nullable=False),  # JSON document
    Column("updated_at", DateTime, nullable=False),
    PrimaryKeyConstraint("namespace", "key", name="pk_records"),
)


def _now() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


class SqliteAdapter:
    """
    Key/value store on a single SQLAlchemy table.

    One row per (namespace, key); the value column holds the JSON document
    (a project's whole drawing list, a discipline map, ...).
    """

    def __init__(self, db_url: str = "sqlite:///data/powerup.db", engine: Optional[Engine] = None):
        self.engine = engine or make_engine(db_url)
        metadata.create_all(self.engine)

    def _where(self, namespace: str, key: str):
        return and_(records.c.namespace == namespace, records.c.key == key)

    async def get(self, namespace: str, key: str) -> Optional[Any]:
        try:
            with self.engine.connect() as conn:
                row = conn.execute(
                    select(records.c.value).where(self._where(namespace, key))
                ).first()
        except SQLAlchemyError as e:
            raise StorageError("get", namespace, key, e) from e
        if row is None:
            return None
        try:
            return json.loads(row[0])
        except json.JSONDecodeError as e:
            raise StorageError("get", namespace, key, e) from e

    async def set(self, namespace: str, key: str, value: Any) -> None:
        payload = json.dumps(value, ensure_ascii=False)
        try:
            with self.engine.begin() as conn:
                result = conn.execute(
                    update(records)
                    .where(self._where(namespace, key))
                    .values(value=payload, updated_at=_now())
                )
                if result.rowcount == 0:
                    conn.execute(
                        insert(records).values(
                            namespace=namespace, key=key, value=payload, updated_at=_now()
                        )
                    )
        except SQLAlchemyError as e:
            raise StorageError("set", namespace, key, e) from e

    async def delete(self, namespace: str, key: str) -> None:
        try:
            with self.engine.begin() as conn:
                conn.execute(delete(records).where(self._where(namespace, key)))
        except SQLAlchemyError as e:
            raise StorageError("delete", namespace, key, e) from e

    async def keys(self, namespace: str) -> List[str]:
        try:
            with self.engine.connect() as conn:
                rows = conn.execute(
                    select(records.c.key)
                    .where(records.c.namespace == namespace)
                    .order_by(records.c.key)
                ).all()
        except SQLAlchemyError as e:
            raise StorageError("keys", namespace, None, e) from e
        return [r[0] for r in rows]

    async def clear(self, namespace: str) -> None:
        try:
            with self.engine.begin() as conn:
                conn.execute(delete(records).where(records.c.namespace == namespace))
        except SQLAlchemyError as e:
            raise StorageError("clear", namespace, None, e) from e
