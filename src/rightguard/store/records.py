"""Generic primary-key CRUD over a single Right Guard table."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Mapping, Optional

import sqlalchemy as sa
from sqlalchemy.orm import Session, sessionmaker

from rightguard.store.sql import session_factory as default_session_factory

LOGGER = logging.getLogger(__name__)


class RecordStore:
    """Create/read/update/delete rows of one table keyed by its primary key.

    Rows travel as plain dictionaries keyed by column name. Services translate
    them into the pydantic models in :mod:`rightguard.models`.
    """

    def __init__(self, table: sa.Table, session_factory: sessionmaker | None = None) -> None:
        primary_key = list(table.primary_key.columns)
        if len(primary_key) != 1:
            raise ValueError(f"RecordStore requires a single-column primary key on '{table.name}'")
        self.table = table
        self._pk = primary_key[0]
        self._session_factory = session_factory or default_session_factory()

    @contextmanager
    def _session_scope(self) -> Iterator[Session]:
        session = self._session_factory()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def _where(self, filters: Mapping[str, Any]) -> List[sa.ColumnElement[bool]]:
        clauses = []
        for name, value in filters.items():
            if name not in self.table.c:
                raise KeyError(f"Unknown column '{name}' for table '{self.table.name}'")
            clauses.append(self.table.c[name] == value)
        return clauses

    # ------------------------------------------------------------------
    # CRUD
    # ------------------------------------------------------------------
    def insert(self, values: Mapping[str, Any]) -> Dict[str, Any]:
        with self._session_scope() as session:
            session.execute(self.table.insert().values(**values))
        created = self.get(values[self._pk.name])
        if created is None:  # pragma: no cover - only if the row vanished between statements
            raise RuntimeError(f"Inserted row missing from '{self.table.name}'")
        return created

    def get(self, pk: Any) -> Optional[Dict[str, Any]]:
        return self.find_one(**{self._pk.name: pk})

    def find_one(self, **filters: Any) -> Optional[Dict[str, Any]]:
        with self._session_scope() as session:
            stmt = sa.select(self.table).where(*self._where(filters)).limit(1)
            row = session.execute(stmt).mappings().first()
        return dict(row) if row else None

    def list(
        self,
        filters: Optional[Mapping[str, Any]] = None,
        *,
        order_by: Optional[str] = None,
        descending: bool = True,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> List[Dict[str, Any]]:
        stmt = sa.select(self.table).where(*self._where(filters or {}))
        if order_by:
            column = self.table.c[order_by]
            stmt = stmt.order_by(column.desc() if descending else column.asc())
        if offset:
            stmt = stmt.offset(offset)
        if limit is not None:
            stmt = stmt.limit(limit)
        with self._session_scope() as session:
            rows = session.execute(stmt).mappings().all()
        return [dict(row) for row in rows]

    def update(self, pk: Any, values: Mapping[str, Any]) -> Optional[Dict[str, Any]]:
        with self._session_scope() as session:
            result = session.execute(self.table.update().where(self._pk == pk).values(**values))
            if result.rowcount == 0:
                return None
        return self.get(pk)

    def delete(self, **filters: Any) -> int:
        if not filters:
            raise ValueError("Refusing to delete without filters")
        with self._session_scope() as session:
            result = session.execute(self.table.delete().where(*self._where(filters)))
        LOGGER.debug("Deleted %s row(s) from %s", result.rowcount, self.table.name)
        return result.rowcount


__all__ = ["RecordStore"]
