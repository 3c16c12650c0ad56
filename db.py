# db.py

#============================================================#
#                        Trackwise-PM                        #
#============================================================#
# Purpose     : Tabular store for tasks and projects. Rows   #
#               are addressed by position, like a sheet;     #
#               SQLAlchemy keeps them in insertion order.    #
#                                                            #
# Change Log  :                                              #
#  - V1.0.0 : Positional read/append/update/delete.          #
#  - V1.0.1 : Bounded store timeout, typed store errors.     #
#============================================================#


from __future__ import annotations

import logging
from typing import Dict, List, Optional, Protocol, Sequence, Tuple

from sqlalchemy import create_engine, Column, Integer, String
from sqlalchemy.engine import Engine
from sqlalchemy.exc import OperationalError, SQLAlchemyError, TimeoutError as PoolTimeoutError
from sqlalchemy.orm import declarative_base, sessionmaker

from config import get_settings
from errors import StoreReadError, StoreWriteError
from models.project import PROJECTS_TABLE
from models.task import TASKS_TABLE

logger = logging.getLogger(__name__)

Base = declarative_base()

Row = Tuple[str, ...]


class TabularStore(Protocol):
    """Positional row store. No multi-row transactions; each call is visible once it returns."""

    def read_rows(self, table: str) -> List[Row]: ...
    def append_row(self, table: str, row: Sequence) -> None: ...
    def update_row_at(self, table: str, index: int, row: Sequence) -> None: ...
    def delete_row_at(self, table: str, index: int) -> None: ...


class TaskRow(Base):
    __tablename__ = "tasks"
    row_id = Column(Integer, primary_key=True, autoincrement=True)
    id = Column(String, index=True, nullable=False, default="")
    project_id = Column(String, index=True, nullable=False, default="")
    title = Column(String, nullable=False, default="")
    description = Column(String, nullable=False, default="")
    assigned_to = Column(String, nullable=False, default="")
    start_date = Column(String, nullable=False, default="")
    end_date = Column(String, nullable=False, default="")
    due_date = Column(String, nullable=False, default="")
    status = Column(String, nullable=False, default="")
    attachments = Column(String, nullable=False, default="")
    parent_task_id = Column(String, nullable=False, default="")


class ProjectRow(Base):
    __tablename__ = "projects"
    row_id = Column(Integer, primary_key=True, autoincrement=True)
    id = Column(String, index=True, nullable=False, default="")
    name = Column(String, nullable=False, default="")
    owner = Column(String, nullable=False, default="")
    description = Column(String, nullable=False, default="")
    start_date = Column(String, nullable=False, default="")
    end_date = Column(String, nullable=False, default="")
    status = Column(String, nullable=False, default="")
    progress = Column(String, nullable=False, default="0")


# sheet name -> (mapped class, attributes in column order)
_TABLES: Dict[str, tuple] = {
    TASKS_TABLE: (TaskRow, ("id", "project_id", "title", "description", "assigned_to", "start_date",
                            "end_date", "due_date", "status", "attachments", "parent_task_id")),
    PROJECTS_TABLE: (ProjectRow, ("id", "name", "owner", "description", "start_date", "end_date",
                                  "status", "progress")),
}


def engine_options(url: str, timeout: float = 10.0) -> dict:
    """
    Keyword arguments for ``create_engine`` that bound store I/O by ``timeout``.

    How far the bound reaches depends on the backend:
    - sqlite: the driver's busy timeout, i.e. how long a statement waits on a
      locked database file. Statements that hold no lock are not interrupted.
    - postgresql: connection checkout plus a server-side ``statement_timeout``.
    - mysql / mariadb: connection checkout plus ``max_execution_time`` (SELECTs only).
    - anything else: connection checkout only.
    """
    opts = {"pool_pre_ping": True, "future": True}
    backend = url.split(":", 1)[0].split("+", 1)[0].lower()
    millis = int(timeout * 1000)
    if backend == "sqlite":
        opts["connect_args"] = {"timeout": timeout}
        return opts
    opts["pool_timeout"] = timeout
    if backend == "postgresql":
        opts["connect_args"] = {"options": f"-c statement_timeout={millis}"}
    elif backend in ("mysql", "mariadb"):
        opts["connect_args"] = {"init_command": f"SET SESSION max_execution_time={millis}"}
    return opts


def make_engine(url: str, timeout: float = 10.0) -> Engine:
    return create_engine(url, **engine_options(url, timeout))


def init_db(engine: Engine) -> None:
    Base.metadata.create_all(engine)


def _is_transient(exc: Exception) -> bool:
    return isinstance(exc, (OperationalError, PoolTimeoutError))


def _cells(row: Sequence, width: int) -> List[str]:
    vals = ["" if v is None else str(v) for v in list(row)[:width]]
    return vals + [""] * (width - len(vals))


class SheetStore:
    """SQLAlchemy-backed :class:`TabularStore`.

    Position ``i`` is the i-th row ordered by insertion key, so positions shift
    after a delete. Callers must re-read before every positional write.
    """

    def __init__(self, engine: Engine):
        self.engine = engine
        self.SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine,
                                         future=True, expire_on_commit=False)

    def _table(self, table: str):
        try:
            return _TABLES[table]
        except KeyError:
            raise StoreReadError(f"Unknown table {table!r}", table=table) from None

    def read_rows(self, table: str) -> List[Row]:
        model, attrs = self._table(table)
        try:
            with self.SessionLocal() as s:
                rows = (
                    s.query(*[getattr(model, a) for a in attrs])
                    .order_by(model.row_id.asc())
                    .all()
                )
        except SQLAlchemyError as e:
            raise StoreReadError(f"Reading {table} failed: {e}", table=table,
                                 transient=_is_transient(e)) from e
        return [tuple(r) for r in rows]

    def append_row(self, table: str, row: Sequence) -> None:
        model, attrs = self._table(table)
        try:
            with self.SessionLocal() as s:
                s.add(model(**dict(zip(attrs, _cells(row, len(attrs))))))
                s.commit()
        except SQLAlchemyError as e:
            raise StoreWriteError(f"Appending to {table} failed: {e}", table=table,
                                  transient=_is_transient(e)) from e
        logger.debug("Appended row to %s (id=%s)", table, row[0] if row else "")

    def _row_at(self, s, model, index: int):
        if index < 0:
            return None
        return (
            s.query(model)
            .order_by(model.row_id.asc())
            .offset(index)
            .limit(1)
            .one_or_none()
        )

    def update_row_at(self, table: str, index: int, row: Sequence) -> None:
        model, attrs = self._table(table)
        try:
            with self.SessionLocal() as s:
                target = self._row_at(s, model, index)
                if target is None:
                    raise StoreWriteError(f"Invalid row index {index} for {table}", table=table)
                for a, v in zip(attrs, _cells(row, len(attrs))):
                    setattr(target, a, v)
                s.commit()
        except SQLAlchemyError as e:
            raise StoreWriteError(f"Updating {table} row {index} failed: {e}", table=table,
                                  transient=_is_transient(e)) from e

    def delete_row_at(self, table: str, index: int) -> None:
        model, _ = self._table(table)
        try:
            with self.SessionLocal() as s:
                target = self._row_at(s, model, index)
                if target is None:
                    raise StoreWriteError(f"Invalid row index {index} for {table}", table=table)
                s.delete(target)
                s.commit()
        except SQLAlchemyError as e:
            raise StoreWriteError(f"Deleting {table} row {index} failed: {e}", table=table,
                                  transient=_is_transient(e)) from e
        logger.debug("Deleted %s row at index %s", table, index)


_STORE: Optional[SheetStore] = None


def get_store() -> SheetStore:
    """Process-wide store built from settings; creates tables on first use."""
    global _STORE
    if _STORE is None:
        settings = get_settings()
        engine = make_engine(settings.database_url, settings.store_timeout_seconds)
        init_db(engine)
        _STORE = SheetStore(engine)
    return _STORE
