"""Local sqlite implementation of the store, backed by SQLModel tables."""

from __future__ import annotations

import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, SQLModel, select

from verdant.errors import StoreError
from verdant.storage.base import Condition, Store
from verdant.storage.database import get_engine
from verdant.storage.models import TABLES


class SqlStore(Store):
    """Store over a sqlite file. ``atomic()`` is a real transaction here."""

    transactional = True

    def __init__(self, db_path: Path) -> None:
        self._engine = get_engine(db_path)
        # One open transaction per thread; the HTTP app serves requests from a pool
        self._local = threading.local()

    # -- reads ---------------------------------------------------------------

    def select(
        self,
        table: str,
        *conditions: Condition,
        order: str | None = None,
        descending: bool = False,
        limit: int | None = None,
    ) -> list[dict]:
        model = self._model(table)
        statement = select(model)
        for condition in conditions:
            statement = statement.where(self._clause(model, condition))
        if order:
            column = self._column(model, order)
            statement = statement.order_by(column.desc() if descending else column.asc())
        else:
            statement = statement.order_by(model.id)
        if limit:
            statement = statement.limit(limit)

        with self._session() as session:
            return [self._row(obj) for obj in session.exec(statement).all()]

    # -- writes --------------------------------------------------------------

    def insert(self, table: str, rows: dict | list[dict]) -> list[dict]:
        model = self._model(table)
        batch = [rows] if isinstance(rows, dict) else rows
        with self._session() as session:
            objects = [model(**self._checked(model, row)) for row in batch]
            session.add_all(objects)
            session.flush()
            for obj in objects:
                session.refresh(obj)
            return [self._row(obj) for obj in objects]

    def update(self, table: str, *conditions: Condition, values: dict) -> list[dict]:
        self._require_conditions(conditions, "update")
        model = self._model(table)
        values = self._checked(model, values)
        with self._session() as session:
            objects = self._matching(session, model, conditions)
            for obj in objects:
                for key, value in values.items():
                    setattr(obj, key, value)
                session.add(obj)
            session.flush()
            return [self._row(obj) for obj in objects]

    def delete(self, table: str, *conditions: Condition) -> list[dict]:
        self._require_conditions(conditions, "delete")
        model = self._model(table)
        with self._session() as session:
            objects = self._matching(session, model, conditions)
            deleted = [self._row(obj) for obj in objects]
            for obj in objects:
                session.delete(obj)
            session.flush()
            return deleted

    @contextmanager
    def atomic(self) -> Iterator[None]:
        if getattr(self._local, "session", None) is not None:
            yield  # already inside a transaction on this thread
            return

        session = Session(self._engine)
        self._local.session = session
        try:
            yield
            session.commit()
        except SQLAlchemyError as exc:
            session.rollback()
            raise StoreError(f"Transaction failed: {exc}") from exc
        except BaseException:
            session.rollback()
            raise
        finally:
            session.close()
            self._local.session = None

    # -- helpers -------------------------------------------------------------

    @contextmanager
    def _session(self) -> Iterator[Session]:
        shared = getattr(self._local, "session", None)
        try:
            if shared is not None:
                yield shared
                return
            with Session(self._engine) as session:
                yield session
                session.commit()
        except SQLAlchemyError as exc:
            raise StoreError(str(exc)) from exc

    @staticmethod
    def _model(table: str) -> type[SQLModel]:
        try:
            return TABLES[table]
        except KeyError:
            raise StoreError(f"Unknown table: {table}") from None

    @staticmethod
    def _column(model: type[SQLModel], name: str):
        column = getattr(model, name, None)
        if column is None or name not in model.model_fields:
            raise StoreError(f"Unknown column {model.__tablename__}.{name}")
        return column

    def _clause(self, model: type[SQLModel], condition: Condition):
        column = self._column(model, condition.column)
        if condition.op == "eq":
            return column == condition.value
        if condition.op == "neq":
            return column != condition.value
        if condition.op == "in":
            return column.in_(condition.value)
        raise StoreError(f"Unsupported operator: {condition.op}")

    def _matching(self, session: Session, model, conditions) -> list:
        statement = select(model)
        for condition in conditions:
            statement = statement.where(self._clause(model, condition))
        return list(session.exec(statement).all())

    @staticmethod
    def _checked(model: type[SQLModel], values: dict) -> dict:
        unknown = set(values) - set(model.model_fields)
        if unknown:
            raise StoreError(
                f"Unknown column(s) for {model.__tablename__}: {', '.join(sorted(unknown))}"
            )
        return values

    @staticmethod
    def _row(obj: SQLModel) -> dict:
        # Copy JSON columns so callers can't mutate session state in place
        return {key: (dict(value) if isinstance(value, dict) else value)
                for key, value in obj.model_dump().items()}
