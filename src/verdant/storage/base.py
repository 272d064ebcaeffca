"""Store interface shared by the hosted REST backend and the local sqlite backend."""

from __future__ import annotations

from abc import ABC, abstractmethod
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Iterator


def now_iso() -> str:
    """Current UTC time in the ISO-8601 form the hosted store returns."""
    return datetime.now(timezone.utc).isoformat()


@dataclass(frozen=True)
class Condition:
    """A single column predicate: ``eq``, ``neq`` or ``in``."""

    column: str
    op: str
    value: object


def eq(column: str, value: object) -> Condition:
    return Condition(column, "eq", value)


def neq(column: str, value: object) -> Condition:
    return Condition(column, "neq", value)


def in_(column: str, values: list) -> Condition:
    return Condition(column, "in", list(values))


class Store(ABC):
    """Rows in, rows out. Every write returns the affected rows as dicts."""

    # True when atomic() gives all-or-nothing semantics for the writes inside it
    transactional = False

    @abstractmethod
    def select(
        self,
        table: str,
        *conditions: Condition,
        order: str | None = None,
        descending: bool = False,
        limit: int | None = None,
    ) -> list[dict]:
        ...

    @abstractmethod
    def insert(self, table: str, rows: dict | list[dict]) -> list[dict]:
        ...

    @abstractmethod
    def update(self, table: str, *conditions: Condition, values: dict) -> list[dict]:
        ...

    @abstractmethod
    def delete(self, table: str, *conditions: Condition) -> list[dict]:
        ...

    def get(self, table: str, row_id: object) -> dict | None:
        """Fetch one row by primary key, or None."""
        rows = self.select(table, eq("id", row_id), limit=1)
        return rows[0] if rows else None

    @contextmanager
    def atomic(self) -> Iterator[None]:
        """Group writes. Backends without transactions treat this as a no-op."""
        yield

    def resolve_user(self, token: str) -> str | None:
        """Map a caller's bearer token to a user id, if the backend knows users."""
        return None

    def close(self) -> None:
        pass

    @staticmethod
    def _require_conditions(conditions: tuple[Condition, ...], verb: str) -> None:
        if not conditions:
            raise ValueError(f"Refusing to {verb} without a filter")
