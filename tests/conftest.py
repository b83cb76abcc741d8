"""Shared pytest fixtures for stitchQL unit and integration tests."""
from __future__ import annotations

import re
import sqlite3
from collections.abc import Iterator
from typing import Any

import pytest

from stitchql import BuildOptions, QueryFactory, SelectQuery, Statement

USERS_DDL = """
CREATE TABLE users (
    id INTEGER PRIMARY KEY,
    name TEXT NOT NULL,
    age INTEGER NOT NULL,
    status TEXT NOT NULL
);
CREATE TABLE orders (
    id INTEGER PRIMARY KEY,
    user_id INTEGER NOT NULL REFERENCES users(id),
    total REAL NOT NULL
);
"""

USERS = [
    (1, "Ada", 36, "active"),
    (2, "Grace", 45, "active"),
    (3, "Linus", 28, "inactive"),
    (4, "Barbara", 52, "active"),
]

ORDERS = [
    (1, 1, 120.0),
    (2, 1, 35.5),
    (3, 2, 410.0),
    (4, 4, 12.0),
]


class RecordingExecutor:
    """Collects every ``(text, values)`` call and replies with canned rows."""

    def __init__(self, rows: Any = None) -> None:
        self.calls: list[tuple[str, list[Any]]] = []
        self.rows = [] if rows is None else rows

    def execute(self, text: str, values: list[Any]) -> Any:
        self.calls.append((text, list(values)))
        return self.rows


@pytest.fixture()
def recorder() -> RecordingExecutor:
    return RecordingExecutor(rows=[{"id": 1, "name": "Ada"}])


@pytest.fixture(scope="session")
def mysql_factory() -> QueryFactory:
    return QueryFactory(BuildOptions(flavor="mysql"))


@pytest.fixture()
def adults() -> SelectQuery:
    """``SELECT id, name FROM users AS u WHERE u.age > 18``."""
    return (
        SelectQuery("users", "u")
        .select(["u.id", "u.name"])
        .where(Statement().and_("u.age > ?", 18))
    )


@pytest.fixture()
def db() -> Iterator[sqlite3.Connection]:
    conn = sqlite3.connect(":memory:")
    conn.row_factory = sqlite3.Row
    conn.executescript(USERS_DDL)
    conn.executemany("INSERT INTO users VALUES (?, ?, ?, ?)", USERS)
    conn.executemany("INSERT INTO orders VALUES (?, ?, ?)", ORDERS)
    conn.commit()
    yield conn
    conn.close()


@pytest.fixture()
def sqlite_run(db: sqlite3.Connection):
    """Executor running ``$N`` SQL through sqlite3, which understands the ``?N`` form."""

    def _run(text: str, values: list[Any]) -> list[dict[str, Any]]:
        cursor = db.execute(re.sub(r"\$(\d+)", r"?\1", text), values)
        if cursor.description is None:
            return []
        return [dict(row) for row in cursor.fetchall()]

    return _run
