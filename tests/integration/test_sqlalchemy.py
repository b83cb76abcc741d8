"""Integration tests for SQLAlchemyExecutor using an in-memory SQLite engine."""
from __future__ import annotations

import pytest

sqlalchemy = pytest.importorskip("sqlalchemy")

from sqlalchemy.orm import Session  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from stitchql import InsertQuery, SelectQuery, Statement, UpdateQuery  # noqa: E402
from stitchql.execute import SQLAlchemyExecutor  # noqa: E402

PEOPLE = [
    {"id": 1, "name": "Ada", "age": 36},
    {"id": 2, "name": "Grace", "age": 45},
    {"id": 3, "name": "Linus", "age": 28},
]


@pytest.fixture()
def engine():
    engine = sqlalchemy.create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    with engine.begin() as conn:
        conn.exec_driver_sql(
            "CREATE TABLE people (id INTEGER PRIMARY KEY, name TEXT NOT NULL, age INTEGER)"
        )
    executor = SQLAlchemyExecutor(engine)
    for person in PEOPLE:
        InsertQuery("people").values(person).execute(executor)
    yield engine
    engine.dispose()


def test_select_through_engine(engine):
    rows = (
        SelectQuery("people")
        .select("name")
        .where(Statement().and_("age > ?", 30).or_("id = ?", 30))
        .order_by({"field": "name"})
        .execute(SQLAlchemyExecutor(engine))
    )
    assert rows == [{"name": "Ada"}, {"name": "Grace"}]


def test_insert_returning(engine):
    rows = (
        InsertQuery("people")
        .values({"id": 4, "name": "Barbara", "age": 52})
        .returning(["id", "name"])
        .execute(SQLAlchemyExecutor(engine))
    )
    assert rows == [{"id": 4, "name": "Barbara"}]


def test_statement_without_rows(engine):
    executor = SQLAlchemyExecutor(engine)
    assert UpdateQuery("people").set("age", 29).where("id = ?", 3).execute(executor) == []
    assert SelectQuery("people").select("age").where("id = ?", 3).get_one(executor) == {
        "age": 29
    }


def test_connection_leaves_transaction_to_caller(engine):
    with engine.connect() as conn:
        executor = SQLAlchemyExecutor(conn)
        UpdateQuery("people").set("name", "Ada L.").where("id = ?", 1).execute(executor)
        conn.rollback()
    row = SelectQuery("people").select("name").where("id = ?", 1).get_one(
        SQLAlchemyExecutor(engine)
    )
    assert row == {"name": "Ada"}


def test_session(engine):
    with Session(engine) as session:
        rows = SelectQuery("people").select("id").where("name = ?", "Grace").execute(
            SQLAlchemyExecutor(session)
        )
    assert rows == [{"id": 2}]
