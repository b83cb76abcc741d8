"""End-to-end tests running built queries against an in-memory SQLite database.

SQLite accepts ``?N`` numbered parameters, so ``sqlite_run`` only rewrites the
``$`` prefix; shared placeholders produced by deduplication bind the same
value at every occurrence.
"""
from __future__ import annotations

from pydantic import BaseModel

from stitchql import (
    Cte,
    DeleteQuery,
    InsertQuery,
    Join,
    OrderBy,
    SelectQuery,
    Statement,
    UpdateQuery,
)


class Person(BaseModel):
    id: int
    name: str


def _names(rows):
    return sorted(row["name"] for row in rows)


def test_select_with_statement(sqlite_run):
    rows = (
        SelectQuery("users", "u")
        .select(["u.name"])
        .where(Statement().and_("u.age > ?", 30).and_("u.status = ?", "active"))
        .order_by(OrderBy(column="u.name"))
        .execute(sqlite_run)
    )
    assert [row["name"] for row in rows] == ["Ada", "Barbara", "Grace"]


def test_shared_placeholder_binds_once(sqlite_run):
    query = SelectQuery("users").select("name").where(
        Statement().and_("age > ?", 40).or_("id > ?", 40)
    )
    assert query.build().values == [40]
    assert _names(query.execute(sqlite_run)) == ["Barbara", "Grace"]


def test_join_subquery(sqlite_run):
    spent = (
        SelectQuery("orders")
        .raw_select(["user_id", "SUM(total) AS spent"])
        .where("total > ?", 20)
        .group_by("user_id")
    )
    rows = (
        SelectQuery("users", "u")
        .raw_select(["u.name", "o.spent"])
        .join(Join(subquery=spent, alias="o", on="o.user_id = u.id"))
        .where("u.age > ?", 40)
        .execute(sqlite_run)
    )
    assert rows == [{"name": "Grace", "spent": 410.0}]


def test_in_subquery_and_validation(sqlite_run):
    big_spenders = SelectQuery("orders").select("user_id").where("total > ?", 100)
    rows = (
        SelectQuery("users")
        .select(["id", "name"])
        .where(Statement().in_subquery("id", big_spenders).and_("status = ?", "active"))
        .order_by({"field": "id"})
        .validate(Person)
        .execute(sqlite_run)
    )
    assert rows == [Person(id=1, name="Ada"), Person(id=2, name="Grace")]


def test_cte(sqlite_run):
    active = Cte("active_users", SelectQuery("users").where("status = ?", "active"))
    rows = (
        SelectQuery("active_users")
        .with_(active)
        .select("name")
        .where("age < ?", 40)
        .execute(sqlite_run)
    )
    assert _names(rows) == ["Ada"]


def test_raw_union(sqlite_run):
    young = SelectQuery("users").select("name").where("age < ?", 30)
    senior = SelectQuery("users").select("name").where("age > ?", 50)
    built = young.union_all(senior).raw_union()
    assert _names(sqlite_run(built.text, built.values)) == ["Barbara", "Linus"]


def test_get_one(sqlite_run):
    row = SelectQuery("users").select("name").order_by({"field": "age", "direction": "desc"})
    assert row.get_one(sqlite_run) == {"name": "Barbara"}


def test_insert_returning(sqlite_run):
    rows = (
        InsertQuery("users")
        .values({"id": 5, "name": "Edsger", "age": 72, "status": "active"})
        .returning(["id", "name"])
        .execute(sqlite_run)
    )
    assert rows == [{"id": 5, "name": "Edsger"}]


def test_insert_from_select(sqlite_run, db):
    db.execute("CREATE TABLE archived (id INTEGER, name TEXT)")
    InsertQuery("archived").from_select(
        SelectQuery("users").select(["id", "name"]).where("status = ?", "inactive")
    ).execute(sqlite_run)
    assert [tuple(row) for row in db.execute("SELECT id, name FROM archived")] == [(3, "Linus")]


def test_update_then_select(sqlite_run):
    UpdateQuery("users").set("status", "inactive").set_raw("age", "age + 1").where(
        "name = ?", "Ada"
    ).execute(sqlite_run)
    row = SelectQuery("users").select(["age", "status"]).where("name = ?", "Ada").get_one(
        sqlite_run
    )
    assert row == {"age": 37, "status": "inactive"}


def test_delete_with_subquery(sqlite_run, db):
    inactive = SelectQuery("users").select("id").where("status = ?", "inactive")
    DeleteQuery("orders").where(Statement().in_subquery("user_id", inactive)).execute(sqlite_run)
    rows = DeleteQuery("users").where("status = ?", "inactive").returning("name").execute(
        sqlite_run
    )
    assert rows == [{"name": "Linus"}]
    assert db.execute("SELECT COUNT(*) FROM users").fetchone()[0] == 3
