"""Unit tests for the INSERT, UPDATE and DELETE builders."""
from __future__ import annotations

import pytest

from stitchql import (
    ColumnValue,
    Cte,
    DeleteQuery,
    InsertQuery,
    Join,
    QueryBuildError,
    QueryKind,
    SelectQuery,
    SetValue,
    Statement,
    UpdateQuery,
    UsingTable,
)


# ---------------------------------------------------------------------------
# INSERT
# ---------------------------------------------------------------------------


class TestInsert:
    def test_values_mapping(self):
        built = InsertQuery("users").values({"name": "Ada", "age": 36}).build()
        assert built.text == 'INSERT INTO "users" ("name", "age") VALUES ($1, $2)'
        assert built.values == ["Ada", 36]

    def test_returning(self):
        built = InsertQuery("users").values({"name": "Ada"}).returning("id").build()
        assert built.text == 'INSERT INTO "users" ("name") VALUES ($1)\nRETURNING "id"'

    def test_returning_all_and_raw(self):
        query = InsertQuery("users").values({"name": "Ada"})
        assert query.return_all_fields().build().text.endswith("\nRETURNING *")
        raw = query.returning_raw("id * 2 AS doubled").add_returning("name").build()
        assert raw.text.endswith('\nRETURNING id * 2 AS doubled, "name"')

    def test_column_value_list(self):
        built = (
            InsertQuery()
            .into("$schema.users")
            .values(
                [
                    ColumnValue(column="name", value="Grace"),
                    {"column": "nickname"},
                    {"column": "age", "value": None},
                ]
            )
            .schema("app")
            .build()
        )
        assert built.text == 'INSERT INTO app."users" ("name", "age") VALUES ($1, $2)'
        assert built.values == ["Grace", None]

    def test_repeated_values_share_a_placeholder(self):
        built = InsertQuery("flags").values({"a": True, "b": True, "c": 1}).build()
        assert built.text == 'INSERT INTO "flags" ("a", "b", "c") VALUES ($1, $1, $2)'
        assert built.values == [True, 1]

    def test_from_select_with_columns(self):
        source = SelectQuery("users").select(["id", "name"]).where("age > ?", 90)
        built = InsertQuery("archive").columns("id", "name").from_select(source).build()
        assert built.text == (
            'INSERT INTO "archive" ("id", "name")\n'
            'SELECT\n "id",\n "name"\nFROM "users"\nWHERE (age > $1)'
        )
        assert built.values == [90]

    def test_from_select_infers_columns(self):
        source = SelectQuery("users", "u").select(["u.id", "u.name AS full_name"])
        built = InsertQuery("archive").from_select(source).build()
        assert built.text.startswith('INSERT INTO "archive" ("id", "full_name")\nSELECT')

    def test_from_select_star_omits_column_list(self):
        built = InsertQuery("archive").from_select(SelectQuery("users")).build()
        assert built.text == 'INSERT INTO "archive"\nSELECT\n *\nFROM "users"'

    def test_with_cte(self):
        recent = Cte("recent", SelectQuery("orders").where("total > ?", 10))
        built = (
            InsertQuery("audit")
            .with_(recent)
            .values({"note": "copied", "threshold": 10})
            .build()
        )
        assert built.text.startswith("WITH recent AS (\n")
        assert built.text.endswith('INSERT INTO "audit" ("note", "threshold") VALUES ($2, $1)')
        assert built.values == [10, "copied"]

    def test_errors(self):
        with pytest.raises(QueryBuildError, match="No table specified for INSERT query."):
            InsertQuery().values({"a": 1}).build()
        with pytest.raises(
            QueryBuildError, match="No values or SELECT query specified for INSERT query."
        ):
            InsertQuery("users").build()

    def test_clone_and_reset(self):
        query = InsertQuery("users").values({"name": "Ada"})
        clone = query.clone().values({"name": "Grace"})
        assert query.build().values == ["Ada"]
        assert clone.build().values == ["Grace"]
        query.reset()
        with pytest.raises(QueryBuildError):
            query.build()

    def test_kind_and_repr(self):
        query = InsertQuery("users").values({"name": "Ada"})
        assert query.kind is QueryKind.INSERT
        assert repr(query) == "InsertQuery(table='users', columns=1)"


# ---------------------------------------------------------------------------
# UPDATE
# ---------------------------------------------------------------------------


class TestUpdate:
    def test_set_and_where(self):
        built = UpdateQuery("users").set("name", "Ada").where("id = ?", 7).build()
        assert built.text == 'UPDATE "users"\nSET "name" = $1\nWHERE (id = $2)'
        assert built.values == ["Ada", 7]

    def test_raw_assignment(self):
        built = (
            UpdateQuery("users")
            .set("status", "inactive")
            .set_raw("updated_at", "now()")
            .where("id = ?", 7)
            .build()
        )
        assert built.text == (
            'UPDATE "users"\nSET "status" = $1, "updated_at" = now()\nWHERE (id = $2)'
        )

    def test_null_is_bound(self):
        built = UpdateQuery("users").set("deleted_at", None).build()
        assert built.text == 'UPDATE "users"\nSET "deleted_at" = $1'
        assert built.values == [None]

    def test_set_values_forms(self):
        built = (
            UpdateQuery("users")
            .set_values({"name": "Ada"})
            .set_values(
                [
                    SetValue(column="age", value=36),
                    {"setColumn": "nick", "from": "name"},
                ]
            )
            .build()
        )
        assert built.text == 'UPDATE "users"\nSET "name" = $1, "age" = $2, "nick" = name'

    def test_set_value_needs_a_source(self):
        with pytest.raises(ValueError, match="must have either 'value' or 'from' defined"):
            SetValue.model_validate({"column": "age"})

    def test_from_and_join(self):
        built = (
            UpdateQuery("users", "u")
            .set("tier", "gold")
            .from_("orders", "o")
            .join(Join(table="payments", alias="p", on="p.order_id = o.id"))
            .where(Statement().and_("o.user_id = u.id").and_("p.amount > ?", 100))
            .build()
        )
        assert built.text == (
            'UPDATE "users" u\n'
            'SET "tier" = $1\n'
            'FROM "orders" o\n'
            'INNER JOIN "payments" p\n ON p.order_id = o.id\n'
            "WHERE (o.user_id = u.id)\n AND (p.amount > $2)"
        )
        assert built.values == ["gold", 100]

    def test_join_subquery_is_numbered_before_where(self):
        totals = SelectQuery("orders").raw_select(["user_id", "SUM(total) AS spent"]).where(
            "created_at > ?", "2024-01-01"
        ).group_by("user_id")
        built = (
            UpdateQuery("users", "u")
            .set("tier", "gold")
            .from_("accounts", "a")
            .join({"subquery": totals, "alias": "t", "on": "t.user_id = a.user_id"})
            .where("t.spent > ?", 1000)
            .build()
        )
        assert built.values == ["gold", "2024-01-01", 1000]
        assert built.text.endswith("WHERE (t.spent > $3)")

    def test_returning_and_explain(self):
        query = UpdateQuery("users").set("name", "Ada").where("id = ?", 1).returning(["id"])
        assert query.build().text.endswith('\nRETURNING "id"')
        explained = query.build_explain()
        assert explained.text.startswith('EXPLAIN UPDATE "users"\n')
        assert explained.values == ["Ada", 1]

    def test_errors(self):
        with pytest.raises(QueryBuildError, match="No table specified for UPDATE query."):
            UpdateQuery().set("a", 1).build()
        with pytest.raises(QueryBuildError, match="No SET values specified for UPDATE query."):
            UpdateQuery("users").build()
        with pytest.raises(
            QueryBuildError, match="JOINs require a FROM clause in UPDATE queries."
        ):
            UpdateQuery("users").set("a", 1).join(
                {"table": "orders", "alias": "o", "on": "o.id = 1"}
            ).build()

    def test_table_after_construction(self):
        built = UpdateQuery().table("users", "u").set("a", 1).build()
        assert built.text.startswith('UPDATE "users" u\n')

    def test_clone_is_independent(self):
        query = UpdateQuery("users").set("name", "Ada").where("id = ?", 1)
        clone = query.clone().set("age", 36)
        assert query.build().values == ["Ada", 1]
        assert clone.build().values == ["Ada", 36, 1]
        assert repr(clone) == "UpdateQuery(table='users', assignments=2)"


# ---------------------------------------------------------------------------
# DELETE
# ---------------------------------------------------------------------------


class TestDelete:
    def test_where_and_returning(self):
        built = DeleteQuery("users").where("id = ?", 1).returning(["id", "name"]).build()
        assert built.text == 'DELETE FROM "users"\nWHERE (id = $1)\nRETURNING "id", "name"'
        assert built.values == [1]

    def test_without_where(self):
        assert DeleteQuery("sessions").build().text == 'DELETE FROM "sessions"'

    def test_using(self):
        built = (
            DeleteQuery("orders", "o")
            .using("users", "u")
            .where(Statement().and_("o.user_id = u.id").and_("u.status = ?", "banned"))
            .build()
        )
        assert built.text == (
            'DELETE FROM "orders" AS o\n'
            'USING "users" AS u\n'
            "WHERE (o.user_id = u.id)\n AND (u.status = $1)"
        )

    def test_using_many(self):
        built = (
            DeleteQuery()
            .from_("orders")
            .using([{"table": "users"}, UsingTable(table="shop.accounts", alias="a")])
            .build()
        )
        assert built.text == 'DELETE FROM "orders"\nUSING "users",\n "shop"."accounts" AS a'

    def test_subquery_condition(self):
        banned = SelectQuery("users").select("id").where("status = ?", "banned")
        built = DeleteQuery("orders").where(Statement().in_subquery("user_id", banned)).build()
        assert built.text == (
            'DELETE FROM "orders"\n'
            'WHERE (user_id IN (SELECT\n "id"\nFROM "users"\nWHERE (status = $1)))'
        )
        assert built.values == ["banned"]

    def test_mysql_flavor(self):
        built = DeleteQuery("users").sql_flavor("mysql").where("id = ?", 1).build()
        assert built.text == "DELETE FROM `users`\nWHERE (id = $1)"

    def test_missing_table(self):
        with pytest.raises(QueryBuildError, match="No table specified for DELETE query."):
            DeleteQuery().build()

    def test_clone_and_reset(self):
        query = DeleteQuery("users").where("id = ?", 1).return_all_fields()
        clone = query.clone().where("id = ?", 2)
        assert query.build().values == [1]
        assert clone.build().text.endswith("\nRETURNING *")
        assert clone.build().values == [2]
        query.reset()
        with pytest.raises(QueryBuildError):
            query.build()
        assert repr(clone) == "DeleteQuery(table='users')"
