"""SELECT query builder.

Clauses are composed in textual order (CTEs, joins, WHERE, HAVING) so the
values list always lines up with the placeholder numbers::

    query = (
        SelectQuery("users", "u")
        .select(["u.id", "u.name AS display_name"])
        .join(Join(type="left", table="orders", alias="o", on="o.user_id = u.id"))
        .where(Statement().and_("u.age > ?", 18).and_("u.status = ?", "active"))
        .order_by(OrderBy(column="u.name"))
        .limit(10)
    )
    query.build().text
    # SELECT
    #  "u"."id",
    #  "u"."name" AS "display_name"
    # FROM "users" AS u
    # LEFT JOIN "orders" o
    #  ON o.user_id = u.id
    # WHERE (u.age > $1)
    #  AND (u.status = $2)
    # ORDER BY "u"."name" ASC
    # LIMIT 10
"""
from __future__ import annotations

import re
from collections.abc import Callable, Iterable
from typing import TYPE_CHECKING, Any

from stitchql.compile.base import FilteredQuery, QueryKind, as_field_list, join_parts
from stitchql.compile.composer import FragmentComposer, space_lines
from stitchql.dialect import escape_table_name
from stitchql.errors import QueryBuildError
from stitchql.schema.clauses import Join, OrderBy
from stitchql.schema.options import BuildOptions
from stitchql.statement import Statement

if TYPE_CHECKING:
    from stitchql.compile.union import Union

#: Reads the output column name out of ``[table.]column [AS alias]`` (quoted or not).
_OUTPUT_COLUMN = re.compile(
    r'^(?:(?:"?[\w$]+"?\.)?"?([\w$]+)"?(?:\s+AS\s+"?([\w$]+)"?)?)$',
    re.IGNORECASE,
)
_AS_SPLIT = re.compile(r"\s+AS\s+", re.IGNORECASE)


def check_count(value: Any, what: str) -> int:
    """Validate a LIMIT/OFFSET count."""
    if not isinstance(value, int) or isinstance(value, bool) or value < 0:
        raise QueryBuildError(f"{what} must be a non-negative integer.", clause=what.upper())
    return value


def coerce_join(join: Join | dict[str, Any]) -> Join:
    return join if isinstance(join, Join) else Join.model_validate(join)


def coerce_order_by(order_by: OrderBy | dict[str, Any]) -> OrderBy:
    return order_by if isinstance(order_by, OrderBy) else OrderBy.model_validate(order_by)


def compose_joins(
    joins: list[Join],
    composer: FragmentComposer,
    flavor: Any,
    deep_analysis: bool,
) -> str:
    """Render JOIN clauses; subqueries and ON statements join the composition in order."""
    rendered: list[str] = []
    for join in joins:
        if join.is_subquery:
            body = composer.embed_query(join.subquery, deep_analysis, label="join subquery")
            target = f"(\n{space_lines(body, 1)}\n) {join.alias}"
        else:
            target = escape_table_name(join.table, flavor)
            if join.alias:
                target += f" {join.alias}"
        on = composer.condition(join.on)
        rendered.append(f"{join.type} JOIN {target}\n ON {on}")
    return "\n".join(rendered)


class SelectQuery(FilteredQuery):
    """Builder for ``SELECT`` queries.

    Args:
        table: Table to select from, optionally ``schema.table`` or
            ``$schema.table``.
        alias: Optional table alias.
        group_by_select_fields: Group by every selected field.
        options: Build defaults.
    """

    kind = QueryKind.SELECT

    def __init__(
        self,
        table: str | None = None,
        alias: str | None = None,
        group_by_select_fields: bool = False,
        options: BuildOptions | None = None,
    ) -> None:
        super().__init__(options)
        self._table = table or ""
        self._table_alias = alias
        self._distinct = False
        self._fields: list[tuple[bool, str]] = [(True, "*")]
        self._having: Statement | None = None
        self._joins: list[Join] = []
        self._order_bys: list[OrderBy] = []
        self._limit: int | None = None
        self._offset_count: int | None = None
        self._group_bys: list[str] = []
        self._group_by_select_fields = group_by_select_fields

    # ------------------------------------------------------------------
    # Clauses
    # ------------------------------------------------------------------

    def from_(self, table: str, alias: str | None = None) -> SelectQuery:
        self._table = table
        self._table_alias = alias
        self.invalidate()
        return self

    def distinct(self) -> SelectQuery:
        self._distinct = True
        self.invalidate()
        return self

    def select(self, fields: str | Iterable[str]) -> SelectQuery:
        """Replace the selected fields with escaped column references."""
        self._fields = [(False, f) for f in as_field_list(fields)]
        self.invalidate()
        return self

    def add_select(self, fields: str | Iterable[str]) -> SelectQuery:
        self._drop_default_star()
        self._fields.extend((False, f) for f in as_field_list(fields))
        self.invalidate()
        return self

    def raw_select(self, fields: str | Iterable[str]) -> SelectQuery:
        """Replace the selected fields with unescaped SQL expressions."""
        self._fields = [(True, f) for f in as_field_list(fields)]
        self.invalidate()
        return self

    def add_raw_select(self, fields: str | Iterable[str]) -> SelectQuery:
        self._drop_default_star()
        self._fields.extend((True, f) for f in as_field_list(fields))
        self.invalidate()
        return self

    def having(self, statement: Statement | str, *values: Any) -> SelectQuery:
        if isinstance(statement, str):
            statement = Statement().raw("", statement, *values)
        self._having = statement
        self.invalidate()
        return self

    def use_having_statement(
        self, build: Callable[[Statement], Statement | None]
    ) -> SelectQuery:
        stmt = Statement()
        return self.having(build(stmt) or stmt)

    def join(self, join: Join | dict[str, Any] | Iterable[Join | dict[str, Any]]) -> SelectQuery:
        """Append one or more joins (models or dicts)."""
        joins = [join] if isinstance(join, (Join, dict)) else list(join)
        self._joins.extend(coerce_join(j) for j in joins)
        self.invalidate()
        return self

    def order_by(
        self, order_by: OrderBy | dict[str, Any] | Iterable[OrderBy | dict[str, Any]]
    ) -> SelectQuery:
        items = [order_by] if isinstance(order_by, (OrderBy, dict)) else list(order_by)
        self._order_bys.extend(coerce_order_by(o) for o in items)
        self.invalidate()
        return self

    def group_by(self, fields: str | Iterable[str]) -> SelectQuery:
        self._group_bys.extend(as_field_list(fields))
        self.invalidate()
        return self

    def enable_group_by_select_fields(self) -> SelectQuery:
        self._group_by_select_fields = True
        self.invalidate()
        return self

    def limit(self, count: int) -> SelectQuery:
        self._limit = check_count(count, "Limit")
        self.invalidate()
        return self

    def offset(self, count: int) -> SelectQuery:
        self._offset_count = check_count(count, "Offset")
        self.invalidate()
        return self

    def limit_and_offset(self, limit: int, offset: int) -> SelectQuery:
        return self.limit(limit).offset(offset)

    def reset_limit_offset(self) -> SelectQuery:
        self._limit = None
        self._offset_count = None
        self.invalidate()
        return self

    def union(self, query: SelectQuery) -> Union:
        from stitchql.compile.union import Union

        return Union(options=self._options).add(self).add(query, "UNION")

    def union_all(self, query: SelectQuery) -> Union:
        from stitchql.compile.union import Union

        return Union(options=self._options).add(self).add(query, "UNION ALL")

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    @property
    def columns(self) -> list[str]:
        """Selected fields as they will be rendered."""
        return self._render_fields(self._fields)

    def output_columns(self) -> list[str]:
        """Unquoted result column names, or ``[]`` for ``SELECT *``."""
        names: list[str] = []
        for _raw, field in self._fields:
            field = field.strip()
            if field == "*" or field.endswith(".*"):
                return []
            match = _OUTPUT_COLUMN.match(field)
            if match:
                names.append(match.group(2) or match.group(1))
                continue
            parts = _AS_SPLIT.split(field)
            names.append(parts[-1].strip().strip('"`[]') if len(parts) == 2 else field)
        return names

    # ------------------------------------------------------------------
    # Build
    # ------------------------------------------------------------------

    def _compose(self, composer: FragmentComposer, deep_analysis: bool) -> str:
        if not self._table:
            raise QueryBuildError("Table name is required for SELECT query.", clause="FROM")

        ctes = self._compose_ctes(composer, deep_analysis)

        fields = self.columns
        select_clause = ",\n ".join(fields) if fields else "*"
        select_clause = f" DISTINCT {select_clause}" if self._distinct else f" {select_clause}"

        from_clause = f"FROM {escape_table_name(self._table, self._flavor)}"
        if self._table_alias:
            from_clause += f" AS {self._table_alias}"

        joins = compose_joins(self._joins, composer, self._flavor, deep_analysis)
        where = self._compose_where(composer)

        group_by = ""
        group_fields = self._group_by_fields(fields)
        if group_fields:
            group_by = f"GROUP BY {', '.join(group_fields)}"

        having = ""
        if self._having is not None and not self._having.is_empty:
            having = f"HAVING {composer.embed_statement(self._having)}"

        order_by = ""
        if self._order_bys:
            orders = [
                f"{self._escape_fields([ob.column])[0]} {ob.direction}" for ob in self._order_bys
            ]
            order_by = f"ORDER BY {', '.join(orders)}"

        limit = f"LIMIT {self._limit}" if self._limit is not None else ""
        offset = f"OFFSET {self._offset_count}" if self._offset_count is not None else ""

        return join_parts(
            [
                ctes,
                "SELECT",
                select_clause,
                from_clause,
                joins,
                where,
                group_by,
                having,
                order_by,
                f"{limit} {offset}".strip(),
            ]
        )

    def _group_by_fields(self, fields: list[str]) -> list[str]:
        grouped = self._escape_fields(self._group_bys)
        if self._group_by_select_fields and fields != ["*"]:
            grouped.extend(f for f in fields if f not in grouped)
        return grouped

    def _drop_default_star(self) -> None:
        if self._fields == [(True, "*")]:
            self._fields = []

    def _single_row_query(self) -> SelectQuery:
        return self.clone().limit(1)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def clone(self) -> SelectQuery:
        cloned = SelectQuery(
            self._table,
            self._table_alias,
            self._group_by_select_fields,
            options=self._options,
        )
        self._copy_base_into(cloned)
        cloned._distinct = self._distinct
        cloned._fields = list(self._fields)
        cloned._where = self._where.clone() if self._where is not None else None
        cloned._having = self._having.clone() if self._having is not None else None
        cloned._joins = [j.copy_for_clone() for j in self._joins]
        cloned._order_bys = list(self._order_bys)
        cloned._limit = self._limit
        cloned._offset_count = self._offset_count
        cloned._group_bys = list(self._group_bys)
        return cloned

    def reset(self) -> None:
        self._reset_base()
        self._table = ""
        self._table_alias = None
        self._distinct = False
        self._fields = [(True, "*")]
        self._where = None
        self._having = None
        self._joins = []
        self._order_bys = []
        self._limit = None
        self._offset_count = None
        self._group_bys = []
        self._group_by_select_fields = False

    def __repr__(self) -> str:
        return f"SelectQuery(table={self._table!r}, joins={len(self._joins)})"
