"""UNION / INTERSECT / EXCEPT builder.

Branches are wrapped in an outer ``SELECT ... FROM (...) AS alias`` so the
combined rows can be filtered, grouped, ordered and paginated::

    SELECT * FROM (
     (SELECT
      *
     FROM "a"
     WHERE (x = $1))

     UNION ALL

     (SELECT
      *
     FROM "b"
     WHERE (y = $2))
    ) AS union_subquery
    WHERE (z = $3)
"""
from __future__ import annotations

from collections.abc import Callable, Iterable
from typing import Any

from stitchql.built import BuiltQuery
from stitchql.compile.base import FilteredQuery, QueryKind, as_field_list, join_parts
from stitchql.compile.composer import FragmentComposer, space_lines
from stitchql.compile.select import SelectQuery, check_count, coerce_order_by
from stitchql.errors import QueryBuildError
from stitchql.schema.clauses import OrderBy
from stitchql.schema.options import BuildOptions
from stitchql.statement import Statement

#: Accepted set operations.
UNION_TYPES: tuple[str, ...] = (
    "UNION",
    "UNION ALL",
    "INTERSECT",
    "INTERSECT ALL",
    "EXCEPT",
    "EXCEPT ALL",
)

DEFAULT_ALIAS = "union_subquery"


def coerce_union_type(kind: str) -> str:
    normalized = " ".join(kind.upper().split())
    if normalized not in UNION_TYPES:
        raise QueryBuildError(
            f"Invalid union type {kind!r}. Allowed types: {', '.join(UNION_TYPES)}.",
            clause="UNION",
        )
    return normalized


class Union(FilteredQuery):
    """Combines SELECT queries with set operations.

    The set operation given for the first branch is ignored.
    """

    kind = QueryKind.UNION

    def __init__(self, options: BuildOptions | None = None) -> None:
        super().__init__(options)
        self._branches: list[tuple[SelectQuery, str]] = []
        self._fields: list[tuple[bool, str]] = []
        self._alias: str | None = None
        self._having: Statement | None = None
        self._group_bys: list[str] = []
        self._order_bys: list[OrderBy] = []
        self._limit: int | None = None
        self._offset_count: int | None = None

    # ------------------------------------------------------------------
    # Branches
    # ------------------------------------------------------------------

    def add(self, query: SelectQuery, type: str = "UNION ALL") -> Union:
        self._branches.append((query, coerce_union_type(type)))
        self.invalidate()
        return self

    def add_many(self, queries: Iterable[tuple[SelectQuery, str] | dict[str, Any]]) -> Union:
        """Add ``(query, type)`` pairs or ``{"query": ..., "type": ...}`` dicts."""
        for item in queries:
            if isinstance(item, dict):
                self.add(item["query"], item.get("type", "UNION ALL"))
            else:
                self.add(*item)
        return self

    def add_many_of_type(self, queries: Iterable[SelectQuery], type: str = "UNION ALL") -> Union:
        for query in queries:
            self.add(query, type)
        return self

    # ------------------------------------------------------------------
    # Outer query
    # ------------------------------------------------------------------

    def select(self, fields: str | Iterable[str]) -> Union:
        self._fields = [(False, f) for f in as_field_list(fields)]
        self.invalidate()
        return self

    def add_select(self, fields: str | Iterable[str]) -> Union:
        self._fields.extend((False, f) for f in as_field_list(fields))
        self.invalidate()
        return self

    def raw_select(self, fields: str | Iterable[str]) -> Union:
        self._fields = [(True, f) for f in as_field_list(fields)]
        self.invalidate()
        return self

    def add_raw_select(self, fields: str | Iterable[str]) -> Union:
        self._fields.extend((True, f) for f in as_field_list(fields))
        self.invalidate()
        return self

    def alias(self, alias: str) -> Union:
        self._alias = alias
        self.invalidate()
        return self

    def having(self, statement: Statement | str, *values: Any) -> Union:
        if isinstance(statement, str):
            statement = Statement().raw("", statement, *values)
        self._having = statement
        self.invalidate()
        return self

    def use_having_statement(self, build: Callable[[Statement], Statement | None]) -> Union:
        stmt = Statement()
        return self.having(build(stmt) or stmt)

    def group_by(self, fields: str | Iterable[str]) -> Union:
        self._group_bys = as_field_list(fields)
        self.invalidate()
        return self

    def add_group_by(self, fields: str | Iterable[str]) -> Union:
        self._group_bys.extend(as_field_list(fields))
        self.invalidate()
        return self

    def order_by(
        self, order_by: OrderBy | dict[str, Any] | Iterable[OrderBy | dict[str, Any]]
    ) -> Union:
        self._order_bys = []
        return self.add_order_by(order_by)

    def add_order_by(
        self, order_by: OrderBy | dict[str, Any] | Iterable[OrderBy | dict[str, Any]]
    ) -> Union:
        items = [order_by] if isinstance(order_by, (OrderBy, dict)) else list(order_by)
        self._order_bys.extend(coerce_order_by(o) for o in items)
        self.invalidate()
        return self

    def limit(self, count: int) -> Union:
        self._limit = check_count(count, "Limit")
        self.invalidate()
        return self

    def offset(self, count: int) -> Union:
        self._offset_count = check_count(count, "Offset")
        self.invalidate()
        return self

    def limit_and_offset(self, limit: int, offset: int) -> Union:
        return self.limit(limit).offset(offset)

    # ------------------------------------------------------------------
    # Build
    # ------------------------------------------------------------------

    def _compose_branches(
        self, composer: FragmentComposer, deep_analysis: bool, nested: bool = True
    ) -> str:
        if not self._branches:
            raise QueryBuildError("No SELECT queries added to the UNION.", clause="UNION")
        indent = 1 if nested else 0
        text = ""
        for query, union_type in self._branches:
            body = composer.embed_query(query, deep_analysis, label="union branch")
            if nested:
                body = space_lines(f"({body})", indent)
            if text:
                text += f"\n\n{space_lines(union_type, indent)}\n\n"
            text += body
        return text

    def raw_union(self, deep_analysis: bool | None = None) -> BuiltQuery:
        """Build only the combined branches, unwrapped and unindented.

        The outer SELECT, WHERE, grouping, ordering and pagination are left out.
        """
        deep = self._options.deep_analysis if deep_analysis is None else deep_analysis
        composer = FragmentComposer(self._offset, newline=self._options.newline)
        text = self._compose_branches(composer, deep, nested=False)
        return self._finalize(text, composer.values, deep)

    def _compose(self, composer: FragmentComposer, deep_analysis: bool) -> str:
        ctes = self._compose_ctes(composer, deep_analysis)
        branches = self._compose_branches(composer, deep_analysis)

        fields = self._render_fields(self._fields)
        select_clause = ",\n ".join(fields) if fields else "*"
        if select_clause == "*":
            first_line = "SELECT * FROM ("
        else:
            first_line = f"SELECT\n {select_clause}\n FROM ("

        where = self._compose_where(composer)

        group_by = ""
        if self._group_bys:
            group_by = f"GROUP BY {', '.join(self._escape_fields(self._group_bys))}"

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
                first_line,
                f"{branches}\n) AS {self._alias or DEFAULT_ALIAS}",
                where,
                group_by,
                having,
                order_by,
                limit,
                offset,
            ]
        )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def clone(self) -> Union:
        cloned = Union(options=self._options)
        self._copy_base_into(cloned)
        cloned._branches = [(query.clone(), kind) for query, kind in self._branches]
        cloned._fields = list(self._fields)
        cloned._alias = self._alias
        cloned._where = self._where.clone() if self._where is not None else None
        cloned._having = self._having.clone() if self._having is not None else None
        cloned._group_bys = list(self._group_bys)
        cloned._order_bys = list(self._order_bys)
        cloned._limit = self._limit
        cloned._offset_count = self._offset_count
        return cloned

    def reset(self) -> None:
        self._reset_base()
        self._branches = []
        self._fields = []
        self._alias = None
        self._where = None
        self._having = None
        self._group_bys = []
        self._order_bys = []
        self._limit = None
        self._offset_count = None

    def __repr__(self) -> str:
        return f"Union(branches={len(self._branches)})"
