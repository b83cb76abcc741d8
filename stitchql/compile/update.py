"""UPDATE query builder."""
from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from stitchql.compile.base import FilteredQuery, QueryKind, ReturningMixin, join_parts
from stitchql.compile.composer import FragmentComposer
from stitchql.compile.select import coerce_join, compose_joins
from stitchql.dialect import escape_identifier, escape_table_name
from stitchql.errors import QueryBuildError
from stitchql.schema.clauses import Join, SetValue
from stitchql.schema.options import BuildOptions


class UpdateQuery(ReturningMixin, FilteredQuery):
    """Builder for ``UPDATE ... SET ... [FROM ... JOIN ...] WHERE ...``.

    Example::

        (
            UpdateQuery("users")
            .set("status", "inactive")
            .set_raw("updated_at", "now()")
            .where("id = ?", 7)
            .build()
        )
        # UPDATE "users"
        # SET "status" = $1, "updated_at" = now()
        # WHERE (id = $2)
    """

    kind = QueryKind.UPDATE

    def __init__(
        self,
        table: str | None = None,
        alias: str | None = None,
        options: BuildOptions | None = None,
    ) -> None:
        super().__init__(options)
        self._table = table or ""
        self._table_alias = alias
        self._set_values: list[SetValue] = []
        self._from_table: str | None = None
        self._from_alias: str | None = None
        self._joins: list[Join] = []
        self._init_returning()

    def table(self, table: str, alias: str | None = None) -> UpdateQuery:
        self._table = table
        self._table_alias = alias
        self.invalidate()
        return self

    def set(self, column: str, value: Any) -> UpdateQuery:
        """Assign a bound value (``None`` sets NULL)."""
        self._set_values.append(SetValue(column=column, value=value))
        self.invalidate()
        return self

    def set_raw(self, column: str, expression: str) -> UpdateQuery:
        """Assign an unescaped SQL expression, e.g. another column."""
        self._set_values.append(SetValue(column=column, from_=expression))
        self.invalidate()
        return self

    def set_values(
        self,
        values: Mapping[str, Any] | Iterable[SetValue | Mapping[str, Any]],
    ) -> UpdateQuery:
        """Append assignments from a ``{column: value}`` mapping or SetValue items."""
        if isinstance(values, Mapping):
            items = [SetValue(column=c, value=v) for c, v in values.items()]
        else:
            items = [v if isinstance(v, SetValue) else SetValue.model_validate(v) for v in values]
        self._set_values.extend(items)
        self.invalidate()
        return self

    def from_(self, table: str, alias: str | None = None) -> UpdateQuery:
        """Add the ``FROM`` table that JOINs hang off."""
        self._from_table = table
        self._from_alias = alias
        self.invalidate()
        return self

    def join(self, join: Join | dict[str, Any] | Iterable[Join | dict[str, Any]]) -> UpdateQuery:
        joins = [join] if isinstance(join, (Join, dict)) else list(join)
        self._joins.extend(coerce_join(j) for j in joins)
        self.invalidate()
        return self

    # ------------------------------------------------------------------
    # Build
    # ------------------------------------------------------------------

    def _compose(self, composer: FragmentComposer, deep_analysis: bool) -> str:
        if not self._table.strip():
            raise QueryBuildError("No table specified for UPDATE query.", clause="UPDATE")
        if not self._set_values:
            raise QueryBuildError("No SET values specified for UPDATE query.", clause="SET")
        if self._joins and not self._from_table:
            raise QueryBuildError("JOINs require a FROM clause in UPDATE queries.", clause="FROM")

        ctes = self._compose_ctes(composer, deep_analysis)

        update = f"UPDATE {escape_table_name(self._table, self._flavor)}"
        if self._table_alias:
            update += f" {self._table_alias}"

        assignments = []
        for sv in self._set_values:
            column = escape_identifier(sv.column, self._flavor)
            source = composer.bind(sv.value) if sv.has_value else sv.from_
            assignments.append(f"{column} = {source}")
        set_clause = f"SET {', '.join(assignments)}"

        from_clause = ""
        if self._from_table:
            from_clause = f"FROM {escape_table_name(self._from_table, self._flavor)}"
            if self._from_alias:
                from_clause += f" {self._from_alias}"

        joins = compose_joins(self._joins, composer, self._flavor, deep_analysis)
        where = self._compose_where(composer)

        return join_parts(
            [ctes, update, set_clause, from_clause, joins, where, self._compose_returning()]
        )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def clone(self) -> UpdateQuery:
        cloned = UpdateQuery(self._table, self._table_alias, options=self._options)
        self._copy_base_into(cloned)
        cloned._set_values = [sv.model_copy() for sv in self._set_values]
        cloned._from_table = self._from_table
        cloned._from_alias = self._from_alias
        cloned._joins = [j.copy_for_clone() for j in self._joins]
        cloned._where = self._where.clone() if self._where is not None else None
        self._copy_returning_into(cloned)
        return cloned

    def reset(self) -> None:
        self._reset_base()
        self._table = ""
        self._table_alias = None
        self._set_values = []
        self._from_table = None
        self._from_alias = None
        self._joins = []
        self._where = None
        self._init_returning()

    def __repr__(self) -> str:
        return f"UpdateQuery(table={self._table!r}, assignments={len(self._set_values)})"
