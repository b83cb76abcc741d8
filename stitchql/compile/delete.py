"""DELETE query builder."""
from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from stitchql.compile.base import FilteredQuery, QueryKind, ReturningMixin, join_parts
from stitchql.compile.composer import FragmentComposer
from stitchql.dialect import escape_table_name
from stitchql.errors import QueryBuildError
from stitchql.schema.clauses import UsingTable
from stitchql.schema.options import BuildOptions


class DeleteQuery(ReturningMixin, FilteredQuery):
    """Builder for ``DELETE FROM ... [USING ...] WHERE ...``."""

    kind = QueryKind.DELETE

    def __init__(
        self,
        table: str | None = None,
        alias: str | None = None,
        options: BuildOptions | None = None,
    ) -> None:
        super().__init__(options)
        self._table = table or ""
        self._table_alias = alias
        self._using: list[UsingTable] = []
        self._init_returning()

    def from_(self, table: str, alias: str | None = None) -> DeleteQuery:
        self._table = table
        self._table_alias = alias
        self.invalidate()
        return self

    def using(
        self,
        tables: str | UsingTable | dict[str, Any] | Iterable[UsingTable | dict[str, Any]],
        alias: str | None = None,
    ) -> DeleteQuery:
        """Append ``USING`` tables; a plain table name may take an ``alias``."""
        if isinstance(tables, str):
            items = [UsingTable(table=tables, alias=alias)]
        elif isinstance(tables, (UsingTable, dict)):
            items = [tables]
        else:
            items = list(tables)
        self._using.extend(
            t if isinstance(t, UsingTable) else UsingTable.model_validate(t) for t in items
        )
        self.invalidate()
        return self

    def _compose(self, composer: FragmentComposer, deep_analysis: bool) -> str:
        if not self._table.strip():
            raise QueryBuildError("No table specified for DELETE query.", clause="DELETE")

        ctes = self._compose_ctes(composer, deep_analysis)

        delete = f"DELETE FROM {escape_table_name(self._table, self._flavor)}"
        if self._table_alias:
            delete += f" AS {self._table_alias}"

        using = ""
        if self._using:
            parts = []
            for t in self._using:
                table = escape_table_name(t.table, self._flavor)
                parts.append(f"{table} AS {t.alias}" if t.alias else table)
            using = "USING " + ",\n ".join(parts)

        where = self._compose_where(composer)
        return join_parts([ctes, delete, using, where, self._compose_returning()])

    def clone(self) -> DeleteQuery:
        cloned = DeleteQuery(self._table, self._table_alias, options=self._options)
        self._copy_base_into(cloned)
        cloned._using = [t.model_copy() for t in self._using]
        cloned._where = self._where.clone() if self._where is not None else None
        self._copy_returning_into(cloned)
        return cloned

    def reset(self) -> None:
        self._reset_base()
        self._table = ""
        self._table_alias = None
        self._using = []
        self._where = None
        self._init_returning()

    def __repr__(self) -> str:
        return f"DeleteQuery(table={self._table!r})"
