"""INSERT query builder."""
from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from stitchql.compile.base import QueryDefinition, QueryKind, ReturningMixin, join_parts
from stitchql.compile.composer import FragmentComposer
from stitchql.compile.select import SelectQuery
from stitchql.dialect import escape_identifier, escape_table_name
from stitchql.errors import QueryBuildError
from stitchql.schema.clauses import ColumnValue
from stitchql.schema.options import BuildOptions


class InsertQuery(ReturningMixin, QueryDefinition):
    """Builder for ``INSERT INTO ... VALUES`` and ``INSERT INTO ... SELECT``.

    Example::

        InsertQuery("users").values({"name": "Ada", "age": 36}).returning("id").build()
        # INSERT INTO "users" ("name", "age") VALUES ($1, $2)
        # RETURNING "id"
    """

    kind = QueryKind.INSERT

    def __init__(self, table: str | None = None, options: BuildOptions | None = None) -> None:
        super().__init__(options)
        self._table = table or ""
        self._columns: list[ColumnValue] = []
        self._select: SelectQuery | None = None
        self._init_returning()

    def into(self, table: str) -> InsertQuery:
        self._table = table
        self.invalidate()
        return self

    def values(
        self,
        column_values: Mapping[str, Any] | Iterable[ColumnValue | Mapping[str, Any]],
    ) -> InsertQuery:
        """Set the inserted columns and their values.

        Accepts a ``{column: value}`` mapping or a list of
        :class:`ColumnValue` (or dicts with ``column``/``value``); entries
        without a value are skipped and ``None`` inserts NULL.
        """
        if isinstance(column_values, Mapping):
            entries = [ColumnValue(column=c, value=v) for c, v in column_values.items()]
        else:
            entries = [
                cv if isinstance(cv, ColumnValue) else ColumnValue.model_validate(cv)
                for cv in column_values
            ]
        self._columns = [cv for cv in entries if cv.has_value]
        self.invalidate()
        return self

    def columns(self, *columns: str) -> InsertQuery:
        """Set the column list without values (for :meth:`from_select`)."""
        self._columns = [ColumnValue(column=c) for c in columns]
        self.invalidate()
        return self

    def from_select(self, query: SelectQuery) -> InsertQuery:
        self._select = query
        self.invalidate()
        return self

    # ------------------------------------------------------------------
    # Build
    # ------------------------------------------------------------------

    def _compose(self, composer: FragmentComposer, deep_analysis: bool) -> str:
        if not self._table:
            raise QueryBuildError("No table specified for INSERT query.", clause="INSERT")
        if not self._columns and self._select is None:
            raise QueryBuildError(
                "No values or SELECT query specified for INSERT query.", clause="VALUES"
            )

        ctes = self._compose_ctes(composer, deep_analysis)

        names = [cv.column for cv in self._columns]
        if not names and self._select is not None:
            names = self._select.output_columns()
        table = escape_table_name(self._table, self._flavor)
        insert = f"INSERT INTO {table}"
        if names:
            insert += f" ({', '.join(escape_identifier(n, self._flavor) for n in names)})"

        with_values = [cv for cv in self._columns if cv.has_value]
        if with_values:
            placeholders = [composer.bind(cv.value) for cv in with_values]
            insert += f" VALUES ({', '.join(placeholders)})"
        elif self._select is not None:
            insert += "\n" + composer.embed_query(self._select, deep_analysis, label="insert select")

        return join_parts([ctes, insert, self._compose_returning()])

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def clone(self) -> InsertQuery:
        cloned = InsertQuery(self._table, options=self._options)
        self._copy_base_into(cloned)
        cloned._columns = [cv.model_copy() for cv in self._columns]
        cloned._select = self._select.clone() if self._select is not None else None
        self._copy_returning_into(cloned)
        return cloned

    def reset(self) -> None:
        self._reset_base()
        self._table = ""
        self._columns = []
        self._select = None
        self._init_returning()

    def __repr__(self) -> str:
        return f"InsertQuery(table={self._table!r}, columns={len(self._columns)})"
