"""QueryFactory: pre-configured entry point for every builder."""
from __future__ import annotations

from typing import Any

from stitchql.compile.base import QueryDefinition
from stitchql.compile.cte import Cte
from stitchql.compile.delete import DeleteQuery
from stitchql.compile.insert import InsertQuery
from stitchql.compile.select import SelectQuery
from stitchql.compile.union import Union
from stitchql.compile.update import UpdateQuery
from stitchql.schema.options import BuildOptions
from stitchql.statement import Statement


class QueryFactory:
    """Hands out builders sharing one :class:`BuildOptions`.

    Example::

        mysql = QueryFactory(BuildOptions(flavor="mysql", deep_analysis=True))
        mysql.select("users").where("id = ?", 7).build().text
        # SELECT
        #  *
        # FROM `users`
        # WHERE (id = $1)

    Args:
        options: Defaults applied to every builder; keyword overrides are
            accepted as a shortcut, e.g. ``QueryFactory(flavor="sqlite")``.
    """

    def __init__(self, options: BuildOptions | None = None, **overrides: Any) -> None:
        base = options or BuildOptions()
        if overrides:
            base = BuildOptions.model_validate({**base.model_dump(), **overrides})
        self._options = base

    @property
    def options(self) -> BuildOptions:
        return self._options

    def select(self, table: str | None = None, alias: str | None = None) -> SelectQuery:
        return SelectQuery(table, alias, options=self._options)

    def insert(self, table: str | None = None) -> InsertQuery:
        return InsertQuery(table, options=self._options)

    def update(self, table: str | None = None, alias: str | None = None) -> UpdateQuery:
        return UpdateQuery(table, alias, options=self._options)

    def delete(self, table: str | None = None, alias: str | None = None) -> DeleteQuery:
        return DeleteQuery(table, alias, options=self._options)

    def union(self) -> Union:
        return Union(options=self._options)

    def statement(self) -> Statement:
        return Statement()

    def cte(self, name: str | None = None, query: QueryDefinition | None = None) -> Cte:
        return Cte(name, query)

    def __repr__(self) -> str:
        return f"QueryFactory(flavor={self._options.flavor.value!r})"
