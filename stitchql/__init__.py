"""stitchQL – fluent parameterized SQL with safe fragment composition.

Build conditions and queries separately, then stitch them together: every
embedded fragment is renumbered so ``$N`` placeholders and the values list
stay aligned, and repeated values collapse into shared placeholders.

Public API
----------
``select``, ``insert``, ``update``, ``delete``, ``union``, ``statement``, ``cte``
    Shortcuts returning builders configured with the default
    ``BuildOptions`` (PostgreSQL quoting, strict deduplication).

``QueryFactory``
    Hands out builders with custom ``BuildOptions``::

        factory = QueryFactory(BuildOptions(flavor="mysql", deep_analysis=True))
        built = factory.select("users").where("id = ?", 7).build()
        cursor.execute(built.text, built.values)

``reanalyze_duplicate_params``
    The standalone deduplication pass over any ``(text, values)`` pair.

Re-exported types
-----------------
``Statement``, ``BuiltQuery``, the query builders, ``Cte``/``CteMaker``,
the clause models, ``SqlFlavor``, executor adapters and all error classes.

Extensibility
-------------
New identifier quoting styles can be registered via::

    from stitchql.dialect import DialectFactory, DoubleQuoteDialect

    @DialectFactory.register("duckdb")
    class DuckDBDialect(DoubleQuoteDialect):
        ...
"""

from __future__ import annotations

from stitchql.analyze import deep_equal, reanalyze_duplicate_params
from stitchql.built import BuiltQuery
from stitchql.compile import (
    Cte,
    CteMaker,
    DeleteQuery,
    FragmentComposer,
    InsertQuery,
    QueryDefinition,
    QueryKind,
    SelectQuery,
    Union,
    UpdateQuery,
)
from stitchql.dialect import DialectFactory, SqlFlavor
from stitchql.errors import (
    ExecutorError,
    PlaceholderMismatchError,
    QueryBuildError,
    RowValidationError,
    SchemaPlaceholderOutOfRangeError,
    StitchQLError,
    UnsupportedFlavorError,
)
from stitchql.execute import (
    CallableExecutor,
    ManagerExecutor,
    MethodExecutor,
    SQLAlchemyExecutor,
    resolve_executor,
)
from stitchql.factory import QueryFactory
from stitchql.schema import BuildOptions, ColumnValue, Join, OrderBy, SetValue, UsingTable
from stitchql.statement import Combinator, Statement

__all__ = [
    # Shortcuts
    "select",
    "insert",
    "update",
    "delete",
    "union",
    "statement",
    "cte",
    # Configuration
    "BuildOptions",
    "QueryFactory",
    "SqlFlavor",
    "DialectFactory",
    # Conditions
    "Statement",
    "Combinator",
    # Builders
    "BuiltQuery",
    "QueryDefinition",
    "QueryKind",
    "SelectQuery",
    "InsertQuery",
    "UpdateQuery",
    "DeleteQuery",
    "Union",
    "Cte",
    "CteMaker",
    "FragmentComposer",
    # Clause models
    "ColumnValue",
    "Join",
    "OrderBy",
    "SetValue",
    "UsingTable",
    # Analysis
    "reanalyze_duplicate_params",
    "deep_equal",
    # Execution
    "CallableExecutor",
    "MethodExecutor",
    "ManagerExecutor",
    "SQLAlchemyExecutor",
    "resolve_executor",
    # Errors
    "StitchQLError",
    "PlaceholderMismatchError",
    "SchemaPlaceholderOutOfRangeError",
    "QueryBuildError",
    "UnsupportedFlavorError",
    "ExecutorError",
    "RowValidationError",
]

_default_factory = QueryFactory()


def select(table: str | None = None, alias: str | None = None) -> SelectQuery:
    """Start a SELECT query with the default options."""
    return _default_factory.select(table, alias)


def insert(table: str | None = None) -> InsertQuery:
    return _default_factory.insert(table)


def update(table: str | None = None, alias: str | None = None) -> UpdateQuery:
    return _default_factory.update(table, alias)


def delete(table: str | None = None, alias: str | None = None) -> DeleteQuery:
    return _default_factory.delete(table, alias)


def union() -> Union:
    return _default_factory.union()


def statement() -> Statement:
    """Start an empty condition tree."""
    return _default_factory.statement()


def cte(name: str | None = None, query: QueryDefinition | None = None) -> Cte:
    return _default_factory.cte(name, query)
