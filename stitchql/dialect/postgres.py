"""PostgreSQL dialect."""
from __future__ import annotations

from stitchql.dialect.base import DoubleQuoteDialect
from stitchql.dialect.registry import DialectFactory


@DialectFactory.register("postgres")
class PostgresDialect(DoubleQuoteDialect):
    """PostgreSQL: ``"identifier"`` quoting.

    ``$N`` placeholders are native, so built queries can be passed straight
    to ``asyncpg`` or to ``psycopg`` after rewriting to named binds.
    """

    @property
    def dialect_name(self) -> str:
        return "postgres"
