"""SQLite dialect."""
from __future__ import annotations

from stitchql.dialect.base import DoubleQuoteDialect
from stitchql.dialect.registry import DialectFactory


@DialectFactory.register("sqlite")
class SQLiteDialect(DoubleQuoteDialect):
    @property
    def dialect_name(self) -> str:
        return "sqlite"
