"""MySQL dialect."""
from __future__ import annotations

from stitchql.dialect.base import SQLDialect
from stitchql.dialect.registry import DialectFactory


@DialectFactory.register("mysql")
class MySQLDialect(SQLDialect):
    """MySQL: identifiers are quoted with backticks rather than double-quotes."""

    @property
    def dialect_name(self) -> str:
        return "mysql"

    def quote_identifier(self, name: str) -> str:
        escaped = name.replace("`", "``")
        return f"`{escaped}`"
