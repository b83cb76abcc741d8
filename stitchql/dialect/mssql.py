"""Microsoft SQL Server dialect."""
from __future__ import annotations

from stitchql.dialect.base import SQLDialect
from stitchql.dialect.registry import DialectFactory


@DialectFactory.register("mssql")
class MSSQLDialect(SQLDialect):
    """SQL Server: ``[identifier]`` quoting; a literal ``]`` is doubled."""

    @property
    def dialect_name(self) -> str:
        return "mssql"

    def quote_identifier(self, name: str) -> str:
        escaped = name.replace("]", "]]")
        return f"[{escaped}]"
