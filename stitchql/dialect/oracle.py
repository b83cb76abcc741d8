"""Oracle dialect."""
from __future__ import annotations

from stitchql.dialect.base import DoubleQuoteDialect
from stitchql.dialect.registry import DialectFactory


@DialectFactory.register("oracle")
class OracleDialect(DoubleQuoteDialect):
    """Oracle: ``"identifier"`` quoting (quoted names are case sensitive)."""

    @property
    def dialect_name(self) -> str:
        return "oracle"
