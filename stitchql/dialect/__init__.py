"""stitchQL dialects: identifier quoting per SQL flavor.

Importing this package registers the built-in dialects with
:class:`~stitchql.dialect.registry.DialectFactory`.
"""
from stitchql.dialect.base import DoubleQuoteDialect, SqlFlavor, SQLDialect
from stitchql.dialect.escaper import (
    append_schemas,
    escape_identifier,
    escape_select_identifiers,
    escape_table_name,
)
from stitchql.dialect.mssql import MSSQLDialect
from stitchql.dialect.mysql import MySQLDialect
from stitchql.dialect.oracle import OracleDialect
from stitchql.dialect.postgres import PostgresDialect
from stitchql.dialect.registry import DialectFactory
from stitchql.dialect.sqlite import SQLiteDialect

__all__ = [
    "DialectFactory",
    "DoubleQuoteDialect",
    "MSSQLDialect",
    "MySQLDialect",
    "OracleDialect",
    "PostgresDialect",
    "SQLDialect",
    "SQLiteDialect",
    "SqlFlavor",
    "append_schemas",
    "escape_identifier",
    "escape_select_identifiers",
    "escape_table_name",
]
