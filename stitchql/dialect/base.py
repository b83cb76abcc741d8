"""SQL flavor enumeration and the dialect interface."""
from __future__ import annotations

from abc import ABC, abstractmethod
from enum import Enum


class SqlFlavor(str, Enum):
    """Supported SQL flavors; selects identifier quoting rules."""

    POSTGRES = "postgres"
    MYSQL = "mysql"
    SQLITE = "sqlite"
    MSSQL = "mssql"
    ORACLE = "oracle"


class SQLDialect(ABC):
    """Per-flavor identifier quoting.

    Placeholders are always ``$N`` regardless of flavor; only identifier
    quoting differs between dialects.
    """

    @property
    @abstractmethod
    def dialect_name(self) -> str:
        """Return the flavor name this dialect is registered under."""

    @abstractmethod
    def quote_identifier(self, name: str) -> str:
        """Quote a single identifier, escaping embedded quote characters."""


class DoubleQuoteDialect(SQLDialect):
    """ANSI ``"identifier"`` quoting shared by several flavors."""

    def quote_identifier(self, name: str) -> str:
        escaped = name.replace('"', '""')
        return f'"{escaped}"'
