"""Identifier escaping and ``$schema`` substitution.

Table names may carry a schema placeholder (``$schema.users`` or
``$schema2.users``).  Escaping leaves the placeholder untouched; the query
builders replace it with the configured schema name at build time via
:func:`append_schemas`.  Schema names are inserted verbatim and must come
from trusted configuration.
"""
from __future__ import annotations

import re
from collections.abc import Iterable, Sequence

from stitchql.dialect.base import SqlFlavor
from stitchql.dialect.registry import DialectFactory
from stitchql.errors import QueryBuildError, SchemaPlaceholderOutOfRangeError

_SCHEMA_IDENTIFIER = re.compile(r"^\$schema\d*$")
_SCHEMA_TOKEN = re.compile(r"\$schema(\d*)")
_AS_SPLIT = re.compile(r"(?:^|\s+)AS(?:\s+|$)", re.IGNORECASE)


def escape_identifier(identifier: str, flavor: SqlFlavor | str) -> str:
    """Quote one identifier for ``flavor``; schema placeholders pass through.

    Dots are not treated as separators: ``"a.b"`` becomes one quoted name.

    Raises:
        UnsupportedFlavorError: If ``flavor`` has no registered dialect.
    """
    dialect = DialectFactory.create(flavor)
    if _SCHEMA_IDENTIFIER.match(identifier):
        return identifier
    return dialect.quote_identifier(identifier)


def _escape_column(column: str, flavor: SqlFlavor | str) -> str:
    parts = [part.strip() for part in column.split(".")]
    if any(not part for part in parts):
        raise QueryBuildError(f"Invalid column reference: {column}", clause="SELECT")
    return ".".join(
        part if part == "*" else escape_identifier(part, flavor) for part in parts
    )


def escape_select_identifiers(
    identifiers: Iterable[str],
    flavor: SqlFlavor | str,
) -> list[str]:
    """Escape column references, keeping ``table.column`` and ``x AS y`` shapes.

    ``*`` and ``t.*`` are emitted unquoted.

    Raises:
        QueryBuildError: On an empty column or alias around ``AS``.
    """
    escaped: list[str] = []
    for identifier in identifiers:
        parts = _AS_SPLIT.split(identifier.strip())
        if len(parts) == 2:
            column, alias = (part.strip() for part in parts)
            if not column or not alias:
                raise QueryBuildError(
                    f"Invalid identifier with AS clause: {identifier}", clause="SELECT"
                )
            escaped.append(
                f"{_escape_column(column, flavor)} AS {escape_identifier(alias, flavor)}"
            )
        else:
            escaped.append(_escape_column(identifier.strip(), flavor))
    return escaped


def escape_table_name(table_name: str, flavor: SqlFlavor | str) -> str:
    """Escape ``table`` or ``schema.table``.

    Raises:
        QueryBuildError: If either side of ``schema.table`` is empty, or the
            name has more than one dot.
    """
    parts = table_name.split(".")
    if len(parts) == 2:
        schema, table = (part.strip() for part in parts)
        if not schema or not table:
            raise QueryBuildError(f"Invalid table name with schema: {table_name}")
        return f"{escape_identifier(schema, flavor)}.{escape_identifier(table, flavor)}"
    if len(parts) == 1:
        return escape_identifier(table_name.strip(), flavor)
    raise QueryBuildError(f"Invalid table name: {table_name}")


def append_schemas(text: str, schemas: Sequence[str]) -> str:
    """Replace ``$schema`` / ``$schemaN`` tokens with configured schema names.

    ``$schema`` is equivalent to ``$schema0``.

    Raises:
        SchemaPlaceholderOutOfRangeError: If a token's index has no schema.
    """

    def _replace(match: re.Match[str]) -> str:
        index = int(match.group(1)) if match.group(1) else 0
        if index >= len(schemas):
            raise SchemaPlaceholderOutOfRangeError(index, list(schemas))
        return schemas[index]

    return _SCHEMA_TOKEN.sub(_replace, text)
