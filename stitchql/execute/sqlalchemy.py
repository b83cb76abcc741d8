"""SQLAlchemy executor adapter.

Install the optional dependency before using this module::

    pip install "stitchql[sqlalchemy]"

Example::

    from sqlalchemy import create_engine
    from stitchql import select
    from stitchql.execute.sqlalchemy import SQLAlchemyExecutor

    engine = create_engine("sqlite:///mydb.db")
    rows = select("users").where("id = ?", 1).execute(SQLAlchemyExecutor(engine))

``$N`` placeholders are rewritten to ``:pN`` named binds for
:func:`sqlalchemy.text`.  Use ``CAST(x AS type)`` instead of ``x::type``
after a placeholder, since ``:pN::type`` is not parsed as a bind.
"""
from __future__ import annotations

import re
from typing import TYPE_CHECKING, Any

from stitchql.analyze.placeholders import PLACEHOLDER_PATTERN, bound_value

if TYPE_CHECKING:
    from sqlalchemy import Connection, Engine
    from sqlalchemy.orm import Session


def to_named_binds(text: str, values: list[Any]) -> tuple[str, dict[str, Any]]:
    """Rewrite ``$N`` placeholders to ``:pN`` and return the bind mapping."""
    params: dict[str, Any] = {}

    def _replace(match: re.Match[str]) -> str:
        number = int(match.group(1))
        params[f"p{number}"] = bound_value(values, number)
        return f":p{number}"

    return PLACEHOLDER_PATTERN.sub(_replace, text), params


class SQLAlchemyExecutor:
    """Runs built queries through an Engine, Connection or ORM Session.

    With an ``Engine`` every call runs in its own ``engine.begin()``
    transaction; with a Connection or Session the caller owns the
    transaction.  Rows are returned as plain dicts.
    """

    def __init__(self, bind: Engine | Connection | Session) -> None:
        self._bind = bind

    def execute(self, text: str, values: list[Any]) -> list[dict[str, Any]]:
        from sqlalchemy import Engine
        from sqlalchemy import text as sa_text

        statement, params = to_named_binds(text, values)
        if isinstance(self._bind, Engine):
            with self._bind.begin() as conn:
                return self._rows(conn.execute(sa_text(statement), params))
        return self._rows(self._bind.execute(sa_text(statement), params))

    @staticmethod
    def _rows(result: Any) -> list[dict[str, Any]]:
        if not result.returns_rows:
            return []
        return [dict(row) for row in result.mappings().all()]
