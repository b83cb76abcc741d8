"""Composition of independently built fragments into one query.

A :class:`FragmentComposer` is created per ``build()`` call.  Fragments are
embedded in the order their text appears in the output; each embed resets
the fragment's numbering, shifts it by the values consumed so far and
appends the fragment's values, keeping placeholder ranges and the values
list in lockstep::

    composer = FragmentComposer()
    cte_sql = composer.embed_query(cte_query, deep)      # $1 .. $k
    where_sql = composer.embed_statement(where, keyword=True)  # $k+1 ..
    BuiltQuery(text, composer.values)
"""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from stitchql.built import BuiltQuery
from stitchql.statement import Statement

if TYPE_CHECKING:
    from stitchql.compile.base import QueryDefinition

logger = logging.getLogger(__name__)


def space_lines(text: str, spaces: int = 0) -> str:
    """Indent every line of ``text`` by ``spaces`` spaces."""
    pad = " " * spaces
    return "\n".join(pad + line for line in text.split("\n"))


class FragmentComposer:
    """Running offset and aggregate values for one composed build.

    Args:
        offset: Values that precede the whole composed query (non-zero only
            when the query itself is embedded in a larger one).
        newline: Separator style used when rendering statements.
    """

    def __init__(self, offset: int = 0, newline: bool = True) -> None:
        self._base = offset
        self._values: list[Any] = []
        self._newline = newline

    @property
    def running_offset(self) -> int:
        """Number of values preceding the next embedded fragment."""
        return self._base + len(self._values)

    @property
    def values(self) -> list[Any]:
        return list(self._values)

    def bind(self, value: Any) -> str:
        """Append one value and return its placeholder."""
        self._values.append(value)
        return f"${self.running_offset}"

    def embed_statement(self, statement: Statement, keyword: bool = False) -> str:
        """Render ``statement`` at the running offset and return its text.

        Args:
            statement: The condition tree; empty statements contribute ``""``.
            keyword: Emit the leading ``WHERE``.

        The statement's own offset and WHERE flag are restored afterwards so
        the caller's object is left as it was.
        """
        if statement.is_empty:
            return ""
        previous_offset = statement.offset
        previous_where = statement.emits_where
        statement.reset_offset().add_offset(self.running_offset)
        if keyword:
            statement.enable_where()
        else:
            statement.disable_where()
        try:
            built = statement.render(self._newline)
        finally:
            statement.set_offset(previous_offset)
            if previous_where:
                statement.enable_where()
            else:
                statement.disable_where()
        self._append(built, "statement")
        return built.text

    def embed_query(
        self,
        query: QueryDefinition,
        deep_analysis: bool | None = None,
        label: str = "subquery",
    ) -> str:
        """Build ``query`` as a fragment at the running offset; return its text."""
        built = query.build_fragment(self.running_offset, deep_analysis)
        self._append(built, label)
        return built.text

    def condition(self, on: Statement | str) -> str:
        """Return a JOIN/HAVING condition: statements are embedded, strings kept verbatim."""
        if isinstance(on, Statement):
            return self.embed_statement(on)
        return on

    def _append(self, built: BuiltQuery, label: str) -> None:
        logger.debug(
            "Embedded %s at offset %d with %d value(s)",
            label,
            self.running_offset,
            len(built.values),
        )
        self._values.extend(built.values)
