"""Parameterized boolean-expression builder (WHERE / HAVING / JOIN ON bodies).

A :class:`Statement` holds an ordered list of
:class:`~stitchql.statement.fragment.ConditionFragment` objects whose
templates use ``?`` markers.  Markers are resolved to ``$N`` placeholders
only when the statement is rendered, starting at the statement's
:class:`~stitchql.statement.cursor.ParameterCursor`.  Rendering is memoized
until the next mutation.

Example::

    stmt = (
        Statement()
        .and_("a = ?", 1)
        .or_(Statement().and_("b = ?", 2).and_("c = ?", 3))
    )
    stmt.render().text
    # 'WHERE (a = $1)\\n OR ((b = $2)\\n AND (c = $3))'
"""
from __future__ import annotations

import re
from collections.abc import Iterable
from itertools import count
from typing import TYPE_CHECKING, Any

from stitchql.built import BuiltQuery
from stitchql.statement.cursor import ParameterCursor
from stitchql.statement.fragment import (
    MARKER,
    Combinator,
    ConditionFragment,
    as_value_list,
)
from stitchql.statement.search import SearchModule

if TYPE_CHECKING:
    from stitchql.compile.base import QueryDefinition

CombinatorLike = Combinator | str

_MARKER_PATTERN = re.compile(re.escape(MARKER))

#: Separator used inside flattened groups.
_GROUP_SEPARATOR = "\n "


class Statement:
    """Fluent builder for a parameterized boolean expression.

    Args:
        initial_offset: Number of parameters that precede this statement's
            own placeholders (the first placeholder becomes
            ``$initial_offset + 1``).
    """

    def __init__(self, initial_offset: int = 0) -> None:
        self._cursor = ParameterCursor(1 + initial_offset)
        self._fragments: list[ConditionFragment] = []
        self._injected: list[Any] = []
        self._emit_where = True
        self._rendered: BuiltQuery | None = None
        self._rendered_newline: bool | None = None

    # ------------------------------------------------------------------
    # Core insertion
    # ------------------------------------------------------------------

    def add_leaf(
        self,
        template: str,
        values: Any = (),
        combinator: CombinatorLike = Combinator.AND,
    ) -> Statement:
        """Append one condition.

        Args:
            template: Condition text with one ``?`` per bound value.
            values: A list/tuple of values, or a single scalar value.
            combinator: ``AND``, ``OR`` or ``""``; ignored for the first fragment.

        Raises:
            PlaceholderMismatchError: If the marker count differs from the
                number of values.
        """
        kind = Combinator.coerce(combinator) if self._fragments else Combinator.NONE
        self._fragments.append(
            ConditionFragment(kind, template, tuple(as_value_list(values)))
        )
        self.invalidate()
        return self

    def add_group(
        self,
        subtree: Statement,
        combinator: CombinatorLike = Combinator.AND,
    ) -> Statement:
        """Append ``subtree`` as one parenthesised fragment.

        The subtree is flattened at insertion time: later changes to it do
        not affect this statement.  An empty subtree adds nothing.
        """
        if subtree.is_empty:
            return self
        return self.add_leaf(subtree.source(), subtree.params, combinator)

    def source(self) -> str:
        """Return the fragments joined with their combinators, markers unresolved."""
        return _GROUP_SEPARATOR.join(f.source() for f in self._fragments)

    # ------------------------------------------------------------------
    # Boolean combinators
    # ------------------------------------------------------------------

    def and_(self, statement: Statement | str, values: Any = ()) -> Statement:
        """Append a condition (template or nested statement) joined with ``AND``."""
        return self._add(statement, values, Combinator.AND)

    def or_(self, statement: Statement | str, values: Any = ()) -> Statement:
        """Append a condition (template or nested statement) joined with ``OR``."""
        return self._add(statement, values, Combinator.OR)

    def raw(self, kind: CombinatorLike, template: str, *values: Any) -> Statement:
        """Append verbatim SQL; its markers are validated like any other leaf."""
        return self.add_leaf(template, list(values), kind)

    def join_statements(
        self,
        statements: Iterable[Statement],
        join_with: CombinatorLike = Combinator.AND,
    ) -> Statement:
        """Append each statement as its own group joined with ``join_with``."""
        for stmt in statements:
            self.add_group(stmt, join_with)
        return self

    def _add(
        self,
        statement: Statement | str,
        values: Any,
        kind: Combinator,
    ) -> Statement:
        if isinstance(statement, Statement):
            return self.add_group(statement, kind)
        return self.add_leaf(statement, values, kind)

    # ------------------------------------------------------------------
    # Condition helpers
    # ------------------------------------------------------------------

    def in_(
        self,
        column: str,
        values: Iterable[Any],
        kind: CombinatorLike = Combinator.AND,
    ) -> Statement:
        values = list(values)
        markers = ", ".join(MARKER for _ in values)
        return self.add_leaf(f"{column} IN ({markers})", values, kind)

    def not_in(
        self,
        column: str,
        values: Iterable[Any],
        kind: CombinatorLike = Combinator.AND,
    ) -> Statement:
        values = list(values)
        markers = ", ".join(MARKER for _ in values)
        return self.add_leaf(f"{column} NOT IN ({markers})", values, kind)

    def in_subquery(
        self,
        column: str,
        subquery: QueryDefinition,
        kind: CombinatorLike = Combinator.AND,
    ) -> Statement:
        """Append ``column IN (<subquery>)`` with the subquery's values inlined."""
        template, values = _subquery_template(subquery, ())
        return self.add_leaf(f"{column} IN ({template})", values, kind)

    def between(
        self,
        column: str,
        start: Any,
        end: Any,
        kind: CombinatorLike = Combinator.AND,
    ) -> Statement:
        return self.add_leaf(f"{column} BETWEEN ? AND ?", [start, end], kind)

    def not_between(
        self,
        column: str,
        start: Any,
        end: Any,
        kind: CombinatorLike = Combinator.AND,
    ) -> Statement:
        return self.add_leaf(f"{column} NOT BETWEEN ? AND ?", [start, end], kind)

    def is_null(self, column: str, kind: CombinatorLike = Combinator.AND) -> Statement:
        return self.add_leaf(f"{column} IS NULL", [], kind)

    def is_not_null(self, column: str, kind: CombinatorLike = Combinator.AND) -> Statement:
        return self.add_leaf(f"{column} IS NOT NULL", [], kind)

    def like(self, column: str, pattern: str, kind: CombinatorLike = Combinator.AND) -> Statement:
        return self.add_leaf(f"{column} LIKE ?", [pattern], kind)

    def ilike(self, column: str, pattern: str, kind: CombinatorLike = Combinator.AND) -> Statement:
        return self.add_leaf(f"{column} ILIKE ?", [pattern], kind)

    def not_like(
        self, column: str, pattern: str, kind: CombinatorLike = Combinator.AND
    ) -> Statement:
        return self.add_leaf(f"{column} NOT LIKE ?", [pattern], kind)

    def not_ilike(
        self, column: str, pattern: str, kind: CombinatorLike = Combinator.AND
    ) -> Statement:
        return self.add_leaf(f"{column} NOT ILIKE ?", [pattern], kind)

    def exists(
        self,
        subquery: str | QueryDefinition,
        values: Any = (),
        kind: CombinatorLike = Combinator.AND,
    ) -> Statement:
        """Append ``EXISTS (...)`` from a ``?`` template or a query builder."""
        template, bound = _subquery_template(subquery, values)
        return self.add_leaf(f"EXISTS ({template})", bound, kind)

    def not_exists(
        self,
        subquery: str | QueryDefinition,
        values: Any = (),
        kind: CombinatorLike = Combinator.AND,
    ) -> Statement:
        template, bound = _subquery_template(subquery, values)
        return self.add_leaf(f"NOT EXISTS ({template})", bound, kind)

    def search(self) -> SearchModule:
        """Return search helpers that append to this statement."""
        return SearchModule(self)

    # ------------------------------------------------------------------
    # Offsets and injected parameters
    # ------------------------------------------------------------------

    def add_offset(self, offset: int) -> Statement:
        """Shift this statement's placeholder numbering forward by ``offset``."""
        self._cursor.advance_by(offset)
        self.invalidate()
        return self

    def set_offset(self, offset: int) -> Statement:
        """Number own placeholders after ``offset`` preceding values.

        Injected parameters (see :meth:`add_params`) still occupy the
        positions right before the statement's own placeholders.
        """
        self._cursor.set_to(1 + offset + len(self._injected))
        self.invalidate()
        return self

    def reset_offset(self) -> Statement:
        """Equivalent to ``set_offset(0)``."""
        return self.set_offset(0)

    def add_params(self, params: Iterable[Any]) -> Statement:
        """Prepend foreign values that precede this statement's own values.

        The cursor advances by ``len(params)`` so the statement's own
        placeholders are numbered after them.
        """
        params = list(params)
        self._injected = params + self._injected
        self._cursor.advance_by(len(params))
        self.invalidate()
        return self

    @property
    def offset(self) -> int:
        """Values preceding this statement, excluding injected parameters."""
        return self._cursor.peek() - 1 - len(self._injected)

    # ------------------------------------------------------------------
    # WHERE keyword
    # ------------------------------------------------------------------

    def enable_where(self) -> Statement:
        if not self._emit_where:
            self._emit_where = True
            self.invalidate()
        return self

    def disable_where(self) -> Statement:
        if self._emit_where:
            self._emit_where = False
            self.invalidate()
        return self

    @property
    def emits_where(self) -> bool:
        return self._emit_where

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def render(self, newline: bool = True) -> BuiltQuery:
        """Resolve markers and return the statement text with its values.

        Args:
            newline: Separate fragments with ``"\\n "`` (default) or ``" "``.

        Returns:
            ``BuiltQuery``; ``("", [])`` when there are no fragments, even if
            parameters were injected.
        """
        if self._rendered is not None and self._rendered_newline == newline:
            return self._rendered

        if not self._fragments:
            built = BuiltQuery(text="", values=[])
        else:
            values = self.params
            separator = "\n " if newline else " "
            numbers = count(self._cursor.peek())
            body = _MARKER_PATTERN.sub(
                lambda _m: f"${next(numbers)}",
                separator.join(f.source() for f in self._fragments),
            )
            text = f"WHERE {body}" if self._emit_where else body
            built = BuiltQuery(text=text, values=values)

        self._rendered = built
        self._rendered_newline = newline
        return built

    def invalidate(self) -> None:
        """Drop the memoized render so the next :meth:`render` recomputes."""
        self._rendered = None
        self._rendered_newline = None

    @property
    def has_rendered(self) -> bool:
        return self._rendered is not None

    @property
    def params(self) -> list[Any]:
        """Injected parameters followed by every fragment's values."""
        values = list(self._injected)
        for fragment in self._fragments:
            values.extend(fragment.values)
        return values

    @property
    def is_empty(self) -> bool:
        return not self._fragments

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def reset(self) -> Statement:
        """Clear fragments, values and offsets; re-enable the WHERE keyword."""
        self._cursor.set_to(1)
        self._fragments = []
        self._injected = []
        self._emit_where = True
        self.invalidate()
        return self

    def clone(self) -> Statement:
        """Return an independent copy (fragments, values, cursor and flags)."""
        cloned = Statement()
        cloned._cursor = self._cursor.copy()
        cloned._fragments = list(self._fragments)
        cloned._injected = list(self._injected)
        cloned._emit_where = self._emit_where
        return cloned

    def __repr__(self) -> str:
        return (
            f"Statement(fragments={len(self._fragments)}, "
            f"next_placeholder={self._cursor.peek()}, where={self._emit_where})"
        )


def _subquery_template(
    subquery: str | QueryDefinition,
    values: Any,
) -> tuple[str, list[Any]]:
    """Return a ``?`` template and its values for a string or a query builder."""
    if isinstance(subquery, str):
        return subquery, as_value_list(values)

    from stitchql.analyze.placeholders import to_marker_template

    built = subquery.build_fragment(0)
    return to_marker_template(built.text, built.values)
