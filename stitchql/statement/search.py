"""Search condition helpers bound to a :class:`Statement`.

Usage::

    stmt = Statement()
    stmt.search().fulltext("name", "john")
    stmt.search().fuzzy_trigram("name", "jon", similarity_threshold=0.4)
"""
from __future__ import annotations

from typing import TYPE_CHECKING

from stitchql.statement.fragment import Combinator

if TYPE_CHECKING:
    from stitchql.statement.statement import CombinatorLike, Statement


def _words(query: str) -> list[str]:
    return [word for word in query.split(" ") if word.strip()]


class SearchModule:
    """Appends LIKE, PostgreSQL full-text and trigram conditions to a statement.

    Every method returns the wrapped statement so chaining continues on it.
    """

    def __init__(self, statement: Statement) -> None:
        self._statement = statement

    def fulltext(
        self,
        field: str,
        query: str,
        case_insensitive: bool = True,
        kind: CombinatorLike = Combinator.AND,
    ) -> Statement:
        """``field ILIKE '%query%'`` (or ``LIKE`` when case sensitive)."""
        if case_insensitive:
            return self._statement.ilike(field, f"%{query}%", kind)
        return self._statement.like(field, f"%{query}%", kind)

    def fulltext_ts_vector(
        self,
        field: str,
        query: str,
        config: str = "simple",
        kind: CombinatorLike = Combinator.AND,
    ) -> Statement:
        """PostgreSQL ``to_tsvector`` match with every word as a prefix term.

        ``"quick fox"`` becomes the ts_query ``quick:* & fox:*``.
        """
        ts_query = " & ".join(f"{word}:*" for word in _words(query))
        condition = self._new_statement().raw(
            Combinator.NONE,
            f"to_tsvector(?, {field}) @@ to_tsquery(?, ?)",
            config,
            config,
            ts_query,
        )
        return self._statement.add_group(condition, kind)

    def word_by_word(
        self,
        field: str,
        query: str,
        case_insensitive: bool = True,
        kind: CombinatorLike = Combinator.AND,
    ) -> Statement:
        """One LIKE/ILIKE condition per word of ``query``."""
        for word in _words(query):
            self.fulltext(field, word, case_insensitive, kind)
        return self._statement

    def fuzzy_trigram(
        self,
        field: str,
        query: str,
        similarity_threshold: float = 0.3,
        kind: CombinatorLike = Combinator.AND,
    ) -> Statement:
        """pg_trgm match: ``field % query AND similarity(field, query) >= threshold``."""
        condition = (
            self._new_statement()
            .raw(Combinator.NONE, f"{field} % ?", query)
            .raw(Combinator.AND, f"similarity({field}, ?) >= ?", query, similarity_threshold)
        )
        return self._statement.add_group(condition, kind)

    def _new_statement(self) -> Statement:
        return type(self._statement)()
