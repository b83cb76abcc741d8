"""Common table expressions.

Usage::

    active = Cte("active_users", select("users").where("active = ?", True))
    query = select("active_users").with_(active).where("age > ?", 30)
    query.build().text
    # 'WITH active_users AS (\\nSELECT ...WHERE (active = $1)\\n)\\nSELECT ... WHERE (age > $2)'
"""
from __future__ import annotations

from collections.abc import Iterator
from typing import TYPE_CHECKING

from stitchql.built import BuiltQuery
from stitchql.compile.composer import FragmentComposer
from stitchql.errors import QueryBuildError

if TYPE_CHECKING:
    from stitchql.compile.base import QueryDefinition


class Cte:
    """A single ``name AS (query)`` entry.

    Args:
        name: CTE name, emitted verbatim.
        query: The query producing the CTE rows.
        recursive: Mark the CTE as recursive (``WITH RECURSIVE``).
    """

    def __init__(
        self,
        name: str | None = None,
        query: QueryDefinition | None = None,
        recursive: bool = False,
    ) -> None:
        self._name = name or ""
        self._query = query
        self._recursive = recursive

    @property
    def name(self) -> str:
        return self._name

    @property
    def query(self) -> QueryDefinition | None:
        return self._query

    @property
    def is_recursive(self) -> bool:
        return self._recursive

    def recursive(self) -> Cte:
        self._recursive = True
        return self

    def alias(self, name: str) -> Cte:
        self._name = name
        return self

    def with_query(self, query: QueryDefinition) -> Cte:
        self._query = query
        return self

    def compose(self, composer: FragmentComposer, deep_analysis: bool) -> str:
        """Embed the CTE query at the composer's running offset."""
        if not self._name:
            raise QueryBuildError("A CTE requires a name.", clause="WITH")
        if self._query is None:
            raise QueryBuildError(f"CTE {self._name!r} has no query.", clause="WITH")
        body = composer.embed_query(self._query, deep_analysis, label=f"cte {self._name}")
        return f"{self._name} AS (\n{body}\n)"

    def build(self, deep_analysis: bool = False) -> BuiltQuery:
        """Build this CTE on its own, numbering its placeholders from ``$1``."""
        composer = FragmentComposer()
        text = self.compose(composer, deep_analysis)
        prefix = "RECURSIVE " if self._recursive else ""
        return BuiltQuery(text=f"{prefix}{text}", values=composer.values)

    def clone(self) -> Cte:
        query = self._query.clone() if self._query is not None else None
        return Cte(self._name, query, self._recursive)

    def __repr__(self) -> str:
        return f"Cte(name={self._name!r}, recursive={self._recursive})"


class CteMaker:
    """An ordered list of CTEs rendered as one ``WITH`` prologue.

    ``RECURSIVE`` is emitted once, after ``WITH``, when any CTE is recursive.
    """

    def __init__(self, *ctes: Cte) -> None:
        self._ctes: list[Cte] = list(ctes)

    def add_cte(self, cte: Cte) -> CteMaker:
        self._ctes.append(cte)
        return self

    def add_ctes(self, ctes: list[Cte]) -> CteMaker:
        self._ctes.extend(ctes)
        return self

    def __len__(self) -> int:
        return len(self._ctes)

    def __iter__(self) -> Iterator[Cte]:
        return iter(self._ctes)

    def compose(self, composer: FragmentComposer, deep_analysis: bool) -> str:
        """Embed every CTE in order and return the ``WITH`` clause (``""`` if none)."""
        if not self._ctes:
            return ""
        parts = [cte.compose(composer, deep_analysis) for cte in self._ctes]
        recursive = "RECURSIVE " if any(cte.is_recursive for cte in self._ctes) else ""
        return f"WITH {recursive}{', '.join(parts)}"

    def build(self, deep_analysis: bool = False) -> BuiltQuery:
        """Build the prologue on its own; values are not deduplicated."""
        composer = FragmentComposer()
        text = self.compose(composer, deep_analysis)
        return BuiltQuery(text=text, values=composer.values)

    def clone(self) -> CteMaker:
        return CteMaker(*(cte.clone() for cte in self._ctes))
