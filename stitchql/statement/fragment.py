"""Leaf condition fragments and their combinators."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from stitchql.errors import PlaceholderMismatchError, QueryBuildError

#: The caller-facing placeholder marker inside condition templates.
MARKER = "?"


class Combinator(str, Enum):
    """Boolean operator placed in front of a fragment."""

    NONE = ""
    AND = "AND"
    OR = "OR"

    @classmethod
    def coerce(cls, kind: Combinator | str | None) -> Combinator:
        """Accept a member, its keyword (any case), ``""`` or ``None``."""
        if isinstance(kind, Combinator):
            return kind
        if kind is None:
            return cls.NONE
        try:
            return cls(kind.strip().upper())
        except ValueError:
            raise QueryBuildError(
                f"Invalid combinator {kind!r}; expected 'AND', 'OR' or ''.",
                clause="WHERE",
            ) from None


def count_markers(template: str) -> int:
    """Return the number of ``?`` markers in ``template``."""
    return template.count(MARKER)


def as_value_list(values: Any) -> list[Any]:
    """Normalise bound values: lists and tuples are taken as-is, anything else is one value."""
    if isinstance(values, (list, tuple)):
        return list(values)
    return [values]


@dataclass(frozen=True)
class ConditionFragment:
    """One condition in a statement.

    Attributes:
        combinator: Operator emitted before the fragment (``NONE`` for the first).
        template: Condition text with unresolved ``?`` markers.
        values: Bound values, one per marker, in marker order.
    """

    combinator: Combinator
    template: str
    values: tuple[Any, ...]

    def __post_init__(self) -> None:
        expected = count_markers(self.template)
        if expected != len(self.values):
            raise PlaceholderMismatchError(self.template, expected, len(self.values))

    def source(self) -> str:
        """Return the parenthesised fragment text, markers still unresolved."""
        if self.combinator is Combinator.NONE:
            return f"({self.template})"
        return f"{self.combinator.value} ({self.template})"
