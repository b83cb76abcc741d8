"""Positional placeholder cursor."""
from __future__ import annotations


class ParameterCursor:
    """The "next placeholder number" authority for one statement.

    Placeholders are 1-based: a fresh cursor hands out ``$1`` first.  The
    cursor is only moved by offset operations; rendering reads it via
    :meth:`peek` and numbers forward from there without mutating it.
    """

    __slots__ = ("_next",)

    def __init__(self, start: int = 1) -> None:
        if start < 1:
            raise ValueError(f"Placeholder numbering starts at 1, got {start}.")
        self._next = start

    def peek(self) -> int:
        """Return the number the next placeholder will receive."""
        return self._next

    def advance_by(self, n: int) -> None:
        """Shift the cursor forward by ``n`` positions."""
        if n < 0:
            raise ValueError(f"Cannot advance a parameter cursor by {n}.")
        self._next += n

    def set_to(self, n: int) -> None:
        """Place the cursor at absolute position ``n``."""
        if n < 1:
            raise ValueError(f"Placeholder numbering starts at 1, got {n}.")
        self._next = n

    def copy(self) -> ParameterCursor:
        return ParameterCursor(self._next)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ParameterCursor):
            return NotImplemented
        return self._next == other._next

    def __repr__(self) -> str:
        return f"ParameterCursor(next={self._next})"
