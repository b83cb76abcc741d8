"""The ``(text, values)`` output contract shared by every builder."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class BuiltQuery:
    """A rendered SQL fragment or query.

    Attributes:
        text: SQL text with ``$N`` placeholders, numbered contiguously.
        values: Bound values; ``values[N - 1]`` belongs to placeholder ``$N``.
    """

    text: str
    values: list[Any] = field(default_factory=list)

    def as_tuple(self) -> tuple[str, list[Any]]:
        """Return ``(text, values)`` for direct ``cursor.execute(*built.as_tuple())`` use."""
        return self.text, list(self.values)
