"""Helpers for reading and rewriting ``$N`` placeholders in rendered SQL."""
from __future__ import annotations

import re
from typing import Any

from stitchql.errors import StitchQLError

#: Matches a positional placeholder and captures its number.
PLACEHOLDER_PATTERN = re.compile(r"\$(\d+)")


def placeholder_numbers(text: str) -> list[int]:
    """Return every placeholder number in ``text``, in textual order."""
    return [int(m.group(1)) for m in PLACEHOLDER_PATTERN.finditer(text)]


def bound_value(values: list[Any], number: int) -> Any:
    """Return the value bound to placeholder ``$number``.

    Raises:
        StitchQLError: If ``values`` has no entry for ``number``.
    """
    if not 1 <= number <= len(values):
        raise StitchQLError(
            f"Placeholder ${number} has no bound value ({len(values)} supplied).",
            code="PLACEHOLDER_UNBOUND",
            details={"placeholder": number, "values": len(values)},
        )
    return values[number - 1]


def to_marker_template(text: str, values: list[Any]) -> tuple[str, list[Any]]:
    """Convert rendered SQL back into a ``?`` template with per-marker values.

    Each ``$N`` occurrence becomes one ``?`` and contributes ``values[N - 1]``
    to the returned list, so the result can be inserted into a statement
    as an ordinary leaf.
    """
    ordered: list[Any] = []

    def _replace(match: re.Match[str]) -> str:
        ordered.append(bound_value(values, int(match.group(1))))
        return "?"

    return PLACEHOLDER_PATTERN.sub(_replace, text), ordered
