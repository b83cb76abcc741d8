"""Deduplication / re-analysis of bound parameters.

Runs once on a fully assembled ``(text, values)`` pair and renumbers the
``$N`` placeholders so that equal bound values share one placeholder.
``values`` of the result holds each distinct value once, in order of first
textual occurrence.

Two equality modes are available:

``strict`` (default)
    Immutable scalar values (``str``, ``int``, ``float``, ``bool``,
    ``bytes``, ``None``, ``Decimal``, date/time types, ``UUID``) match by
    type and value; every other object matches only itself.  O(1) lookup.
``deep``
    Linear scan of the values seen so far using
    :func:`~stitchql.analyze.equality.deep_equal`, so structurally equal but
    distinct lists, dicts and objects collapse too.  O(k) per lookup.
"""
from __future__ import annotations

import datetime
import logging
import re
import uuid
from decimal import Decimal
from typing import Any, Hashable

from stitchql.analyze.equality import deep_equal
from stitchql.analyze.placeholders import PLACEHOLDER_PATTERN, bound_value
from stitchql.built import BuiltQuery

logger = logging.getLogger(__name__)

_SCALAR_TYPES: frozenset[type] = frozenset(
    {
        str,
        int,
        float,
        bool,
        bytes,
        type(None),
        Decimal,
        datetime.date,
        datetime.datetime,
        datetime.time,
        datetime.timedelta,
        uuid.UUID,
    }
)


def _strict_key(value: Any) -> Hashable:
    if type(value) in _SCALAR_TYPES:
        return (type(value), value)
    return ("ref", id(value))


def reanalyze_duplicate_params(
    text: str,
    values: list[Any],
    deep: bool = False,
) -> BuiltQuery:
    """Collapse placeholders bound to equal values into a shared placeholder.

    Args:
        text: Rendered SQL whose placeholders are ``$1 .. $len(values)``.
        values: Bound values, ``values[N - 1]`` for placeholder ``$N``.
        deep: Use structural equality instead of strict identity/value equality.

    Returns:
        A new :class:`~stitchql.built.BuiltQuery`; the inputs are not modified.

    Raises:
        StitchQLError: If ``text`` references a placeholder with no bound value
            (code ``PLACEHOLDER_UNBOUND``).
    """
    strict_index: dict[Hashable, int] = {}
    deep_index: list[tuple[Any, int]] = []
    new_values: list[Any] = []

    def _lookup(value: Any) -> int | None:
        if deep:
            for seen, index in deep_index:
                if deep_equal(seen, value):
                    return index
            return None
        return strict_index.get(_strict_key(value))

    def _replace(match: re.Match[str]) -> str:
        value = bound_value(values, int(match.group(1)))
        index = _lookup(value)
        if index is None:
            new_values.append(value)
            index = len(new_values)
            if deep:
                deep_index.append((value, index))
            else:
                strict_index[_strict_key(value)] = index
        return f"${index}"

    new_text = PLACEHOLDER_PATTERN.sub(_replace, text)
    logger.debug(
        "Re-analyzed parameters (%s mode): %d -> %d value(s)",
        "deep" if deep else "strict",
        len(values),
        len(new_values),
    )
    return BuiltQuery(text=new_text, values=new_values)
