"""Structural equality used by deep-mode parameter deduplication.

Two bound values are considered equal when:

* they are the same object, or
* they have exactly the same type and
    - sequences (``list``/``tuple``): same length, pairwise equal;
    - mappings (``dict``): same key set, pairwise equal values (order ignored);
    - callables: same declared signature and same compiled body;
    - plain objects relying on ``object.__eq__``: equal instance ``__dict__``;
    - anything else: ``==``.

``None`` only equals ``None``; ``True`` does not equal ``1`` and ``1`` does
not equal ``1.0`` because their types differ.

Callable equality is a policy, not semantic equivalence: it compares the
parameter list and the function's code object (bytecode, constants and
names), so two textually identical lambdas compare equal even when they
close over different values.
"""
from __future__ import annotations

import inspect
from types import BuiltinFunctionType, FunctionType, MethodType
from typing import Any, Callable

_FUNCTION_TYPES = (FunctionType, MethodType, BuiltinFunctionType)


def deep_equal(a: Any, b: Any) -> bool:
    """Return ``True`` when ``a`` and ``b`` are structurally equal."""
    if a is b:
        return True
    if a is None or b is None:
        return False
    if type(a) is not type(b):
        return False

    if isinstance(a, _FUNCTION_TYPES):
        return _callable_descriptor(a) == _callable_descriptor(b)

    if isinstance(a, (list, tuple)):
        if len(a) != len(b):
            return False
        return all(deep_equal(x, y) for x, y in zip(a, b))

    if isinstance(a, dict):
        if a.keys() != b.keys():
            return False
        return all(deep_equal(value, b[key]) for key, value in a.items())

    if type(a).__eq__ is object.__eq__ and hasattr(a, "__dict__"):
        return deep_equal(vars(a), vars(b))

    try:
        return bool(a == b)
    except (TypeError, ValueError):
        # e.g. array-likes whose == is element-wise and ambiguous as a bool
        return False


def _callable_descriptor(fn: Callable[..., Any]) -> tuple[Any, ...]:
    if isinstance(fn, MethodType):
        return ("method", _callable_descriptor(fn.__func__), id(fn.__self__))
    try:
        signature = str(inspect.signature(fn))
    except (TypeError, ValueError):
        signature = None
    code = getattr(fn, "__code__", None)
    if code is None:
        return ("builtin", signature, getattr(fn, "__qualname__", repr(fn)))
    return ("function", signature, code.co_code, code.co_consts, code.co_names)
