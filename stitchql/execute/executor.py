"""Executor adapters: run a built ``(text, values)`` pair and return rows.

Three shapes of executor are accepted, each resolved once into an explicit
adapter:

``CallableExecutor``
    A function ``fn(text, values)``.
``MethodExecutor``
    An object exposing one of ``execute``, ``query``, ``run``, ``all`` or
    ``get`` (first match wins), e.g. a DB-API connection.
``ManagerExecutor``
    An object whose ``manager`` attribute exposes one of those methods.
    Skipped when ``no_manager=True``.

Executor results are normalised to a list of rows: ``None`` gives ``[]``,
a ``rows`` attribute or key is unwrapped, a ``(rows, count)`` pair yields
``rows`` and DB-API cursors are drained with ``fetchall()``.
"""
from __future__ import annotations

import inspect
import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any, Union

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from stitchql.errors import ExecutorError, RowValidationError

logger = logging.getLogger(__name__)

#: Method names probed on executor objects, in priority order.
EXECUTOR_METHODS: tuple[str, ...] = ("execute", "query", "run", "all", "get")


def _find_method(target: Any) -> str | None:
    for name in EXECUTOR_METHODS:
        if callable(getattr(target, name, None)):
            return name
    return None


@dataclass(frozen=True)
class CallableExecutor:
    fn: Callable[[str, list[Any]], Any]

    def __call__(self, text: str, values: list[Any]) -> Any:
        return self.fn(text, values)


@dataclass(frozen=True)
class MethodExecutor:
    target: Any
    method: str

    def __call__(self, text: str, values: list[Any]) -> Any:
        return getattr(self.target, self.method)(text, values)


@dataclass(frozen=True)
class ManagerExecutor:
    owner: Any
    method: str

    @property
    def manager(self) -> Any:
        return self.owner.manager

    def __call__(self, text: str, values: list[Any]) -> Any:
        return getattr(self.manager, self.method)(text, values)


Executor = Union[CallableExecutor, MethodExecutor, ManagerExecutor]


def resolve_executor(executor: Any, no_manager: bool = False) -> Executor:
    """Classify ``executor`` into one of the adapter variants.

    Already-resolved adapters are returned unchanged.  A ``manager`` without
    any executor method falls back to the executor's own methods.

    Raises:
        ExecutorError: If no variant matches.
    """
    if isinstance(executor, (CallableExecutor, MethodExecutor, ManagerExecutor)):
        return executor
    if executor is None:
        raise ExecutorError("Invalid query executor provided.")
    if callable(executor) and _find_method(executor) is None:
        return CallableExecutor(executor)

    if not no_manager:
        manager = getattr(executor, "manager", None)
        if manager is not None:
            method = _find_method(manager)
            if method is not None:
                return ManagerExecutor(executor, method)

    method = _find_method(executor)
    if method is not None:
        return MethodExecutor(executor, method)
    if callable(executor):
        return CallableExecutor(executor)
    raise ExecutorError(
        "Invalid query executor provided.",
        details={"type": type(executor).__name__, "methods": list(EXECUTOR_METHODS)},
    )


def _is_rows_count_pair(result: Any) -> bool:
    return (
        isinstance(result, (list, tuple))
        and len(result) == 2
        and isinstance(result[0], (list, tuple))
        and isinstance(result[1], int)
        and not isinstance(result[1], bool)
    )


def normalize_rows(result: Any) -> list[Any]:
    """Turn an executor's return value into a list of rows.

    Raises:
        ExecutorError: If the result (or its ``rows``) is not row-shaped.
    """
    if result is None:
        return []
    if isinstance(result, (str, bytes, int, float, bool)):
        raise ExecutorError(
            "Invalid result from query executor.",
            details={"type": type(result).__name__},
        )

    if isinstance(result, Mapping) and "rows" in result:
        rows = result["rows"]
    elif not isinstance(result, Mapping) and hasattr(result, "rows"):
        rows = result.rows
    else:
        rows = result
        if _is_rows_count_pair(rows):
            return list(rows[0])
        if isinstance(rows, (list, tuple)):
            return list(rows)
        if callable(getattr(rows, "fetchall", None)):
            return list(rows.fetchall())
        return [rows]

    if rows is None:
        return []
    if isinstance(rows, (str, bytes)) or not isinstance(rows, (list, tuple)):
        raise ExecutorError(
            "Invalid rows property in result from query executor.",
            details={"type": type(rows).__name__},
        )
    return list(rows)


def validate_rows(rows: list[Any], model: Any) -> list[Any]:
    """Validate ``rows`` against ``model`` (a pydantic model or any type).

    Returns:
        The validated (and coerced) rows.

    Raises:
        RowValidationError: If any row fails validation.
    """
    adapter = TypeAdapter(list[model])
    try:
        return adapter.validate_python(rows)
    except PydanticValidationError as exc:
        logger.warning(
            "Row validation against %s failed with %d error(s)",
            getattr(model, "__name__", repr(model)),
            exc.error_count(),
        )
        raise RowValidationError(
            "Validation failed for rows returned by the query executor.",
            errors=exc.errors(include_url=False),
            rows=rows,
        ) from exc


def run_executor(
    executor: Any,
    text: str,
    values: list[Any],
    no_manager: bool = False,
) -> Any:
    """Resolve ``executor`` and invoke it once with ``(text, values)``."""
    adapter = resolve_executor(executor, no_manager)
    logger.debug("Executing via %s (%d value(s))", type(adapter).__name__, len(values))
    return adapter(text, values)


async def run_executor_async(
    executor: Any,
    text: str,
    values: list[Any],
    no_manager: bool = False,
) -> Any:
    """Like :func:`run_executor` but awaits awaitable results."""
    result = run_executor(executor, text, values, no_manager)
    if inspect.isawaitable(result):
        result = await result
    return result
