"""stitchQL execution layer: executor adapters and row handling."""
from stitchql.execute.executor import (
    EXECUTOR_METHODS,
    CallableExecutor,
    Executor,
    ManagerExecutor,
    MethodExecutor,
    normalize_rows,
    resolve_executor,
    run_executor,
    run_executor_async,
    validate_rows,
)
from stitchql.execute.sqlalchemy import SQLAlchemyExecutor, to_named_binds

__all__ = [
    "EXECUTOR_METHODS",
    "CallableExecutor",
    "Executor",
    "ManagerExecutor",
    "MethodExecutor",
    "SQLAlchemyExecutor",
    "normalize_rows",
    "resolve_executor",
    "run_executor",
    "run_executor_async",
    "to_named_binds",
    "validate_rows",
]
