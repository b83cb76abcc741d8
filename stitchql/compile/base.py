"""Base class shared by every query-kind builder.

``QueryDefinition`` owns everything that is independent of the query kind:

* configuration (flavor, schemas, build options),
* the offset protocol used when the query is embedded in another one,
* the final build pipeline (schema substitution, duplicate-parameter pass),
* execution through an executor adapter with optional row validation.

Subclasses implement :meth:`QueryDefinition._compose`, which embeds their
clauses into a :class:`~stitchql.compile.composer.FragmentComposer` in
textual order and returns the query text.
"""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable, Iterator
from contextlib import contextmanager
from enum import Enum
from typing import Any, TypeVar

from stitchql.analyze.dedupe import reanalyze_duplicate_params
from stitchql.built import BuiltQuery
from stitchql.compile.composer import FragmentComposer
from stitchql.compile.cte import Cte, CteMaker
from stitchql.dialect import SqlFlavor, append_schemas, escape_select_identifiers
from stitchql.execute.executor import (
    normalize_rows,
    run_executor,
    run_executor_async,
    validate_rows,
)
from stitchql.schema.options import BuildOptions
from stitchql.statement import Statement

logger = logging.getLogger(__name__)

_Q = TypeVar("_Q", bound="QueryDefinition")


class QueryKind(str, Enum):
    SELECT = "SELECT"
    INSERT = "INSERT"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
    UNION = "UNION"


class QueryDefinition(ABC):
    """Abstract query builder.

    Args:
        options: Build defaults (flavor, dedup mode, statement separator).
    """

    kind: QueryKind

    def __init__(self, options: BuildOptions | None = None) -> None:
        self._options = options or BuildOptions()
        self._flavor: SqlFlavor = self._options.flavor
        self._schemas: list[str] = []
        self._ctes: CteMaker | None = None
        self._offset = 0
        self._suppress_analysis = False
        self._row_model: Any = None
        self._built: BuiltQuery | None = None

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    @property
    def flavor(self) -> SqlFlavor:
        return self._flavor

    def sql_flavor(self: _Q, flavor: SqlFlavor | str) -> _Q:
        """Set the flavor used to escape identifiers at build time."""
        self._flavor = SqlFlavor(flavor)
        self.invalidate()
        return self

    def schema(self: _Q, *schemas: str) -> _Q:
        """Set the names substituted for ``$schema``, ``$schema1``, ...

        Schema names are inserted verbatim; only pass trusted values.
        """
        self._schemas = list(schemas)
        self.invalidate()
        return self

    def add_schema(self: _Q, *schemas: str) -> _Q:
        self._schemas.extend(schemas)
        self.invalidate()
        return self

    def with_(self: _Q, ctes: CteMaker | Cte | Iterable[Cte]) -> _Q:
        """Prefix the query with one or more common table expressions."""
        if isinstance(ctes, CteMaker):
            self._ctes = ctes
        elif isinstance(ctes, Cte):
            self._ctes = CteMaker(ctes)
        else:
            self._ctes = CteMaker(*ctes)
        self.invalidate()
        return self

    def validate(self: _Q, model: Any) -> _Q:
        """Validate executor rows against ``model`` (e.g. a pydantic model)."""
        self._row_model = model
        return self

    # ------------------------------------------------------------------
    # Offset protocol
    # ------------------------------------------------------------------

    @property
    def param_offset(self) -> int:
        """Values that precede this query when it is embedded."""
        return self._offset

    def add_offset(self: _Q, offset: int) -> _Q:
        """Shift every placeholder of the next build forward by ``offset``."""
        if offset < 0:
            raise ValueError(f"Cannot add a negative offset ({offset}).")
        self._offset += offset
        self.invalidate()
        return self

    def reset_offset(self: _Q) -> _Q:
        self._offset = 0
        self.invalidate()
        return self

    @contextmanager
    def analysis_suppressed(self: _Q) -> Iterator[_Q]:
        """Skip the duplicate-parameter pass while the query is a sub-component."""
        previous = self._suppress_analysis
        self._suppress_analysis = True
        self.invalidate()
        try:
            yield self
        finally:
            self._suppress_analysis = previous
            self.invalidate()

    @property
    def is_embedded(self) -> bool:
        """True while the query is built as part of another query."""
        return self._suppress_analysis or self._offset != 0

    def build_fragment(self, offset: int, deep_analysis: bool | None = None) -> BuiltQuery:
        """Build as an embedded fragment whose placeholders start at ``offset + 1``.

        The query's own offset is restored afterwards.
        """
        previous = self._offset
        self.reset_offset().add_offset(offset)
        try:
            with self.analysis_suppressed():
                return self.build(deep_analysis)
        finally:
            self._offset = previous
            self.invalidate()

    # ------------------------------------------------------------------
    # Building
    # ------------------------------------------------------------------

    @abstractmethod
    def _compose(self, composer: FragmentComposer, deep_analysis: bool) -> str:
        """Embed all clauses into ``composer`` and return the query text."""

    def build(self, deep_analysis: bool | None = None) -> BuiltQuery:
        """Build the query text and its values.

        Args:
            deep_analysis: Use structural equality in the duplicate-parameter
                pass; defaults to the builder's ``BuildOptions``.

        Raises:
            QueryBuildError: If the query is incomplete.
            SchemaPlaceholderOutOfRangeError: If a ``$schemaN`` has no schema.
        """
        deep = self._options.deep_analysis if deep_analysis is None else deep_analysis
        composer = FragmentComposer(self._offset, newline=self._options.newline)
        text = self._compose(composer, deep)
        self._built = self._finalize(text, composer.values, deep)
        return self._built

    def _finalize(self, text: str, values: list[Any], deep: bool) -> BuiltQuery:
        if self._schemas or not self.is_embedded:
            text = append_schemas(text, self._schemas)
        if self.is_embedded:
            return BuiltQuery(text=text, values=values)
        return reanalyze_duplicate_params(text, values, deep)

    def _compose_ctes(self, composer: FragmentComposer, deep: bool) -> str:
        if self._ctes is None:
            return ""
        return self._ctes.compose(composer, deep)

    def to_sql(self) -> str:
        """Return the text of the last build, building first if needed."""
        if self._built is None:
            self.build()
        return self._built.text

    def get_params(self) -> list[Any]:
        """Return the values of the last build, building first if needed."""
        if self._built is None:
            self.build()
        return list(self._built.values)

    def build_explain(self) -> BuiltQuery:
        built = self.build()
        return BuiltQuery(text=f"EXPLAIN {built.text}", values=built.values)

    def build_explain_analyze(self) -> BuiltQuery:
        built = self.build()
        return BuiltQuery(text=f"EXPLAIN ANALYZE {built.text}", values=built.values)

    def build_reanalyze(self, deep_analysis: bool | None = None) -> BuiltQuery:
        """Build, then run the duplicate-parameter pass once more.

        The pass is idempotent, so for a top-level query this equals
        :meth:`build`; for an embedded query it deduplicates its fragment.
        """
        deep = self._options.deep_analysis if deep_analysis is None else deep_analysis
        built = self.build(deep)
        return reanalyze_duplicate_params(built.text, built.values, deep)

    @property
    def is_done(self) -> bool:
        """True when a build result is available for the current state."""
        return self._built is not None

    def invalidate(self) -> None:
        """Discard the last build result."""
        self._built = None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @abstractmethod
    def clone(self: _Q) -> _Q:
        """Return an independent copy of this builder."""

    @abstractmethod
    def reset(self) -> None:
        """Return the builder to its freshly constructed state."""

    def _copy_base_into(self, cloned: QueryDefinition) -> None:
        cloned._flavor = self._flavor
        cloned._schemas = list(self._schemas)
        cloned._ctes = self._ctes.clone() if self._ctes is not None else None
        cloned._row_model = self._row_model

    def _reset_base(self) -> None:
        self._schemas = []
        self._ctes = None
        self._offset = 0
        self._suppress_analysis = False
        self._row_model = None
        self._built = None

    def _escape_fields(self, fields: Iterable[str]) -> list[str]:
        return escape_select_identifiers(fields, self._flavor)

    def _render_fields(self, fields: list[tuple[bool, str]]) -> list[str]:
        """Escape ``(raw, text)`` fields unless they are raw expressions."""
        return [text if raw else self._escape_fields([text])[0] for raw, text in fields]

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    def _single_row_query(self) -> QueryDefinition:
        return self

    def _rows(self, result: Any) -> list[Any]:
        rows = normalize_rows(result)
        if self._row_model is not None:
            rows = validate_rows(rows, self._row_model)
        return rows

    def execute(self, executor: Any, no_manager: bool = False) -> list[Any]:
        """Build the query, run it through ``executor`` and return its rows.

        Args:
            executor: A function ``fn(text, values)``, an object with an
                ``execute``/``query``/``run``/``all``/``get`` method, or an
                object whose ``manager`` has one.
            no_manager: Ignore the executor's ``manager`` attribute.

        Raises:
            ExecutorError: If the executor or its result has an unusable shape.
            RowValidationError: If rows fail validation (see :meth:`validate`).
        """
        built = self.build()
        return self._rows(run_executor(executor, built.text, built.values, no_manager))

    def get_many(self, executor: Any, no_manager: bool = False) -> list[Any]:
        return self.execute(executor, no_manager)

    def get_one(self, executor: Any, no_manager: bool = False) -> Any | None:
        """Return the first row, or ``None`` when there is none."""
        rows = self._single_row_query().execute(executor, no_manager)
        return rows[0] if rows else None

    async def execute_async(self, executor: Any, no_manager: bool = False) -> list[Any]:
        """Like :meth:`execute`, awaiting the executor's result when it is awaitable."""
        built = self.build()
        result = await run_executor_async(executor, built.text, built.values, no_manager)
        return self._rows(result)

    async def get_one_async(self, executor: Any, no_manager: bool = False) -> Any | None:
        rows = await self._single_row_query().execute_async(executor, no_manager)
        return rows[0] if rows else None


class FilteredQuery(QueryDefinition):
    """A query kind with a WHERE clause."""

    def __init__(self, options: BuildOptions | None = None) -> None:
        super().__init__(options)
        self._where: Statement | None = None

    def where(self: _Q, statement: Statement | str, *values: Any) -> _Q:
        """Set the WHERE clause from a statement or a ``?`` template."""
        if isinstance(statement, str):
            statement = Statement().raw("", statement, *values)
        self._where = statement
        self.invalidate()
        return self

    def use_statement(self: _Q, build: Callable[[Statement], Statement | None]) -> _Q:
        """Build the WHERE clause with a callback receiving a fresh statement."""
        stmt = Statement()
        return self.where(build(stmt) or stmt)

    @property
    def where_statement(self) -> Statement | None:
        return self._where

    def _compose_where(self, composer: FragmentComposer) -> str:
        if self._where is None:
            return ""
        return composer.embed_statement(self._where, keyword=True)


class ReturningMixin:
    """``RETURNING`` support for INSERT, UPDATE and DELETE."""

    _returning: list[tuple[bool, str]]
    _return_all: bool

    def _init_returning(self) -> None:
        self._returning = []
        self._return_all = False

    def returning(self, fields: str | Iterable[str]):
        """Replace the RETURNING list with escaped column names."""
        self._returning = [(False, f) for f in as_field_list(fields)]
        self._return_all = False
        self.invalidate()
        return self

    def add_returning(self, fields: str | Iterable[str]):
        self._returning.extend((False, f) for f in as_field_list(fields))
        self._return_all = False
        self.invalidate()
        return self

    def returning_raw(self, fields: str | Iterable[str]):
        """Replace the RETURNING list with unescaped SQL expressions."""
        self._returning = [(True, f) for f in as_field_list(fields)]
        self._return_all = False
        self.invalidate()
        return self

    def add_returning_raw(self, fields: str | Iterable[str]):
        self._returning.extend((True, f) for f in as_field_list(fields))
        self._return_all = False
        self.invalidate()
        return self

    def return_all_fields(self):
        """Emit ``RETURNING *``."""
        self._returning = []
        self._return_all = True
        self.invalidate()
        return self

    def _compose_returning(self) -> str:
        if self._returning:
            return "RETURNING " + ", ".join(self._render_fields(self._returning))
        return "RETURNING *" if self._return_all else ""

    def _copy_returning_into(self, cloned: ReturningMixin) -> None:
        cloned._returning = list(self._returning)
        cloned._return_all = self._return_all


def as_field_list(fields: str | Iterable[str]) -> list[str]:
    if isinstance(fields, str):
        return [fields]
    return list(fields)


def join_parts(parts: Iterable[str], separator: str = "\n") -> str:
    """Join non-blank clause texts."""
    return separator.join(part for part in parts if part.strip())
