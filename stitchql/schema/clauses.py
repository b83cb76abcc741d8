"""Pydantic models for clause inputs accepted by the query builders.

Builders accept either these models or the equivalent plain dicts, e.g.::

    query.join({"type": "left", "table": "orders", "alias": "o", "on": "o.user_id = u.id"})
    query.order_by({"column": "created_at", "direction": "desc"})

Identifiers are stored as given and escaped for the builder's flavor when
the query is built.
"""
from __future__ import annotations

from typing import TYPE_CHECKING, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from stitchql.statement import Statement

if TYPE_CHECKING:
    from stitchql.compile.select import SelectQuery

JoinType = Literal["INNER", "LEFT", "RIGHT", "FULL"]
Direction = Literal["ASC", "DESC"]

_ARBITRARY = ConfigDict(extra="forbid", arbitrary_types_allowed=True, populate_by_name=True)


def _upper(value: Any) -> Any:
    return value.strip().upper() if isinstance(value, str) else value


class Join(BaseModel):
    """A JOIN against a table or a derived table.

    Attributes:
        type: Join type; lower-case input is accepted.
        table: Table name, optionally ``schema.table`` (exclusive with ``subquery``).
        subquery: A :class:`~stitchql.compile.select.SelectQuery` to join as a
            derived table; requires ``alias``.
        alias: Alias for the joined table or derived table.
        on: Join condition, either a :class:`Statement` or raw SQL.
    """

    model_config = _ARBITRARY

    type: JoinType = "INNER"
    table: str | None = None
    subquery: Any = Field(None, alias="subQuery")
    alias: str | None = None
    on: Statement | str

    @field_validator("type", mode="before")
    @classmethod
    def _normalize_type(cls, value: Any) -> Any:
        return _upper(value)

    @model_validator(mode="after")
    def _check_target(self) -> Join:
        if (self.table is None) == (self.subquery is None):
            raise ValueError("A join needs exactly one of 'table' or 'subquery'.")
        if self.subquery is not None and not self.alias:
            raise ValueError("A subquery join requires an alias.")
        return self

    @property
    def is_subquery(self) -> bool:
        return self.subquery is not None

    def copy_for_clone(self) -> Join:
        """Return a copy whose statement and subquery are independent clones."""
        on = self.on.clone() if isinstance(self.on, Statement) else self.on
        subquery: SelectQuery | None = (
            self.subquery.clone() if self.subquery is not None else None
        )
        return self.model_copy(update={"on": on, "subquery": subquery})


class OrderBy(BaseModel):
    """ORDER BY item.  ``field`` is accepted as an alias of ``column``."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    column: str
    direction: Direction = "ASC"

    @model_validator(mode="before")
    @classmethod
    def _accept_field_key(cls, data: Any) -> Any:
        if isinstance(data, dict) and "field" in data and "column" not in data:
            data = dict(data)
            data["column"] = data.pop("field")
        return data

    @field_validator("direction", mode="before")
    @classmethod
    def _normalize_direction(cls, value: Any) -> Any:
        return _upper(value)


class SetValue(BaseModel):
    """One ``SET column = ...`` assignment of an UPDATE.

    Either ``value`` (bound as a parameter, ``None`` binds NULL) or
    ``from_`` (a raw SQL expression such as ``other.col``) must be given.
    """

    model_config = _ARBITRARY

    column: str = Field(alias="setColumn")
    value: Any = None
    from_: str | None = Field(None, alias="from")

    @model_validator(mode="after")
    def _check_source(self) -> SetValue:
        if not self.has_value and self.from_ is None:
            raise ValueError(
                f"SET value for column {self.column} must have either 'value' or 'from' defined."
            )
        return self

    @property
    def has_value(self) -> bool:
        return "value" in self.model_fields_set


class ColumnValue(BaseModel):
    """An INSERT column, with a value unless only the column list is wanted."""

    model_config = _ARBITRARY

    column: str
    value: Any = None

    @property
    def has_value(self) -> bool:
        return "value" in self.model_fields_set


class UsingTable(BaseModel):
    """A table listed in ``DELETE ... USING``."""

    model_config = ConfigDict(extra="forbid")

    table: str
    alias: str | None = None
