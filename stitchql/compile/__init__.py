"""stitchQL compilation layer: query-kind builders → ``(text, values)``."""
from stitchql.compile.base import FilteredQuery, QueryDefinition, QueryKind, ReturningMixin
from stitchql.compile.composer import FragmentComposer, space_lines
from stitchql.compile.cte import Cte, CteMaker
from stitchql.compile.delete import DeleteQuery
from stitchql.compile.insert import InsertQuery
from stitchql.compile.select import SelectQuery
from stitchql.compile.union import UNION_TYPES, Union
from stitchql.compile.update import UpdateQuery

__all__ = [
    "Cte",
    "CteMaker",
    "DeleteQuery",
    "FilteredQuery",
    "FragmentComposer",
    "InsertQuery",
    "QueryDefinition",
    "QueryKind",
    "ReturningMixin",
    "SelectQuery",
    "UNION_TYPES",
    "Union",
    "UpdateQuery",
    "space_lines",
]
