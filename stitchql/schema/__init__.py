"""stitchQL clause input models and builder configuration."""
from stitchql.schema.clauses import ColumnValue, Join, OrderBy, SetValue, UsingTable
from stitchql.schema.options import BuildOptions

__all__ = [
    "BuildOptions",
    "ColumnValue",
    "Join",
    "OrderBy",
    "SetValue",
    "UsingTable",
]
