from stitchql.statement.cursor import ParameterCursor
from stitchql.statement.fragment import MARKER, Combinator, ConditionFragment
from stitchql.statement.search import SearchModule
from stitchql.statement.statement import Statement

__all__ = [
    "MARKER",
    "Combinator",
    "ConditionFragment",
    "ParameterCursor",
    "SearchModule",
    "Statement",
]
