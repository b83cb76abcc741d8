from stitchql.analyze.dedupe import reanalyze_duplicate_params
from stitchql.analyze.equality import deep_equal
from stitchql.analyze.placeholders import (
    PLACEHOLDER_PATTERN,
    placeholder_numbers,
    to_marker_template,
)

__all__ = [
    "PLACEHOLDER_PATTERN",
    "deep_equal",
    "placeholder_numbers",
    "reanalyze_duplicate_params",
    "to_marker_template",
]
