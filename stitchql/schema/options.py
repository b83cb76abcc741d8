"""Builder configuration."""
from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from stitchql.dialect.base import SqlFlavor


class BuildOptions(BaseModel):
    """Defaults applied to every builder handed out by a ``QueryFactory``.

    Attributes:
        flavor: SQL flavor used for identifier escaping.
        deep_analysis: Default equality mode of the duplicate-parameter pass
            when ``build()`` is called without ``deep_analysis``.
        newline: Render statements with ``"\\n "`` between fragments
            (``False`` uses a single space).
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    flavor: SqlFlavor = SqlFlavor.POSTGRES
    deep_analysis: bool = False
    newline: bool = True
