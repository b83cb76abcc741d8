"""Dialect registry.

``DialectFactory`` maps flavor names to :class:`~stitchql.dialect.base.SQLDialect`
classes so new flavors can be added without touching the escaping code.

Usage::

    from stitchql.dialect.registry import DialectFactory

    @DialectFactory.register("snowflake")
    class SnowflakeDialect(DoubleQuoteDialect):
        @property
        def dialect_name(self) -> str:
            return "snowflake"
"""
from __future__ import annotations

from collections.abc import Callable
from typing import ClassVar

from stitchql.dialect.base import SqlFlavor, SQLDialect
from stitchql.errors import UnsupportedFlavorError


class DialectFactory:
    """Registry mapping flavor names to :class:`SQLDialect` classes.

    Instances are cached per flavor; dialects hold no state.
    """

    _dialects: ClassVar[dict[str, type[SQLDialect]]] = {}
    _instances: ClassVar[dict[str, SQLDialect]] = {}

    @classmethod
    def register(cls, name: str) -> Callable[[type[SQLDialect]], type[SQLDialect]]:
        """Decorator that registers a dialect class under ``name``.

        Args:
            name: The flavor name (e.g. ``"postgres"``).

        Returns:
            A decorator that registers and returns the dialect class.
        """

        def decorator(dialect_cls: type[SQLDialect]) -> type[SQLDialect]:
            cls._dialects[name] = dialect_cls
            cls._instances.pop(name, None)
            return dialect_cls

        return decorator

    @classmethod
    def create(cls, flavor: SqlFlavor | str) -> SQLDialect:
        """Return the dialect registered for ``flavor``.

        Raises:
            UnsupportedFlavorError: If no dialect is registered for ``flavor``.
        """
        name = flavor.value if isinstance(flavor, SqlFlavor) else str(flavor)
        instance = cls._instances.get(name)
        if instance is not None:
            return instance
        dialect_cls = cls._dialects.get(name)
        if dialect_cls is None:
            raise UnsupportedFlavorError(name, cls.registered_flavors())
        instance = cls._instances[name] = dialect_cls()
        return instance

    @classmethod
    def registered_flavors(cls) -> list[str]:
        """Return the sorted list of registered flavor names."""
        return sorted(cls._dialects)
