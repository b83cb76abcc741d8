"""Unit tests for identifier escaping, the dialect registry and schema substitution."""
from __future__ import annotations

import pytest

from stitchql import (
    QueryBuildError,
    SchemaPlaceholderOutOfRangeError,
    SqlFlavor,
    UnsupportedFlavorError,
)
from stitchql.dialect import (
    DialectFactory,
    DoubleQuoteDialect,
    append_schemas,
    escape_identifier,
    escape_select_identifiers,
    escape_table_name,
)


@pytest.mark.parametrize(
    "flavor,expected",
    [
        (SqlFlavor.POSTGRES, '"column"'),
        (SqlFlavor.MYSQL, "`column`"),
        (SqlFlavor.MSSQL, "[column]"),
        (SqlFlavor.SQLITE, '"column"'),
        (SqlFlavor.ORACLE, '"column"'),
    ],
)
def test_quote_per_flavor(flavor, expected):
    assert escape_identifier("column", flavor) == expected


@pytest.mark.parametrize(
    "flavor,name,expected",
    [
        ("postgres", 'column"Name', '"column""Name"'),
        ("mysql", "col`umn", "`col``umn`"),
        ("mssql", "col]umn", "[col]]umn]"),
    ],
)
def test_embedded_quote_characters_are_doubled(flavor, name, expected):
    assert escape_identifier(name, flavor) == expected


def test_identifier_keeps_spaces_and_dots():
    assert escape_identifier("column name", "postgres") == '"column name"'
    assert escape_identifier("table.column", "postgres") == '"table.column"'


def test_schema_placeholder_passes_through():
    assert escape_identifier("$schema", "mysql") == "$schema"
    assert escape_identifier("$schema12", "mssql") == "$schema12"


def test_unsupported_flavor():
    with pytest.raises(UnsupportedFlavorError, match="Unsupported SQL flavor: unsupportedFlavor"):
        escape_identifier("column", "unsupportedFlavor")


def test_unsupported_flavor_lists_registered():
    with pytest.raises(UnsupportedFlavorError) as exc_info:
        DialectFactory.create("db2")
    assert exc_info.value.code == "UNSUPPORTED_FLAVOR"
    assert "postgres" in exc_info.value.details["registered"]


class TestSelectIdentifiers:
    def test_columns_and_aliases(self):
        escaped = escape_select_identifiers(
            ["id", "u.name", "email AS contact", "u.age as years"], "postgres"
        )
        assert escaped == ['"id"', '"u"."name"', '"email" AS "contact"', '"u"."age" AS "years"']

    def test_stars(self):
        assert escape_select_identifiers(["*", "u.*"], "mysql") == ["*", "`u`.*"]

    @pytest.mark.parametrize("identifier", ["column1 AS", "AS col2"])
    def test_incomplete_alias(self, identifier):
        with pytest.raises(QueryBuildError, match="Invalid identifier with AS clause"):
            escape_select_identifiers([identifier], "postgres")

    def test_empty_part(self):
        with pytest.raises(QueryBuildError, match="Invalid column reference"):
            escape_select_identifiers(["u..name"], "postgres")


class TestTableNames:
    def test_single(self):
        assert escape_table_name("tableName", "postgres") == '"tableName"'

    def test_with_schema(self):
        assert escape_table_name("schema.table", "postgres") == '"schema"."table"'
        assert escape_table_name("dbo.users", "mssql") == "[dbo].[users]"

    def test_schema_placeholder(self):
        assert escape_table_name("$schema.table", "postgres") == '$schema."table"'
        assert escape_table_name("$schema1.table", "postgres") == '$schema1."table"'

    def test_too_many_dots(self):
        with pytest.raises(QueryBuildError, match="Invalid table name: schema..table"):
            escape_table_name("schema..table", "postgres")

    def test_empty_schema(self):
        with pytest.raises(QueryBuildError, match="Invalid table name with schema: .table"):
            escape_table_name(".table", "postgres")


class TestAppendSchemas:
    def test_replaces_tokens(self):
        text = '$schema."table", $schema1."table"'
        assert append_schemas(text, ["someSchema", "anotherSchema"]) == (
            'someSchema."table", anotherSchema."table"'
        )

    def test_leaves_placeholders_alone(self):
        assert append_schemas("$schema.t WHERE a = $1", ["s"]) == "s.t WHERE a = $1"

    def test_no_tokens_needs_no_schemas(self):
        assert append_schemas('SELECT 1 FROM "t"', []) == 'SELECT 1 FROM "t"'

    def test_missing_schema(self):
        with pytest.raises(
            SchemaPlaceholderOutOfRangeError,
            match=r"Schema index 0 out of bounds for provided schemas. Provided schemas: \[\]",
        ):
            append_schemas('$schema."table"', [])


def test_registering_a_custom_dialect():
    @DialectFactory.register("ansi_test")
    class AnsiTestDialect(DoubleQuoteDialect):
        @property
        def dialect_name(self) -> str:
            return "ansi_test"

    try:
        assert escape_identifier("x", "ansi_test") == '"x"'
        assert "ansi_test" in DialectFactory.registered_flavors()
    finally:
        DialectFactory._dialects.pop("ansi_test", None)
        DialectFactory._instances.pop("ansi_test", None)
