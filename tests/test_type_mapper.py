# ============================================================================
# TYPE MAPPER TESTS
# ============================================================================
# STATUS: Tests - Declared and native type normalization
# PURPOSE: Verify field-type mapping, native normalization and cast rules
# ============================================================================
"""
Type Mapper Tests

Covers:
1. Every FieldType member is mapped (no silent fallback)
2. Declared -> canonical mapping per family
3. Native spelling normalization (case, modifiers, unknown types)
4. Explicit cast detection and DDL spellings

Run with:
    pytest tests/test_type_mapper.py -v
"""

import pytest

from core.contracts import FieldType, SqlType
from core.schema.type_mapper import (
    FIELD_TYPE_MAP,
    cast_type_for,
    map_field_type,
    native_type_for,
    needs_explicit_cast,
    normalize_sql_type,
)


class TestFieldTypeMap:

    def test_every_field_type_is_mapped(self):
        for member in FieldType:
            assert member in FIELD_TYPE_MAP

    @pytest.mark.parametrize("field_type", [
        FieldType.TEXT, FieldType.LONG_TEXT, FieldType.EMAIL, FieldType.SELECT,
        FieldType.JSON, FieldType.DATETIME, FieldType.REFERENCE, FieldType.VECTOR,
    ])
    def test_text_family(self, field_type):
        assert map_field_type(field_type) == SqlType.TEXT

    def test_numeric_family(self):
        assert map_field_type(FieldType.INTEGER) == SqlType.INTEGER
        assert map_field_type(FieldType.FLOAT) == SqlType.FLOAT
        assert map_field_type(FieldType.CURRENCY) == SqlType.FLOAT

    def test_check_is_boolean(self):
        assert map_field_type(FieldType.CHECK) == SqlType.BOOLEAN

    @pytest.mark.parametrize("field_type", [
        FieldType.REFERENCE_TABLE, FieldType.EXTEND, FieldType.SECTION,
        FieldType.COLUMN, FieldType.TAB,
    ])
    def test_layout_types_have_no_column(self, field_type):
        assert map_field_type(field_type) == SqlType.NULL
        assert not map_field_type(field_type).has_column()

    def test_declared_spelling_accepted(self):
        assert map_field_type("Long Text") == SqlType.TEXT
        assert map_field_type("Check") == SqlType.BOOLEAN

    def test_unknown_spelling_is_null_sentinel(self):
        assert map_field_type("Geometry") == SqlType.NULL


class TestNormalizeSqlType:

    def test_text_spellings_are_equivalent(self):
        assert normalize_sql_type("character varying") == normalize_sql_type("varchar") == "TEXT"

    @pytest.mark.parametrize("native", ["integer", "int4", "bigint", "smallint", "serial"])
    def test_integer_family(self, native):
        assert normalize_sql_type(native) == "INTEGER"

    @pytest.mark.parametrize("native", ["boolean", "bool"])
    def test_boolean_family(self, native):
        assert normalize_sql_type(native) == "BOOLEAN"

    @pytest.mark.parametrize("native", ["double precision", "real", "numeric", "float8"])
    def test_float_family(self, native):
        assert normalize_sql_type(native) == "FLOAT"

    def test_temporal_and_json_are_text(self):
        assert normalize_sql_type("timestamp with time zone") == "TEXT"
        assert normalize_sql_type("jsonb") == "TEXT"
        assert normalize_sql_type("uuid") == "TEXT"

    def test_case_whitespace_and_modifiers(self):
        assert normalize_sql_type("  VARCHAR(255) ") == "TEXT"
        assert normalize_sql_type("numeric(10, 2)") == "FLOAT"
        assert normalize_sql_type("Character  Varying") == "TEXT"

    def test_unknown_passes_through_uppercased(self):
        assert normalize_sql_type("tsvector") == "TSVECTOR"

    def test_none_is_empty(self):
        assert normalize_sql_type(None) == ""


class TestCasts:

    def test_text_to_numeric_needs_cast(self):
        assert needs_explicit_cast("text", SqlType.INTEGER)
        assert needs_explicit_cast("character varying", "FLOAT")
        assert needs_explicit_cast("integer", SqlType.TEXT)

    def test_boolean_pairs_need_cast(self):
        assert needs_explicit_cast("boolean", SqlType.INTEGER)
        assert needs_explicit_cast("text", SqlType.BOOLEAN)

    def test_same_family_needs_no_cast(self):
        assert not needs_explicit_cast("varchar", SqlType.TEXT)
        assert not needs_explicit_cast("bigint", SqlType.INTEGER)

    def test_unknown_type_needs_no_cast(self):
        assert not needs_explicit_cast("tsvector", SqlType.TEXT)

    def test_ddl_and_cast_spellings(self):
        assert native_type_for(SqlType.FLOAT) == "DOUBLE PRECISION"
        assert native_type_for("TEXT") == "TEXT"
        assert cast_type_for(SqlType.FLOAT) == "numeric"
        assert cast_type_for(SqlType.BOOLEAN) == "boolean"
