# ============================================================================
# TYPE MAPPER
# ============================================================================
# STATUS: Core - Type-system normalization
# PURPOSE: Map declared field types and native PostgreSQL types onto one
#          canonical vocabulary so they compare with plain equality
# EXPORTS: map_field_type, normalize_sql_type, native_type_for,
#          needs_explicit_cast, cast_type_for, FIELD_TYPE_MAP, NATIVE_TYPE_MAP
# DEPENDENCIES: none
# ============================================================================
"""
Type Mapper

Two static lookup tables:

    FIELD_TYPE_MAP    FieldType  -> SqlType      (declared side)
    NATIVE_TYPE_MAP   "varchar"  -> SqlType      (catalog side)

FIELD_TYPE_MAP must cover every FieldType member. A gap is reported at
import time (UnmappedFieldTypeError), never as a silent TEXT fallback.

Usage:
    map_field_type(FieldType.CHECK)                 # SqlType.BOOLEAN
    normalize_sql_type("character varying")         # "TEXT"
    needs_explicit_cast("text", SqlType.INTEGER)    # True
"""

import re
from typing import Dict, FrozenSet, Tuple, Union

from core.contracts import FieldType, SqlType
from core.errors import UnmappedFieldTypeError


# ============================================================================
# DECLARED SIDE
# ============================================================================

FIELD_TYPE_MAP: Dict[FieldType, SqlType] = {
    # Text family
    FieldType.TEXT: SqlType.TEXT,
    FieldType.LONG_TEXT: SqlType.TEXT,
    FieldType.PASSWORD: SqlType.TEXT,
    FieldType.DATA: SqlType.TEXT,
    FieldType.EMAIL: SqlType.TEXT,
    FieldType.CODE: SqlType.TEXT,
    FieldType.SELECT: SqlType.TEXT,
    FieldType.FILE: SqlType.TEXT,

    # Numeric
    FieldType.INTEGER: SqlType.INTEGER,
    FieldType.FLOAT: SqlType.FLOAT,
    FieldType.CURRENCY: SqlType.FLOAT,
    FieldType.CHECK: SqlType.BOOLEAN,

    # Stored as text
    FieldType.JSON: SqlType.TEXT,
    FieldType.DATE: SqlType.TEXT,
    FieldType.DATETIME: SqlType.TEXT,
    FieldType.TIME: SqlType.TEXT,
    FieldType.VECTOR: SqlType.TEXT,
    FieldType.REFERENCE: SqlType.TEXT,
    FieldType.VIRTUAL_REFERENCE: SqlType.TEXT,

    # Relationship / layout only
    FieldType.REFERENCE_TABLE: SqlType.NULL,
    FieldType.EXTEND: SqlType.NULL,
    FieldType.SECTION: SqlType.NULL,
    FieldType.COLUMN: SqlType.NULL,
    FieldType.TAB: SqlType.NULL,
}


def _check_field_type_map() -> None:
    missing = [member.value for member in FieldType if member not in FIELD_TYPE_MAP]
    if missing:
        raise UnmappedFieldTypeError(f"No SQL type mapping for field types: {missing}")


_check_field_type_map()


def map_field_type(field_type: Union[FieldType, str]) -> SqlType:
    """
    Map a declared field type to its canonical SQL type.

    Args:
        field_type: FieldType member or its declared spelling

    Returns:
        SqlType; SqlType.NULL for non-storable or unknown types
    """
    if not isinstance(field_type, FieldType):
        try:
            field_type = FieldType(field_type)
        except ValueError:
            return SqlType.NULL
    return FIELD_TYPE_MAP[field_type]


# ============================================================================
# CATALOG SIDE
# ============================================================================

NATIVE_TYPE_MAP: Dict[str, SqlType] = {
    # Text
    "text": SqlType.TEXT,
    "character varying": SqlType.TEXT,
    "varchar": SqlType.TEXT,
    "character": SqlType.TEXT,
    "char": SqlType.TEXT,
    "bpchar": SqlType.TEXT,
    "name": SqlType.TEXT,
    "citext": SqlType.TEXT,

    # Integer
    "integer": SqlType.INTEGER,
    "int": SqlType.INTEGER,
    "int2": SqlType.INTEGER,
    "int4": SqlType.INTEGER,
    "int8": SqlType.INTEGER,
    "smallint": SqlType.INTEGER,
    "bigint": SqlType.INTEGER,
    "serial": SqlType.INTEGER,
    "smallserial": SqlType.INTEGER,
    "bigserial": SqlType.INTEGER,

    # Float
    "real": SqlType.FLOAT,
    "float": SqlType.FLOAT,
    "float4": SqlType.FLOAT,
    "float8": SqlType.FLOAT,
    "double precision": SqlType.FLOAT,
    "numeric": SqlType.FLOAT,
    "decimal": SqlType.FLOAT,

    # Boolean
    "boolean": SqlType.BOOLEAN,
    "bool": SqlType.BOOLEAN,

    # Temporal (stored as TEXT by doctypes)
    "timestamp": SqlType.TEXT,
    "timestamptz": SqlType.TEXT,
    "timestamp with time zone": SqlType.TEXT,
    "timestamp without time zone": SqlType.TEXT,
    "date": SqlType.TEXT,
    "time": SqlType.TEXT,
    "timetz": SqlType.TEXT,
    "time with time zone": SqlType.TEXT,
    "time without time zone": SqlType.TEXT,
    "interval": SqlType.TEXT,

    # JSON / UUID / binary / network
    "json": SqlType.TEXT,
    "jsonb": SqlType.TEXT,
    "uuid": SqlType.TEXT,
    "bytea": SqlType.TEXT,
    "inet": SqlType.TEXT,
    "cidr": SqlType.TEXT,
    "macaddr": SqlType.TEXT,
}

# varchar(255), numeric(10,2), timestamp(3) with time zone
_MODIFIER_RE = re.compile(r"\s*\([^)]*\)")


def normalize_sql_type(native_type: str) -> str:
    """
    Normalize a native type spelling to the canonical vocabulary.

    Case-insensitive; length/precision modifiers are ignored.
    Unrecognized types pass through uppercased.

    Args:
        native_type: Type as reported by information_schema (e.g. "character varying")

    Returns:
        Canonical type name (e.g. "TEXT")
    """
    if native_type is None:
        return ""
    key = _MODIFIER_RE.sub("", native_type.strip().lower())
    key = " ".join(key.split())
    mapped = NATIVE_TYPE_MAP.get(key)
    if mapped is not None:
        return mapped.value
    return native_type.strip().upper()


# ============================================================================
# DDL SPELLINGS & CASTS
# ============================================================================

DDL_TYPE_MAP: Dict[SqlType, str] = {
    SqlType.TEXT: "TEXT",
    SqlType.INTEGER: "INTEGER",
    SqlType.FLOAT: "DOUBLE PRECISION",
    SqlType.BOOLEAN: "BOOLEAN",
}

CAST_TYPE_MAP: Dict[SqlType, str] = {
    SqlType.TEXT: "text",
    SqlType.INTEGER: "integer",
    SqlType.FLOAT: "numeric",
    SqlType.BOOLEAN: "boolean",
}

# (from, to) canonical pairs PostgreSQL will not convert implicitly
CASTS_REQUIRING_USING: FrozenSet[Tuple[SqlType, SqlType]] = frozenset({
    (SqlType.TEXT, SqlType.INTEGER),
    (SqlType.TEXT, SqlType.FLOAT),
    (SqlType.TEXT, SqlType.BOOLEAN),
    (SqlType.INTEGER, SqlType.TEXT),
    (SqlType.FLOAT, SqlType.TEXT),
    (SqlType.BOOLEAN, SqlType.TEXT),
    (SqlType.INTEGER, SqlType.BOOLEAN),
    (SqlType.BOOLEAN, SqlType.INTEGER),
    (SqlType.FLOAT, SqlType.INTEGER),
    (SqlType.INTEGER, SqlType.FLOAT),
    (SqlType.FLOAT, SqlType.BOOLEAN),
    (SqlType.BOOLEAN, SqlType.FLOAT),
})


def _as_sql_type(value: Union[SqlType, str]) -> Union[SqlType, None]:
    if isinstance(value, SqlType):
        return value
    try:
        return SqlType(normalize_sql_type(value))
    except ValueError:
        return None


def native_type_for(canonical: Union[SqlType, str]) -> str:
    """
    DDL spelling for a canonical type.

    Anything outside the canonical vocabulary is emitted as given.
    """
    sql_type = _as_sql_type(canonical)
    if sql_type in DDL_TYPE_MAP:
        return DDL_TYPE_MAP[sql_type]
    return str(canonical).upper()


def cast_type_for(canonical: Union[SqlType, str]) -> str:
    """Type name used in a `USING col::<type>` clause."""
    sql_type = _as_sql_type(canonical)
    if sql_type in CAST_TYPE_MAP:
        return CAST_TYPE_MAP[sql_type]
    return str(canonical).lower()


def needs_explicit_cast(old_type: str, new_type: Union[SqlType, str]) -> bool:
    """
    Check if changing old_type -> new_type needs a USING clause.

    Args:
        old_type: Native type currently in the database
        new_type: Canonical target type
    """
    old = _as_sql_type(old_type)
    new = _as_sql_type(new_type)
    if old is None or new is None:
        return False
    return (old, new) in CASTS_REQUIRING_USING


__all__ = [
    "FIELD_TYPE_MAP",
    "NATIVE_TYPE_MAP",
    "DDL_TYPE_MAP",
    "CAST_TYPE_MAP",
    "CASTS_REQUIRING_USING",
    "map_field_type",
    "normalize_sql_type",
    "native_type_for",
    "cast_type_for",
    "needs_explicit_cast",
]
