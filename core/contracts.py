# ============================================================================
# BASE CONTRACTS & ENUMS
# ============================================================================
# STATUS: Foundation - Core enums shared by every sync component
# PURPOSE: Declared field types, canonical SQL types, operation kinds
# EXPORTS: FieldType, SqlType, OperationType, OperationStatus
# DEPENDENCIES: enum
# ============================================================================
"""
Base contracts for the schema synchronization engine.

Two type universes meet here:
- FieldType: what a doctype declares ("Text", "Check", "Reference", ...)
- SqlType: the canonical vocabulary both sides are normalized into

Everything that crosses a component boundary (deriver -> differ -> planner ->
executor) speaks in these enums.
"""

from enum import Enum


# ============================================================================
# DECLARED FIELD TYPES
# ============================================================================

class FieldType(str, Enum):
    """
    Closed enumeration of declarable field types.

    Values are the spellings used in doctype files.
    """
    # Text family
    TEXT = "Text"
    LONG_TEXT = "Long Text"
    PASSWORD = "Password"
    DATA = "Data"
    EMAIL = "Email"
    CODE = "Code"
    SELECT = "Select"
    FILE = "File"

    # Numeric
    INTEGER = "Integer"
    FLOAT = "Float"
    CURRENCY = "Currency"
    CHECK = "Check"

    # Structured / temporal
    JSON = "JSON"
    DATE = "Date"
    DATETIME = "Datetime"
    TIME = "Time"
    VECTOR = "Vector"

    # References
    REFERENCE = "Reference"
    VIRTUAL_REFERENCE = "Virtual Reference"

    # No physical column
    REFERENCE_TABLE = "Reference Table"
    EXTEND = "Extend"
    SECTION = "Section"
    COLUMN = "Column"
    TAB = "Tab"


# ============================================================================
# CANONICAL SQL TYPES
# ============================================================================

class SqlType(str, Enum):
    """Canonical SQL vocabulary shared by declared and native types."""
    TEXT = "TEXT"
    INTEGER = "INTEGER"
    FLOAT = "FLOAT"
    BOOLEAN = "BOOLEAN"
    NULL = "NULL"  # Sentinel: field has no physical column

    def has_column(self) -> bool:
        """Check if this type produces a physical column."""
        return self is not SqlType.NULL


# ============================================================================
# OPERATIONS
# ============================================================================

class OperationType(str, Enum):
    """Atomic DDL operation kinds produced by the planner."""
    CREATE_TABLE = "createTable"
    DROP_TABLE = "dropTable"
    ADD_COLUMN = "addColumn"
    REMOVE_COLUMN = "removeColumn"
    MODIFY_COLUMN = "modifyColumn"
    ADD_UNIQUE_CONSTRAINT = "addUniqueConstraint"
    REMOVE_UNIQUE_CONSTRAINT = "removeUniqueConstraint"

    def is_destructive(self) -> bool:
        """Check if this operation removes something from the database."""
        return self in (
            OperationType.DROP_TABLE,
            OperationType.REMOVE_COLUMN,
            OperationType.REMOVE_UNIQUE_CONSTRAINT,
        )


class OperationStatus(str, Enum):
    """Outcome of executing one operation."""
    SUCCESS = "success"
    FAILED = "failed"
    SKIPPED = "skipped"      # Dry run - rendered, not executed


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "FieldType",
    "SqlType",
    "OperationType",
    "OperationStatus",
]
