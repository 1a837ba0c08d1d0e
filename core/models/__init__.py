# ============================================================================
# MODELS MODULE
# ============================================================================
# STATUS: Model exports
# PURPOSE: Central export point for all Pydantic models
# ============================================================================
"""
Models Module - Central Export Point

Declared side:  FieldDef, DoctypeSchema
Physical side:  Column, UniqueConstraint, PhysicalTable
Delta:          SchemaDiff (+ entries), OrphanedSchemaElements
Operations:     Operation union consumed by the executor
"""

from core.models.doctype import FieldDef, DoctypeSchema
from core.models.schema import (
    Column,
    UniqueConstraint,
    PhysicalTable,
    constraint_key,
    TableAddition,
    TableRemoval,
    ColumnChange,
    ColumnModification,
    ConstraintChange,
    SchemaDiff,
    OrphanedTable,
    OrphanedColumn,
    OrphanedSchemaElements,
)
from core.models.operations import (
    Operation,
    CreateTableOperation,
    DropTableOperation,
    AddColumnOperation,
    RemoveColumnOperation,
    ModifyColumnOperation,
    AddUniqueConstraintOperation,
    RemoveUniqueConstraintOperation,
)

__all__ = [
    # Declared
    "FieldDef",
    "DoctypeSchema",
    # Physical
    "Column",
    "UniqueConstraint",
    "PhysicalTable",
    "constraint_key",
    # Diff
    "TableAddition",
    "TableRemoval",
    "ColumnChange",
    "ColumnModification",
    "ConstraintChange",
    "SchemaDiff",
    "OrphanedTable",
    "OrphanedColumn",
    "OrphanedSchemaElements",
    # Operations
    "Operation",
    "CreateTableOperation",
    "DropTableOperation",
    "AddColumnOperation",
    "RemoveColumnOperation",
    "ModifyColumnOperation",
    "AddUniqueConstraintOperation",
    "RemoveUniqueConstraintOperation",
]
