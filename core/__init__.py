# ============================================================================
# CORE MODULE
# ============================================================================
# STATUS: Core module initialization
# PURPOSE: Export core contracts, models, and schema engine
# ============================================================================

from core.contracts import FieldType, SqlType, OperationType, OperationStatus
from core.models import (
    FieldDef,
    DoctypeSchema,
    Column,
    UniqueConstraint,
    PhysicalTable,
    SchemaDiff,
    OrphanedSchemaElements,
)
from core.schema import SchemaDiffer, plan

__all__ = [
    # Enums
    "FieldType",
    "SqlType",
    "OperationType",
    "OperationStatus",
    # Models
    "FieldDef",
    "DoctypeSchema",
    "Column",
    "UniqueConstraint",
    "PhysicalTable",
    "SchemaDiff",
    "OrphanedSchemaElements",
    # Schema engine
    "SchemaDiffer",
    "plan",
]
