# ============================================================================
# SCHEMA MODULE
# ============================================================================
# STATUS: Core - Schema synchronization engine
# PURPOSE: Type mapping, derivation, diffing, planning and DDL builders
# ============================================================================

from core.schema.type_mapper import (
    map_field_type,
    normalize_sql_type,
    native_type_for,
    needs_explicit_cast,
    cast_type_for,
)
from core.schema.deriver import (
    derive_columns,
    derive_unique_constraints,
    derive_table,
)
from core.schema.differ import SchemaDiffer
from core.schema.planner import plan, PLAN_ORDER
from core.schema.ddl_utils import (
    TableBuilder,
    ColumnBuilder,
    ConstraintBuilder,
)

__all__ = [
    # Type mapping
    "map_field_type",
    "normalize_sql_type",
    "native_type_for",
    "needs_explicit_cast",
    "cast_type_for",
    # Derivation
    "derive_columns",
    "derive_unique_constraints",
    "derive_table",
    # Diff / plan
    "SchemaDiffer",
    "plan",
    "PLAN_ORDER",
    # DDL builders
    "TableBuilder",
    "ColumnBuilder",
    "ConstraintBuilder",
]
