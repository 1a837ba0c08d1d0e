# ============================================================================
# PHYSICAL SCHEMA & DIFF MODELS
# ============================================================================
# STATUS: Core model - Expected/actual table shapes and their delta
# PURPOSE: Transient structures recomputed on every sync run
# EXPORTS: Column, UniqueConstraint, PhysicalTable, SchemaDiff, OrphanedSchemaElements
# DEPENDENCIES: pydantic
# ============================================================================
"""
Physical Schema Models

Two PhysicalTable instances can exist per table name:
- expected: derived from a DoctypeSchema (sql_type is canonical)
- actual: read from the catalog (sql_type is the native spelling, unmodified)

SchemaDiff is created fresh per run, consumed once by the planner and
discarded. Nothing here is persisted.
"""

from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, Field


# ============================================================================
# SHAPES
# ============================================================================

class Column(BaseModel):
    """A physical column (expected or actual)."""
    name: str
    sql_type: str
    not_null: bool = False
    primary_key: bool = False


class UniqueConstraint(BaseModel):
    """
    A unique constraint.

    Identity for diffing is the sorted column set, not the name.
    """
    name: str
    columns: List[str] = Field(default_factory=list)

    @property
    def key(self) -> Tuple[str, ...]:
        """Sorted column tuple used to match constraints across name changes."""
        return constraint_key(self.columns)


class PhysicalTable(BaseModel):
    """A table and its columns in declaration/ordinal order."""
    name: str
    columns: List[Column] = Field(default_factory=list)

    def column_map(self) -> Dict[str, Column]:
        return {c.name: c for c in self.columns}


def constraint_key(columns: List[str]) -> Tuple[str, ...]:
    """Identity of a unique constraint: its sorted column names."""
    return tuple(sorted(columns))


# ============================================================================
# DIFF ENTRIES
# ============================================================================

class TableAddition(BaseModel):
    """A declared table missing from the database, with its full shape."""
    name: str
    columns: List[Column] = Field(default_factory=list)
    unique_constraints: List[UniqueConstraint] = Field(default_factory=list)
    references: List[str] = Field(
        default_factory=list,
        description="Doctypes this table references (create ordering only)"
    )


class TableRemoval(BaseModel):
    """A physical table with no doctype (destructive mode only)."""
    name: str
    columns: List[Column] = Field(default_factory=list)


class ColumnChange(BaseModel):
    """A column to add or remove on an existing table."""
    table: str
    column: str
    sql_type: str
    not_null: bool = False


class ColumnModification(BaseModel):
    """A column whose type (or, when enforced, nullability) disagrees."""
    table: str
    column: str
    old_type: str
    new_type: str
    type_changed: bool = True
    old_not_null: Optional[bool] = None
    new_not_null: Optional[bool] = None

    @property
    def nullability_changed(self) -> bool:
        if self.old_not_null is None or self.new_not_null is None:
            return False
        return self.old_not_null != self.new_not_null


class ConstraintChange(BaseModel):
    """A unique constraint to add or remove on an existing table."""
    table: str
    name: str
    columns: List[str] = Field(default_factory=list)


class TableDiff(BaseModel):
    added: List[TableAddition] = Field(default_factory=list)
    removed: List[TableRemoval] = Field(default_factory=list)


class ColumnDiff(BaseModel):
    added: List[ColumnChange] = Field(default_factory=list)
    modified: List[ColumnModification] = Field(default_factory=list)
    removed: List[ColumnChange] = Field(default_factory=list)


class ConstraintDiff(BaseModel):
    added: List[ConstraintChange] = Field(default_factory=list)
    removed: List[ConstraintChange] = Field(default_factory=list)


class SchemaDiff(BaseModel):
    """
    Delta between declared doctypes and the live database.

    The `removed` lists are only ever populated in destructive mode.
    """
    tables: TableDiff = Field(default_factory=TableDiff)
    columns: ColumnDiff = Field(default_factory=ColumnDiff)
    unique_constraints: ConstraintDiff = Field(default_factory=ConstraintDiff)

    def is_empty(self) -> bool:
        return not any(self.summary().values())

    def has_destructive_changes(self) -> bool:
        return bool(
            self.tables.removed
            or self.columns.removed
            or self.unique_constraints.removed
        )

    def summary(self) -> Dict[str, int]:
        """Entry counts per category."""
        return {
            "tables_added": len(self.tables.added),
            "tables_removed": len(self.tables.removed),
            "columns_added": len(self.columns.added),
            "columns_modified": len(self.columns.modified),
            "columns_removed": len(self.columns.removed),
            "unique_constraints_added": len(self.unique_constraints.added),
            "unique_constraints_removed": len(self.unique_constraints.removed),
        }


# ============================================================================
# ORPHANS
# ============================================================================

class OrphanedTable(BaseModel):
    name: str
    columns: List[Column] = Field(default_factory=list)


class OrphanedColumn(BaseModel):
    table: str
    column: str
    sql_type: str


class OrphanedSchemaElements(BaseModel):
    """
    Physical elements with no declarative counterpart.

    Warning report only. Never fed to the planner.
    """
    orphaned_tables: List[OrphanedTable] = Field(default_factory=list)
    orphaned_columns: List[OrphanedColumn] = Field(default_factory=list)

    def is_empty(self) -> bool:
        return not self.orphaned_tables and not self.orphaned_columns

    def to_dict(self) -> Dict[str, Any]:
        return {
            "orphaned_tables": [t.name for t in self.orphaned_tables],
            "orphaned_columns": [f"{c.table}.{c.column}" for c in self.orphaned_columns],
        }


__all__ = [
    "Column",
    "UniqueConstraint",
    "PhysicalTable",
    "constraint_key",
    "TableAddition",
    "TableRemoval",
    "ColumnChange",
    "ColumnModification",
    "ConstraintChange",
    "TableDiff",
    "ColumnDiff",
    "ConstraintDiff",
    "SchemaDiff",
    "OrphanedTable",
    "OrphanedColumn",
    "OrphanedSchemaElements",
]
