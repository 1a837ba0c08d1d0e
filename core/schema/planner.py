# ============================================================================
# OPERATION PLANNER
# ============================================================================
# STATUS: Core - SchemaDiff -> ordered DDL operations
# PURPOSE: Flatten a diff into a sequence that is correct when applied in order
# EXPORTS: plan, PLAN_ORDER
# DEPENDENCIES: none
# ============================================================================
"""
Operation Planner

Fixed priority order:

    1. createTable                (referenced tables first)
    2. dropTable
    3. modifyColumn
    4. addColumn
    5. removeColumn
    6. addUniqueConstraint
    7. removeUniqueConstraint

Creates come before anything that could target the new table, and column
operations come before the constraints that reference those columns.
Unique constraints of a new table travel inside its createTable operation.
"""

from typing import Dict, List, Set

from core.contracts import OperationType
from core.models.operations import (
    AddColumnOperation,
    AddUniqueConstraintOperation,
    CreateTableOperation,
    DropTableOperation,
    ModifyColumnOperation,
    Operation,
    RemoveColumnOperation,
    RemoveUniqueConstraintOperation,
)
from core.models.schema import SchemaDiff, TableAddition

PLAN_ORDER: List[OperationType] = [
    OperationType.CREATE_TABLE,
    OperationType.DROP_TABLE,
    OperationType.MODIFY_COLUMN,
    OperationType.ADD_COLUMN,
    OperationType.REMOVE_COLUMN,
    OperationType.ADD_UNIQUE_CONSTRAINT,
    OperationType.REMOVE_UNIQUE_CONSTRAINT,
]


def sort_by_dependency(tables: List[TableAddition]) -> List[TableAddition]:
    """
    Order new tables so referenced tables are created first.

    Declaration order is kept where no reference forces otherwise.
    Reference cycles are broken at the first table revisited.
    """
    by_name: Dict[str, TableAddition] = {t.name: t for t in tables}
    ordered: List[TableAddition] = []
    visited: Set[str] = set()
    visiting: Set[str] = set()

    def visit(table: TableAddition) -> None:
        if table.name in visited or table.name in visiting:
            return
        visiting.add(table.name)
        for dependency in table.references:
            target = by_name.get(dependency)
            if target is not None:
                visit(target)
        visiting.discard(table.name)
        visited.add(table.name)
        ordered.append(table)

    for table in tables:
        visit(table)
    return ordered


def plan(diff: SchemaDiff) -> List[Operation]:
    """
    Flatten a diff into ordered operations.

    Args:
        diff: SchemaDiff from SchemaDiffer.compare()

    Returns:
        Operations in PLAN_ORDER
    """
    operations: List[Operation] = []

    for table in sort_by_dependency(diff.tables.added):
        operations.append(CreateTableOperation(
            table=table.name,
            columns=table.columns,
            unique_constraints=table.unique_constraints,
        ))

    for table in diff.tables.removed:
        operations.append(DropTableOperation(table=table.name))

    for change in diff.columns.modified:
        operations.append(ModifyColumnOperation(
            table=change.table,
            column=change.column,
            old_type=change.old_type,
            new_type=change.new_type,
            type_changed=change.type_changed,
            new_not_null=change.new_not_null if change.nullability_changed else None,
        ))

    for change in diff.columns.added:
        operations.append(AddColumnOperation(
            table=change.table,
            column=change.column,
            sql_type=change.sql_type,
            not_null=change.not_null,
        ))

    for change in diff.columns.removed:
        operations.append(RemoveColumnOperation(table=change.table, column=change.column))

    for constraint in diff.unique_constraints.added:
        operations.append(AddUniqueConstraintOperation(
            table=constraint.table,
            name=constraint.name,
            columns=constraint.columns,
        ))

    for constraint in diff.unique_constraints.removed:
        operations.append(RemoveUniqueConstraintOperation(
            table=constraint.table,
            name=constraint.name,
            columns=constraint.columns,
        ))

    return operations


__all__ = ["plan", "sort_by_dependency", "PLAN_ORDER"]
