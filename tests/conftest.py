# ============================================================================
# SHARED TEST FIXTURES
# ============================================================================
# STATUS: Tests - In-memory catalog and doctype helpers
# PURPOSE: Run differ/planner/synchronizer logic without a live database
# ============================================================================
"""
Shared fixtures.

FakeCatalog stands in for CatalogReader. It also knows how to apply planned
operations to its own state the way PostgreSQL would, which lets tests
check that a second compare after a successful apply is empty.
"""

from typing import Dict, List

import pytest

from core.contracts import OperationType, SqlType
from core.models import Column, DoctypeSchema, PhysicalTable, UniqueConstraint, constraint_key
from core.schema.ddl_utils import ConstraintBuilder
from core.schema.type_mapper import native_type_for


class FakeCatalog:
    """In-memory catalog with CatalogReader's read interface."""

    def __init__(self):
        self.tables: Dict[str, PhysicalTable] = {}
        self.constraints: Dict[str, List[UniqueConstraint]] = {}

    def add_table(self, name: str, *columns) -> "FakeCatalog":
        """columns: (name, native_type) or (name, native_type, not_null)."""
        self.tables[name] = PhysicalTable(
            name=name,
            columns=[
                Column(name=c[0], sql_type=c[1], not_null=c[2] if len(c) > 2 else False)
                for c in columns
            ],
        )
        self.constraints.setdefault(name, [])
        return self

    def add_constraint(self, table: str, name: str, columns: List[str]) -> "FakeCatalog":
        self.constraints.setdefault(table, []).append(UniqueConstraint(name=name, columns=columns))
        return self

    # CatalogReader interface

    def list_tables(self) -> List[PhysicalTable]:
        return list(self.tables.values())

    def get_unique_constraints(self, table: str) -> List[UniqueConstraint]:
        return list(self.constraints.get(table, []))

    def get_not_null_columns(self, table) -> List[str]:
        if isinstance(table, str):
            table = self.tables.get(table)
            if table is None:
                return []
        return [c.name for c in table.columns if c.not_null and not c.primary_key]

    def find_unique_constraint_name(self, table, columns):
        for constraint in self.constraints.get(table, []):
            if constraint.key == constraint_key(list(columns)):
                return constraint.name
        return None

    # Simulated DDL

    def apply(self, operations) -> None:
        for op in operations:
            if op.kind == OperationType.CREATE_TABLE:
                self.tables[op.table] = PhysicalTable(
                    name=op.table,
                    columns=[
                        Column(
                            name=c.name,
                            sql_type=native_type_for(c.sql_type).lower(),
                            not_null=c.not_null or c.primary_key,
                            primary_key=c.primary_key,
                        )
                        for c in op.columns if c.sql_type != SqlType.NULL.value
                    ],
                )
                self.constraints[op.table] = [
                    UniqueConstraint(
                        name=ConstraintBuilder.unique_name(op.table, c.columns),
                        columns=c.columns,
                    )
                    for c in op.unique_constraints
                ]
            elif op.kind == OperationType.DROP_TABLE:
                self.tables.pop(op.table, None)
                self.constraints.pop(op.table, None)
            elif op.kind == OperationType.ADD_COLUMN:
                self.tables[op.table].columns.append(Column(
                    name=op.column,
                    sql_type=native_type_for(op.sql_type).lower(),
                    not_null=op.not_null,
                ))
            elif op.kind == OperationType.REMOVE_COLUMN:
                table = self.tables[op.table]
                table.columns = [c for c in table.columns if c.name != op.column]
            elif op.kind == OperationType.MODIFY_COLUMN:
                column = self.tables[op.table].column_map()[op.column]
                if op.type_changed:
                    column.sql_type = native_type_for(op.new_type).lower()
                if op.new_not_null is not None:
                    column.not_null = op.new_not_null
            elif op.kind == OperationType.ADD_UNIQUE_CONSTRAINT:
                self.add_constraint(
                    op.table, ConstraintBuilder.unique_name(op.table, op.columns), op.columns
                )
            elif op.kind == OperationType.REMOVE_UNIQUE_CONSTRAINT:
                self.constraints[op.table] = [
                    c for c in self.constraints.get(op.table, [])
                    if c.key != constraint_key(op.columns)
                ]


def make_doctype(name: str, **fields) -> DoctypeSchema:
    return DoctypeSchema(name=name, fields=fields)


@pytest.fixture
def catalog():
    return FakeCatalog()


@pytest.fixture
def invoice_doctype():
    """Invoice{ id, total: Float unique }."""
    return make_doctype(
        "Invoice",
        id={"type": "Text"},
        total={"type": "Float", "unique": 1},
    )
