# ============================================================================
# SCHEMA DIFFER
# ============================================================================
# STATUS: Core - Declared vs. actual schema comparison
# PURPOSE: Compute SchemaDiff and orphan reports from doctypes + catalog
# EXPORTS: SchemaDiffer
# DEPENDENCIES: pydantic (models)
# ============================================================================
"""
Schema Differ

Compares the expected shape of every declared doctype against what the
catalog reports and produces a SchemaDiff.

Rules:
- Removals (tables, columns, unique constraints) are only computed in
  destructive mode. Without it, actual-only elements are left untouched
  and surface only through detect_orphans().
- Type corrections are never gated: two disagreeing types are a worse
  state than an altered column.
- Columns compare on (name, normalized type). Nullability is compared only
  when not-null enforcement is on.
- Unique constraints compare on their sorted column set, never the name.

There is no rename detection. A renamed table or column is indistinguishable
from a drop + add.

The catalog is any object with:
    list_tables() -> List[PhysicalTable]
    get_unique_constraints(table) -> List[UniqueConstraint]
"""

import logging
from typing import Dict, Iterable, List, Sequence

from core.models.doctype import DoctypeSchema
from core.models.schema import (
    ColumnChange,
    ColumnModification,
    ConstraintChange,
    OrphanedColumn,
    OrphanedSchemaElements,
    OrphanedTable,
    PhysicalTable,
    SchemaDiff,
    TableAddition,
    TableRemoval,
)
from core.schema.deriver import derive_columns, derive_table, derive_unique_constraints
from core.schema.type_mapper import normalize_sql_type

logger = logging.getLogger(__name__)


class SchemaDiffer:
    """
    Diff declared doctypes against the live catalog.

    Usage:
        differ = SchemaDiffer(catalog)
        diff = differ.compare(doctypes, destructive=False)
        orphans = differ.detect_orphans(doctypes)
    """

    def __init__(
        self,
        catalog,
        enforce_not_null: bool = False,
        system_prefixes: Sequence[str] = ("_", "pg_"),
    ):
        """
        Args:
            catalog: Catalog reader bound to the run's handle
            enforce_not_null: Compare and carry nullability
            system_prefixes: Table name prefixes never treated as actual tables
        """
        self.catalog = catalog
        self.enforce_not_null = enforce_not_null
        self.system_prefixes = tuple(system_prefixes)

    def _actual_tables(self) -> List[PhysicalTable]:
        tables = self.catalog.list_tables()
        return [t for t in tables if not t.name.startswith(self.system_prefixes)]

    @staticmethod
    def _by_name(doctypes: Iterable[DoctypeSchema]) -> Dict[str, DoctypeSchema]:
        return {d.name: d for d in doctypes}

    # =========================================================================
    # DIFF
    # =========================================================================

    def compare(self, doctypes: Iterable[DoctypeSchema], destructive: bool = False) -> SchemaDiff:
        """
        Compute the delta between declared doctypes and the database.

        Args:
            doctypes: Declared doctypes (read-only snapshot)
            destructive: Also compute removals

        Returns:
            SchemaDiff
        """
        declared = self._by_name(doctypes)
        actual_tables = self._actual_tables()
        actual_names = {t.name for t in actual_tables}

        diff = SchemaDiff()

        # Declared but missing: full shape, no column-level diff
        for name, doctype in declared.items():
            if name in actual_names:
                continue
            diff.tables.added.append(TableAddition(
                name=name,
                columns=derive_columns(doctype, enforce_not_null=self.enforce_not_null),
                unique_constraints=derive_unique_constraints(doctype),
                references=doctype.references(),
            ))

        if destructive:
            for table in actual_tables:
                if table.name not in declared:
                    diff.tables.removed.append(TableRemoval(name=table.name, columns=table.columns))

        for table in actual_tables:
            doctype = declared.get(table.name)
            if doctype is None:
                continue
            self._compare_columns(table, doctype, diff, destructive)
            self._compare_unique_constraints(table, doctype, diff, destructive)

        logger.debug(f"Schema diff: {diff.summary()}")
        return diff

    def _compare_columns(
        self,
        table: PhysicalTable,
        doctype: DoctypeSchema,
        diff: SchemaDiff,
        destructive: bool
    ) -> None:
        actual = table.column_map()
        expected = derive_table(doctype, enforce_not_null=self.enforce_not_null).column_map()

        for name, column in expected.items():
            if name not in actual:
                diff.columns.added.append(ColumnChange(
                    table=table.name,
                    column=name,
                    sql_type=column.sql_type,
                    not_null=column.not_null,
                ))

        if destructive:
            for name, column in actual.items():
                if name not in expected:
                    diff.columns.removed.append(ColumnChange(
                        table=table.name,
                        column=name,
                        sql_type=column.sql_type,
                        not_null=column.not_null,
                    ))

        for name, current in actual.items():
            wanted = expected.get(name)
            if wanted is None:
                continue

            type_changed = normalize_sql_type(current.sql_type) != wanted.sql_type

            nullability_changed = (
                self.enforce_not_null
                and not (current.primary_key or wanted.primary_key)
                and current.not_null != wanted.not_null
            )

            if not type_changed and not nullability_changed:
                continue

            if type_changed:
                logger.debug(
                    f"Type mismatch for {table.name}.{name}: "
                    f"{current.sql_type} -> {normalize_sql_type(current.sql_type)}, expected {wanted.sql_type}"
                )

            diff.columns.modified.append(ColumnModification(
                table=table.name,
                column=name,
                old_type=current.sql_type,
                new_type=wanted.sql_type,
                type_changed=type_changed,
                old_not_null=current.not_null if nullability_changed else None,
                new_not_null=wanted.not_null if nullability_changed else None,
            ))

    def _compare_unique_constraints(
        self,
        table: PhysicalTable,
        doctype: DoctypeSchema,
        diff: SchemaDiff,
        destructive: bool
    ) -> None:
        expected = {c.key: c for c in derive_unique_constraints(doctype)}
        current = {c.key: c for c in self.catalog.get_unique_constraints(table.name)}

        for key, constraint in expected.items():
            if key not in current:
                diff.unique_constraints.added.append(ConstraintChange(
                    table=table.name,
                    name=constraint.name,
                    columns=constraint.columns,
                ))

        if destructive:
            for key, constraint in current.items():
                if key not in expected:
                    diff.unique_constraints.removed.append(ConstraintChange(
                        table=table.name,
                        name=constraint.name,
                        columns=constraint.columns,
                    ))

    # =========================================================================
    # ORPHANS
    # =========================================================================

    def detect_orphans(self, doctypes: Iterable[DoctypeSchema]) -> OrphanedSchemaElements:
        """
        Physical tables/columns with no declarative counterpart.

        Read-only. The result is for operator warnings and is never planned.
        """
        declared = self._by_name(doctypes)
        orphans = OrphanedSchemaElements()

        for table in self._actual_tables():
            doctype = declared.get(table.name)
            if doctype is None:
                orphans.orphaned_tables.append(
                    OrphanedTable(name=table.name, columns=table.columns)
                )
                continue

            field_names = set(doctype.fields)
            for column in table.columns:
                if column.name not in field_names:
                    orphans.orphaned_columns.append(OrphanedColumn(
                        table=table.name,
                        column=column.name,
                        sql_type=column.sql_type,
                    ))

        return orphans


__all__ = ["SchemaDiffer"]
