# ============================================================================
# DDL UTILITIES
# ============================================================================
# STATUS: Core - DRY utilities for SQL DDL generation
# PURPOSE: Table, column and constraint builders using psycopg.sql
# EXPORTS: TableBuilder, ColumnBuilder, ConstraintBuilder
# DEPENDENCIES: psycopg
# ============================================================================
"""
DDL Utilities - Shared SQL Generation Patterns.

All methods return psycopg.sql.Composed objects for safe execution.
No string concatenation - full SQL composition for injection safety.
Type names are taken from the canonical vocabulary and rendered through
native_type_for(), so a canonical FLOAT becomes DOUBLE PRECISION.

Usage:
    from core.schema.ddl_utils import TableBuilder, ConstraintBuilder

    stmt = TableBuilder.create('public', 'Invoice', columns)
    cursor.execute(stmt)

    stmt = ConstraintBuilder.add_unique('public', 'Invoice', ['total'])
    cursor.execute(stmt)
"""

from typing import List, Optional, Sequence, Union

from psycopg import sql

from core.contracts import SqlType
from core.models.schema import Column
from core.schema.type_mapper import cast_type_for, native_type_for


def _qualified(schema: str, table: str) -> sql.Composed:
    return sql.SQL("{}.{}").format(sql.Identifier(schema), sql.Identifier(table))


# ============================================================================
# TABLE BUILDER
# ============================================================================

class TableBuilder:
    """
    Builder for CREATE/DROP TABLE statements.

    All methods are static and return sql.Composed objects.
    """

    @staticmethod
    def column_definition(column: Column, enforce_not_null: bool = False) -> sql.Composed:
        """Render `"name" TYPE [NOT NULL]`."""
        parts = [
            sql.Identifier(column.name),
            sql.SQL(" "),
            sql.SQL(native_type_for(column.sql_type)),
        ]
        if enforce_not_null and column.not_null:
            parts.append(sql.SQL(" NOT NULL"))
        return sql.Composed(parts)

    @staticmethod
    def create(
        schema: str,
        table: str,
        columns: Sequence[Column],
        enforce_not_null: bool = False
    ) -> sql.Composed:
        """
        Create table from expected columns.

        Columns typed with the NULL sentinel are skipped.

        Args:
            schema: Schema name
            table: Table name
            columns: Expected columns in declaration order
            enforce_not_null: Emit NOT NULL for required columns

        Returns:
            sql.Composed CREATE TABLE statement
        """
        physical = [c for c in columns if c.sql_type != SqlType.NULL.value]

        parts = [TableBuilder.column_definition(c, enforce_not_null) for c in physical]

        primary_key = [c.name for c in physical if c.primary_key]
        if primary_key:
            parts.append(
                sql.SQL("PRIMARY KEY ({})").format(
                    sql.SQL(", ").join(sql.Identifier(c) for c in primary_key)
                )
            )

        return sql.SQL("CREATE TABLE IF NOT EXISTS {table} ({body})").format(
            table=_qualified(schema, table),
            body=sql.SQL(", ").join(parts)
        )

    @staticmethod
    def drop(schema: str, table: str) -> sql.Composed:
        """DROP TABLE IF EXISTS - idempotent by construction."""
        return sql.SQL("DROP TABLE IF EXISTS {}").format(_qualified(schema, table))


# ============================================================================
# COLUMN BUILDER
# ============================================================================

class ColumnBuilder:
    """
    Builder for single-column ALTER TABLE statements.
    """

    @staticmethod
    def add(
        schema: str,
        table: str,
        column: str,
        sql_type: str,
        not_null: bool = False
    ) -> sql.Composed:
        """ALTER TABLE ... ADD COLUMN."""
        stmt = sql.SQL("ALTER TABLE {table} ADD COLUMN {column} {type}").format(
            table=_qualified(schema, table),
            column=sql.Identifier(column),
            type=sql.SQL(native_type_for(sql_type))
        )
        if not_null:
            stmt = sql.SQL("{} NOT NULL").format(stmt)
        return stmt

    @staticmethod
    def drop(schema: str, table: str, column: str) -> sql.Composed:
        """ALTER TABLE ... DROP COLUMN."""
        return sql.SQL("ALTER TABLE {table} DROP COLUMN {column}").format(
            table=_qualified(schema, table),
            column=sql.Identifier(column)
        )

    @staticmethod
    def alter_type(
        schema: str,
        table: str,
        column: str,
        new_type: str,
        with_cast: bool = False
    ) -> sql.Composed:
        """
        ALTER TABLE ... ALTER COLUMN ... TYPE.

        Args:
            with_cast: Append `USING "column"::<type>` for conversions
                       PostgreSQL will not perform implicitly
        """
        stmt = sql.SQL("ALTER TABLE {table} ALTER COLUMN {column} TYPE {type}").format(
            table=_qualified(schema, table),
            column=sql.Identifier(column),
            type=sql.SQL(native_type_for(new_type))
        )
        if with_cast:
            stmt = sql.SQL("{} USING {}::{}").format(
                stmt,
                sql.Identifier(column),
                sql.SQL(cast_type_for(new_type))
            )
        return stmt

    @staticmethod
    def set_not_null(schema: str, table: str, column: str) -> sql.Composed:
        return sql.SQL("ALTER TABLE {table} ALTER COLUMN {column} SET NOT NULL").format(
            table=_qualified(schema, table),
            column=sql.Identifier(column)
        )

    @staticmethod
    def drop_not_null(schema: str, table: str, column: str) -> sql.Composed:
        return sql.SQL("ALTER TABLE {table} ALTER COLUMN {column} DROP NOT NULL").format(
            table=_qualified(schema, table),
            column=sql.Identifier(column)
        )


# ============================================================================
# CONSTRAINT BUILDER
# ============================================================================

class ConstraintBuilder:
    """
    Builder for unique constraint DDL statements.
    """

    @staticmethod
    def _normalize_columns(columns: Union[str, Sequence[str]]) -> List[str]:
        """Convert single column or sequence to list."""
        if isinstance(columns, str):
            return [columns]
        return list(columns)

    @staticmethod
    def unique_name(table: str, columns: Union[str, Sequence[str]]) -> str:
        """Deterministic constraint name: idx_<table>_<cols>_unique."""
        cols = ConstraintBuilder._normalize_columns(columns)
        return f"idx_{table}_{'_'.join(cols)}_unique"

    @staticmethod
    def add_unique(
        schema: str,
        table: str,
        columns: Union[str, Sequence[str]],
        name: Optional[str] = None
    ) -> sql.Composed:
        """
        ALTER TABLE ... ADD CONSTRAINT ... UNIQUE (...).

        Args:
            name: Optional custom constraint name (defaults to unique_name())
        """
        cols = ConstraintBuilder._normalize_columns(columns)
        constraint_name = name or ConstraintBuilder.unique_name(table, cols)

        return sql.SQL("ALTER TABLE {table} ADD CONSTRAINT {name} UNIQUE ({columns})").format(
            table=_qualified(schema, table),
            name=sql.Identifier(constraint_name),
            columns=sql.SQL(", ").join(sql.Identifier(c) for c in cols)
        )

    @staticmethod
    def drop(schema: str, table: str, name: str) -> sql.Composed:
        """ALTER TABLE ... DROP CONSTRAINT by resolved physical name."""
        return sql.SQL("ALTER TABLE {table} DROP CONSTRAINT {name}").format(
            table=_qualified(schema, table),
            name=sql.Identifier(name)
        )


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    'TableBuilder',
    'ColumnBuilder',
    'ConstraintBuilder',
]
