# ============================================================================
# CATALOG READER
# ============================================================================
# STATUS: Infrastructure - Live schema introspection
# PURPOSE: Read tables, columns and unique constraints from information_schema
# ============================================================================
"""
Catalog Reader

Read-only view of the live database schema for one sync run.

Every query failure is logged and degrades to an empty result. The
synchronizer must be able to say "no information available" instead of
crashing mid-scan.

Native type strings are returned exactly as the catalog reports them
("character varying", "double precision", ...). Normalization happens in
the differ through normalize_sql_type().

Usage:
    with repo.session() as handle:
        catalog = CatalogReader(handle, schema_name="public")
        tables = catalog.list_tables()
        constraints = catalog.get_unique_constraints("Invoice")
"""

from typing import Dict, List, Optional, Sequence, Union

from core.logging import ComponentType, get_logger
from core.models.schema import Column, PhysicalTable, UniqueConstraint, constraint_key

logger = get_logger(__name__, ComponentType.CATALOG)


TABLES_QUERY = """
    SELECT table_name AS name
    FROM information_schema.tables
    WHERE table_schema = %s
      AND table_type = 'BASE TABLE'
    ORDER BY table_name
"""

COLUMNS_QUERY = """
    SELECT
        c.table_name,
        c.column_name,
        c.data_type,
        c.is_nullable,
        EXISTS (
            SELECT 1
            FROM information_schema.table_constraints tc
            JOIN information_schema.key_column_usage kcu
                ON tc.constraint_name = kcu.constraint_name
                AND tc.table_schema = kcu.table_schema
                AND tc.table_name = kcu.table_name
            WHERE tc.constraint_type = 'PRIMARY KEY'
                AND tc.table_schema = c.table_schema
                AND tc.table_name = c.table_name
                AND kcu.column_name = c.column_name
        ) AS is_primary_key
    FROM information_schema.columns c
    WHERE c.table_schema = %s
    ORDER BY c.table_name, c.ordinal_position
"""

UNIQUE_CONSTRAINTS_QUERY = """
    SELECT
        tc.constraint_name AS name,
        kcu.column_name AS column_name
    FROM information_schema.table_constraints tc
    JOIN information_schema.key_column_usage kcu
        ON tc.constraint_name = kcu.constraint_name
        AND tc.table_schema = kcu.table_schema
        AND tc.table_name = kcu.table_name
    WHERE tc.table_schema = %s
        AND tc.table_name = %s
        AND tc.constraint_type = 'UNIQUE'
    ORDER BY tc.constraint_name, kcu.ordinal_position
"""


class CatalogReader:
    """
    information_schema reader bound to one session handle.

    The handle needs fetch_all(query, params) returning dict rows.
    """

    def __init__(
        self,
        handle,
        schema_name: str = "public",
        system_prefixes: Sequence[str] = ("_", "pg_"),
    ):
        """
        Args:
            handle: Session handle for the run
            schema_name: Schema holding the doctype tables
            system_prefixes: Table name prefixes to exclude
        """
        self.handle = handle
        self.schema_name = schema_name
        self.system_prefixes = tuple(system_prefixes)

    def is_system_table(self, name: str) -> bool:
        return name.startswith(self.system_prefixes)

    # =========================================================================
    # TABLES
    # =========================================================================

    def list_tables(self) -> List[PhysicalTable]:
        """
        Base tables in the schema with their columns.

        System-prefixed tables are excluded. Matching is done in Python;
        `_` is a wildcard in LIKE patterns.

        Returns:
            PhysicalTable list ordered by name; empty on failure
        """
        try:
            rows = self.handle.fetch_all(TABLES_QUERY, (self.schema_name,))
        except Exception as e:
            logger.error(f"Error listing tables in schema {self.schema_name}: {e}")
            return []

        names = [row["name"] for row in rows if not self.is_system_table(row["name"])]
        if not names:
            return []

        try:
            column_rows = self.handle.fetch_all(COLUMNS_QUERY, (self.schema_name,))
        except Exception as e:
            logger.error(f"Error reading columns in schema {self.schema_name}: {e}")
            return []

        columns: Dict[str, List[Column]] = {name: [] for name in names}
        for row in column_rows:
            table_columns = columns.get(row["table_name"])
            if table_columns is None:
                continue
            table_columns.append(Column(
                name=row["column_name"],
                sql_type=row["data_type"],
                not_null=row.get("is_nullable") == "NO",
                primary_key=bool(row.get("is_primary_key")),
            ))

        return [PhysicalTable(name=name, columns=columns[name]) for name in names]

    def get_not_null_columns(self, table: Union[str, PhysicalTable]) -> List[str]:
        """
        Non-primary-key columns currently declared NOT NULL.

        Accepts a table name (read from the catalog) or a PhysicalTable
        already returned by list_tables().
        """
        if isinstance(table, str):
            found = next((t for t in self.list_tables() if t.name == table), None)
            if found is None:
                return []
            table = found
        return [c.name for c in table.columns if c.not_null and not c.primary_key]

    # =========================================================================
    # UNIQUE CONSTRAINTS
    # =========================================================================

    def get_unique_constraints(self, table: str) -> List[UniqueConstraint]:
        """
        Unique constraints on one table.

        Rows (one per constraint column) are grouped into one entry per
        constraint name, columns in ordinal position order.

        Returns:
            UniqueConstraint list; empty on failure
        """
        try:
            rows = self.handle.fetch_all(UNIQUE_CONSTRAINTS_QUERY, (self.schema_name, table))
        except Exception as e:
            logger.error(f"Error getting unique constraints for table {table}: {e}")
            return []

        grouped: Dict[str, List[str]] = {}
        for row in rows:
            grouped.setdefault(row["name"], []).append(row["column_name"])

        return [UniqueConstraint(name=name, columns=cols) for name, cols in grouped.items()]

    def find_unique_constraint_name(self, table: str, columns: Sequence[str]) -> Optional[str]:
        """
        Physical name of the unique constraint covering exactly `columns`.

        The constraint may predate the deterministic naming scheme, so it is
        matched on its column set.
        """
        wanted = constraint_key(list(columns))
        for constraint in self.get_unique_constraints(table):
            if constraint.key == wanted:
                return constraint.name
        return None


__all__ = ["CatalogReader"]
