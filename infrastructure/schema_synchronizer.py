# ============================================================================
# SCHEMA SYNCHRONIZER
# ============================================================================
# STATUS: Infrastructure - Sync run orchestrator
# PURPOSE: Declared doctypes -> diff -> plan -> apply, on one explicit handle
# ============================================================================
"""
SchemaSynchronizer - one schema sync run.

Workflow:
1. Load declared doctypes (errors propagate; a run needs the declared schema)
2. Detect orphaned tables/columns and log warnings (report only)
3. Compare declared vs. actual schema
4. Plan ordered operations
5. Apply operations (or render them in dry-run mode)

Catalog and DDL failures never abort the run. The run always completes and
per-operation outcomes are collected in SyncResult.operations.

Usage:
    from infrastructure import PostgreSQLRepository, SchemaSynchronizer
    from services import DoctypeService

    repo = PostgreSQLRepository()
    with repo.session() as handle:
        synchronizer = SchemaSynchronizer(DoctypeService(), handle)
        result = synchronizer.run(destructive=False)

    # Or in one call
    result = sync_schema(destructive=False, dry_run=True)
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from core.config import SyncDefaults, get_defaults
from core.contracts import OperationStatus
from core.logging import ComponentType, get_logger, log_checkpoint, log_context, log_duration
from core.models.doctype import DoctypeSchema
from core.models.schema import OrphanedSchemaElements, SchemaDiff
from core.schema.ddl_utils import ColumnBuilder
from core.schema.differ import SchemaDiffer
from core.schema.planner import plan
from infrastructure.catalog import CatalogReader
from infrastructure.executor import OperationResult, SchemaExecutor

logger = get_logger(__name__, ComponentType.SYNCHRONIZER)


# ============================================================================
# DATA CLASSES
# ============================================================================

@dataclass
class SyncResult:
    """Complete result of one sync run."""
    schema_name: str
    timestamp: str
    destructive: bool = False
    dry_run: bool = False
    run_id: str = ""
    doctypes: int = 0
    diff: SchemaDiff = field(default_factory=SchemaDiff)
    orphans: OrphanedSchemaElements = field(default_factory=OrphanedSchemaElements)
    operations: List[OperationResult] = field(default_factory=list)
    duration_ms: Optional[float] = None

    @property
    def failed(self) -> List[OperationResult]:
        return [r for r in self.operations if r.status == OperationStatus.FAILED]

    @property
    def success(self) -> bool:
        """True when no operation failed."""
        return not self.failed

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "run_id": self.run_id,
            "schema_name": self.schema_name,
            "timestamp": self.timestamp,
            "destructive": self.destructive,
            "dry_run": self.dry_run,
            "success": self.success,
            "doctypes": self.doctypes,
            "duration_ms": self.duration_ms,
            "diff": self.diff.model_dump(mode="json"),
            "orphans": self.orphans.to_dict(),
            "operations": [r.to_dict() for r in self.operations],
            "summary": {
                "changes": self.diff.summary(),
                "destructive_changes": self.diff.has_destructive_changes(),
                "total_operations": len(self.operations),
                "successful": len([r for r in self.operations if r.status == OperationStatus.SUCCESS]),
                "failed": len(self.failed),
                "skipped": len([r for r in self.operations if r.status == OperationStatus.SKIPPED]),
            },
        }


@dataclass
class NullabilityResult:
    """Result of make_all_columns_nullable()."""
    altered: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return not self.errors

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "altered": self.altered,
            "errors": self.errors,
        }


# ============================================================================
# SCHEMA SYNCHRONIZER
# ============================================================================

class SchemaSynchronizer:
    """
    Orchestrates one sync run against one handle.

    The handle is passed in explicitly and shared by the catalog reader and
    the executor for the whole run. Nothing is looked up from ambient state.
    """

    def __init__(
        self,
        doctype_source,
        handle,
        defaults: Optional[SyncDefaults] = None,
    ):
        """
        Args:
            doctype_source: Object with list_doctypes() -> List[DoctypeSchema]
            handle: Session handle (fetch_all / execute / render)
            defaults: Sync settings (defaults to environment)
        """
        self.doctype_source = doctype_source
        self.handle = handle
        self.defaults = defaults or get_defaults().sync

        self.catalog = CatalogReader(
            handle,
            schema_name=self.defaults.schema_name,
            system_prefixes=self.defaults.system_table_prefixes,
        )
        self.differ = SchemaDiffer(
            self.catalog,
            enforce_not_null=self.defaults.enforce_not_null,
            system_prefixes=self.defaults.system_table_prefixes,
        )

    def _executor(self, dry_run: bool) -> SchemaExecutor:
        return SchemaExecutor(
            self.handle,
            self.catalog,
            schema_name=self.defaults.schema_name,
            enforce_not_null=self.defaults.enforce_not_null,
            dry_run=dry_run,
        )

    def load_doctypes(self) -> List[DoctypeSchema]:
        """Snapshot the declared schema. Errors propagate."""
        return list(self.doctype_source.list_doctypes())

    # ========================================================================
    # RUN
    # ========================================================================

    def run(self, destructive: bool = False, dry_run: bool = False) -> SyncResult:
        """
        Synchronize the database schema with the declared doctypes.

        Args:
            destructive: Also drop tables, columns and unique constraints
                         that are not declared
            dry_run: Render SQL without executing

        Returns:
            SyncResult with diff, orphans and per-operation results

        Raises:
            DoctypeDefinitionError: If the declared schema cannot be loaded
        """
        result = SyncResult(
            schema_name=self.defaults.schema_name,
            timestamp=datetime.now(timezone.utc).isoformat(),
            destructive=destructive,
            dry_run=dry_run,
            run_id=f"sync-{uuid.uuid4().hex[:8]}",
        )

        with log_context(run_id=result.run_id, schema=result.schema_name):
            logger.info("=" * 70)
            logger.info("SCHEMA SYNC")
            logger.info(f"   Schema: {self.defaults.schema_name}")
            logger.info(f"   Mode: {'DESTRUCTIVE' if destructive else 'ADDITIVE'}"
                        f"{' (DRY RUN)' if dry_run else ''}")
            logger.info("=" * 70)

            with log_duration(logger, "Sync run") as timing:
                doctypes = self.load_doctypes()
                result.doctypes = len(doctypes)
                log_checkpoint("sync_started", {"doctypes": len(doctypes)}, logger)

                result.orphans = self.differ.detect_orphans(doctypes)
                self.log_orphaned_warnings(result.orphans)

                result.diff = self.differ.compare(doctypes, destructive=destructive)
                operations = plan(result.diff)
                logger.info(f"Planned {len(operations)} operations: {result.diff.summary()}")

                if result.diff.has_destructive_changes():
                    removed = {k: v for k, v in result.diff.summary().items() if k.endswith("_removed") and v}
                    logger.warning(f"Destructive changes planned: {removed}")

                if operations:
                    result.operations = self._executor(dry_run).apply(operations)
                else:
                    logger.info("No schema changes required")
            result.duration_ms = timing["duration_ms"]

            summary = result.to_dict()["summary"]
            logger.info("=" * 70)
            logger.info(f"SYNC {'COMPLETE' if result.success else 'COMPLETE WITH FAILURES'}")
            logger.info(
                f"   Operations: {summary['successful']} succeeded, "
                f"{summary['failed']} failed, {summary['skipped']} skipped "
                f"in {result.duration_ms}ms"
            )
            for failure in result.failed:
                logger.warning(f"   Failed: {failure.operation.describe()}: {failure.error}")
            logger.info("=" * 70)
            log_checkpoint("sync_completed", summary, logger)

        return result

    # ========================================================================
    # CONNECTION / ORPHANS
    # ========================================================================

    def test_connection(self) -> Dict[str, Any]:
        """Check the handle can reach the database."""
        try:
            rows = self.handle.fetch_all(
                "SELECT version() AS version, current_database() AS db"
            )
            row = rows[0] if rows else {}
            return {
                "connected": True,
                "database": row.get("db"),
                "version": (row.get("version") or "")[:50],
            }
        except Exception as e:
            logger.error(f"Connection test failed: {e}")
            return {"connected": False, "error": str(e)}

    def detect_orphans(self) -> OrphanedSchemaElements:
        """Orphaned tables/columns for the current declared schema (read-only)."""
        return self.differ.detect_orphans(self.load_doctypes())

    def log_orphaned_warnings(self, orphans: OrphanedSchemaElements) -> None:
        """Operator-facing orphan report. Never mutates the schema."""
        if orphans.is_empty():
            logger.info("Schema is fully synchronized with doctypes (no orphans)")
            return

        if orphans.orphaned_tables:
            names = ", ".join(t.name for t in orphans.orphaned_tables)
            logger.warning(
                f"Orphaned tables ({len(orphans.orphaned_tables)}) with no doctype: {names}"
            )

        if orphans.orphaned_columns:
            names = ", ".join(f"{c.table}.{c.column}" for c in orphans.orphaned_columns)
            logger.warning(
                f"Orphaned columns ({len(orphans.orphaned_columns)}) with no field: {names}"
            )

    # ========================================================================
    # MAINTENANCE
    # ========================================================================

    def make_all_columns_nullable(self, dry_run: bool = False) -> NullabilityResult:
        """
        Drop NOT NULL from every non-primary-key column of every non-system table.

        Each statement stands alone; failures are logged and collected.
        """
        result = NullabilityResult()
        schema = self.defaults.schema_name

        logger.info(f"Making all columns nullable in schema {schema}"
                    f"{' (DRY RUN)' if dry_run else ''}")

        for table in self.catalog.list_tables():
            for column in self.catalog.get_not_null_columns(table):
                target = f"{table.name}.{column}"
                stmt = ColumnBuilder.drop_not_null(schema, table.name, column)

                if dry_run:
                    logger.info(f"   [DRY RUN] {self.handle.render(stmt)}")
                    result.altered.append(target)
                    continue

                try:
                    self.handle.execute(stmt)
                    result.altered.append(target)
                except Exception as e:
                    logger.error(f"Failed to make {target} nullable: {e}")
                    result.errors.append(f"{target}: {e}")

        logger.info(f"Made {len(result.altered)} columns nullable ({len(result.errors)} errors)")
        return result


# ============================================================================
# CONVENIENCE FUNCTION
# ============================================================================

def sync_schema(
    destructive: bool = False,
    dry_run: bool = False,
    doctypes_dir: Optional[str] = None,
    connection_string: Optional[str] = None,
    defaults: Optional[SyncDefaults] = None,
) -> SyncResult:
    """
    Run one schema sync with repository, session and doctype source built
    from configuration.

    Convenience function for deployment scripts.

    Args:
        destructive: Also drop undeclared tables, columns and constraints
        dry_run: Render SQL without executing
        doctypes_dir: Override the doctypes directory
        connection_string: Override the database connection
        defaults: Override sync settings

    Returns:
        SyncResult with detailed results
    """
    from infrastructure.postgresql import PostgreSQLRepository
    from services.doctype_service import DoctypeService

    sync_defaults = defaults or get_defaults().sync
    source = DoctypeService(
        doctypes_dir or sync_defaults.doctypes_dir,
        include_standard_fields=sync_defaults.include_standard_fields,
    )

    repo = PostgreSQLRepository(connection_string=connection_string)
    with repo.session() as handle:
        synchronizer = SchemaSynchronizer(source, handle, defaults=sync_defaults)
        return synchronizer.run(destructive=destructive, dry_run=dry_run)


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "SchemaSynchronizer",
    "SyncResult",
    "NullabilityResult",
    "sync_schema",
]
