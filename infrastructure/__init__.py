# ============================================================================
# INFRASTRUCTURE MODULE
# ============================================================================
# STATUS: Infrastructure - Database access and sync orchestration
# PURPOSE: Connections, catalog introspection, DDL application, sync runs
# ============================================================================
"""
Infrastructure module for schema synchronization.

Provides:
- PostgreSQLRepository: Connections and the per-run session handle
- CatalogReader: information_schema introspection
- SchemaExecutor: Continue-on-error DDL application
- SchemaSynchronizer: One sync run (doctypes -> diff -> plan -> apply)
- sync_schema: Convenience function for deployment

Usage:
    from infrastructure import PostgreSQLRepository, SchemaSynchronizer

    repo = PostgreSQLRepository()
    with repo.session() as handle:
        result = SchemaSynchronizer(doctype_source, handle).run()
"""

from infrastructure.postgresql import (
    PostgreSQLRepository,
    PostgreSQLSession,
)
from infrastructure.catalog import CatalogReader
from infrastructure.executor import (
    OperationResult,
    SchemaExecutor,
)
from infrastructure.schema_synchronizer import (
    NullabilityResult,
    SchemaSynchronizer,
    SyncResult,
    sync_schema,
)

__all__ = [
    # PostgreSQL
    'PostgreSQLRepository',
    'PostgreSQLSession',
    # Catalog
    'CatalogReader',
    # Execution
    'OperationResult',
    'SchemaExecutor',
    # Synchronization
    'SchemaSynchronizer',
    'SyncResult',
    'NullabilityResult',
    'sync_schema',
]
