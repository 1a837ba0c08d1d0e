# ============================================================================
# SCHEMA EXECUTOR
# ============================================================================
# STATUS: Infrastructure - DDL application
# PURPOSE: Apply planned operations one at a time, collecting a result for each
# ============================================================================
"""
Schema Executor

Applies a planned operation list sequentially on the run's handle.

There is no transaction spanning the batch. Each operation catches its own
failure, logs it, records it as a failed OperationResult and the executor
moves on to the next one. A UNIQUE constraint rejected by duplicate data
must not stop the remaining additions from landing.

Usage:
    executor = SchemaExecutor(handle, catalog, schema_name="public")
    results = executor.apply(operations)
    failed = [r for r in results if r.status == OperationStatus.FAILED]

    # Render SQL only
    executor = SchemaExecutor(handle, catalog, dry_run=True)
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from core.contracts import OperationStatus, OperationType
from core.logging import ComponentType, get_logger, log_context, log_duration
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
from core.schema.ddl_utils import ColumnBuilder, ConstraintBuilder, TableBuilder
from core.schema.type_mapper import needs_explicit_cast

logger = get_logger(__name__, ComponentType.EXECUTOR)


# ============================================================================
# DATA CLASSES
# ============================================================================

@dataclass
class OperationResult:
    """Result of applying a single operation."""
    operation: Operation
    status: OperationStatus
    message: str = ""
    error: Optional[str] = None
    statements: List[str] = field(default_factory=list)
    duration_ms: Optional[float] = None

    @property
    def kind(self) -> OperationType:
        return self.operation.kind

    @property
    def table(self) -> str:
        return self.operation.table

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "operation": self.operation.model_dump(mode="json"),
            "status": self.status.value,
            "message": self.message,
            "error": self.error,
            "statements": self.statements,
            "duration_ms": self.duration_ms,
        }


# ============================================================================
# EXECUTOR
# ============================================================================

class SchemaExecutor:
    """
    Sequential, continue-on-error DDL applier.

    The handle needs execute(query) and render(query). The catalog is only
    consulted to resolve physical constraint names before a removal.
    """

    def __init__(
        self,
        handle,
        catalog,
        schema_name: str = "public",
        enforce_not_null: bool = False,
        dry_run: bool = False,
    ):
        """
        Args:
            handle: Session handle for the run
            catalog: CatalogReader bound to the same handle
            schema_name: Schema holding the doctype tables
            enforce_not_null: Emit NOT NULL for required columns
            dry_run: Render statements without executing them
        """
        self.handle = handle
        self.catalog = catalog
        self.schema_name = schema_name
        self.enforce_not_null = enforce_not_null
        self.dry_run = dry_run

    def _handler_for(self, kind: OperationType) -> Callable[[Any], OperationResult]:
        return getattr(self, HANDLERS[kind])

    # =========================================================================
    # APPLY
    # =========================================================================

    def apply(self, operations: List[Operation]) -> List[OperationResult]:
        """
        Apply operations in the given order.

        Never raises for a failing operation; inspect the returned results.

        Returns:
            One OperationResult per operation, in order
        """
        results: List[OperationResult] = []
        total = len(operations)

        for i, operation in enumerate(operations, 1):
            with log_context(table=operation.table, operation=operation.kind.value):
                progress = logger.warning if operation.kind.is_destructive() else logger.info
                progress(f"[{i}/{total}] {operation.describe()}")
                with log_duration(logger, operation.describe()) as timing:
                    try:
                        result = self._handler_for(operation.kind)(operation)
                    except Exception as e:
                        logger.error(f"Operation failed ({operation.describe()}): {e}")
                        result = OperationResult(
                            operation=operation,
                            status=OperationStatus.FAILED,
                            message=f"Failed: {operation.describe()}",
                            error=str(e),
                        )
                result.duration_ms = timing["duration_ms"]
                results.append(result)

        failed = len([r for r in results if r.status == OperationStatus.FAILED])
        if failed:
            logger.warning(f"{failed} of {total} operations failed")
        return results

    def _run(self, operation: Operation, statements: List, message: str) -> OperationResult:
        """Execute (or render) statements for one operation, stopping at its first failure."""
        result = OperationResult(operation=operation, status=OperationStatus.SUCCESS, message=message)

        for stmt in statements:
            rendered = self._render(stmt)
            result.statements.append(rendered)

            if self.dry_run:
                logger.info(f"   [DRY RUN] {rendered}")
                continue

            try:
                self.handle.execute(stmt)
            except Exception as e:
                logger.error(f"   Statement failed: {rendered}: {e}")
                result.status = OperationStatus.FAILED
                result.error = str(e)
                result.message = f"Failed: {message}"
                return result

        if self.dry_run:
            result.status = OperationStatus.SKIPPED
            result.message = f"[DRY RUN] {message}"
        return result

    def _render(self, stmt) -> str:
        try:
            return self.handle.render(stmt)
        except Exception:
            return str(stmt)

    # =========================================================================
    # HANDLERS
    # =========================================================================

    def _create_table(self, op: CreateTableOperation) -> OperationResult:
        statements = [
            TableBuilder.create(self.schema_name, op.table, op.columns, self.enforce_not_null)
        ]
        for constraint in op.unique_constraints:
            statements.append(
                ConstraintBuilder.add_unique(self.schema_name, op.table, constraint.columns)
            )
        return self._run(op, statements, f"Created table {op.table}")

    def _drop_table(self, op: DropTableOperation) -> OperationResult:
        stmt = TableBuilder.drop(self.schema_name, op.table)
        return self._run(op, [stmt], f"Dropped table {op.table}")

    def _add_column(self, op: AddColumnOperation) -> OperationResult:
        stmt = ColumnBuilder.add(
            self.schema_name,
            op.table,
            op.column,
            op.sql_type,
            not_null=self.enforce_not_null and op.not_null,
        )
        return self._run(op, [stmt], f"Added column {op.table}.{op.column}")

    def _remove_column(self, op: RemoveColumnOperation) -> OperationResult:
        stmt = ColumnBuilder.drop(self.schema_name, op.table, op.column)
        return self._run(op, [stmt], f"Removed column {op.table}.{op.column}")

    def _modify_column(self, op: ModifyColumnOperation) -> OperationResult:
        statements = []
        if op.type_changed:
            with_cast = needs_explicit_cast(op.old_type, op.new_type)
            statements.append(ColumnBuilder.alter_type(
                self.schema_name, op.table, op.column, op.new_type, with_cast=with_cast
            ))
        if op.new_not_null is True:
            statements.append(ColumnBuilder.set_not_null(self.schema_name, op.table, op.column))
        elif op.new_not_null is False:
            statements.append(ColumnBuilder.drop_not_null(self.schema_name, op.table, op.column))
        return self._run(op, statements, f"Modified column {op.table}.{op.column}")

    def _add_unique_constraint(self, op: AddUniqueConstraintOperation) -> OperationResult:
        stmt = ConstraintBuilder.add_unique(self.schema_name, op.table, op.columns)
        return self._run(op, [stmt], f"Added unique constraint on {op.table} ({', '.join(op.columns)})")

    def _remove_unique_constraint(self, op: RemoveUniqueConstraintOperation) -> OperationResult:
        name = self.catalog.find_unique_constraint_name(op.table, op.columns)
        if name is None:
            logger.info(f"   No unique constraint on {op.table} ({', '.join(op.columns)}), nothing to drop")
            return OperationResult(
                operation=op,
                status=OperationStatus.SUCCESS,
                message="no matching constraint",
            )
        stmt = ConstraintBuilder.drop(self.schema_name, op.table, name)
        return self._run(op, [stmt], f"Removed unique constraint {name} from {op.table}")


# Dispatch table: every OperationType must have a handler method
HANDLERS: Dict[OperationType, str] = {
    OperationType.CREATE_TABLE: "_create_table",
    OperationType.DROP_TABLE: "_drop_table",
    OperationType.ADD_COLUMN: "_add_column",
    OperationType.REMOVE_COLUMN: "_remove_column",
    OperationType.MODIFY_COLUMN: "_modify_column",
    OperationType.ADD_UNIQUE_CONSTRAINT: "_add_unique_constraint",
    OperationType.REMOVE_UNIQUE_CONSTRAINT: "_remove_unique_constraint",
}


def _check_handlers() -> None:
    missing = [t.value for t in OperationType if not hasattr(SchemaExecutor, HANDLERS.get(t, ""))]
    if missing:
        raise NotImplementedError(f"No executor handler for operation kinds: {missing}")


_check_handlers()


__all__ = ["OperationResult", "SchemaExecutor", "HANDLERS"]
