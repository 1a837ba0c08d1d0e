# ============================================================================
# SCHEMA EXECUTOR TESTS
# ============================================================================
# STATUS: Tests - DDL application
# PURPOSE: Verify statements, cast clauses, constraint resolution,
#          continue-on-error and dry run
# ============================================================================
"""
Schema Executor Tests

Statements are psycopg.sql.Composed objects; their repr lists every SQL
fragment and identifier, which is what the assertions look at.

Run with:
    pytest tests/test_executor.py -v
"""

import logging
from unittest.mock import MagicMock

from core.contracts import OperationStatus, OperationType
from core.models import Column, UniqueConstraint
from core.models.operations import (
    AddColumnOperation,
    AddUniqueConstraintOperation,
    CreateTableOperation,
    DropTableOperation,
    ModifyColumnOperation,
    RemoveColumnOperation,
    RemoveUniqueConstraintOperation,
)
from infrastructure.executor import HANDLERS, SchemaExecutor


def _make_handle(fail_on=None):
    """Handle recording executed statements; raises for statements containing fail_on."""
    handle = MagicMock()
    handle.executed = []

    def execute(stmt, params=None):
        text = str(stmt)
        if fail_on and fail_on in text:
            raise RuntimeError(f"could not execute: {fail_on}")
        handle.executed.append(text)

    handle.execute.side_effect = execute
    handle.render.side_effect = lambda stmt: str(stmt)
    return handle


def _make_executor(handle=None, catalog=None, **kwargs):
    return SchemaExecutor(handle or _make_handle(), catalog or MagicMock(), **kwargs)


class TestDispatch:

    def test_every_operation_kind_has_handler(self):
        for kind in OperationType:
            assert hasattr(SchemaExecutor, HANDLERS[kind])


class TestStatements:

    def test_create_table_then_unique_constraints(self):
        handle = _make_handle()
        op = CreateTableOperation(
            table="Invoice",
            columns=[
                Column(name="id", sql_type="TEXT"),
                Column(name="total", sql_type="FLOAT"),
                Column(name="lines", sql_type="NULL"),
            ],
            unique_constraints=[UniqueConstraint(name="idx_Invoice_total_unique", columns=["total"])],
        )

        results = _make_executor(handle).apply([op])

        assert results[0].status == OperationStatus.SUCCESS
        assert len(handle.executed) == 2
        create, unique = handle.executed
        assert "CREATE TABLE IF NOT EXISTS" in create
        assert "DOUBLE PRECISION" in create
        assert "Identifier('lines')" not in create
        assert "ADD CONSTRAINT" in unique
        assert "Identifier('idx_Invoice_total_unique')" in unique

    def test_create_table_primary_key(self):
        handle = _make_handle()
        op = CreateTableOperation(
            table="Invoice",
            columns=[Column(name="id", sql_type="TEXT", primary_key=True)],
        )
        _make_executor(handle).apply([op])
        assert "PRIMARY KEY" in handle.executed[0]

    def test_drop_table_is_if_exists(self):
        handle = _make_handle()
        _make_executor(handle).apply([DropTableOperation(table="Old Report")])
        assert "DROP TABLE IF EXISTS" in handle.executed[0]
        assert "Identifier('Old Report')" in handle.executed[0]

    def test_add_column_not_null_only_when_enforced(self):
        op = AddColumnOperation(table="Invoice", column="total", sql_type="FLOAT", not_null=True)

        relaxed = _make_handle()
        _make_executor(relaxed).apply([op])
        assert "NOT NULL" not in relaxed.executed[0]

        strict = _make_handle()
        _make_executor(strict, enforce_not_null=True).apply([op])
        assert "NOT NULL" in strict.executed[0]

    def test_remove_column(self):
        handle = _make_handle()
        _make_executor(handle).apply([RemoveColumnOperation(table="Invoice", column="legacy_note")])
        assert "DROP COLUMN" in handle.executed[0]
        assert "Identifier('legacy_note')" in handle.executed[0]

    def test_schema_name_used(self):
        handle = _make_handle()
        _make_executor(handle, schema_name="tenant_a").apply([DropTableOperation(table="Invoice")])
        assert "Identifier('tenant_a')" in handle.executed[0]


class TestModifyColumn:

    def test_text_to_integer_uses_cast(self):
        handle = _make_handle()
        op = ModifyColumnOperation(table="Invoice", column="qty", old_type="text", new_type="INTEGER")

        _make_executor(handle).apply([op])

        stmt = handle.executed[0]
        assert "ALTER COLUMN" in stmt
        assert "USING" in stmt
        assert "SQL('integer')" in stmt

    def test_integer_to_float_casts_to_numeric(self):
        handle = _make_handle()
        op = ModifyColumnOperation(table="Invoice", column="total", old_type="integer", new_type="FLOAT")
        _make_executor(handle).apply([op])
        assert "SQL('numeric')" in handle.executed[0]

    def test_unknown_old_type_no_cast(self):
        handle = _make_handle()
        op = ModifyColumnOperation(table="Note", column="body", old_type="tsvector", new_type="TEXT")
        _make_executor(handle).apply([op])
        assert "USING" not in handle.executed[0]

    def test_nullability_only(self):
        handle = _make_handle()
        op = ModifyColumnOperation(
            table="Invoice", column="total", old_type="double precision", new_type="FLOAT",
            type_changed=False, new_not_null=True,
        )
        _make_executor(handle).apply([op])
        assert len(handle.executed) == 1
        assert "SET NOT NULL" in handle.executed[0]

    def test_drop_not_null(self):
        handle = _make_handle()
        op = ModifyColumnOperation(
            table="Invoice", column="total", old_type="integer", new_type="FLOAT",
            new_not_null=False,
        )
        _make_executor(handle).apply([op])
        assert len(handle.executed) == 2
        assert "DROP NOT NULL" in handle.executed[1]


class TestUniqueConstraints:

    def test_add_named_by_columns(self):
        handle = _make_handle()
        op = AddUniqueConstraintOperation(
            table="Customer", name="idx_Customer_tax_identity_unique", columns=["tax_id", "country"],
        )
        _make_executor(handle).apply([op])
        assert "Identifier('idx_Customer_tax_id_country_unique')" in handle.executed[0]

    def test_remove_resolves_physical_name(self):
        handle = _make_handle()
        catalog = MagicMock()
        catalog.find_unique_constraint_name.return_value = "customer_tax_key"
        op = RemoveUniqueConstraintOperation(
            table="Customer", name="idx_Customer_tax_unique", columns=["tax_id", "country"],
        )

        results = _make_executor(handle, catalog).apply([op])

        catalog.find_unique_constraint_name.assert_called_once_with("Customer", ["tax_id", "country"])
        assert "DROP CONSTRAINT" in handle.executed[0]
        assert "Identifier('customer_tax_key')" in handle.executed[0]
        assert results[0].status == OperationStatus.SUCCESS

    def test_remove_without_match_is_noop(self):
        handle = _make_handle()
        catalog = MagicMock()
        catalog.find_unique_constraint_name.return_value = None
        op = RemoveUniqueConstraintOperation(table="Customer", name="gone", columns=["x"])

        results = _make_executor(handle, catalog).apply([op])

        assert handle.executed == []
        assert results[0].status == OperationStatus.SUCCESS
        assert results[0].message == "no matching constraint"


class TestContinueOnError:

    def test_failure_does_not_stop_batch(self):
        handle = _make_handle(fail_on="ADD CONSTRAINT")
        operations = [
            AddUniqueConstraintOperation(table="Invoice", name="u", columns=["total"]),
            AddColumnOperation(table="Invoice", column="note", sql_type="TEXT"),
        ]

        results = _make_executor(handle).apply(operations)

        assert [r.status for r in results] == [OperationStatus.FAILED, OperationStatus.SUCCESS]
        assert "could not execute" in results[0].error
        assert len(handle.executed) == 1

    def test_create_table_constraint_failure_reported(self):
        handle = _make_handle(fail_on="ADD CONSTRAINT")
        op = CreateTableOperation(
            table="Invoice",
            columns=[Column(name="total", sql_type="FLOAT")],
            unique_constraints=[UniqueConstraint(name="u", columns=["total"])],
        )

        result = _make_executor(handle).apply([op])[0]

        assert result.status == OperationStatus.FAILED
        assert len(result.statements) == 2

    def test_catalog_error_captured(self):
        catalog = MagicMock()
        catalog.find_unique_constraint_name.side_effect = RuntimeError("catalog down")
        op = RemoveUniqueConstraintOperation(table="Customer", name="u", columns=["x"])

        result = _make_executor(catalog=catalog).apply([op])[0]

        assert result.status == OperationStatus.FAILED
        assert result.error == "catalog down"


class TestDryRun:

    def test_renders_without_executing(self):
        handle = _make_handle()
        operations = [
            DropTableOperation(table="Old Report"),
            AddColumnOperation(table="Invoice", column="note", sql_type="TEXT"),
        ]

        results = _make_executor(handle, dry_run=True).apply(operations)

        handle.execute.assert_not_called()
        assert all(r.status == OperationStatus.SKIPPED for r in results)
        assert "DROP TABLE IF EXISTS" in results[0].statements[0]
        assert results[0].message.startswith("[DRY RUN]")

    def test_to_dict(self):
        result = _make_executor(dry_run=True).apply([DropTableOperation(table="X")])[0]
        data = result.to_dict()
        assert data["status"] == "skipped"
        assert data["operation"]["kind"] == "dropTable"
        assert data["operation"]["table"] == "X"
        assert data["duration_ms"] is not None


class TestProgressLogging:

    def test_destructive_operations_logged_as_warnings(self, caplog):
        caplog.set_level(logging.INFO)
        _make_executor().apply([
            AddColumnOperation(table="Invoice", column="total", sql_type="FLOAT"),
            DropTableOperation(table="Legacy"),
        ])

        progress = {r.getMessage(): r.levelno for r in caplog.records if r.getMessage().startswith("[")}
        assert progress["[1/2] " + AddColumnOperation(table="Invoice", column="total", sql_type="FLOAT").describe()] == logging.INFO
        assert progress["[2/2] " + DropTableOperation(table="Legacy").describe()] == logging.WARNING
