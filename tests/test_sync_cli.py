# ============================================================================
# SYNC CLI TESTS
# ============================================================================
# STATUS: Tests - scripts/sync_schema.py
# PURPOSE: Verify argument handling and exit codes
# ============================================================================
"""
Sync CLI Tests

The repository and synchronizer are patched; no database is touched.

Run with:
    pytest tests/test_sync_cli.py -v
"""

import json
from contextlib import contextmanager
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from core.config import reset_defaults
from core.errors import DoctypeDefinitionError
from core.models import OrphanedSchemaElements, SchemaDiff, TableRemoval
from infrastructure.schema_synchronizer import NullabilityResult, SyncResult
from scripts import sync_schema


@pytest.fixture
def patched():
    """Patch repository + synchronizer classes used by the CLI."""
    repo = MagicMock()
    repo.target = "db/erp"

    @contextmanager
    def session():
        yield MagicMock()

    repo.session.side_effect = session
    synchronizer = MagicMock()
    synchronizer.run.return_value = SyncResult(schema_name="public", timestamp="now")

    with patch.object(sync_schema, "PostgreSQLRepository", return_value=repo), \
         patch.object(sync_schema, "SchemaSynchronizer", return_value=synchronizer) as sync_cls, \
         patch.object(sync_schema, "configure_logging"):
        yield repo, synchronizer, sync_cls


class TestArguments:

    def test_defaults(self):
        args = sync_schema.build_parser().parse_args([])
        assert not args.apply_destructive
        assert not args.dry_run
        assert args.schema is None

    def test_flags(self):
        args = sync_schema.build_parser().parse_args(
            ["--apply-destructive", "--dry-run", "--schema", "tenant_a", "-v"]
        )
        assert args.apply_destructive and args.dry_run and args.verbose
        assert args.schema == "tenant_a"


class TestMain:

    def test_sync_run(self, patched, tmp_path):
        _, synchronizer, sync_cls = patched

        code = sync_schema.main(["--doctypes-dir", str(tmp_path), "--schema", "tenant_a", "--dry-run"])

        assert code == 0
        synchronizer.run.assert_called_once_with(destructive=False, dry_run=True)
        defaults = sync_cls.call_args.kwargs["defaults"]
        assert defaults.schema_name == "tenant_a"
        assert defaults.doctypes_dir == str(tmp_path)

    def test_default_doctypes_dir_is_project_relative(self, patched, monkeypatch, tmp_path):
        _, _, sync_cls = patched
        monkeypatch.delenv("SYNC_DOCTYPES_DIR", raising=False)
        monkeypatch.chdir(tmp_path)
        reset_defaults()
        try:
            assert sync_schema.main([]) == 0
        finally:
            reset_defaults()

        source = sync_cls.call_args.args[0]
        expected = Path(sync_schema.__file__).resolve().parent.parent / "doctypes"
        assert source.doctypes_dir.resolve() == expected

    def test_failed_operations_still_exit_zero(self, patched):
        _, synchronizer, _ = patched
        failing = MagicMock()
        failing.status.value = "failed"
        synchronizer.run.return_value = MagicMock(operations=[failing], dry_run=False)

        with patch.object(sync_schema, "_print_sync_result"):
            assert sync_schema.main(["--apply-destructive"]) == 0

        synchronizer.run.assert_called_once_with(destructive=True, dry_run=False)

    def test_doctype_error_exits_one(self, patched):
        _, synchronizer, _ = patched
        synchronizer.run.side_effect = DoctypeDefinitionError("bad", source="x.yaml")
        assert sync_schema.main([]) == 1

    def test_missing_configuration_exits_one(self, patched):
        repo, _, _ = patched
        repo.session.side_effect = ValueError("Database connection not configured.")
        assert sync_schema.main([]) == 1

    def test_orphans_json(self, patched, capsys):
        _, synchronizer, _ = patched
        synchronizer.detect_orphans.return_value = OrphanedSchemaElements()

        assert sync_schema.main(["--orphans", "--json"]) == 0

        out = capsys.readouterr().out
        assert json.loads(out) == {"orphaned_tables": [], "orphaned_columns": []}
        synchronizer.run.assert_not_called()

    def test_make_nullable(self, patched, capsys):
        _, synchronizer, _ = patched
        synchronizer.make_all_columns_nullable.return_value = NullabilityResult(altered=["Invoice.total"])

        assert sync_schema.main(["--make-nullable", "--json"]) == 0

        assert json.loads(capsys.readouterr().out)["altered"] == ["Invoice.total"]
        synchronizer.make_all_columns_nullable.assert_called_once_with(dry_run=False)

    def test_destructive_changes_flagged_in_summary(self, patched, capsys):
        _, synchronizer, _ = patched
        diff = SchemaDiff()
        diff.tables.removed.append(TableRemoval(name="Legacy"))
        synchronizer.run.return_value = SyncResult(
            schema_name="public", timestamp="now", destructive=True, dry_run=True, diff=diff,
        )

        assert sync_schema.main(["--apply-destructive", "--dry-run"]) == 0

        out = capsys.readouterr().out
        assert "tables_removed: 1" in out
        assert "Destructive changes planned" in out

    def test_additive_run_not_flagged(self, patched, capsys):
        assert sync_schema.main([]) == 0
        assert "Destructive changes" not in capsys.readouterr().out
