#!/usr/bin/env python
# ============================================================================
# SCHEMA SYNC SCRIPT
# ============================================================================
# PURPOSE: Synchronize the PostgreSQL schema with declared doctypes
# USAGE:
#   python scripts/sync_schema.py --dry-run             # Preview SQL
#   python scripts/sync_schema.py                       # Additive sync
#   python scripts/sync_schema.py --apply-destructive   # Also drop undeclared elements
#   python scripts/sync_schema.py --orphans             # Report orphans only
# ============================================================================

import sys
import os
import argparse
import json
from dataclasses import replace

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import psycopg

from __version__ import __version__
from core.config import get_defaults
from core.errors import DoctypeDefinitionError
from core.logging import ComponentType, configure_logging, get_logger
from infrastructure import PostgreSQLRepository, SchemaSynchronizer
from services import DoctypeService

logger = get_logger("scripts.sync_schema", ComponentType.CLI)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Synchronize PostgreSQL schema with doctype definitions",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python scripts/sync_schema.py --dry-run              # Preview DDL without executing
  python scripts/sync_schema.py                        # Add missing tables/columns/constraints
  python scripts/sync_schema.py --apply-destructive    # Also drop undeclared elements
  python scripts/sync_schema.py --orphans              # List undeclared tables/columns
  python scripts/sync_schema.py --make-nullable        # Drop NOT NULL from all columns

Environment Variables:
  DATABASE_URL                   Full PostgreSQL connection string
  POSTGRES_HOST                  Database host
  POSTGRES_DB                    Database name
  POSTGRES_USER                  Database user (default: postgres)
  POSTGRES_PASSWORD              Database password
  POSTGRES_PORT                  Database port (default: 5432)
  POSTGRES_SSLMODE               SSL mode (default: prefer)
  SYNC_DB_SCHEMA                 Target schema (default: public)
  SYNC_DOCTYPES_DIR              Doctype YAML directory (default: project doctypes/)
  SYNC_ENFORCE_NOT_NULL          Carry required flags into NOT NULL (default: false)
  SYNC_SYSTEM_PREFIXES           Ignored table prefixes (default: _,pg_)
  SYNC_INCLUDE_STANDARD_FIELDS   Add id/owner/created_at/... fields (default: true)
  LOG_FORMAT                     Set to "json" for structured logs
        """
    )
    parser.add_argument(
        "--apply-destructive",
        action="store_true",
        help="Drop tables, columns and unique constraints that are not declared"
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print DDL without executing"
    )
    parser.add_argument(
        "--orphans",
        action="store_true",
        help="Only report orphaned tables and columns"
    )
    parser.add_argument(
        "--make-nullable",
        action="store_true",
        help="Drop NOT NULL from every non-primary-key column"
    )
    parser.add_argument(
        "--doctypes-dir",
        type=str,
        help="Directory containing doctype YAML files (overrides environment)"
    )
    parser.add_argument(
        "--schema",
        type=str,
        help="Target PostgreSQL schema (overrides environment)"
    )
    parser.add_argument(
        "--connection",
        type=str,
        help="PostgreSQL connection string (overrides environment)"
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print the result as JSON"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose logging"
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}"
    )
    return parser


def _print_sync_result(result, verbose: bool) -> None:
    print("\n[RESULTS]\n")

    summary = result.to_dict()["summary"]
    for name, count in summary["changes"].items():
        if count:
            print(f"  {name}: {count}")

    if summary["destructive_changes"]:
        verb = "planned" if result.dry_run else "applied"
        print(f"\n⚠️  Destructive changes {verb} (tables, columns or constraints removed)")

    for op_result in result.operations:
        status_emoji = {
            "success": "✅",
            "failed": "❌",
            "skipped": "⏭️"
        }.get(op_result.status.value, "❓")

        print(f"{status_emoji} {op_result.operation.describe()}: {op_result.message}")
        if op_result.error:
            print(f"   Error: {op_result.error}")
        if verbose or result.dry_run:
            for stmt in op_result.statements:
                print(f"   {stmt}")

    if not result.operations:
        print("Schema is up to date, nothing to do.")

    print("\n" + "=" * 70)
    print(
        f"Operations: {summary['successful']} succeeded, "
        f"{summary['failed']} failed, {summary['skipped']} skipped"
    )
    print("=" * 70)


def _print_orphans(orphans) -> None:
    print("\n[ORPHANS]\n")
    if orphans.is_empty():
        print("No orphaned tables or columns.")
        return
    for table in orphans.orphaned_tables:
        print(f"  table  {table.name} ({len(table.columns)} columns)")
    for column in orphans.orphaned_columns:
        print(f"  column {column.table}.{column.column} ({column.sql_type})")


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    # Keep stdout clean for --json output
    configure_logging(
        level="DEBUG" if args.verbose else "INFO",
        stream=sys.stderr if args.json else sys.stdout,
    )

    defaults = get_defaults()
    sync_defaults = defaults.sync
    if args.schema:
        sync_defaults = replace(sync_defaults, schema_name=args.schema)
    if args.doctypes_dir:
        sync_defaults = replace(sync_defaults, doctypes_dir=args.doctypes_dir)

    source = DoctypeService(
        sync_defaults.doctypes_dir,
        include_standard_fields=sync_defaults.include_standard_fields,
    )
    repo = PostgreSQLRepository(connection_string=args.connection, defaults=defaults.database)

    if not args.json:
        print("=" * 70)
        print("DOCTYPE SCHEMA SYNC")
        print("=" * 70)
        print(f"Target: {repo.target}")
        print(f"Schema: {sync_defaults.schema_name}")
        print(f"Doctypes: {source.doctypes_dir}")
        print("=" * 70)

    try:
        with repo.session() as handle:
            synchronizer = SchemaSynchronizer(source, handle, defaults=sync_defaults)

            if args.orphans:
                orphans = synchronizer.detect_orphans()
                synchronizer.log_orphaned_warnings(orphans)
                if args.json:
                    print(json.dumps(orphans.to_dict(), indent=2))
                else:
                    _print_orphans(orphans)
                return 0

            if args.make_nullable:
                nullable = synchronizer.make_all_columns_nullable(dry_run=args.dry_run)
                if args.json:
                    print(json.dumps(nullable.to_dict(), indent=2))
                else:
                    print(f"\nAltered {len(nullable.altered)} columns, {len(nullable.errors)} errors")
                    for error in nullable.errors:
                        print(f"   - {error}")
                return 0

            result = synchronizer.run(
                destructive=args.apply_destructive,
                dry_run=args.dry_run,
            )

    except DoctypeDefinitionError as e:
        logger.error(f"Cannot load doctypes: {e}")
        return 1
    except ValueError as e:
        logger.error(f"Configuration error: {e}")
        return 1
    except psycopg.Error as e:
        logger.error(f"Database connection failed: {e}")
        return 1

    if args.json:
        print(json.dumps(result.to_dict(), indent=2, default=str))
    else:
        _print_sync_result(result, verbose=args.verbose)

    # Failed operations are reported above; the run itself completed
    return 0


if __name__ == "__main__":
    sys.exit(main())
