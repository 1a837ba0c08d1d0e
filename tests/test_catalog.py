# ============================================================================
# CATALOG READER TESTS
# ============================================================================
# STATUS: Tests - information_schema introspection
# PURPOSE: Verify row grouping, system-table filtering and degradation
# ============================================================================
"""
Catalog Reader Tests

Run with:
    pytest tests/test_catalog.py -v
"""

from unittest.mock import MagicMock

from infrastructure.catalog import (
    COLUMNS_QUERY,
    TABLES_QUERY,
    UNIQUE_CONSTRAINTS_QUERY,
    CatalogReader,
)


def _make_handle(tables=None, columns=None, constraints=None, fail=None):
    """Handle answering the three catalog queries from canned rows."""
    responses = {
        TABLES_QUERY: tables or [],
        COLUMNS_QUERY: columns or [],
        UNIQUE_CONSTRAINTS_QUERY: constraints or [],
    }

    def fetch_all(query, params=None):
        if fail is not None and query == fail:
            raise RuntimeError("permission denied for schema")
        return responses[query]

    handle = MagicMock()
    handle.fetch_all.side_effect = fetch_all
    return handle


def _column_row(table, name, data_type, is_nullable="YES", is_primary_key=False):
    return {
        "table_name": table,
        "column_name": name,
        "data_type": data_type,
        "is_nullable": is_nullable,
        "is_primary_key": is_primary_key,
    }


class TestListTables:

    def test_tables_with_columns(self):
        handle = _make_handle(
            tables=[{"name": "Customer"}, {"name": "Invoice"}],
            columns=[
                _column_row("Customer", "id", "text", "NO", True),
                _column_row("Invoice", "id", "text"),
                _column_row("Invoice", "total", "double precision", "NO"),
            ],
        )

        tables = CatalogReader(handle).list_tables()

        assert [t.name for t in tables] == ["Customer", "Invoice"]
        invoice = tables[1].column_map()
        assert invoice["total"].sql_type == "double precision"
        assert invoice["total"].not_null is True
        assert invoice["id"].not_null is False
        assert tables[0].columns[0].primary_key is True

    def test_system_prefixes_excluded(self):
        handle = _make_handle(
            tables=[{"name": "_migrations"}, {"name": "pg_cache"}, {"name": "Invoice"}, {"name": "x_y"}],
            columns=[_column_row("_migrations", "id", "text"), _column_row("Invoice", "id", "text")],
        )

        tables = CatalogReader(handle).list_tables()

        assert [t.name for t in tables] == ["Invoice", "x_y"]

    def test_schema_passed_as_parameter(self):
        handle = _make_handle(tables=[{"name": "Invoice"}])
        CatalogReader(handle, schema_name="tenant_a").list_tables()
        handle.fetch_all.assert_any_call(TABLES_QUERY, ("tenant_a",))

    def test_tables_query_failure_degrades_to_empty(self):
        handle = _make_handle(fail=TABLES_QUERY)
        assert CatalogReader(handle).list_tables() == []

    def test_columns_query_failure_degrades_to_empty(self):
        handle = _make_handle(tables=[{"name": "Invoice"}], fail=COLUMNS_QUERY)
        assert CatalogReader(handle).list_tables() == []

    def test_not_null_columns_exclude_primary_key(self):
        handle = _make_handle(
            tables=[{"name": "Invoice"}],
            columns=[
                _column_row("Invoice", "id", "text", "NO", True),
                _column_row("Invoice", "total", "double precision", "NO"),
                _column_row("Invoice", "note", "text"),
            ],
        )
        assert CatalogReader(handle).get_not_null_columns("Invoice") == ["total"]

    def test_not_null_columns_unknown_table(self):
        handle = _make_handle(tables=[{"name": "Invoice"}])
        assert CatalogReader(handle).get_not_null_columns("Missing") == []

    def test_not_null_columns_from_listed_table_without_requery(self):
        handle = _make_handle(
            tables=[{"name": "Invoice"}],
            columns=[
                _column_row("Invoice", "id", "text", "NO", True),
                _column_row("Invoice", "total", "double precision", "NO"),
            ],
        )
        reader = CatalogReader(handle)
        (invoice,) = reader.list_tables()
        calls = handle.fetch_all.call_count

        assert reader.get_not_null_columns(invoice) == ["total"]
        assert handle.fetch_all.call_count == calls


class TestUniqueConstraints:

    def test_rows_grouped_per_constraint(self):
        handle = _make_handle(constraints=[
            {"name": "customer_email_key", "column_name": "email"},
            {"name": "idx_Customer_tax_unique", "column_name": "tax_id"},
            {"name": "idx_Customer_tax_unique", "column_name": "country"},
        ])

        constraints = CatalogReader(handle).get_unique_constraints("Customer")

        assert [(c.name, c.columns) for c in constraints] == [
            ("customer_email_key", ["email"]),
            ("idx_Customer_tax_unique", ["tax_id", "country"]),
        ]
        handle.fetch_all.assert_called_once_with(UNIQUE_CONSTRAINTS_QUERY, ("public", "Customer"))

    def test_failure_degrades_to_empty(self):
        handle = _make_handle(fail=UNIQUE_CONSTRAINTS_QUERY)
        assert CatalogReader(handle).get_unique_constraints("Customer") == []

    def test_find_name_by_column_set(self):
        handle = _make_handle(constraints=[
            {"name": "legacy_pair", "column_name": "country"},
            {"name": "legacy_pair", "column_name": "tax_id"},
        ])
        reader = CatalogReader(handle)

        assert reader.find_unique_constraint_name("Customer", ["tax_id", "country"]) == "legacy_pair"
        assert reader.find_unique_constraint_name("Customer", ["tax_id"]) is None

    def test_find_name_on_failure_is_none(self):
        handle = _make_handle(fail=UNIQUE_CONSTRAINTS_QUERY)
        assert CatalogReader(handle).find_unique_constraint_name("Customer", ["x"]) is None
