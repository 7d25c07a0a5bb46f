from __future__ import annotations

import sqlite3

import pytest

from dbauditor.analyzers import (
    ConstraintActionAnalyzer,
    DataAnomalyAnalyzer,
    ReferentialIntegrityAnalyzer,
    looks_like_foreign_key,
)
from dbauditor.analyzers.constraints import classify, distinct_constraints
from dbauditor.analyzers.referential import to_findings
from dbauditor.config import ConnectionConfig, ConnectionOptions
from dbauditor.core.exceptions import CatalogQueryError, DatabaseConnectionError
from dbauditor.core.models import (
    ColumnDescriptor,
    DuplicateViolation,
    ForeignKeyConstraint,
    NullViolation,
    ReferentialAction,
    UniqueIndexColumn,
)
from dbauditor.infra.db.catalogs import SqliteCatalog
from dbauditor.infra.db.connection import open_connection


@pytest.mark.parametrize(
    "name, expected",
    [
        ("customer_id", True),
        ("CustomerId", True),
        ("rowguid", True),
        ("ProductModelID", True),
        ("ProductCategoryID", True),
        ("ProductDescriptionID", True),
        ("id", False),
        ("CUSTOMER_ID", False),
        ("CustomerID", False),
        ("rowguid_copy", False),
        ("Name", False),
    ],
)
def test_foreign_key_name_heuristic(name, expected):
    assert looks_like_foreign_key(name) is expected


def test_to_findings_skips_enforced_and_sorts():
    candidates = [
        ColumnDescriptor(table="orders", column="ProductId", data_type="int", nullable=True),
        ColumnDescriptor(table="customers", column="rowguid", data_type="uuid", nullable=True),
        ColumnDescriptor(table="orders", column="customer_id", data_type="int", nullable=True),
    ]
    findings = to_findings(candidates, {("orders", "customer_id")})

    assert [(f.table, f.column) for f in findings] == [
        ("customers", "rowguid"),
        ("orders", "ProductId"),
    ]
    assert findings[0].to_dict() == {
        "table": "customers",
        "column": "rowguid",
        "dataType": "uuid",
        "suggestion": "Possible foreign key without constraint",
    }


def test_referential_integrity_on_sqlite(shop_config, recorder):
    catalog = SqliteCatalog()
    analyzer = ReferentialIntegrityAnalyzer(catalog, recorder)
    with open_connection(shop_config, catalog) as conn:
        first = analyzer.run(conn)
        second = analyzer.run(conn)

    assert [(f.table, f.column) for f in first] == [
        ("customers", "rowguid"),
        ("orders", "ProductId"),
    ]
    assert first == second

    entries = recorder.read_all()
    assert [entry.kind for entry in entries] == ["REFERENTIAL_INTEGRITY"] * 2
    assert entries[0].summary_line == "Check completed. Found 2 potential issues"
    assert entries[0].detail_lines == (
        "Table: customers, Column: rowguid, Possible foreign key without constraint",
        "Table: orders, Column: ProductId, Possible foreign key without constraint",
    )


def _fk(name="FK_Orders", on_delete=ReferentialAction.NO_ACTION, on_update=ReferentialAction.NO_ACTION, column="customer_id"):
    return ForeignKeyConstraint(
        name=name,
        table="orders",
        column=column,
        referenced_table="customers",
        on_delete=on_delete,
        on_update=on_update,
    )


def test_classify_flags_each_no_action():
    both = classify(_fk())
    assert [f.type for f in both] == ["DELETE_ACTION", "UPDATE_ACTION"]
    assert both[0].message == "Consider CASCADE or SET NULL for DELETE"
    assert both[1].message == "Consider CASCADE for UPDATE"

    only_update = classify(_fk(on_delete=ReferentialAction.CASCADE))
    assert len(only_update) == 1
    assert only_update[0].to_dict() == {
        "table": "orders",
        "constraintName": "FK_Orders",
        "action": "update",
        "message": "Consider CASCADE for UPDATE",
        "type": "UPDATE_ACTION",
    }

    only_delete = classify(_fk(on_update=ReferentialAction.CASCADE))
    assert len(only_delete) == 1
    assert only_delete[0].type == "DELETE_ACTION"
    assert only_delete[0].message == "Consider CASCADE or SET NULL for DELETE"

    assert classify(_fk(on_delete=ReferentialAction.SET_NULL, on_update=ReferentialAction.CASCADE)) == []


def test_composite_keys_are_reported_once():
    rows = [_fk(column="a"), _fk(column="b"), _fk(name="FK_Other")]
    assert [fk.name for fk in distinct_constraints(rows)] == ["FK_Orders", "FK_Other"]


def test_constraint_anomalies_on_sqlite(shop_config, recorder):
    catalog = SqliteCatalog()
    with open_connection(shop_config, catalog) as conn:
        findings = ConstraintActionAnalyzer(catalog, recorder).run(conn)

    assert [(f.table, f.constraint_name, f.type) for f in findings] == [
        ("order_lines", "fk_order_lines_0", "DELETE_ACTION"),
        ("order_lines", "fk_order_lines_0", "UPDATE_ACTION"),
        ("orders", "fk_orders_0", "UPDATE_ACTION"),
    ]
    entry = recorder.read_all()[-1]
    assert entry.kind == "CONSTRAINT_ANOMALIES"
    assert entry.detail_lines[0] == (
        "Table: order_lines, Constraint: fk_order_lines_0, Type: DELETE_ACTION, "
        "Consider CASCADE or SET NULL for DELETE"
    )


def test_clean_database_has_no_data_anomalies(shop_config, recorder):
    catalog = SqliteCatalog()
    with open_connection(shop_config, catalog) as conn:
        assert DataAnomalyAnalyzer(catalog, recorder).run(conn) == []
    assert recorder.read_all()[-1].summary_line == "Check completed. Found 0 anomalies"


class DriftedCatalog(SqliteCatalog):
    """Reports ``label`` as NOT NULL and ``code`` as uniquely indexed.

    SQLite enforces both, so the drift between catalog and data has to be
    simulated on the catalog side.
    """

    def list_columns(self, connection, table=None):
        return [
            column.model_copy(update={"nullable": False}) if column.column == "label" else column
            for column in super().list_columns(connection, table)
        ]

    def list_unique_index_columns(self, connection, table=None):
        columns = super().list_unique_index_columns(connection, table)
        return columns + [UniqueIndexColumn(table="readings", column="code")]


def test_data_anomalies_count_nulls_and_duplicated_values(readings_db, recorder):
    config = ConnectionConfig(dialect="sqlite", database=str(readings_db))
    catalog = DriftedCatalog()
    with open_connection(config, catalog) as conn:
        findings = DataAnomalyAnalyzer(catalog, recorder).run(conn)

    assert findings == [
        NullViolation(table="readings", column="label", count=1),
        DuplicateViolation(table="readings", column="code", count=2),
    ]
    assert recorder.read_all()[-1].detail_lines == (
        "Table: readings, Column: label, Type: NULL_VALUES, Count: 1",
        "Table: readings, Column: code, Type: DUPLICATES, Count: 2",
    )


class BrokenCatalog(SqliteCatalog):
    def list_tables(self, connection):
        return [row[0] for row in self._fetch_all(connection, "list_tables", "SELECT name FROM no_such_table")]


def test_failed_run_records_error_and_returns_nothing(shop_config, recorder):
    catalog = BrokenCatalog()
    analyzer = DataAnomalyAnalyzer(catalog, recorder)
    with open_connection(shop_config, catalog) as conn:
        with pytest.raises(CatalogQueryError) as excinfo:
            analyzer.run(conn)

    assert excinfo.value.operation == "list_tables"
    assert "no such table" in excinfo.value.message
    entry = recorder.read_all()[-1]
    assert entry.kind == "ERROR"
    assert entry.summary_line == excinfo.value.message


def test_lock_wait_timeout_is_retryable(shop_db, recorder):
    config = ConnectionConfig(
        dialect="sqlite", database=str(shop_db), options=ConnectionOptions(query_timeout_s=1)
    )
    catalog = SqliteCatalog()
    writer = sqlite3.connect(shop_db, isolation_level=None)
    writer.execute("BEGIN EXCLUSIVE")
    try:
        with open_connection(config, catalog) as conn:
            with pytest.raises(DatabaseConnectionError) as excinfo:
                ReferentialIntegrityAnalyzer(catalog, recorder).run(conn)
    finally:
        writer.execute("ROLLBACK")
        writer.close()

    assert excinfo.value.retryable is True
    assert "database is locked" in excinfo.value.message
    assert excinfo.value.details["operation"] == "list_columns"
    entry = recorder.read_all()[-1]
    assert entry.kind == "ERROR"
    assert entry.summary_line == excinfo.value.message


def test_timeout_markers():
    catalog = SqliteCatalog()
    assert catalog.is_timeout("database is locked")
    assert catalog.is_timeout("Query Timed Out")
    assert not catalog.is_timeout("no such table: orders")
