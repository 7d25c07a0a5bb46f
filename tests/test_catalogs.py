from __future__ import annotations

import pytest

from dbauditor.config import ConnectionConfig, ConnectionOptions
from dbauditor.core.exceptions import ConfigurationError
from dbauditor.core.models import ReferentialAction
from dbauditor.infra.db.catalogs import (
    MssqlCatalog,
    PostgresqlCatalog,
    SqliteCatalog,
    get_catalog,
    supported_dialects,
)
from dbauditor.infra.db.connection import open_connection


def test_registry():
    assert supported_dialects() == ("mssql", "postgresql", "sqlite")
    assert isinstance(get_catalog("mssql"), MssqlCatalog)
    assert get_catalog("postgresql", "sales").schema == "sales"
    with pytest.raises(ConfigurationError):
        get_catalog("db2")


def test_default_schemas():
    assert MssqlCatalog().schema == "dbo"
    assert PostgresqlCatalog().schema == "public"
    assert SqliteCatalog().schema == "main"


def test_identifier_quoting():
    assert MssqlCatalog().quote_table("Order]s") == "[dbo].[Order]]s]"
    assert PostgresqlCatalog("sales").quote_table('odd"name') == '"sales"."odd""name"'
    assert SqliteCatalog().quote_table("orders") == '"orders"'


def test_mssql_url_carries_transport_options():
    config = ConnectionConfig(
        server="db01",
        database="Sales",
        user="sa",
        password="secret",
        options=ConnectionOptions(encrypt=False, trust_server_certificate=True),
    )
    url = MssqlCatalog().build_url(config)
    assert url.drivername == "mssql+pyodbc"
    assert (url.host, url.database, url.username) == ("db01", "Sales", "sa")
    assert url.query["Encrypt"] == "no"
    assert url.query["TrustServerCertificate"] == "yes"
    assert url.query["driver"] == "ODBC Driver 18 for SQL Server"
    assert MssqlCatalog().connect_args(config) == {"timeout": 15}


def test_sqlite_url_opens_read_only(tmp_path):
    config = ConnectionConfig(dialect="sqlite", database=str(tmp_path / "shop.db"))
    url = SqliteCatalog().build_url(config)
    assert url.database == (tmp_path / "shop.db").as_uri()
    assert url.query["mode"] == "ro"
    assert url.query["uri"] == "true"


@pytest.mark.parametrize(
    "encrypt, trust, sslmode",
    [(False, True, "disable"), (True, True, "require"), (True, False, "verify-full")],
)
def test_postgresql_sslmode(encrypt, trust, sslmode):
    config = ConnectionConfig(
        dialect="postgresql",
        server="pg01",
        database="sales",
        options=ConnectionOptions(encrypt=encrypt, trust_server_certificate=trust, query_timeout_s=5),
    )
    catalog = PostgresqlCatalog()
    assert catalog.build_url(config).query["sslmode"] == sslmode
    assert catalog.connect_args(config)["options"] == "-c statement_timeout=5000"


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("NO_ACTION", ReferentialAction.NO_ACTION),
        ("NO ACTION", ReferentialAction.NO_ACTION),
        ("RESTRICT", ReferentialAction.NO_ACTION),
        ("CASCADE", ReferentialAction.CASCADE),
        ("set null", ReferentialAction.SET_NULL),
        ("SET_DEFAULT", ReferentialAction.SET_DEFAULT),
        ("", ReferentialAction.UNKNOWN),
        (None, ReferentialAction.UNKNOWN),
        ("SOMETHING ELSE", ReferentialAction.UNKNOWN),
    ],
)
def test_referential_action_normalization(raw, expected):
    assert ReferentialAction.from_catalog(raw) is expected


def test_sqlite_catalog_reads_metadata(shop_config):
    catalog = SqliteCatalog()
    with open_connection(shop_config, catalog) as conn:
        assert catalog.list_tables(conn) == ["customers", "order_lines", "orders"]

        columns = catalog.list_columns(conn, "customers")
        assert [(c.column, c.nullable) for c in columns] == [
            ("id", True),
            ("name", False),
            ("rowguid", True),
        ]

        fks = catalog.list_foreign_keys(conn)
        assert [(fk.table, fk.column, fk.referenced_table) for fk in fks] == [
            ("order_lines", "order_id", "orders"),
            ("orders", "customer_id", "customers"),
        ]
        assert fks[1].on_delete is ReferentialAction.CASCADE
        assert fks[1].on_update is ReferentialAction.NO_ACTION

        unique = catalog.list_unique_index_columns(conn, "order_lines")
        assert [u.column for u in unique] == ["id", "sku"]

        assert catalog.count_nulls(conn, "orders", "note") == 1
        assert catalog.count_duplicate_groups(conn, "orders", "customer_id") == 0
