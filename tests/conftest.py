"""Shared fixtures: small SQLite databases and an audit log in tmp_path."""
from __future__ import annotations

import os
import sqlite3
from pathlib import Path

import pytest

from dbauditor.config import ConnectionConfig
from dbauditor.storage.audit_log import AuditRecorder

SHOP_SCHEMA = """
CREATE TABLE customers (
    id INTEGER PRIMARY KEY,
    name TEXT NOT NULL,
    rowguid TEXT
);
CREATE TABLE orders (
    id INTEGER PRIMARY KEY,
    customer_id INTEGER REFERENCES customers(id) ON DELETE CASCADE,
    ProductId INTEGER,
    note TEXT
);
CREATE TABLE order_lines (
    id INTEGER PRIMARY KEY,
    order_id INTEGER REFERENCES orders(id),
    sku TEXT UNIQUE
);
INSERT INTO customers (id, name, rowguid) VALUES (1, 'Ada', 'a1'), (2, 'Linus', 'b2');
INSERT INTO orders (id, customer_id, ProductId, note) VALUES (10, 1, 7, NULL), (11, 2, 8, 'gift');
INSERT INTO order_lines (id, order_id, sku) VALUES (100, 10, 'SKU-1'), (101, 11, 'SKU-2');
"""

READINGS_SCHEMA = """
CREATE TABLE readings (
    id INTEGER PRIMARY KEY,
    code TEXT,
    label TEXT
);
INSERT INTO readings (id, code, label) VALUES
    (1, '1', 'a'),
    (2, '2', 'b'),
    (3, '2', 'c'),
    (4, '3', NULL),
    (5, '3', 'e'),
    (6, '3', 'f');
"""


def _build(path: Path, script: str) -> Path:
    conn = sqlite3.connect(path)
    try:
        conn.executescript(script)
        conn.commit()
    finally:
        conn.close()
    return path


@pytest.fixture
def shop_db(tmp_path) -> Path:
    return _build(tmp_path / "shop.db", SHOP_SCHEMA)


@pytest.fixture
def readings_db(tmp_path) -> Path:
    return _build(tmp_path / "readings.db", READINGS_SCHEMA)


@pytest.fixture
def shop_config(shop_db) -> ConnectionConfig:
    return ConnectionConfig(dialect="sqlite", database=str(shop_db))


@pytest.fixture
def unreachable_config(tmp_path) -> ConnectionConfig:
    return ConnectionConfig(dialect="sqlite", database=str(tmp_path / "missing" / "dir" / "x.db"))


@pytest.fixture
def recorder(tmp_path) -> AuditRecorder:
    return AuditRecorder(tmp_path / "logs" / "audit.log")


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    """Run with no DBAUDITOR_ variables and no .env file in reach.

    Variables a test loads from a .env file are removed afterwards too.
    """
    for key in list(os.environ):
        if key.startswith("DBAUDITOR_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)
    yield monkeypatch
    for key in list(os.environ):
        if key.startswith("DBAUDITOR_"):
            del os.environ[key]
