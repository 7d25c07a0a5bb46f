from __future__ import annotations

import re

import pytest

from dbauditor.core.exceptions import LogReadError
from dbauditor.core.models import AuditLogEntry, MissingForeignKey, NullViolation
from dbauditor.storage.audit_log import ENTRY_SEPARATOR, AuditRecorder


def test_missing_log_reads_as_empty(tmp_path):
    recorder = AuditRecorder(tmp_path / "never-written.log")
    assert recorder.read_all() == []
    assert recorder.read_blocks() == []


def test_record_appends_entries_in_order(recorder):
    recorder.record("REFERENTIAL_INTEGRITY", "Check completed. Found 1 potential issues", [
        MissingForeignKey(table="orders", column="ProductId", data_type="int"),
    ])
    recorder.record("DATA_ANOMALIES", "Check completed. Found 0 anomalies")

    text = recorder.path.read_text(encoding="utf-8")
    assert text.count(ENTRY_SEPARATOR) == 2
    assert re.match(r"^\[\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}\.\d{3}Z\] REFERENTIAL_INTEGRITY: ", text)
    assert "\n  - Table: orders, Column: ProductId, Possible foreign key without constraint\n" in text

    entries = recorder.read_all()
    assert [entry.kind for entry in entries] == ["REFERENTIAL_INTEGRITY", "DATA_ANOMALIES"]
    assert entries[1].detail_lines == ()


def test_details_can_be_left_out(tmp_path):
    recorder = AuditRecorder(tmp_path / "audit.log", include_details=False)
    entry = recorder.record("DATA_ANOMALIES", "Check completed. Found 1 anomalies", [
        NullViolation(table="t", column="c", count=4),
    ])
    assert entry.detail_lines == ()
    assert recorder.read_blocks() == [entry.render()]


def test_unwritable_sink_does_not_raise(tmp_path):
    # the path is a directory, so appending fails
    recorder = AuditRecorder(tmp_path)
    assert recorder.record("ERROR", "boom") is None


def test_undecodable_log_raises_read_error(tmp_path):
    path = tmp_path / "audit.log"
    path.write_bytes(b"\xff\xfe\xfa not utf-8")
    with pytest.raises(LogReadError):
        AuditRecorder(path).read_all()


def test_entry_render_and_parse():
    entry = AuditLogEntry(
        timestamp="2025-01-31T10:00:00.000Z",
        kind="DATA_ANOMALIES",
        summary_line="Check completed.\nFound 1 anomalies",
        detail_lines=("Table: Orders, Column: Id, Type: DUPLICATES, Count: 2",),
    )
    rendered = entry.render()
    assert rendered == (
        "[2025-01-31T10:00:00.000Z] DATA_ANOMALIES: Check completed. Found 1 anomalies\n"
        "  - Table: Orders, Column: Id, Type: DUPLICATES, Count: 2"
    )

    parsed = AuditLogEntry.parse(rendered)
    assert parsed.timestamp == entry.timestamp
    assert parsed.kind == "DATA_ANOMALIES"
    assert parsed.summary_line == "Check completed. Found 1 anomalies"
    assert parsed.detail_lines == entry.detail_lines


def test_parse_keeps_unrecognised_blocks():
    parsed = AuditLogEntry.parse("hand-written note\n  - extra")
    assert parsed.kind == "UNKNOWN"
    assert parsed.summary_line == "hand-written note"
    assert parsed.detail_lines == ("extra",)
