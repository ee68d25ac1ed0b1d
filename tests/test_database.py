"""Tests for the SQLite storage and the log handler that writes into it."""

import json
import logging

from genquiz.database import (
    connect,
    fetch_log_rows,
    fetch_question_rows,
    init_db,
    insert_questions,
)
from genquiz.log_handler import SQLiteHandler


def table_names():
    with connect() as conn:
        rows = conn.execute("SELECT name FROM sqlite_master WHERE type = 'table'").fetchall()
    return {row["name"] for row in rows}


def test_init_db_creates_tables_and_can_run_twice(app_settings):
    init_db()
    init_db()
    assert {"logs", app_settings.QUESTION_TABLE} <= table_names()


def test_question_rows_keep_options_as_json(app_settings):
    init_db()
    options = [{"text": "4", "correct": "true"}, {"text": "5", "correct": "false"}]
    assert insert_questions([{"question": "2+2?", "options": options}]) == 1

    rows = fetch_question_rows(10)
    assert len(rows) == 1
    assert rows[0]["question"] == "2+2?"
    assert json.loads(rows[0]["options"]) == options


def test_handler_stores_record_metadata(app_settings):
    init_db()
    handler = SQLiteHandler()
    handler.setFormatter(logging.Formatter("%(message)s"))
    record = logging.LogRecord(
        name="genquiz.test",
        level=logging.WARNING,
        pathname=__file__,
        lineno=42,
        msg="disk is %s",
        args=("full",),
        exc_info=None,
    )

    handler.emit(record)

    rows = fetch_log_rows()
    assert len(rows) == 1
    row = rows[0]
    assert row["created"] == record.created
    assert row["level"] == "WARNING"
    assert row["logger"] == "genquiz.test"
    assert row["location"] == "test_database:42"
    assert row["message"] == "disk is full"


def test_log_rows_come_back_newest_first(app_settings):
    init_db()
    handler = SQLiteHandler()
    log = logging.getLogger("genquiz.test.order")
    log.addHandler(handler)
    log.setLevel(logging.INFO)
    try:
        log.info("first")
        log.info("second")
    finally:
        log.removeHandler(handler)

    assert [row["message"] for row in fetch_log_rows(limit=2)] == ["second", "first"]
