import json
import os
import sqlite3
from contextlib import contextmanager
from typing import Any, Dict, Iterable, Iterator, List

from .config import settings

SCHEMA = """
CREATE TABLE IF NOT EXISTS logs (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    created REAL NOT NULL,
    level TEXT NOT NULL,
    logger TEXT NOT NULL,
    location TEXT,
    message TEXT
);
CREATE TABLE IF NOT EXISTS {table} (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    question TEXT NOT NULL,
    options TEXT NOT NULL,
    created_at DATETIME DEFAULT CURRENT_TIMESTAMP
);
"""


def db_path() -> str:
    return os.path.join(settings.DB_DIR, settings.DB_FILE)


@contextmanager
def connect() -> Iterator[sqlite3.Connection]:
    """Yields a connection that commits on success and is always closed."""
    conn = sqlite3.connect(db_path())
    conn.row_factory = sqlite3.Row
    try:
        with conn:
            yield conn
    finally:
        conn.close()


def insert_questions(records: Iterable[Dict[str, Any]]) -> int:
    """Stores raw question records; ``options`` is kept as JSON text
    (``[{"text": ..., "correct": "true"}, ...]``). Returns the row count."""
    rows = [(r["question"], json.dumps(r["options"])) for r in records]
    with connect() as conn:
        conn.executemany(
            f"INSERT INTO {settings.QUESTION_TABLE} (question, options) VALUES (?, ?)",
            rows,
        )
    return len(rows)


def fetch_question_rows(limit: int) -> List[sqlite3.Row]:
    with connect() as conn:
        return conn.execute(
            f"SELECT id, question, options FROM {settings.QUESTION_TABLE} ORDER BY id LIMIT ?",
            (limit,),
        ).fetchall()


def fetch_log_rows(limit: int = 100) -> List[sqlite3.Row]:
    with connect() as conn:
        return conn.execute(
            "SELECT created, level, logger, location, message FROM logs ORDER BY id DESC LIMIT ?",
            (limit,),
        ).fetchall()


def init_db():
    """Creates the database directory and the log and question tables."""
    os.makedirs(settings.DB_DIR, exist_ok=True)
    with connect() as conn:
        conn.executescript(SCHEMA.format(table=settings.QUESTION_TABLE))
