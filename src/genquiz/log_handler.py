import logging

from .database import connect


class SQLiteHandler(logging.Handler):
    """Stores formatted log records in the ``logs`` table.

    Each row keeps the record's own timestamp and its ``module:line`` origin.
    """

    def emit(self, record):
        try:
            message = self.format(record)
            with connect() as conn:
                conn.execute(
                    "INSERT INTO logs (created, level, logger, location, message) VALUES (?, ?, ?, ?, ?)",
                    (
                        record.created,
                        record.levelname,
                        record.name,
                        f"{record.module}:{record.lineno}",
                        message,
                    ),
                )
        except Exception:
            self.handleError(record)
