"""SQLite connection lifecycle for pipeline stages."""

import logging
import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

logger = logging.getLogger(__name__)


def connect(path: Path | str) -> sqlite3.Connection:
    """Open a connection with foreign keys enforced and rows addressable by column name."""
    conn = sqlite3.connect(str(path))
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    return conn


@contextmanager
def open_database(path: Path | str) -> Iterator[sqlite3.Connection]:
    """
    Open the content database for the duration of one pipeline stage.

    Commits when the block completes, rolls back on any exception, and closes
    the connection on every exit path.
    """
    logger.info("Opening database %s", path)
    conn = connect(path)
    try:
        yield conn
        conn.commit()
    except BaseException:
        conn.rollback()
        raise
    finally:
        conn.close()
        logger.debug("Closed database %s", path)


@contextmanager
def relaxed_durability(conn: sqlite3.Connection) -> Iterator[sqlite3.Connection]:
    """
    Trade crash safety for bulk insert speed while the block runs.

    Only for databases that can be regenerated from their source data.
    Settings are restored on exit.
    """
    conn.commit()
    synchronous = conn.execute("PRAGMA synchronous").fetchone()[0]
    journal_mode = conn.execute("PRAGMA journal_mode").fetchone()[0]
    conn.execute("PRAGMA synchronous = OFF")
    conn.execute("PRAGMA journal_mode = MEMORY")
    try:
        yield conn
        conn.commit()
    except BaseException:
        conn.rollback()
        raise
    finally:
        conn.execute(f"PRAGMA journal_mode = {journal_mode}")
        conn.execute(f"PRAGMA synchronous = {int(synchronous)}")
