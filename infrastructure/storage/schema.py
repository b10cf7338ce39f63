"""
Table definitions of the content database.

Each prepare_* function creates the tables one pipeline stage writes to.
With allow_reuse=False an existing table is an error (sqlite3.OperationalError),
which keeps a stage from silently appending to data of an earlier run.
"""

import logging
import sqlite3

logger = logging.getLogger(__name__)

CATEGORY_TABLES: dict[str, str] = {
    "categories": """
        categories (
            id              INTEGER PRIMARY KEY,
            name            TEXT NOT NULL,
            lang            TEXT NOT NULL,
            product_count   INTEGER
        )
    """,
    "category_names": """
        category_names (
            category_id     INTEGER NOT NULL REFERENCES categories(id),
            name            TEXT NOT NULL,
            lang            TEXT NOT NULL,
            PRIMARY KEY (name, lang)
        ) WITHOUT ROWID
    """,
    "category_structure": """
        category_structure (
            category_id     INTEGER NOT NULL REFERENCES categories(id),
            parent_id       INTEGER NOT NULL REFERENCES categories(id),
            PRIMARY KEY (category_id, parent_id),
            CHECK (category_id != parent_id)
        ) WITHOUT ROWID
    """,
}

PRODUCT_TABLES: dict[str, str] = {
    "products": """
        products (
            id              INTEGER PRIMARY KEY,
            code            INTEGER NOT NULL
        ) WITHOUT ROWID
    """,
    "product_categories": """
        product_categories (
            product_id      INTEGER NOT NULL REFERENCES products(id),
            category_id     INTEGER NOT NULL REFERENCES categories(id),
            PRIMARY KEY (product_id, category_id)
        ) WITHOUT ROWID
    """,
    "countries": """
        countries (
            id              INTEGER PRIMARY KEY,
            name            TEXT NOT NULL UNIQUE
        )
    """,
    "product_countries": """
        product_countries (
            product_id      INTEGER NOT NULL REFERENCES products(id),
            country_id      INTEGER NOT NULL REFERENCES countries(id),
            PRIMARY KEY (product_id, country_id)
        ) WITHOUT ROWID
    """,
}

TOPIC_TABLES: dict[str, str] = {
    "authors": """
        authors (
            id              INTEGER PRIMARY KEY,
            givenname       TEXT,
            honorific       TEXT,
            middlenames     TEXT,
            surname         TEXT,
            orgname         TEXT,
            orgdiv          TEXT,
            uri             TEXT,
            email           TEXT
        )
    """,
    "literature": """
        literature (
            id              TEXT PRIMARY KEY,
            abbrev          TEXT,
            entry           TEXT NOT NULL
        ) WITHOUT ROWID
    """,
    "topics": """
        topics (
            id              INTEGER PRIMARY KEY,
            external_id     TEXT UNIQUE,
            section         TEXT NOT NULL,
            version         TEXT NOT NULL
        )
    """,
    "topic_authors": """
        topic_authors (
            topic_id        INTEGER NOT NULL REFERENCES topics(id),
            author_id       INTEGER NOT NULL REFERENCES authors(id),
            role            TEXT NOT NULL DEFAULT 'author',
            PRIMARY KEY (topic_id, author_id)
        ) WITHOUT ROWID
    """,
    "topic_contents": """
        topic_contents (
            topic_id        INTEGER NOT NULL REFERENCES topics(id),
            lang            TEXT NOT NULL,
            title           TEXT NOT NULL,
            abstract        TEXT,
            content         TEXT,
            PRIMARY KEY (topic_id, lang)
        ) WITHOUT ROWID
    """,
    "topic_categories": """
        topic_categories (
            topic_id        INTEGER NOT NULL REFERENCES topics(id),
            category_id     INTEGER NOT NULL REFERENCES categories(id),
            PRIMARY KEY (topic_id, category_id)
        ) WITHOUT ROWID
    """,
    "topic_literature": """
        topic_literature (
            topic_id        INTEGER NOT NULL REFERENCES topics(id),
            literature_id   TEXT NOT NULL REFERENCES literature(id),
            PRIMARY KEY (topic_id, literature_id)
        ) WITHOUT ROWID
    """,
}


def _create_tables(conn: sqlite3.Connection, tables: dict[str, str], *, allow_reuse: bool) -> None:
    clause = "CREATE TABLE IF NOT EXISTS" if allow_reuse else "CREATE TABLE"
    for name, ddl in tables.items():
        conn.execute(f"{clause} {ddl}")
        logger.debug("Prepared table %s (allow_reuse=%s)", name, allow_reuse)
    conn.commit()


def prepare_category_tables(conn: sqlite3.Connection, *, allow_reuse: bool = False) -> None:
    _create_tables(conn, CATEGORY_TABLES, allow_reuse=allow_reuse)


def prepare_product_tables(conn: sqlite3.Connection, *, allow_reuse: bool = False) -> None:
    """Product tables reference categories, so the category tables are prepared too."""
    _create_tables(conn, CATEGORY_TABLES, allow_reuse=True)
    _create_tables(conn, PRODUCT_TABLES, allow_reuse=allow_reuse)


def prepare_topic_tables(conn: sqlite3.Connection, *, allow_reuse: bool = False) -> None:
    _create_tables(conn, CATEGORY_TABLES, allow_reuse=True)
    _create_tables(conn, TOPIC_TABLES, allow_reuse=allow_reuse)


def table_names(conn: sqlite3.Connection) -> list[str]:
    rows = conn.execute("SELECT name FROM sqlite_master WHERE type = 'table' ORDER BY name").fetchall()
    return [row[0] for row in rows]
