import sqlite3
from collections.abc import Iterator
from pathlib import Path

import pytest

from domain.taxonomy import Taxonomy, normalize_blocks, parse_taxonomy
from infrastructure.storage import CategoryStore, ProductStore, connect, prepare_product_tables, prepare_topic_tables

REPO_ROOT = Path(__file__).resolve().parents[2]

FRUITS_TAXONOMY = """\
en: Fruits, Fruit
fr: Fruits

<en: Fruits
en: Apples
fr: Pommes
"""


def make_taxonomy(text: str) -> Taxonomy:
    return normalize_blocks(parse_taxonomy(text))


def open_content_db() -> sqlite3.Connection:
    conn = connect(":memory:")
    prepare_product_tables(conn)
    prepare_topic_tables(conn)
    return conn


@pytest.fixture
def conn() -> Iterator[sqlite3.Connection]:
    c = open_content_db()
    yield c
    c.close()


@pytest.fixture
def category_store(conn: sqlite3.Connection) -> CategoryStore:
    return CategoryStore(conn)


@pytest.fixture
def product_store(conn: sqlite3.Connection, category_store: CategoryStore) -> ProductStore:
    return ProductStore(conn, category_store)


@pytest.fixture
def fruits_taxonomy() -> Taxonomy:
    return make_taxonomy(FRUITS_TAXONOMY)
