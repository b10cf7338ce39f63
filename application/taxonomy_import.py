"""
Taxonomy import workflow.

Steps:
- read categories.txt and apply the configured text fixups
- parse into blocks (a parse error aborts the whole stage)
- normalize into categories
- pass 1: add every category with all its names
- pass 2: link every category to its parents

Parents may be defined after their children in the file, so edges can only be
resolved once all categories exist.
"""

import logging
import sqlite3
from pathlib import Path

from domain.taxonomy import Taxonomy, TextFixup, apply_fixups, normalize_blocks, parse_taxonomy
from infrastructure.io import read_text
from infrastructure.observability import set_log_context
from infrastructure.storage import CategoryStore

logger = logging.getLogger(__name__)


def load_taxonomy(path: Path, fixups: list[TextFixup], *, encoding: str = "utf-8") -> Taxonomy:
    """
    Read, fix up, parse and normalize a taxonomy file.

    Raises:
        FileNotFoundError: If the file does not exist
        TaxonomyParseError: If the fixed-up text cannot be parsed
    """
    text = apply_fixups(read_text(path, encoding=encoding), fixups)
    blocks = parse_taxonomy(text)
    taxonomy = normalize_blocks(blocks)
    logger.info(
        "Parsed %s: %d blocks, %d categories, %d synonym languages, %d stopword languages",
        path,
        len(blocks),
        len(taxonomy.categories),
        len(taxonomy.synonyms),
        len(taxonomy.stopwords),
    )
    return taxonomy


def store_taxonomy(conn: sqlite3.Connection, taxonomy: Taxonomy) -> dict[str, int]:
    """
    Write a taxonomy to the category store in two passes.

    Returns:
        Counters: categories added and skipped, edges added
    """
    store = CategoryStore(conn)
    stats = {"categories_added": 0, "categories_skipped": 0, "edges_added": 0}

    set_log_context(batch_id=1)
    for category in taxonomy.categories:
        if store.add_category(category) is None:
            stats["categories_skipped"] += 1
        else:
            stats["categories_added"] += 1
    conn.commit()
    logger.info(
        "Pass 1 done: %d categories added, %d skipped",
        stats["categories_added"],
        stats["categories_skipped"],
    )

    set_log_context(batch_id=2)
    for category in taxonomy.categories:
        stats["edges_added"] += store.add_category_parents(category)
    conn.commit()
    logger.info("Pass 2 done: %d parent edges added", stats["edges_added"])

    return stats


def import_taxonomy(
    conn: sqlite3.Connection,
    path: Path,
    fixups: list[TextFixup],
    *,
    encoding: str = "utf-8",
) -> dict[str, int]:
    """Load a taxonomy file and store it. Tables must already be prepared."""
    taxonomy = load_taxonomy(path, fixups, encoding=encoding)
    return store_taxonomy(conn, taxonomy)
