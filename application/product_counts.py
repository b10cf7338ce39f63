"""Import per-category product counts from the Open Food Facts categories JSON document."""

import json
import logging
import sqlite3
from pathlib import Path

from pydantic import BaseModel, Field

from infrastructure.io import ensure_exists
from infrastructure.storage import CategoryStore

logger = logging.getLogger(__name__)


class CategoryTag(BaseModel):
    """One entry of `tags` in https://world.openfoodfacts.org/categories.json."""

    id: str
    name: str
    url: str = ""
    known: int = 0
    products: int = 0
    same_as: list[str] = Field(default_factory=list, alias="sameAs")


class CategoryStats(BaseModel):
    count: int
    tags: list[CategoryTag]


def load_category_stats(path: Path) -> CategoryStats:
    """
    Raises:
        FileNotFoundError: If the file does not exist
        pydantic.ValidationError: If the document does not have the expected structure
    """
    ensure_exists(path, "categories JSON")
    with path.open("r", encoding="utf-8") as f:
        return CategoryStats.model_validate(json.load(f))


def import_product_counts(conn: sqlite3.Connection, path: Path) -> dict[str, int]:
    """
    Store product counts for every category tag the taxonomy knows.

    Tags with `known` = 0 are categories users typed in that are not part of the
    taxonomy; they are skipped.

    Returns:
        Counters: tags read, counts updated, unknown tags skipped, tags not found
    """
    data = load_category_stats(path)
    if data.count != len(data.tags):
        logger.warning("Document announces %d tags but contains %d", data.count, len(data.tags))

    store = CategoryStore(conn)
    stats = {"tags": len(data.tags), "updated": 0, "unknown_skipped": 0, "not_found": 0}
    for tag in data.tags:
        if not tag.known:
            stats["unknown_skipped"] += 1
            continue
        if store.add_product_count(tag.name, tag.products):
            stats["updated"] += 1
        else:
            stats["not_found"] += 1
    conn.commit()

    logger.info(
        "Product counts: %d tags, %d updated, %d unknown tags skipped, %d not found",
        stats["tags"],
        stats["updated"],
        stats["unknown_skipped"],
        stats["not_found"],
    )
    return stats
