"""
Product import workflow: Open Food Facts CSV export to the product store.

Only the columns for product code, categories and countries are read. Products
without any usable category are not imported.
"""

import logging
import sqlite3
from pathlib import Path

from application.constants import PRODUCT_PROGRESS_EVERY
from domain.categories import is_tag_form, parse_category_reference, split_references
from domain.taxonomy.normalizer import CategoryName
from infrastructure.config.models import ProductImportConfig
from infrastructure.io import iter_csv_chunks
from infrastructure.observability import clear_batch_context, set_log_context
from infrastructure.storage import ProductStore

logger = logging.getLogger(__name__)


def parse_product_code(raw: str, row: int) -> int:
    """
    Parse a product code as a base-10 integer. Leading zeros are kept as decimal.

    Raises:
        ValueError: If the code is not an integer. This aborts the import.
    """
    try:
        return int(raw.strip(), 10)
    except ValueError as e:
        raise ValueError(f"Malformed product code {raw!r} in CSV row {row}") from e


def parse_categories(cell: str, cfg: ProductImportConfig, code: int) -> list[CategoryName]:
    """Category references of one product; tag-form references are dropped with a warning each."""
    names: list[CategoryName] = []
    for reference in split_references(cell, cfg.list_separator):
        if is_tag_form(reference):
            logger.warning("Product %d: category '%s' is in tag form, not a name. Ignoring.", code, reference)
            continue
        name = parse_category_reference(reference, default_lang=cfg.default_lang)
        if name is not None:
            names.append(name)
    return names


def import_products(conn: sqlite3.Connection, path: Path, cfg: ProductImportConfig) -> dict[str, int]:
    """
    Import all products of a CSV file. Tables must already be prepared.

    Each chunk of rows is committed on its own, and the log context carries the
    chunk number as batch id.

    Returns:
        Counters: rows read, products imported, products without categories

    Raises:
        ValueError: On a malformed product code, or if a configured column is missing
        FileNotFoundError: If the CSV file does not exist
    """
    store = ProductStore(conn)
    stats = {"rows": 0, "products": 0, "without_categories": 0}
    usecols = [cfg.code_col, cfg.categories_col, cfg.countries_col]

    chunks = iter_csv_chunks(path, usecols=usecols, sep=cfg.sep, chunksize=cfg.chunksize, encoding=cfg.encoding)
    for batch_no, chunk in enumerate(chunks, start=1):
        set_log_context(batch_id=batch_no)
        for code_raw, categories_cell, countries_cell in zip(
            chunk[cfg.code_col], chunk[cfg.categories_col], chunk[cfg.countries_col]
        ):
            stats["rows"] += 1
            # header is row 1
            code = parse_product_code(code_raw, row=stats["rows"] + 1)
            categories = parse_categories(categories_cell, cfg, code)
            if not categories:
                logger.debug("Product %d has no categories. Not imported.", code)
                stats["without_categories"] += 1
                continue

            countries = split_references(countries_cell, cfg.list_separator)
            store.add_product(code, categories, countries)
            stats["products"] += 1

            if stats["rows"] % PRODUCT_PROGRESS_EVERY == 0:
                logger.info("%d rows read, %d products imported", stats["rows"], stats["products"])
        conn.commit()

    clear_batch_context()
    logger.info(
        "Product import done: %d rows, %d products, %d without categories",
        stats["rows"],
        stats["products"],
        stats["without_categories"],
    )
    return stats
