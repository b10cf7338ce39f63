"""
USDA FoodKeeper conversion workflows.

The FoodKeeper app ships a SQLite database. Its PRODUCTS table holds, per product
type, storage durations in column triples `<prefix>_Min`, `<prefix>_Max` and
`<prefix>_Metric` plus free-text tips in `<prefix>_tips` (`<prefix>_Tips` for the
freezer columns). FOOD_CATEGORY holds the app's category tree.

Workflows:
- export_foodkeeper_mapping: CSV listing all products, to be filled in by hand
  with matching Open Food Facts categories
- import_foodkeeper: one storage overview topic per product plus pantry, fridge and
  freezer topics where the product has tips for them
"""

import logging
import sqlite3
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Literal

import pandas as pd

from application.constants import FOODKEEPER_EXPORT_COLUMNS, FOODKEEPER_TOPIC_ID_PREFIX
from domain.topics import Author, ItemizedList, Literature, LiteratureRef, Para, Topic, render_docbook
from infrastructure.config.models import FoodKeeperConfig
from infrastructure.io import ensure_exists, files_with_prefix, next_numbered_path, read_table
from infrastructure.observability import clear_batch_context, set_log_context
from infrastructure.storage import TopicStore

logger = logging.getLogger(__name__)

StorageType = Literal["pantry", "refrigerate", "freeze"]

STORAGE_PREFIXES: dict[StorageType, list[str]] = {
    "pantry": ["Pantry", "DOP_Pantry", "Pantry_After_Opening"],
    "refrigerate": ["Refrigerate", "DOP_Refrigerate", "Refrigerate_After_Opening", "Refrigerate_After_Thawing"],
    "freeze": ["Freeze", "DOP_Freeze"],
}

TEXT_AFTER: dict[str, str] = {
    "Pantry": "in the pantry, whether package is sealed or not",
    "DOP_Pantry": "in the pantry, if the package is still sealed",
    "Pantry_After_Opening": "in the pantry, after opening the package",
    "Refrigerate": "in the fridge, whether package is sealed or not",
    "DOP_Refrigerate": "in the fridge, if the package is still sealed",
    "Refrigerate_After_Opening": "in the fridge, after opening the package",
    "Refrigerate_After_Thawing": "in the fridge, after thawing the item",
    "Freeze": "in the freezer, whether package is sealed or not",
    "DOP_Freeze": "in the freezer, if the package is still sealed",
}

QUALITY_NOTE = (
    "Storage life affects quality. The item may or may not be safe to eat afterwards. "
    "Details may be provided below."
)

# (external id suffix, title, storage type, intro location)
STORAGE_TOPICS: list[tuple[str, str, StorageType, str]] = [
    ("pantry", "Pantry storage", "pantry", "in the pantry"),
    ("fridge", "Fridge storage", "refrigerate", "in the fridge"),
    ("freezer", "Freezer storage", "freeze", "in the freezer"),
]

EXPORT_QUERY = """
    SELECT PRODUCTS.ID, Category_Name, Subcategory_Name, Name, Name_subtitle
    FROM PRODUCTS
        INNER JOIN FOOD_CATEGORY ON PRODUCTS.Category_ID = FOOD_CATEGORY.ID
    ORDER BY Category_Name, Subcategory_Name, Name, Name_subtitle
"""


def _is_empty(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, float) and pd.isna(value):
        return True
    return str(value).strip() == ""


def _number(value: Any) -> str:
    """Render 6.0 as "6"; pandas reads integer columns with NULLs as floats."""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


def tips_column(prefix: str) -> str:
    # The FoodKeeper database is inconsistent: only freezer columns use "_Tips".
    return f"{prefix}_Tips" if "Freeze" in prefix else f"{prefix}_tips"


def shelf_life(product: Mapping[str, Any], prefix: str) -> str:
    """
    Render one storage duration, e.g. "6–9 Months in the pantry, if the package is still sealed".

    A single number is shown when minimum and maximum are equal.
    """
    low = _number(product.get(f"{prefix}_Min"))
    high = _number(product.get(f"{prefix}_Max"))
    metric = str(product.get(f"{prefix}_Metric") or "").strip()
    duration = low if _is_empty(product.get(f"{prefix}_Max")) or low == high else f"{low}–{high}"
    return f"{duration} {metric} {TEXT_AFTER[prefix]}"


def storage_tips(product: Mapping[str, Any], prefix: str) -> str:
    """Tip sentence to append to a shelf life, or "" when there is none."""
    tip = product.get(tips_column(prefix))
    if _is_empty(tip):
        return ""
    return f". {str(tip).strip()}."


def storage_instructions(
    product: Mapping[str, Any],
    storage_type: StorageType | None = None,
    *,
    include_tips: bool = True,
) -> list[str]:
    """Shelf life sentences for one storage type, or for all types when None."""
    if storage_type is None:
        prefixes = [p for group in STORAGE_PREFIXES.values() for p in group]
    else:
        prefixes = STORAGE_PREFIXES[storage_type]

    lines: list[str] = []
    for prefix in prefixes:
        if _is_empty(product.get(f"{prefix}_Min")):
            continue
        line = shelf_life(product, prefix)
        if include_tips:
            line += storage_tips(product, prefix)
        lines.append(line)
    return lines


def _has_tips(product: Mapping[str, Any], storage_type: StorageType) -> bool:
    # Only the general and the "date of purchase" tips decide whether a topic is worth it.
    base = STORAGE_PREFIXES[storage_type][:2]
    return any(not _is_empty(product.get(tips_column(p))) for p in base)


def _basic_topic(product_id: int, cfg: FoodKeeperConfig, categories: list[str], **fields: Any) -> Topic:
    author = Author(orgname=cfg.author_orgname, orgdiv=cfg.author_orgdiv, uri=cfg.author_uri)
    return Topic(
        version=cfg.edition,
        authors=[author],
        categories=categories,
        literature=[LiteratureRef(id=cfg.literature_id, ref_details=f"FoodKeeper product {product_id}")],
        **fields,
    )


def build_topics(product: Mapping[str, Any], categories: list[str], cfg: FoodKeeperConfig) -> list[Topic]:
    """
    All topics for one FoodKeeper product.

    Args:
        product: One PRODUCTS row as a column -> value mapping
        categories: English Open Food Facts category names the topics target
        cfg: FoodKeeper settings

    Returns:
        The storage overview topic, followed by pantry, fridge and freezer topics
        for storage types that have tips
    """
    product_id = int(product["ID"])
    id_prefix = f"{FOODKEEPER_TOPIC_ID_PREFIX}-{product_id}"

    topics = [
        _basic_topic(
            product_id,
            cfg,
            categories,
            external_id=f"{id_prefix}-overview",
            title="Storage Durations",
            section="storage_overview",
            content=[
                Para(text="The typical storage life of this item is:"),
                ItemizedList(items=storage_instructions(product)),
            ],
        )
    ]

    for suffix, title, storage_type, where in STORAGE_TOPICS:
        if not _has_tips(product, storage_type):
            continue
        topics.append(
            _basic_topic(
                product_id,
                cfg,
                categories,
                external_id=f"{id_prefix}-{suffix}",
                title=title,
                section="storage_instructions",
                content=[
                    Para(text=f"The typical storage life of this item {where} is:"),
                    ItemizedList(items=storage_instructions(product, storage_type, include_tips=True)),
                    Para(text=QUALITY_NOTE),
                ],
            )
        )
    return topics


def _connect_readonly(path: Path) -> sqlite3.Connection:
    ensure_exists(path, "FoodKeeper database")
    return sqlite3.connect(f"file:{path}?mode=ro", uri=True)


def load_foodkeeper_products(path: Path) -> pd.DataFrame:
    conn = _connect_readonly(path)
    try:
        return pd.read_sql_query("SELECT * FROM PRODUCTS ORDER BY ID", conn)
    finally:
        conn.close()


def load_category_mapping(path: Path, cfg: FoodKeeperConfig) -> dict[int, list[str]]:
    """
    Read the hand-made FoodKeeper product -> Open Food Facts categories mapping.

    The categories cell holds English category names separated by newlines or commas.

    Raises:
        ValueError: If a required column is missing or a product id is not an integer
    """
    df = read_table(path)
    for col in (cfg.mapping_id_col, cfg.mapping_categories_col):
        if col not in df.columns:
            raise ValueError(f"Column '{col}' not found in {path}. Available: {list(df.columns)}")

    mapping: dict[int, list[str]] = {}
    for raw_id, cell in zip(df[cfg.mapping_id_col], df[cfg.mapping_categories_col]):
        if _is_empty(raw_id):
            continue
        product_id = int(float(raw_id))
        names = mapping.setdefault(product_id, [])
        for name in str(cell).replace("\n", ",").split(","):
            name = name.strip()
            if name and name not in names:
                names.append(name)
    logger.info("Loaded categories for %d FoodKeeper products from %s", sum(bool(v) for v in mapping.values()), path)
    return mapping


def import_foodkeeper(
    conn: sqlite3.Connection,
    foodkeeper_db: Path,
    cfg: FoodKeeperConfig,
    *,
    mapping_path: Path | None = None,
    docbook_prefix: str | None = None,
) -> dict[str, int]:
    """
    Convert FoodKeeper products into topics in the content database.

    Args:
        conn: Content database with topic tables prepared
        foodkeeper_db: The FoodKeeper app's SQLite database
        cfg: FoodKeeper settings
        mapping_path: Optional CSV/XLSX mapping products to Open Food Facts categories
        docbook_prefix: If given, also write every topic to `<prefix>NNN.xml`

    Returns:
        Counters: products read, topics stored, DocBook files written

    Raises:
        FileExistsError: If files starting with docbook_prefix already exist
    """
    if docbook_prefix is not None:
        existing = files_with_prefix(docbook_prefix)
        if existing:
            raise FileExistsError(
                f"Output files with the prefix {docbook_prefix} already exist (e.g. {existing[0]})"
            )

    mapping = load_category_mapping(mapping_path, cfg) if mapping_path is not None else {}
    products = load_foodkeeper_products(foodkeeper_db)
    logger.info("Loaded %d FoodKeeper products from %s", len(products), foodkeeper_db)

    store = TopicStore(conn)
    store.add_literature(
        Literature(id=cfg.literature_id, abbrev=cfg.literature_abbrev, entry=cfg.literature_entry)
    )

    stats = {"products": 0, "topics": 0, "files": 0}
    for record in products.to_dict("records"):
        product_id = int(record["ID"])
        set_log_context(batch_id=product_id)
        categories = mapping.get(product_id, [])
        if mapping_path is not None and not categories:
            logger.debug("FoodKeeper product %d has no mapped categories", product_id)

        for topic in build_topics(record, categories, cfg):
            store.add_topic(topic)
            stats["topics"] += 1
            if docbook_prefix is not None:
                out = next_numbered_path(docbook_prefix, cfg.docbook_padding)
                out.parent.mkdir(parents=True, exist_ok=True)
                out.write_bytes(render_docbook(topic))
                stats["files"] += 1
        stats["products"] += 1
    conn.commit()
    clear_batch_context()

    logger.info(
        "FoodKeeper import done: %d products, %d topics, %d DocBook files",
        stats["products"],
        stats["topics"],
        stats["files"],
    )
    return stats


def export_foodkeeper_mapping(foodkeeper_db: Path, csv_path: Path) -> int:
    """
    Write the product list for the manual category mapping.

    Returns:
        Number of products written
    """
    conn = _connect_readonly(foodkeeper_db)
    try:
        df = pd.read_sql_query(EXPORT_QUERY, conn)
    finally:
        conn.close()

    df[FOODKEEPER_EXPORT_COLUMNS[-1]] = ""
    df.columns = FOODKEEPER_EXPORT_COLUMNS
    csv_path.parent.mkdir(parents=True, exist_ok=True)
    df.to_csv(csv_path, index=False, encoding="utf-8")
    logger.info("Exported %d FoodKeeper products to %s", len(df), csv_path)
    return len(df)
