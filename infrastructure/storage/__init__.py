"""
Storage: the SQLite content database.

Provides:
- connection lifecycle (open_database, relaxed_durability)
- table definitions per pipeline stage
- CategoryStore, ProductStore and TopicStore operating on an open connection
"""

from infrastructure.storage.categories import CategoryStore, MissingCategoryError
from infrastructure.storage.database import connect, open_database, relaxed_durability
from infrastructure.storage.products import ProductStore
from infrastructure.storage.schema import (
    prepare_category_tables,
    prepare_product_tables,
    prepare_topic_tables,
    table_names,
)
from infrastructure.storage.topics import TopicStore

__all__ = [
    # Connection
    "connect",
    "open_database",
    "relaxed_durability",
    # Schema
    "prepare_category_tables",
    "prepare_product_tables",
    "prepare_topic_tables",
    "table_names",
    # Stores
    "CategoryStore",
    "MissingCategoryError",
    "ProductStore",
    "TopicStore",
]
