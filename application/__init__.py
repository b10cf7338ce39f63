"""
Application layer: pipeline stages.

This layer coordinates between domain logic and infrastructure. Every stage
works on an open content database connection and returns counters of what it did.
"""

from application.foodkeeper import build_topics, export_foodkeeper_mapping, import_foodkeeper
from application.product_counts import import_product_counts
from application.product_import import import_products
from application.taxonomy_import import import_taxonomy, load_taxonomy, store_taxonomy

__all__ = [
    # Taxonomy
    "import_taxonomy",
    "load_taxonomy",
    "store_taxonomy",
    # Products
    "import_products",
    "import_product_counts",
    # FoodKeeper
    "import_foodkeeper",
    "export_foodkeeper_mapping",
    "build_topics",
]
