"""Application-level constants."""

# Pipeline stage names (CLI sub-commands and the `s=` field in log lines)
STAGE_TAXONOMY = "import-taxonomy"
STAGE_PRODUCTS = "import-products"
STAGE_PRODUCT_COUNTS = "import-product-counts"
STAGE_FOODKEEPER = "import-foodkeeper"
STAGE_FOODKEEPER_EXPORT = "export-foodkeeper"

# Log progress every N product rows
PRODUCT_PROGRESS_EVERY = 10_000

# FoodKeeper mapping export
FOODKEEPER_EXPORT_COLUMNS = [
    "Product ID",
    "FoodKeeper Category",
    "FoodKeeper Subcategory",
    "Product Name",
    "Product Subtitle",
    "Open Food Facts Categories",
]
FOODKEEPER_TOPIC_ID_PREFIX = "foodkeeper"
