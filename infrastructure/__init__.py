"""
Infrastructure layer: External dependencies and I/O boundaries.

Contains adapters for:
- The SQLite content database (schema, category/product/topic stores)
- Configuration loading (YAML, environment)
- Tabular input files (CSV, Excel)
- Observability (logging)

This is the only layer that performs I/O operations.
"""

# Most commonly used - exposed at top level for convenience
from infrastructure.config import PipelineConfig, load_pipeline_config
from infrastructure.storage import CategoryStore, ProductStore, TopicStore, open_database

__all__ = [
    # Storage (most commonly used)
    "open_database",
    "CategoryStore",
    "ProductStore",
    "TopicStore",
    # Configuration
    "load_pipeline_config",
    "PipelineConfig",
]
