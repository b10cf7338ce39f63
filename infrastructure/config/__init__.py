"""
Configuration management: models, loading, and validation.

Handles:
- PipelineConfig: settings for all pipeline stages
- Taxonomy text fixups loading from YAML

The loader module performs file I/O; models are pure Pydantic classes.
"""

from infrastructure.config.loader import load_fixups_config, load_pipeline_config
from infrastructure.config.models import (
    FoodKeeperConfig,
    # Main config
    PipelineConfig,
    ProductImportConfig,
    # Stage configs
    StorageConfig,
    TaxonomyImportConfig,
)

__all__ = [
    # Main config (most commonly used)
    "PipelineConfig",
    "load_pipeline_config",
    # Stage configs
    "StorageConfig",
    "TaxonomyImportConfig",
    "ProductImportConfig",
    "FoodKeeperConfig",
    # Loaders
    "load_fixups_config",
]
