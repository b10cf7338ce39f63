"""Configuration loading from YAML files."""

from pathlib import Path
from typing import Any

import yaml

from domain.taxonomy.fixups import TextFixup
from domain.taxonomy.loader import parse_fixups_config
from infrastructure.config.models import (
    FoodKeeperConfig,
    PipelineConfig,
    ProductImportConfig,
    StorageConfig,
    TaxonomyImportConfig,
)


def _load_yaml(path: Path) -> dict[str, Any]:
    """Load YAML file and return as dict."""
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with path.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f)

    if not isinstance(data, dict):
        raise ValueError(f"Expected YAML dict in {path}, got {type(data)}")

    return data


def load_fixups_config(path: Path) -> list[TextFixup]:
    """
    Load taxonomy text fixups from YAML file.

    This function handles file I/O, then delegates parsing to domain layer.
    """
    data = _load_yaml(path)
    return parse_fixups_config(data)


def _section(data: dict[str, Any], key: str, path: Path) -> dict[str, Any]:
    block = data.get(key) or {}
    if not isinstance(block, dict):
        raise ValueError(f"'{key}' must be a mapping in {path}")
    return block


def load_pipeline_config(path: Path | None) -> PipelineConfig:
    """
    Load pipeline.yaml and construct a fully-resolved PipelineConfig.

    Relative paths inside the file are resolved against the working directory.

    Args:
        path: Path to pipeline.yaml, or None to use built-in defaults

    Returns:
        PipelineConfig with fixups loaded

    Raises:
        FileNotFoundError: If the config file or the referenced fixups file is missing
        ValueError: If a section is not a mapping or a value is invalid
    """
    data = _load_yaml(path) if path is not None else {}
    origin = path or Path("pipeline.yaml")

    cfg = PipelineConfig(
        storage=StorageConfig(**_section(data, "storage", origin)),
        taxonomy=TaxonomyImportConfig(**_section(data, "taxonomy", origin)),
        products=ProductImportConfig(**_section(data, "products", origin)),
        foodkeeper=FoodKeeperConfig(**_section(data, "foodkeeper", origin)),
    )

    fixups_file = cfg.taxonomy.fixups_file
    if fixups_file is not None:
        cfg.fixups = load_fixups_config(fixups_file)

    return cfg
