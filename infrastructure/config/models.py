"""Configuration models (Pydantic classes)."""

from datetime import date
from pathlib import Path

from pydantic import BaseModel, Field, model_validator

from domain.taxonomy.fixups import TextFixup
from infrastructure.constants import FIXUPS_FILE


class StorageConfig(BaseModel):
    """Content database behavior shared by all stages."""

    allow_reuse: bool = Field(
        default=False,
        description="Create tables with IF NOT EXISTS instead of failing on existing tables.",
    )
    relaxed_durability: bool = Field(
        default=True,
        description="Disable fsync and keep the journal in memory during imports.",
    )


class TaxonomyImportConfig(BaseModel):
    """Settings for importing categories.txt."""

    encoding: str = "utf-8"
    fixups_file: Path | None = Field(
        default_factory=lambda: FIXUPS_FILE,
        description="YAML file with text fixups applied before parsing. None disables fixups.",
    )


class ProductImportConfig(BaseModel):
    """Settings for importing the Open Food Facts product CSV export."""

    code_col: str = "code"
    categories_col: str = "categories_en"
    countries_col: str = "countries_en"
    sep: str = ","
    list_separator: str = ","
    chunksize: int = Field(default=10_000, gt=0)
    default_lang: str = "en"
    encoding: str = "utf-8"

    @model_validator(mode="after")
    def _validate(self) -> "ProductImportConfig":
        if not self.list_separator:
            raise ValueError("products.list_separator must not be empty")
        return self


class FoodKeeperConfig(BaseModel):
    """Settings for converting the USDA FoodKeeper database into topics."""

    edition: date = date(2017, 11, 14)
    literature_id: str = "USDA-1"
    literature_abbrev: str | None = "USDA FoodKeeper"
    literature_entry: str = (
        "U.S. Department of Agriculture, Food Safety and Inspection Service. "
        "FoodKeeper App. 2017."
    )
    author_orgname: str = "U.S. Department of Agriculture"
    author_orgdiv: str | None = "Food Safety and Inspection Service"
    author_uri: str | None = "https://www.foodsafety.gov/keep-food-safe/foodkeeper-app"
    mapping_categories_col: str = "Open Food Facts Categories"
    mapping_id_col: str = "Product ID"
    docbook_padding: int = Field(default=3, ge=1)


class PipelineConfig(BaseModel):
    """
    Runtime configuration.
    - Loaded from pipeline.yaml
    - Fixups resolved by the configuration loader
    - Consumed by the pipeline stages in application/
    """

    storage: StorageConfig = Field(default_factory=StorageConfig)
    taxonomy: TaxonomyImportConfig = Field(default_factory=TaxonomyImportConfig)
    products: ProductImportConfig = Field(default_factory=ProductImportConfig)
    foodkeeper: FoodKeeperConfig = Field(default_factory=FoodKeeperConfig)

    # Resolved by loader from taxonomy.fixups_file
    fixups: list[TextFixup] = Field(default_factory=list)
