from datetime import date

import pytest

from conftest import REPO_ROOT
from infrastructure.config import PipelineConfig, ProductImportConfig, load_pipeline_config


def test_shipped_config_loads(monkeypatch) -> None:
    monkeypatch.chdir(REPO_ROOT)

    cfg = load_pipeline_config(REPO_ROOT / "configs" / "pipeline.yaml")

    assert cfg.products.chunksize == 10_000
    assert cfg.foodkeeper.edition == date(2017, 11, 14)
    assert len(cfg.fixups) == 15


def test_sections_are_optional(tmp_path) -> None:
    path = tmp_path / "pipeline.yaml"
    path.write_text("taxonomy:\n  fixups_file: null\nproducts:\n  sep: \";\"\n", encoding="utf-8")

    cfg = load_pipeline_config(path)

    assert cfg.products.sep == ";"
    assert cfg.products.list_separator == ","
    assert cfg.storage == PipelineConfig().storage
    assert cfg.fixups == []


def test_fixups_file_is_loaded(tmp_path) -> None:
    fixups = tmp_path / "fixups.yaml"
    fixups.write_text('fixups:\n  - pattern: "^nl_be:"\n    replacement: "nl-BE:"\n    regex: true\n', encoding="utf-8")
    path = tmp_path / "pipeline.yaml"
    path.write_text(f"taxonomy:\n  fixups_file: {fixups}\n", encoding="utf-8")

    cfg = load_pipeline_config(path)

    assert [f.replacement for f in cfg.fixups] == ["nl-BE:"]


def test_missing_fixups_file(tmp_path) -> None:
    path = tmp_path / "pipeline.yaml"
    path.write_text(f"taxonomy:\n  fixups_file: {tmp_path / 'missing.yaml'}\n", encoding="utf-8")

    with pytest.raises(FileNotFoundError):
        load_pipeline_config(path)


def test_section_must_be_a_mapping(tmp_path) -> None:
    path = tmp_path / "pipeline.yaml"
    path.write_text("products: [code]\n", encoding="utf-8")

    with pytest.raises(ValueError, match="'products' must be a mapping"):
        load_pipeline_config(path)


def test_top_level_must_be_a_mapping(tmp_path) -> None:
    path = tmp_path / "pipeline.yaml"
    path.write_text("- storage\n", encoding="utf-8")

    with pytest.raises(ValueError):
        load_pipeline_config(path)


def test_product_import_validation() -> None:
    with pytest.raises(ValueError):
        ProductImportConfig(chunksize=0)
    with pytest.raises(ValueError):
        ProductImportConfig(list_separator="")
