import json
import logging
import sqlite3

import pytest

import main
from conftest import FRUITS_TAXONOMY


@pytest.fixture(autouse=True)
def restore_root_logging():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def workdir(tmp_path):
    (tmp_path / "pipeline.yaml").write_text(
        "storage:\n  relaxed_durability: false\ntaxonomy:\n  fixups_file: null\n", encoding="utf-8"
    )
    (tmp_path / "categories.txt").write_text(FRUITS_TAXONOMY, encoding="utf-8")
    (tmp_path / "products.csv").write_text(
        "code,categories_en,countries_en\n123,\"Apples,Fruits\",France\n", encoding="utf-8"
    )
    (tmp_path / "categories.json").write_text(
        json.dumps({"count": 1, "tags": [{"id": "en:apples", "name": "Apples", "known": 1, "products": 9}]}),
        encoding="utf-8",
    )
    return tmp_path


def _cli(workdir, *args: str) -> int:
    return main.main(["--config", str(workdir / "pipeline.yaml"), "--env", str(workdir / ".env"), *args])


def test_pipeline_stages_end_to_end(workdir) -> None:
    db = str(workdir / "content.db")

    assert _cli(workdir, "import-taxonomy", str(workdir / "categories.txt"), db) == 0
    assert _cli(workdir, "import-products", str(workdir / "products.csv"), db) == 0
    assert _cli(workdir, "import-product-counts", str(workdir / "categories.json"), db) == 0

    conn = sqlite3.connect(db)
    try:
        assert conn.execute("SELECT COUNT(*) FROM categories").fetchone()[0] == 2
        assert conn.execute("SELECT code FROM products").fetchall() == [(123,)]
        assert conn.execute("SELECT product_count FROM categories WHERE name = 'Apples'").fetchone()[0] == 9
    finally:
        conn.close()


def test_parse_error_exits_with_status_1(workdir) -> None:
    (workdir / "categories.txt").write_text("en:Apples,\n", encoding="utf-8")

    assert _cli(workdir, "import-taxonomy", str(workdir / "categories.txt"), str(workdir / "content.db")) == 1


def test_existing_tables_need_reuse_flag(workdir) -> None:
    db = str(workdir / "content.db")
    infile = str(workdir / "categories.txt")

    assert _cli(workdir, "import-taxonomy", infile, db) == 0
    assert _cli(workdir, "import-taxonomy", infile, db) == 1
    assert _cli(workdir, "--reuse-tables", "import-taxonomy", infile, db) == 0

    conn = sqlite3.connect(db)
    try:
        assert conn.execute("SELECT COUNT(*) FROM categories").fetchone()[0] == 2
    finally:
        conn.close()


def test_missing_config_exits_with_status_1(tmp_path) -> None:
    code = main.main(
        ["--config", str(tmp_path / "nope.yaml"), "import-taxonomy", str(tmp_path / "c.txt"), str(tmp_path / "c.db")]
    )

    assert code == 1
