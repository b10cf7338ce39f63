import logging

import pytest

from infrastructure.io import files_with_prefix, next_numbered_path, read_table, read_text
from infrastructure.observability import clear_batch_context, get_log_context, make_run_tag, set_log_context
from infrastructure.observability.logging import ContextInjectFilter


def test_next_numbered_path_continues_after_highest_number(tmp_path) -> None:
    prefix = str(tmp_path / "topic-")
    assert next_numbered_path(prefix, padding=3) == tmp_path / "topic-001.xml"

    (tmp_path / "topic-001.xml").write_text("", encoding="utf-8")
    (tmp_path / "topic-007.xml").write_text("", encoding="utf-8")
    (tmp_path / "topic-notes.txt").write_text("", encoding="utf-8")

    assert next_numbered_path(prefix, padding=3) == tmp_path / "topic-008.xml"
    assert len(files_with_prefix(prefix)) == 3


def test_next_numbered_path_runs_out_of_digits(tmp_path) -> None:
    (tmp_path / "t9.xml").write_text("", encoding="utf-8")

    with pytest.raises(ValueError, match="Not enough digits"):
        next_numbered_path(str(tmp_path / "t"), padding=1)


def test_read_text_keeps_content_unchanged(tmp_path) -> None:
    path = tmp_path / "categories.txt"
    path.write_bytes(b"\nen:Apples\r\n\n")

    assert read_text(path) == "\nen:Apples\n\n"


def test_read_table_cells_are_strings(tmp_path) -> None:
    path = tmp_path / "mapping.csv"
    path.write_text("Product ID,Categories\n0012,\n", encoding="utf-8")

    df = read_table(path)

    assert df.loc[0, "Product ID"] == "0012"
    assert df.loc[0, "Categories"] == ""


def test_read_table_rejects_unknown_formats(tmp_path) -> None:
    path = tmp_path / "mapping.json"
    path.write_text("{}", encoding="utf-8")

    with pytest.raises(ValueError, match="Unsupported file format"):
        read_table(path)


def test_log_context_is_injected_into_records() -> None:
    set_log_context(run_id_full="20260101_000000_import-products", stage="import-products", batch_id=4)
    record = logging.LogRecord("x", logging.INFO, __file__, 1, "msg", None, None)

    ContextInjectFilter().filter(record)

    assert record.run == make_run_tag("20260101_000000_import-products")
    assert record.stage == "import-products"
    assert record.batch == "004"

    clear_batch_context()
    assert get_log_context()["batch_id"] == "-"
    assert len(get_log_context()["run_tag"]) == 8
