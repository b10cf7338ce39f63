import itertools
import logging
import sqlite3

import pytest

from application.taxonomy_import import store_taxonomy
from conftest import make_taxonomy, open_content_db
from domain.taxonomy import CategoryName
from infrastructure.storage import CategoryStore, MissingCategoryError

FOOD_TREE = """\
en:Foods

<en:Foods
en:Fruits

<en:Fruits
en:Apples

<en:Foods
en:Vegetables
"""


def _snapshot(conn: sqlite3.Connection) -> dict[str, list[tuple]]:
    return {
        table: [tuple(r) for r in conn.execute(f"SELECT * FROM {table} ORDER BY 1, 2").fetchall()]
        for table in ("categories", "category_names", "category_structure")
    }


def _edges_by_name(conn: sqlite3.Connection) -> set[tuple[str, str]]:
    rows = conn.execute(
        """
        SELECT c.name, p.name FROM category_structure AS cs
            INNER JOIN categories AS c ON c.id = cs.category_id
            INNER JOIN categories AS p ON p.id = cs.parent_id
        """
    ).fetchall()
    return {(r[0], r[1]) for r in rows}


def test_import_creates_categories_names_and_edges(conn, category_store, fruits_taxonomy) -> None:
    stats = store_taxonomy(conn, fruits_taxonomy)

    assert stats == {"categories_added": 2, "categories_skipped": 0, "edges_added": 1}
    fruits_id = category_store.category_id("Fruits", "en")
    apples_id = category_store.category_id("Apples", "en")
    assert category_store.category_id("Fruits", "fr") == fruits_id
    assert category_store.category_id("Pommes", "fr") == apples_id
    assert category_store.parent_ids(fruits_id) == []
    assert category_store.parent_ids(apples_id) == [fruits_id]
    assert category_store.ancestors("Apples") == [CategoryName(lang="en", name="Fruits")]


def test_readding_a_category_changes_nothing(conn, category_store, fruits_taxonomy, caplog) -> None:
    store_taxonomy(conn, fruits_taxonomy)
    before = _snapshot(conn)

    with caplog.at_level(logging.WARNING):
        assert category_store.add_category(fruits_taxonomy.categories[0]) is None

    assert _snapshot(conn) == before
    assert any("already exists" in r.getMessage() for r in caplog.records)


def test_first_claim_on_a_name_wins(conn, category_store, caplog) -> None:
    taxonomy = make_taxonomy("en:Nuts\n\nen:Tree nuts, Nuts\n")

    with caplog.at_level(logging.WARNING):
        stats = store_taxonomy(conn, taxonomy)

    assert stats["categories_added"] == 2
    nuts_id = category_store.category_id("Nuts", "en")
    tree_nuts_id = category_store.category_id("Tree nuts", "en")
    assert nuts_id != tree_nuts_id
    assert category_store.names(tree_nuts_id) == [CategoryName(lang="en", name="Tree nuts")]
    assert any("already used" in r.getMessage() for r in caplog.records)

    duplicates = conn.execute(
        "SELECT name, lang FROM category_names GROUP BY name, lang HAVING COUNT(*) > 1"
    ).fetchall()
    assert duplicates == []


def test_parents_defined_after_children_are_linked(conn, category_store) -> None:
    taxonomy = make_taxonomy("<en:Fruits\nen:Apples\n\nen:Fruits\n")

    store_taxonomy(conn, taxonomy)

    assert category_store.ancestors("Apples") == [CategoryName(lang="en", name="Fruits")]


def test_edges_do_not_depend_on_insertion_order() -> None:
    categories = make_taxonomy(FOOD_TREE).categories
    results = set()
    for order in itertools.permutations(categories):
        conn = open_content_db()
        store = CategoryStore(conn)
        for category in order:
            store.add_category(category)
        for category in reversed(order):
            store.add_category_parents(category)
        results.add(frozenset(_edges_by_name(conn)))
        conn.close()

    assert results == {
        frozenset({("Fruits", "Foods"), ("Apples", "Fruits"), ("Vegetables", "Foods")}),
    }


def test_ancestors_are_transitive_and_sorted(conn, category_store) -> None:
    store_taxonomy(conn, make_taxonomy(FOOD_TREE))

    assert category_store.ancestors("Apples") == [
        CategoryName(lang="en", name="Foods"),
        CategoryName(lang="en", name="Fruits"),
    ]
    assert category_store.ancestors("Foods") == []


def test_ancestors_of_unknown_category() -> None:
    conn = open_content_db()
    with pytest.raises(MissingCategoryError):
        CategoryStore(conn).ancestors("Dragonfruit")
    conn.close()


def test_ancestor_query_terminates_on_cycles(conn, category_store) -> None:
    store_taxonomy(conn, make_taxonomy("<en:B\nen:A\n\n<en:A\nen:B\n"))
    a = category_store.category_id("A", "en")
    b = category_store.category_id("B", "en")

    assert category_store.ancestor_ids([a]) == {a, b}


def test_linking_parents_of_unstored_category_fails(category_store, fruits_taxonomy) -> None:
    with pytest.raises(MissingCategoryError):
        category_store.add_category_parents(fruits_taxonomy.categories[1])


def test_unknown_parent_is_skipped(conn, category_store, caplog) -> None:
    (orphan,) = make_taxonomy("<en:Nowhere\nen:Apples\n").categories
    category_store.add_category(orphan)

    with caplog.at_level(logging.WARNING):
        assert category_store.add_category_parents(orphan) == 0

    assert category_store.count_edges() == 0
    assert any("not found" in r.getMessage() for r in caplog.records)


def test_self_parent_and_duplicate_edges_are_skipped(conn, category_store, fruits_taxonomy, caplog) -> None:
    (looped,) = make_taxonomy("<en:Pears\nen:Pears\n").categories
    category_store.add_category(looped)
    store_taxonomy(conn, fruits_taxonomy)
    apples = fruits_taxonomy.categories[1]

    with caplog.at_level(logging.WARNING):
        assert category_store.add_category_parents(looped) == 0
        assert category_store.add_category_parents(apples) == 0

    assert category_store.count_edges() == 1
    messages = [r.getMessage() for r in caplog.records]
    assert any("itself" in m for m in messages)
    assert any("already exists" in m for m in messages)


def test_product_counts_go_to_main_names(conn, category_store, fruits_taxonomy, caplog) -> None:
    store_taxonomy(conn, fruits_taxonomy)

    assert category_store.add_product_count("Apples", 42) is True
    with caplog.at_level(logging.WARNING):
        assert category_store.add_product_count("Pommes", 3) is False

    assert category_store.product_count(category_store.category_id("Apples", "en")) == 42
    assert category_store.product_count(category_store.category_id("Fruits", "en")) is None


def test_get_or_create_reuses_known_names(category_store) -> None:
    first = category_store.get_or_create(CategoryName(lang="fr", name="Pommes"))

    assert category_store.get_or_create(CategoryName(lang="fr", name="Pommes")) == first
    assert category_store.main_name(first) == CategoryName(lang="fr", name="Pommes")
    assert category_store.count_categories() == 1
