import logging

import pytest

from application.taxonomy_import import store_taxonomy
from conftest import make_taxonomy
from domain.taxonomy import CategoryName

APPLES = CategoryName(lang="en", name="Apples")
FRUITS = CategoryName(lang="en", name="Fruits")
FOODS = CategoryName(lang="en", name="Foods")


@pytest.fixture
def food_tree(conn):
    store_taxonomy(conn, make_taxonomy("en:Foods\n\n<en:Foods\nen:Fruits\n\n<en:Fruits\nen:Apples\n"))
    return conn


def test_only_most_specific_category_is_stored(conn, category_store, product_store, fruits_taxonomy) -> None:
    store_taxonomy(conn, fruits_taxonomy)

    product_id = product_store.add_product(1234567890123, [APPLES, FRUITS])

    assert product_store.category_ids(product_id) == [category_store.category_id("Apples", "en")]
    code = conn.execute("SELECT code FROM products WHERE id = ?", (product_id,)).fetchone()[0]
    assert code == 1234567890123


@pytest.mark.parametrize("order", [[FOODS, APPLES, FRUITS], [APPLES, FRUITS, FOODS], [FRUITS, FOODS, APPLES]])
def test_deep_ancestors_are_dropped_in_any_order(food_tree, category_store, product_store, order) -> None:
    product_id = product_store.add_product(1, order)

    assert product_store.category_ids(product_id) == [category_store.category_id("Apples", "en")]


def test_unrelated_categories_are_all_stored(conn, category_store, product_store, fruits_taxonomy) -> None:
    store_taxonomy(conn, fruits_taxonomy)

    product_id = product_store.add_product(7, [APPLES, CategoryName(lang="en", name="Snacks")])

    snacks_id = category_store.category_id("Snacks", "en")
    assert snacks_id is not None
    assert set(product_store.category_ids(product_id)) == {category_store.category_id("Apples", "en"), snacks_id}


def test_unknown_categories_are_created(category_store, product_store) -> None:
    dragonfruit = CategoryName(lang="en", name="Dragonfruit")

    product_id = product_store.add_product(2, [dragonfruit])

    assert category_store.main_name(product_store.category_ids(product_id)[0]) == dragonfruit
    assert category_store.count_categories() == 1


def test_repeated_category_is_stored_once(conn, product_store, fruits_taxonomy, caplog) -> None:
    store_taxonomy(conn, fruits_taxonomy)

    with caplog.at_level(logging.WARNING):
        product_id = product_store.add_product(3, [APPLES, APPLES])

    assert len(product_store.category_ids(product_id)) == 1
    assert [r.getMessage() for r in caplog.records if "assigned twice" in r.getMessage()] == [
        "Product 3: category 'en:Apples' assigned twice. Ignoring."
    ]


def test_countries_are_shared_between_products(conn, product_store, caplog) -> None:
    with caplog.at_level(logging.WARNING):
        first = product_store.add_product(4, [APPLES], ["France", "Germany", "France"])
    second = product_store.add_product(5, [APPLES], ["Germany"])

    assert product_store.country_names(first) == ["France", "Germany"]
    assert product_store.country_names(second) == ["Germany"]
    assert conn.execute("SELECT COUNT(*) FROM countries").fetchone()[0] == 2
    assert any("country 'France' assigned twice" in r.getMessage() for r in caplog.records)


def test_product_ids_are_sequential(product_store) -> None:
    assert product_store.add_product(10, [APPLES]) == 1
    assert product_store.add_product(10, [APPLES]) == 2
    assert product_store.count_products() == 2
