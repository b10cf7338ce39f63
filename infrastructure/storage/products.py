"""Product store: products with their most specific categories and their countries."""

import logging
import sqlite3
from collections.abc import Sequence

from domain.taxonomy.normalizer import CategoryName
from infrastructure.storage.categories import CategoryStore

logger = logging.getLogger(__name__)


class ProductStore:
    """Product operations on an open content database connection."""

    def __init__(self, conn: sqlite3.Connection, categories: CategoryStore | None = None) -> None:
        self.conn = conn
        self.categories = categories or CategoryStore(conn)

    def next_product_id(self) -> int:
        # products is a WITHOUT ROWID table, so ids are assigned here.
        return int(self.conn.execute("SELECT IFNULL(MAX(id), 0) + 1 FROM products").fetchone()[0])

    def country_id(self, name: str) -> int:
        row = self.conn.execute("SELECT id FROM countries WHERE name = ?", (name,)).fetchone()
        if row is not None:
            return int(row[0])
        cur = self.conn.execute("INSERT INTO countries (name) VALUES (?)", (name,))
        return int(cur.lastrowid)

    def add_product(
        self,
        code: int,
        categories: Sequence[CategoryName],
        countries: Sequence[str] = (),
    ) -> int:
        """
        Store one product.

        Unknown categories and countries are created on demand. A category that is
        an ancestor of another assigned category is not stored: the association
        follows from the hierarchy. Assigning a category or country twice is logged
        as a warning and the repeat is skipped.

        Args:
            code: Product code (usually a GTIN)
            categories: Category names as found in the product record
            countries: English country names

        Returns:
            The new product id
        """
        product_id = self.next_product_id()
        self.conn.execute("INSERT INTO products (id, code) VALUES (?, ?)", (product_id, code))

        category_ids = [self.categories.get_or_create(name) for name in categories]
        ancestors = self.categories.ancestor_ids(category_ids)

        for name, category_id in zip(categories, category_ids):
            if category_id in ancestors:
                logger.debug("Product %d: skipping '%s', an ancestor of another assigned category", code, name)
                continue
            try:
                self.conn.execute(
                    "INSERT INTO product_categories (product_id, category_id) VALUES (?, ?)",
                    (product_id, category_id),
                )
            except sqlite3.IntegrityError:
                logger.warning("Product %d: category '%s' assigned twice. Ignoring.", code, name)

        for country in countries:
            try:
                self.conn.execute(
                    "INSERT INTO product_countries (product_id, country_id) VALUES (?, ?)",
                    (product_id, self.country_id(country)),
                )
            except sqlite3.IntegrityError:
                logger.warning("Product %d: country '%s' assigned twice. Ignoring.", code, country)

        return product_id

    def category_ids(self, product_id: int) -> list[int]:
        rows = self.conn.execute(
            "SELECT category_id FROM product_categories WHERE product_id = ? ORDER BY category_id",
            (product_id,),
        ).fetchall()
        return [int(r[0]) for r in rows]

    def country_names(self, product_id: int) -> list[str]:
        rows = self.conn.execute(
            """
            SELECT c.name FROM product_countries AS pc
                INNER JOIN countries AS c ON c.id = pc.country_id
            WHERE pc.product_id = ?
            ORDER BY c.name
            """,
            (product_id,),
        ).fetchall()
        return [r[0] for r in rows]

    def count_products(self) -> int:
        return int(self.conn.execute("SELECT COUNT(*) FROM products").fetchone()[0])
