"""
Category store: categories, their names in all languages, and the parent hierarchy.

Invariants:
- a (name, language) pair belongs to at most one category; the first claim wins
- no category is its own parent and every edge is stored once
- this store is the only place that assigns category ids
"""

import logging
import sqlite3
from collections.abc import Iterable

from domain.taxonomy.normalizer import MAIN_LANG, Category, CategoryName

logger = logging.getLogger(__name__)

ANCESTORS_SQL = """
    WITH RECURSIVE ancestors(id) AS (
        SELECT parent_id FROM category_structure WHERE category_id IN ({placeholders})
        UNION
        SELECT cs.parent_id FROM category_structure AS cs
            INNER JOIN ancestors AS a ON cs.category_id = a.id
    )
    SELECT id FROM ancestors
"""


class MissingCategoryError(LookupError):
    """A category that must already be stored was not found."""


class CategoryStore:
    """Category operations on an open content database connection."""

    def __init__(self, conn: sqlite3.Connection) -> None:
        self.conn = conn

    # ---- lookups ----

    def category_id(self, name: str, lang: str) -> int | None:
        row = self.conn.execute(
            "SELECT category_id FROM category_names WHERE name = ? AND lang = ?",
            (name, lang),
        ).fetchone()
        return None if row is None else int(row[0])

    def main_name(self, category_id: int) -> CategoryName | None:
        row = self.conn.execute("SELECT name, lang FROM categories WHERE id = ?", (category_id,)).fetchone()
        return None if row is None else CategoryName(lang=row["lang"], name=row["name"])

    def names(self, category_id: int) -> list[CategoryName]:
        rows = self.conn.execute(
            "SELECT name, lang FROM category_names WHERE category_id = ? ORDER BY lang, name",
            (category_id,),
        ).fetchall()
        return [CategoryName(lang=r["lang"], name=r["name"]) for r in rows]

    def parent_ids(self, category_id: int) -> list[int]:
        rows = self.conn.execute(
            "SELECT parent_id FROM category_structure WHERE category_id = ? ORDER BY parent_id",
            (category_id,),
        ).fetchall()
        return [int(r[0]) for r in rows]

    def ancestor_ids(self, category_ids: Iterable[int]) -> set[int]:
        """
        Transitive parents of all given categories, computed in one recursive query.

        Terminates on cyclic hierarchies: UNION drops rows already produced.
        """
        ids = list(dict.fromkeys(category_ids))
        if not ids:
            return set()
        sql = ANCESTORS_SQL.format(placeholders=", ".join("?" for _ in ids))
        return {int(r[0]) for r in self.conn.execute(sql, ids).fetchall()}

    def ancestors(self, name: str, lang: str = MAIN_LANG) -> list[CategoryName]:
        """
        Main names of all transitive parents of a category, sorted.

        Raises:
            MissingCategoryError: If no category has the given name
        """
        category_id = self.category_id(name, lang)
        if category_id is None:
            raise MissingCategoryError(f"Category '{lang}:{name}' not found in database")
        names = [self.main_name(i) for i in self.ancestor_ids([category_id])]
        return sorted((n for n in names if n is not None), key=lambda n: (n.lang, n.name))

    def product_count(self, category_id: int) -> int | None:
        row = self.conn.execute("SELECT product_count FROM categories WHERE id = ?", (category_id,)).fetchone()
        return None if row is None or row[0] is None else int(row[0])

    def count_categories(self) -> int:
        return int(self.conn.execute("SELECT COUNT(*) FROM categories").fetchone()[0])

    def count_edges(self) -> int:
        return int(self.conn.execute("SELECT COUNT(*) FROM category_structure").fetchone()[0])

    # ---- writes ----

    def create_category(self, name: CategoryName) -> int:
        """
        Create a bare category known by a single name.

        Used for categories that appear in product data but not in the taxonomy.

        Raises:
            sqlite3.IntegrityError: If the name is already claimed
        """
        cur = self.conn.execute("INSERT INTO categories (name, lang) VALUES (?, ?)", (name.name, name.lang))
        category_id = int(cur.lastrowid)
        self.conn.execute(
            "INSERT INTO category_names (category_id, name, lang) VALUES (?, ?, ?)",
            (category_id, name.name, name.lang),
        )
        return category_id

    def get_or_create(self, name: CategoryName) -> int:
        existing = self.category_id(name.name, name.lang)
        if existing is not None:
            return existing
        category_id = self.create_category(name)
        logger.debug("Created category %s (id=%d) not defined in the taxonomy", name, category_id)
        return category_id

    def add_category(self, category: Category) -> int | None:
        """
        Store one category and all of its names.

        Names are added one by one. A name already claimed by another category is
        logged as a warning and skipped. When every name is already claimed, no
        category is created and the store is left unchanged.

        Args:
            category: Normalized taxonomy category

        Returns:
            The new category id, or None if nothing was stored
        """
        main = category.main_name
        names = category.all_names()
        claimed = [n for n in names if self.category_id(n.name, n.lang) is not None]
        if len(claimed) == len(names):
            logger.warning("Category '%s' already exists in the database. Ignoring.", main)
            return None

        cur = self.conn.execute("INSERT INTO categories (name, lang) VALUES (?, ?)", (main.name, main.lang))
        category_id = int(cur.lastrowid)

        for name in names:
            try:
                self.conn.execute(
                    "INSERT INTO category_names (category_id, name, lang) VALUES (?, ?, ?)",
                    (category_id, name.name, name.lang),
                )
            except sqlite3.IntegrityError:
                logger.warning(
                    "Name '%s' of category '%s' is already used by category %s. Ignoring.",
                    name,
                    main,
                    self.category_id(name.name, name.lang),
                )
        return category_id

    def add_category_parents(self, category: Category) -> int:
        """
        Store the parent edges of a category added earlier.

        Args:
            category: Normalized taxonomy category

        Returns:
            Number of edges stored

        Raises:
            MissingCategoryError: If the category itself is not stored. This means
                parents were linked before all categories were added.
        """
        main = category.main_name
        category_id = self.category_id(main.name, main.lang)
        if category_id is None:
            raise MissingCategoryError(f"Category '{main}' not found in database")

        added = 0
        for parent in category.parents:
            parent_id = self.category_id(parent.name, parent.lang)
            if parent_id is None:
                logger.warning("Parent category '%s' of '%s' not found in database. Ignoring.", parent, main)
                continue
            if parent_id == category_id:
                logger.warning("Category '%s' lists itself as parent '%s'. Ignoring.", main, parent)
                continue
            try:
                self.conn.execute(
                    "INSERT INTO category_structure (category_id, parent_id) VALUES (?, ?)",
                    (category_id, parent_id),
                )
                added += 1
            except sqlite3.IntegrityError:
                logger.warning("Parent category definition <%s for %s already exists. Ignoring.", parent, main)
        return added

    def add_product_count(self, name: str, count: int) -> bool:
        """
        Record how many products use a category, identified by its main name.

        English main names win when several languages share the name.

        Returns:
            True if a category was updated
        """
        cur = self.conn.execute(
            """
            UPDATE categories SET product_count = ?
            WHERE id = (
                SELECT id FROM categories WHERE name = ?
                ORDER BY lang = ? DESC, id
                LIMIT 1
            )
            """,
            (count, name, MAIN_LANG),
        )
        if cur.rowcount == 0:
            logger.warning("Could not add product count to category '%s'. Ignoring.", name)
            return False
        return True
