"""Topic store: topics, their authors, target categories and literature."""

import logging
import sqlite3

from domain.taxonomy.normalizer import MAIN_LANG
from domain.topics import Author, Literature, Topic, render_content

logger = logging.getLogger(__name__)

# Author columns that may be filled in later by another topic crediting the same author.
COMPLETABLE_AUTHOR_FIELDS: tuple[str, ...] = ("honorific", "orgdiv", "uri", "email")


class TopicStore:
    """Topic operations on an open content database connection."""

    def __init__(self, conn: sqlite3.Connection) -> None:
        self.conn = conn

    def add_literature(self, literature: Literature) -> bool:
        """Store a bibliography entry. An existing id is logged and left as is."""
        try:
            self.conn.execute(
                "INSERT INTO literature (id, abbrev, entry) VALUES (?, ?, ?)",
                (literature.id, literature.abbrev, literature.entry),
            )
        except sqlite3.IntegrityError:
            logger.warning("Literature entry '%s' already exists in the database. Ignoring.", literature.id)
            return False
        return True

    def author_id(self, author: Author) -> int | None:
        # IS compares NULLs as equal, unlike =
        row = self.conn.execute(
            """
            SELECT id FROM authors
            WHERE givenname IS ? AND middlenames IS ? AND surname IS ? AND orgname IS ?
            ORDER BY id LIMIT 1
            """,
            (author.givenname, author.middlenames, author.surname, author.orgname),
        ).fetchone()
        return None if row is None else int(row[0])

    def complete_author(self, author_id: int, author: Author) -> None:
        """Fill blank columns of a stored author from a more complete record."""
        for field in COMPLETABLE_AUTHOR_FIELDS:
            value = getattr(author, field)
            if not value:
                continue
            self.conn.execute(
                f"UPDATE authors SET {field} = ? WHERE id = ? AND ({field} IS NULL OR {field} = '')",
                (value, author_id),
            )

    def get_or_create_author(self, author: Author) -> int:
        existing = self.author_id(author)
        if existing is not None:
            self.complete_author(existing, author)
            return existing
        cur = self.conn.execute(
            """
            INSERT INTO authors (givenname, honorific, middlenames, surname, orgname, orgdiv, uri, email)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                author.givenname,
                author.honorific,
                author.middlenames,
                author.surname,
                author.orgname,
                author.orgdiv,
                author.uri,
                author.email,
            ),
        )
        return int(cur.lastrowid)

    def _topic_id(self, topic: Topic) -> int:
        if topic.external_id is not None:
            row = self.conn.execute("SELECT id FROM topics WHERE external_id = ?", (topic.external_id,)).fetchone()
            if row is not None:
                self.conn.execute(
                    "UPDATE topics SET section = ?, version = ? WHERE id = ?",
                    (topic.section, topic.version.isoformat(), row[0]),
                )
                return int(row[0])
        cur = self.conn.execute(
            "INSERT INTO topics (external_id, section, version) VALUES (?, ?, ?)",
            (topic.external_id, topic.section, topic.version.isoformat()),
        )
        return int(cur.lastrowid)

    def _category_id(self, name: str) -> int | None:
        row = self.conn.execute(
            "SELECT category_id FROM category_names WHERE name = ? AND lang LIKE ? ORDER BY lang LIMIT 1",
            (name, f"{MAIN_LANG}%"),
        ).fetchone()
        return None if row is None else int(row[0])

    def add_topic(self, topic: Topic) -> int:
        """
        Store a topic with its content in the topic's language.

        A topic with a known external id is updated in place. Unknown target
        categories and unknown literature ids are logged as warnings and skipped.

        Returns:
            The topic id
        """
        topic_id = self._topic_id(topic)

        for author in topic.authors:
            self.conn.execute(
                "INSERT OR IGNORE INTO topic_authors (topic_id, author_id, role) VALUES (?, ?, 'author')",
                (topic_id, self.get_or_create_author(author)),
            )

        for name in topic.categories:
            category_id = self._category_id(name)
            if category_id is None:
                logger.warning("Topic '%s': category '%s' not found in database. Ignoring.", topic.title, name)
                continue
            self.conn.execute(
                "INSERT OR IGNORE INTO topic_categories (topic_id, category_id) VALUES (?, ?)",
                (topic_id, category_id),
            )

        for ref in topic.literature:
            exists = self.conn.execute("SELECT 1 FROM literature WHERE id = ?", (ref.id,)).fetchone()
            if exists is None:
                logger.warning("Topic '%s': literature '%s' not found in database. Ignoring.", topic.title, ref.id)
                continue
            self.conn.execute(
                "INSERT OR IGNORE INTO topic_literature (topic_id, literature_id) VALUES (?, ?)",
                (topic_id, ref.id),
            )

        self.conn.execute(
            """
            INSERT OR REPLACE INTO topic_contents (topic_id, lang, title, abstract, content)
            VALUES (?, ?, ?, ?, ?)
            """,
            (topic_id, topic.lang, topic.title, topic.abstract, render_content(topic)),
        )
        return topic_id

    def category_names(self, topic_id: int) -> list[str]:
        rows = self.conn.execute(
            """
            SELECT c.name FROM topic_categories AS tc
                INNER JOIN categories AS c ON c.id = tc.category_id
            WHERE tc.topic_id = ?
            ORDER BY c.name
            """,
            (topic_id,),
        ).fetchall()
        return [r[0] for r in rows]

    def count_topics(self) -> int:
        return int(self.conn.execute("SELECT COUNT(*) FROM topics").fetchone()[0])
