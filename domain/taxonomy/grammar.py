"""
Recursive-descent parser for the Open Food Facts `categories.txt` format.

File structure:
- blocks separated by one or more blank lines
- a block is a synonym run, a stopword run, a category or a bare comment run
- a category is: parent lines (`<en:Fruits`), then name lines (`en:Apples, Apple`),
  then property lines (`wikidata:en:Q89`)
- comment lines (`# ...`) may precede or follow any line inside a block

Block alternatives are tried in the fixed order of BLOCK_ALTERNATIVES and the first
one that matches wins. A run of comments followed by a category is a category with
leading comments, never a comment block, because the comment alternative is tried last.

All functions here are pure (no file I/O).
"""

import re
from collections.abc import Callable
from typing import TypeVar

from domain.taxonomy.models import (
    Block,
    CategoryBlock,
    CategoryProperty,
    CommentBlock,
    LangValues,
    ParentRef,
    StopwordBlock,
    SynonymBlock,
)

T = TypeVar("T")

LANG_TAG = r"[a-z]{2,3}(?:-[A-Z]{2})?"

# Ordered choice, most specific first. "comment" must stay last.
BLOCK_ALTERNATIVES: tuple[str, ...] = ("synonyms", "stopwords", "category", "comment")

_SYNONYM_RE = re.compile(rf"synonyms:(?P<lang>{LANG_TAG}):(?P<values>.*)")
_STOPWORD_RE = re.compile(rf"stopwords:(?P<lang>{LANG_TAG}):(?P<values>.*)")
_PARENT_RE = re.compile(rf"<(?P<lang>{LANG_TAG}):(?P<name>[^,]*)")
_NAME_RE = re.compile(rf"(?P<lang>{LANG_TAG}):(?P<values>.*)")
_PROPERTY_RE = re.compile(rf"(?P<name>[a-z0-9][a-z0-9_]+):(?:(?P<lang>{LANG_TAG}):)?(?P<value>.+)")


class TaxonomyParseError(ValueError):
    """Raised for the first line of a taxonomy text that no grammar rule accepts."""

    def __init__(self, line: int, column: int, expected: list[str], text: str) -> None:
        self.line = line
        self.column = column
        self.expected = expected
        self.text = text
        super().__init__(
            f"Taxonomy parse error at line {line}, column {column}: "
            f"expected {' or '.join(expected)}, got {text!r}"
        )


class _Parser:
    def __init__(self, text: str) -> None:
        lines = text.split("\n")
        if lines and lines[-1] == "":
            lines.pop()
        self.lines = [ln[:-1] if ln.endswith("\r") else ln for ln in lines]
        self._farthest: tuple[int, int] = (-1, -1)
        self._expected: list[str] = []
        self._alternatives: dict[str, Callable[[int], tuple[Block, int] | None]] = {
            "synonyms": self._synonym_block,
            "stopwords": self._stopword_block,
            "category": self._category_block,
            "comment": self._comment_block,
        }

    # ---- line helpers ----

    def _at_end(self, i: int) -> bool:
        return i >= len(self.lines)

    def _is_blank(self, i: int) -> bool:
        return not self._at_end(i) and self.lines[i].strip() == ""

    def _is_comment(self, i: int) -> bool:
        return not self._at_end(i) and self.lines[i].startswith("#")

    def _expect(self, i: int, column: int, what: str) -> None:
        """Record a failed expectation, keeping only the farthest position."""
        pos = (i, column)
        if pos > self._farthest:
            self._farthest = pos
            self._expected = [what]
        elif pos == self._farthest and what not in self._expected:
            self._expected.append(what)

    def _error(self) -> TaxonomyParseError:
        i, column = self._farthest
        text = "<end of file>" if self._at_end(i) else self.lines[i]
        return TaxonomyParseError(line=i + 1, column=column, expected=list(self._expected), text=text)

    def _values(self, i: int, raw: str, offset: int) -> list[str] | None:
        """Split a comma-separated value list; every value must be non-empty."""
        values: list[str] = []
        column = offset + 1
        for part in raw.split(","):
            value = part.lstrip()
            if not value:
                self._expect(i, column, "a value")
                return None
            values.append(value)
            column += len(part) + 1
        return values

    # ---- single lines ----

    def _lang_values_line(self, i: int, pattern: re.Pattern[str], what: str) -> LangValues | None:
        if self._at_end(i) or self._is_blank(i):
            self._expect(i, 1, what)
            return None
        m = pattern.fullmatch(self.lines[i])
        if m is None:
            self._expect(i, 1, what)
            return None
        values = self._values(i, m.group("values"), m.start("values"))
        if values is None:
            return None
        return LangValues(lang=m.group("lang"), values=values)

    def _synonym_line(self, i: int) -> LangValues | None:
        return self._lang_values_line(i, _SYNONYM_RE, "a synonyms line")

    def _stopword_line(self, i: int) -> LangValues | None:
        return self._lang_values_line(i, _STOPWORD_RE, "a stopwords line")

    def _name_line(self, i: int) -> LangValues | None:
        return self._lang_values_line(i, _NAME_RE, "a name line")

    def _parent_line(self, i: int) -> ParentRef | None:
        m = None if self._at_end(i) else _PARENT_RE.fullmatch(self.lines[i])
        if m is None or not m.group("name").strip():
            self._expect(i, 1, "a parent line")
            return None
        return ParentRef(lang=m.group("lang"), name=m.group("name").lstrip())

    def _property_line(self, i: int) -> CategoryProperty | None:
        m = None if self._at_end(i) else _PROPERTY_RE.fullmatch(self.lines[i])
        if m is None:
            self._expect(i, 1, "a property line")
            return None
        return CategoryProperty(name=m.group("name"), lang=m.group("lang"), value=m.group("value"))

    # ---- line groups ----

    def _group(self, i: int, line_rule: Callable[[int], T | None]) -> tuple[list[T], list[str], int] | None:
        """
        Match `comment* line (line | comment)*` starting at line index i.

        Returns (items, comments, next index), or None when no line matches.
        """
        comments: list[str] = []
        j = i
        while self._is_comment(j):
            comments.append(self.lines[j])
            j += 1

        first = line_rule(j)
        if first is None:
            return None
        items = [first]
        j += 1

        while not self._at_end(j) and not self._is_blank(j):
            if self._is_comment(j):
                comments.append(self.lines[j])
                j += 1
                continue
            item = line_rule(j)
            if item is None:
                break
            items.append(item)
            j += 1

        return items, comments, j

    # ---- blocks ----

    def _synonym_block(self, i: int) -> tuple[Block, int] | None:
        group = self._group(i, self._synonym_line)
        if group is None:
            return None
        entries, comments, j = group
        return SynonymBlock(line=i + 1, entries=entries, comments=comments), j

    def _stopword_block(self, i: int) -> tuple[Block, int] | None:
        group = self._group(i, self._stopword_line)
        if group is None:
            return None
        entries, comments, j = group
        return StopwordBlock(line=i + 1, entries=entries, comments=comments), j

    def _category_block(self, i: int) -> tuple[Block, int] | None:
        parents: list[ParentRef] = []
        comments: list[str] = []
        j = i

        parent_group = self._group(j, self._parent_line)
        if parent_group is not None:
            parents, parent_comments, j = parent_group
            comments.extend(parent_comments)

        name_group = self._group(j, self._name_line)
        if name_group is None:
            return None
        names, name_comments, j = name_group
        comments.extend(name_comments)

        properties: list[CategoryProperty] = []
        property_group = self._group(j, self._property_line)
        if property_group is not None:
            properties, property_comments, j = property_group
            comments.extend(property_comments)

        block = CategoryBlock(
            line=i + 1,
            parents=parents,
            names=names,
            properties=properties,
            comments=comments,
        )
        return block, j

    def _comment_block(self, i: int) -> tuple[Block, int] | None:
        j = i
        while self._is_comment(j):
            j += 1
        if j == i:
            self._expect(i, 1, "a comment line")
            return None
        return CommentBlock(line=i + 1, comments=self.lines[i:j]), j

    def _block(self, i: int) -> tuple[Block, int] | None:
        for name in BLOCK_ALTERNATIVES:
            parsed = self._alternatives[name](i)
            if parsed is not None:
                return parsed
        return None

    def _skip_blank(self, i: int) -> int:
        while self._is_blank(i):
            i += 1
        return i

    def parse(self) -> list[Block]:
        blocks: list[Block] = []
        i = self._skip_blank(0)
        while not self._at_end(i):
            parsed = self._block(i)
            if parsed is None:
                raise self._error()
            block, i = parsed
            blocks.append(block)

            if not self._at_end(i) and not self._is_blank(i):
                self._expect(i, 1, "a blank line")
                raise self._error()
            i = self._skip_blank(i)
        return blocks


def parse_taxonomy(text: str) -> list[Block]:
    """
    Parse taxonomy text into an ordered list of typed blocks.

    Args:
        text: Complete file contents (after text fixups)

    Returns:
        Blocks in source order, each carrying its 1-based start line

    Raises:
        TaxonomyParseError: At the farthest position any rule reached, for the
            first block that cannot be parsed. No partial result is returned.
    """
    return _Parser(text).parse()
