"""Taxonomy normalization: parser blocks to canonical category records."""

from collections.abc import Sequence

from pydantic import BaseModel, ConfigDict, Field

from domain.taxonomy.models import (
    Block,
    CategoryBlock,
    CategoryProperty,
    LangValues,
    StopwordBlock,
    SynonymBlock,
)

MAIN_LANG = "en"


class CategoryName(BaseModel):
    """A (language, name) pair. Unique across the category store."""

    model_config = ConfigDict(frozen=True)

    lang: str
    name: str

    def __str__(self) -> str:
        return f"{self.lang}:{self.name}"


class Category(BaseModel):
    """A normalized category: every field is a list or mapping, never absent."""

    line: int = 0
    parents: list[CategoryName] = Field(default_factory=list)
    names: dict[str, list[str]] = Field(default_factory=dict)  # lang -> names, source order
    properties: list[CategoryProperty] = Field(default_factory=list)

    @property
    def main_name(self) -> CategoryName:
        return resolve_main_name(self)

    def all_names(self) -> list[CategoryName]:
        """All (language, name) pairs in source order."""
        return [CategoryName(lang=lang, name=name) for lang, names in self.names.items() for name in names]


class Taxonomy(BaseModel):
    """Normalized contents of a taxonomy file."""

    categories: list[Category] = Field(default_factory=list)
    synonyms: dict[str, list[list[str]]] = Field(default_factory=dict)  # lang -> synonym groups
    stopwords: dict[str, list[str]] = Field(default_factory=dict)  # lang -> stopwords

    def find(self, name: str, lang: str = MAIN_LANG) -> Category | None:
        """Look up a category by its main name."""
        wanted = CategoryName(lang=lang, name=name)
        return next((c for c in self.categories if c.main_name == wanted), None)


def fix_case(name: str) -> str:
    """
    Upper-case the first letter of a name that starts lowercase.

    Examples:
        >>> fix_case("fruits à coque")
        'Fruits à coque'
        >>> fix_case("Apples")
        'Apples'
    """
    if name and name[0].islower():
        return name[0].upper() + name[1:]
    return name


def resolve_main_name(category: Category) -> CategoryName:
    """
    Pick the name that identifies a category.

    English is preferred. Otherwise the first name of the first listed language is used.

    Raises:
        ValueError: If the category has no names at all
    """
    english = category.names.get(MAIN_LANG)
    if english:
        return CategoryName(lang=MAIN_LANG, name=english[0])
    for lang, names in category.names.items():
        if names:
            return CategoryName(lang=lang, name=names[0])
    raise ValueError(f"Category defined at line {category.line} has no names")


def _merge_names(lines: Sequence[LangValues]) -> dict[str, list[str]]:
    names: dict[str, list[str]] = {}
    for entry in lines:
        bucket = names.setdefault(entry.lang, [])
        for raw in entry.values:
            value = fix_case(raw.strip())
            if value and value not in bucket:
                bucket.append(value)
    return names


def normalize_category(block: CategoryBlock) -> Category:
    parents: list[CategoryName] = []
    for ref in block.parents:
        parent = CategoryName(lang=ref.lang, name=fix_case(ref.name.strip()))
        if parent not in parents:
            parents.append(parent)

    properties = [
        CategoryProperty(name=p.name, lang=p.lang, value=p.value.strip()) for p in block.properties
    ]
    return Category(
        line=block.line,
        parents=parents,
        names=_merge_names(block.names),
        properties=properties,
    )


def normalize_blocks(blocks: Sequence[Block]) -> Taxonomy:
    """
    Turn parsed blocks into a Taxonomy.

    - values are trimmed, lowercase initial letters are upper-cased
    - repeated name lines for one language are merged, duplicates dropped
    - synonym and stopword blocks are collected per language
    - comment blocks are dropped

    Args:
        blocks: Output of parse_taxonomy()

    Returns:
        Taxonomy with categories in source order
    """
    taxonomy = Taxonomy()
    for block in blocks:
        if isinstance(block, CategoryBlock):
            taxonomy.categories.append(normalize_category(block))
        elif isinstance(block, SynonymBlock):
            for entry in block.entries:
                group = [v.strip() for v in entry.values if v.strip()]
                taxonomy.synonyms.setdefault(entry.lang, []).append(group)
        elif isinstance(block, StopwordBlock):
            for entry in block.entries:
                bucket = taxonomy.stopwords.setdefault(entry.lang, [])
                for raw in entry.values:
                    value = raw.strip()
                    if value and value not in bucket:
                        bucket.append(value)
    return taxonomy
