"""Category references as they appear in product data (`fr:Pommes`, `Apples`, `en:apples`)."""

import re

from domain.taxonomy.normalizer import MAIN_LANG, CategoryName

# `en:plant-based-foods`: a machine tag, not a display name
TAG_FORM_RE = re.compile(r"^[a-z][a-z]:[a-z-]+$")
LANG_PREFIX_RE = re.compile(r"^([a-z][a-z]):(.+)$")


def is_tag_form(reference: str) -> bool:
    return TAG_FORM_RE.match(reference.strip()) is not None


def parse_category_reference(reference: str, default_lang: str = MAIN_LANG) -> CategoryName | None:
    """
    Parse one category reference from a product record.

    Examples:
        >>> parse_category_reference("fr:Pommes")
        CategoryName(lang='fr', name='Pommes')
        >>> parse_category_reference(" Apples ")
        CategoryName(lang='en', name='Apples')

    Args:
        reference: Raw cell value
        default_lang: Language of references without a prefix

    Returns:
        The referenced name, or None for empty and tag-form references
    """
    ref = reference.strip()
    if not ref or is_tag_form(ref):
        return None
    m = LANG_PREFIX_RE.match(ref)
    if m is not None and m.group(2).strip():
        return CategoryName(lang=m.group(1), name=m.group(2).strip())
    return CategoryName(lang=default_lang, name=ref)


def split_references(cell: str, separator: str = ",") -> list[str]:
    """Split a multi-value cell, dropping empty items."""
    return [part.strip() for part in cell.split(separator) if part.strip()]
