"""
Taxonomy handling: grammar, text fixups and normalization.

Parses the Open Food Facts `categories.txt` format into typed blocks and
normalizes them into Category records.
All functions in this module are pure (no file I/O).
"""

from domain.taxonomy.fixups import TextFixup, apply_fixups
from domain.taxonomy.grammar import BLOCK_ALTERNATIVES, TaxonomyParseError, parse_taxonomy
from domain.taxonomy.loader import parse_fixups_config
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
from domain.taxonomy.normalizer import (
    MAIN_LANG,
    Category,
    CategoryName,
    Taxonomy,
    fix_case,
    normalize_blocks,
    resolve_main_name,
)

__all__ = [
    # Parsing
    "parse_taxonomy",
    "TaxonomyParseError",
    "BLOCK_ALTERNATIVES",
    # Parser output
    "Block",
    "CategoryBlock",
    "SynonymBlock",
    "StopwordBlock",
    "CommentBlock",
    "LangValues",
    "ParentRef",
    "CategoryProperty",
    # Fixups
    "TextFixup",
    "apply_fixups",
    "parse_fixups_config",
    # Normalization
    "Taxonomy",
    "Category",
    "CategoryName",
    "MAIN_LANG",
    "fix_case",
    "normalize_blocks",
    "resolve_main_name",
]
