"""
Domain layer: Business logic with minimal external dependencies.

Contains:
- taxonomy: categories.txt grammar, text fixups and normalization
- categories: category references as found in product data
- topics: food rescue topics and their DocBook rendering
"""

from domain.categories import parse_category_reference
from domain.taxonomy import Category, CategoryName, Taxonomy
from domain.topics import Topic

__all__ = [
    "Category",
    "CategoryName",
    "Taxonomy",
    "Topic",
    "parse_category_reference",
]
