import pytest

from conftest import make_taxonomy
from domain.taxonomy import Category, CategoryName, fix_case, resolve_main_name


def test_normalizes_names_and_parents(fruits_taxonomy) -> None:
    fruits, apples = fruits_taxonomy.categories

    assert fruits.names == {"en": ["Fruits", "Fruit"], "fr": ["Fruits"]}
    assert fruits.parents == []
    assert apples.parents == [CategoryName(lang="en", name="Fruits")]
    assert apples.main_name == CategoryName(lang="en", name="Apples")


def test_fix_case_upper_cases_first_letter_only() -> None:
    assert fix_case("fruits à coque") == "Fruits à coque"
    assert fix_case("Apples") == "Apples"
    assert fix_case("iPhone cases") == "IPhone cases"
    assert fix_case("") == ""
    assert fix_case("3 grain bread") == "3 grain bread"


def test_lowercase_names_and_parents_are_fixed() -> None:
    (category,) = make_taxonomy("<en:fruits\nen:apples\n").categories

    assert category.names == {"en": ["Apples"]}
    assert category.parents == [CategoryName(lang="en", name="Fruits")]


def test_repeated_language_lines_are_merged_without_duplicates() -> None:
    (category,) = make_taxonomy("en:Apples\nfr:Pommes\nen:Apple, Apples\n").categories

    assert category.names == {"en": ["Apples", "Apple"], "fr": ["Pommes"]}
    assert [str(n) for n in category.all_names()] == ["en:Apples", "en:Apple", "fr:Pommes"]


def test_english_main_name_is_preferred() -> None:
    (category,) = make_taxonomy("fr:Pommes\nen:Apples\n").categories

    assert category.main_name == CategoryName(lang="en", name="Apples")


def test_main_name_falls_back_to_first_language() -> None:
    (category,) = make_taxonomy("fr:Pommes, Pomme\nde:Äpfel\n").categories

    assert category.main_name == CategoryName(lang="fr", name="Pommes")


def test_category_without_names_has_no_main_name() -> None:
    with pytest.raises(ValueError, match="line 12"):
        resolve_main_name(Category(line=12))


def test_synonyms_and_stopwords_are_collected_per_language() -> None:
    text = (
        "synonyms:en:soda, soft drink\n\n"
        "synonyms:en:pop, fizzy drink\n\n"
        "stopwords:fr:aux, au\n\n"
        "stopwords:fr:au, de\n\n"
        "# just a comment\n\n"
        "en:Sodas\n"
    )

    taxonomy = make_taxonomy(text)

    assert taxonomy.synonyms == {"en": [["soda", "soft drink"], ["pop", "fizzy drink"]]}
    assert taxonomy.stopwords == {"fr": ["aux", "au", "de"]}
    assert len(taxonomy.categories) == 1


def test_find_by_main_name(fruits_taxonomy) -> None:
    apples = fruits_taxonomy.find("Apples")

    assert apples is not None
    assert apples.names["fr"] == ["Pommes"]
    assert fruits_taxonomy.find("Pommes") is None
    assert fruits_taxonomy.find("Pommes", lang="fr") is None


def test_properties_are_kept() -> None:
    (category,) = make_taxonomy("en:Apples\nwikidata:en:Q89 \n").categories

    assert [(p.name, p.lang, p.value) for p in category.properties] == [("wikidata", "en", "Q89")]
