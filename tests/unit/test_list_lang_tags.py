from tools.list_lang_tags import count_lang_tags


def test_counts_names_parents_synonyms_and_stopwords() -> None:
    text = (
        "synonyms:en:soda, pop\n\n"
        "stopwords:fr:de\n\n"
        "en:Fruits\nfr:Fruits\n\n"
        "<en:Fruits\nen:Apples\nnl-BE:Appels\n"
    )

    counts = count_lang_tags(text)

    assert counts == {"en": 4, "fr": 2, "nl-BE": 1}
