from flex_reviews.core.slugs import collapse_name, from_slug, to_slug


def test_to_slug_collapses_punctuation_runs() -> None:
    assert to_slug("2B E1 - 33 St Clements") == "2b-e1-33-st-clements"
    assert to_slug("  The Putney Apart!  ") == "the-putney-apart"
    assert to_slug("---") == ""


def test_from_slug_keeps_unit_codes_upper_case() -> None:
    assert from_slug("2b-e1-33-st-clements") == "2B E1 33 ST Clements"
    assert from_slug("the-putney-apart") == "The Putney Apart"
    assert from_slug("") == ""


def test_collapse_name_folds_spaces_and_hyphens() -> None:
    assert collapse_name("2B E1 - 33 St Clements") == "2b e1 33 st clements"
    assert collapse_name("  The  Putney-Apart ") == "the putney apart"
