"""Tests for allergen matching."""

from allerwise.domain.allergens import AllergenVerdict
from allerwise.services.allergen_matcher import (
    ALLERGEN_SYNONYMS,
    clean_allergen_tag,
    clean_allergen_tags,
    failed_scan_result,
    find_matched_allergens,
    is_allergen_match,
    scan_result_from_product,
)


def test_clean_allergen_tag_strips_language_prefix() -> None:
    assert clean_allergen_tag("en:milk") == "milk"
    assert clean_allergen_tag("fr:en:soya") == "soya"
    assert clean_allergen_tag("gluten") == "gluten"


def test_clean_allergen_tags_drops_empty_entries() -> None:
    assert clean_allergen_tags(["en:eggs", "en:", ""]) == ["eggs"]
    assert clean_allergen_tags(None) == []


def test_synonym_matching_is_symmetric() -> None:
    for canonical, synonyms in ALLERGEN_SYNONYMS.items():
        for synonym in synonyms:
            assert is_allergen_match(canonical, synonym)
            assert is_allergen_match(synonym, canonical)


def test_match_is_case_insensitive() -> None:
    assert is_allergen_match("Peanuts", "PEANUT")
    assert not is_allergen_match("Milk", "eggs")


def test_declared_allergen_marks_product_risky() -> None:
    matched = find_matched_allergens(
        user_allergens=["Milk", "Peanuts"],
        product_allergens=clean_allergen_tags(["en:peanuts"]),
        product_traces=[],
        ingredients=["sugar, salt"],
    )

    assert matched == ["Peanuts"]


def test_no_overlap_is_safe() -> None:
    matched = find_matched_allergens(
        user_allergens=["Fish"],
        product_allergens=[],
        product_traces=[],
        ingredients=["wheat flour"],
    )

    assert matched == []


def test_traces_and_ingredients_are_checked() -> None:
    matched = find_matched_allergens(
        user_allergens=["Sesame", "Milk", "Eggs"],
        product_allergens=[],
        product_traces=["egg"],
        ingredients=["Flour, sesame seeds, salt"],
    )

    assert matched == ["Sesame", "Eggs"]


def test_duplicate_profile_entries_reported_once() -> None:
    matched = find_matched_allergens(
        user_allergens=["Milk", "Milk"],
        product_allergens=["dairy"],
        product_traces=[],
        ingredients=[],
    )

    assert matched == ["Milk"]


def test_scan_result_from_product_builds_verdict() -> None:
    product = {
        "product_name": "Peanut Bar",
        "image_url": "https://images.example/bar.jpg",
        "ingredients_text": "peanuts, sugar",
        "allergens_tags": ["en:peanuts"],
        "traces_tags": ["en:milk"],
    }

    result = scan_result_from_product("5000159407236", product, ["Peanuts", "Milk"])

    assert result.is_successful
    assert result.verdict is AllergenVerdict.RISKY
    assert result.matched_allergens == ["Peanuts", "Milk"]
    assert result.allergens == ["peanuts"]
    assert result.traces == ["milk"]
    assert result.ingredients == ["peanuts, sugar"]


def test_scan_result_without_ingredients_text() -> None:
    result = scan_result_from_product("1", {"product_name": "Water"}, ["Fish"])

    assert result.verdict is AllergenVerdict.SAFE
    assert result.ingredients == []
    assert result.matched_allergens == []


def test_failed_scan_result_is_unknown() -> None:
    result = failed_scan_result("42", "Product not found")

    assert not result.is_successful
    assert result.verdict is AllergenVerdict.UNKNOWN
    assert result.matched_allergens == []
    assert result.error_message == "Product not found"


def test_verdict_parsing_and_display() -> None:
    assert AllergenVerdict.from_string("RISKY") is AllergenVerdict.RISKY
    assert AllergenVerdict.from_string("maybe") is AllergenVerdict.UNKNOWN
    assert AllergenVerdict.from_string(None) is AllergenVerdict.UNKNOWN
    assert AllergenVerdict.RISKY.display_text == "Risk Detected"
    assert AllergenVerdict.SAFE.display_text == "Safe"


def test_scan_result_document_roundtrip() -> None:
    result = failed_scan_result("42", "offline")

    restored = type(result).from_document(result.to_document())

    assert restored == result
