"""Tests for category suggestion."""

import pytest

from finsync.domain.category_matcher import (
    CategoryDefinition,
    CategoryMatch,
    CategoryMatcher,
    MAX_ALTERNATIVES,
    levenshtein_distance,
    similarity,
)


@pytest.fixture
def matcher():
    """Create a matcher with the default table."""
    return CategoryMatcher()


def test_levenshtein_distance():
    """Test edit distance."""
    assert levenshtein_distance("kitten", "sitting") == 3
    assert levenshtein_distance("", "abc") == 3
    assert levenshtein_distance("same", "same") == 0


def test_similarity():
    """Test normalized similarity."""
    assert similarity("abc", "ABC") == 1.0
    assert similarity("", "") == 1.0
    assert similarity("farmacya", "farmacia") == pytest.approx(0.875)


def test_merchant_and_keywords(matcher):
    """Test a supermarket purchase."""
    result = matcher.categorize("Supermercado Extra")
    assert result.category_id == "food"
    assert result.category_name == "Alimentação"
    assert result.confidence == 1.0


def test_salary(matcher):
    """Test salary suggestion."""
    result = matcher.categorize("Prefeitura Salario")
    assert result.category_id == "salary"
    assert result.confidence > 0


def test_fuzzy_match_for_typos(matcher):
    """Test that a misspelled keyword still matches."""
    result = matcher.categorize("Farmacya Centro")
    assert result.category_id == "health"
    assert 0 < result.confidence < 1.0


def test_alternatives_ranked(matcher):
    """Test that runners-up are listed in score order."""
    result = matcher.categorize("Uber Eats ifood")
    ids = {result.category_id} | {alt.category_id for alt in result.alternatives}

    assert {"transport", "food"} <= ids
    assert len(result.alternatives) <= MAX_ALTERNATIVES
    confidences = [alt.confidence for alt in result.alternatives]
    assert confidences == sorted(confidences, reverse=True)
    assert all(0 < c <= result.confidence for c in confidences)


def test_no_match_falls_back_with_zero_confidence(matcher):
    """Test the fallback suggestion."""
    result = matcher.categorize("xyzzy")
    assert result.category_id == "shopping"
    assert result.confidence == 0
    assert result.alternatives == []


def test_custom_definitions_and_fallback():
    """Test an injected table."""
    matcher = CategoryMatcher(
        definitions=[CategoryDefinition(id="pets", name="Pets", keywords=("petshop",))],
        fallback=CategoryMatch(category_id="other-expense", category_name="Outros", confidence=0.0),
    )
    assert matcher.categorize("Petshop Amigo").category_id == "pets"
    assert matcher.categorize("Padaria").category_id == "other-expense"
    assert matcher.get_definition("pets").name == "Pets"
    assert matcher.get_definition("food") is None
