"""
Tests for ingredient name normalization and categorization.
"""

import pytest

from core.domain.ingredient_taxonomy import (
    CATEGORY_RULES, categorize_ingredient, count_usage, distinct_normalized_names, facet_id,
    merge_usage_counts, normalize_ingredient_name, whitespace_key,
)


class TestNormalization:

    def test_normalize_lowercases_and_collapses_whitespace(self):
        assert normalize_ingredient_name("  Olive   OIL ") == "olive oil"

    def test_facet_id_ignores_whitespace(self):
        assert facet_id("Red  Bell Pepper") == facet_id("redbell pepper") == "redbellpepper"

    def test_whitespace_key_ignores_all_whitespace(self):
        assert whitespace_key("Olive Oil") == whitespace_key("olive\toil") == "oliveoil"

    def test_distinct_names_keep_first_seen_order(self):
        names = ["Garlic", "onion", " garlic ", "", "ONION", "basil"]

        assert distinct_normalized_names(names) == ["garlic", "onion", "basil"]

    def test_distinct_names_merge_whitespace_variants(self):
        assert distinct_normalized_names(["Olive Oil", "oliveoil", "olive\toil"]) == ["olive oil"]


class TestUsageCounts:

    def test_count_usage_matches_on_whitespace_key(self):
        rows = [("Olive Oil", 2), ("oliveoil", 1), ("garlic", 4)]

        assert count_usage(["olive oil", "saffron"], rows) == {"olive oil": 3, "saffron": 0}

    def test_merge_keeps_first_spelling(self):
        rows = [("Olive Oil", 2), ("oliveoil", 1), ("  ", 5), ("Garlic", 1)]

        assert merge_usage_counts(rows) == {"olive oil": 3, "garlic": 1}


class TestCategorization:

    @pytest.mark.parametrize("name,category", [
        ("chicken breast", "protein"),
        ("Smoked Salmon", "protein"),
        ("red onion", "vegetable"),
        ("blueberry", "fruit"),
        ("basmati rice", "grain"),
        ("heavy cream", "dairy"),
        ("dried oregano", "seasoning"),
        ("olive oil", "other"),
    ])
    def test_keyword_categories(self, name, category):
        assert categorize_ingredient(name) == category

    def test_first_matching_rule_wins(self):
        # "pepper" appears under both vegetable and seasoning
        assert categorize_ingredient("black pepper") == "vegetable"
        assert categorize_ingredient("bell pepper") == "vegetable"

    def test_rule_order_is_stable(self):
        assert [category for category, _ in CATEGORY_RULES] == [
            "protein", "vegetable", "fruit", "grain", "dairy", "seasoning",
        ]

    def test_earlier_category_beats_later_keyword(self):
        # Contains both "butter" (dairy) and "chicken" (protein)
        assert categorize_ingredient("butter chicken") == "protein"
