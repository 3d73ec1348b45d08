"""
Tests for the relational fallback search service.
"""

from datetime import datetime

import pytest

from adapters.sql_fallback_search import SqlFallbackSearchService, contains_pattern
from core.domain.exceptions import FallbackSearchError
from core.domain.models import Cuisine, Difficulty, SearchRequest


@pytest.fixture
def fallback(database):
    return SqlFallbackSearchService(database, default_take=20, max_take=100)


class TestSearchRecipes:

    @pytest.mark.asyncio
    async def test_text_matches_title_description_or_ingredient(self, fallback, seed_recipe):
        by_title = seed_recipe("Chicken Curry")
        by_description = seed_recipe("Weeknight Bowl", description="Spicy CHICKEN with rice")
        by_ingredient = seed_recipe("Club Sandwich", ingredients=["chicken breast", "bread"])
        seed_recipe("Tomato Soup", ingredients=["tomato"])

        result = await fallback.search_recipes(SearchRequest(query="chicken"))

        assert {r.id for r in result.recipes} == {by_title, by_description, by_ingredient}
        assert result.total == 3
        assert result.max_score is None

    @pytest.mark.asyncio
    async def test_newest_first(self, fallback, seed_recipe):
        older = seed_recipe("Pasta One", created_at=datetime(2023, 1, 1))
        newer = seed_recipe("Pasta Two", created_at=datetime(2024, 1, 1))

        result = await fallback.search_recipes(SearchRequest(query="pasta"))

        assert [r.id for r in result.recipes] == [newer, older]

    @pytest.mark.asyncio
    async def test_every_requested_ingredient_is_required(self, fallback, seed_recipe):
        both = seed_recipe("Garlic Chicken", ingredients=["Chicken thighs", "garlic"])
        seed_recipe("Roast Chicken", ingredients=["chicken"])

        result = await fallback.search_recipes(SearchRequest(ingredients=["chicken", "garlic"]))

        assert [r.id for r in result.recipes] == [both]

    @pytest.mark.asyncio
    async def test_private_recipes_are_never_returned(self, fallback, seed_recipe):
        seed_recipe("Secret Pasta", is_public=False)

        result = await fallback.search_recipes(SearchRequest(query="pasta"))

        assert result.recipes == []
        assert result.total == 0

    @pytest.mark.asyncio
    async def test_hard_filters(self, fallback, seed_recipe):
        match = seed_recipe("Pad Thai", cuisine=Cuisine.THAI, difficulty=Difficulty.MEDIUM,
                            cooking_time=25, servings=2, author_id="user-2")
        seed_recipe("Green Curry", cuisine=Cuisine.THAI, difficulty=Difficulty.HARD, cooking_time=25, servings=2)
        seed_recipe("Slow Pho", cuisine=Cuisine.THAI, difficulty=Difficulty.MEDIUM, cooking_time=240, servings=2)
        seed_recipe("Lasagna", cuisine=Cuisine.ITALIAN, difficulty=Difficulty.MEDIUM, cooking_time=25, servings=2)

        result = await fallback.search_recipes(SearchRequest(
            cuisines=[Cuisine.THAI],
            difficulties=[Difficulty.MEDIUM],
            max_cooking_time=30,
            min_servings=1,
            max_servings=4,
            author_id="user-2",
        ))

        assert [r.id for r in result.recipes] == [match]

    @pytest.mark.asyncio
    async def test_pagination_and_total(self, fallback, seed_recipe):
        for i in range(5):
            seed_recipe(f"Soup {i}")

        result = await fallback.search_recipes(SearchRequest(query="soup", skip=1, take=2))

        assert len(result.recipes) == 2
        assert result.total == 5

    @pytest.mark.asyncio
    async def test_like_metacharacters_are_literal(self, fallback, seed_recipe):
        seed_recipe("100% Rye Bread")
        seed_recipe("1000 Island Dressing")

        result = await fallback.search_recipes(SearchRequest(query="100%"))

        assert [r.title for r in result.recipes] == ["100% Rye Bread"]

    @pytest.mark.asyncio
    async def test_database_errors_are_typed(self, fallback, database):
        # Disposing the in-memory engine leaves a fresh database without tables
        database.close()

        with pytest.raises(FallbackSearchError):
            await fallback.search_recipes(SearchRequest(query="soup"))


class TestCookWith:

    @pytest.mark.asyncio
    async def test_any_ingredient_matches(self, fallback, seed_recipe):
        salad = seed_recipe("Caprese", ingredients=["tomato", "basil", "mozzarella"])
        pesto = seed_recipe("Pesto", ingredients=["Basil leaves", "pine nuts"])
        seed_recipe("Pancakes", ingredients=["flour", "egg"])

        result = await fallback.cook_with_what_i_have(["tomato", "basil"], limit=10)

        assert {r.id for r in result.recipes} == {salad, pesto}
        assert result.total == 2

    @pytest.mark.asyncio
    async def test_limit_is_capped(self, fallback, seed_recipe):
        for i in range(3):
            seed_recipe(f"Omelette {i}", ingredients=["egg"])

        result = await fallback.cook_with_what_i_have(["egg"], limit=2)

        assert len(result.recipes) == 2
        assert result.total == 3

    @pytest.mark.asyncio
    async def test_no_ingredients(self, fallback):
        result = await fallback.cook_with_what_i_have([])

        assert result.recipes == []


class TestAutocomplete:

    @pytest.mark.asyncio
    async def test_distinct_normalized_names(self, fallback, seed_recipe):
        seed_recipe("A", ingredients=["Chicken", "chickpeas"])
        seed_recipe("B", ingredients=[" chicken ", "Chives"])

        result = await fallback.autocomplete_ingredients("chi", limit=10)

        assert sorted(result.suggestions) == ["chicken", "chickpeas", "chives"]

    @pytest.mark.asyncio
    async def test_limit(self, fallback, seed_recipe):
        seed_recipe("A", ingredients=["onion", "red onion", "spring onion"])

        result = await fallback.autocomplete_ingredients("onion", limit=2)

        assert len(result.suggestions) == 2

    @pytest.mark.asyncio
    async def test_blank_query(self, fallback):
        result = await fallback.autocomplete_ingredients(" ")

        assert result.suggestions == []


def test_contains_pattern_escapes_like_wildcards():
    assert contains_pattern("50%_off") == "%50\\%\\_off%"
