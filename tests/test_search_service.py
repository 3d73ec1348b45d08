"""
Tests for the engine-backed search service and result reconciliation.
"""

import pytest

from core.domain.models import SearchRequest
from core.domain.query_builder import RecipeQueryBuilder
from core.domain.search_service import RecipeSearchService, reconcile


@pytest.fixture
def search_service(fake_index, recipe_repository):
    return RecipeSearchService(
        fake_index,
        recipe_repository,
        RecipeQueryBuilder(),
        recipe_index="test_recipes",
        ingredient_index="test_ingredients",
    )


class TestReconcile:

    def test_preserves_engine_order(self, make_recipe):
        records = [make_recipe(recipe_id=i) for i in ("c", "a", "b")]

        assert [r.id for r in reconcile(["a", "b", "c"], records)] == ["a", "b", "c"]

    def test_drops_ids_without_records(self, make_recipe):
        records = [make_recipe(recipe_id="a"), make_recipe(recipe_id="c")]

        assert [r.id for r in reconcile(["a", "b", "c"], records)] == ["a", "c"]

    def test_ignores_records_not_requested(self, make_recipe):
        records = [make_recipe(recipe_id="a"), make_recipe(recipe_id="z")]

        assert [r.id for r in reconcile(["a"], records)] == ["a"]


class TestSearchRecipes:

    @pytest.mark.asyncio
    async def test_returns_records_in_engine_order(self, search_service, fake_index, recipe_repository, make_recipe):
        for recipe_id in ("r1", "r2", "r3"):
            recipe_repository.add(make_recipe(recipe_id=recipe_id))
        fake_index.respond_with_ids(["r3", "r1", "r2"], max_score=7.5)

        result = await search_service.search_recipes(SearchRequest(query="pasta"))

        assert [r.id for r in result.recipes] == ["r3", "r1", "r2"]
        assert result.total == 3
        assert result.max_score == 7.5
        assert result.took >= 0

    @pytest.mark.asyncio
    async def test_drift_drops_recipes_but_keeps_engine_total(self, search_service, fake_index, recipe_repository, make_recipe):
        recipe_repository.add(make_recipe(recipe_id="r1"))
        recipe_repository.add(make_recipe(recipe_id="r2", is_public=False))
        fake_index.respond_with_ids(["r1", "r2", "deleted"], total=42)

        result = await search_service.search_recipes(SearchRequest(query="pasta"))

        assert [r.id for r in result.recipes] == ["r1"]
        assert result.total == 42

    @pytest.mark.asyncio
    async def test_sends_built_query_to_recipe_index(self, search_service, fake_index):
        await search_service.search_recipes(SearchRequest(query="soup", take=5))

        index, body = fake_index.search_calls[0]
        assert index == "test_recipes"
        assert body["size"] == 5
        assert body["_source"] == ["id"]

    @pytest.mark.asyncio
    async def test_empty_engine_result_skips_store(self, search_service, recipe_repository):
        result = await search_service.search_recipes(SearchRequest(query="nothing"))

        assert result.recipes == []
        assert result.total == 0
        assert result.max_score is None
        assert recipe_repository.fetched_ids == []

    @pytest.mark.asyncio
    async def test_engine_errors_propagate(self, search_service, fake_index, unavailable_error):
        fake_index.error = unavailable_error

        with pytest.raises(type(unavailable_error)):
            await search_service.search_recipes(SearchRequest(query="soup"))


class TestCookWithWhatIHave:

    @pytest.mark.asyncio
    async def test_uses_pantry_query(self, search_service, fake_index, recipe_repository, make_recipe):
        recipe_repository.add(make_recipe(recipe_id="r1", ingredients=["tomato", "basil"]))
        fake_index.respond_with_ids(["r1"])

        result = await search_service.cook_with_what_i_have(["tomato", "basil"], limit=10)

        assert [r.id for r in result.recipes] == ["r1"]
        body = fake_index.search_calls[0][1]
        assert len(body["query"]["bool"]["should"]) == 2
        assert body["size"] == 10

    @pytest.mark.asyncio
    async def test_empty_ingredient_list_returns_nothing(self, search_service, fake_index):
        result = await search_service.cook_with_what_i_have(["", "  "])

        assert result.recipes == []
        assert result.total == 0
        assert fake_index.search_calls == []


class TestAutocomplete:

    @pytest.mark.asyncio
    async def test_returns_names_in_engine_order(self, search_service, fake_index):
        fake_index.respond_with_names(["chicken", "chickpea"])

        result = await search_service.autocomplete_ingredients("chi", limit=5)

        assert result.suggestions == ["chicken", "chickpea"]
        index, body = fake_index.search_calls[0]
        assert index == "test_ingredients"
        assert body["size"] == 5

    @pytest.mark.asyncio
    async def test_blank_query_returns_no_suggestions(self, search_service, fake_index):
        result = await search_service.autocomplete_ingredients("   ")

        assert result.suggestions == []
        assert fake_index.search_calls == []
