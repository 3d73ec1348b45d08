# core/domain/search_service.py
#
# Description:
# Engine-backed implementation of the caller-facing search operations.
# The engine decides *which* recipes match and in *what order*; the relational
# store decides *what* each recipe contains. This service runs both round trips
# and reconciles them.

import logging
import time
from typing import Dict, List, Sequence

from .models import AutocompleteResult, Recipe, SearchRequest, SearchResult
from .query_builder import RecipeQueryBuilder
from ..ports.repositories import RecipeRepository
from ..ports.search_index import EngineSearchResponse, SearchIndexRepository
from ..ports.services import RecipeSearchPort

logger = logging.getLogger(__name__)


def reconcile(ordered_ids: Sequence[str], records: Sequence[Recipe]) -> List[Recipe]:
    """
    Return `records` in the order of `ordered_ids`.

    Ids without a matching record (deleted or unpublished since they were
    indexed) are dropped; records that were not asked for are ignored.
    """
    by_id: Dict[str, Recipe] = {record.id: record for record in records}
    return [by_id[recipe_id] for recipe_id in ordered_ids if recipe_id in by_id]


class RecipeSearchService(RecipeSearchPort):
    """
    Search service that ranks with the engine and hydrates from the store.

    Each call makes two sequential round trips: the engine query (ids only)
    and one batched fetch of the public records for those ids.
    """

    def __init__(
        self,
        index_repository: SearchIndexRepository,
        recipe_repository: RecipeRepository,
        query_builder: RecipeQueryBuilder,
        recipe_index: str,
        ingredient_index: str,
    ):
        self.index_repository = index_repository
        self.recipe_repository = recipe_repository
        self.query_builder = query_builder
        self.recipe_index = recipe_index
        self.ingredient_index = ingredient_index

    async def search_recipes(self, request: SearchRequest) -> SearchResult:
        start_time = time.time()
        query = self.query_builder.build(request)
        response = await self.index_repository.search(self.recipe_index, query.to_body())
        return await self._hydrate(response, start_time)

    async def cook_with_what_i_have(self, ingredients: Sequence[str], limit: int = 20) -> SearchResult:
        start_time = time.time()
        terms = [name.strip() for name in ingredients if name and name.strip()]
        if not terms:
            return SearchResult.empty()
        query = self.query_builder.build_pantry(terms, limit)
        response = await self.index_repository.search(self.recipe_index, query.to_body())
        return await self._hydrate(response, start_time)

    async def autocomplete_ingredients(self, query: str, limit: int = 10) -> AutocompleteResult:
        start_time = time.time()
        if not query or not query.strip():
            return AutocompleteResult(suggestions=[], took=0)

        engine_query = self.query_builder.build_autocomplete(query, limit)
        response = await self.index_repository.search(self.ingredient_index, engine_query.to_body())
        suggestions = [hit.source["name"] for hit in response.hits if hit.source.get("name")]

        took = int((time.time() - start_time) * 1000)
        return AutocompleteResult(suggestions=suggestions, took=took)

    async def _hydrate(self, response: EngineSearchResponse, start_time: float) -> SearchResult:
        ids = response.ids
        records = await self.recipe_repository.get_public_recipes(ids) if ids else []
        recipes = reconcile(ids, records)

        if len(recipes) < len(ids):
            logger.info(f"Dropped {len(ids) - len(recipes)} search hits with no public record")

        took = int((time.time() - start_time) * 1000)
        return SearchResult(
            recipes=recipes,
            total=response.total,
            took=took,
            max_score=response.max_score,
        )
