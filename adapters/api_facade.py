# adapters/api_facade.py
#
# Description:
# API Facade that provides a clean interface for the web layer to interact with the domain.
# This facade handles all the mapping between API schemas and domain models.

import logging

from app.api.schemas.search import (
    AutocompleteResponse, CookWithRequest, SearchRecipesRequest, SearchRecipesResponse,
)
from app.api.schemas.sync import ReindexResponse
from core.domain.index_sync_service import IndexSyncService
from core.ports.services import RecipeSearchPort
from adapters.mappers.search_mappers import SearchMapper

logger = logging.getLogger(__name__)


class SearchApiFacade:
    """
    Facade for search operations that bridges the API layer and domain layer.

    This facade:
    1. Converts API models to domain models
    2. Delegates to core domain services
    3. Converts domain responses back to API models
    """

    def __init__(self, search_service: RecipeSearchPort):
        self.search_service = search_service

    async def search_recipes(self, request: SearchRecipesRequest) -> SearchRecipesResponse:
        domain_request = SearchMapper.api_request_to_domain(request)

        logger.info(f"Executing recipe search: query='{(domain_request.text or '')[:50]}', "
                    f"ingredients={domain_request.ingredient_terms}, skip={domain_request.skip}, "
                    f"take={domain_request.take}")

        result = await self.search_service.search_recipes(domain_request)

        logger.info(f"Recipe search completed: {len(result.recipes)} of {result.total} results in {result.took}ms")
        return SearchMapper.domain_result_to_api(result)

    async def cook_with_what_i_have(self, request: CookWithRequest) -> SearchRecipesResponse:
        result = await self.search_service.cook_with_what_i_have(request.ingredients, request.limit)
        logger.info(f"Pantry search for {request.ingredients}: {len(result.recipes)} recipes in {result.took}ms")
        return SearchMapper.domain_result_to_api(result)

    async def autocomplete_ingredients(self, query: str, limit: int) -> AutocompleteResponse:
        result = await self.search_service.autocomplete_ingredients(query, limit)
        return SearchMapper.domain_autocomplete_to_api(result)


class AdminApiFacade:
    """Facade for administrative index operations."""

    def __init__(self, sync_service: IndexSyncService):
        self.sync_service = sync_service

    async def reindex(self, batch_size: int) -> ReindexResponse:
        logger.info(f"Admin reindex requested (batch size {batch_size})")
        report = await self.sync_service.provision_and_reindex(batch_size)
        return SearchMapper.domain_report_to_api(report)
