# app/api/v1/routes/search.py
#
# Description:
# This module implements the caller-facing search endpoints: recipe search,
# "cook with what I have" and ingredient autocomplete.
# Engine outages are handled below this layer; a 503 is only returned when
# neither the engine nor the relational fallback can answer.

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from app.api.dependencies import get_search_facade
from app.api.schemas.search import (
    AutocompleteResponse, CookWithRequest, SearchRecipesRequest, SearchRecipesResponse,
)
from app.config.settings import settings
from adapters.api_facade import SearchApiFacade
from core.domain.exceptions import SearchUnavailableError

# Create an API router for the search functionality
router = APIRouter(prefix="/search", tags=["search"])
logger = logging.getLogger(__name__)


@router.post("/recipes", response_model=SearchRecipesResponse)
async def search_recipes(req: SearchRecipesRequest, facade: SearchApiFacade = Depends(get_search_facade)):
    """
    Search public recipes by free text, required ingredients and filters.

    Returns:
        SearchRecipesResponse: recipes in relevance order with the engine total.
    """
    try:
        return await facade.search_recipes(req)
    except SearchUnavailableError as e:
        logger.error(f"Recipe search failed: {e}")
        raise HTTPException(status_code=503, detail="Search service temporarily unavailable")


@router.post("/cook-with-what-i-have", response_model=SearchRecipesResponse)
async def cook_with_what_i_have(req: CookWithRequest, facade: SearchApiFacade = Depends(get_search_facade)):
    """Find recipes that use any of the given ingredients, best coverage first."""
    try:
        return await facade.cook_with_what_i_have(req)
    except SearchUnavailableError as e:
        logger.error(f"Pantry search failed: {e}")
        raise HTTPException(status_code=503, detail="Search service temporarily unavailable")


@router.get("/autocomplete/ingredients", response_model=AutocompleteResponse)
async def autocomplete_ingredients(
    query: str = Query(..., min_length=1, max_length=100),
    limit: Optional[int] = Query(None, ge=1, le=50),
    facade: SearchApiFacade = Depends(get_search_facade),
):
    """Suggest ingredient names for type-ahead, most used first."""
    try:
        return await facade.autocomplete_ingredients(query, limit or settings.autocomplete_default_limit)
    except SearchUnavailableError as e:
        logger.error(f"Ingredient autocomplete failed: {e}")
        raise HTTPException(status_code=503, detail="Search service temporarily unavailable")
