"""Core ports (interfaces) for the recipe search service"""

from .repositories import RecipeRepository
from .search_index import EngineHit, EngineSearchResponse, SearchIndexRepository
from .services import RecipeSearchPort

__all__ = [
    "RecipeRepository",
    "EngineHit",
    "EngineSearchResponse",
    "SearchIndexRepository",
    "RecipeSearchPort",
]
