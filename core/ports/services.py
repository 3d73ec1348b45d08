# core/ports/services.py
#
# Description:
# Port interface for the caller-facing search operations.
# Both the engine-backed search and the relational fallback implement it,
# which lets the failover service swap one for the other transparently.

from abc import ABC, abstractmethod
from typing import Sequence

from ..domain.models import AutocompleteResult, SearchRequest, SearchResult


class RecipeSearchPort(ABC):
    """Port for recipe search, pantry search and ingredient autocomplete."""

    @abstractmethod
    async def search_recipes(self, request: SearchRequest) -> SearchResult:
        pass

    @abstractmethod
    async def cook_with_what_i_have(self, ingredients: Sequence[str], limit: int = 20) -> SearchResult:
        pass

    @abstractmethod
    async def autocomplete_ingredients(self, query: str, limit: int = 10) -> AutocompleteResult:
        pass
