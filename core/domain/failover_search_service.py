# core/domain/failover_search_service.py
#
# Description:
# Read-path failover between the engine-backed search and the relational
# fallback. Callers always receive the same result shape; degradation is only
# visible in logs and in the health report.

import logging
from typing import Awaitable, Callable, Sequence, TypeVar

from .circuit_breaker import CircuitBreaker
from .exceptions import (
    FallbackSearchError, RecordStoreError, SearchEngineError, SearchEngineQueryError, SearchUnavailableError,
)
from .models import AutocompleteResult, SearchRequest, SearchResult
from ..ports.services import RecipeSearchPort

logger = logging.getLogger(__name__)

T = TypeVar("T")


class FailoverSearchService(RecipeSearchPort):
    """Serves reads from `primary` and falls back to `fallback` when the engine fails."""

    def __init__(
        self,
        primary: RecipeSearchPort,
        fallback: RecipeSearchPort,
        breaker: CircuitBreaker,
        fallback_enabled: bool = True,
    ):
        self.primary = primary
        self.fallback = fallback
        self.breaker = breaker
        self.fallback_enabled = fallback_enabled

    async def search_recipes(self, request: SearchRequest) -> SearchResult:
        return await self._execute("search_recipes", lambda service: service.search_recipes(request))

    async def cook_with_what_i_have(self, ingredients: Sequence[str], limit: int = 20) -> SearchResult:
        return await self._execute(
            "cook_with_what_i_have",
            lambda service: service.cook_with_what_i_have(ingredients, limit),
        )

    async def autocomplete_ingredients(self, query: str, limit: int = 10) -> AutocompleteResult:
        return await self._execute(
            "autocomplete_ingredients",
            lambda service: service.autocomplete_ingredients(query, limit),
        )

    async def _execute(self, operation: str, call: Callable[[RecipeSearchPort], Awaitable[T]]) -> T:
        if self.breaker.can_execute():
            try:
                result = await call(self.primary)
                self.breaker.record_success()
                return result
            except SearchEngineError as e:
                # A rejected query says nothing about engine health
                if not isinstance(e, SearchEngineQueryError):
                    self.breaker.record_failure()
                if not self.fallback_enabled:
                    logger.error(f"{operation}: search engine failed and fallback is disabled: {e}")
                    raise SearchUnavailableError(f"Search engine unavailable: {e}") from e
                logger.warning(f"{operation}: search engine failed, using relational fallback: {e}")
            except RecordStoreError as e:
                logger.error(f"{operation}: record store failed during reconciliation: {e}")
                raise SearchUnavailableError(f"Record store unavailable: {e}") from e
        elif not self.fallback_enabled:
            raise SearchUnavailableError("Search engine circuit is open and fallback is disabled")
        else:
            logger.debug(f"{operation}: engine circuit open, using relational fallback")

        try:
            return await call(self.fallback)
        except FallbackSearchError as e:
            logger.error(f"{operation}: fallback search failed: {e}")
            raise SearchUnavailableError(f"Search unavailable: {e}") from e
