# adapters/sql_fallback_search.py
#
# Description:
# Relational-only implementation of the search operations, used when the
# engine is unreachable. It returns the same result shapes as the engine path
# with coarser relevance: substring matching and newest-first ordering.

import asyncio
import logging
import time
from typing import List, Sequence

from sqlalchemy import distinct, func, or_, select
from sqlalchemy.exc import SQLAlchemyError

from core.domain.exceptions import FallbackSearchError
from core.domain.ingredient_taxonomy import distinct_normalized_names
from core.domain.models import AutocompleteResult, SearchRequest, SearchResult
from core.ports.services import RecipeSearchPort
from adapters.sql_recipe_repository import recipe_select, rows_to_recipes
from infrastructure.store.sql.database import Database
from infrastructure.store.sql.models import IngredientModel, RecipeModel

logger = logging.getLogger(__name__)

LIKE_ESCAPE = "\\"


def contains_pattern(text: str) -> str:
    """LIKE pattern matching `text` anywhere, with LIKE metacharacters escaped."""
    escaped = (
        text.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )
    return f"%{escaped}%"


def _ingredient_contains(text: str):
    return RecipeModel.ingredients.any(
        IngredientModel.name.ilike(contains_pattern(text), escape=LIKE_ESCAPE)
    )


class SqlFallbackSearchService(RecipeSearchPort):
    """Search over the relational store with case-insensitive substring matching."""

    def __init__(self, database: Database, default_take: int = 20, max_take: int = 100):
        self.database = database
        self.default_take = default_take
        self.max_take = max_take

    async def search_recipes(self, request: SearchRequest) -> SearchResult:
        return await self._run(self._search_recipes, request)

    async def cook_with_what_i_have(self, ingredients: Sequence[str], limit: int = 20) -> SearchResult:
        terms = [name.strip() for name in ingredients if name and name.strip()]
        if not terms:
            return SearchResult.empty()
        return await self._run(self._cook_with, terms, limit)

    async def autocomplete_ingredients(self, query: str, limit: int = 10) -> AutocompleteResult:
        if not query or not query.strip():
            return AutocompleteResult(suggestions=[], took=0)
        return await self._run(self._autocomplete, query.strip(), limit)

    async def _run(self, fn, *args):
        try:
            return await asyncio.to_thread(fn, *args)
        except SQLAlchemyError as e:
            raise FallbackSearchError(str(e)) from e

    def _cap(self, limit) -> int:
        if limit is None or limit < 1:
            return self.default_take
        return min(limit, self.max_take)

    @staticmethod
    def _search_conditions(request: SearchRequest) -> List:
        conditions = [RecipeModel.is_public.is_(True)]

        text = request.text
        if text:
            pattern = contains_pattern(text)
            conditions.append(or_(
                RecipeModel.title.ilike(pattern, escape=LIKE_ESCAPE),
                RecipeModel.description.ilike(pattern, escape=LIKE_ESCAPE),
                _ingredient_contains(text),
            ))

        for ingredient in request.ingredient_terms:
            conditions.append(_ingredient_contains(ingredient))

        if request.cuisines:
            conditions.append(RecipeModel.cuisine.in_(list(request.cuisines)))
        if request.difficulties:
            conditions.append(RecipeModel.difficulty.in_(list(request.difficulties)))
        if request.max_cooking_time is not None:
            conditions.append(RecipeModel.cooking_time <= request.max_cooking_time)
        if request.min_servings is not None:
            conditions.append(RecipeModel.servings >= request.min_servings)
        if request.max_servings is not None:
            conditions.append(RecipeModel.servings <= request.max_servings)
        if request.author_id:
            conditions.append(RecipeModel.author_id == request.author_id)
        return conditions

    def _page(self, conditions: List, skip: int, take: int, start_time: float) -> SearchResult:
        with self.database.session() as session:
            total = session.scalar(select(func.count(RecipeModel.id)).where(*conditions)) or 0
            rows = session.scalars(
                recipe_select()
                .where(*conditions)
                .order_by(RecipeModel.created_at.desc(), RecipeModel.id)
                .offset(skip)
                .limit(take)
            ).all()
            recipes = rows_to_recipes(session, rows)

        took = int((time.time() - start_time) * 1000)
        return SearchResult(recipes=recipes, total=int(total), took=took, max_score=None)

    def _search_recipes(self, request: SearchRequest) -> SearchResult:
        start_time = time.time()
        conditions = self._search_conditions(request)
        take = request.effective_take(self.default_take, self.max_take)
        result = self._page(conditions, request.effective_skip(), take, start_time)
        logger.info(f"Fallback search returned {len(result.recipes)} of {result.total} recipes")
        return result

    def _cook_with(self, ingredients: List[str], limit: int) -> SearchResult:
        start_time = time.time()
        conditions = [
            RecipeModel.is_public.is_(True),
            or_(*[_ingredient_contains(name) for name in ingredients]),
        ]
        return self._page(conditions, 0, self._cap(limit), start_time)

    def _autocomplete(self, text: str, limit: int) -> AutocompleteResult:
        start_time = time.time()
        normalized_name = func.lower(func.trim(IngredientModel.name))
        take = self._cap(limit)
        with self.database.session() as session:
            names = session.scalars(
                select(distinct(normalized_name))
                .where(IngredientModel.name.ilike(contains_pattern(text), escape=LIKE_ESCAPE))
                .limit(take)
            ).all()

        suggestions = distinct_normalized_names(names)[:take]
        took = int((time.time() - start_time) * 1000)
        return AutocompleteResult(suggestions=suggestions, took=took)
