# adapters/sql_recipe_repository.py
#
# Description:
# Adapter implementation of the RecipeRepository port on top of SQLAlchemy.
# Blocking ORM work runs in a worker thread so the event loop stays free.

import asyncio
import logging
from typing import AsyncIterator, Dict, List, Optional, Sequence, Tuple

from sqlalchemy import Select, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from core.domain.exceptions import RecordStoreError
from core.domain.ingredient_taxonomy import count_usage, merge_usage_counts
from core.domain.models import Recipe
from core.ports.repositories import RecipeRepository
from adapters.mappers.recipe_mappers import RecipeAggregates, RecipeMapper
from infrastructure.store.sql.database import Database
from infrastructure.store.sql.models import CommentModel, IngredientModel, RatingModel, RecipeModel

logger = logging.getLogger(__name__)


def recipe_select() -> Select:
    """SELECT for recipes with the author, ingredients and instructions eagerly loaded."""
    return select(RecipeModel).options(
        selectinload(RecipeModel.author),
        selectinload(RecipeModel.ingredients),
        selectinload(RecipeModel.instructions),
    )


def load_aggregates(session: Session, recipe_ids: Sequence[str]) -> Dict[str, RecipeAggregates]:
    """Average rating, rating count and comment count per recipe id."""
    aggregates = {recipe_id: RecipeAggregates() for recipe_id in recipe_ids}
    if not recipe_ids:
        return aggregates

    rating_rows = session.execute(
        select(RatingModel.recipe_id, func.avg(RatingModel.value), func.count(RatingModel.id))
        .where(RatingModel.recipe_id.in_(recipe_ids))
        .group_by(RatingModel.recipe_id)
    )
    for recipe_id, average, count in rating_rows:
        aggregates[recipe_id].avg_rating = float(average) if average is not None else None
        aggregates[recipe_id].ratings_count = int(count)

    comment_rows = session.execute(
        select(CommentModel.recipe_id, func.count(CommentModel.id))
        .where(CommentModel.recipe_id.in_(recipe_ids))
        .group_by(CommentModel.recipe_id)
    )
    for recipe_id, count in comment_rows:
        aggregates[recipe_id].comments_count = int(count)

    return aggregates


def rows_to_recipes(session: Session, rows: Sequence[RecipeModel]) -> List[Recipe]:
    aggregates = load_aggregates(session, [row.id for row in rows])
    return [RecipeMapper.to_domain(row, aggregates.get(row.id)) for row in rows]


class SqlAlchemyRecipeRepository(RecipeRepository):
    """Reads recipes, their aggregates and ingredient usage from the relational store."""

    def __init__(self, database: Database):
        self.database = database

    async def get_recipe(self, recipe_id: str) -> Optional[Recipe]:
        return await self._run(self._get_recipe, recipe_id)

    async def get_public_recipes(self, recipe_ids: Sequence[str]) -> List[Recipe]:
        if not recipe_ids:
            return []
        return await self._run(self._get_public_recipes, list(recipe_ids))

    async def iter_public_recipe_batches(self, batch_size: int) -> AsyncIterator[List[Recipe]]:
        last_id: Optional[str] = None
        while True:
            batch = await self._run(self._load_public_batch, last_id, batch_size)
            if not batch:
                return
            yield batch
            if len(batch) < batch_size:
                return
            last_id = batch[-1].id

    async def count_ingredient_usage(self, names: Sequence[str]) -> Dict[str, int]:
        if not names:
            return {}
        return await self._run(self._count_ingredient_usage, list(names))

    async def ingredient_usage_counts(self) -> Dict[str, int]:
        return await self._run(self._ingredient_usage_counts)

    async def _run(self, fn, *args):
        try:
            return await asyncio.to_thread(fn, *args)
        except SQLAlchemyError as e:
            logger.error(f"Record store query {fn.__name__} failed: {e}")
            raise RecordStoreError(str(e)) from e

    def _get_recipe(self, recipe_id: str) -> Optional[Recipe]:
        with self.database.session() as session:
            row = session.scalars(recipe_select().where(RecipeModel.id == recipe_id)).first()
            if row is None:
                return None
            return rows_to_recipes(session, [row])[0]

    def _get_public_recipes(self, recipe_ids: List[str]) -> List[Recipe]:
        with self.database.session() as session:
            rows = session.scalars(
                recipe_select().where(RecipeModel.id.in_(recipe_ids), RecipeModel.is_public.is_(True))
            ).all()
            return rows_to_recipes(session, rows)

    def _load_public_batch(self, last_id: Optional[str], batch_size: int) -> List[Recipe]:
        with self.database.session() as session:
            stmt = recipe_select().where(RecipeModel.is_public.is_(True))
            if last_id is not None:
                stmt = stmt.where(RecipeModel.id > last_id)
            rows = session.scalars(stmt.order_by(RecipeModel.id).limit(batch_size)).all()
            return rows_to_recipes(session, rows)

    def _count_ingredient_usage(self, names: List[str]) -> Dict[str, int]:
        with self.database.session() as session:
            return count_usage(names, self._name_counts(session))

    def _ingredient_usage_counts(self) -> Dict[str, int]:
        with self.database.session() as session:
            return merge_usage_counts(self._name_counts(session))

    @staticmethod
    def _name_counts(session: Session) -> List[Tuple[str, int]]:
        # Grouped by raw name; whitespace folding is done with whitespace_key in Python
        rows = session.execute(
            select(IngredientModel.name, func.count(IngredientModel.id)).group_by(IngredientModel.name)
        )
        return [(name, int(count)) for name, count in rows]
