# core/domain/document_projector.py
#
# Description:
# Turns authoritative recipe records into search documents and writes them to
# the engine through the SearchIndexRepository port.
#
# Key Responsibilities:
# - Pure projection of a Recipe (and of an IngredientFacet) into a flat document.
# - Single and bulk upserts, with per-item failure reporting for bulk writes.
# - Idempotent deletes: a document that is already gone is not an error.

import logging
from typing import Any, Dict, List, Sequence, Tuple

from .exceptions import ProjectionError
from .models import BulkIndexReport, BulkItemFailure, IngredientFacet, Recipe
from ..ports.search_index import SearchIndexRepository

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("id", "title", "author_id", "created_at")


class DocumentProjector:
    """Projects recipes into the recipe index and facets into the ingredient index."""

    def __init__(self, index_repository: SearchIndexRepository, recipe_index: str, ingredient_index: str):
        self.index_repository = index_repository
        self.recipe_index = recipe_index
        self.ingredient_index = ingredient_index

    @staticmethod
    def project(recipe: Recipe) -> Dict[str, Any]:
        """
        Build the index document for a recipe.

        Raises:
            ProjectionError: if a required field is missing.
        """
        missing = [name for name in REQUIRED_FIELDS if not getattr(recipe, name, None)]
        if missing:
            raise ProjectionError(getattr(recipe, "id", None), missing)

        return {
            "id": recipe.id,
            "title": recipe.title,
            "description": recipe.description,
            "cuisine": recipe.cuisine.value if recipe.cuisine else None,
            "difficulty": recipe.difficulty.value if recipe.difficulty else None,
            "cooking_time": recipe.cooking_time,
            "servings": recipe.servings,
            "is_public": recipe.is_public,
            "author_id": recipe.author_id,
            "author_username": recipe.author.username if recipe.author else None,
            "ingredients": [
                {
                    "name": ingredient.name,
                    "quantity": ingredient.quantity,
                    "unit": ingredient.unit,
                }
                for ingredient in recipe.ingredients
            ],
            "instructions": [
                {
                    "step_number": instruction.step_number,
                    "description": instruction.description,
                }
                for instruction in sorted(recipe.instructions, key=lambda i: i.step_number)
            ],
            "avg_rating": recipe.avg_rating,
            "ratings_count": recipe.ratings_count,
            "comments_count": recipe.comments_count,
            "created_at": recipe.created_at.isoformat(),
            "updated_at": recipe.updated_at.isoformat() if recipe.updated_at else None,
        }

    @staticmethod
    def project_facet(facet: IngredientFacet) -> Dict[str, Any]:
        return {
            "name": facet.name,
            "usage_count": facet.usage_count,
            "category": facet.category,
        }

    async def write(self, recipe: Recipe) -> None:
        """Project and upsert a single recipe, visible to searches once this returns."""
        document = self.project(recipe)
        await self.index_repository.index_document(self.recipe_index, recipe.id, document)
        logger.debug(f"Indexed recipe {recipe.id}")

    async def bulk_write(self, recipes: Sequence[Recipe]) -> BulkIndexReport:
        """
        Project and upsert many recipes in one bulk request.

        Recipes that cannot be projected are reported as failures next to the
        items the engine rejected; the rest of the batch is still written.
        """
        documents: List[Tuple[str, Dict[str, Any]]] = []
        projection_failures: List[BulkItemFailure] = []
        for recipe in recipes:
            try:
                documents.append((recipe.id, self.project(recipe)))
            except ProjectionError as e:
                logger.error(str(e))
                projection_failures.append(BulkItemFailure(document_id=str(recipe.id), status=None, reason=str(e)))

        report = BulkIndexReport()
        if documents:
            report = await self.index_repository.bulk_index(self.recipe_index, documents)
        report = report.merge(BulkIndexReport(failures=projection_failures))

        for failure in report.failures:
            logger.error(f"Recipe {failure.document_id} was not indexed (status={failure.status}): {failure.reason}")
        return report

    async def write_facets(self, facets: Sequence[IngredientFacet]) -> BulkIndexReport:
        """Upsert ingredient facets keyed by their facet id."""
        if not facets:
            return BulkIndexReport()
        documents = [(facet.facet_id, self.project_facet(facet)) for facet in facets]
        report = await self.index_repository.bulk_index(self.ingredient_index, documents)
        for failure in report.failures:
            logger.error(f"Ingredient facet {failure.document_id} was not indexed (status={failure.status}): {failure.reason}")
        return report

    async def delete(self, recipe_id: str) -> bool:
        """Remove a recipe document. Returns False when there was nothing to remove."""
        deleted = await self.index_repository.delete_document(self.recipe_index, recipe_id)
        if not deleted:
            logger.debug(f"Recipe {recipe_id} was not in the index")
        return deleted

    async def bulk_delete(self, recipe_ids: Sequence[str]) -> BulkIndexReport:
        if not recipe_ids:
            return BulkIndexReport()
        report = await self.index_repository.bulk_delete(self.recipe_index, recipe_ids)
        for failure in report.failures:
            logger.error(f"Recipe {failure.document_id} could not be removed (status={failure.status}): {failure.reason}")
        return report
