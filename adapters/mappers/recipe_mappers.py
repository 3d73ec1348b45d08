# adapters/mappers/recipe_mappers.py
#
# Description:
# Converts ORM rows of the system of record into domain Recipe objects.

from dataclasses import dataclass
from typing import Optional

from core.domain.models import Author, Ingredient, Instruction, Recipe
from infrastructure.store.sql.models import RecipeModel


@dataclass
class RecipeAggregates:
    """Rating and comment aggregates computed with grouped count queries."""
    avg_rating: Optional[float] = None
    ratings_count: int = 0
    comments_count: int = 0


class RecipeMapper:
    """Maps ORM rows to domain models."""

    @staticmethod
    def to_domain(row: RecipeModel, aggregates: Optional[RecipeAggregates] = None) -> Recipe:
        aggregates = aggregates or RecipeAggregates()

        author = None
        if row.author is not None:
            author = Author(
                id=row.author.id,
                username=row.author.username,
                first_name=row.author.first_name,
                last_name=row.author.last_name,
                avatar=row.author.avatar,
            )

        return Recipe(
            id=row.id,
            title=row.title,
            description=row.description,
            cuisine=row.cuisine,
            difficulty=row.difficulty,
            cooking_time=row.cooking_time,
            servings=row.servings,
            image_url=row.image_url,
            is_public=bool(row.is_public),
            author_id=row.author_id,
            author=author,
            ingredients=[
                Ingredient(
                    id=ingredient.id,
                    name=ingredient.name,
                    quantity=ingredient.quantity,
                    unit=ingredient.unit,
                    notes=ingredient.notes,
                )
                for ingredient in row.ingredients
            ],
            instructions=[
                Instruction(
                    id=instruction.id,
                    step_number=instruction.step_number,
                    description=instruction.description,
                )
                for instruction in row.instructions
            ],
            avg_rating=aggregates.avg_rating,
            ratings_count=aggregates.ratings_count,
            comments_count=aggregates.comments_count,
            created_at=row.created_at,
            updated_at=row.updated_at,
        )
