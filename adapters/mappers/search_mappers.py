# adapters/mappers/search_mappers.py
#
# Description:
# Mappers to convert between API schemas (FastAPI/Pydantic models) and domain models.
# This ensures the core domain remains independent of web framework specifics.

from app.api.schemas.search import (
    Author as ApiAuthor,
    AutocompleteResponse,
    IngredientLine,
    InstructionStep,
    RecipeOut,
    SearchRecipesRequest,
    SearchRecipesResponse,
)
from app.api.schemas.sync import ReindexResponse

from core.domain.models import (
    AutocompleteResult, BulkSyncReport, Recipe, SearchRequest, SearchResult,
)


class SearchMapper:
    """
    Mapper class for converting between API schemas and domain models.

    This mapper acts as an anti-corruption layer, ensuring that changes
    in the API layer don't affect the core domain logic.
    """

    @staticmethod
    def api_request_to_domain(api_request: SearchRecipesRequest) -> SearchRequest:
        """Convert API SearchRecipesRequest to domain SearchRequest."""
        return SearchRequest(
            query=api_request.query,
            ingredients=list(api_request.ingredients),
            cuisines=list(api_request.cuisines),
            difficulties=list(api_request.difficulties),
            max_cooking_time=api_request.max_cooking_time,
            min_servings=api_request.min_servings,
            max_servings=api_request.max_servings,
            author_id=api_request.author_id,
            skip=api_request.skip,
            take=api_request.take,
        )

    @staticmethod
    def domain_recipe_to_api(recipe: Recipe) -> RecipeOut:
        """Convert a domain Recipe to the API representation."""
        author = None
        if recipe.author is not None:
            author = ApiAuthor(
                id=recipe.author.id,
                username=recipe.author.username,
                first_name=recipe.author.first_name,
                last_name=recipe.author.last_name,
                avatar=recipe.author.avatar,
            )

        return RecipeOut(
            id=recipe.id,
            title=recipe.title,
            description=recipe.description,
            cuisine=recipe.cuisine,
            difficulty=recipe.difficulty,
            cooking_time=recipe.cooking_time,
            servings=recipe.servings,
            image_url=recipe.image_url,
            is_public=recipe.is_public,
            author_id=recipe.author_id,
            author=author,
            ingredients=[
                IngredientLine(
                    id=ingredient.id,
                    name=ingredient.name,
                    quantity=ingredient.quantity,
                    unit=ingredient.unit,
                    notes=ingredient.notes,
                )
                for ingredient in recipe.ingredients
            ],
            instructions=[
                InstructionStep(
                    id=instruction.id,
                    step_number=instruction.step_number,
                    description=instruction.description,
                )
                for instruction in recipe.instructions
            ],
            avg_rating=recipe.avg_rating,
            ratings_count=recipe.ratings_count,
            comments_count=recipe.comments_count,
            created_at=recipe.created_at,
            updated_at=recipe.updated_at,
        )

    @staticmethod
    def domain_result_to_api(result: SearchResult) -> SearchRecipesResponse:
        return SearchRecipesResponse(
            recipes=[SearchMapper.domain_recipe_to_api(recipe) for recipe in result.recipes],
            total=result.total,
            took=result.took,
            max_score=result.max_score,
        )

    @staticmethod
    def domain_autocomplete_to_api(result: AutocompleteResult) -> AutocompleteResponse:
        return AutocompleteResponse(suggestions=list(result.suggestions), took=result.took)

    @staticmethod
    def domain_report_to_api(report: BulkSyncReport) -> ReindexResponse:
        return ReindexResponse(ok=report.ok, **report.to_dict())
