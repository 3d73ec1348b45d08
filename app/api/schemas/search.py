# app/api/schemas/search.py
#
# Description:
# Pydantic request and response schemas for the recipe search endpoints.

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from core.domain.models import Cuisine, Difficulty


class SearchRecipesRequest(BaseModel):
    """Recipe search with free text, required ingredients and hard filters."""
    query: Optional[str] = Field(None, description="Free text matched against title, description, ingredients and steps")
    ingredients: List[str] = Field(default_factory=list, description="Every ingredient must be present (fuzzy)")
    cuisines: List[Cuisine] = Field(default_factory=list)
    difficulties: List[Difficulty] = Field(default_factory=list)
    max_cooking_time: Optional[int] = Field(None, ge=1, description="Minutes")
    min_servings: Optional[int] = Field(None, ge=1, le=20)
    max_servings: Optional[int] = Field(None, ge=1, le=20)
    author_id: Optional[str] = None
    skip: int = Field(0, ge=0)
    take: int = Field(20, ge=1, le=100)


class CookWithRequest(BaseModel):
    """Pantry search: any ingredient may match, recipes using more of them rank higher."""
    ingredients: List[str] = Field(..., min_length=1)
    limit: int = Field(20, ge=1, le=100)


class Author(BaseModel):
    id: str
    username: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    avatar: Optional[str] = None


class IngredientLine(BaseModel):
    id: Optional[str] = None
    name: str
    quantity: float
    unit: str
    notes: Optional[str] = None


class InstructionStep(BaseModel):
    id: Optional[str] = None
    step_number: int
    description: str


class RecipeOut(BaseModel):
    id: str
    title: str
    description: Optional[str] = None
    cuisine: Optional[Cuisine] = None
    difficulty: Optional[Difficulty] = None
    cooking_time: Optional[int] = None
    servings: Optional[int] = None
    image_url: Optional[str] = None
    is_public: bool
    author_id: str
    author: Optional[Author] = None
    ingredients: List[IngredientLine] = Field(default_factory=list)
    instructions: List[InstructionStep] = Field(default_factory=list)
    avg_rating: Optional[float] = None
    ratings_count: int = 0
    comments_count: int = 0
    created_at: datetime
    updated_at: Optional[datetime] = None


class SearchRecipesResponse(BaseModel):
    recipes: List[RecipeOut]
    total: int = Field(description="Engine hit count; may exceed len(recipes) while the index catches up")
    took: int = Field(description="Milliseconds")
    max_score: Optional[float] = None


class AutocompleteResponse(BaseModel):
    suggestions: List[str]
    took: int
