# app/api/schemas/sync.py
#
# Description:
# Schemas for recipe mutation events and administrative reindexing.

from typing import List

from pydantic import BaseModel, Field

from core.domain.models import RecipeEventType


class RecipeEventRequest(BaseModel):
    """Sent by the recipe service after a mutation has been committed."""
    recipe_id: str = Field(..., min_length=1)
    event: RecipeEventType


class RecipeEventAccepted(BaseModel):
    status: str = "accepted"
    recipe_id: str
    event: RecipeEventType


class ReindexRequest(BaseModel):
    batch_size: int = Field(500, ge=1, le=5000)


class ReindexResponse(BaseModel):
    ok: bool
    recipes_indexed: int
    recipes_failed: List[str]
    stale_documents_removed: int
    facets_indexed: int
    facets_failed: List[str]
    errors: List[str]
    took: int
