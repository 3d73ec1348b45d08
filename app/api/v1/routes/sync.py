# app/api/v1/routes/sync.py
#
# Description:
# Receives committed recipe mutations from the recipe service and schedules
# the matching index sync. The caller gets an immediate 202; the sync runs in
# the background and its failures are only logged.

import logging

from fastapi import APIRouter, Depends

from app.api.dependencies import get_sync_service
from app.api.schemas.sync import RecipeEventAccepted, RecipeEventRequest
from core.domain.index_sync_service import IndexSyncService
from core.domain.models import RecipeEvent

router = APIRouter(prefix="/sync", tags=["sync"])
logger = logging.getLogger(__name__)


@router.post("/recipe-events", response_model=RecipeEventAccepted, status_code=202)
async def recipe_event(req: RecipeEventRequest, sync_service: IndexSyncService = Depends(get_sync_service)):
    """Accept a recipe created/updated/deleted event."""
    sync_service.dispatch(RecipeEvent(recipe_id=req.recipe_id, event_type=req.event))
    logger.info(f"Scheduled index sync for recipe {req.recipe_id} ({req.event.value})")
    return RecipeEventAccepted(recipe_id=req.recipe_id, event=req.event)
