# app/api/v1/routes/admin.py
#
# Description:
# Administrative endpoints for the search projection.
# The reindex call provisions missing indices and rebuilds every document
# from the system of record; it is idempotent and safe to repeat.

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException

from app.api.dependencies import get_admin_facade
from app.api.schemas.sync import ReindexRequest, ReindexResponse
from adapters.api_facade import AdminApiFacade
from core.domain.exceptions import SearchError

router = APIRouter(prefix="/admin", tags=["admin"])
logger = logging.getLogger(__name__)


@router.post("/reindex", response_model=ReindexResponse)
async def reindex(req: Optional[ReindexRequest] = None, facade: AdminApiFacade = Depends(get_admin_facade)):
    """
    Ensure the indices exist, then reindex all public recipes and ingredient facets.

    Returns:
        ReindexResponse: counts of indexed, failed and removed documents.
    """
    req = req or ReindexRequest()
    try:
        return await facade.reindex(req.batch_size)
    except SearchError as e:
        logger.error(f"Reindex failed: {e}")
        raise HTTPException(status_code=503, detail=f"Reindex failed: {e}")
