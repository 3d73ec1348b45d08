# app/api/dependencies.py
#
# Description:
# FastAPI dependencies that hand the request handlers their collaborators
# from the container created in the application lifespan.

from fastapi import Request

from adapters.api_facade import AdminApiFacade, SearchApiFacade
from core.domain.index_sync_service import IndexSyncService
from infrastructure.container import DIContainer


def get_container(request: Request) -> DIContainer:
    return request.app.state.container


def get_search_facade(request: Request) -> SearchApiFacade:
    return get_container(request).search_facade


def get_admin_facade(request: Request) -> AdminApiFacade:
    return get_container(request).admin_facade


def get_sync_service(request: Request) -> IndexSyncService:
    return get_container(request).sync_service
