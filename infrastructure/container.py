# infrastructure/container.py
#
# Description:
# Dependency injection container for the recipe search service.
#
# This is the COMPOSITION ROOT of the application - the only place where
# we wire together all the dependencies. It belongs in the infrastructure
# layer because it knows about concrete implementations. Every client is
# created here, started in `startup()` and released in `shutdown()`.

import logging
import time
from typing import Dict

from core.domain.circuit_breaker import CircuitBreaker
from core.domain.document_projector import DocumentProjector
from core.domain.exceptions import SearchEngineError
from core.domain.failover_search_service import FailoverSearchService
from core.domain.index_sync_service import IndexSyncService
from core.domain.query_builder import RecipeQueryBuilder
from core.domain.search_service import RecipeSearchService
from adapters.api_facade import AdminApiFacade, SearchApiFacade
from adapters.opensearch_index_adapter import OpenSearchIndexAdapter
from adapters.sql_fallback_search import SqlFallbackSearchService
from adapters.sql_recipe_repository import SqlAlchemyRecipeRepository
from infrastructure.store.opensearch.client import OpenSearchClient
from infrastructure.store.opensearch.index_schema import IndexSchemaManager
from infrastructure.store.sql.database import Database

logger = logging.getLogger(__name__)

# Seconds to wait for in-flight index syncs at shutdown
SHUTDOWN_DRAIN_TIMEOUT = 10.0


class DIContainer:
    """
    Dependency Injection Container for the recipe search service.

    This is the COMPOSITION ROOT - the place where the application is wired together.
    It follows the Ports & Adapters pattern by:
    1. Creating concrete implementations (adapters) for the ports
    2. Injecting dependencies into the core domain services
    3. Managing the lifecycle of all components
    """

    def __init__(self, settings):
        self.settings = settings

        # Stores
        self.database = Database(settings.database_url, echo=settings.database_echo)
        self.opensearch = OpenSearchClient.from_settings(settings)
        self.schema_manager = IndexSchemaManager(
            self.opensearch.client,
            prefix=settings.opensearch_index_prefix,
            schema_version=settings.opensearch_schema_version,
        )

        # Adapters
        self.index_repository = OpenSearchIndexAdapter(self.opensearch, self.schema_manager)
        self.recipe_repository = SqlAlchemyRecipeRepository(self.database)

        # Write path
        self.projector = DocumentProjector(
            self.index_repository,
            recipe_index=self.schema_manager.recipe_index,
            ingredient_index=self.schema_manager.ingredient_index,
        )
        self.sync_service = IndexSyncService(
            self.recipe_repository,
            self.index_repository,
            self.projector,
            batch_size=settings.sync_bulk_batch_size,
        )

        # Read path
        self.query_builder = RecipeQueryBuilder(
            default_take=settings.search_default_take,
            max_take=settings.search_max_take,
        )
        self.engine_search = RecipeSearchService(
            self.index_repository,
            self.recipe_repository,
            self.query_builder,
            recipe_index=self.schema_manager.recipe_index,
            ingredient_index=self.schema_manager.ingredient_index,
        )
        self.fallback_search = SqlFallbackSearchService(
            self.database,
            default_take=settings.search_default_take,
            max_take=settings.search_max_take,
        )
        self.engine_breaker = CircuitBreaker(
            "opensearch",
            failure_threshold=settings.search_circuit_failure_threshold,
            reset_timeout=settings.search_circuit_reset_seconds,
        )
        self.search_service = FailoverSearchService(
            self.engine_search,
            self.fallback_search,
            self.engine_breaker,
            fallback_enabled=settings.search_fallback_enabled,
        )

        # Facades for the web layer
        self.search_facade = SearchApiFacade(self.search_service)
        self.admin_facade = AdminApiFacade(self.sync_service)

        logger.info("Dependency container initialized")

    async def startup(self) -> None:
        """
        Prepare the stores.

        An unreachable engine is not fatal: the failure is logged, the engine
        circuit is opened and reads are served by the relational fallback.
        """
        if self.settings.database_auto_create:
            self.database.create_all()

        if not await self.index_repository.ping():
            logger.error(
                f"OpenSearch at {self.opensearch.host}:{self.opensearch.port} is unreachable; "
                "serving searches from the relational fallback"
            )
            self.engine_breaker.trip()
            return

        try:
            created = await self.index_repository.ensure_indices()
            for index_name, was_created in created.items():
                logger.info(f"Index {index_name}: {'created' if was_created else 'already exists'}")
        except SearchEngineError as e:
            logger.error(f"Could not ensure search indices at startup: {e}")
            self.engine_breaker.trip()

    async def shutdown(self) -> None:
        await self.sync_service.drain(timeout=SHUTDOWN_DRAIN_TIMEOUT)
        self.opensearch.close()
        self.database.close()

    async def health(self) -> Dict[str, Dict[str, object]]:
        """Probe each dependency; returns a status entry per component."""
        components: Dict[str, Dict[str, object]] = {}

        start_time = time.time()
        try:
            self.database.ping()
            components["database"] = {"healthy": True, "message": "Database connection successful"}
        except Exception as e:
            logger.error(f"Database health check failed: {e}")
            components["database"] = {"healthy": False, "message": f"Database error: {e}"}
        components["database"]["latency_ms"] = (time.time() - start_time) * 1000

        start_time = time.time()
        reachable = await self.index_repository.ping()
        components["opensearch"] = {
            "healthy": reachable,
            "message": "OpenSearch reachable" if reachable else "OpenSearch unreachable",
            "latency_ms": (time.time() - start_time) * 1000,
            "circuit": self.engine_breaker.state.value,
        }
        return components
