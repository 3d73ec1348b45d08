# core/domain/index_sync_service.py
#
# Description:
# Keeps the search projection consistent with the system of record.
#
# Key Responsibilities:
# - Incremental sync after each committed recipe mutation (create, update,
#   publish/unpublish, delete), scheduled fire-and-forget so the mutation
#   never waits on or fails because of the engine.
# - Ingredient facet upserts with usage counts and categories.
# - Full, idempotent reindex that streams the store page by page, removes
#   documents that are no longer public and rebuilds every facet.
#
# Failures on this path are logged and reported as outcome values; they are
# never raised to the caller.

import asyncio
import logging
import time
from typing import Iterable, List, Optional, Set

from .document_projector import DocumentProjector
from .exceptions import ProjectionError, SearchError
from .ingredient_taxonomy import categorize_ingredient, distinct_normalized_names, facet_id
from .models import (
    BulkIndexReport, BulkItemFailure, BulkSyncReport, IngredientFacet, RecipeEvent,
    RecipeEventType, SyncOutcome, SyncStatus,
)
from ..ports.repositories import RecipeRepository
from ..ports.search_index import SearchIndexRepository

logger = logging.getLogger(__name__)


class IndexSyncService:
    """Write-path synchronization between the relational store and the engine."""

    def __init__(
        self,
        recipe_repository: RecipeRepository,
        index_repository: SearchIndexRepository,
        projector: DocumentProjector,
        batch_size: int = 500,
    ):
        self.recipe_repository = recipe_repository
        self.index_repository = index_repository
        self.projector = projector
        self.batch_size = batch_size
        self._pending: Set[asyncio.Task] = set()

    async def sync_recipe(self, recipe_id: str) -> SyncOutcome:
        """Bring the index document of one recipe in line with its current row."""
        try:
            recipe = await self.recipe_repository.get_recipe(recipe_id)
        except SearchError as e:
            logger.error(f"Failed to load recipe {recipe_id} for sync: {e}")
            return SyncOutcome(recipe_id, SyncStatus.FAILED, error=str(e))

        if recipe is None or not recipe.is_public:
            reason = "not found" if recipe is None else "not public"
            logger.info(f"Recipe {recipe_id} is {reason}; removing it from the index")
            return await self.delete_recipe(recipe_id)

        try:
            await self.projector.write(recipe)
        except (ProjectionError, SearchError) as e:
            logger.error(f"Failed to index recipe {recipe_id}: {e}")
            return SyncOutcome(recipe_id, SyncStatus.FAILED, error=str(e))

        logger.info(f"Synced recipe {recipe_id} to the search index")

        facet_report = await self.sync_ingredients(i.name for i in recipe.ingredients)
        if facet_report.failures:
            logger.warning(f"Recipe {recipe_id} indexed but {facet_report.failed} ingredient facets failed")
        return SyncOutcome(recipe_id, SyncStatus.INDEXED)

    async def delete_recipe(self, recipe_id: str) -> SyncOutcome:
        """Remove a recipe document; an absent document counts as success."""
        try:
            await self.projector.delete(recipe_id)
        except SearchError as e:
            logger.error(f"Failed to delete recipe {recipe_id} from the index: {e}")
            return SyncOutcome(recipe_id, SyncStatus.FAILED, error=str(e))
        logger.info(f"Deleted recipe {recipe_id} from the search index")
        return SyncOutcome(recipe_id, SyncStatus.DELETED)

    async def sync_ingredients(self, names: Iterable[str]) -> BulkIndexReport:
        """Recompute and upsert the facets for the given ingredient names."""
        normalized = distinct_normalized_names(names)
        if not normalized:
            return BulkIndexReport()

        try:
            counts = await self.recipe_repository.count_ingredient_usage(normalized)
            facets = [
                IngredientFacet(
                    name=name,
                    usage_count=counts.get(name, 0),
                    category=categorize_ingredient(name),
                )
                for name in normalized
            ]
            return await self.projector.write_facets(facets)
        except SearchError as e:
            logger.error(f"Failed to sync ingredient facets {normalized}: {e}")
            return _all_failed([facet_id(name) for name in normalized], str(e))

    async def handle_event(self, event: RecipeEvent) -> SyncOutcome:
        """Apply a committed recipe mutation to the index."""
        if event.event_type == RecipeEventType.DELETED:
            return await self.delete_recipe(event.recipe_id)
        return await self.sync_recipe(event.recipe_id)

    def dispatch(self, event: RecipeEvent) -> asyncio.Task:
        """
        Schedule `handle_event` without waiting for it.

        Must be called from a running event loop after the mutation has been
        committed. The task is tracked until it finishes so `drain()` can wait
        for in-flight syncs at shutdown.
        """
        task = asyncio.create_task(self.handle_event(event))
        self._pending.add(task)
        task.add_done_callback(self._on_dispatch_done)
        return task

    def _on_dispatch_done(self, task: asyncio.Task) -> None:
        self._pending.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error(f"Background recipe sync crashed: {error!r}")

    @property
    def pending(self) -> int:
        return len(self._pending)

    async def drain(self, timeout: Optional[float] = None) -> None:
        """Wait for dispatched syncs to finish."""
        if not self._pending:
            return
        _, not_done = await asyncio.wait(list(self._pending), timeout=timeout)
        if not_done:
            logger.warning(f"{len(not_done)} recipe syncs still running after drain timeout")

    async def bulk_sync_all(self, batch_size: Optional[int] = None) -> BulkSyncReport:
        """
        Reindex every public recipe and rebuild every ingredient facet.

        Safe to re-run and to run while incremental syncs are happening; the
        last write for a given id wins.
        """
        batch_size = batch_size or self.batch_size
        start_time = time.time()
        report = BulkSyncReport()
        public_ids: Set[str] = set()

        logger.info(f"Starting full reindex (batch size {batch_size})")
        try:
            async for batch in self.recipe_repository.iter_public_recipe_batches(batch_size):
                public_ids.update(recipe.id for recipe in batch)
                batch_report = await self._bulk_write_batch(batch)
                report.recipes_indexed += batch_report.succeeded
                report.recipes_failed.extend(batch_report.failed_ids)
                logger.info(f"Indexed {report.recipes_indexed} recipes so far")
        except SearchError as e:
            logger.error(f"Full reindex aborted while streaming recipes: {e}")
            report.errors.append(f"recipes: {e}")
            report.took = int((time.time() - start_time) * 1000)
            return report

        report.stale_documents_removed = await self._remove_stale_documents(public_ids, report)
        await self._rebuild_facets(report)

        report.took = int((time.time() - start_time) * 1000)
        logger.info(
            f"Full reindex finished in {report.took}ms: {report.recipes_indexed} recipes, "
            f"{len(report.recipes_failed)} failed, {report.stale_documents_removed} stale removed, "
            f"{report.facets_indexed} facets"
        )
        return report

    async def provision_and_reindex(self, batch_size: Optional[int] = None) -> BulkSyncReport:
        """
        Create missing indices, then run a full reindex.

        Raises:
            SearchError: if the indices cannot be provisioned.
        """
        created = await self.index_repository.ensure_indices()
        for index_name, was_created in created.items():
            logger.info(f"Index {index_name}: {'created' if was_created else 'already exists'}")
        return await self.bulk_sync_all(batch_size)

    async def _bulk_write_batch(self, batch) -> BulkIndexReport:
        try:
            return await self.projector.bulk_write(batch)
        except SearchError as e:
            logger.error(f"Bulk write of {len(batch)} recipes failed: {e}")
            return _all_failed([recipe.id for recipe in batch], str(e))

    async def _remove_stale_documents(self, public_ids: Set[str], report: BulkSyncReport) -> int:
        try:
            indexed_ids = await self.index_repository.list_document_ids(self.projector.recipe_index)
            candidates = [doc_id for doc_id in indexed_ids if doc_id not in public_ids]
            if not candidates:
                return 0
            # Recipes published after the stream passed their id are public now
            republished = {
                recipe.id for recipe in await self.recipe_repository.get_public_recipes(candidates)
            }
            stale = [doc_id for doc_id in candidates if doc_id not in republished]
            if not stale:
                return 0
            delete_report = await self.projector.bulk_delete(stale)
        except SearchError as e:
            logger.error(f"Stale document sweep failed: {e}")
            report.errors.append(f"stale sweep: {e}")
            return 0
        logger.info(f"Removed {delete_report.succeeded} documents that are no longer public")
        return delete_report.succeeded

    async def _rebuild_facets(self, report: BulkSyncReport) -> None:
        try:
            counts = await self.recipe_repository.ingredient_usage_counts()
            facets = [
                IngredientFacet(name=name, usage_count=count, category=categorize_ingredient(name))
                for name, count in counts.items()
                if name
            ]
            facet_report = await self.projector.write_facets(facets)
        except SearchError as e:
            logger.error(f"Ingredient facet rebuild failed: {e}")
            report.errors.append(f"facets: {e}")
            return
        report.facets_indexed = facet_report.succeeded
        report.facets_failed = facet_report.failed_ids


def _all_failed(document_ids: List[str], reason: str) -> BulkIndexReport:
    return BulkIndexReport(
        failures=[BulkItemFailure(document_id=str(doc_id), status=None, reason=reason) for doc_id in document_ids]
    )
