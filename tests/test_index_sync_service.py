"""
Tests for the write-path index synchronization service.
"""

import asyncio

import pytest

from core.domain.document_projector import DocumentProjector
from core.domain.exceptions import RecordStoreError
from core.domain.index_sync_service import IndexSyncService
from core.domain.models import RecipeEvent, RecipeEventType, SyncStatus

RECIPES = "test_recipes"
INGREDIENTS = "test_ingredients"


@pytest.fixture
def sync_service(recipe_repository, fake_index):
    projector = DocumentProjector(fake_index, recipe_index=RECIPES, ingredient_index=INGREDIENTS)
    return IndexSyncService(recipe_repository, fake_index, projector, batch_size=2)


class TestSyncRecipe:

    @pytest.mark.asyncio
    async def test_public_recipe_is_indexed_with_facets(self, sync_service, recipe_repository, fake_index, make_recipe):
        recipe_repository.add(make_recipe(recipe_id="r1", ingredients=["Chicken Breast", "garlic"]))
        recipe_repository.add(make_recipe(recipe_id="r2", ingredients=["chicken  breast"]))

        outcome = await sync_service.sync_recipe("r1")

        assert outcome.status == SyncStatus.INDEXED
        assert outcome.ok
        assert "r1" in fake_index.docs(RECIPES)
        facets = fake_index.docs(INGREDIENTS)
        assert facets["chickenbreast"] == {"name": "chicken breast", "usage_count": 2, "category": "protein"}
        assert facets["garlic"] == {"name": "garlic", "usage_count": 1, "category": "vegetable"}

    @pytest.mark.asyncio
    async def test_whitespace_variants_share_one_facet(self, sync_service, recipe_repository, fake_index, make_recipe):
        recipe_repository.add(make_recipe(recipe_id="r1", ingredients=["Olive Oil"]))
        recipe_repository.add(make_recipe(recipe_id="r2", ingredients=["oliveoil"]))

        await sync_service.sync_recipe("r1")
        await sync_service.sync_recipe("r2")

        facets = fake_index.docs(INGREDIENTS)
        assert list(facets) == ["oliveoil"]
        assert facets["oliveoil"]["usage_count"] == 2

        await sync_service.bulk_sync_all()

        assert list(fake_index.docs(INGREDIENTS)) == ["oliveoil"]
        assert fake_index.docs(INGREDIENTS)["oliveoil"]["usage_count"] == 2

    @pytest.mark.asyncio
    async def test_unpublished_recipe_is_removed(self, sync_service, recipe_repository, fake_index, make_recipe):
        recipe = recipe_repository.add(make_recipe(recipe_id="r1"))
        await sync_service.sync_recipe("r1")
        assert "r1" in fake_index.docs(RECIPES)

        recipe.is_public = False
        outcome = await sync_service.sync_recipe("r1")

        assert outcome.status == SyncStatus.DELETED
        assert "r1" not in fake_index.docs(RECIPES)

    @pytest.mark.asyncio
    async def test_missing_recipe_is_removed(self, sync_service, fake_index):
        fake_index.docs(RECIPES)["gone"] = {"id": "gone"}

        outcome = await sync_service.sync_recipe("gone")

        assert outcome.status == SyncStatus.DELETED
        assert fake_index.docs(RECIPES) == {}

    @pytest.mark.asyncio
    async def test_engine_failure_is_absorbed(self, sync_service, recipe_repository, fake_index, make_recipe, unavailable_error):
        recipe_repository.add(make_recipe(recipe_id="r1"))
        fake_index.error = unavailable_error

        outcome = await sync_service.sync_recipe("r1")

        assert outcome.status == SyncStatus.FAILED
        assert not outcome.ok
        assert "unreachable" in outcome.error

    @pytest.mark.asyncio
    async def test_store_failure_is_absorbed(self, sync_service, recipe_repository):
        recipe_repository.error = RecordStoreError("database is locked")

        outcome = await sync_service.sync_recipe("r1")

        assert outcome.status == SyncStatus.FAILED

    @pytest.mark.asyncio
    async def test_unprojectable_recipe_is_reported(self, sync_service, recipe_repository, fake_index, make_recipe):
        recipe_repository.add(make_recipe(recipe_id="r1", title=""))

        outcome = await sync_service.sync_recipe("r1")

        assert outcome.status == SyncStatus.FAILED
        assert fake_index.docs(RECIPES) == {}


class TestEvents:

    @pytest.mark.asyncio
    async def test_delete_event_removes_document(self, sync_service, fake_index):
        fake_index.docs(RECIPES)["r1"] = {"id": "r1"}

        outcome = await sync_service.handle_event(RecipeEvent("r1", RecipeEventType.DELETED))

        assert outcome.status == SyncStatus.DELETED
        assert fake_index.docs(RECIPES) == {}

    @pytest.mark.asyncio
    async def test_delete_of_absent_document_succeeds(self, sync_service):
        outcome = await sync_service.handle_event(RecipeEvent("never-indexed", RecipeEventType.DELETED))

        assert outcome.ok

    @pytest.mark.asyncio
    async def test_dispatch_runs_in_background(self, sync_service, recipe_repository, fake_index, make_recipe):
        recipe_repository.add(make_recipe(recipe_id="r1"))

        task = sync_service.dispatch(RecipeEvent("r1", RecipeEventType.CREATED))
        assert sync_service.pending == 1

        await sync_service.drain()

        assert task.done()
        assert task.result().status == SyncStatus.INDEXED
        assert sync_service.pending == 0
        assert "r1" in fake_index.docs(RECIPES)

    @pytest.mark.asyncio
    async def test_dispatch_failure_does_not_propagate(self, sync_service, recipe_repository, fake_index, make_recipe, unavailable_error):
        recipe_repository.add(make_recipe(recipe_id="r1"))
        fake_index.error = unavailable_error

        task = sync_service.dispatch(RecipeEvent("r1", RecipeEventType.UPDATED))
        await asyncio.wait_for(sync_service.drain(), timeout=5)

        assert task.result().status == SyncStatus.FAILED


class TestBulkSync:

    @pytest.mark.asyncio
    async def test_indexes_all_public_recipes_in_batches(self, sync_service, recipe_repository, fake_index, make_recipe):
        for i in range(5):
            recipe_repository.add(make_recipe(recipe_id=f"r{i}", ingredients=["egg"]))
        recipe_repository.add(make_recipe(recipe_id="private", is_public=False))

        report = await sync_service.bulk_sync_all()

        assert report.ok
        assert report.recipes_indexed == 5
        assert set(fake_index.docs(RECIPES)) == {f"r{i}" for i in range(5)}
        assert fake_index.docs(INGREDIENTS)["egg"]["usage_count"] == 5

    @pytest.mark.asyncio
    async def test_is_idempotent(self, sync_service, recipe_repository, fake_index, make_recipe):
        for i in range(3):
            recipe_repository.add(make_recipe(recipe_id=f"r{i}", ingredients=["flour", "milk"]))

        await sync_service.bulk_sync_all()
        first = {index: dict(docs) for index, docs in fake_index.documents.items()}
        await sync_service.bulk_sync_all()

        assert fake_index.documents == first

    @pytest.mark.asyncio
    async def test_removes_documents_that_are_no_longer_public(self, sync_service, recipe_repository, fake_index, make_recipe):
        recipe_repository.add(make_recipe(recipe_id="r1"))
        fake_index.docs(RECIPES)["stale"] = {"id": "stale"}

        report = await sync_service.bulk_sync_all()

        assert report.stale_documents_removed == 1
        assert set(fake_index.docs(RECIPES)) == {"r1"}

    @pytest.mark.asyncio
    async def test_recipe_published_during_reindex_is_kept(self, sync_service, recipe_repository, fake_index, make_recipe):
        for recipe_id in ("r1", "r2", "r3"):
            recipe_repository.add(make_recipe(recipe_id=recipe_id))
        stream = recipe_repository.iter_public_recipe_batches

        async def publish_after_first_page(batch_size):
            published = False
            async for batch in stream(batch_size):
                yield batch
                if not published:
                    # "r0" sorts before the keyset cursor, so the stream never sees it
                    published = True
                    recipe_repository.add(make_recipe(recipe_id="r0"))
                    await sync_service.sync_recipe("r0")

        recipe_repository.iter_public_recipe_batches = publish_after_first_page

        report = await sync_service.bulk_sync_all()

        assert report.recipes_indexed == 3
        assert report.stale_documents_removed == 0
        assert set(fake_index.docs(RECIPES)) == {"r0", "r1", "r2", "r3"}

    @pytest.mark.asyncio
    async def test_rejected_items_do_not_abort_the_batch(self, sync_service, recipe_repository, fake_index, make_recipe):
        for i in range(4):
            recipe_repository.add(make_recipe(recipe_id=f"r{i}"))
        fake_index.rejected_ids = {"r1"}

        report = await sync_service.bulk_sync_all()

        assert report.recipes_indexed == 3
        assert report.recipes_failed == ["r1"]
        assert not report.ok

    @pytest.mark.asyncio
    async def test_store_failure_is_reported(self, sync_service, recipe_repository):
        recipe_repository.error = RecordStoreError("connection refused")

        report = await sync_service.bulk_sync_all()

        assert report.errors
        assert report.recipes_indexed == 0

    @pytest.mark.asyncio
    async def test_provision_ensures_indices_first(self, sync_service, recipe_repository, fake_index, make_recipe):
        recipe_repository.add(make_recipe(recipe_id="r1"))

        report = await sync_service.provision_and_reindex()

        assert fake_index.ensure_calls == 1
        assert report.recipes_indexed == 1
