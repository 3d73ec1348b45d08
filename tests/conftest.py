"""
Shared fixtures for the recipe search test suite.

Provides in-memory implementations of the ports, a recipe factory and an
in-memory SQLite database seeded through the ORM.
"""

from datetime import datetime, timedelta
from typing import Any, AsyncIterator, Dict, List, Optional, Sequence, Tuple

import pytest

from core.domain.exceptions import SearchEngineUnavailableError
from core.domain.ingredient_taxonomy import count_usage, merge_usage_counts
from core.domain.models import (
    Author, BulkIndexReport, BulkItemFailure, Cuisine, Difficulty, Ingredient, Instruction, Recipe,
)
from core.ports.repositories import RecipeRepository
from core.ports.search_index import EngineHit, EngineSearchResponse, SearchIndexRepository
from infrastructure.store.sql.database import Database
from infrastructure.store.sql.models import (
    CommentModel, IngredientModel, InstructionModel, RatingModel, RecipeModel, UserModel,
)

BASE_TIME = datetime(2024, 1, 1, 12, 0, 0)


class FakeSearchIndex(SearchIndexRepository):
    """In-memory engine: stores documents and replays scripted search responses."""

    def __init__(self):
        self.documents: Dict[str, Dict[str, Dict[str, Any]]] = {}
        self.search_responses: List[EngineSearchResponse] = []
        self.search_calls: List[Tuple[str, Dict[str, Any]]] = []
        self.rejected_ids = set()
        self.error: Optional[Exception] = None
        self.reachable = True
        self.ensure_calls = 0

    def _check(self):
        if self.error is not None:
            raise self.error

    def docs(self, index: str) -> Dict[str, Dict[str, Any]]:
        return self.documents.setdefault(index, {})

    async def ping(self) -> bool:
        return self.reachable

    async def ensure_indices(self) -> Dict[str, bool]:
        self._check()
        self.ensure_calls += 1
        return {"test_recipes": self.ensure_calls == 1, "test_ingredients": self.ensure_calls == 1}

    async def index_document(self, index, doc_id, document) -> None:
        self._check()
        self.docs(index)[doc_id] = document

    async def bulk_index(self, index, documents) -> BulkIndexReport:
        self._check()
        report = BulkIndexReport()
        for doc_id, document in documents:
            if doc_id in self.rejected_ids:
                report.failures.append(BulkItemFailure(doc_id, 400, "mapper_parsing_exception: bad field"))
                continue
            self.docs(index)[doc_id] = document
            report.succeeded += 1
        return report

    async def delete_document(self, index, doc_id) -> bool:
        self._check()
        return self.docs(index).pop(doc_id, None) is not None

    async def bulk_delete(self, index, doc_ids) -> BulkIndexReport:
        self._check()
        for doc_id in doc_ids:
            self.docs(index).pop(doc_id, None)
        return BulkIndexReport(succeeded=len(doc_ids))

    async def list_document_ids(self, index) -> List[str]:
        self._check()
        return list(self.docs(index))

    async def search(self, index, body) -> EngineSearchResponse:
        self._check()
        self.search_calls.append((index, body))
        if self.search_responses:
            return self.search_responses.pop(0)
        return EngineSearchResponse(hits=[], total=0, max_score=None)

    def respond_with_ids(self, ids: Sequence[str], total: Optional[int] = None, max_score: Optional[float] = 1.0):
        self.search_responses.append(EngineSearchResponse(
            hits=[EngineHit(id=i, score=max_score, source={"id": i}) for i in ids],
            total=len(ids) if total is None else total,
            max_score=max_score if ids else None,
        ))

    def respond_with_names(self, names: Sequence[str]):
        self.search_responses.append(EngineSearchResponse(
            hits=[EngineHit(id=n.replace(" ", "_"), score=1.0, source={"name": n}) for n in names],
            total=len(names),
            max_score=1.0 if names else None,
        ))


class InMemoryRecipeRepository(RecipeRepository):
    """Recipe store backed by a dict."""

    def __init__(self, recipes: Sequence[Recipe] = ()):
        self.recipes: Dict[str, Recipe] = {recipe.id: recipe for recipe in recipes}
        self.error: Optional[Exception] = None
        self.fetched_ids: List[List[str]] = []

    def add(self, recipe: Recipe) -> Recipe:
        self.recipes[recipe.id] = recipe
        return recipe

    def _check(self):
        if self.error is not None:
            raise self.error

    async def get_recipe(self, recipe_id):
        self._check()
        return self.recipes.get(recipe_id)

    async def get_public_recipes(self, recipe_ids):
        self._check()
        self.fetched_ids.append(list(recipe_ids))
        # Reverse order so callers cannot rely on store order
        found = [self.recipes[i] for i in recipe_ids if i in self.recipes and self.recipes[i].is_public]
        return list(reversed(found))

    async def iter_public_recipe_batches(self, batch_size) -> AsyncIterator[List[Recipe]]:
        self._check()
        public = sorted((r for r in self.recipes.values() if r.is_public), key=lambda r: r.id)
        for start in range(0, len(public), batch_size):
            yield public[start:start + batch_size]

    async def count_ingredient_usage(self, names):
        self._check()
        return count_usage(names, self._name_counts())

    async def ingredient_usage_counts(self):
        self._check()
        return merge_usage_counts(self._name_counts())

    def _name_counts(self) -> List[Tuple[str, int]]:
        """Ingredient rows per raw name, like a GROUP BY over the ingredients table."""
        counts: Dict[str, int] = {}
        for recipe in self.recipes.values():
            for ingredient in recipe.ingredients:
                counts[ingredient.name] = counts.get(ingredient.name, 0) + 1
        return list(counts.items())


@pytest.fixture
def make_recipe():
    """Factory for domain recipes with sensible defaults."""
    counter = {"n": 0}

    def _make(
        recipe_id: Optional[str] = None,
        title: str = "Test Recipe",
        ingredients: Sequence[str] = ("salt",),
        is_public: bool = True,
        **overrides,
    ) -> Recipe:
        counter["n"] += 1
        recipe_id = recipe_id or f"recipe-{counter['n']}"
        values = dict(
            id=recipe_id,
            title=title,
            description=f"Description of {title}",
            cuisine=Cuisine.ITALIAN,
            difficulty=Difficulty.EASY,
            cooking_time=30,
            servings=4,
            is_public=is_public,
            author_id="user-1",
            author=Author(id="user-1", username="chef"),
            ingredients=[Ingredient(name=name, quantity=1.0, unit="pcs") for name in ingredients],
            instructions=[Instruction(step_number=1, description="Mix everything")],
            created_at=BASE_TIME + timedelta(minutes=counter["n"]),
            updated_at=BASE_TIME + timedelta(minutes=counter["n"]),
        )
        values.update(overrides)
        return Recipe(**values)

    return _make


@pytest.fixture
def fake_index():
    return FakeSearchIndex()


@pytest.fixture
def recipe_repository():
    return InMemoryRecipeRepository()


@pytest.fixture
def unavailable_error():
    return SearchEngineUnavailableError("OpenSearch unreachable: connection refused")


@pytest.fixture
def database():
    """In-memory SQLite database with all tables created."""
    db = Database("sqlite://")
    db.create_all()
    yield db
    db.close()


@pytest.fixture
def seed_recipe(database):
    """Insert a recipe row (and its author) directly through the ORM."""
    state = {"n": 0}

    def _seed(
        title: str,
        ingredients: Sequence[str] = (),
        description: Optional[str] = None,
        is_public: bool = True,
        cuisine: Optional[Cuisine] = Cuisine.ITALIAN,
        difficulty: Optional[Difficulty] = Difficulty.EASY,
        cooking_time: Optional[int] = 30,
        servings: Optional[int] = 4,
        author_id: str = "user-1",
        ratings: Sequence[int] = (),
        comments: int = 0,
        created_at: Optional[datetime] = None,
        recipe_id: Optional[str] = None,
    ) -> str:
        state["n"] += 1
        with database.session() as session:
            if session.get(UserModel, author_id) is None:
                session.add(UserModel(id=author_id, username=f"user_{author_id}"))
                session.flush()
            recipe = RecipeModel(
                id=recipe_id or f"r{state['n']:03d}",
                title=title,
                description=description,
                cuisine=cuisine,
                difficulty=difficulty,
                cooking_time=cooking_time,
                servings=servings,
                is_public=is_public,
                author_id=author_id,
                created_at=created_at or (BASE_TIME + timedelta(hours=state["n"])),
            )
            recipe.ingredients = [
                IngredientModel(name=name, quantity=1.0, unit="pcs", position=position)
                for position, name in enumerate(ingredients)
            ]
            recipe.instructions = [InstructionModel(step_number=1, description=f"Cook the {title}")]
            recipe.ratings = [RatingModel(user_id=author_id, value=value) for value in ratings]
            recipe.comments = [CommentModel(user_id=author_id, content="Nice") for _ in range(comments)]
            session.add(recipe)
            session.commit()
            return recipe.id

    return _seed
