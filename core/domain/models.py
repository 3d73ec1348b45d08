# core/domain/models.py
#
# Description:
# Core domain models representing the business entities of the recipe search system.
# These models are framework-agnostic: the ORM rows, the index documents and the
# API schemas are all mapped to and from these dataclasses at the boundaries.

from typing import List, Optional, Dict
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from .ingredient_taxonomy import facet_id


class Cuisine(str, Enum):
    """Cuisines a recipe can be tagged with."""
    ITALIAN = "ITALIAN"
    CHINESE = "CHINESE"
    MEXICAN = "MEXICAN"
    INDIAN = "INDIAN"
    FRENCH = "FRENCH"
    JAPANESE = "JAPANESE"
    THAI = "THAI"
    MEDITERRANEAN = "MEDITERRANEAN"
    AMERICAN = "AMERICAN"
    OTHER = "OTHER"


class Difficulty(str, Enum):
    """Recipe difficulty levels."""
    EASY = "EASY"
    MEDIUM = "MEDIUM"
    HARD = "HARD"


class RecipeEventType(str, Enum):
    """Mutations of the system of record that require an index sync."""
    CREATED = "created"
    UPDATED = "updated"  # Also covers publish/unpublish transitions
    DELETED = "deleted"


class SyncStatus(str, Enum):
    """Result of a single write-path sync."""
    INDEXED = "indexed"
    DELETED = "deleted"
    FAILED = "failed"


@dataclass
class Author:
    """Public profile of a recipe author."""
    id: str
    username: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    avatar: Optional[str] = None


@dataclass
class Ingredient:
    """An ingredient line of a recipe."""
    name: str
    quantity: float
    unit: str
    id: Optional[str] = None
    notes: Optional[str] = None


@dataclass
class Instruction:
    """A single preparation step."""
    step_number: int
    description: str
    id: Optional[str] = None


@dataclass
class Recipe:
    """Authoritative recipe record as read from the system of record."""
    id: str
    title: str
    author_id: str
    created_at: datetime
    updated_at: Optional[datetime] = None
    description: Optional[str] = None
    cuisine: Optional[Cuisine] = None
    difficulty: Optional[Difficulty] = None
    cooking_time: Optional[int] = None  # Minutes
    servings: Optional[int] = None
    image_url: Optional[str] = None
    is_public: bool = True
    author: Optional[Author] = None
    ingredients: List[Ingredient] = field(default_factory=list)
    instructions: List[Instruction] = field(default_factory=list)
    avg_rating: Optional[float] = None  # None when the recipe has no ratings
    ratings_count: int = 0
    comments_count: int = 0


@dataclass
class IngredientFacet:
    """Aggregate entry of the ingredient index used for autocomplete."""
    name: str
    usage_count: int
    category: str

    @property
    def facet_id(self) -> str:
        return facet_id(self.name)


@dataclass
class SearchRequest:
    """Structured recipe search request."""
    query: Optional[str] = None
    ingredients: List[str] = field(default_factory=list)
    cuisines: List[Cuisine] = field(default_factory=list)
    difficulties: List[Difficulty] = field(default_factory=list)
    max_cooking_time: Optional[int] = None
    min_servings: Optional[int] = None
    max_servings: Optional[int] = None
    author_id: Optional[str] = None
    skip: int = 0
    take: Optional[int] = None

    @property
    def text(self) -> Optional[str]:
        """Free text with surrounding whitespace removed, or None when blank."""
        if self.query is None:
            return None
        stripped = self.query.strip()
        return stripped or None

    @property
    def ingredient_terms(self) -> List[str]:
        return [name.strip() for name in self.ingredients if name and name.strip()]

    def effective_skip(self) -> int:
        return max(self.skip or 0, 0)

    def effective_take(self, default_take: int = 20, max_take: int = 100) -> int:
        """Page size after applying the default and the hard cap."""
        if self.take is None or self.take < 1:
            return default_take
        return min(self.take, max_take)


@dataclass
class SearchResult:
    """
    Page of reconciled recipes.

    `total` is the engine's total hit count before reconciliation, so it can
    exceed the number of recipes returned when the index has drifted.
    """
    recipes: List[Recipe]
    total: int
    took: int  # Milliseconds, end to end
    max_score: Optional[float] = None

    @classmethod
    def empty(cls, took: int = 0) -> "SearchResult":
        return cls(recipes=[], total=0, took=took, max_score=None)


@dataclass
class AutocompleteResult:
    """Ingredient name suggestions."""
    suggestions: List[str]
    took: int


@dataclass
class RecipeEvent:
    """A committed mutation of a recipe that the index must follow."""
    recipe_id: str
    event_type: RecipeEventType


@dataclass
class SyncOutcome:
    """Result of syncing one recipe into the index."""
    recipe_id: str
    status: SyncStatus
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status != SyncStatus.FAILED


@dataclass
class BulkItemFailure:
    """A single document rejected during a bulk write."""
    document_id: str
    status: Optional[int]
    reason: str


@dataclass
class BulkIndexReport:
    """Per-item result of a bulk write; partial failure is expected and reported."""
    succeeded: int = 0
    failures: List[BulkItemFailure] = field(default_factory=list)

    @property
    def failed(self) -> int:
        return len(self.failures)

    @property
    def failed_ids(self) -> List[str]:
        return [failure.document_id for failure in self.failures]

    def merge(self, other: "BulkIndexReport") -> "BulkIndexReport":
        return BulkIndexReport(
            succeeded=self.succeeded + other.succeeded,
            failures=self.failures + other.failures,
        )


@dataclass
class BulkSyncReport:
    """Summary of a full reindex from the system of record."""
    recipes_indexed: int = 0
    recipes_failed: List[str] = field(default_factory=list)
    stale_documents_removed: int = 0
    facets_indexed: int = 0
    facets_failed: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)
    took: int = 0

    @property
    def ok(self) -> bool:
        return not (self.recipes_failed or self.facets_failed or self.errors)

    def to_dict(self) -> Dict[str, object]:
        return {
            "recipes_indexed": self.recipes_indexed,
            "recipes_failed": list(self.recipes_failed),
            "stale_documents_removed": self.stale_documents_removed,
            "facets_indexed": self.facets_indexed,
            "facets_failed": list(self.facets_failed),
            "errors": list(self.errors),
            "took": self.took,
        }
