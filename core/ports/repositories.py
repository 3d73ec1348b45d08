# core/ports/repositories.py
#
# Description:
# Port interfaces for the relational system of record.
# These abstractions allow the core domain to remain independent of the ORM and database.

from abc import ABC, abstractmethod
from typing import AsyncIterator, Dict, List, Optional, Sequence

from ..domain.models import Recipe


class RecipeRepository(ABC):
    """Port for reading authoritative recipe records."""

    @abstractmethod
    async def get_recipe(self, recipe_id: str) -> Optional[Recipe]:
        """Load a recipe regardless of visibility, or None when it does not exist."""
        pass

    @abstractmethod
    async def get_public_recipes(self, recipe_ids: Sequence[str]) -> List[Recipe]:
        """Load the public recipes among the given ids, in no particular order."""
        pass

    @abstractmethod
    def iter_public_recipe_batches(self, batch_size: int) -> AsyncIterator[List[Recipe]]:
        """Stream every public recipe in pages of at most `batch_size`."""
        pass

    @abstractmethod
    async def count_ingredient_usage(self, names: Sequence[str]) -> Dict[str, int]:
        """
        Count ingredient rows per name, ignoring case and whitespace.

        Returns a mapping keyed by the given (normalized) names.
        """
        pass

    @abstractmethod
    async def ingredient_usage_counts(self) -> Dict[str, int]:
        """Usage count for every normalized ingredient name in the store."""
        pass
