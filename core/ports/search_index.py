# core/ports/search_index.py
#
# Description:
# Port interface for the full-text engine that holds the search projection.
# The core domain only talks to the engine through this abstraction.

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

from ..domain.models import BulkIndexReport


@dataclass
class EngineHit:
    """A single hit as returned by the engine."""
    id: str
    score: Optional[float]
    source: Dict[str, Any] = field(default_factory=dict)


@dataclass
class EngineSearchResponse:
    """Raw engine response reduced to what reconciliation needs."""
    hits: List[EngineHit]
    total: int
    max_score: Optional[float]
    took: int = 0  # Engine-side milliseconds

    @property
    def ids(self) -> List[str]:
        return [hit.id for hit in self.hits]


class SearchIndexRepository(ABC):
    """Port for index provisioning, document writes and queries."""

    @abstractmethod
    async def ping(self) -> bool:
        """Return True when the engine answers a short connectivity probe."""
        pass

    @abstractmethod
    async def ensure_indices(self) -> Dict[str, bool]:
        """Create missing indices; return {index_name: created}."""
        pass

    @abstractmethod
    async def index_document(self, index: str, doc_id: str, document: Dict[str, Any]) -> None:
        """Create or replace a document. Raises SearchEngineError on failure."""
        pass

    @abstractmethod
    async def bulk_index(self, index: str, documents: Sequence[Tuple[str, Dict[str, Any]]]) -> BulkIndexReport:
        """Upsert many documents; rejected items are reported, not raised."""
        pass

    @abstractmethod
    async def delete_document(self, index: str, doc_id: str) -> bool:
        """Delete a document. Returns False when it did not exist."""
        pass

    @abstractmethod
    async def bulk_delete(self, index: str, doc_ids: Sequence[str]) -> BulkIndexReport:
        """Delete many documents; missing documents count as deleted."""
        pass

    @abstractmethod
    async def list_document_ids(self, index: str) -> List[str]:
        """Return every document id held by an index."""
        pass

    @abstractmethod
    async def search(self, index: str, body: Dict[str, Any]) -> EngineSearchResponse:
        """Execute a query body. Raises SearchEngineError on failure."""
        pass
