# adapters/opensearch_index_adapter.py
#
# Description:
# Adapter implementation of the SearchIndexRepository port for OpenSearch.
# This adapter wraps the blocking opensearch-py client, runs calls in a worker
# thread and translates driver exceptions into domain exceptions.

import asyncio
import logging
from typing import Any, Dict, List, Sequence, Tuple

from opensearchpy import helpers
from opensearchpy.exceptions import (
    ConnectionError as OpenSearchConnectionError,
    NotFoundError,
    TransportError,
)

from core.domain.exceptions import (
    IndexWriteError, SearchEngineError, SearchEngineQueryError, SearchEngineUnavailableError,
)
from core.domain.models import BulkIndexReport, BulkItemFailure
from core.ports.search_index import EngineHit, EngineSearchResponse, SearchIndexRepository
from infrastructure.store.opensearch.client import OpenSearchClient
from infrastructure.store.opensearch.index_schema import IndexSchemaManager

logger = logging.getLogger(__name__)

# Writes return once the change is visible to searches
WRITE_REFRESH = "wait_for"


def _translate(error: Exception, rejected_cls=SearchEngineQueryError) -> SearchEngineError:
    """Map an opensearch-py exception to the domain hierarchy."""
    if isinstance(error, OpenSearchConnectionError):
        return SearchEngineUnavailableError(f"OpenSearch unreachable: {error}")
    if isinstance(error, TransportError):
        status = error.status_code
        if isinstance(status, int) and 400 <= status < 500:
            return rejected_cls(f"OpenSearch rejected request ({status}): {error.error}")
        return SearchEngineUnavailableError(f"OpenSearch error ({status}): {error.error}")
    return SearchEngineUnavailableError(str(error))


def parse_bulk_errors(errors: List[Dict[str, Any]], ignore_not_found: bool = False) -> List[BulkItemFailure]:
    """Turn the per-item error entries returned by helpers.bulk into failures."""
    failures = []
    for item in errors:
        # Each entry is {"<op_type>": {"_id": ..., "status": ..., "error": ...}}
        op_result = next(iter(item.values()), {})
        status = op_result.get("status")
        if ignore_not_found and status == 404:
            continue
        error = op_result.get("error")
        if isinstance(error, dict):
            reason = f"{error.get('type', 'error')}: {error.get('reason', '')}"
        else:
            reason = str(error or op_result.get("result", "unknown error"))
        failures.append(BulkItemFailure(document_id=str(op_result.get("_id")), status=status, reason=reason))
    return failures


class OpenSearchIndexAdapter(SearchIndexRepository):
    """
    Adapter that implements the search index port using OpenSearch.

    This adapter encapsulates all OpenSearch-specific logic and provides
    a clean interface for the core domain to use.
    """

    def __init__(self, opensearch_client: OpenSearchClient, schema_manager: IndexSchemaManager):
        self.opensearch = opensearch_client
        self.client = opensearch_client.client
        self.schema_manager = schema_manager

    async def ping(self) -> bool:
        return await asyncio.to_thread(self.opensearch.ping)

    async def ensure_indices(self) -> Dict[str, bool]:
        try:
            return await asyncio.to_thread(self.schema_manager.ensure_indices)
        except TransportError as e:
            raise _translate(e) from e

    async def index_document(self, index: str, doc_id: str, document: Dict[str, Any]) -> None:
        try:
            await asyncio.to_thread(
                self.client.index,
                index=index,
                id=doc_id,
                body=document,
                refresh=WRITE_REFRESH,
            )
        except TransportError as e:
            raise _translate(e, IndexWriteError) from e

    async def bulk_index(self, index: str, documents: Sequence[Tuple[str, Dict[str, Any]]]) -> BulkIndexReport:
        actions = [
            {
                "_op_type": "index",
                "_index": index,
                "_id": doc_id,
                "_source": document,
            }
            for doc_id, document in documents
        ]
        return await self._bulk(actions, ignore_not_found=False)

    async def delete_document(self, index: str, doc_id: str) -> bool:
        try:
            await asyncio.to_thread(self.client.delete, index=index, id=doc_id, refresh=WRITE_REFRESH)
            return True
        except NotFoundError:
            return False
        except TransportError as e:
            raise _translate(e, IndexWriteError) from e

    async def bulk_delete(self, index: str, doc_ids: Sequence[str]) -> BulkIndexReport:
        actions = [{"_op_type": "delete", "_index": index, "_id": doc_id} for doc_id in doc_ids]
        return await self._bulk(actions, ignore_not_found=True)

    async def list_document_ids(self, index: str) -> List[str]:
        try:
            return await asyncio.to_thread(self._scan_ids, index)
        except NotFoundError:
            return []
        except TransportError as e:
            raise _translate(e) from e

    async def search(self, index: str, body: Dict[str, Any]) -> EngineSearchResponse:
        try:
            response = await asyncio.to_thread(self.client.search, index=index, body=body)
        except TransportError as e:
            raise _translate(e) from e

        hits_block = response.get("hits", {})
        total = hits_block.get("total", 0)
        if isinstance(total, dict):
            total = total.get("value", 0)

        hits = [
            EngineHit(
                id=str(hit.get("_source", {}).get("id", hit.get("_id"))),
                score=hit.get("_score"),
                source=hit.get("_source", {}),
            )
            for hit in hits_block.get("hits", [])
        ]
        return EngineSearchResponse(
            hits=hits,
            total=int(total),
            max_score=hits_block.get("max_score"),
            took=response.get("took", 0),
        )

    async def _bulk(self, actions: List[Dict[str, Any]], ignore_not_found: bool) -> BulkIndexReport:
        if not actions:
            return BulkIndexReport()
        try:
            succeeded, errors = await asyncio.to_thread(
                helpers.bulk,
                self.client,
                actions,
                raise_on_error=False,
                refresh=WRITE_REFRESH,
            )
        except TransportError as e:
            raise _translate(e, IndexWriteError) from e

        failures = parse_bulk_errors(errors, ignore_not_found=ignore_not_found)
        if errors:
            logger.warning(f"Bulk request finished with {len(errors)} item errors")
        # helpers.bulk does not count 404 deletes as successes
        succeeded = len(actions) - len(failures) if ignore_not_found else succeeded
        return BulkIndexReport(succeeded=succeeded, failures=failures)

    def _scan_ids(self, index: str) -> List[str]:
        return [
            hit["_id"]
            for hit in helpers.scan(
                self.client,
                index=index,
                query={"query": {"match_all": {}}, "_source": False},
                size=1000,
            )
        ]
