# core/domain/exceptions.py
#
# Description:
# Exception hierarchy shared by the domain services and the adapters.
# Adapters translate driver exceptions (opensearch-py, SQLAlchemy) into these
# types so the core never depends on a specific client library.


class SearchError(Exception):
    """Base class for every error raised by the search domain."""
    pass


class SearchEngineError(SearchError):
    """The full-text engine failed to serve a request."""
    pass


class SearchEngineUnavailableError(SearchEngineError):
    """The engine could not be reached, timed out or answered with a server error."""
    pass


class SearchEngineQueryError(SearchEngineError):
    """The engine rejected a query."""
    pass


class IndexWriteError(SearchEngineError):
    """The engine rejected a document write or delete."""
    pass


class RecordStoreError(SearchError):
    """The relational system of record failed."""
    pass


class FallbackSearchError(SearchError):
    """The relational fallback search failed."""
    pass


class SearchUnavailableError(SearchError):
    """Neither the engine nor the fallback could answer a read."""
    pass


class ProjectionError(SearchError):
    """A recipe record is missing fields required to build its index document."""

    def __init__(self, recipe_id, missing_fields):
        self.recipe_id = recipe_id
        self.missing_fields = list(missing_fields)
        super().__init__(
            f"Recipe {recipe_id!r} cannot be projected, missing: {', '.join(self.missing_fields)}"
        )
