# infrastructure/store/opensearch/index_schema.py
#
# Description:
# Index Schema Manager for the recipe search projection.
#
# Two indices are managed, each behind an alias:
#   <prefix>_recipes      -> <prefix>_recipes_v<N>      one document per public recipe
#   <prefix>_ingredients  -> <prefix>_ingredients_v<N>  one document per distinct ingredient name
#
# Mappings are only ever created, never altered in place. A mapping change is
# rolled out by bumping the schema version, reindexing into the new physical
# index and moving the alias.

import copy
import logging
from typing import Any, Dict

from opensearchpy import OpenSearch
from opensearchpy.exceptions import RequestError

logger = logging.getLogger(__name__)

ANALYSIS_SETTINGS: Dict[str, Any] = {
    "analyzer": {
        "recipe_text_analyzer": {
            "type": "custom",
            "tokenizer": "standard",
            "filter": ["lowercase", "stop", "stemmer"]
        },
        "autocomplete_analyzer": {
            "type": "custom",
            "tokenizer": "autocomplete_tokenizer",
            "filter": ["lowercase"]
        },
        "autocomplete_search_analyzer": {
            "type": "custom",
            "tokenizer": "standard",
            "filter": ["lowercase"]
        }
    },
    "tokenizer": {
        "autocomplete_tokenizer": {
            "type": "edge_ngram",
            "min_gram": 2,
            "max_gram": 20,
            "token_chars": ["letter", "digit"]
        }
    },
    "normalizer": {
        "lowercase_normalizer": {
            "type": "custom",
            "filter": ["lowercase"]
        }
    }
}

# Ingredient name: stemmed text for fuzzy matching, normalized keyword for exact
# and prefix matching, edge n-grams for type-ahead.
INGREDIENT_NAME_FIELD: Dict[str, Any] = {
    "type": "text",
    "analyzer": "recipe_text_analyzer",
    "fields": {
        "keyword": {
            "type": "keyword",
            "normalizer": "lowercase_normalizer",
            "ignore_above": 256
        },
        "autocomplete": {
            "type": "text",
            "analyzer": "autocomplete_analyzer",
            "search_analyzer": "autocomplete_search_analyzer"
        }
    }
}

RECIPE_MAPPING: Dict[str, Any] = {
    "properties": {
        "id": {"type": "keyword"},
        "title": {
            "type": "text",
            "analyzer": "standard",
            "fields": {
                "keyword": {
                    "type": "keyword",
                    "ignore_above": 256
                },
                "autocomplete": {
                    "type": "text",
                    "analyzer": "autocomplete_analyzer",
                    "search_analyzer": "autocomplete_search_analyzer"
                }
            }
        },
        "description": {
            "type": "text",
            "analyzer": "recipe_text_analyzer"
        },
        "cuisine": {"type": "keyword"},
        "difficulty": {"type": "keyword"},
        "cooking_time": {"type": "integer"},
        "servings": {"type": "integer"},
        "is_public": {"type": "boolean"},
        "author_id": {"type": "keyword"},
        "author_username": {"type": "keyword"},
        "ingredients": {
            "type": "nested",
            "include_in_parent": True,  # Lets top-level free text reach ingredient names
            "properties": {
                "name": INGREDIENT_NAME_FIELD,
                "quantity": {"type": "float"},
                "unit": {"type": "keyword"}
            }
        },
        "instructions": {
            "type": "nested",
            "include_in_parent": True,
            "properties": {
                "step_number": {"type": "integer"},
                "description": {
                    "type": "text",
                    "analyzer": "recipe_text_analyzer"
                }
            }
        },
        "avg_rating": {"type": "float"},
        "ratings_count": {"type": "integer"},
        "comments_count": {"type": "integer"},
        "created_at": {"type": "date"},
        "updated_at": {"type": "date"}
    }
}

INGREDIENT_MAPPING: Dict[str, Any] = {
    "properties": {
        "name": INGREDIENT_NAME_FIELD,
        "usage_count": {"type": "integer"},
        "category": {"type": "keyword"}
    }
}


class IndexSchemaManager:
    """Creates the recipe and ingredient indices when they are missing."""

    def __init__(self, client: OpenSearch, prefix: str = "cookbook", schema_version: int = 1,
                 shards: int = 1, replicas: int = 0):
        self.client = client
        self.prefix = prefix
        self.schema_version = schema_version
        self.shards = shards
        self.replicas = replicas

    @property
    def recipe_index(self) -> str:
        return f"{self.prefix}_recipes"

    @property
    def ingredient_index(self) -> str:
        return f"{self.prefix}_ingredients"

    def physical_index(self, alias: str) -> str:
        return f"{alias}_v{self.schema_version}"

    def index_definitions(self) -> Dict[str, Dict[str, Any]]:
        """Full create-index body per alias."""
        return {
            self.recipe_index: self._index_body(self.recipe_index, RECIPE_MAPPING),
            self.ingredient_index: self._index_body(self.ingredient_index, INGREDIENT_MAPPING),
        }

    def _index_body(self, alias: str, mapping: Dict[str, Any]) -> Dict[str, Any]:
        return {
            "settings": {
                "number_of_shards": self.shards,
                "number_of_replicas": self.replicas,
                "analysis": copy.deepcopy(ANALYSIS_SETTINGS)
            },
            "mappings": copy.deepcopy(mapping),
            "aliases": {alias: {}}
        }

    def ensure_indices(self) -> Dict[str, bool]:
        """
        Create each index that does not exist yet.

        Returns:
            Dict mapping alias name to True when it was created by this call.
        """
        created = {}
        for alias, body in self.index_definitions().items():
            created[alias] = self._ensure_index(alias, body)
        return created

    def _ensure_index(self, alias: str, body: Dict[str, Any]) -> bool:
        if self.client.indices.exists(index=alias):
            logger.info(f"Index {alias} already exists")
            return False

        physical = self.physical_index(alias)
        try:
            self.client.indices.create(index=physical, body=body)
        except RequestError as e:
            # Another instance created it between the check and the create
            if e.error == "resource_already_exists_exception":
                logger.info(f"Index {physical} was created concurrently")
                return False
            raise
        logger.info(f"Created index {physical} with alias {alias}")
        return True
