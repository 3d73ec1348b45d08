# core/domain/query_builder.py
#
# Description:
# Translates structured search requests into typed engine queries.
# The builder is pure: it never talks to the engine and holds no per-request state.
#
# Key Responsibilities:
# - Relevance scoring for free text (weighted fields, fuzziness, exact-title bonus).
# - Ingredient AND semantics for search, OR semantics for "cook with what I have".
# - Hard filters that never influence the score.
# - Deterministic tie-breaking by rating, rating count and recency.

from typing import List, Sequence

from .models import SearchRequest
from .query_dsl import (
    BoolQuery, Clause, EngineQuery, FieldBoost, Match, MatchPhrase, MultiMatch,
    NestedQuery, Prefix, RangeFilter, SortField, TermFilter, TermsFilter, Wildcard,
)

# Weighted fields for free text. Nested fields are searchable from the parent
# document because the mapping sets include_in_parent on them.
TEXT_FIELDS = (
    FieldBoost("title", 3),
    FieldBoost("title.autocomplete", 2),
    FieldBoost("description", 1),
    FieldBoost("ingredients.name", 2),
    FieldBoost("instructions.description", 1),
)
EXACT_TITLE_BOOST = 5
PANTRY_TEXT_BOOST = 2
PANTRY_EXACT_BOOST = 3
AUTOCOMPLETE_NGRAM_BOOST = 2
AUTOCOMPLETE_PREFIX_BOOST = 3
AUTOCOMPLETE_CONTAINS_BOOST = 1

RANKING_SORT = (
    SortField("_score", "desc"),
    SortField("avg_rating", "desc", missing="_last"),
    SortField("ratings_count", "desc"),
    SortField("created_at", "desc"),
)
AUTOCOMPLETE_SORT = (
    SortField("usage_count", "desc"),
    SortField("_score", "desc"),
)


class RecipeQueryBuilder:
    """Builds engine queries for recipe search, pantry search and ingredient autocomplete."""

    def __init__(self, default_take: int = 20, max_take: int = 100):
        self.default_take = default_take
        self.max_take = max_take

    def build(self, request: SearchRequest) -> EngineQuery:
        """Build the main recipe search query."""
        query = BoolQuery(filter=[self._visibility_filter()])

        text = request.text
        if text:
            query.should.append(MultiMatch(
                query=text,
                fields=TEXT_FIELDS,
                type="best_fields",
                fuzziness="AUTO",
            ))
            query.should.append(MatchPhrase("title", text, boost=EXACT_TITLE_BOOST))
            # Without this, a bool with must clauses would treat should as optional
            query.minimum_should_match = 1

        for ingredient in request.ingredient_terms:
            query.must.append(NestedQuery(
                path="ingredients",
                query=Match("ingredients.name", ingredient, fuzziness="AUTO"),
            ))

        query.filter.extend(self._hard_filters(request))

        return EngineQuery(
            query=query,
            sort=RANKING_SORT,
            from_=request.effective_skip(),
            size=request.effective_take(self.default_take, self.max_take),
            source=["id"],
        )

    def build_pantry(self, ingredients: Sequence[str], limit: int) -> EngineQuery:
        """Build the "cook with what I have" query: any ingredient matches, more matches rank higher."""
        query = BoolQuery(filter=[self._visibility_filter()], minimum_should_match=1)
        for ingredient in ingredients:
            query.should.append(NestedQuery(
                path="ingredients",
                query=BoolQuery(should=[
                    Match("ingredients.name", ingredient, boost=PANTRY_TEXT_BOOST),
                    Match("ingredients.name.keyword", ingredient, boost=PANTRY_EXACT_BOOST),
                ]),
                score_mode="sum",
            ))

        return EngineQuery(
            query=query,
            sort=RANKING_SORT,
            from_=0,
            size=self._cap(limit),
            source=["id"],
        )

    def build_autocomplete(self, text: str, limit: int) -> EngineQuery:
        """Build the ingredient autocomplete query against the facet index."""
        lowered = text.strip().lower()
        query = BoolQuery(should=[
            Match("name.autocomplete", lowered, boost=AUTOCOMPLETE_NGRAM_BOOST),
            Prefix("name.keyword", lowered, boost=AUTOCOMPLETE_PREFIX_BOOST),
            Wildcard.contains("name.keyword", lowered, boost=AUTOCOMPLETE_CONTAINS_BOOST),
        ], minimum_should_match=1)

        return EngineQuery(
            query=query,
            sort=AUTOCOMPLETE_SORT,
            from_=0,
            size=self._cap(limit),
            source=["name"],
        )

    def _cap(self, limit: int) -> int:
        if limit is None or limit < 1:
            return self.default_take
        return min(limit, self.max_take)

    @staticmethod
    def _visibility_filter() -> Clause:
        return TermFilter("is_public", True)

    @staticmethod
    def _hard_filters(request: SearchRequest) -> List[Clause]:
        filters: List[Clause] = []
        if request.cuisines:
            filters.append(TermsFilter("cuisine", tuple(c.value for c in request.cuisines)))
        if request.difficulties:
            filters.append(TermsFilter("difficulty", tuple(d.value for d in request.difficulties)))
        if request.max_cooking_time is not None:
            filters.append(RangeFilter("cooking_time", lte=request.max_cooking_time))
        if request.min_servings is not None or request.max_servings is not None:
            filters.append(RangeFilter("servings", gte=request.min_servings, lte=request.max_servings))
        if request.author_id:
            filters.append(TermFilter("author_id", request.author_id))
        return filters
