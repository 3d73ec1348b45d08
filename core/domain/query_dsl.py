# core/domain/query_dsl.py
#
# Description:
# Typed representation of the subset of the OpenSearch query DSL used by the
# recipe search. Queries are assembled from these clause objects and only turned
# into wire-format dictionaries at the adapter boundary via `to_dict()` / `to_body()`.

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

Scalar = Union[str, int, float, bool]

WILDCARD_METACHARACTERS = ("\\", "*", "?")


def escape_wildcard(value: str) -> str:
    """Escape characters that carry meaning inside a wildcard pattern."""
    for char in WILDCARD_METACHARACTERS:
        value = value.replace(char, "\\" + char)
    return value


class Clause(ABC):
    """A node of a query tree."""

    @abstractmethod
    def to_dict(self) -> Dict[str, Any]:
        pass


@dataclass(frozen=True)
class TermFilter(Clause):
    field: str
    value: Scalar

    def to_dict(self) -> Dict[str, Any]:
        return {"term": {self.field: self.value}}


@dataclass(frozen=True)
class TermsFilter(Clause):
    field: str
    values: Tuple[Scalar, ...]

    def to_dict(self) -> Dict[str, Any]:
        return {"terms": {self.field: list(self.values)}}


@dataclass(frozen=True)
class RangeFilter(Clause):
    field: str
    gte: Optional[Scalar] = None
    lte: Optional[Scalar] = None

    def to_dict(self) -> Dict[str, Any]:
        bounds = {}
        if self.gte is not None:
            bounds["gte"] = self.gte
        if self.lte is not None:
            bounds["lte"] = self.lte
        return {"range": {self.field: bounds}}


@dataclass(frozen=True)
class Match(Clause):
    field: str
    query: str
    boost: Optional[float] = None
    fuzziness: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"query": self.query}
        if self.fuzziness is not None:
            body["fuzziness"] = self.fuzziness
        if self.boost is not None:
            body["boost"] = self.boost
        return {"match": {self.field: body}}


@dataclass(frozen=True)
class MatchPhrase(Clause):
    field: str
    query: str
    boost: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"query": self.query}
        if self.boost is not None:
            body["boost"] = self.boost
        return {"match_phrase": {self.field: body}}


@dataclass(frozen=True)
class FieldBoost:
    field: str
    boost: float = 1

    def render(self) -> str:
        boost = int(self.boost) if float(self.boost).is_integer() else self.boost
        return f"{self.field}^{boost}"


@dataclass(frozen=True)
class MultiMatch(Clause):
    query: str
    fields: Tuple[FieldBoost, ...]
    type: str = "best_fields"
    fuzziness: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {
            "query": self.query,
            "fields": [f.render() for f in self.fields],
            "type": self.type,
        }
        if self.fuzziness is not None:
            body["fuzziness"] = self.fuzziness
        return {"multi_match": body}


@dataclass(frozen=True)
class Prefix(Clause):
    field: str
    value: str
    boost: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"value": self.value}
        if self.boost is not None:
            body["boost"] = self.boost
        return {"prefix": {self.field: body}}


@dataclass(frozen=True)
class Wildcard(Clause):
    """Wildcard clause; `pattern` must already be escaped."""
    field: str
    pattern: str
    boost: Optional[float] = None

    @classmethod
    def contains(cls, field: str, text: str, boost: Optional[float] = None) -> "Wildcard":
        return cls(field=field, pattern=f"*{escape_wildcard(text)}*", boost=boost)

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"value": self.pattern}
        if self.boost is not None:
            body["boost"] = self.boost
        return {"wildcard": {self.field: body}}


@dataclass
class BoolQuery(Clause):
    must: List[Clause] = field(default_factory=list)
    should: List[Clause] = field(default_factory=list)
    filter: List[Clause] = field(default_factory=list)
    minimum_should_match: Optional[int] = None

    def is_empty(self) -> bool:
        return not (self.must or self.should or self.filter)

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {}
        if self.must:
            body["must"] = [clause.to_dict() for clause in self.must]
        if self.should:
            body["should"] = [clause.to_dict() for clause in self.should]
        if self.filter:
            body["filter"] = [clause.to_dict() for clause in self.filter]
        if self.minimum_should_match is not None:
            body["minimum_should_match"] = self.minimum_should_match
        return {"bool": body}


@dataclass(frozen=True)
class NestedQuery(Clause):
    path: str
    query: Clause
    score_mode: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"path": self.path, "query": self.query.to_dict()}
        if self.score_mode is not None:
            body["score_mode"] = self.score_mode
        return {"nested": body}


@dataclass(frozen=True)
class SortField:
    field: str
    order: str = "desc"
    missing: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"order": self.order}
        if self.missing is not None:
            body["missing"] = self.missing
        return {self.field: body}


@dataclass
class EngineQuery:
    """A complete search request body."""
    query: Clause
    sort: Sequence[SortField] = ()
    from_: int = 0
    size: int = 20
    source: Optional[List[str]] = None
    track_total_hits: bool = True

    def to_body(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {
            "query": self.query.to_dict(),
            "from": self.from_,
            "size": self.size,
            "track_total_hits": self.track_total_hits,
        }
        if self.sort:
            body["sort"] = [sort_field.to_dict() for sort_field in self.sort]
        if self.source is not None:
            body["_source"] = list(self.source)
        return body
