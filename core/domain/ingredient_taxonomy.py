# core/domain/ingredient_taxonomy.py
#
# Description:
# Ingredient name normalization and the keyword taxonomy used to categorize
# ingredient facets. Rules are evaluated in order and the first match wins,
# so an ingredient listed under two categories ("pepper") always lands in the
# earlier one.

import re
from typing import Dict, Iterable, List, Sequence, Tuple

OTHER_CATEGORY = "other"

CATEGORY_RULES: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ("protein", ("chicken", "beef", "pork", "fish", "salmon", "meat")),
    ("vegetable", ("onion", "garlic", "tomato", "carrot", "pepper", "lettuce")),
    ("fruit", ("apple", "banana", "orange", "berry", "lemon", "lime")),
    ("grain", ("flour", "rice", "pasta", "bread", "oats", "quinoa")),
    ("dairy", ("milk", "cheese", "butter", "cream", "yogurt")),
    ("seasoning", ("salt", "pepper", "basil", "oregano", "thyme", "spice")),
)

_WHITESPACE = re.compile(r"\s+")


def normalize_ingredient_name(name: str) -> str:
    """Lowercase, trim and collapse inner whitespace."""
    return _WHITESPACE.sub(" ", name or "").strip().lower()


def whitespace_key(name: str) -> str:
    """Match key that ignores case and all whitespace."""
    return _WHITESPACE.sub("", name or "").lower()


def facet_id(name: str) -> str:
    """Document id of an ingredient facet; spellings that differ only in whitespace share it."""
    return whitespace_key(name)


def distinct_normalized_names(names: Iterable[str]) -> List[str]:
    """
    Normalized, de-duplicated names in first-seen order; blanks are dropped.

    Names with the same `whitespace_key` collapse into the first spelling seen.
    """
    seen = set()
    result = []
    for name in names:
        normalized = normalize_ingredient_name(name)
        key = whitespace_key(normalized)
        if key and key not in seen:
            seen.add(key)
            result.append(normalized)
    return result


def count_usage(names: Sequence[str], name_counts: Iterable[Tuple[str, int]]) -> Dict[str, int]:
    """
    Usage count for each of `names` from raw (ingredient name, row count) pairs.

    Raw names are matched on `whitespace_key`, so "Olive Oil" and "oliveoil"
    count towards the same entry.
    """
    labels = {whitespace_key(name): name for name in names}
    counts = {name: 0 for name in names}
    for raw_name, count in name_counts:
        label = labels.get(whitespace_key(raw_name))
        if label is not None:
            counts[label] += int(count)
    return counts


def merge_usage_counts(name_counts: Iterable[Tuple[str, int]]) -> Dict[str, int]:
    """
    Usage count per facet from raw (ingredient name, row count) pairs.

    Spellings that differ only in whitespace are merged under the first
    normalized spelling seen.
    """
    counts: Dict[str, int] = {}
    labels: Dict[str, str] = {}
    for raw_name, count in name_counts:
        normalized = normalize_ingredient_name(raw_name)
        if not normalized:
            continue
        label = labels.setdefault(whitespace_key(normalized), normalized)
        counts[label] = counts.get(label, 0) + int(count)
    return counts


def categorize_ingredient(name: str) -> str:
    normalized = normalize_ingredient_name(name)
    for category, keywords in CATEGORY_RULES:
        if any(keyword in normalized for keyword in keywords):
            return category
    return OTHER_CATEGORY
