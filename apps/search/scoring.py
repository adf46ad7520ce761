"""
Relevance scoring for the global search.

Pure functions, no database access. Scores are floats in roughly 0-100
(plus entity-specific bonuses added by the caller).
"""
import math
from typing import Iterable, Mapping, Sequence

EXACT_SCORE = 100
CONTAINS_SCORE = 90
PREFIX_SCORE = 85
SIMILARITY_THRESHOLD = 0.7
SIMILARITY_WEIGHT = 80
WORD_MATCH_WEIGHT = 70


def levenshtein_distance(a: str, b: str) -> int:
    """Minimum number of single-character edits turning `a` into `b`."""
    if len(a) < len(b):
        a, b = b, a
    previous = list(range(len(b) + 1))
    for i, ca in enumerate(a, start=1):
        current = [i]
        for j, cb in enumerate(b, start=1):
            if ca == cb:
                current.append(previous[j - 1])
            else:
                current.append(min(previous[j - 1], previous[j], current[j - 1]) + 1)
        previous = current
    return previous[-1]


def calculate_similarity(a: str, b: str) -> float:
    """Normalized similarity in [0, 1]: 1 - distance / length of the longer string."""
    if not a or not b:
        return 0.0
    s1 = a.lower().strip()
    s2 = b.lower().strip()
    if s1 == s2:
        return 1.0
    longer = max(len(s1), len(s2))
    if longer == 0:
        return 1.0
    return (longer - levenshtein_distance(s1, s2)) / longer


def _field_text(value) -> str:
    if isinstance(value, (list, tuple)):
        return ' '.join(str(v) for v in value).lower()
    return str(value).lower()


def calculate_relevance_score(item: Mapping, query: str, fields: Sequence[str]) -> float:
    """
    Best score of `query` against any of `fields` in `item`.

    Per field: exact match 100; contains 90; starts with 85; Levenshtein
    similarity above 0.7 scaled to 80; otherwise the share of query words
    found in the field's words scaled to 70.
    """
    best = 0.0
    query_lower = query.lower()
    query_words = query_lower.split()

    for name in fields:
        value = item.get(name)
        if not value:
            continue
        text = _field_text(value)

        if text == query_lower:
            best = max(best, EXACT_SCORE)
            continue
        if query_lower in text:
            best = max(best, CONTAINS_SCORE)
        if text.startswith(query_lower):
            best = max(best, PREFIX_SCORE)

        similarity = calculate_similarity(text, query_lower)
        if similarity > SIMILARITY_THRESHOLD:
            best = max(best, similarity * SIMILARITY_WEIGHT)

        field_words = text.split()
        matched = [qw for qw in query_words if any(qw in fw or fw in qw for fw in field_words)]
        if matched:
            best = max(best, len(matched) / len(query_words) * WORD_MATCH_WEIGHT)

    return best


def keyword_match(keywords: Iterable[str], query: str) -> bool:
    """True if any keyword contains the query or is contained in it."""
    query_lower = query.lower()
    for keyword in keywords or []:
        keyword_lower = str(keyword).lower()
        if not keyword_lower:
            continue
        if query_lower in keyword_lower or keyword_lower in query_lower:
            return True
    return False


def round_half_up(value: float) -> int:
    """Round half up (2.5 -> 3), unlike Python's round()."""
    return int(math.floor(value + 0.5))
