from typing import Iterable, Optional

from rapidfuzz.distance import Levenshtein

# Largest edit distance that still counts as a fuzzy hit while filtering.
MATCH_THRESHOLD = 3


def levenshtein_distance(source: Optional[str], target: Optional[str]) -> int:
    """
    Unit-cost Levenshtein distance between two strings.

    Comparison is ordinal and case-sensitive: no processor is passed to
    rapidfuzz, so nothing gets case-folded.
    """
    source = source or ""
    target = target or ""
    if not source:
        return len(target)
    if not target:
        return len(source)
    return Levenshtein.distance(source, target)


def weighted_levenshtein_distance(source: Optional[str], target: Optional[str], weight: float) -> int:
    """Distance scaled by weight and truncated toward zero. A missing target contributes 0."""
    if not target:
        return 0
    return int(levenshtein_distance(source, target) * weight)


class FuzzyMatcher:
    def __init__(self, max_distance: int = MATCH_THRESHOLD):
        if isinstance(max_distance, bool) or not isinstance(max_distance, int) or max_distance < 0:
            raise ValueError("max_distance must be a non-negative integer")
        self.max_distance = max_distance

    def is_match(self, value: Optional[str], term: str) -> bool:
        # Prefix hit or close enough by edit distance
        value = value or ""
        return value.startswith(term) or levenshtein_distance(value, term) <= self.max_distance

    def any_match(self, values: Iterable[Optional[str]], term: str) -> bool:
        return any(self.is_match(value, term) for value in values)
