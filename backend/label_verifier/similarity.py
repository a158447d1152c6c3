from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from rapidfuzz.distance import Levenshtein

from .normalizer import normalize_text

MAX_WINDOW_TOKENS = 10


@dataclass(frozen=True)
class SubstringMatch:
    match: str
    score: int


class SimilarityScorer:
    """Edit-distance similarity on normalized text, scored 0-100."""

    def __init__(self, threshold: int = 80) -> None:
        self.threshold = threshold

    def similarity(self, a: str, b: str) -> int:
        left = normalize_text(a)
        right = normalize_text(b)
        longest = max(len(left), len(right))
        if longest == 0:
            return 100
        distance = Levenshtein.distance(left, right)
        return round(100 * (1 - distance / longest))

    def is_match(self, a: str, b: str, threshold: Optional[int] = None) -> bool:
        limit = self.threshold if threshold is None else threshold
        return self.similarity(a, b) >= limit

    def find_best_substring_match(
        self, needle: str, haystack: str, threshold: Optional[int] = None
    ) -> Optional[SubstringMatch]:
        """Return the best-scoring run of 1..10 consecutive words in ``haystack``.

        Windows are tried shortest first, left to right; a later window only
        replaces the current best with a strictly higher score, so the first
        window wins ties. Returns ``None`` when no window reaches the threshold.
        """
        limit = self.threshold if threshold is None else threshold
        words = haystack.split()
        best: Optional[SubstringMatch] = None
        for size in range(1, min(MAX_WINDOW_TOKENS, len(words)) + 1):
            for start in range(len(words) - size + 1):
                window = " ".join(words[start : start + size])
                score = self.similarity(needle, window)
                if score >= limit and (best is None or score > best.score):
                    best = SubstringMatch(match=window, score=score)
        return best
