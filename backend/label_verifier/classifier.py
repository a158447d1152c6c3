from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Optional, Sequence

from .keywords import CATEGORY_KEYWORDS
from .normalizer import normalize_text
from .schemas import ProductCategory

BASE_CONFIDENCE = 60
MAX_LENGTH_BONUS = 30
WORD_BOUNDARY_BONUS = 10
EARLY_POSITION_BONUS = 5
EARLY_POSITION_LIMIT = 10
# Lexical hits are never treated as certain.
MAX_CONFIDENCE = 95


@dataclass(frozen=True)
class Classification:
    category: Optional[ProductCategory]
    confidence: int
    matched_keyword: Optional[str] = None


def _on_word_boundary(text: str, start: int, end: int) -> bool:
    before_ok = start == 0 or not text[start - 1].isalnum()
    after_ok = end == len(text) or not text[end].isalnum()
    return before_ok and after_ok


def _keyword_confidence(text: str, keyword: str, position: int) -> int:
    confidence = BASE_CONFIDENCE + min(len(keyword) * 2, MAX_LENGTH_BONUS)
    if _on_word_boundary(text, position, position + len(keyword)):
        confidence += WORD_BOUNDARY_BONUS
    if position < EARLY_POSITION_LIMIT:
        confidence += EARLY_POSITION_BONUS
    return min(confidence, MAX_CONFIDENCE)


def classify(
    free_text: Optional[str],
    keywords: Mapping[ProductCategory, Sequence[str]] = CATEGORY_KEYWORDS,
) -> Classification:
    """Map a product description such as "Kentucky Straight Bourbon Whiskey"
    to a TTB category.

    Every keyword found in the normalized text is scored on its length, on
    whether it sits on word boundaries and on how early it appears. The single
    best hit decides the category; earlier hits in table order win ties.
    """
    text = normalize_text(free_text or "")
    if not text:
        return Classification(category=None, confidence=0)

    best: Optional[Classification] = None
    for category, category_keywords in keywords.items():
        for keyword in category_keywords:
            position = text.find(keyword)
            if position < 0:
                continue
            confidence = _keyword_confidence(text, keyword, position)
            if best is None or confidence > best.confidence:
                best = Classification(
                    category=category, confidence=confidence, matched_keyword=keyword
                )

    return best or Classification(category=None, confidence=0)
