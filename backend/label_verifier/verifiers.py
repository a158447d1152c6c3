from __future__ import annotations

import logging
from typing import Optional, Sequence

from .classifier import classify
from .config import MatcherThresholds
from .normalizer import normalize_text, normalize_volume_token
from .schemas import FieldVerificationResult, ProductCategory
from .similarity import SimilarityScorer

logger = logging.getLogger(__name__)

WARNING_EXPECTED = "GOVERNMENT WARNING present"
WARNING_FOUND = "GOVERNMENT WARNING found"


def format_percent(value: float) -> str:
    return f"{value:g}%"


class FieldVerifier:
    """Compares one declared field against what was read off the label.

    Every method returns a FieldVerificationResult; "could not compare" states
    are reported as unmatched results with an error message, never raised.
    """

    def __init__(self, thresholds: Optional[MatcherThresholds] = None) -> None:
        self.thresholds = thresholds or MatcherThresholds()
        self.scorer = SimilarityScorer(self.thresholds.fuzzy_match_threshold)

    def verify_brand_name(self, declared: str, found: Optional[str]) -> FieldVerificationResult:
        if found is None:
            return FieldVerificationResult(
                matched=False,
                expected_display=declared,
                error_message="Brand name not found on label",
            )
        # Exact after normalization, no fuzzy tolerance.
        if normalize_text(declared) == normalize_text(found):
            return FieldVerificationResult(
                matched=True,
                expected_display=declared,
                found_display=found,
                similarity_score=100,
            )
        return FieldVerificationResult(
            matched=False,
            expected_display=declared,
            found_display=found,
            similarity_score=self.scorer.similarity(declared, found),
            error_message=f'Brand name mismatch: expected "{declared}", found "{found}"',
        )

    def verify_product_type(
        self, declared: ProductCategory, product_description: Optional[str]
    ) -> FieldVerificationResult:
        expected = declared.value
        if product_description is None:
            return FieldVerificationResult(
                matched=False,
                expected_display=expected,
                error_message="Could not determine product type: not found on label",
            )
        classification = classify(product_description)
        logger.debug(
            "Classified %r as %s (confidence=%d, keyword=%r)",
            product_description,
            classification.category,
            classification.confidence,
            classification.matched_keyword,
        )
        floor = self.thresholds.category_confidence_floor
        if classification.category is None or classification.confidence < floor:
            return FieldVerificationResult(
                matched=False,
                expected_display=expected,
                found_display=product_description,
                similarity_score=classification.confidence,
                error_message=(
                    f'Could not determine product type from "{product_description}"'
                ),
            )
        found_category = classification.category.value
        if found_category.lower() == expected.lower():
            return FieldVerificationResult(
                matched=True,
                expected_display=expected,
                found_display=f"{product_description} ({found_category})",
                similarity_score=classification.confidence,
            )
        return FieldVerificationResult(
            matched=False,
            expected_display=expected,
            found_display=f"{product_description} ({found_category})",
            similarity_score=classification.confidence,
            error_message=(
                f"Product type mismatch: expected {expected}, "
                f'label describes {found_category} ("{product_description}")'
            ),
        )

    def select_alcohol_reading(
        self, declared: float, candidates: Sequence[float]
    ) -> Optional[float]:
        """Pick the reading to verify when a label shows several percentages.

        The first candidate within tolerance of the declared value wins;
        otherwise the first candidate is kept so the mismatch is reported.
        """
        tolerance = self.thresholds.abv_tolerance_percent
        for candidate in candidates:
            if abs(declared - candidate) <= tolerance:
                return candidate
        return candidates[0] if candidates else None

    def verify_alcohol_content(
        self, declared: float, found: Optional[float]
    ) -> FieldVerificationResult:
        expected = format_percent(declared)
        if found is None:
            return FieldVerificationResult(
                matched=False,
                expected_display=expected,
                error_message=f"Alcohol content {expected} not found on label",
            )
        tolerance = self.thresholds.abv_tolerance_percent
        if abs(declared - found) <= tolerance:
            return FieldVerificationResult(
                matched=True,
                expected_display=expected,
                found_display=format_percent(found),
                similarity_score=100,
            )
        return FieldVerificationResult(
            matched=False,
            expected_display=expected,
            found_display=format_percent(found),
            error_message=(
                f"Alcohol content mismatch: expected {expected}, found "
                f"{format_percent(found)} (tolerance ±{tolerance:g}%)"
            ),
        )

    def verify_net_contents(self, declared: str, found: Optional[str]) -> FieldVerificationResult:
        if found is None:
            return FieldVerificationResult(
                matched=False,
                expected_display=declared,
                error_message=f'Net contents "{declared}" not found on label',
            )
        normalized_declared = normalize_volume_token(declared)
        normalized_found = normalize_volume_token(found)
        if normalized_declared == normalized_found:
            return FieldVerificationResult(
                matched=True,
                expected_display=declared,
                found_display=found,
                similarity_score=100,
            )
        score = self.scorer.similarity(normalized_declared, normalized_found)
        if score >= self.thresholds.fuzzy_match_threshold:
            return FieldVerificationResult(
                matched=True,
                expected_display=declared,
                found_display=found,
                similarity_score=score,
            )
        return FieldVerificationResult(
            matched=False,
            expected_display=declared,
            found_display=found,
            similarity_score=score,
            error_message=f'Net contents mismatch: expected "{declared}", found "{found}"',
        )

    def verify_government_warning(self, has_warning: bool) -> FieldVerificationResult:
        if has_warning:
            return FieldVerificationResult(
                matched=True,
                expected_display=WARNING_EXPECTED,
                found_display=WARNING_FOUND,
                similarity_score=100,
            )
        return FieldVerificationResult(
            matched=False,
            expected_display=WARNING_EXPECTED,
            error_message="Government warning statement is missing from the label",
        )
