from __future__ import annotations

import logging
from typing import Optional

from .config import Settings, get_settings
from .errors import InsufficientLabelDataError
from .schemas import (
    DeclaredRecord,
    ExtractedRecord,
    VerificationFields,
    VerificationOutcome,
)
from .verifiers import FieldVerifier

logger = logging.getLogger(__name__)


class VerificationOrchestrator:
    """Runs every field verifier over a declared/extracted record pair."""

    def __init__(self, settings: Settings | None = None) -> None:
        self.settings = settings or get_settings()
        self.thresholds = self.settings.matcher_thresholds
        self.verifier = FieldVerifier(self.thresholds)

    def verify(
        self, declared: DeclaredRecord, extracted: Optional[ExtractedRecord]
    ) -> VerificationOutcome:
        if not isinstance(declared, DeclaredRecord):
            raise TypeError(f"declared must be a DeclaredRecord, got {type(declared).__name__}")
        if extracted is None:
            extracted = ExtractedRecord()
        elif not isinstance(extracted, ExtractedRecord):
            raise TypeError(
                f"extracted must be an ExtractedRecord, got {type(extracted).__name__}"
            )

        missing = extracted.missing_critical_fields()
        if len(missing) >= self.thresholds.min_missing_for_abort:
            logger.warning("Aborting verification, label fields unreadable: %s", missing)
            raise InsufficientLabelDataError(missing)

        verifier = self.verifier
        fields = VerificationFields(
            brand_name=verifier.verify_brand_name(declared.brand_name, extracted.brand_name),
            product_type=verifier.verify_product_type(
                declared.product_category, extracted.product_description
            ),
            alcohol_content=verifier.verify_alcohol_content(
                declared.alcohol_content, extracted.alcohol_content
            ),
            net_contents=verifier.verify_net_contents(
                declared.net_contents, extracted.net_contents
            ),
            government_warning=verifier.verify_government_warning(
                extracted.has_warning_statement
            ),
        )
        # Government warning is informational only.
        success = all(
            result.matched
            for result in (
                fields.brand_name,
                fields.product_type,
                fields.alcohol_content,
                fields.net_contents,
            )
        )
        logger.info(
            "Verification %s for brand %r (failed fields: %s)",
            "passed" if success else "failed",
            declared.brand_name,
            [name for name, result in fields if not result.matched] or "none",
        )
        return VerificationOutcome(success=success, fields=fields)
