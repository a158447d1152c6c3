"""Turn raw OCR text into an ExtractedRecord.

Used when the vision model is unavailable: the OCR engine only yields a blob
of text, so the label fields are located by pattern scans and by a sliding
window search for the declared brand.
"""

from __future__ import annotations

import logging
import re
from typing import List, Optional, Tuple

from .classifier import classify
from .schemas import DeclaredRecord, ExtractedRecord
from .verifiers import FieldVerifier

logger = logging.getLogger(__name__)

_PERCENT_PATTERN = re.compile(r"(?<![0-9.])([0-9]{1,3}(?:\.[0-9]+)?)\s*%")
_PROOF_PATTERN = re.compile(r"(?<![0-9.])([0-9]{2,3}(?:\.[0-9]+)?)\s*PROOF", re.IGNORECASE)
_VOLUME_PATTERN = re.compile(
    r"(?<![0-9.])[0-9]+(?:\.[0-9]+)?\s*"
    r"(?:MILLILIT(?:ER|RE)S?|ML|CENTILIT(?:ER|RE)S?|CL|LIT(?:ER|RE)S?|L"
    r"|FL\.?\s*OZ\.?|FLUID\s+OUNCES?|OUNCES?|OZ|GALLONS?|GAL)(?![A-Z])",
    re.IGNORECASE,
)
_WARNING_PHRASE = "government warning"


def find_alcohol_contents(text: str) -> List[float]:
    """Percent readings (and proof readings converted to ABV), in label order."""
    readings: List[Tuple[int, float]] = []
    for match in _PERCENT_PATTERN.finditer(text):
        value = float(match.group(1))
        if 0 <= value <= 100:
            readings.append((match.start(), value))
    for match in _PROOF_PATTERN.finditer(text):
        value = round(float(match.group(1)) / 2.0, 1)
        if 0 <= value <= 100:
            readings.append((match.start(), value))
    percents: List[float] = []
    for _, value in sorted(readings, key=lambda item: item[0]):
        if value not in percents:
            percents.append(value)
    return percents


def find_net_contents(text: str) -> List[str]:
    return [match.group(0).strip() for match in _VOLUME_PATTERN.finditer(text)]


def find_government_warning(text: str) -> bool:
    return _WARNING_PHRASE in " ".join(text.lower().split())


def _find_product_description(text: str) -> Optional[str]:
    words = text.split()
    best_window: Optional[str] = None
    best_confidence = 0
    # Longest window wins ties.
    for size in (4, 3, 2, 1):
        for start in range(len(words) - size + 1):
            window = " ".join(words[start : start + size])
            classification = classify(window)
            if classification.category is not None and classification.confidence > best_confidence:
                best_window = window
                best_confidence = classification.confidence
    return best_window


def extract_record(
    text: str, declared: DeclaredRecord, verifier: Optional[FieldVerifier] = None
) -> ExtractedRecord:
    """Build an ExtractedRecord from OCR text, guided by the declared values.

    Where several candidates exist for a field, the one agreeing with the
    declared value is preferred; otherwise the first one on the label is used
    so the mismatch can be reported.
    """
    verifier = verifier or FieldVerifier()
    brand = verifier.scorer.find_best_substring_match(declared.brand_name, text)

    alcohol_content = verifier.select_alcohol_reading(
        declared.alcohol_content, find_alcohol_contents(text)
    )

    volumes = find_net_contents(text)
    net_contents = next(
        (
            volume
            for volume in volumes
            if verifier.verify_net_contents(declared.net_contents, volume).matched
        ),
        volumes[0] if volumes else None,
    )

    record = ExtractedRecord(
        brand_name=brand.match if brand else None,
        product_description=_find_product_description(text),
        alcohol_content=alcohol_content,
        net_contents=net_contents,
        has_warning_statement=find_government_warning(text),
    )
    logger.debug("Text scan extracted %s", record)
    return record
