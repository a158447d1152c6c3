from __future__ import annotations

import json
import logging
import os
from typing import Any, Dict, Sequence

import google.generativeai as genai
from PIL import Image
from pydantic import ValidationError

from ..config import Settings, get_settings
from ..errors import ExtractionError
from ..schemas import ExtractedRecord

logger = logging.getLogger(__name__)

EXTRACTION_PROMPT = """
You are an expert Alcohol and Tobacco Tax and Trade Bureau (TTB) label specialist.
Analyze these alcohol beverage label images (there may be several, e.g. front and
back of the same bottle). Read ALL images and extract the following fields.

Return ONLY a JSON object (no markdown formatting like ```json) with this structure:
{
    "brand_name": "the brand name exactly as printed on the label",
    "product_description": "the class/type statement, e.g. 'Red Table Wine' or 'Kentucky Straight Bourbon Whiskey'",
    "alcohol_content": the alcohol by volume as a number, e.g. 13.5 for 13.5%; convert proof to ABV (90 PROOF is 45),
    "net_contents": "the volume statement as printed, e.g. '750 mL' or '12 FL OZ'",
    "has_warning_statement": true or false, whether a "GOVERNMENT WARNING" statement is present
}

If a field cannot be found on ANY of the images, use null for it
(except has_warning_statement, which must then be false).
"""


def _resolve_api_key(settings: Settings) -> str:
    return (
        settings.gemini_api_key
        or os.getenv("LABEL_VERIFIER_GEMINI_API_KEY")
        or os.getenv("GEMINI_API_KEY")
        or ""
    )


def parse_extraction_response(text: str) -> Dict[str, Any]:
    """Pull the JSON object out of a model reply that may wrap it in prose or fences."""
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end == -1 or end < start:
        raise ExtractionError("No JSON object found in vision model response")
    try:
        parsed = json.loads(text[start : end + 1])
    except json.JSONDecodeError as exc:
        raise ExtractionError(f"Vision model returned invalid JSON: {exc}") from exc
    if not isinstance(parsed, dict):
        raise ExtractionError("Vision model response is not a JSON object")
    return parsed


class VisionExtractor:
    """Reads label fields off one or more images with Google Gemini."""

    def __init__(self, settings: Settings | None = None) -> None:
        self.settings = settings or get_settings()
        self.model = None

    def _get_model(self) -> Any:
        # Re-check API key at runtime to allow env var injection after startup
        if self.model is None:
            api_key = _resolve_api_key(self.settings)
            if not api_key:
                raise ExtractionError("GEMINI_API_KEY is not configured")
            genai.configure(api_key=api_key)
            self.model = genai.GenerativeModel(
                self.settings.gemini_model,
                generation_config=genai.GenerationConfig(temperature=0.0),
            )
        return self.model

    def extract(self, images: Sequence[Image.Image]) -> ExtractedRecord:
        if not images:
            raise ExtractionError("No label images supplied")
        model = self._get_model()
        try:
            response = model.generate_content([EXTRACTION_PROMPT, *images])
            text = response.text
        except Exception as exc:  # noqa: BLE001 - SDK raises assorted transport errors
            logger.exception("Gemini extraction call failed")
            raise ExtractionError(f"Vision extraction failed: {exc}") from exc

        payload = parse_extraction_response(text)
        try:
            record = ExtractedRecord.model_validate(payload)
        except ValidationError as exc:
            raise ExtractionError(f"Vision model returned malformed fields: {exc}") from exc
        logger.info(
            "Vision extraction complete (%d image%s), missing fields: %s",
            len(images),
            "" if len(images) == 1 else "s",
            record.missing_critical_fields() or "none",
        )
        return record
