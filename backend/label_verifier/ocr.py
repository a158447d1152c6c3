from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import lru_cache
from io import BytesIO
from typing import List, Sequence, cast

import easyocr
import numpy as np
from PIL import Image, ImageOps, UnidentifiedImageError

from .config import Settings, get_settings
from .errors import ExtractionError

logger = logging.getLogger(__name__)


@dataclass
class OCRResult:
    tokens: List[str]
    raw_lines: List[str]

    @property
    def combined_text(self) -> str:
        """Text used for field scanning: confident tokens only."""
        return " ".join(self.tokens)


MAX_IMAGE_SIDE = 3072


def load_image(image_bytes: bytes, max_side: int = MAX_IMAGE_SIDE) -> Image.Image:
    """Decode an upload, fix its orientation and bound its longest edge."""
    image: Image.Image = Image.open(BytesIO(image_bytes))
    image = cast(Image.Image, ImageOps.exif_transpose(image))  # normalize orientation
    if image.mode != "RGB":
        image = image.convert("RGB")
    if max(image.size) > max_side:
        image.thumbnail((max_side, max_side), Image.Resampling.LANCZOS)
    return image


@lru_cache
def _get_reader(languages: tuple[str, ...], gpu: bool) -> easyocr.Reader:
    return easyocr.Reader(list(languages), gpu=gpu)


def run_ocr(image_bytes: bytes, settings: Settings | None = None) -> OCRResult:
    config = settings or get_settings()
    try:
        image = load_image(image_bytes)
    except (UnidentifiedImageError, OSError) as exc:
        raise ExtractionError(f"Unreadable image: {exc}") from exc
    try:
        reader = _get_reader(tuple(config.ocr_languages), config.use_gpu)
        results = reader.readtext(np.array(image))
    except Exception as exc:  # noqa: BLE001 - EasyOCR raises assorted model and torch errors
        raise ExtractionError(f"OCR failed: {exc}") from exc

    thresholds = config.matcher_thresholds
    tokens: List[str] = []
    raw_lines: List[str] = []
    for _bbox, text, confidence in results:
        normalized = text.strip()
        if not normalized:
            continue
        raw_lines.append(normalized)
        if (
            float(confidence) >= thresholds.token_confidence_floor
            and len(normalized) >= thresholds.min_token_length
        ):
            tokens.append(normalized)

    return OCRResult(tokens=tokens, raw_lines=raw_lines)


def run_ocr_on_images(
    images: Sequence[bytes], settings: Settings | None = None
) -> OCRResult:
    """OCR every image (e.g. front and back label) and merge the results."""
    tokens: List[str] = []
    raw_lines: List[str] = []
    for index, image_bytes in enumerate(images, start=1):
        result = run_ocr(image_bytes, settings)
        logger.info(
            "OCR read %d lines (%d confident) from image %d/%d",
            len(result.raw_lines),
            len(result.tokens),
            index,
            len(images),
        )
        tokens.extend(result.tokens)
        raw_lines.extend(result.raw_lines)
    combined = OCRResult(tokens=tokens, raw_lines=raw_lines)
    if not combined.combined_text.strip():
        raise ExtractionError("Could not read text from the label images")
    return combined
