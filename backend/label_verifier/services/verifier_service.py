from __future__ import annotations

import logging
import time
from typing import Callable, List, Optional, Sequence

from fastapi import HTTPException, UploadFile
from fastapi.concurrency import run_in_threadpool
from PIL import Image, UnidentifiedImageError

from ..config import Settings, get_settings
from ..errors import ExtractionError, InsufficientLabelDataError
from ..ocr import OCRResult, load_image, run_ocr_on_images
from ..orchestrator import VerificationOrchestrator
from ..schemas import DeclaredRecord, ExtractedRecord, VerificationResponse
from ..text_scan import extract_record
from .vision_extractor import VisionExtractor

logger = logging.getLogger(__name__)

OCRRunner = Callable[[Sequence[bytes], Optional[Settings]], OCRResult]

EXTRACTION_FAILED_DETAIL = (
    "Failed to process label images. Please try again with clearer images."
)
INSUFFICIENT_DATA_DETAIL = (
    "Could not read enough of the label. Please re-upload clearer images."
)


class VerifierService:
    """Coordinates extraction (Gemini vision, OCR fallback) and verification."""

    def __init__(
        self,
        settings: Settings | None = None,
        extractor: VisionExtractor | None = None,
        ocr_runner: OCRRunner | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.extractor = extractor or VisionExtractor(self.settings)
        self.ocr_runner = ocr_runner or run_ocr_on_images
        self.orchestrator = VerificationOrchestrator(self.settings)

    async def verify(
        self, declared: DeclaredRecord, images: List[UploadFile]
    ) -> VerificationResponse:
        image_bytes = await self._read_images(images)
        decoded = [self._decode(data) for data in image_bytes]

        start = time.perf_counter()
        extracted, method = await self._extract(declared, image_bytes, decoded)
        try:
            outcome = self.orchestrator.verify(declared, extracted)
        except InsufficientLabelDataError as exc:
            raise HTTPException(status_code=422, detail=INSUFFICIENT_DATA_DETAIL) from exc
        duration = (time.perf_counter() - start) * 1000

        logger.info(
            "Verification completed using %s (%d image%s) in %.0f ms",
            method,
            len(image_bytes),
            "" if len(image_bytes) == 1 else "s",
            duration,
        )
        return VerificationResponse(
            success=outcome.success,
            fields=outcome.fields,
            method=method,
            image_count=len(image_bytes),
            duration_ms=round(duration, 2),
        )

    async def _read_images(self, images: List[UploadFile]) -> List[bytes]:
        if not images:
            raise HTTPException(status_code=400, detail="At least one image is required")
        if len(images) > self.settings.max_images:
            raise HTTPException(
                status_code=400,
                detail=f"Maximum {self.settings.max_images} images allowed",
            )
        contents: List[bytes] = []
        for upload in images:
            if upload.content_type not in self.settings.allowed_content_types:
                raise HTTPException(
                    status_code=400,
                    detail="Invalid file type. All images must be JPEG, PNG, or WebP.",
                )
            data = await upload.read()
            if not data:
                raise HTTPException(status_code=400, detail=f"Empty image file: {upload.filename}")
            if len(data) > self.settings.max_upload_bytes:
                raise HTTPException(status_code=413, detail=f"Image too large: {upload.filename}")
            contents.append(data)
        return contents

    def _decode(self, data: bytes) -> Image.Image:
        try:
            return load_image(data, self.settings.max_image_side)
        except (UnidentifiedImageError, OSError) as exc:
            raise HTTPException(status_code=400, detail=f"Invalid image file: {exc}") from exc

    async def _extract(
        self,
        declared: DeclaredRecord,
        image_bytes: List[bytes],
        decoded: List[Image.Image],
    ) -> tuple[ExtractedRecord, str]:
        try:
            extracted = await run_in_threadpool(self.extractor.extract, decoded)
            return extracted, "vision"
        except ExtractionError as vision_error:
            if not self.settings.ocr_fallback_enabled:
                raise HTTPException(status_code=502, detail=EXTRACTION_FAILED_DETAIL) from vision_error
            logger.warning("Vision extraction failed, falling back to OCR: %s", vision_error)

        try:
            ocr_result = await run_in_threadpool(self.ocr_runner, image_bytes, self.settings)
        except Exception as ocr_error:  # noqa: BLE001 - any OCR failure ends the request as a 502
            logger.error("Both vision extraction and OCR failed: %s", ocr_error)
            raise HTTPException(status_code=502, detail=EXTRACTION_FAILED_DETAIL) from ocr_error
        extracted = extract_record(
            ocr_result.combined_text, declared, self.orchestrator.verifier
        )
        return extracted, "ocr"


def get_verifier_service() -> VerifierService:
    return VerifierService()
