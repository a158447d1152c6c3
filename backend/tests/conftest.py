from __future__ import annotations

from io import BytesIO
from typing import Callable, List, Optional, Sequence

import pytest
from fastapi.testclient import TestClient
from PIL import Image

from label_verifier.config import Settings
from label_verifier.errors import ExtractionError
from label_verifier.main import create_app
from label_verifier.ocr import OCRResult
from label_verifier.schemas import DeclaredRecord, ExtractedRecord, ProductCategory
from label_verifier.services.verifier_service import VerifierService, get_verifier_service


class FakeExtractor:
    """Stands in for the Gemini extractor; returns a canned record or fails."""

    def __init__(self, record: Optional[ExtractedRecord] = None, error: Optional[str] = None):
        self.record = record
        self.error = error
        self.calls: List[int] = []

    def extract(self, images: Sequence[Image.Image]) -> ExtractedRecord:
        self.calls.append(len(images))
        if self.error is not None:
            raise ExtractionError(self.error)
        assert self.record is not None
        return self.record


def fake_ocr(lines: Optional[List[str]] = None, error: Optional[str] = None):
    def runner(images: Sequence[bytes], settings: Optional[Settings] = None) -> OCRResult:
        if error is not None:
            raise ExtractionError(error)
        return OCRResult(tokens=list(lines or []), raw_lines=list(lines or []))

    return runner


@pytest.fixture
def settings() -> Settings:
    return Settings(gemini_api_key="", verify_rate_limit="1000/minute")


@pytest.fixture
def declared() -> DeclaredRecord:
    return DeclaredRecord(
        brand_name="XYZ Winery",
        product_category=ProductCategory.wine,
        alcohol_content=12.5,
        net_contents="750 mL",
    )


@pytest.fixture
def extracted() -> ExtractedRecord:
    return ExtractedRecord(
        brand_name="XYZ Winery",
        product_description="Red Table Wine",
        alcohol_content=12.5,
        net_contents="750ML",
        has_warning_statement=True,
    )


@pytest.fixture(scope="session")
def png_bytes() -> bytes:
    image = Image.new("RGB", (300, 200), color="white")
    buffer = BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def make_client(settings: Settings) -> Callable[..., TestClient]:
    def factory(extractor=None, ocr_runner=None, app_settings: Optional[Settings] = None) -> TestClient:
        cfg = app_settings or settings
        app = create_app(cfg)
        app.dependency_overrides[get_verifier_service] = lambda: VerifierService(
            cfg,
            extractor=extractor or FakeExtractor(error="vision disabled in tests"),
            ocr_runner=ocr_runner or fake_ocr(error="ocr disabled in tests"),
        )
        return TestClient(app)

    return factory
