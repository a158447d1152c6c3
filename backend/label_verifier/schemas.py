import math
import re
from enum import Enum
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel


class ProductCategory(str, Enum):
    wine = "Wine"
    distilled_spirits = "Distilled Spirits"
    malt_beverage = "Malt Beverage"

    @classmethod
    def _missing_(cls, value: object) -> Optional["ProductCategory"]:
        # Accept "distilled spirits", "DistilledSpirits", "malt_beverage", ...
        if not isinstance(value, str):
            return None
        key = re.sub(r"[\s_-]+", "", value).lower()
        for member in cls:
            if key in (member.name.replace("_", ""), member.value.replace(" ", "").lower()):
                return member
        return None


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class DeclaredRecord(_CamelModel):
    """Claims submitted by the user through the verification form."""

    model_config = ConfigDict(frozen=True)

    brand_name: str = Field(..., description="Brand listed on the submission form")
    product_category: ProductCategory = Field(
        ..., description="TTB category: Wine, Distilled Spirits or Malt Beverage"
    )
    alcohol_content: float = Field(
        ..., ge=0, le=100, description="Alcohol by volume, e.g. 45 for 45%"
    )
    net_contents: str = Field(..., description="Net contents string, e.g. '750 mL'")

    @field_validator("product_category", mode="before")
    @classmethod
    def _parse_category(cls, value: object) -> object:
        if isinstance(value, str):
            return ProductCategory(value)
        return value

    @field_validator("brand_name", "net_contents")
    @classmethod
    def _require_text(cls, value: str) -> str:
        stripped = value.strip()
        if not stripped:
            raise ValueError("must not be blank")
        return stripped

    @field_validator("alcohol_content")
    @classmethod
    def _require_finite(cls, value: float) -> float:
        if not math.isfinite(value):
            raise ValueError("must be a finite number")
        return value


_CRITICAL_FIELDS = ("brand_name", "product_description", "alcohol_content")


class ExtractedRecord(_CamelModel):
    """Fields read off the label images. Every value may be absent."""

    model_config = ConfigDict(frozen=True)

    brand_name: Optional[str] = None
    product_description: Optional[str] = None
    alcohol_content: Optional[float] = None
    net_contents: Optional[str] = None
    has_warning_statement: bool = False

    @field_validator("brand_name", "product_description", "net_contents", mode="before")
    @classmethod
    def _blank_to_none(cls, value: object) -> object:
        if value is None:
            return None
        if isinstance(value, str):
            stripped = value.strip()
            return stripped or None
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator("alcohol_content", mode="before")
    @classmethod
    def _parse_percentage(cls, value: object) -> object:
        # Vision output sometimes carries the unit ("40%", "13.5% ABV").
        if isinstance(value, str):
            match = re.search(r"[0-9]+(?:\.[0-9]+)?", value)
            return float(match.group(0)) if match else None
        if isinstance(value, float) and not math.isfinite(value):
            return None
        return value

    @field_validator("has_warning_statement", mode="before")
    @classmethod
    def _none_is_false(cls, value: object) -> object:
        return False if value is None else value

    def missing_critical_fields(self) -> List[str]:
        return [name for name in _CRITICAL_FIELDS if getattr(self, name) is None]


class FieldVerificationResult(_CamelModel):
    matched: bool
    expected_display: str
    found_display: Optional[str] = None
    similarity_score: Optional[int] = Field(default=None, ge=0, le=100)
    error_message: Optional[str] = None

    @model_validator(mode="after")
    def _error_iff_unmatched(self) -> "FieldVerificationResult":
        if self.matched and self.error_message is not None:
            raise ValueError("matched results must not carry an error message")
        if not self.matched and not self.error_message:
            raise ValueError("unmatched results must carry an error message")
        return self


class VerificationFields(_CamelModel):
    brand_name: FieldVerificationResult
    product_type: FieldVerificationResult
    alcohol_content: FieldVerificationResult
    net_contents: FieldVerificationResult
    government_warning: FieldVerificationResult


class VerificationOutcome(_CamelModel):
    success: bool
    fields: VerificationFields


class VerificationResponse(VerificationOutcome):
    method: Literal["vision", "ocr"]
    image_count: int
    duration_ms: float
