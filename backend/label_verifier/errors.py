from __future__ import annotations

from typing import Sequence


class LabelVerificationError(Exception):
    """Base class for errors raised by the label verifier."""


class InsufficientLabelDataError(LabelVerificationError):
    """Raised when too little of the label could be read to compare it."""

    def __init__(self, missing_fields: Sequence[str]) -> None:
        self.missing_fields = tuple(missing_fields)
        super().__init__(
            "Insufficient label data: could not read "
            + ", ".join(self.missing_fields)
        )


class ExtractionError(LabelVerificationError):
    """Raised when an extraction collaborator (vision model or OCR) fails."""
