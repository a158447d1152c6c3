from __future__ import annotations

import re

_DISALLOWED_PATTERN = re.compile(r"[^\w\s%.\-]|_")
_WHITESPACE_PATTERN = re.compile(r"\s+")


def _unit(pattern: str) -> re.Pattern[str]:
    # Units are often glued to the quantity ("750ML"), so \b is not enough.
    return re.compile(r"(?<![a-z])(?:" + pattern + r")(?![a-z])")


# Ordered: multi-word spellings must be rewritten before their fragments.
_UNIT_PATTERNS = [
    (_unit(r"millilit(?:er|re)s?\.?|mls?\.?"), "ml"),
    (_unit(r"centilit(?:er|re)s?\.?|cls?\.?"), "cl"),
    (_unit(r"lit(?:er|re)s?\.?|ltrs?\.?|l\."), "l"),
    (_unit(r"fluid\s+ounces?|fl\.?\s*oz\.?|ounces?|oz\.?"), "floz"),
    (_unit(r"gall?ons?|gal\.?"), "gal"),
]
_QUANTITY_UNIT_PATTERN = re.compile(r"([0-9])\s+(ml|cl|l|floz|gal)(?![a-z])")
_OUNCE_PATTERN = _unit("floz")


def normalize_text(text: str) -> str:
    """Lowercase, drop punctuation other than % . - and collapse whitespace."""
    if not text:
        return ""
    stripped = _DISALLOWED_PATTERN.sub("", text.lower())
    return _WHITESPACE_PATTERN.sub(" ", stripped).strip()


def normalize_volume_token(text: str, ounce_unit: str = "fl oz") -> str:
    """Normalize a volume expression so that unit spellings compare equal.

    ``"750 mL"``, ``"750ML"`` and ``"750 milliliters"`` all become ``"750ml"``.
    Fluid ounces are rendered as ``ounce_unit``, which is ``"fl oz"`` or ``"oz"``.
    """
    normalized = normalize_text(text)
    if not normalized:
        return ""
    for pattern, replacement in _UNIT_PATTERNS:
        normalized = pattern.sub(replacement, normalized)
    normalized = _QUANTITY_UNIT_PATTERN.sub(r"\1\2", normalized)
    return _OUNCE_PATTERN.sub(ounce_unit, normalized)
