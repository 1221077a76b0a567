"""Hierarchical comparison of HSN / tariff classification codes.

Pure functions: two codes agree at the finest prefix level (chapter, heading,
subheading, full code) reached without an earlier disagreement.
"""

from dataclasses import dataclass, field

from reconciler.normalizer.normalizers import CODE_MAX_LENGTH, CODE_MIN_LENGTH, clean_code
from reconciler.schemas.comparison import CodeLevel

LEVEL_CONFIDENCE = {
    CodeLevel.EXACT: 0.99,
    CodeLevel.SUBHEADING: 0.90,
    CodeLevel.HEADING: 0.70,
    CodeLevel.CHAPTER: 0.40,
    CodeLevel.NONE: 0.10,
}

# Finest first
LEVEL_ORDER = [CodeLevel.EXACT, CodeLevel.SUBHEADING, CodeLevel.HEADING, CodeLevel.CHAPTER, CodeLevel.NONE]

_PREFIX_LEVELS = ((CodeLevel.CHAPTER, 2), (CodeLevel.HEADING, 4), (CodeLevel.SUBHEADING, 6))

CHAPTER_CATEGORIES = {
    (1, 5): "Live animals and animal products",
    (6, 14): "Vegetable products",
    (15, 15): "Animal or vegetable fats and oils",
    (16, 24): "Prepared foodstuffs, beverages, spirits, vinegar, tobacco",
    (25, 27): "Mineral products",
    (28, 38): "Products of chemical or allied industries",
    (39, 40): "Plastics and rubber",
    (41, 43): "Raw hides, skins, leather, furskins",
    (44, 46): "Wood and articles of wood, cork, basketware",
    (47, 49): "Pulp, paper, paperboard and articles thereof",
    (50, 63): "Textiles and textile articles",
    (64, 67): "Footwear, headgear, umbrellas, walking sticks",
    (68, 70): "Articles of stone, plaster, cement, asbestos, mica, glass",
    (71, 71): "Natural or cultured pearls, precious stones, metals, coins",
    (72, 83): "Base metals and articles of base metal",
    (84, 85): "Machinery, mechanical appliances, electrical equipment",
    (86, 89): "Vehicles, aircraft, vessels and transport equipment",
    (90, 92): "Optical, photographic, measuring and musical instruments",
    (93, 93): "Arms and ammunition",
    (94, 96): "Miscellaneous manufactured articles",
    (97, 97): "Works of art, collectors pieces and antiques",
}


@dataclass
class CodeMatch:
    """Result of comparing two classification codes."""

    level: CodeLevel
    confidence: float
    valid: bool
    code_a: str
    code_b: str

    @property
    def depth(self) -> int:
        return level_depth(self.level)


@dataclass
class CodeValidation:
    """Single-code sanity check."""

    code: str
    valid: bool
    level: str | None = None
    chapter: str | None = None
    category: str | None = None
    issues: list[str] = field(default_factory=list)


def is_valid_code(code: str) -> bool:
    return CODE_MIN_LENGTH <= len(code) <= CODE_MAX_LENGTH


def level_depth(level: CodeLevel) -> int:
    """Higher is finer; NONE is 0."""
    return len(LEVEL_ORDER) - 1 - LEVEL_ORDER.index(level)


def match_codes(code_a, code_b, invalid_scale: float = 0.5) -> CodeMatch:
    """Compare two codes by shared prefix.

    73261990 vs 7320 agree on chapter 73 only (0.40). When either code has an
    invalid length the level is still reported and confidence is scaled down.
    """
    a, b = clean_code(code_a or ""), clean_code(code_b or "")
    level = CodeLevel.NONE
    for candidate, width in _PREFIX_LEVELS:
        if len(a) < width or len(b) < width or a[:width] != b[:width]:
            break
        level = candidate
    if a and a == b and len(a) >= 2:
        level = CodeLevel.EXACT

    valid = is_valid_code(a) and is_valid_code(b)
    confidence = LEVEL_CONFIDENCE[level]
    if not valid:
        confidence = round(confidence * invalid_scale, 4)
    return CodeMatch(level=level, confidence=confidence, valid=valid, code_a=a, code_b=b)


def chapter_category(chapter: int) -> str | None:
    for (low, high), category in CHAPTER_CATEGORIES.items():
        if low <= chapter <= high:
            return category
    return None


def validate_code(code) -> CodeValidation:
    """Check length, chapter range and placeholder digits of one code."""
    digits = clean_code(code or "")
    result = CodeValidation(code=digits, valid=True)

    if not is_valid_code(digits):
        result.valid = False
        result.issues.append(
            f"Code must have {CODE_MIN_LENGTH}-{CODE_MAX_LENGTH} digits, got {len(digits)}"
        )
    if len(digits) >= 8:
        result.level = "tariff_item"
    elif len(digits) >= 6:
        result.level = "subheading"
    elif len(digits) >= 4:
        result.level = "heading"
    elif len(digits) >= 2:
        result.level = "chapter"

    if len(digits) >= 2:
        result.chapter = digits[:2]
        chapter = int(result.chapter)
        if not 1 <= chapter <= 97:
            result.valid = False
            result.issues.append(f"Chapter {result.chapter} is outside 01-97")
        else:
            result.category = chapter_category(chapter)

    if digits and (set(digits) == {"0"} or "00000" in digits):
        result.valid = False
        result.issues.append("Code contains placeholder zeros")
    return result
