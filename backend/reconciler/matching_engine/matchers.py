"""Pure n-way matching functions for normalized field values. No registry or settings dependency."""

from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import date
from difflib import SequenceMatcher
from itertools import combinations

from reconciler.classification.matcher import level_depth, match_codes
from reconciler.normalizer.normalizers import display_value
from reconciler.normalizer.reference import UNIT_FAMILIES
from reconciler.schemas.comparison import MatchStatus, NormalizedValue, ToleranceWindow, ValueKind
from reconciler.schemas.extraction import DocumentType

_COMPANY_SUFFIXES = [" llc", " inc", " co", " ltd", " corp", " corporation", " company",
                     " limited", " gmbh", " sa", " pvt", " private", " plc", " and", " &"]


@dataclass
class MatchScales:
    """Confidence constants applied per match status."""

    semantic: float = 0.9
    partial: float = 0.6
    mismatch_max: float = 0.3
    mismatch_min: float = 0.1
    invalid_code: float = 0.5


@dataclass
class ValueComparison:
    """Outcome of comparing the values of one field group."""

    status: MatchStatus
    confidence: float
    notes: list[str] = field(default_factory=list)
    consensus: NormalizedValue | None = None
    outliers: list[NormalizedValue] = field(default_factory=list)


# ── Pairwise primitives ──


def strip_company_suffixes(name: str) -> str:
    n = name
    stripped = True
    while stripped:
        stripped = False
        for suffix in _COMPANY_SUFFIXES:
            if n.endswith(suffix):
                n = n[: -len(suffix)].strip()
                stripped = True
    return n


def text_similarity(text_a: str | None, text_b: str | None) -> float:
    """Similarity of two already-normalized strings in [0, 1].

    Company suffixes are ignored; containment scores 0.85; otherwise the better
    of character ratio and word-token Jaccard.
    """
    if not text_a or not text_b:
        return 0.0
    if text_a == text_b:
        return 1.0
    a, b = strip_company_suffixes(text_a), strip_company_suffixes(text_b)
    if not a or not b:
        return 0.0
    if a == b or a.replace(" ", "") == b.replace(" ", ""):
        return 0.95
    scores = [SequenceMatcher(None, a, b).ratio()]
    words_a, words_b = set(a.split()), set(b.split())
    scores.append(len(words_a & words_b) / len(words_a | words_b))
    if a in b or b in a:
        scores.append(0.85)
    return round(max(scores), 3)


def units_compatible(unit_a: str | None, unit_b: str | None) -> bool:
    """Measurement units must agree; count units (ctn, pcs, ...) only label the number."""
    if unit_a is None or unit_b is None or unit_a == unit_b:
        return True
    return not (unit_a in UNIT_FAMILIES or unit_b in UNIT_FAMILIES)


def currencies_compatible(currency_a: str | None, currency_b: str | None) -> bool:
    return currency_a is None or currency_b is None or currency_a == currency_b


def _amounts_compatible(a: NormalizedValue, b: NormalizedValue, kind: ValueKind) -> bool:
    if kind == ValueKind.MONEY:
        return currencies_compatible(a.unit, b.unit)
    return units_compatible(a.unit, b.unit)


def canonical_equal(a: NormalizedValue, b: NormalizedValue, kind: ValueKind) -> bool:
    if a.canonical is None or b.canonical is None:
        return False
    if kind in (ValueKind.NUMBER, ValueKind.MONEY):
        return abs(float(a.canonical) - float(b.canonical)) < 1e-9 and _amounts_compatible(a, b, kind)
    return a.canonical == b.canonical


def relative_difference(value_a: float, value_b: float) -> float:
    if value_a == value_b:
        return 0.0
    return min(abs(value_a - value_b) / max(abs(value_a), abs(value_b)), 1.0)


def _day_gap(a: NormalizedValue, b: NormalizedValue) -> int:
    return abs((date.fromisoformat(str(a.canonical)) - date.fromisoformat(str(b.canonical))).days)


def _address_text(value: NormalizedValue) -> str:
    return " ".join(part for part in str(value.canonical).split("|") if part)


def _similarity(a: NormalizedValue, b: NormalizedValue, kind: ValueKind) -> float:
    if kind == ValueKind.ADDRESS:
        country_a = (a.components or {}).get("country")
        country_b = (b.components or {}).get("country")
        if country_a and country_b and country_a != country_b:
            return 0.0
        return text_similarity(_address_text(a), _address_text(b))
    return text_similarity(str(a.canonical), str(b.canonical))


def within_tolerance(a: NormalizedValue, b: NormalizedValue, kind: ValueKind, tolerance: ToleranceWindow) -> bool:
    """Whether two values agree once the group's tolerance window is applied."""
    if canonical_equal(a, b, kind):
        return True
    if a.canonical is None or b.canonical is None:
        return False
    if kind in (ValueKind.NUMBER, ValueKind.MONEY):
        if tolerance.ratio is None or not _amounts_compatible(a, b, kind):
            return False
        return relative_difference(float(a.canonical), float(b.canonical)) <= tolerance.ratio
    if kind == ValueKind.DATE:
        return tolerance.days is not None and _day_gap(a, b) <= tolerance.days
    if kind == ValueKind.CODE:
        if tolerance.code_level is None:
            return False
        return level_depth(match_codes(a.canonical, b.canonical).level) >= level_depth(tolerance.code_level)
    if tolerance.similarity is None:
        return False
    return _similarity(a, b, kind) >= tolerance.similarity


def pair_divergence(a: NormalizedValue, b: NormalizedValue, kind: ValueKind) -> float:
    """How far apart two values are, from 0 (same) to 1 (unrelated)."""
    if canonical_equal(a, b, kind):
        return 0.0
    if a.canonical is None or b.canonical is None:
        return 1.0
    if kind in (ValueKind.NUMBER, ValueKind.MONEY):
        if not _amounts_compatible(a, b, kind):
            return 1.0
        return relative_difference(float(a.canonical), float(b.canonical))
    if kind == ValueKind.DATE:
        return min(_day_gap(a, b) / 365, 1.0)
    if kind == ValueKind.CODE:
        return round(1.0 - match_codes(a.canonical, b.canonical).confidence, 4)
    return round(1.0 - _similarity(a, b, kind), 4)


# ── n-way classification ──


def raw_identical(values: Sequence[NormalizedValue]) -> bool:
    return len({str(v.raw).strip() for v in values}) == 1


def divergence(values: Sequence[NormalizedValue], kind: ValueKind) -> float:
    return max((pair_divergence(a, b, kind) for a, b in combinations(values, 2)), default=0.0)


def mismatch_confidence(spread: float, scales: MatchScales) -> float:
    """0.3 for barely-diverging values down to 0.1 for unrelated ones."""
    return round(scales.mismatch_max - (scales.mismatch_max - scales.mismatch_min) * spread, 3)


def classify_values(
    values: Sequence[NormalizedValue],
    kind: ValueKind,
    tolerance: ToleranceWindow,
    scales: MatchScales | None = None,
) -> ValueComparison:
    """Grade agreement of a value set: exact, semantic, partial or mismatch."""
    scales = scales or MatchScales()
    if not values:
        return ValueComparison(MatchStatus.MISSING, 0.0, ["No values reported"])

    base = min(v.confidence for v in values)
    if len(values) == 1:
        return ValueComparison(MatchStatus.EXACT, round(base, 4), ["Reported by a single document"])

    first = values[0]
    if all(canonical_equal(first, other, kind) for other in values[1:]):
        if raw_identical(values):
            return ValueComparison(MatchStatus.EXACT, round(base, 4))
        return ValueComparison(
            MatchStatus.SEMANTIC,
            round(base * scales.semantic, 4),
            ["Values differ only in formatting or units"],
        )

    if all(within_tolerance(a, b, kind, tolerance) for a, b in combinations(values, 2)):
        return ValueComparison(
            MatchStatus.PARTIAL,
            round(base * scales.partial, 4),
            ["Values differ within tolerance"],
        )

    spread = divergence(values, kind)
    return ValueComparison(
        MatchStatus.MISMATCH,
        mismatch_confidence(spread, scales),
        [f"Values diverge (divergence {spread:.2f})"],
    )


def _precedence_rank(document_type: DocumentType, precedence: Sequence[DocumentType]) -> int:
    return precedence.index(document_type) if document_type in precedence else len(precedence)


def find_consensus(
    values: Sequence[NormalizedValue],
    kind: ValueKind,
    tolerance: ToleranceWindow,
    precedence: Sequence[DocumentType] = (),
) -> tuple[NormalizedValue, list[NormalizedValue], list[NormalizedValue]]:
    """Pick the plurality canonical value; returns (consensus, agreeing, outliers).

    Ties go to the cluster holding the highest-precedence document type.
    Values within tolerance of the consensus count as agreeing.
    """
    clusters: list[list[NormalizedValue]] = []
    for value in values:
        for cluster in clusters:
            if canonical_equal(cluster[0], value, kind):
                cluster.append(value)
                break
        else:
            clusters.append([value])

    best = min(
        enumerate(clusters),
        key=lambda item: (
            -len(item[1]),
            min(_precedence_rank(v.document_type, precedence) for v in item[1]),
            item[0],
        ),
    )[1]
    seed = min(best, key=lambda v: _precedence_rank(v.document_type, precedence))
    members = {v.source_document_id for v in best}
    agreeing, outliers = [], []
    for value in values:
        if value.source_document_id in members or within_tolerance(seed, value, kind, tolerance):
            agreeing.append(value)
        else:
            outliers.append(value)
    return seed, agreeing, outliers


def compare_values(
    values: Sequence[NormalizedValue],
    kind: ValueKind,
    tolerance: ToleranceWindow,
    scales: MatchScales | None = None,
    precedence: Sequence[DocumentType] = (),
) -> ValueComparison:
    """Full n-way comparison: consensus and outliers for three or more values."""
    scales = scales or MatchScales()
    if len(values) < 3:
        return classify_values(values, kind, tolerance, scales)

    consensus, agreeing, outliers = find_consensus(values, kind, tolerance, precedence)
    shown = display_value(consensus, kind)
    if len(agreeing) * 2 > len(values):
        result = classify_values(agreeing, kind, tolerance, scales)
        result.consensus = consensus
        if outliers:
            result.outliers = outliers
            result.notes.append(f"{len(agreeing)} of {len(values)} documents agree on {shown}")
            for outlier in outliers:
                result.notes.append(
                    f"Outlier: {outlier.source_document_id} ({outlier.document_type.value}) "
                    f"reported '{outlier.raw}' against consensus {shown}"
                )
        return result

    result = classify_values(values, kind, tolerance, scales)
    result.consensus = consensus
    result.notes.append(f"No majority value across {len(values)} documents; plurality value is {shown}")
    return result
