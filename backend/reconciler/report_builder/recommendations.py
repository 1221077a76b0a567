"""Deterministic recommendation templates."""

from collections.abc import Iterable, Sequence

from reconciler.schemas.extraction import DocumentType
from reconciler.schemas.report import Discrepancy, DiscrepancyKind, Recommendation

DISCREPANCY_TEMPLATES = {
    DiscrepancyKind.FIELD_MISMATCH: "Reconcile {subject} across {documents}. {resolution}.",
    DiscrepancyKind.MISSING_FIELD: "Obtain {subject} for {documents}; the field is expected on that document type.",
    DiscrepancyKind.OUTLIER: "Verify {subject} on {documents}; it deviates from the other documents. {resolution}.",
}

RULE_TEMPLATES = {
    "weight_consistency": "Correct the declared weights: gross weight must cover net weight with limited packaging overhead.",
    "package_count_consistency": "Confirm the package counting method; commercial documents may count cartons while carriers count pieces.",
    "date_sequence": "Check document dates so that invoice, shipment and customs entry occur in order.",
    "financial_consistency": "Review the duty calculation against the declared value.",
    "code_mapping": "Verify the HSN classification against the goods description on every document.",
}

GENERIC_RULE_TEMPLATE = "Review the {subject} check: {message}"

# A shipment set is complete with each of these; waybills are interchangeable
EXPECTED_DOCUMENT_SETS: list[tuple[str, tuple[DocumentType, ...]]] = [
    ("commercial invoice", (DocumentType.INVOICE,)),
    ("air or house waybill", (DocumentType.AIR_WAYBILL, DocumentType.HOUSE_WAYBILL)),
    ("bill of entry", (DocumentType.BILL_OF_ENTRY,)),
]


def discrepancy_text(discrepancy: Discrepancy, subject: str) -> str:
    if discrepancy.kind == DiscrepancyKind.RULE_VIOLATION:
        template = RULE_TEMPLATES.get(discrepancy.rule_name or "", GENERIC_RULE_TEMPLATE)
        return template.format(subject=subject, message=discrepancy.message)
    return DISCREPANCY_TEMPLATES[discrepancy.kind].format(
        subject=subject,
        documents=", ".join(discrepancy.document_ids) or "the document set",
        resolution=discrepancy.resolution.rstrip("."),
    )


def missing_document_types(present: Iterable[DocumentType]) -> list[str]:
    present = set(present)
    return [name for name, types in EXPECTED_DOCUMENT_SETS if not present.intersection(types)]


def overall_text(overall: float, ready: float, review: float) -> str:
    if overall >= ready:
        return f"Documents are {overall:.1f}% consistent and ready for processing."
    if overall >= review:
        return f"Documents are {overall:.1f}% consistent; review the flagged fields before processing."
    return f"Documents are only {overall:.1f}% consistent; a comprehensive review is required before processing."


def build_recommendations(
    discrepancies: Sequence[Discrepancy],
    subjects: dict[str, str],
    present_types: Iterable[DocumentType],
    overall: float,
    ready_threshold: float = 90.0,
    review_threshold: float = 70.0,
) -> list[Recommendation]:
    """One recommendation per distinct discrepancy, then document-set and overall advice.

    ``subjects`` maps a group id or rule name to its human-readable subject.
    """
    entries: list[tuple[str, str, str]] = []
    seen: set[str] = set()
    for discrepancy in discrepancies:
        key = discrepancy.rule_name or discrepancy.group_id or ""
        subject = subjects.get(key, key)
        text = discrepancy_text(discrepancy, subject)
        if text in seen:
            continue
        seen.add(text)
        entries.append((discrepancy.kind.value, subject, text))

    missing = missing_document_types(present_types)
    if missing:
        entries.append((
            "missing_documents",
            "document set",
            f"Add the missing documents ({', '.join(missing)}) to complete the shipment set.",
        ))
    entries.append(("overall", "overall consistency", overall_text(overall, ready_threshold, review_threshold)))

    return [
        Recommendation(priority=index, kind=kind, subject=subject, text=text)
        for index, (kind, subject, text) in enumerate(entries, start=1)
    ]
