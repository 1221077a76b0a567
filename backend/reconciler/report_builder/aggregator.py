"""
Report aggregation.

Turns comparison records and rule results into the final ValidationReport:
per-document summaries, ranked critical discrepancies, consistency metrics,
risk level and recommendations. Pure and deterministic: identical input
gives an identical report.
"""

import logging
from collections.abc import Sequence

from reconciler.config import Settings, settings as default_settings
from reconciler.matching_engine.service import FieldComparator, ResolvedDocument, document_sort_key
from reconciler.normalizer.normalizers import display_value
from reconciler.registry.registry import FieldRegistry
from reconciler.report_builder.authority import resolve_authority
from reconciler.report_builder.recommendations import build_recommendations
from reconciler.schemas.comparison import ComparisonRecord, FieldCategory, MatchStatus
from reconciler.schemas.extraction import DocumentExtraction
from reconciler.schemas.report import (
    ConsistencyMetrics,
    Discrepancy,
    DiscrepancyKind,
    DocumentSummary,
    RiskLevel,
    ValidationReport,
)
from reconciler.schemas.rules import RuleResult, Severity

logger = logging.getLogger("recon.report_builder")

CONSISTENT_STATUSES = (MatchStatus.EXACT, MatchStatus.SEMANTIC)
_KIND_ORDER = list(DiscrepancyKind)


# ── Metrics ──


def weighted_consistency(records: Sequence[ComparisonRecord], critical: set[str], critical_weight: float) -> float:
    """Confidence-weighted share of consistent records, in percent."""
    total = 0.0
    consistent = 0.0
    for record in records:
        weight = critical_weight if record.group_id in critical else 1.0
        total += weight
        if record.match_status in CONSISTENT_STATUSES:
            consistent += weight * record.confidence
    if total == 0:
        return 0.0
    return round(consistent / total * 100, 2)


def assess_risk(discrepancies: Sequence[Discrepancy]) -> RiskLevel:
    errors = sum(1 for d in discrepancies if d.severity == Severity.ERROR)
    warnings = sum(1 for d in discrepancies if d.severity == Severity.WARNING)
    if errors > 2:
        return RiskLevel.HIGH
    if errors > 0 or warnings > 2:
        return RiskLevel.MEDIUM
    return RiskLevel.LOW


# ── Document summaries ──


def summarize_document(
    document: ResolvedDocument,
    registry: FieldRegistry,
    critical: set[str],
) -> DocumentSummary:
    required = registry.required_groups(document.document_type)
    missing = sorted(g for g in required if g not in document.values)
    if required:
        completeness = round((len(required) - len(missing)) / len(required) * 100, 2)
    else:
        completeness = 100.0 if document.values else 0.0

    # Critical fields count double towards extraction confidence
    weights = {group_id: (2.0 if group_id in critical else 1.0) for group_id in document.values}
    total_weight = sum(weights.values())
    confidence = (
        sum(document.values[g].confidence * w for g, w in weights.items()) / total_weight if total_weight else 0.0
    )

    return DocumentSummary(
        document_id=document.document_id,
        document_type=document.document_type,
        total_fields=len(document.extraction.fields),
        mapped_fields=len(document.extraction.fields) - len(document.unmapped),
        completeness=completeness,
        missing_required_fields=missing,
        unmapped_fields=sorted(document.unmapped),
        normalization_issues=sorted(document.issues, key=lambda i: (i.group_id, i.label)),
        extraction_confidence=round(confidence, 4),
    )


# ── Discrepancies ──


def _record_discrepancies(record: ComparisonRecord, registry: FieldRegistry, records, authority) -> list[Discrepancy]:
    subject = registry.get(record.group_id).description or record.group_id
    resolved = resolve_authority([record.group_id], records, authority)
    common = {
        "group_id": record.group_id,
        "authoritative_document_type": resolved.document_type,
        "authoritative_value": resolved.value,
        "resolution": resolved.resolution,
    }
    found: list[Discrepancy] = []
    if record.match_status == MatchStatus.MISMATCH:
        shown = ", ".join(f"{v.source_document_id}: {display_value(v, record.kind)}" for v in record.values)
        found.append(Discrepancy(
            kind=DiscrepancyKind.FIELD_MISMATCH,
            severity=Severity.ERROR,
            message=f"{subject} differs across documents ({shown})",
            document_ids=[v.source_document_id for v in record.values],
            **common,
        ))
    if record.match_status == MatchStatus.MISSING:
        found.append(Discrepancy(
            kind=DiscrepancyKind.MISSING_FIELD,
            severity=Severity.WARNING,
            message=f"{subject} missing in {', '.join(record.missing_in)}",
            document_ids=list(record.missing_in),
            **common,
        ))
    by_id = {v.source_document_id: v for v in record.values}
    for document_id in record.outliers:
        outlier = by_id[document_id]
        found.append(Discrepancy(
            kind=DiscrepancyKind.OUTLIER,
            severity=Severity.WARNING,
            message=(
                f"{subject} on {document_id} is {display_value(outlier, record.kind)}, "
                f"consensus is {record.consensus_value}"
            ),
            document_ids=[document_id],
            **common,
        ))
    return found


def _rule_discrepancy(result: RuleResult, records, authority) -> Discrepancy:
    resolved = resolve_authority(result.group_ids, records, authority)
    document_ids = sorted({v.source_document_id for g in result.group_ids if g in records for v in records[g].values})
    return Discrepancy(
        kind=DiscrepancyKind.RULE_VIOLATION,
        severity=result.severity,
        message=result.message,
        group_id=result.group_ids[0] if result.group_ids else None,
        rule_name=result.rule_name,
        document_ids=document_ids,
        authoritative_document_type=resolved.document_type,
        authoritative_value=resolved.value,
        resolution=resolved.resolution,
    )


def collect_discrepancies(
    comparisons: Sequence[ComparisonRecord],
    rule_results: Sequence[RuleResult],
    registry: FieldRegistry,
    settings: Settings,
) -> list[Discrepancy]:
    """Critical-field record problems plus failing rules, most severe first."""
    records = {r.group_id: r for r in comparisons}
    authority = settings.authority_table
    critical = settings.critical_field_allowlist

    found: list[Discrepancy] = []
    for record in comparisons:
        if record.group_id in critical:
            found.extend(_record_discrepancies(record, registry, records, authority))
    for result in rule_results:
        if result.severity in (Severity.WARNING, Severity.ERROR):
            found.append(_rule_discrepancy(result, records, authority))

    def category_priority(discrepancy: Discrepancy) -> int:
        if discrepancy.group_id not in registry:
            return len(FieldCategory)
        return registry.get(discrepancy.group_id).category.priority

    found.sort(key=lambda d: (
        -d.severity.rank,
        category_priority(d),
        d.group_id or "",
        _KIND_ORDER.index(d.kind),
        d.message,
    ))
    return found


# ── Report ──


def build_report(
    comparisons: Sequence[ComparisonRecord],
    rule_results: Sequence[RuleResult],
    extractions: Sequence[DocumentExtraction],
    registry: FieldRegistry | None = None,
    settings: Settings | None = None,
) -> ValidationReport:
    """Assemble the validation report for one run."""
    settings = settings or default_settings
    registry = registry or FieldRegistry.from_settings(settings)
    critical = settings.critical_field_allowlist

    comparator = FieldComparator(registry, settings)
    resolved = sorted(
        (comparator.resolve(extraction) for extraction in extractions),
        key=lambda d: document_sort_key(d.document_type, d.document_id),
    )
    summaries = [summarize_document(document, registry, critical) for document in resolved]

    discrepancies = collect_discrepancies(comparisons, rule_results, registry, settings)

    critical_records = [r for r in comparisons if r.group_id in critical]
    metrics = ConsistencyMetrics(
        overall_consistency=weighted_consistency(comparisons, critical, settings.critical_field_weight),
        critical_field_consistency=weighted_consistency(critical_records, critical, settings.critical_field_weight),
        status_counts={
            status.value: sum(1 for r in comparisons if r.match_status == status) for status in MatchStatus
        },
        total_records=len(comparisons),
        rules_failed=sum(1 for r in rule_results if not r.passed),
        risk_level=assess_risk(discrepancies),
    )

    subjects = {group.group_id: group.description or group.group_id for group in registry.groups()}
    subjects.update({r.rule_name: r.rule_name.replace("_", " ") for r in rule_results})
    recommendations = build_recommendations(
        discrepancies,
        subjects,
        [d.document_type for d in resolved],
        metrics.overall_consistency,
        settings.ready_consistency_threshold,
        settings.review_consistency_threshold,
    )

    logger.debug(
        "Report built: %d records, %d discrepancies, risk %s",
        len(comparisons), len(discrepancies), metrics.risk_level.value,
    )
    return ValidationReport(
        documents_summary=summaries,
        field_comparisons=list(comparisons),
        rule_results=list(rule_results),
        critical_discrepancies=discrepancies,
        metrics=metrics,
        recommendations=recommendations,
    )
