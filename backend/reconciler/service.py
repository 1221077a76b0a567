"""
Validation service.

Single synchronous entry point: compares fields across documents, runs the
business rules and aggregates the report. Holds no per-run state, so one
instance can serve concurrent callers.
"""

import logging
from collections.abc import Sequence

from reconciler.config import Settings, settings as default_settings
from reconciler.matching_engine.service import FieldComparator
from reconciler.observability import RunLog
from reconciler.registry.registry import FieldRegistry
from reconciler.report_builder.aggregator import build_report
from reconciler.rule_engine.engine import RuleEngine
from reconciler.schemas.extraction import DocumentExtraction
from reconciler.schemas.report import RiskLevel, ValidationReport

logger = logging.getLogger("recon.service")


class ValidationService:
    """Validates a shipment document set."""

    def __init__(self, settings: Settings | None = None, registry: FieldRegistry | None = None):
        self.settings = settings or default_settings
        self.registry = registry or FieldRegistry.from_settings(self.settings)
        self.comparator = FieldComparator(self.registry, self.settings)
        self.rule_engine = RuleEngine(self.settings)

    def coerce(self, document: DocumentExtraction | dict) -> DocumentExtraction:
        """Accept a ready extraction or a JSON-shaped dict with nested fields."""
        if isinstance(document, DocumentExtraction):
            return document
        return DocumentExtraction.from_nested(
            document_id=document.get("documentId", document.get("document_id")),
            document_type=document.get("documentType", document.get("document_type", "unknown")),
            data=document.get("fields") or {},
            default_confidence=self.settings.default_field_confidence,
        )

    def validate(self, documents: Sequence[DocumentExtraction | dict]) -> ValidationReport:
        """Run comparison, rules and aggregation over one document set.

        Raises AggregationInconsistency when document ids repeat.
        """
        extractions = [self.coerce(document) for document in documents]
        with RunLog(len(extractions), self.settings.environment) as run:
            comparisons = self.comparator.compare(extractions)
            rule_results = self.rule_engine.evaluate(comparisons)
            report = build_report(comparisons, rule_results, extractions, self.registry, self.settings)
            run.record(
                records=report.metrics.total_records,
                rules_failed=report.metrics.rules_failed,
                discrepancies=len(report.critical_discrepancies),
                overall_consistency=report.metrics.overall_consistency,
                risk_level=report.metrics.risk_level.value,
            )
        if report.metrics.risk_level == RiskLevel.HIGH:
            logger.warning(
                "High-risk document set: %d critical discrepancies", len(report.critical_discrepancies)
            )
        return report


def validate_documents(
    documents: Sequence[DocumentExtraction | dict],
    settings: Settings | None = None,
) -> ValidationReport:
    return ValidationService(settings).validate(documents)
