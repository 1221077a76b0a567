"""
Cross-document field comparison service.

Resolves every extracted label through the field registry, normalizes the
values and builds one n-way ComparisonRecord per field group using the pure
matching functions.
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field

from reconciler.config import Settings, settings as default_settings
from reconciler.errors import AggregationInconsistency, RegistryMiss
from reconciler.matching_engine.matchers import MatchScales, compare_values
from reconciler.normalizer.normalizers import NormalizationContext, display_value, normalize_field
from reconciler.registry.field_groups import DOCUMENT_PRECEDENCE
from reconciler.registry.registry import FieldRegistry
from reconciler.schemas.comparison import ComparisonRecord, MatchStatus, NormalizedValue
from reconciler.schemas.extraction import DocumentExtraction, DocumentType
from reconciler.schemas.report import NormalizationIssue

logger = logging.getLogger("recon.matching_engine")


@dataclass
class ResolvedDocument:
    """One extraction after label resolution and normalization."""

    extraction: DocumentExtraction
    values: dict[str, NormalizedValue] = field(default_factory=dict)
    unmapped: list[str] = field(default_factory=list)
    issues: list[NormalizationIssue] = field(default_factory=list)

    @property
    def document_id(self) -> str:
        return self.extraction.document_id

    @property
    def document_type(self) -> DocumentType:
        return self.extraction.document_type


def document_sort_key(document_type: DocumentType, document_id: str) -> tuple[int, str]:
    return DOCUMENT_PRECEDENCE.index(document_type), document_id


class FieldComparator:
    """Builds comparison records for a document set."""

    def __init__(self, registry: FieldRegistry, settings: Settings | None = None):
        self.registry = registry
        self.settings = settings or default_settings
        self.scales = MatchScales(
            semantic=self.settings.semantic_confidence_scale,
            partial=self.settings.partial_confidence_scale,
            mismatch_max=self.settings.mismatch_confidence_max,
            mismatch_min=self.settings.mismatch_confidence_min,
            invalid_code=self.settings.invalid_code_confidence_scale,
        )

    def resolve(self, extraction: DocumentExtraction) -> ResolvedDocument:
        """Map and normalize the fields of one document.

        Several labels landing on the same group keep the highest-confidence
        value; ties keep the alphabetically first label.
        """
        resolved = ResolvedDocument(extraction=extraction)
        for label in sorted(extraction.fields):
            extracted = extraction.fields[label]
            try:
                group_id = self.registry.lookup(label, extraction.document_type)
            except RegistryMiss as miss:
                resolved.unmapped.append(miss.label)
                continue

            group = self.registry.get(group_id)
            context = NormalizationContext(
                source_document_id=extraction.document_id,
                document_type=extraction.document_type,
                source_label=label,
                confidence=extracted.confidence,
                expected_unit=group.expected_unit,
                unit_hint=extracted.unit,
                region=self.settings.region,
                invalid_code_confidence_scale=self.scales.invalid_code,
            )
            value, issue = normalize_field(label, group_id, extracted.value, group.kind, context)
            if issue is not None:
                resolved.issues.append(issue)
            if value is None:
                continue
            current = resolved.values.get(group_id)
            if current is None or value.confidence > current.confidence:
                resolved.values[group_id] = value
        return resolved

    def compare_resolved(self, documents: Sequence[ResolvedDocument]) -> list[ComparisonRecord]:
        """Build one record per group reported by, or required of, any document."""
        ordered = sorted(documents, key=lambda d: document_sort_key(d.document_type, d.document_id))
        seen_ids: set[str] = set()
        for document in ordered:
            if document.document_id in seen_ids:
                raise AggregationInconsistency(f"Document id '{document.document_id}' appears more than once")
            seen_ids.add(document.document_id)

        group_ids: set[str] = set()
        for document in ordered:
            group_ids.update(document.values)
            group_ids.update(self.registry.required_groups(document.document_type))

        records = [self._build_record(group_id, ordered) for group_id in group_ids]
        records.sort(key=lambda r: (r.category.priority, r.group_id))
        logger.debug("Compared %d field groups across %d documents", len(records), len(ordered))
        return records

    def compare(self, extractions: Sequence[DocumentExtraction]) -> list[ComparisonRecord]:
        return self.compare_resolved([self.resolve(extraction) for extraction in extractions])

    def _build_record(self, group_id: str, documents: Sequence[ResolvedDocument]) -> ComparisonRecord:
        group = self.registry.get(group_id)
        tolerance = self.registry.tolerance_for(group_id)

        values: list[NormalizedValue] = []
        missing_in: list[str] = []
        for document in documents:
            value = document.values.get(group_id)
            if value is not None:
                if any(v.source_document_id == value.source_document_id for v in values):
                    raise AggregationInconsistency(
                        f"Two values from document '{value.source_document_id}' in group '{group_id}'"
                    )
                values.append(value)
            elif group_id in self.registry.required_groups(document.document_type):
                missing_in.append(document.document_id)

        authority = self.settings.authority_table.get(group_id)
        precedence = ((authority,) if authority else ()) + DOCUMENT_PRECEDENCE
        comparison = compare_values(values, group.kind, tolerance, self.scales, precedence)

        status, confidence, notes = comparison.status, comparison.confidence, list(comparison.notes)
        if missing_in:
            if values:
                notes.insert(0, f"Present values: {status.value}")
            notes.insert(0, f"Required but absent in: {', '.join(missing_in)}")
            status, confidence = MatchStatus.MISSING, 0.0

        return ComparisonRecord(
            group_id=group_id,
            category=group.category,
            kind=group.kind,
            values=values,
            match_status=status,
            confidence=confidence,
            notes=notes,
            consensus_value=display_value(comparison.consensus, group.kind) if comparison.consensus else None,
            outliers=[v.source_document_id for v in comparison.outliers],
            missing_in=missing_in,
        )


def compare_across_documents(
    extractions: Sequence[DocumentExtraction],
    registry: FieldRegistry | None = None,
    settings: Settings | None = None,
) -> list[ComparisonRecord]:
    """Compare every field group across a document set."""
    settings = settings or default_settings
    registry = registry or FieldRegistry.from_settings(settings)
    return FieldComparator(registry, settings).compare(extractions)
