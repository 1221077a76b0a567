"""Read-only view of comparison records that the business rules query."""

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field

from reconciler.schemas.comparison import ComparisonRecord, NormalizedValue
from reconciler.schemas.extraction import DocumentType


@dataclass
class FieldSet:
    records: dict[str, ComparisonRecord] = field(default_factory=dict)
    authority: Mapping[str, DocumentType] = field(default_factory=dict)

    @classmethod
    def from_records(
        cls,
        records: Iterable[ComparisonRecord],
        authority: Mapping[str, DocumentType] | None = None,
    ) -> "FieldSet":
        return cls(records={r.group_id: r for r in records}, authority=authority or {})

    def values(self, group_id: str) -> list[NormalizedValue]:
        record = self.records.get(group_id)
        return [v for v in record.values if v.canonical is not None] if record else []

    def by_document(self, group_id: str) -> dict[str, NormalizedValue]:
        return {v.source_document_id: v for v in self.values(group_id)}

    def first_of(self, group_id: str, document_types: Sequence[DocumentType]) -> NormalizedValue | None:
        """First value reported by the earliest listed document type."""
        values = self.values(group_id)
        for document_type in document_types:
            for value in values:
                if value.document_type == document_type:
                    return value
        return None

    def resolved(self, group_id: str) -> NormalizedValue | None:
        """Best single value for a group: the authoritative document's, outliers excluded."""
        values = self.values(group_id)
        if not values:
            return None
        outliers = set(self.records[group_id].outliers)
        candidates = [v for v in values if v.source_document_id not in outliers] or values
        authority = self.authority.get(group_id)
        for value in candidates:
            if value.document_type == authority:
                return value
        return candidates[0]
