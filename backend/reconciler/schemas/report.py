"""Schemas for the validation report returned to callers."""

import enum

from pydantic import Field

from reconciler.schemas.base import ContractModel
from reconciler.schemas.comparison import ComparisonRecord
from reconciler.schemas.extraction import DocumentType
from reconciler.schemas.rules import RuleResult, Severity

CONTRACT_VERSION = "1.0"


class DiscrepancyKind(str, enum.Enum):
    FIELD_MISMATCH = "field_mismatch"
    MISSING_FIELD = "missing_field"
    OUTLIER = "outlier"
    RULE_VIOLATION = "rule_violation"


class RiskLevel(str, enum.Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class NormalizationIssue(ContractModel):
    """A field whose value could not be normalized cleanly."""

    label: str
    group_id: str
    error: str
    message: str


class DocumentSummary(ContractModel):
    document_id: str
    document_type: DocumentType
    total_fields: int = 0
    mapped_fields: int = 0
    completeness: float = Field(0.0, description="Share of required groups present, in percent")
    missing_required_fields: list[str] = Field(default_factory=list)
    unmapped_fields: list[str] = Field(default_factory=list)
    normalization_issues: list[NormalizationIssue] = Field(default_factory=list)
    extraction_confidence: float = 0.0


class Discrepancy(ContractModel):
    kind: DiscrepancyKind
    severity: Severity
    message: str
    group_id: str | None = None
    rule_name: str | None = None
    document_ids: list[str] = Field(default_factory=list)
    authoritative_document_type: DocumentType | None = None
    authoritative_value: str | None = None
    resolution: str


class ConsistencyMetrics(ContractModel):
    overall_consistency: float
    critical_field_consistency: float
    status_counts: dict[str, int]
    total_records: int
    rules_failed: int
    risk_level: RiskLevel


class Recommendation(ContractModel):
    priority: int
    kind: str
    subject: str
    text: str


class ValidationReport(ContractModel):
    contract_version: str = CONTRACT_VERSION
    documents_summary: list[DocumentSummary] = Field(default_factory=list)
    field_comparisons: list[ComparisonRecord] = Field(default_factory=list)
    rule_results: list[RuleResult] = Field(default_factory=list)
    critical_discrepancies: list[Discrepancy] = Field(default_factory=list)
    metrics: ConsistencyMetrics
    recommendations: list[Recommendation] = Field(default_factory=list)
