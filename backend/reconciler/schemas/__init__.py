from reconciler.schemas.comparison import (
    CodeLevel,
    ComparisonRecord,
    FieldCategory,
    MatchStatus,
    NormalizedValue,
    ToleranceWindow,
    ValueKind,
)
from reconciler.schemas.extraction import DocumentExtraction, DocumentType, ExtractedField
from reconciler.schemas.report import (
    CONTRACT_VERSION,
    ConsistencyMetrics,
    Discrepancy,
    DiscrepancyKind,
    DocumentSummary,
    NormalizationIssue,
    Recommendation,
    RiskLevel,
    ValidationReport,
)
from reconciler.schemas.rules import RuleResult, Severity

__all__ = [
    "CONTRACT_VERSION",
    "CodeLevel",
    "ComparisonRecord",
    "ConsistencyMetrics",
    "Discrepancy",
    "DiscrepancyKind",
    "DocumentExtraction",
    "DocumentSummary",
    "DocumentType",
    "ExtractedField",
    "FieldCategory",
    "MatchStatus",
    "NormalizationIssue",
    "NormalizedValue",
    "Recommendation",
    "RiskLevel",
    "RuleResult",
    "Severity",
    "ToleranceWindow",
    "ValidationReport",
    "ValueKind",
]
