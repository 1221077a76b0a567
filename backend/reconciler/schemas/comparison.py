"""Schemas for normalized values and cross-document comparison records."""

import enum
from typing import Any

from pydantic import BaseModel, Field

from reconciler.schemas.base import ContractModel
from reconciler.schemas.extraction import DocumentType


class ValueKind(str, enum.Enum):
    TEXT = "text"
    IDENTIFIER = "identifier"
    NUMBER = "number"
    DATE = "date"
    MONEY = "money"
    CODE = "code"
    ADDRESS = "address"


class FieldCategory(str, enum.Enum):
    """Business category of a field group; declaration order is ranking priority."""

    IDENTIFIERS = "identifiers"
    PARTIES = "parties"
    FINANCIAL = "financial"
    SHIPMENT = "shipment"
    DESCRIPTIVE = "descriptive"

    @property
    def priority(self) -> int:
        return list(FieldCategory).index(self)


class CodeLevel(str, enum.Enum):
    """Depth at which two classification codes agree."""

    EXACT = "exact"
    SUBHEADING = "subheading"
    HEADING = "heading"
    CHAPTER = "chapter"
    NONE = "none"


class MatchStatus(str, enum.Enum):
    EXACT = "exact"
    SEMANTIC = "semantic"
    PARTIAL = "partial"
    MISMATCH = "mismatch"
    MISSING = "missing"


class ToleranceWindow(BaseModel):
    """Acceptable divergence for a field group.

    Only the attribute matching the group's value kind is consulted.
    """

    ratio: float | None = Field(None, ge=0.0, description="Relative window for numbers and money")
    days: int | None = Field(None, ge=0, description="Date gap in days")
    similarity: float | None = Field(None, ge=0.0, le=1.0, description="Minimum text similarity")
    code_level: CodeLevel | None = Field(None, description="Finest code level still counted as partial")


class NormalizedValue(ContractModel):
    """A raw extracted value together with its canonical comparable form."""

    raw: Any = None
    canonical: str | float | None = None
    unit: str | None = None
    source_document_id: str
    document_type: DocumentType = DocumentType.UNKNOWN
    source_label: str | None = None
    confidence: float = Field(1.0, ge=0.0, le=1.0)
    components: dict[str, str | None] | None = None
    error: str | None = None


class ComparisonRecord(ContractModel):
    """n-way comparison of one field group across the document set."""

    group_id: str
    category: FieldCategory
    kind: ValueKind
    values: list[NormalizedValue] = Field(default_factory=list)
    match_status: MatchStatus
    confidence: float = 0.0
    notes: list[str] = Field(default_factory=list)
    consensus_value: str | None = None
    outliers: list[str] = Field(default_factory=list, description="Document ids disagreeing with the consensus")
    missing_in: list[str] = Field(default_factory=list, description="Document ids that require but lack the group")
