"""Schemas for business-rule results."""

import enum

from pydantic import Field

from reconciler.schemas.base import ContractModel


class Severity(str, enum.Enum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"

    @property
    def rank(self) -> int:
        return list(Severity).index(self)


class RuleResult(ContractModel):
    rule_name: str
    passed: bool
    severity: Severity
    message: str
    confidence: float = Field(..., ge=0.0, le=1.0)
    group_ids: list[str] = Field(default_factory=list)
