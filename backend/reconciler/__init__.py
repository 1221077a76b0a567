"""Shipment document field reconciliation and business-rule validation engine."""

from reconciler.config import Settings
from reconciler.errors import (
    AggregationInconsistency,
    AmbiguousDate,
    InvalidCodeFormat,
    NormalizationError,
    ReconciliationError,
    RegistryMiss,
    UnparseableDate,
    UnparseableNumber,
)
from reconciler.service import ValidationService, validate_documents

__all__ = [
    "AggregationInconsistency",
    "AmbiguousDate",
    "InvalidCodeFormat",
    "NormalizationError",
    "ReconciliationError",
    "RegistryMiss",
    "Settings",
    "UnparseableDate",
    "UnparseableNumber",
    "ValidationService",
    "validate_documents",
]
