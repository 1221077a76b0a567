"""Exception hierarchy for the reconciliation engine."""

from typing import Any


class ReconciliationError(Exception):
    """Base class for all engine errors."""

    @property
    def code(self) -> str:
        return type(self).__name__


class NormalizationError(ReconciliationError):
    """A raw value could not be converted to its canonical form."""

    def __init__(self, message: str, raw_value: Any = None):
        super().__init__(message)
        self.raw_value = raw_value


class UnparseableNumber(NormalizationError):
    pass


class UnparseableDate(NormalizationError):
    pass


class AmbiguousDate(NormalizationError):
    """Both day and month positions exceed 12, so neither reading is valid."""


class InvalidCodeFormat(NormalizationError):
    """Classification code outside the valid length range.

    ``best_effort`` holds a reduced-confidence NormalizedValue when digits were
    present, so matching can continue.
    """

    def __init__(self, message: str, raw_value: Any = None, best_effort=None):
        super().__init__(message, raw_value)
        self.best_effort = best_effort


class RegistryMiss(ReconciliationError):
    """A label that no field group claims for the given document type."""

    def __init__(self, label: str, document_type: str):
        super().__init__(f"No field group for label '{label}' on {document_type}")
        self.label = label
        self.document_type = document_type


class AggregationInconsistency(ReconciliationError):
    """Internal invariant broken while assembling records; aborts the run."""
