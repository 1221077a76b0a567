"""Input schemas: per-document field extractions produced upstream."""

import enum
from typing import Any

from pydantic import ConfigDict, Field, ValidationInfo, field_validator

from reconciler.schemas.base import ContractModel


class DocumentType(str, enum.Enum):
    """Type of trade/logistics document in a shipment set."""

    INVOICE = "invoice"
    AIR_WAYBILL = "air_waybill"
    HOUSE_WAYBILL = "house_waybill"
    BILL_OF_ENTRY = "bill_of_entry"
    PACKING_LIST = "packing_list"
    DELIVERY_NOTE = "delivery_note"
    UNKNOWN = "unknown"


# Spellings seen from upstream classifiers
DOCUMENT_TYPE_ALIASES: dict[str, DocumentType] = {
    "commercial_invoice": DocumentType.INVOICE,
    "awb": DocumentType.AIR_WAYBILL,
    "mawb": DocumentType.AIR_WAYBILL,
    "airway_bill": DocumentType.AIR_WAYBILL,
    "hawb": DocumentType.HOUSE_WAYBILL,
    "house_air_waybill": DocumentType.HOUSE_WAYBILL,
    "boe": DocumentType.BILL_OF_ENTRY,
    "customs_entry": DocumentType.BILL_OF_ENTRY,
    "packing": DocumentType.PACKING_LIST,
    "delivery": DocumentType.DELIVERY_NOTE,
    "proof_of_delivery": DocumentType.DELIVERY_NOTE,
}

# Keys that mark a nested dict as a single extracted value
_LEAF_VALUE_KEYS = ("value", "amount")
_LEAF_UNIT_KEYS = ("unit", "currency")


class ExtractedField(ContractModel):
    """One extracted value with the extractor's confidence."""

    model_config = ConfigDict(frozen=True)

    value: Any = None
    confidence: float = Field(1.0, ge=0.0, le=1.0)
    unit: str | None = Field(None, description="Unit or currency reported beside a bare numeric value")


def flatten_fields(data: dict, prefix: str = "", default_confidence: float = 1.0) -> dict[str, ExtractedField]:
    """Flatten a nested extraction into dotted labels.

    A dict carrying ``value`` (or ``amount``) is a leaf; its ``unit``/``currency``
    travels with it. Bare scalars get ``default_confidence``. ``None`` leaves are
    dropped.
    """
    flat: dict[str, ExtractedField] = {}
    for key, item in data.items():
        label = f"{prefix}.{key}" if prefix else str(key)
        if item is None:
            continue
        if isinstance(item, ExtractedField):
            flat[label] = item
        elif isinstance(item, dict) and any(k in item for k in _LEAF_VALUE_KEYS):
            value_key = next(k for k in _LEAF_VALUE_KEYS if k in item)
            if item[value_key] is None:
                continue
            unit = next((item[k] for k in _LEAF_UNIT_KEYS if item.get(k)), None)
            flat[label] = ExtractedField(
                value=item[value_key],
                confidence=item.get("confidence", default_confidence),
                unit=str(unit) if unit is not None else None,
            )
        elif isinstance(item, dict):
            flat.update(flatten_fields(item, label, default_confidence))
        else:
            flat[label] = ExtractedField(value=item, confidence=default_confidence)
    return flat


def _default_confidence(info: ValidationInfo) -> float:
    """Confidence for bare scalar fields: the validation context, else ``settings.default_field_confidence``."""
    if info.context and info.context.get("default_confidence") is not None:
        return info.context["default_confidence"]
    # Deferred: reconciler.config imports DocumentType from this module
    from reconciler.config import settings

    return settings.default_field_confidence


class DocumentExtraction(ContractModel):
    """All fields extracted from one document."""

    model_config = ConfigDict(frozen=True)

    document_id: str
    document_type: DocumentType = DocumentType.UNKNOWN
    fields: dict[str, ExtractedField] = Field(default_factory=dict)

    @field_validator("document_type", mode="before")
    @classmethod
    def _coerce_document_type(cls, value: Any) -> Any:
        if isinstance(value, DocumentType) or not isinstance(value, str):
            return value
        key = value.strip().lower().replace(" ", "_").replace("-", "_")
        if key in DOCUMENT_TYPE_ALIASES:
            return DOCUMENT_TYPE_ALIASES[key]
        try:
            return DocumentType(key)
        except ValueError:
            return DocumentType.UNKNOWN

    @field_validator("fields", mode="before")
    @classmethod
    def _flatten_nested(cls, value: Any, info: ValidationInfo) -> Any:
        if isinstance(value, dict):
            return flatten_fields(value, default_confidence=_default_confidence(info))
        return value

    @classmethod
    def from_nested(
        cls,
        document_id: str,
        document_type: DocumentType | str,
        data: dict,
        default_confidence: float | None = None,
    ) -> "DocumentExtraction":
        """Build an extraction from a nested extractor payload.

        Bare scalars take ``default_confidence``, or the configured default when it is None.
        """
        return cls.model_validate(
            {"document_id": document_id, "document_type": document_type, "fields": data},
            context={"default_confidence": default_confidence},
        )
