from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from reconciler.schemas.comparison import ToleranceWindow
from reconciler.schemas.extraction import DocumentType

# Groups whose disagreement blocks clearance
DEFAULT_CRITICAL_FIELDS = {
    "invoice.number",
    "awb.number",
    "hawb.number",
    "boe.number",
    "weight.gross",
    "weight.net",
    "invoice.value",
    "customs.assessed_value",
    "duty.total",
    "hsn.code",
}

# Which document type is the reference for each group
DEFAULT_AUTHORITY_TABLE = {
    "invoice.number": DocumentType.INVOICE,
    "po.number": DocumentType.INVOICE,
    "invoice.value": DocumentType.INVOICE,
    "freight.amount": DocumentType.INVOICE,
    "insurance.amount": DocumentType.INVOICE,
    "incoterms": DocumentType.INVOICE,
    "date.invoice": DocumentType.INVOICE,
    "country_of_origin": DocumentType.INVOICE,
    "product.description": DocumentType.INVOICE,
    "product.item_number": DocumentType.INVOICE,
    "product.quantity": DocumentType.INVOICE,
    "product.unit_price": DocumentType.INVOICE,
    "awb.number": DocumentType.AIR_WAYBILL,
    "weight.gross": DocumentType.AIR_WAYBILL,
    "package.count": DocumentType.AIR_WAYBILL,
    "volume": DocumentType.AIR_WAYBILL,
    "origin": DocumentType.AIR_WAYBILL,
    "destination": DocumentType.AIR_WAYBILL,
    "carrier": DocumentType.AIR_WAYBILL,
    "flight.number": DocumentType.AIR_WAYBILL,
    "date.shipment": DocumentType.AIR_WAYBILL,
    "hawb.number": DocumentType.HOUSE_WAYBILL,
    "boe.number": DocumentType.BILL_OF_ENTRY,
    "duty.total": DocumentType.BILL_OF_ENTRY,
    "customs.assessed_value": DocumentType.BILL_OF_ENTRY,
    "hsn.code": DocumentType.BILL_OF_ENTRY,
    "date.customs": DocumentType.BILL_OF_ENTRY,
    "consignee.importer_code": DocumentType.BILL_OF_ENTRY,
    "packing_list.number": DocumentType.PACKING_LIST,
    "weight.net": DocumentType.PACKING_LIST,
    "delivery_note.number": DocumentType.DELIVERY_NOTE,
    "date.delivery": DocumentType.DELIVERY_NOTE,
}


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="RECON_", env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # App
    environment: str = "development"
    log_level: str = "INFO"

    # Normalization
    region: str = "IN"
    default_field_confidence: float = 1.0

    # Field matching
    tolerance_overrides: dict[str, ToleranceWindow] = Field(default_factory=dict)
    semantic_confidence_scale: float = 0.9
    partial_confidence_scale: float = 0.6
    mismatch_confidence_max: float = 0.3
    mismatch_confidence_min: float = 0.1
    invalid_code_confidence_scale: float = 0.5

    # Report aggregation
    critical_field_allowlist: set[str] = Field(default_factory=lambda: set(DEFAULT_CRITICAL_FIELDS))
    critical_field_weight: float = 3.0
    authority_table: dict[str, DocumentType] = Field(default_factory=lambda: dict(DEFAULT_AUTHORITY_TABLE))
    ready_consistency_threshold: float = 90.0
    review_consistency_threshold: float = 70.0

    # Business rules
    max_packaging_ratio: float = 0.20
    package_ratio_min: float = 0.5
    package_ratio_max: float = 4.0
    max_invoice_shipment_gap_days: int = 30
    duty_ratio_min: float = 0.0
    duty_ratio_max: float = 0.5
    code_low_confidence_threshold: float = 0.5
    strict_code_pairs: list[tuple[DocumentType, DocumentType]] = Field(
        default_factory=lambda: [(DocumentType.INVOICE, DocumentType.PACKING_LIST)]
    )


settings = Settings()
